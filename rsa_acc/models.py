"""
Accumulator Data Model

Immutable snapshot, witness and proof records. Every proof record carries a
`kind` tag so verification can dispatch on it uniformly.
"""

from enum import Enum
from typing import Literal, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .group import HiddenOrderGroup


class ProofKind(str, Enum):
    """Tag carried by every witness and proof record."""
    MEMBERSHIP = "membership"
    NON_MEMBERSHIP = "non_membership"
    AGGREGATED_MEMBERSHIP = "aggregated_membership"
    AGGREGATED_NON_MEMBERSHIP = "aggregated_non_membership"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class PublicParams(_Frozen):
    """Public modulus N and base g. Validated by rsa_params.create_params()."""
    modulus: int = Field(..., gt=2, description="RSA modulus N of unknown factorization")
    generator: int = Field(..., gt=1, description="Public base g")

    @property
    def group(self) -> HiddenOrderGroup:
        return HiddenOrderGroup(self.modulus)

    @property
    def byte_length(self) -> int:
        return (self.modulus.bit_length() + 7) // 8


class AccumulatorState(_Frozen):
    """
    Immutable accumulator snapshot.

    value = g^(product of member primes) mod N. Updates never edit a
    snapshot; they publish a new one with version + 1.
    """
    params: PublicParams
    value: int = Field(..., ge=0)
    size: int = Field(default=0, ge=0)
    version: int = Field(default=0, ge=0, lt=2**64)

    @model_validator(mode="after")
    def check_value_reduced(self) -> "AccumulatorState":
        if self.value >= self.params.modulus:
            raise ValueError("Accumulator value must be reduced modulo N")
        return self


class MembershipWitness(_Frozen):
    """Witness that `prime` is accumulated: value^prime == state.value."""
    kind: Literal[ProofKind.MEMBERSHIP] = ProofKind.MEMBERSHIP
    prime: int = Field(..., gt=1)
    value: int = Field(..., ge=0)
    version: int = Field(default=0, ge=0, lt=2**64)


class NonMembershipWitness(_Frozen):
    """Witness that `prime` is not accumulated: state.value^a * d^prime == g."""
    kind: Literal[ProofKind.NON_MEMBERSHIP] = ProofKind.NON_MEMBERSHIP
    prime: int = Field(..., gt=1)
    a: int
    d: int = Field(..., ge=0)
    version: int = Field(default=0, ge=0, lt=2**64)


class PoEProof(_Frozen):
    """Proof of exponentiation: quotient_term = x^(e // l), remainder = e mod l."""
    quotient_term: int = Field(..., ge=0)
    remainder: int = Field(..., ge=0)


class AggregatedWitness(_Frozen):
    """
    One witness standing in for a whole batch.

    `witness.prime` is the product of the batch primes; `proof` certifies the
    single exponentiation check with a PoE.
    """
    kind: ProofKind
    witness: Union[MembershipWitness, NonMembershipWitness] = Field(..., discriminator="kind")
    proof: PoEProof

    @model_validator(mode="after")
    def check_kind_matches(self) -> "AggregatedWitness":
        expected = {
            ProofKind.AGGREGATED_MEMBERSHIP: ProofKind.MEMBERSHIP,
            ProofKind.AGGREGATED_NON_MEMBERSHIP: ProofKind.NON_MEMBERSHIP,
        }.get(self.kind)
        if expected is None or self.witness.kind != expected:
            raise ValueError(f"Aggregated kind {self.kind.value} does not match witness")
        return self

    @property
    def version(self) -> int:
        return self.witness.version


class UpdateDelta(_Frozen):
    """Record of one committed batch, enough to update witnesses without a re-scan."""
    version: int = Field(..., ge=1, lt=2**64)
    previous_value: int = Field(..., ge=0)
    value: int = Field(..., ge=0)
    added: Tuple[int, ...] = ()
    removed: Tuple[int, ...] = ()

    @field_validator("added", "removed")
    @classmethod
    def validate_primes(cls, v: Tuple[int, ...]) -> Tuple[int, ...]:
        if any(p <= 1 for p in v):
            raise ValueError("Delta primes must be greater than 1")
        return v

    @model_validator(mode="after")
    def check_single_direction(self) -> "UpdateDelta":
        # The value between a removal and an addition is never published
        if self.added and self.removed:
            raise ValueError("A delta records either additions or removals, not both")
        return self


Witness = Union[MembershipWitness, NonMembershipWitness]
Proof = Union[MembershipWitness, NonMembershipWitness, AggregatedWitness]
