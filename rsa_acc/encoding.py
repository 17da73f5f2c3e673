"""
Binary Encodings

Fixed-width big-endian layouts for snapshots, witnesses and proofs.
W = ceil(bitlen(N) / 8) is the width of a group element; versions are u64.

    GroupElement / prime / remainder   W bytes
    AccumulatorState                   value || version || size
    MembershipWitness                  prime || value || version
    NonMembershipWitness               prime || a || d || version
    PoEProof                           quotient_term || remainder
    AggregatedWitness                  kind(u8) || len(u32) || x*
                                       [|| len(u32) || a]
                                       || value-or-d || version || PoEProof

N itself travels out of band: every decoder takes the PublicParams.
Decoders check lengths, ranges and tags before any arithmetic and raise
ProofMalformed on the first violation.
"""

from typing import Tuple

from pydantic import ValidationError

from .errors import ProofMalformed
from .models import (
    AccumulatorState,
    AggregatedWitness,
    MembershipWitness,
    NonMembershipWitness,
    PoEProof,
    ProofKind,
    PublicParams,
)

U8, U32, U64 = 1, 4, 8

_KIND_CODES = {
    ProofKind.MEMBERSHIP: 0,
    ProofKind.NON_MEMBERSHIP: 1,
    ProofKind.AGGREGATED_MEMBERSHIP: 2,
    ProofKind.AGGREGATED_NON_MEMBERSHIP: 3,
}
_CODE_KINDS = {code: kind for kind, code in _KIND_CODES.items()}


def _fixed(value: int, width: int) -> bytes:
    if value < 0 or value.bit_length() > 8 * width:
        raise ValueError(f"Value does not fit in {width} bytes")
    return value.to_bytes(width, "big")


def _prefixed(value: int) -> bytes:
    raw = value.to_bytes(max(1, (value.bit_length() + 7) // 8), "big")
    return _fixed(len(raw), U32) + raw


class _Reader:
    """Cursor over an untrusted byte string."""

    def __init__(self, data: bytes):
        if not isinstance(data, (bytes, bytearray)):
            raise ProofMalformed("Encoded value must be bytes")
        self.data = bytes(data)
        self.pos = 0

    def take(self, n: int) -> bytes:
        if n < 0 or self.pos + n > len(self.data):
            raise ProofMalformed(
                f"Truncated encoding: need {n} bytes at offset {self.pos}, have {len(self.data) - self.pos}"
            )
        chunk = self.data[self.pos:self.pos + n]
        self.pos += n
        return chunk

    def uint(self, n: int) -> int:
        return int.from_bytes(self.take(n), "big")

    def element(self, params: PublicParams) -> int:
        value = self.uint(params.byte_length)
        if value >= params.modulus:
            raise ProofMalformed("Group element is not reduced modulo N")
        return value

    def prefixed(self) -> int:
        length = self.uint(U32)
        if length == 0:
            raise ProofMalformed("Length-prefixed integer is empty")
        return self.uint(length)

    def finish(self) -> None:
        if self.pos != len(self.data):
            raise ProofMalformed(f"{len(self.data) - self.pos} trailing bytes after encoding")


def _build(model, **fields):
    try:
        return model(**fields)
    except ValidationError as e:
        raise ProofMalformed(f"Invalid {model.__name__}: {e.error_count()} field error(s)") from e


# ---------------------------------------------------------------------------
# Group elements and snapshots
# ---------------------------------------------------------------------------

def encode_element(params: PublicParams, value: int) -> bytes:
    """Encode a group element in exactly W bytes."""
    if not 0 <= value < params.modulus:
        raise ValueError("Group element must lie in [0, N)")
    return _fixed(value, params.byte_length)


def decode_element(params: PublicParams, data: bytes) -> int:
    reader = _Reader(data)
    value = reader.element(params)
    reader.finish()
    return value


def encode_state(state: AccumulatorState) -> bytes:
    """value || version || size."""
    return (
        encode_element(state.params, state.value)
        + _fixed(state.version, U64)
        + _fixed(state.size, U64)
    )


def decode_state(params: PublicParams, data: bytes) -> AccumulatorState:
    reader = _Reader(data)
    value = reader.element(params)
    version = reader.uint(U64)
    size = reader.uint(U64)
    reader.finish()
    return _build(AccumulatorState, params=params, value=value, version=version, size=size)


# ---------------------------------------------------------------------------
# Witnesses and proofs
# ---------------------------------------------------------------------------

def encode_membership_witness(params: PublicParams, witness: MembershipWitness) -> bytes:
    W = params.byte_length
    return _fixed(witness.prime, W) + _fixed(witness.value, W) + _fixed(witness.version, U64)


def decode_membership_witness(params: PublicParams, data: bytes) -> MembershipWitness:
    reader = _Reader(data)
    prime = reader.uint(params.byte_length)
    value = reader.element(params)
    version = reader.uint(U64)
    reader.finish()
    return _build(MembershipWitness, prime=prime, value=value, version=version)


def encode_non_membership_witness(params: PublicParams, witness: NonMembershipWitness) -> bytes:
    W = params.byte_length
    return (
        _fixed(witness.prime, W)
        + _fixed(witness.a, W)
        + _fixed(witness.d, W)
        + _fixed(witness.version, U64)
    )


def decode_non_membership_witness(params: PublicParams, data: bytes) -> NonMembershipWitness:
    reader = _Reader(data)
    prime = reader.uint(params.byte_length)
    a = reader.uint(params.byte_length)
    d = reader.element(params)
    version = reader.uint(U64)
    reader.finish()
    if a >= prime:
        raise ProofMalformed("Coefficient a must be reduced modulo the prime")
    return _build(NonMembershipWitness, prime=prime, a=a, d=d, version=version)


def encode_poe_proof(params: PublicParams, proof: PoEProof) -> bytes:
    return encode_element(params, proof.quotient_term) + _fixed(proof.remainder, params.byte_length)


def _read_poe_proof(params: PublicParams, reader: _Reader) -> PoEProof:
    quotient_term = reader.element(params)
    remainder = reader.uint(params.byte_length)
    return _build(PoEProof, quotient_term=quotient_term, remainder=remainder)


def decode_poe_proof(params: PublicParams, data: bytes) -> PoEProof:
    reader = _Reader(data)
    proof = _read_poe_proof(params, reader)
    reader.finish()
    return proof


def encode_aggregated(params: PublicParams, aggregated: AggregatedWitness) -> bytes:
    witness = aggregated.witness
    parts = [_fixed(_KIND_CODES[aggregated.kind], U8), _prefixed(witness.prime)]
    if aggregated.kind == ProofKind.AGGREGATED_NON_MEMBERSHIP:
        parts.append(_prefixed(witness.a))
        parts.append(encode_element(params, witness.d))
    else:
        parts.append(encode_element(params, witness.value))
    parts.append(_fixed(witness.version, U64))
    parts.append(encode_poe_proof(params, aggregated.proof))
    return b"".join(parts)


def decode_aggregated(params: PublicParams, data: bytes) -> AggregatedWitness:
    reader = _Reader(data)
    kind = _CODE_KINDS.get(reader.uint(U8))
    if kind not in (ProofKind.AGGREGATED_MEMBERSHIP, ProofKind.AGGREGATED_NON_MEMBERSHIP):
        raise ProofMalformed("Unknown aggregated witness tag")

    x_star = reader.prefixed()
    if kind == ProofKind.AGGREGATED_NON_MEMBERSHIP:
        a = reader.prefixed()
        if a >= x_star:
            raise ProofMalformed("Coefficient a must be reduced modulo x*")
        d = reader.element(params)
        version = reader.uint(U64)
        witness = _build(NonMembershipWitness, prime=x_star, a=a, d=d, version=version)
    else:
        value = reader.element(params)
        version = reader.uint(U64)
        witness = _build(MembershipWitness, prime=x_star, value=value, version=version)

    proof = _read_poe_proof(params, reader)
    reader.finish()
    return _build(AggregatedWitness, kind=kind, witness=witness, proof=proof)


def encoded_sizes(params: PublicParams) -> Tuple[int, int, int, int]:
    """Byte sizes of (state, membership witness, non-membership witness, PoE proof)."""
    W = params.byte_length
    return W + 2 * U64, 2 * W + U64, 3 * W + U64, 2 * W
