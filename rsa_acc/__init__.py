"""
RSA Accumulator Package

Dynamic RSA accumulator over a hidden-order group: batched Add and Delete,
membership and non-membership witnesses, Wesolowski proofs of
exponentiation, and witness aggregation with constant-time verification.
"""

from .accumulator import (
    add,
    add_batch,
    add_single,
    delete,
    delete_batch,
    delete_single,
    prove_batch_add,
    prove_batch_delete,
    prove_membership,
    prove_non_membership,
    prove_non_membership_many,
    recompute_root,
    setup,
    verify_batch_add,
    verify_batch_delete,
    verify_membership,
    verify_non_membership,
)
from .aggregation import aggregate_membership, aggregate_non_membership, verify_aggregated
from .encoding import (
    decode_aggregated,
    decode_element,
    decode_membership_witness,
    decode_non_membership_witness,
    decode_poe_proof,
    decode_state,
    encode_aggregated,
    encode_element,
    encode_membership_witness,
    encode_non_membership_witness,
    encode_poe_proof,
    encode_state,
    encoded_sizes,
)
from .errors import (
    AccumulatorError,
    AlreadyMember,
    ElementNotMember,
    InconsistentState,
    InvalidModulus,
    NotCoprime,
    NotInvertible,
    PrimeSearchExhausted,
    ProofMalformed,
)
from .group import HiddenOrderGroup
from .hash_to_prime import element_prime, hash_to_prime
from .models import (
    AccumulatorState,
    AggregatedWitness,
    MembershipWitness,
    NonMembershipWitness,
    PoEProof,
    ProofKind,
    PublicParams,
    UpdateDelta,
)
from .poe import prove_exponentiation, verify_exponentiation
from .registry import AccumulatorRegistry
from .rsa_key_generator import generate_params, generate_setup
from .rsa_params import create_params, generate_toy_params, load_params
from .verifier import verify, verify_many
from .witness_refresh import refresh_witness, refresh_witnesses

__version__ = "0.2.0"
__all__ = [
    "add",
    "add_batch",
    "add_single",
    "delete",
    "delete_batch",
    "delete_single",
    "prove_batch_add",
    "prove_batch_delete",
    "prove_membership",
    "prove_non_membership",
    "prove_non_membership_many",
    "recompute_root",
    "setup",
    "verify_batch_add",
    "verify_batch_delete",
    "verify_membership",
    "verify_non_membership",
    "aggregate_membership",
    "aggregate_non_membership",
    "verify_aggregated",
    "decode_aggregated",
    "decode_element",
    "decode_membership_witness",
    "decode_non_membership_witness",
    "decode_poe_proof",
    "decode_state",
    "encode_aggregated",
    "encode_element",
    "encode_membership_witness",
    "encode_non_membership_witness",
    "encode_poe_proof",
    "encode_state",
    "encoded_sizes",
    "AccumulatorError",
    "AlreadyMember",
    "ElementNotMember",
    "InconsistentState",
    "InvalidModulus",
    "NotCoprime",
    "NotInvertible",
    "PrimeSearchExhausted",
    "ProofMalformed",
    "HiddenOrderGroup",
    "element_prime",
    "hash_to_prime",
    "AccumulatorState",
    "AggregatedWitness",
    "MembershipWitness",
    "NonMembershipWitness",
    "PoEProof",
    "ProofKind",
    "PublicParams",
    "UpdateDelta",
    "prove_exponentiation",
    "verify_exponentiation",
    "AccumulatorRegistry",
    "generate_params",
    "generate_setup",
    "create_params",
    "generate_toy_params",
    "load_params",
    "verify",
    "verify_many",
    "refresh_witness",
    "refresh_witnesses",
]
