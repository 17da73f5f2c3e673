"""
Uniform Proof Verification

verify(state, claim, proof) dispatches on the proof's kind tag, so callers
holding a mix of single and aggregated proofs verify them the same way.
"""

import logging
from functools import partial
from typing import List, Sequence, Tuple, Union

from .accumulator import verify_membership, verify_non_membership
from .aggregation import verify_aggregated
from .models import AccumulatorState, Proof, ProofKind
from .parallel import parallel_map

logger = logging.getLogger(__name__)

Claim = Union[bytes, Sequence[bytes]]


def verify(state: AccumulatorState, claim: Claim, proof: Proof, check_version: bool = True) -> bool:
    """
    Verify any proof record against a snapshot.

    Args:
        state: Published snapshot
        claim: The element (or, for aggregated proofs, the elements) proven
        proof: Membership, non-membership or aggregated witness
        check_version: Reject proofs issued for another snapshot version

    Returns:
        bool: True if the proof holds for claim in state

    Raises:
        TypeError: If the claim shape does not fit the proof kind
    """
    kind = proof.kind
    if kind in (ProofKind.MEMBERSHIP, ProofKind.NON_MEMBERSHIP):
        if not isinstance(claim, (bytes, bytearray)):
            raise TypeError("Single-element proofs take one element as the claim")
        if kind == ProofKind.MEMBERSHIP:
            return verify_membership(state, claim, proof, check_version=check_version)
        return verify_non_membership(state, claim, proof, check_version=check_version)

    elements = [claim] if isinstance(claim, (bytes, bytearray)) else list(claim)
    return verify_aggregated(state, elements, proof, check_version=check_version)


def _verify_pair(state: AccumulatorState, pair: Tuple[Claim, Proof]) -> bool:
    claim, proof = pair
    return verify(state, claim, proof)


def verify_many(state: AccumulatorState, claims: Sequence[Claim], proofs: Sequence[Proof]) -> List[bool]:
    """Verify independent (claim, proof) pairs, in worker processes for large batches."""
    if len(claims) != len(proofs):
        raise ValueError("Need exactly one proof per claim")
    results = parallel_map(partial(_verify_pair, state), list(zip(claims, proofs)))
    logger.debug(f"Verified {len(results)} proofs, {results.count(False)} rejected")
    return results
