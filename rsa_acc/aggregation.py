"""
Batch Witness Aggregation

Folds k membership (or non-membership) witnesses into one witness for the
product x* of their primes, plus one PoE so the verifier never raises
anything to x* itself. Verification costs a constant number of
exponentiations with challenge-sized exponents, whatever k is.

Membership:      W^x* == A, from Shamir's trick over the witnesses.
Non-membership:  A^a * d^x* == g, from pairwise Bezout merging.
"""

import logging
from typing import Iterable, List, Sequence

from .accumulator import distinct_primes, product
from .errors import InconsistentState, NotCoprime
from .models import (
    AccumulatorState,
    AggregatedWitness,
    MembershipWitness,
    NonMembershipWitness,
    ProofKind,
)
from .poe import prove_exponentiation, verify_exponentiation
from .pokcr import aggregate_coprime, aggregate_roots

logger = logging.getLogger(__name__)


def _distinct_for_state(state: AccumulatorState, witnesses: Sequence) -> List:
    if not witnesses:
        raise ValueError("At least one witness is required")

    unique = {}
    for w in witnesses:
        if w.version != state.version:
            raise InconsistentState(
                f"Witness for version {w.version} cannot be aggregated at version {state.version}"
            )
        kept = unique.setdefault(w.prime, w)
        if kept != w:
            raise InconsistentState(f"Prime {w.prime} repeated with a different witness")
    return list(unique.values())


def aggregate_membership(
    state: AccumulatorState, witnesses: Sequence[MembershipWitness]
) -> AggregatedWitness:
    """
    Aggregate membership witnesses issued for the same snapshot.

    Args:
        state: Snapshot the witnesses are valid for
        witnesses: Membership witnesses (identical repeats are collapsed)

    Returns:
        AggregatedWitness: (x*, W) with W^x* == A, and a PoE of that equation

    Raises:
        InconsistentState: If a witness was issued for another version, or a
            prime repeats with a different witness
        NotCoprime: If two witnesses share a prime factor
    """
    witnesses = _distinct_for_state(state, witnesses)
    group = state.params.group

    x_star, W = aggregate_roots(group, [(w.prime, w.value) for w in witnesses])
    proof = prove_exponentiation(group, W, x_star, state.value)

    logger.debug(f"Aggregated {len(witnesses)} membership witnesses at version {state.version}")
    return AggregatedWitness(
        kind=ProofKind.AGGREGATED_MEMBERSHIP,
        witness=MembershipWitness(prime=x_star, value=W, version=state.version),
        proof=proof,
    )


def aggregate_non_membership(
    state: AccumulatorState, witnesses: Sequence[NonMembershipWitness]
) -> AggregatedWitness:
    """
    Aggregate non-membership witnesses issued for the same snapshot.

    The PoE proves g == d^x* * A^a, with A^a carried as a cofactor term.

    Raises:
        InconsistentState: If a witness was issued for another version, or a
            prime repeats with a different witness
        NotCoprime: If two witnesses share a prime factor
    """
    witnesses = _distinct_for_state(state, witnesses)
    group = state.params.group

    x_star, a, d = aggregate_coprime(group, state.value, [(w.prime, w.a, w.d) for w in witnesses])
    proof = prove_exponentiation(
        group, d, x_star, state.params.generator, cofactors=[(state.value, a)]
    )

    logger.debug(f"Aggregated {len(witnesses)} non-membership witnesses at version {state.version}")
    return AggregatedWitness(
        kind=ProofKind.AGGREGATED_NON_MEMBERSHIP,
        witness=NonMembershipWitness(prime=x_star, a=a, d=d, version=state.version),
        proof=proof,
    )


def verify_aggregated(
    state: AccumulatorState,
    elements: Iterable[bytes],
    aggregated: AggregatedWitness,
    check_version: bool = True,
) -> bool:
    """
    Verify an aggregated witness for a batch of elements.

    x* is recomputed from the elements, so the aggregate cannot claim a
    different batch.

    Returns:
        bool: True if every element is a member (resp. non-member) of state
    """
    try:
        _, primes = distinct_primes(elements)
    except NotCoprime:
        return False
    if not primes:
        return False

    witness = aggregated.witness
    x_star = product(primes)
    if witness.prime != x_star:
        return False
    if check_version and witness.version != state.version:
        return False

    group = state.params.group
    if aggregated.kind == ProofKind.AGGREGATED_MEMBERSHIP:
        if not (0 < witness.value < group.modulus):
            return False
        return verify_exponentiation(group, witness.value, x_star, state.value, aggregated.proof)

    if not (0 <= witness.a < x_star) or not (0 < witness.d < group.modulus):
        return False
    return verify_exponentiation(
        group,
        witness.d,
        x_star,
        state.params.generator,
        aggregated.proof,
        cofactors=[(state.value, witness.a)],
    )
