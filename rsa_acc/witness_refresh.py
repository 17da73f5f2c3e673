"""
Witness Refresh for RSA Accumulators

Handles updating membership and non-membership witnesses when the
accumulator changes due to additions or removals of other members.

Every update is a pure function of (old witness, UpdateDelta): the
holder needs only the published deltas, never the member set or the
factorization of N.
"""

import logging
from functools import partial
from typing import Dict, Iterable, List, Sequence

from .accumulator import product, root_factor
from .errors import AlreadyMember, ElementNotMember, InconsistentState
from .models import (
    AccumulatorState,
    MembershipWitness,
    NonMembershipWitness,
    PublicParams,
    UpdateDelta,
    Witness,
)
from .parallel import parallel_map
from .pokcr import bezout, normalize_coprime

logger = logging.getLogger(__name__)


def _check_next(witness: Witness, delta: UpdateDelta) -> None:
    if delta.version != witness.version + 1:
        raise InconsistentState(
            f"Delta for version {delta.version} cannot follow witness version {witness.version}"
        )


def update_witness_on_addition(
    params: PublicParams, witness: MembershipWitness, delta: UpdateDelta
) -> MembershipWitness:
    """
    Update a membership witness after a batch of additions.

    new_witness = old_witness^(product of added primes) mod N

    Args:
        params: Public parameters
        witness: Witness valid for version delta.version - 1
        delta: The addition batch

    Returns:
        MembershipWitness: Witness valid for delta.version

    Raises:
        AlreadyMember: If the delta re-adds the witnessed prime
    """
    _check_next(witness, delta)
    if witness.prime in delta.added:
        raise AlreadyMember("Delta adds the witnessed prime again")

    value = params.group.power(witness.value, product(delta.added))
    return witness.model_copy(update={"value": value, "version": delta.version})


def update_witness_on_removal(
    params: PublicParams, witness: MembershipWitness, delta: UpdateDelta
) -> MembershipWitness:
    """
    Update a membership witness after a batch of removals.

    With x the witnessed prime, y the product of removed primes and A' the
    new value, find a*x + b*y = 1. Then w' = w^b * A'^a satisfies
    w'^x = A'^(b*y) * A'^(a*x) = A', because w^x = A = A'^y.

    Raises:
        ElementNotMember: If the witnessed prime itself was removed
    """
    _check_next(witness, delta)
    if witness.prime in delta.removed:
        raise ElementNotMember("Witnessed element was removed")

    group = params.group
    a, b = bezout(witness.prime, product(delta.removed))
    value = group.multiply(group.power(witness.value, b), group.power(delta.value, a))
    return witness.model_copy(update={"value": value, "version": delta.version})


def update_non_membership_on_addition(
    params: PublicParams, witness: NonMembershipWitness, delta: UpdateDelta
) -> NonMembershipWitness:
    """
    Update a non-membership witness after a batch of additions.

    With y the product of added primes, find a0*y + r0*x = 1 and set
    a' = a*a0, d' = d * A^(a*r0), then normalise against A' = A^y.

    Raises:
        NotCoprime: If the delta added the witnessed prime
    """
    _check_next(witness, delta)
    group = params.group

    a0, r0 = bezout(product(delta.added), witness.prime)
    a = witness.a * a0
    d = group.multiply(witness.d, group.power(delta.previous_value, witness.a * r0))
    a, d = normalize_coprime(group, delta.value, witness.prime, a, d)
    return witness.model_copy(update={"a": a, "d": d, "version": delta.version})


def update_non_membership_on_removal(
    params: PublicParams, witness: NonMembershipWitness, delta: UpdateDelta
) -> NonMembershipWitness:
    """
    Update a non-membership witness after a batch of removals.

    A = A'^y, so A^a = A'^(a*y): a' = a*y with d unchanged, then normalise.
    """
    _check_next(witness, delta)
    a, d = normalize_coprime(
        params.group, delta.value, witness.prime, witness.a * product(delta.removed), witness.d
    )
    return witness.model_copy(update={"a": a, "d": d, "version": delta.version})


def apply_delta(params: PublicParams, witness: Witness, delta: UpdateDelta) -> Witness:
    """Apply one delta to either kind of witness."""
    if isinstance(witness, MembershipWitness):
        if delta.removed:
            return update_witness_on_removal(params, witness, delta)
        return update_witness_on_addition(params, witness, delta)
    if delta.removed:
        return update_non_membership_on_removal(params, witness, delta)
    return update_non_membership_on_addition(params, witness, delta)


def refresh_witness(params: PublicParams, witness: Witness, deltas: Iterable[UpdateDelta]) -> Witness:
    """
    Bring a witness up to date with a run of published deltas.

    Deltas at or below the witness version are skipped; the rest must be
    contiguous.

    Raises:
        InconsistentState: If a delta is missing from the run
    """
    for delta in sorted(deltas, key=lambda d: d.version):
        if delta.version <= witness.version:
            continue
        witness = apply_delta(params, witness, delta)
    return witness


def refresh_witnesses(
    params: PublicParams, witnesses: Sequence[Witness], deltas: Iterable[UpdateDelta]
) -> List[Witness]:
    """Refresh many witnesses against the same deltas, in worker processes for large batches."""
    return parallel_map(partial(refresh_witness, params, deltas=tuple(deltas)), witnesses)


def batch_refresh_witnesses(state: AccumulatorState, primes: Sequence[int]) -> Dict[int, MembershipWitness]:
    """
    Recompute witnesses for all members from scratch.

    This is useful after major set changes or for periodic refresh. Uses
    root_factor() from g instead of one full exponentiation per member.

    Args:
        state: Current snapshot
        primes: Every prime accumulated in state

    Returns:
        Dict[int, MembershipWitness]: Mapping from prime -> witness

    Raises:
        InconsistentState: If primes do not reproduce state.value
    """
    primes = list(dict.fromkeys(primes))
    if len(primes) != state.size:
        raise InconsistentState(f"Got {len(primes)} primes for a snapshot of size {state.size}")
    if not primes:
        return {}

    group = state.params.group
    values = root_factor(group, state.params.generator, primes)
    if not group.equals(group.power(values[0], primes[0]), state.value):
        raise InconsistentState("Primes do not reproduce the accumulator value")

    logger.debug(f"Recomputed {len(primes)} witnesses for version {state.version}")
    return {
        p: MembershipWitness(prime=p, value=w, version=state.version)
        for p, w in zip(primes, values)
    }


def _test_witness_refresh() -> None:
    """Test witness refresh operations."""
    from .accumulator import accumulate_primes, remove_primes, setup
    from .rsa_params import generate_toy_params

    params = generate_toy_params()
    state = setup(params)
    state, (w5, w7) = accumulate_primes(state, [5, 7])
    print(f"Initial: value={state.value}, witnesses={w5.value}, {w7.value}")

    new_state, _ = accumulate_primes(state, [13])
    delta = UpdateDelta(
        version=new_state.version, previous_value=state.value, value=new_state.value, added=(13,)
    )
    w5 = update_witness_on_addition(params, w5, delta)
    print(f"After adding 13: witness for 5 = {w5.value}, "
          f"valid = {pow(w5.value, 5, params.modulus) == new_state.value}")

    removed_state = remove_primes(new_state, [batch_refresh_witnesses(new_state, [5, 7, 13])[7]])
    delta = UpdateDelta(
        version=removed_state.version,
        previous_value=new_state.value,
        value=removed_state.value,
        removed=(7,),
    )
    w5 = update_witness_on_removal(params, w5, delta)
    print(f"After removing 7: witness for 5 = {w5.value}, "
          f"valid = {pow(w5.value, 5, params.modulus) == removed_state.value}")


if __name__ == "__main__":
    _test_witness_refresh()
