"""
RSA Accumulator Core Operations

Implements the dynamic accumulator over a hidden-order group: Add and
Delete (single and batched), membership and non-membership witnesses, and
PoE certificates for batch updates.

Every function takes an immutable AccumulatorState and returns a new one.
Nothing is mutated, so a raised error leaves the caller's snapshot intact.
Deletion never needs the factorization of N: the new value is the
aggregated root of the deleted members' witnesses.
"""

import logging
from functools import partial, reduce
from operator import mul
from typing import Dict, Iterable, List, Sequence, Tuple

from .errors import AlreadyMember, ElementNotMember, InconsistentState, NotCoprime
from .group import HiddenOrderGroup
from .hash_to_prime import element_prime
from .models import (
    AccumulatorState,
    MembershipWitness,
    NonMembershipWitness,
    PoEProof,
    PublicParams,
)
from .parallel import parallel_map
from .pokcr import aggregate_roots, coprime_coefficients, prove_coprime, verify_coprime
from .poe import prove_exponentiation, verify_exponentiation

logger = logging.getLogger(__name__)


def product(values: Iterable[int]) -> int:
    return reduce(mul, values, 1)


def setup(params: PublicParams) -> AccumulatorState:
    """Empty accumulator: value g, size 0, version 0."""
    return AccumulatorState(params=params, value=params.generator, size=0, version=0)


def recompute_root(params: PublicParams, primes: Iterable[int]) -> int:
    """
    Recompute accumulator root from scratch given a set of primes.

    Uses iterative modular exponentiation to avoid huge intermediate exponents.

    Example:
        >>> params = generate_toy_params()
        >>> recompute_root(params, [5, 7]) == pow(3, 35, 187)
        True
    """
    A = params.generator
    for p in primes:
        if p <= 1:
            raise ValueError("All primes must be greater than 1")
        A = pow(A, p, params.modulus)
    return A


def root_factor(group: HiddenOrderGroup, base: int, primes: Sequence[int]) -> List[int]:
    """
    Compute base^(P / p_i) for every p_i, where P is the product of primes.

    Divide and conquer: the left half receives base raised to the product
    of the right half and vice versa, until single primes remain. Both
    exponents at a node share one fixed-base table.

    Returns:
        List[int]: One value per prime, in input order
    """
    primes = list(primes)
    if not primes:
        return []
    if len(primes) == 1:
        return [group.reduce(base)]

    mid = len(primes) // 2
    left, right = primes[:mid], primes[mid:]
    left_base, right_base = group.power_many(base, [product(right), product(left)])
    return root_factor(group, left_base, left) + root_factor(group, right_base, right)


def distinct_primes(elements: Iterable[bytes]) -> Tuple[List[bytes], List[int]]:
    """
    Collapse repeated elements and map the rest to primes.

    Raises:
        NotCoprime: If two distinct elements hash to the same prime
    """
    seen: Dict[int, bytes] = {}
    unique: List[bytes] = []
    primes: List[int] = []
    for element in elements:
        p = element_prime(element)
        if p in seen:
            if seen[p] != bytes(element):
                raise NotCoprime("Two distinct elements map to the same prime representative")
            continue
        seen[p] = bytes(element)
        unique.append(element)
        primes.append(p)
    return unique, primes


# ---------------------------------------------------------------------------
# Add
# ---------------------------------------------------------------------------

def accumulate_primes(
    state: AccumulatorState, primes: Sequence[int]
) -> Tuple[AccumulatorState, List[MembershipWitness]]:
    """
    Add prime representatives in one batch.

    A' = A^P with P the product of the new primes. Each witness is
    A^(P / p_i), computed by root_factor().

    Args:
        state: Current snapshot
        primes: Distinct primes not yet accumulated

    Returns:
        Tuple[AccumulatorState, List[MembershipWitness]]: New snapshot with
        version + 1 and one witness per prime for that snapshot

    Raises:
        AlreadyMember: If the batch repeats a prime
    """
    primes = list(primes)
    if any(p <= 1 for p in primes):
        raise ValueError("All primes must be greater than 1")
    if len(set(primes)) != len(primes):
        raise AlreadyMember("Batch contains the same prime representative twice")
    if not primes:
        return state, []

    group = state.params.group
    new_value = group.power(state.value, product(primes))
    new_state = state.model_copy(
        update={
            "value": new_value,
            "size": state.size + len(primes),
            "version": state.version + 1,
        }
    )
    witnesses = [
        MembershipWitness(prime=p, value=w, version=new_state.version)
        for p, w in zip(primes, root_factor(group, state.value, primes))
    ]

    logger.debug(f"Accumulated {len(primes)} primes at version {new_state.version}")
    return new_state, witnesses


def add_single(state: AccumulatorState, element: bytes) -> Tuple[AccumulatorState, MembershipWitness]:
    """
    Add one element. A' = A^p and the witness is the old value A.

    Example:
        >>> state = setup(generate_toy_params())
        >>> state, witness = add_single(state, b"device-1")
        >>> verify_membership(state, b"device-1", witness)
        True
    """
    new_state, (witness,) = accumulate_primes(state, [element_prime(element)])
    return new_state, witness


def add_batch(
    state: AccumulatorState, elements: Iterable[bytes]
) -> Tuple[AccumulatorState, List[MembershipWitness]]:
    """
    Add a batch of elements with a single exponentiation of A.

    Repeated elements are collapsed. The returned witnesses follow the order
    of first occurrence. Equivalent in value to adding the elements one at a
    time, but bumps the version once.

    Raises:
        NotCoprime: If two distinct elements collide on a prime
    """
    _, primes = distinct_primes(elements)
    return accumulate_primes(state, primes)


def add(state: AccumulatorState, elements: Iterable[bytes]) -> Tuple[AccumulatorState, List[MembershipWitness]]:
    """Add(state, elements) -> (state', witnesses)."""
    return add_batch(state, elements)


# ---------------------------------------------------------------------------
# Membership
# ---------------------------------------------------------------------------

def verify_membership_witness(
    state: AccumulatorState, witness: MembershipWitness, check_version: bool = True
) -> bool:
    """
    Check witness.value^witness.prime == state.value.

    Args:
        state: Snapshot to check against
        witness: Membership witness
        check_version: Reject witnesses issued for another snapshot version

    Returns:
        bool: True if the witness is valid for this snapshot
    """
    if check_version and witness.version != state.version:
        return False

    group = state.params.group
    if not (0 < witness.value < group.modulus):
        return False
    return group.equals(group.power(witness.value, witness.prime), state.value)


def verify_membership(
    state: AccumulatorState, element: bytes, witness: MembershipWitness, check_version: bool = True
) -> bool:
    """Verify that element is accumulated in state using witness."""
    if witness.prime != element_prime(element):
        return False
    return verify_membership_witness(state, witness, check_version=check_version)


def _member_primes(state: AccumulatorState, members: Iterable[bytes]) -> List[int]:
    _, primes = distinct_primes(members)
    if len(primes) != state.size:
        raise InconsistentState(
            f"Member set has {len(primes)} elements but snapshot holds {state.size}"
        )
    return primes


def prove_membership(
    state: AccumulatorState, members: Iterable[bytes], element: bytes
) -> MembershipWitness:
    """
    Compute a fresh membership witness from the full member set.

    The witness is g raised to the product of every other member's prime.

    Args:
        state: Current snapshot
        members: Every element committed in state
        element: Element to prove

    Raises:
        ElementNotMember: If element is not in members
        InconsistentState: If members do not reproduce state.value
    """
    primes = _member_primes(state, members)
    p = element_prime(element)
    if p not in primes:
        raise ElementNotMember("Element is not in the member set")

    value = recompute_root(state.params, (q for q in primes if q != p))
    witness = MembershipWitness(prime=p, value=value, version=state.version)
    if not verify_membership_witness(state, witness):
        raise InconsistentState("Member set does not reproduce the accumulator value")
    return witness


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------

def remove_primes(state: AccumulatorState, witnesses: Sequence[MembershipWitness]) -> AccumulatorState:
    """
    Remove the primes behind a batch of membership witnesses.

    Every witness is checked before anything is computed; the batch is
    all-or-nothing. The new value is the P-th root of A obtained by
    aggregating the witnesses, so no trapdoor is needed.

    Raises:
        ElementNotMember: If any witness fails against state
    """
    witnesses = list(witnesses)
    if not witnesses:
        return state

    primes = [w.prime for w in witnesses]
    if len(set(primes)) != len(primes):
        raise ElementNotMember("Batch removes the same prime representative twice")
    if len(primes) > state.size:
        raise ElementNotMember("Batch removes more elements than the snapshot holds")

    checks = parallel_map(partial(verify_membership_witness, state), witnesses)
    if not all(checks):
        failed = checks.index(False)
        logger.warning(f"Deletion rejected: witness {failed} of {len(witnesses)} is invalid")
        raise ElementNotMember("Witness does not verify against the current accumulator")

    group = state.params.group
    _, new_value = aggregate_roots(group, [(w.prime, w.value) for w in witnesses])
    new_state = state.model_copy(
        update={
            "value": new_value,
            "size": state.size - len(witnesses),
            "version": state.version + 1,
        }
    )

    logger.debug(f"Removed {len(witnesses)} primes at version {new_state.version}")
    return new_state


def delete_single(state: AccumulatorState, element: bytes, witness: MembershipWitness) -> AccumulatorState:
    """
    Delete one element. The new value is simply the element's witness.

    Raises:
        ElementNotMember: If the witness does not match element or state
    """
    if witness.prime != element_prime(element):
        raise ElementNotMember("Witness belongs to a different element")
    return remove_primes(state, [witness])


def delete_batch(
    state: AccumulatorState, elements: Sequence[bytes], witnesses: Sequence[MembershipWitness]
) -> AccumulatorState:
    """
    Delete a batch of elements, given one current witness per element.

    An element may repeat only with the identical witness; such repeats
    are collapsed.

    Raises:
        ValueError: If elements and witnesses differ in length
        ElementNotMember: If any element is not proven a member
    """
    elements = list(elements)
    witnesses = list(witnesses)
    if len(elements) != len(witnesses):
        raise ValueError("Need exactly one witness per element")

    unique: Dict[int, MembershipWitness] = {}
    for element, witness in zip(elements, witnesses):
        if witness.prime != element_prime(element):
            raise ElementNotMember("Witness belongs to a different element")
        kept = unique.setdefault(witness.prime, witness)
        if kept != witness:
            raise ElementNotMember("Element repeated with a different witness")

    return remove_primes(state, list(unique.values()))


def delete(
    state: AccumulatorState, elements: Sequence[bytes], witnesses: Sequence[MembershipWitness]
) -> AccumulatorState:
    """Delete(state, elements, witnesses) -> state'."""
    return delete_batch(state, elements, witnesses)


# ---------------------------------------------------------------------------
# Non-membership
# ---------------------------------------------------------------------------

def verify_non_membership_witness(
    state: AccumulatorState, witness: NonMembershipWitness, check_version: bool = True
) -> bool:
    """
    Check state.value^a * d^prime == g.

    Only normalised witnesses (0 <= a < prime) are accepted.
    """
    if check_version and witness.version != state.version:
        return False

    group = state.params.group
    if not (0 <= witness.a < witness.prime) or not (0 < witness.d < group.modulus):
        return False
    return verify_coprime(
        group, state.params.generator, state.value, witness.prime, witness.a, witness.d
    )


def verify_non_membership(
    state: AccumulatorState, element: bytes, witness: NonMembershipWitness, check_version: bool = True
) -> bool:
    """Verify that element is not accumulated in state using witness."""
    if witness.prime != element_prime(element):
        return False
    return verify_non_membership_witness(state, witness, check_version=check_version)


def prove_non_membership(
    state: AccumulatorState, known_members: Iterable[bytes], element: bytes
) -> NonMembershipWitness:
    """
    Non-membership witness for element.

    With s the product of member primes and x the element's prime, finds
    a*s + b*x = 1 and returns (x, a, g^b). Then A^a * (g^b)^x = g^(a*s + b*x) = g.

    Args:
        state: Current snapshot
        known_members: Every element committed in state
        element: Element to prove absent

    Raises:
        NotCoprime: If element is a member
        InconsistentState: If known_members do not reproduce state.value
    """
    primes = _member_primes(state, known_members)
    x = element_prime(element)
    group = state.params.group

    a, d = prove_coprime(group, state.params.generator, product(primes), x)
    witness = NonMembershipWitness(prime=x, a=a, d=d, version=state.version)
    if not verify_non_membership_witness(state, witness):
        raise InconsistentState("Member set does not reproduce the accumulator value")
    return witness


def prove_non_membership_many(
    state: AccumulatorState, known_members: Iterable[bytes], elements: Sequence[bytes]
) -> List[NonMembershipWitness]:
    """
    Non-membership witnesses for several elements at once.

    The member product is built once and every d = g^b shares one
    fixed-base table for g.

    Raises:
        NotCoprime: If any element is a member
        InconsistentState: If known_members do not reproduce state.value
    """
    primes = _member_primes(state, known_members)
    _, targets = distinct_primes(elements)
    s = product(primes)

    coefficients = [coprime_coefficients(s, x) for x in targets]
    ds = state.params.group.power_many(state.params.generator, [b for _, b in coefficients])

    witnesses = [
        NonMembershipWitness(prime=x, a=a, d=d, version=state.version)
        for x, (a, _), d in zip(targets, coefficients, ds)
    ]
    if witnesses and not verify_non_membership_witness(state, witnesses[0]):
        raise InconsistentState("Member set does not reproduce the accumulator value")
    return witnesses


# ---------------------------------------------------------------------------
# Batch update certificates
# ---------------------------------------------------------------------------

def _is_successor(old: AccumulatorState, new: AccumulatorState, size_change: int) -> bool:
    return (
        old.params == new.params
        and new.version == old.version + 1
        and new.size == old.size + size_change
    )


def prove_batch_add(old: AccumulatorState, new: AccumulatorState, elements: Iterable[bytes]) -> PoEProof:
    """PoE that new.value == old.value^P for the batch's prime product P."""
    _, primes = distinct_primes(elements)
    return prove_exponentiation(old.params.group, old.value, product(primes), new.value)


def verify_batch_add(
    old: AccumulatorState, new: AccumulatorState, elements: Iterable[bytes], proof: PoEProof
) -> bool:
    """Check that new is old with elements added, in O(1) group operations."""
    _, primes = distinct_primes(elements)
    if not _is_successor(old, new, len(primes)):
        return False
    return verify_exponentiation(old.params.group, old.value, product(primes), new.value, proof)


def prove_batch_delete(old: AccumulatorState, new: AccumulatorState, elements: Iterable[bytes]) -> PoEProof:
    """PoE that old.value == new.value^P for the removed batch's prime product P."""
    _, primes = distinct_primes(elements)
    return prove_exponentiation(old.params.group, new.value, product(primes), old.value)


def verify_batch_delete(
    old: AccumulatorState, new: AccumulatorState, elements: Iterable[bytes], proof: PoEProof
) -> bool:
    """Check that new is old with elements removed, in O(1) group operations."""
    _, primes = distinct_primes(elements)
    if not _is_successor(old, new, -len(primes)):
        return False
    return verify_exponentiation(old.params.group, new.value, product(primes), old.value, proof)


def _test_accumulator_operations() -> None:
    """Walk through the accumulator lifecycle with toy parameters."""
    from .rsa_params import generate_toy_params

    params = generate_toy_params()
    print("Testing RSA Accumulator Operations:")
    print(f"N = {params.modulus}, g = {params.generator}")

    state = setup(params)
    state, witnesses = add(state, [b"alice", b"bob", b"carol"])
    print(f"\n1. After add: value={state.value}, size={state.size}, version={state.version}")
    for element, witness in zip([b"alice", b"bob", b"carol"], witnesses):
        print(f"   {element!r}: member={verify_membership(state, element, witness)}")

    print("\n2. Non-membership:")
    absent = prove_non_membership(state, [b"alice", b"bob", b"carol"], b"mallory")
    print(f"   b'mallory' absent: {verify_non_membership(state, b'mallory', absent)}")

    print("\n3. Delete:")
    state = delete(state, [b"bob"], [witnesses[1]])
    print(f"   value={state.value}, size={state.size}, version={state.version}")
    expected = recompute_root(params, [witnesses[0].prime, witnesses[2].prime])
    print(f"   Matches recompute: {state.value == expected}")


if __name__ == "__main__":
    from .logging_config import setup_logging

    setup_logging()
    _test_accumulator_operations()
