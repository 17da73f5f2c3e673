"""
Proof of Exponentiation (Wesolowski)

Non-interactive proof that y = x^e mod N, checkable with two small
exponentiations no matter how large e is. The challenge prime l is a
Fiat-Shamir hash of every public input.

Statements may carry extra (base, exponent) cofactors:

    y = x^e * prod(x_j^e_j)

The quotient term then covers every base and the verifier recomputes each
e_j mod l itself.
"""

import logging
from typing import List, Sequence, Tuple

from .group import HiddenOrderGroup
from .hash_to_prime import challenge_prime
from .models import PoEProof

logger = logging.getLogger(__name__)

_DOMAIN = b"rsa-acc/poe/v1"


def _serialize_for_hash(values: Sequence[int]) -> bytes:
    """Length-prefixed, sign-tagged big-endian integers behind a domain tag."""
    parts = [_DOMAIN]
    for v in values:
        magnitude = abs(v)
        raw = magnitude.to_bytes(max(1, (magnitude.bit_length() + 7) // 8), "big")
        parts.append(b"\x01" if v < 0 else b"\x00")
        parts.append(len(raw).to_bytes(4, "big"))
        parts.append(raw)
    return b"".join(parts)


def derive_challenge(
    group: HiddenOrderGroup,
    base: int,
    exponent: int,
    result: int,
    cofactors: Sequence[Tuple[int, int]] = (),
) -> int:
    """Fiat-Shamir challenge prime l for a PoE statement."""
    values: List[int] = [
        group.modulus,
        group.reduce(base),
        exponent,
        group.reduce(result),
        len(cofactors),
    ]
    for cofactor_base, cofactor_exponent in cofactors:
        values.append(group.reduce(cofactor_base))
        values.append(cofactor_exponent)
    return challenge_prime(_serialize_for_hash(values))


def prove_exponentiation(
    group: HiddenOrderGroup,
    base: int,
    exponent: int,
    result: int,
    cofactors: Sequence[Tuple[int, int]] = (),
) -> PoEProof:
    """
    Prove result == base^exponent * prod(b_j^e_j) mod N.

    Args:
        group: Hidden-order group
        base: Main base x
        exponent: Main exponent e (non-negative)
        result: Claimed y
        cofactors: Extra (base, exponent) terms

    Returns:
        PoEProof: (x^(e // l) * prod(b_j^(e_j // l)), e mod l)
    """
    if exponent < 0:
        raise ValueError("PoE exponent must be non-negative")

    cofactors = list(cofactors)
    l = derive_challenge(group, base, exponent, result, cofactors)

    q, r = divmod(exponent, l)
    quotient_term = group.power(base, q)
    for cofactor_base, cofactor_exponent in cofactors:
        quotient_term = group.multiply(
            quotient_term, group.power(cofactor_base, cofactor_exponent // l)
        )

    logger.debug(f"PoE proof generated for {exponent.bit_length()}-bit exponent")
    return PoEProof(quotient_term=quotient_term, remainder=r)


def verify_exponentiation(
    group: HiddenOrderGroup,
    base: int,
    exponent: int,
    result: int,
    proof: PoEProof,
    cofactors: Sequence[Tuple[int, int]] = (),
) -> bool:
    """
    Verify a PoE proof.

    Checks remainder == e mod l and Q^l * x^r * prod(b_j^(e_j mod l)) == y.

    Returns:
        bool: True if the statement holds, False otherwise
    """
    if exponent < 0 or not group.contains(proof.quotient_term):
        return False

    cofactors = list(cofactors)
    l = derive_challenge(group, base, exponent, result, cofactors)
    if proof.remainder != exponent % l:
        return False

    terms = [(proof.quotient_term, l), (base, proof.remainder)]
    terms.extend((b, e % l) for b, e in cofactors)
    return group.equals(group.multi_power(terms), result)
