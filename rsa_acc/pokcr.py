"""
Coprimality Proofs for RSA Accumulators

Bezout-coefficient machinery behind non-membership witnesses and witness
aggregation: the extended Euclidean algorithm, Shamir's trick for merging
roots, and construction/merging of proofs that a prime is coprime to the
accumulated product.
"""

from typing import List, Sequence, Tuple

from .errors import NotCoprime
from .group import HiddenOrderGroup


def extended_gcd(a: int, b: int) -> Tuple[int, int, int]:
    """
    Extended Euclidean Algorithm.

    Computes gcd(a, b) and coefficients x, y such that ax + by = gcd(a, b).
    Runs iteratively; the number of division steps is bounded by Lame's
    theorem and exceeding the bound raises instead of looping.

    Args:
        a: First non-negative integer
        b: Second non-negative integer

    Returns:
        Tuple[int, int, int]: (gcd, x, y) where ax + by = gcd

    Example:
        >>> gcd, x, y = extended_gcd(35, 15)
        >>> assert gcd == 5
        >>> assert 35 * x + 15 * y == 5
    """
    if a < 0 or b < 0:
        raise ValueError("extended_gcd expects non-negative integers")

    limit = 2 * max(a.bit_length(), b.bit_length()) + 2
    old_r, r = a, b
    old_x, x = 1, 0
    old_y, y = 0, 1

    steps = 0
    while r != 0:
        if steps > limit:
            raise RuntimeError("extended_gcd exceeded its iteration bound")
        quotient = old_r // r
        old_r, r = r, old_r - quotient * r
        old_x, x = x, old_x - quotient * x
        old_y, y = y, old_y - quotient * y
        steps += 1

    return old_r, old_x, old_y


def bezout(x: int, y: int) -> Tuple[int, int]:
    """
    Coefficients (a, b) with a*x + b*y = 1.

    Raises:
        NotCoprime: If gcd(x, y) != 1
    """
    gcd, a, b = extended_gcd(x, y)
    if gcd != 1:
        raise NotCoprime(f"Values share a common factor (gcd has {gcd.bit_length()} bits)")
    return a, b


def shamir_trick(group: HiddenOrderGroup, w1: int, w2: int, x1: int, x2: int) -> int:
    """
    Merge two roots of the same value.

    Given w1^x1 == w2^x2 == A with gcd(x1, x2) = 1, returns w with
    w^(x1*x2) == A.

    Raises:
        NotCoprime: If x1 and x2 share a factor
    """
    a, b = bezout(x1, x2)
    return group.multiply(group.power(w1, b), group.power(w2, a))


def aggregate_roots(group: HiddenOrderGroup, roots: Sequence[Tuple[int, int]]) -> Tuple[int, int]:
    """
    Merge many (x_i, w_i) roots of one value into (prod x_i, W).

    Pairs are merged in a balanced tree so intermediate exponents stay
    proportional to their subtree.
    """
    if not roots:
        raise ValueError("At least one root is required")

    layer: List[Tuple[int, int]] = list(roots)
    while len(layer) > 1:
        merged = []
        for i in range(0, len(layer) - 1, 2):
            (x1, w1), (x2, w2) = layer[i], layer[i + 1]
            merged.append((x1 * x2, shamir_trick(group, w1, w2, x1, x2)))
        if len(layer) % 2:
            merged.append(layer[-1])
        layer = merged
    return layer[0]


def coprime_coefficients(s: int, x: int) -> Tuple[int, int]:
    """
    Bezout coefficients (a, b) with a*s + b*x = 1 and 0 <= a < x.

    Multiples of x are folded out of a and into b.

    Raises:
        NotCoprime: If x divides s (x is a member)
    """
    gcd, a, b = extended_gcd(s, x)
    if gcd != 1:
        raise NotCoprime("Prime representative is not coprime to the member product")

    k, a = divmod(a, x)
    return a, b + k * s


def prove_coprime(group: HiddenOrderGroup, g: int, s: int, x: int) -> Tuple[int, int]:
    """
    Prove gcd(x, s) = 1 relative to A = g^s.

    Returns (a, d = g^b) for the coefficients of coprime_coefficients(),
    so that A^a * d^x == g.
    """
    a, b = coprime_coefficients(s, x)
    return a, group.power(g, b)


def verify_coprime(group: HiddenOrderGroup, g: int, acc: int, x: int, a: int, d: int) -> bool:
    """Check acc^a * d^x == g."""
    lhs = group.multiply(group.power(acc, a), group.power(d, x))
    return group.equals(lhs, g)


def normalize_coprime(group: HiddenOrderGroup, acc: int, x: int, a: int, d: int) -> Tuple[int, int]:
    """Reduce a into [0, x) keeping acc^a * d^x unchanged."""
    k, a = divmod(a, x)
    if k:
        d = group.multiply(d, group.power(acc, k))
    return a, d


def combine_coprime(
    group: HiddenOrderGroup,
    acc: int,
    first: Tuple[int, int, int],
    second: Tuple[int, int, int],
) -> Tuple[int, int, int]:
    """
    Merge two coprimality proofs against the same acc.

    From (x1, a1, d1) and (x2, a2, d2) with acc^ai * di^xi == g, produce
    (x1*x2, a, d) with acc^a * d^(x1*x2) == g and 0 <= a < x1*x2.

    Raises:
        NotCoprime: If x1 and x2 share a factor
    """
    x1, a1, d1 = first
    x2, a2, d2 = second
    alpha, beta = bezout(x1, x2)

    x = x1 * x2
    a = a1 * beta * x2 + a2 * alpha * x1
    d = group.multiply(group.power(d1, beta), group.power(d2, alpha))
    a, d = normalize_coprime(group, acc, x, a, d)
    return x, a, d


def aggregate_coprime(
    group: HiddenOrderGroup, acc: int, proofs: Sequence[Tuple[int, int, int]]
) -> Tuple[int, int, int]:
    """Merge many (x_i, a_i, d_i) proofs in a balanced tree."""
    if not proofs:
        raise ValueError("At least one proof is required")

    layer = list(proofs)
    while len(layer) > 1:
        merged = []
        for i in range(0, len(layer) - 1, 2):
            merged.append(combine_coprime(group, acc, layer[i], layer[i + 1]))
        if len(layer) % 2:
            merged.append(layer[-1])
        layer = merged
    return layer[0]
