"""
Unit Tests for Bezout and Coprimality Proofs
"""

import math

import pytest

from rsa_acc.errors import NotCoprime
from rsa_acc.group import HiddenOrderGroup
from rsa_acc.pokcr import (
    aggregate_coprime,
    aggregate_roots,
    bezout,
    combine_coprime,
    coprime_coefficients,
    extended_gcd,
    normalize_coprime,
    prove_coprime,
    shamir_trick,
    verify_coprime,
)


class TestExtendedGcd:
    """Test the iterative extended Euclidean algorithm."""

    @pytest.mark.parametrize("a,b", [(35, 15), (240, 46), (17, 5), (0, 7), (7, 0), (2**521 - 1, 2**127 - 1)])
    def test_identity(self, a, b):
        gcd, x, y = extended_gcd(a, b)
        assert a * x + b * y == gcd
        assert gcd == math.gcd(a, b)

    def test_negative_rejected(self):
        with pytest.raises(ValueError, match="non-negative"):
            extended_gcd(-3, 5)

    def test_bezout(self):
        a, b = bezout(5, 7)
        assert 5 * a + 7 * b == 1

    def test_bezout_not_coprime(self):
        with pytest.raises(NotCoprime):
            bezout(6, 9)


class TestShamirTrick:
    """Test merging roots of the same value."""

    @pytest.fixture
    def group(self):
        return HiddenOrderGroup(187)

    def test_two_roots(self, group):
        # A = 3^(5*7*13); w1 is a 5th root, w2 a 7th root
        A = pow(3, 5 * 7 * 13, 187)
        w1 = pow(3, 7 * 13, 187)
        w2 = pow(3, 5 * 13, 187)
        w = shamir_trick(group, w1, w2, 5, 7)
        assert pow(w, 35, 187) == A

    def test_shared_factor_rejected(self, group):
        with pytest.raises(NotCoprime):
            shamir_trick(group, 3, 3, 5, 5)

    def test_aggregate_roots(self, demo_params):
        group = demo_params.group
        N, g = demo_params.modulus, demo_params.generator
        primes = [101, 103, 107, 109, 113]
        total = 101 * 103 * 107 * 109 * 113
        A = pow(g, total, N)
        roots = [(p, pow(g, total // p, N)) for p in primes]

        x_star, W = aggregate_roots(group, roots)
        assert x_star == total
        assert pow(W, x_star, N) == A
        assert W == g

    def test_aggregate_roots_empty(self, toy_params):
        with pytest.raises(ValueError):
            aggregate_roots(toy_params.group, [])


class TestCoprimalityProofs:
    """Test non-membership style proofs g = acc^a * d^x."""

    def test_coefficients_normalised(self):
        a, b = coprime_coefficients(5 * 13, 7)
        assert 0 <= a < 7
        assert a * 65 + b * 7 == 1

    def test_member_rejected(self):
        with pytest.raises(NotCoprime):
            coprime_coefficients(5 * 7, 7)

    def test_prove_and_verify(self, demo_params):
        group = demo_params.group
        g = demo_params.generator
        s = 101 * 103
        acc = pow(g, s, demo_params.modulus)

        a, d = prove_coprime(group, g, s, 107)
        assert verify_coprime(group, g, acc, 107, a, d)
        assert not verify_coprime(group, g, acc, 109, a, d)

    def test_normalize_keeps_equation(self, demo_params):
        group = demo_params.group
        g = demo_params.generator
        acc = pow(g, 101, demo_params.modulus)
        a, d = prove_coprime(group, g, 101, 103)

        a2, d2 = normalize_coprime(group, acc, 103, a + 5 * 103, group.multiply(d, group.power(acc, -5)))
        assert (a2, d2) == (a, d)
        assert verify_coprime(group, g, acc, 103, a2, d2)

    def test_combine_and_aggregate(self, demo_params):
        group = demo_params.group
        g = demo_params.generator
        s = 101 * 103
        acc = pow(g, s, demo_params.modulus)

        proofs = [(x,) + prove_coprime(group, g, s, x) for x in (107, 109, 113)]
        x, a, d = combine_coprime(group, acc, proofs[0], proofs[1])
        assert x == 107 * 109
        assert 0 <= a < x
        assert verify_coprime(group, g, acc, x, a, d)

        x, a, d = aggregate_coprime(group, acc, proofs)
        assert x == 107 * 109 * 113
        assert verify_coprime(group, g, acc, x, a, d)
