"""
Hidden-Order Group Arithmetic

Arithmetic in Z_N^* for an RSA modulus N whose factorization is unknown
to every party. All results are reduced into [0, N).
"""

import logging
from typing import Dict, Iterable, List, Sequence, Tuple

from .errors import NotInvertible

logger = logging.getLogger(__name__)

# Fixed-base tables use 4-bit windows so exponents can be split on hex digits.
_WINDOW_BITS = 4
_WINDOW_MASK = (1 << _WINDOW_BITS) - 1


class HiddenOrderGroup:
    """
    Multiplicative group of integers modulo N.

    Exponentiation goes through the builtin pow(), which is a
    square-and-multiply method over the binary (windowed) expansion of
    the exponent. Negative exponents are served through the modular
    inverse of the base.
    """

    def __init__(self, modulus: int):
        if modulus < 3:
            raise ValueError("Modulus must be at least 3")
        self.modulus = modulus

    def __repr__(self) -> str:
        return f"HiddenOrderGroup(<{self.modulus.bit_length()}-bit modulus>)"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, HiddenOrderGroup) and other.modulus == self.modulus

    def __hash__(self) -> int:
        return hash(self.modulus)

    @property
    def byte_length(self) -> int:
        """Width of a fixed-size group element encoding."""
        return (self.modulus.bit_length() + 7) // 8

    def reduce(self, x: int) -> int:
        return x % self.modulus

    def contains(self, x: int) -> bool:
        """True if x is a reduced representative in [0, N)."""
        return 0 <= x < self.modulus

    def multiply(self, x: int, y: int) -> int:
        return (x * y) % self.modulus

    def equals(self, x: int, y: int) -> bool:
        return x % self.modulus == y % self.modulus

    def inverse(self, x: int) -> int:
        """
        Modular inverse of x.

        Raises:
            NotInvertible: If gcd(x, N) != 1. Such an x reveals a factor of N.
        """
        try:
            return pow(x, -1, self.modulus)
        except ValueError:
            logger.critical(
                "Element is not invertible modulo N; the hidden order may be compromised"
            )
            raise NotInvertible(
                "Group element shares a nontrivial factor with the modulus",
                element=x % self.modulus,
            ) from None

    def power(self, x: int, e: int) -> int:
        """
        Compute x^e mod N for any integer e.

        Args:
            x: Base
            e: Exponent; negative values use the inverse of x

        Returns:
            int: x^e reduced into [0, N)

        Raises:
            NotInvertible: If e < 0 and x is not invertible

        Example:
            >>> G = HiddenOrderGroup(187)
            >>> G.power(3, 5)
            56
        """
        if e < 0:
            return pow(self.inverse(x), -e, self.modulus)
        return pow(x, e, self.modulus)

    def multi_power(self, terms: Iterable[Tuple[int, int]]) -> int:
        """Compute the product of x_i^e_i over (x_i, e_i) pairs."""
        result = 1 % self.modulus
        for base, exponent in terms:
            result = (result * self.power(base, exponent)) % self.modulus
        return result

    def power_many(self, base: int, exponents: Sequence[int]) -> List[int]:
        """
        Raise one base to many exponents, sharing precomputation.

        Builds a table of base^(16^i) once and evaluates every exponent with
        Yao's method on its hex digits, so each extra exponent costs roughly
        a quarter of a full square-and-multiply.

        Args:
            base: Shared base
            exponents: Exponents (negative values use the inverse of base)

        Returns:
            List[int]: base^e for each exponent, in input order
        """
        exponents = list(exponents)
        if not exponents:
            return []

        top_bits = max(abs(e).bit_length() for e in exponents)
        digits = max(1, -(-top_bits // _WINDOW_BITS))

        tables: Dict[int, List[int]] = {}
        results = []
        for e in exponents:
            sign = -1 if e < 0 else 1
            if sign not in tables:
                table_base = base if sign > 0 else self.inverse(base)
                tables[sign] = self._fixed_base_table(table_base, digits)
            results.append(self._yao(tables[sign], abs(e)))
        return results

    def _fixed_base_table(self, base: int, digits: int) -> List[int]:
        table = [base % self.modulus]
        for _ in range(digits - 1):
            table.append(pow(table[-1], 1 << _WINDOW_BITS, self.modulus))
        return table

    def _yao(self, table: List[int], e: int) -> int:
        N = self.modulus
        buckets = [1] * (_WINDOW_MASK + 1)
        for i, ch in enumerate(reversed(format(e, "x"))):
            digit = int(ch, 16)
            if digit:
                buckets[digit] = (buckets[digit] * table[i]) % N

        # prod(B_d^d) == prod over d of (prod_{k >= d} B_k)
        result = running = 1
        for digit in range(_WINDOW_MASK, 0, -1):
            running = (running * buckets[digit]) % N
            result = (result * running) % N
        return result % N
