"""
Hash-to-Prime Conversion for RSA Accumulators

Deterministically maps arbitrary bytes to prime representatives used as
accumulator exponents, and derives Fiat-Shamir challenge primes.
"""

import hashlib
import logging
from typing import Optional

from .config import get_settings
from .errors import PrimeSearchExhausted

logger = logging.getLogger(__name__)

_SMALL_PRIMES = (2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47, 53)


def _mr_is_probable_prime(n: int, rounds: int = 64) -> bool:
    """
    Deterministic Miller-Rabin primality test.

    Witnesses are derived by hashing n, so every implementation that follows
    the same derivation agrees on every candidate.
    """
    if n < 2:
        return False
    for p in _SMALL_PRIMES:
        if n == p:
            return True
        if n % p == 0:
            return False
    d, s = n - 1, 0
    while d % 2 == 0:
        d //= 2
        s += 1
    seed = n.to_bytes((n.bit_length() + 7) // 8, "big")
    for i in range(rounds):
        h = hashlib.sha256(seed + i.to_bytes(4, "big")).digest()
        a = 2 + (int.from_bytes(h, "big") % (n - 3))
        x = pow(a, d, n)
        if x in (1, n - 1):
            continue
        for _ in range(s - 1):
            x = (x * x) % n
            if x == n - 1:
                break
        else:
            return False
    return True


def is_probable_prime(n: int, rounds: Optional[int] = None) -> bool:
    """Miller-Rabin with the configured number of rounds."""
    if rounds is None:
        rounds = get_settings().miller_rabin_rounds
    return _mr_is_probable_prime(n, rounds)


def _expand_digest(data: bytes, bits: int) -> int:
    """SHA-256 in counter mode, truncated to exactly `bits` bits."""
    n_bytes = (bits + 7) // 8
    out = b""
    counter = 0
    while len(out) < n_bytes:
        out += hashlib.sha256(counter.to_bytes(4, "big") + data).digest()
        counter += 1
    value = int.from_bytes(out[:n_bytes], "big")
    return value >> (n_bytes * 8 - bits)


def hash_to_prime(data: bytes, *, bits: Optional[int] = None, mr_rounds: Optional[int] = None) -> int:
    """
    Convert bytes to a prime number using SHA-256 and Miller-Rabin.

    The digest is stretched to `bits` bits, its top and bottom bits are set,
    and the search steps upward by 2 until a probable prime is found. The
    search covers the whole `bits`-wide range above the seed, so it only
    fails when that range is exhausted.

    Args:
        data: The input bytes to convert (an element or a transcript)
        bits: Bit length of the prime (default: settings.prime_bits)
        mr_rounds: Number of Miller-Rabin rounds (default: settings.miller_rabin_rounds)

    Returns:
        int: A prime of exactly `bits` bits derived from the input

    Raises:
        TypeError: If data is not bytes
        ValueError: If bits is below 64
        PrimeSearchExhausted: If no prime remains above the seed

    Example:
        >>> prime = hash_to_prime(b"\\x12\\x34\\x56\\x78" * 8)
        >>> assert prime.bit_length() == 256
    """
    if not isinstance(data, (bytes, bytearray)):
        raise TypeError("data must be bytes")

    settings = get_settings()
    if bits is None:
        bits = settings.prime_bits
    if mr_rounds is None:
        mr_rounds = settings.miller_rabin_rounds
    if bits < 64:
        raise ValueError("bits should be >= 64")

    cand = _expand_digest(bytes(data), bits) | (1 << (bits - 1)) | 1

    while cand.bit_length() == bits:
        if _mr_is_probable_prime(cand, mr_rounds):
            return cand
        cand += 2

    raise PrimeSearchExhausted(f"No {bits}-bit prime above the seed")


def element_prime(element: bytes) -> int:
    """Prime representative of an accumulator element."""
    return hash_to_prime(element)


def challenge_prime(transcript: bytes) -> int:
    """Fiat-Shamir challenge prime of settings.challenge_bits bits."""
    return hash_to_prime(transcript, bits=get_settings().challenge_bits)


def _test_hash_to_prime() -> None:
    """Test the hash_to_prime function with various inputs."""
    test_cases = [
        b"test_key_1",
        b"a" * 32,
        b"\x00" * 32,
        b"\xff" * 32,
        b"",
    ]

    print("Testing hash_to_prime function:")
    for i, test_input in enumerate(test_cases):
        prime = hash_to_prime(test_input)
        print(
            f"  Test {i+1}: {test_input[:16]!r}... -> Prime: {prime} ({prime.bit_length()} bits)"
        )
        assert _mr_is_probable_prime(prime), f"Result {prime} is not prime!"

    print("\nTesting error cases:")
    try:
        hash_to_prime("not bytes")
        print("  ERROR: Should have raised TypeError")
    except TypeError:
        print("  ✓ Correctly raised TypeError for non-bytes input")


if __name__ == "__main__":
    _test_hash_to_prime()
