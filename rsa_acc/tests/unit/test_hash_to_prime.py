"""
Unit Tests for Hash-to-Prime Module

Tests the deterministic mapping of bytes to prime representatives.
"""

import pytest

from rsa_acc.hash_to_prime import (
    _mr_is_probable_prime,
    challenge_prime,
    element_prime,
    hash_to_prime,
    is_probable_prime,
)


class TestHashToPrime:
    """Test hash-to-prime conversion."""

    def test_returns_prime_of_requested_width(self):
        prime = hash_to_prime(b"test_key_1")
        assert prime.bit_length() == 256
        assert _mr_is_probable_prime(prime)
        assert prime % 2 == 1

    def test_deterministic(self):
        assert hash_to_prime(b"device") == hash_to_prime(b"device")

    def test_different_inputs_different_primes(self):
        inputs = [b"a" * 32, b"\x00" * 32, b"\xff" * 32, b"device-1", b"device-2"]
        primes = {hash_to_prime(x) for x in inputs}
        assert len(primes) == len(inputs)

    def test_empty_input_allowed(self):
        assert hash_to_prime(b"").bit_length() == 256

    def test_bytearray_accepted(self):
        assert hash_to_prime(bytearray(b"abc")) == hash_to_prime(b"abc")

    def test_custom_bits(self):
        prime = hash_to_prime(b"abc", bits=128)
        assert prime.bit_length() == 128
        assert _mr_is_probable_prime(prime)

    def test_non_bytes_rejected(self):
        with pytest.raises(TypeError, match="must be bytes"):
            hash_to_prime("not bytes")

    def test_small_bits_rejected(self):
        with pytest.raises(ValueError, match=">= 64"):
            hash_to_prime(b"abc", bits=32)

    def test_element_prime_follows_settings(self, monkeypatch):
        monkeypatch.setenv("RSA_ACC_PRIME_BITS", "128")
        assert element_prime(b"abc").bit_length() == 128
        assert element_prime(b"abc") == hash_to_prime(b"abc", bits=128)

    def test_challenge_prime_width(self):
        assert challenge_prime(b"transcript").bit_length() == 128


class TestMillerRabin:
    """Test the deterministic primality test."""

    @pytest.mark.parametrize("n", [2, 3, 5, 53, 59, 7919, 2**61 - 1, 2**127 - 1])
    def test_primes(self, n):
        assert _mr_is_probable_prime(n)

    @pytest.mark.parametrize("n", [0, 1, 4, 187, 561, 7917, 2**61 + 1, (2**61 - 1) * (2**31 - 1)])
    def test_composites(self, n):
        assert not _mr_is_probable_prime(n)

    def test_configured_rounds(self, monkeypatch):
        monkeypatch.setenv("RSA_ACC_MILLER_RABIN_ROUNDS", "8")
        assert is_probable_prime(2**89 - 1)
        assert not is_probable_prime(2**89 + 1)
