"""
RSA Modulus Generator for Accumulator Testing

Stands in for the external setup ceremony during development: asks the
cryptography library for a fresh RSA key, keeps only the public modulus,
and drops the factors. Also generates realistic test elements.
"""

import logging
from typing import List, Tuple

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519, rsa

from .accumulator import setup
from .models import AccumulatorState, PublicParams
from .rsa_params import create_params

logger = logging.getLogger(__name__)


def generate_modulus(key_size: int = 2048) -> int:
    """
    Generate an RSA modulus whose factors are immediately discarded.

    Args:
        key_size: Modulus size in bits (the library requires >= 1024)

    Returns:
        int: N = p * q
    """
    private_key = rsa.generate_private_key(
        public_exponent=65537,
        key_size=key_size,
    )
    N = private_key.public_key().public_numbers().n
    del private_key
    return N


def generate_params(key_size: int = 2048) -> PublicParams:
    """Fresh (N, g) with g = 4 in the quadratic-residue subgroup."""
    return create_params(generate_modulus(key_size), 4, min_bits=key_size)


def generate_setup(security_bits: int = 2048) -> Tuple[int, int, AccumulatorState]:
    """
    Setup(securityParameterBits) -> (N, g, empty accumulator state).

    For development only. Production deployments load (N, g) produced by a
    trusted ceremony through rsa_params.load_params().
    """
    params = generate_params(security_bits)
    logger.info(f"Generated development modulus of {params.modulus.bit_length()} bits")
    return params.modulus, params.generator, setup(params)


def generate_test_elements(count: int = 5) -> List[bytes]:
    """
    Generate accumulator elements as raw Ed25519 public keys.

    Args:
        count: Number of elements to generate

    Returns:
        List[bytes]: 32-byte public keys
    """
    elements = []
    for _ in range(count):
        public_key = ed25519.Ed25519PrivateKey.generate().public_key()
        elements.append(
            public_key.public_bytes(
                encoding=serialization.Encoding.Raw,
                format=serialization.PublicFormat.Raw,
            )
        )
    return elements
