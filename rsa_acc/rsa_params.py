"""
RSA Parameters for Accumulator

Loads and validates the public modulus N and base g. Generating N is the
job of an external setup ceremony; this module only consumes it.
"""

import json
import logging
import math
from pathlib import Path
from typing import Optional, Union

from .config import get_settings
from .errors import InvalidModulus
from .hash_to_prime import _mr_is_probable_prime
from .models import PublicParams

logger = logging.getLogger(__name__)

# RSA-2048 challenge number. Its factors are believed to be unknown to anyone.
# https://en.wikipedia.org/wiki/RSA_numbers#RSA-2048
RSA2048 = int(
    "25195908475657893494027183240048398571429282126204032027777137836043662020707595556264018525880784406918290641249515082189298559149176184502808489120072844992687392807287776735971418347270261896375014971824691165077613379859095700097330459748808428401797429100642458691817195118746121515172654632282216869987549182422433637259085141865462043576798423387184774447920739934236584823824281198163815010674810451660377306056201619676256133844143603833904414952634432190114657544454178424020924616515723350778707749817125772467962926386356373289912154831438167899885040445364023527381951378636564391212010397122822120720357"
)


def validate_params(N: int, g: int, min_bits: Optional[int] = None) -> None:
    """
    Validate RSA parameters for accumulator operations.

    Args:
        N: RSA modulus
        g: Generator base
        min_bits: Minimum bit length of N (default: settings.min_modulus_bits)

    Raises:
        InvalidModulus: If parameters are invalid
    """
    if min_bits is None:
        min_bits = get_settings().min_modulus_bits

    if N <= 2:
        raise InvalidModulus("RSA modulus N must be greater than 2")

    if N % 2 == 0:
        raise InvalidModulus("RSA modulus N must be odd")

    if N.bit_length() < min_bits:
        raise InvalidModulus(f"RSA modulus N must be at least {min_bits} bits")

    # A prime or a perfect square has an easily computed group order
    if _mr_is_probable_prime(N):
        raise InvalidModulus("RSA modulus N must be composite")

    if math.isqrt(N) ** 2 == N:
        raise InvalidModulus("RSA modulus N must not be a perfect square")

    if not (1 < g < N - 1):
        raise InvalidModulus("Generator g must lie in (1, N - 1)")

    if math.gcd(N, g) != 1:
        logger.critical("Generator shares a factor with N; the modulus is compromised")
        raise InvalidModulus("RSA modulus N and generator g must be coprime")


def create_params(N: int, g: int, min_bits: Optional[int] = None) -> PublicParams:
    """Validate (N, g) and wrap them as PublicParams."""
    validate_params(N, g, min_bits=min_bits)
    return PublicParams(modulus=N, generator=g)


def load_params(path: Optional[Union[str, Path]] = None) -> PublicParams:
    """
    Load RSA parameters for accumulator operations.

    Reads a JSON file with hex strings "N" and "g". Falls back to the demo
    parameters when the file does not exist.

    Args:
        path: params.json location (default: settings.params_file, then
            params.json next to this module)

    Returns:
        PublicParams: Validated (N, g)

    Raises:
        InvalidModulus: If parameters are invalid or malformed
    """
    if path is None:
        path = get_settings().params_file or Path(__file__).parent / "params.json"
    params_file = Path(path)

    try:
        with open(params_file, "r") as f:
            params = json.load(f)

        N_int = int(params["N"], 16)
        g_int = int(params["g"], 16)

    except FileNotFoundError:
        logger.info(f"No parameters file at {params_file}, using demo parameters")
        return generate_demo_params()
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        raise InvalidModulus(f"Invalid parameters file format: {e}")

    params = create_params(N_int, g_int)
    logger.info(f"Loaded RSA parameters: N={N_int.bit_length()} bits, g={g_int}")
    return params


def save_params(params: PublicParams, path: Union[str, Path]) -> None:
    """Write parameters as a params.json file."""
    payload = {
        "N": hex(params.modulus),
        "g": hex(params.generator),
        "description": f"{params.modulus.bit_length()}-bit RSA accumulator parameters",
    }
    with open(path, "w") as f:
        json.dump(payload, f, indent=2)


def generate_demo_params() -> PublicParams:
    """
    Demo parameters: the RSA-2048 challenge modulus with g = 4.

    g = 2^2 keeps the base in the quadratic-residue subgroup.
    """
    return create_params(RSA2048, 4, min_bits=2048)


def generate_toy_params(N: int = 187, g: int = 3) -> PublicParams:
    """
    Small toy parameters for unit testing. N = 187 = 11 * 17 is NOT secure.
    """
    return create_params(N, g, min_bits=0)
