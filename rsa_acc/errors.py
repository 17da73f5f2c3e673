"""
Accumulator Error Kinds

Exception hierarchy for the RSA accumulator. Verification failures are
not exceptions: every verify function returns a plain bool.
"""


class AccumulatorError(Exception):
    """Base class for all accumulator errors."""


class InvalidModulus(AccumulatorError, ValueError):
    """Public parameters (N, g) failed sanity checks. Fatal."""


class NotInvertible(AccumulatorError, ArithmeticError):
    """
    A group element shares a nontrivial factor with N.

    Finding such an element factors N, so this is treated as a possible
    compromise of the hidden order and must be escalated, never retried.
    """

    def __init__(self, message: str, element: int = 0):
        super().__init__(message)
        self.element = element


class AlreadyMember(AccumulatorError):
    """An element being added is already committed."""


class ElementNotMember(AccumulatorError):
    """An element being deleted is not committed or its witness is invalid."""


class NotCoprime(AccumulatorError):
    """Two primes expected to be coprime are not (hash collision with a member)."""


class ProofMalformed(AccumulatorError, ValueError):
    """An externally supplied encoding failed size or format checks."""


class PrimeSearchExhausted(AccumulatorError, ValueError):
    """Hash-to-prime ran off the end of its bit range without finding a prime."""


class InconsistentState(AccumulatorError, ValueError):
    """A caller-supplied member set does not reproduce the snapshot value."""
