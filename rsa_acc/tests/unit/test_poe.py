"""
Unit Tests for Proof of Exponentiation
"""

import pytest

from rsa_acc.hash_to_prime import challenge_prime
from rsa_acc.models import PoEProof
from rsa_acc.poe import _serialize_for_hash, derive_challenge, prove_exponentiation, verify_exponentiation


class TestProofOfExponentiation:
    """Test Wesolowski PoE prove/verify."""

    @pytest.fixture
    def statement(self, demo_params):
        group = demo_params.group
        base = 12345
        exponent = 3**500 * 2**100 + 7
        return group, base, exponent, pow(base, exponent, demo_params.modulus)

    def test_valid_proof(self, statement):
        group, base, exponent, result = statement
        proof = prove_exponentiation(group, base, exponent, result)
        assert verify_exponentiation(group, base, exponent, result, proof)

    def test_small_exponent(self, toy_params):
        group = toy_params.group
        proof = prove_exponentiation(group, 3, 35, pow(3, 35, 187))
        assert proof.remainder == 35
        assert verify_exponentiation(group, 3, 35, pow(3, 35, 187), proof)

    def test_wrong_result_rejected(self, statement):
        group, base, exponent, result = statement
        proof = prove_exponentiation(group, base, exponent, result)
        assert not verify_exponentiation(group, base, exponent, group.multiply(result, 2), proof)

    def test_wrong_exponent_rejected(self, statement):
        group, base, exponent, result = statement
        proof = prove_exponentiation(group, base, exponent, result)
        assert not verify_exponentiation(group, base, exponent + 2, result, proof)

    def test_tampered_proof_rejected(self, statement):
        group, base, exponent, result = statement
        proof = prove_exponentiation(group, base, exponent, result)

        bumped_q = PoEProof(quotient_term=group.multiply(proof.quotient_term, 2), remainder=proof.remainder)
        assert not verify_exponentiation(group, base, exponent, result, bumped_q)

        bumped_r = PoEProof(quotient_term=proof.quotient_term, remainder=proof.remainder + 1)
        assert not verify_exponentiation(group, base, exponent, result, bumped_r)

    def test_false_statement_proof_fails(self, statement):
        """A prover claiming a wrong result cannot produce a passing proof."""
        group, base, exponent, result = statement
        wrong = group.multiply(result, 3)
        proof = prove_exponentiation(group, base, exponent, wrong)
        assert not verify_exponentiation(group, base, exponent, wrong, proof)

    def test_quotient_out_of_range(self, statement):
        group, base, exponent, result = statement
        proof = prove_exponentiation(group, base, exponent, result)
        oversized = PoEProof(quotient_term=proof.quotient_term + group.modulus, remainder=proof.remainder)
        assert not verify_exponentiation(group, base, exponent, result, oversized)

    def test_negative_exponent(self, statement):
        group, base, _, result = statement
        with pytest.raises(ValueError, match="non-negative"):
            prove_exponentiation(group, base, -5, result)
        assert not verify_exponentiation(group, base, -5, result, PoEProof(quotient_term=1, remainder=0))

    def test_cofactors(self, demo_params):
        group = demo_params.group
        N = demo_params.modulus
        e1, e2 = 3**300, 5**200
        result = (pow(7, e1, N) * pow(11, e2, N)) % N

        proof = prove_exponentiation(group, 7, e1, result, cofactors=[(11, e2)])
        assert verify_exponentiation(group, 7, e1, result, proof, cofactors=[(11, e2)])
        assert not verify_exponentiation(group, 7, e1, result, proof)
        assert not verify_exponentiation(group, 7, e1, result, proof, cofactors=[(11, e2 + 1)])

    def test_challenge_binds_inputs(self, demo_params):
        group = demo_params.group
        l1 = derive_challenge(group, 2, 100, 5)
        assert l1 == derive_challenge(group, 2, 100, 5)
        assert l1 != derive_challenge(group, 2, 101, 5)
        assert l1 != derive_challenge(group, 2, 100, 5, cofactors=[(3, 1)])
        assert l1.bit_length() == 128

    def test_challenge_is_domain_separated(self, demo_params):
        group = demo_params.group
        values = [group.modulus, 2, 100, 5, 0]
        transcript = _serialize_for_hash(values)
        assert transcript.startswith(b"rsa-acc/poe/v1")
        assert derive_challenge(group, 2, 100, 5) == challenge_prime(transcript)
        assert derive_challenge(group, 2, 100, 5) != challenge_prime(transcript[len(b"rsa-acc/poe/v1"):])
