"""
Unit Tests for the Development Modulus Generator
"""

import rsa_acc
from rsa_acc.accumulator import add, setup, verify_membership
from rsa_acc.rsa_key_generator import generate_params, generate_setup, generate_test_elements


class TestKeyGenerator:
    """Test fresh modulus generation and test elements."""

    def test_generate_setup(self):
        N, g, state = generate_setup(1024)
        assert N.bit_length() == 1024
        assert g == 4
        assert (state.value, state.size, state.version) == (4, 0, 0)
        assert state.params.modulus == N

    def test_generated_params_usable(self):
        params = generate_params(1024)
        state, witnesses = add(setup(params), [b"a", b"b"])
        assert verify_membership(state, b"a", witnesses[0])

    def test_test_elements(self):
        elements = generate_test_elements(4)
        assert len(elements) == 4
        assert all(len(e) == 32 for e in elements)
        assert len(set(elements)) == 4


class TestPackageExports:
    """Setup and the wire format are reachable from the package root."""

    def test_setup_exported(self):
        assert rsa_acc.generate_setup is generate_setup
        assert "generate_setup" in rsa_acc.__all__

    def test_encodings_exported(self, demo_params):
        state = rsa_acc.setup(demo_params)
        assert rsa_acc.decode_state(demo_params, rsa_acc.encode_state(state)) == state
        for name in ("encode_membership_witness", "decode_aggregated", "encoded_sizes"):
            assert name in rsa_acc.__all__
