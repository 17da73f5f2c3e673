"""
Integration Test for the Full Accumulator Flow

Simulates a publisher with a registry, holders keeping witnesses fresh from
published deltas, and a verifier that only ever sees encoded bytes.
"""

import pytest

from rsa_acc.accumulator import (
    add,
    delete,
    prove_batch_add,
    prove_batch_delete,
    setup,
    verify_batch_add,
    verify_batch_delete,
)
from rsa_acc.config import get_settings
from rsa_acc.encoding import (
    decode_aggregated,
    decode_membership_witness,
    decode_non_membership_witness,
    decode_state,
    encode_aggregated,
    encode_membership_witness,
    encode_non_membership_witness,
    encode_state,
)
from rsa_acc.registry import AccumulatorRegistry
from rsa_acc.rsa_key_generator import generate_test_elements
from rsa_acc.verifier import verify, verify_many
from rsa_acc.witness_refresh import refresh_witnesses


class TestFullAccumulatorFlow:
    """End-to-end lifecycle over the RSA-2048 modulus."""

    @pytest.fixture
    def devices(self):
        return generate_test_elements(8)

    def test_publisher_holder_verifier(self, demo_params, devices):
        registry = AccumulatorRegistry(demo_params)

        # Publisher enrols the first five devices and hands out witnesses
        held = dict(zip(devices[:5], registry.add(devices[:5])))
        published = encode_state(registry.state)

        # Verifier checks a holder's witness from bytes alone
        state = decode_state(demo_params, published)
        wire = encode_membership_witness(demo_params, held[devices[0]])
        assert verify(state, devices[0], decode_membership_witness(demo_params, wire))

        # More devices join, two are revoked
        registry.add(devices[5:])
        registry.delete(devices[1:3])
        state = decode_state(demo_params, encode_state(registry.state))
        assert state.size == 6

        # Holders catch up from the delta log
        survivors = [devices[0], devices[3], devices[4]]
        refreshed = refresh_witnesses(
            demo_params, [held[d] for d in survivors], registry.deltas_since(1)
        )
        assert verify_many(state, survivors, refreshed) == [True, True, True]

        # Revoked devices can no longer prove membership but can prove absence
        assert not verify(state, devices[1], held[devices[1]], check_version=False)
        absent = registry.prove_non_membership(devices[1])
        wire = encode_non_membership_witness(demo_params, absent)
        assert verify(state, devices[1], decode_non_membership_witness(demo_params, wire))

        # One aggregated proof covers every surviving device
        aggregated = registry.prove_aggregated_membership(survivors + devices[5:])
        wire = encode_aggregated(demo_params, aggregated)
        assert verify(state, survivors + devices[5:], decode_aggregated(demo_params, wire))

        revoked = registry.prove_aggregated_non_membership(devices[1:3])
        assert verify(state, devices[1:3], revoked)
        assert not verify(state, devices[1:4], revoked)

    def test_certified_batch_updates(self, demo_params, devices):
        s0 = setup(demo_params)
        s1, witnesses = add(s0, devices)
        add_proof = prove_batch_add(s0, s1, devices)
        assert verify_batch_add(s0, s1, devices, add_proof)

        s2 = delete(s1, devices[:3], witnesses[:3])
        delete_proof = prove_batch_delete(s1, s2, devices[:3])
        assert verify_batch_delete(s1, s2, devices[:3], delete_proof)

        # Certificates do not transfer to other transitions
        assert not verify_batch_add(s1, s2, devices[:3], delete_proof)
        assert not verify_batch_delete(s0, s2, devices[:3], delete_proof)

    def test_parallel_batch_paths(self, demo_params, devices, monkeypatch):
        """Deletion checks give the same answer in worker processes."""
        monkeypatch.setenv("RSA_ACC_MAX_WORKERS", "2")
        monkeypatch.setenv("RSA_ACC_PARALLEL_THRESHOLD", "1")
        get_settings.cache_clear()

        state, witnesses = add(setup(demo_params), devices)
        smaller = delete(state, devices[:4], witnesses[:4])

        sequential = setup(demo_params)
        sequential, _ = add(sequential, devices[4:])
        assert smaller.value == sequential.value
