"""
Accumulator Registry

Stateful single-writer facade over the pure accumulator functions. Tracks
the member table (element -> prime) and the history of committed deltas,
so it can issue fresh witnesses and let holders catch up on stale ones.

Commits are serialised by a lock. Readers only ever see whole immutable
snapshots.
"""

import logging
import threading
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .accumulator import (
    add_batch,
    delete_batch,
    distinct_primes,
    prove_membership,
    prove_non_membership,
    prove_non_membership_many,
    setup,
)
from .aggregation import aggregate_membership, aggregate_non_membership
from .config import get_settings
from .errors import AlreadyMember, ElementNotMember
from .models import (
    AccumulatorState,
    AggregatedWitness,
    MembershipWitness,
    NonMembershipWitness,
    PublicParams,
    UpdateDelta,
    Witness,
)
from .rsa_params import load_params
from .witness_refresh import batch_refresh_witnesses, refresh_witness

logger = logging.getLogger(__name__)


class AccumulatorRegistry:
    """Registry of accumulated elements with witness issuance."""

    def __init__(self, params: Optional[PublicParams] = None, duplicate_policy: Optional[str] = None):
        self.params = params if params is not None else load_params()
        self.duplicate_policy = (duplicate_policy or get_settings().duplicate_policy).lower()
        if self.duplicate_policy not in ("reject", "ignore"):
            raise ValueError('duplicate_policy must be "reject" or "ignore"')

        self._lock = threading.Lock()
        self._state = setup(self.params)
        self._members: Dict[bytes, int] = {}
        self._history: List[UpdateDelta] = []
        logger.info(
            f"Registry ready: N={self.params.modulus.bit_length()} bits, "
            f"duplicate policy {self.duplicate_policy}"
        )

    @property
    def state(self) -> AccumulatorState:
        return self._state

    @property
    def size(self) -> int:
        return self._state.size

    def __len__(self) -> int:
        return self._state.size

    def contains(self, element: bytes) -> bool:
        return bytes(element) in self._members

    __contains__ = contains

    def members(self) -> List[bytes]:
        with self._lock:
            return list(self._members)

    def _snapshot(self) -> Tuple[AccumulatorState, List[bytes]]:
        with self._lock:
            return self._state, list(self._members)

    def _commit(self, new_state: AccumulatorState, added=(), removed=()) -> None:
        self._history.append(
            UpdateDelta(
                version=new_state.version,
                previous_value=self._state.value,
                value=new_state.value,
                added=tuple(added),
                removed=tuple(removed),
            )
        )
        self._state = new_state

    def add(self, elements: Iterable[bytes]) -> List[MembershipWitness]:
        """
        Add elements in one batch and return one witness per distinct element.

        Raises:
            AlreadyMember: If an element is already committed and the policy
                is "reject". Nothing is committed in that case.
        """
        unique, primes = distinct_primes(elements)
        with self._lock:
            existing = [e for e in unique if bytes(e) in self._members]
            if existing and self.duplicate_policy == "reject":
                logger.warning(f"Add rejected: {len(existing)} element(s) already committed")
                raise AlreadyMember(f"{len(existing)} element(s) already in the accumulator")

            fresh = [(e, p) for e, p in zip(unique, primes) if bytes(e) not in self._members]
            new_state, fresh_witnesses = add_batch(self._state, [e for e, _ in fresh])
            if fresh:
                self._commit(new_state, added=[p for _, p in fresh])
                for element, prime in fresh:
                    self._members[bytes(element)] = prime
                logger.info(
                    f"Committed {len(fresh)} addition(s) at version {new_state.version}, "
                    f"size {new_state.size}"
                )

        issued = {w.prime: w for w in fresh_witnesses}
        return [issued[p] if p in issued else self.prove_membership(e) for e, p in zip(unique, primes)]

    def delete(
        self, elements: Sequence[bytes], witnesses: Optional[Sequence[MembershipWitness]] = None
    ) -> AccumulatorState:
        """
        Delete elements in one batch.

        Witnesses may be supplied by the caller; otherwise the registry
        derives them from its member table.

        Raises:
            ElementNotMember: If any element is not committed, or a supplied
                witness does not verify. Nothing is committed in that case.
        """
        elements = [bytes(e) for e in elements]
        with self._lock:
            missing = [e for e in elements if e not in self._members]
            if missing:
                logger.warning(f"Delete rejected: {len(missing)} element(s) not committed")
                raise ElementNotMember(f"{len(missing)} element(s) not in the accumulator")

            if witnesses is None:
                table = batch_refresh_witnesses(self._state, list(self._members.values()))
                witnesses = [table[self._members[e]] for e in elements]

            try:
                new_state = delete_batch(self._state, elements, witnesses)
            except ElementNotMember:
                logger.warning(f"Delete rejected at version {self._state.version}: invalid witness")
                raise

            removed = list(dict.fromkeys(self._members[e] for e in elements))
            if removed:
                self._commit(new_state, removed=removed)
                for element in dict.fromkeys(elements):
                    del self._members[element]
                logger.info(
                    f"Committed {len(removed)} deletion(s) at version {new_state.version}, "
                    f"size {new_state.size}"
                )
            return self._state

    def prove_membership(self, element: bytes) -> MembershipWitness:
        state, members = self._snapshot()
        return prove_membership(state, members, element)

    def prove_non_membership(self, element: bytes) -> NonMembershipWitness:
        state, members = self._snapshot()
        return prove_non_membership(state, members, element)

    def prove_aggregated_membership(self, elements: Sequence[bytes]) -> AggregatedWitness:
        """One aggregated witness for several committed elements."""
        with self._lock:
            state = self._state
            missing = [e for e in elements if bytes(e) not in self._members]
            if missing:
                raise ElementNotMember(f"{len(missing)} element(s) not in the accumulator")
            table = batch_refresh_witnesses(state, list(self._members.values()))
            witnesses = [table[self._members[bytes(e)]] for e in elements]
        return aggregate_membership(state, witnesses)

    def prove_aggregated_non_membership(self, elements: Sequence[bytes]) -> AggregatedWitness:
        """One aggregated witness for several absent elements."""
        state, members = self._snapshot()
        return aggregate_non_membership(state, prove_non_membership_many(state, members, elements))

    def deltas_since(self, version: int) -> List[UpdateDelta]:
        """Deltas committed after `version`, oldest first."""
        with self._lock:
            if version < 0 or version > self._state.version:
                raise ValueError(
                    f"Version {version} outside the published range 0..{self._state.version}"
                )
            return self._history[version:]

    def refresh(self, witness: Witness) -> Witness:
        """Bring a witness up to the current version using the delta history."""
        return refresh_witness(self.params, witness, self.deltas_since(witness.version))
