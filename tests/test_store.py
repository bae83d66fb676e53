# Copyright (C) 2025 Richard Owen
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""Tests for the in-memory event store."""

import pytest

from pitchside.engine.config import AWAY, HOME
from pitchside.engine.store import EventStore, InMemoryEventStore
from pitchside.errors import NotFoundError, StoreError, ValidationError
from pitchside.models.event import EventDraft, PitchPoint
from pitchside.models.phase import PhaseDraft

MATCH_ID = "m1"


def _draft(player_id: str = "h4", phase_id=None) -> EventDraft:
    return EventDraft(
        match_id=MATCH_ID,
        player_id=player_id,
        event_type="tackle_won",
        half=1,
        minute=3,
        seconds=0,
        start=PitchPoint(40, 40),
        phase_id=phase_id,
    )


def _phase(store: InMemoryEventStore, number: int = 1, outcome: str = "shot"):
    draft = PhaseDraft(match_id=MATCH_ID, phase_number=number, half=1, team_id="home-fc", outcome=outcome)
    return store.insert_phase(draft)


class TestEvents:
    """Event inserts and deletes."""

    def test_insert_assigns_identity(self) -> None:
        """Inserting assigns an id and sequence."""
        store = InMemoryEventStore(clock=lambda: 1234.0)
        first = store.insert_event(_draft())
        second = store.insert_event(_draft("h5"))
        assert first.id != second.id
        assert (first.sequence, second.sequence) == (1, 2)
        assert first.created_at == 1234.0
        assert [e.id for e in store.list_events(MATCH_ID)] == [first.id, second.id]
        assert store.list_events("other") == []

    def test_delete(self) -> None:
        """Events can be deleted."""
        store = InMemoryEventStore()
        event = store.insert_event(_draft())
        store.delete_event(event.id)
        assert store.list_events(MATCH_ID) == []
        with pytest.raises(NotFoundError):
            store.delete_event(event.id)

    def test_unknown_phase_reference(self) -> None:
        """An unknown phase reference is refused."""
        with pytest.raises(StoreError):
            InMemoryEventStore().insert_event(_draft(phase_id="nope"))


class TestPhases:
    """Phase records and membership."""

    def test_membership_is_derived(self) -> None:
        """Phase membership is derived from events."""
        store = InMemoryEventStore()
        phase = _phase(store)
        e1 = store.insert_event(_draft())
        e2 = store.insert_event(_draft("h5"))
        store.rebind_events_to_phase([e2.id, e1.id], phase.id)
        (listed,) = store.list_phases(MATCH_ID)
        assert listed.event_ids == (e1.id, e2.id)

        store.rebind_events_to_phase([e1.id], None)
        assert store.list_phases(MATCH_ID)[0].event_ids == (e2.id,)

    def test_rebind_is_atomic(self) -> None:
        """Rebinding is all or nothing."""
        store = InMemoryEventStore()
        phase = _phase(store)
        e1 = store.insert_event(_draft())
        with pytest.raises(NotFoundError):
            store.rebind_events_to_phase([e1.id, "missing"], phase.id)
        assert store.list_events(MATCH_ID)[0].phase_id is None
        with pytest.raises(NotFoundError):
            store.rebind_events_to_phase([e1.id], "missing")

    def test_update_phase(self) -> None:
        """Phases can be updated."""
        store = InMemoryEventStore()
        phase = _phase(store)
        updated = store.update_phase(phase.id, {"outcome": "goal", "phase_number": 4})
        assert (updated.outcome, updated.phase_number) == ("goal", 4)
        with pytest.raises(ValidationError):
            store.update_phase(phase.id, {"team_id": "away-fc"})
        with pytest.raises(ValidationError):
            store.update_phase(phase.id, {"outcome": "won"})
        with pytest.raises(NotFoundError):
            store.update_phase("missing", {"outcome": None})

    def test_delete_refuses_bound_events(self) -> None:
        """Phases with bound events cannot be deleted."""
        store = InMemoryEventStore()
        phase = _phase(store)
        event = store.insert_event(_draft(phase_id=phase.id))
        with pytest.raises(StoreError):
            store.delete_phase(phase.id)
        store.rebind_events_to_phase([event.id], None)
        store.delete_phase(phase.id)
        assert store.list_phases(MATCH_ID) == []

    def test_phases_ordered_by_number(self) -> None:
        """Phases are listed by number."""
        store = InMemoryEventStore()
        second = _phase(store, 2)
        first = _phase(store, 1)
        assert [p.id for p in store.list_phases(MATCH_ID)] == [first.id, second.id]


class TestSquadsAndDirection:
    """Squad registration and the confirmed direction."""

    def test_squads(self, store: InMemoryEventStore) -> None:
        """Squads are stored per side."""
        home = store.list_squad(MATCH_ID, HOME)
        assert [p.jersey_number for p in home] == list(range(1, 13))
        assert store.list_squad("other", AWAY) == []
        assert store.get_team_sheet(MATCH_ID, AWAY).team_id == "away-fc"
        with pytest.raises(StoreError):
            store.list_squad(MATCH_ID, "neutral")

    def test_direction(self) -> None:
        """Direction is stored per match."""
        store = InMemoryEventStore()
        assert store.get_confirmed_direction(MATCH_ID) is None
        store.set_confirmed_direction(MATCH_ID, True)
        assert store.get_confirmed_direction(MATCH_ID) is True

    def test_export_and_restore(self, store: InMemoryEventStore) -> None:
        """Exported state restores into a new store."""
        phase = _phase(store)
        event = store.insert_event(_draft(phase_id=phase.id))
        store.set_confirmed_direction(MATCH_ID, False)

        restored = InMemoryEventStore.from_dict(store.to_dict())
        assert restored.list_events(MATCH_ID) == [event]
        assert restored.list_phases(MATCH_ID)[0].event_ids == (event.id,)
        assert restored.get_confirmed_direction(MATCH_ID) is False
        assert len(restored.list_squad(MATCH_ID, HOME)) == 12
        assert restored.insert_event(_draft()).sequence == 2


class TestInterface:
    """The abstract interface only declares operations."""

    def test_base_store_is_abstract(self) -> None:
        """The base store cannot be instantiated."""
        with pytest.raises(NotImplementedError):
            EventStore().list_events(MATCH_ID)
