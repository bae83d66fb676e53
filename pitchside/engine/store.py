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
"""Event store contract and the in-memory implementation.

The capture engine never talks to a database directly. It uses the small
:class:`EventStore` surface below, which any backend can implement: events are
only ever inserted or deleted, phases can be updated, and events are rebound
to phases in a single call. :class:`InMemoryEventStore` is the reference
backend used by the desktop front end and the test suite.
"""

from __future__ import annotations

import time
import uuid
from threading import Lock
from typing import Any, Dict, Iterable, List, Optional, Sequence

from pitchside.engine.config import PHASE_OUTCOMES, SIDES
from pitchside.errors import NotFoundError, StoreError, ValidationError
from pitchside.models.event import EventDraft, MatchEvent
from pitchside.models.phase import Phase, PhaseDraft
from pitchside.models.team import SquadPlayer, TeamSheet

PHASE_UPDATE_FIELDS = ("outcome", "phase_number")


class EventStore:
    """Interface every event backend implements.

    Methods raise :class:`~pitchside.errors.StoreError` (or its subclass
    :class:`~pitchside.errors.NotFoundError`) when a request cannot be served.
    """

    def insert_event(self, draft: EventDraft) -> MatchEvent:
        """Persist a new event.

        Parameters
        ----------
        draft : EventDraft
            Validated event fields.

        Returns
        -------
        MatchEvent
            The stored event with id and sequence assigned.
        """
        raise NotImplementedError

    def delete_event(self, event_id: str) -> None:
        """Remove an event.

        Parameters
        ----------
        event_id : str
            Identifier of the event to delete.
        """
        raise NotImplementedError

    def list_events(self, match_id: str) -> List[MatchEvent]:
        """Return the events of a match in creation order.

        Parameters
        ----------
        match_id : str
            Match to list.

        Returns
        -------
        List[MatchEvent]
            Events ordered by creation sequence.
        """
        raise NotImplementedError

    def insert_phase(self, draft: PhaseDraft) -> Phase:
        """Persist a new phase record.

        Parameters
        ----------
        draft : PhaseDraft
            Validated phase fields.

        Returns
        -------
        Phase
            The stored phase.
        """
        raise NotImplementedError

    def update_phase(self, phase_id: str, changes: Dict[str, Any]) -> Phase:
        """Change the outcome or number of a phase.

        Parameters
        ----------
        phase_id : str
            Phase to update.
        changes : Dict[str, Any]
            New values keyed by ``"outcome"`` and/or ``"phase_number"``.

        Returns
        -------
        Phase
            The updated phase.
        """
        raise NotImplementedError

    def delete_phase(self, phase_id: str) -> None:
        """Remove a phase record.

        Parameters
        ----------
        phase_id : str
            Phase to delete.
        """
        raise NotImplementedError

    def list_phases(self, match_id: str) -> List[Phase]:
        """Return the phases of a match ordered by phase number.

        Parameters
        ----------
        match_id : str
            Match to list.

        Returns
        -------
        List[Phase]
            Phases with their derived member lists.
        """
        raise NotImplementedError

    def rebind_events_to_phase(self, event_ids: Sequence[str], phase_id: Optional[str]) -> None:
        """Point every listed event at ``phase_id`` in one step.

        Parameters
        ----------
        event_ids : Sequence[str]
            Events to update.
        phase_id : Optional[str]
            Target phase, or ``None`` to unbind.
        """
        raise NotImplementedError

    def get_confirmed_direction(self, match_id: str) -> Optional[bool]:
        """Return the stored first-half orientation.

        Parameters
        ----------
        match_id : str
            Match to query.

        Returns
        -------
        Optional[bool]
            ``True`` when home attacks left in the first half, ``None`` when
            nothing has been confirmed.
        """
        raise NotImplementedError

    def set_confirmed_direction(self, match_id: str, home_attacks_left: bool) -> None:
        """Persist the first-half orientation.

        Parameters
        ----------
        match_id : str
            Match to update.
        home_attacks_left : bool
            Whether home attacks left in the first half.
        """
        raise NotImplementedError

    def list_squad(self, match_id: str, side: str) -> List[SquadPlayer]:
        """Return one side's squad for a match.

        Parameters
        ----------
        match_id : str
            Match to query.
        side : str
            ``"home"`` or ``"away"``.

        Returns
        -------
        List[SquadPlayer]
            Players ordered by shirt number.
        """
        raise NotImplementedError


class InMemoryEventStore(EventStore):
    """Thread-safe store that keeps every record in dictionaries.

    Parameters
    ----------
    clock : Optional[Any]
        Callable returning the current UNIX time; defaults to ``time.time``.
    """

    def __init__(self, clock: Optional[Any] = None) -> None:
        """Create an empty store.

        Parameters
        ----------
        clock : Optional[Any]
            Callable returning the current UNIX time; defaults to ``time.time``.
        """
        self._clock = clock or time.time
        self._lock = Lock()
        self._events: Dict[str, MatchEvent] = {}
        self._phases: Dict[str, Phase] = {}
        self._directions: Dict[str, bool] = {}
        self._squads: Dict[str, Dict[str, TeamSheet]] = {}
        self._sequence = 0

    @staticmethod
    def _new_id() -> str:
        """Return a fresh opaque identifier.

        Returns
        -------
        str
            Hex encoded UUID4.
        """
        return uuid.uuid4().hex

    def insert_event(self, draft: EventDraft) -> MatchEvent:
        """Persist a new event.

        Parameters
        ----------
        draft : EventDraft
            Validated event fields.

        Returns
        -------
        MatchEvent
            The stored event with id and sequence assigned.

        Raises
        ------
        StoreError
            If the draft references a phase that does not exist.
        """
        with self._lock:
            if draft.phase_id is not None and draft.phase_id not in self._phases:
                raise StoreError(f"Cannot bind event to unknown phase {draft.phase_id}")
            self._sequence += 1
            event = MatchEvent.from_draft(draft, self._new_id(), self._sequence, self._clock())
            self._events[event.id] = event
            return event

    def delete_event(self, event_id: str) -> None:
        """Remove an event.

        Parameters
        ----------
        event_id : str
            Identifier of the event to delete.

        Raises
        ------
        NotFoundError
            If the event does not exist.
        """
        with self._lock:
            if event_id not in self._events:
                raise NotFoundError("event", event_id)
            del self._events[event_id]

    def list_events(self, match_id: str) -> List[MatchEvent]:
        """Return the events of a match in creation order.

        Parameters
        ----------
        match_id : str
            Match to list.

        Returns
        -------
        List[MatchEvent]
            Events ordered by creation sequence.
        """
        with self._lock:
            return self._events_for(match_id)

    def _events_for(self, match_id: str) -> List[MatchEvent]:
        """Collect a match's events; the caller must hold the lock.

        Parameters
        ----------
        match_id : str
            Match to list.

        Returns
        -------
        List[MatchEvent]
            Events ordered by creation sequence.
        """
        events = [e for e in self._events.values() if e.match_id == match_id]
        return sorted(events, key=lambda e: e.sequence)

    def insert_phase(self, draft: PhaseDraft) -> Phase:
        """Persist a new phase record.

        Parameters
        ----------
        draft : PhaseDraft
            Validated phase fields.

        Returns
        -------
        Phase
            The stored phase, without members.
        """
        with self._lock:
            phase = Phase.from_draft(draft, self._new_id())
            self._phases[phase.id] = phase
            return phase

    def update_phase(self, phase_id: str, changes: Dict[str, Any]) -> Phase:
        """Change the outcome or number of a phase.

        Parameters
        ----------
        phase_id : str
            Phase to update.
        changes : Dict[str, Any]
            New values keyed by ``"outcome"`` and/or ``"phase_number"``.

        Returns
        -------
        Phase
            The updated phase.

        Raises
        ------
        NotFoundError
            If the phase does not exist.
        ValidationError
            If ``changes`` contains an unknown key or invalid value.
        """
        unknown = set(changes) - set(PHASE_UPDATE_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot update phase fields: {', '.join(sorted(unknown))}")
        if "outcome" in changes and changes["outcome"] is not None and changes["outcome"] not in PHASE_OUTCOMES:
            raise ValidationError(f"Invalid phase outcome: {changes['outcome']}", field="outcome")
        if "phase_number" in changes and int(changes["phase_number"]) < 1:
            raise ValidationError("Phase numbers start at 1", field="phase_number")

        with self._lock:
            phase = self._phases.get(phase_id)
            if phase is None:
                raise NotFoundError("phase", phase_id)
            updated = Phase(
                id=phase.id,
                match_id=phase.match_id,
                phase_number=int(changes.get("phase_number", phase.phase_number)),
                half=phase.half,
                team_id=phase.team_id,
                outcome=changes.get("outcome", phase.outcome),
            )
            self._phases[phase_id] = updated
            return self._with_members(updated)

    def delete_phase(self, phase_id: str) -> None:
        """Remove a phase record that no longer has members.

        Parameters
        ----------
        phase_id : str
            Phase to delete.

        Raises
        ------
        NotFoundError
            If the phase does not exist.
        StoreError
            If events are still bound to the phase.
        """
        with self._lock:
            if phase_id not in self._phases:
                raise NotFoundError("phase", phase_id)
            if any(e.phase_id == phase_id for e in self._events.values()):
                raise StoreError(f"Phase {phase_id} still has bound events")
            del self._phases[phase_id]

    def list_phases(self, match_id: str) -> List[Phase]:
        """Return the phases of a match ordered by phase number.

        Parameters
        ----------
        match_id : str
            Match to list.

        Returns
        -------
        List[Phase]
            Phases with their derived member lists.
        """
        with self._lock:
            phases = [p for p in self._phases.values() if p.match_id == match_id]
            return [self._with_members(p) for p in sorted(phases, key=lambda p: p.phase_number)]

    def _with_members(self, phase: Phase) -> Phase:
        """Attach member ids to a phase; the caller must hold the lock.

        Parameters
        ----------
        phase : Phase
            Phase record.

        Returns
        -------
        Phase
            Copy listing every event bound to the phase in creation order.
        """
        members = tuple(e.id for e in self._events_for(phase.match_id) if e.phase_id == phase.id)
        return phase.with_members(members)

    def rebind_events_to_phase(self, event_ids: Sequence[str], phase_id: Optional[str]) -> None:
        """Point every listed event at ``phase_id`` in one step.

        Parameters
        ----------
        event_ids : Sequence[str]
            Events to update.
        phase_id : Optional[str]
            Target phase, or ``None`` to unbind.

        Raises
        ------
        NotFoundError
            If any event or the phase does not exist; nothing is changed.
        """
        with self._lock:
            if phase_id is not None and phase_id not in self._phases:
                raise NotFoundError("phase", phase_id)
            for event_id in event_ids:
                if event_id not in self._events:
                    raise NotFoundError("event", event_id)
            for event_id in event_ids:
                self._events[event_id] = self._events[event_id].with_phase(phase_id)

    def get_confirmed_direction(self, match_id: str) -> Optional[bool]:
        """Return the stored first-half orientation.

        Parameters
        ----------
        match_id : str
            Match to query.

        Returns
        -------
        Optional[bool]
            Stored value or ``None``.
        """
        with self._lock:
            return self._directions.get(match_id)

    def set_confirmed_direction(self, match_id: str, home_attacks_left: bool) -> None:
        """Persist the first-half orientation.

        Parameters
        ----------
        match_id : str
            Match to update.
        home_attacks_left : bool
            Whether home attacks left in the first half.
        """
        with self._lock:
            self._directions[match_id] = bool(home_attacks_left)

    def set_squad(self, match_id: str, sheet: TeamSheet) -> None:
        """Register a team sheet for one side of a match.

        Parameters
        ----------
        match_id : str
            Match the sheet belongs to.
        sheet : TeamSheet
            Squad to register under ``sheet.side``.
        """
        with self._lock:
            self._squads.setdefault(match_id, {})[sheet.side] = sheet

    def get_team_sheet(self, match_id: str, side: str) -> Optional[TeamSheet]:
        """Return the registered team sheet for one side.

        Parameters
        ----------
        match_id : str
            Match to query.
        side : str
            ``"home"`` or ``"away"``.

        Returns
        -------
        Optional[TeamSheet]
            The sheet or ``None`` when no squad was registered.
        """
        with self._lock:
            return self._squads.get(match_id, {}).get(side)

    def list_squad(self, match_id: str, side: str) -> List[SquadPlayer]:
        """Return one side's squad for a match.

        Parameters
        ----------
        match_id : str
            Match to query.
        side : str
            ``"home"`` or ``"away"``.

        Returns
        -------
        List[SquadPlayer]
            Players ordered by shirt number; empty when no squad is registered.

        Raises
        ------
        StoreError
            If ``side`` is not ``"home"`` or ``"away"``.
        """
        if side not in SIDES:
            raise StoreError(f"Unknown side: {side}")
        sheet = self.get_team_sheet(match_id, side)
        if sheet is None:
            return []
        return sorted(sheet.players, key=lambda p: p.jersey_number)

    def to_dict(self) -> Dict[str, Any]:
        """Export every record as JSON friendly primitives.

        Returns
        -------
        Dict[str, Any]
            Mapping with ``events``, ``phases``, ``directions``, ``squads`` and
            the current ``sequence`` counter.
        """
        with self._lock:
            return {
                "sequence": self._sequence,
                "events": [e.to_dict() for e in sorted(self._events.values(), key=lambda e: e.sequence)],
                "phases": [p.to_dict() for p in self._phases.values()],
                "directions": dict(self._directions),
                "squads": {
                    match_id: {side: _sheet_to_dict(sheet) for side, sheet in sheets.items()}
                    for match_id, sheets in self._squads.items()
                },
            }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> InMemoryEventStore:
        """Rebuild a store from :meth:`to_dict` output.

        Parameters
        ----------
        data : Dict[str, Any]
            Exported store contents.

        Returns
        -------
        InMemoryEventStore
            A populated store.
        """
        store = cls()
        for raw in data.get("phases", []):
            phase = Phase.from_dict(raw)
            store._phases[phase.id] = phase
        for raw in data.get("events", []):
            event = MatchEvent.from_dict(raw)
            store._events[event.id] = event
        store._directions = {k: bool(v) for k, v in data.get("directions", {}).items()}
        for match_id, sheets in data.get("squads", {}).items():
            for raw_sheet in sheets.values():
                store._squads.setdefault(match_id, {})
                sheet = _sheet_from_dict(raw_sheet)
                store._squads[match_id][sheet.side] = sheet
        highest = max((e.sequence for e in store._events.values()), default=0)
        store._sequence = max(int(data.get("sequence", 0)), highest)
        return store


def _sheet_to_dict(sheet: TeamSheet) -> Dict[str, Any]:
    """Serialise a team sheet.

    Parameters
    ----------
    sheet : TeamSheet
        Sheet to export.

    Returns
    -------
    Dict[str, Any]
        JSON friendly mapping.
    """
    return {
        "team_id": sheet.team_id,
        "name": sheet.name,
        "side": sheet.side,
        "players": [
            {
                "player_id": p.player_id,
                "name": p.name,
                "jersey_number": p.jersey_number,
                "team_id": p.team_id,
                "role": p.role,
                "status": p.status,
            }
            for p in sheet.players
        ],
    }


def _sheet_from_dict(data: Dict[str, Any]) -> TeamSheet:
    """Rebuild a team sheet from :func:`_sheet_to_dict` output.

    Parameters
    ----------
    data : Dict[str, Any]
        Exported sheet.

    Returns
    -------
    TeamSheet
        The decoded sheet.
    """
    players: Iterable[Dict[str, Any]] = data.get("players", [])
    return TeamSheet(
        team_id=data["team_id"],
        name=data["name"],
        side=data["side"],
        players=[SquadPlayer(**p) for p in players],
    )
