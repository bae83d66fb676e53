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
"""Group consecutive events into numbered attacking phases.

The operator picks ungrouped events of the active half, tags how the move
ended and the manager persists a phase for the team that had most of the
selected events. Phase numbers always form a dense ``1..N`` sequence; deleting
a phase unbinds its events (they are kept) and closes the gap.

Multi-step writes are made all-or-nothing by compensating: if rebinding the
events fails after the phase record was inserted, the record is removed again.
"""

from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List, Optional, Sequence

from pitchside.engine.config import PHASE_OUTCOMES
from pitchside.engine.store import EventStore
from pitchside.errors import CaptureError, InvariantViolation, NotFoundError, StoreError, ValidationError
from pitchside.models.event import MatchEvent
from pitchside.models.phase import Phase, PhaseDraft
from pitchside.models.team import Roster
from pitchside.utils.debug import CaptureDebugger


def build_phase_views(phases: Iterable[Phase], events: Iterable[MatchEvent]) -> List[Phase]:
    """Attach member ids to phases from the events' phase references.

    Parameters
    ----------
    phases : Iterable[Phase]
        Phase records, membership ignored.
    events : Iterable[MatchEvent]
        Every event of the match.

    Returns
    -------
    List[Phase]
        Phases ordered by number, each listing its members in creation order.
    """
    members: Dict[str, List[str]] = {}
    for event in sorted(events, key=lambda e: e.sequence):
        if event.phase_id is not None:
            members.setdefault(event.phase_id, []).append(event.id)
    return [p.with_members(tuple(members.get(p.id, ()))) for p in sorted(phases, key=lambda p: p.phase_number)]


def infer_team(events: Sequence[MatchEvent], roster: Roster) -> Optional[str]:
    """Return the team with the most events in ``events``.

    Parameters
    ----------
    events : Sequence[MatchEvent]
        Selected events in selection order.
    roster : Roster
        Squad lookup mapping actors to teams.

    Returns
    -------
    Optional[str]
        Team id with the highest count; ties go to the team seen first.
        ``None`` when no actor resolves to a team.
    """
    counts: Counter = Counter()
    first_seen: Dict[str, int] = {}
    for index, event in enumerate(events):
        team_id = roster.team_of(event.player_id)
        if team_id is None:
            continue
        counts[team_id] += 1
        first_seen.setdefault(team_id, index)
    if not counts:
        return None
    return min(counts, key=lambda team: (-counts[team], first_seen[team]))


class PhaseManager:
    """Selection state and phase mutations for one match.

    Parameters
    ----------
    store : EventStore
        Backend holding events and phases.
    match_id : str
        Match being captured.
    debugger : Optional[CaptureDebugger]
        Capture log receiving phase lines.
    """

    def __init__(self, store: EventStore, match_id: str, debugger: Optional[CaptureDebugger] = None) -> None:
        """Create a manager with an empty selection.

        Parameters
        ----------
        store : EventStore
            Backend holding events and phases.
        match_id : str
            Match being captured.
        debugger : Optional[CaptureDebugger]
            Capture log receiving phase lines.
        """
        self.store = store
        self.match_id = match_id
        self.debugger = debugger
        self._selection: List[str] = []

    @property
    def selection(self) -> List[str]:
        """Return the selected event ids in selection order."""
        return list(self._selection)

    def clear_selection(self) -> None:
        """Forget every selected event."""
        self._selection.clear()

    @staticmethod
    def selectable(events: Iterable[MatchEvent], half: int) -> List[MatchEvent]:
        """Return the events that may join a new phase.

        Parameters
        ----------
        events : Iterable[MatchEvent]
            Every event of the match.
        half : int
            Active half.

        Returns
        -------
        List[MatchEvent]
            Ungrouped events of ``half`` in creation order.
        """
        return sorted(
            (e for e in events if e.phase_id is None and e.half == half),
            key=lambda e: e.sequence,
        )

    def toggle(self, event_id: str, events: Iterable[MatchEvent], half: int) -> bool:
        """Add or remove an event from the selection.

        Parameters
        ----------
        event_id : str
            Event to toggle.
        events : Iterable[MatchEvent]
            Every event of the match.
        half : int
            Active half.

        Returns
        -------
        bool
            ``True`` when the event is selected afterwards.

        Raises
        ------
        InvariantViolation
            If the event is already grouped, belongs to the other half or is
            unknown.
        """
        if event_id in self._selection:
            self._selection.remove(event_id)
            return False
        event = next((e for e in events if e.id == event_id), None)
        if event is None:
            raise InvariantViolation("That event no longer exists")
        if event.phase_id is not None:
            raise InvariantViolation("Event already belongs to a phase")
        if event.half != half:
            raise InvariantViolation("Only events from the active half can be grouped")
        self._selection.append(event_id)
        return True

    def prune(self, events: Iterable[MatchEvent], half: int) -> None:
        """Drop selected ids that are no longer selectable.

        Parameters
        ----------
        events : Iterable[MatchEvent]
            Every event of the match.
        half : int
            Active half.
        """
        valid = {e.id for e in self.selectable(events, half)}
        self._selection = [event_id for event_id in self._selection if event_id in valid]

    def create(
        self,
        outcome: str,
        events: Sequence[MatchEvent],
        phases: Sequence[Phase],
        roster: Roster,
        half: Optional[int] = None,
    ) -> Phase:
        """Persist a phase from the current selection.

        Parameters
        ----------
        outcome : str
            ``"goal"``, ``"shot"`` or ``"lost_possession"``.
        events : Sequence[MatchEvent]
            Every event of the match.
        phases : Sequence[Phase]
            Existing phases of the match.
        roster : Roster
            Squad lookup used to infer the owning team.
        half : Optional[int]
            Active half; when given, the selection must belong to it.

        Returns
        -------
        Phase
            The stored phase with its members.

        Raises
        ------
        ValidationError
            If ``outcome`` is not a phase outcome.
        InvariantViolation
            If the selection is empty, mixes halves, lies outside the active
            half, contains grouped events or resolves to no team.
        StoreError
            If a write fails; a phase record inserted before the failure is
            removed again.
        """
        if outcome not in PHASE_OUTCOMES:
            raise ValidationError("Select how the phase ended", field="outcome")
        if not self._selection:
            raise InvariantViolation("Select at least one event for the phase")

        by_id = {e.id: e for e in events}
        selected = [by_id[event_id] for event_id in self._selection if event_id in by_id]
        if len(selected) != len(self._selection):
            raise InvariantViolation("Some selected events no longer exist")
        if any(e.phase_id is not None for e in selected):
            raise InvariantViolation("Event already belongs to a phase")
        halves = {e.half for e in selected}
        if len(halves) != 1:
            raise InvariantViolation("A phase cannot span both halves")
        if half is not None and halves != {half}:
            raise InvariantViolation("Only events from the active half can be grouped")

        team_id = infer_team(selected, roster)
        if team_id is None:
            raise InvariantViolation("Could not determine which team the phase belongs to")

        phases = self.renumber(phases)
        draft = PhaseDraft(
            match_id=self.match_id,
            phase_number=len(phases) + 1,
            half=halves.pop(),
            team_id=team_id,
            outcome=outcome,
        )
        phase = self.store.insert_phase(draft)
        member_ids = [e.id for e in sorted(selected, key=lambda e: e.sequence)]
        try:
            self.store.rebind_events_to_phase(member_ids, phase.id)
        except CaptureError as exc:
            self._discard_phase(phase)
            raise StoreError(f"Could not group events into phase: {exc}") from exc

        self._selection.clear()
        created = phase.with_members(tuple(member_ids))
        if self.debugger:
            self.debugger.log_phase_change("CREATED", created)
        return created

    def _discard_phase(self, phase: Phase) -> None:
        """Remove a phase record after a failed rebind.

        Parameters
        ----------
        phase : Phase
            Record inserted by the failed create.
        """
        try:
            self.store.delete_phase(phase.id)
        except CaptureError as exc:
            if self.debugger:
                self.debugger.log_error("ROLLBACK_FAILED", f"phase {phase.id}: {exc}")

    def edit_outcome(self, phase_id: str, outcome: Optional[str]) -> Phase:
        """Retag a phase without touching its members.

        Parameters
        ----------
        phase_id : str
            Phase to retag.
        outcome : Optional[str]
            New outcome, or ``None`` to reopen the phase.

        Returns
        -------
        Phase
            The updated phase.

        Raises
        ------
        ValidationError
            If ``outcome`` is not a phase outcome.
        """
        if outcome is not None and outcome not in PHASE_OUTCOMES:
            raise ValidationError(f"Invalid phase outcome: {outcome}", field="outcome")
        phase = self.store.update_phase(phase_id, {"outcome": outcome})
        if self.debugger:
            self.debugger.log_phase_change("UPDATED", phase)
        return phase

    def delete(self, phase_id: str, phases: Sequence[Phase]) -> List[Phase]:
        """Delete a phase, unbind its events and renumber the rest.

        Parameters
        ----------
        phase_id : str
            Phase to delete.
        phases : Sequence[Phase]
            Current phases of the match with their members.

        Returns
        -------
        List[Phase]
            Remaining phases numbered ``1..N`` in their previous order.

        Raises
        ------
        NotFoundError
            If ``phase_id`` is not among ``phases``.
        StoreError
            If a write fails; members are rebound when the record survives.
            A failed renumbering leaves the phase deleted and is repaired by
            the next create or delete.
        """
        ordered = sorted(phases, key=lambda p: p.phase_number)
        target = next((p for p in ordered if p.id == phase_id), None)
        if target is None:
            raise NotFoundError("phase", phase_id)

        members = list(target.event_ids)
        if members:
            self.store.rebind_events_to_phase(members, None)
        try:
            self.store.delete_phase(phase_id)
        except CaptureError as exc:
            if members:
                try:
                    self.store.rebind_events_to_phase(members, phase_id)
                except CaptureError as rollback_exc:
                    if self.debugger:
                        self.debugger.log_error("ROLLBACK_FAILED", f"phase {phase_id}: {rollback_exc}")
            raise StoreError(f"Could not delete phase: {exc}") from exc

        if self.debugger:
            self.debugger.log_phase_change("DELETED", target)

        try:
            return self.renumber([p for p in ordered if p.id != phase_id])
        except StoreError as exc:
            raise StoreError(f"Phase deleted but {exc}") from exc

    def renumber(self, phases: Sequence[Phase]) -> List[Phase]:
        """Close gaps so phases are numbered ``1..N`` in their current order.

        Only phases whose number changes are written. A failed write leaves
        the earlier phases renumbered; the next call picks up the rest.

        Parameters
        ----------
        phases : Sequence[Phase]
            Phases of the match with their members.

        Returns
        -------
        List[Phase]
            The phases with dense numbers, members kept.

        Raises
        ------
        StoreError
            If a write fails.
        """
        renumbered: List[Phase] = []
        for number, phase in enumerate(sorted(phases, key=lambda p: p.phase_number), start=1):
            if phase.phase_number != number:
                try:
                    updated = self.store.update_phase(phase.id, {"phase_number": number})
                except CaptureError as exc:
                    if self.debugger:
                        self.debugger.log_error("RENUMBER_FAILED", f"phase {phase.id} -> {number}: {exc}")
                    raise StoreError(f"renumbering stopped at phase {number}: {exc}") from exc
                phase = updated.with_members(phase.event_ids)
            renumbered.append(phase)
        return renumbered
