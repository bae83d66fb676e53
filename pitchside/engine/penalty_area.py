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
"""Detect ball progression into the opponent's penalty box.

After every manually saved event the session asks
:func:`detect_penalty_area_entry` whether the action finished inside the box
the acting team is attacking. If it did, a :class:`PenaltyAreaSuggestion` is
offered to the operator, who can accept it (writing the synthetic entry
events) or dismiss it (writing nothing).
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from threading import Lock
from typing import List, Optional

from pitchside.engine.config import (
    BALL_PROGRESSION_EVENTS,
    CAPTURE_CONFIG,
    SELF_ENTRY_EVENTS,
    SuggestionConfig,
)
from pitchside.engine.geometry import is_in_opponent_penalty_area
from pitchside.engine.store import EventStore
from pitchside.errors import CaptureError, InvariantViolation, StoreError
from pitchside.models.event import EventDraft, MatchEvent, PitchPoint
from pitchside.models.team import Roster
from pitchside.utils.debug import CaptureDebugger


@dataclass(frozen=True, slots=True)
class PenaltyAreaSuggestion:
    """A pending prompt to log a penalty-area entry.

    Parameters
    ----------
    match_id : str
        Match of the triggering event.
    passer_id : str
        Player who moved the ball into the box.
    receiver_id : Optional[str]
        Player who received it; equals ``passer_id`` for self entries and is
        ``None`` when no receiver could be resolved.
    position : PitchPoint
        End point of the triggering event.
    origin : PitchPoint
        Start point of the triggering event.
    source_event_id : str
        Event that triggered the prompt.
    source_event_type : str
        Type code of the triggering event.
    half : int
        Half of the triggering event.
    side : str
        Side of the passer.
    created_at : float
        Monotonic time the prompt was raised, used for expiry.
    """

    match_id: str
    passer_id: str
    receiver_id: Optional[str]
    position: PitchPoint
    origin: PitchPoint
    source_event_id: str
    source_event_type: str
    half: int
    side: str
    created_at: float

    @property
    def is_self_entry(self) -> bool:
        """Return whether the passer carried the ball in themselves."""
        return self.source_event_type in SELF_ENTRY_EVENTS


def detect_penalty_area_entry(
    event: MatchEvent,
    roster: Roster,
    home_attacks_left_this_half: bool,
    now: Optional[float] = None,
) -> Optional[PenaltyAreaSuggestion]:
    """Return a suggestion when ``event`` ended in the opponent's box.

    Parameters
    ----------
    event : MatchEvent
        Freshly saved event.
    roster : Roster
        Squad lookup used to find the acting side and the receiver.
    home_attacks_left_this_half : bool
        Home orientation for the event's half.
    now : Optional[float]
        Monotonic timestamp for the suggestion; defaults to ``time.monotonic()``.

    Returns
    -------
    Optional[PenaltyAreaSuggestion]
        The suggestion, or ``None`` when the event does not qualify. The
        success flag of ``event`` is ignored.
    """
    if event.event_type not in BALL_PROGRESSION_EVENTS or event.end is None or event.start is None:
        return None
    side = roster.side_of(event.player_id)
    if side is None:
        return None
    if not is_in_opponent_penalty_area(event.end.x, event.end.y, home_attacks_left_this_half, side):
        return None

    if event.event_type in SELF_ENTRY_EVENTS:
        receiver_id: Optional[str] = event.player_id
    else:
        receiver = roster.get(event.target_player_id)
        receiver_id = receiver.player_id if receiver is not None else None

    return PenaltyAreaSuggestion(
        match_id=event.match_id,
        passer_id=event.player_id,
        receiver_id=receiver_id,
        position=event.end,
        origin=event.start,
        source_event_id=event.id,
        source_event_type=event.event_type,
        half=event.half,
        side=side,
        created_at=time.monotonic() if now is None else now,
    )


def build_acceptance_drafts(suggestion: PenaltyAreaSuggestion, minute: int, seconds: int) -> List[EventDraft]:
    """Return the events that accepting ``suggestion`` writes.

    Parameters
    ----------
    suggestion : PenaltyAreaSuggestion
        The prompt being accepted.
    minute : int
        Current clock minute.
    seconds : int
        Current clock second.

    Returns
    -------
    List[EventDraft]
        One ``penalty_area_entry`` for a self entry. Otherwise a
        ``penalty_area_pass`` for the passer, followed by a
        ``penalty_area_entry`` for the receiver when one is known.
    """
    common = {"match_id": suggestion.match_id, "half": suggestion.half, "minute": minute, "seconds": seconds}
    if suggestion.is_self_entry:
        return [
            EventDraft(
                player_id=suggestion.passer_id,
                event_type="penalty_area_entry",
                start=suggestion.position,
                **common,
            )
        ]

    drafts = [
        EventDraft(
            player_id=suggestion.passer_id,
            event_type="penalty_area_pass",
            start=suggestion.origin,
            end=suggestion.position,
            target_player_id=suggestion.receiver_id,
            **common,
        )
    ]
    if suggestion.receiver_id is not None:
        drafts.append(
            EventDraft(
                player_id=suggestion.receiver_id,
                event_type="penalty_area_entry",
                start=suggestion.position,
                **common,
            )
        )
    return drafts


class PenaltyAreaTracker:
    """Holds the single active penalty-area suggestion.

    Parameters
    ----------
    config : Optional[SuggestionConfig]
        Prompt lifetime; defaults to :data:`CAPTURE_CONFIG`.
    debugger : Optional[CaptureDebugger]
        Capture log receiving offer, accept and dismiss lines.
    """

    def __init__(self, config: Optional[SuggestionConfig] = None, debugger: Optional[CaptureDebugger] = None) -> None:
        """Start with no pending suggestion.

        Parameters
        ----------
        config : Optional[SuggestionConfig]
            Prompt lifetime; defaults to :data:`CAPTURE_CONFIG`.
        debugger : Optional[CaptureDebugger]
            Capture log receiving offer, accept and dismiss lines.
        """
        self.config = config or CAPTURE_CONFIG.suggestion
        self.debugger = debugger
        self._lock = Lock()
        self._pending: Optional[PenaltyAreaSuggestion] = None

    @property
    def pending(self) -> Optional[PenaltyAreaSuggestion]:
        """Return the active suggestion, if any."""
        with self._lock:
            return self._pending

    def offer(self, suggestion: PenaltyAreaSuggestion) -> None:
        """Make ``suggestion`` the active one, replacing any older prompt.

        Parameters
        ----------
        suggestion : PenaltyAreaSuggestion
            Newly detected entry.
        """
        with self._lock:
            self._pending = suggestion
        if self.debugger:
            self.debugger.log_suggestion("OFFERED", suggestion)

    def dismiss(self) -> Optional[PenaltyAreaSuggestion]:
        """Discard the active suggestion without writing anything.

        Returns
        -------
        Optional[PenaltyAreaSuggestion]
            The discarded suggestion, or ``None`` when nothing was pending.
        """
        with self._lock:
            suggestion, self._pending = self._pending, None
        if suggestion is not None and self.debugger:
            self.debugger.log_suggestion("DISMISSED", suggestion)
        return suggestion

    def remaining(self, now: Optional[float] = None) -> float:
        """Return the seconds left before the active prompt expires.

        Parameters
        ----------
        now : Optional[float]
            Monotonic timestamp; defaults to ``time.monotonic()``.

        Returns
        -------
        float
            Remaining lifetime, ``0.0`` when nothing is pending.
        """
        suggestion = self.pending
        if suggestion is None:
            return 0.0
        now = time.monotonic() if now is None else now
        return max(0.0, self.config.penalty_suggestion_timeout - (now - suggestion.created_at))

    def expire(self, now: Optional[float] = None) -> bool:
        """Dismiss the active prompt once its lifetime has run out.

        Parameters
        ----------
        now : Optional[float]
            Monotonic timestamp; defaults to ``time.monotonic()``.

        Returns
        -------
        bool
            ``True`` when a prompt was dismissed.
        """
        if self.pending is None or self.remaining(now) > 0.0:
            return False
        return self.dismiss() is not None

    def accept(self, store: EventStore, minute: int, seconds: int) -> List[MatchEvent]:
        """Write the events implied by the active suggestion.

        The writes are all-or-nothing: when a later insert fails the earlier
        ones are deleted again before the error is raised.

        Parameters
        ----------
        store : EventStore
            Backend receiving the synthetic events.
        minute : int
            Current clock minute.
        seconds : int
            Current clock second.

        Returns
        -------
        List[MatchEvent]
            The stored events.

        Raises
        ------
        InvariantViolation
            If no suggestion is pending.
        StoreError
            If a write fails; the suggestion stays pending so it can be retried.
        """
        suggestion = self.pending
        if suggestion is None:
            raise InvariantViolation("No penalty area entry to confirm")

        written: List[MatchEvent] = []
        try:
            for draft in build_acceptance_drafts(suggestion, minute, seconds):
                written.append(store.insert_event(draft))
        except CaptureError as exc:
            for event in reversed(written):
                try:
                    store.delete_event(event.id)
                except CaptureError as rollback_exc:
                    if self.debugger:
                        self.debugger.log_error("ROLLBACK_FAILED", f"{event.id}: {rollback_exc}")
            raise StoreError(f"Could not log penalty area entry: {exc}") from exc

        with self._lock:
            if self._pending is suggestion:
                self._pending = None
        if self.debugger:
            self.debugger.log_suggestion("ACCEPTED", suggestion)
        return written
