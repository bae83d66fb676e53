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
"""Structured logging utilities used to trace capture sessions."""

from __future__ import annotations

import time
from collections import deque
from pathlib import Path
from threading import Lock
from typing import TYPE_CHECKING, Deque, List, Optional, TextIO, Tuple

from pitchside.engine.geometry import shot_zone

if TYPE_CHECKING:
    from pitchside.engine.penalty_area import PenaltyAreaSuggestion
    from pitchside.models.event import MatchEvent, PitchPoint
    from pitchside.models.phase import Phase


def _point(point: Optional["PitchPoint"]) -> str:
    """Format an optional pitch point for a log line.

    Parameters
    ----------
    point : Optional[PitchPoint]
        Point to format.

    Returns
    -------
    str
        ``"(x, y)"`` with one decimal place, or ``"-"``.
    """
    if point is None:
        return "-"
    return f"({point.x:.1f}, {point.y:.1f})"


class CaptureDebugger:
    """Helper object that streams structured capture telemetry to disk.

    Parameters
    ----------
    output_dir : str, default="capture_logs"
        Directory where new session logs are created; created automatically when missing.
    match_id : str | None
        Match being captured, used in the session file name.
    """

    def __init__(self, output_dir: str = "capture_logs", match_id: str | None = None) -> None:
        """Initialise the debugger and start the first logging session.

        Parameters
        ----------
        output_dir : str
            Filesystem directory where log files are created or appended.
        match_id : str | None
            Match being captured, used in the session file name.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.match_id = match_id
        self.log_file: Optional[TextIO] = None
        self.log_path: Optional[Path] = None
        self.session_start = time.strftime("%Y%m%d_%H%M%S")
        self._lock = Lock()
        self._line_number = 1
        self._recent_events: Deque[Tuple[int, str]] = deque(maxlen=200)
        self.start_new_session()

    def start_new_session(self) -> None:
        """Start a new capture logging session."""
        if self.log_file:
            self.log_file.close()

        prefix = f"capture_{self.match_id}" if self.match_id else "capture"
        self.log_path = self.output_dir / f"{prefix}_{self.session_start}.txt"
        self.log_file = open(self.log_path, "w", encoding="utf-8")
        self.log_file.write(f"=== Capture Session: {time.strftime('%Y-%m-%d %H:%M:%S')} ===\n\n")

    def log_event_saved(self, event: "MatchEvent", source: str = "manual") -> None:
        """Log an event that reached the store.

        Parameters
        ----------
        event : MatchEvent
            The stored event.
        source : str
            How the event was created: ``"manual"``, ``"chain"``, ``"penalty"``
            or ``"restore"``.
        """
        outcome = "ok" if event.successful else "failed"
        extras = ""
        if event.target_player_id:
            extras += f" | Target: {event.target_player_id}"
        if event.substitute_player_id:
            extras += f" | On: {event.substitute_player_id}"
        modifier = event.shot_outcome or event.aerial_outcome or event.corner_delivery
        if modifier:
            extras += f" | Outcome: {modifier}"
        if event.goal_mouth is not None:
            extras += f" | Zone: {shot_zone(event.goal_mouth.x, event.goal_mouth.y)}"
        self._write_log(
            "EVENT_SAVED",
            f"H{event.half} {event.clock_label} | Event: {event.event_type} | Player: {event.player_id} | "
            f"From: {_point(event.start)} | To: {_point(event.end)} | {outcome} | Source: {source} | "
            f"Id: {event.id}{extras}",
        )

    def log_event_removed(self, event: "MatchEvent", reason: str) -> None:
        """Log an event that was deleted from the store.

        Parameters
        ----------
        event : MatchEvent
            The deleted event.
        reason : str
            Why it was removed, for example ``"undo"`` or ``"edit"``.
        """
        self._write_log(
            "EVENT_REMOVED",
            f"H{event.half} {event.clock_label} | Event: {event.event_type} | Id: {event.id} | Reason: {reason}",
        )

    def log_phase_change(self, action: str, phase: "Phase") -> None:
        """Log a phase being created, retagged or deleted.

        Parameters
        ----------
        action : str
            ``"CREATED"``, ``"UPDATED"`` or ``"DELETED"``.
        phase : Phase
            The affected phase.
        """
        self._write_log(
            "PHASE",
            f"{action} | Phase {phase.phase_number} | H{phase.half} | Team: {phase.team_id} | "
            f"Outcome: {phase.outcome or '-'} | Events: {len(phase.event_ids)}",
        )

    def log_direction(self, home_attacks_left: bool) -> None:
        """Log the confirmed first-half orientation.

        Parameters
        ----------
        home_attacks_left : bool
            Whether the home team attacks left in the first half.
        """
        side = "left" if home_attacks_left else "right"
        self._write_log("DIRECTION", f"Home attacks {side} in the first half")

    def log_suggestion(self, action: str, suggestion: "PenaltyAreaSuggestion") -> None:
        """Log a penalty-area suggestion changing state.

        Parameters
        ----------
        action : str
            ``"OFFERED"``, ``"ACCEPTED"`` or ``"DISMISSED"``.
        suggestion : PenaltyAreaSuggestion
            The suggestion concerned.
        """
        kind = "self" if suggestion.is_self_entry else "assisted"
        self._write_log(
            "PENALTY_AREA",
            f"{action} | {kind} | Passer: {suggestion.passer_id} | Receiver: {suggestion.receiver_id or '-'} | "
            f"At: {_point(suggestion.position)} | From event: {suggestion.source_event_type}",
        )

    def log_notice(self, level: str, message: str) -> None:
        """Log a notice shown to the operator.

        Parameters
        ----------
        level : str
            ``"info"``, ``"success"`` or ``"error"``.
        message : str
            Text of the notice.
        """
        self._write_log("NOTICE", f"{level.upper()} | {message}")

    def log_error(self, error_type: str, description: str) -> None:
        """Log an error or warning.

        Parameters
        ----------
        error_type : str
            Label describing the error classification.
        description : str
            Human-readable explanation of the issue.
        """
        self._write_log("ERROR", f"Type: {error_type} | Details: {description}")

    def _write_log(self, event_type: str, details: str) -> None:
        """Write a log entry to the file.

        Parameters
        ----------
        event_type : str
            Category label for the log entry.
        details : str
            Formatted message body to persist.
        """
        timestamp = time.strftime("%H:%M:%S")
        log_entry = f"[{timestamp}] {event_type}: {details}"

        with self._lock:
            line_no = self._line_number
            self._line_number += 1
            self._recent_events.append((line_no, log_entry))

            if self.log_file:
                self.log_file.write(f"{log_entry}\n")
                self.log_file.flush()

    def get_recent_events(self, limit: int = 20) -> List[str]:
        """Return the latest log entries with line numbers for live displays.

        Parameters
        ----------
        limit : int
            Maximum number of entries to return.

        Returns
        -------
        List[str]
            Up to ``limit`` most recent log lines with prefixed line numbers.
        """
        with self._lock:
            selected = list(self._recent_events)[-limit:]
        return [f"{line_no:05d} {entry}" for line_no, entry in selected]

    def close(self) -> None:
        """Close the log file."""
        with self._lock:
            if self.log_file:
                self.log_file.close()
                self.log_file = None
