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
"""Domain models for logged match events and pitch coordinates.

An :class:`EventDraft` holds everything the operator supplied for one action
and validates it on construction. The store turns a draft into a
:class:`MatchEvent` by stamping an id, a creation sequence number and a wall
clock time. Events are immutable; the only way to change one is to delete it
and insert a new draft.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Optional, Tuple

from pitchside.engine.config import (
    AERIAL_OUTCOMES,
    CORNER_DELIVERIES,
    EVENT_TYPES,
    SHOT_OUTCOMES,
    WITHOUT_BALL_EVENTS,
)
from pitchside.errors import ValidationError

COORDINATE_MIN = 0.0
COORDINATE_MAX = 100.0


def clamp_coordinate(value: float) -> float:
    """Clamp a single coordinate to the normalised pitch range.

    Parameters
    ----------
    value : float
        Raw coordinate, possibly outside ``[0, 100]``.

    Returns
    -------
    float
        ``value`` limited to ``[0, 100]``.
    """
    return max(COORDINATE_MIN, min(COORDINATE_MAX, float(value)))


@dataclass(frozen=True, slots=True)
class PitchPoint:
    """A location on the normalised pitch.

    Parameters
    ----------
    x : float
        Position along the goal-to-goal axis, ``0`` to ``100``.
    y : float
        Position along the touchline-to-touchline axis, ``0`` to ``100``.
    """

    x: float
    y: float

    def __post_init__(self) -> None:
        """Reject coordinates outside the normalised pitch."""
        for axis, value in (("x", self.x), ("y", self.y)):
            if not COORDINATE_MIN <= value <= COORDINATE_MAX:
                raise ValidationError(f"{axis} must be between 0 and 100, got {value}", field=axis)

    @classmethod
    def clamped(cls, x: float, y: float) -> PitchPoint:
        """Build a point after forcing both coordinates onto the pitch.

        Parameters
        ----------
        x : float
            Raw ``x`` coordinate.
        y : float
            Raw ``y`` coordinate.

        Returns
        -------
        PitchPoint
            Point with both coordinates clamped to ``[0, 100]``.
        """
        return cls(clamp_coordinate(x), clamp_coordinate(y))


def _point_from(value: Any) -> Optional[PitchPoint]:
    """Convert a serialised point back into a :class:`PitchPoint`.

    Parameters
    ----------
    value : Any
        ``None``, a ``PitchPoint``, a mapping with ``x``/``y`` keys or a pair.

    Returns
    -------
    Optional[PitchPoint]
        The decoded point or ``None``.
    """
    if value is None or isinstance(value, PitchPoint):
        return value
    if isinstance(value, dict):
        return PitchPoint(float(value["x"]), float(value["y"]))
    x, y = value
    return PitchPoint(float(x), float(y))


@dataclass(frozen=True, slots=True)
class EventDraft:
    """Operator supplied fields for an event that has not been stored yet.

    Parameters
    ----------
    match_id : str
        Match the event belongs to.
    player_id : str
        Acting player (the player going off for substitutions).
    event_type : str
        One of the codes in :data:`pitchside.engine.config.EVENT_TYPES`.
    half : int
        ``1`` or ``2``.
    minute : int
        Match minute, never negative.
    seconds : int
        Seconds within the minute, ``0`` to ``59``.
    start : Optional[PitchPoint]
        Where the action happened; required for on-pitch types.
    end : Optional[PitchPoint]
        Where the ball ended up; required exactly for end-position types.
    successful : bool
        Whether the action achieved its aim.
    target_player_id : Optional[str]
        Receiving player, when known.
    substitute_player_id : Optional[str]
        Player coming on for a substitution.
    shot_outcome : Optional[str]
        One of :data:`SHOT_OUTCOMES`; shots only.
    aerial_outcome : Optional[str]
        One of :data:`AERIAL_OUTCOMES`; aerial duels only.
    corner_delivery : Optional[str]
        One of :data:`CORNER_DELIVERIES`; corners only.
    goal_mouth : Optional[PitchPoint]
        Shot placement on the goal-mouth diagram; shots only.
    phase_id : Optional[str]
        Phase the event is bound to.
    """

    match_id: str
    player_id: str
    event_type: str
    half: int
    minute: int
    seconds: int
    start: Optional[PitchPoint] = None
    end: Optional[PitchPoint] = None
    successful: bool = True
    target_player_id: Optional[str] = None
    substitute_player_id: Optional[str] = None
    shot_outcome: Optional[str] = None
    aerial_outcome: Optional[str] = None
    corner_delivery: Optional[str] = None
    goal_mouth: Optional[PitchPoint] = None
    phase_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Enforce the structural rules every stored event must satisfy."""
        config = EVENT_TYPES.get(self.event_type)
        if config is None:
            raise ValidationError(f"Unknown event type: {self.event_type}", field="event_type")
        if not self.match_id:
            raise ValidationError("Event must belong to a match", field="match_id")
        if not self.player_id:
            raise ValidationError("Please select a player and event type", field="player_id")
        if self.half not in (1, 2):
            raise ValidationError("Half must be 1 or 2", field="half")
        if self.minute < 0:
            raise ValidationError("Minute cannot be negative", field="minute")
        if not 0 <= self.seconds <= 59:
            raise ValidationError("Seconds must be between 0 and 59", field="seconds")

        if self.event_type in WITHOUT_BALL_EVENTS:
            if self.start is not None or self.end is not None:
                raise ValidationError(f"{config.label} does not take a pitch position", field="start")
        else:
            if self.start is None:
                raise ValidationError("Please click on the pitch to mark the position", field="start")
            if config.requires_end_position and self.end is None:
                raise ValidationError("This event type requires an end position", field="end")
            if not config.requires_end_position and self.end is not None:
                raise ValidationError(f"{config.label} does not take an end position", field="end")

        if config.requires_substitute_player:
            if not self.substitute_player_id:
                raise ValidationError("Select the substitute coming ON", field="substitute_player_id")
            if self.substitute_player_id == self.player_id:
                raise ValidationError("A player cannot replace themselves", field="substitute_player_id")
        elif self.substitute_player_id is not None:
            raise ValidationError(f"{config.label} does not take a substitute", field="substitute_player_id")

        self._check_modifier("shot_outcome", self.shot_outcome, SHOT_OUTCOMES, "shot")
        self._check_modifier("aerial_outcome", self.aerial_outcome, AERIAL_OUTCOMES, "aerial_duel")
        self._check_modifier("corner_delivery", self.corner_delivery, CORNER_DELIVERIES, "corner")
        if self.goal_mouth is not None and self.event_type != "shot":
            raise ValidationError("Only shots record a goal-mouth placement", field="goal_mouth")

    def _check_modifier(self, name: str, value: Optional[str], allowed: Tuple[str, ...], owner: str) -> None:
        """Validate an optional outcome modifier.

        Parameters
        ----------
        name : str
            Field name used in error messages.
        value : Optional[str]
            Value supplied for the modifier.
        allowed : Tuple[str, ...]
            Accepted values.
        owner : str
            The only event type that may carry this modifier.
        """
        if value is None:
            return
        if self.event_type != owner:
            raise ValidationError(f"{name} is only valid for {owner} events", field=name)
        if value not in allowed:
            raise ValidationError(f"Invalid {name}: {value}", field=name)


@dataclass(frozen=True, slots=True)
class MatchEvent:
    """A stored, immutable event record.

    Parameters
    ----------
    id : str
        Opaque identifier assigned by the store.
    sequence : int
        Monotonic creation counter used for audit ordering.
    created_at : float
        Wall clock time (UNIX seconds) when the record was stored.
    match_id : str
        Match the event belongs to.
    player_id : str
        Acting player.
    event_type : str
        Event type code.
    half : int
        ``1`` or ``2``.
    minute : int
        Match minute.
    seconds : int
        Seconds within the minute.
    start : Optional[PitchPoint]
        Where the action happened.
    end : Optional[PitchPoint]
        Where the ball ended up.
    successful : bool
        Whether the action achieved its aim.
    target_player_id : Optional[str]
        Receiving player.
    substitute_player_id : Optional[str]
        Player coming on.
    shot_outcome : Optional[str]
        Shot result.
    aerial_outcome : Optional[str]
        Aerial duel result.
    corner_delivery : Optional[str]
        Corner delivery style.
    goal_mouth : Optional[PitchPoint]
        Shot placement on the goal-mouth diagram.
    phase_id : Optional[str]
        Phase the event is bound to.
    """

    id: str
    sequence: int
    created_at: float
    match_id: str
    player_id: str
    event_type: str
    half: int
    minute: int
    seconds: int
    start: Optional[PitchPoint] = None
    end: Optional[PitchPoint] = None
    successful: bool = True
    target_player_id: Optional[str] = None
    substitute_player_id: Optional[str] = None
    shot_outcome: Optional[str] = None
    aerial_outcome: Optional[str] = None
    corner_delivery: Optional[str] = None
    goal_mouth: Optional[PitchPoint] = None
    phase_id: Optional[str] = None

    @classmethod
    def from_draft(cls, draft: EventDraft, event_id: str, sequence: int, created_at: float) -> MatchEvent:
        """Stamp a validated draft with its storage identity.

        Parameters
        ----------
        draft : EventDraft
            Validated operator input.
        event_id : str
            Identifier chosen by the store.
        sequence : int
            Creation counter value.
        created_at : float
            Storage time in UNIX seconds.

        Returns
        -------
        MatchEvent
            The stored record.
        """
        return cls(id=event_id, sequence=sequence, created_at=created_at, **_draft_fields(draft))

    def to_draft(self) -> EventDraft:
        """Return the operator fields of this event as a fresh draft.

        Returns
        -------
        EventDraft
            Draft that recreates this event when inserted.
        """
        return EventDraft(
            match_id=self.match_id,
            player_id=self.player_id,
            event_type=self.event_type,
            half=self.half,
            minute=self.minute,
            seconds=self.seconds,
            start=self.start,
            end=self.end,
            successful=self.successful,
            target_player_id=self.target_player_id,
            substitute_player_id=self.substitute_player_id,
            shot_outcome=self.shot_outcome,
            aerial_outcome=self.aerial_outcome,
            corner_delivery=self.corner_delivery,
            goal_mouth=self.goal_mouth,
            phase_id=self.phase_id,
        )

    def with_phase(self, phase_id: Optional[str]) -> MatchEvent:
        """Return a copy bound to ``phase_id``.

        Parameters
        ----------
        phase_id : Optional[str]
            New phase reference, or ``None`` to unbind.

        Returns
        -------
        MatchEvent
            Copy of the event with the new phase reference.
        """
        return replace(self, phase_id=phase_id)

    @property
    def clock_key(self) -> Tuple[int, int, int, int]:
        """Return the chronological sort key ``(half, minute, seconds, sequence)``."""
        return (self.half, self.minute, self.seconds, self.sequence)

    @property
    def clock_label(self) -> str:
        """Return the match time formatted as ``MM:SS``."""
        return f"{self.minute:02d}:{self.seconds:02d}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the event into JSON friendly primitives.

        Returns
        -------
        Dict[str, Any]
            Plain mapping with points expressed as ``{"x": .., "y": ..}``.
        """
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> MatchEvent:
        """Rebuild an event from :meth:`to_dict` output.

        Parameters
        ----------
        data : Dict[str, Any]
            Serialised event mapping.

        Returns
        -------
        MatchEvent
            The decoded event.

        Raises
        ------
        ValidationError
            If the stored fields no longer form a valid event.
        """
        payload = dict(data)
        for key in ("start", "end", "goal_mouth"):
            payload[key] = _point_from(payload.get(key))
        event = cls(**payload)
        event.to_draft()
        return event


def _draft_fields(draft: EventDraft) -> Dict[str, Any]:
    """Return the draft fields as keyword arguments, keeping points intact.

    Parameters
    ----------
    draft : EventDraft
        Draft to unpack.

    Returns
    -------
    Dict[str, Any]
        Field name to value mapping.
    """
    return {name: getattr(draft, name) for name in EventDraft.__dataclass_fields__}
