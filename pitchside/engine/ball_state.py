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
"""Derive where the ball is from the logged event history.

Nothing in this module is stored. The session calls
:func:`derive_ball_state` with the full event list after every insert or
delete and replaces its previous result wholesale, so the markers on screen
can never drift away from the log.

The derivation has three parts:

* **holder** - the player on the ball after the last successful
  possession event. A completed pass with a known receiver hands the ball to
  the receiver at the end point; anything else leaves it with the actor.
* **trail** - the last few possession events, successful or not, with an
  opacity that rises from the oldest to the newest.
* **suggested start** - where the next action probably begins. Only produced
  when the most recent event kept the ball alive.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from pitchside.engine.config import (
    BALL_MOVEMENT_EVENTS,
    BALL_POSSESSION_EVENTS,
    CAPTURE_CONFIG,
    CONTINUITY_BREAKING_EVENTS,
    BallStateConfig,
)
from pitchside.models.event import MatchEvent, PitchPoint
from pitchside.models.team import Roster


@dataclass(frozen=True, slots=True)
class BallHolder:
    """The player currently shown on the ball.

    Parameters
    ----------
    player_id : str
        Identifier of the holder.
    jersey_number : Optional[int]
        Shirt number, when the roster knows the player.
    name : Optional[str]
        Display name, when the roster knows the player.
    side : Optional[str]
        ``"home"`` or ``"away"``, when known.
    position : PitchPoint
        Where the holder received or kept the ball.
    source_event_id : str
        Event the holder was derived from.
    """

    player_id: str
    jersey_number: Optional[int]
    name: Optional[str]
    side: Optional[str]
    position: PitchPoint
    source_event_id: str


@dataclass(frozen=True, slots=True)
class TrailSegment:
    """One step of the recent ball movement trail.

    Parameters
    ----------
    event_id : str
        Event drawn by this segment.
    event_type : str
        Type code of the event.
    start : PitchPoint
        Where the action started.
    end : Optional[PitchPoint]
        Where the ball went, for movement events.
    player_jersey : Optional[int]
        Shirt number of the actor.
    receiver_jersey : Optional[int]
        Shirt number of the receiver, when one was recorded.
    successful : bool
        Failed attempts are drawn dashed.
    opacity : float
        Rendering opacity; newer segments are more opaque.
    side : Optional[str]
        Side of the actor, when known.
    """

    event_id: str
    event_type: str
    start: PitchPoint
    end: Optional[PitchPoint]
    player_jersey: Optional[int]
    receiver_jersey: Optional[int]
    successful: bool
    opacity: float
    side: Optional[str] = None


@dataclass(frozen=True, slots=True)
class BallState:
    """Everything the pitch view needs to show where play is.

    Parameters
    ----------
    holder : Optional[BallHolder]
        Current holder, or ``None`` when no marker should be drawn.
    trail : Tuple[TrailSegment, ...]
        Recent possession events from oldest to newest.
    suggested_start : Optional[PitchPoint]
        Proposed start position for the next event.
    """

    holder: Optional[BallHolder] = None
    trail: Tuple[TrailSegment, ...] = ()
    suggested_start: Optional[PitchPoint] = None

    @property
    def ball_position(self) -> Optional[PitchPoint]:
        """Return the holder's position, if there is a holder."""
        return self.holder.position if self.holder is not None else None


EMPTY_BALL_STATE = BallState()


def chronological(events: Iterable[MatchEvent]) -> List[MatchEvent]:
    """Order events by half, minute, second and creation sequence.

    Parameters
    ----------
    events : Iterable[MatchEvent]
        Events in any order.

    Returns
    -------
    List[MatchEvent]
        A new list in match-time order.
    """
    return sorted(events, key=lambda e: e.clock_key)


def is_possession_event(event: MatchEvent) -> bool:
    """Return whether an event can carry or move the ball.

    Parameters
    ----------
    event : MatchEvent
        Event to classify.

    Returns
    -------
    bool
        ``True`` for possession-relevant types with a start position.
    """
    return event.event_type in BALL_POSSESSION_EVENTS and event.start is not None


def resolve_holder(last: MatchEvent, roster: Optional[Roster]) -> BallHolder:
    """Work out who has the ball after a successful possession event.

    Parameters
    ----------
    last : MatchEvent
        The most recent successful possession event.
    roster : Optional[Roster]
        Squad lookup used to resolve the receiver.

    Returns
    -------
    BallHolder
        Receiver at the end point for completed moves to a known teammate,
        otherwise the actor at the end (or start) point.
    """
    receiver = roster.get(last.target_player_id) if roster is not None else None
    if last.event_type in BALL_MOVEMENT_EVENTS and last.end is not None and receiver is not None:
        return BallHolder(
            player_id=receiver.player_id,
            jersey_number=receiver.jersey_number,
            name=receiver.name,
            side=roster.side_of(receiver.player_id) if roster is not None else None,
            position=last.end,
            source_event_id=last.id,
        )

    actor = roster.get(last.player_id) if roster is not None else None
    position = last.end or last.start
    return BallHolder(
        player_id=last.player_id,
        jersey_number=actor.jersey_number if actor is not None else None,
        name=actor.name if actor is not None else None,
        side=roster.side_of(last.player_id) if roster is not None else None,
        position=position,
        source_event_id=last.id,
    )


def build_trail(
    possession: Sequence[MatchEvent],
    roster: Optional[Roster],
    config: Optional[BallStateConfig] = None,
) -> Tuple[TrailSegment, ...]:
    """Turn the latest possession events into fading trail segments.

    Parameters
    ----------
    possession : Sequence[MatchEvent]
        Possession events in chronological order.
    roster : Optional[Roster]
        Squad lookup used for shirt numbers.
    config : Optional[BallStateConfig]
        Trail length and opacity range.

    Returns
    -------
    Tuple[TrailSegment, ...]
        Up to ``trail_length`` segments, oldest first.
    """
    cfg = config or CAPTURE_CONFIG.ball_state
    recent = list(possession[-cfg.trail_length :]) if cfg.trail_length > 0 else []
    count = len(recent)
    span = cfg.trail_max_opacity - cfg.trail_min_opacity

    segments = []
    for index, event in enumerate(recent):
        opacity = cfg.trail_min_opacity + span * (index + 1) / count
        segments.append(
            TrailSegment(
                event_id=event.id,
                event_type=event.event_type,
                start=event.start,
                end=event.end,
                player_jersey=roster.jersey_of(event.player_id) if roster is not None else None,
                receiver_jersey=roster.jersey_of(event.target_player_id) if roster is not None else None,
                successful=event.successful,
                opacity=round(opacity, 3),
                side=roster.side_of(event.player_id) if roster is not None else None,
            )
        )
    return tuple(segments)


def suggest_next_start(ordered: Sequence[MatchEvent]) -> Optional[PitchPoint]:
    """Propose where the next action starts.

    Parameters
    ----------
    ordered : Sequence[MatchEvent]
        Every event in chronological order.

    Returns
    -------
    Optional[PitchPoint]
        The last event's end point (or its start for possession events), or
        ``None`` when that event failed or broke the flow of play.
    """
    if not ordered:
        return None
    last = ordered[-1]
    if not last.successful or last.event_type in CONTINUITY_BREAKING_EVENTS:
        return None
    if last.end is not None:
        return last.end
    if last.event_type in BALL_POSSESSION_EVENTS:
        return last.start
    return None


def derive_ball_state(
    events: Iterable[MatchEvent],
    roster: Optional[Roster] = None,
    config: Optional[BallStateConfig] = None,
) -> BallState:
    """Compute the holder, trail and suggested start from the event log.

    Parameters
    ----------
    events : Iterable[MatchEvent]
        Every event of the match, in any order.
    roster : Optional[Roster]
        Squad lookup for shirt numbers and receivers.
    config : Optional[BallStateConfig]
        Trail parameters; defaults to :data:`CAPTURE_CONFIG`.

    Returns
    -------
    BallState
        Freshly derived state; :data:`EMPTY_BALL_STATE` for an empty log.
    """
    ordered = chronological(events)
    if not ordered:
        return EMPTY_BALL_STATE

    possession = [e for e in ordered if is_possession_event(e)]
    successful = [e for e in possession if e.successful]
    holder = resolve_holder(successful[-1], roster) if successful else None

    return BallState(
        holder=holder,
        trail=build_trail(possession, roster, config),
        suggested_start=suggest_next_start(ordered),
    )
