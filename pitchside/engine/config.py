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
"""Central configuration for capture tuning parameters and event types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Tuple

HOME = "home"
AWAY = "away"
SIDES: Tuple[str, str] = (HOME, AWAY)

SHOT_OUTCOMES: Tuple[str, ...] = ("goal", "on_target", "off_target", "blocked")
AERIAL_OUTCOMES: Tuple[str, ...] = ("won", "lost")
CORNER_DELIVERIES: Tuple[str, ...] = ("inswing", "outswing", "short")
PHASE_OUTCOMES: Tuple[str, ...] = ("goal", "shot", "lost_possession")


@dataclass(slots=True)
class PitchZoneConfig:
    """Zone boundaries on the normalised 0-100 pitch.

    Parameters
    ----------
    min_coordinate : float, default=0.0
        Lowest valid value for either axis.
    max_coordinate : float, default=100.0
        Highest valid value for either axis.
    defensive_third_limit : float, default=33.33
        ``x`` below which a point lies in the defensive third.
    middle_third_limit : float, default=66.66
        ``x`` below which a point lies in the middle third.
    penalty_area_depth : float, default=17.0
        Depth of each penalty box measured from its goal line.
    penalty_area_min_y : float, default=20.0
        Lower ``y`` edge of both penalty boxes.
    penalty_area_max_y : float, default=80.0
        Upper ``y`` edge of both penalty boxes.
    centre : Tuple[float, float], default=(50.0, 50.0)
        Fallback ball position when nothing better is known.
    """

    min_coordinate: float = 0.0
    max_coordinate: float = 100.0
    defensive_third_limit: float = 33.33
    middle_third_limit: float = 66.66
    penalty_area_depth: float = 17.0
    penalty_area_min_y: float = 20.0
    penalty_area_max_y: float = 80.0
    centre: Tuple[float, float] = (50.0, 50.0)

    @property
    def left_box_max_x(self) -> float:
        """Return the far edge of the left-hand penalty box."""
        return self.min_coordinate + self.penalty_area_depth

    @property
    def right_box_min_x(self) -> float:
        """Return the near edge of the right-hand penalty box."""
        return self.max_coordinate - self.penalty_area_depth


@dataclass(slots=True)
class GoalMouthConfig:
    """Layout of the goal-mouth diagram used to tag shot placement.

    Parameters
    ----------
    left_post : float, default=15.0
        ``x`` of the left post; anything smaller is wide left.
    right_post : float, default=85.0
        ``x`` of the right post; anything larger is wide right.
    crossbar : float, default=20.0
        ``y`` of the crossbar; anything smaller went over.
    goal_line : float, default=90.0
        ``y`` of the ground line at the bottom of the frame.
    upper_split : float, default=0.33
        Fraction of the frame separating the top and middle bands.
    lower_split : float, default=0.66
        Fraction of the frame separating the middle and bottom bands.
    """

    left_post: float = 15.0
    right_post: float = 85.0
    crossbar: float = 20.0
    goal_line: float = 90.0
    upper_split: float = 0.33
    lower_split: float = 0.66


@dataclass(slots=True)
class ClockConfig:
    """Match clock behaviour.

    Parameters
    ----------
    auto_advance_seconds : int, default=2
        Seconds added to the clock after every saved event.
    adjust_step_seconds : int, default=15
        Step applied by the clock nudge shortcuts.
    second_half_start_minute : int, default=45
        Earliest minute that may be shown during the second half.
    """

    auto_advance_seconds: int = 2
    adjust_step_seconds: int = 15
    second_half_start_minute: int = 45


@dataclass(slots=True)
class BallStateConfig:
    """Parameters for the derived ball marker and trail.

    Parameters
    ----------
    trail_length : int, default=5
        Number of possession events kept in the trail.
    trail_min_opacity : float, default=0.25
        Opacity of the oldest trail segment.
    trail_max_opacity : float, default=1.0
        Opacity of the newest trail segment.
    """

    trail_length: int = 5
    trail_min_opacity: float = 0.25
    trail_max_opacity: float = 1.0


@dataclass(slots=True)
class SessionConfig:
    """Operator session defaults.

    Parameters
    ----------
    recent_player_limit : int, default=5
        Size of the recently used player list behind the digit shortcuts.
    recent_target_limit : int, default=5
        Size of the recently used receiver list.
    chain_default_event_type : str, default="pass"
        Event type used by chain mode when none is selected.
    sticky_player : bool, default=False
        Whether the acting player survives a form reset by default.
    notice_history : int, default=50
        Number of operator notices kept for display.
    """

    recent_player_limit: int = 5
    recent_target_limit: int = 5
    chain_default_event_type: str = "pass"
    sticky_player: bool = False
    notice_history: int = 50


@dataclass(slots=True)
class SuggestionConfig:
    """Lifetime of the penalty-area-entry prompt.

    Parameters
    ----------
    penalty_suggestion_timeout : float, default=5.0
        Seconds before an unanswered suggestion is dismissed automatically.
    """

    penalty_suggestion_timeout: float = 5.0


@dataclass(slots=True)
class CaptureConfig:
    """Top-level configuration container exposing every tuning block.

    Parameters
    ----------
    pitch : PitchZoneConfig
        Zone boundaries on the normalised pitch.
    goal_mouth : GoalMouthConfig
        Layout of the shot placement diagram.
    clock : ClockConfig
        Match clock behaviour.
    ball_state : BallStateConfig
        Trail and marker parameters.
    session : SessionConfig
        Operator session defaults.
    suggestion : SuggestionConfig
        Penalty-area prompt lifetime.
    """

    pitch: PitchZoneConfig = field(default_factory=PitchZoneConfig)
    goal_mouth: GoalMouthConfig = field(default_factory=GoalMouthConfig)
    clock: ClockConfig = field(default_factory=ClockConfig)
    ball_state: BallStateConfig = field(default_factory=BallStateConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    suggestion: SuggestionConfig = field(default_factory=SuggestionConfig)


CAPTURE_CONFIG = CaptureConfig()
"""Singleton-style access to the default capture configuration."""


@dataclass(frozen=True, slots=True)
class EventTypeConfig:
    """Static description of one loggable event type.

    Parameters
    ----------
    code : str
        Stored identifier, for example ``"key_pass"``.
    label : str
        Display label shown to the operator.
    category : str
        Grouping used by the type picker (``passing``, ``shooting``, ...).
    requires_end_position : bool, default=False
        Whether the event records where the ball ended up.
    prompts_target_player : bool, default=False
        Whether the picker asks for a receiving player.
    requires_substitute_player : bool, default=False
        Whether a second (incoming) player must be chosen.
    """

    code: str
    label: str
    category: str
    requires_end_position: bool = False
    prompts_target_player: bool = False
    requires_substitute_player: bool = False


def _types(*configs: EventTypeConfig) -> Dict[str, EventTypeConfig]:
    """Index event type records by code.

    Parameters
    ----------
    *configs : EventTypeConfig
        Records to index.

    Returns
    -------
    Dict[str, EventTypeConfig]
        Mapping from code to record in declaration order.
    """
    return {cfg.code: cfg for cfg in configs}


EVENT_TYPES: Dict[str, EventTypeConfig] = _types(
    EventTypeConfig("pass", "Pass", "passing", requires_end_position=True),
    EventTypeConfig("key_pass", "Key Pass", "passing", requires_end_position=True, prompts_target_player=True),
    EventTypeConfig("assist", "Assist", "passing", requires_end_position=True, prompts_target_player=True),
    EventTypeConfig("cross", "Cross", "passing", requires_end_position=True),
    EventTypeConfig("cutback", "Cutback", "passing", requires_end_position=True),
    EventTypeConfig("penalty_area_pass", "Penalty Area Pass", "passing", requires_end_position=True),
    EventTypeConfig("shot", "Shot", "shooting"),
    EventTypeConfig("penalty", "Penalty", "shooting"),
    EventTypeConfig("tackle_won", "Tackle Won", "defensive"),
    EventTypeConfig("tackle_not_won", "Tackle Not Won", "defensive"),
    EventTypeConfig("foul_committed", "Foul Committed", "defensive"),
    EventTypeConfig("foul_won", "Foul Won", "defensive"),
    EventTypeConfig("clearance", "Clearance", "defensive"),
    EventTypeConfig("aerial_duel", "Aerial Duel", "defensive"),
    EventTypeConfig("save", "Save", "defensive"),
    EventTypeConfig("block", "Block", "defensive"),
    EventTypeConfig("defensive_error", "Defensive Error", "defensive"),
    EventTypeConfig("carry", "Carry", "movement", requires_end_position=True),
    EventTypeConfig("dribble", "Dribble", "movement", requires_end_position=True),
    EventTypeConfig("run_in_behind", "Run in Behind", "movement", requires_end_position=True),
    EventTypeConfig("overlap", "Overlap", "movement", requires_end_position=True),
    EventTypeConfig("penalty_area_entry", "Penalty Area Entry", "movement"),
    EventTypeConfig("offside", "Offside", "movement"),
    EventTypeConfig("corner", "Corner", "set_piece"),
    EventTypeConfig(
        "throw_in", "Throw In", "set_piece", requires_end_position=True, prompts_target_player=True
    ),
    EventTypeConfig("free_kick", "Free Kick", "set_piece"),
    EventTypeConfig("goal_kick", "Goal Kick", "set_piece"),
    EventTypeConfig("kick_off", "Kick Off", "set_piece"),
    EventTypeConfig("goal_restart", "Goal Restart", "set_piece"),
    EventTypeConfig("substitution", "Substitution", "without_ball", requires_substitute_player=True),
    EventTypeConfig("yellow_card", "Yellow Card", "without_ball"),
    EventTypeConfig("red_card", "Red Card", "without_ball"),
)

WITHOUT_BALL_EVENTS: FrozenSet[str] = frozenset(
    code for code, cfg in EVENT_TYPES.items() if cfg.category == "without_ball"
)

# Types where the unsuccessful toggle is offered.
EVENTS_WITH_UNSUCCESSFUL: FrozenSet[str] = frozenset(
    {"pass", "key_pass", "assist", "carry", "dribble", "cross", "cutback", "corner", "throw_in", "penalty_area_pass"}
)

EVENTS_WITH_TARGET_PLAYER: FrozenSet[str] = frozenset(
    {"pass", "key_pass", "assist", "throw_in", "cross", "cutback", "penalty_area_pass"}
)

# Types that move the ball from start to end.
BALL_MOVEMENT_EVENTS: FrozenSet[str] = frozenset(
    {
        "pass",
        "key_pass",
        "assist",
        "carry",
        "dribble",
        "cross",
        "cutback",
        "throw_in",
        "penalty_area_pass",
        "run_in_behind",
        "overlap",
    }
)

# Types that can plausibly carry or move the ball.
BALL_POSSESSION_EVENTS: FrozenSet[str] = frozenset(
    {
        "pass",
        "key_pass",
        "assist",
        "shot",
        "carry",
        "dribble",
        "clearance",
        "cross",
        "cutback",
        "corner",
        "throw_in",
        "free_kick",
        "goal_kick",
        "kick_off",
        "penalty_area_entry",
        "penalty_area_pass",
    }
)

# After one of these no next start position is suggested.
CONTINUITY_BREAKING_EVENTS: FrozenSet[str] = frozenset(
    {
        "shot",
        "penalty",
        "clearance",
        "aerial_duel",
        "tackle_won",
        "tackle_not_won",
        "foul_committed",
        "foul_won",
        "defensive_error",
        "corner",
        "throw_in",
        "free_kick",
        "goal_restart",
        "save",
        "block",
        "offside",
        "substitution",
        "yellow_card",
        "red_card",
    }
)

# Types inspected for penalty-area entries.
BALL_PROGRESSION_EVENTS: FrozenSet[str] = frozenset(
    {
        "carry",
        "dribble",
        "pass",
        "key_pass",
        "assist",
        "run_in_behind",
        "cross",
        "throw_in",
        "cutback",
        "penalty_area_pass",
    }
)

SELF_ENTRY_EVENTS: FrozenSet[str] = frozenset({"carry", "dribble"})

CHAIN_ELIGIBLE_EVENTS: FrozenSet[str] = frozenset(
    code for code, cfg in EVENT_TYPES.items() if cfg.requires_end_position
)


def get_event_type(code: str) -> EventTypeConfig | None:
    """Look up an event type record.

    Parameters
    ----------
    code : str
        Stored identifier of the event type.

    Returns
    -------
    EventTypeConfig | None
        The matching record, or ``None`` for unknown codes.
    """
    return EVENT_TYPES.get(code)


def event_label(code: str) -> str:
    """Return the display label for an event type code.

    Parameters
    ----------
    code : str
        Stored identifier of the event type.

    Returns
    -------
    str
        The configured label, or the code itself when unknown.
    """
    cfg = EVENT_TYPES.get(code)
    return cfg.label if cfg is not None else code


def requires_end_position(code: str) -> bool:
    """Return whether events of ``code`` must carry an end position.

    Parameters
    ----------
    code : str
        Stored identifier of the event type.

    Returns
    -------
    bool
        ``True`` when the type records a destination.
    """
    cfg = EVENT_TYPES.get(code)
    return bool(cfg and cfg.requires_end_position)
