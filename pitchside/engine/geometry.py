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
"""Zone classification on the normalised 0-100 pitch.

All functions here are pure. ``x`` runs goal to goal and ``y`` touchline to
touchline. Only the confirmed first-half direction is ever stored; every
second-half orientation is derived by negating it.
"""

from __future__ import annotations

from typing import Optional

from pitchside.engine.config import CAPTURE_CONFIG, HOME, GoalMouthConfig, PitchZoneConfig

DEFENSIVE_THIRD = "defensive"
MIDDLE_THIRD = "middle"
FINAL_THIRD = "final"


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    """Limit ``value`` to the closed range ``[low, high]``.

    Parameters
    ----------
    value : float
        Number to clamp.
    low : float
        Lower bound.
    high : float
        Upper bound.

    Returns
    -------
    float
        The clamped value.
    """
    return max(low, min(high, value))


def third_of(x: float, config: Optional[PitchZoneConfig] = None) -> str:
    """Classify ``x`` into a third of the fixed pitch axis.

    Parameters
    ----------
    x : float
        Goal-to-goal coordinate.
    config : Optional[PitchZoneConfig]
        Zone boundaries; defaults to :data:`CAPTURE_CONFIG`.

    Returns
    -------
    str
        ``"defensive"`` for ``x < 33.33``, ``"middle"`` for ``x < 66.66`` and
        ``"final"`` otherwise.
    """
    cfg = config or CAPTURE_CONFIG.pitch
    x = clamp(x, cfg.min_coordinate, cfg.max_coordinate)
    if x < cfg.defensive_third_limit:
        return DEFENSIVE_THIRD
    if x < cfg.middle_third_limit:
        return MIDDLE_THIRD
    return FINAL_THIRD


def relative_third_of(x: float, attacks_right: bool, config: Optional[PitchZoneConfig] = None) -> str:
    """Classify ``x`` into a third relative to a team's attacking direction.

    Parameters
    ----------
    x : float
        Goal-to-goal coordinate.
    attacks_right : bool
        Whether the team attacks towards ``x = 100``.
    config : Optional[PitchZoneConfig]
        Zone boundaries; defaults to :data:`CAPTURE_CONFIG`.

    Returns
    -------
    str
        Third as seen by the team: its own goal is always the defensive end.
    """
    cfg = config or CAPTURE_CONFIG.pitch
    if not attacks_right:
        x = cfg.max_coordinate - clamp(x, cfg.min_coordinate, cfg.max_coordinate)
    return third_of(x, cfg)


def home_attacks_left_for_half(home_attacks_left_first_half: bool, half: int) -> bool:
    """Return the home team's direction for a given half.

    Parameters
    ----------
    home_attacks_left_first_half : bool
        The confirmed first-half orientation.
    half : int
        ``1`` or ``2``.

    Returns
    -------
    bool
        The stored value for half 1 and its negation for half 2.
    """
    return home_attacks_left_first_half if half == 1 else not home_attacks_left_first_half


def team_attacks_right(home_attacks_left_this_half: bool, side: str) -> bool:
    """Return whether ``side`` attacks towards ``x = 100`` this half.

    Parameters
    ----------
    home_attacks_left_this_half : bool
        Home orientation for the half being classified.
    side : str
        ``"home"`` or ``"away"``.

    Returns
    -------
    bool
        ``True`` when the team's target goal is on the right.
    """
    return not home_attacks_left_this_half if side == HOME else home_attacks_left_this_half


def in_left_penalty_area(x: float, y: float, config: Optional[PitchZoneConfig] = None) -> bool:
    """Return whether a point lies inside the left-hand penalty box.

    Parameters
    ----------
    x : float
        Goal-to-goal coordinate.
    y : float
        Touchline-to-touchline coordinate.
    config : Optional[PitchZoneConfig]
        Zone boundaries; defaults to :data:`CAPTURE_CONFIG`.

    Returns
    -------
    bool
        ``True`` for ``x <= 17`` and ``20 <= y <= 80``.
    """
    cfg = config or CAPTURE_CONFIG.pitch
    return x <= cfg.left_box_max_x and cfg.penalty_area_min_y <= y <= cfg.penalty_area_max_y


def in_right_penalty_area(x: float, y: float, config: Optional[PitchZoneConfig] = None) -> bool:
    """Return whether a point lies inside the right-hand penalty box.

    Parameters
    ----------
    x : float
        Goal-to-goal coordinate.
    y : float
        Touchline-to-touchline coordinate.
    config : Optional[PitchZoneConfig]
        Zone boundaries; defaults to :data:`CAPTURE_CONFIG`.

    Returns
    -------
    bool
        ``True`` for ``x >= 83`` and ``20 <= y <= 80``.
    """
    cfg = config or CAPTURE_CONFIG.pitch
    return x >= cfg.right_box_min_x and cfg.penalty_area_min_y <= y <= cfg.penalty_area_max_y


def is_in_opponent_penalty_area(
    x: float,
    y: float,
    home_attacks_left_this_half: bool,
    side: str,
    config: Optional[PitchZoneConfig] = None,
) -> bool:
    """Return whether a point lies in the box ``side`` is attacking.

    Parameters
    ----------
    x : float
        Goal-to-goal coordinate.
    y : float
        Touchline-to-touchline coordinate.
    home_attacks_left_this_half : bool
        Home orientation for the half of the action.
    side : str
        Side of the acting team, ``"home"`` or ``"away"``.
    config : Optional[PitchZoneConfig]
        Zone boundaries; defaults to :data:`CAPTURE_CONFIG`.

    Returns
    -------
    bool
        ``True`` when the point is inside the opponent's penalty box.
    """
    cfg = config or CAPTURE_CONFIG.pitch
    x = clamp(x, cfg.min_coordinate, cfg.max_coordinate)
    y = clamp(y, cfg.min_coordinate, cfg.max_coordinate)
    if team_attacks_right(home_attacks_left_this_half, side):
        return in_right_penalty_area(x, y, cfg)
    return in_left_penalty_area(x, y, cfg)


def shot_zone(x: float, y: float, config: Optional[GoalMouthConfig] = None) -> str:
    """Classify a point on the goal-mouth diagram.

    Parameters
    ----------
    x : float
        Horizontal position on the diagram, ``0`` to ``100``.
    y : float
        Vertical position on the diagram, ``0`` at the top.
    config : Optional[GoalMouthConfig]
        Goal frame layout; defaults to :data:`CAPTURE_CONFIG`.

    Returns
    -------
    str
        ``"over"``, ``"wide_left"``, ``"wide_right"`` or a frame cell such as
        ``"top_left"`` or ``"middle_center"``.
    """
    cfg = config or CAPTURE_CONFIG.goal_mouth
    if y < cfg.crossbar:
        return "over"
    if x < cfg.left_post:
        return "wide_left"
    if x > cfg.right_post:
        return "wide_right"

    col = (x - cfg.left_post) / (cfg.right_post - cfg.left_post)
    row = (min(y, cfg.goal_line) - cfg.crossbar) / (cfg.goal_line - cfg.crossbar)

    if row < cfg.upper_split:
        band = "top"
    elif row < cfg.lower_split:
        band = "middle"
    else:
        band = "bottom"

    if col < cfg.upper_split:
        lane = "left"
    elif col < cfg.lower_split:
        lane = "center"
    else:
        lane = "right"
    return f"{band}_{lane}"
