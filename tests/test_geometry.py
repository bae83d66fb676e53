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
"""Tests for pitch zones, penalty boxes and goal-mouth classification."""

from pitchside.engine.config import AWAY, HOME
from pitchside.engine.geometry import (
    DEFENSIVE_THIRD,
    FINAL_THIRD,
    MIDDLE_THIRD,
    clamp,
    home_attacks_left_for_half,
    in_left_penalty_area,
    in_right_penalty_area,
    is_in_opponent_penalty_area,
    relative_third_of,
    shot_zone,
    team_attacks_right,
    third_of,
)


class TestThirds:
    """Thirds on the fixed axis and relative to a team."""

    def test_fixed_thirds(self) -> None:
        """Fixed thirds split the pitch at the same lines."""
        assert third_of(10) == DEFENSIVE_THIRD
        assert third_of(33.33) == MIDDLE_THIRD
        assert third_of(50) == MIDDLE_THIRD
        assert third_of(66.66) == FINAL_THIRD
        assert third_of(150) == FINAL_THIRD

    def test_relative_third_flips_for_left_attackers(self) -> None:
        """Relative thirds flip for left-attacking teams."""
        assert relative_third_of(80, attacks_right=True) == FINAL_THIRD
        assert relative_third_of(80, attacks_right=False) == DEFENSIVE_THIRD
        assert relative_third_of(10, attacks_right=False) == FINAL_THIRD

    def test_clamp(self) -> None:
        """Points are clamped to the pitch."""
        assert clamp(-5) == 0.0
        assert clamp(105) == 100.0
        assert clamp(42.5) == 42.5


class TestDirection:
    """Second-half orientation is always derived from the first."""

    def test_second_half_is_negated(self) -> None:
        """The second half negates the direction."""
        assert home_attacks_left_for_half(True, 1) is True
        assert home_attacks_left_for_half(True, 2) is False
        assert home_attacks_left_for_half(False, 2) is True

    def test_away_attacks_opposite_way(self) -> None:
        """The away side attacks the opposite way."""
        assert team_attacks_right(True, HOME) is False
        assert team_attacks_right(True, AWAY) is True
        assert team_attacks_right(False, HOME) is True
        assert team_attacks_right(False, AWAY) is False


class TestPenaltyAreas:
    """Box membership uses inclusive boundaries."""

    def test_box_boundaries(self) -> None:
        """Box boundaries are inclusive."""
        assert in_left_penalty_area(17, 20)
        assert not in_left_penalty_area(17.1, 50)
        assert in_right_penalty_area(83, 80)
        assert not in_right_penalty_area(90, 19.9)

    def test_opponent_box_depends_on_side_and_half(self) -> None:
        """The opponent box depends on side and half."""
        # Home attacks right when home_attacks_left is False.
        assert is_in_opponent_penalty_area(90, 50, False, HOME)
        assert not is_in_opponent_penalty_area(50, 50, False, HOME)
        assert not is_in_opponent_penalty_area(90, 50, True, HOME)
        assert is_in_opponent_penalty_area(10, 50, True, HOME)
        assert is_in_opponent_penalty_area(90, 50, True, AWAY)


class TestShotZone:
    """Goal-mouth diagram cells."""

    def test_misses(self) -> None:
        """Points outside the frame miss."""
        assert shot_zone(50, 10) == "over"
        assert shot_zone(5, 50) == "wide_left"
        assert shot_zone(95, 50) == "wide_right"

    def test_frame_cells(self) -> None:
        """Frame cells map to the goal mouth."""
        assert shot_zone(20, 25) == "top_left"
        assert shot_zone(50, 55) == "middle_center"
        assert shot_zone(80, 95) == "bottom_right"
