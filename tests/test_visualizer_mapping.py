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
"""Tests for the display helpers that do not need a window."""

import threading
from typing import List

import pytest

from pitchside.engine.session import LoggingSession
from pitchside.models.event import PitchPoint
from pitchside.visualizer.visualizer import (
    AWAY_COLOUR,
    BALL,
    HOME_COLOUR,
    _row_at,
    fade,
    holder_third,
    join_workers,
    key_name,
    pitch_to_screen,
    run_in_background,
    screen_to_pitch,
    side_colour,
)

RECT = (100, 50, 800, 400)


def test_pitch_corners_map_to_rect() -> None:
    """Pitch corners map to the rectangle corners."""
    assert pitch_to_screen(PitchPoint(0, 0), RECT) == (100, 50)
    assert pitch_to_screen(PitchPoint(100, 100), RECT) == (900, 450)
    assert pitch_to_screen(PitchPoint(50, 50), RECT) == (500, 250)


def test_screen_to_pitch() -> None:
    """Screen points map back to pitch coordinates."""
    assert screen_to_pitch((500, 250), RECT) == (50.0, 50.0)
    assert screen_to_pitch((101, 51), RECT) == (0.1, 0.2)
    assert screen_to_pitch((99, 250), RECT) is None
    assert screen_to_pitch((500, 451), RECT) is None
    assert screen_to_pitch((0, 0), (0, 0, 0, 0)) is None


def test_side_colour() -> None:
    """Each side has its own colour."""
    assert side_colour("home") == HOME_COLOUR
    assert side_colour("away") == AWAY_COLOUR
    assert side_colour(None) == BALL


@pytest.mark.parametrize("opacity, alpha", [(1.0, 255), (0.4, 102), (-1.0, 0), (2.0, 255)])
def test_fade(opacity: float, alpha: int) -> None:
    """Opacity becomes an alpha value."""
    assert fade((10, 20, 30), opacity) == (10, 20, 30, alpha)


@pytest.mark.parametrize(
    "char, name, expected",
    [("Q", "q", "q"), ("+", "=", "+"), ("\r", "return", "enter"), ("", "f6", "f6"), (" ", "space", "space")],
)
def test_key_name(char: str, name: str, expected: str) -> None:
    """Key names include the shortcut."""
    assert key_name(char, name) == expected


def test_row_at() -> None:
    """Rows are found by screen position."""
    assert _row_at((15, 30), (10, 30), 200, 3) == 0
    assert _row_at((15, 71), (10, 30), 200, 3) == 2
    assert _row_at((15, 95), (10, 30), 200, 3) is None
    assert _row_at((300, 35), (10, 30), 200, 3) is None
    assert _row_at((15, 10), (10, 30), 200, 3) is None


def test_holder_third(session: LoggingSession) -> None:
    """The holder's third is relative to attack direction."""
    assert holder_third(session) is None
    session.select_player("h4")
    session.select_event_type("pass")
    session.pitch_click(20, 30)
    session.pitch_click(80, 40)
    session.set_target_player("h9")
    session.save()
    assert holder_third(session) == "final"

    session.select_player("a4")
    session.select_event_type("carry")
    session.pitch_click(80, 40)
    session.pitch_click(75, 45)
    session.save()
    assert holder_third(session) == "defensive"


def test_background_writes_are_joined() -> None:
    """Writes started from the window are tracked until they finish."""
    release = threading.Event()
    done: List[str] = []

    def write(label: str) -> None:
        release.wait(5)
        done.append(label)

    workers: List[threading.Thread] = []
    run_in_background(workers, write, "first")
    run_in_background(workers, write, "second")
    assert len(workers) == 2
    assert not join_workers(workers, timeout=0.01)

    release.set()
    assert join_workers(workers)
    assert workers == []
    assert sorted(done) == ["first", "second"]

    finished = run_in_background(workers, done.append, "third")
    finished.join()
    run_in_background(workers, done.append, "fourth")
    assert finished not in workers
    assert join_workers(workers)
