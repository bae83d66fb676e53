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
"""Operator-driven match clock.

The clock never ticks on its own: the operator nudges it and every save
advances it by a small fixed step. It refuses to show a time earlier than
the start of the active half.
"""

from __future__ import annotations

from typing import Optional, Tuple

from pitchside.engine.config import CAPTURE_CONFIG, ClockConfig


class MatchClock:
    """Minute and second counter with per-half clamping.

    Parameters
    ----------
    half : int, default=1
        Active half.
    minute : int, default=0
        Initial minute.
    seconds : int, default=0
        Initial second.
    config : Optional[ClockConfig]
        Step sizes and half boundaries; defaults to :data:`CAPTURE_CONFIG`.
    """

    def __init__(self, half: int = 1, minute: int = 0, seconds: int = 0, config: Optional[ClockConfig] = None) -> None:
        """Create a clock and clamp the initial time to the half.

        Parameters
        ----------
        half : int
            Active half.
        minute : int
            Initial minute.
        seconds : int
            Initial second.
        config : Optional[ClockConfig]
            Step sizes and half boundaries; defaults to :data:`CAPTURE_CONFIG`.
        """
        self.config = config or CAPTURE_CONFIG.clock
        self.half = half
        self._total = 0
        self.set_time(minute, seconds)

    @property
    def minute(self) -> int:
        """Return the current minute."""
        return self._total // 60

    @property
    def seconds(self) -> int:
        """Return the current second within the minute."""
        return self._total % 60

    @property
    def total_seconds(self) -> int:
        """Return the elapsed match time in seconds."""
        return self._total

    def minimum_seconds(self) -> int:
        """Return the earliest time allowed in the active half.

        Returns
        -------
        int
            ``0`` in the first half, the second-half kick-off otherwise.
        """
        return 0 if self.half == 1 else self.config.second_half_start_minute * 60

    def set_time(self, minute: int, seconds: int = 0) -> None:
        """Set the clock, normalising overflowing seconds.

        Parameters
        ----------
        minute : int
            New minute.
        seconds : int
            New second; values of 60 or more roll into the minute.
        """
        self._total = max(self.minimum_seconds(), int(minute) * 60 + int(seconds))

    def adjust(self, delta_seconds: int) -> Tuple[int, int]:
        """Move the clock forwards or backwards.

        Parameters
        ----------
        delta_seconds : int
            Signed number of seconds to add.

        Returns
        -------
        Tuple[int, int]
            The new ``(minute, seconds)``.
        """
        self._total = max(self.minimum_seconds(), self._total + int(delta_seconds))
        return self.minute, self.seconds

    def advance(self) -> Tuple[int, int]:
        """Apply the automatic post-save increment.

        Returns
        -------
        Tuple[int, int]
            The new ``(minute, seconds)``.
        """
        return self.adjust(self.config.auto_advance_seconds)

    def set_half(self, half: int) -> None:
        """Switch halves, lifting the time to the half's kick-off if needed.

        Parameters
        ----------
        half : int
            ``1`` or ``2``.
        """
        if half not in (1, 2):
            raise ValueError("half must be 1 or 2")
        self.half = half
        self._total = max(self.minimum_seconds(), self._total)

    @property
    def label(self) -> str:
        """Return the time formatted as ``MM:SS``."""
        return f"{self.minute:02d}:{self.seconds:02d}"
