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
"""One-time confirmation of which way the home team attacks."""

from __future__ import annotations

from typing import Optional

from pitchside.engine.geometry import home_attacks_left_for_half
from pitchside.engine.store import EventStore
from pitchside.errors import InvariantViolation
from pitchside.utils.debug import CaptureDebugger

DEFAULT_HOME_ATTACKS_LEFT = True


class AttackDirectionController:
    """Gate that blocks logging until the first-half direction is confirmed.

    Only the first-half value is ever stored. The second half is always the
    negation of it.

    Parameters
    ----------
    store : EventStore
        Backend persisting the confirmed value.
    match_id : str
        Match being captured.
    debugger : Optional[CaptureDebugger]
        Capture log receiving the confirmation line.
    """

    def __init__(self, store: EventStore, match_id: str, debugger: Optional[CaptureDebugger] = None) -> None:
        """Create an unconfirmed controller.

        Parameters
        ----------
        store : EventStore
            Backend persisting the confirmed value.
        match_id : str
            Match being captured.
        debugger : Optional[CaptureDebugger]
            Capture log receiving the confirmation line.
        """
        self.store = store
        self.match_id = match_id
        self.debugger = debugger
        self._home_attacks_left: Optional[bool] = None

    @property
    def is_confirmed(self) -> bool:
        """Return whether logging is unlocked."""
        return self._home_attacks_left is not None

    @property
    def needs_confirmation(self) -> bool:
        """Return whether the confirmation prompt should be shown."""
        return not self.is_confirmed

    def load(self, has_events: bool) -> bool:
        """Reconstruct the gate from the stored value.

        Parameters
        ----------
        has_events : bool
            Whether the match already has logged events. Such a match never
            shows the prompt again; without a stored value the default
            orientation (home attacks left) is assumed.

        Returns
        -------
        bool
            Whether the gate is confirmed afterwards.
        """
        stored = self.store.get_confirmed_direction(self.match_id)
        if stored is not None:
            self._home_attacks_left = bool(stored)
        elif has_events:
            self._home_attacks_left = DEFAULT_HOME_ATTACKS_LEFT
        else:
            self._home_attacks_left = None
        return self.is_confirmed

    def confirm(self, home_attacks_left: bool) -> bool:
        """Persist the first-half orientation and unlock logging.

        Parameters
        ----------
        home_attacks_left : bool
            Whether the home team attacks left in the first half.

        Returns
        -------
        bool
            The confirmed value.

        Raises
        ------
        InvariantViolation
            If the direction has already been confirmed.
        """
        if self.is_confirmed:
            raise InvariantViolation("Attack direction has already been confirmed")
        value = bool(home_attacks_left)
        self.store.set_confirmed_direction(self.match_id, value)
        self._home_attacks_left = value
        if self.debugger:
            self.debugger.log_direction(value)
        return value

    def home_attacks_left(self, half: int) -> bool:
        """Return the home orientation for a half.

        Parameters
        ----------
        half : int
            ``1`` or ``2``.

        Returns
        -------
        bool
            The confirmed value for half 1, its negation for half 2.

        Raises
        ------
        InvariantViolation
            If nothing has been confirmed yet.
        """
        if self._home_attacks_left is None:
            raise InvariantViolation("Confirm the attack direction before logging events")
        return home_attacks_left_for_half(self._home_attacks_left, half)
