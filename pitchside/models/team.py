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
"""Squad and team sheet domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from pitchside.engine.config import AWAY, HOME, SIDES

PLAYER_STATUSES = ("starting", "substitute")


@dataclass(frozen=True)
class SquadPlayer:
    """One player on a match-day squad list.

    Parameters
    ----------
    player_id : str
        Unique identifier of the player.
    name : str
        Display name.
    jersey_number : int
        Shirt number, ``1`` to ``99``.
    team_id : str
        Identifier of the team the player belongs to.
    role : str
        Positional role code (for example ``"CM"``).
    status : str
        ``"starting"`` or ``"substitute"``.
    """

    player_id: str
    name: str
    jersey_number: int
    team_id: str
    role: str = "CM"
    status: str = "starting"

    def __post_init__(self) -> None:
        """Validate the shirt number and squad status."""
        if not 1 <= self.jersey_number <= 99:
            raise ValueError("jersey_number must be between 1 and 99")
        if self.status not in PLAYER_STATUSES:
            raise ValueError(f"status must be one of {PLAYER_STATUSES}")

    @property
    def label(self) -> str:
        """Return ``"#<jersey> <name>"`` for compact displays."""
        return f"#{self.jersey_number} {self.name}"


@dataclass
class TeamSheet:
    """A team and its squad for one match.

    Parameters
    ----------
    team_id : str
        Unique identifier for the team.
    name : str
        Display name for the squad.
    side : str
        ``"home"`` or ``"away"``.
    players : List[SquadPlayer]
        Every player named in the squad.
    """

    team_id: str
    name: str
    side: str
    players: List[SquadPlayer] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Ensure the side is known and shirt numbers are unique."""
        if self.side not in SIDES:
            raise ValueError(f"side must be one of {SIDES}")
        numbers = [p.jersey_number for p in self.players]
        if len(numbers) != len(set(numbers)):
            raise ValueError(f"Duplicate jersey numbers in {self.name}")

    def get_player(self, player_id: str) -> Optional[SquadPlayer]:
        """Find a player by id.

        Parameters
        ----------
        player_id : str
            Identifier to look up.

        Returns
        -------
        Optional[SquadPlayer]
            The matching player or ``None``.
        """
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None


class Roster:
    """Lookup table over both squads of a match.

    Parameters
    ----------
    home : Iterable[SquadPlayer]
        Players of the home squad.
    away : Iterable[SquadPlayer]
        Players of the away squad.
    """

    def __init__(self, home: Iterable[SquadPlayer] = (), away: Iterable[SquadPlayer] = ()) -> None:
        """Index both squads by player id.

        Parameters
        ----------
        home : Iterable[SquadPlayer]
            Players of the home squad.
        away : Iterable[SquadPlayer]
            Players of the away squad.
        """
        self._players: Dict[str, SquadPlayer] = {}
        self._sides: Dict[str, str] = {}
        self._by_side: Dict[str, List[SquadPlayer]] = {HOME: [], AWAY: []}
        for side, players in ((HOME, home), (AWAY, away)):
            for player in players:
                self._players[player.player_id] = player
                self._sides[player.player_id] = side
                self._by_side[side].append(player)

    @classmethod
    def from_team_sheets(cls, home: TeamSheet, away: TeamSheet) -> Roster:
        """Build a roster from two team sheets.

        Parameters
        ----------
        home : TeamSheet
            Home team sheet.
        away : TeamSheet
            Away team sheet.

        Returns
        -------
        Roster
            Roster covering both squads.
        """
        return cls(home.players, away.players)

    def __len__(self) -> int:
        return len(self._players)

    def get(self, player_id: Optional[str]) -> Optional[SquadPlayer]:
        """Resolve a player id.

        Parameters
        ----------
        player_id : Optional[str]
            Identifier to look up; ``None`` resolves to ``None``.

        Returns
        -------
        Optional[SquadPlayer]
            The player or ``None`` when unknown.
        """
        if player_id is None:
            return None
        return self._players.get(player_id)

    def side_of(self, player_id: Optional[str]) -> Optional[str]:
        """Return ``"home"`` or ``"away"`` for a player id.

        Parameters
        ----------
        player_id : Optional[str]
            Identifier to look up.

        Returns
        -------
        Optional[str]
            The player's side or ``None`` when unknown.
        """
        if player_id is None:
            return None
        return self._sides.get(player_id)

    def team_of(self, player_id: Optional[str]) -> Optional[str]:
        """Return the team id of a player.

        Parameters
        ----------
        player_id : Optional[str]
            Identifier to look up.

        Returns
        -------
        Optional[str]
            The team id or ``None`` when unknown.
        """
        player = self.get(player_id)
        return player.team_id if player is not None else None

    def jersey_of(self, player_id: Optional[str]) -> Optional[int]:
        """Return the shirt number of a player.

        Parameters
        ----------
        player_id : Optional[str]
            Identifier to look up.

        Returns
        -------
        Optional[int]
            Shirt number or ``None`` when unknown.
        """
        player = self.get(player_id)
        return player.jersey_number if player is not None else None

    def players(self, side: str) -> List[SquadPlayer]:
        """Return one side's squad sorted by shirt number.

        Parameters
        ----------
        side : str
            ``"home"`` or ``"away"``.

        Returns
        -------
        List[SquadPlayer]
            The squad, or an empty list for an unknown side.
        """
        return sorted(self._by_side.get(side, []), key=lambda p: p.jersey_number)

    def find_by_jersey(self, side: str, jersey_number: int) -> Optional[SquadPlayer]:
        """Find a player on one side by shirt number.

        Parameters
        ----------
        side : str
            ``"home"`` or ``"away"``.
        jersey_number : int
            Shirt number to look up.

        Returns
        -------
        Optional[SquadPlayer]
            The matching player or ``None``.
        """
        for player in self._by_side.get(side, []):
            if player.jersey_number == jersey_number:
                return player
        return None
