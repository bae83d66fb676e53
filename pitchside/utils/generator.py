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
"""Utilities that synthesise placeholder squads for quick capture sessions."""

import random
from typing import List, Optional

from pitchside.models.team import SquadPlayer, TeamSheet

STARTING_ROLES = ["GK", "RD", "CD", "CD", "LD", "RM", "CM", "CM", "LM", "RCF", "LCF"]
BENCH_ROLES = ["GK", "CD", "LD", "CM", "RM", "CF", "CF"]

FIRST_NAMES = ["John", "James", "David", "Michael", "Robert", "Carlos", "Juan", "Luis"]
LAST_NAMES = ["Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Rodriguez"]


def random_name(rng: Optional[random.Random] = None) -> str:
    """Return a pseudo-random player name.

    Parameters
    ----------
    rng : Optional[random.Random]
        Random source; the module level generator is used when omitted.

    Returns
    -------
    str
        ``"<first> <last>"``.
    """
    source = rng or random
    return f"{source.choice(FIRST_NAMES)} {source.choice(LAST_NAMES)}"


def generate_team_sheet(
    team_id: str,
    name: str,
    side: str,
    rng: Optional[random.Random] = None,
) -> TeamSheet:
    """Generate a squad of eleven starters and seven substitutes.

    Parameters
    ----------
    team_id : str
        Identifier for the team; player ids are derived from it.
    name : str
        Display name for the team.
    side : str
        ``"home"`` or ``"away"``.
    rng : Optional[random.Random]
        Random source for names, so fixtures can be reproducible.

    Returns
    -------
    TeamSheet
        Squad numbered ``1..18`` with starters first.
    """
    players: List[SquadPlayer] = []
    roles = [(role, "starting") for role in STARTING_ROLES] + [(role, "substitute") for role in BENCH_ROLES]
    for number, (role, status) in enumerate(roles, start=1):
        players.append(
            SquadPlayer(
                player_id=f"{team_id}-{number}",
                name=random_name(rng),
                jersey_number=number,
                team_id=team_id,
                role=role,
                status=status,
            )
        )
    return TeamSheet(team_id=team_id, name=name, side=side, players=players)
