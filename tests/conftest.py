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
"""Shared fixtures: two small squads, a populated store and a ready session."""

import pytest

from pitchside.engine.config import AWAY, HOME
from pitchside.engine.session import LoggingSession
from pitchside.engine.store import InMemoryEventStore
from pitchside.models.team import Roster, SquadPlayer, TeamSheet

MATCH_ID = "m1"


def _sheet(team_id: str, prefix: str, side: str) -> TeamSheet:
    players = [
        SquadPlayer(
            player_id=f"{prefix}{n}",
            name=f"{team_id} player {n}",
            jersey_number=n,
            team_id=team_id,
            status="starting" if n <= 11 else "substitute",
        )
        for n in range(1, 13)
    ]
    return TeamSheet(team_id=team_id, name=team_id.title(), side=side, players=players)


@pytest.fixture
def home_sheet() -> TeamSheet:
    return _sheet("home-fc", "h", HOME)


@pytest.fixture
def away_sheet() -> TeamSheet:
    return _sheet("away-fc", "a", AWAY)


@pytest.fixture
def roster(home_sheet: TeamSheet, away_sheet: TeamSheet) -> Roster:
    return Roster.from_team_sheets(home_sheet, away_sheet)


@pytest.fixture
def store(home_sheet: TeamSheet, away_sheet: TeamSheet) -> InMemoryEventStore:
    s = InMemoryEventStore()
    s.set_squad(MATCH_ID, home_sheet)
    s.set_squad(MATCH_ID, away_sheet)
    return s


@pytest.fixture
def session(store: InMemoryEventStore) -> LoggingSession:
    """Loaded session where the home team attacks right in the first half."""
    s = LoggingSession(store, MATCH_ID)
    assert s.load()
    assert s.confirm_direction(False)
    return s
