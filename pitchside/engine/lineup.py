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
"""Who is on the pitch, derived from substitutions and red cards."""

from __future__ import annotations

from typing import Dict, Iterable, List

from pitchside.engine.ball_state import chronological
from pitchside.models.event import MatchEvent
from pitchside.models.team import SquadPlayer

SUBBED_ON = "subbed_on"
SUBBED_OFF = "subbed_off"
SENT_OFF = "sent_off"


def substitution_status(events: Iterable[MatchEvent]) -> Dict[str, str]:
    """Return the in-match status of every player touched by a change.

    Parameters
    ----------
    events : Iterable[MatchEvent]
        Every event of the match.

    Returns
    -------
    Dict[str, str]
        Player id to ``"subbed_on"``, ``"subbed_off"`` or ``"sent_off"``;
        later events override earlier ones.
    """
    status: Dict[str, str] = {}
    for event in chronological(events):
        if event.event_type == "substitution":
            status[event.player_id] = SUBBED_OFF
            if event.substitute_player_id:
                status[event.substitute_player_id] = SUBBED_ON
        elif event.event_type == "red_card":
            status[event.player_id] = SENT_OFF
    return status


def on_pitch(players: Iterable[SquadPlayer], events: Iterable[MatchEvent]) -> List[SquadPlayer]:
    """Return the players currently on the pitch.

    Parameters
    ----------
    players : Iterable[SquadPlayer]
        One side's squad.
    events : Iterable[MatchEvent]
        Every event of the match.

    Returns
    -------
    List[SquadPlayer]
        Starters not yet replaced or sent off, plus substitutes brought on.
    """
    status = substitution_status(events)
    active = []
    for player in players:
        state = status.get(player.player_id)
        if state == SUBBED_ON or (player.status == "starting" and state is None):
            active.append(player)
    return active
