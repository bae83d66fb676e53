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
"""Utilities for constructing match-day squads from serialized data sources.

The helpers translate plain dictionaries or JSON payloads into
:class:`~pitchside.models.team.TeamSheet` objects. They are used by the entry
point and the test suite to spin up squads without hand-coding every player.
Missing optional values fall back to sensible defaults so that partial
exports (for example a list without roles) remain usable.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Tuple

from pitchside.engine.config import AWAY, HOME
from pitchside.models.team import SquadPlayer, TeamSheet


def player_from_dict(d: Dict[str, Any], team_id: str) -> SquadPlayer:
    """Build a ``SquadPlayer`` from a plain dictionary payload.

    Parameters
    ----------
    d : Dict[str, Any]
        A mapping containing the serialized player. Supported keys are
        ``id``, ``name``, ``jersey_number`` (or ``number``), ``role`` (or
        legacy ``position``) and ``status``.
    team_id : str
        Team the player belongs to.

    Returns
    -------
    SquadPlayer
        A validated squad entry.

    Raises
    ------
    KeyError
        Raised when neither ``jersey_number`` nor ``number`` is present.
    """
    jersey = d.get("jersey_number", d.get("number"))
    if jersey is None:
        raise KeyError("jersey_number")
    player_id = str(d.get("id", f"{team_id}-{jersey}"))
    return SquadPlayer(
        player_id=player_id,
        name=d.get("name", f"Player {jersey}"),
        jersey_number=int(jersey),
        team_id=team_id,
        role=d.get("role") or d.get("position", "CM"),
        status=d.get("status", "starting"),
    )


def team_from_dict(d: Dict[str, Any], side: str) -> TeamSheet:
    """Build a ``TeamSheet`` from one section of the squads document.

    Parameters
    ----------
    d : Dict[str, Any]
        Mapping with ``id``, ``name`` and a ``players`` list.
    side : str
        ``"home"`` or ``"away"``.

    Returns
    -------
    TeamSheet
        The team with every listed player.
    """
    team_id = str(d.get("id", side))
    players = [player_from_dict(p, team_id) for p in d.get("players", [])]
    return TeamSheet(team_id=team_id, name=d.get("name", f"Team_{side}"), side=side, players=players)


def load_teams_from_json(path: str) -> Tuple[TeamSheet, TeamSheet]:
    """Load home and away squads from the repository's JSON schema.

    Parameters
    ----------
    path : str
        The filesystem path to a document with ``home`` and ``away`` sections
        following the ``data/squads.json`` schema.

    Returns
    -------
    Tuple[TeamSheet, TeamSheet]
        A pair of team sheets in ``(home, away)`` order.

    Raises
    ------
    FileNotFoundError
        Raised when ``path`` does not exist.
    KeyError
        Raised when the JSON payload is missing a required section.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Squads JSON not found: {path}")

    with p.open("r", encoding="utf-8") as fh:
        data = json.load(fh)

    home = team_from_dict(data[HOME], HOME)
    away = team_from_dict(data[AWAY], AWAY)
    return home, away
