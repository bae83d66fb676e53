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
"""Tests for the squad loaders, generator, snapshots and capture log."""

import json
import random
from pathlib import Path

import pytest

from pitchside.engine.config import AWAY, HOME
from pitchside.engine.store import InMemoryEventStore
from pitchside.errors import StoreError
from pitchside.models.event import EventDraft, PitchPoint
from pitchside.models.team import TeamSheet
from pitchside.utils.debug import CaptureDebugger
from pitchside.utils.generator import generate_team_sheet
from pitchside.utils.roster import load_teams_from_json, player_from_dict
from pitchside.utils.snapshot import load_snapshot, save_snapshot


class TestGenerator:
    """Tests for generator utility functions."""

    def test_generate_team_sheet(self) -> None:
        """A generated squad has eleven starters and seven substitutes."""
        sheet = generate_team_sheet("home", "Home FC", HOME, rng=random.Random(7))
        assert sheet.side == HOME
        assert len(sheet.players) == 18
        assert [p.jersey_number for p in sheet.players] == list(range(1, 19))
        assert sum(p.status == "starting" for p in sheet.players) == 11
        assert sheet.players[0].role == "GK"
        assert all(p.player_id.startswith("home-") for p in sheet.players)

    def test_seeded_names_are_reproducible(self) -> None:
        """The same seed gives the same names."""
        first = generate_team_sheet("away", "Away United", AWAY, rng=random.Random(3))
        second = generate_team_sheet("away", "Away United", AWAY, rng=random.Random(3))
        assert [p.name for p in first.players] == [p.name for p in second.players]


class TestRoster:
    """Tests for the squad loaders."""

    def test_player_from_dict(self) -> None:
        """Test creating a player from a dictionary."""
        player = player_from_dict({"id": "p9", "name": "Ian Rush", "jersey_number": 9, "role": "CF"}, "wales")
        assert player.player_id == "p9"
        assert player.jersey_number == 9
        assert player.team_id == "wales"
        assert player.role == "CF"
        assert player.status == "starting"

    def test_player_from_dict_legacy_keys(self) -> None:
        """``number`` and ``position`` are accepted for older exports."""
        player = player_from_dict({"number": "4", "position": "CD", "status": "substitute"}, "wales")
        assert player.player_id == "wales-4"
        assert player.jersey_number == 4
        assert player.name == "Player 4"
        assert player.role == "CD"
        assert player.status == "substitute"

    def test_player_from_dict_needs_number(self) -> None:
        """A player without a shirt number is rejected."""
        with pytest.raises(KeyError):
            player_from_dict({"name": "Nobody"}, "wales")

    def test_load_teams_from_json(self, tmp_path: Path) -> None:
        """Test loading teams from JSON file."""
        payload = {
            "home": {"id": "cardiff", "name": "Cardiff", "players": [{"jersey_number": n} for n in range(1, 12)]},
            "away": {"id": "swansea", "name": "Swansea", "players": [{"jersey_number": 1}]},
        }
        path = tmp_path / "squads.json"
        path.write_text(json.dumps(payload), encoding="utf-8")

        home, away = load_teams_from_json(str(path))
        assert (home.side, away.side) == (HOME, AWAY)
        assert len(home.players) == 11
        assert away.players[0].player_id == "swansea-1"

    def test_load_teams_missing_file(self, tmp_path: Path) -> None:
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_teams_from_json(str(tmp_path / "missing.json"))

    def test_repository_squads_load(self) -> None:
        """The bundled squads file parses."""
        data_file = Path(__file__).resolve().parents[1] / "data" / "squads.json"
        home, away = load_teams_from_json(str(data_file))
        assert sum(p.status == "starting" for p in home.players) == 11
        assert sum(p.status == "starting" for p in away.players) == 11


class TestSnapshot:
    """Saving and resuming a store."""

    def test_snapshot_resumes_store(self, tmp_path: Path, home_sheet: TeamSheet, away_sheet: TeamSheet) -> None:
        """A snapshot resumes the store."""
        store = InMemoryEventStore()
        store.set_squad("m1", home_sheet)
        store.set_squad("m1", away_sheet)
        store.set_confirmed_direction("m1", False)
        event = store.insert_event(
            EventDraft(
                match_id="m1",
                player_id="h4",
                event_type="pass",
                half=1,
                minute=3,
                seconds=15,
                start=PitchPoint(20, 30),
                end=PitchPoint(60, 40),
                target_player_id="h9",
            )
        )

        path = save_snapshot(store, str(tmp_path / "nested" / "m1.json"))
        assert path.exists()
        restored = load_snapshot(str(path))
        assert restored.list_events("m1") == [event]
        assert restored.get_confirmed_direction("m1") is False
        assert len(restored.list_squad("m1", HOME)) == len(home_sheet.players)

    def test_missing_snapshot(self, tmp_path: Path) -> None:
        """A missing snapshot raises an error."""
        with pytest.raises(FileNotFoundError):
            load_snapshot(str(tmp_path / "none.json"))

    def test_corrupt_snapshot(self, tmp_path: Path) -> None:
        """A corrupt snapshot raises an error."""
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StoreError):
            load_snapshot(str(path))

    def test_unknown_version(self, tmp_path: Path) -> None:
        """An unknown snapshot version is refused."""
        path = tmp_path / "old.json"
        path.write_text(json.dumps({"version": 99, "store": {}}), encoding="utf-8")
        with pytest.raises(StoreError, match="Unsupported snapshot"):
            load_snapshot(str(path))


class TestCaptureDebugger:
    """The capture log written during a session."""

    def test_lines_are_written(self, tmp_path: Path) -> None:
        """Log lines are written to the file."""
        debugger = CaptureDebugger(output_dir=str(tmp_path), match_id="m1")
        debugger.log_direction(True)
        debugger.log_error("StoreError", "database unavailable")
        debugger.close()

        assert debugger.log_path.name.startswith("capture_m1_")
        lines = debugger.log_path.read_text(encoding="utf-8").splitlines()
        assert lines[0].startswith("=== Capture Session:")
        assert lines[-2].endswith("DIRECTION: Home attacks left in the first half")
        assert lines[-1].endswith("ERROR: Type: StoreError | Details: database unavailable")

    def test_recent_events_are_numbered(self, tmp_path: Path) -> None:
        """Recent events are numbered."""
        debugger = CaptureDebugger(output_dir=str(tmp_path))
        for n in range(3):
            debugger.log_notice("info", f"notice {n}")
        recent = debugger.get_recent_events(limit=2)
        debugger.close()
        assert len(recent) == 2
        assert recent[0].startswith("00002 ")
        assert recent[1].endswith("NOTICE: INFO | notice 2")

    def test_session_writes_saved_events(self, tmp_path: Path, store: InMemoryEventStore) -> None:
        """The session logs saved events."""
        from pitchside.engine.session import LoggingSession

        debugger = CaptureDebugger(output_dir=str(tmp_path), match_id="m1")
        session = LoggingSession(store, "m1", debugger=debugger)
        session.load()
        session.confirm_direction(False)
        session.select_player("h9")
        session.select_event_type("shot")
        session.pitch_click(88, 50)
        session.set_shot_outcome("goal")
        session.set_goal_mouth(10, 10)
        session.save()
        debugger.close()

        text = debugger.log_path.read_text(encoding="utf-8")
        assert "EVENT_SAVED: H1 00:00 | Event: shot | Player: h9" in text
        assert "Outcome: goal" in text
        assert "Zone: " in text
        assert "NOTICE: SUCCESS | Event saved" in text
