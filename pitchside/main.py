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
"""Entry point for a live capture session with the optional pygame window."""

import argparse
import threading
from collections import Counter
from pathlib import Path
from typing import List, Optional, Tuple

from pitchside.engine.config import AWAY, HOME, event_label
from pitchside.engine.session import LoggingSession
from pitchside.engine.store import InMemoryEventStore
from pitchside.errors import StoreError
from pitchside.models.team import TeamSheet
from pitchside.utils.debug import CaptureDebugger
from pitchside.utils.generator import generate_team_sheet  # Fallback if no squads file
from pitchside.utils.roster import load_teams_from_json
from pitchside.utils.snapshot import load_snapshot, save_snapshot


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line options.

    Parameters
    ----------
    argv : Optional[List[str]]
        Arguments to parse; ``sys.argv`` is used when omitted.

    Returns
    -------
    argparse.Namespace
        Parsed options.
    """
    parser = argparse.ArgumentParser(description="Capture football match events live.")
    parser.add_argument("match_id", nargs="?", default="demo-match", help="Identifier of the match to capture")
    parser.add_argument("--squads", default="data/squads.json", help="JSON file with home and away squads")
    parser.add_argument("--snapshot", default=None, help="Snapshot file to resume from and save to")
    parser.add_argument("--log-dir", default="capture_logs", help="Directory for capture logs")
    return parser.parse_args(argv)


def load_squads(path: str) -> Tuple[TeamSheet, TeamSheet]:
    """Load squads from ``path`` or generate placeholders.

    Parameters
    ----------
    path : str
        Squads JSON file.

    Returns
    -------
    Tuple[TeamSheet, TeamSheet]
        ``(home, away)`` team sheets.
    """
    squads_file = Path(path)
    if squads_file.exists():
        try:
            return load_teams_from_json(str(squads_file))
        except (KeyError, ValueError) as e:
            print(f"Error loading squads from {squads_file}: {e}")
            print("Falling back to generated squads...")
    else:
        print(f"No squads file found at {squads_file}")
        print("Using generated squads...")
    return (
        generate_team_sheet("home", "Home FC", HOME),
        generate_team_sheet("away", "Away United", AWAY),
    )


def build_store(match_id: str, squads: Tuple[TeamSheet, TeamSheet], snapshot: Optional[str]) -> InMemoryEventStore:
    """Create the store, resuming from a snapshot when one exists.

    Parameters
    ----------
    match_id : str
        Match being captured.
    squads : Tuple[TeamSheet, TeamSheet]
        Squads used when the snapshot has none for this match.
    snapshot : Optional[str]
        Snapshot path, if resuming is wanted.

    Returns
    -------
    InMemoryEventStore
        Store ready for a session.
    """
    store = InMemoryEventStore()
    if snapshot and Path(snapshot).exists():
        try:
            store = load_snapshot(snapshot)
            print(f"Resumed {len(store.list_events(match_id))} events from {snapshot}")
        except (StoreError, KeyError, TypeError, ValueError) as e:
            print(f"Error loading snapshot from {snapshot}: {e}")
            bad = Path(snapshot).with_name(Path(snapshot).name + ".bad")
            Path(snapshot).replace(bad)
            print(f"Moved it to {bad}; starting from an empty match...")
    for sheet in squads:
        if store.get_team_sheet(match_id, sheet.side) is None:
            store.set_squad(match_id, sheet)
    return store


def finish_capture(session: LoggingSession, store: InMemoryEventStore, snapshot: Optional[str]) -> Optional[Path]:
    """Restore an unfinished edit and write the snapshot.

    Parameters
    ----------
    session : LoggingSession
        Session being closed.
    store : InMemoryEventStore
        Store backing the session.
    snapshot : Optional[str]
        Snapshot path, if one should be written.

    Returns
    -------
    Optional[Path]
        The written snapshot, or ``None`` when none was requested.
    """
    if not session.abandon_edit():
        print("Could not restore the event being edited; see the capture log.")
    if not snapshot:
        return None
    path = save_snapshot(store, snapshot)
    print(f"Saved snapshot to {path}")
    return path


def print_summary(session: LoggingSession) -> None:
    """Print per-side event counts and the phases at the end of a session.

    Parameters
    ----------
    session : LoggingSession
        Finished session.
    """
    print(f"\nLogged {len(session.events)} events in {len(session.phases)} phases")
    for side in (HOME, AWAY):
        counts = Counter(e.event_type for e in session.events if session.roster.side_of(e.player_id) == side)
        print(f"\n{side.title()}:")
        for event_type, count in counts.most_common():
            print(f"  {event_label(event_type)}: {count}")
    for phase in session.phases:
        print(f"Phase {phase.phase_number} (H{phase.half}, {phase.team_id}): {phase.outcome or 'open'}")


def main(argv: Optional[List[str]] = None) -> None:
    """Load the match, open the capture window and save on exit.

    Parameters
    ----------
    argv : Optional[List[str]]
        Command line arguments.
    """
    args = parse_args(argv)
    store = build_store(args.match_id, load_squads(args.squads), args.snapshot)
    debugger = CaptureDebugger(output_dir=args.log_dir, match_id=args.match_id)
    session = LoggingSession(store, args.match_id, debugger=debugger)
    if not session.load():
        print("Could not load the match; see the capture log for details.")
        debugger.close()
        return

    try:
        from pitchside.visualizer.visualizer import pygame, start_visualizer

        if pygame is None:
            print("pygame is not installed; install the 'visualizer' extra to capture events.")
        else:
            # Non-daemon so the window keeps the process alive until closed
            vis_thread = threading.Thread(target=start_visualizer, args=(session,))
            vis_thread.start()
            print(f"Capturing {args.match_id}. Close the window to finish.")
            vis_thread.join()
    except KeyboardInterrupt:
        print("\nCapture interrupted.")
    finally:
        finish_capture(session, store, args.snapshot)
        debugger.close()
        print(f"Capture log written to {debugger.log_path}")

    print_summary(session)


if __name__ == "__main__":
    main()
