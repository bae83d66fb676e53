#!/usr/bin/env python3
"""
Summarise a capture log written by CaptureDebugger.

Usage:
    python tools/summarize_capture_log.py <log_file_path>
"""

import re
import sys
from collections import Counter, defaultdict
from pathlib import Path

LINE_RE = re.compile(r"^\[(\d\d:\d\d:\d\d)\] (\w+): (.*)$")


def parse_log_file(log_path):
    """Parse the capture log into per-category lists."""
    categories = Counter()
    saved = []
    removed = []
    phases = []
    suggestions = []
    errors = []
    sources = Counter()
    per_player = defaultdict(Counter)

    with open(log_path, "r", encoding="utf-8") as f:
        for line in f:
            match = LINE_RE.match(line.strip())
            if not match:
                continue
            stamp, category, details = match.groups()
            categories[category] += 1

            if category == "EVENT_SAVED":
                saved.append((stamp, details))
                event_match = re.search(r"Event: (\w+)", details)
                player_match = re.search(r"Player: (\S+)", details)
                source_match = re.search(r"Source: (\w+)", details)
                if event_match and player_match:
                    per_player[player_match.group(1)][event_match.group(1)] += 1
                if source_match:
                    sources[source_match.group(1)] += 1
            elif category == "EVENT_REMOVED":
                removed.append((stamp, details))
            elif category == "PHASE":
                phases.append((stamp, details))
            elif category == "PENALTY_AREA":
                suggestions.append((stamp, details))
            elif category == "ERROR":
                errors.append((stamp, details))

    return {
        "categories": categories,
        "saved": saved,
        "removed": removed,
        "phases": phases,
        "suggestions": suggestions,
        "errors": errors,
        "sources": sources,
        "per_player": per_player,
    }


def report_events(data):
    """Print event totals and how they were entered."""
    print("\n=== EVENTS ===")
    print(f"Saved: {len(data['saved'])}  Removed: {len(data['removed'])}")
    for source, count in data["sources"].most_common():
        print(f"  {source}: {count}")

    reasons = Counter()
    for _, details in data["removed"]:
        reason_match = re.search(r"Reason: (\w+)", details)
        if reason_match:
            reasons[reason_match.group(1)] += 1
    if reasons:
        print("  Removed by: " + ", ".join(f"{r}={c}" for r, c in reasons.most_common()))
    if data["saved"] and len(data["removed"]) > len(data["saved"]) / 2:
        print("  ⚠️  Many removals - operator may be fighting the input flow")


def report_players(data, limit=10):
    """Print the busiest players."""
    print("\n=== PLAYERS ===")
    totals = sorted(data["per_player"].items(), key=lambda kv: sum(kv[1].values()), reverse=True)
    for player, counts in totals[:limit]:
        top = ", ".join(f"{t}={c}" for t, c in counts.most_common(3))
        print(f"  {player}: {sum(counts.values())} ({top})")


def report_suggestions(data):
    """Print how penalty-area prompts were handled."""
    print("\n=== PENALTY AREA PROMPTS ===")
    actions = Counter(details.split(" | ", 1)[0] for _, details in data["suggestions"])
    offered = actions.get("OFFERED", 0)
    print(f"Offered: {offered}  Accepted: {actions.get('ACCEPTED', 0)}  Dismissed: {actions.get('DISMISSED', 0)}")
    if offered:
        rate = actions.get("ACCEPTED", 0) / offered * 100
        print(f"  Acceptance rate: {rate:.1f}%")


def report_phases(data):
    """Print phase activity."""
    print("\n=== PHASES ===")
    actions = Counter(details.split(" | ", 1)[0] for _, details in data["phases"])
    for action, count in actions.most_common():
        print(f"  {action}: {count}")
    outcomes = Counter()
    for _, details in data["phases"]:
        if details.startswith("CREATED"):
            outcome_match = re.search(r"Outcome: (\w+)", details)
            if outcome_match:
                outcomes[outcome_match.group(1)] += 1
    if outcomes:
        print("  Outcomes: " + ", ".join(f"{o}={c}" for o, c in outcomes.most_common()))


def report_errors(data, limit=10):
    """Print the most recent errors."""
    print("\n=== ERRORS ===")
    print(f"Total: {len(data['errors'])}")
    for stamp, details in data["errors"][-limit:]:
        print(f"  [{stamp}] {details}")


def main():
    if len(sys.argv) < 2:
        print("Usage: python tools/summarize_capture_log.py <log_file_path>")
        sys.exit(1)

    log_path = Path(sys.argv[1])
    if not log_path.exists():
        print(f"Error: Log file not found: {log_path}")
        sys.exit(1)

    print(f"Summarising capture log: {log_path}")
    print("=" * 60)

    data = parse_log_file(log_path)
    report_events(data)
    report_players(data)
    report_suggestions(data)
    report_phases(data)
    report_errors(data)


if __name__ == "__main__":
    main()
