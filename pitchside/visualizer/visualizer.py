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
"""Pygame capture window for a :class:`~pitchside.engine.session.LoggingSession`.

Left click on the pitch sets positions (or logs a chain event), the roster
panel selects the acting player (right click picks the receiver) and the
event list toggles phase membership (right click edits an event, middle
click deletes it). F1 and F2 switch halves, F6 to F8 close the selection as a
phase, F9 deletes the latest phase and F10 cycles its outcome. Other keyboard
shortcuts go through :func:`pitchside.engine.keymap.dispatch`. Typing ``#``
opens a shirt-number field that takes the keyboard focus until Enter or Esc.
"""

from __future__ import annotations

import math
import threading
from typing import Any, Callable, List, Optional, Tuple

try:
    import pygame
except Exception:
    pygame = None

from pitchside.engine.config import AWAY, HOME, PHASE_OUTCOMES, event_label
from pitchside.engine.geometry import relative_third_of, team_attacks_right
from pitchside.engine.keymap import dispatch, normalise_key
from pitchside.engine.session import LoggingSession
from pitchside.models.event import PitchPoint

Rect = Tuple[int, int, int, int]

GREEN = (38, 160, 72)
LINE = (245, 245, 245)
HOME_COLOUR = (200, 30, 30)
AWAY_COLOUR = (30, 90, 200)
BALL = (245, 245, 245)
SUGGESTION = (250, 250, 100)
PANEL = (30, 30, 30)
TEXT = (235, 235, 235)
ERROR_TEXT = (240, 110, 110)
SELECTED = (255, 215, 0)

# Keys whose actions write to the store run off the render thread.
BACKGROUND_KEYS = {"enter", "z", "y", "escape"}
PHASE_KEYS = {"f6": PHASE_OUTCOMES[0], "f7": PHASE_OUTCOMES[1], "f8": PHASE_OUTCOMES[2]}
ROW_HEIGHT = 20


def pitch_to_screen(point: PitchPoint, rect: Rect) -> Tuple[int, int]:
    """Map a normalised pitch point onto the pitch rectangle.

    Parameters
    ----------
    point : PitchPoint
        Point with ``x`` and ``y`` in ``[0, 100]``.
    rect : Rect
        ``(left, top, width, height)`` of the drawn pitch.

    Returns
    -------
    Tuple[int, int]
        Screen pixel coordinates.
    """
    left, top, width, height = rect
    return int(left + point.x / 100.0 * width), int(top + point.y / 100.0 * height)


def screen_to_pitch(pos: Tuple[int, int], rect: Rect) -> Optional[Tuple[float, float]]:
    """Map a screen position back onto the normalised pitch.

    Parameters
    ----------
    pos : Tuple[int, int]
        Mouse position in pixels.
    rect : Rect
        ``(left, top, width, height)`` of the drawn pitch.

    Returns
    -------
    Optional[Tuple[float, float]]
        ``(x, y)`` rounded to one decimal place, or ``None`` outside the pitch.
    """
    left, top, width, height = rect
    px, py = pos
    if width <= 0 or height <= 0:
        return None
    if not (left <= px <= left + width and top <= py <= top + height):
        return None
    return round((px - left) / width * 100.0, 1), round((py - top) / height * 100.0, 1)


def side_colour(side: Optional[str]) -> Tuple[int, int, int]:
    """Return the marker colour for a side.

    Parameters
    ----------
    side : Optional[str]
        ``"home"``, ``"away"`` or ``None``.

    Returns
    -------
    Tuple[int, int, int]
        RGB colour; neutral white for unknown sides.
    """
    if side == HOME:
        return HOME_COLOUR
    if side == AWAY:
        return AWAY_COLOUR
    return BALL


def fade(colour: Tuple[int, int, int], opacity: float) -> Tuple[int, int, int, int]:
    """Attach an alpha channel derived from ``opacity``.

    Parameters
    ----------
    colour : Tuple[int, int, int]
        Base RGB colour.
    opacity : float
        Value in ``[0, 1]``.

    Returns
    -------
    Tuple[int, int, int, int]
        RGBA colour.
    """
    alpha = int(max(0.0, min(1.0, opacity)) * 255)
    return (*colour, alpha)


def key_name(unicode_char: str, toolkit_name: str) -> str:
    """Choose the name handed to the dispatcher for a key press.

    Parameters
    ----------
    unicode_char : str
        Character produced by the key press (may be empty or a control code).
    toolkit_name : str
        Pygame's name for the key, for example ``"return"``.

    Returns
    -------
    str
        The printable character when there is one, else the normalised name.
    """
    if len(unicode_char) == 1 and unicode_char.isprintable() and not unicode_char.isspace():
        return normalise_key(unicode_char)
    return normalise_key(toolkit_name)


def run_in_background(workers: List[threading.Thread], action: Callable[..., Any], *args: Any) -> threading.Thread:
    """Run a session write on a worker thread so drawing continues.

    Parameters
    ----------
    workers : List[threading.Thread]
        Threads still owned by the window; finished ones are dropped and the
        new one is appended.
    action : Callable[..., Any]
        Callable to run.
    *args : Any
        Positional arguments for ``action``.

    Returns
    -------
    threading.Thread
        The started thread.
    """
    workers[:] = [w for w in workers if w.is_alive()]
    thread = threading.Thread(target=action, args=args, daemon=True)
    thread.start()
    workers.append(thread)
    return thread


def join_workers(workers: List[threading.Thread], timeout: Optional[float] = None) -> bool:
    """Wait for outstanding session writes.

    Parameters
    ----------
    workers : List[threading.Thread]
        Threads started by :func:`run_in_background`.
    timeout : Optional[float]
        Seconds to wait for each thread; ``None`` waits indefinitely.

    Returns
    -------
    bool
        ``True`` when every thread has finished.
    """
    for worker in workers:
        worker.join(timeout)
    workers[:] = [w for w in workers if w.is_alive()]
    return not workers


def _draw_dashed_line(
    surface: Any, colour: Tuple[int, ...], start: Tuple[int, int], end: Tuple[int, int], dash: int = 8
) -> None:
    """Draw a dashed line for unsuccessful actions.

    Parameters
    ----------
    surface : Any
        Target pygame surface.
    colour : Tuple[int, ...]
        RGB or RGBA colour.
    start : Tuple[int, int]
        Start pixel.
    end : Tuple[int, int]
        End pixel.
    dash : int
        Length of each dash in pixels.
    """
    length = math.hypot(end[0] - start[0], end[1] - start[1])
    if length == 0:
        return
    steps = int(length // dash)
    for i in range(0, steps, 2):
        a = i / steps
        b = min(1.0, (i + 1) / steps)
        p1 = (start[0] + (end[0] - start[0]) * a, start[1] + (end[1] - start[1]) * a)
        p2 = (start[0] + (end[0] - start[0]) * b, start[1] + (end[1] - start[1]) * b)
        pygame.draw.line(surface, colour, p1, p2, 2)


def _draw_pitch(screen: Any, rect: Rect) -> None:
    """Draw the pitch, halfway line, thirds and penalty boxes.

    Parameters
    ----------
    screen : Any
        Target pygame surface.
    rect : Rect
        ``(left, top, width, height)`` of the pitch.
    """
    left, top, width, height = rect
    pitch_rect = pygame.Rect(rect)
    pygame.draw.rect(screen, GREEN, pitch_rect)
    pygame.draw.rect(screen, LINE, pitch_rect, 3)
    pygame.draw.line(screen, LINE, (pitch_rect.centerx, top), (pitch_rect.centerx, top + height), 2)
    pygame.draw.circle(screen, LINE, pitch_rect.center, int(width * 0.09), 2)

    for limit in (33.33, 66.66):
        x = left + int(limit / 100.0 * width)
        for y in range(top, top + height, 12):
            pygame.draw.line(screen, (90, 190, 110), (x, y), (x, min(y + 6, top + height)), 1)

    box_w = int(17 / 100.0 * width)
    box_top = top + int(20 / 100.0 * height)
    box_h = int(60 / 100.0 * height)
    pygame.draw.rect(screen, LINE, (left, box_top, box_w, box_h), 2)
    pygame.draw.rect(screen, LINE, (left + width - box_w, box_top, box_w, box_h), 2)


def _draw_ball_state(screen: Any, session: LoggingSession, rect: Rect, font: Any) -> None:
    """Draw the trail, holder marker, suggestion and pending positions.

    Parameters
    ----------
    screen : Any
        Target pygame surface.
    session : LoggingSession
        Session providing the derived state.
    rect : Rect
        Pitch rectangle.
    font : Any
        Font used for shirt numbers.
    """
    overlay = pygame.Surface(screen.get_size(), pygame.SRCALPHA)
    state = session.ball_state
    for segment in state.trail:
        colour = fade(side_colour(segment.side), segment.opacity)
        start = pitch_to_screen(segment.start, rect)
        if segment.end is not None:
            end = pitch_to_screen(segment.end, rect)
            if segment.successful:
                pygame.draw.line(overlay, colour, start, end, 3)
            else:
                _draw_dashed_line(overlay, colour, start, end)
            pygame.draw.circle(overlay, colour, end, 4)
        pygame.draw.circle(overlay, colour, start, 5)
    screen.blit(overlay, (0, 0))

    if state.suggested_start is not None:
        sx, sy = pitch_to_screen(state.suggested_start, rect)
        pygame.draw.circle(screen, SUGGESTION, (sx, sy), 9, 2)

    if state.holder is not None:
        hx, hy = pitch_to_screen(state.holder.position, rect)
        pygame.draw.circle(screen, SELECTED, (hx, hy), 12)
        pygame.draw.circle(screen, side_colour(state.holder.side), (hx, hy), 9)
        if state.holder.jersey_number is not None:
            label = font.render(str(state.holder.jersey_number), True, LINE)
            screen.blit(label, (hx - label.get_width() // 2, hy - label.get_height() // 2))

    form = session.form
    if form.start is not None:
        start = pitch_to_screen(form.start, rect)
        pygame.draw.circle(screen, LINE, start, 6)
        if form.end is not None:
            end = pitch_to_screen(form.end, rect)
            pygame.draw.line(screen, LINE, start, end, 2)
            pygame.draw.circle(screen, LINE, end, 4)


def holder_third(session: LoggingSession) -> Optional[str]:
    """Describe the holder's third as seen by the holder's team.

    Parameters
    ----------
    session : LoggingSession
        Session providing the ball state and direction.

    Returns
    -------
    Optional[str]
        ``"defensive"``, ``"middle"`` or ``"final"``; ``None`` without a
        holder, a known side or a confirmed direction.
    """
    holder = session.ball_state.holder
    home_attacks_left = session.home_attacks_left_this_half
    if holder is None or holder.side is None or home_attacks_left is None:
        return None
    return relative_third_of(holder.position.x, team_attacks_right(home_attacks_left, holder.side))


def _draw_goal_mouth(screen: Any, session: LoggingSession, rect: Rect) -> None:
    """Draw the goal-mouth diagram used to place shots.

    Parameters
    ----------
    screen : Any
        Target pygame surface.
    session : LoggingSession
        Session providing the current placement.
    rect : Rect
        ``(left, top, width, height)`` of the diagram.
    """
    cfg = session.config.goal_mouth
    left, top, width, height = rect
    pygame.draw.rect(screen, (20, 60, 30), rect)
    post_l = left + int(cfg.left_post / 100.0 * width)
    post_r = left + int(cfg.right_post / 100.0 * width)
    bar = top + int(cfg.crossbar / 100.0 * height)
    line = top + int(cfg.goal_line / 100.0 * height)
    pygame.draw.line(screen, LINE, (post_l, line), (post_l, bar), 3)
    pygame.draw.line(screen, LINE, (post_r, line), (post_r, bar), 3)
    pygame.draw.line(screen, LINE, (post_l, bar), (post_r, bar), 3)
    pygame.draw.line(screen, LINE, (left, line), (left + width, line), 1)
    if session.form.goal_mouth is not None:
        pygame.draw.circle(screen, SUGGESTION, pitch_to_screen(session.form.goal_mouth, rect), 5)


def _roster_rows(session: LoggingSession) -> List[Tuple[str, str]]:
    """Return ``(player_id, label)`` rows for the active side's panel.

    Parameters
    ----------
    session : LoggingSession
        Session providing the roster.

    Returns
    -------
    List[Tuple[str, str]]
        On-pitch players followed by the rest of the squad.
    """
    side = session.form.side
    active = session.available_players(side)
    active_ids = {p.player_id for p in active}
    bench = [p for p in session.roster.players(side) if p.player_id not in active_ids]
    rows = [(p.player_id, p.label) for p in active]
    rows.extend((p.player_id, f"({p.label})") for p in bench)
    return rows


def _event_rows(session: LoggingSession, limit: int = 10) -> List[Tuple[str, str]]:
    """Return ``(event_id, label)`` rows for the latest events of the half.

    Parameters
    ----------
    session : LoggingSession
        Session providing the events.
    limit : int
        Maximum number of rows.

    Returns
    -------
    List[Tuple[str, str]]
        Newest events first.
    """
    half_events = [e for e in session.events if e.half == session.half]
    rows = []
    for event in sorted(half_events, key=lambda e: e.sequence, reverse=True)[:limit]:
        jersey = session.roster.jersey_of(event.player_id)
        phase = next((p.phase_number for p in session.phases if p.id == event.phase_id), None)
        tag = f" [P{phase}]" if phase is not None else ""
        mark = "" if event.successful else " x"
        rows.append((event.id, f"{event.clock_label} #{jersey or '?'} {event_label(event.event_type)}{mark}{tag}"))
    return rows


def _row_at(pos: Tuple[int, int], origin: Tuple[int, int], width: int, count: int) -> Optional[int]:
    """Return the index of the list row under ``pos``.

    Parameters
    ----------
    pos : Tuple[int, int]
        Mouse position.
    origin : Tuple[int, int]
        Top-left pixel of the first row.
    width : int
        Width of the list.
    count : int
        Number of rows.

    Returns
    -------
    Optional[int]
        Row index, or ``None`` when outside the list.
    """
    x, y = pos
    ox, oy = origin
    if not (ox <= x <= ox + width) or y < oy:
        return None
    index = (y - oy) // ROW_HEIGHT
    return index if index < count else None


def start_visualizer(
    session: LoggingSession,
    screen_size: Tuple[int, int] = (1280, 760),
    fps: int = 30,
    on_close: Optional[Callable[[], None]] = None,
) -> None:
    """Open the capture window and run its event loop until closed.

    If ``pygame`` is not installed the function returns immediately.

    Parameters
    ----------
    session : LoggingSession
        Loaded session to drive.
    screen_size : Tuple[int, int]
        Initial window size in pixels.
    fps : int
        Frame rate cap.
    on_close : Optional[Callable[[], None]]
        Called once after the window closes, for example to save a snapshot.
    """
    if pygame is None:
        return

    pygame.init()
    screen = pygame.display.set_mode(screen_size, pygame.RESIZABLE)
    pygame.display.set_caption("Pitchside Capture")
    clock = pygame.time.Clock()
    font = pygame.font.SysFont(None, 20)
    small = pygame.font.SysFont(None, 17)

    jersey_buffer: Optional[str] = None
    workers: List[threading.Thread] = []
    running = True

    while running:
        width, height = screen_size
        panel_w = 300
        pitch_rect: Rect = (20, 60, width - panel_w - 40, height - 200)
        roster_origin = (width - panel_w, 60)
        events_origin = (width - panel_w, 60 + ROW_HEIGHT * 19)
        goal_rect: Rect = (width - panel_w, height - 95, 200, 80)
        roster_rows = _roster_rows(session)
        event_rows = _event_rows(session)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.VIDEORESIZE:
                screen_size = (event.w, event.h)
                screen = pygame.display.set_mode(screen_size, pygame.RESIZABLE)
            elif event.type == pygame.KEYDOWN:
                name = key_name(event.unicode, pygame.key.name(event.key))
                mods = pygame.key.get_mods()
                ctrl = bool(mods & pygame.KMOD_CTRL)
                meta = bool(mods & pygame.KMOD_META)

                if jersey_buffer is not None:
                    if name == "enter":
                        if jersey_buffer.isdigit():
                            player = session.roster.find_by_jersey(session.form.side, int(jersey_buffer))
                            if player is not None:
                                session.select_player(player.player_id)
                            else:
                                session.notices.error(f"No #{jersey_buffer} in this squad")
                        jersey_buffer = None
                    elif name == "escape":
                        jersey_buffer = None
                    elif name == "backspace":
                        jersey_buffer = jersey_buffer[:-1]
                    elif name.isdigit() and len(jersey_buffer) < 2:
                        jersey_buffer += name
                    dispatch(session, name, focus_in_text_input=True)
                elif session.direction.needs_confirmation:
                    if name in ("l", "r"):
                        run_in_background(workers, session.confirm_direction, name == "l")
                elif name == "#":
                    jersey_buffer = ""
                elif name in ("f1", "f2"):
                    session.set_half(1 if name == "f1" else 2)
                elif name in PHASE_KEYS:
                    run_in_background(workers, session.create_phase, PHASE_KEYS[name])
                elif name == "f9" and session.phases:
                    run_in_background(workers, session.delete_phase, session.phases[-1].id)
                elif name == "f10" and session.phases:
                    latest = session.phases[-1]
                    cycle = (*PHASE_OUTCOMES, None)
                    following = cycle[(cycle.index(latest.outcome) + 1) % len(cycle)]
                    run_in_background(workers, session.edit_phase_outcome, latest.id, following)
                elif name == "k":
                    session.toggle_sticky_player()
                elif name in BACKGROUND_KEYS and not (ctrl or meta):
                    run_in_background(workers, dispatch, session, name)
                else:
                    dispatch(session, name, ctrl=ctrl, meta=meta)
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button in (1, 2, 3):
                if session.direction.needs_confirmation:
                    continue
                pitch_pos = screen_to_pitch(event.pos, pitch_rect)
                if pitch_pos is not None and event.button == 1:
                    if session.chain_mode:
                        run_in_background(workers, session.pitch_click, *pitch_pos)
                    else:
                        session.pitch_click(*pitch_pos)
                    continue
                goal_pos = screen_to_pitch(event.pos, goal_rect)
                if goal_pos is not None and session.form.event_type == "shot":
                    session.set_goal_mouth(*goal_pos)
                    continue
                row = _row_at(event.pos, roster_origin, panel_w, len(roster_rows))
                if row is not None:
                    player_id = roster_rows[row][0]
                    if event.button == 2:
                        continue
                    if event.button == 1:
                        session.select_player(player_id)
                    elif session.form.event_type == "substitution":
                        session.set_substitute_player(player_id)
                    else:
                        session.set_target_player(player_id)
                    continue
                row = _row_at(event.pos, events_origin, panel_w, len(event_rows))
                if row is not None:
                    event_id = event_rows[row][0]
                    if event.button == 1:
                        session.toggle_phase_selection(event_id)
                    elif event.button == 2:
                        run_in_background(workers, session.delete_event, event_id)
                    else:
                        run_in_background(workers, session.edit_event, event_id)

        session.expire_penalty_suggestion()

        screen.fill((0, 0, 0))
        _draw_pitch(screen, pitch_rect)
        _draw_ball_state(screen, session, pitch_rect, small)

        # HUD
        form = session.form
        mode = "CHAIN" if session.chain_mode else "MANUAL"
        header = (
            f"H{session.half} {session.clock.label} | {form.side.upper()} | {mode} | "
            f"Type: {event_label(form.event_type) if form.event_type else '-'}"
        )
        screen.blit(font.render(header, True, TEXT), (20, 10))
        player = session.roster.get(form.player_id)
        target = session.roster.get(form.target_player_id)
        detail = (
            f"Player: {player.label if player else '-'} | Target: {target.label if target else '-'} | "
            f"{'UNSUCCESSFUL' if form.unsuccessful else 'successful'} | Sticky: {'on' if session.sticky_player else 'off'}"
        )
        modifier = form.shot_outcome or form.aerial_outcome or form.corner_delivery
        if modifier:
            detail += f" | {modifier}"
        third = holder_third(session)
        if third is not None:
            detail += f" | Ball in {third} third"
        screen.blit(small.render(detail, True, TEXT), (20, 34))
        if jersey_buffer is not None:
            screen.blit(font.render(f"Shirt number: #{jersey_buffer}_", True, SELECTED), (20, height - 130))

        # Roster panel
        pygame.draw.rect(screen, PANEL, (width - panel_w - 10, 50, panel_w + 10, height - 60))
        for index, (player_id, label) in enumerate(roster_rows):
            colour = SELECTED if player_id == form.player_id else TEXT
            if player_id == form.target_player_id:
                colour = side_colour(form.side)
            screen.blit(small.render(label, True, colour), (roster_origin[0], roster_origin[1] + index * ROW_HEIGHT))

        if session.form.event_type == "shot":
            _draw_goal_mouth(screen, session, goal_rect)

        selection = set(session.phase_manager.selection)
        for index, (event_id, label) in enumerate(event_rows):
            colour = SELECTED if event_id in selection else TEXT
            screen.blit(small.render(label, True, colour), (events_origin[0], events_origin[1] + index * ROW_HEIGHT))

        phase_line = "  ".join(
            f"P{p.phase_number}:{p.outcome or '?'}({len(p.event_ids)})" for p in session.phases[-8:]
        )
        screen.blit(small.render(f"Phases: {phase_line or '-'}", True, TEXT), (20, height - 110))

        # Notices
        for index, notice in enumerate(session.notices.recent(3)):
            colour = ERROR_TEXT if notice.level == "error" else TEXT
            screen.blit(small.render(notice.message, True, colour), (20, height - 85 + index * 18))

        suggestion = session.penalty.pending
        if suggestion is not None:
            remaining = session.penalty.remaining()
            kind = "Carry into box" if suggestion.is_self_entry else "Ball into box"
            banner = f"{kind}: log penalty area entry? Y / N ({remaining:.0f}s)"
            surf = font.render(banner, True, (0, 0, 0))
            pygame.draw.rect(screen, SUGGESTION, (20, 60, surf.get_width() + 16, surf.get_height() + 10))
            screen.blit(surf, (28, 65))

        if session.direction.needs_confirmation:
            veil = pygame.Surface(screen_size, pygame.SRCALPHA)
            veil.fill((0, 0, 0, 170))
            screen.blit(veil, (0, 0))
            prompt = font.render("First half: does the HOME team attack Left or Right? Press L or R", True, LINE)
            screen.blit(prompt, ((width - prompt.get_width()) // 2, height // 2))

        pygame.display.flip()
        clock.tick(fps)

    join_workers(workers)
    pygame.quit()
    if on_close is not None:
        on_close()
