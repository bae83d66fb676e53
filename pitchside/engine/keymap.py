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
"""Keyboard shortcuts for the capture screen.

A single dispatcher maps key names to session actions. It does nothing while
the keyboard focus is inside a text field so typing a name or a shirt number
never triggers a command.
"""

from __future__ import annotations

from typing import Any, Dict, Tuple

from pitchside.engine.session import LoggingSession

KEY_ALIASES: Dict[str, str] = {
    "return": "enter",
    "kp_enter": "enter",
    "keypad enter": "enter",
    "esc": "escape",
    "[+]": "+",
    "[-]": "-",
    "keypad +": "+",
    "keypad -": "-",
    "plus": "+",
    "minus": "-",
    "equals": "=",
    "underscore": "_",
}

# key -> (session method, positional arguments)
KEY_ACTIONS: Dict[str, Tuple[str, Tuple[Any, ...]]] = {
    "escape": ("clear_form", ()),
    "enter": ("save", ()),
    "u": ("toggle_unsuccessful", ()),
    "tab": ("swap_side", ()),
    "m": ("toggle_chain_mode", ()),
    "+": ("adjust_clock", (1,)),
    "=": ("adjust_clock", (1,)),
    "-": ("adjust_clock", (-1,)),
    "_": ("adjust_clock", (-1,)),
}

EVENT_TYPE_KEYS: Dict[str, str] = {
    "q": "pass",
    "w": "cross",
    "e": "carry",
    "r": "dribble",
    "d": "tackle_won",
    "f": "foul_won",
    "a": "aerial_duel",
    "x": "clearance",
    "c": "corner",
    "h": "shot",
}

SHOT_OUTCOME_KEYS: Dict[str, str] = {
    "g": "goal",
    "t": "on_target",
    "o": "off_target",
    "b": "blocked",
}

AERIAL_OUTCOME_KEYS: Dict[str, str] = {
    "i": "won",
    "l": "lost",
}

CORNER_DELIVERY_KEYS: Dict[str, str] = {
    "i": "inswing",
    "o": "outswing",
    "p": "short",
}


def normalise_key(key: str) -> str:
    """Map a toolkit key name onto the dispatcher's vocabulary.

    Parameters
    ----------
    key : str
        Key name or typed character, for example ``"Return"`` or ``"Z"``.

    Returns
    -------
    str
        Lower-case canonical name such as ``"enter"`` or ``"z"``.
    """
    if len(key) == 1:
        return key.lower()
    name = key.strip().lower()
    return KEY_ALIASES.get(name, name)


def dispatch(
    session: LoggingSession,
    key: str,
    focus_in_text_input: bool = False,
    ctrl: bool = False,
    meta: bool = False,
) -> bool:
    """Run the session action bound to ``key``.

    Parameters
    ----------
    session : LoggingSession
        Session receiving the command.
    key : str
        Key name or typed character.
    focus_in_text_input : bool
        Whether a text field has the keyboard focus; nothing is dispatched
        while it does.
    ctrl : bool
        Whether Control is held; modified keys are left to the host.
    meta : bool
        Whether Command/Meta is held; modified keys are left to the host.

    Returns
    -------
    bool
        ``True`` when the key was handled.
    """
    if focus_in_text_input:
        return False
    key = normalise_key(key)
    if ctrl or meta:
        return False

    if key == "z":
        session.undo()
        return True
    if key in KEY_ACTIONS:
        method, args = KEY_ACTIONS[key]
        getattr(session, method)(*args)
        return True
    if key in EVENT_TYPE_KEYS:
        session.select_event_type(EVENT_TYPE_KEYS[key])
        return True
    if key in SHOT_OUTCOME_KEYS and session.form.event_type == "shot":
        session.set_shot_outcome(SHOT_OUTCOME_KEYS[key])
        return True
    if key in AERIAL_OUTCOME_KEYS and session.form.event_type == "aerial_duel":
        return session.set_aerial_outcome(AERIAL_OUTCOME_KEYS[key])
    if key in CORNER_DELIVERY_KEYS and session.form.event_type == "corner":
        return session.set_corner_delivery(CORNER_DELIVERY_KEYS[key])
    if key == "s":
        return session.use_suggestion()
    if key.isdigit() and key != "0":
        return session.select_recent_player(int(key))
    if session.penalty.pending is not None:
        if key == "y":
            session.accept_penalty_suggestion()
            return True
        if key == "n":
            return session.dismiss_penalty_suggestion()
    return False
