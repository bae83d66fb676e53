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
"""Operator facing notices (the toast feed of the capture screen)."""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass
from threading import Lock
from typing import Deque, List, Optional

from pitchside.utils.debug import CaptureDebugger

INFO = "info"
SUCCESS = "success"
ERROR = "error"


@dataclass(frozen=True)
class Notice:
    """A single dismissable message.

    Parameters
    ----------
    level : str
        ``"info"``, ``"success"`` or ``"error"``.
    message : str
        Text shown to the operator.
    created_at : float
        Monotonic time the notice was raised.
    """

    level: str
    message: str
    created_at: float


class NoticeBoard:
    """Bounded, thread-safe feed of notices.

    Parameters
    ----------
    limit : int, default=50
        Maximum number of notices retained.
    debugger : Optional[CaptureDebugger]
        Capture log that mirrors every notice.
    """

    def __init__(self, limit: int = 50, debugger: Optional[CaptureDebugger] = None) -> None:
        """Create an empty board.

        Parameters
        ----------
        limit : int
            Maximum number of notices retained.
        debugger : Optional[CaptureDebugger]
            Capture log that mirrors every notice.
        """
        self.debugger = debugger
        self._lock = Lock()
        self._notices: Deque[Notice] = deque(maxlen=limit)

    def notify(self, level: str, message: str) -> Notice:
        """Post a notice.

        Parameters
        ----------
        level : str
            ``"info"``, ``"success"`` or ``"error"``.
        message : str
            Text shown to the operator.

        Returns
        -------
        Notice
            The stored notice.
        """
        notice = Notice(level=level, message=message, created_at=time.monotonic())
        with self._lock:
            self._notices.append(notice)
        if self.debugger:
            self.debugger.log_notice(level, message)
        return notice

    def info(self, message: str) -> Notice:
        """Post an informational notice.

        Parameters
        ----------
        message : str
            Text shown to the operator.

        Returns
        -------
        Notice
            The stored notice.
        """
        return self.notify(INFO, message)

    def success(self, message: str) -> Notice:
        """Post a success notice.

        Parameters
        ----------
        message : str
            Text shown to the operator.

        Returns
        -------
        Notice
            The stored notice.
        """
        return self.notify(SUCCESS, message)

    def error(self, message: str) -> Notice:
        """Post an error notice.

        Parameters
        ----------
        message : str
            Text shown to the operator.

        Returns
        -------
        Notice
            The stored notice.
        """
        return self.notify(ERROR, message)

    @property
    def latest(self) -> Optional[Notice]:
        """Return the most recent notice, if any."""
        with self._lock:
            return self._notices[-1] if self._notices else None

    def recent(self, limit: int = 5) -> List[Notice]:
        """Return the newest notices, oldest first.

        Parameters
        ----------
        limit : int
            Maximum number of notices to return.

        Returns
        -------
        List[Notice]
            Up to ``limit`` notices.
        """
        if limit <= 0:
            return []
        with self._lock:
            return list(self._notices)[-limit:]

    def clear(self) -> None:
        """Dismiss every notice."""
        with self._lock:
            self._notices.clear()
