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
"""Exception hierarchy shared by the capture engine.

Every failure raised by the engine derives from :class:`CaptureError` so the
session controller can turn it into an operator notice without ever letting it
escape to the event loop. The subclasses mirror the three ways a capture action
can go wrong: the operator has not supplied enough information
(:class:`ValidationError`), the backing store refused the write
(:class:`StoreError`), or the request would break a structural rule of the
match log (:class:`InvariantViolation`).
"""

from __future__ import annotations


class CaptureError(Exception):
    """Base class for all recoverable capture failures.

    Parameters
    ----------
    message : str
        Human-readable explanation suitable for showing to the operator.
    """

    def __init__(self, message: str) -> None:
        """Store the operator facing message.

        Parameters
        ----------
        message : str
            Human-readable explanation suitable for showing to the operator.
        """
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ValidationError(CaptureError, ValueError):
    """Raised when an event or phase is missing required information.

    Parameters
    ----------
    message : str
        Description of the missing or malformed field.
    field : str | None
        Name of the offending field, when a single field is at fault.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        """Record the message and the offending field.

        Parameters
        ----------
        message : str
            Description of the missing or malformed field.
        field : str | None
            Name of the offending field, when a single field is at fault.
        """
        super().__init__(message)
        self.field = field


class StoreError(CaptureError):
    """Raised when the event store rejects a read or write.

    Parameters
    ----------
    message : str
        Description of the store failure.
    """

    def __init__(self, message: str) -> None:
        """Store the failure description.

        Parameters
        ----------
        message : str
            Description of the store failure.
        """
        super().__init__(message)


class NotFoundError(StoreError):
    """Raised when a record addressed by id does not exist.

    Parameters
    ----------
    kind : str
        Record kind, for example ``"event"`` or ``"phase"``.
    record_id : str
        Identifier that could not be resolved.
    """

    def __init__(self, kind: str, record_id: str) -> None:
        """Build the message from the record kind and id.

        Parameters
        ----------
        kind : str
            Record kind, for example ``"event"`` or ``"phase"``.
        record_id : str
            Identifier that could not be resolved.
        """
        super().__init__(f"{kind.capitalize()} {record_id} not found")
        self.kind = kind
        self.record_id = record_id


class InvariantViolation(CaptureError):
    """Raised before any store call when a request would corrupt the match log.

    Parameters
    ----------
    message : str
        Description of the rule that would be broken.
    """

    def __init__(self, message: str) -> None:
        """Store the rule description.

        Parameters
        ----------
        message : str
            Description of the rule that would be broken.
        """
        super().__init__(message)


class BusyError(CaptureError):
    """Raised when a mutation is requested while another one is still running.

    Parameters
    ----------
    resource : str
        Logical resource that is locked, for example ``"events"``.
    """

    def __init__(self, resource: str) -> None:
        """Build the message for the locked resource.

        Parameters
        ----------
        resource : str
            Logical resource that is locked, for example ``"events"``.
        """
        super().__init__(f"Still saving {resource}, please wait")
        self.resource = resource
