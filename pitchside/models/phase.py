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
"""Attacking phase records."""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Optional, Tuple

from pitchside.engine.config import PHASE_OUTCOMES
from pitchside.errors import ValidationError


def _check_outcome(outcome: Optional[str]) -> None:
    """Reject outcome tags outside :data:`PHASE_OUTCOMES`.

    Parameters
    ----------
    outcome : Optional[str]
        Tag to validate; ``None`` means the phase is still open.
    """
    if outcome is not None and outcome not in PHASE_OUTCOMES:
        raise ValidationError(f"Invalid phase outcome: {outcome}", field="outcome")


@dataclass(frozen=True, slots=True)
class PhaseDraft:
    """Fields for a phase that has not been stored yet.

    Parameters
    ----------
    match_id : str
        Match the phase belongs to.
    phase_number : int
        Position of the phase in the match, starting at ``1``.
    half : int
        Half the member events were logged in.
    team_id : str
        Team in possession during the phase.
    outcome : Optional[str]
        How the phase ended: ``goal``, ``shot`` or ``lost_possession``.
    """

    match_id: str
    phase_number: int
    half: int
    team_id: str
    outcome: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate numbering, half and outcome."""
        if self.phase_number < 1:
            raise ValidationError("Phase numbers start at 1", field="phase_number")
        if self.half not in (1, 2):
            raise ValidationError("Half must be 1 or 2", field="half")
        if not self.team_id:
            raise ValidationError("A phase must belong to a team", field="team_id")
        _check_outcome(self.outcome)


@dataclass(frozen=True, slots=True)
class Phase:
    """A stored attacking phase.

    Parameters
    ----------
    id : str
        Identifier assigned by the store.
    match_id : str
        Match the phase belongs to.
    phase_number : int
        Dense position of the phase, ``1..N``.
    half : int
        Half the member events were logged in.
    team_id : str
        Team in possession during the phase.
    outcome : Optional[str]
        How the phase ended, if tagged.
    event_ids : Tuple[str, ...]
        Member events, derived from their phase references.
    """

    id: str
    match_id: str
    phase_number: int
    half: int
    team_id: str
    outcome: Optional[str] = None
    event_ids: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Validate the outcome tag."""
        _check_outcome(self.outcome)

    @classmethod
    def from_draft(cls, draft: PhaseDraft, phase_id: str) -> Phase:
        """Stamp a draft with its storage id.

        Parameters
        ----------
        draft : PhaseDraft
            Validated phase fields.
        phase_id : str
            Identifier chosen by the store.

        Returns
        -------
        Phase
            The stored record with no members yet.
        """
        return cls(
            id=phase_id,
            match_id=draft.match_id,
            phase_number=draft.phase_number,
            half=draft.half,
            team_id=draft.team_id,
            outcome=draft.outcome,
        )

    def with_members(self, event_ids: Tuple[str, ...]) -> Phase:
        """Return a copy listing ``event_ids`` as members.

        Parameters
        ----------
        event_ids : Tuple[str, ...]
            Member event ids in chronological order.

        Returns
        -------
        Phase
            Copy of the phase with the member list replaced.
        """
        return replace(self, event_ids=tuple(event_ids))

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the phase record without its derived member list.

        Returns
        -------
        Dict[str, Any]
            JSON friendly mapping.
        """
        data = asdict(self)
        data.pop("event_ids")
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Phase:
        """Rebuild a phase from :meth:`to_dict` output.

        Parameters
        ----------
        data : Dict[str, Any]
            Serialised phase mapping.

        Returns
        -------
        Phase
            The decoded phase.
        """
        payload = {key: value for key, value in data.items() if key != "event_ids"}
        return cls(**payload)
