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
"""Capture session controller.

:class:`LoggingSession` is the state machine behind the capture screen. It
owns the event form (side, player, type, positions and modifiers), the match
clock, manual versus chain input, save/undo/edit and the phase and direction
actions. It never raises to its caller: every failure is turned into an
operator notice and written to the capture log, and control returns with
``None`` or ``False``.

Store writes are single flight per resource (events, phases, direction). A
second request while one is still running is refused rather than queued. The
store is re-read and the ball state re-derived after every attempted write,
successful or not, so the screen always reflects what was actually stored.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from threading import Lock
from typing import Callable, Dict, List, Optional, TypeVar

from pitchside.engine.ball_state import EMPTY_BALL_STATE, BallState, derive_ball_state
from pitchside.engine.clock import MatchClock
from pitchside.engine.config import (
    AERIAL_OUTCOMES,
    AWAY,
    CAPTURE_CONFIG,
    CHAIN_ELIGIBLE_EVENTS,
    CORNER_DELIVERIES,
    EVENT_TYPES,
    EVENTS_WITH_TARGET_PLAYER,
    EVENTS_WITH_UNSUCCESSFUL,
    HOME,
    SHOT_OUTCOMES,
    SIDES,
    WITHOUT_BALL_EVENTS,
    CaptureConfig,
    event_label,
    get_event_type,
    requires_end_position,
)
from pitchside.engine.direction import AttackDirectionController
from pitchside.engine.lineup import on_pitch
from pitchside.engine.notifications import INFO, NoticeBoard
from pitchside.engine.penalty_area import PenaltyAreaTracker, detect_penalty_area_entry
from pitchside.engine.phases import PhaseManager, build_phase_views
from pitchside.engine.store import EventStore
from pitchside.errors import BusyError, CaptureError, InvariantViolation, ValidationError
from pitchside.models.event import EventDraft, MatchEvent, PitchPoint
from pitchside.models.phase import Phase
from pitchside.models.team import Roster, SquadPlayer
from pitchside.utils.debug import CaptureDebugger

T = TypeVar("T")

EVENTS = "events"
PHASES = "phases"
DIRECTION = "direction"


@dataclass(slots=True)
class EventForm:
    """Fields the operator is currently filling in.

    Parameters
    ----------
    side : str
        Side whose players are listed, ``"home"`` or ``"away"``.
    player_id : Optional[str]
        Acting player (player going off for substitutions).
    event_type : Optional[str]
        Selected event type code.
    start : Optional[PitchPoint]
        First pitch click.
    end : Optional[PitchPoint]
        Second pitch click, for end-position types.
    unsuccessful : bool
        Whether the action failed.
    target_player_id : Optional[str]
        Receiving player.
    substitute_player_id : Optional[str]
        Player coming on.
    shot_outcome : Optional[str]
        Shot result.
    aerial_outcome : Optional[str]
        Aerial duel result.
    corner_delivery : Optional[str]
        Corner delivery style.
    goal_mouth : Optional[PitchPoint]
        Shot placement on the goal-mouth diagram.
    """

    side: str = HOME
    player_id: Optional[str] = None
    event_type: Optional[str] = None
    start: Optional[PitchPoint] = None
    end: Optional[PitchPoint] = None
    unsuccessful: bool = False
    target_player_id: Optional[str] = None
    substitute_player_id: Optional[str] = None
    shot_outcome: Optional[str] = None
    aerial_outcome: Optional[str] = None
    corner_delivery: Optional[str] = None
    goal_mouth: Optional[PitchPoint] = None

    def reset(self, keep_player: bool) -> None:
        """Clear the form, optionally keeping the acting player.

        Parameters
        ----------
        keep_player : bool
            Whether ``player_id`` (and so ``side``) survives the reset.
        """
        player_id = self.player_id if keep_player else None
        side = self.side
        for name in EventForm.__slots__:
            setattr(self, name, EventForm.__dataclass_fields__[name].default)
        self.side = side
        self.player_id = player_id


class LoggingSession:
    """Orchestrates event capture for one match.

    Parameters
    ----------
    store : EventStore
        Backend holding events, phases, direction and squads.
    match_id : str
        Match being captured.
    notices : Optional[NoticeBoard]
        Sink for operator notices; a new board is created when omitted.
    debugger : Optional[CaptureDebugger]
        Capture log.
    config : Optional[CaptureConfig]
        Tuning parameters; defaults to :data:`CAPTURE_CONFIG`.
    """

    def __init__(
        self,
        store: EventStore,
        match_id: str,
        notices: Optional[NoticeBoard] = None,
        debugger: Optional[CaptureDebugger] = None,
        config: Optional[CaptureConfig] = None,
    ) -> None:
        """Wire the collaborators together; call :meth:`load` before use.

        Parameters
        ----------
        store : EventStore
            Backend holding events, phases, direction and squads.
        match_id : str
            Match being captured.
        notices : Optional[NoticeBoard]
            Sink for operator notices; a new board is created when omitted.
        debugger : Optional[CaptureDebugger]
            Capture log.
        config : Optional[CaptureConfig]
            Tuning parameters; defaults to :data:`CAPTURE_CONFIG`.
        """
        self.store = store
        self.match_id = match_id
        self.config = config or CAPTURE_CONFIG
        self.debugger = debugger
        self.notices = notices or NoticeBoard(self.config.session.notice_history, debugger)

        self.direction = AttackDirectionController(store, match_id, debugger)
        self.phase_manager = PhaseManager(store, match_id, debugger)
        self.penalty = PenaltyAreaTracker(self.config.suggestion, debugger)
        self.clock = MatchClock(config=self.config.clock)

        self.form = EventForm()
        self.sticky_player = self.config.session.sticky_player
        self.chain_mode = False
        self.recent_players: List[str] = []
        self.recent_targets: List[str] = []
        self.pending_edit: Optional[MatchEvent] = None

        self.roster = Roster()
        self.events: List[MatchEvent] = []
        self.phases: List[Phase] = []
        self.ball_state: BallState = EMPTY_BALL_STATE

        self._locks: Dict[str, Lock] = {name: Lock() for name in (EVENTS, PHASES, DIRECTION)}

    # ------------------------------------------------------------------
    # Loading and derived state
    # ------------------------------------------------------------------
    def load(self) -> bool:
        """Fetch squads, events, phases and the stored direction.

        Returns
        -------
        bool
            ``True`` when everything loaded.
        """
        try:
            self.roster = Roster(
                self.store.list_squad(self.match_id, HOME),
                self.store.list_squad(self.match_id, AWAY),
            )
            self.refresh()
            self.direction.load(has_events=bool(self.events))
        except CaptureError as exc:
            self._report(exc)
            return False
        return True

    def refresh(self) -> None:
        """Re-read events and phases and re-derive the ball state."""
        events = self.store.list_events(self.match_id)
        phases = self.store.list_phases(self.match_id)
        self.events = events
        self.phases = build_phase_views(phases, events)
        self.ball_state = derive_ball_state(events, self.roster, self.config.ball_state)
        self.phase_manager.prune(events, self.half)

    @property
    def half(self) -> int:
        """Return the active half."""
        return self.clock.half

    @property
    def is_logging_enabled(self) -> bool:
        """Return whether the direction gate has been passed."""
        return self.direction.is_confirmed

    @property
    def home_attacks_left_this_half(self) -> Optional[bool]:
        """Return the home orientation for the active half, once confirmed."""
        if not self.direction.is_confirmed:
            return None
        return self.direction.home_attacks_left(self.half)

    def is_busy(self, resource: str = EVENTS) -> bool:
        """Return whether a write is running for ``resource``.

        Parameters
        ----------
        resource : str
            ``"events"``, ``"phases"`` or ``"direction"``.

        Returns
        -------
        bool
            ``True`` while a write holds the resource.
        """
        return self._locks[resource].locked()

    def available_players(self, side: str) -> List[SquadPlayer]:
        """Return the players of ``side`` currently on the pitch.

        Parameters
        ----------
        side : str
            ``"home"`` or ``"away"``.

        Returns
        -------
        List[SquadPlayer]
            On-pitch players sorted by shirt number.
        """
        return on_pitch(self.roster.players(side), self.events)

    def _run_exclusive(self, resource: str, action: Callable[[], T]) -> Optional[T]:
        """Run a store write under the single-flight rule.

        Parameters
        ----------
        resource : str
            Logical resource the write touches.
        action : Callable[[], T]
            The write; must return a non-``None`` value on success.

        Returns
        -------
        Optional[T]
            The action's result, or ``None`` when it was refused or failed.
        """
        lock = self._locks[resource]
        if not lock.acquire(blocking=False):
            self._report(BusyError(resource), level=INFO)
            return None
        try:
            return action()
        except CaptureError as exc:
            self._report(exc)
            return None
        finally:
            try:
                self.refresh()
            except CaptureError as exc:
                self._report(exc)
            finally:
                lock.release()

    def _report(self, exc: CaptureError, level: str = "error") -> None:
        """Turn an exception into a notice and a capture log line.

        Parameters
        ----------
        exc : CaptureError
            The failure to report.
        level : str
            Notice level.
        """
        self.notices.notify(level, str(exc))
        if self.debugger:
            self.debugger.log_error(type(exc).__name__, str(exc))

    def _remember(self, history: List[str], player_id: str, limit: int) -> None:
        """Move ``player_id`` to the front of a recently-used list.

        Parameters
        ----------
        history : List[str]
            List to update in place.
        player_id : str
            Player to promote.
        limit : int
            Maximum list length.
        """
        if player_id in history:
            history.remove(player_id)
        history.insert(0, player_id)
        del history[limit:]

    def _find_event(self, event_id: str) -> Optional[MatchEvent]:
        """Look up a loaded event.

        Parameters
        ----------
        event_id : str
            Identifier to resolve.

        Returns
        -------
        Optional[MatchEvent]
            The event or ``None``.
        """
        return next((e for e in self.events if e.id == event_id), None)

    # ------------------------------------------------------------------
    # Form state
    # ------------------------------------------------------------------
    def select_side(self, side: str) -> None:
        """Switch the listed side, clearing player choices.

        Parameters
        ----------
        side : str
            ``"home"`` or ``"away"``.
        """
        if side not in SIDES:
            self._report(ValidationError(f"Unknown side: {side}", field="side"))
            return
        if side == self.form.side:
            return
        self.form.side = side
        self.form.player_id = None
        self.form.target_player_id = None
        self.form.substitute_player_id = None

    def swap_side(self) -> None:
        """Toggle between the home and away squads."""
        self.select_side(AWAY if self.form.side == HOME else HOME)

    def select_player(self, player_id: str) -> bool:
        """Choose the acting player.

        Parameters
        ----------
        player_id : str
            Player to select.

        Returns
        -------
        bool
            ``False`` when the player is not in either squad.
        """
        side = self.roster.side_of(player_id)
        if side is None and len(self.roster):
            self._report(ValidationError("Unknown player", field="player_id"))
            return False
        if side is not None:
            self.form.side = side
        self.form.player_id = player_id
        self._remember(self.recent_players, player_id, self.config.session.recent_player_limit)
        return True

    def select_recent_player(self, position: int) -> bool:
        """Choose a player from the recently used list.

        Parameters
        ----------
        position : int
            One-based position in the list, as typed on the digit keys.

        Returns
        -------
        bool
            ``False`` when nothing is stored at ``position``.
        """
        if not 1 <= position <= len(self.recent_players):
            return False
        return self.select_player(self.recent_players[position - 1])

    def select_event_type(self, event_type: str) -> bool:
        """Choose the event type and drop fields it does not use.

        Parameters
        ----------
        event_type : str
            Event type code.

        Returns
        -------
        bool
            ``False`` for unknown codes.
        """
        cfg = get_event_type(event_type)
        if cfg is None:
            self._report(ValidationError(f"Unknown event type: {event_type}", field="event_type"))
            return False
        form = self.form
        form.event_type = event_type
        if event_type in WITHOUT_BALL_EVENTS:
            form.start = None
            form.end = None
        if not cfg.requires_end_position:
            form.end = None
        if event_type not in EVENTS_WITH_UNSUCCESSFUL:
            form.unsuccessful = False
        if event_type not in EVENTS_WITH_TARGET_PLAYER:
            form.target_player_id = None
        if not cfg.requires_substitute_player:
            form.substitute_player_id = None
        if event_type != "shot":
            form.shot_outcome = None
            form.goal_mouth = None
        if event_type != "aerial_duel":
            form.aerial_outcome = None
        if event_type != "corner":
            form.corner_delivery = None
        return True

    def set_target_player(self, player_id: Optional[str]) -> None:
        """Choose or clear the receiving player.

        Parameters
        ----------
        player_id : Optional[str]
            Receiver, or ``None`` to clear.
        """
        self.form.target_player_id = player_id

    def set_substitute_player(self, player_id: Optional[str]) -> None:
        """Choose or clear the player coming on.

        Parameters
        ----------
        player_id : Optional[str]
            Incoming player, or ``None`` to clear.
        """
        self.form.substitute_player_id = player_id

    def set_shot_outcome(self, outcome: str) -> bool:
        """Record the shot result.

        Parameters
        ----------
        outcome : str
            One of ``goal``, ``on_target``, ``off_target`` or ``blocked``.

        Returns
        -------
        bool
            ``False`` for an unknown outcome.
        """
        if outcome not in SHOT_OUTCOMES:
            self._report(ValidationError(f"Invalid shot outcome: {outcome}", field="shot_outcome"))
            return False
        self.form.shot_outcome = outcome
        return True

    def set_aerial_outcome(self, outcome: str) -> bool:
        """Record the aerial duel result.

        Parameters
        ----------
        outcome : str
            ``won`` or ``lost``.

        Returns
        -------
        bool
            ``False`` for an unknown outcome.
        """
        if outcome not in AERIAL_OUTCOMES:
            self._report(ValidationError(f"Invalid aerial outcome: {outcome}", field="aerial_outcome"))
            return False
        self.form.aerial_outcome = outcome
        return True

    def set_corner_delivery(self, delivery: str) -> bool:
        """Record the corner delivery style.

        Parameters
        ----------
        delivery : str
            ``inswing``, ``outswing`` or ``short``.

        Returns
        -------
        bool
            ``False`` for an unknown delivery.
        """
        if delivery not in CORNER_DELIVERIES:
            self._report(ValidationError(f"Invalid corner delivery: {delivery}", field="corner_delivery"))
            return False
        self.form.corner_delivery = delivery
        return True

    def set_goal_mouth(self, x: float, y: float) -> None:
        """Record where a shot crossed the goal-mouth diagram.

        Parameters
        ----------
        x : float
            Horizontal diagram position.
        y : float
            Vertical diagram position.
        """
        self.form.goal_mouth = PitchPoint.clamped(x, y)

    def toggle_unsuccessful(self) -> bool:
        """Flip the unsuccessful flag.

        Returns
        -------
        bool
            The new flag value.
        """
        self.form.unsuccessful = not self.form.unsuccessful
        return self.form.unsuccessful

    def toggle_sticky_player(self) -> bool:
        """Flip whether the player survives a save.

        Returns
        -------
        bool
            The new setting.
        """
        self.sticky_player = not self.sticky_player
        return self.sticky_player

    def set_half(self, half: int) -> None:
        """Switch the active half.

        Parameters
        ----------
        half : int
            ``1`` or ``2``.
        """
        if half not in (1, 2):
            self._report(ValidationError("Half must be 1 or 2", field="half"))
            return
        if half != self.half:
            self.phase_manager.clear_selection()
        self.clock.set_half(half)

    def adjust_clock(self, steps: int) -> None:
        """Nudge the clock by whole adjustment steps.

        Parameters
        ----------
        steps : int
            Signed number of steps (15 seconds each by default).
        """
        self.clock.adjust(steps * self.config.clock.adjust_step_seconds)

    def set_clock(self, minute: int, seconds: int = 0) -> None:
        """Set the clock directly.

        Parameters
        ----------
        minute : int
            New minute.
        seconds : int
            New second.
        """
        self.clock.set_time(minute, seconds)

    def pitch_click(self, x: float, y: float) -> Optional[MatchEvent]:
        """Handle a click on the pitch.

        In manual mode the click fills the start, then the end position. With
        both already set it starts a new pair. In chain mode the click is the
        end of a new event that is saved immediately.

        Parameters
        ----------
        x : float
            Goal-to-goal coordinate, clamped to the pitch.
        y : float
            Touchline-to-touchline coordinate, clamped to the pitch.

        Returns
        -------
        Optional[MatchEvent]
            The event saved by a chain click, otherwise ``None``.
        """
        if not self.direction.is_confirmed:
            self._report(InvariantViolation("Confirm the attack direction before logging events"))
            return None
        point = PitchPoint.clamped(x, y)
        if self.chain_mode:
            return self.save_chain_event(point)

        form = self.form
        event_type = form.event_type
        if event_type in WITHOUT_BALL_EVENTS:
            self.notices.info(f"{event_label(event_type)} does not need a pitch position")
            return None
        wants_end = event_type is None or requires_end_position(event_type)
        if form.start is None:
            form.start = point
        elif form.end is None and wants_end:
            form.end = point
        else:
            form.start = point
            form.end = None
        return None

    def use_suggestion(self) -> bool:
        """Copy the suggested start position into an empty form.

        Returns
        -------
        bool
            ``True`` when the start position was filled.
        """
        suggestion = self.ball_state.suggested_start
        if suggestion is None or self.form.start is not None:
            return False
        if self.form.event_type in WITHOUT_BALL_EVENTS:
            return False
        self.form.start = suggestion
        return True

    def reset_form(self) -> None:
        """Clear the form, keeping the player only in sticky mode."""
        self.form.reset(keep_player=self.sticky_player)

    def clear_form(self) -> None:
        """Abandon the current entry.

        An edit in progress is cancelled by putting the original event back.
        """
        self.abandon_edit()
        self.reset_form()

    def abandon_edit(self) -> bool:
        """Put the event being edited back into the store.

        Called when the form is cleared and before the session shuts down.

        Returns
        -------
        bool
            ``True`` when no edit is left pending.
        """
        if self.pending_edit is None:
            return True
        return self._restore_pending_edit()

    # ------------------------------------------------------------------
    # Event writes
    # ------------------------------------------------------------------
    def _build_draft(self) -> EventDraft:
        """Validate the form and turn it into a draft.

        Returns
        -------
        EventDraft
            Draft ready for the store.

        Raises
        ------
        InvariantViolation
            If the direction has not been confirmed.
        ValidationError
            For the first missing field, checked in the order player(s) and
            type, positions, then type-specific modifiers.
        """
        if not self.direction.is_confirmed:
            raise InvariantViolation("Confirm the attack direction before logging events")
        form = self.form
        event_type = form.event_type
        if event_type == "substitution":
            if not form.player_id:
                raise ValidationError("Select the player going OFF", field="player_id")
            if not form.substitute_player_id:
                raise ValidationError("Select the substitute coming ON", field="substitute_player_id")
        elif not form.player_id or not event_type:
            raise ValidationError("Please select a player and event type", field="player_id")

        cfg = EVENT_TYPES[event_type]
        without_ball = event_type in WITHOUT_BALL_EVENTS
        if not without_ball and form.start is None:
            raise ValidationError("Please click on the pitch to mark the position", field="start")
        if cfg.requires_end_position and form.end is None:
            raise ValidationError("This event type requires an end position", field="end")
        if event_type == "shot" and not form.shot_outcome:
            raise ValidationError("Please select a shot outcome", field="shot_outcome")
        if event_type == "aerial_duel" and not form.aerial_outcome:
            raise ValidationError("Please select an aerial duel outcome", field="aerial_outcome")
        if event_type == "corner" and not form.corner_delivery:
            raise ValidationError("Please select a corner delivery type", field="corner_delivery")

        return EventDraft(
            match_id=self.match_id,
            player_id=form.player_id,
            event_type=event_type,
            half=self.half,
            minute=self.clock.minute,
            seconds=self.clock.seconds,
            start=None if without_ball else form.start,
            end=form.end if cfg.requires_end_position else None,
            successful=not form.unsuccessful,
            target_player_id=form.target_player_id if event_type in EVENTS_WITH_TARGET_PLAYER else None,
            substitute_player_id=form.substitute_player_id if cfg.requires_substitute_player else None,
            shot_outcome=form.shot_outcome if event_type == "shot" else None,
            aerial_outcome=form.aerial_outcome if event_type == "aerial_duel" else None,
            corner_delivery=form.corner_delivery if event_type == "corner" else None,
            goal_mouth=form.goal_mouth if event_type == "shot" else None,
            phase_id=self._edited_phase_id(),
        )

    def _edited_phase_id(self) -> Optional[str]:
        """Return the phase of the event being edited, if it still exists.

        Returns
        -------
        Optional[str]
            Phase id to keep on the re-saved event.
        """
        original = self.pending_edit
        if original is None or original.phase_id is None or original.half != self.half:
            return None
        if any(p.id == original.phase_id for p in self.phases):
            return original.phase_id
        return None

    def save(self) -> Optional[MatchEvent]:
        """Validate and store the form as a new event.

        Returns
        -------
        Optional[MatchEvent]
            The stored event, or ``None`` when validation or the write failed.
        """
        try:
            draft = self._build_draft()
        except CaptureError as exc:
            self._report(exc)
            return None

        event = self._run_exclusive(EVENTS, lambda: self.store.insert_event(draft))
        if event is None:
            return None
        self.pending_edit = None
        self._after_save(event, "manual")
        self.notices.success("Event saved")
        self.reset_form()
        return event

    def save_chain_event(self, end: PitchPoint) -> Optional[MatchEvent]:
        """Store a chain-mode event ending at ``end``.

        The event starts at the form's start, else the suggested start, else
        the pitch centre. Afterwards ``end`` becomes the next start and a
        chosen receiver becomes the acting player.

        Parameters
        ----------
        end : PitchPoint
            Clicked end position.

        Returns
        -------
        Optional[MatchEvent]
            The stored event, or ``None`` when refused or failed.
        """
        form = self.form
        try:
            if not self.direction.is_confirmed:
                raise InvariantViolation("Confirm the attack direction before logging events")
            if self.pending_edit is not None:
                raise InvariantViolation("Save or cancel the edit before starting Chain Mode")
            if not form.player_id:
                raise ValidationError("Select a player first", field="player_id")
            event_type = form.event_type or self.config.session.chain_default_event_type
            if event_type not in CHAIN_ELIGIBLE_EVENTS:
                raise ValidationError(
                    f"{event_label(event_type)} doesn't support Chain Mode (no end position)", field="event_type"
                )
            start = form.start or self.ball_state.suggested_start or PitchPoint(*self.config.pitch.centre)
            draft = EventDraft(
                match_id=self.match_id,
                player_id=form.player_id,
                event_type=event_type,
                half=self.half,
                minute=self.clock.minute,
                seconds=self.clock.seconds,
                start=start,
                end=end,
                successful=not form.unsuccessful,
                target_player_id=form.target_player_id if event_type in EVENTS_WITH_TARGET_PLAYER else None,
            )
        except CaptureError as exc:
            self._report(exc)
            return None

        event = self._run_exclusive(EVENTS, lambda: self.store.insert_event(draft))
        if event is None:
            return None
        self._after_save(event, "chain")

        form.event_type = event_type
        form.start = end
        form.end = None
        form.unsuccessful = False
        receiver = form.target_player_id
        form.target_player_id = None
        if receiver:
            self.select_player(receiver)
        self.notices.success(f"Chain {event_label(event_type)} saved")
        return event

    def _after_save(self, event: MatchEvent, source: str) -> None:
        """Bookkeeping shared by every successful event write.

        Parameters
        ----------
        event : MatchEvent
            The stored event.
        source : str
            ``"manual"`` or ``"chain"``.
        """
        if self.debugger:
            self.debugger.log_event_saved(event, source)
        if event.target_player_id:
            self._remember(self.recent_targets, event.target_player_id, self.config.session.recent_target_limit)
        self._detect_penalty_entry(event)
        self.clock.advance()

    def _detect_penalty_entry(self, event: MatchEvent) -> None:
        """Offer a penalty-area prompt when ``event`` ended in the box.

        Parameters
        ----------
        event : MatchEvent
            Freshly stored event.
        """
        if not self.direction.is_confirmed:
            return
        suggestion = detect_penalty_area_entry(
            event, self.roster, self.direction.home_attacks_left(event.half)
        )
        if suggestion is None:
            return
        self.penalty.offer(suggestion)
        self.notices.info("Penalty area entry detected: press Y to log it or N to dismiss")

    def toggle_chain_mode(self) -> bool:
        """Switch chain mode on or off.

        Returns
        -------
        bool
            Whether chain mode is on afterwards.
        """
        if self.chain_mode:
            self.chain_mode = False
            self.notices.info("Chain Mode off")
            return False

        if self.pending_edit is not None:
            self._report(InvariantViolation("Save or cancel the edit before starting Chain Mode"))
            return False
        form = self.form
        if not form.player_id:
            self._report(ValidationError("Select a player first", field="player_id"))
            return False
        event_type = form.event_type or self.config.session.chain_default_event_type
        if event_type not in CHAIN_ELIGIBLE_EVENTS:
            self._report(
                ValidationError(f"{event_label(event_type)} doesn't support Chain Mode (no end position)")
            )
            return False
        form.event_type = event_type
        form.end = None
        if form.start is None:
            form.start = self.ball_state.suggested_start
        self.chain_mode = True
        self.notices.info(f"Chain Mode on: click the pitch to log each {event_label(event_type)}")
        return True

    def _delete(self, event: MatchEvent, reason: str) -> MatchEvent:
        """Remove an event from the store and log it.

        Parameters
        ----------
        event : MatchEvent
            Event to delete.
        reason : str
            Why it is removed.

        Returns
        -------
        MatchEvent
            The deleted event.
        """
        self.store.delete_event(event.id)
        if self.debugger:
            self.debugger.log_event_removed(event, reason)
        pending = self.penalty.pending
        if pending is not None and pending.source_event_id == event.id:
            self.penalty.dismiss()
        return event

    def undo(self) -> Optional[MatchEvent]:
        """Delete the most recently created event.

        Returns
        -------
        Optional[MatchEvent]
            The deleted event, or ``None`` when there was nothing to undo.
        """
        if not self.events:
            self.notices.info("Nothing to undo")
            return None
        last = max(self.events, key=lambda e: e.sequence)
        removed = self._run_exclusive(EVENTS, lambda: self._delete(last, "undo"))
        if removed is not None:
            self.notices.success(f"Undid {event_label(removed.event_type)}")
        return removed

    def delete_event(self, event_id: str) -> bool:
        """Delete an event chosen from the event list.

        Parameters
        ----------
        event_id : str
            Event to delete.

        Returns
        -------
        bool
            ``True`` when the event was removed.
        """
        event = self._find_event(event_id)
        if event is None:
            self._report(InvariantViolation("That event no longer exists"))
            return False
        removed = self._run_exclusive(EVENTS, lambda: self._delete(event, "delete"))
        if removed is None:
            return False
        self.notices.success("Event deleted")
        return True

    def edit_event(self, event_id: str) -> bool:
        """Load an event into the form and remove it from the store.

        Saving the form stores the modified copy. Clearing the form, or
        starting another edit, restores the original event.

        Parameters
        ----------
        event_id : str
            Event to edit.

        Returns
        -------
        bool
            ``True`` when the event was loaded.
        """
        if self.pending_edit is not None and self.pending_edit.id != event_id:
            if not self._restore_pending_edit():
                return False
        event = self._find_event(event_id)
        if event is None:
            self._report(InvariantViolation("That event no longer exists"))
            return False
        removed = self._run_exclusive(EVENTS, lambda: self._delete(event, "edit"))
        if removed is None:
            return False

        self.pending_edit = event
        self.chain_mode = False
        self._load_form(event)
        self.notices.info("Editing event: save to keep changes, Esc to cancel")
        return True

    def _load_form(self, event: MatchEvent) -> None:
        """Copy every field of ``event`` into the form and clock.

        Parameters
        ----------
        event : MatchEvent
            Event being edited.
        """
        self.form = EventForm(
            side=self.roster.side_of(event.player_id) or self.form.side,
            player_id=event.player_id,
            event_type=event.event_type,
            start=event.start,
            end=event.end,
            unsuccessful=not event.successful,
            target_player_id=event.target_player_id,
            substitute_player_id=event.substitute_player_id,
            shot_outcome=event.shot_outcome,
            aerial_outcome=event.aerial_outcome,
            corner_delivery=event.corner_delivery,
            goal_mouth=event.goal_mouth,
        )
        self.set_half(event.half)
        self.clock.set_time(event.minute, event.seconds)

    def _restore_pending_edit(self) -> bool:
        """Re-insert the event whose edit is being abandoned.

        Returns
        -------
        bool
            ``True`` when the original is back in the store.
        """
        original = self.pending_edit
        if original is None:
            return True
        draft = original.to_draft()
        if draft.phase_id is not None and not any(p.id == draft.phase_id for p in self.phases):
            draft = replace(draft, phase_id=None)
        restored = self._run_exclusive(EVENTS, lambda: self.store.insert_event(draft))
        if restored is None:
            return False
        self.pending_edit = None
        if self.debugger:
            self.debugger.log_event_saved(restored, "restore")
        self.notices.info("Edit cancelled, original event restored")
        return True

    # ------------------------------------------------------------------
    # Penalty-area prompt
    # ------------------------------------------------------------------
    def accept_penalty_suggestion(self) -> List[MatchEvent]:
        """Write the events implied by the pending penalty-area prompt.

        Returns
        -------
        List[MatchEvent]
            Stored events; empty when nothing was pending or the write failed.
        """
        if self.penalty.pending is None:
            self.notices.info("No penalty area entry to confirm")
            return []
        written = self._run_exclusive(
            EVENTS, lambda: self.penalty.accept(self.store, self.clock.minute, self.clock.seconds)
        )
        if written is None:
            return []
        if self.debugger:
            for event in written:
                self.debugger.log_event_saved(event, "penalty")
        self.notices.success("Penalty area entry logged")
        return written

    def dismiss_penalty_suggestion(self) -> bool:
        """Discard the pending penalty-area prompt.

        Returns
        -------
        bool
            ``True`` when a prompt was discarded.
        """
        return self.penalty.dismiss() is not None

    def expire_penalty_suggestion(self, now: Optional[float] = None) -> bool:
        """Dismiss the pending prompt once its countdown has run out.

        Parameters
        ----------
        now : Optional[float]
            Monotonic timestamp; defaults to the current time.

        Returns
        -------
        bool
            ``True`` when a prompt expired.
        """
        return self.penalty.expire(now)

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------
    def selectable_events(self) -> List[MatchEvent]:
        """Return ungrouped events of the active half.

        Returns
        -------
        List[MatchEvent]
            Events that may be added to a new phase.
        """
        return self.phase_manager.selectable(self.events, self.half)

    def toggle_phase_selection(self, event_id: str) -> bool:
        """Add or remove an event from the phase selection.

        Parameters
        ----------
        event_id : str
            Event to toggle.

        Returns
        -------
        bool
            ``True`` when the event is selected afterwards.
        """
        try:
            return self.phase_manager.toggle(event_id, self.events, self.half)
        except CaptureError as exc:
            self._report(exc)
            return False

    def create_phase(self, outcome: str) -> Optional[Phase]:
        """Group the selected events into a new phase.

        Parameters
        ----------
        outcome : str
            ``"goal"``, ``"shot"`` or ``"lost_possession"``.

        Returns
        -------
        Optional[Phase]
            The new phase, or ``None`` when refused or failed.
        """
        phase = self._run_exclusive(
            PHASES, lambda: self.phase_manager.create(outcome, self.events, self.phases, self.roster, self.half)
        )
        if phase is not None:
            self.notices.success(f"Phase {phase.phase_number} created")
        return phase

    def edit_phase_outcome(self, phase_id: str, outcome: Optional[str]) -> Optional[Phase]:
        """Retag a phase.

        Parameters
        ----------
        phase_id : str
            Phase to retag.
        outcome : Optional[str]
            New outcome, or ``None`` to reopen.

        Returns
        -------
        Optional[Phase]
            The updated phase, or ``None`` on failure.
        """
        phase = self._run_exclusive(PHASES, lambda: self.phase_manager.edit_outcome(phase_id, outcome))
        if phase is not None:
            self.notices.success(f"Phase {phase.phase_number} updated")
        return phase

    def delete_phase(self, phase_id: str) -> bool:
        """Delete a phase, keeping its events.

        Parameters
        ----------
        phase_id : str
            Phase to delete.

        Returns
        -------
        bool
            ``True`` when the phase was removed.
        """
        remaining = self._run_exclusive(PHASES, lambda: self.phase_manager.delete(phase_id, self.phases))
        if remaining is None:
            return False
        self.notices.success("Phase deleted")
        return True

    # ------------------------------------------------------------------
    # Direction
    # ------------------------------------------------------------------
    def confirm_direction(self, home_attacks_left: bool) -> bool:
        """Confirm the first-half orientation and unlock logging.

        Parameters
        ----------
        home_attacks_left : bool
            Whether the home team attacks left in the first half.

        Returns
        -------
        bool
            ``True`` when the value was stored.
        """
        value = self._run_exclusive(DIRECTION, lambda: self.direction.confirm(home_attacks_left))
        if value is None:
            return False
        self.notices.success(f"Home attacks {'left' if value else 'right'} in the first half")
        return True
