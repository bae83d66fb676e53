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
"""Tests for the capture session: form flow, saving, chain mode, undo and edit."""

from typing import Optional, Tuple

from pitchside.engine.config import AWAY, HOME
from pitchside.engine.notifications import ERROR, INFO, SUCCESS
from pitchside.engine.session import EVENTS, LoggingSession
from pitchside.engine.store import InMemoryEventStore
from pitchside.errors import StoreError
from pitchside.models.event import EventDraft, MatchEvent, PitchPoint
from pitchside.models.team import TeamSheet

MATCH_ID = "m1"


def _log_pass(
    session: LoggingSession,
    player_id: str = "h4",
    start: Tuple[float, float] = (20, 30),
    end: Tuple[float, float] = (60, 40),
    target: Optional[str] = None,
) -> Optional[MatchEvent]:
    session.select_player(player_id)
    session.select_event_type("pass")
    session.pitch_click(*start)
    session.pitch_click(*end)
    if target is not None:
        session.set_target_player(target)
    return session.save()


def _last_message(session: LoggingSession) -> str:
    return session.notices.latest.message


class FailingInsertStore(InMemoryEventStore):
    """Store whose event inserts always fail."""

    def insert_event(self, draft: EventDraft) -> MatchEvent:
        raise StoreError("database unavailable")


class TestForm:
    """Form state changes that never touch the store."""

    def test_select_player_follows_side(self, session: LoggingSession) -> None:
        """Selecting a player follows their side."""
        assert session.select_player("a3")
        assert session.form.side == AWAY
        assert not session.select_player("zz")
        assert session.notices.latest.level == ERROR
        assert session.form.player_id == "a3"

    def test_swap_side_clears_players(self, session: LoggingSession) -> None:
        """Swapping side clears the chosen players."""
        session.select_player("h4")
        session.set_target_player("h9")
        session.swap_side()
        assert session.form.side == AWAY
        assert session.form.player_id is None
        assert session.form.target_player_id is None

    def test_event_type_drops_unused_fields(self, session: LoggingSession) -> None:
        """Changing event type drops fields it does not use."""
        session.select_player("h4")
        session.select_event_type("pass")
        session.pitch_click(20, 30)
        session.pitch_click(60, 40)
        session.set_target_player("h9")
        session.toggle_unsuccessful()

        session.select_event_type("shot")
        assert session.form.start == PitchPoint(20, 30)
        assert session.form.end is None
        assert session.form.target_player_id is None
        assert session.form.unsuccessful is False

        session.select_event_type("yellow_card")
        assert session.form.start is None
        assert not session.select_event_type("nutmeg")

    def test_pitch_clicks_fill_start_then_end(self, session: LoggingSession) -> None:
        """Pitch clicks fill the start then the end."""
        session.select_event_type("carry")
        session.pitch_click(10, 10)
        session.pitch_click(20, 20)
        assert (session.form.start, session.form.end) == (PitchPoint(10, 10), PitchPoint(20, 20))
        session.pitch_click(30, 30)
        assert (session.form.start, session.form.end) == (PitchPoint(30, 30), None)

    def test_clicks_are_clamped(self, session: LoggingSession) -> None:
        """Clicks are clamped to the pitch."""
        session.select_event_type("tackle_won")
        session.pitch_click(-3, 104)
        assert session.form.start == PitchPoint(0, 100)

    def test_recent_players(self, session: LoggingSession) -> None:
        """Recent players are kept newest first."""
        for player_id in ("h4", "h7", "h9", "h7"):
            session.select_player(player_id)
        assert session.recent_players == ["h7", "h9", "h4"]
        assert session.select_recent_player(3)
        assert session.form.player_id == "h4"
        assert not session.select_recent_player(5)

    def test_modifiers_are_validated(self, session: LoggingSession) -> None:
        """Modifiers are validated against the event type."""
        assert not session.set_shot_outcome("wide")
        assert session.set_aerial_outcome("won")
        assert not session.set_corner_delivery("driven")
        session.set_goal_mouth(120, 40)
        assert session.form.goal_mouth == PitchPoint(100, 40)

    def test_half_switch_moves_clock_and_direction(self, session: LoggingSession) -> None:
        """Switching half moves the clock and the direction."""
        assert session.home_attacks_left_this_half is False
        session.set_half(2)
        assert session.clock.label == "45:00"
        assert session.home_attacks_left_this_half is True
        session.set_half(3)
        assert session.half == 2

    def test_clock_controls(self, session: LoggingSession) -> None:
        """Clock controls move the match clock."""
        session.adjust_clock(2)
        assert session.clock.label == "00:30"
        session.set_clock(12, 5)
        assert session.clock.label == "12:05"


class TestSaving:
    """Validation and successful writes."""

    def test_pass_moves_ball_to_receiver(self, session: LoggingSession) -> None:
        """A saved pass moves the ball to the receiver."""
        event = _log_pass(session, target="h9")
        assert event is not None
        assert event.target_player_id == "h9"
        assert session.ball_state.holder.player_id == "h9"
        assert session.ball_state.ball_position == PitchPoint(60, 40)
        assert session.ball_state.suggested_start == PitchPoint(60, 40)
        assert session.form.player_id is None
        assert session.clock.label == "00:02"
        assert _last_message(session) == "Event saved"
        assert session.recent_targets == ["h9"]

    def test_suggestion_can_be_used(self, session: LoggingSession) -> None:
        """The suggested start can be used."""
        _log_pass(session, target="h9")
        session.select_player("h9")
        session.select_event_type("carry")
        assert session.use_suggestion()
        assert session.form.start == PitchPoint(60, 40)
        assert not session.use_suggestion()

    def test_end_position_required(self, session: LoggingSession) -> None:
        """Saving without a required end position fails."""
        session.select_player("h4")
        session.select_event_type("pass")
        session.pitch_click(20, 30)
        assert session.save() is None
        assert _last_message(session) == "This event type requires an end position"
        assert session.events == []
        assert session.form.start == PitchPoint(20, 30)

    def test_validation_order(self, session: LoggingSession) -> None:
        """Validation reports the first missing field."""
        assert session.save() is None
        assert _last_message(session) == "Please select a player and event type"

        session.select_player("h9")
        session.select_event_type("shot")
        session.save()
        assert _last_message(session) == "Please click on the pitch to mark the position"

        session.pitch_click(88, 50)
        session.save()
        assert _last_message(session) == "Please select a shot outcome"

        session.set_shot_outcome("goal")
        assert session.save().shot_outcome == "goal"

        session.select_player("h5")
        session.select_event_type("aerial_duel")
        session.pitch_click(40, 40)
        session.save()
        assert _last_message(session) == "Please select an aerial duel outcome"

        session.select_event_type("corner")
        session.pitch_click(100, 0)
        session.save()
        assert _last_message(session) == "Please select a corner delivery type"

    def test_substitution(self, session: LoggingSession) -> None:
        """Substitutions are saved without a position."""
        session.select_player("h4")
        session.select_event_type("substitution")
        session.save()
        assert _last_message(session) == "Select the substitute coming ON"

        session.set_substitute_player("h12")
        event = session.save()
        assert event.start is None
        on_pitch = {p.player_id for p in session.available_players(HOME)}
        assert "h12" in on_pitch
        assert "h4" not in on_pitch

    def test_without_ball_click_is_ignored(self, session: LoggingSession) -> None:
        """Pitch clicks are ignored for without-ball events."""
        session.select_event_type("red_card")
        session.pitch_click(40, 40)
        assert session.form.start is None
        assert session.notices.latest.level == INFO

    def test_sticky_player(self, session: LoggingSession) -> None:
        """The player stays selected after saving."""
        assert session.toggle_sticky_player()
        _log_pass(session)
        assert session.form.player_id == "h4"
        assert session.form.event_type is None

    def test_store_failure_keeps_form(self, home_sheet: TeamSheet, away_sheet: TeamSheet) -> None:
        """A store failure keeps the form intact."""
        store = FailingInsertStore()
        store.set_squad(MATCH_ID, home_sheet)
        store.set_squad(MATCH_ID, away_sheet)
        session = LoggingSession(store, MATCH_ID)
        session.load()
        session.confirm_direction(True)

        assert _log_pass(session) is None
        assert session.notices.latest.level == ERROR
        assert "database unavailable" in _last_message(session)
        assert session.form.player_id == "h4"
        assert session.form.end == PitchPoint(60, 40)
        assert session.clock.label == "00:00"

    def test_busy_resource_refuses_second_write(self, session: LoggingSession) -> None:
        """A busy resource refuses a second write."""
        lock = session._locks[EVENTS]
        lock.acquire()
        try:
            assert session.is_busy()
            assert _log_pass(session) is None
            assert session.notices.latest.level == INFO
            assert _last_message(session) == "Still saving events, please wait"
        finally:
            lock.release()
        assert not session.is_busy()
        assert session.save() is not None


class TestDirectionGate:
    """Logging stays blocked until the direction is confirmed."""

    def test_blocked_until_confirmed(self, store: InMemoryEventStore) -> None:
        """Saving is blocked until direction is confirmed."""
        session = LoggingSession(store, MATCH_ID)
        assert session.load()
        assert not session.is_logging_enabled
        assert session.home_attacks_left_this_half is None

        session.select_event_type("tackle_won")
        assert session.pitch_click(50, 50) is None
        assert session.form.start is None
        assert _last_message(session) == "Confirm the attack direction before logging events"

        assert session.confirm_direction(True)
        assert session.is_logging_enabled
        assert not session.confirm_direction(False)
        assert store.get_confirmed_direction(MATCH_ID) is True

    def test_existing_events_default_to_home_left(self, store: InMemoryEventStore) -> None:
        """Existing events default to home attacking left."""
        store.insert_event(
            EventDraft(
                match_id=MATCH_ID,
                player_id="h4",
                event_type="tackle_won",
                half=1,
                minute=5,
                seconds=0,
                start=PitchPoint(50, 50),
            )
        )
        session = LoggingSession(store, MATCH_ID)
        session.load()
        assert session.is_logging_enabled
        assert session.home_attacks_left_this_half is True


class TestChainMode:
    """Rapid pass sequences from successive pitch clicks."""

    def test_chain_of_passes(self, session: LoggingSession) -> None:
        """Chain Mode logs a chain of passes."""
        session.select_player("h4")
        session.set_target_player("h9")
        assert session.toggle_chain_mode()
        assert session.form.event_type == "pass"

        first = session.pitch_click(40, 30)
        assert first.player_id == "h4"
        assert first.start == PitchPoint(50, 50)
        assert first.end == PitchPoint(40, 30)
        assert first.target_player_id == "h9"
        assert session.form.player_id == "h9"
        assert session.form.start == PitchPoint(40, 30)
        assert _last_message(session) == "Chain Pass saved"

        session.set_target_player("h10")
        second = session.pitch_click(70, 45)
        assert second.player_id == "h9"
        assert second.start == PitchPoint(40, 30)
        assert second.end == PitchPoint(70, 45)
        assert session.ball_state.holder.player_id == "h10"
        assert len(session.events) == 2

    def test_chain_starts_from_suggestion(self, session: LoggingSession) -> None:
        """Chain Mode starts from the suggested spot."""
        _log_pass(session, target="h9")
        session.select_player("h9")
        session.select_event_type("carry")
        session.toggle_chain_mode()
        event = session.pitch_click(70, 50)
        assert event.event_type == "carry"
        assert event.start == PitchPoint(60, 40)

    def test_chain_refusals(self, session: LoggingSession) -> None:
        """Chain Mode refuses incomplete input."""
        assert not session.toggle_chain_mode()
        assert _last_message(session) == "Select a player first"

        session.select_player("h4")
        session.select_event_type("shot")
        assert not session.toggle_chain_mode()
        assert _last_message(session) == "Shot doesn't support Chain Mode (no end position)"
        assert not session.chain_mode

    def test_toggle_off(self, session: LoggingSession) -> None:
        """Toggling Chain Mode again turns it off."""
        session.select_player("h4")
        session.toggle_chain_mode()
        assert not session.toggle_chain_mode()
        assert not session.chain_mode


class TestUndoAndEdit:
    """Removing and reworking logged events."""

    def test_undo_removes_latest(self, session: LoggingSession) -> None:
        """Undo removes the latest event."""
        first = _log_pass(session, target="h9")
        _log_pass(session, player_id="h9", start=(60, 40), end=(75, 45), target="h10")
        removed = session.undo()
        assert removed.target_player_id == "h10"
        assert [e.id for e in session.events] == [first.id]
        assert session.ball_state.holder.player_id == "h9"
        assert _last_message(session) == "Undid Pass"

    def test_undo_with_nothing_logged(self, session: LoggingSession) -> None:
        """Undo with nothing logged reports it."""
        assert session.undo() is None
        assert _last_message(session) == "Nothing to undo"

    def test_delete_event(self, session: LoggingSession) -> None:
        """Events can be deleted by id."""
        event = _log_pass(session)
        assert session.delete_event(event.id)
        assert session.events == []
        assert not session.delete_event(event.id)

    def test_cancelled_edit_restores_original(self, session: LoggingSession) -> None:
        """Cancelling an edit restores the original."""
        original = _log_pass(session, target="h9")
        assert session.edit_event(original.id)
        assert session.events == []
        assert session.form.player_id == "h4"
        assert session.form.end == PitchPoint(60, 40)
        assert session.form.target_player_id == "h9"

        session.clear_form()
        assert session.pending_edit is None
        (restored,) = session.events
        assert restored.to_draft() == original.to_draft()

    def test_saved_edit_replaces_original(self, session: LoggingSession) -> None:
        """Saving an edit replaces the original."""
        original = _log_pass(session, target="h9")
        session.edit_event(original.id)
        session.set_target_player("h10")
        edited = session.save()
        assert edited.target_player_id == "h10"
        assert [e.id for e in session.events] == [edited.id]
        assert session.pending_edit is None

    def test_edit_keeps_phase_membership(self, session: LoggingSession) -> None:
        """Editing keeps phase membership."""
        event = _log_pass(session, target="h9")
        session.toggle_phase_selection(event.id)
        phase = session.create_phase("shot")
        session.edit_event(event.id)
        edited = session.save()
        assert edited.phase_id == phase.id
        assert session.phases[0].event_ids == (edited.id,)

    def test_switching_edits_restores_first(self, session: LoggingSession) -> None:
        """Starting another edit restores the first."""
        first = _log_pass(session, target="h9")
        second = _log_pass(session, player_id="h9", start=(60, 40), end=(75, 45))
        session.edit_event(first.id)
        session.edit_event(second.id)
        assert session.pending_edit.id == second.id
        assert [e.to_draft() for e in session.events] == [first.to_draft()]


class TestPenaltyPrompt:
    """Penalty-area suggestions raised by saves."""

    def test_accepting_logs_entry(self, session: LoggingSession) -> None:
        """Accepting a prompt logs the entry."""
        source = _log_pass(session, start=(60, 50), end=(90, 50), target="h9")
        suggestion = session.penalty.pending
        assert suggestion.source_event_id == source.id

        written = session.accept_penalty_suggestion()
        assert [e.event_type for e in written] == ["penalty_area_pass", "penalty_area_entry"]
        assert written[1].player_id == "h9"
        assert len(session.events) == 3
        assert session.penalty.pending is None
        assert _last_message(session) == "Penalty area entry logged"

    def test_no_prompt_outside_box(self, session: LoggingSession) -> None:
        """No prompt is offered outside the box."""
        _log_pass(session, start=(30, 50), end=(50, 50), target="h9")
        assert session.penalty.pending is None
        assert session.accept_penalty_suggestion() == []

    def test_undo_of_source_dismisses(self, session: LoggingSession) -> None:
        """Undoing the source event dismisses the prompt."""
        _log_pass(session, start=(60, 50), end=(90, 50), target="h9")
        session.undo()
        assert session.penalty.pending is None

    def test_dismiss_and_expire(self, session: LoggingSession) -> None:
        """Prompts can be dismissed or left to expire."""
        _log_pass(session, start=(60, 50), end=(90, 50), target="h9")
        assert session.dismiss_penalty_suggestion()
        assert not session.dismiss_penalty_suggestion()

        _log_pass(session, player_id="h7", start=(70, 30), end=(85, 40))
        created = session.penalty.pending.created_at
        assert not session.expire_penalty_suggestion(now=created + 1)
        assert session.expire_penalty_suggestion(now=created + 6)
        assert len(session.events) == 2


class TestPhases:
    """Phase actions through the session."""

    def test_create_edit_delete(self, session: LoggingSession) -> None:
        """Phases can be created, edited and deleted."""
        first = _log_pass(session, target="h9")
        second = _log_pass(session, player_id="a4", start=(50, 50), end=(40, 50), target="a8")
        third = _log_pass(session, player_id="h9", start=(60, 40), end=(70, 40))
        assert {e.id for e in session.selectable_events()} == {first.id, second.id, third.id}

        for event in (first, second, third):
            assert session.toggle_phase_selection(event.id)
        phase = session.create_phase("goal")
        assert phase.team_id == "home-fc"
        assert _last_message(session) == "Phase 1 created"
        assert session.selectable_events() == []

        assert not session.toggle_phase_selection(first.id)
        assert _last_message(session) == "Event already belongs to a phase"
        assert session.create_phase("shot") is None

        assert session.edit_phase_outcome(phase.id, "lost_possession").outcome == "lost_possession"
        assert session.delete_phase(phase.id)
        assert session.phases == []
        assert all(e.phase_id is None for e in session.events)
        assert session.notices.latest.level == SUCCESS


class TestEditSafety:
    """An event being edited is never duplicated or lost."""

    def test_chain_mode_refused_during_edit(self, session: LoggingSession) -> None:
        """Chain Mode cannot start while an edit is pending."""
        original = _log_pass(session, target="h9")
        session.edit_event(original.id)
        assert not session.toggle_chain_mode()
        assert not session.chain_mode
        assert _last_message(session) == "Save or cancel the edit before starting Chain Mode"

        assert session.pitch_click(70, 45) is None
        session.clear_form()
        (restored,) = session.events
        assert restored.to_draft() == original.to_draft()

    def test_chain_save_refused_during_edit(self, session: LoggingSession) -> None:
        """A chain event is not written while an edit is pending."""
        original = _log_pass(session, target="h9")
        session.edit_event(original.id)
        session.chain_mode = True
        assert session.save_chain_event(PitchPoint(70, 45)) is None
        assert session.events == []
        session.clear_form()
        assert len(session.events) == 1

    def test_abandon_edit_restores_original(self, session: LoggingSession) -> None:
        """Abandoning an edit puts the original back exactly once."""
        original = _log_pass(session, target="h9")
        assert session.abandon_edit()
        session.edit_event(original.id)
        assert session.abandon_edit()
        assert session.pending_edit is None
        assert [e.to_draft() for e in session.events] == [original.to_draft()]
        assert session.abandon_edit()
        assert len(session.events) == 1

    def test_editing_other_half_clears_selection(self, session: LoggingSession) -> None:
        """Editing an event from the other half drops the phase selection."""
        first = _log_pass(session, target="h9")
        session.set_half(2)
        second = _log_pass(session, player_id="h7", start=(30, 30), end=(40, 40))
        session.set_half(1)
        session.toggle_phase_selection(first.id)

        session.edit_event(second.id)
        assert session.half == 2
        assert session.phase_manager.selection == []
        assert session.create_phase("shot") is None
        assert session.phases == []
