"""
Tests for game session commands, including the reference game scenarios
"""
import pytest

from rummy_ledger.core import session as session_core
from rummy_ledger.core.scoring import recompute
from rummy_ledger.errors import (
    EligibilityError, NotFoundError, SessionStateError, ValidationError
)
from rummy_ledger.models import GameStatus


def totals(session):
    return {p.id: p.total_score for p in session.players}


def player(session, player_id):
    return next(p for p in session.players if p.id == player_id)


def play(session, *rounds):
    for scores in rounds:
        session = session_core.submit_round(session, scores)
    return session


P3_OUT_AT_4 = [
    {"P1": 0, "P2": 40, "P3": 80},
    {"P1": 20, "P2": 0, "P3": 80},
    {"P1": 0, "P2": 20, "P3": 80},
    {"P1": 20, "P2": 0, "P3": 80},
]


# ==================== START ====================

def test_start_new_game(game):
    """Fresh game: active, round 0, empty ledger, everyone at 0"""
    assert game.status == GameStatus.ACTIVE
    assert game.current_round == 0
    assert game.rounds == []
    assert game.game_id
    assert totals(game) == {"P1": 0, "P2": 0, "P3": 0}


def test_start_needs_min_players(config):
    with pytest.raises(ValidationError, match="Minimum 2 players"):
        session_core.start_new_game(["Asha"], config)


def test_start_respects_max_players(config):
    with pytest.raises(ValidationError, match="Maximum 3 players"):
        session_core.start_new_game(["A", "B", "C", "D"], config, max_players=3)


def test_start_rejects_duplicate_names(config):
    with pytest.raises(ValidationError, match="used twice"):
        session_core.start_new_game(["Asha", "asha"], config)


def test_start_rejects_blank_name(config):
    with pytest.raises(ValidationError, match="player name"):
        session_core.start_new_game(["Asha", "  "], config)


def test_start_generates_ids_for_names(config):
    session = session_core.start_new_game(["Asha", "Bala"], config)
    ids = [p.id for p in session.players]
    assert len(set(ids)) == 2
    assert all(pid.startswith("player-") for pid in ids)


# ==================== SCENARIOS ====================

def test_scenario_a_first_round(game):
    """Round 1 {0, 40, 80} -> totals {0, 40, 80}, none eliminated"""
    session = session_core.submit_round(game, {"P1": 0, "P2": 40, "P3": 80})
    assert session.current_round == 1
    assert totals(session) == {"P1": 0, "P2": 40, "P3": 80}
    assert not any(p.is_eliminated for p in session.players)


def test_scenario_b_elimination_round(game):
    """P3 at 80 per round crosses 250 in round 4"""
    session = play(game, *P3_OUT_AT_4)
    p3 = player(session, "P3")
    assert p3.total_score == 320
    assert p3.is_eliminated
    assert p3.eliminated_at == 4


def test_scenario_b_full_ledger_replay(game, config):
    """Five rounds of 80 for P3 -> 400, still eliminated at round 4"""
    session = play(game, *P3_OUT_AT_4)
    fifth = session.rounds + [
        session.rounds[0].model_copy(update={"round_number": 5, "scores": {"P1": 10, "P2": 0, "P3": 80}})
    ]
    p3 = next(p for p in recompute(fifth, session.players, config) if p.id == "P3")
    assert p3.total_score == 400
    assert p3.eliminated_at == 4


def test_scenario_b_eliminated_player_leaves_rounds(game):
    """After elimination the next round expects only P1 and P2"""
    session = play(game, *P3_OUT_AT_4)
    with pytest.raises(ValidationError, match="P3"):
        session_core.submit_round(session, {"P1": 0, "P2": 10, "P3": 80})


def test_scenario_c_re_entry_same_round(game):
    """Right after round 4 P3 may re-enter at the highest active score"""
    session = play(game, *P3_OUT_AT_4)
    session = session_core.re_enter(session, "P3")
    p3 = player(session, "P3")
    assert not p3.is_eliminated
    assert p3.is_active
    assert p3.eliminated_at is None
    assert p3.re_entry_count == 1
    assert p3.total_score == 60  # P2 leads the field with 60


def test_scenario_c_re_entry_closed_after_round_5(game):
    """Once round 5 is recorded the elimination is final"""
    session = play(game, *P3_OUT_AT_4)
    session = session_core.submit_round(session, {"P1": 0, "P2": 10})
    with pytest.raises(EligibilityError, match="Another round has been played"):
        session_core.re_enter(session, "P3")


def test_scenario_d_compulsory_blocks_roster_changes(config):
    """P1 at 235 (threshold 230) blocks add_player and re_enter"""
    session = session_core.start_new_game(
        [{"id": f"P{i}", "name": f"Player {i}"} for i in range(1, 5)], config
    )
    session = play(
        session,
        {"P1": 80, "P2": 0, "P3": 10, "P4": 80},
        {"P1": 80, "P2": 10, "P3": 0, "P4": 80},
        {"P1": 75, "P2": 0, "P3": 10, "P4": 100},
    )
    assert player(session, "P1").total_score == 235
    assert player(session, "P4").eliminated_at == 3

    with pytest.raises(EligibilityError, match="compulsory"):
        session_core.add_player(session, "Ravi")
    with pytest.raises(EligibilityError, match="compulsory"):
        session_core.re_enter(session, "P4")


def test_scenario_e_edit_matches_fresh_replay(game, config):
    """Editing round 1 after round 3 equals a replay of the edited ledger"""
    session = play(
        game,
        {"P1": 0, "P2": 40, "P3": 80},
        {"P1": 10, "P2": 0, "P3": 80},
        {"P1": 0, "P2": 30, "P3": 80},
    )
    assert not player(session, "P3").is_eliminated

    edited = session_core.edit_round(session, 1, {"P1": 0, "P2": 40, "P3": 100})
    p3 = player(edited, "P3")
    assert p3.total_score == 260
    assert p3.is_eliminated
    assert p3.eliminated_at == 3

    fresh = recompute(edited.rounds, game.players, config)
    assert [(p.total_score, p.is_eliminated, p.eliminated_at) for p in fresh] == \
        [(p.total_score, p.is_eliminated, p.eliminated_at) for p in edited.players]


def test_edit_can_undo_elimination(game):
    """Lowering an old score clears an elimination"""
    session = play(game, *P3_OUT_AT_4)
    session = session_core.edit_round(session, 2, {"P1": 20, "P2": 0, "P3": 10})
    p3 = player(session, "P3")
    assert p3.total_score == 250
    assert p3.eliminated_at == 4
    session = session_core.edit_round(session, 3, {"P1": 0, "P2": 20, "P3": 10})
    assert not player(session, "P3").is_eliminated


# ==================== RE-ENTRY & ADD ====================

def test_re_entry_survives_next_round(game):
    """A replay after re-entry keeps the re-entered score"""
    session = play(game, *P3_OUT_AT_4)
    session = session_core.re_enter(session, "P3")
    session = session_core.submit_round(session, {"P1": 0, "P2": 10, "P3": 30})
    p3 = player(session, "P3")
    assert p3.total_score == 90
    assert not p3.is_eliminated
    assert p3.re_entry_count == 1
    assert session.re_entries[0].after_round == 4


def test_re_entry_of_active_player_rejected(game):
    with pytest.raises(EligibilityError, match="not eliminated"):
        session_core.re_enter(game, "P1")


def test_re_entry_unknown_player(game):
    with pytest.raises(NotFoundError):
        session_core.re_enter(game, "nobody")


def test_add_player_before_first_round(game):
    """Empty ledger: starting score assigned directly"""
    session = session_core.add_player(game, "Ravi", player_id="P4")
    assert player(session, "P4").total_score == 0
    assert session.rounds == []


def test_add_player_mid_game(game):
    """Joiner starts at the highest active score, carried in round 1"""
    session = play(game, {"P1": 0, "P2": 40, "P3": 80}, {"P1": 20, "P2": 0, "P3": 80})
    session = session_core.add_player(session, "Ravi", player_id="P4")

    assert player(session, "P4").total_score == 160
    assert session.rounds[0].scores["P4"] == 160
    assert session.rounds[1].scores["P4"] == 0
    assert totals(session)["P3"] == 160

    session = session_core.submit_round(session, {"P1": 0, "P2": 20, "P3": 80, "P4": 10})
    assert player(session, "P4").total_score == 170
    assert player(session, "P3").total_score == 240


def test_add_player_rejects_existing_id(game):
    with pytest.raises(EligibilityError, match="already in the game"):
        session_core.add_player(game, "Someone", player_id="P1")


def test_add_player_rejects_name_clash(game):
    with pytest.raises(EligibilityError, match="already in the game"):
        session_core.add_player(game, "asha")


def test_add_player_rejects_blank_name(game):
    with pytest.raises(ValidationError):
        session_core.add_player(game, "   ")


# ==================== REMOVE ====================

def test_remove_player_is_soft(game):
    """Removed player keeps history and drops out of the next round"""
    session = session_core.submit_round(game, {"P1": 0, "P2": 40, "P3": 80})
    session = session_core.remove_player(session, "P2")
    p2 = player(session, "P2")
    assert not p2.is_active
    assert p2.total_score == 40

    session = session_core.submit_round(session, {"P1": 10, "P3": 0})
    assert player(session, "P2").total_score == 40


def test_remove_unknown_player(game):
    with pytest.raises(NotFoundError):
        session_core.remove_player(game, "nobody")


# ==================== STATE MACHINE ====================

def test_pause_blocks_submit_but_not_edit(game):
    session = session_core.submit_round(game, {"P1": 0, "P2": 40, "P3": 80})
    session = session_core.pause_game(session)
    assert session.status == GameStatus.PAUSED

    with pytest.raises(SessionStateError, match="paused"):
        session_core.submit_round(session, {"P1": 0, "P2": 40, "P3": 80})

    session = session_core.edit_round(session, 1, {"P1": 0, "P2": 20, "P3": 80})
    assert player(session, "P2").total_score == 20

    session = session_core.resume_game(session)
    assert session.status == GameStatus.ACTIVE


def test_pause_resume_guards(game):
    with pytest.raises(SessionStateError):
        session_core.resume_game(game)
    paused = session_core.pause_game(game)
    with pytest.raises(SessionStateError):
        session_core.pause_game(paused)


def test_end_game_freezes_ledger(game):
    session = session_core.submit_round(game, {"P1": 0, "P2": 40, "P3": 80})
    session = session_core.end_game(session)
    assert session.status == GameStatus.ENDED
    assert len(session.rounds) == 1

    with pytest.raises(SessionStateError):
        session_core.submit_round(session, {"P1": 0, "P2": 40, "P3": 80})
    with pytest.raises(SessionStateError):
        session_core.edit_round(session, 1, {"P1": 0, "P2": 10, "P3": 80})
    with pytest.raises(SessionStateError):
        session_core.end_game(session)


def test_not_started_rejects_commands():
    empty = session_core.reset_game()
    assert empty.status == GameStatus.NOT_STARTED
    with pytest.raises(SessionStateError):
        session_core.submit_round(empty, {})


def test_rejected_command_leaves_session_unchanged(game):
    session = session_core.submit_round(game, {"P1": 0, "P2": 40, "P3": 80})
    before = session.model_dump()
    with pytest.raises(ValidationError):
        session_core.submit_round(session, {"P1": 0, "P2": 0, "P3": 80})
    with pytest.raises(ValidationError):
        session_core.edit_round(session, 1, {"P1": 0, "P2": -1, "P3": 80})
    assert session.model_dump() == before


def test_set_player_score_maintenance(game):
    """Absolute score sets elimination flag; next replay restores ledger totals"""
    session = session_core.submit_round(game, {"P1": 0, "P2": 40, "P3": 80})
    session = session_core.set_player_score(session, "P2", 260)
    assert player(session, "P2").is_eliminated

    session = session_core.edit_round(session, 1, {"P1": 0, "P2": 40, "P3": 80})
    assert player(session, "P2").total_score == 40
    assert not player(session, "P2").is_eliminated


def test_set_player_score_records_elimination_round(game):
    """Manual elimination gets the current round; lowering the score clears it"""
    session = session_core.submit_round(game, {"P1": 0, "P2": 40, "P3": 80})
    session = session_core.set_player_score(session, "P3", 300)
    assert player(session, "P3").eliminated_at == 1

    session = session_core.set_player_score(session, "P3", 120)
    p3 = player(session, "P3")
    assert not p3.is_eliminated
    assert p3.eliminated_at is None


def test_set_player_score_accepts_numeric_string(game):
    session = session_core.set_player_score(game, "P2", " 120 ")
    assert player(session, "P2").total_score == 120
    with pytest.raises(ValidationError):
        session_core.set_player_score(game, "P2", "12a")


@pytest.mark.parametrize("entries", [[{"name": 5}, {"name": "Bala"}], [["Asha"], "Bala"], [{"id": 7, "name": "Asha"}, "Bala"]])
def test_start_rejects_malformed_entries(config, entries):
    with pytest.raises(ValidationError):
        session_core.start_new_game(entries, config)


def test_add_player_rejects_non_string_name(game):
    with pytest.raises(ValidationError, match="player name"):
        session_core.add_player(game, 123)
