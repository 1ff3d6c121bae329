import pytest

from golfbets.formats.scramble import evaluate_scramble, settle_scramble
from golfbets.models import FormatConfigError, ScrambleConfig, Team

TEAM_A = Team(label="A", player_ids=["a1", "a2"])
TEAM_B = Team(label="B", player_ids=["b1", "b2"])


def test_captain_scores_decide_scramble(snapshot_factory):
    snapshot = snapshot_factory(
        {"a1": [4] * 18, "a2": [None] * 18, "b1": [5] + [4] * 17, "b2": [None] * 18}
    )
    state = evaluate_scramble(snapshot, ScrambleConfig(team_a=TEAM_A, team_b=TEAM_B))
    assert state.complete
    assert state.team_a_total == 72
    assert state.team_b_total == 73
    assert state.winner == "A"
    assert state.margin == 1

    amounts = {line.player_id: line.amount for line in settle_scramble(state, 20)}
    assert amounts == {"a1": 20, "a2": 20, "b1": -20, "b2": -20}


def test_unfinished_scramble_does_not_settle(snapshot_factory):
    snapshot = snapshot_factory({"a1": [4] * 9, "b1": [5] * 9})
    config = ScrambleConfig(team_a=Team(label="A", player_ids=["a1"]), team_b=Team(label="B", player_ids=["b1"]))
    state = evaluate_scramble(snapshot, config)
    assert state.holes_completed == 9
    assert not state.complete
    assert state.winner == "A"
    assert settle_scramble(state, 20) == []


def test_unknown_team_member(snapshot_factory):
    snapshot = snapshot_factory({"a1": [4], "b1": [4]})
    with pytest.raises(FormatConfigError):
        evaluate_scramble(snapshot, ScrambleConfig(team_a=TEAM_A, team_b=TEAM_B))
