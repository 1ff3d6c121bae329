import pytest

from golfbets.formats.skins import carry_alert, evaluate_skins, settle_skins
from golfbets.models import FormatConfigError, SkinsConfig

PLAYERS = ["p1", "p2", "p3", "p4"]


def test_three_carries_then_winner_takes_pot(snapshot_factory):
    snapshot = snapshot_factory(
        {
            "p1": [4, 4, 3, 4],
            "p2": [4, 4, 3, 5],
            "p3": [4, 4, 3, 5],
            "p4": [4, 4, 3, 5],
        }
    )
    state = evaluate_skins(snapshot, SkinsConfig(skin_value=10))

    assert [r.carried for r in state.hole_results[:3]] == [True, True, True]
    hole_four = state.hole_results[3]
    assert hole_four.skins_in_pot == 4
    assert hole_four.pot_value == 40
    assert hole_four.winner_id == "p1"
    assert state.carry_count == 0
    assert state.skin_values["p1"] == 40
    assert state.skin_counts["p1"] == 4
    assert state.total_skins_awarded == 4
    assert state.current_hole == 5

    lines = settle_skins(state)
    amounts = {line.player_id: line.amount for line in lines}
    assert amounts == {"p1": 120, "p2": -40, "p3": -40, "p4": -40}
    assert sum(amounts.values()) == 0


def test_missing_score_skips_hole_without_breaking_carry(snapshot_factory):
    snapshot = snapshot_factory(
        {
            "p1": [4, 4, 4],
            "p2": [4, None, 4],
            "p3": [4, 4, 3],
        }
    )
    state = evaluate_skins(snapshot, SkinsConfig(skin_value=5))
    assert state.hole_results[1].complete is False
    assert state.hole_results[2].winner_id == "p3"
    assert state.hole_results[2].skins_in_pot == 2
    assert state.current_hole == 2
    assert state.holes_played == 2


def test_without_carryover_ties_are_dropped(snapshot_factory):
    snapshot = snapshot_factory({"p1": [4, 3], "p2": [4, 4]})
    state = evaluate_skins(snapshot, SkinsConfig(skin_value=5, carryover=False))
    assert state.hole_results[0].carried is False
    assert state.hole_results[1].pot_value == 5
    assert state.skin_values == {"p1": 5, "p2": 0}


def test_net_scores_decide_skins(snapshot_factory):
    # p2 gets a stroke on stroke index 1
    snapshot = snapshot_factory({"p1": [4], "p2": [5]}, handicaps={"p2": 1})
    assert evaluate_skins(snapshot, SkinsConfig()).hole_results[0].carried
    assert evaluate_skins(snapshot, SkinsConfig(use_net=False)).hole_results[0].winner_id == "p1"


def test_carry_alert(snapshot_factory):
    snapshot = snapshot_factory({"p1": [4, 4], "p2": [4, 4], "p3": [4, 4]})
    state = evaluate_skins(snapshot, SkinsConfig(skin_value=10))
    assert carry_alert(state) == "2 skins carried! Next hole worth $30"


def test_needs_two_players(snapshot_factory):
    snapshot = snapshot_factory({"p1": [4]})
    with pytest.raises(FormatConfigError):
        evaluate_skins(snapshot, SkinsConfig())
