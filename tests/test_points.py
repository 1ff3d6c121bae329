import pytest

from golfbets.formats.points import evaluate_points, points_hilo_hole, settle_points, stableford_points
from golfbets.models import FormatConfigError, PointsHiLoConfig, StablefordConfig, Team

TEAM_A = Team(label="A", player_ids=["a1", "a2"])
TEAM_B = Team(label="B", player_ids=["b1", "b2"])


@pytest.mark.parametrize(
    "net,par,points",
    [(1, 4, 8), (2, 4, 5), (3, 4, 3), (4, 4, 1), (5, 4, 0), (6, 4, -1), (9, 4, -1)],
)
def test_stableford_points(net, par, points):
    assert stableford_points(net, par) == points


def test_points_hilo_hole():
    assert points_hilo_hole([4, 5], [4, 6]) == (1.5, 0.5)
    assert points_hilo_hole([3, 7], [4, 5]) == (1.0, 1.0)


def test_points_hilo_round(snapshot_factory):
    snapshot = snapshot_factory({"a1": [4, 4], "a2": [5, 5], "b1": [4, 3], "b2": [6, None]})
    state = evaluate_points(snapshot, PointsHiLoConfig(team_a=TEAM_A, team_b=TEAM_B, stake_per_point=2))
    assert state.holes_played == 1
    assert state.team_a_total == 1.5
    assert state.team_b_total == 0.5
    assert state.current_hole == 2

    amounts = {line.player_id: line.amount for line in settle_points(state, 2)}
    assert amounts == {"a1": 2, "a2": 2, "b1": -2, "b2": -2}


def test_stableford_round(snapshot_factory):
    # hole 1 is a par 4
    snapshot = snapshot_factory({"a1": [3], "a2": [4], "b1": [4], "b2": [5]})
    state = evaluate_points(snapshot, StablefordConfig(team_a=TEAM_A, team_b=TEAM_B))
    assert state.team_a_total == 4
    assert state.team_b_total == 1
    assert settle_points(state, 0) == []


def test_points_need_two_man_teams(snapshot_factory):
    snapshot = snapshot_factory({"a1": [4], "b1": [4]})
    config = PointsHiLoConfig(team_a=Team(label="A", player_ids=["a1"]), team_b=Team(label="B", player_ids=["b1"]))
    with pytest.raises(FormatConfigError):
        evaluate_points(snapshot, config)
