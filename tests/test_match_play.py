import pytest

from golfbets.formats.match_play import (
    HoleOutcome,
    compare_sides,
    evaluate_match,
    evaluate_segment,
    exposure,
    format_lead,
    format_lead_for_side,
    hole_at_stake,
    settle_match,
)
from golfbets.models import FormatConfigError, MatchPlayConfig, PressRequest, Team


def _config(**kwargs):
    base = dict(team_a=Team(label="A", player_ids=["a"]), team_b=Team(label="B", player_ids=["b"]))
    base.update(kwargs)
    return MatchPlayConfig(**base)


def test_match_closes_four_and_two(four_and_two):
    state = evaluate_match(four_and_two, _config())
    main = state.main

    leads = [r.lead for r in main.hole_results]
    assert leads[13:18] == [3, 3, 4, 4, 4]
    assert main.closed
    assert main.closed_on_hole == 16
    assert main.winner == "A"
    assert main.result == "4 & 2"
    assert main.status == "4 & 2"
    assert main.description == "4 UP with 2 to play"
    assert main.finished


def test_dormie_before_close(snapshot_factory):
    snapshot = snapshot_factory({"a": [4] * 15, "b": [5, 5, 5] + [4] * 12})
    main = evaluate_match(snapshot, _config()).main
    assert main.lead == 3
    assert main.holes_remaining == 3
    assert main.dormie
    assert not main.closed
    assert main.status == "3 UP"


def test_win_on_last_hole_reports_up(snapshot_factory):
    snapshot = snapshot_factory({"a": [4] * 18, "b": [4] * 17 + [5]})
    main = evaluate_match(snapshot, _config()).main
    assert main.closed
    assert main.result == "1 UP"
    assert main.holes_remaining == 0


def test_all_halved_is_halved(snapshot_factory):
    snapshot = snapshot_factory({"a": [4] * 18, "b": [4] * 18})
    state = evaluate_match(snapshot, _config())
    assert state.main.halved
    assert state.main.result == "Halved"
    assert state.main.status == "AS"
    assert settle_match(state) == []


@pytest.mark.parametrize(
    "winners",
    [
        ["A", "A", "A", "B", "halved", "A", "A"],
        ["B", "B", "halved", "B", "B", "B"],
        ["A", "B", "A", "B", "A", "B", "A", "B", "A"],
        ["A"] * 9,
    ],
)
def test_closed_iff_lead_exceeds_remaining(winners):
    outcomes = [HoleOutcome(n, None, None, w) for n, w in enumerate(winners, start=1)]
    outcomes += [HoleOutcome(n, None, None, None) for n in range(len(winners) + 1, 10)]
    state = evaluate_segment(outcomes, "front", 1, 9, 1.0)
    assert state.closed == (abs(state.lead) > state.holes_remaining)


def test_missing_scores_leave_hole_undecided(snapshot_factory):
    snapshot = snapshot_factory({"a": [4, 4, 4], "b": [5, None, 4]})
    main = evaluate_match(snapshot, _config()).main
    assert main.holes_played == 2
    assert main.hole_results[1].complete is False
    assert main.hole_results[1].winner is None
    assert main.holes_remaining == 16
    assert main.status == "1 UP"


def test_manual_press(four_and_two):
    state = evaluate_match(four_and_two, _config(presses=[PressRequest(starting_hole=10, stake=2)]))
    assert len(state.presses) == 1
    press = state.presses[0]
    assert press.label == "press 1 (10-18)"
    assert press.parent == "match"
    assert press.stake == 2
    # 16 won, 17 lost, 18 halved inside the press
    assert press.lead == 0
    assert press.halved


def test_press_must_start_inside_match(four_and_two):
    with pytest.raises(FormatConfigError):
        evaluate_match(four_and_two, _config(presses=[PressRequest(starting_hole=1)]))


def test_mismatched_sides_rejected(four_and_two):
    config = MatchPlayConfig(
        team_a=Team(label="A", player_ids=["a"]),
        team_b=Team(label="B", player_ids=["b", "c"]),
    )
    with pytest.raises(FormatConfigError):
        evaluate_match(four_and_two, config)


def test_high_ball_tiebreak():
    assert compare_sides([4, 5], [4, 6]) == "halved"
    assert compare_sides([4, 5], [4, 6], high_ball_tiebreak=True) == "A"
    assert compare_sides([4, 7], [4, 6], high_ball_tiebreak=True) == "B"
    assert compare_sides([3, 9], [4, 4], high_ball_tiebreak=True) == "A"


def test_lead_strings():
    assert format_lead(0) == "AS"
    assert format_lead(2) == "2 UP"
    assert format_lead(-3) == "3 DN"
    assert format_lead_for_side(2, "B") == "2 DN"


def test_settlement_pays_lead_times_stake(four_and_two):
    state = evaluate_match(four_and_two, _config(stake_per_hole=5))
    lines = settle_match(state)
    amounts = {line.player_id: line.amount for line in lines}
    assert amounts == {"a": 20, "b": -20}


def test_exposure_and_hole_at_stake(snapshot_factory):
    snapshot = snapshot_factory({"a": [4] * 10, "b": [5] + [4] * 9})
    state = evaluate_match(snapshot, _config(stake_per_hole=2, presses=[PressRequest(starting_hole=5)]))
    stake = hole_at_stake(state, 11)
    assert stake.main == 2
    assert stake.presses == {1: 2}
    assert stake.total == 4

    exp = exposure(state)
    assert exp.main == 16
    assert exp.presses == {1: 16}
    assert exp.position == 2
