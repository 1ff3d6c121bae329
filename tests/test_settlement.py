import pytest

from golfbets.config import EngineSettings
from golfbets.models import (
    FormatConfigError,
    FormatType,
    JunkClaim,
    JunkConfig,
    JunkType,
    MatchPlayConfig,
    NassauConfig,
    SettlementLine,
    SkinsConfig,
    Team,
)
from golfbets.settlement import (
    HANDLERS,
    SettlementInvariantError,
    check_zero_sum,
    payment_plan,
    settle_round,
    settle_trip,
)

SETTINGS = EngineSettings(money_precision=2, zero_sum_tolerance=1e-6, strict=False, log_level="INFO")
STRICT = EngineSettings(money_precision=2, zero_sum_tolerance=1e-6, strict=True, log_level="INFO")


@pytest.fixture
def foursome(snapshot_factory):
    return snapshot_factory(
        {
            "p1": [4, 3, 5, 4],
            "p2": [5, 3, 4, 4],
            "p3": [4, 4, 5, 5],
            "p4": [5, 3, 5, 4],
        },
        handicaps={"p4": 1},
        holes=4,
    )


def _formats():
    return [
        SkinsConfig(skin_value=5),
        MatchPlayConfig(
            team_a=Team(label="A", player_ids=["p1"]),
            team_b=Team(label="B", player_ids=["p3"]),
            stake_per_hole=2,
        ),
    ]


def test_every_format_has_a_handler():
    assert set(HANDLERS) == set(FormatType)


def test_round_totals(foursome):
    claims = [JunkClaim(player_id="p2", hole_number=3, type=JunkType.GREENIE)]
    settlement = settle_round(foursome, _formats(), junk=JunkConfig(), claims=claims, settings=SETTINGS)

    assert settlement.totals == {"p1": -16, "p2": 60, "p3": -24, "p4": -20}
    assert sum(settlement.totals.values()) == 0
    assert sorted(settlement.states) == ["junk", "match_play", "skins"]
    assert settlement.setup_incomplete == {}


def test_settlement_is_idempotent(foursome):
    first = settle_round(foursome, _formats(), settings=SETTINGS)
    second = settle_round(foursome, _formats(), settings=SETTINGS)
    assert first.lines == second.lines
    assert first.totals == second.totals


def test_duplicate_games_get_distinct_keys(foursome):
    settlement = settle_round(foursome, [SkinsConfig(), SkinsConfig()], settings=SETTINGS)
    assert sorted(settlement.states) == ["skins", "skins#2"]
    assert {line.game for line in settlement.lines} == {"skins", "skins#2"}


def test_misconfigured_game_degrades(foursome):
    broken = NassauConfig(
        label="big nassau",
        team_a=Team(label="A", player_ids=["p1"]),
        team_b=Team(label="B", player_ids=["p2"]),
    )
    settlement = settle_round(foursome, [broken] + _formats(), settings=SETTINGS)
    assert list(settlement.setup_incomplete) == ["big nassau"]
    assert "big nassau" not in settlement.states
    assert settlement.totals["p2"] == 45


def test_strict_mode_raises(foursome):
    broken = NassauConfig(
        team_a=Team(label="A", player_ids=["p1"]),
        team_b=Team(label="B", player_ids=["p2"]),
    )
    with pytest.raises(FormatConfigError):
        settle_round(foursome, [broken], settings=STRICT)


def test_check_zero_sum_rejects_unbalanced_bet():
    lines = [
        SettlementLine(player_id="a", format="skins", game="skins", bet="hole 1 skin", amount=10),
        SettlementLine(player_id="b", format="skins", game="skins", bet="hole 1 skin", amount=-5),
    ]
    with pytest.raises(SettlementInvariantError):
        check_zero_sum(lines)
    check_zero_sum(lines[:1] + [lines[1].model_copy(update={"amount": -10})])


def test_payment_plan_largest_first():
    payments = payment_plan({"a": 30, "b": -20, "c": -10})
    assert [(p.from_id, p.to_id, p.amount) for p in payments] == [("b", "a", 20), ("c", "a", 10)]

    payments = payment_plan({"a": 15, "b": 5, "c": -20, "d": 0})
    assert [(p.from_id, p.to_id, p.amount) for p in payments] == [("c", "a", 15), ("c", "b", 5)]


def test_trip_settlement(foursome, snapshot_factory):
    first = settle_round(foursome, _formats(), settings=SETTINGS)
    second_snapshot = snapshot_factory({"p1": [4], "p2": [5]}, round_id="r2", holes=4)
    second = settle_round(second_snapshot, [SkinsConfig(skin_value=10)], settings=SETTINGS)

    trip = settle_trip([first, second], settings=SETTINGS)
    assert trip.by_round["r2"] == {"p1": 10, "p2": -10}
    assert trip.totals == {"p1": -1, "p2": 35, "p3": -19, "p4": -15}
    paid = sum(p.amount for p in trip.payments)
    assert paid == 35
    assert all(p.to_id == "p2" for p in trip.payments)
