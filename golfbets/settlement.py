"""
Settlement aggregator.

Runs every configured game over one round snapshot, collects the signed
settlement lines they produce and sums them per player. Each group of lines
that belongs to one bet (a segment, a press, a skin, a wolf hole, ...) must
net to zero across the players.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple
import logging

from golfbets.config import EngineSettings
from golfbets.formats.junk import evaluate_junk, settle_junk
from golfbets.formats.match_play import evaluate_match, settle_match
from golfbets.formats.nassau import evaluate_nassau, settle_nassau
from golfbets.formats.points import evaluate_points, settle_points
from golfbets.formats.scramble import evaluate_scramble, settle_scramble
from golfbets.formats.skins import evaluate_skins, settle_skins
from golfbets.formats.stroke_play import evaluate_stroke_play, settle_stroke_play
from golfbets.formats.wolf import evaluate_wolf, settle_wolf
from golfbets.models import (
    FormatConfig,
    FormatConfigError,
    FormatType,
    JunkClaim,
    JunkConfig,
    Payment,
    RoundSettlement,
    RoundSnapshot,
    SettlementLine,
    TripSettlement,
)


class SettlementInvariantError(RuntimeError):
    pass


Handler = Callable[[RoundSnapshot, Any, str], Tuple[Any, List[SettlementLine]]]


def _stroke_play(snapshot: RoundSnapshot, config: Any, game: str) -> Tuple[Any, List[SettlementLine]]:
    state = evaluate_stroke_play(snapshot, config)
    return state, settle_stroke_play(state, config.stake, game)


def _match_play(snapshot: RoundSnapshot, config: Any, game: str) -> Tuple[Any, List[SettlementLine]]:
    state = evaluate_match(snapshot, config)
    return state, settle_match(state, game)


def _nassau(snapshot: RoundSnapshot, config: Any, game: str) -> Tuple[Any, List[SettlementLine]]:
    state = evaluate_nassau(snapshot, config)
    return state, settle_nassau(state, game)


def _skins(snapshot: RoundSnapshot, config: Any, game: str) -> Tuple[Any, List[SettlementLine]]:
    state = evaluate_skins(snapshot, config)
    return state, settle_skins(state, game)


def _wolf(snapshot: RoundSnapshot, config: Any, game: str) -> Tuple[Any, List[SettlementLine]]:
    state = evaluate_wolf(snapshot, config)
    return state, settle_wolf(state, game)


def _points(snapshot: RoundSnapshot, config: Any, game: str) -> Tuple[Any, List[SettlementLine]]:
    state = evaluate_points(snapshot, config)
    return state, settle_points(state, config.stake_per_point, game)


def _scramble(snapshot: RoundSnapshot, config: Any, game: str) -> Tuple[Any, List[SettlementLine]]:
    state = evaluate_scramble(snapshot, config)
    return state, settle_scramble(state, config.stake_per_man, game)


HANDLERS: Dict[FormatType, Handler] = {
    FormatType.STROKE_PLAY: _stroke_play,
    FormatType.MATCH_PLAY: _match_play,
    FormatType.NASSAU: _nassau,
    FormatType.SKINS: _skins,
    FormatType.WOLF: _wolf,
    FormatType.POINTS_HILO: _points,
    FormatType.STABLEFORD: _points,
    FormatType.SCRAMBLE: _scramble,
}

_unhandled = set(FormatType) - set(HANDLERS)
if _unhandled:
    raise RuntimeError(f"no settlement handler for formats: {sorted(f.value for f in _unhandled)}")


def evaluate_format(snapshot: RoundSnapshot, config: FormatConfig, game: str = "") -> Tuple[Any, List[SettlementLine]]:
    handler = HANDLERS[FormatType(config.format)]
    return handler(snapshot, config, game or config.format)


def _game_key(config: FormatConfig, used: Dict[str, int]) -> str:
    base = config.label or config.format
    used[base] = used.get(base, 0) + 1
    if used[base] == 1:
        return base
    return f"{base}#{used[base]}"


def check_zero_sum(lines: Iterable[SettlementLine], tolerance: float = 1e-6) -> None:
    groups: Dict[Tuple[str, str], float] = defaultdict(float)
    for line in lines:
        groups[(line.game, line.bet)] += line.amount
    for (game, bet), total in groups.items():
        if abs(total) > tolerance:
            raise SettlementInvariantError(f"settlement for {game} / {bet} does not net to zero: {total}")


def player_totals(lines: Iterable[SettlementLine], player_ids: Iterable[str] = (), precision: int = 2) -> Dict[str, float]:
    totals: Dict[str, float] = {pid: 0.0 for pid in player_ids}
    for line in lines:
        totals[line.player_id] = totals.get(line.player_id, 0.0) + line.amount
    return {pid: round(amount, precision) + 0.0 for pid, amount in totals.items()}


def game_totals(lines: Iterable[SettlementLine], precision: int = 2) -> Dict[str, Dict[str, float]]:
    by_game: Dict[str, List[SettlementLine]] = defaultdict(list)
    for line in lines:
        by_game[line.game].append(line)
    return {game: player_totals(game_lines, precision=precision) for game, game_lines in by_game.items()}


def settle_round(
    snapshot: RoundSnapshot,
    formats: Sequence[FormatConfig],
    junk: Optional[JunkConfig] = None,
    claims: Iterable[JunkClaim] = (),
    settings: Optional[EngineSettings] = None,
) -> RoundSettlement:
    logger = logging.getLogger("golfbets.settlement")
    settings = settings or EngineSettings.from_env()
    logger.info("settle_round start round=%s formats=%s junk=%s", snapshot.round_id, len(formats), junk is not None)

    settlement = RoundSettlement(round_id=snapshot.round_id)
    lines: List[SettlementLine] = []
    used: Dict[str, int] = {}

    for config in formats:
        game = _game_key(config, used)
        try:
            state, game_lines = evaluate_format(snapshot, config, game)
        except FormatConfigError as exc:
            if settings.strict:
                raise
            logger.warning("format_setup_incomplete round=%s game=%s error=%s", snapshot.round_id, game, exc)
            settlement.setup_incomplete[game] = str(exc)
            continue
        settlement.states[game] = state
        lines.extend(game_lines)

    if junk is not None and junk.enabled:
        try:
            junk_state = evaluate_junk(snapshot, junk, claims)
        except FormatConfigError as exc:
            if settings.strict:
                raise
            logger.warning("format_setup_incomplete round=%s game=junk error=%s", snapshot.round_id, exc)
            settlement.setup_incomplete["junk"] = str(exc)
        else:
            settlement.states["junk"] = junk_state
            lines.extend(settle_junk(junk_state))

    check_zero_sum(lines, settings.zero_sum_tolerance)
    settlement.lines = lines
    settlement.totals = player_totals(lines, snapshot.player_ids(), settings.money_precision)
    logger.info(
        "settle_round summary round=%s games=%s lines=%s incomplete=%s",
        snapshot.round_id,
        sorted(settlement.states),
        len(lines),
        sorted(settlement.setup_incomplete),
    )
    return settlement


def payment_plan(totals: Dict[str, float], precision: int = 2) -> List[Payment]:
    """Largest debtor pays largest creditor first until everyone is square."""
    threshold = 0.5 * 10 ** -precision
    creditors = sorted(
        ([pid, amount] for pid, amount in totals.items() if amount > threshold),
        key=lambda item: (-item[1], item[0]),
    )
    debtors = sorted(
        ([pid, -amount] for pid, amount in totals.items() if amount < -threshold),
        key=lambda item: (-item[1], item[0]),
    )
    payments: List[Payment] = []
    for debtor in debtors:
        for creditor in creditors:
            if debtor[1] <= threshold:
                break
            if creditor[1] <= threshold:
                continue
            amount = min(debtor[1], creditor[1])
            payments.append(Payment(from_id=debtor[0], to_id=creditor[0], amount=round(amount, precision)))
            debtor[1] -= amount
            creditor[1] -= amount
    return payments


def settle_trip(rounds: Iterable[RoundSettlement], settings: Optional[EngineSettings] = None) -> TripSettlement:
    logger = logging.getLogger("golfbets.settlement")
    settings = settings or EngineSettings.from_env()
    trip = TripSettlement()
    all_lines: List[SettlementLine] = []
    for settlement in rounds:
        trip.by_round[settlement.round_id] = dict(settlement.totals)
        all_lines.extend(settlement.lines)
        for pid in settlement.totals:
            trip.totals.setdefault(pid, 0.0)

    trip.totals.update(player_totals(all_lines, precision=settings.money_precision))
    trip.payments = payment_plan(trip.totals, settings.money_precision)
    logger.info("settle_trip summary rounds=%s players=%s payments=%s", len(trip.by_round), len(trip.totals), len(trip.payments))
    return trip
