"""
Wolf for exactly four players.

The tee order rotates one place per hole and the player teeing off last is
that hole's wolf, so the wolf is always derived from the hole number rather
than tracked. Partner choices are manual decisions supplied per hole; a hole
without a decision is left out of the standings until one arrives.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence
import logging

from golfbets.models import (
    FormatConfigError,
    RoundSnapshot,
    SettlementLine,
    WolfConfig,
    WolfDecision,
    WolfHoleResult,
    WolfState,
)
from golfbets.scoring.netscores import NetScoreTable


WOLF_PLAYER_COUNT = 4


def tee_order_for_hole(
    tee_order: Sequence[str],
    hole_number: int,
    overrides: Optional[Mapping[int, Sequence[str]]] = None,
) -> List[str]:
    if overrides and hole_number in overrides:
        return list(overrides[hole_number])
    offset = (hole_number - 1) % len(tee_order)
    return list(tee_order[offset:]) + list(tee_order[:offset])


def wolf_for_hole(
    tee_order: Sequence[str],
    hole_number: int,
    overrides: Optional[Mapping[int, Sequence[str]]] = None,
) -> str:
    return tee_order_for_hole(tee_order, hole_number, overrides)[-1]


def available_partners(
    tee_order: Sequence[str],
    hole_number: int,
    overrides: Optional[Mapping[int, Sequence[str]]] = None,
) -> List[str]:
    order = tee_order_for_hole(tee_order, hole_number, overrides)
    return order[:-1]


def _validate(config: WolfConfig) -> None:
    if len(config.tee_order) != WOLF_PLAYER_COUNT:
        raise FormatConfigError(f"wolf needs exactly {WOLF_PLAYER_COUNT} players, got {len(config.tee_order)}")
    if len(set(config.tee_order)) != WOLF_PLAYER_COUNT:
        raise FormatConfigError("wolf tee order lists a player twice")
    for hole_number, order in config.tee_order_overrides.items():
        if sorted(order) != sorted(config.tee_order):
            raise FormatConfigError(f"tee order override for hole {hole_number} must use the same four players")


def _decisions_by_hole(config: WolfConfig) -> Dict[int, WolfDecision]:
    logger = logging.getLogger("golfbets.wolf")
    decisions: Dict[int, WolfDecision] = {}
    for decision in config.decisions:
        if decision.hole_number in decisions:
            # the most recently supplied decision for a hole wins
            logger.debug("wolf_decision_replaced hole=%s", decision.hole_number)
        wolf_id = wolf_for_hole(config.tee_order, decision.hole_number, config.tee_order_overrides)
        if decision.partner_id is not None:
            if decision.partner_id == wolf_id:
                raise FormatConfigError(f"the wolf cannot partner themselves on hole {decision.hole_number}")
            if decision.partner_id not in config.tee_order:
                raise FormatConfigError(
                    f"partner {decision.partner_id} on hole {decision.hole_number} is not in the game"
                )
        decisions[decision.hole_number] = decision
    return decisions


def evaluate_wolf(snapshot: RoundSnapshot, config: WolfConfig) -> WolfState:
    _validate(config)
    table = NetScoreTable(snapshot, config.tee_order, mode=config.handicap_mode, use_net=config.use_net)
    decisions = _decisions_by_hole(config)

    points: Dict[str, float] = {pid: 0.0 for pid in config.tee_order}
    totals: Dict[str, float] = {pid: 0.0 for pid in config.tee_order}
    results: List[WolfHoleResult] = []
    played = 0

    for hole in snapshot.sorted_holes():
        order = tee_order_for_hole(config.tee_order, hole.number, config.tee_order_overrides)
        wolf_id = order[-1]
        decision = decisions.get(hole.number)
        nets = table.nets_for(config.tee_order, hole.number)
        result = WolfHoleResult(
            hole_number=hole.number,
            tee_order=order,
            wolf_id=wolf_id,
            partner_id=decision.partner_id if decision else None,
            lone_wolf=decision.lone_wolf if decision else False,
            decided=decision is not None,
            complete=all(net is not None for net in nets.values()),
        )
        if not (result.decided and result.complete):
            results.append(result)
            continue

        played += 1
        wolf_side = [wolf_id] if result.lone_wolf else [wolf_id, result.partner_id]
        field = [pid for pid in config.tee_order if pid not in wolf_side]
        result.wolf_side_net = min(nets[pid] for pid in wolf_side)
        result.field_net = min(nets[pid] for pid in field)

        if result.wolf_side_net == result.field_net:
            result.winner = "halved"
            results.append(result)
            continue

        result.winner = "wolf" if result.wolf_side_net < result.field_net else "field"
        winners, losers = (wolf_side, field) if result.winner == "wolf" else (field, wolf_side)
        units = config.lone_wolf_multiplier if result.lone_wolf else 1.0
        for pid in winners:
            points[pid] += units * len(losers)
            result.amounts[pid] = units * len(losers) * config.stake_per_hole
        for pid in losers:
            points[pid] -= units * len(winners)
            result.amounts[pid] = -units * len(winners) * config.stake_per_hole
        for pid, amount in result.amounts.items():
            totals[pid] += amount
        results.append(result)

    pending = [r.hole_number for r in results if not (r.decided and r.complete)]
    if pending:
        current_hole = pending[0]
    else:
        current_hole = results[-1].hole_number if results else 1

    return WolfState(
        tee_order=list(config.tee_order),
        stake_per_hole=config.stake_per_hole,
        lone_wolf_multiplier=config.lone_wolf_multiplier,
        hole_results=results,
        player_points=points,
        player_totals=totals,
        current_hole=current_hole,
        current_wolf_id=wolf_for_hole(config.tee_order, current_hole, config.tee_order_overrides),
        holes_played=played,
    )


def settle_wolf(state: WolfState, game: str = "wolf") -> List[SettlementLine]:
    lines: List[SettlementLine] = []
    for result in state.hole_results:
        if not result.amounts:
            continue
        bet = f"hole {result.hole_number}"
        lines.extend(
            SettlementLine(player_id=pid, format="wolf", game=game, bet=bet, amount=amount)
            for pid, amount in result.amounts.items()
            if amount != 0
        )
    return lines
