"""
Skins.

A skin goes to the sole low net on a hole; ties carry into the next hole.
`skin_values` holds the face value of each pot won. Settlement has every
other player pay that value to the winner, so a $40 skin in a four-ball
settles as +$120 for the winner and -$40 for each opponent.
"""

from __future__ import annotations

from typing import Dict, List
import logging

from golfbets.models import (
    FormatConfigError,
    RoundSnapshot,
    SettlementLine,
    SkinsConfig,
    SkinsHoleResult,
    SkinsState,
)
from golfbets.scoring.netscores import NetScoreTable


def evaluate_skins(snapshot: RoundSnapshot, config: SkinsConfig) -> SkinsState:
    logger = logging.getLogger("golfbets.skins")
    player_ids = list(config.player_ids) if config.player_ids is not None else snapshot.player_ids()
    if len(player_ids) < 2:
        raise FormatConfigError("skins needs at least two players")
    if len(set(player_ids)) != len(player_ids):
        raise FormatConfigError("skins players must be unique")
    table = NetScoreTable(snapshot, player_ids, mode=config.handicap_mode, use_net=config.use_net)

    skin_counts: Dict[str, int] = {pid: 0 for pid in player_ids}
    skin_values: Dict[str, float] = {pid: 0.0 for pid in player_ids}
    results: List[SkinsHoleResult] = []
    carry = 0
    awarded = 0
    played = 0

    for hole in snapshot.sorted_holes():
        scores = table.nets_for(player_ids, hole.number)
        skins_in_pot = carry + 1
        result = SkinsHoleResult(
            hole_number=hole.number,
            scores=scores,
            skins_in_pot=skins_in_pot,
            pot_value=skins_in_pot * config.skin_value,
        )
        if any(score is None for score in scores.values()):
            results.append(result)
            continue

        result.complete = True
        played += 1
        low = min(scores.values())
        leaders = [pid for pid, score in scores.items() if score == low]
        if len(leaders) == 1:
            winner = leaders[0]
            result.winner_id = winner
            skin_counts[winner] += skins_in_pot
            skin_values[winner] += result.pot_value
            awarded += skins_in_pot
            carry = 0
            logger.debug("skin_won hole=%s player=%s skins=%s", hole.number, winner, skins_in_pot)
        elif config.carryover:
            result.carried = True
            carry += 1
        else:
            carry = 0
        results.append(result)

    incomplete = [r.hole_number for r in results if not r.complete]
    if incomplete:
        current_hole = incomplete[0]
    else:
        current_hole = results[-1].hole_number if results else 1

    return SkinsState(
        player_ids=player_ids,
        skin_value=config.skin_value,
        carryover=config.carryover,
        hole_results=results,
        carry_count=carry,
        carry_value=carry * config.skin_value,
        skin_counts=skin_counts,
        skin_values=skin_values,
        total_skins_awarded=awarded,
        current_hole=current_hole,
        holes_played=played,
    )


def settle_skins(state: SkinsState, game: str = "skins") -> List[SettlementLine]:
    lines: List[SettlementLine] = []
    others = len(state.player_ids) - 1
    for result in state.hole_results:
        if result.winner_id is None or result.pot_value == 0:
            continue
        bet = f"hole {result.hole_number} skin"
        for pid in state.player_ids:
            amount = result.pot_value * others if pid == result.winner_id else -result.pot_value
            lines.append(SettlementLine(player_id=pid, format="skins", game=game, bet=bet, amount=amount))
    return lines


def carry_alert(state: SkinsState) -> str:
    if state.carry_count == 0:
        return ""
    plural = "s" if state.carry_count > 1 else ""
    next_value = (state.carry_count + 1) * state.skin_value
    return f"{state.carry_count} skin{plural} carried! Next hole worth ${next_value:g}"
