"""
Junk side bets.

Every claim occurrence is paid its value by each other player in the game.
The snake is a penalty token: whoever triggered it last holds it, and the
holder pays the snake value to each other player when the round ends.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple
import logging

from golfbets.models import (
    FormatConfigError,
    JunkClaim,
    JunkConfig,
    JunkState,
    JunkType,
    PlayerJunkSummary,
    RoundSnapshot,
    SettlementLine,
    SnakeState,
    SnakeTransfer,
)


def is_junk_relevant(junk_type: JunkType, par: int) -> bool:
    if junk_type == JunkType.GREENIE:
        return par == 3
    return True


def enabled_junk_types(config: JunkConfig, par: int) -> List[JunkType]:
    if not config.enabled:
        return []
    return [bet.type for bet in config.bets if bet.enabled and is_junk_relevant(bet.type, par)]


def auto_junk_type(gross: int, par: int) -> Optional[JunkType]:
    diff = gross - par
    if diff <= -2:
        return JunkType.EAGLE
    if diff == -1:
        return JunkType.BIRDIE
    return None


def auto_claims(snapshot: RoundSnapshot, player_ids: Optional[Iterable[str]] = None) -> List[JunkClaim]:
    ids = list(player_ids) if player_ids is not None else snapshot.player_ids()
    claims: List[JunkClaim] = []
    for hole in snapshot.sorted_holes():
        for pid in ids:
            gross = snapshot.gross(pid, hole.number)
            if gross is None:
                continue
            junk_type = auto_junk_type(gross, hole.par)
            if junk_type is not None:
                claims.append(JunkClaim(player_id=pid, hole_number=hole.number, type=junk_type))
    return claims


def snake_state(claims: Sequence[JunkClaim], value_per_player: float) -> SnakeState:
    # stable sort keeps entry order for claims on the same hole
    ordered = sorted(
        (claim for claim in claims if claim.type == JunkType.SNAKE),
        key=lambda claim: claim.hole_number,
    )
    transfers = [SnakeTransfer(player_id=c.player_id, hole_number=c.hole_number) for c in ordered]
    return SnakeState(
        holder_id=transfers[-1].player_id if transfers else None,
        transfers=transfers,
        value_per_player=value_per_player,
    )


def _merge_auto_claims(
    snapshot: RoundSnapshot, claims: List[JunkClaim], player_ids: List[str]
) -> List[JunkClaim]:
    seen: Set[Tuple[str, int, JunkType]] = {(c.player_id, c.hole_number, c.type) for c in claims}
    merged = list(claims)
    for claim in auto_claims(snapshot, player_ids):
        if (claim.player_id, claim.hole_number, claim.type) not in seen:
            merged.append(claim)
    return merged


def evaluate_junk(
    snapshot: RoundSnapshot,
    config: JunkConfig,
    claims: Iterable[JunkClaim],
) -> JunkState:
    logger = logging.getLogger("golfbets.junk")
    player_ids = list(config.player_ids) if config.player_ids is not None else snapshot.player_ids()
    if len(player_ids) < 2:
        raise FormatConfigError("junk needs at least two players")
    known_players = set(player_ids)
    known_holes = {hole.number for hole in snapshot.holes}

    claims = list(claims)
    for claim in claims:
        if claim.player_id not in known_players:
            raise FormatConfigError(f"junk claim for unknown player {claim.player_id}")
        if claim.hole_number not in known_holes:
            raise FormatConfigError(f"junk claim on unknown hole {claim.hole_number}")
    if config.auto_detect:
        claims = _merge_auto_claims(snapshot, claims, player_ids)

    others = len(player_ids) - 1
    summaries: Dict[str, PlayerJunkSummary] = {pid: PlayerJunkSummary(player_id=pid) for pid in player_ids}
    ignored = 0

    for claim in claims:
        if claim.type == JunkType.SNAKE:
            continue
        value = config.value_for(claim.type)
        if value is None:
            ignored += 1
            logger.debug("junk_claim_ignored type=%s hole=%s", claim.type.value, claim.hole_number)
            continue
        owed = value * claim.count
        summary = summaries[claim.player_id]
        summary.claim_counts[claim.type.value] = summary.claim_counts.get(claim.type.value, 0) + claim.count
        summary.claims_value += owed
        summary.claims_net += owed * others
        for pid in player_ids:
            if pid != claim.player_id:
                summaries[pid].claims_net -= owed

    snake: Optional[SnakeState] = None
    snake_value = config.value_for(JunkType.SNAKE)
    snake_claims = [claim for claim in claims if claim.type == JunkType.SNAKE]
    if snake_value is None:
        ignored += len(snake_claims)
    elif snake_claims:
        snake = snake_state(snake_claims, snake_value)
        for pid in player_ids:
            summaries[pid].snake_net = -snake_value * others if pid == snake.holder_id else snake_value

    for summary in summaries.values():
        summary.net = summary.claims_net + summary.snake_net

    return JunkState(
        player_ids=player_ids,
        summaries=sorted(summaries.values(), key=lambda s: s.net, reverse=True),
        snake=snake,
        total_claimed=sum(s.claims_value for s in summaries.values()),
        ignored_claims=ignored,
    )


def settle_junk(state: JunkState, game: str = "junk") -> List[SettlementLine]:
    lines: List[SettlementLine] = []
    for summary in state.summaries:
        if summary.claims_net != 0:
            lines.append(
                SettlementLine(player_id=summary.player_id, format="junk", game=game, bet="claims", amount=summary.claims_net)
            )
        if summary.snake_net != 0:
            lines.append(
                SettlementLine(player_id=summary.player_id, format="junk", game=game, bet="snake", amount=summary.snake_net)
            )
    return lines
