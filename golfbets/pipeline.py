from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple
import logging

from pydantic import TypeAdapter, ValidationError

from golfbets.config import EngineSettings
from golfbets.models import (
    FormatConfig,
    FormatConfigError,
    JunkClaim,
    JunkConfig,
    MatchPlayState,
    NassauState,
    RoundSettlement,
    RoundSnapshot,
)
from golfbets.narrative import generate_narratives
from golfbets.settlement import SettlementInvariantError, settle_round, settle_trip


_FORMAT_ADAPTER = TypeAdapter(FormatConfig)


def _empty_round(round_id: Optional[str], flags: List[str]) -> Dict[str, object]:
    return {
        "round_id": round_id,
        "totals": {},
        "lines": [],
        "games": {},
        "setup_incomplete": {},
        "narratives": {},
        "flags": flags,
    }


def _ensure_list(value: object, name: str, guard_flags: List[str]) -> List[object]:
    if value is None:
        return []
    if not isinstance(value, list):
        guard_flags.append(f"payload_schema_{name}")
        return []
    return value


def _parse_formats(raw: List[object], guard_flags: List[str]) -> List[Any]:
    formats: List[Any] = []
    for index, entry in enumerate(raw):
        try:
            formats.append(_FORMAT_ADAPTER.validate_python(entry))
        except ValidationError:
            guard_flags.append(f"invalid_format:{index}")
    return formats


def _parse_claims(raw: List[object], guard_flags: List[str]) -> List[JunkClaim]:
    claims: List[JunkClaim] = []
    for index, entry in enumerate(raw):
        try:
            claims.append(JunkClaim.model_validate(entry))
        except ValidationError:
            guard_flags.append(f"invalid_claim:{index}")
    return claims


def _player_names(snapshot: RoundSnapshot) -> Dict[str, str]:
    return {player.id: player.name or player.id for player in snapshot.players}


def _narratives(snapshot: RoundSnapshot, settlement: RoundSettlement) -> Dict[str, List[Dict[str, object]]]:
    names = _player_names(snapshot)
    narratives: Dict[str, List[Dict[str, object]]] = {}
    for game, state in settlement.states.items():
        if isinstance(state, MatchPlayState):
            match, presses = state.main, state.presses
        elif isinstance(state, NassauState):
            match, presses = state.overall, [p for p in state.presses if p.parent == "overall"]
        else:
            continue
        events = generate_narratives(
            match,
            [names[pid] for pid in state.team_a.player_ids],
            [names[pid] for pid in state.team_b.player_ids],
            presses=presses,
        )
        narratives[game] = [event.model_dump() for event in events]
    return narratives


def _settle_payload(
    payload: Dict[str, object], settings: EngineSettings
) -> Tuple[Optional[RoundSnapshot], Optional[RoundSettlement], List[str]]:
    logger = logging.getLogger("golfbets.pipeline")
    guard_flags: List[str] = []

    if not isinstance(payload, dict):
        return None, None, ["invalid_payload"]
    try:
        snapshot = RoundSnapshot.model_validate(payload.get("round"))
    except ValidationError as exc:
        logger.warning("invalid_payload errors=%s", exc.error_count())
        return None, None, ["invalid_payload"]

    formats = _parse_formats(_ensure_list(payload.get("formats"), "formats", guard_flags), guard_flags)
    claims = _parse_claims(_ensure_list(payload.get("claims"), "claims", guard_flags), guard_flags)
    junk: Optional[JunkConfig] = None
    if payload.get("junk") is not None:
        try:
            junk = JunkConfig.model_validate(payload.get("junk"))
        except ValidationError:
            guard_flags.append("invalid_junk")

    try:
        settlement = settle_round(snapshot, formats, junk=junk, claims=claims, settings=settings)
    except (FormatConfigError, SettlementInvariantError) as exc:
        logger.error("settlement_failed round=%s error=%s", snapshot.round_id, exc)
        return snapshot, None, guard_flags + ["settlement_failed"]

    flags = [f"setup_incomplete:{game}" for game in settlement.setup_incomplete]
    flags.extend(guard_flags)
    return snapshot, settlement, flags


def settle_round_payload(payload: Dict[str, object], settings: Optional[EngineSettings] = None) -> Dict[str, object]:
    logger = logging.getLogger("golfbets.pipeline")
    settings = settings or EngineSettings.from_env()
    formats_raw = payload.get("formats") if isinstance(payload, dict) else None
    logger.info(
        "settle_round_payload start formats=%s junk=%s",
        len(formats_raw) if isinstance(formats_raw, list) else 0,
        isinstance(payload, dict) and payload.get("junk") is not None,
    )

    snapshot, settlement, flags = _settle_payload(payload, settings)
    if settlement is None:
        return _empty_round(snapshot.round_id if snapshot else None, flags)

    narratives = _narratives(snapshot, settlement)
    logger.info(
        "settle_round_payload summary round=%s games=%s lines=%s flags=%s",
        settlement.round_id,
        sorted(settlement.states),
        len(settlement.lines),
        flags,
    )
    return {
        "round_id": settlement.round_id,
        "totals": settlement.totals,
        "lines": [line.model_dump() for line in settlement.lines],
        "games": {game: state.model_dump() for game, state in settlement.states.items()},
        "setup_incomplete": settlement.setup_incomplete,
        "narratives": narratives,
        "flags": flags,
    }


def settle_trip_payload(payload: Dict[str, object], settings: Optional[EngineSettings] = None) -> Dict[str, object]:
    logger = logging.getLogger("golfbets.pipeline")
    settings = settings or EngineSettings.from_env()
    guard_flags: List[str] = []
    rounds_raw = _ensure_list(payload.get("rounds") if isinstance(payload, dict) else None, "rounds", guard_flags)
    logger.info("settle_trip_payload start rounds=%s", len(rounds_raw))

    settlements: List[RoundSettlement] = []
    flags: List[str] = list(guard_flags)
    for index, round_payload in enumerate(rounds_raw):
        snapshot, settlement, round_flags = _settle_payload(round_payload, settings)
        label = snapshot.round_id if snapshot else str(index)
        flags.extend(f"{label}:{flag}" for flag in round_flags)
        if settlement is not None:
            settlements.append(settlement)

    trip = settle_trip(settlements, settings)
    logger.info(
        "settle_trip_payload summary rounds=%s payments=%s flags=%s",
        len(settlements),
        len(trip.payments),
        flags,
    )
    return {
        "totals": trip.totals,
        "by_round": trip.by_round,
        "payments": [payment.model_dump() for payment in trip.payments],
        "flags": flags,
    }
