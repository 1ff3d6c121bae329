from __future__ import annotations

from typing import List

from golfbets.models import (
    FormatConfigError,
    RoundSnapshot,
    SettlementLine,
    StrokePlayConfig,
    StrokePlayEntry,
    StrokePlayState,
)
from golfbets.scoring.netscores import NetScoreTable


def evaluate_stroke_play(snapshot: RoundSnapshot, config: StrokePlayConfig) -> StrokePlayState:
    player_ids = list(config.player_ids) if config.player_ids is not None else snapshot.player_ids()
    if not player_ids:
        raise FormatConfigError("stroke play needs at least one player")
    table = NetScoreTable(snapshot, player_ids, mode=config.handicap_mode, use_net=True)
    holes = snapshot.sorted_holes()

    entries: List[StrokePlayEntry] = []
    for pid in player_ids:
        entry = StrokePlayEntry(player_id=pid)
        par_played = 0
        for hole in holes:
            gross = table.gross(pid, hole.number)
            if gross is None:
                continue
            entry.holes_played += 1
            entry.gross_total += gross
            entry.net_total += table.net(pid, hole.number)
            par_played += hole.par
        total = entry.net_total if config.use_net else entry.gross_total
        entry.to_par = total - par_played
        entries.append(entry)

    def _total(entry: StrokePlayEntry) -> int:
        return entry.net_total if config.use_net else entry.gross_total

    entries.sort(key=_total)
    for index, entry in enumerate(entries):
        if index > 0 and _total(entry) > _total(entries[index - 1]):
            entry.position = index + 1
        elif index > 0:
            entry.position = entries[index - 1].position

    complete = all(entry.holes_played == len(holes) for entry in entries)
    winner_ids: List[str] = []
    if complete:
        low = _total(entries[0])
        winner_ids = [entry.player_id for entry in entries if _total(entry) == low]

    return StrokePlayState(use_net=config.use_net, entries=entries, complete=complete, winner_ids=winner_ids)


def settle_stroke_play(state: StrokePlayState, stake: float, game: str = "stroke_play") -> List[SettlementLine]:
    if not state.complete or stake == 0 or len(state.entries) < 2:
        return []
    share = stake * len(state.entries) / len(state.winner_ids)
    lines: List[SettlementLine] = []
    for entry in state.entries:
        amount = share - stake if entry.player_id in state.winner_ids else -stake
        if amount != 0:
            lines.append(SettlementLine(player_id=entry.player_id, format="stroke_play", game=game, bet="pot", amount=amount))
    return lines
