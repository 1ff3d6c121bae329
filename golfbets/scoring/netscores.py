from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from golfbets.models import FormatConfigError, HandicapMode, RoundSnapshot
from golfbets.scoring.handicap import game_handicaps, net_score


class NetScoreTable:
    """Gross and net lookups for one game's players over a round snapshot."""

    def __init__(
        self,
        snapshot: RoundSnapshot,
        player_ids: Iterable[str],
        mode: HandicapMode = HandicapMode.FULL,
        use_net: bool = True,
    ) -> None:
        self.snapshot = snapshot
        self.player_ids: List[str] = list(player_ids)
        self.use_net = use_net
        self.mode = mode
        by_id = {player.id: player for player in snapshot.players}
        unknown = [player_id for player_id in self.player_ids if player_id not in by_id]
        if unknown:
            raise FormatConfigError(f"unknown player ids: {', '.join(unknown)}")
        self.handicaps: Dict[str, int] = game_handicaps((by_id[pid] for pid in self.player_ids), mode)
        self._stroke_index = {hole.number: hole.stroke_index for hole in snapshot.holes}

    def gross(self, player_id: str, hole_number: int) -> Optional[int]:
        return self.snapshot.gross(player_id, hole_number)

    def has_score(self, player_id: str, hole_number: int) -> bool:
        return self.gross(player_id, hole_number) is not None

    def net(self, player_id: str, hole_number: int) -> Optional[int]:
        gross = self.gross(player_id, hole_number)
        if gross is None:
            return None
        if not self.use_net:
            return gross
        return net_score(
            gross,
            self.handicaps[player_id],
            self._stroke_index[hole_number],
            give_back=self.mode == HandicapMode.GIVE_BACK,
        )

    def nets_for(self, player_ids: Iterable[str], hole_number: int) -> Dict[str, Optional[int]]:
        return {player_id: self.net(player_id, hole_number) for player_id in player_ids}
