from typing import Dict, List, Optional

import pytest

from golfbets.models import Hole, Player, RoundSnapshot

PARS = [4, 4, 3, 5, 4, 4, 3, 4, 5, 4, 4, 3, 5, 4, 4, 3, 4, 5]


def course(count: int = 18) -> List[Hole]:
    return [Hole(number=n, par=PARS[n - 1], stroke_index=n) for n in range(1, count + 1)]


def build_snapshot(
    rows: Dict[str, List[Optional[int]]],
    handicaps: Optional[Dict[str, int]] = None,
    names: Optional[Dict[str, str]] = None,
    round_id: str = "r1",
    holes: int = 18,
) -> RoundSnapshot:
    """rows maps player id -> gross per hole in order, None for not yet played."""
    handicaps = handicaps or {}
    names = names or {}
    players = [
        Player(id=pid, name=names.get(pid, ""), playing_handicap=handicaps.get(pid, 0))
        for pid in rows
    ]
    scores = {
        pid: {number: gross for number, gross in enumerate(row, start=1) if gross is not None}
        for pid, row in rows.items()
    }
    return RoundSnapshot(round_id=round_id, holes=course(holes), players=players, scores=scores)


@pytest.fixture
def snapshot_factory():
    return build_snapshot


@pytest.fixture
def four_and_two(snapshot_factory):
    # side A wins 1-3, halves 4-15, wins 16; B takes 17 after the match is over
    a_row = [4] * 18
    b_row = [5, 5, 5] + [4] * 12 + [5, 3, 4]
    return snapshot_factory({"a": a_row, "b": b_row}, names={"a": "Al Smith", "b": "Bo Jones"})
