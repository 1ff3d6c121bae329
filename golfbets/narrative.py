"""
Short match highlights for a scoreboard.

Everything is derived from a finished or in-progress MatchState; at most three
events come back, high intensity first and the most recent hole first within
an intensity.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from golfbets.models import HoleResult, MatchState, NarrativeEvent


MAX_EVENTS = 3
STREAK_LENGTH = 3
_INTENSITY_RANK = {"high": 0, "medium": 1, "low": 2}


def _first_name(name: str) -> str:
    return name.split(" ")[0] if name else name


def team_label(names: Sequence[str]) -> str:
    firsts = [_first_name(name) for name in names]
    if not firsts:
        return "?"
    return f"{firsts[0]} & {firsts[1]}" if len(firsts) > 1 else firsts[0]


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def _money(amount: float) -> str:
    return f"${amount:g}"


def _momentum(completed: List[HoleResult], team_a: str, team_b: str) -> Optional[NarrativeEvent]:
    for i in range(len(completed) - 1, -1, -1):
        current = completed[i]
        prev_lead = completed[i - 1].lead if i > 0 else 0
        lead = current.lead
        if _sign(prev_lead) == _sign(lead):
            continue

        hole = current.hole_number
        if prev_lead * lead < 0:
            leader = team_a if lead > 0 else team_b
            text = f"{leader} takes the lead on {hole}, match flipped!"
        elif lead == 0:
            text = f"Back to All Square after {hole}"
        else:
            leader = team_a if lead > 0 else team_b
            led_before = any(_sign(r.lead) == _sign(lead) for r in completed[:i])
            if led_before:
                text = f"{leader} retakes the lead after {hole}"
            else:
                text = f"{leader} leads for the first time after {hole}"
        return NarrativeEvent(hole=hole, text=text, type="momentum_shift", intensity="high")
    return None


def _press_events(
    completed: List[HoleResult],
    presses: Sequence[MatchState],
    latest: int,
    stake_per_man: float,
    team_a: str,
    team_b: str,
) -> List[NarrativeEvent]:
    events: List[NarrativeEvent] = []
    lead_by_hole = {r.hole_number: r.lead for r in completed}
    for press in sorted(presses, key=lambda p: p.start_hole, reverse=True):
        if press.start_hole > latest + 1:
            continue
        lead_at_press = lead_by_hole.get(press.start_hole - 1, 0)
        # the trailing side is the one that pressed
        if lead_at_press > 0:
            who = f"{team_b} doubles down"
        elif lead_at_press < 0:
            who = f"{team_a} doubles down"
        else:
            who = "New bet"
        active = 1 + sum(1 for p in presses if p.start_hole <= press.start_hole)
        events.append(
            NarrativeEvent(
                hole=press.start_hole,
                text=f"Press! {who} from hole {press.start_hole}, {_money(active * stake_per_man)}/hole per man",
                type="press",
                intensity="medium",
            )
        )
    return events


def _streak(completed: List[HoleResult]) -> Tuple[Optional[str], int]:
    team: Optional[str] = None
    count = 0
    for i in range(len(completed) - 1, -1, -1):
        result = completed[i]
        if i < len(completed) - 1 and completed[i + 1].hole_number - result.hole_number != 1:
            break
        if result.winner not in ("A", "B"):
            break
        if team is None:
            team = result.winner
            count = 1
        elif result.winner == team:
            count += 1
        else:
            break
    return team, count


def _tight_hole(completed: List[HoleResult], team_a: str, team_b: str) -> Optional[NarrativeEvent]:
    for result in reversed(completed):
        if result.winner not in ("A", "B"):
            continue
        if result.side_a_net is None or result.side_b_net is None:
            continue
        if abs(result.side_a_net - result.side_b_net) == 1:
            winner = team_a if result.winner == "A" else team_b
            return NarrativeEvent(
                hole=result.hole_number,
                text=f"A tight one on {result.hole_number}, {winner} takes it by a stroke",
                type="dramatic_hole",
                intensity="medium",
            )
    return None


def generate_narratives(
    match: MatchState,
    team_a_names: Sequence[str],
    team_b_names: Sequence[str],
    presses: Sequence[MatchState] = (),
    stake_per_man: Optional[float] = None,
) -> List[NarrativeEvent]:
    team_a = team_label(team_a_names)
    team_b = team_label(team_b_names)
    stake = match.stake if stake_per_man is None else stake_per_man

    # holes past the closing hole do not move the match
    completed = sorted(
        (
            r
            for r in match.hole_results
            if r.complete and (match.closed_on_hole is None or r.hole_number <= match.closed_on_hole)
        ),
        key=lambda r: r.hole_number,
    )
    if not completed:
        return []
    latest = completed[-1].hole_number
    candidates: List[NarrativeEvent] = []

    if match.closed and match.winner in ("A", "B"):
        winner = team_a if match.winner == "A" else team_b
        candidates.append(
            NarrativeEvent(hole=latest, text=f"It's over! {winner} wins {match.result}", type="match_close", intensity="high")
        )

    if match.dormie and not match.closed:
        trailing = team_b if match.lead > 0 else team_a
        if match.holes_remaining == 1:
            text = f"Dormie: {trailing} must win {latest + 1} to stay alive"
        else:
            text = f"Dormie: {trailing} must win out to survive ({match.holes_remaining} to play)"
        candidates.append(NarrativeEvent(hole=latest, text=text, type="status_update", intensity="high"))

    momentum = _momentum(completed, team_a, team_b)
    if momentum is not None:
        candidates.append(momentum)

    candidates.extend(_press_events(completed, presses, latest, stake, team_a, team_b))

    streak_team, streak_count = _streak(completed)
    if streak_team is not None and streak_count >= STREAK_LENGTH:
        leader = team_a if streak_team == "A" else team_b
        candidates.append(
            NarrativeEvent(
                hole=latest,
                text=f"{leader} has won {streak_count} straight, they're rolling",
                type="status_update",
                intensity="medium",
            )
        )

    tight = _tight_hole(completed, team_a, team_b)
    if tight is not None:
        candidates.append(tight)

    if match.lead == 0 and not match.closed:
        back_to_square = any(e.type == "momentum_shift" and "All Square" in e.text for e in candidates)
        if not back_to_square:
            candidates.append(
                NarrativeEvent(hole=latest, text=f"All Square through {latest}", type="status_update", intensity="low")
            )

    candidates.sort(key=lambda e: (_INTENSITY_RANK[e.intensity], -e.hole))
    return candidates[:MAX_EVENTS]
