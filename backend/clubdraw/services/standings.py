"""
Standings - read-only view derived from match results.

Ordering:
1. Wins DESC
2. Set difference (sets won - sets lost) DESC
3. Player id ASC

A forfeit counts as a win/loss and moves the set difference by exactly one
(the winner is credited one set, the loser charged one). Results with no
sets and no forfeit are treated as not played.
"""

from typing import Dict, List, Sequence

from clubdraw.models.schedule import MatchResult, Standing
from clubdraw.services.draw_rules import DrawRequestError

FORFEIT_SET_PROXY = 1


def _record_forfeit(winner: Standing, loser: Standing) -> None:
    winner.wins += 1
    winner.sets_won += FORFEIT_SET_PROXY
    loser.losses += 1
    loser.sets_lost += FORFEIT_SET_PROXY


def compute_standings(player_ids: Sequence[int], results: Sequence[MatchResult]) -> List[Standing]:
    """
    Tabulate results for *player_ids* and return them ranked, position from 1.

    Raises:
        DrawRequestError if a result names a player outside the field
    """
    table: Dict[int, Standing] = {pid: Standing(player_id=pid) for pid in player_ids}

    for result in results:
        a = table.get(result.player_a)
        b = table.get(result.player_b)
        if a is None or b is None:
            raise DrawRequestError(
                f"Result {result.player_a} vs {result.player_b} names a player outside the field"
            )

        if result.forfeit_a:
            _record_forfeit(b, a)
            continue
        if result.forfeit_b:
            _record_forfeit(a, b)
            continue
        if result.sets_a == 0 and result.sets_b == 0:
            continue

        a.sets_won += result.sets_a
        a.sets_lost += result.sets_b
        b.sets_won += result.sets_b
        b.sets_lost += result.sets_a
        winner = result.winner()
        if winner == result.player_a:
            a.wins += 1
            b.losses += 1
        elif winner == result.player_b:
            b.wins += 1
            a.losses += 1

    ranked = sorted(table.values(), key=lambda s: (-s.wins, -s.set_difference, s.player_id))
    for position, standing in enumerate(ranked, start=1):
        standing.position = position
    return ranked
