"""
Fair Incremental Pairing

Re-derives the rest of a schedule from what has already been played. Each
call starts from scratch: the only input state is the set of recorded pairs.

Round building is a greedy, priority-sorted selection over the unplayed
pairs. Given a fixed player order the result is deterministic.
"""

import logging
from itertools import combinations
from typing import Dict, Iterable, List, Sequence, Set, Tuple

from clubdraw.models.schedule import Pairing, Round, pair_key
from clubdraw.services.draw_rules import DrawRequestError

logger = logging.getLogger(__name__)

PairKey = Tuple[int, int]


def _spread_penalty(counts: Dict[int, int], a: int, b: int) -> int:
    """How far above 1 the counter spread would grow if (a, b) were scheduled."""
    after = dict(counts)
    after[a] += 1
    after[b] += 1
    spread = max(after.values()) - min(after.values())
    return max(0, spread - 1)


def fair_round(
    player_ids: Sequence[int],
    candidate_pairs: Iterable[PairKey],
    counts: Dict[int, int],
) -> List[Pairing]:
    """
    Build one round from *candidate_pairs*.

    Algorithm:
    1. Eligible = candidates whose two players are not yet placed this round
    2. Pick the eligible pair with the best priority:
       - both players at the current minimum counter first
       - then the smallest spread penalty (spread above 1 after the pick)
       - then the lowest combined counter
       - then player order (position in *player_ids*)
    3. Repeat until nothing is eligible

    Args:
        player_ids: Field in priority order
        candidate_pairs: Unordered pairs still to be played
        counts: Matches scheduled so far per player (not mutated)

    Returns:
        Pairings of the round, in selection order
    """
    order = {pid: index for index, pid in enumerate(player_ids)}
    working = {pid: counts.get(pid, 0) for pid in player_ids}
    remaining = sorted({pair_key(a, b) for a, b in candidate_pairs}, key=lambda p: (order[p[0]], order[p[1]]))
    placed: Set[int] = set()
    selected: List[Pairing] = []

    while True:
        eligible = [p for p in remaining if p[0] not in placed and p[1] not in placed]
        if not eligible:
            break
        minimum = min(working.values())

        def priority(pair: PairKey) -> tuple:
            a, b = pair
            both_at_min = working[a] == minimum and working[b] == minimum
            return (
                0 if both_at_min else 1,
                _spread_penalty(working, a, b),
                working[a] + working[b],
                min(order[a], order[b]),
                max(order[a], order[b]),
            )

        best = min(eligible, key=priority)
        a, b = best
        first, second = (a, b) if order[a] <= order[b] else (b, a)
        selected.append(Pairing(first, second))
        placed.update(best)
        working[a] += 1
        working[b] += 1
        remaining.remove(best)

    return selected


def schedule_remaining_rounds(
    player_ids: Sequence[int],
    played_pairs: Iterable[Tuple[int, int]] = (),
    first_round_number: int = 1,
) -> List[Round]:
    """
    Schedule every not-yet-played pair of the field.

    Rounds are built with `fair_round` until no unplayed pair remains.
    Played pairs are never scheduled again.

    Raises:
        DrawRequestError for duplicate ids, fewer than 2 players, or played
        pairs naming players outside the field
    """
    ids = list(player_ids)
    if len(ids) < 2:
        raise DrawRequestError(f"Need at least 2 players to schedule, got {len(ids)}")
    if len(set(ids)) != len(ids):
        raise DrawRequestError("Player ids must be unique")

    field = set(ids)
    counts: Dict[int, int] = {pid: 0 for pid in ids}
    played: Set[PairKey] = set()
    for a, b in played_pairs:
        if a not in field or b not in field:
            raise DrawRequestError(f"Played pair ({a}, {b}) names a player outside the field")
        if a == b:
            raise DrawRequestError(f"Player {a} cannot play themselves")
        key = pair_key(a, b)
        if key in played:
            continue
        played.add(key)
        counts[a] += 1
        counts[b] += 1

    unplayed = [pair_key(a, b) for a, b in combinations(ids, 2) if pair_key(a, b) not in played]
    rounds: List[Round] = []
    round_number = first_round_number

    while unplayed:
        pairings = fair_round(ids, unplayed, counts)
        for pairing in pairings:
            key = pairing.key()
            unplayed.remove(key)
            counts[pairing.player_a] += 1
            counts[pairing.player_b] += 1
        rounds.append(Round(round_number=round_number, pairings=pairings))
        round_number += 1

    logger.debug(
        "Scheduled %d remaining rounds for %d players (%d pairs already played)",
        len(rounds),
        len(ids),
        len(played),
    )
    return rounds
