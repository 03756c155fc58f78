"""
Swiss Pairing - one round at a time.

Players are ranked by points (wins, plus one per BYE received) with rating
as the tie-break, grouped by points, and paired inside their point group
without ever repeating a pair that has already played.

Floating:
- A point group with an odd count floats its lowest player that leaves the
  rest of the group pairable down to the next group
- A group that cannot be paired at all without a repeat is merged into the
  next group
- If players are still unpaired after the last group, the whole field is
  paired from scratch in rank order

An odd field gives the BYE to the lowest-ranked player without a previous BYE.
"""

import logging
from itertools import groupby
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple

from clubdraw.models.player import Player, rating_sort_key
from clubdraw.models.schedule import MatchResult, Pairing, Round, pair_key
from clubdraw.services.draw_rules import DrawRequestError

logger = logging.getLogger(__name__)

# Upper bound on search nodes per pairing attempt
MAX_PAIRING_STEPS = 20000


def _points(player_ids: Iterable[int], results: Sequence[MatchResult], byes: Set[int]) -> Dict[int, int]:
    points = {pid: 0 for pid in player_ids}
    for result in results:
        winner = result.winner()
        if winner is not None:
            points[winner] += 1
    for pid in byes:
        points[pid] += 1
    return points


def _someone_stranded(remaining: Tuple[int, ...], played: Set[Tuple[int, int]]) -> bool:
    """True if a player in *remaining* has already played everyone else in it."""
    return any(
        all(pair_key(pid, other) in played for other in remaining if other != pid) for pid in remaining
    )


def _pair_without_repeats(pool: List[int], played: Set[Tuple[int, int]]) -> Optional[List[Pairing]]:
    """
    Backtracking: pair pool[0] with the closest-ranked partner it has not
    played, then recurse on the rest. Returns None if no perfect pairing exists.

    Branches are cut as soon as a remaining player has no unplayed partner,
    and sub-pools already known to fail are not searched again.

    Raises:
        DrawRequestError if the search exceeds MAX_PAIRING_STEPS nodes
    """
    failed: Set[FrozenSet[int]] = set()
    steps = 0

    def search(remaining: Tuple[int, ...]) -> Optional[List[Pairing]]:
        nonlocal steps
        if not remaining:
            return []
        key = frozenset(remaining)
        if key in failed:
            return None
        steps += 1
        if steps > MAX_PAIRING_STEPS:
            raise DrawRequestError(f"Pairing search gave up after {MAX_PAIRING_STEPS} steps")
        if _someone_stranded(remaining, played):
            failed.add(key)
            return None

        first, rest = remaining[0], remaining[1:]
        for index, partner in enumerate(rest):
            if pair_key(first, partner) in played:
                continue
            tail = search(rest[:index] + rest[index + 1 :])
            if tail is not None:
                return [Pairing(first, partner)] + tail
        failed.add(key)
        return None

    return search(tuple(pool))


def _choose_bye(ranked: List[int], byes: Set[int]) -> int:
    for pid in reversed(ranked):
        if pid not in byes:
            return pid
    return ranked[-1]


def pair_swiss_round(
    players: Sequence[Player],
    results: Sequence[MatchResult] = (),
    byes_received: Iterable[int] = (),
    round_number: int = 1,
) -> Round:
    """
    Pair the next Swiss round.

    Args:
        players: The field
        results: Every result recorded so far (defines points and played pairs)
        byes_received: Players that already sat out a round with a BYE
        round_number: Number given to the returned round

    Returns:
        Round with pairings in rank order and the BYE player, if any

    Raises:
        DrawRequestError for invalid input or when no repeat-free pairing exists
    """
    ids = [p.id for p in players]
    if len(ids) < 2:
        raise DrawRequestError(f"A Swiss round needs at least 2 players, got {len(ids)}")
    if len(set(ids)) != len(ids):
        raise DrawRequestError("Player ids must be unique")

    field = set(ids)
    byes = set(byes_received)
    if not byes <= field:
        raise DrawRequestError(f"BYE recipients outside the field: {sorted(byes - field)}")
    played: Set[Tuple[int, int]] = set()
    for result in results:
        if result.player_a not in field or result.player_b not in field:
            raise DrawRequestError(
                f"Result {result.player_a} vs {result.player_b} names a player outside the field"
            )
        played.add(pair_key(result.player_a, result.player_b))

    points = _points(ids, results, byes)
    ranked_players = sorted(players, key=lambda p: (-points[p.id],) + rating_sort_key(p))
    ranked = [p.id for p in ranked_players]

    bye_player: Optional[int] = None
    if len(ranked) % 2 == 1:
        bye_player = _choose_bye(ranked, byes)
        ranked.remove(bye_player)

    pairings: List[Pairing] = []
    carried: List[int] = []
    for _, group in groupby(ranked, key=lambda pid: points[pid]):
        pool = carried + list(group)
        carried = []

        if len(pool) % 2 == 1:
            for candidate in reversed(pool):
                rest = [pid for pid in pool if pid != candidate]
                paired = _pair_without_repeats(rest, played)
                if paired is not None:
                    pairings.extend(paired)
                    carried = [candidate]
                    break
            else:
                carried = pool
            continue

        paired = _pair_without_repeats(pool, played)
        if paired is None:
            carried = pool
        else:
            pairings.extend(paired)

    if carried:
        logger.debug("Swiss round %d: %d floaters reached the bottom, re-pairing whole field", round_number, len(carried))
        whole_field = _pair_without_repeats(ranked, played)
        if whole_field is None:
            raise DrawRequestError(f"No pairing without a repeated match exists for round {round_number}")
        pairings = whole_field

    return Round(round_number=round_number, pairings=pairings, bye_player=bye_player)
