"""
Round-robin schedule generation (circle method).

Every unordered pair of the field plays exactly once:
- Even n: n-1 rounds of n/2 matches
- Odd n: a synthetic BYE joins the circle, n rounds of (n-1)/2 matches,
  the player drawn against the BYE sits out that round
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from clubdraw.models.schedule import Pairing, Round
from clubdraw.services.draw_rules import DrawRequestError


def _validate_field(player_ids: Sequence[int]) -> List[int]:
    ids = list(player_ids)
    if len(ids) < 2:
        raise DrawRequestError(f"A round robin needs at least 2 players, got {len(ids)}")
    if len(set(ids)) != len(ids):
        raise DrawRequestError("Player ids must be unique")
    return ids


def generate_round_robin_schedule(player_ids: Sequence[int]) -> List[Round]:
    """
    Circle method: fix position 0, rotate the rest one step per round.

    Position i plays position n2-1-i. Pairings against the synthetic BYE
    are dropped from the output and recorded as the round's bye_player.

    Returns:
        Rounds numbered from 1, pairings in circle order
    """
    ids = _validate_field(player_ids)
    circle: List[Optional[int]] = list(ids)
    if len(circle) % 2 == 1:
        circle.append(None)

    n2 = len(circle)
    half = n2 // 2
    rounds: List[Round] = []

    for round_number in range(1, n2):
        pairings: List[Pairing] = []
        bye_player: Optional[int] = None
        for i in range(half):
            a, b = circle[i], circle[n2 - 1 - i]
            if a is None or b is None:
                bye_player = b if a is None else a
                continue
            pairings.append(Pairing(a, b))
        rounds.append(Round(round_number=round_number, pairings=pairings, bye_player=bye_player))
        # Rotate: keep 0, move last to second, shift others
        circle = [circle[0]] + [circle[-1]] + circle[1:-1]

    return rounds
