"""
Bracket Seeder - initial single-elimination slot assignment with BYEs.

Top seeds are placed on the standard seed positions so that seed 1 and
seed 2 can only meet in the final, seeds 1-4 only in the semifinals, etc.
Everyone else (and any BYE not handed to a seed) is placed at random,
never putting two BYEs into the same first-round match.
"""

from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional, Sequence

from clubdraw.models.bracket import BYE, match_number, match_slots, sibling_slot
from clubdraw.models.player import Player, order_by_rating
from clubdraw.services.draw_rules import (
    DrawRequestError,
    calculate_bracket_size,
    validate_seed_count,
)

logger = logging.getLogger(__name__)


def bracket_seed_positions(bracket_size: int) -> List[int]:
    """Standard seed order for a bracket of *bracket_size* slots.

    Returns a flat list of seed numbers in slot order. Consecutive pairs are
    first-round matches, and seeds in each match sum to bracket_size + 1:
      4-slot  -> [1, 4, 3, 2]
      8-slot  -> [1, 8, 4, 5, 3, 6, 7, 2]
      16-slot -> [1, 16, 8, 9, 4, 13, 5, 12, 3, 14, 6, 11, 7, 10, 15, 2]

    Every seed expands to (seed, complement) except the last slot, which
    expands to (complement, seed) so that seed 2 stays at the very bottom.
    """
    if bracket_size < 2 or bracket_size & (bracket_size - 1):
        raise DrawRequestError(f"Bracket size must be a power of 2, got {bracket_size}")

    seeds = [1, 2]
    while len(seeds) < bracket_size:
        total = len(seeds) * 2 + 1
        expanded: List[int] = []
        last_index = len(seeds) - 1
        for i, seed in enumerate(seeds):
            complement = total - seed
            if i == last_index:
                expanded.extend((complement, seed))
            else:
                expanded.extend((seed, complement))
        seeds = expanded
    return seeds


def seed_slot_map(bracket_size: int) -> Dict[int, int]:
    """seed number → 1-based slot."""
    return {seed: index + 1 for index, seed in enumerate(bracket_seed_positions(bracket_size))}


def seed_bracket(
    players: Sequence[Player],
    num_seeds: int = 0,
    rng: Optional[random.Random] = None,
    presorted: bool = False,
) -> List[Optional[int]]:
    """Build first-round slot positions for *players*.

    Step 1: place the top *num_seeds* players on their standard seed slots.
    Step 2: hand BYEs to seeds in seed order, then to randomly chosen
            unseeded matches (one BYE per match at most).
    Step 3: shuffle the remaining players into the remaining open slots.

    Args:
        players: The field. Sorted by rating here unless *presorted* is set.
        num_seeds: 0 or a power of two <= bracket_size / 4
        rng: Random source (default: module random)
        presorted: Trust the caller's order as seed order

    Returns:
        Flat list of player ids per slot, None for BYE,
        length = next power of two >= len(players)

    Raises:
        DrawRequestError for fewer than 2 players, duplicate ids or an
        invalid seed count
    """
    rng = rng or random
    player_count = len(players)
    if player_count < 2:
        raise DrawRequestError(f"A bracket needs at least 2 players, got {player_count}")
    ids = [p.id for p in players]
    if len(set(ids)) != player_count:
        raise DrawRequestError("Player ids must be unique")
    validate_seed_count(player_count, num_seeds)

    ordered = list(players) if presorted else order_by_rating(players)
    bracket_size = calculate_bracket_size(player_count)
    positions: List[Optional[int]] = [BYE] * bracket_size

    seeded = ordered[:num_seeds]
    remaining = [p.id for p in ordered[num_seeds:]]
    slots_by_seed = seed_slot_map(bracket_size)

    # Step 1
    for seed_no, player in enumerate(seeded, start=1):
        positions[slots_by_seed[seed_no] - 1] = player.id

    # Step 2
    bye_count = bracket_size - player_count
    bye_slots: List[int] = []
    seed_byes = min(bye_count, len(seeded))
    for seed_no in range(1, seed_byes + 1):
        bye_slots.append(sibling_slot(slots_by_seed[seed_no]))

    seeded_matches = {match_number(slots_by_seed[s]) for s in range(1, len(seeded) + 1)}
    open_matches = [m for m in range(1, bracket_size // 2 + 1) if m not in seeded_matches]
    for match_no in rng.sample(open_matches, bye_count - seed_byes):
        bye_slots.append(rng.choice(match_slots(match_no)))

    # Step 3
    blocked = set(bye_slots) | {slots_by_seed[s] for s in range(1, len(seeded) + 1)}
    open_slots = [slot for slot in range(1, bracket_size + 1) if slot not in blocked]
    rng.shuffle(remaining)
    assert len(open_slots) == len(remaining), f"{len(open_slots)} open slots for {len(remaining)} players"
    for slot, player_id in zip(open_slots, remaining):
        positions[slot - 1] = player_id

    logger.debug(
        "Seeded bracket: %d players, size %d, %d seeds, %d byes",
        player_count,
        bracket_size,
        num_seeds,
        bye_count,
    )
    return positions
