"""
Group Partitioner - Balanced Player Grouping

This module splits a field of players into groups of a target size for
round-robin leagues and preliminary stages of composite tournaments.
"""

import logging
import random
from dataclasses import dataclass
from math import ceil, floor
from typing import Dict, Iterator, List, Literal, Optional, Sequence

from clubdraw.models.player import Player, order_by_rating
from clubdraw.services.draw_rules import MIN_GROUP_MEMBERS, DrawRequestError, validate_group_size

logger = logging.getLogger(__name__)

DistributionPolicy = Literal["rank", "snake"]

# ============================================================================
# Group Capacities
# ============================================================================


def compute_groups_count(total_players: int, desired_size: int) -> int:
    """
    groups_count = max(1, ceil(total_players / desired_size))

    Examples:
    - 20 players, size 6 → 4 groups
    - 12 players, size 4 → 3 groups
    - 13 players, size 4 → 4 groups
    """
    if total_players <= 0 or desired_size <= 0:
        return 1
    return max(1, ceil(total_players / desired_size))


def _even_capacities(total_players: int, groups_count: int) -> List[int]:
    base_size = floor(total_players / groups_count)
    remainder = total_players % groups_count
    return [base_size + 1 if i < remainder else base_size for i in range(groups_count)]


def compute_group_capacities(
    total_players: int, desired_size: int, rng: Optional[random.Random] = None
) -> List[int]:
    """
    Compute capacity (size) for each group.

    Algorithm:
    - groups_count = ceil(N / S)
    - shortfall = groups_count * S - N (groups that hold S-1 instead of S)
    - (groups_count - shortfall) groups of S, shortfall groups of S-1
    - Shuffle which groups are the smaller ones so group 1 is not always short

    If S >= N a single group of N is returned. When shortfall exceeds
    groups_count no {S-1, S} split exists (e.g. N=7, S=6) and the most even
    split over groups_count groups is used instead.

    Args:
        total_players: Number of players to distribute
        desired_size: Target group size
        rng: Random source for the cosmetic shuffle (default: module random)

    Returns:
        List of group capacities, sum == total_players

    Raises:
        DrawRequestError if desired_size is outside 3..12
    """
    validate_group_size(desired_size)
    if total_players <= 0:
        return []
    if desired_size >= total_players:
        return [total_players]

    groups_count = compute_groups_count(total_players, desired_size)
    shortfall = groups_count * desired_size - total_players

    if shortfall <= groups_count:
        capacities = [desired_size] * (groups_count - shortfall) + [desired_size - 1] * shortfall
    else:
        capacities = _even_capacities(total_players, groups_count)

    (rng or random).shuffle(capacities)
    return capacities


# ============================================================================
# Distribution Policies
# ============================================================================


def rank_based_groups(sorted_players: Sequence[Player], capacities: Sequence[int]) -> List[List[int]]:
    """
    Fill group 1 to capacity with the strongest players, then group 2, etc.

    `sorted_players` must already be ordered strongest first.
    """
    groups: List[List[int]] = []
    cursor = 0
    for capacity in capacities:
        groups.append([p.id for p in sorted_players[cursor : cursor + capacity]])
        cursor += capacity
    return groups


def _serpentine(groups_count: int) -> Iterator[int]:
    """0, 1, ..., G-1, G-1, ..., 0, 0, 1, ... forever."""
    while True:
        for i in range(groups_count):
            yield i
        for i in reversed(range(groups_count)):
            yield i


def snake_draft_groups(sorted_players: Sequence[Player], capacities: Sequence[int]) -> List[List[int]]:
    """
    Assign players in a serpentine sweep (1..G, G..1, ...) skipping full groups.

    `sorted_players` must already be ordered strongest first. Balances strength
    across groups.
    """
    groups: List[List[int]] = [[] for _ in capacities]
    if not capacities:
        return groups

    sweep = _serpentine(len(capacities))
    for player in sorted_players:
        for group_index in sweep:
            if len(groups[group_index]) < capacities[group_index]:
                groups[group_index].append(player.id)
                break
    return groups


# ============================================================================
# Partition
# ============================================================================


@dataclass
class GroupingResult:
    """Result of a partition request"""

    player_count: int
    groups_count: int
    group_sizes: List[int]
    groups: List[List[int]]
    average_rating_by_group: Dict[int, Optional[float]]  # group_index → mean rating of rated members
    policy: DistributionPolicy


def _average_ratings(groups: List[List[int]], by_id: Dict[int, Player]) -> Dict[int, Optional[float]]:
    averages: Dict[int, Optional[float]] = {}
    for group_index, group in enumerate(groups):
        ratings = [by_id[pid].rating for pid in group if by_id[pid].rating is not None]
        averages[group_index] = round(sum(ratings) / len(ratings), 1) if ratings else None
    return averages


def partition_players(
    players: Sequence[Player],
    group_size: int,
    policy: DistributionPolicy = "snake",
    rng: Optional[random.Random] = None,
) -> GroupingResult:
    """
    Split players into balanced groups.

    Algorithm:
    1. Validate group size (3..12) and unique player ids
    2. Sort players by rating DESC (unrated lowest), id ASC
    3. Compute group capacities (shuffled)
    4. Distribute with the chosen policy:
       - "rank": strongest players concentrated in the first groups
       - "snake": serpentine draft, strength balanced across groups
    5. Reject if any group would hold fewer than 2 players

    Raises:
        DrawRequestError on invalid input
    """
    validate_group_size(group_size)
    if policy not in ("rank", "snake"):
        raise DrawRequestError(f"Unknown distribution policy: {policy}")

    ids = [p.id for p in players]
    if len(set(ids)) != len(ids):
        raise DrawRequestError("Player ids must be unique")
    if len(players) < MIN_GROUP_MEMBERS:
        raise DrawRequestError(f"Need at least {MIN_GROUP_MEMBERS} players to form a group, got {len(players)}")

    sorted_players = order_by_rating(players)
    capacities = compute_group_capacities(len(sorted_players), group_size, rng)

    if any(capacity < MIN_GROUP_MEMBERS for capacity in capacities):
        raise DrawRequestError(
            f"Cannot split {len(players)} players into groups of {group_size}: "
            f"every group needs at least {MIN_GROUP_MEMBERS} players"
        )

    if policy == "rank":
        groups = rank_based_groups(sorted_players, capacities)
    else:
        groups = snake_draft_groups(sorted_players, capacities)

    logger.debug(
        "Partitioned %d players into %d groups (policy=%s, capacities=%s)",
        len(players),
        len(groups),
        policy,
        capacities,
    )

    by_id = {p.id: p for p in players}
    return GroupingResult(
        player_count=len(players),
        groups_count=len(groups),
        group_sizes=[len(g) for g in groups],
        groups=groups,
        average_rating_by_group=_average_ratings(groups, by_id),
        policy=policy,
    )
