"""
Draw Rules - Allowed Values (Single Source of Truth)

Validation rules shared by the partitioner, seeder and schedulers.
All other modules must import from here. Do NOT duplicate these rules elsewhere.
"""

from math import ceil, log2
from typing import List


class DrawRequestError(ValueError):
    """A structuring request was rejected; no partial state was produced."""

    pass


# =============================================================================
# Group Size Rules
# =============================================================================

MIN_GROUP_SIZE = 3
MAX_GROUP_SIZE = 12
MIN_GROUP_MEMBERS = 2


def validate_group_size(group_size: int) -> None:
    if group_size < MIN_GROUP_SIZE or group_size > MAX_GROUP_SIZE:
        raise DrawRequestError(
            f"Group size must be between {MIN_GROUP_SIZE} and {MAX_GROUP_SIZE}, got {group_size}"
        )


# =============================================================================
# Bracket Rules
# =============================================================================


def calculate_bracket_size(player_count: int) -> int:
    """Next power of two >= player_count."""
    if player_count <= 1:
        return 1
    return 2 ** ceil(log2(player_count))


def calculate_rounds(player_count: int) -> int:
    """Number of elimination rounds for a field of `player_count`."""
    return int(log2(calculate_bracket_size(player_count)))


def max_seed_count(player_count: int) -> int:
    """At most a quarter of the bracket may be seeded."""
    return calculate_bracket_size(player_count) // 4


def valid_seed_counts(player_count: int) -> List[int]:
    """
    Seed counts accepted for a field of `player_count`.

    0 (fully random) plus every power of two >= 2 that is <= bracket_size / 4.

    Examples:
    - 5 players  → bracket 8  → [0, 2]
    - 4 players  → bracket 4  → [0]
    - 20 players → bracket 32 → [0, 2, 4, 8]
    """
    values = [0]
    maximum = max_seed_count(player_count)
    value = 2
    while value <= maximum:
        values.append(value)
        value *= 2
    return values


def validate_seed_count(player_count: int, num_seeds: int) -> None:
    allowed = valid_seed_counts(player_count)
    if num_seeds not in allowed:
        raise DrawRequestError(
            f"Seed count must be one of {allowed} for {player_count} players, got {num_seeds}"
        )


# =============================================================================
# Round Robin Inventory
# =============================================================================


def rr_matches_count(player_count: int) -> int:
    """C(n, 2) = n*(n-1)/2."""
    return (player_count * (player_count - 1)) // 2


def rr_round_count(player_count: int) -> int:
    """
    Even n: n-1 rounds. Odd n: n rounds (with BYE).
    """
    if player_count < 2:
        return 0
    if player_count % 2 == 0:
        return player_count - 1
    return player_count
