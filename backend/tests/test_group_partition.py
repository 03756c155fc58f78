"""
Tests for the Group Partitioner

Tests must prove:
1. Capacities always sum to the field size, groups differ by at most one
2. Exact shortfall formula (20 players, size 6 → [5,5,5,5])
3. Rank-based and snake-draft distribution order
4. Invalid requests are rejected
"""

import random
from math import ceil

import pytest

from clubdraw.models.player import Player, order_by_rating
from clubdraw.services.draw_rules import DrawRequestError
from clubdraw.utils.group_partition import (
    compute_group_capacities,
    compute_groups_count,
    partition_players,
    rank_based_groups,
    snake_draft_groups,
)


class TestGroupCapacities:
    def test_capacity_sum_for_all_sizes(self, rng):
        for total in range(1, 61):
            for size in range(3, 13):
                capacities = compute_group_capacities(total, size, rng)
                assert sum(capacities) == total, (total, size)
                if size >= total:
                    assert capacities == [total]
                    continue
                assert len(capacities) == ceil(total / size)
                assert max(capacities) - min(capacities) <= 1

    def test_values_are_size_or_size_minus_one_when_split_exists(self, rng):
        for total in range(3, 61):
            for size in range(3, 13):
                if size >= total:
                    continue
                groups = compute_groups_count(total, size)
                if groups * size - total > groups:
                    continue
                capacities = compute_group_capacities(total, size, rng)
                assert set(capacities) <= {size - 1, size}, (total, size, capacities)

    def test_twenty_players_size_six(self, rng):
        assert sorted(compute_group_capacities(20, 6, rng)) == [5, 5, 5, 5]

    def test_thirteen_players_size_four(self, rng):
        assert sorted(compute_group_capacities(13, 4, rng)) == [3, 3, 3, 4]

    def test_no_size_minus_one_split_falls_back_to_even(self, rng):
        # 7 players, size 6: 2 groups, shortfall 5 > 2
        assert sorted(compute_group_capacities(7, 6, rng)) == [3, 4]

    def test_single_group_when_size_covers_field(self, rng):
        assert compute_group_capacities(5, 8, rng) == [5]

    def test_zero_players(self):
        assert compute_group_capacities(0, 4) == []

    def test_shuffle_is_reproducible(self):
        first = compute_group_capacities(22, 6, random.Random(7))
        second = compute_group_capacities(22, 6, random.Random(7))
        assert first == second

    @pytest.mark.parametrize("size", [0, 2, 13])
    def test_capacities_reject_out_of_range_size(self, size):
        with pytest.raises(DrawRequestError, match="Group size"):
            compute_group_capacities(10, size)


class TestDistribution:
    def test_order_by_rating_puts_unrated_last(self):
        players = [Player(id=1), Player(id=2, rating=1500), Player(id=3, rating=1600), Player(id=4)]
        assert [p.id for p in order_by_rating(players)] == [3, 2, 1, 4]

    def test_rank_based_fills_groups_in_order(self, make_players):
        groups = rank_based_groups(make_players(8), [4, 4])
        assert groups == [[1, 2, 3, 4], [5, 6, 7, 8]]

    def test_snake_draft_serpentine(self, make_players):
        groups = snake_draft_groups(make_players(8), [3, 3, 2])
        assert groups == [[1, 6, 7], [2, 5, 8], [3, 4]]

    def test_snake_draft_skips_full_groups(self, make_players):
        groups = snake_draft_groups(make_players(6), [2, 4])
        assert groups == [[1, 4], [2, 3, 5, 6]]


class TestPartitionPlayers:
    def test_union_of_groups_is_field(self, make_players, rng):
        players = make_players(23)
        result = partition_players(players, 5, "snake", rng)
        placed = [pid for group in result.groups for pid in group]
        assert sorted(placed) == [p.id for p in players]
        assert result.groups_count == 5
        assert sum(result.group_sizes) == 23
        assert all(size >= 2 for size in result.group_sizes)

    def test_rank_policy_average_ratings_descend(self, make_players, rng):
        result = partition_players(make_players(12), 4, "rank", rng)
        averages = [result.average_rating_by_group[i] for i in range(result.groups_count)]
        assert averages == sorted(averages, reverse=True)

    def test_snake_policy_balances_strength(self, make_players, rng):
        result = partition_players(make_players(12), 4, "snake", rng)
        averages = [result.average_rating_by_group[i] for i in range(result.groups_count)]
        assert max(averages) - min(averages) < 20

    def test_unrated_group_average_is_none(self, make_players, rng):
        result = partition_players(make_players(6, rated=False), 3, "rank", rng)
        assert all(avg is None for avg in result.average_rating_by_group.values())

    @pytest.mark.parametrize("group_size", [2, 13])
    def test_rejects_group_size_out_of_range(self, make_players, group_size):
        with pytest.raises(DrawRequestError, match="Group size"):
            partition_players(make_players(12), group_size)

    def test_rejects_duplicate_ids(self):
        with pytest.raises(DrawRequestError, match="unique"):
            partition_players([Player(id=1), Player(id=1), Player(id=2)], 3)

    def test_rejects_single_player(self, make_players):
        with pytest.raises(DrawRequestError, match="at least 2"):
            partition_players(make_players(1), 3)

    def test_rejects_unknown_policy(self, make_players):
        with pytest.raises(DrawRequestError, match="policy"):
            partition_players(make_players(8), 4, "random")
