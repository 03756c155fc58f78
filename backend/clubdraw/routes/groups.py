"""
API Routes for Group Partitioning
"""

from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from clubdraw.config import DEFAULT_GROUP_SIZE
from clubdraw.routes.common import PlayerIn, make_rng, to_players
from clubdraw.utils.group_partition import DistributionPolicy, compute_group_capacities, partition_players

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


class CapacitiesResponse(BaseModel):
    total_players: int
    group_size: int
    capacities: List[int]


class PartitionRequest(BaseModel):
    players: List[PlayerIn]
    group_size: int = DEFAULT_GROUP_SIZE
    policy: DistributionPolicy = "snake"
    random_seed: Optional[int] = None


class GroupingResponse(BaseModel):
    """Response model for a partition request"""

    player_count: int
    groups_count: int
    group_sizes: List[int]
    groups: List[List[int]]
    average_rating_by_group: Dict[int, Optional[float]]
    policy: DistributionPolicy


# ============================================================================
# Endpoints
# ============================================================================


@router.get("/groups/capacities", response_model=CapacitiesResponse)
def get_group_capacities(
    total_players: int = Query(..., ge=1, description="Number of players to distribute"),
    group_size: int = Query(DEFAULT_GROUP_SIZE, description="Target group size (3-12)"),
    random_seed: Optional[int] = Query(None, description="Seed for a reproducible shuffle"),
):
    """Capacity of each group; sums to total_players."""
    try:
        capacities = compute_group_capacities(total_players, group_size, make_rng(random_seed))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return CapacitiesResponse(total_players=total_players, group_size=group_size, capacities=capacities)


@router.post("/groups/partition", response_model=GroupingResponse)
def partition_groups(body: PartitionRequest):
    """
    Split players into balanced groups.

    Policies:
    - rank: strongest players fill the first groups
    - snake: serpentine draft so every group gets a similar strength mix
    """
    try:
        result = partition_players(to_players(body.players), body.group_size, body.policy, make_rng(body.random_seed))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return GroupingResponse(
        player_count=result.player_count,
        groups_count=result.groups_count,
        group_sizes=result.group_sizes,
        groups=result.groups,
        average_rating_by_group=result.average_rating_by_group,
        policy=result.policy,
    )
