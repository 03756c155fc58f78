"""
API Routes for Tournament Formats - initial plan and final stage
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from clubdraw.routes.common import MatchResultIn, PlayerIn, RoundOut, make_rng, round_out, to_players
from clubdraw.services.standings import compute_standings
from clubdraw.services.tournament_formats import build_final_stage, parse_format, plan_tournament

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


class PlanRequest(BaseModel):
    type: str
    options: Dict[str, Any] = Field(default_factory=dict)
    players: List[PlayerIn]
    random_seed: Optional[int] = None


class PlanResponse(BaseModel):
    type: str
    positions: Optional[List[Optional[int]]] = None
    groups: List[List[int]] = Field(default_factory=list)
    schedules: List[List[RoundOut]] = Field(default_factory=list)
    first_round: Optional[RoundOut] = None
    number_of_rounds: Optional[int] = None
    auto_qualified: List[int] = Field(default_factory=list)


class GroupResultsIn(BaseModel):
    player_ids: List[int]
    results: List[MatchResultIn] = Field(default_factory=list)


class FinalStageRequest(BaseModel):
    type: str
    options: Dict[str, Any] = Field(default_factory=dict)
    players: List[PlayerIn]
    groups: List[GroupResultsIn]
    random_seed: Optional[int] = None


class FinalStageResponse(BaseModel):
    type: str
    qualifiers: List[int]
    positions: Optional[List[Optional[int]]] = None
    schedule: Optional[List[RoundOut]] = None


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/tournaments/plan", response_model=PlanResponse)
def plan(body: PlanRequest):
    """
    Initial structure for any tournament type.

    Types: PLAYOFF, ROUND_ROBIN, MULTI_ROUND_ROBINS, SWISS,
    PRELIMINARY_WITH_FINAL_PLAYOFF, PRELIMINARY_WITH_FINAL_ROUND_ROBIN
    """
    try:
        fmt = parse_format(body.type, body.options)
        result = plan_tournament(fmt, to_players(body.players), make_rng(body.random_seed))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return PlanResponse(
        type=result.type,
        positions=result.positions,
        groups=result.groups,
        schedules=[[round_out(r) for r in schedule] for schedule in result.schedules],
        first_round=round_out(result.first_round) if result.first_round else None,
        number_of_rounds=result.number_of_rounds,
        auto_qualified=result.auto_qualified,
    )


@router.post("/tournaments/final-stage", response_model=FinalStageResponse)
def final_stage(body: FinalStageRequest):
    """Qualify players from the preliminary groups and build the final stage."""
    try:
        fmt = parse_format(body.type, body.options)
        group_standings = [
            compute_standings(group.player_ids, [r.to_result() for r in group.results]) for group in body.groups
        ]
        stage = build_final_stage(fmt, to_players(body.players), group_standings, make_rng(body.random_seed))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return FinalStageResponse(
        type=stage.type,
        qualifiers=stage.qualifiers,
        positions=stage.positions,
        schedule=[round_out(r) for r in stage.schedule] if stage.schedule is not None else None,
    )
