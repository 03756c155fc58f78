"""
API Routes for Schedules and Standings
"""

from typing import List, Tuple

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from clubdraw.routes.common import MatchResultIn, PlayerIn, RoundOut, round_out, to_players
from clubdraw.services.fair_pairing import schedule_remaining_rounds
from clubdraw.services.round_robin import generate_round_robin_schedule
from clubdraw.services.standings import compute_standings
from clubdraw.services.swiss_pairing import pair_swiss_round

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


class RoundRobinRequest(BaseModel):
    player_ids: List[int]


class FairScheduleRequest(BaseModel):
    player_ids: List[int]
    played_pairs: List[Tuple[int, int]] = Field(default_factory=list)
    first_round_number: int = Field(1, ge=1)


class ScheduleResponse(BaseModel):
    rounds_count: int
    matches_count: int
    rounds: List[RoundOut]


class SwissRoundRequest(BaseModel):
    players: List[PlayerIn]
    results: List[MatchResultIn] = Field(default_factory=list)
    byes_received: List[int] = Field(default_factory=list)
    round_number: int = Field(1, ge=1)


class StandingsRequest(BaseModel):
    player_ids: List[int]
    results: List[MatchResultIn] = Field(default_factory=list)


class StandingOut(BaseModel):
    player_id: int
    position: int
    wins: int
    losses: int
    sets_won: int
    sets_lost: int
    set_difference: int


class StandingsResponse(BaseModel):
    standings: List[StandingOut]


def _schedule_response(rounds) -> ScheduleResponse:
    return ScheduleResponse(
        rounds_count=len(rounds),
        matches_count=sum(len(r.pairings) for r in rounds),
        rounds=[round_out(r) for r in rounds],
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/schedules/round-robin", response_model=ScheduleResponse)
def round_robin_schedule(body: RoundRobinRequest):
    """Complete round robin (circle method); odd fields get one bye per round."""
    try:
        rounds = generate_round_robin_schedule(body.player_ids)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _schedule_response(rounds)


@router.post("/schedules/fair", response_model=ScheduleResponse)
def fair_schedule(body: FairScheduleRequest):
    """Re-derive the remaining rounds from the pairs already played."""
    try:
        rounds = schedule_remaining_rounds(body.player_ids, body.played_pairs, body.first_round_number)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _schedule_response(rounds)


@router.post("/schedules/swiss-round", response_model=RoundOut)
def swiss_round(body: SwissRoundRequest):
    """Pair the next Swiss round from the results so far."""
    try:
        round_ = pair_swiss_round(
            to_players(body.players),
            [r.to_result() for r in body.results],
            body.byes_received,
            body.round_number,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return round_out(round_)


@router.post("/standings", response_model=StandingsResponse)
def standings(body: StandingsRequest):
    """Ranked standings: wins, then set difference, then player id."""
    try:
        table = compute_standings(body.player_ids, [r.to_result() for r in body.results])
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return StandingsResponse(
        standings=[
            StandingOut(
                player_id=s.player_id,
                position=s.position,
                wins=s.wins,
                losses=s.losses,
                sets_won=s.sets_won,
                sets_lost=s.sets_lost,
                set_difference=s.set_difference,
            )
            for s in table
        ]
    )
