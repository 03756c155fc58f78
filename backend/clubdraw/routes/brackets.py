"""
API Routes for Brackets - seeding, interactive editing, submission and structure

The editor is stateless over HTTP: the client sends the current editor state
with every gesture and receives the next one.
"""

from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from clubdraw.models.bracket import (
    DragState,
    Drop,
    DropInHolding,
    EditorState,
    GestureEvent,
    Hover,
    PickUp,
    PickUpFromHolding,
    Release,
)
from clubdraw.routes.common import PlayerIn, make_rng, to_players
from clubdraw.services.bracket_editor import apply_gesture, drop_allowed
from clubdraw.services.bracket_seeder import seed_bracket
from clubdraw.services.bracket_structure import (
    BracketSubmissionError,
    build_bracket_rounds,
    prepare_bracket_submission,
)
from clubdraw.services.draw_rules import calculate_bracket_size, calculate_rounds, valid_seed_counts

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


class ValidSeedsResponse(BaseModel):
    player_count: int
    bracket_size: int
    rounds: int
    valid_seed_counts: List[int]


class SeedRequest(BaseModel):
    players: List[PlayerIn]
    num_seeds: int = 0
    random_seed: Optional[int] = None


class SeedResponse(BaseModel):
    bracket_size: int
    num_seeds: int
    bye_count: int
    positions: List[Optional[int]]


class DragModel(BaseModel):
    player_id: int
    from_slot: Optional[int] = None
    from_holding: bool = False
    hover_slot: Optional[int] = None


class EditorStateModel(BaseModel):
    positions: List[Optional[int]]
    holding: Optional[int] = None
    drag: Optional[DragModel] = None


class GestureModel(BaseModel):
    kind: Literal["pick_up", "pick_up_from_holding", "hover", "drop", "drop_in_holding", "release"]
    slot: Optional[int] = None


class GestureRequest(BaseModel):
    state: EditorStateModel
    event: GestureModel


class RejectionModel(BaseModel):
    reason: str
    slot: Optional[int] = None
    message: str = ""


class GestureResponse(BaseModel):
    state: EditorStateModel
    rejection: Optional[RejectionModel] = None
    changed: bool
    drop_targets: List[int] = Field(default_factory=list, description="Slots that accept the current drag")


class SubmissionRequest(BaseModel):
    positions: List[Optional[int]]
    holding: Optional[int] = None
    field_ids: Optional[List[int]] = None


class BracketMatchModel(BaseModel):
    round: int
    position: int
    member1_id: Optional[int] = None
    member2_id: Optional[int] = None
    winner_id: Optional[int] = None
    next_match_position: Optional[int] = None


class SubmissionResponse(BaseModel):
    positions: List[Optional[int]]
    first_round: List[BracketMatchModel]
    byes: List[int]


class ReportedWinner(BaseModel):
    round: int
    position: int
    winner_id: int


class StructureRequest(BaseModel):
    positions: List[Optional[int]]
    winners: List[ReportedWinner] = Field(default_factory=list)


class StructureResponse(BaseModel):
    rounds: int
    matches: List[BracketMatchModel]


# ============================================================================
# Conversions
# ============================================================================


def _to_state(model: EditorStateModel) -> EditorState:
    drag = None
    if model.drag is not None:
        drag = DragState(
            player_id=model.drag.player_id,
            from_slot=model.drag.from_slot,
            from_holding=model.drag.from_holding,
            hover_slot=model.drag.hover_slot,
        )
    return EditorState(positions=tuple(model.positions), holding=model.holding, drag=drag)


def _from_state(state: EditorState) -> EditorStateModel:
    drag = None
    if state.drag is not None:
        drag = DragModel(
            player_id=state.drag.player_id,
            from_slot=state.drag.from_slot,
            from_holding=state.drag.from_holding,
            hover_slot=state.drag.hover_slot,
        )
    return EditorStateModel(positions=list(state.positions), holding=state.holding, drag=drag)


def _to_event(model: GestureModel) -> GestureEvent:
    if model.kind == "pick_up":
        return PickUp(slot=model.slot)
    if model.kind == "pick_up_from_holding":
        return PickUpFromHolding()
    if model.kind == "hover":
        return Hover(slot=model.slot)
    if model.kind == "drop":
        return Drop(slot=model.slot)
    if model.kind == "drop_in_holding":
        return DropInHolding()
    return Release()


def _match_model(match: Any) -> BracketMatchModel:
    return BracketMatchModel(
        round=match.round,
        position=match.position,
        member1_id=match.member1_id,
        member2_id=match.member2_id,
        winner_id=match.winner_id,
        next_match_position=match.next_match_position,
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.get("/brackets/valid-seeds", response_model=ValidSeedsResponse)
def get_valid_seeds(player_count: int = Query(..., ge=2, description="Field size")):
    """Seed counts the seeder accepts for this field size: 0 or a power of two <= bracket_size / 4."""
    return ValidSeedsResponse(
        player_count=player_count,
        bracket_size=calculate_bracket_size(player_count),
        rounds=calculate_rounds(player_count),
        valid_seed_counts=valid_seed_counts(player_count),
    )


@router.post("/brackets/seed", response_model=SeedResponse)
def seed(body: SeedRequest):
    """
    Seed a fresh bracket. Also used to reseed: any previous editor state is
    discarded by the client.
    """
    try:
        positions = seed_bracket(to_players(body.players), body.num_seeds, make_rng(body.random_seed))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return SeedResponse(
        bracket_size=len(positions),
        num_seeds=body.num_seeds,
        bye_count=len(positions) - len(body.players),
        positions=positions,
    )


@router.post("/brackets/editor/gesture", response_model=GestureResponse)
def editor_gesture(body: GestureRequest):
    """
    Apply one editor gesture.

    Never fails for an illegal gesture: the unchanged state comes back with
    a rejection naming the reason and the slot to flag.
    """
    size = len(body.state.positions)
    if size < 2 or size & (size - 1):
        raise HTTPException(status_code=400, detail=f"Bracket length must be a power of 2, got {size}")

    result = apply_gesture(_to_state(body.state), _to_event(body.event))

    drop_targets: List[int] = []
    if result.state.drag is not None:
        drop_targets = [
            slot for slot in range(1, result.state.bracket_size + 1) if drop_allowed(result.state, slot)
        ]

    rejection = None
    if result.rejection is not None:
        rejection = RejectionModel(
            reason=result.rejection.reason,
            slot=result.rejection.slot,
            message=result.rejection.message,
        )
    return GestureResponse(
        state=_from_state(result.state),
        rejection=rejection,
        changed=result.changed,
        drop_targets=drop_targets,
    )


@router.post("/brackets/submission", response_model=SubmissionResponse)
def submit_bracket(body: SubmissionRequest):
    """
    Validate a finished bracket for hand-off to persistence.

    409 if the holding slot is occupied or the bracket breaks an invariant.
    """
    try:
        submission = prepare_bracket_submission(body.positions, body.holding, body.field_ids)
    except BracketSubmissionError as e:
        detail: Dict[str, Any] = {"message": str(e), **e.details}
        raise HTTPException(status_code=409, detail=detail)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return SubmissionResponse(
        positions=submission.positions,
        first_round=[_match_model(m) for m in submission.first_round],
        byes=submission.byes,
    )


@router.post("/brackets/structure", response_model=StructureResponse)
def bracket_structure(body: StructureRequest):
    """Full elimination tree with BYE and reported winners advanced."""
    winners = {(w.round, w.position): w.winner_id for w in body.winners}
    try:
        matches = build_bracket_rounds(body.positions, winners)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return StructureResponse(
        rounds=max((m.round for m in matches), default=0),
        matches=[_match_model(m) for m in matches],
    )
