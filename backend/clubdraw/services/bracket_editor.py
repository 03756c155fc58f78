"""
Interactive Bracket Editor: gesture validation and slot mutation

This module lets a user rearrange a seeded bracket by dragging players
between first-round slots and a single out-of-bracket holding slot, while
enforcing hard invariants on every move:

1. **Drag source**: a player is draggable only if the other slot of their
   match holds a real player (dragging a BYE-paired player would be
   indistinguishable from deleting a match)
2. **No swaps between players**: dropping onto an occupied slot is rejected
3. **No double BYE**: every completed move re-checks both touched matches
   and is rolled back if either would hold two BYEs
4. **Holding slot**: a player may be parked there only from a full match;
   it must be empty before the bracket is submitted

`apply_gesture` is a total function: illegal gestures return the state
structurally unchanged together with a `GestureRejection`, they never raise.
"""

import logging
import random
from typing import Iterable, List, Optional, Sequence, Tuple

from clubdraw.models.bracket import (
    BYE,
    DragState,
    Drop,
    DropInHolding,
    EditorResult,
    EditorState,
    GestureEvent,
    GestureRejection,
    HoldingLocation,
    Hover,
    Location,
    PickUp,
    PickUpFromHolding,
    Release,
    SlotLocation,
    Unplaced,
    is_double_bye,
    match_number,
    sibling_slot,
)
from clubdraw.models.player import Player
from clubdraw.services.bracket_invariants import check_bracket_invariants
from clubdraw.services.bracket_seeder import seed_bracket
from clubdraw.services.draw_rules import DrawRequestError, valid_seed_counts

logger = logging.getLogger(__name__)

REJECT_INVALID_SLOT = "invalid_slot"
REJECT_NOT_DRAGGABLE = "not_draggable"
REJECT_DRAG_IN_PROGRESS = "drag_in_progress"
REJECT_NO_DRAG = "no_drag"
REJECT_STALE_DRAG = "stale_drag"
REJECT_HOLDING_EMPTY = "holding_empty"
REJECT_SLOT_OCCUPIED = "slot_occupied"
REJECT_MATCH_NOT_FULL = "match_not_full"
REJECT_DOUBLE_BYE = "double_bye"
REJECT_UNKNOWN_GESTURE = "unknown_gesture"
REJECT_INVALID_BRACKET = "invalid_bracket"


# ============================================================================
# Read-only queries
# ============================================================================


def locate(state: EditorState, player_id: int) -> Location:
    """Where *player_id* currently sits: a slot, the holding slot, or nowhere."""
    if state.holding == player_id:
        return HoldingLocation()
    for index, pid in enumerate(state.positions):
        if pid == player_id:
            return SlotLocation(slot=index + 1)
    return Unplaced()


def _valid_length(state: EditorState) -> bool:
    size = len(state.positions)
    return size >= 2 and size & (size - 1) == 0


def _valid_slot(state: EditorState, slot: Optional[int]) -> bool:
    return isinstance(slot, int) and 1 <= slot <= state.bracket_size


def can_pick_up(state: EditorState, slot: int) -> Tuple[bool, Optional[str]]:
    """
    Check if the player at *slot* may be dragged.

    Returns:
        (is_draggable, reason_if_not)
    """
    if not _valid_length(state):
        return False, f"Bracket length must be a power of 2, got {len(state.positions)}"
    if not _valid_slot(state, slot):
        return False, f"Slot {slot} is outside the bracket (1..{state.bracket_size})"
    if state.positions[slot - 1] is BYE:
        return False, "Cannot drag a BYE"
    if state.positions[sibling_slot(slot) - 1] is BYE:
        return False, "Cannot drag: other player in match is BYE"
    return True, None


def drop_allowed(state: EditorState, slot: int) -> bool:
    """Hover preview: would dropping the current drag onto *slot* be accepted?"""
    if state.drag is None or not _valid_length(state) or not _valid_slot(state, slot) or _stale(state):
        return False
    if state.drag.from_slot == slot:
        return True
    if state.positions[slot - 1] is not BYE:
        return False
    if state.drag.from_holding:
        return True
    updated = list(state.positions)
    updated[slot - 1] = state.drag.player_id
    updated[state.drag.from_slot - 1] = BYE
    return not _double_bye_in(updated, (match_number(slot), match_number(state.drag.from_slot)))


# ============================================================================
# Transition helpers
# ============================================================================


def _reject(state: EditorState, reason: str, message: str, slot: Optional[int] = None) -> EditorResult:
    logger.debug("Gesture rejected: %s (slot=%s) %s", reason, slot, message)
    return EditorResult(state=state, rejection=GestureRejection(reason=reason, slot=slot, message=message))


def _double_bye_in(positions: Sequence[Optional[int]], matches: Iterable[int]) -> bool:
    snapshot = tuple(positions)
    return any(is_double_bye(snapshot, m) for m in matches)


def _commit(
    before: EditorState,
    positions: List[Optional[int]],
    holding: Optional[int],
    touched_matches: Iterable[int],
    target_slot: Optional[int],
) -> EditorResult:
    """Apply a move, or roll it back if a touched match would hold two BYEs."""
    if _double_bye_in(positions, touched_matches):
        logger.warning(
            "Rolled back move of player %s to slot %s: would create a double-BYE match",
            before.drag.player_id if before.drag else None,
            target_slot,
        )
        return _reject(
            before.idle(),
            REJECT_DOUBLE_BYE,
            "Move would leave a match with two BYEs",
            target_slot,
        )
    return EditorResult(state=EditorState(positions=tuple(positions), holding=holding), changed=True)


def _stale(state: EditorState) -> bool:
    drag = state.drag
    if drag.from_holding:
        return state.holding != drag.player_id
    return not _valid_slot(state, drag.from_slot) or state.positions[drag.from_slot - 1] != drag.player_id


# ============================================================================
# Gesture handlers
# ============================================================================


def _pick_up(state: EditorState, slot: int) -> EditorResult:
    if not state.is_idle:
        return _reject(state, REJECT_DRAG_IN_PROGRESS, "Finish the current drag first", slot)
    ok, reason = can_pick_up(state, slot)
    if not ok:
        code = REJECT_INVALID_SLOT if not _valid_slot(state, slot) else REJECT_NOT_DRAGGABLE
        return _reject(state, code, reason, slot)
    drag = DragState(player_id=state.positions[slot - 1], from_slot=slot)
    return EditorResult(state=EditorState(state.positions, state.holding, drag))


def _pick_up_from_holding(state: EditorState) -> EditorResult:
    if not state.is_idle:
        return _reject(state, REJECT_DRAG_IN_PROGRESS, "Finish the current drag first")
    if state.holding is None:
        return _reject(state, REJECT_HOLDING_EMPTY, "Holding slot is empty")
    drag = DragState(player_id=state.holding, from_slot=None, from_holding=True)
    return EditorResult(state=EditorState(state.positions, state.holding, drag))


def _hover(state: EditorState, slot: Optional[int]) -> EditorResult:
    if state.drag is None:
        return EditorResult(state=state)
    hover_slot = slot if _valid_slot(state, slot) else None
    drag = DragState(state.drag.player_id, state.drag.from_slot, state.drag.from_holding, hover_slot)
    return EditorResult(state=EditorState(state.positions, state.holding, drag))


def _drop_from_bracket(state: EditorState, target: int) -> EditorResult:
    drag = state.drag
    origin = drag.from_slot
    if target == origin:
        return EditorResult(state=state.idle())

    if state.positions[target - 1] is not BYE:
        return _reject(state.idle(), REJECT_SLOT_OCCUPIED, "Only BYE slots accept a dropped player", target)

    # Dragged player takes the BYE slot and the origin becomes the BYE.
    # An occupied holding slot is left untouched.
    updated = list(state.positions)
    updated[target - 1] = drag.player_id
    updated[origin - 1] = BYE
    return _commit(state, updated, state.holding, (match_number(origin), match_number(target)), target)


def _drop_from_holding(state: EditorState, target: int) -> EditorResult:
    if state.positions[target - 1] is not BYE:
        return _reject(state.idle(), REJECT_SLOT_OCCUPIED, "Only BYE slots accept a player from holding", target)
    updated = list(state.positions)
    updated[target - 1] = state.drag.player_id
    return _commit(state, updated, None, (match_number(target),), target)


def _drop(state: EditorState, target: int) -> EditorResult:
    if state.drag is None:
        return _reject(state, REJECT_NO_DRAG, "Nothing is being dragged", target)
    if _stale(state):
        return _reject(state.idle(), REJECT_STALE_DRAG, "Dragged player is no longer at its origin", target)
    if not _valid_slot(state, target):
        return _reject(state.idle(), REJECT_INVALID_SLOT, f"Slot {target} is outside the bracket", target)
    if state.drag.from_holding:
        return _drop_from_holding(state, target)
    return _drop_from_bracket(state, target)


def _drop_in_holding(state: EditorState) -> EditorResult:
    if state.drag is None:
        return _reject(state, REJECT_NO_DRAG, "Nothing is being dragged")
    if _stale(state):
        return _reject(state.idle(), REJECT_STALE_DRAG, "Dragged player is no longer at its origin")
    if state.drag.from_holding:
        return EditorResult(state=state.idle())

    origin = state.drag.from_slot
    if state.positions[sibling_slot(origin) - 1] is BYE:
        return _reject(
            state.idle(),
            REJECT_MATCH_NOT_FULL,
            "Only a player from a match with two players can be moved to holding",
            origin,
        )

    # A previous holding occupant takes the vacated slot; otherwise it becomes a BYE.
    updated = list(state.positions)
    updated[origin - 1] = state.holding
    return _commit(state, updated, state.drag.player_id, (match_number(origin),), origin)


def apply_gesture(state: EditorState, event: GestureEvent) -> EditorResult:
    """
    Editor transition function: (state, event) -> state'.

    Never raises. Rejected gestures end any drag (a bracket drag returns to
    its origin, a holding drag stays in holding) and leave slots untouched.
    """
    if not _valid_length(state):
        return _reject(
            state,
            REJECT_INVALID_BRACKET,
            f"Bracket length must be a power of 2, got {len(state.positions)}",
        )
    if isinstance(event, PickUp):
        return _pick_up(state, event.slot)
    if isinstance(event, PickUpFromHolding):
        return _pick_up_from_holding(state)
    if isinstance(event, Hover):
        return _hover(state, event.slot)
    if isinstance(event, Drop):
        return _drop(state, event.slot)
    if isinstance(event, DropInHolding):
        return _drop_in_holding(state)
    if isinstance(event, Release):
        return EditorResult(state=state.idle())
    return _reject(state, REJECT_UNKNOWN_GESTURE, f"Unknown gesture: {event!r}")


# ============================================================================
# Editing session
# ============================================================================


class BracketEditor:
    """
    One user's bracket-editing session.

    Owns the current EditorState. Gestures go through `dispatch`; replacing
    the bracket wholesale only happens through the explicit `reseed`.
    """

    def __init__(
        self,
        players: Sequence[Player],
        num_seeds: int = 0,
        rng: Optional[random.Random] = None,
        positions: Optional[Sequence[Optional[int]]] = None,
    ):
        self.players = list(players)
        self.rng = rng
        self.num_seeds = num_seeds
        self.last_rejection: Optional[GestureRejection] = None
        if positions is None:
            positions = seed_bracket(self.players, num_seeds, rng)
        else:
            size = len(positions)
            if size < 2 or size & (size - 1):
                raise DrawRequestError(f"Bracket length must be a power of 2, got {size}")
            report = check_bracket_invariants(positions, None, [p.id for p in self.players])
            if not report.ok:
                raise DrawRequestError(f"Initial bracket violates invariants: {report}")
        self.state = EditorState(positions=tuple(positions))

    @property
    def valid_seed_counts(self) -> List[int]:
        return valid_seed_counts(len(self.players))

    @property
    def can_finalize(self) -> bool:
        return self.state.holding is None and self.state.is_idle

    def dispatch(self, event: GestureEvent) -> EditorResult:
        result = apply_gesture(self.state, event)
        self.state = result.state
        self.last_rejection = result.rejection
        return result

    def locate(self, player_id: int) -> Location:
        return locate(self.state, player_id)

    def reseed(self, num_seeds: int) -> EditorState:
        """Discard manual edits and holding contents and seed from scratch."""
        positions = seed_bracket(self.players, num_seeds, self.rng)
        logger.info("Reseeded bracket with %d seeds; manual edits discarded", num_seeds)
        self.num_seeds = num_seeds
        self.last_rejection = None
        self.state = EditorState(positions=tuple(positions))
        return self.state
