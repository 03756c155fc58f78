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
    InvariantReport,
    Location,
    PickUp,
    PickUpFromHolding,
    Release,
    SlotLocation,
    Unplaced,
)
from clubdraw.models.player import Player, order_by_rating
from clubdraw.models.schedule import MatchResult, Pairing, Round, Standing

__all__ = [
    "BYE",
    "DragState",
    "Drop",
    "DropInHolding",
    "EditorResult",
    "EditorState",
    "GestureEvent",
    "GestureRejection",
    "HoldingLocation",
    "Hover",
    "InvariantReport",
    "Location",
    "PickUp",
    "PickUpFromHolding",
    "Release",
    "SlotLocation",
    "Unplaced",
    "Player",
    "order_by_rating",
    "MatchResult",
    "Pairing",
    "Round",
    "Standing",
]
