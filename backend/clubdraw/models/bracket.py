"""
Bracket data structures.

Slots are 1-based: slot k is positions[k - 1]. First-round match k is made of
slots (2k - 1, 2k). A slot holds a player id or BYE (None).
"""

from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple, Union

BYE = None

Positions = Tuple[Optional[int], ...]


def match_number(slot: int) -> int:
    """First-round match number (1-based) containing `slot`."""
    return (slot + 1) // 2


def match_slots(match_no: int) -> Tuple[int, int]:
    return 2 * match_no - 1, 2 * match_no


def sibling_slot(slot: int) -> int:
    """The other slot of the same first-round match."""
    return slot + 1 if slot % 2 == 1 else slot - 1


def slot_value(positions: Positions, slot: int) -> Optional[int]:
    return positions[slot - 1]


def is_double_bye(positions: Positions, match_no: int) -> bool:
    a, b = match_slots(match_no)
    return positions[a - 1] is BYE and positions[b - 1] is BYE


# ============================================================================
# Location (where a player currently sits in an editor state)
# ============================================================================


@dataclass(frozen=True)
class SlotLocation:
    slot: int


@dataclass(frozen=True)
class HoldingLocation:
    pass


@dataclass(frozen=True)
class Unplaced:
    pass


Location = Union[SlotLocation, HoldingLocation, Unplaced]


# ============================================================================
# Editor state
# ============================================================================


@dataclass(frozen=True)
class DragState:
    player_id: int
    from_slot: Optional[int]  # None when picked from holding
    from_holding: bool = False
    hover_slot: Optional[int] = None


@dataclass(frozen=True)
class EditorState:
    positions: Positions
    holding: Optional[int] = None
    drag: Optional[DragState] = None

    @property
    def bracket_size(self) -> int:
        return len(self.positions)

    @property
    def is_idle(self) -> bool:
        return self.drag is None

    def with_positions(self, positions: Positions) -> "EditorState":
        return replace(self, positions=tuple(positions))

    def idle(self) -> "EditorState":
        return replace(self, drag=None)


# ============================================================================
# Gesture events
# ============================================================================


@dataclass(frozen=True)
class PickUp:
    slot: int


@dataclass(frozen=True)
class PickUpFromHolding:
    pass


@dataclass(frozen=True)
class Hover:
    slot: Optional[int]


@dataclass(frozen=True)
class Drop:
    slot: int


@dataclass(frozen=True)
class DropInHolding:
    pass


@dataclass(frozen=True)
class Release:
    pass


GestureEvent = Union[PickUp, PickUpFromHolding, Hover, Drop, DropInHolding, Release]


@dataclass(frozen=True)
class GestureRejection:
    reason: str
    slot: Optional[int] = None
    message: str = ""


@dataclass(frozen=True)
class EditorResult:
    state: EditorState
    rejection: Optional[GestureRejection] = None
    changed: bool = False


@dataclass
class InvariantReport:
    ok: bool
    double_bye_matches: List[int] = field(default_factory=list)
    missing_players: List[int] = field(default_factory=list)
    duplicate_players: List[int] = field(default_factory=list)
    unknown_players: List[int] = field(default_factory=list)
