"""
Bracket submission and round structure.

Submission is the hand-off point between the editor and persistence: the
holding slot must be empty and the slots must satisfy the bracket invariants.
Accepted brackets are normalized so a BYE always sits in the second slot of
its match, and BYE matches are won automatically by their only player.

Advancement: the winner of match p in round r moves to match (p-1)//2+1 of
round r+1. Odd positions feed member 1, even positions feed member 2.
"""

import logging
from dataclasses import dataclass, field
from math import log2
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from clubdraw.models.bracket import BYE
from clubdraw.services.bracket_invariants import check_bracket_invariants, report_to_dict
from clubdraw.services.draw_rules import DrawRequestError

logger = logging.getLogger(__name__)

MatchKey = Tuple[int, int]  # (round, position)


class BracketSubmissionError(DrawRequestError):
    """The bracket cannot be handed to persistence in its current state."""

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message)
        self.details = details or {}


@dataclass
class BracketMatch:
    round: int
    position: int
    member1_id: Optional[int] = None
    member2_id: Optional[int] = None
    winner_id: Optional[int] = None
    next_match_position: Optional[int] = None  # None for the final

    @property
    def is_bye(self) -> bool:
        """First-round match with exactly one player."""
        return self.round == 1 and (self.member1_id is None) != (self.member2_id is None)


@dataclass
class BracketSubmission:
    positions: List[Optional[int]]
    first_round: List[BracketMatch] = field(default_factory=list)
    byes: List[int] = field(default_factory=list)  # players advancing without playing


def normalize_byes(positions: Sequence[Optional[int]]) -> List[Optional[int]]:
    """Move every BYE to the second slot of its match."""
    normalized = list(positions)
    for i in range(0, len(normalized) - 1, 2):
        if normalized[i] is BYE and normalized[i + 1] is not BYE:
            normalized[i], normalized[i + 1] = normalized[i + 1], BYE
    return normalized


def _next_position(position: int) -> int:
    return (position - 1) // 2 + 1


def _validate_size(positions: Sequence[Optional[int]]) -> int:
    size = len(positions)
    if size < 2 or size & (size - 1):
        raise DrawRequestError(f"Bracket length must be a power of 2, got {size}")
    return size


def _first_round(positions: Sequence[Optional[int]], total_rounds: int) -> List[BracketMatch]:
    matches: List[BracketMatch] = []
    for index in range(0, len(positions), 2):
        position = index // 2 + 1
        member1, member2 = positions[index], positions[index + 1]
        match = BracketMatch(
            round=1,
            position=position,
            member1_id=member1,
            member2_id=member2,
            next_match_position=_next_position(position) if total_rounds > 1 else None,
        )
        if match.is_bye:
            match.winner_id = member1 if member1 is not None else member2
        matches.append(match)
    return matches


def prepare_bracket_submission(
    positions: Sequence[Optional[int]],
    holding: Optional[int] = None,
    field_ids: Optional[Iterable[int]] = None,
) -> BracketSubmission:
    """
    Validate a finished bracket and derive its first round.

    Args:
        positions: Editor slots (player id or None for BYE)
        holding: Holding slot occupant, must be None
        field_ids: Expected players; enables the missing/unknown check

    Returns:
        BracketSubmission with BYE-normalized positions, first-round matches
        and the players that advance on a BYE

    Raises:
        DrawRequestError if the length is not a power of two
        BracketSubmissionError if holding is occupied or invariants are broken
    """
    size = _validate_size(positions)
    if holding is not None:
        raise BracketSubmissionError(
            f"Player {holding} is still in the holding slot; place them before submitting",
            {"holding": holding},
        )

    report = check_bracket_invariants(positions, None, field_ids)
    if not report.ok:
        raise BracketSubmissionError("Bracket violates structural invariants", report_to_dict(report))

    normalized = normalize_byes(positions)
    first_round = _first_round(normalized, int(log2(size)))
    byes = [m.member1_id for m in first_round if m.is_bye]
    logger.info("Bracket accepted: %d slots, %d byes", size, len(byes))
    return BracketSubmission(positions=normalized, first_round=first_round, byes=byes)


# ============================================================================
# Round tree
# ============================================================================


def advance_winner(matches: Dict[MatchKey, BracketMatch], round_no: int, position: int, winner_id: int) -> Optional[BracketMatch]:
    """
    Record *winner_id* for match (round_no, position) and fill the next-round slot.

    Returns:
        The next-round match, or None when the final was decided

    Raises:
        DrawRequestError if the match does not exist or the winner is not in it
    """
    match = matches.get((round_no, position))
    if match is None:
        raise DrawRequestError(f"No match at round {round_no}, position {position}")
    if winner_id not in (match.member1_id, match.member2_id):
        raise DrawRequestError(
            f"Player {winner_id} is not in match round {round_no}, position {position}"
        )

    match.winner_id = winner_id
    if match.next_match_position is None:
        return None

    next_match = matches[(round_no + 1, match.next_match_position)]
    if position % 2 == 1:
        next_match.member1_id = winner_id
    else:
        next_match.member2_id = winner_id
    return next_match


def build_bracket_rounds(
    positions: Sequence[Optional[int]],
    reported_winners: Optional[Mapping[MatchKey, int]] = None,
) -> List[BracketMatch]:
    """
    Build every match of the elimination tree, rounds 1..log2(size).

    BYE winners advance automatically; *reported_winners* (keyed by
    (round, position)) are applied round by round.

    Returns:
        Matches ordered by round, then position
    """
    size = _validate_size(positions)
    total_rounds = int(log2(size))
    normalized = normalize_byes(positions)

    matches: Dict[MatchKey, BracketMatch] = {(1, m.position): m for m in _first_round(normalized, total_rounds)}
    for round_no in range(2, total_rounds + 1):
        for position in range(1, size // 2 ** round_no + 1):
            matches[(round_no, position)] = BracketMatch(
                round=round_no,
                position=position,
                next_match_position=_next_position(position) if round_no < total_rounds else None,
            )

    reported = dict(reported_winners or {})
    unknown = [key for key in reported if key not in matches]
    if unknown:
        raise DrawRequestError(f"Reported winners for matches outside the bracket: {sorted(unknown)}")

    for round_no in range(1, total_rounds + 1):
        for position in range(1, size // 2 ** round_no + 1):
            match = matches[(round_no, position)]
            winner = reported.get((round_no, position), match.winner_id)
            if winner is not None:
                advance_winner(matches, round_no, position, winner)

    return [matches[key] for key in sorted(matches)]
