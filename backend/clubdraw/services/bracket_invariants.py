"""
Bracket Invariant Verifier
==========================
Structural checks over first-round bracket slots plus the holding slot.

Invariants:
  - No first-round match holds two BYEs
  - Every field player appears exactly once across slots + holding,
    and nobody outside the field appears at all
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Dict, Iterable, List, Optional, Sequence

from clubdraw.models.bracket import BYE, InvariantReport, is_double_bye


def double_bye_matches(positions: Sequence[Optional[int]]) -> List[int]:
    return [m for m in range(1, len(positions) // 2 + 1) if is_double_bye(tuple(positions), m)]


def check_bracket_invariants(
    positions: Sequence[Optional[int]],
    holding: Optional[int] = None,
    field_ids: Optional[Iterable[int]] = None,
) -> InvariantReport:
    """Run both checks. Without *field_ids* only duplicates are checked for placement."""
    report = InvariantReport(ok=True)
    report.double_bye_matches = double_bye_matches(positions)

    placed = [pid for pid in positions if pid is not BYE]
    if holding is not None:
        placed.append(holding)
    counts = Counter(placed)
    report.duplicate_players = sorted(pid for pid, n in counts.items() if n > 1)

    if field_ids is not None:
        expected = set(field_ids)
        report.missing_players = sorted(expected - counts.keys())
        report.unknown_players = sorted(counts.keys() - expected)

    report.ok = not (
        report.double_bye_matches
        or report.duplicate_players
        or report.missing_players
        or report.unknown_players
    )
    return report


def report_to_dict(report: InvariantReport) -> Dict[str, Any]:
    return {
        "ok": report.ok,
        "double_bye_matches": report.double_bye_matches,
        "missing_players": report.missing_players,
        "duplicate_players": report.duplicate_players,
        "unknown_players": report.unknown_players,
    }
