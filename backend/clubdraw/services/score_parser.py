"""
Score Parser - racket-sport scores into set counts.

Accepted inputs:
- "11-7 9-11 11-5" or "11-7, 9-11, 11-5": points per set, player A first
- {"sets": [{"a": 11, "b": 7}, ...]}: the same, already structured
- {"display": "..."} or {"score": "..."}: a wrapped score string
- "3-1" with ``sets_only``: the set count itself

Parsing is lenient about whitespace and strict about tokens: one malformed
set makes the whole score unreadable. Unreadable scores give None.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from clubdraw.models.schedule import MatchResult

ScoreInput = Union[str, Dict[str, Any], None]

SET_TOKEN = re.compile(r"^(\d+)-(\d+)$")


@dataclass(frozen=True)
class ParsedScore:
    sets: List[Tuple[int, int]]  # (player A points, player B points)

    @property
    def player_a_sets_won(self) -> int:
        return sum(1 for a, b in self.sets if a > b)

    @property
    def player_b_sets_won(self) -> int:
        return sum(1 for a, b in self.sets if b > a)

    @property
    def player_a_points(self) -> int:
        return sum(a for a, _ in self.sets)

    @property
    def player_b_points(self) -> int:
        return sum(b for _, b in self.sets)


def _sets_from_tokens(tokens: Sequence[str]) -> Optional[List[Tuple[int, int]]]:
    sets: List[Tuple[int, int]] = []
    for token in tokens:
        match = SET_TOKEN.match(token)
        if match is None:
            return None
        sets.append((int(match.group(1)), int(match.group(2))))
    return sets


def _sets_from_dicts(entries: Sequence[Any]) -> Optional[List[Tuple[int, int]]]:
    sets: List[Tuple[int, int]] = []
    for entry in entries:
        if not isinstance(entry, dict):
            return None
        try:
            a, b = int(entry.get("a", 0)), int(entry.get("b", 0))
        except (TypeError, ValueError):
            return None
        if a < 0 or b < 0:
            return None
        sets.append((a, b))
    return sets


def parse_score(score: ScoreInput) -> Optional[ParsedScore]:
    """Read a score in any accepted shape; None if it cannot be read."""
    if isinstance(score, dict):
        entries = score.get("sets")
        if isinstance(entries, list):
            sets = _sets_from_dicts(entries)
            return ParsedScore(sets) if sets else None
        score = score.get("display") or score.get("score")

    if not isinstance(score, str):
        return None
    sets = _sets_from_tokens(score.replace(",", " ").split())
    return ParsedScore(sets) if sets else None


def result_from_score(
    player_a: int,
    player_b: int,
    score: ScoreInput,
    sets_only: bool = False,
) -> Optional[MatchResult]:
    """
    Build a MatchResult from a score.

    With ``sets_only`` a single "3-1" token is read as the set count itself
    rather than the points of one set.
    """
    parsed = parse_score(score)
    if parsed is None:
        return None
    if sets_only and len(parsed.sets) == 1:
        sets_a, sets_b = parsed.sets[0]
    else:
        sets_a, sets_b = parsed.player_a_sets_won, parsed.player_b_sets_won
    return MatchResult(player_a=player_a, player_b=player_b, sets_a=sets_a, sets_b=sets_b)
