from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class Pairing:
    player_a: int
    player_b: int

    def key(self) -> Tuple[int, int]:
        """Unordered pair key."""
        return pair_key(self.player_a, self.player_b)


@dataclass
class Round:
    round_number: int
    pairings: List[Pairing] = field(default_factory=list)
    bye_player: Optional[int] = None  # Sits out this round

    def players(self) -> List[int]:
        result: List[int] = []
        for p in self.pairings:
            result.append(p.player_a)
            result.append(p.player_b)
        return result


@dataclass(frozen=True)
class MatchResult:
    player_a: int
    player_b: int
    sets_a: int = 0
    sets_b: int = 0
    forfeit_a: bool = False  # player_a forfeited
    forfeit_b: bool = False

    def winner(self) -> Optional[int]:
        if self.forfeit_a:
            return self.player_b
        if self.forfeit_b:
            return self.player_a
        if self.sets_a > self.sets_b:
            return self.player_a
        if self.sets_b > self.sets_a:
            return self.player_b
        return None


@dataclass
class Standing:
    player_id: int
    wins: int = 0
    losses: int = 0
    sets_won: int = 0
    sets_lost: int = 0
    position: int = 0

    @property
    def set_difference(self) -> int:
        return self.sets_won - self.sets_lost


def pair_key(a: int, b: int) -> Tuple[int, int]:
    return (a, b) if a <= b else (b, a)
