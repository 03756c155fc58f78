"""
Request/response models shared by several routers.
"""

import random
from typing import List, Optional

from pydantic import BaseModel, Field

from clubdraw.models.player import Player
from clubdraw.models.schedule import MatchResult, Round
from clubdraw.services.draw_rules import DrawRequestError
from clubdraw.services.score_parser import result_from_score


class PlayerIn(BaseModel):
    id: int
    rating: Optional[int] = None
    name: Optional[str] = None

    def to_player(self) -> Player:
        return Player(id=self.id, rating=self.rating, name=self.name)


class PairingOut(BaseModel):
    player_a: int
    player_b: int


class RoundOut(BaseModel):
    round_number: int
    pairings: List[PairingOut]
    bye_player: Optional[int] = None


class MatchResultIn(BaseModel):
    """A recorded result. Either set counts or a score string like "11-7 9-11 11-5"."""

    player_a: int
    player_b: int
    sets_a: int = Field(0, ge=0)
    sets_b: int = Field(0, ge=0)
    score: Optional[str] = None
    forfeit_a: bool = False
    forfeit_b: bool = False

    def to_result(self) -> MatchResult:
        if self.score and not (self.forfeit_a or self.forfeit_b):
            parsed = result_from_score(self.player_a, self.player_b, self.score)
            if parsed is None:
                raise DrawRequestError(f"Unreadable score: {self.score!r}")
            return parsed
        return MatchResult(
            player_a=self.player_a,
            player_b=self.player_b,
            sets_a=self.sets_a,
            sets_b=self.sets_b,
            forfeit_a=self.forfeit_a,
            forfeit_b=self.forfeit_b,
        )


def to_players(players: List[PlayerIn]) -> List[Player]:
    return [p.to_player() for p in players]


def round_out(round_: Round) -> RoundOut:
    return RoundOut(
        round_number=round_.round_number,
        pairings=[PairingOut(player_a=p.player_a, player_b=p.player_b) for p in round_.pairings],
        bye_player=round_.bye_player,
    )


def make_rng(random_seed: Optional[int]) -> Optional[random.Random]:
    """Deterministic random source when the client asks for one."""
    return random.Random(random_seed) if random_seed is not None else None
