from dataclasses import dataclass
from typing import Iterable, List, Optional


@dataclass(frozen=True)
class Player:
    id: int
    rating: Optional[int] = None  # Read-only here; ordering and seeding only
    name: Optional[str] = None


def rating_sort_key(player: Player) -> tuple:
    """Rating DESC (unrated lowest), then id ASC."""
    has_rating = player.rating is not None
    return (
        0 if has_rating else 1,
        -(player.rating if has_rating else 0),
        player.id,
    )


def order_by_rating(players: Iterable[Player]) -> List[Player]:
    """Return players strongest first. Unrated players sort after every rated one."""
    return sorted(players, key=rating_sort_key)
