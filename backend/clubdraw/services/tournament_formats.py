"""
Tournament Formats - closed set of tournament types and their initial structure.

Types:
- PLAYOFF: single-elimination bracket
- ROUND_ROBIN: whole field plays each other once
- MULTI_ROUND_ROBINS: field split into groups, a round robin per group
- SWISS: fixed number of rounds paired by points
- PRELIMINARY_WITH_FINAL_PLAYOFF: groups, then a playoff of the qualifiers
- PRELIMINARY_WITH_FINAL_ROUND_ROBIN: groups, then a round robin of the qualifiers

Every type-specific decision is made in `plan_tournament` and
`build_final_stage`; there is no per-type registry.

Qualification for the final stage of preliminary formats:
1. Auto-qualified players (skip the preliminary groups)
2. Every group winner
3. Remaining places filled from 2nd place, then 3rd, ..., by rating DESC
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from clubdraw.config import DEFAULT_GROUP_SIZE, DEFAULT_SWISS_ROUNDS
from clubdraw.models.bracket import BYE
from clubdraw.models.player import Player, order_by_rating
from clubdraw.models.schedule import Round, Standing
from clubdraw.services.bracket_seeder import bracket_seed_positions, seed_bracket
from clubdraw.services.draw_rules import DrawRequestError, calculate_bracket_size
from clubdraw.services.round_robin import generate_round_robin_schedule
from clubdraw.services.swiss_pairing import pair_swiss_round
from clubdraw.utils.group_partition import DistributionPolicy, partition_players

logger = logging.getLogger(__name__)

PLAYOFF = "PLAYOFF"
ROUND_ROBIN = "ROUND_ROBIN"
MULTI_ROUND_ROBINS = "MULTI_ROUND_ROBINS"
SWISS = "SWISS"
PRELIMINARY_WITH_FINAL_PLAYOFF = "PRELIMINARY_WITH_FINAL_PLAYOFF"
PRELIMINARY_WITH_FINAL_ROUND_ROBIN = "PRELIMINARY_WITH_FINAL_ROUND_ROBIN"


# ============================================================================
# Format variants
# ============================================================================


@dataclass(frozen=True)
class Playoff:
    num_seeds: int = 0
    type: str = field(default=PLAYOFF, init=False)


@dataclass(frozen=True)
class RoundRobin:
    type: str = field(default=ROUND_ROBIN, init=False)


@dataclass(frozen=True)
class MultiRoundRobins:
    group_size: int = DEFAULT_GROUP_SIZE
    policy: DistributionPolicy = "snake"
    type: str = field(default=MULTI_ROUND_ROBINS, init=False)


@dataclass(frozen=True)
class Swiss:
    number_of_rounds: int = DEFAULT_SWISS_ROUNDS
    type: str = field(default=SWISS, init=False)


@dataclass(frozen=True)
class PreliminaryWithFinalPlayoff:
    group_size: int = DEFAULT_GROUP_SIZE
    final_size: int = 4
    auto_qualified: Tuple[int, ...] = ()
    policy: DistributionPolicy = "snake"
    type: str = field(default=PRELIMINARY_WITH_FINAL_PLAYOFF, init=False)


@dataclass(frozen=True)
class PreliminaryWithFinalRoundRobin:
    group_size: int = DEFAULT_GROUP_SIZE
    final_size: int = 6
    auto_qualified: Tuple[int, ...] = ()
    policy: DistributionPolicy = "snake"
    type: str = field(default=PRELIMINARY_WITH_FINAL_ROUND_ROBIN, init=False)


TournamentFormat = Union[
    Playoff,
    RoundRobin,
    MultiRoundRobins,
    Swiss,
    PreliminaryWithFinalPlayoff,
    PreliminaryWithFinalRoundRobin,
]

Preliminary = (PreliminaryWithFinalPlayoff, PreliminaryWithFinalRoundRobin)

_FORMATS_BY_TYPE = {
    PLAYOFF: Playoff,
    ROUND_ROBIN: RoundRobin,
    MULTI_ROUND_ROBINS: MultiRoundRobins,
    SWISS: Swiss,
    PRELIMINARY_WITH_FINAL_PLAYOFF: PreliminaryWithFinalPlayoff,
    PRELIMINARY_WITH_FINAL_ROUND_ROBIN: PreliminaryWithFinalRoundRobin,
}


def parse_format(type_name: str, options: Optional[Mapping[str, Any]] = None) -> TournamentFormat:
    """Build a format variant from its type name and options."""
    cls = _FORMATS_BY_TYPE.get(type_name)
    if cls is None:
        raise DrawRequestError(f"Unknown tournament type: {type_name}")
    kwargs = dict(options or {})
    if "auto_qualified" in kwargs:
        kwargs["auto_qualified"] = tuple(kwargs["auto_qualified"])
    try:
        return cls(**kwargs)
    except TypeError as e:
        raise DrawRequestError(f"Invalid options for {type_name}: {e}") from e


# ============================================================================
# Plans
# ============================================================================


@dataclass
class TournamentPlan:
    type: str
    positions: Optional[List[Optional[int]]] = None  # PLAYOFF
    groups: List[List[int]] = field(default_factory=list)  # round-robin groups
    schedules: List[List[Round]] = field(default_factory=list)  # one per group
    first_round: Optional[Round] = None  # SWISS
    number_of_rounds: Optional[int] = None  # SWISS
    auto_qualified: List[int] = field(default_factory=list)


@dataclass
class FinalStage:
    type: str
    qualifiers: List[int]
    positions: Optional[List[Optional[int]]] = None  # final playoff
    schedule: Optional[List[Round]] = None  # final round robin


def _validate_field(players: Sequence[Player]) -> None:
    ids = [p.id for p in players]
    if len(set(ids)) != len(ids):
        raise DrawRequestError("Player ids must be unique")
    if len(ids) < 2:
        raise DrawRequestError(f"A tournament needs at least 2 players, got {len(ids)}")


def _plan_groups(
    players: Sequence[Player], group_size: int, policy: DistributionPolicy, rng: Optional[random.Random]
) -> Tuple[List[List[int]], List[List[Round]]]:
    grouping = partition_players(players, group_size, policy, rng)
    schedules = [generate_round_robin_schedule(group) for group in grouping.groups]
    return grouping.groups, schedules


def _plan_preliminary(
    fmt: Union[PreliminaryWithFinalPlayoff, PreliminaryWithFinalRoundRobin],
    players: Sequence[Player],
    rng: Optional[random.Random],
) -> TournamentPlan:
    ids = {p.id for p in players}
    auto = list(dict.fromkeys(fmt.auto_qualified))
    outside = [pid for pid in auto if pid not in ids]
    if outside:
        raise DrawRequestError(f"Auto-qualified players are not in the field: {outside}")
    if isinstance(fmt, PreliminaryWithFinalPlayoff):
        if fmt.final_size < 2 or fmt.final_size & (fmt.final_size - 1):
            raise DrawRequestError(f"Final playoff size must be a power of 2, got {fmt.final_size}")
    elif fmt.final_size < 2:
        raise DrawRequestError(f"Final round robin needs at least 2 players, got {fmt.final_size}")

    preliminary_field = [p for p in players if p.id not in set(auto)]
    groups, schedules = _plan_groups(preliminary_field, fmt.group_size, fmt.policy, rng)
    if len(auto) + len(groups) > fmt.final_size:
        raise DrawRequestError(
            f"Final stage of {fmt.final_size} cannot hold {len(auto)} auto-qualified "
            f"players plus {len(groups)} group winners"
        )
    if len(auto) + len(preliminary_field) < fmt.final_size:
        raise DrawRequestError(f"Not enough players to fill a final stage of {fmt.final_size}")

    return TournamentPlan(type=fmt.type, groups=groups, schedules=schedules, auto_qualified=auto)


def plan_tournament(
    fmt: TournamentFormat, players: Sequence[Player], rng: Optional[random.Random] = None
) -> TournamentPlan:
    """
    Build the initial structure for a tournament of type *fmt*.

    Raises:
        DrawRequestError on invalid input for the chosen type
    """
    _validate_field(players)

    if isinstance(fmt, Playoff):
        plan = TournamentPlan(type=fmt.type, positions=seed_bracket(players, fmt.num_seeds, rng))
    elif isinstance(fmt, RoundRobin):
        ids = [p.id for p in players]
        plan = TournamentPlan(type=fmt.type, groups=[ids], schedules=[generate_round_robin_schedule(ids)])
    elif isinstance(fmt, MultiRoundRobins):
        groups, schedules = _plan_groups(players, fmt.group_size, fmt.policy, rng)
        plan = TournamentPlan(type=fmt.type, groups=groups, schedules=schedules)
    elif isinstance(fmt, Swiss):
        if fmt.number_of_rounds < 1 or fmt.number_of_rounds > len(players) - 1:
            raise DrawRequestError(
                f"Swiss rounds must be between 1 and {len(players) - 1} for {len(players)} players, "
                f"got {fmt.number_of_rounds}"
            )
        plan = TournamentPlan(
            type=fmt.type,
            first_round=pair_swiss_round(players, round_number=1),
            number_of_rounds=fmt.number_of_rounds,
        )
    elif isinstance(fmt, Preliminary):
        plan = _plan_preliminary(fmt, players, rng)
    else:
        raise DrawRequestError(f"Unsupported tournament format: {fmt!r}")

    logger.info("Planned %s tournament for %d players", plan.type, len(players))
    return plan


# ============================================================================
# Final stage of preliminary formats
# ============================================================================


def select_qualifiers(
    auto_qualified: Sequence[int],
    group_standings: Sequence[Sequence[Standing]],
    final_size: int,
    ratings: Mapping[int, Optional[int]],
) -> List[int]:
    """
    Pick the final-stage field.

    Args:
        auto_qualified: Players qualified without playing a group
        group_standings: Ranked standings per group (position 1 first)
        final_size: Number of final-stage places
        ratings: Rating per player for ordering candidates at the same place

    Returns:
        Qualified player ids in qualification order
    """
    qualified: List[int] = list(dict.fromkeys(auto_qualified))
    for standings in group_standings:
        if standings and standings[0].player_id not in qualified:
            qualified.append(standings[0].player_id)

    deepest = max((len(s) for s in group_standings), default=0)
    place_index = 1
    while len(qualified) < final_size and place_index < deepest:
        candidates = [
            standings[place_index].player_id
            for standings in group_standings
            if place_index < len(standings) and standings[place_index].player_id not in qualified
        ]
        candidates.sort(key=lambda pid: -(ratings.get(pid) or 0))
        qualified.extend(candidates[: final_size - len(qualified)])
        place_index += 1

    return qualified


def _final_bracket(
    seeded: List[int], rest: List[int], rng: Optional[random.Random]
) -> List[Optional[int]]:
    """Seeded players by seed number, the rest shuffled into the remaining seed numbers."""
    rest = list(rest)
    (rng or random).shuffle(rest)
    ordered = seeded + rest
    size = calculate_bracket_size(len(ordered))
    positions: List[Optional[int]] = [BYE] * size
    for slot_index, seed_no in enumerate(bracket_seed_positions(size)):
        if seed_no <= len(ordered):
            positions[slot_index] = ordered[seed_no - 1]
    return positions


def build_final_stage(
    fmt: TournamentFormat,
    players: Sequence[Player],
    group_standings: Sequence[Sequence[Standing]],
    rng: Optional[random.Random] = None,
) -> FinalStage:
    """
    Build the final stage of a preliminary format from the group standings.

    Final playoff seeding: auto-qualified players by rating, then group
    winners by rating take the top seeds; everyone else is placed at random.

    Raises:
        DrawRequestError if *fmt* has no final stage or fewer than 2 qualify
    """
    if not isinstance(fmt, Preliminary):
        raise DrawRequestError(f"{fmt.type} tournaments have no final stage")

    by_id: Dict[int, Player] = {p.id: p for p in players}
    ratings = {pid: p.rating for pid, p in by_id.items()}
    qualifiers = select_qualifiers(fmt.auto_qualified, group_standings, fmt.final_size, ratings)
    unknown = [pid for pid in qualifiers if pid not in by_id]
    if unknown:
        raise DrawRequestError(f"Qualified players are not in the field: {unknown}")
    if len(qualifiers) < 2:
        raise DrawRequestError(f"At least 2 players must qualify, got {len(qualifiers)}")

    if isinstance(fmt, PreliminaryWithFinalRoundRobin):
        stage = FinalStage(type=ROUND_ROBIN, qualifiers=qualifiers, schedule=generate_round_robin_schedule(qualifiers))
    else:
        auto = set(fmt.auto_qualified)
        winners = {s[0].player_id for s in group_standings if s}
        prequalified = [p.id for p in order_by_rating(by_id[pid] for pid in qualifiers if pid in auto)]
        first_places = [
            p.id for p in order_by_rating(by_id[pid] for pid in qualifiers if pid in winners and pid not in auto)
        ]
        seeded = prequalified + first_places
        rest = [pid for pid in qualifiers if pid not in set(seeded)]
        stage = FinalStage(type=PLAYOFF, qualifiers=qualifiers, positions=_final_bracket(seeded, rest, rng))

    logger.info("Final stage (%s) built with %d qualifiers", stage.type, len(qualifiers))
    return stage
