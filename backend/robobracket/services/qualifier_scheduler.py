"""
Qualifier (group stage) pairing.

Teams are shuffled once, then each round a pairing strategy turns the current
arrangement into matchups plus at most one sitting-out team, and hands back the
arrangement for the next round. Pre-existing seeding is ignored on purpose.

Strategies:
- RotatingPairing: adjacent pairs (t0,t1), (t2,t3)...; the last team sits out
  when the count is odd; then the last team moves to the front. Spreads byes
  evenly but may repeat matchups once rounds exceed roughly n/2.
- CircleMethodPairing: classic round robin polygon (first slot fixed, others
  rotate); no repeat matchups within n-1 rounds (n rounded up to even).
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

from robobracket.errors import InputError
from robobracket.models.match import STAGE_GROUP
from robobracket.services.bracket_builder import ensure_unique_team_ids
from robobracket.services.match_skeleton import MatchSkeleton

logger = logging.getLogger(__name__)


@dataclass
class RoundPairing:
    pairs: List[Tuple[int, int]]
    bye: Optional[int]
    arrangement: List[Optional[int]]  # Arrangement to feed into the next round


class PairingStrategy(Protocol):
    def next_round(self, arrangement: List[Optional[int]]) -> RoundPairing:
        ...


class RotatingPairing:
    """Adjacent pairing with last-to-front rotation."""

    def next_round(self, arrangement: List[Optional[int]]) -> RoundPairing:
        teams = list(arrangement)
        pairs = [(teams[i], teams[i + 1]) for i in range(0, len(teams) - 1, 2)]
        bye = teams[-1] if len(teams) % 2 == 1 else None
        rotated = teams[-1:] + teams[:-1]
        return RoundPairing(pairs=pairs, bye=bye, arrangement=rotated)


class CircleMethodPairing:
    """Round robin circle method. Odd counts get a phantom slot whose opponent sits out."""

    def next_round(self, arrangement: List[Optional[int]]) -> RoundPairing:
        slots = list(arrangement)
        if len(slots) % 2 == 1:
            slots.append(None)

        n = len(slots)
        pairs: List[Tuple[int, int]] = []
        bye = None
        for i in range(n // 2):
            a, b = slots[i], slots[n - 1 - i]
            if a is None:
                bye = b
            elif b is None:
                bye = a
            else:
                pairs.append((a, b))

        rotated = slots[:1] + slots[-1:] + slots[1:-1]
        return RoundPairing(pairs=pairs, bye=bye, arrangement=rotated)


PAIRING_STRATEGIES: Dict[str, type] = {
    "rotating": RotatingPairing,
    "circle": CircleMethodPairing,
}


def get_pairing_strategy(name: str) -> PairingStrategy:
    try:
        return PAIRING_STRATEGIES[name]()
    except KeyError:
        raise InputError(
            f"unknown pairing strategy '{name}' (expected one of: {', '.join(sorted(PAIRING_STRATEGIES))})"
        ) from None


@dataclass
class QualifierPlan:
    matches: List[MatchSkeleton] = field(default_factory=list)
    byes: List[Tuple[int, int]] = field(default_factory=list)  # (round, team_id)


def validate_qualifier_request(team_ids: Sequence[int], rounds: int) -> None:
    if rounds < 1:
        raise InputError(f"rounds must be a positive integer, got {rounds}")
    if len(team_ids) < 2:
        raise InputError(f"need at least 2 teams for qualifiers, got {len(team_ids)}")
    ensure_unique_team_ids(team_ids)


def schedule_qualifiers(
    event_id: int,
    category_id: str,
    team_ids: Sequence[int],
    rounds: int = 3,
    strategy: Optional[PairingStrategy] = None,
    rng: Optional[random.Random] = None,
    education_level: Optional[str] = None,
    first_match_number: int = 1,
) -> QualifierPlan:
    """Generate *rounds* rounds of group-stage matches.

    match_number runs sequentially across all rounds from *first_match_number*.
    Pass a seeded *rng* for a reproducible draw.
    """
    validate_qualifier_request(team_ids, rounds)
    strategy = strategy or RotatingPairing()
    rng = rng or random.Random()

    arrangement: List[Optional[int]] = list(team_ids)
    rng.shuffle(arrangement)

    plan = QualifierPlan()
    match_number = first_match_number
    for round_number in range(1, rounds + 1):
        pairing = strategy.next_round(arrangement)
        for team_a_id, team_b_id in pairing.pairs:
            plan.matches.append(
                MatchSkeleton(
                    event_id=event_id,
                    category_id=category_id,
                    round=round_number,
                    match_number=match_number,
                    stage=STAGE_GROUP,
                    team_a_id=team_a_id,
                    team_b_id=team_b_id,
                    education_level=education_level,
                )
            )
            match_number += 1
        if pairing.bye is not None:
            plan.byes.append((round_number, pairing.bye))
            logger.info("Qualifier round %d: team %s has a bye", round_number, pairing.bye)
        arrangement = pairing.arrangement

    logger.info(
        "Scheduled qualifiers event=%s category=%s level=%s: %d teams, %d rounds, %d matches",
        event_id,
        category_id,
        education_level,
        len(team_ids),
        rounds,
        len(plan.matches),
    )
    return plan
