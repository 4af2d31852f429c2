"""
Single-elimination bracket generation.

Builds every match of the bracket up front. Round 1 is filled from the ranked
team list through seed_order(); later rounds start empty and are filled by the
bracket advancer as feeding matches complete. No parent/child pointers are
stored: a match's place in the tree is its position within its round when
sorted by match_number.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, List, Optional, Sequence

from robobracket.errors import InputError
from robobracket.models.match import STAGE_BRACKET, STATUS_COMPLETED
from robobracket.services.match_skeleton import MatchSkeleton
from robobracket.services.seed_order import is_power_of_two, next_power_of_two, seed_order

logger = logging.getLogger(__name__)


def ensure_unique_team_ids(team_ids: Sequence[int]) -> None:
    seen = set()
    duplicates = []
    for team_id in team_ids:
        if team_id in seen and team_id not in duplicates:
            duplicates.append(team_id)
        seen.add(team_id)
    if duplicates:
        raise InputError(f"duplicate team ids: {duplicates}")


def order_by_seed(teams: Iterable) -> list:
    """Teams by explicit seed ascending, unseeded teams last in their given order."""
    return sorted(teams, key=lambda t: (t.seed is None, t.seed if t.seed is not None else 0))


def round_name(matches_in_round: int) -> str:
    """Display name of a bracket round from how many matches it holds."""
    if matches_in_round == 1:
        return "Final"
    if matches_in_round == 2:
        return "Semifinal"
    if matches_in_round == 4:
        return "Quarterfinal"
    return f"Round of {matches_in_round * 2}"


def resolve_bracket_size(team_count: int, size: Optional[int] = None) -> int:
    """
    Bracket size for *team_count* entrants.

    Without an explicit size the bracket is the next power of two and the
    missing positions become byes. An explicit size is a cut line: only the
    top *size* teams enter, so at least that many are required.
    """
    if team_count < 1:
        raise InputError("need at least 1 team to build a bracket")
    if size is None:
        return next_power_of_two(team_count)
    if size < 2 or not is_power_of_two(size):
        raise InputError(f"bracket size must be a power of two >= 2, got {size}")
    if team_count < size:
        raise InputError(f"need at least {size} teams for a bracket of {size}, got {team_count}")
    return size


def build_bracket(
    event_id: int,
    category_id: str,
    team_ids: Sequence[int],
    size: Optional[int] = None,
    education_level: Optional[str] = None,
    first_match_number: int = 1,
) -> List[MatchSkeleton]:
    """Build all matches of a single-elimination bracket.

    *team_ids* is the ranked list, best first. Returned skeletons are ordered
    round by round with match_number assigned sequentially from
    *first_match_number*. Round-1 matches holding a single team are returned
    already completed with that team as winner (bye).
    """
    ensure_unique_team_ids(team_ids)
    size = resolve_bracket_size(len(team_ids), size)
    entrants = list(team_ids[:size])

    total_rounds = int(math.log2(size))
    matches: List[MatchSkeleton] = []
    match_number = first_match_number
    for round_number in range(1, total_rounds + 1):
        for _ in range(size >> round_number):
            matches.append(
                MatchSkeleton(
                    event_id=event_id,
                    category_id=category_id,
                    round=round_number,
                    match_number=match_number,
                    stage=STAGE_BRACKET,
                    education_level=education_level,
                )
            )
            match_number += 1

    order = seed_order(size)
    first_round = matches[: size // 2]
    byes = 0
    for i, match in enumerate(first_round):
        seed_a, seed_b = order[2 * i], order[2 * i + 1]
        match.team_a_id = entrants[seed_a - 1] if seed_a <= len(entrants) else None
        match.team_b_id = entrants[seed_b - 1] if seed_b <= len(entrants) else None

        if match.is_bye:
            match.status = STATUS_COMPLETED
            match.winner_id = match.team_a_id if match.team_a_id is not None else match.team_b_id
            match.score_a = 0
            match.score_b = 0
            byes += 1
        elif match.team_a_id is None and match.team_b_id is None:
            match.status = STATUS_COMPLETED

    logger.info(
        "Built bracket event=%s category=%s level=%s: %d teams, size %d, %d rounds, %d matches, %d byes",
        event_id,
        category_id,
        education_level,
        len(entrants),
        size,
        total_rounds,
        len(matches),
        byes,
    )
    return matches
