"""
Bracket / qualifier generation for one event category.

Every partition is built and validated before anything is written; the
matches (and qualifier byes) are then persisted in a single commit. Bracket
byes are completed at generation time and advanced right after the commit,
exactly as a played match would be.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from sqlmodel import Session, select

from robobracket.config import DEFAULT_QUALIFIER_ROUNDS, QUALIFIER_PAIRING_STRATEGY
from robobracket.errors import BracketIntegrityError, InputError
from robobracket.models.match import STAGE_BRACKET, STAGE_GROUP, Match
from robobracket.models.qualifier_bye import QualifierBye
from robobracket.models.team import Team
from robobracket.services.bracket_advancer import AdvancementOutcome, advance_winner
from robobracket.services.bracket_builder import build_bracket, ensure_unique_team_ids, order_by_seed
from robobracket.services.match_skeleton import MatchSkeleton
from robobracket.services.match_store import MatchStore
from robobracket.services.qualifier_scheduler import get_pairing_strategy, schedule_qualifiers

logger = logging.getLogger(__name__)


class AlreadyGeneratedError(InputError):
    """The stage already has matches and regeneration was not requested."""


@dataclass
class BracketGenerationResult:
    matches: List[Match] = field(default_factory=list)
    advancements: List[AdvancementOutcome] = field(default_factory=list)
    skipped_levels: List[str] = field(default_factory=list)
    errors: List[Dict] = field(default_factory=list)  # bye advancements that failed


@dataclass
class QualifierGenerationResult:
    matches: List[Match] = field(default_factory=list)
    byes: List[QualifierBye] = field(default_factory=list)
    skipped_levels: List[str] = field(default_factory=list)


def _category_teams(session: Session, event_id: int, category_id: str) -> List[Team]:
    return list(
        session.exec(
            select(Team)
            .where(Team.event_id == event_id, Team.category_id == category_id)
            .order_by(Team.id)
        ).all()
    )


def _ranked_teams(
    session: Session, event_id: int, category_id: str, team_ids: Optional[Sequence[int]]
) -> List[Team]:
    """Ranked entrants: the caller's explicit order, else by seed (unseeded last)."""
    teams = _category_teams(session, event_id, category_id)
    if team_ids is None:
        return order_by_seed(teams)

    ensure_unique_team_ids(team_ids)
    by_id = {t.id: t for t in teams}
    unknown = [tid for tid in team_ids if tid not in by_id]
    if unknown:
        raise InputError(f"teams not registered in category '{category_id}': {unknown}")
    return [by_id[tid] for tid in team_ids]


def _partition_by_level(teams: List[Team]) -> Dict[str, List[Team]]:
    partitions: Dict[str, List[Team]] = {}
    for team in teams:
        if team.education_level is None:
            logger.warning("Team %s has no education level; left out of split generation", team.id)
            continue
        partitions.setdefault(team.education_level, []).append(team)
    return partitions


def _ensure_stage_empty(store: MatchStore, event_id: int, category_id: str, stage: str, replace: bool) -> None:
    if replace:
        return
    if store.load_matches(event_id, category_id, stage=stage):
        raise AlreadyGeneratedError(
            f"{stage} matches already exist for category '{category_id}'; regenerate with replace=true"
        )


def _persist(
    store: MatchStore,
    event_id: int,
    category_id: str,
    stage: str,
    skeletons: List[MatchSkeleton],
    byes: Sequence[Tuple[Optional[str], int, int]] = (),
    replace: bool = False,
) -> Tuple[List[Match], List[QualifierBye]]:
    session = store.session
    try:
        if replace:
            removed = store.delete_matches(event_id, category_id, stage)
            if removed:
                logger.info("Replacing %d %s matches for event=%s category=%s", removed, stage, event_id, category_id)
        matches = store.create_matches(skeletons)
        bye_rows: List[QualifierBye] = []
        for level, round_number, team_id in byes:
            bye_rows.extend(store.record_byes(event_id, category_id, [(round_number, team_id)], education_level=level))
        session.commit()
    except Exception:
        session.rollback()
        raise
    for row in matches:
        session.refresh(row)
    for row in bye_rows:
        session.refresh(row)
    return matches, bye_rows


def generate_bracket(
    session: Session,
    event_id: int,
    category_id: str,
    team_ids: Optional[Sequence[int]] = None,
    size: Optional[int] = None,
    split_by_education: bool = False,
    replace: bool = False,
) -> BracketGenerationResult:
    """Generate (and persist) the elimination bracket of a category."""
    store = MatchStore(session)
    _ensure_stage_empty(store, event_id, category_id, STAGE_BRACKET, replace)
    ranked = _ranked_teams(session, event_id, category_id, team_ids)
    result = BracketGenerationResult()

    skeletons: List[MatchSkeleton] = []
    if split_by_education:
        minimum = max(size or 2, 2)
        for level, level_teams in sorted(_partition_by_level(ranked).items()):
            if len(level_teams) < minimum:
                logger.warning(
                    "Skipping %s bracket for category '%s': %d teams, need %d",
                    level,
                    category_id,
                    len(level_teams),
                    minimum,
                )
                result.skipped_levels.append(level)
                continue
            skeletons.extend(
                build_bracket(
                    event_id,
                    category_id,
                    [t.id for t in level_teams],
                    size=size,
                    education_level=level,
                    first_match_number=len(skeletons) + 1,
                )
            )
        if not skeletons:
            raise InputError(f"need at least {minimum} teams in some education level")
    else:
        if not ranked:
            raise InputError(f"no teams registered in category '{category_id}'")
        skeletons = build_bracket(event_id, category_id, [t.id for t in ranked], size=size)

    matches, _ = _persist(store, event_id, category_id, STAGE_BRACKET, skeletons, replace=replace)
    result.matches = matches

    bye_ids = [m.id for m in matches if m.winner_id is not None]
    for match_id in bye_ids:
        try:
            result.advancements.append(advance_winner(store, store.get_match(match_id)))
        except BracketIntegrityError as exc:
            logger.error("Bye advancement failed for match %s: %s", match_id, exc)
            result.errors.append({"match_id": match_id, "detail": str(exc)})
            break

    for row in result.matches:
        session.refresh(row)
    return result


def generate_qualifiers(
    session: Session,
    event_id: int,
    category_id: str,
    rounds: Optional[int] = None,
    strategy_name: Optional[str] = None,
    seed: Optional[int] = None,
    split_by_education: bool = False,
    replace: bool = False,
) -> QualifierGenerationResult:
    """Generate (and persist) the group-stage qualifier rounds of a category.

    *seed* makes the initial shuffle reproducible.
    """
    rounds = DEFAULT_QUALIFIER_ROUNDS if rounds is None else rounds
    strategy = get_pairing_strategy(strategy_name or QUALIFIER_PAIRING_STRATEGY)
    rng = random.Random(seed)

    store = MatchStore(session)
    _ensure_stage_empty(store, event_id, category_id, STAGE_GROUP, replace)
    teams = _category_teams(session, event_id, category_id)
    result = QualifierGenerationResult()

    if split_by_education:
        partitions = sorted(_partition_by_level(teams).items())
    else:
        partitions = [(None, teams)]

    skeletons: List[MatchSkeleton] = []
    byes: List[Tuple[Optional[str], int, int]] = []
    for level, level_teams in partitions:
        if split_by_education and len(level_teams) < 2:
            logger.warning("Skipping %s qualifiers for category '%s': fewer than 2 teams", level, category_id)
            result.skipped_levels.append(level)
            continue
        plan = schedule_qualifiers(
            event_id,
            category_id,
            [t.id for t in level_teams],
            rounds=rounds,
            strategy=strategy,
            rng=rng,
            education_level=level,
            first_match_number=len(skeletons) + 1,
        )
        skeletons.extend(plan.matches)
        byes.extend((level, round_number, team_id) for round_number, team_id in plan.byes)

    if split_by_education and not skeletons:
        raise InputError("need at least 2 teams in some education level")

    result.matches, result.byes = _persist(
        store, event_id, category_id, STAGE_GROUP, skeletons, byes=byes, replace=replace
    )
    return result
