"""
Bracket advancement: move a completed match's winner into the next round.

The bracket tree is implicit. A match's position i is re-derived on every call
from its round sorted by match_number; its winner goes to position i // 2 of
the next round, into team_a when i is even and team_b when i is odd. A
completed match with no next round is the final and reports the champion.

Writes are compare-and-set on the single target slot, so re-running
advancement for the same match is a no-op and two sibling matches completing
concurrently cannot clobber each other.

An integrity error records an advancement hold for the category. Until an
administrator clears it, every advancement in that category is refused.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from robobracket.errors import AdvancementHaltedError, BracketIntegrityError, SlotConflictError
from robobracket.models.match import STAGE_BRACKET, STATUS_COMPLETED, Match
from robobracket.services.match_store import MatchStore

logger = logging.getLogger(__name__)

SLOT_A = "team_a_id"
SLOT_B = "team_b_id"

OUTCOME_ADVANCED = "advanced"
OUTCOME_ALREADY_ADVANCED = "already_advanced"
OUTCOME_CHAMPION = "champion"
OUTCOME_CHAMPION_ALREADY_REPORTED = "champion_already_reported"
OUTCOME_SKIPPED = "skipped"


@dataclass
class AdvancementTarget:
    position: int  # 0-based index of the completed match within its round
    target: Optional[Match] = None
    slot: Optional[str] = None
    champion_id: Optional[int] = None
    runner_up_id: Optional[int] = None

    @property
    def is_final(self) -> bool:
        return self.target is None


@dataclass
class AdvancementOutcome:
    outcome: str
    match_id: Optional[int] = None
    target_match_id: Optional[int] = None
    slot: Optional[str] = None
    champion_id: Optional[int] = None
    runner_up_id: Optional[int] = None


def _same_match(a, b) -> bool:
    if a.id is not None and b.id is not None:
        return a.id == b.id
    return a.match_number == b.match_number


def _round_of(matches: Sequence[Match], completed: Match, round_number: int) -> List[Match]:
    return sorted(
        (
            m
            for m in matches
            if m.round == round_number
            and m.stage == completed.stage
            and m.education_level == completed.education_level
        ),
        key=lambda m: m.match_number,
    )


def locate_advancement(completed: Match, matches: Sequence[Match]) -> AdvancementTarget:
    """Where the winner of *completed* goes, given every match of its bracket."""
    current_round = _round_of(matches, completed, completed.round)
    position = next((i for i, m in enumerate(current_round) if _same_match(m, completed)), None)
    if position is None:
        raise BracketIntegrityError(
            f"match #{completed.match_number} not found in round {completed.round} of its bracket",
            match_id=completed.id,
        )

    next_round = _round_of(matches, completed, completed.round + 1)
    target_index = position // 2

    if not next_round:
        if len(current_round) != 1:
            raise BracketIntegrityError(
                f"round {completed.round} has {len(current_round)} matches but no following round",
                match_id=completed.id,
            )
        winner_id = completed.winner_id
        runner_up_id = completed.team_b_id if completed.team_a_id == winner_id else completed.team_a_id
        return AdvancementTarget(position=position, champion_id=winner_id, runner_up_id=runner_up_id)

    if len(next_round) * 2 != len(current_round):
        raise BracketIntegrityError(
            f"round {completed.round} has {len(current_round)} matches but round "
            f"{completed.round + 1} has {len(next_round)}",
            match_id=completed.id,
        )

    return AdvancementTarget(
        position=position,
        target=next_round[target_index],
        slot=SLOT_A if position % 2 == 0 else SLOT_B,
    )


def advance_winner(store: MatchStore, match: Match) -> AdvancementOutcome:
    """Advance the winner of a completed bracket match (at most once).

    Raises AdvancementHaltedError while the category has an advancement hold.
    Any other integrity error records that hold before propagating.
    """
    if match.stage != STAGE_BRACKET or match.status != STATUS_COMPLETED or match.winner_id is None:
        return AdvancementOutcome(outcome=OUTCOME_SKIPPED, match_id=match.id)

    event_id, category_id = match.event_id, match.category_id
    hold = store.get_advancement_hold(event_id, category_id)
    if hold is not None:
        raise AdvancementHaltedError(
            f"advancement halted for category '{category_id}' after match {hold.match_id}: {hold.detail}",
            match_id=match.id,
        )

    try:
        return _advance(store, match)
    except BracketIntegrityError as exc:
        store.record_advancement_hold(event_id, category_id, exc.match_id, str(exc))
        raise


def _advance(store: MatchStore, match: Match) -> AdvancementOutcome:
    match_id = match.id
    winner_id = match.winner_id
    if winner_id not in (match.team_a_id, match.team_b_id):
        raise BracketIntegrityError(
            f"match #{match.match_number} winner {winner_id} is not one of its teams",
            match_id=match_id,
        )

    matches = store.load_matches(
        match.event_id,
        match.category_id,
        stage=STAGE_BRACKET,
        education_level=match.education_level,
    )
    located = locate_advancement(match, matches)

    if located.is_final:
        reported = store.report_category_result(
            match.event_id,
            match.category_id,
            located.champion_id,
            located.runner_up_id,
            education_level=match.education_level,
        )
        if reported:
            logger.info(
                "Bracket finished event=%s category=%s level=%s: champion %s, runner-up %s",
                match.event_id,
                match.category_id,
                match.education_level,
                located.champion_id,
                located.runner_up_id,
            )
        return AdvancementOutcome(
            outcome=OUTCOME_CHAMPION if reported else OUTCOME_CHAMPION_ALREADY_REPORTED,
            match_id=match_id,
            champion_id=located.champion_id,
            runner_up_id=located.runner_up_id,
        )

    target_id = located.target.id
    target_number = located.target.match_number
    slot = located.slot
    if store.update_match(target_id, {slot: winner_id}, only_if_empty=slot):
        logger.info("Advanced team %s from match %s to match #%s (%s)", winner_id, match_id, target_number, slot)
        return AdvancementOutcome(
            outcome=OUTCOME_ADVANCED, match_id=match_id, target_match_id=target_id, slot=slot
        )

    occupant_id = getattr(store.get_match(target_id), slot)
    if occupant_id == winner_id:
        return AdvancementOutcome(
            outcome=OUTCOME_ALREADY_ADVANCED, match_id=match_id, target_match_id=target_id, slot=slot
        )

    raise SlotConflictError(
        f"match #{target_number} {slot} already holds team {occupant_id}; "
        f"refusing to overwrite with winner {winner_id} of match {match_id}",
        match_id=match_id,
        target_match_id=target_id,
        slot=slot,
        occupant_id=occupant_id,
    )


@dataclass
class ResolveSummary:
    matches_processed: int = 0
    teams_advanced: int = 0
    champions_reported: int = 0
    errors: List[Dict] = field(default_factory=list)
    halted: bool = False


def resolve_pending_advancements(store: MatchStore, event_id: int, category_id: str) -> ResolveSummary:
    """Re-run advancement for every completed bracket match of a category.

    Idempotent. Used after bulk result imports or an interrupted run. The
    first integrity error stops the pass and leaves the category on hold;
    other categories are unaffected.
    """
    completed = [
        m
        for m in store.load_matches(event_id, category_id, stage=STAGE_BRACKET)
        if m.status == STATUS_COMPLETED and m.winner_id is not None
    ]
    completed.sort(key=lambda m: (m.education_level or "", m.round, m.match_number))
    match_ids = [m.id for m in completed]

    summary = ResolveSummary()
    for match_id in match_ids:
        match = store.get_match(match_id)
        try:
            result = advance_winner(store, match)
        except BracketIntegrityError as exc:
            logger.error("Advancement failed for match %s: %s", match_id, exc)
            summary.errors.append({"match_id": match_id, "detail": str(exc)})
            summary.halted = True
            break
        summary.matches_processed += 1
        if result.outcome == OUTCOME_ADVANCED:
            summary.teams_advanced += 1
        elif result.outcome == OUTCOME_CHAMPION:
            summary.champions_reported += 1
    return summary
