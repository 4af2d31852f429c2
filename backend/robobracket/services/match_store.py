"""
Match storage over a SQLModel session.

Generation writes (create_matches, record_byes, delete_matches) only flush;
the caller commits once so a failed generation leaves nothing behind.
update_match, report_category_result and the advancement-hold writes are
single atomic steps and commit immediately.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from robobracket.models.advancement_hold import AdvancementHold
from robobracket.models.category_result import CategoryResult
from robobracket.models.event import Event
from robobracket.models.match import STAGE_GROUP, Match
from robobracket.models.qualifier_bye import QualifierBye
from robobracket.services.match_skeleton import MatchSkeleton

logger = logging.getLogger(__name__)

_ANY = object()


class MatchStore:
    def __init__(self, session: Session):
        self.session = session

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_match(self, match_id: int) -> Optional[Match]:
        return self.session.get(Match, match_id)

    def load_matches(
        self,
        event_id: int,
        category_id: str,
        stage: Optional[str] = None,
        education_level: Any = _ANY,
    ) -> List[Match]:
        """Matches of one category ordered by match_number.

        *education_level* filters to one partition when given (None selects
        the unpartitioned matches); omit it to load every partition.
        """
        query = select(Match).where(Match.event_id == event_id, Match.category_id == category_id)
        if stage is not None:
            query = query.where(Match.stage == stage)
        if education_level is not _ANY:
            if education_level is None:
                query = query.where(Match.education_level.is_(None))
            else:
                query = query.where(Match.education_level == education_level)
        return list(self.session.exec(query.order_by(Match.stage, Match.match_number)).all())

    def next_match_number(self, event_id: int, category_id: str, stage: str) -> int:
        current = self.session.exec(
            select(func.max(Match.match_number)).where(
                Match.event_id == event_id,
                Match.category_id == category_id,
                Match.stage == stage,
            )
        ).one()
        return (current or 0) + 1

    def load_byes(self, event_id: int, category_id: str) -> List[QualifierBye]:
        return list(
            self.session.exec(
                select(QualifierBye)
                .where(QualifierBye.event_id == event_id, QualifierBye.category_id == category_id)
                .order_by(QualifierBye.education_level, QualifierBye.round)
            ).all()
        )

    def get_category_result(
        self, event_id: int, category_id: str, education_level: Optional[str] = None
    ) -> Optional[CategoryResult]:
        return self.session.exec(
            select(CategoryResult).where(
                CategoryResult.event_id == event_id,
                CategoryResult.category_id == category_id,
                CategoryResult.education_level == (education_level or ""),
            )
        ).first()

    def load_category_results(self, event_id: int, category_id: str) -> List[CategoryResult]:
        return list(
            self.session.exec(
                select(CategoryResult)
                .where(CategoryResult.event_id == event_id, CategoryResult.category_id == category_id)
                .order_by(CategoryResult.education_level)
            ).all()
        )

    # ------------------------------------------------------------------
    # Generation writes (flushed, committed by the caller)
    # ------------------------------------------------------------------

    def create_matches(self, skeletons: Sequence[MatchSkeleton]) -> List[Match]:
        matches = [
            Match(
                event_id=s.event_id,
                category_id=s.category_id,
                round=s.round,
                match_number=s.match_number,
                stage=s.stage,
                education_level=s.education_level,
                team_a_id=s.team_a_id,
                team_b_id=s.team_b_id,
                status=s.status,
                winner_id=s.winner_id,
                score_a=s.score_a,
                score_b=s.score_b,
                completed_at=datetime.utcnow() if s.winner_id is not None else None,
            )
            for s in skeletons
        ]
        self.session.add_all(matches)
        self.session.flush()
        return matches

    def record_byes(
        self,
        event_id: int,
        category_id: str,
        byes: Iterable[Tuple[int, int]],
        education_level: Optional[str] = None,
    ) -> List[QualifierBye]:
        rows = [
            QualifierBye(
                event_id=event_id,
                category_id=category_id,
                round=round_number,
                team_id=team_id,
                education_level=education_level,
            )
            for round_number, team_id in byes
        ]
        self.session.add_all(rows)
        self.session.flush()
        return rows

    def delete_matches(self, event_id: int, category_id: str, stage: str) -> int:
        """Destructive regeneration: drop a stage's matches (and its byes, or its results and hold)."""
        matches = self.load_matches(event_id, category_id, stage=stage)
        for match in matches:
            self.session.delete(match)

        if stage == STAGE_GROUP:
            extras = self.load_byes(event_id, category_id)
        else:
            extras = list(self.load_category_results(event_id, category_id))
            hold = self.get_advancement_hold(event_id, category_id)
            if hold is not None:
                extras.append(hold)
        for row in extras:
            self.session.delete(row)

        # Deletes must reach the database before replacement rows reuse match numbers
        self.session.flush()
        if stage != STAGE_GROUP:
            self._refresh_winners_confirmed(event_id)
        logger.debug(
            "Deleted %d %s matches (+%d dependent rows) for event=%s category=%s",
            len(matches),
            stage,
            len(extras),
            event_id,
            category_id,
        )
        return len(matches)

    def _refresh_winners_confirmed(self, event_id: int) -> None:
        event = self.session.get(Event, event_id)
        if event is None:
            return
        remaining = self.session.exec(select(CategoryResult.id).where(CategoryResult.event_id == event_id)).first()
        confirmed = remaining is not None
        if event.winners_confirmed != confirmed:
            event.winners_confirmed = confirmed
            self.session.add(event)
            self.session.flush()

    # ------------------------------------------------------------------
    # Advancement holds
    # ------------------------------------------------------------------

    def get_advancement_hold(self, event_id: int, category_id: str) -> Optional[AdvancementHold]:
        return self.session.exec(
            select(AdvancementHold).where(
                AdvancementHold.event_id == event_id,
                AdvancementHold.category_id == category_id,
            )
        ).first()

    def record_advancement_hold(
        self, event_id: int, category_id: str, match_id: Optional[int], detail: str
    ) -> AdvancementHold:
        """Stop automatic advancement for a category. The first hold wins."""
        existing = self.get_advancement_hold(event_id, category_id)
        if existing is not None:
            return existing

        hold = AdvancementHold(event_id=event_id, category_id=category_id, match_id=match_id, detail=detail)
        self.session.add(hold)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            return self.get_advancement_hold(event_id, category_id)
        self.session.refresh(hold)
        logger.error("Advancement halted for event=%s category=%s: %s", event_id, category_id, detail)
        return hold

    def clear_advancement_hold(self, event_id: int, category_id: str) -> bool:
        hold = self.get_advancement_hold(event_id, category_id)
        if hold is None:
            return False
        self.session.delete(hold)
        self.session.commit()
        logger.info("Advancement hold cleared for event=%s category=%s", event_id, category_id)
        return True

    # ------------------------------------------------------------------
    # Atomic writes
    # ------------------------------------------------------------------

    def update_match(
        self,
        match_id: int,
        fields: Dict[str, Any],
        only_if_empty: Optional[str] = None,
    ) -> bool:
        """Write *fields* on one match in a single UPDATE.

        With *only_if_empty* the write is conditional on that column being
        NULL at write time (compare-and-set). Returns whether a row changed.
        """
        stmt = update(Match).where(Match.id == match_id)
        if only_if_empty is not None:
            stmt = stmt.where(getattr(Match, only_if_empty).is_(None))
        result = self.session.connection().execute(stmt.values(**fields))
        self.session.commit()
        return result.rowcount == 1

    def report_category_result(
        self,
        event_id: int,
        category_id: str,
        champion_id: int,
        runner_up_id: Optional[int],
        education_level: Optional[str] = None,
    ) -> bool:
        """Record the category champion. Idempotent per (event, category, education level).

        Returns True only for the call that actually stored the result.
        """
        if self.get_category_result(event_id, category_id, education_level) is not None:
            return False

        self.session.add(
            CategoryResult(
                event_id=event_id,
                category_id=category_id,
                education_level=education_level or "",
                champion_team_id=champion_id,
                runner_up_team_id=runner_up_id,
            )
        )
        event = self.session.get(Event, event_id)
        if event is not None and not event.winners_confirmed:
            event.winners_confirmed = True
            self.session.add(event)
        try:
            self.session.commit()
        except IntegrityError:
            # Another writer stored the result first
            self.session.rollback()
            logger.info("Result for event=%s category=%s already reported concurrently", event_id, category_id)
            return False
        return True
