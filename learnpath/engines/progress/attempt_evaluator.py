"""
Attempt Evaluator - records attempts and applies the advancement rule.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from learnpath.engines.catalog.catalog_store import CatalogStore
from learnpath.engines.progress.progress_tracker import ProgressTracker
from learnpath.kernel.exceptions import NotFound
from learnpath.kernel.identity.identifier_resolver import IdentifierResolver
from learnpath.kernel.models.progress import Attempt
from learnpath.logging_config import get_logger
from learnpath.schemas.common import parse_payload
from learnpath.schemas.progress import AttemptCreate

logger = get_logger(__name__)


@dataclass
class AttemptOutcome:
    learner_id: uuid.UUID
    attempt_id: uuid.UUID
    saved_at: datetime
    advanced: bool


class AttemptEvaluator:
    """
    Appends attempts to the log and advances the learner's cursor on a pass.

    The pass rule is fixed: both score and max_score present, max_score > 0,
    and score / max_score * 100 >= 70. Failing attempts are still recorded.
    """

    PASS_THRESHOLD_PERCENT = 70

    def __init__(self, session: AsyncSession):
        self.session = session
        self.resolver = IdentifierResolver(session)
        self.catalog = CatalogStore(session)
        self.tracker = ProgressTracker(session)

    @classmethod
    def is_passing(cls, score: Optional[float], max_score: Optional[float]) -> bool:
        if score is None or max_score is None or max_score <= 0:
            return False
        return score / max_score * 100 >= cls.PASS_THRESHOLD_PERCENT

    async def record_attempt(self, payload: Union[AttemptCreate, Mapping[str, Any]]) -> AttemptOutcome:
        """
        Record an attempt and advance the cursor if it passes.

        Raises:
            InvalidPayload: Schema violation
            InvalidIdentifier: Malformed learner id
            NotFound: Unknown lesson (no attempt is written)
        """
        request = parse_payload(AttemptCreate, payload)
        learner_id = await self.resolver.resolve(request.user_id)

        lesson = await self.catalog.get_lesson(request.lesson_id)
        if lesson is None:
            raise NotFound("lesson", request.lesson_id)

        attempt = Attempt(
            learner_id=learner_id,
            lesson_id=lesson.id,
            attempt_type=request.attempt_type.value,
            score=request.score,
            max_score=request.max_score,
            duration_sec=request.duration_sec,
            weak_tags=list(request.weak_tags),
        )
        self.session.add(attempt)
        await self.session.flush()
        await self.session.refresh(attempt)

        advanced = False
        if self.is_passing(request.score, request.max_score):
            await self.tracker.advance_if_eligible(learner_id, lesson.track_id, lesson.position)
            advanced = True

        logger.info(
            "Attempt recorded",
            extra={"attempt_type": attempt.attempt_type, "advanced": advanced},
        )
        return AttemptOutcome(
            learner_id=learner_id,
            attempt_id=attempt.id,
            saved_at=attempt.created_at,
            advanced=advanced,
        )
