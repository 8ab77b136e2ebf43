"""
Identifier resolver - maps a caller-supplied learner id to a stored learner.
"""

import uuid
from typing import Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from learnpath.kernel.exceptions import InvalidIdentifier
from learnpath.kernel.models.base import generate_uuid
from learnpath.kernel.models.learner import Learner
from learnpath.kernel.upsert import dialect_insert

CandidateId = Union[str, uuid.UUID, None]


def parse_learner_id(candidate: CandidateId) -> Optional[uuid.UUID]:
    """
    Parse a learner identifier.

    Returns None for an absent id (None or blank string).

    Raises:
        InvalidIdentifier: If the value is present but not a UUID
    """
    if candidate is None:
        return None
    if isinstance(candidate, uuid.UUID):
        return candidate
    if isinstance(candidate, str):
        if not candidate.strip():
            return None
        try:
            return uuid.UUID(candidate.strip())
        except ValueError:
            raise InvalidIdentifier(candidate)
    raise InvalidIdentifier(candidate)


class IdentifierResolver:
    """
    Resolves learner identifiers, creating learners on first reference.

    Clients may present ids they generated themselves; unknown but well-formed
    ids are accepted and stored. Resolution inserts at most one row and never
    updates one.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def resolve(self, candidate: CandidateId = None) -> uuid.UUID:
        """
        Return the learner id for ``candidate``, creating the learner if needed.

        Args:
            candidate: A UUID (or its string form), or None for a new learner

        Returns:
            The id of a learner row that exists in the current transaction

        Raises:
            InvalidIdentifier: If the candidate is present but malformed
        """
        learner_id = parse_learner_id(candidate)
        if learner_id is None:
            learner_id = generate_uuid()

        stmt = (
            dialect_insert(self.session, Learner)
            .values(id=learner_id)
            .on_conflict_do_nothing(index_elements=["id"])
        )
        await self.session.execute(stmt)
        return learner_id
