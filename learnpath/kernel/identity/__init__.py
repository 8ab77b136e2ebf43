"""
Identity Core - anonymous learner identifiers.
"""

from learnpath.kernel.identity.identifier_resolver import IdentifierResolver, parse_learner_id

__all__ = [
    "IdentifierResolver",
    "parse_learner_id",
]
