"""
Progress Engine - learner cursors and attempt-driven advancement.

Rules:
- A learner starts every track at position 1
- The cursor only moves forward: max(stored, attempted position + 1)
- An attempt advances the cursor when score / max_score >= 70%
- "Next lesson" is the lesson at exactly the cursor position, if authored
"""

from learnpath.engines.progress.progress_tracker import (
    NextLesson,
    ProgressSummary,
    ProgressTracker,
    TrackCursorState,
)
from learnpath.engines.progress.attempt_evaluator import AttemptEvaluator, AttemptOutcome

__all__ = [
    "NextLesson",
    "ProgressSummary",
    "ProgressTracker",
    "TrackCursorState",
    "AttemptEvaluator",
    "AttemptOutcome",
]
