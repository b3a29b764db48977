# modules/performance/workflow.py
"""
Evaluation status workflow:

    draft -> submitted -> approved
                       -> rejected

approved / rejected are terminal. Re-setting the current status is a no-op.
"""
from typing import Dict, FrozenSet

from modules.common.errors import FieldValidationError
from .models import EvaluationStatus

TRANSITIONS: Dict[EvaluationStatus, FrozenSet[EvaluationStatus]] = {
    EvaluationStatus.DRAFT: frozenset({EvaluationStatus.SUBMITTED}),
    EvaluationStatus.SUBMITTED: frozenset({EvaluationStatus.APPROVED, EvaluationStatus.REJECTED}),
    EvaluationStatus.APPROVED: frozenset(),
    EvaluationStatus.REJECTED: frozenset(),
}

# a new evaluation starts in one of these
INITIAL_STATUSES = frozenset({EvaluationStatus.DRAFT, EvaluationStatus.SUBMITTED})

# moving into these is a review decision
REVIEW_DECISIONS = frozenset({EvaluationStatus.APPROVED, EvaluationStatus.REJECTED})


def can_transition(current: EvaluationStatus, new: EvaluationStatus) -> bool:
    return current == new or new in TRANSITIONS[current]


def check_transition(current: EvaluationStatus, new: EvaluationStatus) -> None:
    if can_transition(current, new):
        return
    allowed = sorted(s.value for s in TRANSITIONS[current])
    if allowed:
        message = f"Cannot change status from '{current.value}' to '{new.value}'; allowed: {', '.join(allowed)}"
    else:
        message = f"Evaluation is '{current.value}' and can no longer change status"
    raise FieldValidationError("status", message)
