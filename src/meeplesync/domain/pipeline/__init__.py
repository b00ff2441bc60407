from __future__ import annotations

from .state_machine import (
    TRANSITIONS,
    IllegalTransitionError,
    PipelineStateMachine,
    TransitionPlan,
    TransitionResult,
    allowed_targets,
    is_legal,
    plan_transition,
)

__all__ = [
    "TRANSITIONS",
    "IllegalTransitionError",
    "PipelineStateMachine",
    "TransitionPlan",
    "TransitionResult",
    "allowed_targets",
    "is_legal",
    "plan_transition",
]
