"""Core engine logic for conformance runs.

This package contains the framework-independent parts of the engine:
- Flow: concurrent, fault-isolated execution of conformance scenarios
- Step: step, question and session scenario definitions
- Guard: legal transitions of the session state machine
- Processor: guard, persist, validate and notify for one step submission
- Questions: checking submitted answers against expected answers
"""

from booking_conformance.core.guard import SessionStepGuard
from booking_conformance.core.processor import SessionStepProcessor
from booking_conformance.core.questions import StepQuestionAnswersValidator, loosely_equal

__all__ = [
    "SessionStepGuard",
    "SessionStepProcessor",
    "StepQuestionAnswersValidator",
    "loosely_equal",
]
