"""Checking submitted answers against a step's questions.

For every question declared on a step the expected answer is resolved
concurrently and compared with the submitted answer:

    no answer submitted     -> WARNING  "Missing answer for question"
    answer differs          -> ERROR    "Wrong answer for question"
    answer matches          -> nothing

The comparison is loose: a numeric string matches the number it spells
(``"3" == 3``) and booleans match 1 and 0. See ``loosely_equal``.

Results are aggregated in question declaration order regardless of which
evaluation finishes first.
"""

import asyncio
import re
from collections.abc import Iterable
from typing import Any

from booking_conformance.core.step import Question, Step
from booking_conformance.models import (
    FailureSeverity,
    QuestionAnswer,
    ValidationFailure,
    ValidationResult,
)
from booking_conformance.observability.logging import get_logger

logger = get_logger(__name__)

MISSING_ANSWER = "Missing answer for question"
WRONG_ANSWER = "Wrong answer for question"

# String forms that coerce to a number; anything else never equals a number
DECIMAL = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")
INFINITY = re.compile(r"[+-]?Infinity")
RADIX = re.compile(r"0([xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)")


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        if DECIMAL.fullmatch(text):
            return float(text)
        if INFINITY.fullmatch(text):
            return float(text.replace("Infinity", "inf"))
        if RADIX.fullmatch(text):
            return float(int(text, 0))
        return None
    return None


def loosely_equal(submitted: Any, expected: Any) -> bool:
    """Compare two answers with type coercion between strings, numbers and booleans.

    Two strings, or two values of the same non-scalar type, compare strictly.
    A string and a number (or boolean) compare by numeric value, with an
    empty string counting as 0. None only equals None.

    Examples:
        >>> loosely_equal("3", 3)
        True
        >>> loosely_equal(" 2.50 ", 2.5)
        True
        >>> loosely_equal("3", "3.0")
        False
        >>> loosely_equal(None, "")
        False
    """
    if submitted is None or expected is None:
        return submitted is None and expected is None
    if submitted == expected:
        return True
    if isinstance(submitted, str) and isinstance(expected, str):
        return False

    left = _as_number(submitted)
    right = _as_number(expected)
    if left is None or right is None:
        return False
    return left == right


class StepQuestionAnswersValidator:
    """Validates a batch of submitted answers against a step's questions."""

    async def validate(self, step: Step, answers: Iterable[QuestionAnswer]) -> ValidationResult:
        """Check every question of ``step`` against the submitted answers.

        Args:
            step: The step whose questions are checked.
            answers: Submitted answers. When several answers carry the same
                question id the first one is used.

        Returns:
            A fresh ValidationResult; per-question failures appear in the
            order the questions are declared on the step.
        """
        submitted: dict[str, QuestionAnswer] = {}
        for answer in answers:
            submitted.setdefault(answer.question_id, answer)

        question_results = await asyncio.gather(
            *(
                self._validate_question(question, submitted.get(question.id))
                for question in step.questions
            )
        )

        result = ValidationResult()
        for question_result in question_results:
            result.merge(question_result)
        return result

    async def _validate_question(
        self,
        question: Question,
        answer: QuestionAnswer | None,
    ) -> ValidationResult:
        result = ValidationResult()

        if answer is None:
            result.add_warning(
                ValidationFailure(
                    severity=FailureSeverity.WARNING,
                    subject=question.id,
                    message=MISSING_ANSWER,
                    value=None,
                )
            )
            return result

        try:
            expected = await question.answer()
        except Exception as e:
            logger.error(
                "question.evaluation_failed",
                question_id=question.id,
                error=str(e),
                error_type=type(e).__name__,
            )
            result.add_error(
                ValidationFailure(
                    severity=FailureSeverity.CRITICAL,
                    subject=question.id,
                    message=f"Unable to resolve the expected answer: {e}",
                    value=answer.value,
                )
            )
            return result

        if not loosely_equal(answer.value, expected):
            result.add_error(
                ValidationFailure(
                    severity=FailureSeverity.ERROR,
                    subject=question.id,
                    message=WRONG_ANSWER,
                    value=answer.value,
                )
            )

        return result
