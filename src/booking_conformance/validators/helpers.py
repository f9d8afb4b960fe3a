"""Field-level checks shared by the domain validators.

Each helper returns a ``ValidationFailure`` when the check fails and None
when it passes, so validators can build a list of checks and drop the
passing ones with ``collect``.
"""

from collections.abc import Iterable, Sized
from typing import Any

from booking_conformance.models import FailureSeverity, ValidationFailure


def collect(checks: Iterable[ValidationFailure | None]) -> list[ValidationFailure]:
    """Drop passing checks, keeping the order of the failing ones."""
    return [check for check in checks if check is not None]


def critical(subject: str, message: str, value: Any = None) -> ValidationFailure:
    return ValidationFailure(
        severity=FailureSeverity.CRITICAL,
        subject=subject,
        message=message,
        value=value,
    )


def warning(subject: str, message: str, value: Any = None) -> ValidationFailure:
    return ValidationFailure(
        severity=FailureSeverity.WARNING,
        subject=subject,
        message=message,
        value=value,
    )


def _plain(value: Any) -> Any:
    # str-based enums compare equal to their value but render as the member name
    return getattr(value, "value", value)


def equals(subject: str, value: Any, expected: Any) -> ValidationFailure | None:
    """Check that a returned field equals the expected value.

    Args:
        subject: Field path used in the failure, e.g. ``booking.status``.
        value: Value returned by the target API.
        expected: Value the contract requires. None disables the check.

    Returns:
        A CRITICAL failure on mismatch, None otherwise.
    """
    if expected is None:
        return None
    if _plain(value) == _plain(expected):
        return None
    return critical(
        subject,
        f'{subject} has to be equal to "{_plain(expected)}", '
        f'but the provided value was: "{_plain(value)}"',
        _plain(value),
    )


def min_length(subject: str, value: Sized | None, minimum: int) -> ValidationFailure | None:
    """Check that a returned list holds at least ``minimum`` items."""
    length = len(value) if value is not None else 0
    if length >= minimum:
        return None
    return critical(
        subject,
        f"{subject} has to contain at least {minimum} item(s), but it contains {length}",
        length,
    )
