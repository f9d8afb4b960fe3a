"""Custom exceptions for the conformance engine.

This module defines the exception hierarchy used throughout the engine to
signal conditions that must reach the caller: state machine misuse, stale
session writes, storage failures and transport failures against the target
API.

Failures of the target API to honour the booking contract are NOT exceptions.
They are reported as ``ValidationFailure`` entries inside results. Only a
broken protocol usage by the caller (for example submitting a step out of
order) or an infrastructure failure surfaces as one of the errors below.

Examples:
    Handling an illegal step transition::

        from booking_conformance.exceptions import IllegalTransitionError

        try:
            await processor.process(session, step, submission)
        except IllegalTransitionError as e:
            logger.warning("step.rejected", session_id=e.session_id, reason=e.reason)
            return Response(status_code=409)

    Detecting a lost update::

        from booking_conformance.exceptions import StaleSessionError

        try:
            await processor.process(session, step, submission)
        except StaleSessionError:
            session = await store.get(session.id)
"""


class ConformanceError(Exception):
    """Base exception for all conformance engine errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        """Initialize the exception with a message.

        Args:
            message: Human-readable error description.
        """
        self.message = message
        super().__init__(message)


class IllegalTransitionError(ConformanceError):
    """A step was submitted that the session is not allowed to enter.

    Raised by ``SessionStepGuard.check`` when the step's scenario is not
    permitted by the session's granted capabilities, or when the step is not
    the legal successor of the session's current step. It is always raised
    before any state mutation and is never absorbed into a result object.

    Attributes:
        message: Human-readable error description.
        session_id: The session that attempted the transition.
        step_id: The step that was rejected.
        reason: Short machine-readable reason ("not_permitted" or "out_of_order").
    """

    def __init__(self, message: str, session_id: str, step_id: str, reason: str) -> None:
        """Initialize the transition error with details.

        Args:
            message: Human-readable error description.
            session_id: The session that attempted the transition.
            step_id: The step that was rejected.
            reason: Short machine-readable reason.
        """
        super().__init__(message)
        self.session_id = session_id
        self.step_id = step_id
        self.reason = reason


class UnknownStepError(ConformanceError):
    """A step or scenario id is not part of the static registration tables."""

    def __init__(self, message: str, identifier: str) -> None:
        super().__init__(message)
        self.identifier = identifier


class SessionNotFoundError(ConformanceError):
    """The session store holds no session with the given id."""

    def __init__(self, message: str, session_id: str) -> None:
        super().__init__(message)
        self.session_id = session_id


class StaleSessionError(ConformanceError):
    """A session write was based on an outdated version of the session.

    The store keeps a monotonically increasing ``version`` per session. A
    write carrying an ``expected_version`` that no longer matches is rejected
    so two concurrent step submissions for the same session cannot silently
    overwrite each other.

    Attributes:
        message: Human-readable error description.
        session_id: The session being written.
        expected_version: Version the writer read.
        actual_version: Version currently stored.
    """

    def __init__(
        self,
        message: str,
        session_id: str,
        expected_version: int,
        actual_version: int,
    ) -> None:
        """Initialize the stale write error with details.

        Args:
            message: Human-readable error description.
            session_id: The session being written.
            expected_version: Version the writer read.
            actual_version: Version currently stored.
        """
        super().__init__(message)
        self.session_id = session_id
        self.expected_version = expected_version
        self.actual_version = actual_version


class StorageError(ConformanceError):
    """Session storage backend operation failed.

    Attributes:
        message: Human-readable error description.
        cause: The underlying exception that caused the storage error.
    """

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        """Initialize the storage error with details.

        Args:
            message: Human-readable error description.
            cause: The underlying exception that caused the storage error.
        """
        super().__init__(message)
        self.cause = cause


class TargetApiError(ConformanceError):
    """The target API could not be reached or returned an unreadable body.

    There is no retry layer: the scenario that triggered the call catches
    this at its boundary and reports it as a CRITICAL failure.

    Attributes:
        message: Human-readable error description.
        method: HTTP method of the failed call.
        url: URL of the failed call.
        cause: The underlying transport exception, if any.
    """

    def __init__(
        self,
        message: str,
        method: str,
        url: str,
        cause: Exception | None = None,
    ) -> None:
        """Initialize the target API error with details.

        Args:
            message: Human-readable error description.
            method: HTTP method of the failed call.
            url: URL of the failed call.
            cause: The underlying transport exception, if any.
        """
        super().__init__(message)
        self.method = method
        self.url = url
        self.cause = cause


class ScenarioSetupError(ConformanceError):
    """A scenario could not prepare the bookings it needs.

    Raised when the target API offers no bookable availability for the
    configured product. The flow reports it as a CRITICAL failure of the
    scenario that needed the booking.
    """
