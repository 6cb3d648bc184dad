"""Exceptions for the grouping orchestrator."""


class GroupingError(Exception):
    """Base class for grouping failures."""

    pass


class GroupingInputError(GroupingError):
    """Raised for unusable input. Never retried."""

    pass


class EmptyToolListError(GroupingInputError):
    """Raised when there are no tools to group."""

    def __init__(self) -> None:
        super().__init__("Cannot create groups from empty tool list")


class InvalidConstraintsError(GroupingInputError):
    """Raised when the grouping constraints themselves are malformed.

    Attributes:
        errors: Individual constraint problems.
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__(f"Invalid grouping constraints: {'; '.join(errors)}")


class GroupingResponseError(GroupingError):
    """Raised when the final-assignment reply cannot be turned into groups.

    The message is written for the LLM: it is sent back verbatim so the
    reply can be corrected in the same conversation.
    """

    pass


class ConstraintViolationError(GroupingError):
    """Raised when parsed groups fail validation.

    Attributes:
        errors: Validator error strings.
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__(f"Generated groups failed validation: {', '.join(errors)}")


class GroupingExhaustedError(GroupingError):
    """Raised when every attempt failed.

    Attributes:
        attempts: Number of full attempts made.
        last_error: The error that ended the final attempt.
    """

    def __init__(self, attempts: int, last_error: Exception | None) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Failed to generate valid groups after {attempts} attempts. "
            f"Last error: {last_error}"
        )
