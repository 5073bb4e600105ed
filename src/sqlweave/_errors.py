"""Exception hierarchy for SQL translation."""

from __future__ import annotations


class SqlweaveError(Exception):
    """Base exception for sqlweave errors.

    Provides dual messaging: a sanitized user-facing message and
    internal details for logging.
    """

    def __init__(
        self,
        user_message: str,
        internal_details: str = "",
        wrapped: Exception | None = None,
    ) -> None:
        super().__init__(user_message)
        self.user_message = user_message
        self.internal_details = internal_details or user_message
        self.wrapped = wrapped

    def internal(self) -> str:
        return self.internal_details


class TranslationError(SqlweaveError):
    """Raised when an argument list cannot be translated to SQL.

    Only the first problem found during the scan is used as the message;
    ``errors`` holds every recorded problem and ``sql`` the text generated
    so far.
    """

    def __init__(
        self,
        user_message: str,
        internal_details: str = "",
        wrapped: Exception | None = None,
        *,
        sql: str | None = None,
        errors: list[str] | None = None,
    ) -> None:
        super().__init__(user_message, internal_details, wrapped)
        self.sql = sql
        self.errors = list(errors) if errors else [user_message]


class InvalidValueError(TranslationError):
    """Raised when a value does not fit the requested modifier."""


class InvalidLimitError(TranslationError):
    """Raised when a limit or offset is negative."""


class ConfigurationError(SqlweaveError):
    """Raised when the builder or context is misconfigured."""


class UnsupportedDialectFeatureError(SqlweaveError):
    """Raised when a feature is not supported by the dialect."""


# Messages recorded during a scan
ERR_MSG_ALONE_QUOTE = "Alone quote"
ERR_MSG_EXTRA_PLACEHOLDER = "Extra placeholder"
ERR_MSG_EXTRA_MODIFIER = "Extra modifier %{modifier}"
ERR_MSG_UNKNOWN_MODIFIER = "Unknown or unexpected modifier %{modifier}"
ERR_MSG_INVALID_COMBINATION = "Invalid combination of type {type} and modifier %{modifier}"
ERR_MSG_UNEXPECTED_TYPE = "Unexpected {type}"
ERR_MSG_MULTI_INSERT = 'Multi-insert array "{key}" is different'
ERR_MSG_EXPECTED_NUMBER = "Expected number, '{value}' given."
ERR_MSG_NUMBER_TOO_LARGE = "Number {value} is greater than integer."
ERR_MSG_INVALID_DATE = "Invalid date/time value '{value}'."
