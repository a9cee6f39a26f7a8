"""
HireBridge - Custom Exceptions.

Defines a hierarchy of domain-specific exceptions for clean error handling.
"""


class HireBridgeError(Exception):
    """Base exception for all HireBridge errors."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


# -----------------------------------------------------------------------------
# Configuration Errors
# -----------------------------------------------------------------------------

class ConfigurationError(HireBridgeError):
    """Raised when configuration is invalid or missing."""
    pass


class MissingAPIKeyError(ConfigurationError):
    """Raised when a required API key is missing."""

    def __init__(self, key_name: str):
        super().__init__(
            message=f"Missing required API key: {key_name}",
            details="Please set this in your .env file or environment variables",
        )


class UnsupportedRoleError(ConfigurationError):
    """Raised when a role is not one of the supported interview tracks."""

    def __init__(self, role: object):
        self.role = role
        super().__init__(message=f"Unsupported role: {role}")


class EmptyBankError(ConfigurationError):
    """Raised when a role resolves to an empty question set."""

    def __init__(self, role: object):
        self.role = role
        super().__init__(message=f"No questions configured for role: {role}")


# -----------------------------------------------------------------------------
# LLM Errors
# -----------------------------------------------------------------------------

class LLMError(HireBridgeError):
    """Base exception for LLM-related errors."""
    pass


class LLMConnectionError(LLMError):
    """Raised when unable to connect to the LLM service."""

    def __init__(self, service: str, reason: str):
        super().__init__(
            message=f"Failed to connect to {service}",
            details=reason,
        )


class LLMRateLimitError(LLMError):
    """Raised when rate limited by the LLM service."""

    def __init__(self, service: str, retry_after: int | None = None):
        self.retry_after = retry_after
        super().__init__(
            message=f"Rate limited by {service}",
            details=f"Retry after {retry_after}s" if retry_after else None,
        )


class LLMTimeoutError(LLMError):
    """Raised when the LLM service does not answer in time."""

    def __init__(self, service: str, timeout: float):
        super().__init__(
            message=f"{service} timed out",
            details=f"No response within {timeout}s",
        )


class LLMResponseError(LLMError):
    """Raised when the LLM returns an invalid or blocked response."""
    pass


# -----------------------------------------------------------------------------
# Interview Session Errors
# -----------------------------------------------------------------------------

class SessionError(HireBridgeError):
    """Base exception for interview session errors."""
    pass


class InvalidSessionError(SessionError):
    """Raised when an interview ID does not resolve to a live session."""

    def __init__(self, session_id: str | None):
        self.session_id = session_id
        super().__init__(
            message=f"Invalid interview session: {session_id}",
            details="Start a new interview",
        )


class AnswerAlreadyRecordedError(SessionError):
    """Raised when an answer is recorded twice on the same question."""

    def __init__(self, question: str):
        super().__init__(
            message="Answer already recorded",
            details=question[:80],
        )
