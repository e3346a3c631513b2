"""
Core Exception Hierarchy for autoshadow

Every error carries an ErrorCode, optional recovery suggestions and an
ErrorContext for log correlation. Configuration and authentication errors
are fatal; other fetch, store and parse errors are recovered by the component
that hits them (the watcher skips a cycle, the filter chain treats the filter
as having no opinion, the code heuristic reports no match).
"""

import time
import uuid
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(Enum):
    """Numeric error codes, grouped by the subsystem that raises them."""

    # Listing and page fetches (1000-1999)
    FETCH_CONNECTION_FAILED = 1001
    FETCH_TIMEOUT = 1002
    FETCH_RATE_LIMITED = 1005
    FETCH_INVALID_RESPONSE = 1006

    # Reddit credentials (2000-2999)
    AUTH_INVALID_CREDENTIALS = 2001

    # Configuration loading (3000-3999)
    CONFIG_INVALID_FORMAT = 3001
    CONFIG_MISSING_REQUIRED = 3002
    CONFIG_INVALID_VALUE = 3003
    CONFIG_FILE_NOT_FOUND = 3004
    CONFIG_INVALID_DOMAIN = 3007

    # Post store (4000-4999)
    STORE_CONNECTION_FAILED = 4001
    STORE_QUERY_FAILED = 4002
    STORE_INSERT_FAILED = 4003

    # Code heuristic lexer (5000-5999)
    PARSE_UNEXPECTED_CHARACTER = 5001
    PARSE_UNBALANCED_DELIMITER = 5002
    PARSE_UNTERMINATED_LITERAL = 5003

    UNKNOWN_ERROR = 9000
    INTERNAL_ERROR = 9001


@dataclass
class ErrorContext:
    """Where an error happened, plus free-form details for the logs."""

    post_id: Optional[str] = None
    url: Optional[str] = None
    correlation_id: Optional[str] = None
    timestamp: float = field(default_factory=time.time)
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class RecoverySuggestion:
    """A hint shown to the operator next to a fatal error."""

    action: str
    description: str
    automatic: bool = False  # recovered without operator action
    command: Optional[str] = None
    priority: int = 1  # lower is shown first


def _context_with(kwargs: Dict[str, Any], url: Optional[str] = None, **details: Any) -> ErrorContext:
    """Fetch or create the context in ``kwargs`` and record ``details`` on it."""
    context = kwargs.get('context') or ErrorContext()
    if url is not None:
        context.url = url
    context.details.update(details)
    kwargs['context'] = context
    return context


class AutoShadowError(Exception):
    """
    Base exception for all autoshadow errors.

    Attributes:
        message: Human-readable description
        error_code: ErrorCode classifying the failure
        context: ErrorContext; a correlation id is assigned if missing
        cause: The lower-level exception, if any
        recoverable: False for errors that stop the process
        suggestions: RecoverySuggestions ordered by priority
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
        recoverable: bool = True,
        suggestions: Optional[List[RecoverySuggestion]] = None
    ):
        super().__init__(message)

        self.message = message
        self.error_code = error_code
        self.context = context or ErrorContext()
        self.cause = cause
        self.recoverable = recoverable
        self.suggestions = sorted(suggestions or [], key=lambda s: s.priority)

        if not self.context.correlation_id:
            self.context.correlation_id = uuid.uuid4().hex[:8]

    def add_suggestion(self, suggestion: RecoverySuggestion) -> None:
        self.suggestions.append(suggestion)
        self.suggestions.sort(key=lambda s: s.priority)

    def get_user_message(self) -> str:
        """
        Render the error for the terminal.

        Includes the error code (unless unknown), the correlation id and at
        most three suggestions.
        """
        lines = [f"Error: {self.message}"]
        if self.error_code is not ErrorCode.UNKNOWN_ERROR:
            lines.append(f"Error Code: {self.error_code.value} ({self.error_code.name})")
        lines.append(f"Correlation ID: {self.context.correlation_id}")

        if self.suggestions:
            lines.append("")
            lines.append("Suggested solutions:")
        for number, suggestion in enumerate(self.suggestions[:3], 1):
            lines.append(f"  {number}. {suggestion.action}")
            lines.append(f"     {suggestion.description}")
            if suggestion.command:
                lines.append(f"     Command: {suggestion.command}")

        return "\n".join(lines)

    def get_debug_info(self) -> Dict[str, Any]:
        """Everything known about the error, as plain data for debug logs."""
        cause = self.cause
        return {
            'error_type': type(self).__name__,
            'message': self.message,
            'error_code': self.error_code.value,
            'recoverable': self.recoverable,
            'context': self.context.to_dict(),
            'cause': {
                'type': type(cause).__name__ if cause else None,
                'message': str(cause) if cause else None,
            },
            'suggestions': [asdict(s) for s in self.suggestions],
        }


class ConfigurationError(AutoShadowError):
    """Invalid or missing configuration. Fatal at startup."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.CONFIG_INVALID_VALUE,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        **kwargs
    ):
        if config_key:
            _context_with(kwargs, config_key=config_key, config_value=config_value)
        kwargs.setdefault('recoverable', False)
        super().__init__(message, error_code=error_code, **kwargs)

        if error_code is ErrorCode.CONFIG_FILE_NOT_FOUND:
            self.add_suggestion(RecoverySuggestion(
                action="Create configuration file",
                description="Create autoshadow.yaml in the working directory or point CONFIG_PATH at one.",
            ))
        elif error_code is ErrorCode.CONFIG_INVALID_VALUE:
            self.add_suggestion(RecoverySuggestion(
                action="Check configuration values",
                description="Fix the values reported above in the configuration file or environment.",
            ))
        elif error_code is ErrorCode.CONFIG_MISSING_REQUIRED:
            self.add_suggestion(RecoverySuggestion(
                action="Provide Reddit credentials",
                description="Set reddit.client_id and reddit.client_secret, or AUTOSHADOW_CLIENT_ID/_SECRET.",
            ))


class FormatError(ConfigurationError):
    """A domain entry in the allow/block lists is not of the form [sub.]second.top"""

    def __init__(self, message: str, domain: Optional[str] = None, **kwargs):
        kwargs.setdefault('error_code', ErrorCode.CONFIG_INVALID_DOMAIN)
        super().__init__(message, config_key="url", config_value=domain, **kwargs)
        self.domain = domain
        self.add_suggestion(RecoverySuggestion(
            action="Fix the domain entry",
            description="Domains must have two or three labels, e.g. 'github.com' or 'blog.example.org'.",
        ))


class FetchError(AutoShadowError):
    """Fetching the live listing (or another remote resource) failed."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.FETCH_CONNECTION_FAILED,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs
    ):
        if url:
            _context_with(kwargs, url=url, status_code=status_code)
        super().__init__(message, error_code=error_code, **kwargs)

        if error_code is ErrorCode.FETCH_CONNECTION_FAILED:
            self.add_suggestion(RecoverySuggestion(
                action="Wait for the next poll",
                description="The cycle is skipped and the listing is fetched again on the next poll.",
                automatic=True,
            ))
        elif error_code is ErrorCode.FETCH_RATE_LIMITED:
            self.add_suggestion(RecoverySuggestion(
                action="Increase the poll interval",
                description="Reddit is rate limiting requests. Raise watch.poll_interval.",
            ))


class AuthenticationError(FetchError):
    """Reddit rejected the configured credentials. Fatal, unlike other fetch errors."""

    def __init__(self, message: str, **kwargs):
        kwargs['error_code'] = ErrorCode.AUTH_INVALID_CREDENTIALS
        kwargs.setdefault('recoverable', False)
        super().__init__(message, **kwargs)
        self.add_suggestion(RecoverySuggestion(
            action="Check credentials",
            description="Verify the Reddit client id, secret, username and password.",
        ))


class StoreError(AutoShadowError):
    """Post store / author history failure."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.STORE_QUERY_FAILED, **kwargs):
        super().__init__(message, error_code=error_code, **kwargs)


class ParseError(AutoShadowError):
    """Text could not be lexed into a token tree."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.PARSE_UNEXPECTED_CHARACTER,
        position: Optional[int] = None,
        **kwargs
    ):
        if position is not None:
            _context_with(kwargs, position=position)
        super().__init__(message, error_code=error_code, **kwargs)
        self.position = position
