"""
Application errors for clean API error handling.

Use ServiceUnavailableError when the hosted LLM is misconfigured (no credential)
so the API can return 503 with a user-facing message. Errors raised by the
OpenAI/httpx clients themselves are not wrapped.
"""


class ServiceUnavailableError(Exception):
    """Raised when a required service (e.g. the hosted LLM) is unavailable or misconfigured."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class RoleSpecError(Exception):
    """Raised when an agent role file cannot be parsed or conflicts with another role."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")


class ManifestFormatError(Exception):
    """Raised when a line inside a known manifest section is malformed."""

    def __init__(self, line_no: int, message: str) -> None:
        self.line_no = line_no
        self.message = message
        super().__init__(f"line {line_no}: {message}")
