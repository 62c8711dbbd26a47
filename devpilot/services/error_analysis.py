"""
Error classification: ordered substring rules.

The first matching rule wins. Order matters: a message like
"connection reset (500)" must classify as a connection error.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ErrorRule:
    markers: tuple[str, ...]
    error_type: str
    severity: str
    suggestions: tuple[str, ...]


ERROR_RULES: tuple[ErrorRule, ...] = (
    ErrorRule(
        ("ECONNREFUSED", "connection"),
        "connection_error", "high",
        (
            "Check that the server is running",
            "Verify the connection address and port",
            "Check the firewall settings",
        ),
    ),
    ErrorRule(
        ("404", "Not Found"),
        "not_found", "medium",
        (
            "Verify the URL or path",
            "Make sure the requested file or resource exists",
        ),
    ),
    ErrorRule(
        ("500", "Internal Server Error"),
        "server_error", "critical",
        (
            "Review the server logs",
            "Check for database errors",
            "Verify the environment configuration",
        ),
    ),
    ErrorRule(
        ("Unauthorized", "401", "403"),
        "auth_error", "high",
        (
            "Verify your API keys",
            "Check access permissions",
            "Review the authentication settings",
        ),
    ),
    ErrorRule(
        ("Syntax", "Parse"),
        "syntax_error", "medium",
        (
            "Review the code referenced in the error message",
            "Check brackets and separators",
            "Run a linter over the code",
        ),
    ),
)


@dataclass
class ErrorAnalysis:
    type: str = "unknown"
    severity: str = "medium"
    suggestions: list[str] = field(default_factory=list)


def classify(error_message: str) -> ErrorAnalysis:
    for rule in ERROR_RULES:
        if any(marker in error_message for marker in rule.markers):
            return ErrorAnalysis(
                type=rule.error_type,
                severity=rule.severity,
                suggestions=list(rule.suggestions),
            )
    return ErrorAnalysis()
