"""
Error taxonomy. Every domain failure the API can surface is a DevPilotError;
the app factory renders them as {"detail": message} with the class's status code.
"""

from typing import Optional


class DevPilotError(Exception):
    status_code: int = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ValidationError(DevPilotError):
    """Empty or malformed input. Raised before any side effect."""
    status_code = 400


class ServerNotConfigured(DevPilotError):
    status_code = 400

    def __init__(self, message: str = "Server settings are incomplete: set ssh host and user first"):
        super().__init__(message)


class UnsafePath(DevPilotError):
    status_code = 400

    def __init__(self, path: str):
        super().__init__(f"Unsafe path: {path}")
        self.path = path


class CommandNotPermitted(DevPilotError):
    status_code = 403

    def __init__(self, token: str):
        super().__init__(f"Command not permitted: {token}")
        self.token = token


class NotFoundError(DevPilotError):
    status_code = 404


# ── Upstream failures ────────────────────────────────────────────────

class ProviderFailure(DevPilotError):
    """An external chat-completion or search API did not produce a usable reply."""
    status_code = 502

    def __init__(self, provider: str, message: str = ""):
        super().__init__(f"{provider}: {message}" if message else provider)
        self.provider = provider


class ProviderUnreachable(ProviderFailure):
    """Timeout or transport error. The request was aborted client-side."""

    def __init__(self, provider: str, cause: Optional[BaseException] = None):
        super().__init__(provider, f"provider unreachable ({cause!r})" if cause else "provider unreachable")
        self.cause = cause


class ProviderRejected(ProviderFailure):
    """Provider answered with a non-2xx status."""

    def __init__(self, provider: str, status_code: int):
        super().__init__(provider, f"provider rejected request (HTTP {status_code})")
        self.upstream_status = status_code


class RemoteExecutionFailure(DevPilotError):
    """The command was attempted on the remote host and did not complete."""
    status_code = 502

    def __init__(self, cause: str):
        super().__init__(f"Execution failed: {cause}")
        self.cause = cause


class AgentCommunicationError(DevPilotError):
    """Every completion provider failed for this turn."""
    status_code = 502

    def __init__(self, message: str = "Agent communication error"):
        super().__init__(message)
