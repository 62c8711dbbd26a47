"""
Guardrails: input validation layer.

Layers:
  1. Chat input validation (length, emptiness, injection logging)
  2. Remote command allow-list (whole-token match against fixed prefixes)
  3. Remote path safety (literal traversal substrings)

Each check returns a GuardrailResult; callers decide which exception to raise.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

# ── Configuration ─────────────────────────────────────────────────────

MAX_MESSAGE_LENGTH = 10000       # Max input message length

# Commands a user may run on their own server. Multi-word entries must match
# every word (e.g. "systemctl status" does not allow "systemctl restart").
ALLOWED_COMMANDS = (
    "ls",
    "cat",
    "tail",
    "head",
    "ps",
    "top",
    "df",
    "free",
    "uptime",
    "whoami",
    "pwd",
    "date",
    "uname",
    "hostname",
    "git",
    "npm",
    "node",
    "python",
    "python3",
    "systemctl status",
    "nginx -t",
)

UNSAFE_PATH_MARKERS = ("..", "~")


@dataclass
class GuardrailResult:
    """Result of a guardrail check."""
    allowed: bool
    reason: Optional[str] = None
    modified_input: Optional[str] = None


# ── Input Guardrails ──────────────────────────────────────────────────

def check_input(message: str, user_id: str = "") -> GuardrailResult:
    """
    Validate user input before processing.
    Returns GuardrailResult with allowed=False if blocked.
    """

    # 1. Empty message
    if not message or not message.strip():
        return GuardrailResult(
            allowed=False,
            reason="empty message",
        )

    # 2. Length check
    if len(message) > MAX_MESSAGE_LENGTH:
        return GuardrailResult(
            allowed=False,
            reason=f"Message too long ({len(message)} chars). Maximum is {MAX_MESSAGE_LENGTH}.",
        )

    # 3. Basic injection detection (log only)
    injection_patterns = [
        r"ignore\s+(all\s+)?previous\s+instructions",
        r"disregard\s+(all\s+)?previous",
        r"<\s*system\s*>",
    ]

    msg_lower = message.lower()
    for pattern in injection_patterns:
        if re.search(pattern, msg_lower):
            logger.warning("Potential injection detected from user=%s: %s", user_id, message[:100])
            break

    return GuardrailResult(allowed=True, modified_input=message.strip())


# ── Command Guardrails ────────────────────────────────────────────────

def check_command(command: str) -> GuardrailResult:
    """
    Allow a command only if its leading words equal one allow-listed entry.

    Whole-token matching: "ls -la" passes, "lsof" and "ls;reboot" do not.
    Only the leading words are checked. The rest of the line goes to the
    remote shell unchanged, so "ls ; reboot" or "cat x && rm y" pass. This is
    an allow-list on the program name, not a sandbox.
    """
    trimmed = (command or "").strip()
    tokens = trimmed.split()
    if not tokens:
        return GuardrailResult(allowed=False, reason="")

    for allowed in ALLOWED_COMMANDS:
        allowed_tokens = allowed.split()
        if tokens[: len(allowed_tokens)] == allowed_tokens:
            return GuardrailResult(allowed=True, modified_input=trimmed)

    return GuardrailResult(allowed=False, reason=tokens[0])


# ── Path Guardrails ───────────────────────────────────────────────────

def check_path(path: str) -> GuardrailResult:
    """Block literal traversal markers. Not a chroot."""
    for marker in UNSAFE_PATH_MARKERS:
        if marker in path:
            logger.warning("Blocked unsafe remote path: %s", path[:200])
            return GuardrailResult(allowed=False, reason=f"path contains {marker!r}")
    return GuardrailResult(allowed=True)
