"""
Remote command execution over the system ssh client.

Every command passes the allow-list in core.guardrails before a process is
spawned. Execution has a hard timeout; on timeout or cancellation the ssh
process is killed so no remote session is left behind. Nothing is retried.
"""

import asyncio
import logging
import os
import shlex
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from ..core.config import get_settings
from ..core.errors import CommandNotPermitted, RemoteExecutionFailure, UnsafePath
from ..core.guardrails import check_command, check_path

logger = logging.getLogger(__name__)

STATUS_COMMANDS = {
    "cpu": "top -bn1 | grep 'Cpu(s)' | awk '{print $2}'",
    "memory": "free -m | awk 'NR==2{printf \"%.2f%%\", $3*100/$2 }'",
    "disk": "df -h / | awk 'NR==2{print $5}'",
    "uptime": "uptime -p",
}


@dataclass
class ConnectionInfo:
    host: str
    user: str
    port: int = 22
    private_key: Optional[str] = None


@dataclass
class CommandResult:
    stdout: str
    stderr: str


@dataclass
class ServerStatus:
    cpu: str
    memory: str
    disk: str
    uptime: str


@contextmanager
def _key_file(private_key: Optional[str]) -> Iterator[Optional[str]]:
    """Write the private key to a 0600 temp file for the lifetime of one call."""
    if not private_key:
        yield None
        return
    fd, path = tempfile.mkstemp(prefix="devpilot_key_")
    try:
        os.chmod(path, 0o600)
        with os.fdopen(fd, "w") as fh:
            fh.write(private_key if private_key.endswith("\n") else private_key + "\n")
        yield path
    finally:
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass


def build_ssh_argv(conn: ConnectionInfo, command: str, key_path: Optional[str] = None) -> list[str]:
    settings = get_settings()
    argv = [
        "ssh",
        "-p", str(conn.port or 22),
        "-o", "BatchMode=yes",
        "-o", "StrictHostKeyChecking=no",
        "-o", f"ConnectTimeout={settings.ssh_connect_timeout_seconds}",
    ]
    if key_path:
        argv += ["-i", key_path]
    argv += [f"{conn.user}@{conn.host}", command]
    return argv


async def _run_ssh(argv: list[str], timeout: float) -> tuple[int, str, str]:
    """Spawn ssh and wait for it. Kills the process on timeout or cancellation."""
    proc = await asyncio.create_subprocess_exec(
        *argv,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except BaseException:
        # TimeoutError and CancelledError both land here
        if proc.returncode is None:
            proc.kill()
            await proc.wait()
        raise
    return (
        proc.returncode,
        stdout.decode("utf-8", errors="replace"),
        stderr.decode("utf-8", errors="replace"),
    )


async def execute(conn: ConnectionInfo, command: str) -> CommandResult:
    """Validate against the allow-list, then run the command on the remote host."""
    check = check_command(command)
    if not check.allowed:
        raise CommandNotPermitted(check.reason or "")
    validated = check.modified_input

    settings = get_settings()
    logger.info("SSH %s@%s:%s $ %s", conn.user, conn.host, conn.port, validated[:200])

    with _key_file(conn.private_key) as key_path:
        argv = build_ssh_argv(conn, validated, key_path)
        try:
            returncode, stdout, stderr = await _run_ssh(argv, settings.ssh_timeout_seconds)
        except asyncio.TimeoutError:
            logger.error("SSH command timed out after %.0fs: %s", settings.ssh_timeout_seconds, validated[:200])
            raise RemoteExecutionFailure(f"timed out after {settings.ssh_timeout_seconds:.0f}s")
        except OSError as e:
            logger.error("SSH could not be started: %s", e)
            raise RemoteExecutionFailure(str(e)) from e

    if returncode != 0:
        logger.warning("SSH command exited %d: %s", returncode, stderr.strip()[:500])
        raise RemoteExecutionFailure(stderr.strip() or f"exit status {returncode}")

    return CommandResult(stdout=stdout, stderr=stderr)


async def get_status(conn: ConnectionInfo) -> ServerStatus:
    """CPU, memory, disk and uptime from four fixed diagnostic commands."""
    fields = {}
    for name, command in STATUS_COMMANDS.items():
        result = await execute(conn, command)
        fields[name] = result.stdout.strip() or "N/A"
    return ServerStatus(**fields)


async def read_file(conn: ConnectionInfo, file_path: str) -> str:
    if not check_path(file_path).allowed:
        raise UnsafePath(file_path)
    result = await execute(conn, f"cat {shlex.quote(file_path)}")
    return result.stdout


async def list_files(conn: ConnectionInfo, directory: str = "/home") -> list[str]:
    if not check_path(directory).allowed:
        raise UnsafePath(directory)
    result = await execute(conn, f"ls -la {shlex.quote(directory)}")
    return [line for line in result.stdout.split("\n") if line.strip()]
