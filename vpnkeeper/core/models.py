"""Supervisor data models."""

from dataclasses import dataclass
from enum import Enum


class ConnectionState(str, Enum):
    """Tunnel phase as reported by the client's status text."""
    CONNECTED = "connected"
    CONNECTING = "connecting"
    DISCONNECTED = "disconnected"
    BLOCKED = "blocked"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one CLI invocation."""
    exit_code: int
    stdout: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


@dataclass(frozen=True)
class VersionPair:
    """Locally installed vs. remotely advertised client version."""
    current: str
    latest: str

    @property
    def is_current(self) -> bool:
        return self.current == self.latest


@dataclass
class SuperviseReport:
    """Result of one full `run` cycle."""
    up_to_date: bool = False
    account_ready: bool = False
    connected: bool = False
