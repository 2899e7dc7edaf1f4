"""Parsers for the Mullvad CLI's text output."""

import logging
from dataclasses import dataclass

from packaging.version import Version, InvalidVersion

from vpnkeeper.core.models import ConnectionState, VersionPair

logger = logging.getLogger(__name__)

CURRENT_KEYS = ('current version',)
LATEST_KEYS = ('latest stable version', 'latest version')


class VersionParseError(ValueError):
    """Raised when a version report lacks the current or latest entry."""


def _report_fields(text: str) -> dict[str, str]:
    fields = {}
    for line in text.splitlines():
        key, sep, value = line.partition(':')
        if not sep:
            continue
        fields.setdefault(key.strip().lower(), value.strip())
    return fields


def _first(fields: dict[str, str], keys: tuple[str, ...]) -> str:
    for key in keys:
        value = fields.get(key)
        if value:
            return value
    return ""


def parse_version_report(text: str) -> VersionPair:
    """Extract ``{current, latest}`` from ``mullvad version`` output.

    The report is a list of ``Key: value`` lines. Keys are matched
    case-insensitively and line order does not matter, e.g.::

        Current version: 2024.3
        Is supported: true
        Suggested upgrade: none
        Latest stable version: 2024.4
    """
    fields = _report_fields(text)
    current = _first(fields, CURRENT_KEYS)
    latest = _first(fields, LATEST_KEYS)
    if not current or not latest:
        raise VersionParseError(f"Unrecognized version report: {text.strip()!r}")
    return VersionPair(current=current, latest=latest)


def describe_gap(pair: VersionPair) -> str:
    """Human-readable direction of a version mismatch, for logging."""
    try:
        current = Version(pair.current)
        latest = Version(pair.latest)
    except InvalidVersion:
        return f"{pair.current} != {pair.latest}"
    if current < latest:
        return f"{pair.current} is older than {pair.latest}"
    if current > latest:
        return f"{pair.current} is ahead of {pair.latest}"
    return f"{pair.current} differs from {pair.latest} only in formatting"


@dataclass(frozen=True)
class StatusPatterns:
    """Literal substrings identifying each tunnel phase."""
    connected: str = "Tunnel status: Connected"
    connecting: str = "Tunnel status: Connecting"
    blocked: str = "Tunnel status: Blocked"
    disconnected: str = "Tunnel Status: Disconnected"
    case_sensitive: bool = True

    @classmethod
    def from_settings(cls, settings) -> 'StatusPatterns':
        return cls(
            connected=settings.status_connected,
            connecting=settings.status_connecting,
            blocked=settings.status_blocked,
            disconnected=settings.status_disconnected,
            case_sensitive=settings.status_case_sensitive,
        )

    def classify(self, text: str) -> ConnectionState:
        """Map status output to a ConnectionState; anything unmatched is UNKNOWN."""
        # Connecting first so a shortened Connected pattern can't shadow it
        ordered = (
            (self.connecting, ConnectionState.CONNECTING),
            (self.connected, ConnectionState.CONNECTED),
            (self.blocked, ConnectionState.BLOCKED),
            (self.disconnected, ConnectionState.DISCONNECTED),
        )
        haystack = text if self.case_sensitive else text.lower()
        for pattern, state in ordered:
            needle = pattern if self.case_sensitive else pattern.lower()
            if needle and needle in haystack:
                return state
        return ConnectionState.UNKNOWN
