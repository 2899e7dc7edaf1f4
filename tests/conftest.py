"""Shared fakes: scripted CLI runner and a pacer that never sleeps."""

from __future__ import annotations

from collections import defaultdict
from typing import Sequence

import pytest

from vpnkeeper.core.account import AccountManager
from vpnkeeper.core.client import MullvadClient
from vpnkeeper.core.models import CommandResult
from vpnkeeper.core.pacing import Pacer
from vpnkeeper.core.secrets import PlaintextTokenStore

CONNECTED = "Tunnel status: Connected to se-got-wg-001"
CONNECTING = "Tunnel status: Connecting"
BLOCKED = "Tunnel status: Blocked"
DISCONNECTED = "Tunnel Status: Disconnected"

VERSION_CURRENT = """Current version: 2024.4
Is supported: true
Suggested upgrade: none
Latest stable version: 2024.4
"""

VERSION_OUTDATED = """Current version: 2024.1
Is supported: true
Suggested upgrade: 2024.4
Latest stable version: 2024.4
"""


class FakeRunner:
    """Answers ``mullvad <subcommand>`` calls from a script.

    ``responses`` maps the subcommand string (``"status"``, ``"account get"``)
    to either a single stdout or a list consumed one per call; the last
    entry repeats once the list runs out.
    """

    def __init__(self, responses: dict | None = None):
        self.responses = dict(responses or {})
        self.calls: list[list[str]] = []
        self._served = defaultdict(int)

    def __call__(self, args: Sequence[str]) -> CommandResult:
        args = list(args)
        self.calls.append(args)
        key = " ".join(args[1:])
        if key.startswith("account set"):
            key = "account set"
        answer = self.responses.get(key, "")
        if isinstance(answer, list):
            idx = min(self._served[key], len(answer) - 1)
            self._served[key] += 1
            answer = answer[idx]
        if isinstance(answer, CommandResult):
            return answer
        return CommandResult(0, answer)

    def count(self, subcommand: str) -> int:
        return sum(1 for c in self.calls if " ".join(c[1:]).startswith(subcommand))

    def subcommands(self) -> list[str]:
        return [" ".join(c[1:]) for c in self.calls]


class FakePacer(Pacer):
    """Records requested pauses instead of sleeping."""

    def __init__(self):
        super().__init__()
        self.waits: list[float] = []

    def wait(self, seconds: float) -> bool:
        self.waits.append(seconds)
        return not self.cancelled


@pytest.fixture
def pacer() -> FakePacer:
    return FakePacer()


@pytest.fixture
def token_file(tmp_path):
    path = tmp_path / "account.txt"
    path.write_text("1234567890123456\n", encoding="utf-8")
    return path


def make_accounts(runner: FakeRunner, token_path) -> AccountManager:
    return AccountManager(MullvadClient(runner), PlaintextTokenStore(str(token_path)))
