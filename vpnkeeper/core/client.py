"""Mullvad CLI wrapper — every call into the VPN client goes through here."""

import logging
import subprocess
import sys
from typing import Callable, Sequence

from vpnkeeper.core.models import CommandResult

logger = logging.getLogger(__name__)

# Hide console windows for child processes on Windows
CREATION_FLAGS = subprocess.CREATE_NO_WINDOW if sys.platform == 'win32' else 0

# Exit code reported when the executable itself can't be started
EXIT_NOT_FOUND = 127
EXIT_TIMEOUT = -1

CommandRunner = Callable[[Sequence[str]], CommandResult]


class SubprocessRunner:
    """Runs a command synchronously and captures its text output."""

    def __init__(self, timeout: float | None = 60.0):
        self.timeout = timeout

    def __call__(self, args: Sequence[str]) -> CommandResult:
        try:
            result = subprocess.run(
                list(args),
                capture_output=True, text=True, timeout=self.timeout,
                creationflags=CREATION_FLAGS,
            )
        except subprocess.TimeoutExpired:
            logger.warning("Command timed out after %ss: %s", self.timeout, args[0])
            return CommandResult(EXIT_TIMEOUT, "")
        except OSError as e:
            logger.warning("Failed to run %s: %s", args[0], e)
            return CommandResult(EXIT_NOT_FOUND, "")

        if result.returncode != 0:
            logger.debug("%s exited with %d: %s", args[0], result.returncode,
                         (result.stderr or '').strip())
        return CommandResult(result.returncode, result.stdout or "")


class MullvadClient:
    """Thin facade over the ``mullvad`` executable's subcommands."""

    def __init__(self, runner: CommandRunner, executable: str = "mullvad"):
        self._run = runner
        self.executable = executable

    def _call(self, *args: str) -> CommandResult:
        logger.debug("mullvad %s", args[0] if args else "")
        return self._run([self.executable, *args])

    def version(self) -> CommandResult:
        return self._call('version')

    def account_get(self) -> CommandResult:
        return self._call('account', 'get')

    def account_set(self, token: str) -> CommandResult:
        # Token is passed verbatim and never logged
        return self._call('account', 'set', token)

    def status(self) -> CommandResult:
        return self._call('status')

    def connect(self) -> CommandResult:
        return self._call('connect')

    def reconnect(self) -> CommandResult:
        return self._call('reconnect')

    def disconnect(self) -> CommandResult:
        return self._call('disconnect')

    def factory_reset(self) -> CommandResult:
        return self._call('factory-reset')
