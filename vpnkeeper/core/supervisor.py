"""Connection supervision — polls tunnel status and drives remediation."""

import logging
from dataclasses import dataclass

from vpnkeeper.core.account import AccountManager
from vpnkeeper.core.client import MullvadClient
from vpnkeeper.core.models import ConnectionState
from vpnkeeper.core.pacing import Pacer
from vpnkeeper.core.parsers import StatusPatterns
from vpnkeeper.network.detector import DaemonController

logger = logging.getLogger(__name__)


@dataclass
class SupervisionPolicy:
    """Escalation thresholds and pauses for required-mode polling."""
    max_attempts: int = 25          # loop runs while attempt < max_attempts
    poll_interval: float = 2.0
    blocked_threshold: int = 3      # Blocked polls tolerated before remediation
    reconnect_pause: float = 5.0
    restart_pause: float = 60.0
    factory_reset_after: int = 100

    @classmethod
    def from_settings(cls, settings) -> 'SupervisionPolicy':
        return cls(
            max_attempts=settings.max_attempts,
            poll_interval=settings.poll_interval,
            blocked_threshold=settings.blocked_threshold,
            reconnect_pause=settings.reconnect_pause,
            restart_pause=settings.restart_pause,
            factory_reset_after=settings.factory_reset_after,
        )


class ConnectionSupervisor:
    """Reads tunnel status and, when required, keeps at it until connected."""

    def __init__(self, client: MullvadClient, accounts: AccountManager,
                 daemon: DaemonController, pacer: Pacer,
                 patterns: StatusPatterns | None = None,
                 policy: SupervisionPolicy | None = None):
        self.client = client
        self.accounts = accounts
        self.daemon = daemon
        self.pacer = pacer
        self.patterns = patterns or StatusPatterns()
        self.policy = policy or SupervisionPolicy()

    def read_state(self) -> ConnectionState:
        result = self.client.status()
        state = self.patterns.classify(result.stdout)
        logger.debug("Tunnel state: %s", state.value)
        return state

    def get_status(self, required: bool = False) -> bool:
        """Return whether the tunnel is connected.

        With ``required`` the supervisor keeps polling and remediating until
        Connected is seen or the attempt budget runs out.
        """
        if not required:
            return self._check_once()
        return self._ensure_connected()

    def _check_once(self) -> bool:
        state = self.read_state()
        if state == ConnectionState.CONNECTED:
            logger.info("VPN connected")
            return True
        if state == ConnectionState.UNKNOWN:
            logger.warning("Unrecognized tunnel status, disconnecting")
            self.client.disconnect()
            return False
        logger.info("VPN not connected (%s)", state.value)
        return False

    def _ensure_connected(self) -> bool:
        policy = self.policy
        connected = False
        attempt = 1

        while attempt < policy.max_attempts:
            if self.pacer.cancelled:
                logger.warning("Supervision cancelled after %d checks", attempt - 1)
                return False
            state = self.read_state()
            logger.info("Status check %d/%d: %s", attempt,
                        policy.max_attempts - 1, state.value)

            if state == ConnectionState.CONNECTED:
                connected = True
                break

            if state == ConnectionState.BLOCKED:
                if attempt > policy.blocked_threshold:
                    self._recover_blocked()
            elif state == ConnectionState.DISCONNECTED:
                logger.info("Tunnel disconnected, connecting")
                self.client.connect()
                self.pacer.wait(policy.reconnect_pause)
            elif state == ConnectionState.UNKNOWN:
                logger.warning("Unrecognized tunnel status, restarting daemon")
                self.client.disconnect()
                self.daemon.restart()
                self.pacer.wait(policy.restart_pause)

            attempt += 1
            if not self.pacer.wait(policy.poll_interval):
                logger.warning("Supervision cancelled after %d checks", attempt - 1)
                return False

        if connected:
            logger.info("VPN connected after %d check(s)", attempt)
            return True

        logger.warning("VPN still not connected after %d checks", attempt - 1)
        if attempt >= policy.factory_reset_after:
            logger.warning("Attempt limit %d reached, factory resetting client",
                           policy.factory_reset_after)
            self.client.factory_reset()
            self.accounts.assert_account()
        return False

    def _recover_blocked(self):
        logger.warning("Tunnel blocked, reasserting account")
        self.client.disconnect()
        if self.accounts.assert_account():
            self.client.reconnect()
            self.pacer.wait(self.policy.reconnect_pause)
        else:
            logger.warning("Account not available, staying disconnected")
