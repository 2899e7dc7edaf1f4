"""Mullvad daemon and tunnel interface detection, plus daemon restart."""

import logging
from typing import Sequence

import psutil

from vpnkeeper.core.client import CommandRunner

logger = logging.getLogger(__name__)


class TunnelDetector:
    """Detects if a Mullvad tunnel adapter is up."""

    TUNNEL_KEYWORDS = ['wg-mullvad', 'mullvad', 'wintun', 'tun']

    @staticmethod
    def get_tunnel_interface() -> str | None:
        """Return the name of the active tunnel interface, or None."""
        try:
            stats = psutil.net_if_stats()
            for iface_name, iface_stats in stats.items():
                if not iface_stats.isup:
                    continue
                name_lower = iface_name.lower()
                if any(kw in name_lower for kw in TunnelDetector.TUNNEL_KEYWORDS):
                    return iface_name
        except Exception as e:
            logger.warning("Tunnel detection failed: %s", e)
        return None


class DaemonController:
    """Finds and restarts the Mullvad background service."""

    DAEMON_NAMES = ('mullvad-daemon', 'mullvad-daemon.exe')

    def __init__(self, runner: CommandRunner, restart_commands: Sequence[Sequence[str]]):
        self._run = runner
        self.restart_commands = [list(cmd) for cmd in restart_commands]

    def daemon_running(self) -> bool:
        """Check if the daemon process is alive."""
        try:
            for proc in psutil.process_iter(['name']):
                name = (proc.info.get('name') or '').lower()
                if name in self.DAEMON_NAMES:
                    return True
        except psutil.Error as e:
            logger.warning("Process scan failed: %s", e)
        return False

    def restart(self) -> bool:
        """Run each restart command in order. True if all exited cleanly."""
        if not self.restart_commands:
            logger.warning("No daemon restart command configured")
            return False

        ok = True
        for cmd in self.restart_commands:
            logger.info("Restarting daemon: %s", ' '.join(cmd))
            result = self._run(cmd)
            if not result.ok:
                logger.warning("%s exited with %d", cmd[0], result.exit_code)
                ok = False
        logger.info("Daemon restart finished (daemon running: %s)", self.daemon_running())
        return ok
