"""Client update system — version check, installer download, silent install.

Architecture:
  Updater        — downloads the installer and runs it unattended
  VersionChecker — compares installed vs. latest and drives the Updater
"""

import logging
import os
import subprocess
from typing import Sequence
from urllib.request import Request, urlopen
from urllib.error import URLError

from vpnkeeper.branding import AppBranding
from vpnkeeper.core.client import MullvadClient, CREATION_FLAGS
from vpnkeeper.core.pacing import Pacer
from vpnkeeper.core.parsers import VersionParseError, describe_gap, parse_version_report

logger = logging.getLogger(__name__)

# Buffer size for streaming downloads (80 KB)
DOWNLOAD_BUFFER = 81920


class Updater:
    """Downloads the client installer and runs it silently.

    All methods are synchronous (blocking).
    """

    def __init__(self, pacer: Pacer, installer_name: str = "MullvadInstaller.exe",
                 installer_args: Sequence[str] = ('/S',),
                 settle_seconds: float = 5.0):
        self.pacer = pacer
        self.installer_name = installer_name
        self.installer_args = list(installer_args)
        self.settle_seconds = settle_seconds

    # ── Download ─────────────────────────────────────────────────────

    def download(self, url: str, dest_path: str):
        """Stream ``url`` into ``dest_path``. Raises RuntimeError on failure.

        Data lands in ``<dest_path>.part`` and only replaces ``dest_path``
        once the whole body has been read.
        """
        req = Request(url, headers={
            'User-Agent': AppBranding.user_agent(),
        })
        part_path = dest_path + '.part'

        try:
            os.makedirs(os.path.dirname(dest_path) or '.', exist_ok=True)
            with urlopen(req, timeout=120) as resp:
                downloaded = 0
                with open(part_path, 'wb') as f:
                    while True:
                        chunk = resp.read(DOWNLOAD_BUFFER)
                        if not chunk:
                            break
                        f.write(chunk)
                        downloaded += len(chunk)
            os.replace(part_path, dest_path)
        except (URLError, OSError) as e:
            try:
                if os.path.exists(part_path):
                    os.remove(part_path)
            except OSError:
                pass
            raise RuntimeError(f"Download failed: {e}") from e

        logger.info("Downloaded %d bytes to %s", downloaded, dest_path)

    # ── Install ──────────────────────────────────────────────────────

    def run_installer(self, installer_path: str):
        """Run the installer with the silent flags and wait for it to exit."""
        try:
            proc = subprocess.Popen(
                [installer_path, *self.installer_args],
                creationflags=CREATION_FLAGS,
            )
            exit_code = proc.wait()
        except OSError as e:
            logger.error("Failed to launch installer %s: %s", installer_path, e)
            return
        # Exit code is informational only
        logger.info("Installer exited with code %d", exit_code)

    def update(self, destination: str, url: str) -> bool:
        """Download the installer into ``destination`` and run it.

        Returns True iff the installer file existed before execution; a
        failed download and a missing file look the same to the caller.
        """
        installer_path = os.path.join(destination, self.installer_name)

        logger.info("Downloading installer from %s", url)
        try:
            self.download(url, installer_path)
        except RuntimeError as e:
            logger.warning("%s", e)
            return False

        self.pacer.wait(self.settle_seconds)

        if not os.path.isfile(installer_path):
            logger.warning("Installer not found at %s", installer_path)
            return False

        logger.info("Running installer %s %s", installer_path,
                    ' '.join(self.installer_args))
        self.run_installer(installer_path)
        return True


class VersionChecker:
    """Keeps the installed client on the latest advertised version."""

    def __init__(self, client: MullvadClient, updater: Updater, pacer: Pacer,
                 install_dir: str, download_url: str, retries: int = 3):
        self.client = client
        self.updater = updater
        self.pacer = pacer
        self.install_dir = install_dir
        self.download_url = download_url
        self.retries = max(0, retries)

    def check_version(self) -> bool:
        """Update the client if it isn't current.

        Returns True if already current or an update attempt succeeded.
        Makes at most ``retries + 1`` update attempts.
        """
        result = self.client.version()
        try:
            pair = parse_version_report(result.stdout)
        except VersionParseError as e:
            logger.warning("Cannot determine client version: %s", e)
            return False

        if pair.is_current:
            logger.info("Mullvad client is up to date (%s)", pair.current)
            return True

        logger.info("Mullvad client needs an update: %s", describe_gap(pair))

        total = self.retries + 1
        attempts = 0
        for attempt in range(1, total + 1):
            if self.pacer.cancelled:
                break
            attempts = attempt
            logger.info("Update attempt %d of %d", attempt, total)
            if self.updater.update(self.install_dir, self.download_url):
                logger.info("Update to %s installed", pair.latest)
                return True

        logger.warning("Update failed after %d attempts", attempts)
        return False
