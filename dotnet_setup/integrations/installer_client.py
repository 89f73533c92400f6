"""
Client for fetching the official dotnet-install.sh script.
"""

import asyncio
import logging
import socket
import urllib.error
import urllib.request
from pathlib import Path
from typing import Optional

from ..errors import DownloadError

INSTALLER_FILENAME = "dotnet-install.sh"


class InstallerClient:
    """Downloads the installer script into a target directory."""

    def __init__(self, url: str, timeout: Optional[float] = None):
        self.logger = logging.getLogger(__name__)
        self.url = url
        self.timeout = timeout

    def download(self, target_dir: Path) -> Path:
        """
        Fetch the installer and make it executable.

        Args:
            target_dir: Directory the script is written into

        Returns:
            Path to the downloaded script
        """
        script_path = Path(target_dir) / INSTALLER_FILENAME
        request = urllib.request.Request(self.url)
        request.add_header("User-Agent", "dotnet-setup")

        kwargs = {}
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout

        try:
            with urllib.request.urlopen(request, **kwargs) as response:
                content = response.read()
        except urllib.error.HTTPError as e:
            raise DownloadError(f"Installer download failed: HTTP {e.code} for {self.url}")
        except (urllib.error.URLError, socket.timeout, OSError) as e:
            raise DownloadError(f"Installer download failed: {e}")

        if not content:
            raise DownloadError(f"Installer download returned an empty body: {self.url}")

        script_path.write_bytes(content)
        script_path.chmod(0o755)
        self.logger.info(f"Downloaded {INSTALLER_FILENAME} ({len(content)} bytes)")
        return script_path

    async def download_async(self, target_dir: Path) -> Path:
        """Run download() without blocking the event loop."""
        return await asyncio.to_thread(self.download, target_dir)
