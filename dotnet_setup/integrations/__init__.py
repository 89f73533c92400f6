"""
External service integrations.
"""

from .installer_client import InstallerClient

__all__ = ["InstallerClient"]
