"""
Utility modules for the .NET development environment setup.
"""

from .logging import setup_root_logger, get_logger

__all__ = ["setup_root_logger", "get_logger"]
