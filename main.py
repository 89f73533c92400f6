#!/usr/bin/env python3
"""
Main entry point for the .NET development environment setup.
"""

import asyncio
import argparse
import json
import logging
import sys
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from dotnet_setup.core.orchestrator import SetupOrchestrator
from dotnet_setup.core.artifact_manager import ArtifactManager
from dotnet_setup.models.installation import SetupReport
from dotnet_setup.models.tool import ToolStatus
from dotnet_setup.utils.logging import setup_root_logger
from config.settings import Settings


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Install the .NET SDK, global tools and project dependencies"
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file (JSON format)"
    )

    parser.add_argument(
        "--app-dir",
        type=Path,
        help="Application source directory (default: /app)"
    )

    parser.add_argument(
        "--install-dir",
        type=Path,
        help="SDK install directory (default: ~/.dotnet)"
    )

    parser.add_argument(
        "--version",
        dest="dotnet_version",
        type=str,
        help="Pinned major.minor .NET version (default: 8.0)"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--no-artifacts",
        action="store_true",
        help="Do not persist a run summary"
    )

    return parser.parse_args(argv)


def load_config(args) -> Settings:
    """Load configuration from file, environment and command line."""
    config_data = {}
    if args.config and args.config.exists():
        with open(args.config) as f:
            config_data = json.load(f)

    # Override with command line args
    if args.app_dir:
        config_data.setdefault("project", {})["app_dir"] = str(args.app_dir)
    if args.install_dir:
        config_data.setdefault("dotnet", {})["install_dir"] = str(args.install_dir)
    if args.dotnet_version:
        dotnet = config_data.setdefault("dotnet", {})
        dotnet["version"] = args.dotnet_version
        dotnet["channel"] = args.dotnet_version
    if args.log_level:
        config_data.setdefault("logging", {})["level"] = args.log_level
    if args.no_artifacts:
        config_data.setdefault("artifacts", {})["enabled"] = False

    return Settings(**config_data)


def print_summary(report: SetupReport, settings: Settings) -> None:
    """Print the final summary and quick start hints."""
    print("")
    if not report.success:
        fatal = report.fatal
        print(f"Setup failed at {fatal.step}: {fatal.message}")
        return

    if report.fast_path:
        print("Script execution complete (.NET was already set up)!")
    else:
        print(f"Optimized .NET {settings.dotnet.version} setup complete!")
    print("")
    print("Installed components:")
    print(f"  - .NET {report.installed_version or settings.dotnet.version}")
    for tool in report.tools:
        marker = "FAILED" if tool.status == ToolStatus.FAILED else tool.status.value.replace("_", " ")
        print(f"  - {tool.name} ({marker})")
    if report.warnings:
        print("")
        print("Warnings:")
        for warning in report.warnings:
            print(f"  - {warning.step}: {warning.message}")
    print("")
    print(f"Run 'source {settings.shell_profile}' or restart your shell to use .NET in new sessions.")
    print("")
    print("Quick start commands:")
    print("  dotnet --version        # Check .NET version")
    print("  dotnet new --list       # List project templates")
    print("  dotnet ef --version     # Check EF tools version")


async def main(argv=None) -> int:
    """Main entry point."""
    args = parse_arguments(argv)

    logger = logging.getLogger(__name__)

    try:
        settings = load_config(args)
    except Exception as e:
        setup_root_logger(level=args.log_level or "INFO")
        logger.error(f"Invalid configuration: {e}")
        return 1

    setup_root_logger(
        settings.logging.file_path,
        settings.logging.level,
        format_string=settings.logging.format,
        max_file_size_mb=settings.logging.max_file_size_mb,
        backup_count=settings.logging.backup_count
    )

    logger.info("Starting optimized .NET setup...")

    try:
        artifact_manager = None
        if settings.artifacts.enabled:
            artifact_manager = ArtifactManager(base_path=settings.artifacts.base_path)

        orchestrator = SetupOrchestrator(settings, artifact_manager=artifact_manager)
        report = await orchestrator.run()

        logger.info("=" * 60)
        logger.info("SUMMARY")
        logger.info("=" * 60)
        logger.info(f"Target version: {report.target_version}")
        logger.info(f"Installed version: {report.installed_version}")
        logger.info(f"Already installed: {report.fast_path}")
        logger.info(f"Warnings: {len(report.warnings)}")
        logger.info(f"Duration: {report.duration_seconds:.2f} seconds")
        logger.info("=" * 60)

        print_summary(report, settings)
        return 0 if report.success else 1

    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1


def cli() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
