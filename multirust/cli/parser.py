"""
multirust CLI argument parser.

This module implements the command-line interface for multirust using argparse.
"""

import argparse
import importlib
import logging
import sys
from typing import List, Optional

from multirust import __version__
from multirust.cli.utils import pause_if_interactive
from multirust.config.store import ConfigStore
from multirust.core.notify import Notifier
from multirust.proxy.dispatcher import has_sentinel
from multirust.shims.installer import proxies_active, self_installed

logger = logging.getLogger(__name__)

# Commands that must work whatever the metadata version is
VERSION_GATE_EXEMPT = {"upgrade-data", "delete-data", "install", "uninstall"}

# Commands that skip the "are the proxies on PATH" self-test
SELF_TEST_EXEMPT = {"install", "proxy"}

# Command name -> (module, handler)
COMMAND_MAP = {
    "update": ("multirust.cli.commands.update", "run_update"),
    "default": ("multirust.cli.commands.update", "run_default"),
    "override": ("multirust.cli.commands.update", "run_override"),
    "show-default": ("multirust.cli.commands.show", "run_show_default"),
    "show-override": ("multirust.cli.commands.show", "run_show_override"),
    "list-overrides": ("multirust.cli.commands.show", "run_list_overrides"),
    "list-toolchains": ("multirust.cli.commands.show", "run_list_toolchains"),
    "remove-override": ("multirust.cli.commands.remove", "run_remove_override"),
    "remove-toolchain": ("multirust.cli.commands.remove", "run_remove_toolchain"),
    "run": ("multirust.cli.commands.run", "run_run"),
    "proxy": ("multirust.cli.commands.run", "run_proxy"),
    "which": ("multirust.cli.commands.run", "run_which"),
    "doc": ("multirust.cli.commands.run", "run_doc"),
    "install": ("multirust.cli.commands.install", "run_install"),
    "uninstall": ("multirust.cli.commands.install", "run_uninstall"),
    "upgrade-data": ("multirust.cli.commands.data", "run_upgrade_data"),
    "delete-data": ("multirust.cli.commands.data", "run_delete_data"),
    "ctl": ("multirust.cli.commands.ctl", "run"),
}


class CLI:
    """multirust command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="multirust",
            description="multirust - manage multiple Rust toolchains",
            epilog='Run without a command to install multirust for the current user.\n'
            'Use "multirust COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"multirust {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_toolchain_commands(subparsers)
        self._add_show_commands(subparsers)
        self._add_remove_commands(subparsers)
        self._add_run_commands(subparsers)
        self._add_install_commands(subparsers)
        self._add_data_commands(subparsers)
        self._add_ctl_command(subparsers)

        return parser

    def _add_install_options(self, parser):
        """Add the options selecting where a toolchain is installed from."""
        group = parser.add_mutually_exclusive_group()
        group.add_argument(
            "--installer",
            "-i",
            action="append",
            metavar="PATH_OR_URL",
            help="Install from an archive path or URL (can be used multiple times)",
        )
        group.add_argument(
            "--copy-local",
            "-c",
            metavar="DIR",
            help="Install by copying a local toolchain directory",
        )
        group.add_argument(
            "--link-local",
            "-l",
            metavar="DIR",
            help="Install by linking to a local toolchain directory",
        )

    def _add_toolchain_commands(self, subparsers):
        """Add 'update', 'default' and 'override' subcommands."""
        parser = subparsers.add_parser(
            "update",
            help="Install or update a toolchain",
            description="Install or update a toolchain from the dist server or a "
            "custom installer. Without a name, update every installed channel.",
        )
        parser.add_argument("toolchain", nargs="?", help="Toolchain to update")
        self._add_install_options(parser)

        parser = subparsers.add_parser(
            "default",
            help="Set the default toolchain",
            description="Install the toolchain if needed and make it the default",
        )
        parser.add_argument("toolchain", help="Toolchain name")
        self._add_install_options(parser)

        parser = subparsers.add_parser(
            "override",
            help="Set the toolchain override for the current directory",
            description="Install the toolchain if needed and pin it for the "
            "current directory",
        )
        parser.add_argument("toolchain", help="Toolchain name")
        self._add_install_options(parser)

    def _add_show_commands(self, subparsers):
        """Add 'show-*' and 'list-*' subcommands."""
        subparsers.add_parser("show-default", help="Show the default toolchain")
        subparsers.add_parser(
            "show-override",
            help="Show the toolchain in effect for the current directory",
        )
        subparsers.add_parser("list-overrides", help="List all overrides")
        subparsers.add_parser("list-toolchains", help="List all installed toolchains")

    def _add_remove_commands(self, subparsers):
        """Add 'remove-override' and 'remove-toolchain' subcommands."""
        parser = subparsers.add_parser(
            "remove-override", help="Remove an override (default: current directory)"
        )
        parser.add_argument(
            "path",
            nargs="?",
            metavar="DIR",
            help="Directory whose override to remove (default: current directory)",
        )
        parser.add_argument(
            "--path",
            dest="path_option",
            metavar="DIR",
            help="Same as DIR",
        )

        parser = subparsers.add_parser(
            "remove-toolchain", help="Uninstall a toolchain"
        )
        parser.add_argument("toolchain", help="Toolchain name")

    def _add_run_commands(self, subparsers):
        """Add 'run', 'proxy', 'which' and 'doc' subcommands."""
        parser = subparsers.add_parser(
            "run",
            help="Run a command with a specific toolchain",
            description="Run a tool from the named toolchain, e.g. "
            "`multirust run nightly cargo build`",
        )
        parser.add_argument("toolchain", help="Toolchain name")
        parser.add_argument(
            "command_args",
            nargs=argparse.REMAINDER,
            metavar="COMMAND",
            help="Tool to run followed by its arguments",
        )

        parser = subparsers.add_parser(
            "proxy",
            help="Run a command with the toolchain for the current directory",
        )
        parser.add_argument(
            "command_args",
            nargs=argparse.REMAINDER,
            metavar="COMMAND",
            help="Tool to run followed by its arguments",
        )

        parser = subparsers.add_parser(
            "which", help="Print the binary a proxied tool would run"
        )
        parser.add_argument("binary", help="Tool name (e.g. rustc)")

        parser = subparsers.add_parser(
            "doc", help="Open the documentation for the current toolchain"
        )
        parser.add_argument(
            "--all",
            action="store_true",
            help="Open the documentation index instead of the standard library",
        )

    def _add_install_commands(self, subparsers):
        """Add 'install' and 'uninstall' subcommands."""
        parser = subparsers.add_parser(
            "install",
            help="Install multirust for the current user",
            description="Place multirust and its proxies in the multirust bin "
            "directory",
        )
        parser.add_argument(
            "--move",
            action="store_true",
            help="Move the running binary instead of copying it",
        )
        parser.add_argument(
            "--add-to-path",
            action="store_true",
            help="Add the multirust bin directory to PATH",
        )

        parser = subparsers.add_parser(
            "uninstall", help="Uninstall multirust and all of its data"
        )
        parser.add_argument(
            "--no-prompt", action="store_true", help="Do not ask for confirmation"
        )

    def _add_data_commands(self, subparsers):
        """Add 'upgrade-data' and 'delete-data' subcommands."""
        subparsers.add_parser(
            "upgrade-data", help="Upgrade the metadata to the current version"
        )
        parser = subparsers.add_parser(
            "delete-data", help="Delete all toolchains, overrides and metadata"
        )
        parser.add_argument(
            "--no-prompt", action="store_true", help="Do not ask for confirmation"
        )

    def _add_ctl_command(self, subparsers):
        """Add 'ctl' subcommand."""
        parser = subparsers.add_parser(
            "ctl", help="Machine-readable queries for scripts"
        )
        ctl_subparsers = parser.add_subparsers(
            dest="ctl_command", help="Query", metavar="QUERY"
        )
        ctl_subparsers.add_parser("home", help="Print the multirust home directory")
        ctl_subparsers.add_parser(
            "default-toolchain", help="Print the default toolchain"
        )
        ctl_subparsers.add_parser(
            "override-toolchain",
            help="Print the toolchain in effect for the current directory",
        )
        sysroot = ctl_subparsers.add_parser(
            "toolchain-sysroot", help="Print the install prefix of a toolchain"
        )
        sysroot.add_argument("toolchain", help="Toolchain name")

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        # Configure logging
        self._configure_logging(parsed_args)
        notifier = Notifier(verbose=parsed_args.verbose)

        try:
            cfg = ConfigStore.from_env(notifier)

            if self._needs_version_check(parsed_args):
                cfg.check_metadata_version()

            if parsed_args.command not in SELF_TEST_EXEMPT:
                self._warn_if_not_set_up(cfg)

            if not parsed_args.command:
                return self._run_first_time_setup(cfg)

            return self._dispatch_command(cfg, parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except Exception as e:
            notifier.error(str(e))
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on the verbose flag.

        Args:
            args: Parsed arguments with verbose flag
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _needs_version_check(self, args) -> bool:
        if not args.command or args.command in VERSION_GATE_EXEMPT:
            return False
        if args.command in ("run", "proxy") and has_sentinel(args.command_args or []):
            return False
        return True

    def _warn_if_not_set_up(self, cfg: ConfigStore) -> None:
        """Warn (without failing) when `rustc` on PATH is not proxied."""
        if proxies_active():
            return

        if not self_installed(cfg):
            cfg.notifier.warn(
                "multirust is not installed for the current user: `rustc` "
                "invocations will not be proxied.\n\n"
                "For more information, run  `multirust install --help`\n"
            )
        else:
            cfg.notifier.warn(
                "multirust is installed but is not set up correctly: `rustc` "
                "invocations will not be proxied.\n\n"
                f"Ensure '{cfg.bin_dir}' is on your PATH, and has priority.\n"
            )

    def _run_first_time_setup(self, cfg: ConfigStore) -> int:
        from multirust.cli.commands.install import maybe_install

        try:
            return maybe_install(cfg)
        finally:
            print()
            pause_if_interactive()

    def _dispatch_command(self, cfg: ConfigStore, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            cfg: Configuration store for the multirust home
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        module_name, handler_name = COMMAND_MAP[args.command]

        # Dynamic import of command module
        module = importlib.import_module(module_name)
        handler = getattr(module, handler_name)

        return handler(cfg, args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
