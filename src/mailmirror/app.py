# =============================================================================
# mailmirror Command Line
# =============================================================================
# A thin front end over MailboxController, useful for checking an account
# setup and for watching what the mirror does against a real server:
#
#   mailmirror --account personal --folder INBOX --pages 2
#
# It connects, refreshes the folder list, selects the folder, loads the
# requested number of pages and prints what it got. Failures reported by the
# mailbox core are printed to stderr as they happen.
# =============================================================================

import argparse
import asyncio
import logging
import sys

from mailmirror import __version__, __app_name__
from mailmirror.config import Config, ConfigError, print_paths
from mailmirror.diagnostics import ErrorReport, ErrorReporter
from mailmirror.imap import IMAPClient, TransportError
from mailmirror.mailbox import MailboxController

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


# =============================================================================
# Logging
# =============================================================================

def setup_logging(config: Config, debug: bool = False) -> None:
    """
    Configure the root logger from the [logging] section.

    Args:
        config: Loaded configuration.
        debug: Force DEBUG on the console (the --debug flag).
    """
    level = logging.DEBUG if debug else getattr(logging, config.logging.level)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(console)

    log_file = config.logging.log_file_path()
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(file_handler)

    # aioimaplib logs every command at DEBUG, including the LOGIN line
    logging.getLogger("aioimaplib").setLevel(logging.INFO)


# =============================================================================
# Output
# =============================================================================

def print_folders(controller: MailboxController) -> None:
    for i, state in enumerate(controller.folders):
        marker = "*" if i == controller.selected_folder else " "
        unread = f" ({state.unread_count} unread)" if state.unread_count else ""
        print(f"{marker} {state.name:<30} {state.message_count:>6}{unread}")


def print_envelopes(controller: MailboxController) -> None:
    envelopes = controller.envelopes
    if not envelopes:
        print("(no messages)")
        return

    for envelope in envelopes:
        summary = envelope.summary
        date = summary.date.strftime("%Y-%m-%d %H:%M") if summary.date else " " * 16
        unseen = "N" if envelope.is_unseen else " "
        clip = "@" if summary.body.has_attachments else " "
        print(f"{unseen}{clip} {date}  {summary.display_sender[:24]:<24}  {summary.subject}")

    if controller.more_available:
        print(f"... {controller.active_folder.last_loaded_index} older messages not loaded")


def _print_report(report: ErrorReport) -> None:
    print(f"error: {report.message}", file=sys.stderr)


# =============================================================================
# Run
# =============================================================================

async def run(config: Config, args: argparse.Namespace) -> int:
    """Connect, mirror the requested folder and print it."""
    account = config.get_account(args.account)

    reporter = ErrorReporter()
    reporter.add_listener(_print_report)

    client = IMAPClient(account, preview_bytes=config.mailbox.preview_bytes)
    controller = MailboxController.from_config(client, config.mailbox, reporter=reporter)
    if args.folder:
        controller.initial_folder = args.folder

    try:
        await client.connect()
    except TransportError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    try:
        if not await controller.load_info():
            return 1

        active = controller.active_folder
        if args.folder and (active is None or active.name != args.folder):
            print(f"error: no folder named {args.folder!r}", file=sys.stderr)
            return 1

        for _ in range(args.pages - 1):
            if not controller.more_available:
                break
            result = await controller.load_more()
            if not result.success:
                break

        print_folders(controller)
        print()
        print_envelopes(controller)
    finally:
        await client.disconnect()

    return 0


# =============================================================================
# CLI Entry Point
# =============================================================================

def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        prog=__app_name__,
        description="mailmirror: page through a remote IMAP mailbox",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--paths",
        action="store_true",
        help="Print configuration paths and exit",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode (verbose logging)",
    )

    parser.add_argument(
        "--account",
        help="Account name from config.toml (default: [general] default_account)",
    )

    parser.add_argument(
        "--folder",
        help="Folder to open (default: [mailbox] initial_folder)",
    )

    parser.add_argument(
        "--pages",
        type=int,
        default=1,
        help="Number of pages to load (default: 1)",
    )

    args = parser.parse_args(argv)
    if args.pages < 1:
        parser.error("--pages must be at least 1")
    return args


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for mailmirror.

    This function:
        1. Parses command-line arguments
        2. Handles special commands (--paths, --version)
        3. Loads configuration and sets up logging
        4. Runs the mirror against the chosen account

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = parse_args(argv)

    if args.paths:
        print_paths()
        return 0

    try:
        config = Config.load()
        setup_logging(config, debug=args.debug)
        return asyncio.run(run(config, args))
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
