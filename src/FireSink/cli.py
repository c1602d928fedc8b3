# ============================================================================
# FireSink - Command Line Interface
#
# Purpose: Standalone host for the Firebase sink: read JSON-lines events from
#          a file or stdin and forward them, or dry-run the path/verb resolution
# Inputs: Command-line arguments, JSON lines
# Outputs: Firebase writes (run) or resolved writes as JSON lines (resolve)
# Dependencies: argparse, config, events, sinks, dispatcher
# Usage: python -m FireSink.cli run --config firesink.yaml --input events.jsonl
#
# Changelog:
#   2026-09-06: Initial CLI with 'run' command
#   2026-09-17: 'resolve' dry-run command
#   2026-09-24: --url/--path/--verb/--target/--secret overrides on top of the YAML file
# ============================================================================

import argparse
import json
import sys
from contextlib import nullcontext
from typing import IO, Any, ContextManager, Dict, List, Optional

from FireSink import __version__
from FireSink.config import Config
from FireSink.dispatcher import EventDispatcher
from FireSink.errors import EventDecodeError, FireSinkError
from FireSink.events import decode_json_lines
from FireSink.logging_utils import get_logger, setup_logging
from FireSink.sinks.firebase_sink import FirebaseSink

logger = get_logger(__name__)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config YAML file (output and logging sections)",
    )
    parser.add_argument(
        "--input",
        type=str,
        default="-",
        help="JSON-lines file with one event per line (default: stdin)",
    )
    parser.add_argument("--url", type=str, default=None, help="Firebase database URL")
    parser.add_argument("--path", type=str, default=None, help="Path or %%{field} template to write to")
    parser.add_argument(
        "--verb",
        type=str,
        default=None,
        help="put, patch, post, delete, or a %%{field} template resolving to one (default: put)",
    )
    parser.add_argument(
        "--target",
        type=str,
        default=None,
        help="Send only this event field instead of the whole event",
    )
    parser.add_argument(
        "--log_level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: from config, INFO)",
    )


def create_parser() -> argparse.ArgumentParser:
    """
    Create the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="firesink",
        description="Forward JSON events to a Firebase realtime database",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Forward events to Firebase")
    _add_common_arguments(run_parser)
    run_parser.add_argument(
        "--secret",
        type=str,
        default=None,
        help="Database secret (or set FIRESINK_OUTPUT_SECRET)",
    )

    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Print the write each event would produce, without contacting Firebase",
    )
    _add_common_arguments(resolve_parser)

    return parser


def load_config(args: argparse.Namespace) -> Config:
    """
    Build the Config from --config (if any), env vars, and CLI overrides.

    Raises:
        ConfigurationError: If the merged configuration is invalid
        FileNotFoundError: If --config points to a missing file
    """
    output_overrides: Dict[str, Any] = {
        "url": args.url,
        "path": args.path,
        "verb": args.verb,
        "target": args.target,
        "secret": getattr(args, "secret", None),
    }
    overrides = {"output": output_overrides}
    if args.config:
        return Config.from_yaml(args.config, overrides=overrides)
    return Config.from_dict({}, overrides=overrides)


def _open_input(path: str) -> ContextManager[IO[str]]:
    if path == "-":
        return nullcontext(sys.stdin)
    return open(path, "r", encoding="utf-8")


def run_command(args: argparse.Namespace) -> int:
    """
    Forward every event of the input to Firebase.

    Returns:
        Exit code (0 success, 1 FireSink error, 2 unexpected error)
    """
    try:
        config = load_config(args)
        setup_logging(args.log_level or config.logging.level, config.logging.format)

        sink = FirebaseSink()
        sink.start(config.output)

        dispatched = 0
        rejected = 0
        undecodable = 0

        def _count_bad_line(line_number: int, error: EventDecodeError) -> None:
            nonlocal undecodable
            undecodable += 1
            logger.warning(f"Skipping input line {line_number}: {error}")

        try:
            with _open_input(args.input) as stream:
                for _, event in decode_json_lines(stream, on_error=_count_bad_line):
                    if sink.handle(event) is None:
                        rejected += 1
                    else:
                        dispatched += 1
        finally:
            sink.stop()

        print("\n" + "=" * 60)
        print("✓ Forwarding Complete")
        print("=" * 60)
        print(f"URL:             {config.output.url}")
        print(f"Dispatched:      {dispatched}")
        print(f"Rejected:        {rejected}")
        print(f"Undecodable:     {undecodable}")
        print("=" * 60 + "\n")

        return 0

    except (FireSinkError, FileNotFoundError) as e:
        logger.error(f"FireSink error: {e}")
        print(f"\n✗ Error: {e}\n", file=sys.stderr)
        return 1
    except Exception as e:
        logger.exception("Unexpected error while forwarding events")
        print(f"\n✗ Unexpected error: {e}\n", file=sys.stderr)
        return 2


def resolve_command(args: argparse.Namespace) -> int:
    """
    Dry run: print one JSON line per event with its resolved path, verb and payload.

    Returns:
        Exit code (0 when every event resolved, 1 otherwise)
    """
    try:
        config = load_config(args)
    except (FireSinkError, FileNotFoundError) as e:
        print(f"\n✗ Error: {e}\n", file=sys.stderr)
        return 1

    setup_logging(args.log_level or config.logging.level, config.logging.format)
    dispatcher = EventDispatcher(config.output)
    failures = 0

    def _report_bad_line(line_number: int, error: EventDecodeError) -> None:
        nonlocal failures
        failures += 1
        print(json.dumps({"line": line_number, "error": error.message}))

    try:
        with _open_input(args.input) as stream:
            for line_number, event in decode_json_lines(stream, on_error=_report_bad_line):
                try:
                    write = dispatcher.resolve(event)
                except FireSinkError as e:
                    failures += 1
                    print(json.dumps({"line": line_number, "error": e.message}))
                    continue
                print(json.dumps({"line": line_number, **write.to_dict()}, default=str))
    except FileNotFoundError as e:
        print(f"\n✗ Error: {e}\n", file=sys.stderr)
        return 1

    return 0 if failures == 0 else 1


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Arguments (default: sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "run":
        return run_command(args)
    if args.command == "resolve":
        return resolve_command(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
