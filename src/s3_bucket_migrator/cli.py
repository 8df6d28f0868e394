"""Command line entry point for one-shot migrations."""

from __future__ import annotations

import argparse
import os
import signal
import sys
import threading
from contextlib import contextmanager
from typing import Any, Iterator, TextIO

from . import __version__
from .builders.provider import create_provider
from .config import MigrationSettings
from .exceptions import CredentialError, MigrationConfigError
from .logging import setup_structured_logging
from .migration.planner import MigrationRequest, build_plan
from .migration.runner import EXIT_CONFIG_ERROR, MigrationRunner
from .services.s3.base import StorageProvider
from .tracing import initialize_tracing
from .utils.errors import sanitize_exception


def _tag(value: str) -> tuple[str, str]:
    key, sep, tag_value = value.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"tag must be KEY=VALUE, got '{value}'")
    return key, tag_value


def _single_char(value: str) -> str:
    if len(value) != 1:
        raise argparse.ArgumentTypeError(f"expected a single character, got '{value}'")
    return value


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="s3-bucket-migrator",
        description="Create renamed copies of S3 buckets, replicating their settings and optionally their data",
    )
    ap.add_argument("sources", nargs="+", metavar="SOURCE", help="Source bucket name")
    ap.add_argument("--copy-data", action="store_true", help="Copy objects into each target bucket")
    ap.add_argument("--plan-only", action="store_true", help="Print the plan without changing anything")
    ap.add_argument(
        "--inspect",
        action="store_true",
        help="Read source bucket settings into the plan (implies --plan-only)",
    )
    ap.add_argument(
        "--delete-extraneous",
        action="store_true",
        help="With --copy-data, delete target objects that do not exist in the source",
    )
    ap.add_argument("--region", help="Region for new buckets and the client (default: us-east-1)")
    ap.add_argument("--endpoint", help="Endpoint URL of an S3-compatible service")
    ap.add_argument("--profile", help="Named credentials profile")
    ap.add_argument("--path-style", action="store_true", help="Use path-style addressing")
    ap.add_argument(
        "--tag",
        action="append",
        type=_tag,
        default=[],
        metavar="KEY=VALUE",
        help="Tag added to every target bucket (repeatable)",
    )
    ap.add_argument("--max-concurrency", type=int, help="Buckets migrated in parallel")
    ap.add_argument("--separator", type=_single_char, help="Character replaced in source names (default: '.')")
    ap.add_argument("--substitute", type=_single_char, help="Replacement character (default: '-')")
    ap.add_argument("--output", choices=("text", "json"), default="text", help="Report format")
    ap.add_argument(
        "--log-level",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        default="WARNING",
        help="Log level of the JSON logs written to stderr",
    )
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return ap


@contextmanager
def cancel_on_signals(event: threading.Event) -> Iterator[None]:
    """Set the event on SIGINT or SIGTERM for the duration of the block."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def handler(signum: int, frame: Any) -> None:
        print("Cancelling: running buckets stop at the next step", file=sys.stderr)
        event.set()

    previous = {sig: signal.signal(sig, handler) for sig in (signal.SIGINT, signal.SIGTERM)}
    try:
        yield
    finally:
        for sig, prev in previous.items():
            signal.signal(sig, prev)


def run(
    args: argparse.Namespace,
    provider: StorageProvider | None = None,
    cancel_event: threading.Event | None = None,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Execute a parsed command line and return the process exit code."""
    out = out or sys.stdout
    err = err or sys.stderr
    cancel_event = cancel_event or threading.Event()
    plan_only = args.plan_only or args.inspect

    try:
        settings = MigrationSettings.from_env().override(
            max_concurrency=args.max_concurrency,
            separator=args.separator,
            substitute=args.substitute,
        )
        request = MigrationRequest(
            sources=tuple(args.sources),
            copy_data=args.copy_data,
            plan_only=plan_only,
            region=args.region,
            tags=dict(args.tag),
            delete_extraneous=args.delete_extraneous,
            separator=settings.separator,
            substitute=settings.substitute,
        )
        # Names are validated before any client exists
        build_plan(request)

        if provider is None:
            provider = create_provider(
                region=args.region,
                endpoint=args.endpoint,
                profile=args.profile,
                path_style=args.path_style,
                max_pool_connections=max(10, settings.max_concurrency * 4),
            )

        runner = MigrationRunner(provider, settings, cancel_event=cancel_event)
        with cancel_on_signals(cancel_event):
            if args.inspect:
                summary = runner.plan(request, inspect=True)
            else:
                summary = runner.run(request)
    except (MigrationConfigError, CredentialError, ValueError) as e:
        print(f"error: {sanitize_exception(e)}", file=err)
        return EXIT_CONFIG_ERROR

    if args.output == "json":
        print(summary.report.to_json(), file=out)
    else:
        print(summary.report.text, file=out)
        for source, error in summary.plan_errors.items():
            print(f"warning: {source}: {sanitize_exception(error)}", file=err)
    return summary.exit_code


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_structured_logging(args.log_level, stream=sys.stderr)
    if os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT"):
        initialize_tracing()
    return run(args)
