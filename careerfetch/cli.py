"""
Command-line interface for careerfetch.

Usage:
    python -m careerfetch --company-id acme --careers-url https://acme.example/careers
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from careerfetch.config import Settings, get_settings
from careerfetch.delivery import DeliveryError, WebhookClient
from careerfetch.fetchers.http import HttpClientError
from careerfetch.metrics import FetchMetrics
from careerfetch.models import DEFAULT_SOURCE, FetchResult
from careerfetch.orchestrator import JobFetchService
from careerfetch.strategies import default_strategies

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="careerfetch",
        description="Fetch job listings from a careers site with multi-strategy fallback",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Static careers page
  python -m careerfetch --company-id acme --careers-url https://acme.example/careers

  # Try the careers API first
  python -m careerfetch --company-id acme --api-base-url https://careers.acme.example

  # Write the result and deliver it (requires CAREERFETCH_WEBHOOK_URL / _SECRET)
  python -m careerfetch --company-id acme --careers-url https://acme.example/careers \\
      --output jobs.json --deliver

Unset options fall back to CAREERFETCH_* environment variables or .env.
""",
    )

    # Target
    parser.add_argument("--company-id", default=None, help="Company identifier")
    parser.add_argument("--careers-url", default=None, help="Careers page URL")
    parser.add_argument("--api-base-url", default=None, help="Careers API base URL")
    parser.add_argument(
        "--timeout",
        type=int,
        default=None,
        help="Request/navigation timeout in milliseconds (default: 30000)",
    )
    parser.add_argument(
        "--retries",
        type=int,
        default=None,
        help="Retries per request and browser attempts (default: 3)",
    )
    parser.add_argument(
        "--source",
        default=DEFAULT_SOURCE,
        help=f"Source tag stamped on every job (default: {DEFAULT_SOURCE})",
    )

    # Behavior
    parser.add_argument(
        "--no-browser",
        action="store_true",
        help="Skip the browser strategy",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help="Browser debug mode: page console logging and screenshots",
    )

    # Output
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Write the result as JSON to this path ('-' for stdout)",
    )
    parser.add_argument(
        "--deliver",
        action="store_true",
        help="POST the signed result to the configured webhook",
    )

    # Verbosity
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Debug logging",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress all output except errors",
    )

    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace, base: Optional[Settings] = None) -> Settings:
    """Overlay explicit command line options on the environment settings."""
    settings = base or get_settings()
    overrides: Dict[str, Any] = {
        "company_id": args.company_id,
        "careers_url": args.careers_url,
        "api_base_url": args.api_base_url,
        "timeout_ms": args.timeout,
        "max_retries": args.retries,
        "debug": args.debug,
    }
    return settings.model_copy(update={k: v for k, v in overrides.items() if v is not None})


def configure_logging(args: argparse.Namespace, settings: Settings) -> None:
    if args.quiet:
        level = logging.ERROR
    elif args.verbose:
        level = logging.DEBUG
    else:
        level = getattr(logging, settings.log_level, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def write_output(result: FetchResult, path: str) -> None:
    text = json.dumps(result.to_dict(), indent=2, ensure_ascii=False)
    if path == "-":
        print(text)
        return
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)


def print_summary(result: FetchResult, metrics: Optional[FetchMetrics] = None) -> None:
    print()
    print("=" * 50)
    print("Fetch Summary")
    print("=" * 50)
    print(f"  Success:  {result.success}")
    print(f"  Method:   {result.method}")
    print(f"  Jobs:     {result.total_count}")
    if result.error:
        print(f"  Error:    {result.error}")
    for name, message in result.failures:
        print(f"  - {name}: {message}")

    if metrics is None:
        return

    summary = metrics.summary()
    print()
    print("Timing")
    print("-" * 50)
    for metric in metrics.metrics:
        status = metric.metadata.get("status", "")
        print(f"  {metric.name:<24} {metric.value:>9.0f}ms  {status}")
    print(f"  Average:  {summary['averageExecutionTime']:.0f}ms")
    for violation in metrics.violations:
        print(f"  ! {violation.metric} {violation.value:.0f}ms over {violation.severity} threshold")
    for name, count in sorted(summary["counters"].items()):
        print(f"  {name}: {count}")


async def async_main(args: argparse.Namespace, settings: Optional[Settings] = None) -> int:
    """Async entry point."""
    settings = build_settings(args, settings)
    configure_logging(args, settings)

    try:
        target = settings.to_target_config()
        webhook = None
        if args.deliver:
            webhook = WebhookClient(settings.webhook_url or "", settings.webhook_secret or "")
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    metrics = FetchMetrics()
    service = JobFetchService(
        strategies=default_strategies(settings.to_browser_config(), use_browser=not args.no_browser),
        metrics=metrics,
    )

    try:
        result = await service.fetch_jobs(target, source=args.source)

        if args.output:
            write_output(result, args.output)
        if not args.quiet and args.output != "-":
            print_summary(result, metrics if args.verbose else None)

        if not result.success:
            return 1

        if webhook is not None:
            await webhook.deliver(result, args.source)

        return 0

    except KeyboardInterrupt:
        if not args.quiet:
            print("\nInterrupted by user")
        return 130

    except (DeliveryError, HttpClientError) as e:
        print(f"Delivery failed: {e}", file=sys.stderr)
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    try:
        return asyncio.run(async_main(args))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
