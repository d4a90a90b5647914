"""
Command-line audit runner.

Usage:
    site-compliance https://example.com
    site-compliance https://example.com --viewport mobile --contrast h1 "nav a" --metrics
    site-compliance https://example.com --focusable "button, a" --json
    SITE_BASE_URL=https://example.com site-compliance /pricing

Exit codes:
    0 = all checks passed
    1 = at least one check failed
    2 = invalid arguments or configuration
"""

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from typing import List, Optional

from site_compliance.browser import ToolError, browser_session
from site_compliance.config import ComplianceConfig, settings
from site_compliance.logging_config import configure_logging
from site_compliance.models import CheckResult
from site_compliance.orchestrator import ComplianceOrchestrator
from site_compliance.responsive import parse_viewport

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="site-compliance",
        description="Accessibility and responsive compliance audit for one page",
    )
    parser.add_argument(
        "url",
        nargs="?",
        default=settings.base_url,
        help="Page to audit; a path starting with / is resolved against $SITE_BASE_URL",
    )
    parser.add_argument(
        "--viewport",
        default=None,
        help="mobile, tablet, desktop or WIDTHxHEIGHT; adds responsive checks at that size",
    )
    parser.add_argument(
        "--contrast",
        nargs="+",
        default=["body"],
        metavar="SELECTOR",
        help="Selectors whose text contrast is checked (default: body)",
    )
    parser.add_argument(
        "--min-contrast",
        type=float,
        default=None,
        help="Required contrast ratio (default: 4.5 normal text, 3.0 large text)",
    )
    parser.add_argument(
        "--focusable",
        default=None,
        metavar="SELECTOR",
        help="Also check keyboard accessibility of these elements",
    )
    parser.add_argument("--metrics", action="store_true", help="Collect Core Web Vitals")
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    return parser


async def run_audit(args: argparse.Namespace, config: ComplianceConfig) -> List[CheckResult]:
    viewport = parse_viewport(args.viewport) if args.viewport else None
    async with browser_session(config, viewport=viewport) as session:
        await session.goto(args.url, timeout=config.playwright_timeout_ms)
        audit = ComplianceOrchestrator(session, config)

        results: List[CheckResult] = []
        results.extend(await audit.check_structure())
        results.extend(await audit.check_contrast_many(args.contrast, args.min_contrast))
        if args.focusable:
            results.append(await audit.check_keyboard_accessibility(args.focusable))
        results.append(await audit.check_no_keyboard_trap())
        results.append(await audit.check_logical_tab_order())
        if viewport is not None:
            results.extend(await audit.check_responsive(viewport))
        if args.metrics:
            results.extend(await audit.check_performance())
        return results


def report(results: List[CheckResult], as_json: bool) -> None:
    if as_json:
        print(json.dumps([asdict(result) for result in results], indent=2))
        return
    for result in results:
        status = "PASS" if result.passed else "FAIL"
        print(f"[{status}] {result.message}")
    failed = sum(1 for result in results if not result.passed)
    print(f"\n{len(results) - failed}/{len(results)} checks passed")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level or settings.log_level)

    if not args.url:
        parser.error("a URL is required (or set SITE_BASE_URL)")

    try:
        if args.url.startswith("/"):
            args.url = settings.url(args.url)
        results = asyncio.run(run_audit(args, settings))
    except ValueError as exc:
        logger.error(str(exc))
        return 2
    except ToolError as exc:
        logger.error(f"Audit aborted: {exc}")
        return 1

    report(results, args.json)
    return 0 if all(result.passed for result in results) else 1


if __name__ == "__main__":
    sys.exit(main())
