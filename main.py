import asyncio
import argparse
import json
import logging
import sys
from core.engine import Engine
from core.crawler import MAX_DEPTH, clamp_depth
from fetch.http_client import DEFAULT_TIMEOUT_MS, FetchError, clamp_timeout_ms


def _print_text_report(report):
    active = report.active
    print("\nProposed Content-Security-Policy:\n")
    print(active.policy + "\n")
    if report.existing:
        print("Existing CSP Detected:")
        print(report.existing + "\n")
    if active.diff and not active.diff.is_empty():
        print("Diff vs existing:")
        for clause in active.diff.added:
            print(f"  + {clause}")
        for clause in active.diff.removed:
            print(f"  - {clause}")
        print("")
    risk = report.risk["active"]
    print(f"Risk: {risk.score}/100 ({risk.level})")
    for issue in risk.issues:
        print(f"  - {issue.message} (-{issue.weight})")
    if report.depth > 0:
        print(f"\nCrawled {len(report.pages)} pages (depth {report.depth})")
    if report.runtime:
        print(f"Runtime collection: {report.runtime_status}")
    if active.notes:
        print("\nNotes:")
        for note in active.notes:
            print(f"  - {note}")


def main():
    parser = argparse.ArgumentParser(description="Generate a Content-Security-Policy for a live web page")
    parser.add_argument("url", help="Target URL (e.g., https://example.com)")
    parser.add_argument("--strict", action="store_true", help="Report the strict policy (self + hashes only for scripts/styles)")
    parser.add_argument("--runtime", action="store_true", help="Also render the page in headless Chromium (requires playwright and PLAYWRIGHT_ENABLED=1)")
    parser.add_argument("--depth", type=int, default=0, help=f"Same-origin crawl depth (0-{MAX_DEPTH}, default: 0)")
    parser.add_argument("--timeout", type=int, default=DEFAULT_TIMEOUT_MS, help=f"Per-request timeout in ms (3000-45000, default: {DEFAULT_TIMEOUT_MS})")
    parser.add_argument("--json", action="store_true", help="Print the full report as JSON")
    parser.add_argument("--log-level", type=str, default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging verbosity level (default: WARNING)")
    parser.add_argument("--headers-file", type=str, help="Path to JSON file containing additional HTTP headers (e.g., User-Agent, Cookie, Authorization)")
    args = parser.parse_args()

    # Configure logging
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, args.log_level),
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    logger = logging.getLogger(__name__)

    # Load custom headers from JSON file if provided
    custom_headers = {}
    if args.headers_file:
        try:
            with open(args.headers_file, 'r') as f:
                custom_headers = json.load(f)
        except FileNotFoundError:
            logger.error(f"Headers file not found: {args.headers_file}")
            sys.exit(1)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in headers file: {e}")
            sys.exit(1)
        if not isinstance(custom_headers, dict):
            logger.error("Headers file must contain a JSON object (dictionary)")
            sys.exit(1)
        logger.info(f"Loaded {len(custom_headers)} custom headers from {args.headers_file}")

    depth = clamp_depth(args.depth)
    timeout_ms = clamp_timeout_ms(args.timeout)
    if depth != args.depth or timeout_ms != args.timeout:
        logger.info(f"Using depth {depth} and timeout {timeout_ms}ms after clamping")

    async def run():
        engine = Engine(
            runtime_backend="playwright" if args.runtime else "disabled",
            custom_headers=custom_headers,
        )
        logger.info(f"Analyzing {args.url}...")
        return await engine.analyze(
            args.url,
            strict=args.strict,
            runtime=args.runtime,
            depth=depth,
            timeout_ms=timeout_ms,
        )

    try:
        report = asyncio.run(run())
    except FetchError as e:
        print(f"Failed ({e.kind}): {e.message} [{e.url}, attempt {e.attempt}/{e.retries + 1}]", file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        _print_text_report(report)

if __name__ == "__main__":
    main()
