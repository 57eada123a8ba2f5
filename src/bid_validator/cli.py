"""
Command-line interface for the bid validator.
Validates recorded request/response pairs offline and inspects metadata.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import structlog
from prometheus_client import CollectorRegistry

from bid_validator.core.config import get_settings


def configure_logging(verbose: bool = False):
    """Configure logging for CLI."""
    level = logging.DEBUG if verbose else logging.getLevelName(get_settings().log_level)
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def _load_json(path: str) -> dict:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def cmd_validate(args) -> int:
    """Validate a recorded bid response against its request."""
    from bid_validator.core.metadata import Metadata
    from bid_validator.core.rules import RejectionReason
    from bid_validator.core.validator import BidValidator
    from bid_validator.models.bidding import dump_wire, parse_request, parse_response
    from bid_validator.services.metrics import ValidatorMetrics

    settings = get_settings()
    metadata = Metadata.load(settings.metadata_path)
    metrics = ValidatorMetrics(registry=CollectorRegistry())
    validator = BidValidator(metadata, reporter=metrics)

    request = parse_request(_load_json(args.request))
    response = parse_response(_load_json(args.response))
    ads_in, bids_in = len(response.ads), response.bid_count

    validator.validate(request, response)

    print(f"\n{'='*60}")
    print(f"VALIDATION: request {request.id}")
    print(f"{'='*60}")
    print(f"Ads:  {ads_in} -> {len(response.ads)}")
    print(f"Bids: {bids_in} -> {response.bid_count}")

    rejections = [
        (reason, metrics.rejection_count(reason))
        for reason in RejectionReason
        if metrics.rejection_count(reason)
    ]
    if rejections:
        print("\nREJECTIONS:")
        for reason, count in rejections:
            print(f"  {reason.value:<34} {int(count):>5}")
    print(f"\n{'='*60}\n")

    pruned = json.dumps(dump_wire(response), indent=2)
    if args.output:
        Path(args.output).write_text(pruned + "\n", encoding="utf-8")
        print(f"Pruned response written to: {args.output}")
    else:
        print(pruned)
    return 0


def cmd_reasons(args) -> int:
    """List rejection reasons and their metric labels."""
    from bid_validator.core.rules import RejectionReason

    print(f"\n{'Reason':<34} Metric")
    print("-" * 90)
    for reason in RejectionReason:
        print(
            f"{reason.name:<34} "
            f'bid_validator_bids_rejected_total{{reason="{reason.value}"}}'
        )
    print()
    return 0


DESCRIBE_TABLES = {
    "vendor": "vendors",
    "attribute": "creative_attributes",
    "category": "product_categories",
    "sensitive": "sensitive_categories",
    "restricted": "restricted_categories",
}


def cmd_describe(args) -> int:
    """Look up a coded value in the metadata tables."""
    from bid_validator.core.metadata import Metadata

    metadata = Metadata.load(get_settings().metadata_path)
    print(f"{args.table} {args.code}: {metadata.describe(DESCRIBE_TABLES[args.table], args.code)}")

    if args.table == "category":
        sensitive = metadata.decode_sensitive_category(args.code)
        if sensitive is not None:
            name = metadata.describe("sensitive_categories", sensitive)
            print(f"  sensitive category {sensitive}: {name}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Bid Validator CLI - ad slot policy filter for bid responses",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Validate command
    validate_parser = subparsers.add_parser(
        "validate", help="Prune a recorded bid response against its request"
    )
    validate_parser.add_argument("request", help="Bid request JSON file")
    validate_parser.add_argument("response", help="Bid response JSON file")
    validate_parser.add_argument(
        "--output", "-o", type=str, help="Write the pruned response to this file"
    )

    # Reasons command
    subparsers.add_parser("reasons", help="List rejection reasons")

    # Describe command
    describe_parser = subparsers.add_parser("describe", help="Describe a metadata code")
    describe_parser.add_argument("table", choices=sorted(DESCRIBE_TABLES))
    describe_parser.add_argument("code", type=int, help="Numeric code")

    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if not args.command:
        parser.print_help()
        return 0

    # Route to appropriate command
    commands = {
        "validate": cmd_validate,
        "reasons": cmd_reasons,
        "describe": cmd_describe,
    }

    try:
        return commands[args.command](args)
    except (OSError, ValueError) as e:
        print(f"ERROR - {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
