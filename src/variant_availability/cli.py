"""Command-line interface: resolve availability for a catalog payload file."""

import argparse
import json
import sys
from collections.abc import Sequence
from typing import Any

from variant_availability.config import get_settings
from variant_availability.decorator import availability_caption
from variant_availability.engine import AvailabilityEngine
from variant_availability.exceptions import AvailabilityEngineError
from variant_availability.integrations.catalog_payload import load_payload
from variant_availability.models.decision import AvailabilityMap
from variant_availability.observability.logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="variant-availability",
        description="Resolve variant availability for a catalog response",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve = subparsers.add_parser("resolve", help="Classify the variants of a payload file")
    resolve.add_argument("payload", type=str, help="Path to the catalog response JSON")
    resolve.add_argument(
        "--option",
        dest="options",
        action="append",
        default=None,
        help="UI option label (repeatable); defaults to the labels in the payload",
    )
    resolve.add_argument("--dimension", type=str, default=None, help="Option dimension, e.g. Color")
    resolve.add_argument("--key-property", type=str, default=None, help="Property holding the variant key")
    resolve.add_argument("--preferred-seller", type=str, default=None, help="Preferred seller ID")
    resolve.add_argument("--threshold", type=int, default=None, help="Low stock threshold")
    resolve.add_argument(
        "--accept",
        action="append",
        default=None,
        help="Accepted availability status (repeatable), e.g. InStock, PreOrder",
    )
    resolve.add_argument(
        "--policy",
        choices=["optimistic", "pessimistic"],
        default=None,
        help="Decision for options without commercial data",
    )
    resolve.add_argument("--exact-keys", action="store_true", help="Match option labels exactly")
    resolve.add_argument("--json", action="store_true", help="Print a JSON document")
    resolve.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Log level",
    )
    return parser


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if args.preferred_seller is not None:
        overrides["preferred_seller_id"] = args.preferred_seller
    if args.threshold is not None:
        overrides["low_stock_threshold"] = args.threshold
    if args.accept:
        overrides["accepted_availability_statuses"] = args.accept
    if args.policy is not None:
        overrides["missing_data_policy"] = args.policy
    if args.exact_keys:
        overrides["key_normalization"] = "Exact"
    return overrides


def _rows(availability_map: AvailabilityMap) -> list[tuple[str, ...]]:
    rows = []
    for key in dict.fromkeys((*availability_map.option_labels, *availability_map.variant_keys)):
        decision = availability_map[key]
        rows.append((
            key,
            decision.resolved_status.value,
            "yes" if decision.is_available else "no",
            "yes" if decision.is_low_stock else "no",
            availability_caption(decision),
        ))
    return rows


def print_table(availability_map: AvailabilityMap) -> None:
    """Print decisions as an aligned text table."""
    header = ("option", "status", "available", "low stock", "caption")
    rows = [header, *_rows(availability_map)]
    widths = [max(len(row[i]) for row in rows) for i in range(len(header))]
    for row in rows:
        print("  ".join(cell.ljust(width) for cell, width in zip(row, widths)).rstrip())

    diagnostics = availability_map.diagnostics
    print(
        f"\n{diagnostics.total} variants, {diagnostics.with_offers} with offers, "
        f"{diagnostics.with_resolved_status} with status, "
        f"{diagnostics.unmatched_options} unmatched options"
    )


def run_resolve(args: argparse.Namespace) -> int:
    settings = get_settings()
    configure_logging(level=args.log_level, json_format=False, stream=sys.stderr)

    try:
        engine = AvailabilityEngine(settings=settings)
        payload = load_payload(args.payload)
        product, availability_map = engine.resolve_payload(
            payload,
            option_labels=args.options,
            overrides=_overrides(args),
            key_property=args.key_property,
            option_dimension=args.dimension,
        )
    except AvailabilityEngineError as e:
        print(f"error: {e.detail}", file=sys.stderr)
        return 2

    if args.json:
        document = {
            "productId": product.product_id,
            "decisions": {
                key: availability_map[key].model_dump(mode="json", by_alias=True)
                for key in availability_map.to_dict()
            },
            "diagnostics": availability_map.diagnostics.model_dump(mode="json", by_alias=True),
        }
        print(json.dumps(document, indent=2))
    else:
        print_table(availability_map)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the variant-availability console script."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "resolve":
        return run_resolve(args)
    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    sys.exit(main())
