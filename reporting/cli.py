#!/usr/bin/env python3
"""
CLI for running valuations from JSON files.

Usage:
    python -m reporting.cli value <request_json> [--pdf] [--csv <path>]

Request file format:
    {
        "subject": {...},
        "comparables": [{...}, ...],
        "model_ids": ["comps-adjusted"],        (optional)
        "reference_date": "2024-06-01"          (optional)
    }

Examples:
    # Print a valuation summary
    python -m reporting.cli value requests/flat_madrid.json

    # Also write a PDF report and a CSV of model results
    python -m reporting.cli value requests/flat_madrid.json --pdf --csv out/results.csv
"""

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path

from core.avm import AVMValuationEngine, Comparable, Subject
from utils.config import Config
from utils.formatting import format_confidence, format_currency
from utils.logging import setup_logging

from .csv_export import export_results_csv
from .pdf_generator import ReportSuccess, ValuationReportGenerator


logger = logging.getLogger(__name__)


def parse_subject(data: dict) -> Subject:
    """
    Parse a JSON dictionary into a Subject.

    Coordinates may be given as [lat, lng] or {"lat": .., "lng": ..}.
    """
    return Subject(
        id=data.get("id", ""),
        coordinates=_parse_coordinates(data.get("coordinates")),
        area=data.get("area", 0),
        building_year=data.get("building_year", 0),
        rooms=data.get("rooms", 0),
        bathrooms=data.get("bathrooms", 0),
        condition=data.get("condition", ""),
        property_type=data.get("property_type", ""),
        floor=data.get("floor"),
        features=tuple(data.get("features", [])),
        address=data.get("address", ""),
    )


def parse_comparable(data: dict) -> Comparable:
    """Parse a JSON dictionary into a Comparable."""
    return Comparable(
        id=data.get("id", ""),
        coordinates=_parse_coordinates(data.get("coordinates")),
        area=data.get("area", 0),
        building_year=data.get("building_year", 0),
        rooms=data.get("rooms", 0),
        bathrooms=data.get("bathrooms", 0),
        sale_price=data.get("sale_price", 0),
        sale_date=date.fromisoformat(data["sale_date"]),
        days_on_market=data.get("days_on_market", 0),
        condition=data.get("condition", ""),
        property_type=data.get("property_type", ""),
        floor=data.get("floor"),
        address=data.get("address", ""),
        source=data.get("source", "manual"),
        verified=data.get("verified", False),
        reliability=data.get("reliability", 1.0),
    )


def _parse_coordinates(value):
    if isinstance(value, dict):
        return (value.get("lat"), value.get("lng"))
    return value


def cmd_value(args: argparse.Namespace, config: Config) -> int:
    """Run a valuation from a request file."""
    request_path = Path(args.request_json)
    if not request_path.exists():
        print(f"Error: File not found: {request_path}", file=sys.stderr)
        return 1

    try:
        with open(request_path, encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        print(f"Error: Invalid JSON in {request_path}: {exc}", file=sys.stderr)
        return 1
    if not isinstance(data, dict):
        print("Error: Invalid request: expected a JSON object", file=sys.stderr)
        return 1

    # Validation errors, bad ISO dates and unknown model ids are all ValueErrors
    try:
        subject = parse_subject(data.get("subject", {}))
        comparables = [parse_comparable(c) for c in data.get("comparables", [])]
        reference_date = date.fromisoformat(data["reference_date"]) if data.get("reference_date") else None
        engine = AVMValuationEngine(settings=config.avm, reference_date=reference_date)
        report = engine.valuate(subject, comparables, model_ids=data.get("model_ids"))
    except (ValueError, KeyError, TypeError, AttributeError) as exc:
        logger.debug("Rejected request %s", request_path, exc_info=True)
        print(f"Error: Invalid request: {exc}", file=sys.stderr)
        return 1

    print(f"Subject: {subject.id}")
    print(f"Comparables used: {report.selection.comp_count} of {report.selection.total_candidates}")
    for result in report.results:
        print(
            f"  {result.model_id:<16} {format_currency(result.estimated_value, config.currency):>14}"
            f"  confidence {format_confidence(result.confidence)}"
        )
    print(f"Weighted value: {format_currency(report.weighted.value, config.currency)}")
    print(f"Weighted confidence: {format_confidence(report.weighted.confidence)}")

    if args.csv:
        export_results_csv(report.results, Path(args.csv))
        print(f"CSV written: {args.csv}")

    if args.pdf:
        generator = ValuationReportGenerator(output_dir=Path(config.reports_dir), currency=config.currency)
        result = generator.generate_report(report)
        if isinstance(result, ReportSuccess):
            print(f"PDF written: {result.path}")
        else:
            print(result.message)

    return 0


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Run comparable-based valuations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    value_parser = subparsers.add_parser("value", help="Value a subject from a JSON request file")
    value_parser.add_argument("request_json", help="Path to request JSON file")
    value_parser.add_argument("--pdf", action="store_true", help="Write a PDF report")
    value_parser.add_argument("--csv", help="Write model results to this CSV file")

    args = parser.parse_args()

    config = Config.load()
    setup_logging(config.log_level, config.log_format)

    if args.command == "value":
        sys.exit(cmd_value(args, config))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
