"""
CSV export of valuation results.
"""

import csv
from io import StringIO
from pathlib import Path
from typing import List, Optional

from core.avm.models import ValuationResult


CSV_HEADERS = [
    "subject_id",
    "model_id",
    "estimated_value",
    "confidence_pct",
    "range_low",
    "range_high",
    "price_per_m2",
    "market_position",
    "comparables_used",
    "valid_until",
]


def results_to_rows(results: List[ValuationResult]) -> List[list]:
    """Flatten results into CSV rows (without the header)."""
    return [
        [
            r.subject_id,
            r.model_id,
            r.estimated_value,
            f"{r.confidence * 100:.1f}",
            r.confidence_range.low,
            r.confidence_range.high,
            r.price_per_m2,
            r.market_position.value,
            r.comparables.used,
            r.valid_until.isoformat() if r.valid_until else "",
        ]
        for r in results
    ]


def export_results_csv(results: List[ValuationResult], path: Optional[Path] = None) -> str:
    """
    Export valuation results as CSV.

    Args:
        results: Results to export
        path: Optional file to write; parent directories are created

    Returns:
        The CSV text
    """
    buffer = StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL)
    writer.writerow(CSV_HEADERS)
    writer.writerows(results_to_rows(results))
    content = buffer.getvalue()

    if path is not None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        # csv.writer already emits \r\n; disable newline translation
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(content)

    return content
