"""
Reporting module for the AVM engine.

Usage:
    from reporting import ValuationReportGenerator, export_results_csv

    generator = ValuationReportGenerator(output_dir=Path("reports"))
    result = generator.generate_report(report)

    csv_text = export_results_csv(report.results)
"""

from .csv_export import CSV_HEADERS, export_results_csv
from .pdf_generator import (
    ReportNoValuation,
    ReportResult,
    ReportSuccess,
    ValuationReportGenerator,
)

__all__ = [
    "CSV_HEADERS",
    "export_results_csv",
    "ReportNoValuation",
    "ReportResult",
    "ReportSuccess",
    "ValuationReportGenerator",
]
