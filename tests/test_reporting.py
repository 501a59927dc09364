"""
Tests for PDF and CSV valuation reports.
"""

import csv
import io
from datetime import date

import pytest

from core.avm import AVMValuationEngine
from reporting import (
    CSV_HEADERS,
    ReportNoValuation,
    ReportSuccess,
    ValuationReportGenerator,
    export_results_csv,
)


@pytest.fixture
def report(reference_date, make_subject, make_comp):
    subject = make_subject(building_year=1965, features=("lift",))
    comps = [make_comp(sale_price=p) for p in (290000, 300000, 315000)]
    return AVMValuationEngine(reference_date=reference_date).valuate(subject, comps)


@pytest.fixture
def empty_report(reference_date, subject):
    return AVMValuationEngine(reference_date=reference_date).valuate(subject, [])


class TestPdfReport:

    def test_buffer_is_pdf(self, report):
        pdf = ValuationReportGenerator().generate_to_buffer(report, date(2024, 6, 2))
        assert pdf.startswith(b"%PDF")
        assert len(pdf) > 1000

    def test_writes_file(self, report, tmp_path):
        result = ValuationReportGenerator(output_dir=tmp_path).generate_report(report)
        assert isinstance(result, ReportSuccess)
        assert result.path == tmp_path / "AVM-subject-1.pdf"
        assert result.path.read_bytes().startswith(b"%PDF")
        assert result.models_included == 3

    def test_no_valuation(self, empty_report, tmp_path):
        result = ValuationReportGenerator(output_dir=tmp_path / "out").generate_report(empty_report)
        assert isinstance(result, ReportNoValuation)
        assert not (tmp_path / "out").exists()

    def test_markup_characters_in_address(self, reference_date, make_subject, make_comp):
        subject = make_subject(address="Smith & Sons <b>Flat 2")
        engine = AVMValuationEngine(reference_date=reference_date)
        report = engine.valuate(subject, [make_comp() for _ in range(3)])
        pdf = ValuationReportGenerator().generate_to_buffer(report, reference_date)
        assert pdf.startswith(b"%PDF")

    def test_other_currency(self, report):
        pdf = ValuationReportGenerator(currency="GBP").generate_to_buffer(report)
        assert pdf.startswith(b"%PDF")


class TestCsvExport:

    def test_header_and_rows(self, report):
        rows = list(csv.reader(io.StringIO(export_results_csv(report.results))))
        assert rows[0] == CSV_HEADERS
        assert len(rows) == 1 + len(report.results)
        first = dict(zip(CSV_HEADERS, rows[1]))
        assert first["subject_id"] == "subject-1"
        assert first["valid_until"] == "2024-06-08"

    def test_empty_results_only_header(self):
        rows = list(csv.reader(io.StringIO(export_results_csv([]))))
        assert rows == [CSV_HEADERS]

    def test_writes_file(self, report, tmp_path):
        path = tmp_path / "nested" / "results.csv"
        content = export_results_csv(report.results, path)
        assert path.read_bytes() == content.encode("utf-8")
        assert path.read_bytes().count(b"\r\n") == 1 + len(report.results)
