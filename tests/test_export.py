from datetime import date

from commission_tracker.domain.dependencies import FieldDependencyResolver
from commission_tracker.presentation.export import EXPORT_COLUMNS, export_filename, render_csv, render_html


def make_records():
    resolver = FieldDependencyResolver()
    return [
        resolver.new_record(
            address='12 "The Oaks", Elm St',
            city="Fresno",
            closed_price="1000000",
            commission_pct="3",
            closing_date="2024-02-01",
        ),
    ]


def test_csv_has_header_and_quoted_cells():
    content = render_csv(make_records()).decode("utf-8")
    lines = content.splitlines()

    assert lines[0] == ",".join(f'"{header}"' for header, _ in EXPORT_COLUMNS)
    assert len(lines) == 2
    assert '"12 ""The Oaks"", Elm St"' in lines[1]
    assert '"30000.00"' in lines[1]
    assert '"25200.00"' in lines[1]
    assert lines[1].endswith('"Closed"')


def test_csv_for_no_transactions_is_header_only():
    content = render_csv([]).decode("utf-8")
    assert content.count("\n") == 1
    assert content.startswith('"Property Type","Client Type"')


def test_html_escapes_cells():
    html = render_html(make_records())
    assert html.startswith("<table>")
    assert "&quot;The Oaks&quot;" in html
    assert "<th>Total Brokerage Fees</th>" in html


def test_html_without_transactions():
    assert render_html([]) == "<p>No transactions recorded.</p>"


def test_export_filename_is_dated():
    assert export_filename(date(2024, 10, 5)) == "real-estate-transactions-2024-10-05.csv"
