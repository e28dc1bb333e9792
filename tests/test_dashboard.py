from decimal import Decimal

import pytest

from commission_tracker.application.dashboard import (
    brokerage_breakdown,
    client_type_breakdown,
    filter_transactions,
    insights,
    monthly_breakdown,
    summarize,
)
from commission_tracker.application.dto import SortOrder, TransactionFilter
from commission_tracker.domain.dependencies import FieldDependencyResolver


@pytest.fixture
def records():
    resolver = FieldDependencyResolver()
    return [
        # KW: gci 30000, nci 25200
        resolver.new_record(
            id="a",
            address="1 Main St",
            client_type="Seller",
            property_type="Residential",
            brokerage="KW",
            closed_price="1000000",
            commission_pct="3",
            list_date="2024-01-01",
            closing_date="2024-01-31",
        ),
        # BDH: gci 20000, nci 16472
        resolver.new_record(
            id="b",
            address="2 Oak Ave",
            client_type="Buyer",
            property_type="Condo",
            brokerage="BDH",
            closed_price="800000",
            commission_pct="2.5",
            list_date="2024-03-01",
            closing_date="2024-03-11",
        ),
        # KW with referral: gci 15000, referral 1500, adjusted 13500, nci 11340
        resolver.new_record(
            id="c",
            address="3 Pine Rd",
            client_type="Buyer",
            property_type="Residential",
            brokerage="KW",
            closed_price="500000",
            commission_pct="3",
            referral_pct="10",
            closing_date="2023-12-15",
        ),
        resolver.new_record(id="d", address="4 Lot", brokerage="KW"),
    ]


def test_summarize_totals(records):
    metrics = summarize(records)

    assert metrics.total_transactions == 4
    assert metrics.total_gci == Decimal("65000.00")
    assert metrics.total_nci == Decimal("53012.00")
    assert metrics.avg_commission == Decimal("13253.00")
    assert metrics.total_volume == Decimal("2300000.00")
    assert metrics.total_referral_fees == Decimal("1500.00")


def test_summarize_empty():
    metrics = summarize([])
    assert metrics.total_transactions == 0
    assert metrics.avg_commission == Decimal("0.00")


def test_filter_by_year_and_sort(records):
    newest = filter_transactions(records, TransactionFilter())
    assert [r.id for r in newest] == ["b", "a", "c", "d"]

    oldest = filter_transactions(records, TransactionFilter(sort_order=SortOrder.OLDEST))
    assert [r.id for r in oldest] == ["d", "c", "a", "b"]

    in_2024 = filter_transactions(records, TransactionFilter(year=2024))
    assert [r.id for r in in_2024] == ["b", "a"]


def test_filter_by_attributes(records):
    buyers = filter_transactions(records, TransactionFilter(client_type="Buyer"))
    assert {r.id for r in buyers} == {"b", "c"}

    bdh = filter_transactions(records, TransactionFilter(brokerage="BDH"))
    assert [r.id for r in bdh] == ["b"]

    residential_kw = filter_transactions(records, TransactionFilter(brokerage="KW", property_type="Residential"))
    assert [r.id for r in residential_kw] == ["a", "c", "d"]


def test_monthly_breakdown_is_chronological(records):
    months = monthly_breakdown(records)

    assert [m.period for m in months] == ["2023-12", "2024-01", "2024-03"]
    assert [m.label for m in months] == ["Dec 2023", "Jan 2024", "Mar 2024"]
    assert months[1].gci == Decimal("30000.00")
    assert months[1].nci == Decimal("25200.00")
    assert all(m.transactions == 1 for m in months)


def test_breakdowns(records):
    by_brokerage = {s.name: s.value for s in brokerage_breakdown(records)}
    assert by_brokerage == {"KW": Decimal("36540.00"), "BDH": Decimal("16472.00")}

    by_client = {s.name: s.value for s in client_type_breakdown(records)}
    assert by_client == {"Buyer": 2, "Seller": 2}


def test_insights(records):
    found = {i.label: i for i in insights(records)}

    assert found["Best Month"].value == "January 2024"
    assert found["Best Month"].subtext == "$25,200.00 earned"
    assert found["Top Property Type"].value == "Residential"
    assert found["Avg Days to Close"].value == "20 days"
    assert found["Avg Days to Close"].subtext == "Based on 2 transactions"
    assert found["Stronger Side"].value == "Buyers"
    assert found["Stronger Side"].subtext == "52% of total income"
    assert found["Biggest Deal"].value == "$25,200.00"
    assert found["Biggest Deal"].subtext == "1 Main St"


def test_insights_empty():
    assert insights([]) == []


def test_totals_keep_every_cent_on_large_amounts():
    resolver = FieldDependencyResolver()
    record = resolver.new_record(
        id="big",
        closed_price="1234567890123456.78",
        commission_pct="1",
        closing_date="2024-06-30",
    )

    metrics = summarize([record])
    months = monthly_breakdown([record])

    assert metrics.total_volume == Decimal("1234567890123456.78")
    assert metrics.total_gci == Decimal("12345678901234.57")
    assert months[0].gci == Decimal("12345678901234.57")
    assert isinstance(months[0].nci, Decimal)
