from decimal import Decimal

import pytest

from commission_tracker.domain.models import (
    Brokerage,
    CommissionRates,
    DerivedField,
    TransactionRecord,
    TransactionType,
)
from commission_tracker.domain.services import CommissionCalculator


def make_record(**values) -> TransactionRecord:
    return TransactionRecord(**values)


def test_kw_sale_breakdown():
    calculator = CommissionCalculator()
    record = make_record(brokerage=Brokerage.KW, closed_price="1000000", commission_pct="3")

    derived = calculator.compute(record)

    assert derived.gci == Decimal("30000.00")
    assert derived.referral_dollar == Decimal("0.00")
    assert derived.adjusted_gci == Decimal("30000.00")
    assert derived.royalty == Decimal("1800.00")
    assert derived.company_dollar == Decimal("3000.00")
    assert derived.total_brokerage_fees == Decimal("4800.00")
    assert derived.nci == Decimal("25200.00")
    assert derived.pre_split_deduction is None


def test_bdh_sale_defaults_split_to_94():
    calculator = CommissionCalculator()
    record = make_record(brokerage=Brokerage.BDH, closed_price="800000", commission_pct="2.5")

    derived = calculator.compute(record)

    assert derived.gci == Decimal("20000.00")
    assert derived.pre_split_deduction == Decimal("1200.00")
    assert derived.agent_split == Decimal("17672.00")
    assert derived.brokerage_portion == Decimal("2328.00")
    assert derived.total_brokerage_fees == Decimal("3528.00")
    assert derived.nci == Decimal("16472.00")
    assert derived.royalty is None
    assert derived.company_dollar is None


def test_bdh_explicit_split_and_deductions():
    calculator = CommissionCalculator()
    record = make_record(
        brokerage=Brokerage.BDH,
        closed_price="800000",
        commission_pct="2.5",
        bdh_split_pct="90",
        asf="100",
        foundation10="10",
        admin_fee="50",
        other_deductions="40",
        buyers_agent_split="200",
    )

    derived = calculator.compute(record)

    # 18800 * 0.90 = 16920 to the agent
    assert derived.agent_split == Decimal("16920.00")
    assert derived.brokerage_portion == Decimal("3080.00")
    assert derived.total_brokerage_fees == Decimal("4680.00")
    assert derived.nci == Decimal("15320.00")


def test_referral_received_ignores_price_and_commission():
    calculator = CommissionCalculator()
    record = make_record(
        transaction_type=TransactionType.REFERRAL_RECEIVED,
        referral_fee_received="5000",
        closed_price="900000",
        commission_pct="3",
        referral_pct="25",
    )

    derived = calculator.compute(record)

    assert derived.gci == Decimal("5000.00")
    assert derived.referral_dollar == Decimal("0.00")
    assert derived.adjusted_gci == Decimal("5000.00")


def test_referral_paid_deducts_referral_from_gci():
    calculator = CommissionCalculator()
    record = make_record(
        brokerage=Brokerage.OTHER,
        transaction_type=TransactionType.REFERRAL_PAID,
        closed_price="500000",
        commission_pct="3",
        referral_pct="25",
    )

    derived = calculator.compute(record)

    assert derived.gci == Decimal("15000.00")
    assert derived.referral_dollar == Decimal("3750.00")
    assert derived.adjusted_gci == Decimal("11250.00")
    assert derived.total_brokerage_fees == Decimal("0.00")
    assert derived.nci == Decimal("11250.00")


def test_eo_is_added_to_kw_fees():
    calculator = CommissionCalculator()
    base = make_record(closed_price="1000000", commission_pct="3")
    with_eo = make_record(closed_price="1000000", commission_pct="3", eo="150", hoa_transfer="100")

    assert calculator.compute(base).total_brokerage_fees == Decimal("4800.00")
    assert calculator.compute(with_eo).total_brokerage_fees == Decimal("5050.00")
    assert calculator.compute(with_eo).nci == Decimal("24950.00")


def test_invalid_numbers_count_as_zero():
    calculator = CommissionCalculator()
    record = make_record(closed_price="abc", commission_pct="", eo="n/a")

    derived = calculator.compute(record)

    assert derived.gci == Decimal("0.00")
    assert derived.total_brokerage_fees == Decimal("0.00")
    assert derived.nci == Decimal("0.00")
    assert derived.net_volume == Decimal("0.00")


def test_zero_boundaries():
    calculator = CommissionCalculator()

    no_commission = calculator.compute(make_record(closed_price="750000", commission_pct="0"))
    assert no_commission.gci == Decimal("0.00")

    no_price = calculator.compute(make_record(closed_price="0", commission_pct="3"))
    assert no_price.gci == Decimal("0.00")

    no_referral = calculator.compute(make_record(closed_price="333333", commission_pct="2.7", referral_pct="0"))
    assert no_referral.referral_dollar == Decimal("0.00")
    assert str(no_referral.referral_dollar) == "0.00"


def test_negative_inputs_propagate():
    calculator = CommissionCalculator()
    record = make_record(brokerage=Brokerage.OTHER, closed_price="100000", commission_pct="3", referral_pct="-10")

    derived = calculator.compute(record)

    # a negative referral pct is not a referral (only > 0 applies)
    assert derived.referral_dollar == Decimal("0.00")

    negative_price = calculator.compute(make_record(brokerage=Brokerage.OTHER, closed_price="-100000", commission_pct="3"))
    assert negative_price.gci == Decimal("-3000.00")
    assert negative_price.nci == Decimal("-3000.00")


def test_compute_is_idempotent():
    calculator = CommissionCalculator()
    record = make_record(closed_price="612345.67", commission_pct="2.75", referral_pct="33.3", kw_cares="12.5")

    first = calculator.compute(record)
    second = calculator.compute(record)

    assert first == second
    assert str(first.nci) == str(second.nci)


def test_net_volume_passes_through_closed_price():
    calculator = CommissionCalculator()
    derived = calculator.compute(make_record(closed_price="$1,234,567.891"))
    assert derived.net_volume == Decimal("1234567.89")


def test_rounding_happens_once_at_the_end():
    calculator = CommissionCalculator()
    # gci = 10000.005, royalty = 600.0003, company dollar = 1000.0005
    record = make_record(closed_price="333333.5", commission_pct="3")

    derived = calculator.compute(record)

    assert derived.gci == Decimal("10000.01")
    assert derived.royalty == Decimal("600.00")
    assert derived.company_dollar == Decimal("1000.00")
    # 10000.005 - 1600.0008 = 8400.0042, not 10000.01 - 600.00 - 1000.00 rounded separately
    assert derived.nci == Decimal("8400.00")


def test_pinned_values_replace_formulas():
    calculator = CommissionCalculator()
    record = make_record(
        closed_price="1000000",
        commission_pct="3",
        overrides={DerivedField.ROYALTY: "1000", DerivedField.GCI: "20000"},
    )

    derived = calculator.compute(record)

    assert derived.gci == Decimal("20000.00")
    assert derived.royalty == Decimal("1000.00")
    assert derived.company_dollar == Decimal("2000.00")
    assert derived.total_brokerage_fees == Decimal("3000.00")
    assert derived.nci == Decimal("17000.00")


def test_pinned_nci_is_not_recomputed():
    calculator = CommissionCalculator()
    record = make_record(closed_price="1000000", commission_pct="3", overrides={DerivedField.NCI: "12345.67"})

    assert calculator.compute(record).nci == Decimal("12345.67")


def test_custom_rates():
    calculator = CommissionCalculator(CommissionRates(kw_royalty_rate=Decimal("0.05"), kw_company_dollar_rate=Decimal("0.20")))
    derived = calculator.compute(make_record(closed_price="100000", commission_pct="3"))

    assert derived.royalty == Decimal("150.00")
    assert derived.company_dollar == Decimal("600.00")
    assert derived.nci == Decimal("2250.00")


@pytest.mark.parametrize("price", ["1e30", "10000000000000000000000000000", "1e999999", "1e-999999"])
def test_out_of_range_price_counts_as_zero(price: str):
    derived = CommissionCalculator().compute(make_record(closed_price=price, commission_pct="3"))

    assert derived.gci == Decimal("0.00")
    assert derived.nci == Decimal("0.00")
    assert derived.net_volume == Decimal("0.00")


def test_largest_accepted_inputs_still_compute():
    record = make_record(
        brokerage=Brokerage.BDH,
        closed_price="9999999999999999",
        commission_pct="9999999999999999",
        referral_pct="9999999999999999",
        bdh_split_pct="9999999999999999",
    )

    derived = CommissionCalculator().compute(record)

    assert derived.gci > Decimal("0")
    assert derived.agent_split is not None


def test_pins_on_fields_the_brokerage_does_not_use_are_ignored():
    record = make_record(
        brokerage=Brokerage.BDH,
        closed_price="800000",
        commission_pct="2.5",
        overrides={DerivedField.ROYALTY: "5000"},
    )

    derived = CommissionCalculator().compute(record)

    assert derived.royalty is None
    assert derived.nci == Decimal("16472.00")
    assert record.display_value(DerivedField.ROYALTY) == ""
