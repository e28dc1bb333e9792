"""Command-line entrypoint for commission calculations and dashboard exports."""
from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

from commission_tracker.application.dashboard import filter_transactions, summarize
from commission_tracker.application.dto import SortOrder, TransactionFilter
from commission_tracker.config import SETTINGS
from commission_tracker.domain.amounts import format_money
from commission_tracker.domain.dependencies import FieldDependencyResolver
from commission_tracker.domain.models import (
    DEDUCTION_FIELDS,
    Brokerage,
    TransactionRecord,
    TransactionType,
    canonical_field_name,
)
from commission_tracker.domain.repositories import TransactionRepository
from commission_tracker.domain.services import CommissionCalculator
from commission_tracker.infrastructure.repositories.excel_repositories import WorkbookTransactionRepository
from commission_tracker.infrastructure.storage.transaction_store import TransactionStore
from commission_tracker.presentation.export import export_filename, render_csv, render_html


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--store", type=Path, help="Path to the JSON transaction store")
    source.add_argument("--workbook", type=Path, help="Path to an .xlsx transaction workbook")
    parser.add_argument("--year", type=int, help="Only include deals closed in this year")
    parser.add_argument("--client-type", choices=["Buyer", "Seller"])
    parser.add_argument("--brokerage", choices=[b.value for b in Brokerage])
    parser.add_argument("--property-type")
    parser.add_argument("--sort", choices=[o.value for o in SortOrder], default=SortOrder.NEWEST.value)


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Real-estate commission tracker")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr")
    commands = parser.add_subparsers(dest="command", required=True)

    compute = commands.add_parser("compute", help="Show the commission breakdown for one deal")
    compute.add_argument("--brokerage", choices=[b.value for b in Brokerage], default=Brokerage.KW.value)
    compute.add_argument(
        "--type",
        dest="transaction_type",
        choices=[t.value for t in TransactionType],
        default=TransactionType.SALE.value,
    )
    compute.add_argument("--closed-price", default="")
    compute.add_argument("--commission-pct", default="")
    compute.add_argument("--referral-pct", default="")
    compute.add_argument("--referral-fee-received", default="")
    compute.add_argument("--bdh-split-pct", default="")
    compute.add_argument(
        "--deduction",
        action="append",
        default=[],
        metavar="NAME=AMOUNT",
        help="Brokerage deduction input, e.g. hoa_transfer=250 (repeatable)",
    )

    summary = commands.add_parser("summary", help="Print dashboard metrics")
    _add_source_arguments(summary)

    export = commands.add_parser("export", help="Write the CSV export")
    _add_source_arguments(export)
    export.add_argument("--format", choices=["csv", "html"], default="csv")
    export.add_argument("output", type=Path, nargs="?", help="Output path (defaults to dated file name)")

    args = parser.parse_args(argv)
    if args.command == "compute":
        args.deductions = _parse_deductions(parser, args.deduction)
    return args


def _parse_deductions(parser: argparse.ArgumentParser, items: list[str]) -> dict[str, str]:
    deductions: dict[str, str] = {}
    for item in items:
        name, sep, amount = item.partition("=")
        field_name = canonical_field_name(name.strip())
        if not sep or field_name not in DEDUCTION_FIELDS:
            parser.error(f"invalid deduction {item!r}; expected one of {', '.join(DEDUCTION_FIELDS)}")
        deductions[field_name] = amount.strip()
    return deductions


def _repository(args: argparse.Namespace) -> TransactionRepository:
    if args.workbook is not None:
        return WorkbookTransactionRepository(args.workbook)
    return TransactionStore(args.store)


def _criteria(args: argparse.Namespace) -> TransactionFilter:
    return TransactionFilter(
        year=args.year,
        client_type=args.client_type,
        brokerage=args.brokerage,
        property_type=args.property_type,
        sort_order=SortOrder(args.sort),
    )


def _print_breakdown(record: TransactionRecord) -> None:
    derived = record.derived
    print("Commission Breakdown")
    print("====================")
    print(f"Brokerage: {record.brokerage.value}")
    print(f"Transaction type: {record.transaction_type.value}")
    print(f"GCI: {format_money(derived.gci)}")
    print(f"Referral $: {format_money(derived.referral_dollar)}")
    print(f"Adjusted GCI: {format_money(derived.adjusted_gci)}")
    if derived.royalty is not None:
        print(f"Royalty: {format_money(derived.royalty)}")
    if derived.company_dollar is not None:
        print(f"Company dollar: {format_money(derived.company_dollar)}")
    if derived.pre_split_deduction is not None:
        print(f"Pre-split deduction: {format_money(derived.pre_split_deduction)}")
        print(f"Agent split: {format_money(derived.agent_split)}")
        print(f"Brokerage portion: {format_money(derived.brokerage_portion)}")
    print(f"Total brokerage fees: {format_money(derived.total_brokerage_fees)}")
    print(f"NCI: {format_money(derived.nci)}")


def _run_compute(args: argparse.Namespace) -> int:
    resolver = FieldDependencyResolver(CommissionCalculator(SETTINGS.rates))
    record = resolver.new_record(
        brokerage=args.brokerage,
        transaction_type=args.transaction_type,
        closed_price=args.closed_price,
        commission_pct=args.commission_pct,
        referral_pct=args.referral_pct,
        referral_fee_received=args.referral_fee_received,
        bdh_split_pct=args.bdh_split_pct,
        **args.deductions,
    )
    _print_breakdown(record)
    return 0


def _run_summary(args: argparse.Namespace) -> int:
    records = filter_transactions(_repository(args).list_transactions(), _criteria(args))
    metrics = summarize(records)
    print("Dashboard Summary")
    print("=================")
    print(f"Transactions: {metrics.total_transactions}")
    print(f"Total volume: {format_money(metrics.total_volume)}")
    print(f"Total GCI: {format_money(metrics.total_gci)}")
    print(f"Total NCI: {format_money(metrics.total_nci)}")
    print(f"Average NCI: {format_money(metrics.avg_commission)}")
    print(f"Referral fees: {format_money(metrics.total_referral_fees)}")
    return 0


def _run_export(args: argparse.Namespace) -> int:
    records = filter_transactions(_repository(args).list_transactions(), _criteria(args))
    if args.format == "html":
        output = args.output or Path(export_filename(date.today())).with_suffix(".html")
        output.write_text(render_html(records), encoding="utf-8")
    else:
        output = args.output or Path(export_filename(date.today()))
        output.write_bytes(render_csv(records))
    print(f"Exported {len(records)} transactions to {output}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if args.command == "compute":
        return _run_compute(args)
    if args.command == "summary":
        return _run_summary(args)
    return _run_export(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
