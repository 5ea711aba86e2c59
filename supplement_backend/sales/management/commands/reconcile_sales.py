# sales/management/commands/reconcile_sales.py

from __future__ import annotations

from django.core.management.base import BaseCommand

from sales.services.reconciliation import reconcile_sales


class Command(BaseCommand):
    help = "Check every completed sale has exactly one matching income ledger entry."

    def add_arguments(self, parser):
        parser.add_argument(
            "--repair",
            action="store_true",
            help="Post the income entry for sales that have none.",
        )
        parser.add_argument(
            "--strict",
            action="store_true",
            help="Fail (non-zero exit) if any problem remains.",
        )

    def handle(self, *args, **options):
        repair = bool(options.get("repair"))
        strict = bool(options.get("strict"))

        report = reconcile_sales(repair=repair)

        self.stdout.write(self.style.MIGRATE_HEADING("Sales -> Ledger Reconciliation"))
        self.stdout.write(f"Completed sales checked: {report.checked}")
        self.stdout.write("")

        if report.missing_entries:
            self.stderr.write(
                self.style.ERROR(f"[FAIL] Sales without income entry: {len(report.missing_entries)}")
            )
            self.stderr.write("  Example IDs: " + ", ".join(report.missing_entries[:10]))
        else:
            self.stdout.write(self.style.SUCCESS("[OK] Every sale has an income entry"))

        if report.duplicate_entries:
            self.stderr.write(
                self.style.ERROR(f"[FAIL] Sales with several income entries: {len(report.duplicate_entries)}")
            )
            for sid, cnt in report.duplicate_entries[:10]:
                self.stderr.write(f"  sale_id={sid} count={cnt}")

        if report.amount_mismatches:
            self.stderr.write(
                self.style.ERROR(f"[FAIL] Entry amount differs from sale total: {len(report.amount_mismatches)}")
            )
            for sid, total, amount in report.amount_mismatches[:10]:
                self.stderr.write(f"  sale_id={sid} total={total} entry={amount}")
        else:
            self.stdout.write(self.style.SUCCESS("[OK] Entry amounts match sale totals"))

        if repair:
            self.stdout.write(self.style.SUCCESS(f"Repaired: {len(report.repaired)} entr(y/ies) posted"))

        self.stdout.write("")
        if report.problems == 0:
            self.stdout.write(self.style.SUCCESS("RECONCILIATION PASSED"))
        else:
            self.stderr.write(self.style.ERROR(f"RECONCILIATION FOUND ISSUES: {report.problems} problem(s)"))

        if strict and report.problems > 0:
            raise SystemExit(1)
