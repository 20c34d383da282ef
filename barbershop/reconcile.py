# barbershop/reconcile.py
"""
Check the cash-flow ledger against completed appointments.

    python -m barbershop.reconcile          # report only
    python -m barbershop.reconcile --fix    # repair and commit
"""

import argparse
import logging

from sqlmodel import Session

from barbershop.config import LOG_LEVEL
from barbershop.core import format_cents
from barbershop.db import engine, init_db
from barbershop.services.cash_flow import reconcile


def main(argv=None):
    parser = argparse.ArgumentParser(description="Reconcile appointment income with the cash-flow ledger")
    parser.add_argument("--fix", action="store_true", help="repair discrepancies instead of only reporting them")
    args = parser.parse_args(argv)

    logging.basicConfig(level=LOG_LEVEL, format="%(levelname)s [%(name)s] %(message)s")

    init_db()
    with Session(engine) as session:
        report = reconcile(session, fix=args.fix)

    print(f"Checked {report['checked']} completed appointment(s)")
    for issue in report["issues"]:
        print(
            f"  {issue['kind']:<17} appointment #{issue['appointment_id']}: "
            f"expected {format_cents(issue['expected'])}, found {format_cents(issue['actual'])}"
            f"{' [fixed]' if issue['fixed'] else ''}"
        )
    if not report["issues"]:
        print("Ledger is consistent")
    elif not args.fix:
        print("Run again with --fix to repair")

    return 1 if report["issues"] and not args.fix else 0


if __name__ == "__main__":
    raise SystemExit(main())
