"""Reconciliation services: rent ledger, water consumption and charge settlement.

The calculators in this package are pure functions over domain snapshots.
Database access lives in db.py and repositories.py and is only used by the
async service classes that fetch data before calling the calculators.
"""
