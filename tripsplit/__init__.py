"""
tripsplit - Source Package

Shared-expense ledger and settlement engine for group finance tracking:
who paid, who consumed, and the shortest list of payments that squares
everyone up.

DESIGN PRINCIPLES:
1. Balances are always re-derived from the full event log
2. Fail early, fail visibly: invalid entries never reach the ledger
3. No silent corrections: splits must add up, to the cent
4. Soft data faults are reported, not raised
5. Storage is swappable
"""

__version__ = "1.0.0"
__author__ = "tripsplit Team"
