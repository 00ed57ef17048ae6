"""
Household Cash-Flow Forecast - Source Package

A personal household-finance forecast engine. It turns recorded ledger
transactions and recurring obligations (salary, subscriptions, loans)
into a dated, balance-annotated timeline and a risk assessment.

DESIGN PRINCIPLES:
1. Read a consistent snapshot, compute purely, return fresh results
2. One code path projects the future
3. Bad definitions are skipped and reported, never fatal
4. "Today" is always passed in, never looked up deep inside
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Household Cash-Flow Team"
