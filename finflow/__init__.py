"""
FinFlow - Financial Flow Graph & Projection Engine

Turns personal finance records (accounts, income and expense aggregates,
savings goals, recurring transfers, investments) into:
1. A directed money-flow graph with a deterministic layered layout
2. Forward-looking projections (compound growth, goal horizons, budgets)
3. Dashboard summaries (net worth, allocation, streaks, levels)

DESIGN PRINCIPLES:
1. Pure functions over immutable value objects
2. Same ordered input -> same ids and coordinates
3. Degrade, don't raise, on unresolvable references
4. Every skipped record is reported as a diagnostic
"""

__version__ = "1.0.0"
__author__ = "FinFlow Team"
