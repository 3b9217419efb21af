"""
PlanShift: Plan Recommendation & Migration Cost-Benefit Engine
==============================================================

Ranks the subscription tiers an organization is eligible for, maps legacy
custom plans onto standard tiers, and analyzes the cost, benefit and risk
of a migration.
"""

__version__ = "0.3.0"

__author__ = "PlanShift Team"
__license__ = "MIT"
