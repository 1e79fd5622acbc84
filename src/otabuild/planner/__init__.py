"""Build target planning."""

from otabuild.planner.intent import BuildContext, BuildIntent, BuildPlan
from otabuild.planner.planner import TargetPlanner

__all__ = [
    "BuildIntent",
    "BuildPlan",
    "BuildContext",
    "TargetPlanner",
]
