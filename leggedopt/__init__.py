"""Whole-body control tasks, hierarchical QP solving and contact constraints for legged robots."""

__version__ = "0.1.0"
__all__ = [
    "task",
    "hoqp",
    "wbc_solvers",
    "wbc_tasks",
    "zero_force",
    "friction_cone",
    "swing_schedule",
]