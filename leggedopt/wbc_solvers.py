"""Weighted and hierarchical solvers for whole-body control tasks."""

from __future__ import annotations

from collections.abc import Iterable

import numpy as np
from scipy.linalg import null_space

from .hoqp import HoQp, QpError, solve_qp
from .task import Task

_RCOND = 1e-10
_TOL = 1e-9


def _rows(matrix: np.ndarray, num_cols: int) -> np.ndarray:
    if matrix.size == 0:
        return np.zeros((0, num_cols))
    if matrix.shape[1] != num_cols:
        raise ValueError(f"expected {num_cols} columns, got {matrix.shape[1]}")
    return matrix


def weighted_solve(constraints: Task, weighted_task: Task, num_decision_vars: int) -> np.ndarray:
    """Least-squares fit of ``weighted_task`` subject to the constraint task.

    Equality rows of ``constraints`` hold exactly and its inequality rows
    bound the solution from above.
    """
    n = num_decision_vars
    a_eq = _rows(constraints.a, n)
    b_eq = constraints.b
    d = _rows(constraints.d, n)
    f = constraints.f
    if a_eq.shape[0] != b_eq.size or d.shape[0] != f.size:
        raise ValueError("constraint rows and right-hand sides differ in length")

    a_w = _rows(weighted_task.a, n)
    b_w = weighted_task.b
    h = a_w.T @ a_w
    g = -a_w.T @ b_w

    if a_eq.shape[0] > 0:
        particular = np.linalg.lstsq(a_eq, b_eq, rcond=_RCOND)[0]
        residual = np.linalg.norm(a_eq @ particular - b_eq)
        if residual > 1e-8 * (1.0 + np.linalg.norm(b_eq)):
            raise QpError("equality constraints are inconsistent")
        basis = null_space(a_eq, rcond=_RCOND)
    else:
        particular = np.zeros(n)
        basis = np.eye(n)

    if basis.shape[1] == 0:
        if np.any(d @ particular > f + _TOL):
            raise QpError("constraints have no feasible point")
        return particular

    reduced = solve_qp(
        basis.T @ h @ basis,
        basis.T @ (h @ particular + g),
        d @ basis,
        f - d @ particular,
    )
    return particular + basis @ reduced


def weighted_tasks(
    swing_leg: Task,
    base_accel: Task,
    contact_force: Task,
    weight_swing_leg: float,
    weight_base_accel: float,
    weight_contact_force: float,
) -> Task:
    """Stack the three objective tasks, each scaled by its weight."""
    return (
        swing_leg * weight_swing_leg
        + base_accel * weight_base_accel
        + contact_force * weight_contact_force
    )


def hierarchical_solve(tasks: Iterable[Task]) -> np.ndarray:
    """Solve tasks in strict priority order, highest priority first."""
    problem: HoQp | None = None
    for task in tasks:
        problem = HoQp(task, problem)
    if problem is None:
        raise ValueError("at least one task is required")
    return problem.solutions