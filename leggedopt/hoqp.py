"""Hierarchical optimisation of prioritised tasks by stacked quadratic programs."""

from __future__ import annotations

import numpy as np
from scipy.linalg import null_space
from scipy.optimize import linprog

from .task import Task, concatenate_vectors, empty_task

_RCOND = 1e-10
_TOL = 1e-9
_STEP_EPS = 1e-12
_REGULARIZATION = 1e-12


class QpError(RuntimeError):
    """Raised when a quadratic program is infeasible or does not converge."""


def _feasible_point(d: np.ndarray, f: np.ndarray) -> np.ndarray:
    n = d.shape[1]
    if d.shape[0] == 0:
        return np.zeros(n)
    result = linprog(np.zeros(n), A_ub=d, b_ub=f, bounds=[(None, None)] * n, method="highs")
    if not result.success:
        raise QpError(f"constraints have no feasible point: {result.message}")
    return np.asarray(result.x, dtype=float)


def solve_qp(h, c, d, f) -> np.ndarray:
    """Minimise ``0.5 x'Hx + c'x`` subject to ``Dx <= f``.

    Uses a primal active-set method started from a feasible vertex.
    """
    c = np.asarray(c, dtype=float).ravel()
    n = c.size
    if n == 0:
        return np.zeros(0)
    h = np.asarray(h, dtype=float).reshape(n, n)
    d = np.asarray(d, dtype=float).reshape(-1, n)
    f = np.asarray(f, dtype=float).ravel()
    if d.shape[0] != f.size:
        raise ValueError(f"{d.shape[0]} constraint rows but {f.size} bounds")

    x = _feasible_point(d, f)
    working: list[int] = []
    max_iterations = 50 * (n + d.shape[0]) + 50
    for _ in range(max_iterations):
        active = d[working]
        m = len(working)
        kkt = np.block([[h, active.T], [active, np.zeros((m, m))]])
        rhs = np.concatenate([-(h @ x + c), np.zeros(m)])
        solution = np.linalg.lstsq(kkt, rhs, rcond=_RCOND)[0]
        step, multipliers = solution[:n], solution[n:]

        if np.linalg.norm(step) <= _TOL * (1.0 + np.linalg.norm(x)):
            if m == 0 or multipliers.min() >= -_TOL:
                return x
            working.pop(int(np.argmin(multipliers)))
            continue

        rate = d @ step
        candidates = rate > _STEP_EPS
        candidates[working] = False
        ratios = np.full(d.shape[0], np.inf)
        room = np.maximum(f - d @ x, 0.0)
        ratios[candidates] = room[candidates] / rate[candidates]
        blocking = int(np.argmin(ratios)) if ratios.size else -1
        if blocking >= 0 and ratios[blocking] < 1.0:
            x = x + ratios[blocking] * step
            working.append(blocking)
        else:
            x = x + step
    raise QpError("active-set iterations did not converge")


class HoQp:
    """One priority level of a hierarchical QP, built on its higher levels."""

    def __init__(self, task: Task, higher_problem: "HoQp | None" = None):
        self.task = task
        self.higher_problem = higher_problem

        num_slack = task.d.shape[0]
        has_eq = task.a.shape[0] > 0
        has_ineq = num_slack > 0

        if higher_problem is not None:
            z_prev = higher_problem.stacked_z_matrix
            tasks_prev = higher_problem.stacked_tasks
            slack_prev = higher_problem.stacked_slack_solutions
            x_prev = higher_problem.solutions
            num_prev_slack = higher_problem.num_stacked_slack_vars
            num_vars = z_prev.shape[1]
        else:
            num_vars = max(task.a.shape[1], task.d.shape[1])
            tasks_prev = empty_task(num_vars)
            z_prev = np.eye(num_vars)
            slack_prev = np.zeros(0)
            x_prev = np.zeros(num_vars)
            num_prev_slack = 0

        self._z_prev = z_prev
        self._x_prev = x_prev
        self._stacked_tasks = task + tasks_prev

        eye_slack = np.eye(num_slack)
        zero_slack_vars = np.zeros((num_slack, num_vars))

        if has_eq:
            a_z = task.a @ z_prev
            z_ta_ta_z = a_z.T @ a_z + _REGULARIZATION * np.eye(num_vars)
            linear = a_z.T @ (task.a @ x_prev - task.b)
        else:
            z_ta_ta_z = np.zeros((num_vars, num_vars))
            linear = np.zeros(num_vars)

        h = np.block([[z_ta_ta_z, zero_slack_vars.T], [zero_slack_vars, eye_slack]])
        c = np.concatenate([linear, np.zeros(num_slack)])

        if has_ineq:
            d_curr_z = task.d @ z_prev
            f_minus_d_x_prev = task.f - task.d @ x_prev
        else:
            d_curr_z = np.zeros((0, num_vars))
            f_minus_d_x_prev = np.zeros(0)

        d = np.block(
            [
                [zero_slack_vars, -eye_slack],
                [tasks_prev.d @ z_prev, np.zeros((num_prev_slack, num_slack))],
                [d_curr_z, -eye_slack],
            ]
        )
        f = np.concatenate(
            [
                np.zeros(num_slack),
                tasks_prev.f - tasks_prev.d @ x_prev + slack_prev,
                f_minus_d_x_prev,
            ]
        )

        solution = solve_qp(h, c, d, f)
        self._decision_solution = solution[:num_vars]
        self._slack_solution = solution[num_vars:]

        if has_eq:
            self._stacked_z = z_prev @ null_space(task.a @ z_prev, rcond=_RCOND)
        else:
            self._stacked_z = z_prev

        if higher_problem is not None:
            self._stacked_slack = concatenate_vectors(
                higher_problem.stacked_slack_solutions, self._slack_solution
            )
        else:
            self._stacked_slack = self._slack_solution

    @property
    def solutions(self) -> np.ndarray:
        """Decision variables satisfying this level and every higher one."""
        return self._x_prev + self._z_prev @ self._decision_solution

    @property
    def stacked_z_matrix(self) -> np.ndarray:
        """Basis of the null space left free for lower priority levels."""
        return self._stacked_z

    @property
    def stacked_tasks(self) -> Task:
        """This level's task stacked on top of all higher tasks."""
        return self._stacked_tasks

    @property
    def stacked_slack_solutions(self) -> np.ndarray:
        """Slack values of all levels, higher levels first."""
        return self._stacked_slack

    @property
    def num_stacked_slack_vars(self) -> int:
        """Number of inequality rows in the stacked tasks."""
        return self._stacked_tasks.d.shape[0]