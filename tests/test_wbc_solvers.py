import numpy as np
import pytest

from leggedopt.hoqp import QpError
from leggedopt.task import Task
from leggedopt.wbc_solvers import hierarchical_solve, weighted_solve, weighted_tasks

TOL = 1e-6


def test_weighted_solve_respects_constraints():
    constraints = Task(a=[[1.0, 1.0]], b=[2.0], d=[[1.0, 0.0]], f=[0.5])
    objective = Task(a=np.eye(2), b=[2.0, 2.0])
    x = weighted_solve(constraints, objective, 2)
    assert x[0] + x[1] == pytest.approx(2.0, abs=TOL)
    assert x[0] == pytest.approx(0.5, abs=TOL)
    assert x[1] == pytest.approx(1.5, abs=TOL)


def test_weighted_solve_inactive_bound_reaches_target():
    constraints = Task(d=[[1.0, 0.0]], f=[10.0])
    objective = Task(a=np.eye(2), b=[3.0, -4.0])
    x = weighted_solve(constraints, objective, 2)
    np.testing.assert_allclose(x, [3.0, -4.0], atol=TOL)


def test_weighted_solve_inconsistent_equalities():
    constraints = Task(a=[[1.0, 0.0], [1.0, 0.0]], b=[0.0, 1.0])
    with pytest.raises(QpError):
        weighted_solve(constraints, Task(), 2)


def test_weighted_solve_determined_but_infeasible():
    constraints = Task(a=np.eye(2), b=[1.0, 1.0], d=[[1.0, 0.0]], f=[0.0])
    with pytest.raises(QpError):
        weighted_solve(constraints, Task(), 2)


def test_weighted_solve_determined_equalities():
    constraints = Task(a=np.eye(2), b=[1.0, -1.0])
    x = weighted_solve(constraints, Task(a=np.eye(2), b=[5.0, 5.0]), 2)
    np.testing.assert_allclose(x, [1.0, -1.0], atol=TOL)


def test_weighted_solve_column_mismatch():
    with pytest.raises(ValueError):
        weighted_solve(Task(a=[[1.0, 0.0, 0.0]], b=[1.0]), Task(), 2)


def test_weighted_tasks_stacks_in_order():
    swing = Task(a=[[1.0, 0.0]], b=[1.0])
    base = Task(a=[[0.0, 1.0]], b=[2.0])
    contact = Task(a=[[1.0, 1.0]], b=[3.0])
    total = weighted_tasks(swing, base, contact, 1.0, 1.0, 1.0)
    np.testing.assert_array_equal(total.a, np.vstack([swing.a, base.a, contact.a]))
    np.testing.assert_array_equal(total.b, [1.0, 2.0, 3.0])


def test_weighted_tasks_applies_each_weight():
    swing = Task(a=[[1.0, 0.0]], b=[1.0])
    base = Task(a=[[0.0, 1.0]], b=[2.0])
    contact = Task(a=[[1.0, 1.0]], b=[3.0])
    total = weighted_tasks(swing, base, contact, -1.0, 1.0, 0.0)
    np.testing.assert_array_equal(total.a[0], -swing.a[0])
    np.testing.assert_array_equal(total.a[1], base.a[0])
    np.testing.assert_array_equal(total.a[2], np.zeros(2))


def test_hierarchical_solve_priority():
    task0 = Task(a=[[1.0, 0.0]], b=[1.0])
    task1 = Task(a=[[1.0, 0.0], [0.0, 1.0]], b=[3.0, 4.0])
    np.testing.assert_allclose(hierarchical_solve([task0, task1]), [1.0, 4.0], atol=TOL)


def test_hierarchical_solve_single_task():
    task = Task(a=np.eye(2), b=[1.0, 2.0])
    np.testing.assert_allclose(hierarchical_solve([task]), [1.0, 2.0], atol=TOL)


def test_hierarchical_solve_requires_tasks():
    with pytest.raises(ValueError):
        hierarchical_solve([])