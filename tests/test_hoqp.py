import numpy as np
import pytest

from leggedopt.hoqp import HoQp, QpError, solve_qp
from leggedopt.task import Task

TOL = 1e-6


@pytest.fixture
def two_tasks():
    rng = np.random.default_rng(0)
    task0 = Task(
        a=rng.uniform(-1.0, 1.0, (2, 4)),
        b=np.ones(2),
        d=rng.uniform(-1.0, 1.0, (2, 4)),
        f=np.ones(2),
    )
    task1 = Task(a=np.ones((2, 4)), b=task0.b, d=task0.d, f=task0.f)
    return task0, task1


def test_two_task_inequalities_hold(two_tasks):
    task0, task1 = two_tasks
    hoqp0 = HoQp(task0)
    hoqp1 = HoQp(task1, hoqp0)
    x0 = hoqp0.solutions
    x1 = hoqp1.solutions
    slack0 = hoqp0.stacked_slack_solutions
    slack1 = hoqp1.stacked_slack_solutions

    assert slack0.shape == (2,)
    assert slack1.shape == (4,)
    assert np.all(slack1 >= -TOL)
    assert np.all(task0.d @ x0 <= task0.f + slack0 + TOL)
    assert np.all(task1.d @ x1 <= task1.f + slack1[2:] + TOL)
    assert np.all(task0.d @ x1 <= task0.f + slack0 + TOL)


def test_two_task_preserves_higher_equalities(two_tasks):
    task0, task1 = two_tasks
    hoqp0 = HoQp(task0)
    hoqp1 = HoQp(task1, hoqp0)
    np.testing.assert_allclose(task0.a @ hoqp1.solutions, task0.a @ hoqp0.solutions, atol=TOL)


def test_null_space_basis(two_tasks):
    task0, _ = two_tasks
    hoqp0 = HoQp(task0)
    z = hoqp0.stacked_z_matrix
    assert z.shape == (4, 2)
    np.testing.assert_allclose(task0.a @ z, np.zeros((2, 2)), atol=1e-10)
    assert hoqp0.num_stacked_slack_vars == 2


def test_single_equality_task():
    task = Task(a=[[1.0, 0.0], [0.0, 1.0]], b=[1.0, 2.0])
    np.testing.assert_allclose(HoQp(task).solutions, [1.0, 2.0], atol=TOL)


def test_higher_priority_equality_wins():
    task0 = Task(a=[[1.0, 0.0]], b=[1.0])
    task1 = Task(a=[[1.0, 0.0], [0.0, 1.0]], b=[3.0, 4.0])
    hoqp = HoQp(task1, HoQp(task0))
    np.testing.assert_allclose(hoqp.solutions, [1.0, 4.0], atol=TOL)


def test_higher_priority_inequality_wins():
    task0 = Task(d=[[1.0]], f=[-1.0])
    task1 = Task(a=[[1.0]], b=[0.0])
    hoqp = HoQp(task1, HoQp(task0))
    np.testing.assert_allclose(hoqp.solutions, [-1.0], atol=TOL)


def test_conflicting_inequalities_use_slack():
    task = Task(d=[[1.0], [-1.0]], f=[-1.0, -1.0])
    hoqp = HoQp(task)
    np.testing.assert_allclose(hoqp.solutions, [0.0], atol=TOL)
    np.testing.assert_allclose(hoqp.stacked_slack_solutions, [1.0, 1.0], atol=TOL)


def test_stacked_tasks_put_current_first():
    task0 = Task(a=[[1.0, 0.0]], b=[1.0])
    task1 = Task(a=[[0.0, 1.0]], b=[2.0])
    hoqp = HoQp(task1, HoQp(task0))
    np.testing.assert_array_equal(hoqp.stacked_tasks.a, [[0.0, 1.0], [1.0, 0.0]])
    np.testing.assert_array_equal(hoqp.stacked_tasks.b, [2.0, 1.0])


def test_solve_qp_unconstrained():
    x = solve_qp(np.eye(2), [1.0, -2.0], np.zeros((0, 2)), np.zeros(0))
    np.testing.assert_allclose(x, [-1.0, 2.0], atol=TOL)


def test_solve_qp_active_bound():
    x = solve_qp(np.eye(2), [-1.0, -1.0], [[1.0, 0.0]], [0.5])
    np.testing.assert_allclose(x, [0.5, 1.0], atol=TOL)


def test_solve_qp_infeasible():
    with pytest.raises(QpError):
        solve_qp(np.eye(1), [0.0], [[1.0], [-1.0]], [-1.0, -1.0])


def test_solve_qp_bound_count_mismatch():
    with pytest.raises(ValueError):
        solve_qp(np.eye(2), [0.0, 0.0], [[1.0, 0.0]], [1.0, 2.0])