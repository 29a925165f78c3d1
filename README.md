# leggedopt

Building blocks for whole-body control and contact-constrained optimal control
of legged robots, working on plain NumPy arrays.

## Modules

- `leggedopt.task` – `Task`, a stack of equality rows `a x = b` and inequality
  rows `d x <= f`. Tasks are stacked with `+` (the rows of the right operand go
  below the left) and scaled with `*` by a number. `empty_task(n)` gives a task
  with no rows over `n` variables; `concatenate_matrices` and
  `concatenate_vectors` are the stacking helpers, where a matrix with no
  columns is skipped.
- `leggedopt.hoqp` – `HoQp`, one level of a hierarchical (lexicographic)
  quadratic program. Each level solves its own task inside the null space of
  the levels above it, with slack variables on its inequalities. Its
  properties are `solutions`, `stacked_z_matrix`, `stacked_tasks`,
  `stacked_slack_solutions` and `num_stacked_slack_vars`.
  `solve_qp(h, c, d, f)` minimises `0.5 x'Hx + c'x` subject to `Dx <= f` with
  a primal active-set method; it raises `QpError` when the constraints have no
  feasible point or the iterations do not converge.
- `leggedopt.wbc_solvers` – two ways of turning whole-body tasks into a
  solution vector:
  - `weighted_solve(constraints, weighted_task, num_decision_vars)` fits the
    weighted task in the least-squares sense, holding the equality rows of
    `constraints` exactly and its inequality rows as upper bounds;
  - `weighted_tasks(...)` stacks the swing-leg, base-acceleration and
    contact-force tasks, each scaled by its weight;
  - `hierarchical_solve(tasks)` solves the tasks in strict priority order,
    highest first, by chaining `HoQp` levels.
- `leggedopt.wbc_tasks` – `WbcLayout`, the sizes of the decision vector
  `x = [qdd, F, tau]` (generalized accelerations, 3-D contact forces, joint
  torques), and the task builders `floating_base_eom_task`,
  `torque_limits_task`, `no_contact_motion_task`, `friction_cone_task`,
  `swing_leg_task` and `contact_force_task`.
- `leggedopt.zero_force` – `ZeroForceConstraint`, which forces the contact
  force of a foot to zero while it is in swing, together with
  `contact_forces`, `LinearApproximation` and `QuadraticApproximation`.
- `leggedopt.friction_cone` – `FrictionConeConstraint` and
  `FrictionConeConfig`: the smoothed cone
  `mu * (Fz + gripper_force) - sqrt(Fx^2 + Fy^2 + regularization) >= 0`,
  active while the foot is in stance, with its value, linear approximation and
  quadratic approximation.
- `leggedopt.swing_schedule` – `SwingTrajectoryConfig` and the helpers
  `find_index`, `update_foot_schedule`, `check_indices_valid`,
  `swing_trajectory_scaling` and `transpose_contact_flags`, which find the
  lift-off and touch-down phases of each foot in a mode sequence and the
  scaling applied to short swings.

The constraints take a callable `contact_flags(time)` that returns the stance
flag of every foot, so any gait schedule can drive them.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Example: a two-level hierarchy

```python
import numpy as np
from leggedopt.task import Task
from leggedopt.hoqp import HoQp

high = Task(a=np.array([[1.0, 1.0]]), b=np.array([1.0]))
low = Task(a=np.array([[1.0, -1.0]]), b=np.array([0.0]))

top = HoQp(high, None)
bottom = HoQp(low, top)
print(bottom.solutions)  # close to [0.5, 0.5]
```

The higher-priority task is met exactly, and the lower one is solved as well as
it can be without disturbing the one above. The same result comes from
`hierarchical_solve([high, low])` in `leggedopt.wbc_solvers`.

## Example: a friction cone

```python
import numpy as np
from leggedopt.friction_cone import FrictionConeConfig, FrictionConeConstraint

constraint = FrictionConeConstraint(
    lambda t: (True, True, True, True), FrictionConeConfig(0.7), 0
)
u = np.zeros(24)
u[2] = 100.0                     # normal force on the first foot
print(constraint.value(0.0, np.zeros(24), u))   # [65.], positive inside the cone
```

## What it does not do

- It has no robot model. Mass matrices, nonlinear effects, contact Jacobians,
  their time derivatives and foot positions and velocities must be computed
  elsewhere and passed to the task builders in `leggedopt.wbc_tasks`.
- It does not build or run a model-predictive controller, and it reads no task
  or settings files; every parameter is given in code.
- `leggedopt.swing_schedule` finds swing phases and their scaling but does not
  generate the vertical swing-foot spline trajectories.
- The friction cone assumes flat terrain; there is no way to set another
  surface normal.
- There is no command-line program.