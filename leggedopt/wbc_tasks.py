"""Task builders for a floating-base whole-body controller.

The decision variables are ``x = [qdd, F, tau]``: generalized accelerations,
the stacked 3-D contact forces and the actuated joint torques.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from .task import Task

_BASE_DOF = 6


@dataclass(frozen=True)
class WbcLayout:
    """Sizes of the decision-variable blocks of a floating-base robot."""

    generalized_coordinates_num: int
    num_three_dof_contacts: int
    actuated_dof_num: int

    def __post_init__(self) -> None:
        if self.num_three_dof_contacts < 0 or self.actuated_dof_num < 0:
            raise ValueError("dimensions must not be negative")
        if self.generalized_coordinates_num != _BASE_DOF + self.actuated_dof_num:
            raise ValueError(
                "generalized coordinates must be the six base coordinates "
                "followed by the actuated joints"
            )

    @property
    def num_decision_vars(self) -> int:
        """Length of ``[qdd, F, tau]``."""
        return (
            self.generalized_coordinates_num
            + 3 * self.num_three_dof_contacts
            + self.actuated_dof_num
        )

    @property
    def force_offset(self) -> int:
        """Index of the first contact-force variable."""
        return self.generalized_coordinates_num

    @property
    def torque_offset(self) -> int:
        """Index of the first joint-torque variable."""
        return self.generalized_coordinates_num + 3 * self.num_three_dof_contacts


def _flags(layout: WbcLayout, contact_flags: Sequence[bool]) -> list[bool]:
    flags = [bool(flag) for flag in contact_flags]
    if len(flags) != layout.num_three_dof_contacts:
        raise ValueError(
            f"expected {layout.num_three_dof_contacts} contact flags, got {len(flags)}"
        )
    return flags


def _contact_jacobian(layout: WbcLayout, jacobian) -> np.ndarray:
    matrix = np.asarray(jacobian, dtype=float)
    expected = (3 * layout.num_three_dof_contacts, layout.generalized_coordinates_num)
    if matrix.shape != expected:
        raise ValueError(f"expected a contact jacobian of shape {expected}, got {matrix.shape}")
    return matrix


def _velocity(layout: WbcLayout, velocity) -> np.ndarray:
    vector = np.asarray(velocity, dtype=float).ravel()
    if vector.size != layout.generalized_coordinates_num:
        raise ValueError(
            f"expected {layout.generalized_coordinates_num} velocities, got {vector.size}"
        )
    return vector


def _foot_vectors(layout: WbcLayout, vectors) -> np.ndarray:
    array = np.asarray(vectors, dtype=float)
    expected = (layout.num_three_dof_contacts, 3)
    if array.shape != expected:
        raise ValueError(f"expected per-foot vectors of shape {expected}, got {array.shape}")
    return array


def floating_base_eom_task(layout: WbcLayout, mass_matrix, nonlinear_effects, jacobian) -> Task:
    """Equations of motion ``M qdd - J' F - S' tau = -h``."""
    n_q = layout.generalized_coordinates_num
    mass = np.asarray(mass_matrix, dtype=float)
    if mass.shape != (n_q, n_q):
        raise ValueError(f"expected a mass matrix of shape {(n_q, n_q)}, got {mass.shape}")
    nle = _velocity(layout, nonlinear_effects)
    j = _contact_jacobian(layout, jacobian)

    selection = np.zeros((layout.actuated_dof_num, n_q))
    selection[:, _BASE_DOF:] = np.eye(layout.actuated_dof_num)

    a = np.hstack([mass, -j.T, -selection.T])
    return Task(a, -nle)


def torque_limits_task(layout: WbcLayout, torque_limits) -> Task:
    """Bounds ``-limit <= tau <= limit``, the limits repeated over the joints."""
    limits = np.asarray(torque_limits, dtype=float).ravel()
    n_act = layout.actuated_dof_num
    if limits.size == 0 or (2 * n_act) % limits.size:
        raise ValueError(f"{limits.size} torque limits do not tile {2 * n_act} bounds")

    d = np.zeros((2 * n_act, layout.num_decision_vars))
    start = layout.torque_offset
    d[:n_act, start:start + n_act] = np.eye(n_act)
    d[n_act:, start:start + n_act] = -np.eye(n_act)
    f = np.tile(limits, 2 * n_act // limits.size)
    return Task(d=d, f=f)


def no_contact_motion_task(layout: WbcLayout, contact_flags, jacobian, jacobian_dot, velocity) -> Task:
    """Zero acceleration of feet in contact: ``J qdd = -Jdot v``."""
    flags = _flags(layout, contact_flags)
    j = _contact_jacobian(layout, jacobian)
    dj = _contact_jacobian(layout, jacobian_dot)
    v = _velocity(layout, velocity)
    n_q = layout.generalized_coordinates_num

    rows = [3 * i + k for i, flag in enumerate(flags) if flag for k in range(3)]
    a = np.zeros((len(rows), layout.num_decision_vars))
    a[:, :n_q] = j[rows]
    b = -(dj[rows] @ v)
    return Task(a, b)


def friction_cone_task(layout: WbcLayout, contact_flags, friction_coeff: float) -> Task:
    """Zero force on swing feet and a friction pyramid on stance feet."""
    flags = _flags(layout, contact_flags)
    num_contacts = sum(flags)
    num_swing = layout.num_three_dof_contacts - num_contacts
    n = layout.num_decision_vars
    offset = layout.force_offset

    a = np.zeros((3 * num_swing, n))
    swing_feet = [i for i, flag in enumerate(flags) if not flag]
    for row, foot in enumerate(swing_feet):
        col = offset + 3 * foot
        a[3 * row:3 * row + 3, col:col + 3] = np.eye(3)
    b = np.zeros(a.shape[0])

    mu = float(friction_coeff)
    pyramid = np.array(
        [
            [0.0, 0.0, -1.0],
            [1.0, 0.0, -mu],
            [-1.0, 0.0, -mu],
            [0.0, 1.0, -mu],
            [0.0, -1.0, -mu],
        ]
    )
    d = np.zeros((5 * num_contacts + 3 * num_swing, n))
    stance_feet = [i for i, flag in enumerate(flags) if flag]
    for row, foot in enumerate(stance_feet):
        col = offset + 3 * foot
        d[5 * row:5 * row + 5, col:col + 3] = pyramid
    f = np.zeros(d.shape[0])
    return Task(a, b, d, f)


def swing_leg_task(
    layout: WbcLayout,
    contact_flags,
    jacobian,
    jacobian_dot,
    velocity,
    pos_desired,
    pos_measured,
    vel_desired,
    vel_measured,
    kp: float,
    kd: float,
) -> Task:
    """PD tracking of swing-foot positions: ``J qdd = accel - Jdot v``."""
    flags = _flags(layout, contact_flags)
    j = _contact_jacobian(layout, jacobian)
    dj = _contact_jacobian(layout, jacobian_dot)
    v = _velocity(layout, velocity)
    p_des = _foot_vectors(layout, pos_desired)
    p_meas = _foot_vectors(layout, pos_measured)
    v_des = _foot_vectors(layout, vel_desired)
    v_meas = _foot_vectors(layout, vel_measured)
    n_q = layout.generalized_coordinates_num

    swing_feet = [i for i, flag in enumerate(flags) if not flag]
    a = np.zeros((3 * len(swing_feet), layout.num_decision_vars))
    b = np.zeros(a.shape[0])
    for row, foot in enumerate(swing_feet):
        rows = slice(3 * foot, 3 * foot + 3)
        accel = kp * (p_des[foot] - p_meas[foot]) + kd * (v_des[foot] - v_meas[foot])
        a[3 * row:3 * row + 3, :n_q] = j[rows]
        b[3 * row:3 * row + 3] = accel - dj[rows] @ v
    return Task(a, b)


def contact_force_task(layout: WbcLayout, input_desired) -> Task:
    """Track the desired contact forces taken from the head of the input."""
    num_forces = 3 * layout.num_three_dof_contacts
    desired = np.asarray(input_desired, dtype=float).ravel()
    if desired.size < num_forces:
        raise ValueError(f"input has {desired.size} entries, need at least {num_forces}")

    a = np.zeros((num_forces, layout.num_decision_vars))
    a[:, layout.force_offset:layout.force_offset + num_forces] = np.eye(num_forces)
    return Task(a, desired[:num_forces].copy())