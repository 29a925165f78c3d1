"""Friction cone inequality on the contact force of a stance foot.

The constraint ``h(t, x, u) >= 0`` reads

    mu * (Fz + gripper_force) - sqrt(Fx^2 + Fy^2 + regularization) >= 0

The gripper force moves the apex of the cone down along the normal.
Tangential forces become possible without a normal force, and the foot may
pull with up to the gripping force. The regularization keeps gradient and
Hessian finite at ``Fx = Fy = 0`` and adds a parabolic safety margin: with no
tangential force the zero crossing lies at ``Fz = sqrt(regularization) / mu``.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .zero_force import (
    ContactFlagsFn,
    LinearApproximation,
    QuadraticApproximation,
    contact_forces,
)


@dataclass(frozen=True)
class FrictionConeConfig:
    """Parameters of the friction model.

    ``hessian_diagonal_shift`` keeps the quadratic approximation strictly
    concave, so that its negation is strictly convex.
    """

    friction_coefficient: float = 0.7
    regularization: float = 25.0
    gripper_force: float = 0.0
    hessian_diagonal_shift: float = 1e-6

    def __post_init__(self) -> None:
        if not self.friction_coefficient > 0.0:
            raise ValueError("friction coefficient must be positive")
        if not self.regularization > 0.0:
            raise ValueError("regularization must be positive")
        if not self.hessian_diagonal_shift >= 0.0:
            raise ValueError("hessian diagonal shift must not be negative")


@dataclass(frozen=True)
class _ConeDerivatives:
    gradient: np.ndarray
    hessian: np.ndarray


class FrictionConeConstraint:
    """Friction cone on the force of one 3-DoF contact, active in stance."""

    def __init__(
        self,
        contact_flags: ContactFlagsFn,
        config: FrictionConeConfig | None = None,
        contact_index: int = 0,
    ):
        if contact_index < 0:
            raise ValueError("contact index must not be negative")
        self.contact_flags = contact_flags
        self.config = config if config is not None else FrictionConeConfig()
        self.contact_index = contact_index
        # Rotation from world to terrain frame; flat terrain is assumed.
        self._terrain_rotation = np.eye(3)

    def is_active(self, time: float) -> bool:
        """Active while the contact is in stance."""
        return bool(self.contact_flags(time)[self.contact_index])

    def num_constraints(self, time: float) -> int:
        """Number of rows the cone value has: a single scalar inequality."""
        return self._cone_value(np.zeros(3)).size

    def value(self, time: float, state, input) -> np.ndarray:
        """The cone constraint value; non-negative inside the cone."""
        return self._cone_value(self._local_force(input))

    def linear_approximation(self, time: float, state, input) -> LinearApproximation:
        """Value and first derivatives with respect to state and input."""
        state_size = np.asarray(state, dtype=float).size
        input_size = np.asarray(input, dtype=float).size
        local_force = self._local_force(input)
        derivatives = self._derivatives(local_force)
        return LinearApproximation(
            f=self._cone_value(local_force),
            dfdx=np.zeros((1, state_size)),
            dfdu=self._input_derivative(input_size, derivatives),
        )

    def quadratic_approximation(self, time: float, state, input) -> QuadraticApproximation:
        """Value, first derivatives and shifted second derivatives."""
        state_size = np.asarray(state, dtype=float).size
        input_size = np.asarray(input, dtype=float).size
        local_force = self._local_force(input)
        derivatives = self._derivatives(local_force)
        shift = self.config.hessian_diagonal_shift

        dfduu = np.zeros((input_size, input_size))
        start = 3 * self.contact_index
        dfduu[start:start + 3, start:start + 3] = derivatives.hessian
        dfduu -= shift * np.eye(input_size)

        return QuadraticApproximation(
            f=self._cone_value(local_force),
            dfdx=np.zeros((1, state_size)),
            dfdu=self._input_derivative(input_size, derivatives),
            dfdxx=[-shift * np.eye(state_size)],
            dfduu=[dfduu],
            dfdux=[np.zeros((input_size, state_size))],
        )

    def _local_force(self, input) -> np.ndarray:
        return self._terrain_rotation @ contact_forces(input, self.contact_index)

    def _cone_value(self, local_force: np.ndarray) -> np.ndarray:
        cfg = self.config
        fx, fy, fz = local_force
        tangent_norm = np.sqrt(fx * fx + fy * fy + cfg.regularization)
        return np.array([cfg.friction_coefficient * (fz + cfg.gripper_force) - tangent_norm])

    def _derivatives(self, local_force: np.ndarray) -> _ConeDerivatives:
        cfg = self.config
        fx, fy, _ = local_force
        fx_sq = fx * fx
        fy_sq = fy * fy
        tangent_sq = fx_sq + fy_sq + cfg.regularization
        tangent_norm = np.sqrt(tangent_sq)
        tangent_pow32 = tangent_norm * tangent_sq

        local_gradient = np.array(
            [-fx / tangent_norm, -fy / tangent_norm, cfg.friction_coefficient]
        )
        cross = fx * fy / tangent_pow32
        local_hessian = np.array(
            [
                [-(fy_sq + cfg.regularization) / tangent_pow32, cross, 0.0],
                [cross, -(fx_sq + cfg.regularization) / tangent_pow32, 0.0],
                [0.0, 0.0, 0.0],
            ]
        )

        rotation = self._terrain_rotation
        return _ConeDerivatives(
            gradient=local_gradient @ rotation,
            hessian=rotation.T @ local_hessian @ rotation,
        )

    def _input_derivative(self, input_size: int, derivatives: _ConeDerivatives) -> np.ndarray:
        dfdu = np.zeros((1, input_size))
        start = 3 * self.contact_index
        dfdu[0, start:start + 3] = derivatives.gradient
        return dfdu