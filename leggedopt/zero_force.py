"""Equality constraint forcing the contact force of a swing foot to zero."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

import numpy as np

ContactFlagsFn = Callable[[float], Sequence[bool]]


@dataclass
class LinearApproximation:
    """First-order approximation ``f + dfdx dx + dfdu du``."""

    f: np.ndarray
    dfdx: np.ndarray
    dfdu: np.ndarray


@dataclass
class QuadraticApproximation:
    """Second-order approximation with one Hessian set per constraint row."""

    f: np.ndarray
    dfdx: np.ndarray
    dfdu: np.ndarray
    dfdxx: list[np.ndarray] = field(default_factory=list)
    dfduu: list[np.ndarray] = field(default_factory=list)
    dfdux: list[np.ndarray] = field(default_factory=list)


def contact_forces(input, contact_index: int) -> np.ndarray:
    """The 3-D force of one contact, read from the stacked input vector."""
    vector = np.asarray(input, dtype=float).ravel()
    if contact_index < 0 or 3 * contact_index + 3 > vector.size:
        raise IndexError(f"contact {contact_index} is outside an input of size {vector.size}")
    return vector[3 * contact_index:3 * contact_index + 3].copy()


class ZeroForceConstraint:
    """``F_i = 0`` for a contact point that is not in stance."""

    def __init__(self, contact_flags: ContactFlagsFn, contact_index: int):
        if contact_index < 0:
            raise ValueError("contact index must not be negative")
        self.contact_flags = contact_flags
        self.contact_index = contact_index
        self._force_slice = slice(3 * contact_index, 3 * contact_index + 3)

    def is_active(self, time: float) -> bool:
        """Active while the contact is in swing."""
        return not self.contact_flags(time)[self.contact_index]

    def num_constraints(self, time: float) -> int:
        """One row per force component of the selected contact."""
        return self._force_slice.stop - self._force_slice.start

    def value(self, time: float, state, input) -> np.ndarray:
        """The contact force itself."""
        return contact_forces(input, self.contact_index)

    def linear_approximation(self, time: float, state, input) -> LinearApproximation:
        """Exact linearization: the force selected from the input."""
        state_size = np.asarray(state, dtype=float).size
        input_size = np.asarray(input, dtype=float).size
        rows = self.num_constraints(time)
        f = self.value(time, state, input)
        dfdu = np.zeros((rows, input_size))
        dfdu[:, self._force_slice] = np.eye(rows)
        return LinearApproximation(f=f, dfdx=np.zeros((rows, state_size)), dfdu=dfdu)