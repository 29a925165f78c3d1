"""Linear task description used by the whole-body controllers.

A task bundles equality rows ``a x = b`` and inequality rows ``d x <= f``
over a common vector of decision variables.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np


def _as_matrix(value) -> np.ndarray:
    matrix = np.asarray(value, dtype=float)
    if matrix.size == 0 and matrix.ndim < 2:
        return np.zeros((0, 0))
    if matrix.ndim != 2:
        raise ValueError(f"expected a two-dimensional matrix, got shape {matrix.shape}")
    return matrix


def _as_vector(value) -> np.ndarray:
    return np.asarray(value, dtype=float).ravel()


@dataclass(eq=False)
class Task:
    """Equality part ``a x = b`` and inequality part ``d x <= f``."""

    a: np.ndarray = field(default_factory=lambda: np.zeros((0, 0)))
    b: np.ndarray = field(default_factory=lambda: np.zeros(0))
    d: np.ndarray = field(default_factory=lambda: np.zeros((0, 0)))
    f: np.ndarray = field(default_factory=lambda: np.zeros(0))

    def __post_init__(self) -> None:
        self.a = _as_matrix(self.a)
        self.b = _as_vector(self.b)
        self.d = _as_matrix(self.d)
        self.f = _as_vector(self.f)

    def __add__(self, other: object) -> "Task":
        """Stack the rows of ``other`` below the rows of this task."""
        if not isinstance(other, Task):
            return NotImplemented
        return Task(
            concatenate_matrices(self.a, other.a),
            concatenate_vectors(self.b, other.b),
            concatenate_matrices(self.d, other.d),
            concatenate_vectors(self.f, other.f),
        )

    def __mul__(self, scalar: float) -> "Task":
        """Scale every part of the task by ``scalar``."""
        if not isinstance(scalar, (int, float, np.number)):
            return NotImplemented
        return Task(self.a * scalar, self.b * scalar, self.d * scalar, self.f * scalar)

    __rmul__ = __mul__


def empty_task(num_decision_vars: int) -> Task:
    """A task with no rows over ``num_decision_vars`` decision variables."""
    return Task(
        np.zeros((0, num_decision_vars)),
        np.zeros(0),
        np.zeros((0, num_decision_vars)),
        np.zeros(0),
    )


def concatenate_matrices(m1, m2) -> np.ndarray:
    """Stack two matrices vertically; a matrix without columns is ignored."""
    m1 = _as_matrix(m1)
    m2 = _as_matrix(m2)
    if m1.shape[1] == 0:
        return m2.copy()
    if m2.shape[1] == 0:
        return m1.copy()
    if m1.shape[1] != m2.shape[1]:
        raise ValueError(f"column mismatch: {m1.shape[1]} != {m2.shape[1]}")
    return np.vstack([m1, m2])


def concatenate_vectors(v1, v2) -> np.ndarray:
    """Join two vectors end to end."""
    return np.concatenate([_as_vector(v1), _as_vector(v2)])