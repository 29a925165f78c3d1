"""Swing-phase scheduling of legged gaits.

This module finds, for every swing phase of a foot, the phases at which
the foot lifts off and touches down. It also provides the scaling that
shortens the swing height and velocity of brief swings.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class SwingTrajectoryConfig:
    """Shape parameters of the vertical swing-foot trajectory.

    Swing phases shorter than ``swing_time_scale`` are scaled down in
    height and velocity.
    """

    lift_off_velocity: float = 0.0
    touch_down_velocity: float = 0.0
    swing_height: float = 0.1
    swing_time_scale: float = 0.15


def find_index(index: int, contact_flags: Sequence[bool]) -> tuple[int, int]:
    """Lift-off and touch-down phase indices of the swing containing ``index``.

    The lift-off index is the last stance phase before ``index``, or -1 if
    there is none. The touch-down index is the last swing phase of this
    swing, which is the final phase if the foot never lands again. For a
    stance phase the result is ``(0, 0)``.
    """
    flags = [bool(flag) for flag in contact_flags]
    if not 0 <= index < len(flags):
        raise IndexError(f"phase {index} is outside a sequence of {len(flags)} phases")
    if flags[index]:
        return 0, 0

    start_index = next(
        (phase for phase in range(index - 1, -1, -1) if flags[phase]),
        -1,
    )
    final_index = next(
        (phase - 1 for phase in range(index + 1, len(flags)) if flags[phase]),
        len(flags) - 1,
    )
    return start_index, final_index


def update_foot_schedule(contact_flags: Sequence[bool]) -> tuple[list[int], list[int]]:
    """Lift-off and touch-down indices for every phase of one foot.

    Stance phases get zero in both lists.
    """
    flags = [bool(flag) for flag in contact_flags]
    pairs = [find_index(phase, flags) for phase in range(len(flags))]
    start_indices = [start for start, _ in pairs]
    final_indices = [final for _, final in pairs]
    return start_indices, final_indices


def _describe(index: int, mode_sequence: Sequence[int]) -> str:
    phases = ",  ".join(f"[{phase}]: {mode}" for phase, mode in enumerate(mode_sequence))
    return f"Subsystem: {index} out of {len(mode_sequence) - 1}; {phases}"


def check_indices_valid(
    leg: int,
    index: int,
    start_index: int,
    final_index: int,
    mode_sequence: Sequence[int],
) -> tuple[int, int]:
    """Check that a swing has both its lift-off and its touch-down in the schedule.

    Returns ``(start_index, final_index)`` when valid and raises
    ``ValueError`` otherwise.
    """
    num_subsystems = len(mode_sequence)
    if start_index < 0:
        raise ValueError(
            f"The time of take-off for the first swing of the EE with ID {leg} "
            f"is not defined. {_describe(index, mode_sequence)}"
        )
    if final_index >= num_subsystems - 1:
        raise ValueError(
            f"The time of touch-down for the last swing of the EE with ID {leg} "
            f"is not defined. {_describe(index, mode_sequence)}"
        )
    return start_index, final_index


def swing_trajectory_scaling(start_time: float, final_time: float, swing_time_scale: float) -> float:
    """Scale factor for a swing lasting from ``start_time`` to ``final_time``, at most 1."""
    return min(1.0, (final_time - start_time) / swing_time_scale)


def transpose_contact_flags(
    flags_per_phase: Iterable[Sequence[bool]], num_feet: int
) -> list[list[bool]]:
    """Turn per-phase contact flags into one sequence of flags per foot."""
    if num_feet < 0:
        raise ValueError("number of feet must not be negative")
    phases = [[bool(flag) for flag in flags] for flags in flags_per_phase]
    for phase, flags in enumerate(phases):
        if len(flags) < num_feet:
            raise ValueError(
                f"phase {phase} has {len(flags)} contact flags, need {num_feet}"
            )
    return [[flags[foot] for flags in phases] for foot in range(num_feet)]