"""
RK4 integrator for the Simulation Engine
Advances any model's state over a fixed time grid
"""

import math
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from simengine.constants import OUTPUT_PRECISION


DerivativeFunction = Callable[[np.ndarray], np.ndarray]


class Trajectory:
    """
    Integrated state series

    Attributes:
        times: Time of each emitted point
        states: State values of each emitted point
        compartments: Names of the state components
    """

    def __init__(
        self,
        times: List[float],
        states: List[Tuple[float, ...]],
        compartments: Sequence[str],
    ):
        self.times = times
        self.states = states
        self.compartments = tuple(compartments)

    def __len__(self) -> int:
        return len(self.times)

    def is_finite(self) -> bool:
        """Check that every emitted value is a finite number"""
        return all(math.isfinite(v) for state in self.states for v in state)

    def points(self, time_key: str = "time") -> List[dict]:
        """Convert to a list of {time, <compartment>...} points"""
        return [
            {time_key: t, **dict(zip(self.compartments, state))}
            for t, state in zip(self.times, self.states)
        ]


def _canonical(values: np.ndarray, precision: int) -> Tuple[float, ...]:
    """Round to the output precision as plain Python floats"""
    return tuple(round(float(v), precision) for v in values)


def rk4_step(derivative: DerivativeFunction, y: np.ndarray, dt: float) -> np.ndarray:
    """
    Single classical Runge-Kutta step

    k1 = f(y)
    k2 = f(y + dt/2 * k1)
    k3 = f(y + dt/2 * k2)
    k4 = f(y + dt * k3)
    y_next = y + dt/6 * (k1 + 2*k2 + 2*k3 + k4)
    """
    k1 = derivative(y)
    k2 = derivative(y + 0.5 * dt * k1)
    k3 = derivative(y + 0.5 * dt * k2)
    k4 = derivative(y + dt * k3)
    return y + (dt / 6.0) * (k1 + 2.0 * k2 + 2.0 * k3 + k4)


def integrate_rk4(
    derivative: DerivativeFunction,
    initial_state: Sequence[float],
    start: float,
    end: float,
    steps: int,
    compartments: Sequence[str],
    lower_bound: Optional[float] = None,
    upper_bound: Optional[float] = None,
    precision: int = OUTPUT_PRECISION,
) -> Trajectory:
    """
    Integrate an autonomous ODE system with fixed-step RK4

    The step size is dt = (end - start) / steps. After every step each
    component is clamped to [lower_bound, upper_bound] to absorb numerical
    overshoot (overflowed or NaN components land on a bound first), then
    rounded to `precision` decimals before it is emitted.
    The clamped value (not the rounded one) is carried into the next step.
    The initial state is emitted verbatim as the first point, so N steps
    yield N + 1 points.

    Args:
        derivative: Function mapping a state vector to its rate of change
        initial_state: State at t = start
        start: Start time
        end: End time
        steps: Number of equal sub-intervals
        compartments: Names of the state components
        lower_bound: Lower clamp (None disables)
        upper_bound: Upper clamp (None disables)
        precision: Decimal places for emitted values

    Returns:
        Trajectory with steps + 1 points
    """
    dt = (end - start) / steps
    y = np.array(initial_state, dtype=np.float64)
    clamp = lower_bound is not None or upper_bound is not None

    times: List[float] = [start]
    states: List[Tuple[float, ...]] = [tuple(initial_state)]

    for i in range(1, steps + 1):
        # Overflow on coarse grids is absorbed by the clamp below
        with np.errstate(over="ignore", invalid="ignore"):
            y = rk4_step(derivative, y, dt)
        if clamp:
            y = np.nan_to_num(
                y,
                nan=lower_bound if lower_bound is not None else upper_bound,
                posinf=upper_bound,
                neginf=lower_bound,
            )
            y = np.clip(y, lower_bound, upper_bound)

        # Time from the index so no drift accumulates
        t = end if i == steps else start + i * dt
        times.append(round(t, precision))
        states.append(_canonical(y, precision))

    return Trajectory(times, states, compartments)
