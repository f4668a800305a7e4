"""
Epidemiological models for the Simulation Engine
Implements the SIR compartmental model over population fractions
"""

from typing import Dict, List

import numpy as np

from simengine.constants import POPULATION_SUM_TOLERANCE, TIME_COLUMN
from simengine.exceptions import InvalidInitialStateError, InvalidParameterRangeError
from simengine.registry import SimulationModel


class SIRModel(SimulationModel):
    """
    Susceptible-Infected-Recovered model

    Compartments are fractions of a closed population, so S + I + R is
    conserved by the equations:

    dS/dt = -beta * S * I
    dI/dt = beta * S * I - gamma * I
    dR/dt = gamma * I

    Parameters:
    - beta: infection rate, in (0, 1)
    - gamma: recovery rate, in (0, 1)
    """

    domain = "epidemiology"
    model_type = "SIR"
    compartments = ("S", "I", "R")
    parameter_names = ("beta", "gamma")
    lower_bound = 0.0
    upper_bound = 1.0
    description = (
        "SIR compartmental model over population fractions. "
        "Parameters: beta (infection rate) and gamma (recovery rate), both in (0, 1). "
        "Initial conditions S, I, R must sum to 1.0."
    )

    def derivative(self, state: np.ndarray, parameters: Dict[str, float]) -> np.ndarray:
        s, i, _ = state
        beta = parameters["beta"]
        gamma = parameters["gamma"]

        infection = beta * s * i
        recovery = gamma * i
        return np.array([-infection, infection - recovery, recovery])

    def validate(self, parameters: Dict[str, float], initial_state: Dict[str, float]) -> None:
        total = sum(initial_state[c] for c in self.compartments)
        if abs(total - 1.0) > POPULATION_SUM_TOLERANCE:
            raise InvalidInitialStateError(
                message=f"Initial state must sum to 1.0, got S + I + R = {total:g}",
                value=total,
                suggestion="Express S, I and R as fractions of the population",
            )

        for compartment in self.compartments:
            value = initial_state[compartment]
            if value < 0.0 or value > 1.0:
                raise InvalidInitialStateError(
                    message=f"Initial {compartment} must be between 0 and 1, got {value:g}",
                    value=value,
                    compartment=compartment,
                )

        for name in self.parameter_names:
            value = parameters[name]
            if not 0.0 < value < 1.0:
                raise InvalidParameterRangeError(
                    name,
                    value,
                    message=f"Invalid {name}: {value:g}. Must be between 0 and 1 (exclusive).",
                    suggestion="Typical values: beta 0.1-0.5, gamma 0.05-0.2",
                )

    def metrics(self, series: List[Dict[str, float]]) -> Dict[str, float]:
        """
        Peak infection, time of peak and final recovered fraction

        The peak is the first point attaining the maximum infected fraction.
        """
        peak_infection = series[0]["I"]
        peak_time = series[0][TIME_COLUMN]
        for point in series[1:]:
            if point["I"] > peak_infection:
                peak_infection = point["I"]
                peak_time = point[TIME_COLUMN]

        return {
            "peak_infection": float(peak_infection),
            "peak_time": float(peak_time),
            "total_recovered": float(series[-1]["R"]),
        }

    def summarize(self, metrics: Dict[str, float]) -> str:
        return (
            f"SIR Simulation completed. "
            f"Peak infection of {metrics['peak_infection'] * 100:.1f}% "
            f"at t={metrics['peak_time']:.1f}. "
            f"Final recovered: {metrics['total_recovered'] * 100:.1f}%."
        )

    def derived_quantities(self, parameters: Dict[str, float]) -> Dict[str, float]:
        """Basic reproduction number R0 = beta / gamma"""
        return {"r0": self.basic_reproduction_number(parameters)}

    @staticmethod
    def basic_reproduction_number(parameters: Dict[str, float]) -> float:
        """
        Calculate R0 (basic reproduction number)

        R0 > 1: the epidemic spreads
        R0 < 1: the epidemic dies out
        """
        return parameters["beta"] / parameters["gamma"]
