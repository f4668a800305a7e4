"""
Utility functions for spec manipulation
Provides reusable functions for deriving specs from a base spec
"""

from typing import Dict, Optional

from simengine.constants import (
    RERUN_DEFAULT_PARAMETERS,
    RERUN_DEFAULT_STEPS,
    RERUN_END_TIME,
    RERUN_INITIAL_CONDITIONS,
)
from simengine.models import RerunParameters, SimulationSpec


def apply_parameter_values(
    spec: SimulationSpec,
    parameter_values: Dict[str, float],
) -> SimulationSpec:
    """
    Create a new spec with updated parameter values.

    This function is used when recomputing a simulation after a parameter
    changes (e.g., a slider drag). The original spec is left untouched.

    Args:
        spec: Original simulation spec
        parameter_values: Dictionary mapping parameter names to new values

    Returns:
        New spec with the merged parameters

    Example:
        >>> updated = apply_parameter_values(spec, {"beta": 0.4})
        >>> updated.parameters["beta"]
        0.4
    """
    data = spec.model_dump()
    data["parameters"] = {**spec.parameters, **parameter_values}
    return SimulationSpec.model_validate(data)


def apply_time_span(
    spec: SimulationSpec,
    end: Optional[float] = None,
    steps: Optional[int] = None,
    preview_mode: Optional[bool] = None,
) -> SimulationSpec:
    """
    Create a new spec with an adjusted time grid

    Only the arguments that are not None are changed.
    """
    data = spec.model_dump()
    if end is not None:
        data["time_span"]["end"] = end
    if steps is not None:
        data["time_span"]["steps"] = steps
    if preview_mode is not None:
        data["time_span"]["preview_mode"] = preview_mode
    return SimulationSpec.model_validate(data)


def build_rerun_spec(parameters: RerunParameters) -> SimulationSpec:
    """
    Build the canonical SIR scenario used by the recompute endpoint

    Missing slider values fall back to beta=0.3, gamma=0.1, steps=100 over
    t in [0, 160] with S=0.99, I=0.01, R=0.
    """
    beta = parameters.beta if parameters.beta is not None else RERUN_DEFAULT_PARAMETERS["beta"]
    gamma = parameters.gamma if parameters.gamma is not None else RERUN_DEFAULT_PARAMETERS["gamma"]
    steps = parameters.steps if parameters.steps is not None else RERUN_DEFAULT_STEPS

    return SimulationSpec(
        domain="epidemiology",
        model_type="SIR",
        parameters={"beta": beta, "gamma": gamma},
        initial_conditions=dict(RERUN_INITIAL_CONDITIONS),
        time_span={"start": 0.0, "end": RERUN_END_TIME, "steps": steps},
    )
