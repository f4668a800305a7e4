"""
Simulation facade for the Simulation Engine
Composes validation, model resolution, RK4 integration and result assembly

run_simulation is the single entry point shared by the server path
(tool handler and HTTP routes) and the in-process client path. It performs
no I/O, does no logging and reads no configuration.
"""

from functools import partial
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from simengine.exceptions import SpecValidationError
from simengine.integrator import integrate_rk4
from simengine.models import SimulationResult, SimulationSpec
from simengine.registry import ModelRegistry
from simengine.results import assemble_result, error_result
from simengine.validation import ValidatedRequest, validate_spec


SpecInput = Union[SimulationSpec, Mapping[str, Any]]


def format_spec_errors(exc: PydanticValidationError) -> str:
    """Format pydantic errors into a single readable message"""
    error_messages = []
    for error in exc.errors():
        loc = " -> ".join(str(x) for x in error.get("loc", []))
        msg = error.get("msg", "Validation error")
        error_messages.append(f"{loc}: {msg}" if loc else msg)
    return "Invalid simulation spec: " + "; ".join(error_messages)


def simulate(request: ValidatedRequest) -> SimulationResult:
    """
    Integrate a validated request and assemble its envelope

    Args:
        request: Output of validate_spec

    Returns:
        Success envelope, or an error envelope if an unbounded model diverged
    """
    model = request.model
    trajectory = integrate_rk4(
        partial(model.derivative, parameters=request.parameters),
        request.initial_vector,
        request.start,
        request.end,
        request.steps,
        compartments=model.compartments,
        lower_bound=model.lower_bound,
        upper_bound=model.upper_bound,
    )
    if not trajectory.is_finite():
        return error_result(
            f"Simulation diverged: {model.domain}/{model.model_type} produced "
            f"non-finite values, try more steps"
        )
    return assemble_result(model, trajectory)


def run_simulation(
    spec: SpecInput, registry: Optional[ModelRegistry] = None
) -> SimulationResult:
    """
    Run a simulation from a spec

    Validation failures are converted into an error envelope; nothing is
    raised across this boundary for bad input.

    Args:
        spec: SimulationSpec or JSON-shaped mapping
        registry: Registry to resolve the model from (default registry if None)

    Returns:
        SimulationResult envelope (status 'success' or 'error')
    """
    try:
        if not isinstance(spec, SimulationSpec):
            spec = SimulationSpec.model_validate(spec)
        request = validate_spec(spec, registry)
    except PydanticValidationError as e:
        return error_result(format_spec_errors(e))
    except SpecValidationError as e:
        return error_result(e.message)

    return simulate(request)
