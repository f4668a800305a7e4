"""
Validation layer for simulation specs
Checks model resolution, parameters, initial conditions, and the time grid
before any integration work begins
"""

import math
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from simengine.constants import (
    DEFAULT_STEPS,
    PREVIEW_STEPS,
    MIN_SIMULATION_STEPS,
    MAX_SIMULATION_STEPS,
)
from simengine.exceptions import (
    ValidationError,
    SpecValidationError,
    MissingParameterError,
    MissingInitialConditionError,
    InvalidTimeSpanError,
)
from simengine.models import SimulationSpec, TimeSpan
from simengine.registry import ModelRegistry, SimulationModel, get_registry


class ValidatedRequest(BaseModel):
    """
    Fully-defaulted request ready for integration

    Attributes:
        model: Resolved model implementation
        parameters: Required parameters, as floats
        initial_state: Initial compartment values in model order
        start: Start time
        end: End time
        steps: Number of integration steps
        preview_mode: Whether the run is a reduced-fidelity preview
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    model: SimulationModel
    parameters: Dict[str, float]
    initial_state: Dict[str, float]
    start: float
    end: float
    steps: int
    preview_mode: bool = False

    @property
    def initial_vector(self) -> List[float]:
        """Initial state ordered like the model's compartments"""
        return [self.initial_state[c] for c in self.model.compartments]


class ValidationResult(BaseModel):
    """Result of validation"""

    valid: bool
    errors: List[ValidationError] = []
    request: Optional[ValidatedRequest] = None


# ============================================================================
# Value Extraction
# ============================================================================


def _extract_values(
    values: Mapping[str, Any], required: Tuple[str, ...]
) -> Tuple[Dict[str, float], List[str], List[str]]:
    """
    Pull required numeric values out of a spec mapping

    Booleans and strings count as non-numeric, even when a string would
    parse as a number.

    Returns:
        Tuple of (extracted values, missing names, non-numeric or non-finite names)
    """
    extracted: Dict[str, float] = {}
    missing: List[str] = []
    non_finite: List[str] = []

    for name in required:
        value = values.get(name)
        if value is None:
            missing.append(name)
        elif isinstance(value, bool) or not isinstance(value, (int, float)):
            non_finite.append(name)
        elif not math.isfinite(value):
            non_finite.append(name)
        else:
            extracted[name] = float(value)

    return extracted, missing, non_finite


def validate_parameters(
    model: SimulationModel, parameters: Mapping[str, Any]
) -> Dict[str, float]:
    """
    Check that every parameter the model requires is present and numeric

    Raises:
        MissingParameterError: If any required parameter is absent or non-finite
    """
    extracted, missing, non_finite = _extract_values(parameters, model.parameter_names)
    if missing:
        raise MissingParameterError(missing)
    if non_finite:
        raise MissingParameterError(
            non_finite,
            message=f"Parameters must be finite numbers: {', '.join(non_finite)}",
        )
    return extracted


def validate_initial_conditions(
    model: SimulationModel, initial_conditions: Mapping[str, Any]
) -> Dict[str, float]:
    """
    Check that every compartment the model requires has an initial value

    Raises:
        MissingInitialConditionError: If any compartment is absent or non-finite
    """
    extracted, missing, non_finite = _extract_values(initial_conditions, model.compartments)
    if missing:
        raise MissingInitialConditionError(missing)
    if non_finite:
        raise MissingInitialConditionError(
            non_finite,
            message=f"Initial conditions must be finite numbers: {', '.join(non_finite)}",
        )
    return extracted


# ============================================================================
# Time Grid Validation
# ============================================================================


def resolve_steps(time_span: TimeSpan) -> int:
    """
    Apply the canonical step defaults

    Rules:
    - no steps given: DEFAULT_STEPS, or PREVIEW_STEPS in preview mode
    - preview mode caps an explicit step count at PREVIEW_STEPS
    """
    if time_span.steps is None:
        return PREVIEW_STEPS if time_span.preview_mode else DEFAULT_STEPS
    if time_span.preview_mode:
        return min(time_span.steps, PREVIEW_STEPS)
    return time_span.steps


def validate_time_span(time_span: TimeSpan) -> int:
    """
    Validate the time grid and return the step count to use

    Rules:
    - start and end are finite
    - end > start
    - MIN_SIMULATION_STEPS <= steps <= MAX_SIMULATION_STEPS

    Raises:
        InvalidTimeSpanError: If any rule fails
    """
    if not (math.isfinite(time_span.start) and math.isfinite(time_span.end)):
        raise InvalidTimeSpanError(
            f"Time span bounds must be finite, got [{time_span.start}, {time_span.end}]"
        )

    if time_span.end <= time_span.start:
        raise InvalidTimeSpanError(
            f"End time ({time_span.end:g}) must be greater than start time ({time_span.start:g})",
            field="time_span.end",
            suggestion=f"Set end to a value greater than {time_span.start:g}",
        )

    steps = resolve_steps(time_span)
    if steps < MIN_SIMULATION_STEPS:
        raise InvalidTimeSpanError(
            f"Step count must be at least {MIN_SIMULATION_STEPS}, got {steps}",
            field="time_span.steps",
        )
    if steps > MAX_SIMULATION_STEPS:
        raise InvalidTimeSpanError(
            f"Step count {steps} exceeds maximum of {MAX_SIMULATION_STEPS:,}",
            field="time_span.steps",
            suggestion="Reduce steps or enable preview_mode",
        )

    return steps


# ============================================================================
# Spec Validation
# ============================================================================


def validate_spec(
    spec: SimulationSpec, registry: Optional[ModelRegistry] = None
) -> ValidatedRequest:
    """
    Validate a spec and apply defaults

    Checks run in order and stop at the first failure:
    1. (domain, model_type) is registered
    2. required parameters are present and numeric
    3. required initial conditions are present
    4. model-specific semantic checks
    5. time span and step count

    Args:
        spec: Simulation spec to validate
        registry: Registry to resolve the model from (default registry if None)

    Returns:
        ValidatedRequest ready for integration

    Raises:
        SpecValidationError: On the first failed check
    """
    registry = registry or get_registry()

    model = registry.resolve(spec.domain, spec.model_type)
    parameters = validate_parameters(model, spec.parameters)
    initial_state = validate_initial_conditions(model, spec.initial_conditions)
    model.validate(parameters, initial_state)
    steps = validate_time_span(spec.time_span)

    return ValidatedRequest(
        model=model,
        parameters=parameters,
        initial_state=initial_state,
        start=float(spec.time_span.start),
        end=float(spec.time_span.end),
        steps=steps,
        preview_mode=spec.time_span.preview_mode,
    )


def check_spec(
    spec: SimulationSpec, registry: Optional[ModelRegistry] = None
) -> ValidationResult:
    """
    Validate a spec without raising

    Returns:
        ValidationResult carrying either the validated request or the error
    """
    try:
        request = validate_spec(spec, registry)
    except SpecValidationError as e:
        return ValidationResult(valid=False, errors=[e.to_validation_error()])
    return ValidationResult(valid=True, request=request)
