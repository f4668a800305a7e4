"""
Pydantic models for the Simulation Engine
Defines the simulation spec, the result envelope, and the HTTP payloads
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Dict, Optional, Any

from simengine.constants import COMPATIBLE_SOLVER_METHODS, DEFAULT_START_TIME
from simengine.exceptions import ValidationError


class TimeSpan(BaseModel):
    """
    Time grid definition

    Attributes:
        start: Simulation start time
        end: Simulation end time
        steps: Number of integration steps (defaulted by the validator)
        preview_mode: Reduced-fidelity run for fast interactive feedback
    """

    start: float = DEFAULT_START_TIME
    end: float
    steps: Optional[int] = Field(None, description="Number of integration steps")
    preview_mode: bool = Field(False, description="Fast preview with at most 100 steps")


class SimulationSpec(BaseModel):
    """
    Complete simulation request

    Attributes:
        domain: Domain tag (e.g. 'epidemiology')
        model_type: Model tag (e.g. 'SIR')
        parameters: Model-specific parameter values
        initial_conditions: Model-specific initial compartment values
        time_span: Time grid definition
        method: Solver name, accepted for compatibility (integration is always RK4)
        return_data: Whether the tool layer returns the full time series
        save_artifacts: Accepted for compatibility, artifacts are never written
        sensitivity: Accepted for compatibility, not evaluated
        tags: Optional labels for the run
    """

    model_config = ConfigDict(protected_namespaces=())

    domain: str = Field(..., description="Domain tag, e.g. 'epidemiology'")
    model_type: str = Field(..., description="Model tag, e.g. 'SIR'")
    parameters: Dict[str, Any] = Field(
        default_factory=dict, description="Model parameters, e.g. { beta: 0.3, gamma: 0.1 }"
    )
    initial_conditions: Dict[str, Any] = Field(
        default_factory=dict, description="Initial state, e.g. { S: 0.99, I: 0.01, R: 0 }"
    )
    time_span: TimeSpan
    method: Optional[str] = None
    return_data: bool = True
    save_artifacts: bool = False
    sensitivity: Optional[Dict[str, float]] = None
    tags: Optional[List[str]] = None

    @field_validator("method")
    @classmethod
    def validate_method(cls, v: Optional[str]) -> Optional[str]:
        """Validate solver method name"""
        if v is not None and v not in COMPATIBLE_SOLVER_METHODS:
            raise ValueError(
                f"Method must be one of {sorted(COMPATIBLE_SOLVER_METHODS)}, got '{v}'"
            )
        return v


class SimulationResult(BaseModel):
    """
    Simulation result envelope

    Attributes:
        status: 'success' or 'error'
        message: Completion or error message
        data: Time series, one point per step including the initial state
        metrics: Model-specific derived quantities
        summary: One-sentence synopsis of the run
        columns: Field names present in each data point
    """

    model_config = ConfigDict(frozen=True)

    status: str
    message: Optional[str] = None
    data: List[Dict[str, float]] = []
    metrics: Optional[Dict[str, float]] = None
    summary: Optional[str] = None
    columns: Optional[List[str]] = None

    @property
    def ok(self) -> bool:
        """Check if the run succeeded"""
        return self.status == "success"

    def to_envelope(self) -> Dict[str, Any]:
        """Convert to the JSON envelope, omitting absent fields"""
        return self.model_dump(exclude_none=True)


class ValidationResponse(BaseModel):
    """
    Spec validation result

    Attributes:
        valid: Whether the spec is valid
        errors: List of validation errors
        resolved: Defaulted time grid and model tags (if valid)
    """

    valid: bool
    errors: List[ValidationError] = []
    resolved: Optional[Dict[str, Any]] = None


class ToolInvocation(BaseModel):
    """Arguments of the simulate_model tool"""

    spec: SimulationSpec


class RerunParameters(BaseModel):
    """
    Slider values for the recompute endpoint

    Attributes:
        beta: Infection rate (defaults to 0.3)
        gamma: Recovery rate (defaults to 0.1)
        steps: Number of integration steps (defaults to 100)
    """

    beta: Optional[float] = None
    gamma: Optional[float] = None
    steps: Optional[int] = None


class RerunRequest(BaseModel):
    """Recompute request payload"""

    parameters: RerunParameters = Field(default_factory=RerunParameters)


class RerunResponse(BaseModel):
    """Recompute result"""

    data: List[Dict[str, float]]
    metrics: Dict[str, float]
    summary: str


class ModelInfo(BaseModel):
    """
    Description of a registered model

    Attributes:
        domain: Domain tag
        model_type: Model tag
        compartments: Ordered state compartment names
        parameters: Required parameter names
        description: Human-readable description
    """

    model_config = ConfigDict(protected_namespaces=())

    domain: str
    model_type: str
    compartments: List[str]
    parameters: List[str]
    description: str
