"""
Structured exception classes for the Simulation Engine
Provides the validation error taxonomy and unified structured error records
"""

from typing import Optional, Dict, Any, List
from pydantic import BaseModel


class ValidationError(BaseModel):
    """
    Structured validation error with detailed information

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable error message
        field: Spec field causing the error (if applicable)
        suggestion: Optional suggestion for fixing the error
        context: Optional additional context information
    """

    code: str
    message: str
    field: Optional[str] = None
    suggestion: Optional[str] = None
    context: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        """String representation for logging"""
        parts = [f"[{self.code}] {self.message}"]
        if self.field:
            parts.append(f"Field: {self.field}")
        if self.suggestion:
            parts.append(f"Suggestion: {self.suggestion}")
        return " | ".join(parts)


class SimulationError(Exception):
    """
    Exception raised by the simulation engine

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable error message
        details: Additional error details
    """

    def __init__(
        self, code: str, message: str, details: Optional[Dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response"""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        """String representation for logging"""
        return f"[{self.code}] {self.message}"


class SpecValidationError(SimulationError):
    """
    Base class for errors detected while validating a simulation spec

    All subclasses are raised before any integration work begins.

    Attributes:
        field: Spec field the error refers to
        suggestion: Optional hint for fixing the spec
    """

    code = "invalid_spec"

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        suggestion: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.field = field
        self.suggestion = suggestion
        super().__init__(code=type(self).code, message=message, details=details)

    def to_validation_error(self) -> ValidationError:
        """Convert to a structured validation record"""
        return ValidationError(
            code=self.code,
            message=self.message,
            field=self.field,
            suggestion=self.suggestion,
            context=self.details or None,
        )


class UnsupportedModelError(SpecValidationError):
    """No registered model for the requested (domain, model_type) pair"""

    code = "unsupported_model"

    def __init__(
        self,
        domain: str,
        model_type: str,
        available: Optional[List[str]] = None,
    ):
        self.domain = domain
        self.model_type = model_type
        suggestion = None
        if available:
            suggestion = f"Use one of: {', '.join(available)}"
        super().__init__(
            message=f"Unsupported model: {domain}/{model_type}",
            field="model_type",
            suggestion=suggestion,
            details={"domain": domain, "model_type": model_type},
        )


class MissingParameterError(SpecValidationError):
    """One or more required model parameters are absent or not numeric"""

    code = "missing_parameter"

    def __init__(self, missing: List[str], message: Optional[str] = None):
        self.missing = missing
        super().__init__(
            message=message
            or f"Missing required parameters: {', '.join(missing)}",
            field="parameters",
            details={"missing": missing},
        )


class MissingInitialConditionError(SpecValidationError):
    """One or more required initial-condition compartments are absent"""

    code = "missing_initial_condition"

    def __init__(self, missing: List[str], message: Optional[str] = None):
        self.missing = missing
        super().__init__(
            message=message
            or f"Missing required initial conditions: {', '.join(missing)}",
            field="initial_conditions",
            details={"missing": missing},
        )


class InvalidParameterRangeError(SpecValidationError):
    """A parameter value lies outside the range the model accepts"""

    code = "invalid_parameter_range"

    def __init__(self, name: str, value: float, message: str, suggestion: Optional[str] = None):
        self.name = name
        self.value = value
        super().__init__(
            message=message,
            field=f"parameters.{name}",
            suggestion=suggestion,
            details={"parameter": name, "value": value},
        )


class InvalidInitialStateError(SpecValidationError):
    """The initial state violates a model invariant"""

    code = "invalid_initial_state"

    def __init__(
        self,
        message: str,
        value: Optional[float] = None,
        compartment: Optional[str] = None,
        suggestion: Optional[str] = None,
    ):
        self.value = value
        self.compartment = compartment
        details: Dict[str, Any] = {"value": value}
        if compartment:
            details["compartment"] = compartment
        super().__init__(
            message=message,
            field=f"initial_conditions.{compartment}" if compartment else "initial_conditions",
            suggestion=suggestion,
            details=details,
        )


class InvalidTimeSpanError(SpecValidationError):
    """The time span or step count is unusable"""

    code = "invalid_time_span"

    def __init__(self, message: str, field: str = "time_span", suggestion: Optional[str] = None):
        super().__init__(message=message, field=field, suggestion=suggestion)
