"""
Client-side recompute path for the Simulation Engine
Runs the shared core synchronously for interactive parameter controls

Every change recomputes the whole trajectory from scratch through
run_simulation, the same function the server path uses. Callers are
expected to debounce rapid changes themselves.
"""

from typing import Any, Dict, Optional

from simengine.models import SimulationResult, SimulationSpec
from simengine.registry import ModelRegistry
from simengine.simulation import SpecInput, run_simulation
from simengine.utils.model_utils import apply_parameter_values, apply_time_span
from simengine.validation import check_spec


def recompute(spec: SpecInput, registry: Optional[ModelRegistry] = None) -> SimulationResult:
    """
    Recompute a simulation in-process with no network round-trip

    Args:
        spec: SimulationSpec or JSON-shaped mapping
        registry: Registry to resolve the model from (default registry if None)

    Returns:
        SimulationResult envelope
    """
    return run_simulation(spec, registry)


class InteractiveSimulation:
    """
    Live-control session over a base spec

    Holds the current spec (the slider positions) and the latest result.
    Nothing is carried from one recomputation to the next except the spec.

    Attributes:
        result: Envelope of the most recent recomputation
    """

    def __init__(self, spec: SpecInput, registry: Optional[ModelRegistry] = None):
        """
        Initialize the session and run the first computation

        Args:
            spec: Base spec, typically the one the server tool call used
            registry: Registry to resolve the model from (default registry if None)

        Raises:
            pydantic.ValidationError: If spec is a malformed mapping
        """
        if not isinstance(spec, SimulationSpec):
            spec = SimulationSpec.model_validate(spec)
        self._spec = spec
        self._registry = registry
        self.result = recompute(self._spec, self._registry)

    @property
    def spec(self) -> SimulationSpec:
        """Current spec"""
        return self._spec

    @property
    def parameters(self) -> Dict[str, Any]:
        """Current parameter values"""
        return dict(self._spec.parameters)

    @property
    def derived(self) -> Dict[str, float]:
        """Parameter-derived quantities (e.g. R0), empty if the spec is invalid"""
        validation = check_spec(self._spec, self._registry)
        if not validation.valid or validation.request is None:
            return {}
        request = validation.request
        return request.model.derived_quantities(request.parameters)

    def set_parameter(self, name: str, value: float) -> SimulationResult:
        """Change one parameter and recompute"""
        return self.update(**{name: value})

    def update(self, **parameter_values: float) -> SimulationResult:
        """Change any number of parameters and recompute"""
        self._spec = apply_parameter_values(self._spec, parameter_values)
        self.result = recompute(self._spec, self._registry)
        return self.result

    def set_time_span(
        self,
        end: Optional[float] = None,
        steps: Optional[int] = None,
        preview_mode: Optional[bool] = None,
    ) -> SimulationResult:
        """Adjust the time grid and recompute"""
        self._spec = apply_time_span(self._spec, end=end, steps=steps, preview_mode=preview_mode)
        self.result = recompute(self._spec, self._registry)
        return self.result
