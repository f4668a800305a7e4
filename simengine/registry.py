"""
Model registry for the Simulation Engine
Maps (domain, model_type) tags to pluggable model implementations
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from simengine.exceptions import UnsupportedModelError
from simengine.models import ModelInfo


class SimulationModel(ABC):
    """
    Base class for an ODE model the engine can integrate

    A model supplies the right-hand side of its ODE system together with its
    own semantic checks and derived metrics. The integrator and the facade
    only ever talk to this interface, so adding a model means adding one
    subclass and registering it.

    Attributes:
        domain: Domain tag the model is registered under
        model_type: Model tag the model is registered under
        compartments: Ordered state compartment names
        parameter_names: Parameters the model requires
        lower_bound: Lower clamp for every compartment (None disables)
        upper_bound: Upper clamp for every compartment (None disables)
        description: Human-readable description
    """

    domain: str = ""
    model_type: str = ""
    compartments: Tuple[str, ...] = ()
    parameter_names: Tuple[str, ...] = ()
    lower_bound: Optional[float] = None
    upper_bound: Optional[float] = None
    description: str = ""

    @property
    def key(self) -> Tuple[str, str]:
        """Registry key for this model"""
        return (self.domain, self.model_type)

    @abstractmethod
    def derivative(self, state: np.ndarray, parameters: Dict[str, float]) -> np.ndarray:
        """
        Right-hand side of the ODE system

        Args:
            state: Current state vector, ordered like compartments
            parameters: Validated parameter values

        Returns:
            Rate of change for each compartment
        """

    @abstractmethod
    def validate(self, parameters: Dict[str, float], initial_state: Dict[str, float]) -> None:
        """
        Model-specific semantic checks

        Called after the generic presence checks have passed.

        Raises:
            InvalidParameterRangeError: If a parameter is out of range
            InvalidInitialStateError: If the initial state breaks an invariant
        """

    @abstractmethod
    def metrics(self, series: List[Dict[str, float]]) -> Dict[str, float]:
        """Derived quantities computed from the emitted series"""

    @abstractmethod
    def summarize(self, metrics: Dict[str, float]) -> str:
        """One-sentence synopsis interpolating the key metrics"""

    def derived_quantities(self, parameters: Dict[str, float]) -> Dict[str, float]:
        """Quantities that follow from the parameters alone"""
        return {}

    def describe(self) -> ModelInfo:
        """Describe the model for listing endpoints"""
        return ModelInfo(
            domain=self.domain,
            model_type=self.model_type,
            compartments=list(self.compartments),
            parameters=list(self.parameter_names),
            description=self.description,
        )


class ModelRegistry:
    """
    Closed set of models addressed by (domain, model_type)

    Lookups are resolved once per request; unknown tags raise
    UnsupportedModelError instead of falling through.
    """

    def __init__(self, models: Iterable[SimulationModel] = ()):
        self._models: Dict[Tuple[str, str], SimulationModel] = {}
        for model in models:
            self.register(model)

    def register(self, model: SimulationModel) -> None:
        """
        Add a model to the registry

        Raises:
            ValueError: If the (domain, model_type) pair is already taken
        """
        if model.key in self._models:
            raise ValueError(
                f"Model already registered for {model.domain}/{model.model_type}"
            )
        self._models[model.key] = model

    def resolve(self, domain: str, model_type: str) -> SimulationModel:
        """
        Look up the model for a tag pair

        Raises:
            UnsupportedModelError: If no model is registered for the pair
        """
        model = self._models.get((domain, model_type))
        if model is None:
            raise UnsupportedModelError(
                domain,
                model_type,
                available=[f"{d}/{m}" for d, m in sorted(self._models)],
            )
        return model

    def list_models(self) -> List[SimulationModel]:
        """Registered models in tag order"""
        return [self._models[key] for key in sorted(self._models)]

    def __contains__(self, key: Tuple[str, str]) -> bool:
        return key in self._models

    def __len__(self) -> int:
        return len(self._models)


# Default registry instance (singleton)
_registry: Optional[ModelRegistry] = None


def get_registry() -> ModelRegistry:
    """
    Get the default registry holding every built-in model

    Returns:
        ModelRegistry instance
    """
    global _registry
    if _registry is None:
        from simengine.epidemiology import SIRModel

        _registry = ModelRegistry([SIRModel()])
    return _registry
