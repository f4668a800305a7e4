"""
Tests for the model registry
Includes plugging in a new model without touching the integrator or facade
"""

import math
from typing import Dict, List

import numpy as np
import pytest

from simengine.epidemiology import SIRModel
from simengine.exceptions import InvalidParameterRangeError, UnsupportedModelError
from simengine.registry import ModelRegistry, SimulationModel, get_registry
from simengine.simulation import run_simulation


class DecayModel(SimulationModel):
    """First-order decay dN/dt = -k * N, used to exercise the plug-in seam"""

    domain = "testing"
    model_type = "Decay"
    compartments = ("N",)
    parameter_names = ("k",)
    description = "Exponential decay"

    def derivative(self, state: np.ndarray, parameters: Dict[str, float]) -> np.ndarray:
        return -parameters["k"] * state

    def validate(self, parameters: Dict[str, float], initial_state: Dict[str, float]) -> None:
        if parameters["k"] <= 0:
            raise InvalidParameterRangeError("k", parameters["k"], message="k must be positive")

    def metrics(self, series: List[Dict[str, float]]) -> Dict[str, float]:
        return {"final": series[-1]["N"]}

    def summarize(self, metrics: Dict[str, float]) -> str:
        return f"Decayed to {metrics['final']:.3f}."


def decay_spec(k=0.5):
    return {
        "domain": "testing",
        "model_type": "Decay",
        "parameters": {"k": k},
        "initial_conditions": {"N": 100.0},
        "time_span": {"start": 0, "end": 2, "steps": 50},
    }


def test_default_registry_contents():
    """Test the default registry holds exactly the SIR model"""
    registry = get_registry()

    assert len(registry) == 1
    assert ("epidemiology", "SIR") in registry
    assert isinstance(registry.resolve("epidemiology", "SIR"), SIRModel)


def test_default_registry_is_singleton():
    """Test the default registry is built once"""
    assert get_registry() is get_registry()


def test_resolve_unknown_model():
    """Test unknown tags raise UnsupportedModelError listing the options"""
    registry = ModelRegistry([SIRModel()])

    with pytest.raises(UnsupportedModelError) as exc_info:
        registry.resolve("epidemiology", "SEIR")

    assert exc_info.value.domain == "epidemiology"
    assert exc_info.value.model_type == "SEIR"
    assert exc_info.value.details == {"domain": "epidemiology", "model_type": "SEIR"}


def test_register_duplicate_rejected():
    """Test a tag pair can only be registered once"""
    registry = ModelRegistry([SIRModel()])

    with pytest.raises(ValueError):
        registry.register(SIRModel())


def test_list_models_sorted():
    """Test models are listed in tag order"""
    registry = ModelRegistry([SIRModel(), DecayModel()])

    assert [m.key for m in registry.list_models()] == [
        ("epidemiology", "SIR"),
        ("testing", "Decay"),
    ]


def test_describe_model():
    """Test model descriptions for listing endpoints"""
    info = SIRModel().describe()

    assert info.domain == "epidemiology"
    assert info.model_type == "SIR"
    assert info.compartments == ["S", "I", "R"]
    assert info.parameters == ["beta", "gamma"]
    assert "SIR" in info.description


def test_plugged_in_model_runs_through_facade():
    """Test a new model integrates through the unchanged facade"""
    registry = ModelRegistry([SIRModel(), DecayModel()])

    result = run_simulation(decay_spec(), registry=registry)

    assert result.status == "success"
    assert result.columns == ["time", "N"]
    assert len(result.data) == 51
    assert result.data[-1]["N"] == pytest.approx(100.0 * math.exp(-1.0), abs=1e-4)
    assert result.summary.startswith("Decayed to")


def test_plugged_in_model_is_not_clamped():
    """Test models without bounds keep values outside [0, 1]"""
    registry = ModelRegistry([DecayModel()])

    result = run_simulation(decay_spec(k=0.01), registry=registry)
    assert all(point["N"] > 1.0 for point in result.data)


def test_plugged_in_model_validation():
    """Test the model's own checks run through the facade"""
    registry = ModelRegistry([DecayModel()])

    result = run_simulation(decay_spec(k=-1.0), registry=registry)
    assert result.status == "error"
    assert result.message == "k must be positive"


def test_plugged_in_model_unknown_to_default_registry():
    """Test the default registry does not see test models"""
    result = run_simulation(decay_spec())

    assert result.status == "error"
    assert "testing/Decay" in result.message


class RunawayModel(DecayModel):
    """Unbounded model whose rate overflows on the first step"""

    model_type = "Runaway"

    def derivative(self, state: np.ndarray, parameters: Dict[str, float]) -> np.ndarray:
        return parameters["k"] * 1e300 * state

    def validate(self, parameters: Dict[str, float], initial_state: Dict[str, float]) -> None:
        pass


def test_diverging_unbounded_model_returns_error_envelope():
    """Test non-finite output from an unbounded model is not reported as success"""
    registry = ModelRegistry([RunawayModel()])
    spec = decay_spec(k=1e10)
    spec["model_type"] = "Runaway"

    result = run_simulation(spec, registry=registry)

    assert result.status == "error"
    assert result.message.startswith("Simulation diverged: testing/Runaway")
    assert result.data == []
