"""
Result assembly for the Simulation Engine
Packages the series, metrics and synopsis into the result envelope
"""

from simengine.constants import SUCCESS_MESSAGE, TIME_COLUMN
from simengine.integrator import Trajectory
from simengine.models import SimulationResult
from simengine.registry import SimulationModel


def assemble_result(model: SimulationModel, trajectory: Trajectory) -> SimulationResult:
    """
    Build a success envelope from an integrated trajectory

    Args:
        model: Model that produced the trajectory (supplies metrics and summary)
        trajectory: Integrated series

    Returns:
        SimulationResult with data, metrics, summary and columns
    """
    data = trajectory.points(TIME_COLUMN)
    metrics = model.metrics(data)

    return SimulationResult(
        status="success",
        message=SUCCESS_MESSAGE,
        data=data,
        metrics=metrics,
        summary=model.summarize(metrics),
        columns=[TIME_COLUMN, *trajectory.compartments],
    )


def error_result(message: str) -> SimulationResult:
    """Build an error envelope; no data is ever attached"""
    return SimulationResult(status="error", message=message, data=[])
