"""
Tool handler for the Simulation Engine
Exposes run_simulation as the simulate_model tool invocation (server path)
"""

import json
from typing import Any, Dict, List, Mapping

from pydantic import ValidationError as PydanticValidationError

from simengine.models import SimulationResult, SimulationSpec, ToolInvocation
from simengine.results import error_result
from simengine.simulation import format_spec_errors, run_simulation
from simengine.types import ToolDefinitionDict, ToolResultDict
from simengine.utils.logging_config import get_logger

logger = get_logger(__name__)

SIMULATE_MODEL_TOOL_NAME = "simulate_model"

SIMULATE_MODEL_DESCRIPTION = (
    "Run a simulation described by a structured JSON spec and return data + metrics.\n\n"
    "Features:\n"
    "- Returns actual data points for interactive visualization (return_data=true)\n"
    "- Preview mode for faster rendering with at most 100 steps "
    "(time_span.preview_mode=true)\n"
    "- Supported model: domain 'epidemiology', model_type 'SIR' with parameters "
    "{ beta, gamma } in (0, 1) and initial_conditions { S, I, R } summing to 1.0"
)


def get_tool_definitions() -> List[ToolDefinitionDict]:
    """
    Get tool definitions with structured input schemas

    Returns:
        List of tool definitions for the chat tool layer
    """
    return [
        {
            "name": SIMULATE_MODEL_TOOL_NAME,
            "description": SIMULATE_MODEL_DESCRIPTION,
            "input_schema": ToolInvocation.model_json_schema(),
        }
    ]


def _wrap(result: SimulationResult) -> ToolResultDict:
    """Wrap an envelope in the _meta structure the UI expects"""
    return {"_meta": {"result": result.to_envelope()}}


def execute_simulation_tool(arguments: Mapping[str, Any]) -> ToolResultDict:
    """
    Execute the simulate_model tool

    Logs the invocation, runs the shared core and, when the spec asks for
    return_data=false, drops the series from the returned envelope.

    Args:
        arguments: Tool arguments, {"spec": {...}}

    Returns:
        {"_meta": {"result": envelope}}
    """
    logger.info(
        f"Executing {SIMULATE_MODEL_TOOL_NAME} tool with spec: "
        f"{json.dumps(arguments.get('spec'), default=str)[:200]}"
    )

    try:
        invocation = ToolInvocation.model_validate(dict(arguments))
    except PydanticValidationError as e:
        message = format_spec_errors(e)
        logger.warning(f"Tool arguments rejected: {message}")
        return _wrap(error_result(message))

    spec: SimulationSpec = invocation.spec
    result = run_simulation(spec)

    if result.ok:
        if not spec.return_data:
            result = result.model_copy(update={"data": []})
        logger.info(
            f"{SIMULATE_MODEL_TOOL_NAME} tool execution completed: "
            f"{spec.domain}/{spec.model_type}, {len(result.data)} points returned"
        )
    else:
        logger.warning(f"{SIMULATE_MODEL_TOOL_NAME} tool returned error: {result.message}")

    return _wrap(result)


def tool_result_envelope(tool_result: ToolResultDict) -> Dict[str, Any]:
    """Unwrap the envelope from a tool result"""
    return dict(tool_result["_meta"]["result"])
