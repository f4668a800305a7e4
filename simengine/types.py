"""
Type definitions for the Simulation Engine
Provides TypedDict and other type hints for structured data
"""

from typing import TypedDict, List, Dict, Any


class SimulationEnvelopeDict(TypedDict, total=False):
    """
    Typed dictionary for the JSON result envelope

    Error envelopes carry only status, message and data.
    """
    status: str
    message: str
    data: List[Dict[str, float]]
    metrics: Dict[str, float]
    summary: str
    columns: List[str]


class ToolResultPayload(TypedDict):
    """Inner payload of a tool invocation result"""
    result: SimulationEnvelopeDict


class ToolResultDict(TypedDict):
    """
    Typed dictionary for a tool invocation result

    The _meta wrapper is what the chat UI unpacks.
    """
    _meta: ToolResultPayload


class ToolDefinitionDict(TypedDict):
    """
    Typed dictionary for a tool definition exposed to the chat layer
    """
    name: str
    description: str
    input_schema: Dict[str, Any]
