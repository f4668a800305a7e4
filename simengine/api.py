"""
FastAPI application and endpoints for the Simulation Engine
Server path: request logging, tool invocation, recompute endpoint, CORS,
request size limits, and structured error handling
"""

# Standard library imports
import asyncio
import time
from typing import Dict, Any, List

# Third-party imports
from fastapi import FastAPI, HTTPException, Request, status, Body
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

# Local application imports
from simengine.config import get_settings
from simengine.exceptions import SimulationError
from simengine.models import (
    SimulationSpec,
    ValidationResponse,
    RerunRequest,
    RerunResponse,
    ModelInfo,
)
from simengine.registry import get_registry
from simengine.simulation import run_simulation
from simengine.tools import execute_simulation_tool, get_tool_definitions
from simengine.validation import check_spec
from simengine.utils.logging_config import (
    setup_logging,
    get_logger,
    set_request_id,
)
from simengine.utils.model_utils import build_rerun_spec

logger = get_logger(__name__)

# Get configuration
settings = get_settings()

# Setup logging
setup_logging(
    level=settings.log_level,
    json_format=settings.log_format_json,
    log_file=settings.log_file,
    max_bytes=settings.log_max_bytes,
    backup_count=settings.log_backup_count,
)

# Create FastAPI app
app = FastAPI(
    title="Simulation Engine API",
    version="1.0.0",
    description="Deterministic ODE simulation engine with a shared server/client core",
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Configuration constants (from settings)
MAX_REQUEST_SIZE = settings.max_request_size
SIMULATION_TIMEOUT = settings.simulation_timeout


def check_request_size(request: Request) -> None:
    """Check if request size exceeds limit"""
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit():
        size = int(content_length)
        if size > MAX_REQUEST_SIZE:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"Request size ({size} bytes) exceeds maximum ({MAX_REQUEST_SIZE} bytes)",
            )


@app.middleware("http")
async def request_size_middleware(request: Request, call_next):
    """Middleware to reject oversized requests"""
    try:
        check_request_size(request)
    except HTTPException as exc:
        return await http_exception_handler(request, exc)
    return await call_next(request)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Middleware to add a request ID and log every request"""
    request_id = set_request_id(request.headers.get("X-Request-ID"))

    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000

    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code} "
        f"({elapsed_ms:.1f} ms)"
    )
    response.headers["X-Request-ID"] = request_id
    return response


def add_debug_info(error_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Add debug information (traceback) to error dict if DEBUG mode is enabled

    Args:
        error_dict: Error dictionary to add debug info to

    Returns:
        Modified error dictionary with debug info if enabled
    """
    if settings.debug and "traceback" not in error_dict.get("details", {}):
        import traceback
        error_dict.setdefault("details", {})
        error_dict["details"]["traceback"] = traceback.format_exc()
    return error_dict


@app.exception_handler(SimulationError)
async def simulation_error_handler(request: Request, exc: SimulationError):
    """Handle simulation errors with structured format"""
    logger.error(f"Simulation error: {exc.message}", extra={"code": exc.code})
    error_dict = add_debug_info(exc.to_dict())
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_dict,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors with structured format"""
    logger.warning(f"Validation error: {exc.errors()}")

    error_messages = []
    for error in exc.errors():
        loc = " -> ".join(str(x) for x in error.get("loc", []))
        msg = error.get("msg", "Validation error")
        error_messages.append(f"{loc}: {msg}")

    error_response: Dict[str, Any] = {
        "code": "validation_error",
        "message": "; ".join(error_messages),
        "details": {
            "errors": [
                {"loc": list(e.get("loc", [])), "msg": e.get("msg"), "type": e.get("type")}
                for e in exc.errors()
            ],
        },
    }

    error_response = add_debug_info(error_response)

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_response,
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions with structured format"""
    logger.warning(f"HTTP exception: {exc.status_code} - {exc.detail}")

    error_response: Dict[str, Any] = {
        "code": f"http_{exc.status_code}",
        "message": exc.detail if isinstance(exc.detail, str) else str(exc.detail),
        "details": {
            "status_code": exc.status_code,
        },
    }

    error_response = add_debug_info(error_response)

    return JSONResponse(status_code=exc.status_code, content=error_response)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions with structured format"""
    logger.exception("Unhandled exception", exc_info=exc)

    error_response: Dict[str, Any] = {
        "code": "internal_error",
        "message": str(exc) if settings.debug else "An internal error occurred",
        "details": {
            "exception_type": type(exc).__name__,
        },
    }

    error_response = add_debug_info(error_response)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response,
    )


async def _run_with_timeout(func, *args):
    """Run a blocking call off the event loop under the request timeout"""
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(func, *args),
            timeout=SIMULATION_TIMEOUT,
        )
    except asyncio.TimeoutError:
        raise HTTPException(
            status_code=status.HTTP_408_REQUEST_TIMEOUT,
            detail=(
                f"Simulation exceeded timeout of {SIMULATION_TIMEOUT} seconds. "
                f"Consider reducing steps or enabling preview_mode."
            ),
        )


@app.get("/")
def read_root():
    """Root endpoint with API information"""
    logger.info("Root endpoint accessed")
    return {
        "message": "Simulation Engine API",
        "version": "1.0.0",
        "endpoints": {
            "simulate": "/simulate",
            "validate": "/validate",
            "models": "/models",
            "tools": "/tools",
            "simulate_model_tool": "/tools/simulate_model",
            "rerun": "/simulation/rerun",
            "health": "/health",
        },
    }


@app.get("/health")
def health_check():
    """Health check endpoint"""
    logger.debug("Health check requested")
    return {"status": "healthy"}


@app.get("/models", response_model=List[ModelInfo])
def list_models():
    """List registered models"""
    return [model.describe() for model in get_registry().list_models()]


@app.get("/tools")
def list_tools():
    """List tool definitions with their input schemas"""
    return get_tool_definitions()


@app.post("/validate", response_model=ValidationResponse)
def validate_spec_endpoint(spec: SimulationSpec):
    """
    Validate a spec without running the simulation

    Returns the structured error, or the resolved time grid when valid.
    """
    logger.info(f"Validation request received: {spec.domain}/{spec.model_type}")

    result = check_spec(spec)

    resolved = None
    if result.valid and result.request is not None:
        request = result.request
        resolved = {
            "domain": request.model.domain,
            "model_type": request.model.model_type,
            "start": request.start,
            "end": request.end,
            "steps": request.steps,
            "preview_mode": request.preview_mode,
        }
        logger.info(f"Validation passed: {resolved}")
    else:
        logger.warning(f"Validation failed: {result.errors[0]}")

    return ValidationResponse(valid=result.valid, errors=result.errors, resolved=resolved)


@app.post("/simulate")
async def simulate(spec: SimulationSpec):
    """
    Run a simulation and return the result envelope

    Validation failures come back as a status 'error' envelope with HTTP 200.
    """
    logger.info(
        f"Simulation request received: {spec.domain}/{spec.model_type}, "
        f"time_span=[{spec.time_span.start}, {spec.time_span.end}], "
        f"steps={spec.time_span.steps}, preview={spec.time_span.preview_mode}"
    )

    try:
        result = await _run_with_timeout(run_simulation, spec)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Unexpected error in simulation")
        raise SimulationError(
            code="internal_error",
            message=f"Unexpected error during simulation: {str(e)}",
            details={"exception_type": type(e).__name__},
        ) from e

    if result.ok:
        logger.info(f"Simulation completed: {len(result.data)} data points")
    else:
        logger.warning(f"Simulation rejected: {result.message}")

    return JSONResponse(content=result.to_envelope())


@app.post("/tools/simulate_model")
async def simulate_model_tool(arguments: Dict[str, Any] = Body(...)):
    """
    Invoke the simulate_model tool

    Body: {"spec": SimulationSpec}. Returns {"_meta": {"result": envelope}}.
    """
    return await _run_with_timeout(execute_simulation_tool, arguments)


@app.post("/simulation/rerun", response_model=RerunResponse)
async def rerun_simulation(request: RerunRequest):
    """
    Recompute the canonical SIR scenario for new slider values

    Missing values fall back to beta=0.3, gamma=0.1, steps=100.
    """
    spec = build_rerun_spec(request.parameters)
    logger.info(
        f"Rerun request received: beta={spec.parameters['beta']}, "
        f"gamma={spec.parameters['gamma']}, steps={spec.time_span.steps}"
    )

    result = await _run_with_timeout(run_simulation, spec)
    if not result.ok:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=result.message,
        )

    return RerunResponse(data=result.data, metrics=result.metrics, summary=result.summary)
