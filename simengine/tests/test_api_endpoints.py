"""
Tests for API endpoints
"""

from fastapi.testclient import TestClient
from simengine.api import app
from simengine.client import recompute
from simengine.exceptions import SimulationError

client = TestClient(app)


def sir_request(**time_span):
    """Build a JSON SIR request body"""
    return {
        "domain": "epidemiology",
        "model_type": "SIR",
        "parameters": {"beta": 0.3, "gamma": 0.1},
        "initial_conditions": {"S": 0.99, "I": 0.01, "R": 0},
        "time_span": {"start": 0, "end": 160, "steps": 100, **time_span},
    }


def test_root_endpoint():
    """Test root endpoint"""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert "message" in data
    assert "version" in data
    assert data["endpoints"]["simulate"] == "/simulate"


def test_health_endpoint():
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"


def test_models_endpoint():
    """Test the registered models listing"""
    response = client.get("/models")
    assert response.status_code == 200
    models = response.json()
    assert len(models) == 1
    assert models[0]["domain"] == "epidemiology"
    assert models[0]["model_type"] == "SIR"
    assert models[0]["compartments"] == ["S", "I", "R"]


def test_tools_endpoint():
    """Test the tool definitions listing"""
    response = client.get("/tools")
    assert response.status_code == 200
    tools = response.json()
    assert tools[0]["name"] == "simulate_model"
    assert "spec" in tools[0]["input_schema"]["properties"]


def test_validate_endpoint_valid():
    """Test validation endpoint with a valid spec"""
    body = sir_request()
    del body["time_span"]["steps"]

    response = client.post("/validate", json=body)
    assert response.status_code == 200
    data = response.json()
    assert data["valid"] is True
    assert data["errors"] == []
    assert data["resolved"]["steps"] == 400
    assert data["resolved"]["preview_mode"] is False


def test_validate_endpoint_invalid():
    """Test validation endpoint with an out-of-range parameter"""
    body = sir_request()
    body["parameters"]["gamma"] = 1.5

    response = client.post("/validate", json=body)
    assert response.status_code == 200
    data = response.json()
    assert data["valid"] is False
    assert data["resolved"] is None
    assert data["errors"][0]["code"] == "invalid_parameter_range"
    assert data["errors"][0]["field"] == "parameters.gamma"


def test_simulate_endpoint_success():
    """Test a successful simulation"""
    response = client.post("/simulate", json=sir_request())
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "success"
    assert data["message"] == "Simulation completed successfully"
    assert len(data["data"]) == 101
    assert data["columns"] == ["time", "S", "I", "R"]
    assert set(data["metrics"]) == {"peak_infection", "peak_time", "total_recovered"}


def test_simulate_endpoint_matches_client_recompute():
    """Test the HTTP path returns exactly what the client path computes"""
    body = sir_request(steps=250)

    response = client.post("/simulate", json=body)
    assert response.json() == recompute(body).to_envelope()


def test_simulate_endpoint_validation_failure():
    """Test spec validation failures come back as an error envelope"""
    body = sir_request()
    body["initial_conditions"]["R"] = 0.5

    response = client.post("/simulate", json=body)
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "error"
    assert "sum" in data["message"]
    assert data["data"] == []
    assert "metrics" not in data


def test_simulate_endpoint_malformed_body():
    """Test a body missing required fields is rejected by request validation"""
    response = client.post(
        "/simulate", json={"domain": "epidemiology", "model_type": "SIR"}
    )
    assert response.status_code == 422
    data = response.json()
    assert data["code"] == "validation_error"
    assert "time_span" in data["message"]
    assert data["details"]["errors"]


def test_simulate_endpoint_preview_mode():
    """Test preview mode caps the step count"""
    response = client.post("/simulate", json=sir_request(steps=1000, preview_mode=True))
    assert response.status_code == 200
    assert len(response.json()["data"]) == 101


def test_simulate_model_tool_endpoint():
    """Test the tool invocation endpoint returns the _meta wrapper"""
    response = client.post("/tools/simulate_model", json={"spec": sir_request()})
    assert response.status_code == 200
    result = response.json()["_meta"]["result"]
    assert result["status"] == "success"
    assert len(result["data"]) == 101


def test_simulate_model_tool_endpoint_without_data():
    """Test return_data=false through the tool endpoint"""
    spec = sir_request()
    spec["return_data"] = False

    response = client.post("/tools/simulate_model", json={"spec": spec})
    result = response.json()["_meta"]["result"]
    assert result["status"] == "success"
    assert result["data"] == []
    assert "peak_infection" in result["metrics"]


def test_rerun_endpoint_defaults():
    """Test the recompute endpoint with no slider values"""
    response = client.post("/simulation/rerun", json={})
    assert response.status_code == 200
    data = response.json()
    assert len(data["data"]) == 101
    assert data["data"][-1]["time"] == 160.0
    assert data["summary"].startswith("SIR Simulation completed.")


def test_rerun_endpoint_matches_simulate():
    """Test the recompute endpoint agrees with a full simulate call"""
    rerun = client.post(
        "/simulation/rerun", json={"parameters": {"beta": 0.5, "gamma": 0.2, "steps": 50}}
    ).json()

    body = sir_request(steps=50)
    body["parameters"] = {"beta": 0.5, "gamma": 0.2}
    simulate = client.post("/simulate", json=body).json()

    assert rerun["data"] == simulate["data"]
    assert rerun["metrics"] == simulate["metrics"]


def test_rerun_endpoint_invalid_parameter():
    """Test out-of-range slider values are rejected with 400"""
    response = client.post("/simulation/rerun", json={"parameters": {"beta": 1.5}})
    assert response.status_code == 400
    data = response.json()
    assert data["code"] == "http_400"
    assert "beta" in data["message"]


def test_request_id_header():
    """Test the request ID is echoed back"""
    response = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"

    response = client.get("/health")
    assert response.headers.get("X-Request-ID")


def test_structured_error_format():
    """Test structured error format"""
    error = SimulationError(
        code="test_error",
        message="Test error message",
        details={"key": "value"},
    )
    error_dict = error.to_dict()

    assert error_dict["code"] == "test_error"
    assert error_dict["message"] == "Test error message"
    assert error_dict["details"] == {"key": "value"}


def test_simulate_endpoint_huge_step():
    """Test an overflowing step size still returns a JSON envelope"""
    response = client.post("/simulate", json=sir_request(end=1e60, steps=1))
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "success"
    assert all(0.0 <= data["data"][-1][c] <= 1.0 for c in ("S", "I", "R"))


def test_validate_endpoint_unsupported_model_with_non_numeric_parameter():
    """Test model resolution is reported ahead of bad parameter values"""
    body = sir_request()
    body["domain"] = "physics"
    body["parameters"]["beta"] = "high"

    response = client.post("/validate", json=body)
    assert response.status_code == 200
    assert response.json()["errors"][0]["code"] == "unsupported_model"
