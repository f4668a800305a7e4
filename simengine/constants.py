"""
Shared constants for the Simulation Engine
Centralizes canonical defaults so the server and client paths cannot drift apart
"""

# ============================================================================
# Time Grid Defaults
# ============================================================================

# Step count used when a spec omits time_span.steps
DEFAULT_STEPS = 400

# Step count (and cap) for reduced-fidelity preview runs
PREVIEW_STEPS = 100

DEFAULT_START_TIME = 0.0

# ============================================================================
# Simulation Limits
# ============================================================================

MIN_SIMULATION_STEPS = 1
MAX_SIMULATION_STEPS = 100_000

# ============================================================================
# Output Contract
# ============================================================================

# Decimal places for every emitted value after the initial point
OUTPUT_PRECISION = 6

TIME_COLUMN = "time"

SUCCESS_MESSAGE = "Simulation completed successfully"

# ============================================================================
# Epidemiology
# ============================================================================

# Allowed deviation of S + I + R from 1.0 at t=0
POPULATION_SUM_TOLERANCE = 1e-3

# Solver names accepted for compatibility; integration is always fixed-step RK4
COMPATIBLE_SOLVER_METHODS = {"RK45", "RK23", "DOP853"}

# ============================================================================
# Rerun Scenario (HTTP recompute endpoint)
# ============================================================================

RERUN_DEFAULT_PARAMETERS = {"beta": 0.3, "gamma": 0.1}
RERUN_INITIAL_CONDITIONS = {"S": 0.99, "I": 0.01, "R": 0.0}
RERUN_END_TIME = 160.0
RERUN_DEFAULT_STEPS = 100
