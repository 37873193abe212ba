"""
fehlberg is a small adaptive Runge-Kutta-Fehlberg 4(5) ODE integrator implemented in JAX.
"""

from .config import set_dtype, get_dtype

from .integrators import (
    TABLEAU,
    B,
    IntegrationError,
    IntegrationResult,
    IntegratorConfig,
    NonFiniteStateError,
    StepAttempt,
    StepSizeError,
    stack_components,
    rkf45_attempt,
    rkf45_integrate,
    estimate_initial_step,
    local_error,
    LoggingSink,
    TrajectoryRecorder,
    chain,
)

__all__ = [
    # Config
    "set_dtype",
    "get_dtype",
    # Tableau
    "TABLEAU",
    "B",
    # Types
    "IntegrationError",
    "IntegrationResult",
    "IntegratorConfig",
    "NonFiniteStateError",
    "StepAttempt",
    "StepSizeError",
    # Integrators
    "stack_components",
    "rkf45_attempt",
    "rkf45_integrate",
    "estimate_initial_step",
    "local_error",
    # Sinks
    "LoggingSink",
    "TrajectoryRecorder",
    "chain",
]
