"""Solver error taxonomy for SETT Pro.

Every error raised here is terminal for the run that produced it: no layer
retries automatically, and a failed run yields no partial results.
"""

from __future__ import annotations


class SolverError(Exception):
    """Base class for all failures of the nested cycle solver."""


class NumericalFailure(SolverError):
    """Raised when a linear solve cannot produce a finite solution."""


class SingularMatrix(NumericalFailure):
    """Raised when the state-equation matrix is singular."""


class FlowDirectionDivergence(SolverError):
    """Raised when flow directions do not settle within the allowed adjustments."""


class IntegrationFailure(SolverError):
    """Raised when the ODE integrator cannot reach the end of the cycle."""


class SteadyStateNotConverged(SolverError):
    """Raised when the inner loop exhausts its iteration limit."""


class EngineNotConverged(SolverError):
    """Raised when the outer thermal-balance loop exhausts its iteration limit."""


class InconsistentTemperatures(SolverError):
    """Raised when component approaches leave no temperature rise across the regenerator."""
