"""Run inputs, tolerances and solver settings for SETT Pro.

Defaults reproduce the reference hydrogen engine configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class OdeTolerance:
    """Absolute and relative error tolerances for the cycle integrator."""

    abs: float = 1e-6
    rel: float = 1e-6

    def __post_init__(self) -> None:
        if self.abs <= 0 or self.rel <= 0:
            raise ValueError(f"ODE tolerances must be positive, got {self}")


@dataclass(frozen=True)
class ConvergenceTolerance:
    """Convergence criterion for the fixed-point loops.

    A value is converged when it satisfies *both* the absolute and the
    relative tolerance.
    """

    abs: float = 1e-2
    rel: float = 1e-4

    def __post_init__(self) -> None:
        if self.abs <= 0 or self.rel <= 0:
            raise ValueError(f"Convergence tolerances must be positive, got {self}")

    def is_converged(self, old: float, new: float) -> bool:
        """Return True if *new* is within tolerance of *old*.

        When *old* is exactly zero the relative criterion is undefined and
        only the absolute criterion applies.

        Args:
            old: Previous value.
            new: Updated value.

        Returns:
            True if ``|new - old| < abs`` and ``|new - old| / |old| < rel``.
        """
        diff = abs(new - old)
        if not diff < self.abs:
            return False
        if old == 0.0:
            return True
        return diff / abs(old) < self.rel


@dataclass(frozen=True)
class LoopTolerance:
    """Convergence tolerances for the inner and outer loops."""

    inner: ConvergenceTolerance = field(default_factory=ConvergenceTolerance)
    outer: ConvergenceTolerance = field(default_factory=ConvergenceTolerance)


@dataclass(frozen=True)
class MaxIters:
    """Iteration caps for the inner and outer loops."""

    inner: int = 20
    outer: int = 20

    def __post_init__(self) -> None:
        if self.inner < 1 or self.outer < 1:
            raise ValueError(f"Iteration caps must be at least 1, got {self}")


@dataclass(frozen=True)
class RunInputs:
    """Boundary conditions imposed on the engine."""

    pres_zero: float = 10e6  # Pa, pressure at t = 0
    temp_sink: float = 300.0  # K
    temp_source: float = 500.0  # K

    def __post_init__(self) -> None:
        if self.temp_sink <= 0 or self.temp_source <= self.temp_sink:
            raise ValueError(
                f"Require 0 < temp_sink < temp_source, got "
                f"{self.temp_sink} K and {self.temp_source} K"
            )
        if self.pres_zero <= 0:
            raise ValueError(f"pres_zero must be positive, got {self.pres_zero} Pa")


@dataclass(frozen=True)
class RunSettings:
    """Numerical settings for one engine run."""

    resolution: int = 30  # trajectory points per cycle
    loop_tol: LoopTolerance = field(default_factory=LoopTolerance)
    ode_tol: OdeTolerance = field(default_factory=OdeTolerance)
    max_iters: MaxIters = field(default_factory=MaxIters)
    solver: str = "lu"  # matrix decomposition name

    def __post_init__(self) -> None:
        if self.resolution < 2:
            raise ValueError(f"resolution must be at least 2, got {self.resolution}")
