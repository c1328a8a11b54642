"""Design rule checking and input validation for SETT Pro."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from sett_pro.components.working_spaces import SinusoidalDrive
from sett_pro.utils.constants import P_ATM

if TYPE_CHECKING:
    from sett_pro.core.config import RunConfig


class Severity(Enum):
    """Severity level for validation messages."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class ValidationMessage:
    """A single validation finding."""

    severity: Severity
    parameter: str
    message: str
    value: Any = None
    limit: Any = None


@dataclass
class ValidationResult:
    """Aggregated validation result."""

    messages: list[ValidationMessage] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not any(m.severity == Severity.ERROR for m in self.messages)

    @property
    def has_warnings(self) -> bool:
        return any(m.severity == Severity.WARNING for m in self.messages)

    @property
    def errors(self) -> list[ValidationMessage]:
        return [m for m in self.messages if m.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[ValidationMessage]:
        return [m for m in self.messages if m.severity == Severity.WARNING]

    def add(self, severity: Severity, parameter: str, message: str, **kwargs: Any) -> None:
        self.messages.append(
            ValidationMessage(severity=severity, parameter=parameter, message=message, **kwargs)
        )

    def error(self, parameter: str, message: str, **kwargs: Any) -> None:
        self.add(Severity.ERROR, parameter, message, **kwargs)

    def warning(self, parameter: str, message: str, **kwargs: Any) -> None:
        self.add(Severity.WARNING, parameter, message, **kwargs)

    def info(self, parameter: str, message: str, **kwargs: Any) -> None:
        self.add(Severity.INFO, parameter, message, **kwargs)

    def merge(self, other: ValidationResult) -> None:
        self.messages.extend(other.messages)


# --- Common validators ---


def validate_positive(name: str, value: float, result: ValidationResult) -> None:
    """Validate that a value is strictly positive."""
    if value <= 0:
        result.error(name, f"{name} must be positive, got {value}")


def validate_range(
    name: str,
    value: float,
    low: float,
    high: float,
    result: ValidationResult,
    severity: Severity = Severity.ERROR,
) -> None:
    """Validate that a value falls within [low, high]."""
    if value < low or value > high:
        result.add(severity, name, f"{name} = {value} is outside [{low}, {high}]")


# --- Engine configuration ---


def validate_run_config(config: RunConfig) -> ValidationResult:
    """Run design checks on a built run configuration.

    Errors flag configurations the solver cannot run (for example initial
    approaches that leave no temperature rise across the regenerator).
    Warnings flag values that are legal but unusual for a small engine.
    """
    result = ValidationResult()
    inputs = config.inputs
    components = config.components
    settings = config.settings

    # Boundary conditions
    P0 = inputs.pres_zero
    if P0 > 30e6:
        result.warning("P_0", f"Charge pressure {P0 / 1e6:.1f} MPa is very high", value=P0)
    if P0 < P_ATM:
        result.warning("P_0", f"Charge pressure {P0 / 1e3:.1f} kPa is below atmospheric", value=P0)
    if inputs.temp_source > 1200.0:
        result.warning(
            "T_hot", f"Source temperature {inputs.temp_source:.0f} K is very high", value=inputs.temp_source
        )

    # Initial temperature layout
    span = inputs.temp_source - inputs.temp_sink
    chx_dt = components.chx.initial_approach()
    hhx_dt = components.hhx.initial_approach()
    regen_dt = components.regen.initial_approach()
    used = chx_dt + hhx_dt + 2.0 * regen_dt
    if used >= span:
        result.error(
            "approach",
            f"Initial approaches ({used:.1f} K) leave no regenerator span within "
            f"the sink/source difference ({span:.1f} K)",
            value=used,
            limit=span,
        )
    elif used > 0.8 * span:
        result.warning(
            "approach",
            f"Initial approaches use {used / span:.0%} of the sink/source difference",
            value=used,
            limit=span,
        )

    # Dead volume
    dead = components.chx.volume() + components.regen.volume() + components.hhx.volume()
    validate_positive("dead_volume", dead, result)

    ws = components.ws
    if isinstance(ws, SinusoidalDrive):
        validate_positive("V_swept_c", ws.V_swept_c, result)
        validate_positive("V_swept_e", ws.V_swept_e, result)
        validate_range("phase_angle", ws.phase_angle, 30.0, 150.0, result, Severity.WARNING)
        validate_range("frequency", ws.freq, 1.0, 200.0, result, Severity.WARNING)
        swept = ws.V_swept_c + ws.V_swept_e
        if swept > 0 and dead / swept > 2.0:
            result.warning(
                "dead_volume",
                f"Dead volume is {dead / swept:.1f}x the total swept volume",
                value=dead,
            )
    else:
        result.info("ws", f"No design checks for working-space model '{ws.model}'")

    # Solver settings
    if settings.resolution < 10:
        result.warning(
            "resolution",
            f"Resolution {settings.resolution} is coarse for cycle integrals",
            value=settings.resolution,
        )
    if settings.loop_tol.outer.abs > 1.0:
        result.warning(
            "outer_loop.abs_tol",
            f"Outer-loop tolerance {settings.loop_tol.outer.abs} K is loose",
        )
    if config.fluid.model == "coolprop":
        result.info("fluid", "Real-gas properties are evaluated by CoolProp; runs are slower")

    return result
