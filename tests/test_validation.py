"""Tests for run configuration design checks."""

from sett_pro.core.config import default_config, run_config_from_dict
from sett_pro.utils.validation import (
    Severity,
    ValidationResult,
    validate_positive,
    validate_range,
    validate_run_config,
)


def _config(**changes):
    """Build the reference configuration with nested overrides applied."""
    data = default_config()
    for path, value in changes.items():
        node = data
        *parents, leaf = path.split("__")
        for key in parents:
            node = node[key]
        node[leaf] = value
    return run_config_from_dict(data)


def _params(slot):
    return f"engine__components__{slot}__params"


class TestValidationResult:
    def test_empty_is_valid(self):
        result = ValidationResult()
        assert result.is_valid
        assert not result.has_warnings

    def test_error_invalidates(self):
        result = ValidationResult()
        result.error("x", "bad")
        result.warning("y", "odd")
        result.info("z", "note")
        assert not result.is_valid
        assert result.has_warnings
        assert len(result.errors) == 1
        assert len(result.warnings) == 1

    def test_merge(self):
        a, b = ValidationResult(), ValidationResult()
        b.warning("y", "odd")
        a.merge(b)
        assert a.has_warnings

    def test_helpers(self):
        result = ValidationResult()
        validate_positive("vol", 0.0, result)
        validate_range("phase", 170.0, 30.0, 150.0, result, Severity.WARNING)
        validate_range("freq", 50.0, 1.0, 200.0, result)
        assert [m.parameter for m in result.errors] == ["vol"]
        assert [m.parameter for m in result.warnings] == ["phase"]


class TestRunConfigChecks:
    def test_reference_is_clean(self):
        result = validate_run_config(_config())
        assert result.is_valid
        assert not result.has_warnings

    def test_approaches_exceed_span(self):
        config = _config(conditions__T_hot=450.0)
        result = validate_run_config(config)
        assert not result.is_valid
        assert result.errors[0].parameter == "approach"

    def test_approaches_tight(self):
        # 160 K of approaches within a 190 K span
        result = validate_run_config(_config(conditions__T_hot=490.0))
        assert result.is_valid
        assert any(m.parameter == "approach" for m in result.warnings)

    def test_high_pressure(self):
        result = validate_run_config(_config(conditions__P_0="35 MPa"))
        assert any(m.parameter == "P_0" for m in result.warnings)

    def test_unusual_drive(self):
        config = _config(
            **{
                f"{_params('ws')}__phase_angle": 170.0,
                f"{_params('ws')}__frequency": 500.0,
            }
        )
        parameters = {m.parameter for m in validate_run_config(config).warnings}
        assert {"phase_angle", "frequency"} <= parameters

    def test_large_dead_volume(self):
        config = _config(**{f"{_params('regen')}__vol": 5e-3})
        parameters = {m.parameter for m in validate_run_config(config).warnings}
        assert "dead_volume" in parameters

    def test_coarse_resolution(self):
        result = validate_run_config(_config(solver__resolution=5))
        assert any(m.parameter == "resolution" for m in result.warnings)

    def test_real_gas_note(self):
        config = _config(engine__fluid={"model": "coolprop", "name": "Hydrogen"})
        result = validate_run_config(config)
        assert result.is_valid
        assert any(m.severity == Severity.INFO for m in result.messages)
