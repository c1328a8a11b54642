"""Tests for unit conversion of configuration values."""

import math

import pytest

from sett_pro.utils.units import convert, get_unit_registry, to_si


class TestToSI:
    def test_bare_numbers(self):
        assert to_si(300, "K") == 300.0
        assert to_si(1e-4, "m^3") == 1e-4
        assert math.isinf(to_si(math.inf, "K/W"))

    def test_numeric_string(self):
        assert to_si("4e-5", "m^3") == 4e-5

    @pytest.mark.parametrize(
        "value, unit, expected",
        [
            ("10 MPa", "Pa", 10e6),
            ("100 bar", "Pa", 10e6),
            ("40 cm^3", "m^3", 4e-5),
            ("27 degC", "K", 300.15),
            ("70 Hz", "Hz", 70.0),
            ("0.5 kW", "W", 500.0),
        ],
    )
    def test_with_units(self, value, unit, expected):
        assert to_si(value, unit) == pytest.approx(expected)

    def test_wrong_dimension(self):
        with pytest.raises(ValueError, match="not convertible"):
            to_si("5 m", "K")

    def test_unparseable(self):
        with pytest.raises(ValueError):
            to_si("ten megapascal", "Pa")

    def test_bool_rejected(self):
        with pytest.raises(ValueError):
            to_si(True, "K")


class TestConvert:
    def test_pressure(self):
        assert convert(10.0, "MPa", "bar") == pytest.approx(100.0)

    def test_temperature(self):
        assert convert(300.0, "K", "degC") == pytest.approx(26.85)

    def test_shared_registry(self):
        ureg = get_unit_registry()
        assert ureg is get_unit_registry()
        assert ureg.Quantity(1.0, "MPa").to("Pa").magnitude == pytest.approx(1e6)
