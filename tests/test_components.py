"""Tests for heat exchanger, regenerator and working-space models."""

import math

import pytest

from sett_pro.components import (
    Components,
    FixedApproach,
    FixedApproachRegenerator,
    FixedConductance,
    FixedConductanceRegenerator,
    HeatExchangerState,
    ParasiticPower,
    RegeneratorState,
    SinusoidalDrive,
    WorkingSpacesState,
)


def _hx_state(m_dot=0.5, cp=14500.0, Q_dot=2000.0):
    return HeatExchangerState(
        temp=340.0,
        pres=10e6,
        dens=7.13,
        cp=cp,
        m_dot=m_dot,
        Q_dot=Q_dot,
        ext_temp=300.0,
    )


def _regen_state(m_dot=0.5, cp=14500.0):
    return RegeneratorState(
        temp=370.0,
        pres=10e6,
        dens=6.55,
        cp=cp,
        m_dot=m_dot,
        Q_dot=0.0,
        temp_chx=340.0,
        temp_hhx=400.0,
    )


def _ws_state():
    return WorkingSpacesState(pres=10e6, temp_chx=340.0, temp_hhx=400.0)


class TestFixedApproach:
    def test_approach_constant(self):
        hx = FixedApproach(vol=4e-5, approach=40.0)
        assert hx.initial_approach() == 40.0
        assert hx.approach(_hx_state()) == 40.0
        assert hx.approach(_hx_state(m_dot=0.0)) == 40.0

    def test_volume_and_resistance(self):
        hx = FixedApproach(vol=4e-5, approach=40.0, R_hyd=2.0)
        assert hx.volume() == 4e-5
        assert hx.hydraulic_resistance(_hx_state()) == 2.0

    def test_parasitics(self):
        hx = FixedApproach(vol=1e-4, approach=100.0, parasitics=ParasiticPower(mechanical=5.0))
        assert hx.parasitics(_hx_state()).mechanical == 5.0
        assert FixedApproach(vol=1e-4, approach=1.0).parasitics(_hx_state()) == ParasiticPower()

    def test_summary(self):
        summary = FixedApproach(vol=4e-5, approach=40.0, name="chx").summary()
        assert summary["name"] == "chx"
        assert summary["type"] == "heat_exchanger"
        assert summary["model"] == "fixed_approach"
        assert summary["DT"] == 40.0

    @pytest.mark.parametrize("vol, approach", [(-1.0, 10.0), (1e-4, -1.0)])
    def test_invalid(self, vol, approach):
        with pytest.raises(ValueError):
            FixedApproach(vol=vol, approach=approach)


class TestFixedConductance:
    def test_effectiveness(self):
        hx = FixedConductance(vol=4e-5, UA=7250.0)
        # NTU = 7250 / (0.5 * 14500) = 1
        assert hx.effectiveness(_hx_state()) == pytest.approx(1.0 - math.exp(-1.0))

    def test_approach(self):
        hx = FixedConductance(vol=4e-5, UA=7250.0)
        eff = 1.0 - math.exp(-1.0)
        expected = 2000.0 / 7250.0 * (1.0 / eff - 1.0)
        assert hx.approach(_hx_state()) == pytest.approx(expected)

    def test_approach_uses_heat_magnitude(self):
        hx = FixedConductance(vol=4e-5, UA=7250.0)
        assert hx.approach(_hx_state(Q_dot=-2000.0)) == pytest.approx(hx.approach(_hx_state()))

    def test_no_flow(self):
        hx = FixedConductance(vol=4e-5, UA=100.0)
        assert hx.approach(_hx_state(m_dot=0.0)) == 0.0
        assert hx.effectiveness(_hx_state(m_dot=0.0)) == 1.0

    def test_larger_conductance_smaller_approach(self):
        small = FixedConductance(vol=4e-5, UA=1000.0).approach(_hx_state())
        large = FixedConductance(vol=4e-5, UA=10000.0).approach(_hx_state())
        assert large < small

    def test_initial_approach(self):
        assert FixedConductance(vol=4e-5, UA=100.0).initial_approach() == 10.0

    def test_invalid_conductance(self):
        with pytest.raises(ValueError):
            FixedConductance(vol=4e-5, UA=0.0)


class TestRegenerators:
    def test_fixed_approach(self):
        regen = FixedApproachRegenerator(vol=1e-4, approach=10.0, Q_parasitic=3.0)
        assert regen.approach(_regen_state()) == 10.0
        assert regen.parasitics(_regen_state()).thermal == 3.0
        assert regen.parasitics(_regen_state()).mechanical == 0.0
        assert regen.summary()["type"] == "regenerator"

    def test_fixed_conductance_approach(self):
        regen = FixedConductanceRegenerator(vol=1e-4, UA=7250.0 * 9)
        # NTU = 9, span 60 K
        assert regen.approach(_regen_state()) == pytest.approx(6.0)

    def test_fixed_conductance_no_flow(self):
        regen = FixedConductanceRegenerator()
        assert regen.approach(_regen_state(m_dot=0.0)) == 0.0

    def test_invalid(self):
        with pytest.raises(ValueError):
            FixedApproachRegenerator(vol=-1.0)
        with pytest.raises(ValueError):
            FixedConductanceRegenerator(UA=-5.0)


class TestSinusoidalDrive:
    def test_volumes_at_zero(self):
        ws = SinusoidalDrive()
        vols = ws.volumes(_ws_state())(0.0)
        assert vols.V_c == pytest.approx(4.68e-5 + 1.128e-4)
        # expansion space leads by 90 deg: halfway through its stroke
        assert vols.V_e == pytest.approx(1.68e-5 + 5.64e-5)
        assert vols.dVc_dt == pytest.approx(0.0, abs=1e-12)
        assert vols.dVe_dt == pytest.approx(-5.64e-5 * 2 * math.pi * 66.6667)

    def test_periodic(self):
        ws = SinusoidalDrive(frequency=50.0)
        fn = ws.volumes(_ws_state())
        start, end = fn(0.003), fn(0.003 + 1.0 / 50.0)
        assert end.V_c == pytest.approx(start.V_c)
        assert end.V_e == pytest.approx(start.V_e)

    def test_derivative_matches_finite_difference(self):
        fn = SinusoidalDrive().volumes(_ws_state())
        t, h = 0.002, 1e-7
        slope = (fn(t + h).V_c - fn(t - h).V_c) / (2 * h)
        assert slope == pytest.approx(fn(t).dVc_dt, rel=1e-6)

    def test_volume_bounds(self):
        fn = SinusoidalDrive().volumes(_ws_state())
        for i in range(50):
            vols = fn(i / (50 * 66.6667))
            assert 4.68e-5 - 1e-12 <= vols.V_c <= 1.596e-4 + 1e-12
            assert 1.68e-5 - 1e-12 <= vols.V_e <= 1.296e-4 + 1e-12

    def test_frequency_and_defaults(self):
        ws = SinusoidalDrive()
        assert ws.frequency(_ws_state()) == 66.6667
        resistance = ws.thermal_resistance(_ws_state())
        assert math.isinf(resistance.comp) and math.isinf(resistance.exp)

    def test_parasitics(self):
        ws = SinusoidalDrive(W_parasitic_c=1.0, W_parasitic_e=2.0, Q_parasitic_e=3.0)
        parasitics = ws.parasitics(_ws_state())
        assert parasitics.comp.mechanical == 1.0
        assert parasitics.exp.mechanical == 2.0
        assert parasitics.exp.thermal == 3.0

    def test_invalid(self):
        with pytest.raises(ValueError):
            SinusoidalDrive(frequency=0.0)
        with pytest.raises(ValueError):
            SinusoidalDrive(V_swept_c=-1e-4)
        with pytest.raises(ValueError):
            SinusoidalDrive(R_c=0.0)


class TestComponents:
    def test_summary(self):
        components = Components(
            chx=FixedApproach(vol=4e-5, approach=40.0, name="chx"),
            hhx=FixedApproach(vol=1e-4, approach=100.0, name="hhx"),
            regen=FixedApproachRegenerator(),
            ws=SinusoidalDrive(),
        )
        summary = components.summary()
        assert set(summary) == {"chx", "hhx", "regen", "ws"}
        assert summary["ws"]["frequency"] == 66.6667
