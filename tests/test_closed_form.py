import math
import numpy as np
from scipy.integrate import solve_ivp

from pkpdengine.types import DosingRegimen
from pkpdengine.models.infusion import decay_constant, trough_concentration, concentration_at
from pkpdengine.metrics import auc_trapz


def test_post_infusion_decay_matches_ode():
    """
    After the infusion ends the model is first-order elimination:
      dC/dt = -k C,  C(t_end) = Cmax,  k = ln2 / t_half.
    Integrate that ODE numerically and compare with the closed-form decay branch.
    """
    reg = DosingRegimen(dosing_interval_h=24.0, infusion_time_h=1.0, half_life_h=6.0, max_concentration=100.0)
    k = decay_constant(reg.half_life_h)

    t_eval = np.linspace(1.0, 23.9, 200)
    sol = solve_ivp(lambda t, y: [-k * y[0]], t_span=(1.0, 23.9), y0=[100.0],
                    t_eval=t_eval, rtol=1e-9, atol=1e-12)

    C = concentration_at(t_eval, reg)
    assert np.allclose(C, sol.y[0], rtol=1e-6)


def test_decay_ode_reaches_model_trough():
    """Integrating the elimination ODE across the whole off-infusion window lands on the trough."""
    reg = DosingRegimen(dosing_interval_h=12.0, infusion_time_h=0.5, half_life_h=3.0, max_concentration=40.0)
    k = decay_constant(reg.half_life_h)
    sol = solve_ivp(lambda t, y: [-k * y[0]], t_span=(0.5, 12.0), y0=[40.0], rtol=1e-10, atol=1e-12)

    expected = trough_concentration(40.0, k, 12.0, 0.5)
    assert np.isclose(sol.y[0, -1], expected, rtol=1e-6)


def test_single_cycle_auc_matches_analytic():
    """
    One cycle = linear rise (trapezoid exact) + exponential decay with integral
      Cmax / k * (1 - exp(-k (tau - Tinf))).
    """
    reg = DosingRegimen(dosing_interval_h=24.0, infusion_time_h=1.0, half_life_h=6.0, max_concentration=100.0)
    k = decay_constant(reg.half_life_h)
    trough = trough_concentration(100.0, k, 24.0, 1.0)

    t = np.linspace(0.0, 24.0, 24001)
    t[-1] = 24.0 - 1e-12  # stay inside the first cycle
    C = concentration_at(t, reg)

    expected = 0.5 * (trough + 100.0) * 1.0 + 100.0 / k * (1.0 - math.exp(-k * 23.0))
    assert np.isclose(auc_trapz(t, C), expected, rtol=1e-6)
