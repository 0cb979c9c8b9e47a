# src/pkpdengine/models/infusion.py
import numpy as np

from ..types import DosingRegimen

# Relative tolerance for treating a time as sitting on a cycle edge
_EDGE_RTOL = 1e-9


def decay_constant(half_life_h):
    """First-order elimination rate k = ln(2) / t_half (1/h)."""
    return np.log(2.0) / half_life_h


def trough_concentration(max_conc, k, interval_h, infusion_time_h):
    """Concentration just before the next infusion starts."""
    return max_conc * np.exp(-k * (interval_h - infusion_time_h))


def concentration_during_infusion(t, cycle_start_h, infusion_time_h, trough, peak):
    """Linear rise from trough (at cycle start) to peak (at infusion end)."""
    return trough + (peak - trough) * ((t - cycle_start_h) / infusion_time_h)


def concentration_during_decay(t, infusion_end_h, peak, k):
    """Exponential decline from the peak once the infusion has ended."""
    return peak * np.exp(-k * (t - infusion_end_h))


def cycle_position(t, interval_h):
    """
    (cycle index, time since that cycle started) for absolute time(s) t.

    Both come from the same floor so they always agree. A time within rounding of the next
    edge (6.3 h with a 2.1 h interval) is placed at the start of the next cycle, so the time
    in cycle always lies in [0, interval).
    """
    t = np.asarray(t, dtype=float)
    cycle = np.floor(t / interval_h)
    time_in_cycle = t - cycle * interval_h
    at_next_edge = time_in_cycle >= interval_h * (1 - _EDGE_RTOL)
    cycle = np.where(at_next_edge, cycle + 1, cycle)
    time_in_cycle = np.where(at_next_edge, 0.0, np.maximum(time_in_cycle, 0.0))
    return cycle, time_in_cycle


def concentration_at(t, regimen: DosingRegimen, k=None, trough=None):
    """
    Concentration at absolute time(s) t for a repeating infusion regimen.

    Every cycle has the same trough-to-peak-to-trough shape (no accumulation between cycles):
      cycle          = floor(t / interval)
      time_in_cycle  = t - cycle * interval
      time_in_cycle <= infusion time -> linear infusion rise
      otherwise                      -> exponential decay from the peak at the cycle's infusion end

    Parameters
    ----------
    t : float or array of times (h)
    regimen : DosingRegimen
    k, trough : optional precomputed decay constant and trough for this regimen

    Returns
    -------
    float for scalar t, otherwise an array shaped like t.
    """
    if k is None:
        k = decay_constant(regimen.half_life_h)
    if trough is None:
        trough = trough_concentration(regimen.max_concentration, k,
                                      regimen.dosing_interval_h, regimen.infusion_time_h)

    t_arr = np.asarray(t, dtype=float)
    interval = regimen.dosing_interval_h
    infusion = regimen.infusion_time_h
    peak = regimen.max_concentration

    cycle, time_in_cycle = cycle_position(t_arr, interval)
    cycle_start = cycle * interval
    in_infusion = time_in_cycle <= infusion

    if infusion > 0:
        rising = concentration_during_infusion(time_in_cycle, 0.0, infusion, trough, peak)
    else:
        # Zero-length infusion is a bolus: the peak is reached at the cycle start.
        rising = np.full_like(t_arr, peak)
    decaying = concentration_during_decay(t_arr, cycle_start + infusion, peak, k)

    C = np.where(in_infusion, rising, decaying)
    if C.ndim == 0:
        return float(C)
    return C
