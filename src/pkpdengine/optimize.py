# src/pkpdengine/optimize.py
from __future__ import annotations

import logging
import math

import numpy as np

from . import config as cfg
from .types import (
    DosingRegimen, PDParameters, SimulationSummary, SimulationResult,
    OptimizationTarget, OptimizationRecommendation, ValidationError,
)
from .validation import validate_target, regimen_errors
from .models.infusion import decay_constant, concentration_during_infusion, concentration_during_decay

logger = logging.getLogger(__name__)


def optimize(drug: DosingRegimen, pd: PDParameters, current: SimulationSummary,
             chart_peak: float, chart_trough: float,
             target: OptimizationTarget) -> OptimizationRecommendation:
    """
    Rule-based adjustment of the drug interval / dose toward a T>MIC target.

    The dose is the peak concentration an infusion delivers (single-compartment assumption),
    so the current dose is drug.max_concentration.

    Rules, in order:
      1. undertreated (T>MIC ratio < 0.8): raise the dose if the peak has headroom,
         otherwise shorten the interval
      2. overtreated (ratio > 1.2): extend the interval if the trough is comfortable,
         otherwise trim the dose if the peak is close to the safety limit
      3. in band: keep the regimen
      4. safety overrides: subtherapeutic trough, then toxic peak (toxicity wins)
    """
    interval = drug.dosing_interval_h
    dose = drug.max_concentration
    confidence = 0.7
    risk = "Moderate"

    t_over_mic_ratio = current.percent_time_above_mic / target.target_percent_time_above_mic
    if t_over_mic_ratio < cfg.UNDERTREATED_RATIO:
        if chart_peak < target.max_safe_conc * cfg.DOSE_HEADROOM_FRACTION:
            dose = min(dose * cfg.DOSE_INCREASE_FACTOR, target.max_safe_conc * cfg.DOSE_CAP_FRACTION)
            confidence = 0.85
            risk = "Low"
        else:
            interval = max(interval * cfg.INTERVAL_SHORTEN_FACTOR, cfg.MIN_INTERVAL_H)
            confidence = 0.75
            risk = "Moderate"
    elif t_over_mic_ratio > cfg.OVERTREATED_RATIO:
        if chart_trough > target.min_effective_conc * cfg.TROUGH_MARGIN:
            interval = min(interval * cfg.INTERVAL_EXTEND_FACTOR, cfg.MAX_INTERVAL_H)
            confidence = 0.8
            risk = "Low"
        elif chart_peak > target.max_safe_conc * cfg.PEAK_REDUCTION_FRACTION:
            dose = max(dose * cfg.DOSE_DECREASE_FACTOR, target.min_effective_conc * cfg.DOSE_FLOOR_MULTIPLE)
            confidence = 0.8
            risk = "Low"

    if chart_trough < target.min_effective_conc:
        risk = "High - Risk of subtherapeutic levels"
        confidence = 0.6
    if chart_peak > target.max_safe_conc:
        risk = "High - Risk of toxicity"
        confidence = 0.5

    k = decay_constant(drug.half_life_h)
    expected_peak = dose
    expected_trough = float(expected_peak * np.exp(-k * (interval - drug.infusion_time_h)))

    reference_mic = current.mean_mic
    if not math.isfinite(reference_mic):
        reference_mic = 2.0 ** pd.log2_mic0
    expected_percent = _projected_percent_above(interval, drug.infusion_time_h, k,
                                                expected_trough, expected_peak, reference_mic)

    return OptimizationRecommendation(
        recommended_interval_h=float(interval),
        recommended_dose=float(dose),
        expected_percent_time_above_mic=expected_percent,
        expected_peak_conc=float(expected_peak),
        expected_trough_conc=expected_trough,
        risk_assessment=risk,
        confidence=confidence,
    )


def _projected_percent_above(interval_h: float, infusion_time_h: float, k: float,
                             trough: float, peak: float, mic: float) -> float:
    """Coarse T>MIC estimate from evenly spaced points over one recommended interval."""
    n = cfg.PROJECTION_POINTS
    t = np.linspace(0.0, interval_h, n)
    if infusion_time_h > 0:
        rising = concentration_during_infusion(t, 0.0, infusion_time_h, trough, peak)
    else:
        rising = np.full_like(t, peak)
    C = np.where(t <= infusion_time_h, rising,
                 concentration_during_decay(t, infusion_time_h, peak, k))
    above = int(np.count_nonzero(C >= mic))
    return min(100.0 * above / n, 100.0)


def recommend(drug: DosingRegimen, inhibitor: DosingRegimen, pd: PDParameters,
              result: SimulationResult, target: OptimizationTarget) -> OptimizationRecommendation:
    """
    Validate, then optimize against a finished simulation result.
    Regimen problems are reported first (prefixed Drug:/Inhibitor:); target problems after.
    The peak and trough come from the simulated drug series.
    """
    errors = regimen_errors(drug, inhibitor)
    if not errors:
        errors = validate_target(target)
    if errors:
        logger.warning(f"Optimization not run: {errors}")
        raise ValidationError(errors)

    summary = result.summary
    rec = optimize(drug, pd, summary, summary.drug_peak_conc, summary.drug_trough_conc, target)
    logger.info(f"Recommended interval {rec.recommended_interval_h:.1f} h, dose {rec.recommended_dose:.2f} "
                f"({rec.risk_assessment}, confidence {rec.confidence:.2f})")
    return rec
