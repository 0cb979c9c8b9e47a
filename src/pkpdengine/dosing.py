# src/pkpdengine/dosing.py
from __future__ import annotations

from dataclasses import replace

from .types import DosingRegimen, OptimizationRecommendation, ValidationError
from .validation import validate_regimen


def infusion_regimen(max_concentration: float, every_h: float, infusion_h: float, half_life_h: float) -> DosingRegimen:
    """
    Build a repeating infusion regimen, e.g. 100 ug/mL peak every 24 h over 1 h, t1/2 6 h.

    max_concentration : peak reached at the end of each infusion (ug/mL)
    every_h           : dosing interval (h)
    infusion_h        : infusion duration (h); 0 for a bolus
    half_life_h       : elimination half-life (h)

    Raises ValidationError listing every problem with the values.
    """
    regimen = DosingRegimen(dosing_interval_h=float(every_h),
                            infusion_time_h=float(infusion_h),
                            half_life_h=float(half_life_h),
                            max_concentration=float(max_concentration))
    errors = validate_regimen(regimen)
    if errors:
        raise ValidationError(errors)
    return regimen


def apply_recommendation(regimen: DosingRegimen, rec: OptimizationRecommendation) -> DosingRegimen:
    """
    New regimen with the recommended interval and dose; infusion time and half-life are kept.
    Feed the result back into simulate.run to see the recommendation play out.
    """
    updated = replace(regimen,
                      dosing_interval_h=float(rec.recommended_interval_h),
                      max_concentration=float(rec.recommended_dose))
    errors = validate_regimen(updated)
    if errors:
        raise ValidationError(errors)
    return updated
