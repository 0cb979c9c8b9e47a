# src/pkpdengine/validation.py
from __future__ import annotations

import logging
import numbers

from .types import DosingRegimen, SimulationConfig, OptimizationTarget, ValidationError
from .config import MIN_CYCLES, MAX_CYCLES, MIN_TIME_STEP_H

logger = logging.getLogger(__name__)


def validate_regimen(regimen: DosingRegimen) -> list[str]:
    """
    Check a drug or inhibitor regimen for physical sanity.
    Every rule is checked, so all violations come back, not just the first.
    An empty list means the regimen is valid.
    """
    errors: list[str] = []
    if not (regimen.dosing_interval_h > 0):
        errors.append("Dosing interval must be positive")
    if not (regimen.infusion_time_h >= 0):
        errors.append("Infusion time must be non-negative")
    if not (regimen.infusion_time_h <= regimen.dosing_interval_h):
        errors.append("Infusion time cannot exceed dosing interval")
    if not (regimen.half_life_h > 0):
        errors.append("Half-life must be positive")
    if not (regimen.max_concentration > 0):
        errors.append("Max concentration must be positive")
    return errors


def validate_simulation_config(config: SimulationConfig) -> list[str]:
    errors: list[str] = []
    if not (isinstance(config.num_cycles, numbers.Integral)
            and not isinstance(config.num_cycles, bool)
            and MIN_CYCLES <= config.num_cycles <= MAX_CYCLES):
        errors.append(f"Number of cycles must be between {MIN_CYCLES} and {MAX_CYCLES}")
    if not (config.time_step_h > 0):
        errors.append("Time step must be positive")
    elif config.time_step_h < MIN_TIME_STEP_H:
        errors.append(f"Time step must be at least {MIN_TIME_STEP_H}")
    return errors


def validate_target(target: OptimizationTarget) -> list[str]:
    errors: list[str] = []
    if not (target.min_effective_conc > 0):
        errors.append("Minimum effective concentration must be positive")
    if not (target.max_safe_conc > 0):
        errors.append("Maximum safe concentration must be positive")
    if target.min_effective_conc >= target.max_safe_conc:
        errors.append("Minimum effective concentration must be less than maximum safe concentration")
    if not (0 < target.target_percent_time_above_mic <= 100):
        errors.append("Target T>MIC must be between 1% and 100%")
    return errors


def regimen_errors(drug: DosingRegimen, inhibitor: DosingRegimen) -> list[str]:
    """Both regimens' violations, labelled by which compound they belong to."""
    return ([f"Drug: {e}" for e in validate_regimen(drug)]
            + [f"Inhibitor: {e}" for e in validate_regimen(inhibitor)])


def validate_inputs(drug: DosingRegimen, inhibitor: DosingRegimen, config: SimulationConfig) -> None:
    """Raise ValidationError carrying every violation across all simulation inputs."""
    errors = regimen_errors(drug, inhibitor) + validate_simulation_config(config)
    if errors:
        logger.warning(f"Rejected simulation inputs: {errors}")
        raise ValidationError(errors)
