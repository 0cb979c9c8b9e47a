# src/pkpdengine/types.py
from __future__ import annotations

import math
from dataclasses import dataclass, asdict
from typing import Sequence

import numpy as np

# We keep *all* time in HOURS and all concentrations in ug/mL.


class ValidationError(ValueError):
    """
    One or more input parameters failed their precondition checks.

    messages : every violation found, in the order the checks ran
    """

    def __init__(self, messages: Sequence[str]):
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))


@dataclass(frozen=True)
class DosingRegimen:
    """
    A repeating intermittent-infusion schedule. Used the same way for the drug and the inhibitor.

    dosing_interval_h : time from one infusion start to the next (h)
    infusion_time_h   : length of each infusion (h); 0 means an instantaneous bolus
    half_life_h       : elimination half-life (h)
    max_concentration : peak concentration reached at the end of each infusion (ug/mL)
    """
    dosing_interval_h: float
    infusion_time_h: float
    half_life_h: float
    max_concentration: float


@dataclass(frozen=True)
class PDParameters:
    """
    Inhibitory Hill (Emax) model linking inhibitor concentration to log2 MIC.

    log2_mic0  : baseline log2 MIC with no inhibitor present
    imax       : maximal reduction of log2 MIC
    ic50       : inhibitor concentration at half-maximal effect (ug/mL)
    hill_coeff : sigmoidicity
    """
    log2_mic0: float
    imax: float
    ic50: float
    hill_coeff: float


@dataclass(frozen=True)
class SimulationConfig:
    """Number of drug dosing cycles to simulate and the sampling step (h)."""
    num_cycles: int
    time_step_h: float


@dataclass(frozen=True)
class TimeSeriesSample:
    time_h: float
    drug_conc: float
    inhibitor_conc: float
    mic: float


@dataclass(frozen=True)
class CycleMetrics:
    """
    Metrics for one drug dosing cycle (1-based).

    time_points are cycle-relative, restarting at 0 for every cycle.
    """
    cycle: int
    drug_auc: float
    inhibitor_auc: float
    exposure_ratio: float
    percent_time_above_mic: float
    time_points: tuple[float, ...] = ()
    drug_concentrations: tuple[float, ...] = ()
    inhibitor_concentrations: tuple[float, ...] = ()
    mic_values: tuple[float, ...] = ()

    @property
    def mean_mic(self) -> float:
        if not self.mic_values:
            return float("nan")
        return float(np.mean(self.mic_values))

    @property
    def peak_trough_ratio(self) -> float:
        """Highest over lowest drug concentration inside the cycle."""
        if not self.drug_concentrations:
            return float("nan")
        lo = min(self.drug_concentrations)
        if lo <= 0:
            return float("inf")
        return max(self.drug_concentrations) / lo


@dataclass(frozen=True)
class SimulationSummary:
    """
    Whole-horizon aggregates.

    drug_min_conc / inhibitor_min_conc are the model troughs (just before the next infusion),
    while drug_peak_conc / drug_trough_conc are the extremes of the sampled drug series.
    """
    drug_auc: float
    inhibitor_auc: float
    exposure_ratio: float
    inverse_exposure_ratio: float
    percent_time_above_mic: float
    drug_min_conc: float
    inhibitor_min_conc: float
    k_drug: float
    k_inhibitor: float
    drug_peak_conc: float = float("nan")
    drug_trough_conc: float = float("nan")
    mean_mic: float = float("nan")


@dataclass(frozen=True)
class SimulationResult:
    """Everything one run produces. Published as a single unit."""
    summary: SimulationSummary
    samples: tuple[TimeSeriesSample, ...]
    cycles: tuple[CycleMetrics, ...]

    def times(self) -> np.ndarray:
        return np.array([s.time_h for s in self.samples], dtype=float)

    def drug(self) -> np.ndarray:
        return np.array([s.drug_conc for s in self.samples], dtype=float)

    def inhibitor(self) -> np.ndarray:
        return np.array([s.inhibitor_conc for s in self.samples], dtype=float)

    def mic(self) -> np.ndarray:
        return np.array([s.mic for s in self.samples], dtype=float)

    def to_dict(self) -> dict:
        """Plain lists/dicts/floats only; non-finite floats become None."""
        return {
            "summary": _clean(asdict(self.summary)),
            "samples": [_clean(asdict(s)) for s in self.samples],
            "cycles": [_clean(asdict(c)) for c in self.cycles],
        }


@dataclass(frozen=True)
class OptimizationTarget:
    min_effective_conc: float
    max_safe_conc: float
    target_percent_time_above_mic: float


@dataclass(frozen=True)
class OptimizationRecommendation:
    """
    Proposed drug regimen change and its projected outcome.

    recommended_dose is expressed as the peak concentration it delivers (ug/mL).
    """
    recommended_interval_h: float
    recommended_dose: float
    expected_percent_time_above_mic: float
    expected_peak_conc: float
    expected_trough_conc: float
    risk_assessment: str
    confidence: float


def _clean(d: dict) -> dict:
    out = {}
    for key, value in d.items():
        if isinstance(value, float) and not math.isfinite(value):
            out[key] = None
        elif isinstance(value, tuple):
            out[key] = [None if isinstance(v, float) and not math.isfinite(v) else v for v in value]
        else:
            out[key] = value
    return out
