# src/pkpdengine/simulate.py
from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass

import numpy as np

from .types import (
    DosingRegimen, PDParameters, SimulationConfig,
    TimeSeriesSample, CycleMetrics, SimulationSummary, SimulationResult,
)
from .validation import validate_inputs
from .models.infusion import decay_constant, trough_concentration, concentration_at, cycle_position
from .models.inhibition import dynamic_mic
from .metrics import auc_trapz, cmax, cmin, ratio, percent_time_above

logger = logging.getLogger(__name__)

# Grid times are rounded to this many decimals so i*dt lands on exact cycle edges.
_GRID_DECIMALS = 9


def time_grid(total_time_h: float, dt_h: float) -> np.ndarray:
    """
    Sample times 0, dt, 2*dt, ... up to and including total_time_h when it falls on the grid.
    Generated from the step index (not by repeated addition) so rounding drift can't drop
    or duplicate the endpoint.
    """
    n_steps = int(np.floor(total_time_h / dt_h + 1e-9))
    t = np.round(np.arange(n_steps + 1, dtype=float) * dt_h, _GRID_DECIMALS)
    return t[t <= total_time_h]


def run(drug: DosingRegimen, inhibitor: DosingRegimen, pd: PDParameters,
        config: SimulationConfig) -> SimulationResult:
    """
    Simulate drug and inhibitor profiles over config.num_cycles drug dosing cycles.

    Raises ValidationError (with every violation) before any computation if the inputs
    are not physically sane.

    Returns
    -------
    SimulationResult with the whole-horizon summary, the full time series and one
    CycleMetrics per drug cycle.
    """
    validate_inputs(drug, inhibitor, config)

    total_time = config.num_cycles * drug.dosing_interval_h

    k_drug = decay_constant(drug.half_life_h)
    k_inhibitor = decay_constant(inhibitor.half_life_h)
    drug_trough = trough_concentration(drug.max_concentration, k_drug,
                                       drug.dosing_interval_h, drug.infusion_time_h)
    inhibitor_trough = trough_concentration(inhibitor.max_concentration, k_inhibitor,
                                            inhibitor.dosing_interval_h, inhibitor.infusion_time_h)

    t = time_grid(total_time, config.time_step_h)
    logger.debug(f"Simulating {config.num_cycles} cycles over {total_time} h with {t.size} samples")

    # Drug and inhibitor each follow their own cycle boundaries
    C_drug = concentration_at(t, drug, k=k_drug, trough=drug_trough)
    C_inhibitor = concentration_at(t, inhibitor, k=k_inhibitor, trough=inhibitor_trough)
    mic = dynamic_mic(C_inhibitor, pd)

    samples = tuple(
        TimeSeriesSample(time_h=float(ti), drug_conc=float(cd), inhibitor_conc=float(ci), mic=float(m))
        for ti, cd, ci, m in zip(t, C_drug, C_inhibitor, mic)
    )
    cycles = _cycle_metrics(t, C_drug, C_inhibitor, mic, drug.dosing_interval_h, config.num_cycles)

    drug_auc = auc_trapz(t, C_drug)
    inhibitor_auc = auc_trapz(t, C_inhibitor)
    summary = SimulationSummary(
        drug_auc=drug_auc,
        inhibitor_auc=inhibitor_auc,
        exposure_ratio=ratio(drug_auc, inhibitor_auc),
        inverse_exposure_ratio=ratio(inhibitor_auc, drug_auc),
        percent_time_above_mic=percent_time_above(C_drug, mic),
        drug_min_conc=float(drug_trough),
        inhibitor_min_conc=float(inhibitor_trough),
        k_drug=float(k_drug),
        k_inhibitor=float(k_inhibitor),
        drug_peak_conc=cmax(C_drug),
        drug_trough_conc=cmin(C_drug),
        mean_mic=float(np.mean(mic)) if mic.size else float("nan"),
    )
    return SimulationResult(summary=summary, samples=samples, cycles=cycles)


def _cycle_metrics(t: np.ndarray, C_drug: np.ndarray, C_inhibitor: np.ndarray, mic: np.ndarray,
                   interval_h: float, num_cycles: int) -> tuple[CycleMetrics, ...]:
    """
    Bucket samples by drug cycle index (see cycle_position).
    The sample at exactly t = num_cycles * interval gets index num_cycles and belongs to no cycle.
    """
    cycle, time_in_cycle = cycle_position(t, interval_h)
    cycle_idx = cycle.astype(int)

    out = []
    for c in range(num_cycles):
        mask = cycle_idx == c
        tc = time_in_cycle[mask]
        cd, ci, mc = C_drug[mask], C_inhibitor[mask], mic[mask]
        drug_auc = auc_trapz(tc, cd)
        inhibitor_auc = auc_trapz(tc, ci)
        out.append(CycleMetrics(
            cycle=c + 1,
            drug_auc=drug_auc,
            inhibitor_auc=inhibitor_auc,
            exposure_ratio=ratio(drug_auc, inhibitor_auc),
            percent_time_above_mic=percent_time_above(cd, mc),
            time_points=tuple(tc.tolist()),
            drug_concentrations=tuple(cd.tolist()),
            inhibitor_concentrations=tuple(ci.tolist()),
            mic_values=tuple(mc.tolist()),
        ))
    return tuple(out)


@dataclass(frozen=True)
class RunToken:
    """Opaque handle for one requested run; compare against the tracker before publishing."""
    run_id: int


class RunTracker:
    """
    Latest-run-wins publication of simulation results.

    Each begin() supersedes every earlier token. publish() commits a result only if its
    token is still the latest and the tracker is still open; anything else is discarded.
    The summary, series and cycles travel together in one SimulationResult, so a commit
    is all-or-nothing.
    """

    def __init__(self):
        self._ids = itertools.count(1)
        self._latest_id = 0
        self._open = True
        self._result: SimulationResult | None = None
        self._lock = threading.Lock()

    def begin(self) -> RunToken:
        with self._lock:
            self._latest_id = next(self._ids)
            return RunToken(self._latest_id)

    def is_current(self, token: RunToken) -> bool:
        with self._lock:
            return self._open and token.run_id == self._latest_id

    def publish(self, token: RunToken, result: SimulationResult) -> bool:
        """Commit result if token is still current. Returns whether it was committed."""
        with self._lock:
            if not self._open or token.run_id != self._latest_id:
                logger.info(f"Discarding stale run {token.run_id} (latest is {self._latest_id})")
                return False
            self._result = result
            return True

    def close(self) -> None:
        """Stop accepting results; any in-flight run will be discarded."""
        with self._lock:
            self._open = False

    @property
    def latest_result(self) -> SimulationResult | None:
        with self._lock:
            return self._result

    def submit(self, drug: DosingRegimen, inhibitor: DosingRegimen, pd: PDParameters,
               config: SimulationConfig) -> bool:
        """
        Run and publish in one go.
        Invalid inputs raise ValidationError before a token is issued, so they never
        supersede the run currently in flight.
        """
        validate_inputs(drug, inhibitor, config)
        token = self.begin()
        result = run(drug, inhibitor, pd, config)
        published = self.publish(token, result)
        if published:
            logger.info(f"Published run {token.run_id}: T>MIC {result.summary.percent_time_above_mic:.1f}%")
        return published
