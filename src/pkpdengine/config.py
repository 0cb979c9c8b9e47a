# src/pkpdengine/config.py
# Default inputs (the "reset" state) and the fixed tuning constants of the engine.
from .types import DosingRegimen, PDParameters, SimulationConfig, OptimizationTarget

DEFAULT_DRUG = DosingRegimen(dosing_interval_h=24.0, infusion_time_h=1.0, half_life_h=6.0, max_concentration=100.0)
DEFAULT_INHIBITOR = DosingRegimen(dosing_interval_h=24.0, infusion_time_h=1.0, half_life_h=8.0, max_concentration=50.0)
DEFAULT_PD = PDParameters(log2_mic0=2.0, imax=3.0, ic50=25.0, hill_coeff=1.0)
DEFAULT_SIMULATION = SimulationConfig(num_cycles=3, time_step_h=0.1)
DEFAULT_TARGET = OptimizationTarget(min_effective_conc=2.0, max_safe_conc=50.0, target_percent_time_above_mic=80.0)

# Grid size stays tractable: at most MAX_CYCLES drug intervals, sampled no finer than MIN_TIME_STEP_H
MIN_CYCLES = 1
MAX_CYCLES = 10
MIN_TIME_STEP_H = 0.01

# Optimizer rules
UNDERTREATED_RATIO = 0.8
OVERTREATED_RATIO = 1.2
DOSE_HEADROOM_FRACTION = 0.8     # of max safe conc; below it a dose increase is allowed
DOSE_CAP_FRACTION = 0.9          # of max safe conc
DOSE_INCREASE_FACTOR = 1.3
DOSE_DECREASE_FACTOR = 0.85
DOSE_FLOOR_MULTIPLE = 2.0        # of min effective conc
INTERVAL_SHORTEN_FACTOR = 0.75
INTERVAL_EXTEND_FACTOR = 1.25
MIN_INTERVAL_H = 6.0
MAX_INTERVAL_H = 48.0
TROUGH_MARGIN = 1.5              # of min effective conc; above it the interval may be extended
PEAK_REDUCTION_FRACTION = 0.9    # of max safe conc
PROJECTION_POINTS = 11

# Exposure ratio interpretation
HIGH_EXPOSURE_RATIO = 2.0
LOW_EXPOSURE_RATIO = 0.5


def default_inputs() -> tuple[DosingRegimen, DosingRegimen, PDParameters, SimulationConfig]:
    """(drug, inhibitor, pd, sim) as used on a fresh start."""
    return DEFAULT_DRUG, DEFAULT_INHIBITOR, DEFAULT_PD, DEFAULT_SIMULATION
