# src/pkpdengine/metrics.py
import numpy as np

from .config import HIGH_EXPOSURE_RATIO, LOW_EXPOSURE_RATIO


def cmax(C: np.ndarray) -> float:
    """Global maximum concentration (ug/mL). NaN for an empty series."""
    C = np.asarray(C, dtype=float)
    return float(np.max(C)) if C.size else float("nan")


def cmin(C: np.ndarray) -> float:
    """Global minimum concentration (ug/mL). NaN for an empty series."""
    C = np.asarray(C, dtype=float)
    return float(np.min(C)) if C.size else float("nan")


def auc_trapz(t: np.ndarray, C: np.ndarray) -> float:
    """
    Area Under the Curve (AUC) via trapezoidal rule (ug*h/mL).
    t must be ascending; empty and single-sample series give 0.
    """
    t = np.asarray(t, dtype=float)
    C = np.asarray(C, dtype=float)
    if t.size < 2:
        return 0.0
    return float(np.trapezoid(C, t))


def ratio(numerator: float, denominator: float) -> float:
    """numerator / denominator, letting x/0 come out as inf or nan instead of raising."""
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.float64(numerator) / np.float64(denominator))


def percent_time_above(C: np.ndarray, threshold: np.ndarray) -> float:
    """
    Percent of samples where C >= threshold (sample-count based T>MIC).
    NaN when there are no samples.
    """
    above = np.asarray(C, dtype=float) >= np.asarray(threshold, dtype=float)
    if above.size == 0:
        return float("nan")
    return 100.0 * float(np.count_nonzero(above)) / above.size


def interpret_exposure_ratio(exposure_ratio: float) -> str:
    """Short reading of a drug/inhibitor AUC ratio."""
    if exposure_ratio > HIGH_EXPOSURE_RATIO:
        return "High drug exposure per inhibitor exposure - efficient interaction"
    elif exposure_ratio < LOW_EXPOSURE_RATIO:
        return "Low drug exposure per inhibitor exposure - less potent or suboptimal dosing"
    return "Moderate drug to inhibitor exposure ratio"
