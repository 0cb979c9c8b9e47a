# src/pkpdengine/models/inhibition.py
import numpy as np

from ..types import PDParameters


def log2_mic(inhibitor_conc, pd: PDParameters):
    """
    Inhibitory Hill model on the log2 MIC scale:

      log2 MIC(C) = log2_MIC0 - Imax * C^h / (C^h + IC50^h)

    C = 0 gives the baseline; C -> inf approaches log2_MIC0 - Imax.
    """
    C = np.asarray(inhibitor_conc, dtype=float)
    Ch = np.power(C, pd.hill_coeff)
    effect = pd.imax * Ch / (Ch + np.power(pd.ic50, pd.hill_coeff))
    out = pd.log2_mic0 - effect
    if out.ndim == 0:
        return float(out)
    return out


def dynamic_mic(inhibitor_conc, pd: PDParameters):
    """Effective MIC (ug/mL) at the given inhibitor concentration(s)."""
    out = np.power(2.0, log2_mic(inhibitor_conc, pd))
    if np.ndim(out) == 0:
        return float(out)
    return out
