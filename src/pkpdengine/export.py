# src/pkpdengine/export.py
from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path

import pandas as pd

from .types import DosingRegimen, PDParameters, SimulationConfig, SimulationResult

TIMESERIES_COLUMNS = [
    "Time (hours)",
    "Drug Concentration (μg/mL)",
    "Inhibitor Concentration (μg/mL)",
    "MIC (μg/mL)",
]


def timeseries_frame(result: SimulationResult) -> pd.DataFrame:
    """The full time series as a table, one row per sample."""
    return pd.DataFrame({
        TIMESERIES_COLUMNS[0]: result.times(),
        TIMESERIES_COLUMNS[1]: result.drug(),
        TIMESERIES_COLUMNS[2]: result.inhibitor(),
        TIMESERIES_COLUMNS[3]: result.mic(),
    })


def write_timeseries_csv(result: SimulationResult, path: str | Path) -> Path:
    path = Path(path)
    timeseries_frame(result).to_csv(path, index=False)
    return path


def snapshot(drug: DosingRegimen, inhibitor: DosingRegimen, pd_params: PDParameters,
             config: SimulationConfig, result: SimulationResult,
             timestamp: datetime | None = None) -> dict:
    """
    Bundle every input and output of one run into a JSON-ready dict.
    Non-finite floats (e.g. an exposure ratio over a zero AUC) come out as None.
    """
    ts = timestamp or datetime.now(timezone.utc)
    data = result.to_dict()
    return {
        "exportTimestamp": ts.isoformat(),
        "simulationParameters": {
            "drug": asdict(drug),
            "inhibitor": asdict(inhibitor),
            "pharmacodynamics": asdict(pd_params),
            "simulation": asdict(config),
        },
        "calculatedResults": data["summary"],
        "concentrationData": [
            {"time": s["time_h"], "drug": s["drug_conc"], "inhibitor": s["inhibitor_conc"], "mic": s["mic"]}
            for s in data["samples"]
        ],
        "cycleAnalysis": data["cycles"],
    }


def write_snapshot_json(drug: DosingRegimen, inhibitor: DosingRegimen, pd_params: PDParameters,
                        config: SimulationConfig, result: SimulationResult, path: str | Path) -> Path:
    path = Path(path)
    with path.open("w", encoding="utf-8") as f:
        json.dump(snapshot(drug, inhibitor, pd_params, config, result), f, indent=2)
    return path
