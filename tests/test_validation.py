import math

import numpy as np
import pytest

from pkpdengine.types import DosingRegimen, SimulationConfig, OptimizationTarget, ValidationError
from pkpdengine.validation import (
    validate_regimen, validate_simulation_config, validate_target, validate_inputs,
)
from pkpdengine.dosing import infusion_regimen
from pkpdengine.config import DEFAULT_DRUG, default_inputs


def test_valid_regimen_has_no_violations():
    reg = DosingRegimen(dosing_interval_h=24, infusion_time_h=1, half_life_h=6, max_concentration=100)
    assert validate_regimen(reg) == []


def test_zero_interval_reported():
    reg = DosingRegimen(dosing_interval_h=0, infusion_time_h=1, half_life_h=6, max_concentration=100)
    errors = validate_regimen(reg)
    assert "Dosing interval must be positive" in errors
    # infusion of 1 h no longer fits in a 0 h interval either
    assert "Infusion time cannot exceed dosing interval" in errors


def test_all_violations_reported_in_order():
    reg = DosingRegimen(dosing_interval_h=-3, infusion_time_h=-2, half_life_h=0, max_concentration=-5)
    assert validate_regimen(reg) == [
        "Dosing interval must be positive",
        "Infusion time must be non-negative",
        "Infusion time cannot exceed dosing interval",
        "Half-life must be positive",
        "Max concentration must be positive",
    ]


def test_infusion_may_fill_whole_interval():
    reg = DosingRegimen(dosing_interval_h=8, infusion_time_h=8, half_life_h=2, max_concentration=10)
    assert validate_regimen(reg) == []


@pytest.mark.parametrize("cfg, message", [
    (SimulationConfig(num_cycles=3, time_step_h=0.0), "Time step must be positive"),
    (SimulationConfig(num_cycles=3, time_step_h=-0.1), "Time step must be positive"),
    (SimulationConfig(num_cycles=0, time_step_h=0.1), "Number of cycles must be between 1 and 10"),
    (SimulationConfig(num_cycles=11, time_step_h=0.1), "Number of cycles must be between 1 and 10"),
])
def test_simulation_config_rejected(cfg, message):
    assert validate_simulation_config(cfg) == [message]


def test_target_rules():
    assert validate_target(OptimizationTarget(2.0, 50.0, 80.0)) == []
    assert validate_target(OptimizationTarget(2.0, 50.0, 100.0)) == []
    assert validate_target(OptimizationTarget(0.0, 50.0, 80.0)) == [
        "Minimum effective concentration must be positive"]
    assert validate_target(OptimizationTarget(60.0, 50.0, 80.0)) == [
        "Minimum effective concentration must be less than maximum safe concentration"]
    assert validate_target(OptimizationTarget(2.0, 50.0, 0.0)) == ["Target T>MIC must be between 1% and 100%"]
    assert validate_target(OptimizationTarget(2.0, 50.0, 100.5)) == ["Target T>MIC must be between 1% and 100%"]


def test_validate_inputs_labels_each_compound():
    bad_drug = DosingRegimen(dosing_interval_h=24, infusion_time_h=1, half_life_h=0, max_concentration=100)
    bad_inhibitor = DosingRegimen(dosing_interval_h=24, infusion_time_h=1, half_life_h=8, max_concentration=0)
    with pytest.raises(ValidationError) as exc:
        validate_inputs(bad_drug, bad_inhibitor, SimulationConfig(num_cycles=3, time_step_h=0))
    assert exc.value.messages == [
        "Drug: Half-life must be positive",
        "Inhibitor: Max concentration must be positive",
        "Time step must be positive",
    ]
    assert isinstance(exc.value, ValueError)


def test_defaults_are_valid():
    drug, inhibitor, _, sim = default_inputs()
    validate_inputs(drug, inhibitor, sim)


def test_infusion_regimen_builder():
    reg = infusion_regimen(100, every_h=24, infusion_h=1, half_life_h=6)
    assert reg == DEFAULT_DRUG
    with pytest.raises(ValidationError, match="Half-life must be positive"):
        infusion_regimen(100, every_h=24, infusion_h=1, half_life_h=0)


def test_time_step_below_minimum_rejected():
    assert validate_simulation_config(SimulationConfig(num_cycles=10, time_step_h=1e-7)) == [
        "Time step must be at least 0.01"]
    assert validate_simulation_config(SimulationConfig(num_cycles=10, time_step_h=0.01)) == []
    with pytest.raises(ValidationError, match="Time step must be at least 0.01"):
        validate_inputs(DEFAULT_DRUG, DEFAULT_DRUG, SimulationConfig(num_cycles=10, time_step_h=0.001))


def test_num_cycles_accepts_numpy_ints_but_not_bools():
    assert validate_simulation_config(SimulationConfig(num_cycles=np.int64(3), time_step_h=0.1)) == []
    assert validate_simulation_config(SimulationConfig(num_cycles=True, time_step_h=0.1)) == [
        "Number of cycles must be between 1 and 10"]
    assert validate_simulation_config(SimulationConfig(num_cycles=3.0, time_step_h=0.1)) == [
        "Number of cycles must be between 1 and 10"]


def test_nan_infusion_time_rejected():
    reg = DosingRegimen(dosing_interval_h=24, infusion_time_h=math.nan, half_life_h=6, max_concentration=100)
    assert validate_regimen(reg) == [
        "Infusion time must be non-negative",
        "Infusion time cannot exceed dosing interval",
    ]
