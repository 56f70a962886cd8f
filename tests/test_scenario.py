"""
Tests for the scenario runner.
"""

import pytest
import numpy as np
from unittest.mock import patch

from pybiologic.core.exceptions import ConfigurationError, IntegrationError, SignalNotFoundError
from pybiologic.simulation.kinetics import KineticsEvaluator
from pybiologic.simulation.ode import IntegrationResult, SolverOptions, Trajectory
from pybiologic.simulation.scenario import Scenario, run_scenario

FAST = SolverOptions(atol=1e-14, rtol=1e-9, n_points=201)


class TestScenario:
    """Test cases for the Scenario value type."""

    def test_mappings_are_frozen(self):
        inputs = {'A': 1.0}
        scenario = Scenario(inputs=inputs)
        inputs['A'] = 2.0

        assert scenario.inputs['A'] == 1.0
        with pytest.raises(TypeError):
            scenario.inputs['A'] = 3.0

    def test_defaults(self):
        scenario = Scenario(inputs={})
        assert scenario.horizon == 50.0
        assert scenario.solver == SolverOptions()
        assert dict(scenario.parameter_overrides) == {}

    def test_describe(self):
        scenario = Scenario(inputs={'miR21': 1e-6}, parameter_overrides={'k_leak_gate21': 0.01}, horizon=20.0)
        assert scenario.describe() == "miR21=1e-06, k_leak_gate21=0.01, horizon=20s"


class TestRunScenario:
    """Test cases for run_scenario."""

    def test_signal_peak(self, binding_model):
        scenario = Scenario(inputs={'A': 1.0, 'B': 1.0}, horizon=30.0, solver=FAST)
        trajectory, max_signal = run_scenario(binding_model, scenario, signal_species='D')

        assert max_signal == pytest.approx(trajectory['D'].max())
        # All of A ends up in D eventually; after 30 s almost all of it has
        assert 0.9 < max_signal <= 1.0 + 1e-9

    def test_inputs_and_overrides_apply(self, binding_model):
        low = Scenario(inputs={'A': 0.1, 'B': 0.1}, horizon=10.0, solver=FAST)
        slow = Scenario(inputs={'A': 0.1, 'B': 0.1}, parameter_overrides={'k_out': 0.01},
                        horizon=10.0, solver=FAST)
        _, peak_low = run_scenario(binding_model, low, signal_species='D')
        _, peak_slow = run_scenario(binding_model, slow, signal_species='D')

        assert peak_low <= 0.1 + 1e-9
        assert peak_slow < peak_low

    def test_base_model_untouched(self, binding_model):
        y0 = binding_model.initial_state().copy()
        params = binding_model.parameter_values()
        scenario = Scenario(inputs={'A': 5.0}, parameter_overrides={'k_on': 9.0}, horizon=1.0, solver=FAST)
        run_scenario(binding_model, scenario, signal_species='D')

        np.testing.assert_array_equal(binding_model.initial_state(), y0)
        assert binding_model.parameter_values() == params

    def test_deterministic(self, gate_model, gate_evaluator):
        scenario = Scenario(inputs={'miR21': 1e-6, 'miR155': 1e-6, 'miR34': 0.0}, horizon=20.0,
                            solver=SolverOptions(atol=1e-18, rtol=1e-8, n_points=201))
        first = run_scenario(gate_model, scenario, evaluator=gate_evaluator)
        second = run_scenario(gate_model, scenario, evaluator=gate_evaluator)

        assert first[1] == second[1]
        np.testing.assert_array_equal(first[0].y, second[0].y)

    def test_incompatible_evaluator_is_replaced(self, binding_model, gate_evaluator):
        scenario = Scenario(inputs={'A': 1.0}, horizon=1.0, solver=FAST)
        trajectory, _ = run_scenario(binding_model, scenario, evaluator=gate_evaluator, signal_species='D')
        assert trajectory.species_names == ('A', 'B', 'C', 'D')

    def test_unknown_input(self, binding_model):
        with pytest.raises(ConfigurationError, match="Unknown species"):
            run_scenario(binding_model, Scenario(inputs={'miR99': 1.0}), signal_species='D')

    def test_unknown_parameter(self, binding_model):
        scenario = Scenario(inputs={}, parameter_overrides={'k_missing': 1.0})
        with pytest.raises(ConfigurationError, match="Unknown parameters"):
            run_scenario(binding_model, scenario, signal_species='D')

    def test_missing_signal(self, binding_model):
        scenario = Scenario(inputs={}, horizon=1.0, solver=FAST)
        with pytest.raises(SignalNotFoundError, match="'Signal'"):
            run_scenario(binding_model, scenario)

    def test_negative_samples_are_clamped(self, binding_model):
        raw = Trajectory(np.array([0.0, 1.0]),
                         np.array([[1.0, 0.5], [1.0, 0.5], [0.0, -1e-20], [-1e-20, -3e-21]]),
                         ('A', 'B', 'C', 'D'))
        with patch('pybiologic.simulation.scenario.integrate', return_value=IntegrationResult(True, raw)):
            trajectory, max_signal = run_scenario(binding_model, Scenario(inputs={}), signal_species='D')

        assert max_signal == 0.0
        assert (trajectory.y >= 0).all()

    def test_integration_failure_propagates(self, binding_model):
        failed = IntegrationResult(False, None, "Required step size is less than spacing between numbers.", -1)
        with patch('pybiologic.simulation.scenario.integrate', return_value=failed):
            with pytest.raises(IntegrationError, match="Required step size"):
                run_scenario(binding_model, Scenario(inputs={}), signal_species='D')
