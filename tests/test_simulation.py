"""
Tests for simulation modules.

This module tests:
- Compiled kinetics
- The stiff integrator and its failure reporting
- Trajectory helpers
- Integration between models and simulators
"""

import pytest
import numpy as np
from unittest.mock import patch, MagicMock

from pybiologic.core.exceptions import ConfigurationError, IntegrationError
from pybiologic.simulation.kinetics import KineticsEvaluator
from pybiologic.simulation.ode import (IntegrationResult, SolverOptions, Trajectory,
                                       integrate, simulate_ode)


class TestKineticsEvaluator:
    """Test cases for KineticsEvaluator."""

    def test_derivative(self, binding_model):
        evaluator = KineticsEvaluator.from_model(binding_model)
        y0 = binding_model.initial_state()
        params = binding_model.parameter_values()

        # bind = 2 * 1 * 1, output = 0.5 * 0
        np.testing.assert_allclose(evaluator.derivative(0.0, y0, *params), [-2.0, -2.0, 2.0, 0.0])
        np.testing.assert_allclose(evaluator(0.0, y0, *params), [-2.0, -2.0, 2.0, 0.0])

    def test_fluxes(self, binding_model):
        evaluator = KineticsEvaluator.from_model(binding_model)
        y = np.array([1.0, 0.5, 2.0, 0.0])
        np.testing.assert_allclose(evaluator.fluxes(y, 2.0, 0.5), [1.0, 1.0])

    def test_derivative_is_S_times_fluxes(self, gate_model, gate_evaluator):
        rng = np.random.default_rng(0)
        y = rng.uniform(0, 1e-6, len(gate_model.species))
        params = gate_model.parameter_values()

        expected = gate_evaluator.S @ gate_evaluator.fluxes(y, *params)
        np.testing.assert_allclose(gate_evaluator.derivative(0.0, y, *params), expected, rtol=1e-10, atol=1e-18)

    def test_jacobian_matches_finite_differences(self, gate_model, gate_evaluator):
        rng = np.random.default_rng(1)
        y = rng.uniform(1e-7, 1e-6, len(gate_model.species))
        params = gate_model.parameter_values()

        jac = gate_evaluator.jacobian(0.0, y, *params)
        h = 1e-9
        for k in range(len(y)):
            step = np.zeros_like(y)
            step[k] = h
            column = (gate_evaluator.derivative(0.0, y + step, *params)
                      - gate_evaluator.derivative(0.0, y - step, *params)) / (2 * h)
            np.testing.assert_allclose(jac[:, k], column, rtol=1e-6, atol=1e-9)

    def test_is_compatible(self, gate_model, gate_evaluator, binding_model):
        assert gate_evaluator.is_compatible(gate_model)
        assert gate_evaluator.is_compatible(gate_model.override(parameters={'k_deg': 1.0}))
        assert not gate_evaluator.is_compatible(binding_model)

    def test_compile_is_lazy(self, decay_model):
        evaluator = KineticsEvaluator(decay_model)
        assert evaluator._compiled is None
        evaluator.derivative(0.0, np.array([1.0]), 0.5)
        assert evaluator._compiled is not None

    def test_no_reactions(self):
        from pybiologic.core.models import Species, SystemModel
        model = SystemModel("static").add_species(Species('A', initial_condition=1.0))
        evaluator = KineticsEvaluator.from_model(model)
        assert evaluator.fluxes(np.array([1.0])).size == 0
        np.testing.assert_array_equal(evaluator.derivative(0.0, np.array([1.0])), [0.0])


class TestSolverOptions:
    """Test cases for SolverOptions validation."""

    def test_defaults(self):
        options = SolverOptions()
        assert options.atol == 1e-20
        assert options.rtol == 1e-12
        assert options.max_step == 0.5
        assert options.method == 'BDF'

    def test_non_stiff_method_rejected(self):
        with pytest.raises(ConfigurationError, match="must be one of"):
            SolverOptions(method='RK45')

    @pytest.mark.parametrize("kwargs", [{'atol': 0.0}, {'rtol': -1.0}, {'max_step': 0.0}, {'n_points': 1}])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigurationError):
            SolverOptions(**kwargs)

    def test_with_overrides(self):
        options = SolverOptions().with_overrides(method='LSODA')
        assert options.method == 'LSODA'
        assert options.rtol == 1e-12


class TestIntegrate:
    """Test cases for integrate."""

    def test_exponential_decay(self, decay_model):
        evaluator = KineticsEvaluator.from_model(decay_model)
        result = integrate(evaluator, decay_model.initial_state(), 10.0,
                           options=SolverOptions(atol=1e-12, rtol=1e-10, n_points=101),
                           params=decay_model.parameter_values())

        assert result.success
        trajectory = result.unwrap()
        assert trajectory.species_names == ('A',)
        assert len(trajectory) == 101
        np.testing.assert_allclose(trajectory['A'], 2.0 * np.exp(-0.5 * trajectory.t), rtol=1e-6)

    @pytest.mark.parametrize("method", ['BDF', 'LSODA', 'Radau'])
    def test_stiff_methods(self, decay_model, method):
        evaluator = KineticsEvaluator.from_model(decay_model)
        trajectory = integrate(evaluator, [2.0], 4.0, options=SolverOptions(atol=1e-12, rtol=1e-9, method=method),
                               params=(0.5,)).unwrap()
        assert trajectory['A'][-1] == pytest.approx(2.0 * np.exp(-2.0), rel=1e-5)

    def test_plain_function(self):
        """Any f(t, y) works; species get positional names."""
        trajectory = integrate(lambda t, y: -y, [1.0, 2.0], 1.0,
                               options=SolverOptions(atol=1e-12, rtol=1e-10)).unwrap()
        assert trajectory.species_names == ('x0', 'x1')
        assert trajectory['x1'][-1] == pytest.approx(2.0 * np.exp(-1.0), rel=1e-6)

    def test_solver_output_times(self):
        trajectory = integrate(lambda t, y: -y, [1.0], 2.0,
                               options=SolverOptions(n_points=None)).unwrap()
        assert trajectory.t[0] == 0.0
        assert trajectory.t[-1] == pytest.approx(2.0)

    def test_non_positive_horizon(self):
        with pytest.raises(ConfigurationError, match="horizon"):
            integrate(lambda t, y: -y, [1.0], 0.0)

    def test_solver_failure_is_reported(self):
        failed = MagicMock(success=False, status=-1,
                           message="Required step size is less than spacing between numbers.")
        with patch('pybiologic.simulation.ode.solve_ivp', return_value=failed):
            result = integrate(lambda t, y: -y, [1.0], 1.0)

        assert not result.success
        assert result.trajectory is None
        assert result.status == -1
        with pytest.raises(IntegrationError, match="Required step size") as excinfo:
            result.unwrap()
        assert excinfo.value.status == -1

    def test_non_finite_solution_is_reported(self):
        solution = MagicMock(success=True, status=0, message="ok",
                             t=np.array([0.0, 1.0]), y=np.array([[1.0, np.nan]]))
        with patch('pybiologic.simulation.ode.solve_ivp', return_value=solution):
            result = integrate(lambda t, y: -y, [1.0], 1.0)

        assert not result.success
        with pytest.raises(IntegrationError, match="non-finite"):
            result.unwrap()


class TestTrajectory:
    """Test cases for Trajectory helpers."""

    def setup_method(self):
        self.trajectory = Trajectory(np.array([0.0, 1.0, 2.0]),
                                     np.array([[1.0, -1e-22, 0.5], [0.0, 2.0, 3.0]]),
                                     ('A', 'Signal'))

    def test_lookup(self):
        assert 'Signal' in self.trajectory
        assert 'Missing' not in self.trajectory
        np.testing.assert_array_equal(self.trajectory['Signal'], [0.0, 2.0, 3.0])
        with pytest.raises(KeyError):
            self.trajectory['Missing']

    def test_clamped(self):
        clamped = self.trajectory.clamped()
        np.testing.assert_array_equal(clamped['A'], [1.0, 0.0, 0.5])
        # The original keeps the solver's raw values
        assert self.trajectory['A'][1] < 0

    def test_to_frame(self):
        df = self.trajectory.to_frame()
        assert list(df.columns) == ['time', 'A', 'Signal']
        assert df['Signal'].tolist() == [0.0, 2.0, 3.0]

    def test_integration_result_success(self):
        result = IntegrationResult(True, self.trajectory)
        assert result.unwrap() is self.trajectory


class TestODESimulation:
    """Test cases for simulate_ode."""

    def test_simulate_ode_basic(self, decay_model):
        """Test basic ODE simulation."""
        result = simulate_ode(decay_model, (0, 10))

        assert result['success'] is True
        solution = result['solution']
        assert solution.y.shape == (1, 1000)
        assert solution.y[0, 0] == 2.0
        assert solution.y[0, -1] < 2.0

    def test_simulate_ode_custom_times(self, decay_model):
        """Test ODE simulation with custom time points."""
        t_eval = np.linspace(0, 5, 11)
        result = simulate_ode(decay_model, (0, 5), t_eval=t_eval)

        np.testing.assert_array_almost_equal(result['solution'].t, t_eval)
        assert result['sim_data']['species_names'] == ['A']

    def test_simulate_ode_mass_conservation(self, binding_model):
        """A + C + D is conserved in A + B -> C -> D."""
        result = simulate_ode(binding_model, (0, 10), rtol=1e-10, atol=1e-12)
        y = result['solution'].y
        np.testing.assert_allclose(y[0] + y[2] + y[3], 1.0, rtol=1e-6)
