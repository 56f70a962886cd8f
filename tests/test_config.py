"""
Tests for the operating configuration.
"""

import pytest

from pybiologic.config import OperatingConfig
from pybiologic.core.exceptions import ConfigurationError
from pybiologic.simulation.ode import SolverOptions


class TestOperatingConfig:
    """Test cases for OperatingConfig."""

    def test_defaults(self):
        config = OperatingConfig()
        assert config.conc_high == 1e-6
        assert config.conc_low == 0.0
        assert config.stop_time == 50.0
        assert config.dynamics_time == 20.0
        assert config.dose_response_time == 30.0
        assert config.solver == SolverOptions()
        assert config.n_jobs == 1
        assert config.signal_species == "Signal"

    def test_level(self):
        config = OperatingConfig(conc_high=2e-6, conc_low=1e-9)
        assert config.level(1) == 2e-6
        assert config.level(0) == 1e-9

    @pytest.mark.parametrize("kwargs", [
        {'conc_high': 0.0},
        {'conc_low': -1e-9},
        {'conc_low': 1e-6},
        {'stop_time': 0.0},
        {'dose_response_time': -1.0},
        {'n_jobs': 0},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ConfigurationError):
            OperatingConfig(**kwargs)

    def test_with_overrides_ignores_none(self):
        config = OperatingConfig().with_overrides(n_jobs=4, conc_high=None)
        assert config.n_jobs == 4
        assert config.conc_high == 1e-6

    def test_from_dict(self):
        config = OperatingConfig.from_dict({
            'conc_high': 5e-7,
            'stop_time': 40,
            'solver': {'method': 'Radau', 'rtol': 1e-9},
        })
        assert config.conc_high == 5e-7
        assert config.stop_time == 40.0
        assert config.solver.method == 'Radau'
        assert config.solver.rtol == 1e-9
        assert config.solver.atol == 1e-20

    def test_to_dict_round_trip(self):
        config = OperatingConfig(conc_high=2e-6, solver=SolverOptions(method='LSODA'))
        assert OperatingConfig.from_dict(config.to_dict()) == config

    def test_unknown_keys(self):
        with pytest.raises(ConfigurationError, match="Unknown configuration keys"):
            OperatingConfig.from_dict({'conc_hi': 1e-6})
        with pytest.raises(ConfigurationError, match="Unknown solver keys"):
            OperatingConfig.from_dict({'solver': {'tolerance': 1e-6}})

    def test_bad_value(self):
        with pytest.raises(ConfigurationError):
            OperatingConfig.from_dict({'conc_high': 'high'})
        with pytest.raises(ConfigurationError, match="must be one of"):
            OperatingConfig.from_dict({'solver': {'method': 'RK45'}})

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "conc_high: 1e-6\n"
            "conc_low: 0\n"
            "stop_time: 60\n"
            "n_jobs: 2\n"
            "solver:\n"
            "  atol: 1e-18\n"
            "  rtol: 1.0e-8\n"
        )
        config = OperatingConfig.from_yaml(path)
        assert config.conc_high == 1e-6
        assert config.stop_time == 60.0
        assert config.n_jobs == 2
        assert config.solver.atol == 1e-18
        assert config.solver.rtol == 1e-8

    def test_from_yaml_empty(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert OperatingConfig.from_yaml(path) == OperatingConfig()

    def test_from_yaml_missing(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            OperatingConfig.from_yaml(tmp_path / "missing.yaml")

    def test_from_yaml_not_a_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigurationError, match="does not contain a mapping"):
            OperatingConfig.from_yaml(path)

    def test_from_yaml_not_utf8(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_bytes(b"conc_high: \xff\n")
        with pytest.raises(ConfigurationError, match="Could not parse"):
            OperatingConfig.from_yaml(path)
