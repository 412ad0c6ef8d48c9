"""
Unit tests for configuration loading and validation.
"""

import pytest
import toml


class TestDefaults:
    """Test built-in defaults."""

    def test_defaults_are_lhc_values(self):
        from t0_monitor.config import MonitorConfig

        config = MonitorConfig()

        assert config.max_bunches_per_orbit == 3564
        assert config.bc_duration_ps == pytest.approx(24950.78, abs=0.1)
        assert config.gap_threshold_ps == 100000
        assert config.match_window_bc == 8
        assert config.max_consensus_uncertainty_ps == 150
        assert config.hypotheses == ("pion", "kaon", "proton")

    def test_defaults_validate(self):
        from t0_monitor.config import MonitorConfig

        config = MonitorConfig()
        assert config.validate() is config


class TestFromDict:
    """Test building from parsed TOML."""

    def test_partial_sections_keep_defaults(self):
        from t0_monitor.config import MonitorConfig

        config = MonitorConfig.from_dict({
            'clustering': {'gap_threshold_ps': 50000.0},
            'estimator': {'hypotheses': ['pion', 'proton']},
        })

        assert config.gap_threshold_ps == 50000.0
        assert config.hypotheses == ('pion', 'proton')
        assert config.match_window_bc == 8

    def test_unknown_keys_ignored(self):
        from t0_monitor.config import MonitorConfig

        config = MonitorConfig.from_dict({'matching': {'colour': 'blue'}, 'extra': {}})

        assert config.match_window_bc == 8

    def test_section_must_be_table(self):
        from t0_monitor.config import MonitorConfig
        from t0_monitor.exceptions import ConfigurationError

        with pytest.raises(ConfigurationError):
            MonitorConfig.from_dict({'timing': 25000})

    def test_numeric_strings_converted(self):
        from t0_monitor.config import MonitorConfig

        config = MonitorConfig.from_dict({
            'timing': {'bc_duration_ps': "25000", 'max_bunches_per_orbit': 100.0},
            'matching': {'match_window_bc': "8"},
        }).validate()

        assert config.bc_duration_ps == 25000.0
        assert isinstance(config.max_bunches_per_orbit, int)
        assert config.match_window_bc == 8

    @pytest.mark.parametrize("section,key,value", [
        ('timing', 'bc_duration_ps', "fast"),
        ('matching', 'match_window_bc', 8.5),
        ('matching', 'match_window_bc', [8]),
        ('clustering', 'gap_threshold_ps', True),
        ('output', 'write_json', "false"),
        ('output', 'output_dir', 42),
        ('estimator', 'hypotheses', "pion"),
    ])
    def test_wrong_type_rejected(self, section, key, value):
        from t0_monitor.config import MonitorConfig
        from t0_monitor.exceptions import ConfigurationError

        with pytest.raises(ConfigurationError):
            MonitorConfig.from_dict({section: {key: value}})

    def test_to_dict_round_trip(self):
        from t0_monitor.config import MonitorConfig

        config = MonitorConfig(match_window_bc=4, min_pt=0.3)

        assert MonitorConfig.from_dict(config.to_dict()) == config


class TestValidation:
    """Test rejection of inconsistent values."""

    @pytest.mark.parametrize("field,value", [
        ('bc_duration_ps', 0.0),
        ('max_bunches_per_orbit', 0),
        ('half_bc_offset_ps', -1.0),
        ('gap_threshold_ps', -1.0),
        ('match_window_bc', -1),
        ('max_consensus_uncertainty_ps', 0.0),
        ('record_resolution_ps', -5.0),
        ('outlier_sigma', 0.0),
        ('hypotheses', ()),
    ])
    def test_invalid_value_rejected(self, field, value):
        from t0_monitor.config import MonitorConfig
        from t0_monitor.exceptions import ConfigurationError

        with pytest.raises(ConfigurationError):
            MonitorConfig(**{field: value}).validate()

    def test_non_numeric_value_rejected(self):
        from t0_monitor.config import MonitorConfig
        from t0_monitor.exceptions import ConfigurationError

        with pytest.raises(ConfigurationError):
            MonitorConfig(match_window_bc="8").validate()

    def test_zero_window_and_gap_allowed(self):
        from t0_monitor.config import MonitorConfig

        MonitorConfig(gap_threshold_ps=0.0, match_window_bc=0).validate()


class TestLoadConfig:
    """Test reading TOML files."""

    def test_load_file(self, tmp_path):
        from t0_monitor.config import load_config

        path = tmp_path / "config.toml"
        path.write_text(toml.dumps({
            'timing': {'bc_duration_ps': 25000.0, 'max_bunches_per_orbit': 100},
            'output': {'write_json': False},
        }))

        config = load_config(str(path))

        assert config.bc_duration_ps == 25000.0
        assert config.max_bunches_per_orbit == 100
        assert config.write_json is False

    def test_missing_file_uses_defaults(self, tmp_path):
        from t0_monitor.config import load_config, MonitorConfig

        assert load_config(str(tmp_path / "absent.toml")) == MonitorConfig()

    def test_no_path_uses_defaults(self):
        from t0_monitor.config import load_config, MonitorConfig

        assert load_config() == MonitorConfig()

    def test_invalid_file_values_rejected(self, tmp_path):
        from t0_monitor.config import load_config
        from t0_monitor.exceptions import ConfigurationError

        path = tmp_path / "config.toml"
        path.write_text("[matching]\nmatch_window_bc = -2\n")

        with pytest.raises(ConfigurationError):
            load_config(str(path))

    def test_malformed_toml_rejected(self, tmp_path):
        from t0_monitor.config import load_config
        from t0_monitor.exceptions import ConfigurationError

        path = tmp_path / "config.toml"
        path.write_text("[timing\nbc_duration_ps = \n")

        with pytest.raises(ConfigurationError):
            load_config(str(path))

    def test_wrong_type_in_file_rejected(self, tmp_path):
        from t0_monitor.config import load_config
        from t0_monitor.exceptions import ConfigurationError

        path = tmp_path / "config.toml"
        path.write_text('[matching]\nmatch_window_bc = "eight"\n')

        with pytest.raises(ConfigurationError):
            load_config(str(path))
