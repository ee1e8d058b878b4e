"""
Tests for analysis options and user preferences.
"""

import json
import math

import pytest

from boutmetrics.binning import TWO_SECOND_EDGES
from boutmetrics.config import (
    AnalysisConfig, get_config_dir, get_last_cohort_labels, get_last_input_folder,
    load_analysis_config, parse_edges, save_analysis_config,
    set_last_cohort_labels, set_last_input_folder,
)
from boutmetrics.errors import ConfigurationError, InvalidEdgesError


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    path = tmp_path / 'prefs'
    monkeypatch.setenv('BOUTMETRICS_CONFIG_DIR', str(path))
    return path


class TestParseEdges:

    def test_string(self):
        assert parse_edges('2, 4, 8, inf') == [2.0, 4.0, 8.0, math.inf]

    def test_list_with_none(self):
        assert parse_edges([0, '4', None]) == [0.0, 4.0, math.inf]

    def test_bad_value(self):
        with pytest.raises(ConfigurationError):
            parse_edges('0, four')


class TestAnalysisConfig:

    def test_defaults_are_valid(self):
        config = AnalysisConfig()
        config.validate()
        binner = config.make_binner()
        assert binner.labels[-1] == '>512s'
        assert config.make_phase_classifier().light_start_hour == 6

    def test_from_dict(self):
        config = AnalysisConfig.from_dict({'bin_edges': '2,4,8,inf', 'light_start_hour': 7,
                                           'dark_start_hour': 19})
        assert config.make_binner().n_bins == 3
        assert config.make_phase_classifier().zt_hour_of(7) == 0

    def test_unknown_key(self):
        with pytest.raises(ConfigurationError):
            AnalysisConfig.from_dict({'bin_width': 4})

    def test_invalid_edges(self):
        with pytest.raises(InvalidEdgesError):
            AnalysisConfig.from_dict({'bin_edges': [8, 4]})

    def test_invalid_hours(self):
        with pytest.raises(ConfigurationError):
            AnalysisConfig.from_dict({'light_start_hour': 30})
        with pytest.raises(ConfigurationError):
            AnalysisConfig.from_dict({'day_boundary_hour': 24})

    @pytest.mark.parametrize('value', ['x', '6', 6.5, None, True, -1])
    def test_day_boundary_hour_must_be_integer_hour(self, value):
        with pytest.raises(ConfigurationError):
            AnalysisConfig.from_dict({'day_boundary_hour': value})

    @pytest.mark.parametrize('value', [5, '', None, ['%Y']])
    def test_timestamp_format_must_be_string(self, value):
        with pytest.raises(ConfigurationError):
            AnalysisConfig.from_dict({'timestamp_format': value})

    def test_file_pattern_must_be_string(self):
        with pytest.raises(ConfigurationError):
            AnalysisConfig.from_dict({'file_pattern': 3})

    def test_round_trip_through_file(self, tmp_path):
        config = AnalysisConfig(bin_edges=list(TWO_SECOND_EDGES), day_boundary_hour=7)
        path = tmp_path / 'analysis.json'
        save_analysis_config(config, path)

        with open(path) as f:
            raw = json.load(f)
        assert raw['bin_edges'][-1] == 'inf'

        loaded = load_analysis_config(path)
        assert loaded.bin_edges == config.bin_edges
        assert loaded.day_boundary_hour == 7

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_analysis_config(tmp_path / 'missing.json')

    def test_invalid_json(self, tmp_path):
        path = tmp_path / 'bad.json'
        path.write_text('{not json')
        with pytest.raises(ConfigurationError):
            load_analysis_config(path)

    def test_day_table_from_config(self):
        config = AnalysisConfig(day_boundary_hour=0)
        table = config.build_day_table(['2023-09-19 05:00:00', '2023-09-19 07:00:00'])
        assert len(table) == 1


class TestPreferences:

    def test_config_dir_override(self, config_dir):
        assert get_config_dir() == config_dir
        assert config_dir.is_dir()

    def test_defaults_when_empty(self, config_dir):
        assert get_last_input_folder() == ''
        assert get_last_cohort_labels() == []

    def test_remember_values(self, config_dir):
        set_last_input_folder('/data/run1')
        set_last_cohort_labels(['wt', 'mut'])
        assert get_last_input_folder() == '/data/run1'
        assert get_last_cohort_labels() == ['wt', 'mut']

    def test_corrupt_preferences_ignored(self, config_dir, capsys):
        config_dir.mkdir(parents=True, exist_ok=True)
        (config_dir / 'config.json').write_text('garbage')
        assert get_last_input_folder() == ''
        assert 'Warning' in capsys.readouterr().out
