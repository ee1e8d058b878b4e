"""
Shared fixtures: a small folder of sleep bout files for two genotypes.
"""

import pytest

from boutmetrics.analysis import SleepBoutAnalyzer
from boutmetrics.cohorts import CohortAssignment
from boutmetrics.config import AnalysisConfig


HEADER = 'Time,Linear Time,Sleep Bout Duration\n'

BOUT_FILES = {
    'M1': [
        ('2023-09-19 07:00:00', 2),
        ('2023-09-19 08:00:00', 2),
        ('2023-09-19 20:00:00', 5),
        ('2023-09-20 01:00:00', 20),
    ],
    'M2': [
        ('2023-09-19 09:00:00', 4),
        ('2023-09-19 22:00:00', 40),
        ('2023-09-20 10:00:00', 8),
        ('not-a-date', 8),
    ],
    'M3': [
        ('2023-09-19 05:30:00', 3),
        ('2023-09-19 12:00:00', 100),
    ],
    'M9': [
        ('2023-09-19 12:00:00', 3),
    ],
}


def write_bout_folder(folder):
    for animal_id, rows in BOUT_FILES.items():
        lines = [f'{ts},{i},{dur}\n' for i, (ts, dur) in enumerate(rows)]
        (folder / f'09-18-23SB_2sec_{animal_id}.csv').write_text(HEADER + ''.join(lines))
    return folder


@pytest.fixture
def bout_folder(tmp_path):
    folder = tmp_path / 'data'
    folder.mkdir()
    return write_bout_folder(folder)


@pytest.fixture
def cohorts():
    return CohortAssignment.from_args(['wild-type=M1,M2', 'mutant=M3'])


@pytest.fixture
def edges_config():
    return AnalysisConfig(bin_edges=[2, 4, 8, 16, 32, float('inf')])


@pytest.fixture
def analysis_result(bout_folder, cohorts, edges_config):
    analyzer = SleepBoutAnalyzer(edges_config, verbose=False)
    return analyzer.analyze_folder(bout_folder, cohorts)
