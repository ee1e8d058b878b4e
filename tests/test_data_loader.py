"""
Tests for sleep bout file discovery and loading.
"""

import pytest

from boutmetrics.data_loader import DataLoader


HEADER = 'Time,Linear Time,Sleep Bout Duration\n'


def write_bouts(folder, name, rows):
    path = folder / name
    path.write_text(HEADER + ''.join(f'{ts},{lin},{dur}\n' for ts, lin, dur in rows))
    return path


@pytest.fixture
def data_folder(tmp_path):
    write_bouts(tmp_path, '09-18-23SB_2sec_M2.csv', [
        ('2023-09-19 07:00:00', 1, 4),
        ('2023-09-19 20:00:00', 2, 16),
    ])
    write_bouts(tmp_path, '09-18-23SB_2sec_M1.csv', [
        ('2023-09-19 07:00:00', 1, 2),
    ])
    (tmp_path / 'notes.txt').write_text('ignore me')
    (tmp_path / 'summary.csv').write_text(HEADER)
    return tmp_path


class TestDiscovery:

    def test_find_files_sorted_and_filtered(self, data_folder):
        loader = DataLoader()
        names = [p.name for p in loader.find_files(data_folder)]
        assert names == ['09-18-23SB_2sec_M1.csv', '09-18-23SB_2sec_M2.csv']

    def test_missing_folder(self, tmp_path):
        loader = DataLoader()
        assert loader.find_files(tmp_path / 'nope') == []
        assert 'not found' in loader.last_error

    def test_extract_animal_id(self):
        loader = DataLoader()
        assert loader.extract_animal_id('09-18-23SB_2sec_M12.csv') == 'M12'
        assert loader.extract_animal_id('SB_2sec_A.B.csv') == 'A.B'
        assert loader.extract_animal_id('odd_name.csv', 3) == 'Unknown_3'
        assert loader.extract_animal_id('SB_2sec_.csv', 2) == 'Unknown_2'

    def test_discover_animals(self, data_folder):
        animals = DataLoader().discover_animals(data_folder)
        assert list(animals) == ['M1', 'M2']


class TestLoading:

    def test_load_records(self, data_folder):
        loader = DataLoader()
        records = loader.load_records(data_folder / '09-18-23SB_2sec_M2.csv', 'M2')
        assert len(records) == 2
        assert records[0].animal_id == 'M2'
        assert records[0].timestamp == '2023-09-19 07:00:00'
        assert records[1].duration_seconds == 16.0

    def test_bad_durations_dropped(self, tmp_path):
        path = write_bouts(tmp_path, 'SB_2sec_X.csv', [
            ('2023-09-19 07:00:00', 1, 4),
            ('2023-09-19 08:00:00', 2, 'n/a'),
            ('2023-09-19 09:00:00', 3, -5),
            ('2023-09-19 10:00:00', 4, ''),
        ])
        loader = DataLoader()
        records = loader.load_records(path, 'X')
        assert len(records) == 1
        assert loader.dropped_rows['X'] == 3

    def test_bad_timestamps_kept_for_classification(self, tmp_path):
        path = write_bouts(tmp_path, 'SB_2sec_X.csv', [('not-a-date', 1, 4)])
        records = DataLoader().load_records(path, 'X')
        assert records[0].timestamp == 'not-a-date'

    def test_too_few_columns(self, tmp_path):
        path = tmp_path / 'SB_2sec_X.csv'
        path.write_text('Time,Duration\n2023-09-19 07:00:00,4\n')
        loader = DataLoader()
        assert loader.load_records(path, 'X') is None
        assert 'columns' in loader.last_error

    def test_missing_file(self, tmp_path):
        loader = DataLoader()
        assert loader.load_file(tmp_path / 'SB_2sec_none.csv') is None
        assert 'not found' in loader.last_error
