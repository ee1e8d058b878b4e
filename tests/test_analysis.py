"""
End-to-end tests for SleepBoutAnalyzer.
"""

from datetime import date

import numpy as np
import pytest

from boutmetrics.analysis import SleepBoutAnalyzer, report_lines
from boutmetrics.cohorts import CohortAssignment
from boutmetrics.errors import CohortPartitionError, EmptyCohortError
from boutmetrics.sleep_analysis import BoutRecord


class TestAnalyzeFolder:

    def test_day_table_spans_all_animals(self, analysis_result):
        table = analysis_result.day_table
        assert table.dates == (date(2023, 9, 18), date(2023, 9, 19), date(2023, 9, 20))

    def test_unassigned_animal_excluded(self, analysis_result):
        assert analysis_result.unassigned_animals == ['M9']
        assert analysis_result.get_animal('M9') is None
        assert [a.animal_id for a in analysis_result.animals_in('wild-type')] == ['M1', 'M2']

    def test_per_animal_bins(self, analysis_result):
        m1 = analysis_result.get_animal('M1')
        assert m1.sleep_bin_counts.tolist() == [2, 1, 0, 1, 0]
        assert m1.light_bin_counts.tolist() == [2, 0, 0, 0, 0]
        assert m1.dark_bin_counts.tolist() == [0, 1, 0, 1, 0]

        m2 = analysis_result.get_animal('M2')
        assert m2.sleep_bin_counts.tolist() == [0, 1, 1, 0, 1]
        assert m2.n_skipped == 1
        assert m2.n_processed == 3

    def test_cohort_statistics(self, analysis_result):
        wt = analysis_result.summaries['wild-type']
        np.testing.assert_allclose(wt.bins['sleep'].mean, [1, 1, 0.5, 0.5, 0.5])
        assert wt.totals['total_sleep'].mean == pytest.approx(3.5)
        assert wt.totals['total_sleep'].std == pytest.approx(np.sqrt(0.5))
        assert wt.n_animals == 2

        mutant = analysis_result.summaries['mutant']
        np.testing.assert_allclose(mutant.bins['sleep'].mean, [1, 0, 0, 0, 1])
        np.testing.assert_allclose(mutant.bins['sleep'].std, [0, 0, 0, 0, 0])

    def test_per_day_n(self, analysis_result):
        wt = analysis_result.summaries['wild-type']
        assert wt.per_day[1]['sleep'].n == 0
        assert wt.per_day[2]['sleep'].n == 2
        assert wt.per_day[3]['sleep'].n == 1

        mutant = analysis_result.summaries['mutant']
        assert mutant.per_day[1]['dark'].mean.tolist() == [1, 0, 0, 0, 0]
        assert mutant.per_day[3]['sleep'].n == 0

    def test_record_totals(self, analysis_result):
        assert analysis_result.total_records == 10
        assert analysis_result.total_skipped == 1
        assert analysis_result.bin_labels == ['2-4s', '4-8s', '8-16s', '16-32s', '>32s']

    def test_report(self, analysis_result):
        lines = report_lines(analysis_result)
        assert any('M2' in line and '1 skipped' in line for line in lines)
        assert any('not-a-date' in line for line in lines)
        assert any('M9' in line for line in lines)


class TestAnalyze:

    def records(self, animal_id, rows):
        return [BoutRecord(animal_id, ts, d) for ts, d in rows]

    def test_overlapping_cohorts_rejected(self):
        cohorts = CohortAssignment.from_args(['wt=A', 'mut=A'])
        with pytest.raises(CohortPartitionError):
            SleepBoutAnalyzer(verbose=False).analyze({'A': []}, cohorts)

    def test_no_cohorts_rejected(self):
        with pytest.raises(EmptyCohortError):
            SleepBoutAnalyzer(verbose=False).analyze({'A': []}, CohortAssignment())

    def test_input_order_does_not_change_days(self, edges_config):
        a = self.records('A', [('2023-09-21 12:00:00', 4)])
        b = self.records('B', [('2023-09-19 12:00:00', 4)])
        cohorts = CohortAssignment.from_args(['wt=A,B'])
        analyzer = SleepBoutAnalyzer(edges_config, verbose=False)

        first = analyzer.analyze({'A': a, 'B': b}, cohorts)
        second = analyzer.analyze({'B': b, 'A': a}, cohorts)

        assert first.get_animal('A').days == second.get_animal('A').days == [2]
        assert first.get_animal('B').days == second.get_animal('B').days == [1]

    def test_threaded_matches_sequential(self, edges_config):
        animal_records = {
            f'A{i}': self.records(f'A{i}', [(f'2023-09-19 {h:02d}:00:00', h + i) for h in range(24)])
            for i in range(6)
        }
        cohorts = CohortAssignment.from_args(['wt=A0,A1,A2', 'mut=A3,A4,A5'])

        sequential = SleepBoutAnalyzer(edges_config, max_workers=1, verbose=False).analyze(animal_records, cohorts)
        threaded = SleepBoutAnalyzer(edges_config, max_workers=4, verbose=False).analyze(animal_records, cohorts)

        for label in ('wt', 'mut'):
            np.testing.assert_array_equal(sequential.summaries[label].bins['sleep'].mean,
                                          threaded.summaries[label].bins['sleep'].mean)
        assert [a.animal_id for a in threaded.animals] == [f'A{i}' for i in range(6)]

    def test_cohort_member_without_file(self, edges_config, capsys):
        cohorts = CohortAssignment.from_args(['wt=A,GHOST'])
        result = SleepBoutAnalyzer(edges_config).analyze(
            {'A': self.records('A', [('2023-09-19 12:00:00', 4)])}, cohorts)
        assert result.summaries['wt'].n_animals == 1
        assert 'GHOST' in capsys.readouterr().out
