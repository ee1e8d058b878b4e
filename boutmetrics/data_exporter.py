"""
Data exporter module for sleep bout analysis results.

Writes one Excel workbook with these sheets:
- Mouse_Data: binned bout counts per animal (all sleep)
- Mouse_Data_LD: binned bout counts per animal (light / dark phase)
- Genotype_Statistics: cohort mean / SD / SEM (all sleep)
- Genotype_Statistics_LD: cohort mean / SD / SEM (light / dark phase)
- Mouse_Genotypes: animal -> cohort mapping
- Mouse_Summary: per-animal record counts and duration statistics
- Daily_Statistics: cohort statistics per experimental day
- ZT_Statistics: cohort statistics per ZT hour
- Mouse_ZT: bout counts and durations per ZT hour per animal

Bin sheets start with a 'Total' row holding the total bout count.
"""

import numpy as np
import pandas as pd
from pathlib import Path
from typing import Dict, List

from .analysis import AnalysisResult
from .phase import HOURS_PER_DAY
from .sleep_analysis import CATEGORIES, aggregates_to_dataframe


STAT_NAMES = (('mean', 'Mean'), ('std', 'SD'), ('sem', 'SEM'))


class DataExporter:
    """Export analysis results to an Excel workbook."""

    DEFAULT_FILENAME = 'sleep_bout_analysis.xlsx'

    def __init__(self):
        pass

    def export_workbook(self, result: AnalysisResult, output_path) -> str:
        """
        Write all sheets to an Excel file.

        Args:
            result: Analysis results
            output_path: File path, or a folder (DEFAULT_FILENAME is used)

        Returns:
            Path of the written workbook
        """
        path = Path(output_path)
        if path.is_dir() or not path.suffix:
            path = path / self.DEFAULT_FILENAME
        path.parent.mkdir(parents=True, exist_ok=True)

        tables = self.build_tables(result)
        with pd.ExcelWriter(str(path), engine='openpyxl') as writer:
            for sheet_name, df in tables.items():
                df.to_excel(writer, sheet_name=sheet_name, index=False)

        return str(path)

    def build_tables(self, result: AnalysisResult) -> Dict[str, pd.DataFrame]:
        """Build every sheet as a DataFrame, keyed by sheet name."""
        return {
            'Mouse_Data': self._mouse_bins_table(result, ('sleep',)),
            'Mouse_Data_LD': self._mouse_bins_table(result, ('light', 'dark')),
            'Genotype_Statistics': self._cohort_bins_table(result, ('sleep',)),
            'Genotype_Statistics_LD': self._cohort_bins_table(result, ('light', 'dark')),
            'Mouse_Genotypes': self._genotype_table(result),
            'Mouse_Summary': aggregates_to_dataframe(self._ordered_animals(result)),
            'Daily_Statistics': self._daily_table(result),
            'ZT_Statistics': self._zt_cohort_table(result),
            'Mouse_ZT': self._zt_mouse_table(result),
        }

    def _ordered_animals(self, result: AnalysisResult) -> List:
        """Animals grouped by cohort, in cohort order."""
        ordered = []
        for label in result.cohorts.labels:
            ordered.extend(result.animals_in(label))
        return ordered

    def _bin_rows(self, result: AnalysisResult) -> List[str]:
        return ['Total'] + list(result.bin_labels)

    def _mouse_bins_table(self, result: AnalysisResult, categories) -> pd.DataFrame:
        data = {'Bin': self._bin_rows(result)}

        for animal in self._ordered_animals(result):
            for category in categories:
                column = np.concatenate([[animal.bout_counts[category]], animal.bin_counts(category)])
                data[f'{animal.animal_id}_{category.capitalize()}'] = column.astype(int)

        return pd.DataFrame(data)

    def _cohort_bins_table(self, result: AnalysisResult, categories) -> pd.DataFrame:
        data = {'Bin': self._bin_rows(result)}

        for label, summary in result.summaries.items():
            for category in categories:
                bins = summary.bins[category]
                total = summary.totals[f'total_{category}']
                for attr, stat_label in STAT_NAMES:
                    column = np.concatenate([[getattr(total, attr)], getattr(bins, attr)])
                    data[f'{label}_{category.capitalize()}_{stat_label}'] = column

        return pd.DataFrame(data)

    def _genotype_table(self, result: AnalysisResult) -> pd.DataFrame:
        animals = self._ordered_animals(result)
        return pd.DataFrame({
            'MouseID': [a.animal_id for a in animals],
            'Genotype': [a.cohort_label for a in animals],
        }, columns=['MouseID', 'Genotype'])

    def _daily_table(self, result: AnalysisResult) -> pd.DataFrame:
        columns = ['Genotype', 'Day', 'Date', 'N', 'Category', 'Statistic', 'Total'] + list(result.bin_labels)
        rows = []

        for label, summary in result.summaries.items():
            for day_index, stats in summary.per_day.items():
                day_date = result.day_table.date_of(day_index)
                for category in CATEGORIES:
                    bins = stats[category]
                    total = stats[f'total_{category}']
                    for attr, stat_label in STAT_NAMES:
                        row = {
                            'Genotype': label,
                            'Day': day_index,
                            'Date': day_date.isoformat() if day_date else '',
                            'N': bins.n,
                            'Category': category.capitalize(),
                            'Statistic': stat_label,
                            'Total': getattr(total, attr),
                        }
                        for bin_label, value in zip(result.bin_labels, getattr(bins, attr)):
                            row[bin_label] = value
                        rows.append(row)

        return pd.DataFrame(rows, columns=columns)

    def _zt_hours(self, result: AnalysisResult) -> Dict[str, List[int]]:
        zt = list(range(HOURS_PER_DAY))
        clock = [(h + result.config.light_start_hour) % HOURS_PER_DAY for h in zt]
        return {'ZT_Hour': zt, 'Clock_Hour': clock}

    def _zt_cohort_table(self, result: AnalysisResult) -> pd.DataFrame:
        data = self._zt_hours(result)

        for label, summary in result.summaries.items():
            zt = summary.zt
            data[f'{label}_N'] = [zt.n] * HOURS_PER_DAY
            for name, triple in (('Count', zt.counts), ('TotalDuration', zt.total_duration),
                                 ('AvgDuration', zt.average_duration)):
                for attr, stat_label in STAT_NAMES:
                    data[f'{label}_{name}_{stat_label}'] = getattr(triple, attr)

        return pd.DataFrame(data)

    def _zt_mouse_table(self, result: AnalysisResult) -> pd.DataFrame:
        data = self._zt_hours(result)

        for animal in self._ordered_animals(result):
            data[f'{animal.animal_id}_Count'] = animal.zt_counts
            data[f'{animal.animal_id}_TotalDuration'] = animal.zt_total_duration
            data[f'{animal.animal_id}_AvgDuration'] = animal.zt_average_duration

        return pd.DataFrame(data)
