"""
Sleep bout classification module for BoutMetrics.

Classifies each sleep bout of one animal by experimental day, light/dark
phase and Zeitgeber hour, then bins bout durations into histograms.

Per-animal outputs:
- Bout duration histograms (all sleep, light phase, dark phase)
- The same histograms per experimental day
- Bout counts and total sleep time per ZT hour
- Bout duration summary statistics per phase
"""

import math
import numpy as np
import pandas as pd
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .binning import DurationBinner
from .errors import InvalidDurationError, UnknownDayError, UnparseableTimestampError
from .phase import HOURS_PER_DAY, Phase, PhaseClassifier


CATEGORIES = ('sleep', 'light', 'dark')

CATEGORY_LABELS = {
    'sleep': 'All Sleep',
    'light': 'Light Phase',
    'dark': 'Dark Phase',
}


@dataclass(frozen=True)
class BoutRecord:
    """One input row: a sleep bout and when it was scored."""
    animal_id: str
    timestamp: Any          # datetime, or the raw string from the CSV
    duration_seconds: float


@dataclass(frozen=True)
class ClassifiedBout:
    """A bout with its day, phase and ZT hour assignments."""
    record: BoutRecord
    timestamp: datetime
    day_index: int          # 1-based experimental day
    phase: Phase
    zt_hour: int            # 0-23

    @property
    def duration(self) -> float:
        return float(self.record.duration_seconds)


@dataclass(frozen=True)
class SkippedRecord:
    """A record left out of classification and why."""
    record: BoutRecord
    reason: str


@dataclass(frozen=True)
class PhaseBinCounts:
    """Binned bout counts for all sleep and each phase."""
    sleep: np.ndarray
    light: np.ndarray
    dark: np.ndarray
    bout_counts: Dict[str, int] = field(default_factory=dict)

    def get(self, category: str) -> np.ndarray:
        return getattr(self, category)


@dataclass(frozen=True)
class PerAnimalAggregate:
    """All classified and binned data for one animal."""
    animal_id: str
    cohort_label: Optional[str]
    sleep_bin_counts: np.ndarray
    light_bin_counts: np.ndarray
    dark_bin_counts: np.ndarray
    bout_counts: Dict[str, int]
    phase_stats: Dict[str, Dict[str, float]]
    per_day: Dict[int, PhaseBinCounts]
    zt_counts: np.ndarray
    zt_total_duration: np.ndarray
    n_records: int
    skipped: Tuple[SkippedRecord, ...] = ()

    def bin_counts(self, category: str) -> np.ndarray:
        return getattr(self, f'{category}_bin_counts')

    @property
    def n_skipped(self) -> int:
        return len(self.skipped)

    @property
    def n_processed(self) -> int:
        return self.n_records - self.n_skipped

    @property
    def days(self) -> List[int]:
        return sorted(self.per_day)

    @property
    def zt_average_duration(self) -> np.ndarray:
        """Mean bout duration per ZT hour; 0 where the hour has no bouts."""
        avg = np.zeros(HOURS_PER_DAY, dtype=float)
        has_bouts = self.zt_counts > 0
        avg[has_bouts] = self.zt_total_duration[has_bouts] / self.zt_counts[has_bouts]
        return avg


def _check_duration(record: BoutRecord) -> float:
    try:
        duration = float(record.duration_seconds)
    except (TypeError, ValueError):
        raise InvalidDurationError(f"Non-numeric duration {record.duration_seconds!r}") from None

    if not math.isfinite(duration) or duration < 0:
        raise InvalidDurationError(f"Invalid duration {record.duration_seconds!r}")

    return duration


def classify_record(record: BoutRecord, phase_classifier: PhaseClassifier,
                    day_resolver) -> ClassifiedBout:
    """
    Assign day, phase and ZT hour to a single record.

    Args:
        record: Input bout
        phase_classifier: Light schedule
        day_resolver: DayTable or ExperimentalDayResolver

    Raises:
        UnparseableTimestampError: Malformed timestamp
        UnknownDayError: Day not in a fixed day table
        InvalidDurationError: Duration not a finite non-negative number
    """
    _check_duration(record)

    timestamp = day_resolver.parse(record.timestamp)
    day_index = day_resolver.resolve(timestamp)

    hour = timestamp.hour
    return ClassifiedBout(
        record=record,
        timestamp=timestamp,
        day_index=day_index,
        phase=phase_classifier.phase_of(hour),
        zt_hour=phase_classifier.zt_hour_of(hour),
    )


def classify_bouts(records: Iterable[BoutRecord], phase_classifier: PhaseClassifier,
                   day_resolver) -> Tuple[List[ClassifiedBout], List[SkippedRecord]]:
    """
    Classify records in input order, skipping the ones that fail.

    Returns:
        Tuple of (classified bouts, skipped records)
    """
    classified = []
    skipped = []

    for record in records:
        try:
            classified.append(classify_record(record, phase_classifier, day_resolver))
        except (UnparseableTimestampError, UnknownDayError, InvalidDurationError) as e:
            skipped.append(SkippedRecord(record=record, reason=str(e)))

    return classified, skipped


def compute_phase_stats(durations: Sequence[float]) -> Dict[str, float]:
    """
    Summary statistics for a list of bout durations (seconds).

    Returns:
        Dictionary with bout count, total, mean, median, min and max duration
    """
    if len(durations) == 0:
        return {
            'bout_count': 0,
            'total_seconds': 0.0,
            'mean_duration': 0.0,
            'median_duration': 0.0,
            'max_duration': 0.0,
            'min_duration': 0.0,
        }

    values = np.asarray(durations, dtype=float)
    return {
        'bout_count': int(values.size),
        'total_seconds': float(np.sum(values)),
        'mean_duration': float(np.mean(values)),
        'median_duration': float(np.median(values)),
        'max_duration': float(np.max(values)),
        'min_duration': float(np.min(values)),
    }


def _empty_lists() -> Dict[str, List[float]]:
    return {category: [] for category in CATEGORIES}


def _bin_phase_lists(lists: Dict[str, List[float]], binner: DurationBinner) -> PhaseBinCounts:
    return PhaseBinCounts(
        sleep=binner.histogram(lists['sleep']),
        light=binner.histogram(lists['light']),
        dark=binner.histogram(lists['dark']),
        bout_counts={category: len(lists[category]) for category in CATEGORIES},
    )


def process_animal(animal_id: str, cohort_label: Optional[str], records: Sequence[BoutRecord],
                   binner: DurationBinner, phase_classifier: PhaseClassifier,
                   day_resolver) -> PerAnimalAggregate:
    """
    Classify and bin all bouts of one animal.

    Records with a bad timestamp or duration are skipped and listed in the
    aggregate's `skipped`; they never raise. An animal without valid records
    gets all-zero histograms and an empty per-day map.

    Args:
        animal_id: Animal identifier
        cohort_label: Cohort the animal belongs to
        records: Bouts in input order
        binner: Duration bin ladder
        phase_classifier: Light schedule
        day_resolver: DayTable (or incremental resolver)

    Returns:
        PerAnimalAggregate
    """
    records = list(records)
    classified, skipped = classify_bouts(records, phase_classifier, day_resolver)

    durations = _empty_lists()
    per_day_durations: Dict[int, Dict[str, List[float]]] = {}
    zt_counts = np.zeros(HOURS_PER_DAY, dtype=int)
    zt_total_duration = np.zeros(HOURS_PER_DAY, dtype=float)

    for bout in classified:
        duration = bout.duration
        phase = bout.phase.value

        durations['sleep'].append(duration)
        durations[phase].append(duration)

        day_lists = per_day_durations.setdefault(bout.day_index, _empty_lists())
        day_lists['sleep'].append(duration)
        day_lists[phase].append(duration)

        zt_counts[bout.zt_hour] += 1
        zt_total_duration[bout.zt_hour] += duration

    totals = _bin_phase_lists(durations, binner)
    per_day = {
        day_index: _bin_phase_lists(lists, binner)
        for day_index, lists in sorted(per_day_durations.items())
    }

    return PerAnimalAggregate(
        animal_id=animal_id,
        cohort_label=cohort_label,
        sleep_bin_counts=totals.sleep,
        light_bin_counts=totals.light,
        dark_bin_counts=totals.dark,
        bout_counts=dict(totals.bout_counts),
        phase_stats={category: compute_phase_stats(durations[category]) for category in CATEGORIES},
        per_day=per_day,
        zt_counts=zt_counts,
        zt_total_duration=zt_total_duration,
        n_records=len(records),
        skipped=tuple(skipped),
    )


def aggregates_to_dataframe(aggregates: Sequence[PerAnimalAggregate]) -> pd.DataFrame:
    """
    Per-animal summary table for export.

    Returns:
        DataFrame with one row per animal: cohort, record counts and
        bout statistics per phase
    """
    columns = ['Animal ID', 'Cohort', 'Records', 'Processed', 'Skipped', 'Days']
    for category in CATEGORIES:
        label = category.capitalize()
        columns += [f'{label} Bouts', f'{label} Total (s)', f'{label} Mean Duration (s)',
                    f'{label} Median Duration (s)', f'{label} Max Duration (s)']

    rows = []
    for agg in aggregates:
        row = {
            'Animal ID': agg.animal_id,
            'Cohort': agg.cohort_label,
            'Records': agg.n_records,
            'Processed': agg.n_processed,
            'Skipped': agg.n_skipped,
            'Days': len(agg.per_day),
        }
        for category in CATEGORIES:
            label = category.capitalize()
            stats = agg.phase_stats[category]
            row[f'{label} Bouts'] = stats['bout_count']
            row[f'{label} Total (s)'] = stats['total_seconds']
            row[f'{label} Mean Duration (s)'] = stats['mean_duration']
            row[f'{label} Median Duration (s)'] = stats['median_duration']
            row[f'{label} Max Duration (s)'] = stats['max_duration']
        rows.append(row)

    return pd.DataFrame(rows, columns=columns)
