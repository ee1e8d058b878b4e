"""
Cohort statistics for BoutMetrics.

Combines per-animal histograms into mean / SD / SEM per cohort:
- Bin counts for all sleep, light phase and dark phase
- Total bout counts per animal (scalars)
- The same per experimental day, over the animals that have that day
- Bout counts, total and average duration per ZT hour

SD is the sample standard deviation (ddof=1) and SEM = SD / sqrt(N).
A cohort with no animals yields all-zero vectors; a single animal yields
SD = SEM = 0.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Union

from .errors import EmptyCohortError
from .phase import HOURS_PER_DAY
from .sleep_analysis import CATEGORIES, PerAnimalAggregate


TOTAL_CATEGORIES = tuple(f'total_{category}' for category in CATEGORIES)


@dataclass(frozen=True)
class SummaryTriple:
    """Column-wise mean, SD and SEM over N rows."""
    mean: np.ndarray
    std: np.ndarray
    sem: np.ndarray
    n: int


@dataclass(frozen=True)
class CohortStatistic:
    """Mean / SD / SEM of one category for one cohort.

    For bin categories ('sleep', 'light', 'dark') the values are arrays of
    length n_bins. For total categories ('total_sleep', ...) they are floats.
    """
    cohort_label: str
    category: str
    mean: Union[np.ndarray, float]
    std: Union[np.ndarray, float]
    sem: Union[np.ndarray, float]
    n: int
    day_index: Optional[int] = None


@dataclass(frozen=True)
class ZTStatistics:
    """Per-ZT-hour statistics for one cohort (arrays of length 24)."""
    cohort_label: str
    n: int
    counts: SummaryTriple
    total_duration: SummaryTriple
    average_duration: SummaryTriple


@dataclass
class CohortSummary:
    """Everything computed for one cohort."""
    cohort_label: str
    animal_ids: List[str]
    bins: Dict[str, CohortStatistic] = field(default_factory=dict)
    totals: Dict[str, CohortStatistic] = field(default_factory=dict)
    per_day: Dict[int, Dict[str, CohortStatistic]] = field(default_factory=dict)
    zt: Optional[ZTStatistics] = None

    @property
    def n_animals(self) -> int:
        return len(self.animal_ids)


def describe(rows: Sequence, width: int) -> SummaryTriple:
    """
    Column-wise mean, sample SD and SEM.

    Args:
        rows: Sequence of equal-length vectors (one per animal)
        width: Vector length, used to shape the zero result for no rows

    Returns:
        SummaryTriple

    Raises:
        ValueError: If a row does not have exactly width values
    """
    data = np.asarray(rows, dtype=float)
    if data.size == 0:
        data = data.reshape(0, width)
    if data.ndim != 2 or data.shape[1] != width:
        raise ValueError(f"Expected rows of length {width}, got array of shape {data.shape}")
    n = data.shape[0]

    if n == 0:
        zeros = np.zeros(width, dtype=float)
        return SummaryTriple(mean=zeros, std=zeros.copy(), sem=zeros.copy(), n=0)

    mean = np.mean(data, axis=0)
    if n > 1:
        std = np.std(data, axis=0, ddof=1)
    else:
        std = np.zeros(width, dtype=float)
    sem = std / np.sqrt(n)

    return SummaryTriple(mean=mean, std=std, sem=sem, n=n)


class CohortAggregator:
    """Compute cohort statistics from per-animal aggregates.

    Statistics are recomputed from scratch on every call.
    """

    def __init__(self, cohort_labels: Iterable[str], n_bins: int):
        self.cohort_labels = list(cohort_labels)
        self.n_bins = n_bins

    def _check_label(self, cohort_label: str):
        if not self.cohort_labels:
            raise EmptyCohortError("No cohorts are configured")
        if cohort_label not in self.cohort_labels:
            raise EmptyCohortError(f"Cohort {cohort_label!r} is not configured")

    def members(self, per_animal: Sequence[PerAnimalAggregate],
                cohort_label: str) -> List[PerAnimalAggregate]:
        """Aggregates belonging to a cohort, in input order."""
        self._check_label(cohort_label)
        return [a for a in per_animal if a.cohort_label == cohort_label]

    def _bin_and_total_stats(self, cohort_label: str, bin_rows: Dict[str, List],
                             total_rows: Dict[str, List],
                             day_index: Optional[int] = None) -> List[CohortStatistic]:
        stats = []
        for category in CATEGORIES:
            triple = describe(bin_rows[category], self.n_bins)
            stats.append(CohortStatistic(
                cohort_label=cohort_label, category=category,
                mean=triple.mean, std=triple.std, sem=triple.sem,
                n=triple.n, day_index=day_index,
            ))

        for category in CATEGORIES:
            triple = describe(total_rows[category], 1)
            stats.append(CohortStatistic(
                cohort_label=cohort_label, category=f'total_{category}',
                mean=float(triple.mean[0]), std=float(triple.std[0]), sem=float(triple.sem[0]),
                n=triple.n, day_index=day_index,
            ))
        return stats

    def aggregate(self, per_animal: Sequence[PerAnimalAggregate],
                  cohort_label: str) -> List[CohortStatistic]:
        """
        Statistics over the whole recording for one cohort.

        Returns:
            Statistics for 'sleep', 'light', 'dark' (bin vectors) followed by
            'total_sleep', 'total_light', 'total_dark' (bout count scalars)
        """
        animals = self.members(per_animal, cohort_label)

        bin_rows = {c: [a.bin_counts(c) for a in animals] for c in CATEGORIES}
        total_rows = {c: [[a.bout_counts[c]] for a in animals] for c in CATEGORIES}

        return self._bin_and_total_stats(cohort_label, bin_rows, total_rows)

    def aggregate_per_day(self, per_animal: Sequence[PerAnimalAggregate], cohort_label: str,
                          day_indices: Optional[Iterable[int]] = None) -> Dict[int, List[CohortStatistic]]:
        """
        Statistics per experimental day.

        Only animals with data on a day contribute to it, so N can differ
        from day to day. A day no animal in the cohort has gives zeros
        with n == 0.

        Args:
            per_animal: All per-animal aggregates
            cohort_label: Cohort to summarize
            day_indices: Days to report (default: every day any member has)
        """
        animals = self.members(per_animal, cohort_label)

        if day_indices is None:
            day_indices = sorted({d for a in animals for d in a.per_day})

        result = {}
        for day_index in day_indices:
            present = [a.per_day[day_index] for a in animals if day_index in a.per_day]
            bin_rows = {c: [counts.get(c) for counts in present] for c in CATEGORIES}
            total_rows = {c: [[counts.bout_counts.get(c, 0)] for counts in present] for c in CATEGORIES}
            result[day_index] = self._bin_and_total_stats(cohort_label, bin_rows, total_rows, day_index)

        return result

    def aggregate_zt(self, per_animal: Sequence[PerAnimalAggregate],
                     cohort_label: str) -> ZTStatistics:
        """
        Statistics per ZT hour across the cohort's animals.

        Average duration per animal and hour is total / count, or 0 for an
        hour without bouts. Use the counts to tell the two apart.
        """
        animals = self.members(per_animal, cohort_label)

        return ZTStatistics(
            cohort_label=cohort_label,
            n=len(animals),
            counts=describe([a.zt_counts for a in animals], HOURS_PER_DAY),
            total_duration=describe([a.zt_total_duration for a in animals], HOURS_PER_DAY),
            average_duration=describe([a.zt_average_duration for a in animals], HOURS_PER_DAY),
        )

    def summarize(self, per_animal: Sequence[PerAnimalAggregate],
                  day_indices: Optional[Iterable[int]] = None) -> Dict[str, CohortSummary]:
        """
        Compute every statistic for every configured cohort.

        Raises:
            EmptyCohortError: If no cohorts are configured
        """
        if not self.cohort_labels:
            raise EmptyCohortError("No cohorts are configured")

        if day_indices is not None:
            day_indices = list(day_indices)

        summaries = {}
        for label in self.cohort_labels:
            animals = self.members(per_animal, label)
            overall = self.aggregate(per_animal, label)
            per_day = self.aggregate_per_day(per_animal, label, day_indices)

            summaries[label] = CohortSummary(
                cohort_label=label,
                animal_ids=[a.animal_id for a in animals],
                bins={s.category: s for s in overall if s.category in CATEGORIES},
                totals={s.category: s for s in overall if s.category in TOTAL_CATEGORIES},
                per_day={day: {s.category: s for s in stats} for day, stats in per_day.items()},
                zt=self.aggregate_zt(per_animal, label),
            )

        return summaries
