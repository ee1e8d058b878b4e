"""
Analysis module for sleep bout compilation.

Runs a full analysis: validates cohorts, builds the experimental day table
from every timestamp, classifies each animal's bouts (in parallel), and
computes cohort statistics. Progress and the skipped-record report are
printed here, never in the classification or statistics code.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .cohort_stats import CohortAggregator, CohortSummary
from .cohorts import CohortAssignment
from .config import AnalysisConfig
from .data_loader import DataLoader
from .errors import EmptyCohortError
from .experimental_day import DayTable
from .parallel_utils import map_animals
from .sleep_analysis import BoutRecord, PerAnimalAggregate, process_animal


@dataclass
class AnalysisResult:
    """Everything produced by one run."""
    config: AnalysisConfig
    cohorts: CohortAssignment
    bin_labels: List[str]
    day_table: DayTable
    animals: List[PerAnimalAggregate]
    summaries: Dict[str, CohortSummary]
    unassigned_animals: List[str] = field(default_factory=list)
    failed_animals: Dict[str, str] = field(default_factory=dict)

    def animals_in(self, cohort_label: str) -> List[PerAnimalAggregate]:
        return [a for a in self.animals if a.cohort_label == cohort_label]

    def get_animal(self, animal_id: str) -> Optional[PerAnimalAggregate]:
        for animal in self.animals:
            if animal.animal_id == animal_id:
                return animal
        return None

    @property
    def total_records(self) -> int:
        return sum(a.n_records for a in self.animals)

    @property
    def total_skipped(self) -> int:
        return sum(a.n_skipped for a in self.animals)


def report_lines(result: AnalysisResult) -> List[str]:
    """
    Human-readable end-of-run report of processed and skipped records.
    """
    lines = ["", "Record summary:"]
    for animal in result.animals:
        lines.append(f"  {animal.animal_id} ({animal.cohort_label}): {animal.n_records} records, "
                     f"{animal.n_processed} processed, {animal.n_skipped} skipped")
        for skipped in animal.skipped[:5]:
            lines.append(f"    Warning: {skipped.reason}")
        if animal.n_skipped > 5:
            lines.append(f"    ... and {animal.n_skipped - 5} more")

    lines.append(f"  Total: {result.total_records} records, "
                 f"{result.total_records - result.total_skipped} processed, "
                 f"{result.total_skipped} skipped")

    if result.unassigned_animals:
        lines.append("Animals not assigned to any cohort (skipped): "
                     + ', '.join(result.unassigned_animals))
    for animal_id, error in result.failed_animals.items():
        lines.append(f"Failed to load {animal_id}: {error}")

    return lines


class SleepBoutAnalyzer:
    """Run sleep bout analysis for a set of animals and cohorts."""

    def __init__(self, config: AnalysisConfig = None, max_workers: int = None,
                 verbose: bool = True):
        self.config = config or AnalysisConfig()
        self.config.validate()
        self.binner = self.config.make_binner()
        self.phase_classifier = self.config.make_phase_classifier()
        self.data_loader = DataLoader(self.config.file_pattern)
        self.max_workers = max_workers
        self.verbose = verbose

    def _log(self, message: str = ""):
        if self.verbose:
            print(message)

    def analyze(self, animal_records: Dict[str, Sequence[BoutRecord]],
                cohorts: CohortAssignment,
                failed_animals: Dict[str, str] = None) -> AnalysisResult:
        """
        Classify and summarize all animals.

        Args:
            animal_records: animal_id -> bout records
            cohorts: Cohort assignment (validated here)
            failed_animals: animal_id -> load error, carried into the result

        Returns:
            AnalysisResult

        Raises:
            CohortPartitionError: If an animal is in two cohorts
            EmptyCohortError: If no cohorts are defined
        """
        cohorts.validate()
        if cohorts.is_empty():
            raise EmptyCohortError("No cohorts are configured")

        unassigned = cohorts.unassigned(animal_records)
        for animal_id in unassigned:
            self._log(f"Skipping mouse {animal_id} (no genotype assigned)...")

        included: List[Tuple[str, str, Sequence[BoutRecord]]] = [
            (animal_id, cohorts.cohort_of(animal_id), records)
            for animal_id, records in animal_records.items()
            if animal_id not in unassigned
        ]

        for label in cohorts.labels:
            for animal_id in sorted(cohorts.animals(label)):
                if animal_id not in animal_records and animal_id not in (failed_animals or {}):
                    self._log(f"Warning: No data found for {label} mouse {animal_id}")

        # Day discovery runs over all animals before any classification
        day_table = self.config.build_day_table(
            record.timestamp for _, _, records in included for record in records
        )
        self._log(f"Found {len(day_table)} experimental days")

        def classify(item):
            animal_id, label, records = item
            return process_animal(animal_id, label, records, self.binner,
                                  self.phase_classifier, day_table)

        self._log(f"Processing {len(included)} animals...")
        aggregates = map_animals(classify, included, max_workers=self.max_workers)

        for aggregate in aggregates:
            self._log_animal(aggregate)

        aggregator = CohortAggregator(cohorts.labels, self.binner.n_bins)
        summaries = aggregator.summarize(aggregates, day_table.day_indices)

        result = AnalysisResult(
            config=self.config,
            cohorts=cohorts,
            bin_labels=list(self.binner.labels),
            day_table=day_table,
            animals=aggregates,
            summaries=summaries,
            unassigned_animals=unassigned,
            failed_animals=dict(failed_animals or {}),
        )

        for line in report_lines(result):
            self._log(line)

        return result

    def _log_animal(self, aggregate: PerAnimalAggregate):
        counts = aggregate.bout_counts
        self._log(f"Processed mouse {aggregate.animal_id} (genotype: {aggregate.cohort_label})")
        self._log(f"  Found {counts['sleep']} sleep bouts "
                  f"({counts['light']} light phase, {counts['dark']} dark phase)")
        self._log(f"    All sleep binned: {aggregate.sleep_bin_counts.tolist()}")
        self._log(f"    Light phase binned: {aggregate.light_bin_counts.tolist()}")
        self._log(f"    Dark phase binned: {aggregate.dark_bin_counts.tolist()}")

    def load_folder(self, folder, cohorts: CohortAssignment
                    ) -> Tuple[Dict[str, List[BoutRecord]], Dict[str, str]]:
        """
        Read the bout files of a folder.

        Files of animals without a cohort are not read; they are returned
        with an empty record list so they show up as unassigned.

        Returns:
            Tuple of (animal_id -> records, animal_id -> load error)
        """
        animal_records: Dict[str, List[BoutRecord]] = {}
        failed: Dict[str, str] = {}

        for animal_id, file_path in self.data_loader.discover_animals(folder).items():
            if cohorts.cohort_of(animal_id) is None:
                animal_records[animal_id] = []
                continue

            self._log(f"Reading {file_path.name} for mouse {animal_id}...")
            records = self.data_loader.load_records(file_path, animal_id)
            if records is None:
                self._log(f"  Error processing file for mouse {animal_id}: {self.data_loader.last_error}")
                failed[animal_id] = self.data_loader.last_error
                continue

            dropped = self.data_loader.dropped_rows.get(animal_id, 0)
            if dropped:
                self._log(f"  Dropped {dropped} rows without a valid bout duration")
            if not records:
                self._log(f"  Warning: No sleep bout data found in file for mouse {animal_id}")
            animal_records[animal_id] = records

        return animal_records, failed

    def analyze_folder(self, folder, cohorts: CohortAssignment) -> AnalysisResult:
        """Load a folder of bout files and analyze it."""
        cohorts.validate()
        animal_records, failed = self.load_folder(folder, cohorts)
        return self.analyze(animal_records, cohorts, failed)
