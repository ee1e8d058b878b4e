"""
Cohort (genotype) assignment for BoutMetrics.

Maps cohort labels to animal IDs, checks that no animal is in two cohorts,
and collects assignments from the command line or interactively.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Set

from .errors import CohortPartitionError, ConfigurationError


DEFAULT_COHORT_LABELS = ('wild-type', 'mutant')


def split_ids(text: str) -> List[str]:
    """Split a comma-separated ID list, trimming whitespace and dropping blanks."""
    return [part.strip() for part in text.split(',') if part.strip()]


def parse_cohort_arg(text: str):
    """
    Parse 'label=ID1,ID2' into (label, {ID1, ID2}).

    Raises:
        ConfigurationError: If the '=' separator or the label is missing
    """
    if '=' not in text:
        raise ConfigurationError(f"Cohort must look like LABEL=ID1,ID2, got {text!r}")

    label, ids = text.split('=', 1)
    label = label.strip()
    if not label:
        raise ConfigurationError(f"Cohort label missing in {text!r}")

    return label, set(split_ids(ids))


@dataclass
class CohortAssignment:
    """Ordered mapping of cohort label to animal IDs.

    Label order is kept for sheets and plots (first cohort first).
    """

    cohorts: Dict[str, Set[str]] = field(default_factory=dict)

    @classmethod
    def from_args(cls, cohort_args: Iterable[str]) -> 'CohortAssignment':
        """Build from repeated 'label=ID1,ID2' strings; repeated labels are merged."""
        assignment = cls()
        for text in cohort_args:
            label, ids = parse_cohort_arg(text)
            assignment.add(label, ids)
        return assignment

    def add(self, label: str, animal_ids: Iterable[str]):
        """Add animals to a cohort, creating it if needed."""
        self.cohorts.setdefault(label, set()).update(str(a) for a in animal_ids)

    @property
    def labels(self) -> List[str]:
        return list(self.cohorts.keys())

    def animals(self, label: str) -> Set[str]:
        return set(self.cohorts.get(label, set()))

    def overlapping(self) -> Set[str]:
        """Animals assigned to more than one cohort."""
        seen: Set[str] = set()
        overlap: Set[str] = set()
        for ids in self.cohorts.values():
            overlap |= seen & ids
            seen |= ids
        return overlap

    def validate(self):
        """
        Check that cohorts partition the animals.

        Raises:
            CohortPartitionError: If any animal is in two cohorts
        """
        overlap = self.overlapping()
        if overlap:
            raise CohortPartitionError(
                "Animals cannot be assigned to more than one cohort: "
                + ', '.join(sorted(overlap)),
                animal_ids=overlap,
            )

    def cohort_of(self, animal_id: str) -> Optional[str]:
        """Cohort label of an animal, or None if unassigned."""
        for label, ids in self.cohorts.items():
            if animal_id in ids:
                return label
        return None

    def unassigned(self, animal_ids: Iterable[str]) -> List[str]:
        """Animals (in the given order) that belong to no cohort."""
        return [a for a in animal_ids if self.cohort_of(a) is None]

    def is_empty(self) -> bool:
        return not self.cohorts

    def to_description(self) -> str:
        """Human-readable summary, e.g. 'wild-type: A1, A2 | mutant: B1'."""
        parts = []
        for label, ids in self.cohorts.items():
            ids_str = ', '.join(sorted(ids)) if ids else '(none)'
            parts.append(f"{label}: {ids_str}")
        return " | ".join(parts) if parts else "No cohorts defined"


def prompt_for_cohorts(animal_ids: List[str], labels: Iterable[str] = DEFAULT_COHORT_LABELS,
                       input_func: Callable[[str], str] = input,
                       output_func: Callable[[str], None] = print) -> CohortAssignment:
    """
    Ask the user which animals belong to each cohort.

    Args:
        animal_ids: Discovered animal IDs (listed for the user)
        labels: Cohort labels to ask for, in order
        input_func: Line reader (input() by default)
        output_func: Line writer (print() by default)

    Returns:
        CohortAssignment (not yet validated)
    """
    output_func("Discovered animal IDs:")
    for i, animal_id in enumerate(animal_ids, start=1):
        output_func(f"  {i}. {animal_id}")
    output_func("")

    assignment = CohortAssignment()
    for label in labels:
        output_func(f"Please enter the IDs of {label} mice, separated by commas:")
        answer = input_func(f"{label.capitalize()} mice: ")
        assignment.add(label, split_ids(answer or ''))

    return assignment
