"""
Bout duration binning.

Durations are sorted into a fixed ladder of half-open bins
[e_i, e_{i+1}). The last bin also includes its right edge, so an infinite
terminal edge catches every long bout. Durations below the first edge are
dropped from all bins.
"""

import numpy as np
from typing import Iterable, List, Optional, Sequence

from .errors import ConfigurationError, InvalidEdgesError


# Edge ladders in seconds
ZERO_BASED_EDGES = (0, 4, 8, 16, 32, 64, 128, 256, 512, np.inf)
TWO_SECOND_EDGES = (2, 4, 8, 16, 32, 64, 128, 256, 512, np.inf)

DEFAULT_BIN_EDGES = ZERO_BASED_EDGES


def validate_edges(edges: Sequence[float]) -> np.ndarray:
    """
    Check a bin edge ladder and return it as a float array.

    Args:
        edges: Bin edges, strictly increasing, at least 2 values.
            The last edge may be infinity.

    Returns:
        1D float array of edges

    Raises:
        InvalidEdgesError: If the ladder is too short, contains NaN,
            or is not strictly increasing
    """
    try:
        arr = np.asarray(edges, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidEdgesError(f"Bin edges must be numeric: {e}") from e

    if arr.ndim != 1 or arr.size < 2:
        raise InvalidEdgesError(f"Need at least 2 bin edges, got {arr.size}")

    if np.any(np.isnan(arr)):
        raise InvalidEdgesError("Bin edges contain NaN")

    if np.any(np.isinf(arr[:-1])):
        raise InvalidEdgesError("Only the last bin edge may be infinite")

    if not np.all(np.diff(arr) > 0):
        raise InvalidEdgesError(f"Bin edges must be strictly increasing: {list(edges)}")

    return arr


def _format_edge(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def make_bin_labels(edges: Sequence[float]) -> List[str]:
    """
    Build display labels for a bin ladder.

    [0, 4, 8, inf] -> ['0-4s', '4-8s', '>8s']
    """
    arr = validate_edges(edges)
    labels = []
    for lo, hi in zip(arr[:-1], arr[1:]):
        if np.isinf(hi):
            labels.append(f">{_format_edge(lo)}s")
        else:
            labels.append(f"{_format_edge(lo)}-{_format_edge(hi)}s")
    return labels


def bin_index(duration: float, edges: Sequence[float]) -> Optional[int]:
    """
    Find the bin a duration falls into.

    Args:
        duration: Bout duration in seconds
        edges: Bin edge ladder (see validate_edges)

    Returns:
        Bin index in [0, n_bins - 1], or None if the duration is below the
        first edge, above a finite last edge, or NaN
    """
    arr = validate_edges(edges)
    return _bin_index(float(duration), arr)


def _bin_index(duration: float, arr: np.ndarray) -> Optional[int]:
    if np.isnan(duration) or duration < arr[0] or duration > arr[-1]:
        return None
    idx = int(np.searchsorted(arr, duration, side='right')) - 1
    # Right edge of the last bin is inclusive
    return min(idx, arr.size - 2)


def histogram(durations: Iterable[float], edges: Sequence[float]) -> np.ndarray:
    """
    Count durations per bin in one pass.

    Equivalent to tallying bin_index() over every duration and dropping
    the ones that fall in no bin.

    Returns:
        Integer array of length len(edges) - 1
    """
    arr = validate_edges(edges)
    return _histogram(durations, arr)


def _histogram(durations: Iterable[float], arr: np.ndarray) -> np.ndarray:
    n_bins = arr.size - 1
    if not isinstance(durations, np.ndarray):
        durations = list(durations)
    values = np.asarray(durations, dtype=float).ravel()

    if values.size == 0:
        return np.zeros(n_bins, dtype=int)

    valid = ~np.isnan(values) & (values >= arr[0]) & (values <= arr[-1])
    idx = np.searchsorted(arr, values[valid], side='right') - 1
    idx = np.minimum(idx, n_bins - 1)

    return np.bincount(idx, minlength=n_bins).astype(int)


class DurationBinner:
    """Validated bin ladder with display labels."""

    def __init__(self, edges: Sequence[float] = DEFAULT_BIN_EDGES,
                 labels: Optional[Sequence[str]] = None):
        self.edges = validate_edges(edges)

        if labels is None:
            labels = make_bin_labels(self.edges)
        labels = list(labels)
        if len(labels) != self.n_bins:
            raise ConfigurationError(
                f"Expected {self.n_bins} bin labels for {self.edges.size} edges, got {len(labels)}"
            )
        self.labels = labels

    @property
    def n_bins(self) -> int:
        return self.edges.size - 1

    def bin_index(self, duration: float) -> Optional[int]:
        return _bin_index(float(duration), self.edges)

    def histogram(self, durations: Iterable[float]) -> np.ndarray:
        return _histogram(durations, self.edges)

    def empty_counts(self) -> np.ndarray:
        return np.zeros(self.n_bins, dtype=int)

    def __repr__(self):
        return f"DurationBinner(edges={self.edges.tolist()})"
