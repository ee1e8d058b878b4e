"""
Light/dark phase and Zeitgeber time classification.

Light phase runs from light_start_hour (default 6:00) up to but not
including dark_start_hour (default 18:00). ZT0 is lights on.
"""

import numbers
from dataclasses import dataclass
from enum import Enum

from .errors import ConfigurationError, InvalidHourError


HOURS_PER_DAY = 24

DEFAULT_LIGHT_START_HOUR = 6
DEFAULT_DARK_START_HOUR = 18


class Phase(str, Enum):
    """Circadian phase of a bout."""
    LIGHT = 'light'
    DARK = 'dark'

    @property
    def label(self) -> str:
        return self.value.capitalize()


def _check_hour(hour) -> int:
    # bool is an Integral but never a valid hour
    if isinstance(hour, bool) or not isinstance(hour, numbers.Integral):
        raise InvalidHourError(f"Hour must be an integer in [0, 23], got {hour!r}")
    hour = int(hour)
    if not 0 <= hour < HOURS_PER_DAY:
        raise InvalidHourError(f"Hour must be in [0, 23], got {hour}")
    return hour


def phase_of(hour: int, light_start_hour: int = DEFAULT_LIGHT_START_HOUR,
             dark_start_hour: int = DEFAULT_DARK_START_HOUR) -> Phase:
    """
    Classify a wall-clock hour as light or dark phase.

    Args:
        hour: Hour of day (0-23)
        light_start_hour: Lights-on hour
        dark_start_hour: Lights-off hour

    Returns:
        Phase.LIGHT or Phase.DARK

    Raises:
        InvalidHourError: If hour is not an integer in [0, 23]
    """
    hour = _check_hour(hour)

    if light_start_hour < dark_start_hour:
        is_light = light_start_hour <= hour < dark_start_hour
    else:
        # Light window wraps past midnight
        is_light = hour >= light_start_hour or hour < dark_start_hour

    return Phase.LIGHT if is_light else Phase.DARK


def zt_hour_of(hour: int, zt0_hour: int = DEFAULT_LIGHT_START_HOUR) -> int:
    """
    Convert a wall-clock hour to a Zeitgeber hour.

    zt_hour_of(6) == 0, zt_hour_of(18) == 12, zt_hour_of(5) == 23
    """
    hour = _check_hour(hour)
    return (hour - zt0_hour) % HOURS_PER_DAY


@dataclass(frozen=True)
class PhaseClassifier:
    """Phase and ZT classification for a fixed light schedule."""
    light_start_hour: int = DEFAULT_LIGHT_START_HOUR
    dark_start_hour: int = DEFAULT_DARK_START_HOUR

    def __post_init__(self):
        for name in ('light_start_hour', 'dark_start_hour'):
            try:
                _check_hour(getattr(self, name))
            except InvalidHourError as e:
                raise ConfigurationError(f"{name}: {e}") from e
        if self.light_start_hour == self.dark_start_hour:
            raise ConfigurationError("light_start_hour and dark_start_hour must differ")

    def phase_of(self, hour: int) -> Phase:
        return phase_of(hour, self.light_start_hour, self.dark_start_hour)

    def zt_hour_of(self, hour: int) -> int:
        return zt_hour_of(hour, self.light_start_hour)
