"""
BoutMetrics: sleep bout compilation by genotype.

Classifies per-animal sleep bouts by light/dark phase, Zeitgeber hour and
experimental day, bins bout durations, and summarizes cohorts with
mean / SD / SEM.
"""

from .version_info import VERSION_STRING as __version__
