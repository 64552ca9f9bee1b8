"""
Telemetry cleaning module for chart-ready device samples.

This module turns raw, untrusted device samples into a cleaned sequence:
fields are coerced to numbers or null, samples without a timestamp are
dropped, speed spikes are rejected and low-speed gaps are interpolated.
"""

from cleaning.service import (
    DEFAULT_MAX_SPEED,
    DEFAULT_MIN_SPEED,
    CleanSample,
    GpsPoint,
    NormalizedSample,
    TelemetryCleaner,
    clean_samples,
    drop_missing_timestamps,
    interpolate_low_speeds,
    normalize_sample,
    reject_speed_spikes,
)

__all__ = [
    "DEFAULT_MAX_SPEED",
    "DEFAULT_MIN_SPEED",
    "CleanSample",
    "GpsPoint",
    "NormalizedSample",
    "TelemetryCleaner",
    "clean_samples",
    "drop_missing_timestamps",
    "interpolate_low_speeds",
    "normalize_sample",
    "reject_speed_spikes",
]
