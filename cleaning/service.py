"""
Cleaning pipeline for raw device telemetry samples.

The pipeline runs four ordered steps over a sequence of raw samples:

1. normalize every field through numeric coercion
2. drop samples whose timestamp has no numeric reading
3. reject whole samples whose speed is above the plausible maximum
4. interpolate (or clamp, at the edges) speeds below the plausible minimum

Nothing in this module raises on bad data. Malformed input degrades to null
fields or removed samples. Samples are expected in ascending timestamp order;
no sorting is performed.
"""

import logging
from typing import Any, List, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from coercion.numeric import coerce_number
from observability.service import (
    ObservabilityService,
    get_observability_service,
    trace_operation,
)

logger = logging.getLogger(__name__)


DEFAULT_MIN_SPEED = 40.0
DEFAULT_MAX_SPEED = 150.0


class GpsPoint(BaseModel):
    """A fully populated GPS fix."""
    
    lat: float
    lng: float


class CleanSample(BaseModel):
    """
    A normalized telemetry sample.
    
    Attributes:
        timestamp: Sample time, always a finite number
        speed: Speed in km/h, or None when unreadable
        battery: Battery level, or None when unreadable
        motor_temp: Motor temperature (serialized as motorTemp), or None
        gps: GPS fix, or None unless both coordinates were readable
    """
    
    model_config = ConfigDict(populate_by_name=True, frozen=True)
    
    timestamp: float
    speed: Optional[float] = None
    battery: Optional[float] = None
    motor_temp: Optional[float] = Field(default=None, alias="motorTemp")
    gps: Optional[GpsPoint] = None


class NormalizedSample(BaseModel):
    """A sample after coercion; the timestamp may still be missing."""
    
    model_config = ConfigDict(frozen=True)
    
    timestamp: Optional[float] = None
    speed: Optional[float] = None
    battery: Optional[float] = None
    motor_temp: Optional[float] = None
    gps: Optional[GpsPoint] = None


def _as_mapping(raw: Any) -> Mapping[str, Any]:
    if isinstance(raw, BaseModel):
        return raw.model_dump(by_alias=True)
    if isinstance(raw, Mapping):
        return raw
    return {}


def _normalize_gps(raw_gps: Any) -> Optional[GpsPoint]:
    if not isinstance(raw_gps, Mapping):
        return None
    lat = coerce_number(raw_gps.get("lat"))
    lng = coerce_number(raw_gps.get("lng"))
    if lat is None or lng is None:
        return None
    return GpsPoint(lat=lat, lng=lng)


def normalize_sample(raw: Any) -> NormalizedSample:
    """
    Coerce every field of a raw sample to a number or None.
    
    GPS is only kept when both lat and lng have a numeric reading.
    Non-mapping input is treated as a sample with every field missing.
    
    Args:
        raw: The raw sample, usually a dict decoded from JSON
        
    Returns:
        The normalized sample; its timestamp may still be None
    """
    data = _as_mapping(raw)
    return NormalizedSample(
        timestamp=coerce_number(data.get("timestamp")),
        speed=coerce_number(data.get("speed")),
        battery=coerce_number(data.get("battery")),
        motor_temp=coerce_number(data.get("motorTemp")),
        gps=_normalize_gps(data.get("gps")),
    )


def drop_missing_timestamps(samples: Sequence[NormalizedSample]) -> List[CleanSample]:
    """Remove samples without a timestamp and promote the rest to CleanSample."""
    return [
        CleanSample(
            timestamp=sample.timestamp,
            speed=sample.speed,
            battery=sample.battery,
            motor_temp=sample.motor_temp,
            gps=sample.gps,
        )
        for sample in samples
        if sample.timestamp is not None
    ]


def reject_speed_spikes(
    samples: Sequence[CleanSample],
    max_speed: float = DEFAULT_MAX_SPEED,
) -> List[CleanSample]:
    """
    Remove every sample whose speed exceeds max_speed.
    
    The whole sample is discarded, not just its speed field, so battery,
    motor temperature and GPS readings of a spike are lost as well.
    
    Args:
        samples: Samples with numeric timestamps
        max_speed: Highest plausible speed
        
    Returns:
        The samples that are not spikes, in their original order
    """
    return [
        sample for sample in samples
        if sample.speed is None or sample.speed <= max_speed
    ]


def interpolate_low_speeds(
    samples: Sequence[CleanSample],
    min_speed: float = DEFAULT_MIN_SPEED,
) -> List[CleanSample]:
    """
    Replace speeds below min_speed using their immediate neighbours.
    
    The first and last samples are clamped to min_speed. Any other low
    speed becomes the mean of the previous and next samples' speeds, where
    a null neighbour counts as min_speed. Neighbours are read before any
    replacement and only one step away; the result is raised to min_speed
    if the mean still falls below it.
    
    Adjacency is taken from the sequence as given, so after spike
    rejection two samples that were not adjacent in the raw input can be
    neighbours here.
    
    Args:
        samples: Samples after spike rejection
        min_speed: Lowest plausible speed
        
    Returns:
        A new list with low speeds replaced
    """
    last_index = len(samples) - 1
    result: List[CleanSample] = []
    
    for index, sample in enumerate(samples):
        speed = sample.speed
        if speed is None or speed >= min_speed:
            result.append(sample)
            continue
        
        if index == 0 or index == last_index:
            new_speed = min_speed
        else:
            prev_speed = samples[index - 1].speed
            next_speed = samples[index + 1].speed
            prev_speed = min_speed if prev_speed is None else prev_speed
            next_speed = min_speed if next_speed is None else next_speed
            new_speed = max((prev_speed + next_speed) / 2, min_speed)
        
        result.append(sample.model_copy(update={"speed": new_speed}))
    
    return result


def clean_samples(
    raw_samples: Sequence[Any],
    min_speed: float = DEFAULT_MIN_SPEED,
    max_speed: float = DEFAULT_MAX_SPEED,
) -> List[CleanSample]:
    """
    Run the full cleaning pipeline over a sequence of raw samples.
    
    Args:
        raw_samples: Raw device samples in ascending timestamp order
        min_speed: Lowest plausible speed
        max_speed: Highest plausible speed
        
    Returns:
        Cleaned samples, never containing a sample without a timestamp
    """
    normalized = [normalize_sample(raw) for raw in raw_samples]
    timestamped = drop_missing_timestamps(normalized)
    filtered = reject_speed_spikes(timestamped, max_speed)
    return interpolate_low_speeds(filtered, min_speed)


class TelemetryCleaner:
    """
    Cleaning pipeline bound to a configured plausible speed range.
    
    Attributes:
        min_speed: Lowest plausible speed; lower readings are interpolated
        max_speed: Highest plausible speed; higher readings are rejected
        observability: Service used for tracing, if initialized
    """
    
    def __init__(
        self,
        min_speed: float = DEFAULT_MIN_SPEED,
        max_speed: float = DEFAULT_MAX_SPEED,
        observability: Optional[ObservabilityService] = None,
    ):
        """
        Initialize the cleaner.
        
        Args:
            min_speed: Lowest plausible speed
            max_speed: Highest plausible speed
            observability: Optional observability service (uses global if not provided)
            
        Raises:
            ValueError: If min_speed is not below max_speed
        """
        if min_speed >= max_speed:
            raise ValueError(
                f"min_speed ({min_speed}) must be lower than max_speed ({max_speed})"
            )
        self.min_speed = min_speed
        self.max_speed = max_speed
        self.observability = observability or get_observability_service()
        self._logger = logging.getLogger(__name__)
    
    @classmethod
    def from_settings(
        cls,
        settings: Any,
        observability: Optional[ObservabilityService] = None,
    ) -> "TelemetryCleaner":
        """Build a cleaner from application settings."""
        return cls(
            min_speed=settings.min_speed,
            max_speed=settings.max_speed,
            observability=observability,
        )
    
    def clean(self, raw_samples: Sequence[Any]) -> List[CleanSample]:
        """
        Clean raw samples and log how many were dropped or corrected.
        
        Args:
            raw_samples: Raw device samples in ascending timestamp order
            
        Returns:
            The cleaned samples
        """
        with trace_operation(
            self.observability, "cleaning", "clean",
            {"telemetry.sample_count": len(raw_samples)}
        ) as span:
            normalized = [normalize_sample(raw) for raw in raw_samples]
            timestamped = drop_missing_timestamps(normalized)
            filtered = reject_speed_spikes(timestamped, self.max_speed)
            cleaned = interpolate_low_speeds(filtered, self.min_speed)
            span.set_attribute("telemetry.cleaned_count", len(cleaned))
        
        interpolated = sum(
            1 for before, after in zip(filtered, cleaned)
            if before.speed != after.speed
        )
        self._logger.debug(
            f"Cleaned {len(cleaned)} of {len(normalized)} telemetry samples",
            extra={"extra_data": {
                "received": len(normalized),
                "missing_timestamp": len(normalized) - len(timestamped),
                "speed_spikes": len(timestamped) - len(filtered),
                "interpolated": interpolated,
            }}
        )
        return cleaned
