"""Activity stream normalization.

Raw activity sources deliver loosely-keyed channel dictionaries
(``velocity_smooth`` vs ``velocity``, ``watts`` vs ``power``). This module
turns them into an immutable, index-aligned ``StreamRecord`` and exposes the
presence predicates the analyzers branch on.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from .exceptions import UnusableStreamError

logger = logging.getLogger(__name__)


# Source key aliases, first match wins
CHANNEL_ALIASES: Dict[str, Tuple[str, ...]] = {
    "time": ("time",),
    "distance": ("distance",),
    "heartrate": ("heartrate", "heart_rate", "hr"),
    "velocity": ("velocity_smooth", "velocity", "speed"),
    "altitude": ("altitude", "elevation"),
    "power": ("watts", "power"),
    "cadence": ("cadence",),
}


@dataclass(frozen=True)
class StreamRecord:
    """
    Second-by-second activity recording.

    All non-empty channels are aligned index-for-index with ``time``.
    Units: time [s], distance [m], heartrate [bpm], velocity [m/s],
    altitude [m], power [W], cadence [rpm or spm].
    """

    time: Tuple[float, ...]
    distance: Tuple[float, ...] = field(default_factory=tuple)
    heartrate: Tuple[float, ...] = field(default_factory=tuple)
    velocity: Tuple[float, ...] = field(default_factory=tuple)
    altitude: Tuple[float, ...] = field(default_factory=tuple)
    power: Tuple[float, ...] = field(default_factory=tuple)
    cadence: Tuple[float, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.time)

    @property
    def duration(self) -> float:
        """Elapsed seconds between first and last sample."""
        if len(self.time) < 2:
            return 0.0
        return float(self.time[-1] - self.time[0])

    def to_dict(self) -> Dict[str, list]:
        """Convert to dictionary for serialization."""
        return {
            "time": list(self.time),
            "distance": list(self.distance),
            "heartrate": list(self.heartrate),
            "velocity_smooth": list(self.velocity),
            "altitude": list(self.altitude),
            "watts": list(self.power),
            "cadence": list(self.cadence),
        }


def _pick_channel(raw: Mapping[str, Any], name: str) -> Sequence[Any]:
    for key in CHANNEL_ALIASES[name]:
        value = raw.get(key)
        if value is None:
            continue
        # Strava-style payloads wrap samples as {"data": [...]}
        if isinstance(value, Mapping):
            value = value.get("data") or []
        return value
    return []


def _to_floats(values: Sequence[Any]) -> Tuple[float, ...]:
    return tuple(float(v) if v is not None else 0.0 for v in values)


def normalize_stream(raw: Optional[Mapping[str, Any]]) -> Optional[StreamRecord]:
    """
    Build a StreamRecord from a raw channel mapping.

    Every recognized channel defaults to empty. A channel longer than
    ``time`` is truncated; a shorter non-empty channel cannot be aligned
    and is dropped.

    Args:
        raw: Mapping of channel name to sample list

    Returns:
        StreamRecord, or None when the time channel is missing or empty
    """
    if not raw:
        return None

    time = _to_floats(_pick_channel(raw, "time"))
    if not time:
        return None

    n = len(time)
    channels: Dict[str, Tuple[float, ...]] = {}
    for name in ("distance", "heartrate", "velocity", "altitude", "power", "cadence"):
        samples = _to_floats(_pick_channel(raw, name))
        if len(samples) > n:
            samples = samples[:n]
        elif 0 < len(samples) < n:
            logger.warning(
                f"Dropping {name} channel: {len(samples)} samples for {n} time points"
            )
            samples = ()
        channels[name] = samples

    return StreamRecord(time=time, **channels)


def require_stream(raw: Optional[Mapping[str, Any]]) -> StreamRecord:
    """Normalize a stream, raising when it is unusable."""
    stream = normalize_stream(raw)
    if stream is None:
        raise UnusableStreamError()
    return stream


# ============================================================================
# Presence predicates
# ============================================================================

def has_heart_rate_data(stream: Optional[StreamRecord]) -> bool:
    return stream is not None and any(v > 0 for v in stream.heartrate)


def has_power_data(stream: Optional[StreamRecord]) -> bool:
    return stream is not None and any(v > 0 for v in stream.power)


def has_altitude_data(stream: Optional[StreamRecord]) -> bool:
    # Altitude may legitimately be zero or negative
    return stream is not None and len(stream.altitude) > 0


def has_cadence_data(stream: Optional[StreamRecord]) -> bool:
    return stream is not None and any(v > 0 for v in stream.cadence)


def has_velocity_data(stream: Optional[StreamRecord]) -> bool:
    return stream is not None and any(v > 0 for v in stream.velocity)


def has_distance_data(stream: Optional[StreamRecord]) -> bool:
    return stream is not None and len(stream.distance) > 0
