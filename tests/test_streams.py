"""Tests for activity stream normalization."""

import pytest

from training_analytics.exceptions import ErrorCode, UnusableStreamError
from training_analytics.streams import (
    StreamRecord,
    has_altitude_data,
    has_heart_rate_data,
    has_power_data,
    normalize_stream,
    require_stream,
)


class TestNormalizeStream:
    """Tests for building a StreamRecord from raw channels."""

    def test_missing_stream_returns_none(self):
        """No mapping at all is not an error."""
        assert normalize_stream(None) is None
        assert normalize_stream({}) is None

    def test_empty_time_returns_none(self):
        """A stream without time samples cannot be analyzed."""
        assert normalize_stream({"time": [], "heartrate": [120, 121]}) is None

    def test_aliases_are_resolved(self):
        """Source-specific channel names map onto the canonical channels."""
        stream = normalize_stream({
            "time": [0, 1, 2],
            "velocity_smooth": [1.0, 2.0, 3.0],
            "watts": [100, None, 120],
            "heart_rate": [110, 111, 112],
        })
        assert stream.velocity == (1.0, 2.0, 3.0)
        assert stream.power == (100.0, 0.0, 120.0)
        assert stream.heartrate == (110.0, 111.0, 112.0)

    def test_wrapped_samples(self):
        """Channels wrapped as {"data": [...]} are unwrapped."""
        stream = normalize_stream({"time": {"data": [0, 1]}, "cadence": {"data": [80, 82]}})
        assert stream.time == (0.0, 1.0)
        assert stream.cadence == (80.0, 82.0)

    def test_missing_channels_default_to_empty(self):
        """Unrecorded channels are empty, never None."""
        stream = normalize_stream({"time": [0, 1, 2]})
        assert stream.power == ()
        assert stream.altitude == ()
        assert len(stream) == 3

    def test_long_channel_is_truncated(self):
        """Extra samples beyond the time channel are cut off."""
        stream = normalize_stream({"time": [0, 1], "heartrate": [100, 101, 102]})
        assert stream.heartrate == (100.0, 101.0)

    def test_short_channel_is_dropped(self):
        """A channel that cannot be aligned with time is discarded."""
        stream = normalize_stream({"time": [0, 1, 2], "heartrate": [100]})
        assert stream.heartrate == ()

    def test_duration(self):
        stream = normalize_stream({"time": [10, 11, 40]})
        assert stream.duration == 30.0


class TestRequireStream:
    """Tests for the raising variant used at input boundaries."""

    def test_raises_without_time(self):
        """Unusable streams are reported with a dedicated error code."""
        with pytest.raises(UnusableStreamError) as exc_info:
            require_stream({"heartrate": [100, 101]})
        assert exc_info.value.code == ErrorCode.UNUSABLE_STREAM
        assert exc_info.value.status_code == 400

    def test_returns_record(self):
        assert isinstance(require_stream({"time": [0, 1]}), StreamRecord)


class TestPresencePredicates:
    """Tests for channel presence checks."""

    def test_zero_heart_rate_is_absent(self):
        """A heart rate channel of zeros means no strap was worn."""
        stream = StreamRecord(time=(0.0, 1.0), heartrate=(0.0, 0.0))
        assert not has_heart_rate_data(stream)

    def test_power_needs_positive_sample(self):
        stream = StreamRecord(time=(0.0, 1.0), power=(0.0, 150.0))
        assert has_power_data(stream)

    def test_zero_altitude_is_present(self):
        """Sea-level altitude is still altitude data."""
        stream = StreamRecord(time=(0.0, 1.0), altitude=(0.0, 0.0))
        assert has_altitude_data(stream)

    def test_none_stream(self):
        assert not has_power_data(None)
        assert not has_altitude_data(None)
