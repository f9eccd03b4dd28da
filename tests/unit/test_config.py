"""Unit tests for EventsConfig."""

from dataclasses import FrozenInstanceError

import pytest

from imes.config import EventsConfig


class TestEventsConfig:
    """Tests for EventsConfig defaults and validation."""

    def test_defaults(self):
        config = EventsConfig()

        assert config.enable_tracing is False
        assert config.notify is True
        assert config.write_on_load is False
        assert config.validate_payloads is True
        assert config.progress_interval == 1000

    def test_is_frozen(self):
        config = EventsConfig()
        with pytest.raises(FrozenInstanceError):
            config.notify = False  # type: ignore[misc]

    @pytest.mark.parametrize("interval", [0, -5])
    def test_progress_interval_must_be_positive(self, interval):
        with pytest.raises(ValueError, match="progress_interval must be positive"):
            EventsConfig(progress_interval=interval)
