"""Unit tests for smart-lock liveness and signal helpers."""
from datetime import datetime, timedelta

import pytest

from common.liveness import is_lock_online, signal_label

NOW = datetime(2030, 1, 1, 12, 0, 0)


class TestIsLockOnline:
    def test_never_pinged_is_offline(self):
        assert is_lock_online(None, NOW) is False

    def test_recent_ping_is_online(self):
        assert is_lock_online(NOW - timedelta(minutes=4, seconds=59), NOW) is True

    def test_window_boundary_is_offline(self):
        """Exactly five minutes old no longer counts as online."""
        assert is_lock_online(NOW - timedelta(minutes=5), NOW) is False

    def test_old_ping_is_offline(self):
        assert is_lock_online(NOW - timedelta(minutes=6), NOW) is False

    def test_defaults_to_current_time(self):
        assert is_lock_online(datetime.utcnow() - timedelta(seconds=10)) is True


@pytest.mark.parametrize(
    ("strength", "label"),
    [(None, "Poor"), (0, "Poor"), (5, "Weak"), (40, "Weak"), (41, "Medium"), (70, "Medium"), (71, "Strong")],
)
def test_signal_label(strength, label):
    assert signal_label(strength) == label
