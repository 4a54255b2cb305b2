import time

import pytest

from stackshot.utils.sync import FixedDelayWaiter


def test_fixed_delay_waiter_sleeps_the_same_time_on_every_call(monkeypatch):
    sleeps = []
    monkeypatch.setattr(time, "sleep", sleeps.append)

    waiter = FixedDelayWaiter(2.5)
    waiter()
    waiter()

    assert sleeps == [2.5, 2.5]


def test_fixed_delay_waiter_zero_delay():
    waiter = FixedDelayWaiter(0)
    waiter()
    assert repr(waiter) == "FixedDelayWaiter(delay=0)"


def test_fixed_delay_waiter_rejects_negative_delay():
    with pytest.raises(ValueError):
        FixedDelayWaiter(-1)
