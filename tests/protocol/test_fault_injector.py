import random

import pytest

from chatrelay.protocol import FaultInjector


def test_disabled_injector_never_drops():
    injector = FaultInjector(1.0, enabled=False)
    assert not any(injector.should_drop(recipient="bob", seq=i) for i in range(100))
    assert not FaultInjector.disabled().should_drop(recipient="bob", seq=0)


def test_certain_loss_always_drops():
    injector = FaultInjector(1.0)
    assert all(injector.should_drop(recipient="bob", seq=i) for i in range(20))


def test_drop_rate_tracks_probability():
    injector = FaultInjector(0.1, rng=random.Random(42))
    drops = sum(injector.should_drop(recipient="bob", seq=i) for i in range(5_000))
    assert 350 < drops < 650


def test_seeded_injectors_are_deterministic():
    a = FaultInjector(0.5, rng=random.Random(3))
    b = FaultInjector(0.5, rng=random.Random(3))
    assert [a.should_drop(recipient="r", seq=i) for i in range(50)] == [
        b.should_drop(recipient="r", seq=i) for i in range(50)
    ]


@pytest.mark.parametrize("probability", [-0.1, 1.5])
def test_probability_outside_unit_interval_is_rejected(probability):
    with pytest.raises(ValueError):
        FaultInjector(probability)
