import pytest

from seatbot.errors import ConfigError
from seatbot.validator import BookingValidator, RejectReason


@pytest.fixture
def validator():
    return BookingValidator(max_seats=10, max_seats_per_user=4)


def test_booking_over_global_capacity_is_rejected(validator):
    decision = validator.decide(3, user_total=0, grand_total=8)
    assert not decision.accepted
    assert decision.reason is RejectReason.GLOBAL_CAPACITY_EXCEEDED


def test_booking_filling_capacity_exactly_is_accepted(validator):
    decision = validator.decide(2, user_total=0, grand_total=8)
    assert decision.accepted
    assert decision.reason is None


def test_per_user_limit(validator):
    assert validator.decide(2, user_total=3, grand_total=3).reason is RejectReason.PER_USER_LIMIT_EXCEEDED
    assert validator.decide(1, user_total=3, grand_total=3).accepted


def test_global_capacity_is_checked_before_per_user_limit(validator):
    decision = validator.decide(4, user_total=3, grand_total=9)
    assert decision.reason is RejectReason.GLOBAL_CAPACITY_EXCEEDED


def test_cancel_more_than_held_is_rejected(validator):
    decision = validator.decide(-3, user_total=2, grand_total=5)
    assert not decision.accepted
    assert decision.reason is RejectReason.INSUFFICIENT_USER_BOOKINGS


def test_cancel_all_held_is_accepted(validator):
    assert validator.decide(-2, user_total=2, grand_total=5).accepted


def test_cancel_ignores_capacity(validator):
    assert validator.decide(-1, user_total=4, grand_total=12).accepted


def test_recorded_delta_is_zero_for_rejections(validator):
    assert validator.decide(3, user_total=0, grand_total=8).recorded_delta(3) == 0
    assert validator.decide(2, user_total=0, grand_total=8).recorded_delta(2) == 2
    assert validator.decide(-2, user_total=2, grand_total=2).recorded_delta(-2) == -2


@pytest.mark.parametrize("delta", [0, 5, -5])
def test_out_of_range_delta_raises(validator, delta):
    with pytest.raises(ValueError):
        validator.decide(delta, user_total=0, grand_total=0)


def test_missing_per_user_limit_is_a_config_error():
    with pytest.raises(ConfigError):
        BookingValidator(max_seats=10, max_seats_per_user=None)
