from orderdesk.risk import (
    RISK_BLOCKED,
    RISK_SAFE,
    RISK_WARNING,
    RiskAssessment,
    classify_customer,
)

PHONE = "0770000000"


def _history(*statuses):
    return [{"phone": PHONE, "status": s} for s in statuses]


def test_blacklisted_phone_is_blocked_with_reason():
    blacklist = [{"phone": PHONE, "reason": "fraud"}]

    result = classify_customer(PHONE, blacklist, [])

    assert result.status == RISK_BLOCKED
    assert "fraud" in result.message
    assert result.blocks_submission


def test_high_return_rate_is_a_warning():
    result = classify_customer(PHONE, [], _history("returned", "returned", "delivered"))

    assert result.status == RISK_WARNING
    assert (result.returned, result.total) == (2, 3)
    assert "2" in result.message and "3" in result.message
    assert not result.blocks_submission


def test_exactly_half_returned_is_a_warning():
    result = classify_customer(PHONE, [], _history("returned", "delivered"))

    assert result.status == RISK_WARNING


def test_single_prior_order_is_safe_even_if_returned():
    result = classify_customer(PHONE, [], _history("returned"))

    assert result.status == RISK_SAFE


def test_low_return_rate_and_no_history_are_safe():
    assert classify_customer(PHONE, [], _history("returned", "delivered", "delivered")).status == RISK_SAFE
    assert classify_customer(PHONE, [], []).status == RISK_SAFE


def test_blacklist_wins_over_return_rate():
    blacklist = [{"phone": PHONE, "reason": "abusive"}]

    result = classify_customer(PHONE, blacklist, _history("returned", "returned"))

    assert result.status == RISK_BLOCKED


def test_blacklist_of_other_numbers_is_ignored():
    blacklist = [{"phone": "0771111111", "reason": "fraud"}]

    assert classify_customer(PHONE, blacklist, []).status == RISK_SAFE


def test_short_phone_is_not_checked():
    blacklist = [{"phone": "0770", "reason": "fraud"}]

    assert classify_customer("0770", blacklist, []).status == RISK_SAFE


def test_unchanged_phone_on_edit_keeps_previous_state():
    blacklist = [{"phone": PHONE, "reason": "fraud"}]
    previous = RiskAssessment(RISK_WARNING, "old banner")

    assert classify_customer(PHONE, blacklist, [], original_phone=PHONE).status == RISK_SAFE
    assert classify_customer(PHONE, blacklist, [], original_phone=PHONE, previous=previous) is previous


def test_changed_phone_on_edit_is_checked():
    blacklist = [{"phone": PHONE, "reason": "fraud"}]

    result = classify_customer(PHONE, blacklist, [], original_phone="0779999999")

    assert result.status == RISK_BLOCKED
