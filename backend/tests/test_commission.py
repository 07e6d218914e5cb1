import pytest

from engine.commission import DEFAULT_COMMISSION_RATE, resolve_commission_rate, split_payment


@pytest.mark.parametrize(
    "total,rate",
    [(100000, 10), (75000, 8), (123457, 12.5), (1, 33.3), (0, 10), (99999.99, 100), (5000, 0)],
)
def test_split_shares_sum_to_total(total, rate) -> None:
    agency, owner = split_payment(total, rate)
    assert agency + owner == pytest.approx(total)
    assert agency == pytest.approx(total * rate / 100)


def test_split_reference_case() -> None:
    assert split_payment(100000, 10) == (10000.0, 90000.0)


@pytest.mark.parametrize("total,rate", [(-1, 10), (1000, -5), (1000, 101)])
def test_split_rejects_invalid_input(total, rate) -> None:
    with pytest.raises(ValueError):
        split_payment(total, rate)


def test_rate_resolution_order() -> None:
    assert resolve_commission_rate(12, 8) == 12
    assert resolve_commission_rate(None, 8) == 8
    assert resolve_commission_rate(0, 8) == 0
    assert resolve_commission_rate(None, None) == DEFAULT_COMMISSION_RATE == 10
