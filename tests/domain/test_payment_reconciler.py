"""Tests for the payment/refund reconciler against in-memory fakes."""

from datetime import date

import pytest

from rentals.domain.exceptions import (
    IllegalStateError,
    NotFoundError,
    RefundExceedsPaidError,
    ValidationError,
)
from rentals.domain.model.finance import FinanceType
from rentals.domain.model.order import Order, OrderItem, OrderStatus
from rentals.domain.model.payment import PaymentMethod, PaymentStatus, PaymentType
from rentals.domain.model.value_objects import Money, Quantity
from rentals.domain.service.payment_reconciler import (
    PaymentReconciler,
    parse_gateway_status,
)
from tests.fakes import FakeUnitOfWork, fixed_clock, make_item


def _setup(
    status: OrderStatus = OrderStatus.CONFIRMED, deposit: str = "100.00"
) -> tuple[PaymentReconciler, FakeUnitOfWork, Order]:
    uow = FakeUnitOfWork([make_item()])
    order = Order(
        id=None,
        order_no="ORD1",
        user_id="alice",
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 4),
        items=[
            OrderItem(
                item_id="1",
                item_name="Camera",
                quantity=Quantity(1),
                price_per_day=Money.of("150.00"),
                total_amount=Money.of("450.00"),
            )
        ],
        status=status,
        deposit_amount=Money.of(deposit),
    )
    uow.orders.save(order)
    return PaymentReconciler(uow, clock=fixed_clock()), uow, order


def _settled(reconciler, order, amount="450.00", txn="T1", type=PaymentType.RENTAL):
    payment = reconciler.link_payment(order, Money.of(amount), PaymentMethod.ALIPAY, type)
    reconciler.apply_gateway_result(payment.payment_no, "TRADE_SUCCESS", txn)
    return payment


class TestGatewayStatus:

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("SUCCESS", PaymentStatus.SUCCESS),
            ("trade_success", PaymentStatus.SUCCESS),
            ("TRADE_FINISHED", PaymentStatus.SUCCESS),
            ("TRADE_CLOSED", PaymentStatus.FAILED),
            ("TRADE_CANCELLED", PaymentStatus.CANCELLED),
            ("WAIT_BUYER_PAY", PaymentStatus.PENDING),
        ],
    )
    def test_mapping(self, raw, expected):
        assert parse_gateway_status(raw) == expected


class TestLinkPayment:

    def test_creates_pending_payment(self):
        reconciler, uow, order = _setup()
        payment = reconciler.link_payment(
            order, Money.of("450.00"), PaymentMethod.WECHAT, PaymentType.RENTAL
        )
        assert payment.status == PaymentStatus.PENDING
        assert payment.payment_no.startswith("PAY20240101090000")
        assert uow.payments.get_by_id(payment.id) is payment

    def test_rental_payment_needs_confirmed_order(self):
        reconciler, _, order = _setup(status=OrderStatus.PENDING)
        with pytest.raises(IllegalStateError):
            reconciler.link_payment(
                order, Money.of("450.00"), PaymentMethod.ALIPAY, PaymentType.RENTAL
            )

    def test_amount_above_outstanding_rejected(self):
        reconciler, _, order = _setup()
        reconciler.link_payment(
            order, Money.of("400.00"), PaymentMethod.ALIPAY, PaymentType.RENTAL
        )
        with pytest.raises(ValidationError, match="exceeds outstanding 50.00"):
            reconciler.link_payment(
                order, Money.of("60.00"), PaymentMethod.ALIPAY, PaymentType.RENTAL
            )

    def test_deposit_accepted_after_paid(self):
        reconciler, _, order = _setup(status=OrderStatus.PAID)
        payment = reconciler.link_payment(
            order, Money.of("100.00"), PaymentMethod.ALIPAY, PaymentType.DEPOSIT
        )
        assert payment.type == PaymentType.DEPOSIT


class TestApplyGatewayResult:

    def test_success_writes_income_and_covers_order(self):
        reconciler, uow, order = _setup()
        payment = reconciler.link_payment(
            order, Money.of("450.00"), PaymentMethod.ALIPAY, PaymentType.RENTAL
        )
        settlement = reconciler.apply_gateway_result(payment.payment_no, "SUCCESS", "T1")
        assert settlement.payment.status == PaymentStatus.SUCCESS
        assert settlement.order_covered
        [income] = uow.finance_records.list_all()
        assert income.type == FinanceType.INCOME
        assert income.amount == Money.of("450.00")
        assert income.payment_id == payment.id

    def test_partial_payment_does_not_cover(self):
        reconciler, _, order = _setup()
        payment = reconciler.link_payment(
            order, Money.of("200.00"), PaymentMethod.ALIPAY, PaymentType.RENTAL
        )
        settlement = reconciler.apply_gateway_result(payment.payment_no, "SUCCESS", "T1")
        assert not settlement.order_covered

    def test_replayed_transaction_is_a_no_op(self):
        reconciler, uow, order = _setup()
        payment = _settled(reconciler, order)
        again = reconciler.apply_gateway_result(payment.payment_no, "SUCCESS", "T1")
        assert again.duplicate
        assert not again.order_covered
        assert len(uow.finance_records.list_all()) == 1

    def test_transaction_reused_for_other_payment_rejected(self):
        reconciler, _, order = _setup()
        _settled(reconciler, order, amount="200.00")
        other = reconciler.link_payment(
            order, Money.of("100.00"), PaymentMethod.ALIPAY, PaymentType.RENTAL
        )
        with pytest.raises(ValidationError, match="already belongs"):
            reconciler.apply_gateway_result(other.payment_no, "SUCCESS", "T1")

    def test_unknown_payment(self):
        reconciler, _, _ = _setup()
        with pytest.raises(NotFoundError):
            reconciler.apply_gateway_result("PAY-NOPE", "SUCCESS", "T9")

    def test_failure_writes_nothing(self):
        reconciler, uow, order = _setup()
        payment = reconciler.link_payment(
            order, Money.of("450.00"), PaymentMethod.ALIPAY, PaymentType.RENTAL
        )
        settlement = reconciler.apply_gateway_result(payment.payment_no, "TRADE_CLOSED", "T1")
        assert settlement.payment.status == PaymentStatus.FAILED
        assert uow.finance_records.list_all() == []

    def test_unknown_status_leaves_payment_pending(self):
        reconciler, _, order = _setup()
        payment = reconciler.link_payment(
            order, Money.of("450.00"), PaymentMethod.ALIPAY, PaymentType.RENTAL
        )
        settlement = reconciler.apply_gateway_result(payment.payment_no, "WAIT_BUYER_PAY", "T1")
        assert settlement.payment.status == PaymentStatus.PENDING

    def test_success_after_cancellation_is_refunded(self):
        reconciler, uow, order = _setup()
        payment = reconciler.link_payment(
            order, Money.of("450.00"), PaymentMethod.ALIPAY, PaymentType.RENTAL
        )
        order.status = OrderStatus.CANCELLED
        uow.orders.save(order)
        reconciler.apply_gateway_result(payment.payment_no, "SUCCESS", "T1")
        types = [r.type for r in uow.finance_records.list_all()]
        assert types == [FinanceType.INCOME, FinanceType.REFUND]
        assert reconciler.refundable_amount(payment).is_zero


class TestRefund:

    def test_refund_above_paid_rejected(self):
        reconciler, uow, order = _setup()
        payment = _settled(reconciler, order)
        with pytest.raises(RefundExceedsPaidError) as exc_info:
            reconciler.refund(payment, Money.of("500.00"), "too much")
        assert exc_info.value.refundable == Money.of("450.00")
        assert [r.type for r in uow.finance_records.list_all()] == [FinanceType.INCOME]

    def test_partial_refund(self):
        reconciler, uow, order = _setup()
        payment = _settled(reconciler, order)
        refund = reconciler.refund(payment, Money.of("200.00"), "late delivery")
        assert refund.type == PaymentType.REFUND
        assert refund.status == PaymentStatus.SUCCESS
        assert refund.refunded_payment_id == payment.id
        refunds = [
            r for r in uow.finance_records.list_all() if r.type == FinanceType.REFUND
        ]
        assert len(refunds) == 1
        assert refunds[0].amount == Money.of("200.00")
        assert refunds[0].payment_id == payment.id

    def test_cumulative_refunds_are_capped(self):
        reconciler, _, order = _setup()
        payment = _settled(reconciler, order)
        reconciler.refund(payment, Money.of("300.00"), "first")
        with pytest.raises(RefundExceedsPaidError):
            reconciler.refund(payment, Money.of("150.01"), "second")
        reconciler.refund(payment, Money.of("150.00"), "second")
        assert reconciler.refundable_amount(payment).is_zero

    def test_pending_payment_cannot_be_refunded(self):
        reconciler, _, order = _setup()
        payment = reconciler.link_payment(
            order, Money.of("450.00"), PaymentMethod.ALIPAY, PaymentType.RENTAL
        )
        with pytest.raises(RefundExceedsPaidError):
            reconciler.refund(payment, Money.of("1.00"), "never paid")

    def test_zero_refund_rejected(self):
        reconciler, _, order = _setup()
        payment = _settled(reconciler, order)
        with pytest.raises(ValidationError, match="greater than zero"):
            reconciler.refund(payment, Money.zero(), "nothing")

    def test_refund_order_returns_everything_settled(self):
        reconciler, _, order = _setup()
        rent = _settled(reconciler, order)
        deposit = _settled(reconciler, order, "100.00", "T2", PaymentType.DEPOSIT)
        refunds = reconciler.refund_order(order, "rejected")
        assert sorted(r.amount for r in refunds) == [Money.of("100.00"), Money.of("450.00")]
        assert reconciler.refundable_amount(rent).is_zero
        assert reconciler.refundable_amount(deposit).is_zero

    def test_refund_deposit_leaves_rent(self):
        reconciler, _, order = _setup()
        rent = _settled(reconciler, order)
        _settled(reconciler, order, "100.00", "T2", PaymentType.DEPOSIT)
        [refund] = reconciler.refund_deposit(order, "returned")
        assert refund.amount == Money.of("100.00")
        assert reconciler.refundable_amount(rent) == Money.of("450.00")


class TestCancelPayment:

    def test_pending_payment_cancelled(self):
        reconciler, _, order = _setup()
        payment = reconciler.link_payment(
            order, Money.of("450.00"), PaymentMethod.ALIPAY, PaymentType.RENTAL
        )
        reconciler.cancel_payment(payment)
        assert payment.status == PaymentStatus.CANCELLED

    def test_settled_payment_cannot_be_cancelled(self):
        reconciler, _, order = _setup()
        payment = _settled(reconciler, order)
        with pytest.raises(IllegalStateError):
            reconciler.cancel_payment(payment)
