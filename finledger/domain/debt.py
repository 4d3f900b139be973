"""
Debt domain rules - lifecycle state machine of a single debt

    active --payment--> active (partially paid)
    active --payment to zero / settle--> paid   (terminal)
    active --cancel--> cancelled               (terminal)

Every transition returns a patch dict for RecordStore.update_debt; an empty
patch means "nothing to do". Validation happens here, before any write.
"""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, Optional

from finledger.domain.errors import OverpaymentError, ValidationError
from finledger.utils.validation import require_positive, to_decimal, to_money

DEBT_TYPE_OWED_TO_ME = "owed_to_me"
DEBT_TYPE_I_OWE = "i_owe"
DEBT_TYPE_LOAN = "loan"
DEBT_TYPE_CREDIT_CARD = "credit_card"
DEBT_TYPES = (DEBT_TYPE_OWED_TO_ME, DEBT_TYPE_I_OWE, DEBT_TYPE_LOAN, DEBT_TYPE_CREDIT_CARD)

PRIORITY_LOW = "low"
PRIORITY_MEDIUM = "medium"
PRIORITY_HIGH = "high"
PRIORITIES = (PRIORITY_LOW, PRIORITY_MEDIUM, PRIORITY_HIGH)

STATUS_ACTIVE = "active"
STATUS_PAID = "paid"
STATUS_CANCELLED = "cancelled"

PAYMENT_FREQUENCIES = ("weekly", "monthly", "quarterly", "yearly", "one_time")

_ZERO = Decimal("0")
_CENT = Decimal("0.01")
_HIGH_PRIORITY_ABOVE = Decimal("1000")
_MEDIUM_PRIORITY_ABOVE = Decimal("500")
_MIN_PAYMENT_RATE = Decimal("0.1")
_MIN_PAYMENT_FLOOR = Decimal("10")
_MIN_PAYMENT_CEILING = Decimal("50")


def default_priority(amount: Decimal) -> str:
    """Priority from amount magnitude: > 1000 high, > 500 medium, else low."""
    if amount > _HIGH_PRIORITY_ABOVE:
        return PRIORITY_HIGH
    if amount > _MEDIUM_PRIORITY_ABOVE:
        return PRIORITY_MEDIUM
    return PRIORITY_LOW


def default_minimum_payment(amount: Decimal) -> Decimal:
    """10% of the amount, clamped to [10, 50]."""
    raw = amount * _MIN_PAYMENT_RATE
    clamped = min(_MIN_PAYMENT_CEILING, max(_MIN_PAYMENT_FLOOR, raw))
    return clamped.quantize(_CENT, rounding=ROUND_HALF_UP)


def derive_counterparty_names(description: str, direction: str, owner_name: str | None = None) -> tuple[str, str]:
    """
    Guess (creditor_name, debtor_name) from a free-text description.

    The first word of the description, capitalised, is taken as the other
    party's name. direction is "given" (the owner lent money) or "received"
    (the owner borrowed).

    Example:
        >>> derive_counterparty_names("ahmed lunch money", "given", "Sami")
        ("Sami", "Ahmed")
    """
    if direction not in ("given", "received"):
        raise ValidationError(f"Unknown debt direction: {direction!r}")

    words = description.strip().split()
    other = words[0].capitalize() if words else "Unknown"
    me = owner_name or "Me"

    if direction == "given":
        return me, other
    return other, me


class Debt:
    """Pure transition rules over a debt record (anything with the DebtRecord attributes)."""

    @staticmethod
    def create(
        owner_id: str,
        creditor_name: str,
        debt_type: str,
        original_amount,
        today: date,
        currency: str = "TND",
        debtor_name: str | None = None,
        due_date: date | None = None,
        debt_date: date | None = None,
        priority: str | None = None,
        minimum_payment=None,
        interest_rate="0",
        payment_frequency: str | None = None,
        category_id: int | None = None,
        description: str = "",
    ) -> Dict[str, Any]:
        """
        Validate and build the field set of a new active debt

        Raises:
            InvalidAmount: original_amount <= 0
            ValidationError: unknown debt_type / priority / frequency, empty creditor
        """
        amount = require_positive(original_amount, "original_amount")

        creditor_name = (creditor_name or "").strip()
        if not creditor_name:
            raise ValidationError("creditor_name is required")
        if debt_type not in DEBT_TYPES:
            raise ValidationError(f"Unknown debt_type: {debt_type!r}")
        if priority is not None and priority not in PRIORITIES:
            raise ValidationError(f"Unknown priority: {priority!r}")
        if payment_frequency is not None and payment_frequency not in PAYMENT_FREQUENCIES:
            raise ValidationError(f"Unknown payment_frequency: {payment_frequency!r}")

        rate = to_decimal(interest_rate, "interest_rate")
        if rate < 0:
            raise ValidationError("interest_rate cannot be negative")

        if minimum_payment is None:
            min_payment = default_minimum_payment(amount)
        else:
            min_payment = require_positive(minimum_payment, "minimum_payment")

        return {
            "owner_id": owner_id,
            "creditor_name": creditor_name,
            "debtor_name": debtor_name,
            "debt_type": debt_type,
            "original_amount": amount,
            "remaining_amount": amount,
            "currency": currency,
            "interest_rate": rate,
            "minimum_payment": min_payment,
            "payment_frequency": payment_frequency,
            "debt_date": debt_date or today,
            "due_date": due_date,
            "priority": priority or default_priority(amount),
            "status": STATUS_ACTIVE,
            "is_settled": False,
            "settlement_date": None,
            "category_id": category_id,
            "description": description,
        }

    @staticmethod
    def payment(debt, amount, today: date) -> Dict[str, Any]:
        """
        Apply a partial or full payment

        Raises:
            InvalidAmount: amount <= 0 or finer than one cent
            OverpaymentError: amount > remaining_amount
            ValidationError: debt is cancelled
        """
        paid = require_positive(amount)
        remaining = to_decimal(debt.remaining_amount)

        if paid > remaining:
            raise OverpaymentError(paid, remaining)
        if debt.status == STATUS_CANCELLED:
            raise ValidationError(f"Debt #{debt.id} is cancelled and accepts no payments")

        new_remaining = remaining - paid
        patch: Dict[str, Any] = {"remaining_amount": new_remaining}
        if new_remaining == _ZERO:
            patch.update(Debt._paid_fields(today))
        return patch

    @staticmethod
    def settle(debt, today: date) -> Dict[str, Any]:
        """
        Force the debt to paid (write-off / forgiven). Idempotent.

        Raises:
            ValidationError: debt is cancelled
        """
        if debt.is_settled:
            return {}
        if debt.status == STATUS_CANCELLED:
            raise ValidationError(f"Debt #{debt.id} is cancelled and cannot be settled")

        patch: Dict[str, Any] = {"remaining_amount": _ZERO}
        patch.update(Debt._paid_fields(today))
        return patch

    @staticmethod
    def cancel(debt) -> Dict[str, Any]:
        """
        Cancel an active debt. Idempotent for already-cancelled debts.

        Raises:
            ValidationError: debt is already paid
        """
        if debt.status == STATUS_CANCELLED:
            return {}
        if debt.status == STATUS_PAID or debt.is_settled:
            raise ValidationError(f"Debt #{debt.id} is already paid and cannot be cancelled")
        return {"status": STATUS_CANCELLED}

    @staticmethod
    def correct_balance(debt, new_remaining, today: date) -> Dict[str, Any]:
        """
        Administrative correction - the only path allowed to raise remaining_amount

        Raises:
            ValidationError: debt not active, or value outside [0, original_amount]
        """
        if debt.status != STATUS_ACTIVE:
            raise ValidationError(f"Only active debts can be corrected (debt #{debt.id} is {debt.status})")

        value = to_money(new_remaining, "remaining_amount")
        original = to_decimal(debt.original_amount)
        if value < 0 or value > original:
            raise ValidationError(f"remaining_amount must be within [0, {original}], got {value}")

        patch: Dict[str, Any] = {"remaining_amount": value}
        if value == _ZERO:
            patch.update(Debt._paid_fields(today))
        return patch

    @staticmethod
    def _paid_fields(today: date) -> Dict[str, Any]:
        return {
            "status": STATUS_PAID,
            "is_settled": True,
            "settlement_date": today,
        }


@dataclass(frozen=True)
class DebtSummary:
    total_owed_to_me: Decimal
    total_i_owe: Decimal
    net_position: Decimal
    total_debts: int
    overdue_debts: int
    settled_debts: int


def is_overdue(debt, today: date) -> bool:
    """Unsettled, not cancelled, and due before today."""
    return (
        not debt.is_settled
        and debt.status != STATUS_CANCELLED
        and debt.due_date is not None
        and debt.due_date < today
    )


def summarize(debts: Iterable, today: date) -> DebtSummary:
    """
    Fold a debt collection into owner-level totals.

    total_debts counts every unsettled debt. Cancelled debts are counted there
    and nowhere else: nothing is owed on them and they are never overdue.
    loan and credit_card debts count in total_debts but in neither direction total.
    """
    owed_to_me = _ZERO
    i_owe = _ZERO
    unsettled = 0
    overdue = 0
    settled = 0

    for d in debts:
        if d.is_settled:
            settled += 1
            continue
        unsettled += 1
        if d.status == STATUS_CANCELLED:
            continue
        if d.debt_type == DEBT_TYPE_OWED_TO_ME:
            owed_to_me += to_decimal(d.remaining_amount)
        elif d.debt_type == DEBT_TYPE_I_OWE:
            i_owe += to_decimal(d.remaining_amount)
        if is_overdue(d, today):
            overdue += 1

    return DebtSummary(
        total_owed_to_me=owed_to_me,
        total_i_owe=i_owe,
        net_position=owed_to_me - i_owe,
        total_debts=unsettled,
        overdue_debts=overdue,
        settled_debts=settled,
    )
