"""
Tests for category labels and the transaction entity
"""
from datetime import datetime, timezone, timedelta
from decimal import Decimal

import pytest

from finledger.domain.category import Category, category_label
from finledger.domain.errors import InvalidAmount, ValidationError
from finledger.domain.transaction import Transaction


class TestCategoryLabel:
    def test_requested_language(self):
        category = Category(id=1, kind="expense", labels={"en": "Food", "fr": "Alimentation"})

        assert category.label("fr") == "Alimentation"

    def test_falls_back_to_english(self):
        category = Category(id=1, kind="expense", labels={"en": "Food", "tn": "Makla"})

        assert category.label("ar") == "Food"

    def test_falls_back_to_tunisian_then_other(self):
        assert Category(id=1, kind="expense", labels={"tn": "Makla"}).label("fr") == "Makla"
        assert Category(id=2, kind="expense", labels={}).label("fr") == "Other"

    def test_missing_category(self):
        assert category_label(None, "en") == "Other"


class TestTransactionEntity:
    def test_create_normalizes_aware_datetime_to_naive_utc(self):
        tz = timezone(timedelta(hours=1))
        fields = Transaction.create(
            owner_id="o", kind="expense", amount="12.50",
            occurred_at=datetime(2026, 3, 15, 13, 0, tzinfo=tz),
        )

        assert fields["occurred_at"] == datetime(2026, 3, 15, 12, 0)
        assert fields["amount"] == Decimal("12.50")

    def test_create_rejects_unknown_kind(self):
        with pytest.raises(ValidationError, match="kind"):
            Transaction.create(owner_id="o", kind="refund", amount="1", occurred_at=datetime(2026, 1, 1))

    def test_create_rejects_zero_amount(self):
        with pytest.raises(InvalidAmount):
            Transaction.create(owner_id="o", kind="income", amount="0", occurred_at=datetime(2026, 1, 1))

    def test_update_patch_has_no_kind(self):
        patch = Transaction.update(amount="3", description=" fixed ")

        assert patch == {"amount": Decimal("3"), "description": "fixed"}

    def test_update_can_clear_category(self):
        assert Transaction.update(category_id=None) == {"category_id": None}
        assert Transaction.update() == {}
