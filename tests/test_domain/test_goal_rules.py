"""
Tests for savings goal rules (clamping, one-shot achievement)
"""
from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest

from finledger.domain.errors import InvalidAmount, ValidationError
from finledger.domain.goal import Goal, progress_pct

NOW = datetime(2026, 3, 15, 12, 0)


def make_goal(current="0", target="100", achieved=False):
    return SimpleNamespace(
        id=1,
        current_amount=Decimal(current),
        target_amount=Decimal(target),
        is_achieved=achieved,
        achievement_date=NOW if achieved else None,
    )


class TestContribution:
    def test_contribution_below_target(self):
        assert Goal.contribution(make_goal("10"), "25", NOW) == {"current_amount": Decimal("35")}

    def test_contribution_is_clamped_at_target(self):
        patch = Goal.contribution(make_goal("80"), "50", NOW)

        assert patch["current_amount"] == Decimal("100")
        assert patch["is_achieved"] is True
        assert patch["achievement_date"] == NOW

    def test_exact_target_achieves(self):
        patch = Goal.contribution(make_goal("99.99"), "0.01", NOW)

        assert patch["is_achieved"] is True

    def test_achievement_recorded_once(self):
        goal = make_goal("100", achieved=True)

        patch = Goal.contribution(goal, "20", datetime(2026, 4, 1))

        assert patch == {"current_amount": Decimal("100")}

    @pytest.mark.parametrize("amount", ["0", "-1"])
    def test_non_positive_contribution_rejected(self, amount):
        with pytest.raises(InvalidAmount):
            Goal.contribution(make_goal(), amount, NOW)


class TestCreateAndUpdate:
    def test_create_defaults(self):
        fields = Goal.create(owner_id="o", title=" Trip ", target_amount="1000", now=NOW)

        assert fields["title"] == "Trip"
        assert fields["current_amount"] == Decimal("0")
        assert fields["is_achieved"] is False
        assert fields["achievement_date"] is None

    def test_create_already_at_target_is_achieved(self):
        fields = Goal.create(owner_id="o", title="Phone", target_amount="300", now=NOW, current_amount="300")

        assert fields["is_achieved"] is True
        assert fields["achievement_date"] == NOW

    def test_create_current_above_target_rejected(self):
        with pytest.raises(ValidationError):
            Goal.create(owner_id="o", title="Phone", target_amount="300", now=NOW, current_amount="301")

    def test_create_empty_title_rejected(self):
        with pytest.raises(ValidationError, match="title"):
            Goal.create(owner_id="o", title="   ", target_amount="300", now=NOW)

    def test_update_target_below_current_rejected(self):
        with pytest.raises(ValidationError, match="below"):
            Goal.update(make_goal("60"), NOW, target_amount="50")

    def test_update_target_to_current_achieves(self):
        patch = Goal.update(make_goal("60"), NOW, target_amount="60")

        assert patch["target_amount"] == Decimal("60")
        assert patch["is_achieved"] is True

    def test_update_has_no_current_amount(self):
        patch = Goal.update(make_goal("10"), NOW, title="New", priority="high")

        assert patch == {"title": "New", "priority": "high"}


class TestProgress:
    @pytest.mark.parametrize("current, target, expected", [
        ("0", "100", 0.0),
        ("25", "100", 25.0),
        ("100", "100", 100.0),
        ("10", "0", 0.0),
    ])
    def test_progress_pct(self, current, target, expected):
        assert progress_pct(Decimal(current), Decimal(target)) == pytest.approx(expected)
