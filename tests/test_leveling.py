"""
Tests for levels, tiers, milestones and achievements.
"""

import pytest
from decimal import Decimal

from finflow.aggregation import (
    ACHIEVEMENTS,
    LEVEL_TIERS,
    NET_WORTH_MILESTONES,
    BudgetProgress,
    TierRange,
    TierTable,
    achievement_tier_for,
    evaluate_achievements,
    investment_level,
    net_worth_level,
    net_worth_tier,
    next_milestone,
    progress_in_tier,
    savings_goal_xp,
    total_xp,
)
from finflow.models import Account, FinanceStreak, Investment, SavingsGoalProgress, StreakType
from finflow.projections import BudgetTier
from finflow.registry import ExpenseCategory


class TestLevels:
    """Tests for net worth levels."""

    @pytest.mark.parametrize("amount,level", [
        (-5000, 1),
        (0, 1),
        (Decimal("0.5"), 1),
        (1000, 30),
        (1_000_000, 60),
        (10 ** 12, 100),
    ])
    def test_net_worth_level(self, amount, level):
        """Test the logarithmic level scale."""
        assert net_worth_level(amount) == level

    def test_investment_level_shares_scale(self):
        """Test that portfolio value uses the same scale."""
        assert investment_level(Decimal("1000")) == 30

    def test_tier_names(self):
        """Test tier lookup by level."""
        assert net_worth_tier(1).name == "Beginner"
        assert net_worth_tier(30).name == "Investor"
        assert net_worth_tier(60).name == "Rich"
        assert net_worth_tier(100).name == "Legend"

    def test_tier_lookup_clamps(self):
        """Test that out-of-range levels resolve to the boundary tiers."""
        assert LEVEL_TIERS.lookup(0).name == "Beginner"
        assert LEVEL_TIERS.lookup(-10).name == "Beginner"
        assert LEVEL_TIERS.lookup(150).name == "Legend"

    def test_progress_in_tier(self):
        """Test progress through a tier."""
        assert progress_in_tier(1) == 0.0
        assert progress_in_tier(15) == pytest.approx(40.0)
        assert progress_in_tier(20) == pytest.approx(90.0)


class TestTierTable:
    """Tests for TierTable validation."""

    def test_gap_is_rejected(self):
        """Test that tiers must be contiguous."""
        with pytest.raises(ValueError):
            TierTable([
                TierRange(min=0, max=9, name="low"),
                TierRange(min=11, max=20, name="high"),
            ])

    def test_open_range_must_be_last(self):
        """Test that only the last tier may be open-ended."""
        with pytest.raises(ValueError):
            TierTable([
                TierRange(min=0, name="low"),
                TierRange(min=1, max=5, name="high"),
            ])

    def test_empty_table_is_rejected(self):
        """Test that a table needs tiers."""
        with pytest.raises(ValueError):
            TierTable([])

    def test_inverted_range_is_rejected(self):
        """Test that a range cannot end before it starts."""
        with pytest.raises(ValueError):
            TierRange(min=10, max=5, name="broken")

    def test_open_ended_lookup(self):
        """Test lookups in an open-ended last tier."""
        table = TierTable([TierRange(min=0, max=9, name="low"), TierRange(min=10, name="high")])
        assert table.lookup(5).name == "low"
        assert table.lookup(10 ** 9).name == "high"


class TestMilestones:
    """Tests for milestones and achievement tiers."""

    def test_achievement_tiers(self):
        """Test milestone tiers by net worth."""
        assert achievement_tier_for(0).name == "Getting Started"
        assert achievement_tier_for(999.99).name == "Getting Started"
        assert achievement_tier_for(1500).name == "First Thousand"
        assert achievement_tier_for(2_000_000).name == "Millionaire"

    def test_negative_net_worth_clamps(self):
        """Test that negative net worth uses the first tier."""
        assert achievement_tier_for(-2500).name == "Getting Started"

    def test_next_milestone(self):
        """Test the next unreached milestone."""
        assert next_milestone(0).amount == 1000
        assert next_milestone(1000).amount == 5000
        assert next_milestone(1_000_000) is None

    def test_milestones_are_ascending(self):
        """Test milestone ordering."""
        amounts = [m.amount for m in NET_WORTH_MILESTONES]
        assert amounts == sorted(amounts)

    @pytest.mark.parametrize("target,xp", [
        (100, 25),
        (500, 50),
        (1000, 75),
        (5000, 100),
        (25000, 150),
    ])
    def test_savings_goal_xp(self, target, xp):
        """Test XP scaling by goal target."""
        assert savings_goal_xp(target) == xp


class TestAchievements:
    """Tests for evaluate_achievements."""

    def _unlocked(self, statuses):
        return {status.key for status in statuses if status.unlocked}

    def test_catalogue_order(self):
        """Test that every achievement is reported once, in order."""
        statuses = evaluate_achievements(0)
        assert [s.key for s in statuses] == [a.key for a in ACHIEVEMENTS]
        assert self._unlocked(statuses) == set()

    def test_net_worth_achievements(self):
        """Test net worth thresholds."""
        unlocked = self._unlocked(evaluate_achievements(Decimal("12000")))
        assert {"net_worth_1000", "net_worth_5000", "net_worth_10000"} <= unlocked
        assert "net_worth_25000" not in unlocked

    def test_previously_unlocked_stays_unlocked(self):
        """Test that stored unlocks are kept."""
        unlocked = self._unlocked(evaluate_achievements(0, unlocked_keys={"net_worth_1000"}))
        assert unlocked == {"net_worth_1000"}

    def test_streak_achievements(self):
        """Test that the longest positive cashflow streak counts."""
        streaks = [FinanceStreak(
            streak_type=StreakType.POSITIVE_CASHFLOW, current_streak=2, longest_streak=9,
        )]
        unlocked = self._unlocked(evaluate_achievements(0, streaks=streaks))
        assert "savings_streak_7" in unlocked
        assert "savings_streak_30" not in unlocked

    def test_goal_and_investment_achievements(self):
        """Test first goal, first investment and diversification."""
        goals = [SavingsGoalProgress(
            id="g1", name="Bike", target_amount=Decimal("500"), current_amount=Decimal("500"),
        )]
        investments = [
            Investment(id="i1", asset_type="stock", quantity=Decimal("1")),
            Investment(id="i2", asset_type="etf", quantity=Decimal("1")),
            Investment(id="i3", asset_type="bond", quantity=Decimal("1")),
        ]
        unlocked = self._unlocked(evaluate_achievements(
            0, savings_goals=goals, investments=investments,
        ))
        assert {"first_goal", "first_investment", "diversified"} <= unlocked

    def test_budget_master(self):
        """Test that every budget must be kept."""
        kept = BudgetProgress(
            category=ExpenseCategory.FOOD, spent=Decimal("100"), budget=Decimal("400"),
            remaining=Decimal("300"), percentage=25.0, tier=BudgetTier.UNDER,
        )
        blown = kept.model_copy(update={"tier": BudgetTier.OVER})

        assert "budget_master" in self._unlocked(evaluate_achievements(0, budget_progress=[kept]))
        assert "budget_master" not in self._unlocked(
            evaluate_achievements(0, budget_progress=[kept, blown])
        )
        assert "budget_master" not in self._unlocked(evaluate_achievements(0))

    def test_debt_free(self):
        """Test that negative credit balances block debt free."""
        clean = [Account(id="a1", name="Checking", current_balance=Decimal("100"))]
        indebted = clean + [
            Account(id="a2", name="Card", account_type="credit", current_balance=Decimal("-50")),
        ]
        assert "debt_free" in self._unlocked(evaluate_achievements(0, accounts=clean))
        assert "debt_free" not in self._unlocked(evaluate_achievements(0, accounts=indebted))

    def test_total_xp(self):
        """Test XP of unlocked achievements."""
        statuses = evaluate_achievements(Decimal("5000"))
        assert total_xp(statuses) == 150

class TestNonFiniteNetWorth:
    """Tests for NaN and infinite net worth, which clamp instead of raising."""

    def test_level(self):
        """Test levels of non-finite net worth."""
        assert net_worth_level(float("nan")) == 1
        assert net_worth_level(Decimal("NaN")) == 1
        assert net_worth_level(float("-inf")) == 1
        assert net_worth_level(float("inf")) == 100
        assert investment_level(float("nan")) == 1

    def test_achievement_tier(self):
        """Test milestone tiers of non-finite net worth."""
        assert achievement_tier_for(float("nan")).name == "Getting Started"
        assert achievement_tier_for(float("-inf")).name == "Getting Started"
        assert achievement_tier_for(float("inf")).name == "Millionaire"

    def test_next_milestone(self):
        """Test that NaN net worth has the first milestone ahead."""
        assert next_milestone(float("nan")).amount == 1000

    def test_achievements(self):
        """Test that NaN net worth unlocks no milestone."""
        statuses = evaluate_achievements(float("nan"))
        assert not any(status.unlocked for status in statuses)



if __name__ == "__main__":
    pytest.main([__file__, "-v"])
