"""Tests for the Gamble surcharge."""

from src.dice.chain import all_in, reroll
from src.dice.gamble import gamble_surcharge
from src.dice.tally import tally
from src.dice.types import RerollKind


class TestGambleSurcharge:
    """Tests for gamble_surcharge."""

    def test_counts_ones_in_final_pool(self):
        """Every 1 costs Grit, paired or not."""
        assert gamble_surcharge(tally([1, 1, 4, 4, 6]), is_gamble=True) == 2

    def test_lone_one(self):
        assert gamble_surcharge(tally([1, 3, 3]), is_gamble=True) == 1

    def test_no_ones(self):
        assert gamble_surcharge(tally([2, 3, 3, 6]), is_gamble=True) == 0

    def test_not_a_gamble(self):
        assert gamble_surcharge(tally([1, 1, 1]), is_gamble=False) == 0

    def test_bust_still_counts_ones(self, scripted_rng):
        """Forfeited dice stay in the pool and still cost Grit."""
        rng = scripted_rng(1, 1, 3, 4)
        start = tally([2, 2, 5, 4, 6])

        # 5 4 6 -> 1 1 3 gives 2 2 1 1 3: two Basics
        improved = reroll(start, RerollKind.FREE, rng=rng)
        assert improved.improved is True

        # 3 -> 4 gives 2 2 1 1 4: no better, so a bust
        busted = all_in(improved, rng=rng)
        assert busted.all_in_bust
        assert busted.total_successes == 0
        assert gamble_surcharge(busted, is_gamble=True) == 2
