"""Daily streak reduction over UTC activity days."""

from datetime import date, timedelta

from cibersensei.store.procedures import compute_daily_streak

TODAY = date(2026, 3, 10)


def _days(*offsets: int) -> set[date]:
    return {TODAY - timedelta(days=o) for o in offsets}


class TestComputeDailyStreak:
    """Consecutive days ending today or yesterday."""

    def test_no_activity(self):
        assert compute_daily_streak(set(), TODAY) == 0

    def test_today_only(self):
        assert compute_daily_streak(_days(0), TODAY) == 1

    def test_run_ending_today(self):
        assert compute_daily_streak(_days(0, 1, 2), TODAY) == 3

    def test_run_ending_yesterday_still_counts(self):
        assert compute_daily_streak(_days(1, 2), TODAY) == 2

    def test_gap_breaks_the_run(self):
        assert compute_daily_streak(_days(0, 1, 3, 4, 5), TODAY) == 2

    def test_stale_run_is_zero(self):
        assert compute_daily_streak(_days(2, 3, 4), TODAY) == 0

    def test_month_boundary(self):
        today = date(2026, 3, 1)
        days = {date(2026, 3, 1), date(2026, 2, 28), date(2026, 2, 27)}
        assert compute_daily_streak(days, today) == 3
