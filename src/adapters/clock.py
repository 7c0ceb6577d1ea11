from datetime import UTC, datetime, timedelta


class SystemClock:
    def now_utc(self) -> datetime:
        return datetime.now(UTC)

    def is_past_or_now(self, utc_dt: datetime) -> bool:
        if utc_dt.tzinfo is None:
            utc_dt = utc_dt.replace(tzinfo=UTC)
        return utc_dt <= self.now_utc()

    def start_of_timeframe(self, timeframe: str) -> datetime | None:
        """Start of a reporting window: today, week, month, quarter or year."""
        now = self.now_utc()
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        if timeframe == "today":
            return today
        if timeframe == "week":
            return today - timedelta(days=7)
        if timeframe == "month":
            return today.replace(day=1)
        if timeframe == "quarter":
            return today.replace(month=((today.month - 1) // 3) * 3 + 1, day=1)
        if timeframe == "year":
            return today.replace(month=1, day=1)
        return None
