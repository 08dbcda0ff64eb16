"""Activity-pattern signals across a whole set of posts or messages

Buckets items into fixed time windows to find bursts, and by hour-of-day and
day-of-week to find peak activity times. Timestamps are UTC.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Sequence, Tuple, Union

from .models import ActivityPatterns, BurstWindow, Message, Post

Item = Union[Post, Message]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# A bucket is a peak when its count exceeds the bucket mean by this factor
PEAK_FACTOR = 1.5


class TimeBucket:
    """A fixed time window containing items

    Attributes:
        start_time: Start of the bucket (inclusive)
        end_time: End of the bucket (exclusive)
        items: Items whose timestamp falls inside the window
    """

    def __init__(self, start_time: datetime, end_time: datetime):
        self.start_time = start_time
        self.end_time = end_time
        self.items: List[Item] = []

    def add_item(self, item: Item):
        self.items.append(item)

    @property
    def total_items(self) -> int:
        return len(self.items)


class ActivityBucketer:
    """Bucket items into fixed, epoch-aligned time windows

    Example:
        >>> bucketer = ActivityBucketer(window=timedelta(hours=1))
        >>> buckets = bucketer.bucket_items(messages)
        >>> for bucket in buckets:
        ...     print(f"{bucket.start_time} - {bucket.total_items} items")
    """

    def __init__(self, window: timedelta = timedelta(hours=1)):
        if window <= timedelta(0):
            raise ValueError(f"Invalid bucket window: {window}")
        self.window = window

    def bucket_items(self, items: Sequence[Item]) -> List[TimeBucket]:
        """Bucket items by time window

        Returns:
            Non-empty TimeBucket objects in chronological order
        """
        bucket_map: Dict[int, TimeBucket] = {}

        for item in items:
            bucket_key = self._get_bucket_key(item.created_at)

            if bucket_key not in bucket_map:
                bucket_start, bucket_end = self._get_bucket_bounds(bucket_key)
                bucket_map[bucket_key] = TimeBucket(bucket_start, bucket_end)

            bucket_map[bucket_key].add_item(item)

        return [bucket_map[key] for key in sorted(bucket_map)]

    def _get_bucket_key(self, dt: datetime) -> int:
        """Number of whole windows between the epoch and this datetime"""
        return (dt - _EPOCH) // self.window

    def _get_bucket_bounds(self, bucket_key: int) -> Tuple[datetime, datetime]:
        start = _EPOCH + bucket_key * self.window
        return start, start + self.window


class ActivityAnalyzer:
    """Compute peak times and bursty windows for a set of items

    A window is bursty when it holds at least ``burst_min_items`` items and
    its item rate exceeds ``burst_multiplier`` times the mean rate of the
    whole set (items divided by the set's time span).

    Example:
        >>> analyzer = ActivityAnalyzer(burst_multiplier=3.0)
        >>> patterns = analyzer.analyze(all_messages)
        >>> patterns.peak_hour
        14
    """

    def __init__(
        self,
        burst_multiplier: float = 3.0,
        burst_window: timedelta = timedelta(hours=1),
        burst_min_items: int = 2,
    ):
        if burst_multiplier <= 0:
            raise ValueError(f"Burst multiplier must be positive: {burst_multiplier}")
        self.burst_multiplier = burst_multiplier
        self.burst_min_items = burst_min_items
        self.bucketer = ActivityBucketer(window=burst_window)

    def analyze(self, items: Sequence[Item]) -> ActivityPatterns:
        """Analyze activity across the given items (any order)"""
        if not items:
            return ActivityPatterns()

        hourly_counts = [0] * 24
        weekday_counts = [0] * 7
        for item in items:
            hourly_counts[item.created_at.hour] += 1
            weekday_counts[item.created_at.weekday()] += 1

        timestamps = sorted(item.created_at for item in items)
        span = timestamps[-1] - timestamps[0]
        total = len(items)

        span_days = max(span / timedelta(days=1), 1.0)
        span_hours = span / timedelta(hours=1)
        mean_rate_per_hour = total / span_hours if span_hours > 0 else 0.0

        return ActivityPatterns(
            total_items=total,
            hourly_counts=hourly_counts,
            weekday_counts=weekday_counts,
            peak_hour=hourly_counts.index(max(hourly_counts)),
            peak_weekday=weekday_counts.index(max(weekday_counts)),
            peak_hours=self._above_mean(hourly_counts),
            peak_weekdays=self._above_mean(weekday_counts),
            avg_items_per_day=total / span_days,
            mean_rate_per_hour=mean_rate_per_hour,
            bursts=self.find_bursts(items, mean_rate_per_hour),
        )

    def find_bursts(self, items: Sequence[Item], mean_rate_per_hour: float) -> List[BurstWindow]:
        """Windows whose local rate exceeds the multiple of the mean rate"""
        if mean_rate_per_hour <= 0:
            # Fewer than two distinct timestamps: no rate to compare against
            return []

        window_hours = self.bucketer.window / timedelta(hours=1)
        bursts = []

        for bucket in self.bucketer.bucket_items(items):
            if bucket.total_items < self.burst_min_items:
                continue
            rate = bucket.total_items / window_hours
            if rate > self.burst_multiplier * mean_rate_per_hour:
                bursts.append(
                    BurstWindow(
                        start_time=bucket.start_time,
                        end_time=bucket.end_time,
                        item_count=bucket.total_items,
                        rate_per_hour=rate,
                        ratio_to_mean=rate / mean_rate_per_hour,
                    )
                )

        return bursts

    @staticmethod
    def _above_mean(counts: List[int]) -> List[int]:
        threshold = sum(counts) / len(counts) * PEAK_FACTOR
        return [slot for slot, count in enumerate(counts) if count > threshold]
