"""Gap annotations and response-time statistics for ordered sequences

Works on any oldest-first sequence of items that have an ``id`` and a
``created_at`` timestamp: thread posts or conversation messages.
"""

import math
import statistics
from datetime import timedelta
from typing import List, Optional, Sequence, Tuple, Union

from .models import Message, Post, ResponseTimeStats, TemporalAnnotation

Item = Union[Post, Message]

DEFAULT_SIGNIFICANCE_THRESHOLD = timedelta(minutes=5)

# Largest unit first
_UNITS = (
    ("day", timedelta(days=1)),
    ("hour", timedelta(hours=1)),
    ("minute", timedelta(minutes=1)),
)


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def describe_gap(gap: timedelta) -> str:
    """Describe a gap as a relative phrase, e.g. "2 hours later"

    The gap is integer-divided by the largest unit (day, hour, minute) that
    gives a quotient of at least one. Gaps under a minute fall back to seconds.

    Example:
        >>> describe_gap(timedelta(minutes=90))
        '1 hour later'
        >>> describe_gap(timedelta(days=3, hours=5))
        '3 days later'
    """
    for unit, size in _UNITS:
        quotient = gap // size
        if quotient >= 1:
            return f"{_plural(quotient, unit)} later"

    seconds = int(gap.total_seconds())
    return f"{_plural(seconds, 'second')} later"


def nearest_rank(sorted_values: Sequence[timedelta], percentile: float) -> Optional[timedelta]:
    """Percentile of pre-sorted values using the nearest-rank method"""
    if not sorted_values:
        return None
    rank = max(1, math.ceil(percentile / 100 * len(sorted_values)))
    return sorted_values[rank - 1]


class TemporalAnnotator:
    """Annotate adjacent-pair gaps and summarize response times

    A gap is significant when it is strictly greater than the threshold.
    Only significant gaps feed the response-time statistics; shorter gaps
    are treated as noise.

    Example:
        >>> annotator = TemporalAnnotator(threshold=timedelta(minutes=5))
        >>> annotations, stats = annotator.annotate_sequence(conversation.messages)
        >>> annotations[1].relative_description
        '8 minutes later'
    """

    def __init__(self, threshold: timedelta = DEFAULT_SIGNIFICANCE_THRESHOLD):
        if threshold < timedelta(0):
            raise ValueError(f"Significance threshold must not be negative: {threshold}")
        self.threshold = threshold

    def annotate(self, items: Sequence[Item]) -> List[TemporalAnnotation]:
        """Annotate each adjacent pair of an oldest-first sequence

        Args:
            items: Items sorted ascending by created_at

        Returns:
            One annotation per item after the first (empty for 0 or 1 items)
        """
        annotations = []
        for position in range(1, len(items)):
            previous, current = items[position - 1], items[position]
            gap = current.created_at - previous.created_at
            is_significant = gap > self.threshold

            annotations.append(
                TemporalAnnotation(
                    position=position,
                    item_id=current.id,
                    previous_id=previous.id,
                    gap_duration=gap,
                    is_significant=is_significant,
                    relative_description=describe_gap(gap) if is_significant else None,
                )
            )

        return annotations

    def compute_stats(
        self,
        items: Sequence[Item],
        annotations: Optional[Sequence[TemporalAnnotation]] = None,
    ) -> ResponseTimeStats:
        """Compute response-time statistics for an oldest-first sequence

        Args:
            items: Items sorted ascending by created_at
            annotations: Annotations for the same items (computed if omitted)

        Returns:
            ResponseTimeStats; distribution fields are None when there is
            no significant gap, and duration is zero for 0 or 1 items
        """
        if annotations is None:
            annotations = self.annotate(items)

        duration = items[-1].created_at - items[0].created_at if items else timedelta(0)
        gaps = sorted(a.gap_duration for a in annotations if a.is_significant)

        if not gaps:
            return ResponseTimeStats(duration=duration, message_count=len(items))

        return ResponseTimeStats(
            mean=sum(gaps, timedelta(0)) / len(gaps),
            median=statistics.median(gaps),
            p90=nearest_rank(gaps, 90),
            min=gaps[0],
            max=gaps[-1],
            duration=duration,
            message_count=len(items),
            significant_gap_count=len(gaps),
        )

    def annotate_sequence(
        self, items: Sequence[Item]
    ) -> Tuple[List[TemporalAnnotation], ResponseTimeStats]:
        """Annotate a sequence and compute its stats in one pass"""
        annotations = self.annotate(items)
        return annotations, self.compute_stats(items, annotations)
