"""Data models for archive records and reconstructed conversations

Posts and messages arrive from an upstream normalizer as loosely-typed dicts.
The models here validate them once, normalize timestamps to UTC, and keep any
unrecognized fields so richer upstream schemas pass through untouched.
"""

import calendar
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

# Timestamp format used by archive exports, e.g. "Wed Oct 10 20:19:24 +0000 2018"
ARCHIVE_TIMESTAMP_FORMAT = "%a %b %d %H:%M:%S %z %Y"


def parse_timestamp(value: Any) -> datetime:
    """Parse a record timestamp into a timezone-aware UTC datetime

    Accepts ISO 8601 strings (including a trailing "Z"), the archive export
    format, epoch seconds and datetime objects. Naive values are taken as UTC.

    Raises:
        ValueError: If the value cannot be interpreted as a timestamp
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            dt = datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError) as e:
            raise ValueError(f"Timestamp out of range: {value!r}") from e
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Empty timestamp")
        try:
            iso = text[:-1] + "+00:00" if text.endswith("Z") else text
            dt = datetime.fromisoformat(iso)
        except ValueError:
            dt = datetime.strptime(text, ARCHIVE_TIMESTAMP_FORMAT)
    else:
        raise ValueError(f"Unsupported timestamp value: {value!r}")

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _seconds(value: Optional[timedelta]) -> Optional[float]:
    return value.total_seconds() if value is not None else None


# Pydantic Models for input records
class Post(BaseModel):
    """A single public post from an archive export"""

    model_config = ConfigDict(frozen=True, extra="allow", coerce_numbers_to_str=True)

    id: str
    author_id: str = Field(validation_alias=AliasChoices("author_id", "author_handle"))
    created_at: datetime
    text: str = ""
    reply_to_id: Optional[str] = None
    reply_to_author_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("reply_to_author_id", "reply_to_author"),
    )
    engagement: Dict[str, Any] = Field(default_factory=dict)
    is_repost: bool = False

    @field_validator("created_at", mode="before")
    @classmethod
    def validate_created_at(cls, v: Any) -> datetime:
        return parse_timestamp(v)

    @field_validator("reply_to_id", "reply_to_author_id", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        """Archives write missing reply pointers as empty strings"""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def is_reply(self) -> bool:
        return self.reply_to_id is not None


class Message(BaseModel):
    """A single private message belonging to one conversation"""

    model_config = ConfigDict(frozen=True, extra="allow", coerce_numbers_to_str=True)

    conversation_id: str
    id: str
    sender_id: str
    recipient_id: Optional[str] = None
    created_at: datetime
    text: str = ""
    reactions: List[Any] = Field(default_factory=list)

    @field_validator("created_at", mode="before")
    @classmethod
    def validate_created_at(cls, v: Any) -> datetime:
        return parse_timestamp(v)


class NewestFirstView(Sequence):
    """Read-only reversed view over an oldest-first sequence

    Indexing walks the underlying sequence from the end, so the newest-first
    ordering never needs its own copy of the posts.
    """

    def __init__(self, items: Sequence):
        self._items = items

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [self[i] for i in range(*index.indices(len(self)))]
        size = len(self._items)
        if index < 0:
            index += size
        if not 0 <= index < size:
            raise IndexError("NewestFirstView index out of range")
        return self._items[size - 1 - index]

    def __repr__(self) -> str:
        return f"NewestFirstView({list(self)!r})"


class Thread(BaseModel):
    """A rooted, chronologically ordered group of posts

    Attributes:
        root_id: Identifier of the earliest reachable ancestor
        posts: Posts in oldest-first order
    """

    model_config = ConfigDict(frozen=True)

    root_id: str
    posts: Tuple[Post, ...]

    @property
    def oldest_first(self) -> Tuple[Post, ...]:
        return self.posts

    @property
    def newest_first(self) -> NewestFirstView:
        """Posts newest-first, the canonical end-user ordering"""
        return NewestFirstView(self.posts)

    @property
    def is_singleton(self) -> bool:
        return len(self.posts) == 1

    @property
    def root(self) -> Optional[Post]:
        return next((p for p in self.posts if p.id == self.root_id), None)

    @property
    def start_time(self) -> Optional[datetime]:
        return self.posts[0].created_at if self.posts else None

    @property
    def end_time(self) -> Optional[datetime]:
        return self.posts[-1].created_at if self.posts else None

    def __len__(self) -> int:
        return len(self.posts)

    def depths(self) -> Dict[str, int]:
        """Number of reply hops between each post and the thread root

        A post whose parent is not part of the thread counts as depth 0.
        """
        by_id = {p.id: p for p in self.posts}
        depths: Dict[str, int] = {}

        for post in self.posts:
            path: List[str] = []
            on_path = set()
            current = post
            while current.id not in depths:
                path.append(current.id)
                on_path.add(current.id)
                parent_id = current.reply_to_id
                if current.id == self.root_id or parent_id not in by_id or parent_id in on_path:
                    base = -1
                    break
                current = by_id[parent_id]
            else:
                base = depths[current.id]

            for hops, post_id in enumerate(reversed(path), start=1):
                depths[post_id] = base + hops

        return depths

    def depth_of(self, post_id: str) -> int:
        """Number of reply hops between a post and the thread root

        Raises:
            KeyError: If the post is not part of this thread
        """
        return self.depths()[post_id]

    def engagement_totals(self) -> Dict[str, float]:
        """Sum each numeric engagement counter across all posts in the thread

        Non-numeric counters are carried on the posts but left out of the totals.
        """
        totals: Dict[str, float] = {}
        for post in self.posts:
            for name, count in post.engagement.items():
                if isinstance(count, bool) or not isinstance(count, (int, float)):
                    continue
                totals[name] = totals.get(name, 0) + count
        return totals


class Conversation(BaseModel):
    """All messages sharing one conversation identifier, ascending by time"""

    model_config = ConfigDict(frozen=True)

    conversation_id: str
    messages: Tuple[Message, ...] = ()
    participants: Tuple[str, ...] = ()

    @classmethod
    def from_messages(cls, conversation_id: str, messages: List[Message]) -> "Conversation":
        """Build a conversation, sorting messages and collecting senders

        Sorting is stable so messages with equal timestamps keep input order.
        """
        ordered = sorted(messages, key=lambda m: m.created_at)
        participants: List[str] = []
        for message in ordered:
            if message.sender_id not in participants:
                participants.append(message.sender_id)
        return cls(
            conversation_id=conversation_id,
            messages=tuple(ordered),
            participants=tuple(participants),
        )

    @property
    def start_time(self) -> Optional[datetime]:
        return self.messages[0].created_at if self.messages else None

    @property
    def end_time(self) -> Optional[datetime]:
        return self.messages[-1].created_at if self.messages else None

    def __len__(self) -> int:
        return len(self.messages)


# Derived annotations
class TemporalAnnotation(BaseModel):
    """Timing of one item relative to the item before it

    Attributes:
        position: Index of the item in oldest-first order (always >= 1)
        item_id: Identifier of the later item of the pair
        previous_id: Identifier of the earlier item of the pair
        gap_duration: Elapsed time since the previous item
        is_significant: Whether the gap exceeds the significance threshold
        relative_description: Human phrase such as "2 hours later"
    """

    model_config = ConfigDict(frozen=True)

    position: int
    item_id: str
    previous_id: str
    gap_duration: timedelta
    is_significant: bool
    relative_description: Optional[str] = None

    @model_validator(mode="after")
    def check_description(self) -> "TemporalAnnotation":
        if not self.is_significant and self.relative_description is not None:
            raise ValueError("relative_description is only set for significant gaps")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "position": self.position,
            "item_id": self.item_id,
            "previous_id": self.previous_id,
            "gap_seconds": self.gap_duration.total_seconds(),
            "is_significant": self.is_significant,
            "relative_description": self.relative_description,
        }


class ResponseTimeStats(BaseModel):
    """Response-time distribution over the significant gaps of one sequence

    mean/median/p90/min/max are None when the sequence has no significant gap.
    """

    model_config = ConfigDict(frozen=True)

    mean: Optional[timedelta] = None
    median: Optional[timedelta] = None
    p90: Optional[timedelta] = None
    min: Optional[timedelta] = None
    max: Optional[timedelta] = None
    duration: timedelta = timedelta(0)
    message_count: int = 0
    significant_gap_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mean_seconds": _seconds(self.mean),
            "median_seconds": _seconds(self.median),
            "p90_seconds": _seconds(self.p90),
            "min_seconds": _seconds(self.min),
            "max_seconds": _seconds(self.max),
            "duration_seconds": self.duration.total_seconds(),
            "message_count": self.message_count,
            "significant_gap_count": self.significant_gap_count,
        }


class BurstWindow(BaseModel):
    """A time window whose item rate exceeds the burst multiplier"""

    model_config = ConfigDict(frozen=True)

    start_time: datetime
    end_time: datetime
    item_count: int
    rate_per_hour: float
    ratio_to_mean: float


class ActivityPatterns(BaseModel):
    """Activity signals across a whole set of items

    Weekdays are numbered the Python way: Monday is 0, Sunday is 6.
    """

    model_config = ConfigDict(frozen=True)

    total_items: int = 0
    hourly_counts: List[int] = Field(default_factory=lambda: [0] * 24)
    weekday_counts: List[int] = Field(default_factory=lambda: [0] * 7)
    peak_hour: Optional[int] = None
    peak_weekday: Optional[int] = None
    peak_hours: List[int] = Field(default_factory=list)
    peak_weekdays: List[int] = Field(default_factory=list)
    avg_items_per_day: float = 0.0
    mean_rate_per_hour: float = 0.0
    bursts: List[BurstWindow] = Field(default_factory=list)

    @property
    def is_bursty(self) -> bool:
        return bool(self.bursts)

    @property
    def peak_weekday_name(self) -> Optional[str]:
        if self.peak_weekday is None:
            return None
        return calendar.day_name[self.peak_weekday]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_items": self.total_items,
            "hourly_counts": list(self.hourly_counts),
            "weekday_counts": list(self.weekday_counts),
            "peak_hour": self.peak_hour,
            "peak_weekday": self.peak_weekday_name,
            "peak_hours": list(self.peak_hours),
            "peak_weekdays": [calendar.day_name[d] for d in self.peak_weekdays],
            "avg_items_per_day": self.avg_items_per_day,
            "mean_rate_per_hour": self.mean_rate_per_hour,
            "bursts": [
                {
                    "start_time": b.start_time.isoformat(),
                    "end_time": b.end_time.isoformat(),
                    "item_count": b.item_count,
                    "rate_per_hour": b.rate_per_hour,
                    "ratio_to_mean": b.ratio_to_mean,
                }
                for b in self.bursts
            ],
        }


# Output structures
class AnnotatedThread(BaseModel):
    """A thread with its per-gap annotations and response-time stats"""

    model_config = ConfigDict(frozen=True)

    thread: Thread
    annotations: Tuple[TemporalAnnotation, ...] = ()
    stats: ResponseTimeStats = Field(default_factory=ResponseTimeStats)

    @property
    def root_id(self) -> str:
        return self.thread.root_id

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary"""
        return {
            "root_id": self.thread.root_id,
            "post_count": len(self.thread),
            "post_ids": [p.id for p in self.thread.posts],
            "post_ids_newest_first": [p.id for p in self.thread.newest_first],
            "engagement": self.thread.engagement_totals(),
            "annotations": [a.to_dict() for a in self.annotations],
            "stats": self.stats.to_dict(),
        }


class AnnotatedConversation(BaseModel):
    """A conversation with annotations, stats and participant labels"""

    model_config = ConfigDict(frozen=True)

    conversation: Conversation
    annotations: Tuple[TemporalAnnotation, ...] = ()
    stats: ResponseTimeStats = Field(default_factory=ResponseTimeStats)
    labels: Dict[str, str] = Field(default_factory=dict)
    message_counts: Dict[str, int] = Field(default_factory=dict)

    @property
    def conversation_id(self) -> str:
        return self.conversation.conversation_id

    def label_for(self, message: Message) -> str:
        """Display label of a message's sender within this conversation"""
        return self.labels[message.sender_id]

    def message_counts_by_label(self) -> Dict[str, int]:
        """Messages sent per participant, keyed by display label"""
        return {self.labels[sender_id]: count for sender_id, count in self.message_counts.items()}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary"""
        return {
            "conversation_id": self.conversation.conversation_id,
            "message_count": len(self.conversation),
            "message_ids": [m.id for m in self.conversation.messages],
            "participants": list(self.conversation.participants),
            "labels": dict(self.labels),
            "message_counts": dict(self.message_counts),
            "message_counts_by_label": self.message_counts_by_label(),
            "annotations": [a.to_dict() for a in self.annotations],
            "stats": self.stats.to_dict(),
        }
