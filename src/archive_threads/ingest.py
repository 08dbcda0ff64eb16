"""Convert normalized record dicts into validated Post and Message objects

Malformed records (unparseable timestamps, missing required fields) are
skipped and counted; they never abort the batch. Only a missing or unreadable
input collection is a hard failure.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any, List, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .models import Message, Post
from .summary import ProcessingSummary

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=BaseModel)


class RecordSourceError(Exception):
    """The input collection itself could not be obtained or read"""


def _iterate_source(raw_records: Any, kind: str):
    if raw_records is None:
        raise RecordSourceError(f"No {kind} collection was supplied")
    if isinstance(raw_records, (str, bytes, Mapping)) or not isinstance(raw_records, Iterable):
        raise RecordSourceError(
            f"Expected a collection of {kind}, got {type(raw_records).__name__}"
        )

    iterator = iter(raw_records)
    while True:
        try:
            raw = next(iterator)
        except StopIteration:
            return
        except Exception as e:
            raise RecordSourceError(f"Failed to read {kind}: {e}") from e
        yield raw


def _convert_records(raw_records: Any, model: Type[R], kind: str) -> Tuple[List[R], int, int]:
    records: List[R] = []
    received = 0
    malformed = 0

    for raw in _iterate_source(raw_records, kind):
        received += 1

        if isinstance(raw, model):
            records.append(raw)
            continue

        try:
            records.append(model.model_validate(raw))
        except ValidationError as e:
            # Log error but continue processing other records
            malformed += 1
            record_id = raw.get("id", "unknown") if isinstance(raw, Mapping) else "unknown"
            logger.warning(
                f"Skipping malformed {kind[:-1]} {record_id}: {e.error_count()} validation error(s)"
            )

    return records, received, malformed


def load_posts(raw_records: Any) -> Tuple[List[Post], ProcessingSummary]:
    """Convert raw post dicts to Post objects

    Args:
        raw_records: Iterable of post dicts (or Post objects, passed through)

    Returns:
        Tuple of (posts in input order, summary with received/malformed counts)

    Raises:
        RecordSourceError: If the collection is missing or cannot be iterated

    Example:
        >>> posts, summary = load_posts([{"id": "1", "author_id": "alice", ...}])
        >>> summary.malformed_posts
        0
    """
    posts, received, malformed = _convert_records(raw_records, Post, "posts")
    summary = ProcessingSummary(posts_received=received, malformed_posts=malformed)
    return posts, summary


def load_messages(raw_records: Any) -> Tuple[List[Message], ProcessingSummary]:
    """Convert raw message dicts to Message objects

    Raises:
        RecordSourceError: If the collection is missing or cannot be iterated
    """
    messages, received, malformed = _convert_records(raw_records, Message, "messages")
    summary = ProcessingSummary(messages_received=received, malformed_messages=malformed)
    return messages, summary
