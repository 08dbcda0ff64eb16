"""Test fixtures for reconstruction tests"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from archive_threads import Message, Post

BASE_TIME = datetime(2023, 1, 2, 12, 0, 0, tzinfo=timezone.utc)  # a Monday


def at(minutes: float = 0, hours: float = 0, days: float = 0) -> datetime:
    """Timestamp offset from BASE_TIME"""
    return BASE_TIME + timedelta(minutes=minutes, hours=hours, days=days)


def make_post(
    post_id: str,
    reply_to: Optional[str] = None,
    minutes: float = 0,
    author: str = "alice",
    reply_to_author: Optional[str] = None,
    **extra,
) -> Post:
    """Create a post; replies default to replying to the same author"""
    if reply_to is not None and reply_to_author is None:
        reply_to_author = author
    return Post(
        id=post_id,
        author_id=author,
        created_at=at(minutes=minutes),
        text=f"Post {post_id}",
        reply_to_id=reply_to,
        reply_to_author_id=reply_to_author,
        **extra,
    )


def make_message(
    message_id: str,
    sender: str,
    minutes: float = 0,
    conversation_id: str = "123-456",
    recipient: Optional[str] = None,
) -> Message:
    """Create a private message"""
    return Message(
        conversation_id=conversation_id,
        id=message_id,
        sender_id=sender,
        recipient_id=recipient,
        created_at=at(minutes=minutes),
        text=f"Message {message_id}",
    )


def raw_post(post_id: str, created_at: str = "2023-01-02T12:00:00Z", **fields) -> dict:
    """Raw post dict as produced by the upstream normalizer"""
    record = {
        "id": post_id,
        "author_id": "alice",
        "created_at": created_at,
        "text": f"Post {post_id}",
    }
    record.update(fields)
    return record


def raw_message(
    message_id: str,
    sender: str,
    created_at: str = "2023-01-02T12:00:00Z",
    conversation_id: str = "123-456",
    **fields,
) -> dict:
    """Raw message dict as produced by the upstream normalizer"""
    record = {
        "conversation_id": conversation_id,
        "id": message_id,
        "sender_id": sender,
        "recipient_id": "456" if sender == "123" else "123",
        "created_at": created_at,
        "text": f"Message {message_id}",
    }
    record.update(fields)
    return record


def scenario_chain_posts():
    """A (root), B replies to A, C replies to B"""
    return [
        make_post("A", minutes=0),
        make_post("B", reply_to="A", minutes=1),
        make_post("C", reply_to="B", minutes=2),
    ]


def scenario_conversation_messages():
    """Messages at t=0, 2min, 10min from X, Y, X"""
    return [
        make_message("m1", "X", minutes=0),
        make_message("m2", "Y", minutes=2),
        make_message("m3", "X", minutes=10),
    ]
