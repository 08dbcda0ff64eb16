"""Flatten reconstruction results into in-memory Arrow tables

One row per post (or message) with its thread/conversation context and gap
annotation, ready for a downstream formatter. Nothing here writes files.
"""

from typing import Any, Dict, List, Optional, Sequence

import pyarrow as pa

from .models import AnnotatedConversation, AnnotatedThread, TemporalAnnotation


def _create_thread_post_schema() -> pa.Schema:
    """Create PyArrow schema for thread posts"""
    return pa.schema([
        # Thread fields
        ("root_id", pa.string()),
        ("thread_size", pa.int64()),
        ("position", pa.int64()),
        ("depth", pa.int64()),

        # Core post fields
        ("post_id", pa.string()),
        ("author_id", pa.string()),
        ("created_at", pa.timestamp("us", tz="UTC")),
        ("text", pa.string()),
        ("reply_to_id", pa.string()),
        ("reply_to_author_id", pa.string()),

        # Gap annotation (null for the first post)
        ("gap_seconds", pa.float64()),
        ("is_significant", pa.bool_()),
        ("relative_description", pa.string()),
    ])


def _create_conversation_message_schema() -> pa.Schema:
    """Create PyArrow schema for conversation messages"""
    return pa.schema([
        # Conversation fields
        ("conversation_id", pa.string()),
        ("message_count", pa.int64()),
        ("position", pa.int64()),

        # Core message fields
        ("message_id", pa.string()),
        ("sender_id", pa.string()),
        ("sender_label", pa.string()),
        ("recipient_id", pa.string()),
        ("created_at", pa.timestamp("us", tz="UTC")),
        ("text", pa.string()),

        # Gap annotation (null for the first message)
        ("gap_seconds", pa.float64()),
        ("is_significant", pa.bool_()),
        ("relative_description", pa.string()),
    ])


def _gap_fields(annotation: Optional[TemporalAnnotation]) -> Dict[str, Any]:
    if annotation is None:
        return {"gap_seconds": None, "is_significant": None, "relative_description": None}
    return {
        "gap_seconds": annotation.gap_duration.total_seconds(),
        "is_significant": annotation.is_significant,
        "relative_description": annotation.relative_description,
    }


def threads_to_table(threads: Sequence[AnnotatedThread]) -> pa.Table:
    """Flatten annotated threads into a table, posts oldest-first per thread"""
    rows: List[Dict[str, Any]] = []

    for annotated in threads:
        thread = annotated.thread
        annotation_at = {a.position: a for a in annotated.annotations}
        depths = thread.depths()

        for position, post in enumerate(thread.posts):
            rows.append({
                "root_id": thread.root_id,
                "thread_size": len(thread),
                "position": position,
                "depth": depths[post.id],
                "post_id": post.id,
                "author_id": post.author_id,
                "created_at": post.created_at,
                "text": post.text,
                "reply_to_id": post.reply_to_id,
                "reply_to_author_id": post.reply_to_author_id,
                **_gap_fields(annotation_at.get(position)),
            })

    return pa.Table.from_pylist(rows, schema=_create_thread_post_schema())


def conversations_to_table(conversations: Sequence[AnnotatedConversation]) -> pa.Table:
    """Flatten annotated conversations into a table, messages ascending per conversation"""
    rows: List[Dict[str, Any]] = []

    for annotated in conversations:
        conversation = annotated.conversation
        annotation_at = {a.position: a for a in annotated.annotations}

        for position, message in enumerate(conversation.messages):
            rows.append({
                "conversation_id": conversation.conversation_id,
                "message_count": len(conversation),
                "position": position,
                "message_id": message.id,
                "sender_id": message.sender_id,
                "sender_label": annotated.labels.get(message.sender_id),
                "recipient_id": message.recipient_id,
                "created_at": message.created_at,
                "text": message.text,
                **_gap_fields(annotation_at.get(position)),
            })

    return pa.Table.from_pylist(rows, schema=_create_conversation_message_schema())
