"""Conversation reconstruction engine

Runs the full pipeline: record intake, thread assembly for posts,
conversation grouping for messages, temporal annotation, participant
labeling and activity analysis.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

from .activity import ActivityAnalyzer
from .config import EngineConfig
from .conversation_grouper import ConversationGrouper
from .ingest import load_messages, load_posts
from .models import (
    ActivityPatterns,
    AnnotatedConversation,
    AnnotatedThread,
    Conversation,
    Message,
    Post,
    Thread,
)
from .participant_labeler import ParticipantLabeler
from .summary import ProcessingSummary
from .temporal_annotator import TemporalAnnotator
from .thread_assembler import ThreadAssembler

T = TypeVar("T")
U = TypeVar("U")


@dataclass
class EngineResult:
    """Complete result of one engine run"""

    threads: List[AnnotatedThread] = field(default_factory=list)
    conversations: List[AnnotatedConversation] = field(default_factory=list)
    thread_activity: ActivityPatterns = field(default_factory=ActivityPatterns)
    conversation_activity: ActivityPatterns = field(default_factory=ActivityPatterns)
    summary: ProcessingSummary = field(default_factory=ProcessingSummary)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            "threads": [t.to_dict() for t in self.threads],
            "conversations": [c.to_dict() for c in self.conversations],
            "thread_activity": self.thread_activity.to_dict(),
            "conversation_activity": self.conversation_activity.to_dict(),
            "summary": self.summary.to_dict(),
        }


class ReconstructionEngine:
    """Turn flat post and message records into annotated threads and conversations

    Each thread or conversation is annotated independently, so with
    ``workers > 1`` groups are processed on a thread pool. Results keep the
    same order as the sequential run.

    Example:
        >>> engine = ReconstructionEngine(EngineConfig(target_account="alice"))
        >>> result = engine.run(posts=raw_posts, messages=raw_messages)
        >>> print(f"{len(result.threads)} threads, {result.summary.malformed_posts} skipped")
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self.logger = logging.getLogger(__name__)

        self.assembler = ThreadAssembler(
            target_account=self.config.target_account,
            exclude_reposts=self.config.exclude_reposts,
        )
        self.grouper = ConversationGrouper()
        self.annotator = TemporalAnnotator(threshold=self.config.significance_threshold)
        self.labeler = ParticipantLabeler()
        self.activity_analyzer = ActivityAnalyzer(
            burst_multiplier=self.config.burst_multiplier,
            burst_window=self.config.burst_window,
            burst_min_items=self.config.burst_min_items,
        )

    def run(self, posts: Iterable[Any] = (), messages: Iterable[Any] = ()) -> EngineResult:
        """Run the whole pipeline over raw records

        Args:
            posts: Post dicts or Post objects
            messages: Message dicts (with conversation_id) or Message objects

        Returns:
            EngineResult with threads, conversations, activity and summary

        Raises:
            RecordSourceError: If either input collection cannot be read
        """
        valid_posts, post_summary = load_posts(posts)
        valid_messages, message_summary = load_messages(messages)

        threads, thread_summary = self.reconstruct_threads(valid_posts)
        conversations, conversation_summary = self.reconstruct_conversations(valid_messages)

        summary = post_summary + message_summary + thread_summary + conversation_summary

        result = EngineResult(
            threads=threads,
            conversations=conversations,
            thread_activity=self.analyze_activity(
                [post for annotated in threads for post in annotated.thread.posts]
            ),
            conversation_activity=self.analyze_activity(
                [message for annotated in conversations for message in annotated.conversation.messages]
            ),
            summary=summary,
        )

        self.logger.info(
            f"Reconstructed {len(threads)} threads and {len(conversations)} conversations "
            f"({summary.skipped_records} malformed records skipped, "
            f"{summary.degraded_threads} degraded threads)"
        )

        return result

    def reconstruct_threads(self, posts: Iterable[Post]) -> Tuple[List[AnnotatedThread], ProcessingSummary]:
        """Assemble and annotate threads from validated posts"""
        threads, summary = self.assembler.assemble(posts)
        return self._map(self.annotate_thread, threads), summary

    def reconstruct_conversations(
        self, messages: Iterable[Message]
    ) -> Tuple[List[AnnotatedConversation], ProcessingSummary]:
        """Group, annotate and label conversations from validated messages"""
        conversations, summary = self.grouper.group(messages)
        return self._map(self.annotate_conversation, conversations), summary

    def annotate_thread(self, thread: Thread) -> AnnotatedThread:
        """Annotate one thread using its oldest-first order"""
        annotations, stats = self.annotator.annotate_sequence(thread.oldest_first)
        return AnnotatedThread(thread=thread, annotations=tuple(annotations), stats=stats)

    def annotate_conversation(self, conversation: Conversation) -> AnnotatedConversation:
        """Annotate and label one conversation"""
        annotations, stats = self.annotator.annotate_sequence(conversation.messages)
        return AnnotatedConversation(
            conversation=conversation,
            annotations=tuple(annotations),
            stats=stats,
            labels=self.labeler.label(conversation.messages),
            message_counts=self.labeler.count_messages(conversation.messages),
        )

    def analyze_activity(self, items: Sequence[Any]) -> ActivityPatterns:
        """Activity patterns across a whole set of posts or messages"""
        return self.activity_analyzer.analyze(items)

    def _map(self, func: Callable[[T], U], groups: List[T]) -> List[U]:
        if self.config.workers <= 1 or len(groups) <= 1:
            return [func(group) for group in groups]

        self.logger.debug(f"Annotating {len(groups)} groups with {self.config.workers} workers")
        with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
            return list(executor.map(func, groups))
