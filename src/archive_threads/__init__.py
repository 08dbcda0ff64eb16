"""Archive Threads - rebuild conversations from flat social-media archive records"""

from .models import (
    Post,
    Message,
    Thread,
    Conversation,
    TemporalAnnotation,
    ResponseTimeStats,
    ActivityPatterns,
    BurstWindow,
    AnnotatedThread,
    AnnotatedConversation,
    parse_timestamp,
)
from .record_index import RecordIndex
from .reply_chain import ReplyChainResolver, ChainOutcome, ChainResolution
from .thread_assembler import ThreadAssembler
from .conversation_grouper import ConversationGrouper
from .temporal_annotator import TemporalAnnotator, describe_gap
from .activity import ActivityAnalyzer, ActivityBucketer
from .participant_labeler import ParticipantLabeler, column_label
from .summary import ProcessingSummary
from .ingest import load_posts, load_messages, RecordSourceError
from .config import EngineConfig, load_config
from .engine import ReconstructionEngine, EngineResult
from .tables import threads_to_table, conversations_to_table

__all__ = [
    "Post",
    "Message",
    "Thread",
    "Conversation",
    "TemporalAnnotation",
    "ResponseTimeStats",
    "ActivityPatterns",
    "BurstWindow",
    "AnnotatedThread",
    "AnnotatedConversation",
    "parse_timestamp",
    "RecordIndex",
    "ReplyChainResolver",
    "ChainOutcome",
    "ChainResolution",
    "ThreadAssembler",
    "ConversationGrouper",
    "TemporalAnnotator",
    "describe_gap",
    "ActivityAnalyzer",
    "ActivityBucketer",
    "ParticipantLabeler",
    "column_label",
    "ProcessingSummary",
    "load_posts",
    "load_messages",
    "RecordSourceError",
    "EngineConfig",
    "load_config",
    "ReconstructionEngine",
    "EngineResult",
    "threads_to_table",
    "conversations_to_table",
]
