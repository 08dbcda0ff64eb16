"""Group private messages into conversations"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Tuple

from .models import Conversation, Message
from .record_index import RecordIndex
from .summary import ProcessingSummary


class ConversationGrouper:
    """Group messages by their conversation id and order them in time

    Unlike posts, messages carry their conversation id directly, so no chain
    walking is needed. Every message of a group is kept. Conversations are
    returned in order of first appearance of their id.

    Example:
        >>> grouper = ConversationGrouper()
        >>> conversations, summary = grouper.group(messages)
        >>> conversations[0].participants
        ('123', '456')
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def group(self, messages: Iterable[Message]) -> Tuple[List[Conversation], ProcessingSummary]:
        """Group messages into conversations

        Args:
            messages: Validated messages in input order

        Returns:
            Tuple of (conversations, summary) where each conversation's
            messages are ascending by created_at, ties in input order
        """
        summary = ProcessingSummary()

        index = RecordIndex(messages)
        summary.duplicate_message_ids = index.duplicate_count

        groups: Dict[str, List[Message]] = defaultdict(list)
        for message in index.values():
            groups[message.conversation_id].append(message)

        conversations = [
            Conversation.from_messages(conversation_id, members)
            for conversation_id, members in groups.items()
        ]

        self.logger.debug(f"Grouped {len(index)} messages into {len(conversations)} conversations")

        return conversations, summary
