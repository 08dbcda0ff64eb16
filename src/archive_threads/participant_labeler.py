"""Conversation-local display labels for message senders"""

from typing import Dict, Iterable

from .models import Message


def column_label(index: int) -> str:
    """Spreadsheet-column label for a zero-based index

    0 -> "A", 25 -> "Z", 26 -> "AA", 27 -> "AB", 702 -> "AAA"
    """
    if index < 0:
        raise ValueError(f"Label index must be non-negative, got {index}")

    label = ""
    remaining = index + 1
    while remaining:
        remaining, offset = divmod(remaining - 1, 26)
        label = chr(ord("A") + offset) + label
    return label


class ParticipantLabeler:
    """Assign short labels to the senders of one conversation

    Labels follow first appearance in the chronological sequence. They are
    scoped to a single conversation: the same sender can be "A" in one
    conversation and "B" in another.

    Example:
        >>> ParticipantLabeler().label(conversation.messages)
        {'123': 'A', '456': 'B'}
    """

    def label(self, messages: Iterable[Message]) -> Dict[str, str]:
        """Map each distinct sender id to its label"""
        return self.label_senders(m.sender_id for m in messages)

    def label_senders(self, sender_ids: Iterable[str]) -> Dict[str, str]:
        """Map sender ids, given in chronological order, to labels"""
        labels: Dict[str, str] = {}
        for sender_id in sender_ids:
            if sender_id not in labels:
                labels[sender_id] = column_label(len(labels))
        return labels

    def count_messages(self, messages: Iterable[Message]) -> Dict[str, int]:
        """Messages sent by each sender, in order of first appearance"""
        counts: Dict[str, int] = {}
        for message in messages:
            counts[message.sender_id] = counts.get(message.sender_id, 0) + 1
        return counts
