"""Processing summary counters returned alongside reconstruction results"""

from dataclasses import asdict, dataclass, fields
from typing import Dict


@dataclass
class ProcessingSummary:
    """Counts of per-record anomalies seen while processing a batch

    Every component returns its own summary instead of touching shared
    counters, so results from independent groups can simply be merged.
    """

    posts_received: int = 0
    messages_received: int = 0
    malformed_posts: int = 0
    malformed_messages: int = 0
    duplicate_post_ids: int = 0
    duplicate_message_ids: int = 0
    excluded_posts: int = 0
    excluded_reposts: int = 0
    orphaned_roots: int = 0
    cyclic_chains: int = 0
    degraded_threads: int = 0

    def merge(self, other: "ProcessingSummary") -> "ProcessingSummary":
        """Return a new summary with the counts of both summaries added"""
        return ProcessingSummary(
            **{f.name: getattr(self, f.name) + getattr(other, f.name) for f in fields(self)}
        )

    def __add__(self, other: "ProcessingSummary") -> "ProcessingSummary":
        if not isinstance(other, ProcessingSummary):
            return NotImplemented
        return self.merge(other)

    @property
    def skipped_records(self) -> int:
        return self.malformed_posts + self.malformed_messages

    @property
    def has_anomalies(self) -> bool:
        return any(
            (
                self.skipped_records,
                self.duplicate_post_ids,
                self.duplicate_message_ids,
                self.cyclic_chains,
                self.degraded_threads,
            )
        )

    def to_dict(self) -> Dict[str, int]:
        """Convert to dictionary for host reporting"""
        return asdict(self)
