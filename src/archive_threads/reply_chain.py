"""Resolve reply chains to their root post

Posts only carry a pointer to the post they reply to. Walking those pointers
back through the record index recovers the root of each chain without ever
building an explicit tree.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Set

from .models import Post
from .record_index import RecordIndex


class ChainOutcome(str, Enum):
    """How a reply-chain walk terminated"""

    ROOT = "root"
    MISSING_PARENT = "missing_parent"
    CYCLE = "cycle"


@dataclass(frozen=True)
class ChainResolution:
    root_id: str
    outcome: ChainOutcome


class ReplyChainResolver:
    """Walk reply pointers to find the root of each post's chain

    The walk stops at a post with no reply pointer, at a post whose parent is
    absent from the index (that post becomes the root), or when a cycle is
    found. A post whose chain runs into a cycle is treated as its own root, so
    malformed data degrades to singleton threads instead of aborting.

    Resolutions are memoized: every post visited on a walk shares the result,
    which keeps a full batch at O(n) amortized.

    Example:
        >>> resolver = ReplyChainResolver(RecordIndex(posts))
        >>> resolver.resolve_root(reply_post)
        '1001'
    """

    def __init__(self, index: RecordIndex):
        self.index = index
        self.logger = logging.getLogger(__name__)
        self._resolved: Dict[str, ChainResolution] = {}
        self._cyclic: Set[str] = set()

    def resolve_root(self, post: Post) -> str:
        """Return the id of the root post for this post's chain"""
        return self.resolve(post).root_id

    def resolve(self, post: Post) -> ChainResolution:
        """Resolve a post's chain, reporting how the walk ended"""
        if post.id in self._resolved:
            return self._resolved[post.id]
        if post.id in self._cyclic:
            return ChainResolution(post.id, ChainOutcome.CYCLE)

        visited: List[str] = [post.id]
        seen: Set[str] = {post.id}
        current = post

        while True:
            parent_id = current.reply_to_id
            if parent_id is None:
                resolution = ChainResolution(current.id, ChainOutcome.ROOT)
                break

            if parent_id in self._resolved:
                resolution = self._resolved[parent_id]
                break

            parent = self.index.get(parent_id)
            if parent is None:
                # Parent outside this batch
                resolution = ChainResolution(current.id, ChainOutcome.MISSING_PARENT)
                break

            if parent_id in seen or parent_id in self._cyclic:
                return self._mark_cyclic(post, visited)

            seen.add(parent_id)
            visited.append(parent_id)
            current = parent

        for post_id in visited:
            self._resolved[post_id] = resolution
        return resolution

    def _mark_cyclic(self, post: Post, visited: List[str]) -> ChainResolution:
        # Every post on this walk leads into the same cycle
        self._cyclic.update(visited)
        self.logger.warning(f"Reply cycle reached from post {post.id}, treating it as its own root")
        return ChainResolution(post.id, ChainOutcome.CYCLE)
