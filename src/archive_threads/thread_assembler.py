"""Assemble threads from a flat batch of posts

Converts flat post lists (where threads are indicated only by reply pointers)
into rooted, chronologically ordered threads for one account.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

from .models import Post, Thread
from .record_index import RecordIndex
from .reply_chain import ChainOutcome, ReplyChainResolver
from .summary import ProcessingSummary


class ThreadAssembler:
    """Rebuild threads for an account from flat post data

    Handles:
    - Filtering out replies directed at third parties (and reposts)
    - Grouping posts under the root of their reply chain
    - Orphaned replies (parent outside the batch) as their own roots
    - Cyclic reply pointers as singleton threads
    - Chronological sorting within each thread

    The filter runs before grouping, so an excluded post never links two
    included posts together.

    Example:
        >>> assembler = ThreadAssembler(target_account="alice")
        >>> threads, summary = assembler.assemble(posts)
        >>> print(len(threads[0]))  # posts in the newest thread
    """

    def __init__(self, target_account: Optional[str] = None, exclude_reposts: bool = True):
        """Initialize thread assembler

        Args:
            target_account: Account whose threads are assembled. When None the
                            reply filter is disabled and every post is kept.
            exclude_reposts: Drop posts flagged as reposts before grouping
        """
        self.target_account = target_account
        self.exclude_reposts = exclude_reposts
        self.logger = logging.getLogger(__name__)

    def is_included(self, post: Post) -> bool:
        """Check whether a post belongs in the account's thread corpus

        Original posts must be authored by the target account; replies are
        kept when the replied-to author is the target account or unknown.
        """
        if self.exclude_reposts and post.is_repost:
            return False
        if self.target_account is None:
            return True
        if not post.is_reply:
            return post.author_id == self.target_account
        return post.reply_to_author_id is None or post.reply_to_author_id == self.target_account

    def assemble(self, posts: Iterable[Post]) -> Tuple[List[Thread], ProcessingSummary]:
        """Assemble threads from a flat post list

        Args:
            posts: Validated posts in input order

        Returns:
            Tuple of (threads, summary):
            - threads sorted newest-first by their earliest post
            - each thread's posts in oldest-first order
            - summary with exclusion, duplicate, orphan and cycle counts
        """
        summary = ProcessingSummary()

        # Duplicates resolve before filtering: the later record wins even if it is excluded
        all_posts = RecordIndex(posts)
        summary.duplicate_post_ids = all_posts.duplicate_count

        included: List[Post] = []
        for post in all_posts.values():
            if self.exclude_reposts and post.is_repost:
                summary.excluded_reposts += 1
            elif self.is_included(post):
                included.append(post)
            else:
                summary.excluded_posts += 1

        index = RecordIndex(included)

        resolver = ReplyChainResolver(index)

        # Group posts by resolved root id
        groups: Dict[str, List[Post]] = defaultdict(list)
        outcomes: Dict[str, ChainOutcome] = {}

        for post in index.values():
            resolution = resolver.resolve(post)
            groups[resolution.root_id].append(post)
            outcomes[resolution.root_id] = resolution.outcome
            if resolution.outcome == ChainOutcome.CYCLE:
                summary.cyclic_chains += 1

        threads: List[Thread] = []
        for root_id, members in groups.items():
            # Stable sort keeps input order for equal timestamps
            members.sort(key=lambda p: p.created_at)
            thread = Thread(root_id=root_id, posts=tuple(members))
            threads.append(thread)

            outcome = outcomes[root_id]
            if outcome == ChainOutcome.MISSING_PARENT:
                summary.orphaned_roots += 1
            if thread.is_singleton and outcome != ChainOutcome.ROOT:
                summary.degraded_threads += 1

        # Newest threads first
        threads.sort(key=lambda t: (t.start_time, t.root_id), reverse=True)

        self.logger.debug(
            f"Assembled {len(threads)} threads from {len(included)} posts "
            f"({summary.excluded_posts} excluded)"
        )

        return threads, summary
