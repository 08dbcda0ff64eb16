"""Identifier lookup over a flat batch of records"""

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Union

from .models import Message, Post

Record = Union[Post, Message]


class RecordIndex:
    """Map record ids to records for O(1) lookup

    Duplicate ids are resolved last-write-wins: the later record replaces the
    earlier one but keeps the position where the id was first seen, so
    iteration order stays a function of the input order.

    Example:
        >>> index = RecordIndex(posts)
        >>> index.get("1234")
        Post(id='1234', ...)
        >>> index.duplicate_count
        0
    """

    def __init__(self, records: Iterable[Record]):
        self.logger = logging.getLogger(__name__)
        self._records: Dict[str, Record] = {}
        self.duplicate_ids: List[str] = []

        for record in records:
            if record.id in self._records:
                self.duplicate_ids.append(record.id)
                self.logger.warning(f"Duplicate record id {record.id}, keeping the later record")
            self._records[record.id] = record

        self.logger.debug(
            f"Indexed {len(self._records)} records ({len(self.duplicate_ids)} duplicates)"
        )

    @property
    def duplicate_count(self) -> int:
        return len(self.duplicate_ids)

    def get(self, record_id: Optional[str]) -> Optional[Record]:
        if record_id is None:
            return None
        return self._records.get(record_id)

    def values(self) -> List[Record]:
        """Records in first-seen order"""
        return list(self._records.values())

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)
