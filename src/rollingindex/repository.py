# Message repository: writes into the current bucket, reads through the alias

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Iterable, Iterator, List, Optional

from .errors import ReadError, WriteError
from .opensearch.client import IndexNotFoundError, OpenSearchError
from .opensearch.queries import hits_of, match_all_query, max_score_of, message_query, total_of
from .schema import Message

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
	return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SearchHit:
	id: str
	index: str
	score: Optional[float]
	content: Message


@dataclass(frozen=True)
class SearchHits:
	total: int = 0
	max_score: Optional[float] = None
	hits: List[SearchHit] = field(default_factory=list)

	def __iter__(self) -> Iterator[SearchHit]:
		return iter(self.hits)

	def __len__(self) -> int:
		return len(self.hits)

	@classmethod
	def from_response(cls, response) -> "SearchHits":
		hits = [
			SearchHit(
				id=hit.get("_id"),
				index=hit.get("_index"),
				score=hit.get("_score"),
				content=Message.from_source(hit.get("_source", {}), id=hit.get("_id")),
			)
			for hit in hits_of(response)
		]
		return cls(total=total_of(response), max_score=max_score_of(response), hits=hits)


class MessageRepository:
	"""Saves messages into time buckets and searches them through the alias.

	The router is injected: the bucket name it computes overrides the index a
	plain save would use, which is what makes the index roll.
	"""

	def __init__(self, store, router, clock: Callable[[], datetime] = utc_now, search_limit: int = 10000):
		self.store = store
		self.router = router
		self.clock = clock
		self.search_limit = search_limit

	def _write(self, message: Message, index_name: str, refresh: Optional[bool]) -> Message:
		try:
			response = self.store.save(message.to_source(), index_name, id=message.id, refresh=refresh)
		except (OpenSearchError, ValueError) as e:
			raise WriteError(f"Cannot save message into '{index_name}': {e}") from e
		return Message(message=message.message, timestamp=message.timestamp, id=response["_id"])

	def save(self, message: Message, now: Optional[datetime] = None, refresh: Optional[bool] = None) -> Message:
		"""Save into the bucket for *now* (default: clock). Returns a copy with the id set."""
		index_name = self.router.resolve_write_target(now or self.clock())
		logger.debug("Writing message to bucket '%s'", index_name)
		return self._write(message, index_name, refresh)

	def save_all(self, messages: Iterable[Message], now: Optional[datetime] = None, refresh: Optional[bool] = None) -> List[Message]:
		"""Save a batch; one clock read so the batch lands in a single bucket."""
		index_name = self.router.resolve_write_target(now or self.clock())
		logger.debug("Writing batch to bucket '%s'", index_name)
		return [self._write(message, index_name, refresh) for message in messages]

	def overwrite(self, message: Message, index_name: str, refresh: Optional[bool] = None) -> Message:
		"""Replace a stored message in the bucket it was found in (see SearchHit.index)."""
		if not message.id:
			raise ValueError("Cannot overwrite a message without an id")
		return self._write(message, index_name, refresh)

	def _search(self, query, limit: Optional[int]) -> SearchHits:
		target = self.router.search_target()
		size = self.search_limit if limit is None else limit
		try:
			response = self.store.search(target, query, size)
		except IndexNotFoundError:
			# No bucket has been created yet, so the alias does not exist
			logger.debug("Alias '%s' not found, returning no hits", target)
			return SearchHits()
		except (OpenSearchError, ValueError) as e:
			raise ReadError(f"Cannot search '{target}': {e}") from e
		return SearchHits.from_response(response)

	def search_all(self, limit: Optional[int] = None) -> SearchHits:
		return self._search(match_all_query(), limit)

	def search_by_message(self, text: str, limit: Optional[int] = None) -> SearchHits:
		return self._search(message_query(text), limit)
