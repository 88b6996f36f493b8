"""
Search-as-you-type against the metadata provider.
Keystrokes restart a debounce timer; every search that does run takes a
generation number, and a response is only delivered if no newer search was
issued in the meantime.
"""

import threading
from typing import Callable, List, Optional

from loguru import logger

from .errors import MetadataError
from .models import SearchHit
from .scheduler import Debouncer
from .tmdb_client import MetadataClient


class MetadataSearchSession:

	def __init__(
		self,
		client: MetadataClient,
		on_results: Callable[[str, List[SearchHit]], None],
		on_error: Optional[Callable[[str, Exception], None]] = None,
		debounce_seconds: float = 0.3,
		timer_factory=threading.Timer,
	):
		self.client = client
		self.on_results = on_results
		self.on_error = on_error
		self._debouncer = Debouncer(debounce_seconds, self.search_now, timer_factory=timer_factory)
		self._generation = 0
		self._lock = threading.Lock()
		self.stale_dropped = 0

	def submit(self, query: str) -> None:
		"""Feed the current contents of the search box."""
		if not query or not query.strip():
			self._debouncer.cancel()
			with self._lock:
				self._generation += 1  # anything still in flight is now stale
			self.on_results(query or '', [])
			return
		self._debouncer.trigger(query)

	def search_now(self, query: str) -> Optional[List[SearchHit]]:
		"""
		Run a search immediately. Returns the hits if they were delivered, or
		None if a newer search superseded this one (or it failed).
		"""
		with self._lock:
			self._generation += 1
			generation = self._generation

		try:
			hits = self.client.search(query)
		except MetadataError as e:
			logger.error(f"[Search] '{query}' failed: {e}")
			if self._is_current(generation) and self.on_error:
				self.on_error(query, e)
			return None

		if not self._is_current(generation):
			self.stale_dropped += 1
			logger.debug(f"[Search] Dropping stale results for '{query}' (generation {generation})")
			return None

		self.on_results(query, hits)
		return hits

	def close(self) -> None:
		"""Cancel the pending timer. In-flight requests finish but are not delivered."""
		self._debouncer.cancel()
		with self._lock:
			self._generation += 1

	def _is_current(self, generation: int) -> bool:
		with self._lock:
			return generation == self._generation
