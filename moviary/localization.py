"""
Localization cache.
Swaps in a region-specific title and poster for films from one designated
origin country. Entries live as long as the cache object; there is no eviction.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger

from .errors import MetadataError
from .models import FilmRecord, LocalizationEntry
from .tmdb_client import MetadataClient


class LocalizationCache:
	"""
	Owned by the application context and passed to whoever renders films.
	`get_localized` answers from memory when it can; otherwise it fetches the
	localized details and the image manifest concurrently and caches the result.
	"""

	def __init__(self, client: MetadataClient, country: str = 'ID', locale: str = 'id'):
		self.client = client
		self.country = country.upper()
		self.locale = locale
		self._entries: Dict[int, LocalizationEntry] = {}
		self._lock = threading.Lock()

	def __len__(self) -> int:
		with self._lock:
			return len(self._entries)

	def peek(self, external_id: int) -> Optional[LocalizationEntry]:
		with self._lock:
			return self._entries.get(external_id)

	def clear(self) -> None:
		with self._lock:
			self._entries.clear()

	def should_localize(self, record: FilmRecord) -> bool:
		return any(str(c).upper() == self.country for c in (record.origin_countries or []))

	def get_localized(self, record: FilmRecord) -> Optional[LocalizationEntry]:
		"""
		Localized entry for `record`, or None when the record is not localized
		or the lookup failed. Never raises.
		"""
		if not self.should_localize(record):
			return None

		cached = self.peek(record.external_id)
		if cached is not None:
			return cached

		try:
			entry = self._fetch(record)
		except Exception as e:
			# silent for the user, stored fields stay on screen
			logger.debug(f"[Localize] {record.external_id} failed, keeping stored fields: {e}")
			return None

		with self._lock:
			self._entries[record.external_id] = entry
		return entry

	def display_fields(self, record: FilmRecord) -> Tuple[str, str]:
		"""(title, poster_path) to show for `record`."""
		entry = self.get_localized(record)
		if entry is None:
			return record.title, record.poster_path
		return entry.title or record.title, entry.poster_path or record.poster_path

	def _fetch(self, record: FilmRecord) -> LocalizationEntry:
		with ThreadPoolExecutor(max_workers=2) as pool:
			details_future = pool.submit(self.client.get_localized_details, record.external_id, self.locale)
			images_future = pool.submit(self.client.get_images, record.external_id, self.locale)

			details = details_future.result()  # a failure here aborts localization
			try:
				images = images_future.result()
			except MetadataError as e:
				logger.debug(f"[Localize] Image manifest for {record.external_id} unavailable: {e}")
				images = {}

		poster = self.pick_poster(images.get('posters') or [], self.locale) or record.poster_path
		logger.debug(f"[Localize] {record.external_id} -> title='{details.get('title')}' poster={poster}")
		return LocalizationEntry(title=details.get('title') or None, poster_path=poster or None)

	@staticmethod
	def pick_poster(posters: List[Dict[str, Any]], locale: str) -> Optional[str]:
		"""Prefer a poster tagged with `locale`, then an untagged one."""
		for poster in posters:
			if poster.get('iso_639_1') == locale and poster.get('file_path'):
				return poster['file_path']
		for poster in posters:
			if poster.get('iso_639_1') is None and poster.get('file_path'):
				return poster['file_path']
		return None
