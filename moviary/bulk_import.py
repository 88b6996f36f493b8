"""
Bulk import of titles from an external list.
Processes one title at a time with a fixed pause between items; a failure on
one title is logged and the run moves on. Counts are reported once at the end.
"""

# Standard libs for timing and typing
import time  # pause between items
from typing import Any, Callable, Dict, List, Optional  # type annotations

# Fuzzy title matching
from rapidfuzz import fuzz  # fuzzy matching utilities

# Import project modules
from .filters import parse_year  # year of a search hit
from .library import FilmLibrary  # add action
from .models import ImportReport, SearchHit  # data classes

# Import loguru for console logging
from loguru import logger  # console logging


class BulkImporter:
	"""
	Resolves each title to a metadata search hit and adds it through the library,
	so duplicate checks and error handling are the same as a manual add.
	"""

	MIN_SCORE = 80  # token_sort_ratio below this is not a confident match

	def __init__(self, library: FilmLibrary, delay_seconds: float = 0.5, sleep: Callable[[float], None] = time.sleep):
		self.library = library
		self.delay_seconds = delay_seconds
		self._sleep = sleep

	def run(self, items: List[Dict[str, Any]]) -> ImportReport:
		report = ImportReport()
		logger.info(f"[Import] Importing {len(items)} titles (delay {self.delay_seconds}s)")

		for index, item in enumerate(items):
			if index:
				self._sleep(self.delay_seconds)  # stay under the provider's rate limit

			title = item.get('title') or ''
			try:
				status, note = self._import_one(title, item.get('year'))
			except Exception as e:
				logger.exception(f"[Import] '{title}' failed: {e}")
				status, note = 'failed', str(e)

			if status == 'added':
				report.added += 1
			elif status == 'skipped':
				report.skipped += 1
			else:
				report.failed += 1
			report.details.append({'title': title, 'status': status, 'note': note})

		logger.info(f"[Import] Done: {report.added} added, {report.skipped} skipped, {report.failed} failed")
		return report

	def _import_one(self, title: str, year: Optional[int]):
		searched = self.library.search_metadata(title)
		if not searched.ok:
			return 'failed', searched.message

		hit = self.best_match(title, year, searched.data or [])
		if hit is None:
			logger.info(f"[Import] No confident match for '{title}'")
			return 'skipped', 'no confident match'

		added = self.library.add_from_search(hit)
		if added.ok:
			return 'added', hit.title
		if added.notice:
			return 'skipped', added.message
		return 'failed', added.message

	def best_match(self, title: str, year: Optional[int], hits: List[SearchHit]) -> Optional[SearchHit]:
		"""Highest fuzzy title score above MIN_SCORE; a matching year wins ties and near-ties."""
		best = None
		best_key = None
		for rank, hit in enumerate(hits):
			score = fuzz.token_sort_ratio(title.lower(), (hit.title or '').lower())
			if score < self.MIN_SCORE:
				continue
			hit_year = parse_year(hit.release_date)
			year_bonus = 10 if year and hit_year == year else 0
			key = (score + year_bonus, -rank)  # provider rank breaks remaining ties
			if best_key is None or key > best_key:
				best, best_key = hit, key
		return best
