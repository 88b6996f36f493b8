"""
Filter/search engine.
Derives facet option lists from the collection and applies the multi-criteria
predicate (genre, year, country) combined with a free-text search.
"""

# Standard libs for date parsing and typing
from datetime import date  # ISO date parsing for release years
from typing import Callable, Dict, List, Optional  # type annotations

# Import project data classes
from .models import ALL, Facets, FilmRecord, FilterCriteria  # core data classes
from .scheduler import TickScheduler  # deferred subscriber notification

# Import loguru for console logging
from loguru import logger  # simple structured logger


Subscriber = Callable[[List[FilmRecord]], None]


def parse_year(value: Optional[str]) -> Optional[int]:
	"""Year of an ISO date string, or None when missing/unparseable."""
	raw = (value or '').strip()  # tolerate None and padding
	if not raw:
		return None  # no date at all
	try:
		return date.fromisoformat(raw[:10]).year  # accept "YYYY-MM-DD" and longer timestamps
	except ValueError:
		pass
	# Some rows only carry a bare year
	if len(raw) == 4 and raw.isdigit():
		return int(raw)
	return None


def release_year(record: FilmRecord) -> Optional[int]:
	return parse_year(record.release_date)


def _alpha(value: str):
	return (value.lower(), value)


def derive_facets(collection: List[FilmRecord]) -> Facets:
	"""
	Scan every record once and collect distinct genres, release years and
	origin countries. Each list is deduplicated, sorted (genres and countries
	alphabetically, years newest first) and prefixed with ALL.
	"""
	genres = set()  # distinct non-empty genres
	years = set()  # distinct parsed years
	countries = set()  # distinct country codes

	for record in collection:  # single pass over the collection
		genres.update(g for g in (record.genres or []) if g)  # skip empty genre strings
		year = release_year(record)  # None when unparseable
		if year is not None:
			years.add(year)
		countries.update(c.upper() for c in (record.origin_countries or []) if c)  # codes compare case-insensitively

	return Facets(
		genres=[ALL] + sorted(genres, key=_alpha),
		years=[ALL] + [str(y) for y in sorted(years, reverse=True)],
		countries=[ALL] + sorted(countries, key=_alpha),
	)


def matches(record: FilmRecord, criteria: FilterCriteria) -> bool:
	"""Inclusion predicate: genre AND year AND country AND (no search OR search hit)."""
	# Genre filter: the record must carry the selected genre (case-insensitive)
	if criteria.genre and criteria.genre != ALL:
		wanted = criteria.genre.lower()
		if not any(g and g.lower() == wanted for g in (record.genres or [])):
			return False

	# Year filter: records without a parseable date fail any specific year
	if criteria.year and criteria.year != ALL:
		year = release_year(record)
		if year is None or str(year) != criteria.year.strip():
			return False

	# Country filter: case-insensitive, records without countries fail
	if criteria.country and criteria.country != ALL:
		countries = [c.lower() for c in (record.origin_countries or []) if c]
		if criteria.country.lower() not in countries:
			return False

	# Search term: empty means pass-through, otherwise substring of title or any genre
	term = (criteria.search_term or '').strip().lower()
	if term:
		in_title = term in (record.title or '').lower()
		in_genres = any(g and term in g.lower() for g in (record.genres or []))
		return in_title or in_genres

	return True


def apply_filters(collection: List[FilmRecord], criteria: FilterCriteria) -> List[FilmRecord]:
	"""Return the records satisfying `criteria`, in collection order. Never mutates the input."""
	result = [record for record in collection if matches(record, criteria)]  # stable filter
	logger.debug(
		f"[Filters] {len(result)}/{len(collection)} kept | genre={criteria.genre} year={criteria.year} "
		f"country={criteria.country} q='{criteria.search_term}'"
	)
	return result


def clear_filters() -> FilterCriteria:
	"""Criteria with every facet at ALL and no search term."""
	return FilterCriteria()


class CollectionView:
	"""
	Holds the full collection and the current criteria, and keeps the filtered
	view in sync. State changes are two-phase: the next state is computed and
	stored first, then subscribers are notified on the scheduler's next tick,
	never from inside the update itself. Subscribe/unsubscribe are deferred the
	same way.
	"""

	def __init__(self, scheduler: Optional[TickScheduler] = None):
		self.scheduler = scheduler or TickScheduler()
		self._collection: List[FilmRecord] = []
		self._criteria = clear_filters()
		self._facets = derive_facets([])
		self._visible: List[FilmRecord] = []
		self._subscribers: Dict[int, Subscriber] = {}
		self._next_token = 0

	@property
	def collection(self) -> List[FilmRecord]:
		return list(self._collection)

	@property
	def criteria(self) -> FilterCriteria:
		return self._criteria

	@property
	def facets(self) -> Facets:
		return self._facets

	@property
	def visible(self) -> List[FilmRecord]:
		return list(self._visible)

	def set_collection(self, collection: List[FilmRecord]) -> None:
		self._collection = list(collection)
		self._facets = derive_facets(self._collection)  # always from the full collection
		self._recompute()

	def set_criteria(self, **changes) -> FilterCriteria:
		"""Replace some fields of the criteria, e.g. `set_criteria(genre='Drama')`."""
		current = self._criteria
		self._criteria = FilterCriteria(
			genre=changes.get('genre', current.genre) or ALL,
			year=changes.get('year', current.year) or ALL,
			country=changes.get('country', current.country) or ALL,
			search_term=str(changes.get('search_term', current.search_term) or ''),
		)
		self._recompute()
		return self._criteria

	def search(self, term: Optional[str]) -> None:
		"""One-argument search callback handed to the presentation layer."""
		self.set_criteria(search_term=term or '')

	def clear(self) -> FilterCriteria:
		self._criteria = clear_filters()
		self._recompute()
		return self._criteria

	def find(self, record_id: int) -> Optional[FilmRecord]:
		return next((r for r in self._collection if r.id == record_id), None)

	def has_external_id(self, external_id: int) -> bool:
		return any(r.external_id == external_id for r in self._collection)

	def subscribe(self, callback: Subscriber) -> int:
		"""Register `callback`; it becomes active on the next tick. Returns a token for unsubscribe."""
		self._next_token += 1
		token = self._next_token
		self.scheduler.call_soon(self._register, token, callback)
		return token

	def unsubscribe(self, token: int) -> None:
		self.scheduler.call_soon(self._subscribers.pop, token, None)

	def _register(self, token: int, callback: Subscriber) -> None:
		self._subscribers[token] = callback
		callback(self.visible)  # initial state for the new subscriber

	def _recompute(self) -> None:
		self._visible = apply_filters(self._collection, self._criteria)
		self.scheduler.call_soon(self._notify)

	def _notify(self) -> None:
		visible = self.visible
		for callback in list(self._subscribers.values()):
			callback(visible)
