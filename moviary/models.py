"""
Data models for Moviary.
Defines the core data structures shared by the store, the filter engine and the UI.
"""

# Import dataclass to define simple "record-like" classes without boilerplate
from dataclasses import dataclass, field, replace  # auto-generates __init__, __repr__, etc.
# Enum gives update outcomes a closed set of values
from enum import Enum  # saved / partial / failed
# Import typing helpers for precise and self-documenting types
from typing import Any, Dict, List, Optional  # lists, dicts and optional values


# Sentinel used by every facet selector to mean "no constraint"
ALL = "All"


@dataclass
class FilmRecord:
	"""
	A single film in the personal collection, as persisted in the `films` table.
	Paths are provider path fragments (e.g. "/abc.jpg"), never full URLs.
	"""
	external_id: int  # metadata provider id (tmdb_id), unique within the collection
	title: str  # display title
	poster_path: str = ''  # poster path fragment
	backdrop_path: str = ''  # backdrop path fragment
	overview: str = ''  # synopsis
	release_date: str = ''  # ISO date string, year derived by parsing
	vote_average: float = 0.0  # rating on a 0-10 scale
	runtime_minutes: int = 0  # runtime in minutes
	genres: List[str] = field(default_factory=list)  # ordered, display order matters
	origin_countries: List[str] = field(default_factory=list)  # ISO country codes
	trailer_key: str = ''  # YouTube key, empty means "no trailer"
	id: Optional[int] = None  # store-assigned id
	created_at: Optional[str] = None  # server-assigned timestamp
	storage_locations: Optional[List[str]] = None  # absent when the backend lacks the column

	def with_id(self, record_id: int) -> 'FilmRecord':
		"""Return a copy carrying a store-assigned id."""
		return replace(self, id=record_id)


@dataclass(frozen=True)
class FilterCriteria:
	"""
	What the user currently filters by. Each facet is a no-op when set to ALL,
	and an empty search term means "no search".
	"""
	genre: str = ALL  # selected genre or ALL
	year: str = ALL  # selected 4-digit year as a string or ALL
	country: str = ALL  # selected country code or ALL
	search_term: str = ''  # free text, trimmed and case-insensitive when applied


@dataclass
class Facets:
	"""Selectable option lists derived from the full collection; ALL is always first."""
	genres: List[str]
	years: List[str]
	countries: List[str]


@dataclass(frozen=True)
class LocalizationEntry:
	"""Region-specific display overrides for one external id; either field may be missing."""
	title: Optional[str] = None
	poster_path: Optional[str] = None


@dataclass
class SearchHit:
	"""One ranked result of a metadata provider search."""
	external_id: int  # provider id
	title: str  # provider title
	poster_path: str = ''  # poster path fragment
	release_date: str = ''  # ISO date string
	vote_average: float = 0.0  # provider rating


class UpdateOutcome(str, Enum):
	SAVED = 'saved'  # every field persisted
	PARTIAL = 'partial'  # persisted, but at least one optional field was dropped
	FAILED = 'failed'  # nothing persisted


@dataclass
class ActionResult:
	"""
	What a user-triggered action reports back to the presentation layer.
	`message` is meant to be shown to the user as-is; `data` carries the payload, if any.
	"""
	ok: bool
	message: str = ''
	outcome: Optional[UpdateOutcome] = None
	notice: bool = False  # True for expected rejections (e.g. duplicates) rather than errors
	data: Any = None


@dataclass
class ImportReport:
	"""Aggregate counts of a bulk import run, plus per-item details for display."""
	added: int = 0
	skipped: int = 0
	failed: int = 0
	details: List[Dict[str, str]] = field(default_factory=list)

	@property
	def total(self) -> int:
		return self.added + self.skipped + self.failed
