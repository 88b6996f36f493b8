"""
Metadata client for The Movie Database (TMDB).
Thin wrapper over the REST API: search, details, trailers, localized details,
image manifests and image URL construction.
"""

from typing import Any, Dict, List, Optional

import requests
from loguru import logger

from .config import DEFAULT_TMDB_TOKEN
from .errors import MetadataError
from .models import FilmRecord, SearchHit


class MetadataClient:
	"""Talks to TMDB with a bearer token. Every network failure surfaces as MetadataError."""

	BASE_URL = 'https://api.themoviedb.org/3'
	IMAGE_BASE_URL = 'https://image.tmdb.org/t/p/'
	DEFAULT_LANGUAGE = 'en-US'
	MAX_RESULTS = 10
	TIMEOUT = 10

	def __init__(self, api_key: Optional[str] = None):
		self.api_key = api_key or DEFAULT_TMDB_TOKEN

	# ------------------------------------------------------------------
	# Public API
	# ------------------------------------------------------------------
	def search(self, query: str) -> List[SearchHit]:
		"""Return up to 10 ranked hits; blank queries return [] without a request."""
		if not query or not query.strip():
			return []

		payload = self._get('/search/movie', query=query, language=self.DEFAULT_LANGUAGE, page=1)
		hits = []
		for item in (payload.get('results') or [])[:self.MAX_RESULTS]:
			hits.append(SearchHit(
				external_id=int(item['id']),
				title=item.get('title') or '',
				poster_path=item.get('poster_path') or '',
				release_date=item.get('release_date') or '',
				vote_average=float(item.get('vote_average') or 0.0),
			))
		logger.debug(f"[TMDB] search '{query}' -> {len(hits)} hits")
		return hits

	def get_details(self, external_id: int) -> Dict[str, Any]:
		return self._get(f'/movie/{external_id}', language=self.DEFAULT_LANGUAGE)

	def get_trailer_key(self, external_id: int) -> str:
		"""YouTube key of the first trailer, or '' when there is none."""
		payload = self._get(f'/movie/{external_id}/videos', language=self.DEFAULT_LANGUAGE)
		for video in payload.get('results') or []:
			if video.get('type') == 'Trailer' and video.get('site') == 'YouTube':
				return video.get('key') or ''
		return ''

	def get_localized_details(self, external_id: int, locale: str) -> Dict[str, Any]:
		return self._get(f'/movie/{external_id}', language=locale)

	def get_images(self, external_id: int, locale: str) -> Dict[str, Any]:
		"""Image manifest restricted to `locale` and untagged images."""
		return self._get(f'/movie/{external_id}/images', include_image_language=f'{locale},null')

	@classmethod
	def build_image_url(cls, path: Optional[str], size: str = 'w500') -> str:
		if not path:
			return ''
		return f'{cls.IMAGE_BASE_URL}{size}{path}'

	@staticmethod
	def details_to_record(details: Dict[str, Any], trailer_key: str = '') -> FilmRecord:
		"""Map a /movie/{id} payload onto a new (unsaved) FilmRecord."""
		try:
			return MetadataClient._record_from_details(details, trailer_key)
		except (AttributeError, KeyError, TypeError, ValueError) as e:
			raise MetadataError(f'Malformed movie details: {e}') from e

	@staticmethod
	def _record_from_details(details: Dict[str, Any], trailer_key: str) -> FilmRecord:
		return FilmRecord(
			external_id=int(details['id']),
			title=details.get('title') or '',
			poster_path=details.get('poster_path') or '',
			backdrop_path=details.get('backdrop_path') or '',
			overview=details.get('overview') or '',
			release_date=details.get('release_date') or '',
			vote_average=float(details.get('vote_average') or 0.0),
			runtime_minutes=int(details.get('runtime') or 0),
			genres=[g.get('name') for g in (details.get('genres') or []) if g.get('name')],
			origin_countries=list(details.get('origin_country') or []),
			trailer_key=trailer_key or '',
		)

	# ------------------------------------------------------------------
	# Internal helpers
	# ------------------------------------------------------------------
	def _headers(self) -> Dict[str, str]:
		return {
			'Authorization': f'Bearer {self.api_key}',
			'Content-Type': 'application/json',
		}

	def _get(self, path: str, **params) -> Dict[str, Any]:
		url = f'{self.BASE_URL}{path}'
		try:
			response = requests.get(url, headers=self._headers(), params=params, timeout=self.TIMEOUT)
		except requests.RequestException as e:
			logger.error(f"[TMDB] GET {path} failed: {e}")
			raise MetadataError(f'Request to {path} failed: {e}') from e

		if response.status_code != 200:
			logger.error(f"[TMDB] GET {path} returned HTTP {response.status_code}")
			raise MetadataError(f'{path} returned HTTP {response.status_code}', status_code=response.status_code)

		try:
			return response.json()
		except ValueError as e:
			raise MetadataError(f'{path} returned invalid JSON') from e
