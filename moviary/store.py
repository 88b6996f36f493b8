"""
Collection store gateway.
CRUD over the hosted `films` table through its PostgREST endpoint, plus a
no-op stand-in used when persistence is not configured.
"""

# Standard libs for regex and typing
import re  # pull the column name out of schema errors
from dataclasses import dataclass, field  # update receipts
from typing import Any, Dict, List, Optional  # type hints

# HTTP client used for every call to the hosted backend
import requests  # REST calls

# Import project modules
from .config import Settings  # connection settings
from .data_loader import DataLoader  # row <-> FilmRecord conversion
from .errors import StoreError, StoreErrorKind  # structured failures
from .models import FilmRecord, UpdateOutcome  # data classes

# Console logging
from loguru import logger  # console logger


# Error codes that mean "the payload names a column the table does not have"
MISSING_COLUMN_CODES = {'PGRST204', '42703'}
# Error codes that mean "no such row / relation"
NOT_FOUND_CODES = {'PGRST116', '42P01'}
# Columns that may legitimately be absent from older schemas
OPTIONAL_COLUMNS = ('storage_locations',)

# "Could not find the 'x' column" (PostgREST) / 'column "x" of relation' (PostgreSQL)
RE_COLUMN = re.compile(r"""column ['"]?(\w+)['"]?|['"](\w+)['"] column""", re.I)


@dataclass
class UpdateReceipt:
	outcome: UpdateOutcome
	dropped_fields: List[str] = field(default_factory=list)


def classify_error(response: requests.Response) -> StoreError:
	"""Turn a failed PostgREST response into a StoreError with a structured kind."""
	try:
		body = response.json()
	except ValueError:
		body = {}
	if not isinstance(body, dict):
		body = {}

	code = str(body.get('code') or '')
	message = body.get('message') or response.text or f'HTTP {response.status_code}'

	kind = StoreErrorKind.OTHER
	column = None
	if code in MISSING_COLUMN_CODES:
		kind = StoreErrorKind.MISSING_COLUMN
		match = RE_COLUMN.search(message)
		if match:
			column = match.group(1) or match.group(2)
	elif code in NOT_FOUND_CODES or response.status_code == 404:
		kind = StoreErrorKind.NOT_FOUND

	return StoreError(message, kind=kind, code=code or None, column=column, status_code=response.status_code)


class FilmStore:
	"""
	Gateway over `<url>/rest/v1/films`.
	Reads come back newest-created first; writes raise StoreError on failure.
	"""

	TABLE = 'films'
	TIMEOUT = 15

	def __init__(self, url: str, api_key: str, session: Optional[requests.Session] = None):
		self.base_url = f"{url.rstrip('/')}/rest/v1/{self.TABLE}"
		self.session = session or requests.Session()
		self.session.headers.update({
			'apikey': api_key,
			'Authorization': f'Bearer {api_key}',
			'Content-Type': 'application/json',
		})
		self.loader = DataLoader()

	def list_all(self) -> List[FilmRecord]:
		rows = self._request('GET', params={'select': '*', 'order': 'created_at.desc'})
		films = [self.loader.record_from_row(row) for row in rows or []]
		logger.info(f"[Store] Loaded {len(films)} films")
		return films

	def exists_by_external_id(self, external_id: int) -> bool:
		rows = self._request('GET', params={'select': 'id', 'tmdb_id': f'eq.{external_id}', 'limit': 1})
		return bool(rows)

	def insert(self, record: FilmRecord) -> FilmRecord:
		payload = self.loader.record_to_row(record)
		rows = self._request('POST', json=[payload], headers={'Prefer': 'return=representation'})
		logger.info(f"[Store] Inserted '{record.title}' (tmdb {record.external_id})")
		if rows:
			return self.loader.record_from_row(rows[0])
		return record

	def update(self, record_id: int, changes: Dict[str, Any]) -> UpdateReceipt:
		"""
		Apply `changes` (wire column names) to one row. If the table lacks an
		optional column named in the payload, retry once without it and report
		a partial save.
		"""
		payload = dict(changes)
		try:
			self._request('PATCH', params={'id': f'eq.{record_id}'}, json=payload)
			return UpdateReceipt(UpdateOutcome.SAVED)
		except StoreError as e:
			dropped = self._droppable_column(e, payload)
			if not dropped:
				raise
			logger.warning(f"[Store] Column '{dropped}' missing on {self.TABLE}; retrying update {record_id} without it")

		payload.pop(dropped)
		self._request('PATCH', params={'id': f'eq.{record_id}'}, json=payload)
		return UpdateReceipt(UpdateOutcome.PARTIAL, dropped_fields=[dropped])

	def delete(self, record_id: int) -> None:
		self._request('DELETE', params={'id': f'eq.{record_id}'})
		logger.info(f"[Store] Deleted film {record_id}")

	def _droppable_column(self, error: StoreError, payload: Dict[str, Any]) -> Optional[str]:
		if error.kind != StoreErrorKind.MISSING_COLUMN:
			return None
		if error.column:
			return error.column if error.column in OPTIONAL_COLUMNS and error.column in payload else None
		# column name not reported; only an optional column can be the culprit
		present = [c for c in OPTIONAL_COLUMNS if c in payload]
		return present[0] if len(present) == 1 else None

	def _request(self, method: str, params=None, json=None, headers=None):
		try:
			response = self.session.request(
				method, self.base_url, params=params, json=json, headers=headers, timeout=self.TIMEOUT,
			)
		except requests.RequestException as e:
			logger.error(f"[Store] {method} {self.TABLE} failed: {e}")
			raise StoreError(f'{method} {self.TABLE} failed: {e}') from e

		if not response.ok:
			error = classify_error(response)
			logger.error(f"[Store] {method} {self.TABLE} -> HTTP {response.status_code} {error.code}: {error}")
			raise error

		if response.status_code == 204 or not response.content:
			return None
		return response.json()


class NullFilmStore:
	"""Stand-in used without credentials: reads are empty and writes silently succeed."""

	def list_all(self) -> List[FilmRecord]:
		return []

	def exists_by_external_id(self, external_id: int) -> bool:
		return False

	def insert(self, record: FilmRecord) -> FilmRecord:
		logger.debug(f"[Store] (no backend) insert '{record.title}' ignored")
		return record

	def update(self, record_id: int, changes: Dict[str, Any]) -> UpdateReceipt:
		logger.debug(f"[Store] (no backend) update {record_id} ignored")
		return UpdateReceipt(UpdateOutcome.SAVED)

	def delete(self, record_id: int) -> None:
		logger.debug(f"[Store] (no backend) delete {record_id} ignored")


def create_store(settings: Settings, session: Optional[requests.Session] = None):
	"""FilmStore when credentials are present, NullFilmStore otherwise."""
	if not settings.persistence_configured:
		logger.warning("[Store] No persistence credentials; using the empty no-op store")
		return NullFilmStore()
	return FilmStore(settings.supabase_url, settings.supabase_key, session=session)
