"""
Data loading and conversion module.
Turns raw rows (store JSON, edit forms, import files) into FilmRecord objects and back.
"""

# Standard libs for JSON/CSV parsing, typing, and paths
import csv  # read CSV import files
import json  # read JSON lines
import os  # remove temporary upload copies
import tempfile  # uploads are parsed from a named file
from typing import Any, Dict, List, Optional  # type hints
from pathlib import Path  # filesystem-safe paths

# Import our data classes used across the project
from .models import FilmRecord  # structured film record

# Console logging
from loguru import logger  # console logger


# Wire (snake_case) column name for each FilmRecord attribute
COLUMN_NAMES = {
	'id': 'id',
	'external_id': 'tmdb_id',
	'title': 'title',
	'poster_path': 'poster_path',
	'backdrop_path': 'backdrop_path',
	'overview': 'overview',
	'release_date': 'release_date',
	'vote_average': 'vote_average',
	'runtime_minutes': 'runtime',
	'genres': 'genres',
	'origin_countries': 'origin_country',
	'trailer_key': 'trailer_key',
	'created_at': 'created_at',
	'storage_locations': 'storage_locations',
}

# Columns the store assigns itself; never sent on insert
SERVER_COLUMNS = ('id', 'created_at')


class DataLoader:
	"""
	Handles converting film rows between the wire format and FilmRecord,
	and reading bulk-import title lists from disk.
	"""

	def record_from_row(self, data: Dict[str, Any]) -> FilmRecord:
		"""
		Convert a raw dictionary (from the store or an export file) into a FilmRecord.
		Missing or null fields get safe defaults.
		"""
		# Lists may arrive as real lists or as comma-separated strings (CSV exports)
		genres = self._parse_comma_separated(data.get('genres'))  # ordered genres
		countries = self._parse_comma_separated(data.get('origin_country'))  # country codes

		# storage_locations stays None when the backend does not have the column at all
		locations = None
		if 'storage_locations' in data and data.get('storage_locations') is not None:
			locations = self._parse_comma_separated(data.get('storage_locations'))

		return FilmRecord(
			id=self._to_int(data.get('id')),  # store id, None when not yet stored
			external_id=self._to_int(data.get('tmdb_id')) or 0,  # provider id
			title=data.get('title') or '',
			poster_path=data.get('poster_path') or '',
			backdrop_path=data.get('backdrop_path') or '',
			overview=data.get('overview') or '',
			release_date=data.get('release_date') or '',
			vote_average=self._to_float(data.get('vote_average')),
			runtime_minutes=self._to_int(data.get('runtime')) or 0,
			genres=genres,
			origin_countries=countries,
			trailer_key=data.get('trailer_key') or '',
			created_at=data.get('created_at'),
			storage_locations=locations,
		)

	def record_to_row(self, record: FilmRecord, include_server_columns: bool = False) -> Dict[str, Any]:
		"""
		Convert a FilmRecord into a wire row. Server-assigned columns are left out
		unless requested, and storage_locations is only sent when the record has it.
		"""
		row: Dict[str, Any] = {}
		for attr, column in COLUMN_NAMES.items():
			if column in SERVER_COLUMNS and not include_server_columns:
				continue  # store assigns these
			value = getattr(record, attr)
			if attr == 'storage_locations' and value is None:
				continue  # keep the payload valid for schemas without the column
			row[column] = list(value) if isinstance(value, list) else value
		return row

	def parse_edit_form(self, form: Dict[str, Any]) -> Dict[str, Any]:
		"""
		Turn the string values of an edit form into an update payload.
		List fields are comma separated; numbers fall back to 0 (or None for the external id).
		"""
		payload: Dict[str, Any] = {}

		if 'tmdb_id' in form:
			payload['tmdb_id'] = self._to_int(form.get('tmdb_id'))  # None when blank/invalid
		for key in ('title', 'poster_path', 'backdrop_path', 'overview', 'release_date', 'trailer_key'):
			if key in form:
				payload[key] = str(form.get(key) or '')
		if 'vote_average' in form:
			payload['vote_average'] = self._to_float(form.get('vote_average'))
		if 'runtime' in form:
			payload['runtime'] = self._to_int(form.get('runtime')) or 0
		for key in ('genres', 'origin_country', 'storage_locations'):
			if key in form:
				payload[key] = self._parse_comma_separated(form.get(key))

		return payload

	def load_import_titles(self, filepath: str) -> List[Dict[str, Any]]:
		"""
		Read a list of titles to import. Supported formats:
		- .jsonl: one object per line with "title" and optional "year"
		- .csv: header row with "title" and optional "year"
		- anything else: one title per line
		Returns dicts with keys "title" and "year" (int or None).
		"""
		filepath = Path(filepath)  # normalize path

		# Validate the file presence early to give clear error messages
		if not filepath.exists():
			raise FileNotFoundError(f"Import file not found: {filepath}")

		logger.info(f"[DataLoader] Loading import titles from {filepath}...")
		suffix = filepath.suffix.lower()
		if suffix == '.jsonl':
			items = self._load_jsonl_titles(filepath)
		elif suffix == '.csv':
			items = self._load_csv_titles(filepath)
		else:
			items = self._load_text_titles(filepath)

		logger.info(f"[DataLoader] Loaded {len(items)} titles to import.")
		return items

	def load_uploaded_titles(self, data: bytes, filename: str) -> List[Dict[str, Any]]:
		"""Parse an uploaded import list. The temporary copy is removed once read."""
		suffix = Path(filename).suffix or '.txt'
		with tempfile.NamedTemporaryFile('wb', suffix=suffix, delete=False) as tmp:
			tmp.write(data)
		try:
			return self.load_import_titles(tmp.name)
		finally:
			os.unlink(tmp.name)

	def _load_jsonl_titles(self, filepath: Path) -> List[Dict[str, Any]]:
		items = []
		with open(filepath, 'r', encoding='utf-8') as f:
			for line_num, line in enumerate(f, 1):  # keep track of line number for diagnostics
				if not line.strip():
					continue  # blank line
				try:
					data = json.loads(line.strip())  # parse JSON object per line
				except json.JSONDecodeError as e:
					logger.warning(f"[DataLoader] Skipping invalid JSON at line {line_num}: {e}")
					continue
				item = self._import_item(data.get('title') if isinstance(data, dict) else None,
					data.get('year') if isinstance(data, dict) else None)
				if item:
					items.append(item)
				else:
					logger.warning(f"[DataLoader] Skipping line {line_num}: no title")
		return items

	def _load_csv_titles(self, filepath: Path) -> List[Dict[str, Any]]:
		items = []
		with open(filepath, 'r', encoding='utf-8', newline='') as f:
			for row in csv.DictReader(f):
				item = self._import_item(row.get('title'), row.get('year'))
				if item:
					items.append(item)
		return items

	def _load_text_titles(self, filepath: Path) -> List[Dict[str, Any]]:
		items = []
		with open(filepath, 'r', encoding='utf-8') as f:
			for line in f:
				item = self._import_item(line, None)
				if item:
					items.append(item)
		return items

	def _import_item(self, title: Any, year: Any) -> Optional[Dict[str, Any]]:
		title = str(title or '').strip()
		if not title:
			return None
		return {'title': title, 'year': self._to_int(year)}

	def _parse_comma_separated(self, value) -> List[str]:
		"""
		Normalize a value that may be None, a list, or a comma-separated string
		into a list of clean strings.
		"""
		if value is None:  # missing field
			return []  # treat as empty list
		if isinstance(value, list):  # already a list
			return [str(item).strip() for item in value if item and str(item).strip()]  # clean each
		if isinstance(value, str):  # comma-separated string
			return [item.strip() for item in value.split(',') if item.strip()]  # split/trim
		return []  # any other type becomes empty

	def _to_int(self, value) -> Optional[int]:
		if value is None or value == '':
			return None
		try:
			return int(float(value))
		except (TypeError, ValueError, OverflowError):
			return None

	def _to_float(self, value) -> float:
		if value is None or value == '':
			return 0.0
		try:
			return float(value)
		except (TypeError, ValueError):
			return 0.0
