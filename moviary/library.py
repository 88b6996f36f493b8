"""
Film library: the boundary where user actions meet the gateways.
Every action returns an ActionResult with a message fit for the user; no
exception escapes to the presentation layer.
"""

# Typing for clarity
from typing import Any, Dict, Optional, Union  # type annotations

# HTTP errors that may leak out of the gateways untranslated
import requests  # RequestException

# Import project modules
from .data_loader import DataLoader  # edit form parsing
from .errors import DuplicateFilmError, MoviaryError  # failures we report
from .filters import CollectionView  # in-memory collection + filtered view
from .models import ActionResult, FilmRecord, SearchHit, UpdateOutcome  # data classes
from .tmdb_client import MetadataClient  # metadata provider

# Import loguru for console logging
from loguru import logger  # simple structured logger


# User-facing messages
MSG_DUPLICATE = 'This film is already in your collection!'
MSG_ADD_FAILED = 'Failed to add film. Please try again.'
MSG_SEARCH_FAILED = 'Search failed. Please try again.'
MSG_LOAD_FAILED = 'Failed to load your film collection. Please try again.'
MSG_SAVE_FAILED = 'Failed to save changes.'
MSG_SAVE_PARTIAL = (
	'Saved changes but storage locations were not saved: '
	'the backend has no storage_locations column.'
)
MSG_DELETE_FAILED = 'Failed to delete film.'
MSG_DELETE_UNCONFIRMED = 'Delete this film? This action cannot be undone.'
MSG_NOT_FOUND = 'Film not found.'

# Failures we expect from the gateways; anything else is a bug and propagates
ACTION_ERRORS = (MoviaryError, requests.RequestException)


class FilmLibrary:
	"""
	Ties the store, the metadata client and the collection view together.
	The view is the single in-memory copy of the collection.
	"""

	def __init__(self, store, client: MetadataClient, view: Optional[CollectionView] = None):
		self.store = store  # FilmStore or NullFilmStore
		self.client = client  # metadata provider
		self.view = view or CollectionView()  # filtered view + subscribers
		self.loader = DataLoader()  # form parsing

	def reload(self) -> ActionResult:
		"""Load the whole collection (newest first) into the view."""
		try:
			films = self.store.list_all()
		except ACTION_ERRORS as e:
			logger.error(f"[Library] Error loading films: {e}")
			return ActionResult(ok=False, message=MSG_LOAD_FAILED)
		self.view.set_collection(films)
		return ActionResult(ok=True, data=films)

	def search_metadata(self, query: str) -> ActionResult:
		try:
			hits = self.client.search(query)
		except ACTION_ERRORS as e:
			logger.error(f"[Library] Search error: {e}")
			return ActionResult(ok=False, message=MSG_SEARCH_FAILED)
		return ActionResult(ok=True, data=hits)

	def add_from_search(self, hit: Union[SearchHit, int]) -> ActionResult:
		"""
		Add a metadata search result to the collection. The duplicate check runs
		before any detail or trailer request.
		"""
		external_id = hit.external_id if isinstance(hit, SearchHit) else int(hit)
		try:
			self._ensure_not_present(external_id)

			details = self.client.get_details(external_id)
			trailer_key = self.client.get_trailer_key(external_id)
			record = self.client.details_to_record(details, trailer_key)

			stored = self.store.insert(record)
		except DuplicateFilmError:
			logger.info(f"[Library] {external_id} already in the collection, not adding")
			return ActionResult(ok=False, message=MSG_DUPLICATE, notice=True)
		except ACTION_ERRORS as e:
			logger.error(f"[Library] Error adding film {external_id}: {e}")
			return ActionResult(ok=False, message=MSG_ADD_FAILED)

		# newest first, like a fresh load would order it
		self.view.set_collection([stored] + self.view.collection)
		logger.info(f"[Library] Added '{stored.title}'")
		return ActionResult(ok=True, message=f'"{stored.title}" added to your collection', data=stored)

	def save_edit(self, record_id: int, form: Dict[str, Any]) -> ActionResult:
		"""Persist an edit form. The outcome distinguishes full saves from partial ones."""
		payload = self.loader.parse_edit_form(form)
		try:
			receipt = self.store.update(record_id, payload)
		except ACTION_ERRORS as e:
			logger.error(f"[Library] Save failed for {record_id}: {e}")
			return ActionResult(ok=False, message=MSG_SAVE_FAILED, outcome=UpdateOutcome.FAILED)

		reloaded = self.reload()
		if not reloaded.ok:
			logger.warning(f"[Library] Saved {record_id} but could not refresh the collection")

		if receipt.outcome == UpdateOutcome.PARTIAL:
			return ActionResult(ok=True, message=MSG_SAVE_PARTIAL, outcome=UpdateOutcome.PARTIAL, data=receipt.dropped_fields)
		return ActionResult(ok=True, message='Changes saved.', outcome=UpdateOutcome.SAVED)

	def delete_film(self, record_id: Optional[int], confirmed: bool = False) -> ActionResult:
		"""Delete one film; without explicit confirmation nothing is sent to the store."""
		if not record_id:
			return ActionResult(ok=False, message=MSG_NOT_FOUND)
		if not confirmed:
			return ActionResult(ok=False, message=MSG_DELETE_UNCONFIRMED, notice=True)

		try:
			self.store.delete(record_id)
		except ACTION_ERRORS as e:
			logger.error(f"[Library] Delete failed for {record_id}: {e}")
			return ActionResult(ok=False, message=MSG_DELETE_FAILED)

		self.view.set_collection([f for f in self.view.collection if f.id != record_id])
		return ActionResult(ok=True, message='Film deleted.')

	def get(self, record_id: int) -> Optional[FilmRecord]:
		return self.view.find(record_id)

	def _ensure_not_present(self, external_id: int) -> None:
		if self.view.has_external_id(external_id) or self.store.exists_by_external_id(external_id):
			raise DuplicateFilmError(external_id)
