"""
Tests for FilmLibrary: every action returns an ActionResult and never raises.
"""

from fakes import FakeClient, FakeStore, details_payload, make_film
from moviary.filters import CollectionView
from moviary.library import (
	MSG_ADD_FAILED, MSG_DELETE_FAILED, MSG_DUPLICATE, MSG_SAVE_FAILED, MSG_SAVE_PARTIAL, MSG_SEARCH_FAILED,
	FilmLibrary,
)
from moviary.models import UpdateOutcome
from moviary.store import NullFilmStore


def make_library(store=None, client=None):
	library = FilmLibrary(store if store is not None else FakeStore(), client or FakeClient(), CollectionView())
	library.reload()
	return library


def test_reload_fills_view(fake_store):
	library = make_library(fake_store)
	assert len(library.view.collection) == 5


def test_reload_failure_keeps_previous_collection(fake_store):
	library = make_library(fake_store)
	fake_store.fail_on.add('list_all')
	result = library.reload()
	assert not result.ok
	assert len(library.view.collection) == 5


def test_duplicate_rejected_before_any_metadata_call(hit):
	store = FakeStore([make_film(550, 'Fight Club', id=1)])
	client = FakeClient()
	library = make_library(store, client)

	result = library.add_from_search(hit(550, 'Fight Club'))

	assert not result.ok and result.notice
	assert result.message == MSG_DUPLICATE
	assert client.calls == []
	assert 'insert' not in store.calls


def test_duplicate_found_only_in_store(hit):
	store = FakeStore()
	client = FakeClient()
	library = make_library(store, client)
	store.films.append(make_film(550, 'Fight Club', id=1))  # added elsewhere after our load

	result = library.add_from_search(hit(550, 'Fight Club'))
	assert result.notice and client.calls == []


def test_add_fetches_details_and_trailer_then_inserts(hit):
	store = FakeStore([make_film(1, 'Old', id=1)])
	client = FakeClient()
	client.details[550] = details_payload(550, 'Fight Club')
	client.trailers[550] = 'yt550'
	library = make_library(store, client)

	result = library.add_from_search(hit(550, 'Fight Club'))

	assert result.ok
	assert result.message == '"Fight Club" added to your collection'
	assert [c[0] for c in client.calls] == ['get_details', 'get_trailer_key']
	assert result.data.trailer_key == 'yt550'
	assert [f.title for f in library.view.collection] == ['Fight Club', 'Old']


def test_add_accepts_plain_external_id():
	client = FakeClient()
	client.details[13] = details_payload(13, 'Forrest Gump')
	library = make_library(FakeStore(), client)
	assert library.add_from_search(13).ok


def test_add_failure_is_reported(hit):
	client = FakeClient()
	client.fail.add('get_details')
	library = make_library(FakeStore(), client)

	result = library.add_from_search(hit(550, 'Fight Club'))
	assert not result.ok and not result.notice
	assert result.message == MSG_ADD_FAILED


def test_insert_failure_is_reported(hit):
	store = FakeStore()
	store.fail_on.add('insert')
	client = FakeClient()
	client.details[550] = details_payload(550, 'Fight Club')
	library = make_library(store, client)

	result = library.add_from_search(hit(550, 'Fight Club'))
	assert result.message == MSG_ADD_FAILED
	assert library.view.collection == []


def test_search_metadata():
	client = FakeClient()
	library = make_library(FakeStore(), client)
	assert library.search_metadata('heat').ok

	client.fail.add('search')
	result = library.search_metadata('heat')
	assert not result.ok and result.message == MSG_SEARCH_FAILED


def test_save_edit_full_success(fake_store):
	library = make_library(fake_store)
	result = library.save_edit(1, {'title': 'Batman Begins (2005)', 'storage_locations': 'nas, usb'})

	assert result.ok and result.outcome == UpdateOutcome.SAVED
	assert library.get(1).title == 'Batman Begins (2005)'
	assert library.get(1).storage_locations == ['nas', 'usb']


def test_save_edit_partial_success_when_column_missing(sample_films):
	store = FakeStore(sample_films, has_storage_column=False)
	library = make_library(store)

	result = library.save_edit(1, {'title': 'Renamed', 'storage_locations': 'nas'})

	assert result.ok
	assert result.outcome == UpdateOutcome.PARTIAL
	assert result.message == MSG_SAVE_PARTIAL
	assert result.data == ['storage_locations']
	assert library.get(1).title == 'Renamed'


def test_save_edit_failure(fake_store):
	fake_store.fail_on.add('update')
	library = make_library(fake_store)
	result = library.save_edit(1, {'title': 'x'})
	assert not result.ok
	assert result.outcome == UpdateOutcome.FAILED
	assert result.message == MSG_SAVE_FAILED


def test_delete_requires_confirmation(fake_store):
	library = make_library(fake_store)
	result = library.delete_film(2)
	assert not result.ok and result.notice
	assert 'delete' not in fake_store.calls
	assert library.get(2) is not None


def test_delete_confirmed(fake_store):
	library = make_library(fake_store)
	result = library.delete_film(2, confirmed=True)
	assert result.ok
	assert library.get(2) is None
	assert len(fake_store.films) == 4


def test_delete_failure(fake_store):
	fake_store.fail_on.add('delete')
	library = make_library(fake_store)
	result = library.delete_film(2, confirmed=True)
	assert result.message == MSG_DELETE_FAILED
	assert library.get(2) is not None


def test_null_store_keeps_library_usable(hit):
	client = FakeClient()
	client.details[550] = details_payload(550, 'Fight Club')
	library = make_library(NullFilmStore(), client)

	assert library.view.collection == []
	assert library.add_from_search(hit(550, 'Fight Club')).ok
	assert library.save_edit(1, {'title': 'x'}).outcome == UpdateOutcome.SAVED
	assert library.delete_film(1, confirmed=True).ok
