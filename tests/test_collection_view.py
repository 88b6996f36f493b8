"""
Tests for CollectionView and the tick scheduler: state is recomputed eagerly,
subscribers hear about it only on the next tick.
"""

from fakes import make_film
from moviary.filters import CollectionView
from moviary.models import ALL
from moviary.scheduler import TickScheduler


def make_view(films):
	scheduler = TickScheduler()
	view = CollectionView(scheduler)
	view.set_collection(films)
	scheduler.run_pending()
	return view, scheduler


def test_set_criteria_recomputes_visible_immediately(sample_films):
	view, _ = make_view(sample_films)
	view.set_criteria(genre='Crime')
	assert [f.title for f in view.visible] == ['Batman Begins']


def test_facets_come_from_full_collection_not_filtered_view(sample_films):
	view, _ = make_view(sample_films)
	view.set_criteria(country='ID')
	assert len(view.visible) == 1
	assert view.facets.countries == [ALL, 'GB', 'ID', 'US']


def test_subscriber_registration_is_deferred(sample_films):
	view, scheduler = make_view(sample_films)
	received = []
	view.subscribe(received.append)
	assert received == []  # nothing happens inside the call

	scheduler.run_pending()
	assert len(received) == 1 and len(received[0]) == len(sample_films)


def test_notifications_arrive_on_next_tick(sample_films):
	view, scheduler = make_view(sample_films)
	received = []
	view.subscribe(received.append)
	scheduler.run_pending()

	view.search('batman')
	assert len(received) == 1  # not yet

	scheduler.run_pending()
	assert [f.title for f in received[-1]] == ['Batman Begins', 'Spin-off']


def test_unsubscribe_is_deferred(sample_films):
	view, scheduler = make_view(sample_films)
	received = []
	token = view.subscribe(received.append)
	scheduler.run_pending()

	view.unsubscribe(token)
	view.set_criteria(genre='Drama')
	scheduler.run_pending()  # unsubscribe runs before the notify queued after it
	assert len(received) == 1


def test_callbacks_scheduled_while_draining_wait_for_next_tick():
	scheduler = TickScheduler()
	calls = []

	def first():
		calls.append('first')
		scheduler.call_soon(calls.append, 'second')

	scheduler.call_soon(first)
	assert scheduler.run_pending() == 1
	assert calls == ['first']
	assert scheduler.pending() == 1
	scheduler.run_pending()
	assert calls == ['first', 'second']


def test_failing_callback_does_not_block_others():
	scheduler = TickScheduler()
	calls = []

	def boom():
		raise RuntimeError('boom')

	scheduler.call_soon(boom)
	scheduler.call_soon(calls.append, 'ok')
	scheduler.run_pending()
	assert calls == ['ok']


def test_clear_resets_criteria(sample_films):
	view, _ = make_view(sample_films)
	view.set_criteria(genre='Action', year='2005', country='US', search_term='bat')
	criteria = view.clear()
	assert (criteria.genre, criteria.year, criteria.country, criteria.search_term) == (ALL, ALL, ALL, '')
	assert view.visible == view.collection


def test_lookup_helpers(sample_films):
	view, _ = make_view(sample_films)
	assert view.find(3).title == 'Spin-off'
	assert view.find(999) is None
	assert view.has_external_id(4)
	assert not view.has_external_id(550)


def test_collection_copy_is_not_mutated_by_callers():
	view, _ = make_view([make_film(1, 'A', id=1)])
	snapshot = view.collection
	snapshot.append(make_film(2, 'B', id=2))
	assert len(view.collection) == 1
