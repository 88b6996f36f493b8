"""
Shared fixtures for the test suite.
"""

import pytest

from fakes import FakeClient, FakeStore, make_film
from moviary.models import SearchHit


@pytest.fixture
def sample_films():
	return [
		make_film(1, 'Batman Begins', ['Action', 'Crime'], '2005-06-15', ['US', 'GB'], id=1),
		make_film(2, 'Superman', ['Action'], '1978-12-10', ['US'], id=2),
		make_film(3, 'Spin-off', ['Fantasy Batman Spinoff'], '2019-01-01', ['GB'], id=3),
		make_film(4, 'The Raid', ['Action', 'Thriller'], '2011-09-08', ['ID'], id=4),
		make_film(5, 'Undated', ['Drama'], '', [], id=5),
	]


@pytest.fixture
def fake_store(sample_films):
	return FakeStore(sample_films)


@pytest.fixture
def fake_client():
	return FakeClient()


@pytest.fixture
def hit():
	def _hit(external_id, title, release_date='2010-01-01'):
		return SearchHit(external_id=external_id, title=title, release_date=release_date)
	return _hit
