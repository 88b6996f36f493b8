"""
Tests for MetadataClient with requests.get patched out.
"""

from unittest.mock import Mock, patch

import pytest
import requests

from fakes import details_payload
from moviary.errors import MetadataError
from moviary.tmdb_client import MetadataClient


def response(status=200, payload=None):
	mock_response = Mock()
	mock_response.status_code = status
	mock_response.json.return_value = payload if payload is not None else {}
	return mock_response


@patch('moviary.tmdb_client.requests.get')
def test_blank_search_makes_no_request(mock_get):
	client = MetadataClient('token')
	assert client.search('   ') == []
	assert client.search('') == []
	mock_get.assert_not_called()


@patch('moviary.tmdb_client.requests.get')
def test_search_returns_at_most_ten_hits(mock_get):
	results = [{'id': i, 'title': f'Movie {i}', 'release_date': '2000-01-01', 'vote_average': 6} for i in range(15)]
	mock_get.return_value = response(payload={'results': results})

	hits = MetadataClient('token').search('movie')

	assert len(hits) == 10
	assert hits[0].external_id == 0 and hits[0].title == 'Movie 0'
	assert hits[0].poster_path == ''
	args, kwargs = mock_get.call_args
	assert args[0] == 'https://api.themoviedb.org/3/search/movie'
	assert kwargs['params'] == {'query': 'movie', 'language': 'en-US', 'page': 1}
	assert kwargs['headers']['Authorization'] == 'Bearer token'
	assert kwargs['timeout'] == 10


@patch('moviary.tmdb_client.requests.get')
def test_trailer_key_picks_youtube_trailer(mock_get):
	mock_get.return_value = response(payload={'results': [
		{'type': 'Teaser', 'site': 'YouTube', 'key': 'teaser'},
		{'type': 'Trailer', 'site': 'Vimeo', 'key': 'vimeo'},
		{'type': 'Trailer', 'site': 'YouTube', 'key': 'yt-key'},
	]})
	assert MetadataClient('token').get_trailer_key(550) == 'yt-key'


@patch('moviary.tmdb_client.requests.get')
def test_missing_trailer_is_empty_string(mock_get):
	mock_get.return_value = response(payload={'results': [{'type': 'Clip', 'site': 'YouTube', 'key': 'c'}]})
	assert MetadataClient('token').get_trailer_key(550) == ''


@patch('moviary.tmdb_client.requests.get')
def test_http_error_raises_metadata_error(mock_get):
	mock_get.return_value = response(status=401)
	with pytest.raises(MetadataError) as excinfo:
		MetadataClient('token').get_details(550)
	assert excinfo.value.status_code == 401


@patch('moviary.tmdb_client.requests.get')
def test_transport_error_raises_metadata_error(mock_get):
	mock_get.side_effect = requests.ConnectionError('down')
	with pytest.raises(MetadataError):
		MetadataClient('token').search('heat')


@patch('moviary.tmdb_client.requests.get')
def test_localized_and_image_requests(mock_get):
	mock_get.return_value = response(payload={'title': 'Serbuan Maut'})
	client = MetadataClient('token')

	assert client.get_localized_details(94329, 'id')['title'] == 'Serbuan Maut'
	args, kwargs = mock_get.call_args
	assert args[0].endswith('/movie/94329') and kwargs['params'] == {'language': 'id'}

	client.get_images(94329, 'id')
	args, kwargs = mock_get.call_args
	assert args[0].endswith('/movie/94329/images')
	assert kwargs['params'] == {'include_image_language': 'id,null'}


def test_build_image_url():
	assert MetadataClient.build_image_url('/abc.jpg') == 'https://image.tmdb.org/t/p/w500/abc.jpg'
	assert MetadataClient.build_image_url('/abc.jpg', 'w92') == 'https://image.tmdb.org/t/p/w92/abc.jpg'
	assert MetadataClient.build_image_url('') == ''
	assert MetadataClient.build_image_url(None, 'w92') == ''


def test_details_to_record():
	record = MetadataClient.details_to_record(details_payload(550, 'Fight Club', genres=('Drama', 'Thriller')), 'yt')
	assert record.external_id == 550
	assert record.genres == ['Drama', 'Thriller']
	assert record.origin_countries == ['US']
	assert record.runtime_minutes == 120
	assert record.trailer_key == 'yt'
	assert record.id is None and record.storage_locations is None


def test_default_token_when_no_key():
	assert MetadataClient().api_key
	assert MetadataClient('').api_key == MetadataClient().api_key
