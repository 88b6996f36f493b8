"""
Exception types raised by the gateways and caught at the action boundary.
"""

from enum import Enum
from typing import Optional


class MoviaryError(Exception):
	"""Base class for every error the application knows how to report."""


class MetadataError(MoviaryError):
	"""The metadata provider could not be reached or answered with an error."""

	def __init__(self, message: str, status_code: Optional[int] = None):
		super().__init__(message)
		self.status_code = status_code


class StoreErrorKind(str, Enum):
	MISSING_COLUMN = 'missing_column'  # payload names a column the table does not have
	NOT_FOUND = 'not_found'  # the addressed row or table does not exist
	OTHER = 'other'


class StoreError(MoviaryError):
	"""A request against the hosted films table failed."""

	def __init__(
		self,
		message: str,
		kind: StoreErrorKind = StoreErrorKind.OTHER,
		code: Optional[str] = None,
		column: Optional[str] = None,
		status_code: Optional[int] = None,
	):
		super().__init__(message)
		self.kind = kind
		self.code = code
		self.column = column
		self.status_code = status_code


class DuplicateFilmError(MoviaryError):
	"""The external id is already present in the collection."""

	def __init__(self, external_id: int):
		super().__init__(f"Film with external id {external_id} is already in the collection")
		self.external_id = external_id
