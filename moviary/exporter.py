"""
Collection export.
Writes films as JSON Lines (wire column names, re-readable by DataLoader) or CSV.
"""

import csv
import json
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterable, Iterator, List, Union

from loguru import logger

from .data_loader import COLUMN_NAMES, DataLoader
from .models import FilmRecord

# CSV column order follows the table layout
CSV_COLUMNS = list(COLUMN_NAMES.values())

Target = Union[str, Path, IO[str]]


def export_jsonl(records: Iterable[FilmRecord], target: Target) -> int:
	loader = DataLoader()
	rows = [loader.record_to_row(r, include_server_columns=True) for r in records]
	with _open(target) as handle:
		for row in rows:
			handle.write(json.dumps(row, ensure_ascii=False) + '\n')
	logger.info(f"[Export] Wrote {len(rows)} films as JSONL")
	return len(rows)


def export_csv(records: Iterable[FilmRecord], target: Target) -> int:
	loader = DataLoader()
	rows: List[dict] = []
	for record in records:
		row = loader.record_to_row(record, include_server_columns=True)
		# list columns flatten to "a, b, c"
		rows.append({k: ', '.join(v) if isinstance(v, list) else v for k, v in row.items()})

	with _open(target, newline='') as handle:
		writer = csv.DictWriter(handle, fieldnames=CSV_COLUMNS, extrasaction='ignore')
		writer.writeheader()
		writer.writerows(rows)
	logger.info(f"[Export] Wrote {len(rows)} films as CSV")
	return len(rows)


@contextmanager
def _open(target: Target, newline=None) -> Iterator[IO[str]]:
	"""Yield a writable text stream for either a path or an already-open stream."""
	if not isinstance(target, (str, Path)):
		yield target  # caller owns the stream
		return
	with open(target, 'w', encoding='utf-8', newline=newline) as handle:
		yield handle
