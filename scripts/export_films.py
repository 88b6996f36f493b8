"""
Export the whole collection to disk.

Usage:
    python -m scripts.export_films exports/films.jsonl
    python -m scripts.export_films exports/films.csv
"""

import argparse  # command-line options
from pathlib import Path  # filesystem-safe paths

from loguru import logger  # console logging

from moviary.app_context import build_context  # store wiring
from moviary.exporter import export_csv, export_jsonl  # export formats


def main(argv=None):
	parser = argparse.ArgumentParser(description="Export the Moviary collection")
	parser.add_argument('path', help="output file; .csv writes CSV, anything else JSON Lines")
	args = parser.parse_args(argv)

	ctx = build_context()
	result = ctx.library.reload()
	if not result.ok:
		logger.error(result.message)
		return 1

	out = Path(args.path)
	out.parent.mkdir(parents=True, exist_ok=True)  # ensure exists
	writer = export_csv if out.suffix.lower() == '.csv' else export_jsonl
	count = writer(ctx.view.collection, out)
	logger.info(f"[OK] Exported {count} films to {out}")
	return 0


if __name__ == '__main__':
	raise SystemExit(main())
