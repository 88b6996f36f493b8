"""
Import a list of titles into the collection.

This script:
1) Reads titles from a .jsonl / .csv / plain text file
2) Searches the metadata provider for each title, one at a time
3) Adds confident matches to the collection (duplicates are skipped)
4) Prints a summary of added / skipped / failed titles

Usage:
    python -m scripts.bulk_import data/watched.txt [--delay 0.5]
"""

import argparse  # command-line options

from loguru import logger  # console logging

from moviary.app_context import build_context  # store/client wiring
from moviary.bulk_import import BulkImporter  # sequential import job
from moviary.data_loader import DataLoader  # import file parsing


def main(argv=None):
	parser = argparse.ArgumentParser(description="Bulk import titles into Moviary")
	parser.add_argument('path', help="titles file (.jsonl, .csv or one title per line)")
	parser.add_argument('--delay', type=float, default=None, help="seconds between titles")
	args = parser.parse_args(argv)

	# Headline banner for visibility in console
	logger.info("=" * 60)
	logger.info("Moviary Bulk Import")
	logger.info("=" * 60)

	ctx = build_context()
	if ctx.warning:
		logger.warning(ctx.warning)

	# 1) Load current collection so duplicates are caught without extra requests
	logger.info("[1/3] Loading collection...")
	ctx.library.reload()
	logger.info(f"[OK] {len(ctx.view.collection)} films in collection")

	# 2) Read titles
	logger.info("[2/3] Reading titles...")
	items = DataLoader().load_import_titles(args.path)

	# 3) Import
	logger.info("[3/3] Importing...")
	delay = ctx.settings.import_delay_seconds if args.delay is None else args.delay
	report = BulkImporter(ctx.library, delay_seconds=delay).run(items)

	for detail in report.details:
		if detail['status'] != 'added':
			logger.info(f"  {detail['status']:<8} {detail['title']} ({detail['note']})")
	logger.info(f"Added {report.added}, skipped {report.skipped}, failed {report.failed} of {report.total}")
	logger.info("=" * 60)
	return 0 if not report.failed else 1


if __name__ == '__main__':
	raise SystemExit(main())
