"""Build or refresh the cached Unicode property table."""

from __future__ import annotations

import argparse
from pathlib import Path
import sys

try:
    from stream_normalizer.config import TABLE_CACHE_PATH
    from stream_normalizer.properties import UnicodeDataTable
    from stream_normalizer.telemetry import configure_logging, timed_event
except ModuleNotFoundError:
    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root / "src"))
    from stream_normalizer.config import TABLE_CACHE_PATH  # type: ignore[reportMissingImports]
    from stream_normalizer.properties import UnicodeDataTable  # type: ignore[reportMissingImports]
    from stream_normalizer.telemetry import (  # type: ignore[reportMissingImports]
        configure_logging,
        timed_event,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build the Unicode property table cache")
    parser.add_argument(
        "--path",
        type=Path,
        default=TABLE_CACHE_PATH,
        help="Where to write the table (default from config)",
    )
    parser.add_argument(
        "--rebuild",
        action="store_true",
        help="Ignore an existing cache file and rebuild from the UCD",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logger = configure_logging()
    with timed_event(logger, "build_tables", path=str(args.path), rebuild=args.rebuild) as fields:
        if args.rebuild:
            table = UnicodeDataTable.build()
            table.save(args.path)
        else:
            table = UnicodeDataTable.load_or_build(args.path)
        sizes = table.sizes()
        fields.update(unicode_version=table.unicode_version, total_bytes=sum(sizes.values()))
    print(f"Unicode {table.unicode_version} table written to {args.path}")
    for name, size in sizes.items():
        print(f"  {name:<18} {size:>10} bytes")


if __name__ == "__main__":
    main()
