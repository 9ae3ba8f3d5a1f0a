import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import config
from .core import TakeoutDateFixer
from .metadata.exiftool import exiftool_version


def setup_logging(verbose: bool, log_file: Optional[Path] = None):
    """Sets up logging to the console and, if requested, a file."""
    log_level = logging.DEBUG if verbose else logging.INFO

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.insert(0, logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=handlers,
        force=True,
    )

    # Silence chatty libraries
    logging.getLogger("exifread").setLevel(logging.ERROR)


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        prog="gtakeout",
        description="Process Google Takeout metadata and update EXIF data",
    )

    p.add_argument("directory", type=Path, metavar="DIRECTORY",
                   help="Directory to search recursively for supplemental metadata files")

    p.add_argument("-j", "--workers", type=int, default=config.DEFAULT_WORKERS,
                   help=f"Number of parallel workers (default: CPU count, {config.DEFAULT_WORKERS})")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    p.add_argument("--log-file", type=Path, default=None, help="Also write the log to this file")
    p.add_argument("--report-csv", type=Path, default=None, help="Write a per-file outcome report CSV")
    p.add_argument("--no-progress", action="store_true", help="Disable the progress bar")

    return p.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose, args.log_file)

    directory = args.directory

    if not directory.exists():
        logging.error(f"Error: Directory '{directory}' does not exist")
        return 1
    if not directory.is_dir():
        logging.error(f"Error: '{directory}' is not a directory")
        return 1
    if args.workers < 1:
        logging.error(f"Error: --workers must be at least 1 (got {args.workers})")
        return 1

    version = exiftool_version()
    if version is None:
        logging.error("exiftool not found. Please install exiftool to update EXIF data.")
        return 1
    logging.debug(f"Using exiftool {version}")

    app = TakeoutDateFixer()

    try:
        app.run(
            directory,
            max_workers=args.workers,
            report_csv=args.report_csv,
            show_progress=not args.no_progress,
        )
    except OSError as e:
        logging.error(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        logging.warning("Operation cancelled by user.")
        return 1
    except Exception:
        logging.exception("Fatal error during processing.")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
