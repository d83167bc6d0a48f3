"""Command-line interface for license field extraction.

Provides subcommands for extracting a single license to JSON and for
processing a folder of license images into a CSV file.
"""

import argparse
import csv
import json
import sys
import time
from dataclasses import asdict
from pathlib import Path

from src.errors import LicenseOCRError
from src.ocr.document_processor import LicenseProcessor
from src.utils.config import load_config
from src.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

_SUPPORTED_EXTENSIONS = ("*.png", "*.jpg", "*.jpeg", "*.tiff", "*.tif", "*.bmp")
_META_COLUMNS = [
    "filename",
    "status",
    "state",
    "processing_time_s",
    "skipped_fields",
    "error",
]


def _find_images(input_dir: Path) -> list[Path]:
    """Find all supported image files in a directory.

    Args:
        input_dir: Directory to scan.

    Returns:
        Sorted list of image paths.
    """
    files: list[Path] = []
    for ext in _SUPPORTED_EXTENSIONS:
        files.extend(input_dir.glob(ext))
        files.extend(input_dir.glob(ext.upper()))
    return sorted(set(files))


def process_folder(
    input_dir: Path,
    output_csv: Path,
    state: str,
    config_path: Path | None = None,
    verbose: bool = False,
) -> dict[str, int]:
    """Extract every license image in a folder and export results to CSV.

    Args:
        input_dir: Directory containing license images.
        output_csv: Path for the output CSV file.
        state: Issuing state shared by all images in the folder.
        config_path: Optional configuration file.
        verbose: Whether to print per-file progress.

    Returns:
        Summary dict with total, successful, and failed counts.
    """
    processor = LicenseProcessor(load_config(config_path))

    files = _find_images(input_dir)
    if not files:
        logger.warning("No images found in %s", input_dir)
        return {"total": 0, "successful": 0, "failed": 0}

    logger.info("Found %d images to process", len(files))

    results: list[dict[str, object]] = []
    successful = 0
    failed = 0

    for i, file_path in enumerate(files, 1):
        if verbose:
            print(f"Processing [{i}/{len(files)}]: {file_path.name}")

        start_time = time.time()
        try:
            data = processor.process(file_path, state)
        except LicenseOCRError as exc:
            logger.error("Failed to process %s: %s", file_path.name, exc)
            results.append(
                {"filename": file_path.name, "status": "failed", "error": str(exc)}
            )
            failed += 1
            continue

        row: dict[str, object] = {
            "filename": file_path.name,
            "status": "success",
            "state": data.state,
            "processing_time_s": round(time.time() - start_time, 2),
            "skipped_fields": ";".join(w.field_name for w in data.warnings),
            "error": None,
        }
        row.update(data.fields)
        results.append(row)
        successful += 1

    _write_csv(results, output_csv)
    logger.info("Results written to %s", output_csv)

    summary = {"total": len(files), "successful": successful, "failed": failed}
    _print_summary(summary, output_csv)
    return summary


def _write_csv(results: list[dict[str, object]], output_path: Path) -> None:
    """Write extraction rows to CSV, meta columns first.

    Args:
        results: List of result dictionaries.
        output_path: Path for the output CSV file.
    """
    if not results:
        return

    field_columns: list[str] = []
    for r in results:
        for key in r:
            if key not in _META_COLUMNS and key not in field_columns:
                field_columns.append(key)

    present = {key for r in results for key in r}
    columns = [c for c in _META_COLUMNS if c in present] + field_columns

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=columns, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(results)


def _print_summary(summary: dict[str, int], output_csv: Path) -> None:
    print(f"\n{'=' * 50}")
    print("Batch Extraction Complete")
    print(f"{'=' * 50}")
    print(f"Total:      {summary['total']}")
    print(f"Successful: {summary['successful']}")
    print(f"Failed:     {summary['failed']}")
    print(f"Output:     {output_csv}")


def extract_single(
    file_path: Path,
    state: str,
    config_path: Path | None = None,
) -> dict[str, object]:
    """Extract one license image and return JSON-ready results.

    Args:
        file_path: Path to the license image.
        state: Issuing state name.
        config_path: Optional configuration file.

    Returns:
        Dictionary with filename, state, fields and warnings.
    """
    processor = LicenseProcessor(load_config(config_path))
    data = processor.process(file_path, state)
    return {
        "filename": file_path.name,
        "state": data.state,
        "fields": data.fields,
        "warnings": [asdict(w) for w in data.warnings],
    }


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(description="License field extractor")
    parser.add_argument("-c", "--config", type=Path, help="Configuration YAML file")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    single_parser = subparsers.add_parser("extract", help="Extract a single license")
    single_parser.add_argument("file", type=Path, help="License image to process")
    single_parser.add_argument("-s", "--state", required=True, help="Issuing state")
    single_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    batch_parser = subparsers.add_parser("batch", help="Process a folder of licenses")
    batch_parser.add_argument("input_dir", type=Path, help="Directory of images")
    batch_parser.add_argument("-s", "--state", required=True, help="Issuing state")
    batch_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("results.csv"),
        help="Output CSV file (default: results.csv)",
    )
    batch_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose output"
    )

    args = parser.parse_args(argv)

    setup_logging(load_config(args.config).log_level)

    if args.command == "extract":
        if not args.file.exists():
            print(f"Error: {args.file} does not exist", file=sys.stderr)
            sys.exit(1)
        try:
            result = extract_single(args.file, args.state, args.config)
        except LicenseOCRError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            sys.exit(1)
        output_str = json.dumps(result, indent=2)
        if args.output:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            args.output.write_text(output_str)
            print(f"Output written to {args.output}")
        else:
            print(output_str)
    elif args.command == "batch":
        if not args.input_dir.is_dir():
            print(f"Error: {args.input_dir} is not a directory", file=sys.stderr)
            sys.exit(1)
        process_folder(
            args.input_dir, args.output, args.state, args.config, args.verbose
        )
    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
