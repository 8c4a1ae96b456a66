"""CLI for goal-length chunking.

Commands:
    goal-chunk chunk   Chunk .txt files into JSONL files of overlapping chunks
    goal-chunk clean   Print a text file after whitespace normalisation

Examples:
    # Chunk a directory of text files into ~512-token chunks
    goal-chunk chunk -i texts/ -o chunks/

    # Smaller chunks with 20% overlap, random sample of 10 files
    goal-chunk chunk --goal-tokens 256 --overlap-percent 20 --sample 10

    # Collapse all newlines to spaces and drop non-ASCII characters
    goal-chunk clean notes.txt --newlines space --ascii-only
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
import time
import traceback
from datetime import datetime
from pathlib import Path

from goal_chunker.config import load_config

# =============================================================================
# LOGGING SETUP
# =============================================================================

# Module-level logger
logger = logging.getLogger("goal_chunk")


def _setup_logging(log_dir: Path | None = None, verbose: bool = False) -> Path:
    """Configure logging with file and console handlers.

    Args:
        log_dir: Directory for log files (default: ./logs/)
        verbose: If True, set console to DEBUG level

    Returns:
        Path to the log file
    """
    if log_dir is None:
        log_dir = Path("logs")
    log_dir.mkdir(parents=True, exist_ok=True)

    # Create timestamped log file
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"goal_chunk_{timestamp}.log"

    logger.setLevel(logging.DEBUG)

    # File handler - captures everything with full detail
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(file_formatter)

    # Console handler - less verbose unless --verbose flag
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console_formatter = logging.Formatter("%(levelname)s: %(message)s")
    console_handler.setFormatter(console_formatter)

    # Clear existing handlers and add new ones
    logger.handlers.clear()
    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    # Chunker internals log under the package name; the console handler filters them
    package_logger = logging.getLogger("goal_chunker")
    package_logger.setLevel(logging.DEBUG)
    package_logger.handlers.clear()
    package_logger.addHandler(file_handler)
    package_logger.addHandler(console_handler)

    logger.info(f"Logging initialized - log file: {log_file}")
    return log_file


def _log_exception(msg: str, exc: Exception) -> None:
    """Log an exception with full traceback to file.

    Args:
        msg: Context message describing what failed
        exc: The exception that was raised
    """
    logger.error(f"{msg}: {type(exc).__name__}: {exc}")
    logger.debug(f"Traceback:\n{traceback.format_exc()}")


def _create_parser() -> argparse.ArgumentParser:
    """Create argument parser with subcommands."""
    settings = load_config()

    parser = argparse.ArgumentParser(
        prog="goal-chunk",
        description="Split text into overlapping chunks close to a goal token length",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show debug logging on the console",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Directory for log files (default: logs/)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # =========================================================================
    # CHUNK SUBCOMMAND
    # =========================================================================
    chunk_parser = subparsers.add_parser(
        "chunk",
        help="Chunk text files into JSONL",
        description=(
            "Chunk .txt files with the goal-length splitter and write one JSONL "
            "file per input with token counts for every chunk."
        ),
    )
    chunk_parser.add_argument(
        "-i",
        "--input",
        type=Path,
        default=Path("texts"),
        help="Input directory containing .txt files (default: texts/)",
    )
    chunk_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("chunks"),
        help="Output directory for .jsonl files (default: chunks/)",
    )
    chunk_parser.add_argument(
        "--sample",
        type=int,
        metavar="N",
        help="Process only N randomly selected files (for testing)",
    )
    chunk_parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable progress output",
    )
    chunk_parser.add_argument(
        "--goal-tokens",
        type=int,
        default=settings.chunk_goal_tokens,
        help=f"Goal token count per chunk (default: {settings.chunk_goal_tokens})",
    )
    chunk_parser.add_argument(
        "--overlap-percent",
        type=int,
        default=settings.chunk_overlap_percent,
        help=(
            "Overlap between chunks as a percentage of the goal, 10-100 "
            f"(default: {settings.chunk_overlap_percent})"
        ),
    )
    chunk_parser.add_argument(
        "--no-overlap",
        action="store_true",
        help="Chunk without overlap",
    )
    chunk_parser.add_argument(
        "--min-words",
        type=int,
        default=settings.chunk_min_words,
        help=f"Minimum word count per chunk; 0 keeps all (default: {settings.chunk_min_words})",
    )
    chunk_parser.add_argument(
        "--encoding",
        default=settings.tiktoken_encoding,
        help=f"tiktoken encoding for token counts (default: {settings.tiktoken_encoding})",
    )

    # =========================================================================
    # CLEAN SUBCOMMAND
    # =========================================================================
    clean_parser = subparsers.add_parser(
        "clean",
        help="Print a text file after whitespace normalisation",
    )
    clean_parser.add_argument(
        "file",
        type=Path,
        help="Text file to clean",
    )
    clean_parser.add_argument(
        "--newlines",
        choices=["space", "single", "double", "none"],
        default="double",
        help="How to reduce runs of newlines (default: double)",
    )
    clean_parser.add_argument(
        "--ascii-only",
        action="store_true",
        help="Remove characters outside basic ASCII letters, digits and punctuation",
    )

    return parser


def _run_chunk_process(args: argparse.Namespace) -> int:
    """Run chunking on every .txt file under the input directory.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, 1 for error, 130 for interrupt)
    """
    # Import here to speed up --help
    from goal_chunker.chunker import (
        ChunkConfig,
        NoValidChunkingError,
        build_splitter,
        chunk_document,
        write_chunks_jsonl,
    )

    input_dir: Path = args.input
    output_dir: Path = args.output
    sample_count: int | None = args.sample
    show_progress: bool = not args.no_progress

    if not input_dir.exists():
        print(f"Error: Input directory does not exist: {input_dir}")
        return 1

    try:
        config = ChunkConfig(
            goal_tokens=args.goal_tokens,
            overlap_percent=args.overlap_percent,
            overlap=not args.no_overlap,
            min_words=args.min_words,
            encoding_name=args.encoding,
        )
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    splitter = build_splitter(config)

    print("Chunk Processing (tiktoken)")
    print("=" * 40)
    print(f"Input:     {input_dir}")
    print(f"Output:    {output_dir}")
    print(f"Goal:      {config.goal_tokens} tokens")
    print(f"Max:       {splitter.thresholds().max_length} tokens")
    if splitter.overlap_percent is None:
        print("Overlap:   disabled")
    else:
        print(f"Overlap:   {splitter.overlap_percent}%")
    print(f"Min words: {config.min_words}")

    input_files = sorted(input_dir.rglob("*.txt"))
    if not input_files:
        print("\nNo .txt files found in input directory")
        return 1

    # Filter out files that already have corresponding output (resume support)
    files_to_process: list[Path] = []
    skipped_count = 0
    for input_file in input_files:
        relative_path = input_file.relative_to(input_dir)
        output_file = output_dir / relative_path.with_suffix(".jsonl")
        if output_file.exists():
            skipped_count += 1
        else:
            files_to_process.append(input_file)

    if sample_count is not None:
        if sample_count < len(files_to_process):
            files_to_process = random.sample(files_to_process, sample_count)
        print(f"Sample:    {len(files_to_process)} files (randomly selected)")

    total_files = len(files_to_process)
    if skipped_count > 0:
        print(f"Skipped:   {skipped_count} files (already processed)")
    print(f"Files:     {total_files}")
    print()

    if total_files == 0:
        print("No files to process (all already chunked)")
        return 0

    output_dir.mkdir(parents=True, exist_ok=True)

    processed_count = 0
    failed_count = 0
    total_chunks = 0
    total_micro_filtered = 0
    total_duplicates_removed = 0
    start_time = time.perf_counter()

    try:
        for i, input_file in enumerate(files_to_process):
            relative_path = input_file.relative_to(input_dir)
            output_file = output_dir / relative_path.with_suffix(".jsonl")

            if show_progress:
                print(f"[{i + 1}/{total_files}] {relative_path}")

            try:
                document = chunk_document(input_file, config, splitter)
            except NoValidChunkingError as e:
                failed_count += 1
                _log_exception(f"Failed to chunk {relative_path}", e)
                print(f"  Error: {e}")
                continue

            stats = write_chunks_jsonl(document, output_file, config)
            logger.debug(
                f"{relative_path}: {stats.chunks_written} chunks "
                f"(separator={document.separator}, goal={document.goal_tokens})"
            )

            processed_count += 1
            total_chunks += stats.chunks_written
            total_micro_filtered += stats.micro_chunks_filtered
            total_duplicates_removed += stats.consecutive_duplicates_removed

        elapsed = time.perf_counter() - start_time
        print()
        print(f"Complete:  {processed_count} files processed in {elapsed:.1f}s")
        print(f"Chunks:    {total_chunks:,} total")
        if total_micro_filtered > 0:
            print(f"Filtered:  {total_micro_filtered:,} micro-chunks (<{config.min_words} words)")
        if total_duplicates_removed > 0:
            print(f"Deduped:   {total_duplicates_removed:,} consecutive duplicates")
        if failed_count > 0:
            print(f"Failed:    {failed_count} files could not be chunked")

        return 0

    except KeyboardInterrupt:
        print(f"\n\nInterrupted after processing {processed_count} files")
        return 130  # Standard exit code for SIGINT


def _run_clean_process(args: argparse.Namespace) -> int:
    """Print a cleaned text file.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, 1 for error)
    """
    from goal_chunker.chunker import Newlines, TextCleaner

    input_file: Path = args.file
    if not input_file.is_file():
        print(f"Error: File does not exist: {input_file}")
        return 1

    cleaner = TextCleaner(
        newlines=Newlines(args.newlines),
        remove_non_basic_ascii=args.ascii_only,
    )
    print(cleaner.run(input_file.read_text(encoding="utf-8")))
    return 0


def main() -> None:
    """Run the goal-chunk CLI."""
    parser = _create_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    _setup_logging(args.log_dir, args.verbose)

    if args.command == "chunk":
        exit_code = _run_chunk_process(args)
        sys.exit(exit_code)
    elif args.command == "clean":
        exit_code = _run_clean_process(args)
        sys.exit(exit_code)
    else:
        # Unknown subcommand (shouldn't happen with argparse)
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
