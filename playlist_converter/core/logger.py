"""
Logging configuration for playlist-converter.

This module sets up the logging system with multiple outputs:
    - Console: Colored, tqdm-compatible messages (INFO and above)
    - log_full_{timestamp}.log: Every event (DEBUG and above)
    - log_errors_{timestamp}.log: Only ERROR and CRITICAL messages
    - unmatched_tracks_{timestamp}.log: Source tracks with no match on the
      destination platform, one block per track

Everything printed to the screen is also saved to file, then filtered into
specialized files.

Usage:
    from playlist_converter.core.logger import setup_logging, get_logger

    setup_logging(output_dir)  # Call once at startup
    logger = get_logger(__name__)  # Get logger for each module

    logger.info("Matching 42 tracks")
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TextIO

from tqdm import tqdm


# Log format for file output (detailed with timestamp)
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Extra field that marks a record for the unmatched tracks report
UNMATCHED_TRACK_FIELD = "unmatched_track_title"


class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"
    BOLD = "\033[1m"


class ColoredConsoleFormatter(logging.Formatter):
    """
    Formatter that prefixes console messages with a colored level name.

    Colors:
        - DEBUG: Blue
        - INFO: Green
        - WARNING: Yellow
        - ERROR: Red
        - CRITICAL: Bold Red
    """

    LEVEL_COLORS = {
        logging.DEBUG: Colors.BLUE,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, Colors.WHITE)
        return f"{color}{record.levelname}{Colors.RESET}: {record.getMessage()}"


class TqdmLoggingHandler(logging.Handler):
    """
    Console handler that writes through tqdm.write().

    Plain stderr writes would tear through an active progress bar; tqdm.write()
    prints the message above it instead.
    """

    def __init__(self, stream: TextIO = sys.stderr) -> None:
        super().__init__()
        self.stream = stream

    def emit(self, record: logging.LogRecord) -> None:
        try:
            tqdm.write(self.format(record), file=self.stream)
        except Exception:
            self.handleError(record)


class UnmatchedTrackHandler(logging.Handler):
    """
    Handler that collects unmatched source tracks into a report file.

    Only records carrying the `unmatched_track_title` extra field are
    written, in this format:

        Ed Sheeran - Shape of You
        https://www.youtube.com/watch?v=JGwWNGJdvx8
        queries tried: 6

    Use log_unmatched_track() to emit such records.

    Attributes:
        report_path: Path to the unmatched tracks report.
        report_file: Open file handle, or None before open().
    """

    def __init__(self, report_path: Path) -> None:
        super().__init__()
        self.report_path = report_path
        self.report_file: TextIO | None = None

    def open(self) -> None:
        """Open (and truncate) the report file."""
        self.report_file = open(self.report_path, "w", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        if not hasattr(record, UNMATCHED_TRACK_FIELD) or self.report_file is None:
            return

        try:
            title = getattr(record, UNMATCHED_TRACK_FIELD)
            artist = getattr(record, "unmatched_track_artist", None)
            url = getattr(record, "unmatched_track_url", None) or ""
            queries = getattr(record, "unmatched_track_queries", None)

            label = f"{artist} - {title}" if artist else title
            self.report_file.write(f"{label}\n")
            if url:
                self.report_file.write(f"{url}\n")
            if queries is not None:
                self.report_file.write(f"queries tried: {queries}\n")
            self.report_file.write("\n")
            self.report_file.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        if self.report_file is not None:
            self.report_file.close()
            self.report_file = None
        super().close()


class ErrorOnlyFilter(logging.Filter):
    """Let through only ERROR and CRITICAL records."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.ERROR


def setup_logging(output_dir: Path, console_level: int = logging.INFO) -> Path:
    """
    Configure the logging system for the application.

    Call this ONCE at startup, after the configuration is loaded and
    before any conversion starts.

    Args:
        output_dir: Directory where log files will be created.
                    Logs are stored in a 'logs' subdirectory.
        console_level: Minimum level printed to the console.

    Returns:
        Path of the logs directory for this run.

    Behavior:
        1. Create output_dir/logs if it doesn't exist
        2. Reset the root logger to DEBUG with no handlers
        3. Console: TqdmLoggingHandler + ColoredConsoleFormatter
        4. log_full_{timestamp}.log: DEBUG, full format
        5. log_errors_{timestamp}.log: filtered by ErrorOnlyFilter
        6. unmatched_tracks_{timestamp}.log: UnmatchedTrackHandler

    Thread Safety:
        Not thread-safe. Call from the main thread before matching starts.
    """
    logs_dir = output_dir / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = TqdmLoggingHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(ColoredConsoleFormatter())
    root_logger.addHandler(console_handler)

    file_formatter = logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT)

    full_handler = logging.FileHandler(logs_dir / f"log_full_{timestamp}.log", mode="w", encoding="utf-8")
    full_handler.setLevel(logging.DEBUG)
    full_handler.setFormatter(file_formatter)
    root_logger.addHandler(full_handler)

    error_handler = logging.FileHandler(logs_dir / f"log_errors_{timestamp}.log", mode="w", encoding="utf-8")
    error_handler.setLevel(logging.DEBUG)  # ErrorOnlyFilter does the filtering
    error_handler.setFormatter(file_formatter)
    error_handler.addFilter(ErrorOnlyFilter())
    root_logger.addHandler(error_handler)

    unmatched_handler = UnmatchedTrackHandler(logs_dir / f"unmatched_tracks_{timestamp}.log")
    unmatched_handler.open()
    root_logger.addHandler(unmatched_handler)

    # HTTP client chatter is noise at DEBUG
    for noisy in ("urllib3", "spotipy", "requests"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return logs_dir


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Typically __name__ of the calling module, giving a hierarchy
              like 'playlist_converter.matching.matcher'.

    Note:
        Loggers obtained before setup_logging() have no handlers of their
        own and propagate to whatever the root logger has (nothing, or
        pytest's capture handler in tests).
    """
    return logging.getLogger(name)


def format_matched_message(source: str, destination: str, url: str, score: float) -> str:
    """
    Format a 'Matched' message with colors.

    Args:
        source: Display name of the source track.
        destination: Display name of the chosen candidate.
        url: Destination URL.
        score: Ranker score in [0, 1].
    """
    return (
        f"{Colors.GREEN}Matched{Colors.RESET}: "
        f"{source} -> {destination} "
        f"{Colors.CYAN}{url}{Colors.RESET} "
        f"({score:.2f})"
    )


def format_no_match_message(source: str, reason: str) -> str:
    """Format a 'No match' message with colors."""
    return (
        f"{Colors.RED}No match{Colors.RESET}: "
        f"{source} "
        f"({reason})"
    )


def format_summary_message(found: int, total: int, cached: int = 0) -> str:
    """
    Format the end-of-run summary.

    Example:
        format_summary_message(40, 42, cached=3)
        # "Matched 40/42 tracks (2 unmatched, 3 from cache)" with colors
    """
    unmatched = total - found
    color = Colors.GREEN if unmatched == 0 else Colors.YELLOW
    message = (
        f"Matched {color}{found}/{total}{Colors.RESET} tracks "
        f"({Colors.RED}{unmatched}{Colors.RESET} unmatched"
    )
    if cached:
        message += f", {cached} from cache"
    return message + ")"


def log_unmatched_track(
    logger: logging.Logger,
    title: str,
    artist: str | None = None,
    url: str | None = None,
    queries_tried: int | None = None
) -> None:
    """
    Log an unmatched track so that it lands in the unmatched tracks report.

    Logged at DEBUG so the console is not flooded; the progress bar already
    shows a "No match" line for each one.

    Args:
        logger: Logger to emit through.
        title: Source track title.
        artist: Source artist, if known.
        url: Link to the track on the source platform.
        queries_tried: Number of queries that were searched.
    """
    logger.debug(
        f"Unmatched: {artist + ' - ' if artist else ''}{title}",
        extra={
            UNMATCHED_TRACK_FIELD: title,
            "unmatched_track_artist": artist,
            "unmatched_track_url": url,
            "unmatched_track_queries": queries_tried,
        }
    )


def shutdown_logging() -> None:
    """
    Flush, close and remove every handler on the root logger.

    Call at application exit (typically in a finally block).
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        handler.flush()
        handler.close()
        root_logger.removeHandler(handler)
