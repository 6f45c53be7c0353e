"""
Utility functions for docjoin.

Includes logging setup, JSON-safe rendering of documents, and fixture
loading for the CLI demo mode.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import yaml
from bson import ObjectId
from rich.console import Console
from rich.logging import RichHandler

from docjoin.errors import ConfigurationError

# Global console for pretty output
console = Console(stderr=True)


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "pretty",
    log_file: Optional[Path] = None,
    console_output: bool = True,
) -> logging.Logger:
    """
    Set up logging for the docjoin logger tree.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: "structured" (JSON lines) or "pretty" (rich console)
        log_file: Optional path to a log file
        console_output: Also log to the console (stderr)

    Returns:
        Configured logger
    """
    logger = logging.getLogger("docjoin")
    logger.setLevel(getattr(logging, log_level.upper()))
    logger.handlers = []  # Clear existing handlers

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        if log_format == "structured":
            file_handler.setFormatter(StructuredFormatter())
        else:
            file_handler.setFormatter(
                logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
            )
        logger.addHandler(file_handler)

    if console_output:
        if log_format == "pretty":
            console_handler = RichHandler(console=console, rich_tracebacks=True, show_time=False)
        else:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(StructuredFormatter())
        logger.addHandler(console_handler)

    return logger


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add extra fields if present
        if hasattr(record, "collection"):
            log_data["collection"] = record.collection
        if hasattr(record, "metadata"):
            log_data["metadata"] = record.metadata

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def json_safe(value: Any) -> Any:
    """Render ObjectId, datetime and bytes so documents can be JSON-encoded."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [json_safe(v) for v in value]
    if isinstance(value, (bytes, bytearray)):
        return value.hex()
    return value


def dumps_document(document: Any) -> str:
    """Serialize a document as one JSON line."""
    return json.dumps(json_safe(document), sort_keys=True)


def load_fixture(path: Path) -> dict[str, list[dict[str, Any]]]:
    """
    Load a YAML/JSON fixture mapping collection names to document lists.

    Raises:
        ConfigurationError: If the file is not a mapping of lists
    """
    with open(path, "r") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid fixture file {path}: {e}")

    if not isinstance(data, dict) or not all(isinstance(v, list) for v in data.values()):
        raise ConfigurationError(
            f"Fixture {path} must map collection names to lists of documents"
        )
    return data
