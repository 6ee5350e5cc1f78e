"""Artifact writer for pipeline outputs and step logs."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..types import ConversionError, ErrorType, StepRecord

PathLike = Union[str, Path]


class ArtifactWriter:
    """
    Writer for conversion artifacts.

    Handles directory management, artifact naming and the JSON-lines step
    log. Artifacts are always written from complete byte strings, so a
    failed conversion never leaves a truncated file behind.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the artifact writer.

        Args:
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def artifact_name(prefix: str, index: int, ext: str) -> str:
        """Name of the artifact for the ``index``-th step (1-based), e.g. ``01.sqlon``."""
        return f"{prefix}{index:02d}.{ext}"

    def write_bytes(self, path: PathLike, data: bytes) -> Dict[str, Any]:
        """
        Write a complete artifact.

        Args:
            path: Destination file path
            data: Complete artifact content

        Returns:
            Dictionary with file information

        Raises:
            ConversionError: If writing fails
        """
        file_path = Path(path)
        self.ensure_directory(file_path.parent)

        try:
            file_path.write_bytes(data)
        except OSError as e:
            raise ConversionError(
                f"Failed to write {file_path}: {e}",
                ErrorType.IO_FAILURE,
                context={"path": str(file_path)}
            ) from e

        self.logger.debug(f"Wrote {len(data)} bytes to {file_path}")
        return {
            "filename": file_path.name,
            "path": str(file_path.absolute()),
            "size": len(data),
        }

    def read_bytes(self, path: PathLike) -> bytes:
        """
        Read an input file.

        Raises:
            ConversionError: If the file cannot be read
        """
        try:
            return Path(path).read_bytes()
        except OSError as e:
            raise ConversionError(
                f"Failed to read {path}: {e}",
                ErrorType.IO_FAILURE,
                context={"path": str(path)}
            ) from e

    def append_record(self, log_path: PathLike, record: StepRecord) -> None:
        """
        Append one step record to a JSON-lines log.

        Args:
            log_path: Log file path
            record: Executed step

        Raises:
            ConversionError: If the log cannot be written
        """
        log_file = Path(log_path)
        self.ensure_directory(log_file.parent)
        line = json.dumps(record.to_dict(), ensure_ascii=False) + "\n"

        try:
            with open(log_file, "a", encoding="utf-8") as f:
                f.write(line)
        except OSError as e:
            raise ConversionError(
                f"Failed to append to step log {log_file}: {e}",
                ErrorType.IO_FAILURE,
                context={"path": str(log_file)}
            ) from e

    def ensure_directory(self, directory_path: PathLike) -> None:
        """
        Ensure that a directory exists, creating it if necessary.

        Args:
            directory_path: Path to directory

        Raises:
            ConversionError: If the directory cannot be created or written to
        """
        directory = Path(directory_path)

        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConversionError(
                f"Failed to create directory {directory}: {e}",
                ErrorType.IO_FAILURE,
                context={"path": str(directory)}
            ) from e

        if not os.access(directory, os.W_OK):
            raise ConversionError(
                f"Directory {directory} is not writable",
                ErrorType.IO_FAILURE,
                context={"path": str(directory)}
            )
