"""
@file_name: logging_service.py
@author: NetMind.AI
@date: 2026-03-04
@description: Per-run file logging

Adds a loguru file sink for the duration of one run and removes it when the
run ends (successfully or not). Disabled unless settings.file_logging_enabled
is set, so library users only get loguru's default stderr sink.

Key implementation details:
- The file name uses loguru's {time} placeholder, not a manually formatted
  timestamp: retention discovers old files by replacing {time} with a glob,
  so a hand-made timestamp would never be cleaned up.
- No rotation: each run writes its own file; retention is applied when the
  sink is removed.
"""

from pathlib import Path
from typing import Optional

from loguru import logger

from xyz_agent_runtime.settings import settings
from xyz_agent_runtime.utils import normalize_tool_name


class LoggingService:
    """
    Per-run logging service

    Usage:
        >>> logging_svc = LoggingService()
        >>> logging_svc.setup(run_label="triage")
        >>> try:
        ...     logger.info("This goes to logs/triage_<time>.log as well")
        ... finally:
        ...     logging_svc.cleanup()
    """

    def __init__(
        self,
        log_dir: Optional[str] = None,
        enabled: Optional[bool] = None,
        log_level: Optional[str] = None,
        retention: Optional[str] = None,
        compression: str = "zip",
    ):
        """
        Args:
            log_dir: Log directory (default: settings.log_dir)
            enabled: Whether to add a file sink (default: settings.file_logging_enabled)
            log_level: Minimum level written to the file (default: settings.log_level)
            retention: Retention period for old run logs (default: settings.log_retention)
            compression: Compression applied to closed files
        """
        self._log_dir = Path(log_dir or settings.log_dir)
        self._enabled = settings.file_logging_enabled if enabled is None else enabled
        self._log_level = log_level or settings.log_level
        self._retention = retention or settings.log_retention
        self._compression = compression
        self._handler_id: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self._handler_id is not None

    def setup(self, run_label: str) -> Optional[Path]:
        """
        Add the file sink for one run

        File name: {run_label}_{time:YYYYMMDD_HHmmss}.log

        Returns:
            The log directory, or None when file logging is disabled
        """
        self.cleanup()

        if not self._enabled:
            return None

        self._log_dir.mkdir(parents=True, exist_ok=True)
        log_template = str(self._log_dir / f"{normalize_tool_name(run_label)}_{{time:YYYYMMDD_HHmmss}}.log")

        self._handler_id = logger.add(
            log_template,
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}",
            level=self._log_level,
            retention=self._retention,
            compression=self._compression,
            encoding="utf-8",
            enqueue=True,  # Write from a background thread, never block the event loop
        )
        logger.info(f"📁 Run log file created in: {self._log_dir} (run={run_label})")
        return self._log_dir

    def cleanup(self) -> None:
        """Remove the file sink"""
        if self._handler_id is not None:
            try:
                logger.remove(self._handler_id)
            except ValueError:
                # Handler may have already been removed
                pass
            self._handler_id = None
