"""
==============================================================================
Scan Logger Module
==============================================================================

Daily scan history files for operator review.

Each scan appends one entry containing the result line shown to the
operator and, for decoded codes, the product description.

File Format:
-----------
scan_{YYYY-MM-DD}.log

==============================================================================
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional

from labellense.config import get_settings


# Module logger
logger = logging.getLogger(__name__)


class ScanLogger:
    """
    Appends scan results to a per-day history file.

    Attributes:
        _log_dir: Directory for history files

    Example:
        >>> scan_logger = ScanLogger()
        >>> scan_logger.record("Scanned Barcode: 4006381333931", "Product Info: ...")
        'storage/logs/scan_2025-01-15.log'
    """

    def __init__(self, log_dir: Optional[Path] = None) -> None:
        """
        Initialize the scan logger.

        Args:
            log_dir: Custom log directory (uses settings if None)
        """
        self._log_dir = Path(log_dir) if log_dir else get_settings().log_path
        self._log_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def record(self, message: str, product_info: Optional[str] = None) -> str:
        """
        Append one scan entry.

        Args:
            message: Result line shown to the operator
            product_info: Product description for decoded codes

        Returns:
            Path to the history file
        """
        now = datetime.now()
        filepath = self._log_dir / f"scan_{now.strftime('%Y-%m-%d')}.log"
        content = self._format_entry(now, message, product_info)

        with self._lock:
            with filepath.open("a", encoding="utf-8") as f:
                f.write(content)

        logger.debug(f"Scan recorded in {filepath}")
        return str(filepath)

    @staticmethod
    def _format_entry(when: datetime, message: str, product_info: Optional[str]) -> str:
        lines = [f"[{when.strftime('%Y-%m-%d %H:%M:%S')}] {message}"]

        if product_info:
            lines.append("Product Info:")
            lines.extend(f"    {line}" for line in product_info.rstrip("\n").splitlines())

        lines.append("")
        return "\n".join(lines) + "\n"
