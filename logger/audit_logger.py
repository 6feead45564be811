import json
import logging
import os
import threading
from datetime import datetime
from typing import Optional

from loguru import logger as loguru_logger


class AuditLogger:
    """Audit trail of site configuration writes.

    Each write is recorded with the acting username, the property and its old
    and new values. Application logs from loguru are mirrored into the same
    file so an audit file tells the whole story of a run.
    """

    def __init__(self, log_dir: str = "logs/audit", mirror_loguru: bool = True, auto_start: bool = True):
        """Initialize audit logger.

        Args:
            log_dir: Directory for audit log files
            mirror_loguru: Whether to attach a loguru sink writing to the audit file
            auto_start: Whether to write the start marker immediately
        """
        self.log_dir = log_dir
        os.makedirs(self.log_dir, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        self.log_path = os.path.join(self.log_dir, f"site_config_audit_{timestamp}.log")

        # Standard logging handler for the audit records themselves
        self._py_logger = logging.getLogger(f"SiteConfigAudit_{timestamp}")
        self._py_logger.setLevel(logging.INFO)
        self._py_logger.propagate = False
        self._file_handler = logging.FileHandler(self.log_path, encoding="utf-8")
        formatter = logging.Formatter('[%(asctime)s] %(message)s', datefmt='%Y-%m-%d %H:%M:%S')
        self._file_handler.setFormatter(formatter)
        self._py_logger.handlers = []
        self._py_logger.addHandler(self._file_handler)

        self._sink_id: Optional[int] = None
        if mirror_loguru:
            self.attach_loguru_sink()

        self._lock = threading.Lock()
        self._ended = False
        if auto_start:
            self.log("=== AUDIT START ===")

    # ---------- Wiring ----------
    def attach_loguru_sink(self) -> None:
        """Attach a loguru sink to mirror application logs into the audit file."""
        if self._sink_id is None:
            self._sink_id = loguru_logger.add(
                self.log_path,
                format="[{time:YYYY-MM-DD HH:mm:ss}] {level}: {message}",
                level="INFO",
            )

    def detach_loguru_sink(self) -> None:
        if self._sink_id is not None:
            try:
                loguru_logger.remove(self._sink_id)
            except ValueError:
                # Already removed, e.g. by a global logger.remove()
                pass
            finally:
                self._sink_id = None

    # ---------- Public API ----------
    def log(self, message: str) -> None:
        """Write a raw line to the audit file."""
        self._py_logger.info(message)

    def record(self, username: str, property_name: str, old_value: Optional[str], new_value: Optional[str]) -> None:
        """Record a property write."""
        entry = {
            "user": username,
            "property": property_name,
            "old": old_value,
            "new": new_value,
        }
        self.log(f"SET {json.dumps(entry, sort_keys=True)}")

    def log_kv(self, key: str, value) -> None:
        """Log a key-value pair (e.g., the active service configuration)."""
        value_str = json.dumps(value, indent=2, default=str) if isinstance(value, (dict, list)) else str(value)
        self.log(f"{key}: {value_str}")

    def close(self) -> None:
        """Write the end marker and release the file (idempotent)."""
        with self._lock:
            if self._ended:
                return
            self._ended = True
        self.log("=== AUDIT END ===")
        self.detach_loguru_sink()
        self._py_logger.removeHandler(self._file_handler)
        self._file_handler.close()
