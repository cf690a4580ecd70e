import logging
import json
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from pathlib import Path


class StructuredLogger:
    """Structured logger for the file intake service"""

    def __init__(self):
        self.logger = logging.getLogger("intake_service")
        self.logger.setLevel(logging.INFO)

        if not self.logger.handlers:
            self._configure_handlers()

    def _configure_handlers(self) -> None:
        """Configure logger handlers for console and file outputs."""
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

        log_dir = Path(__file__).resolve().parents[2] / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)

        info_handler = logging.FileHandler(log_dir / "intake_service.log", encoding="utf-8")
        info_handler.setLevel(logging.INFO)
        info_handler.setFormatter(formatter)

        error_handler = logging.FileHandler(log_dir / "intake_service_error.log", encoding="utf-8")
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(formatter)

        self.logger.addHandler(info_handler)
        self.logger.addHandler(error_handler)
        self.logger.propagate = False

    def log_step(self, step: str, data: Dict[str, Any] = None):
        """Log a processing step"""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "step": step,
            "agent": "intake_service"
        }
        if data:
            log_data.update(data)

        self.logger.info(f"STEP: {json.dumps(log_data, default=str)}")

    def log_error(self, error_type: str, data: Dict[str, Any] = None):
        """Log an error"""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "error": error_type,
            "agent": "intake_service"
        }
        if data:
            log_data.update(data)

        self.logger.error(f"ERROR: {json.dumps(log_data, default=str)}")

    def log_rejection(self, kind: str, passport_number: str, filename: Optional[str]):
        """Log a rejected upload"""
        self.log_step("intake_rejected", {
            "kind": kind,
            "passport_number": passport_number,
            "filename": filename
        })


# Global logger instance
logger = StructuredLogger()
