"""HTTP client for the file intake service"""

from typing import Any, BinaryIO, Dict, Optional

import requests
from fastapi.concurrency import run_in_threadpool

from ..config import settings
from ..exceptions import IntakeServiceError
from ..utils.logging import logger


class IntakeClient:
    """Uploads a document to the intake service and returns its confirmed address."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        self.base_url = (base_url or settings.INTAKE_SERVICE_URL).rstrip("/")
        self.timeout = timeout or settings.INTAKE_TIMEOUT_SECONDS
        self.session = session or requests.Session()

    @property
    def upload_endpoint(self) -> str:
        return f"{self.base_url}/upload"

    async def upload(self, file_obj: BinaryIO, filename: str, content_type: str,
                     passport_number: str) -> Dict[str, Any]:
        def _call_api() -> Dict[str, Any]:
            return self._post(file_obj, filename, content_type, passport_number)

        return await run_in_threadpool(_call_api)

    def _post(self, file_obj: BinaryIO, filename: str, content_type: str,
              passport_number: str) -> Dict[str, Any]:
        logger.log_step("intake_upload_sent", {
            "endpoint": self.upload_endpoint,
            "filename": filename,
            "content_type": content_type,
            "passport_number": passport_number
        })

        try:
            response = self.session.post(
                self.upload_endpoint,
                files={"file": (filename, file_obj, content_type)},
                data={"passportNumber": passport_number},
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            logger.log_error("intake_upload_timeout", {"endpoint": self.upload_endpoint})
            raise IntakeServiceError("Upload timeout - server took too long to respond") from e
        except requests.exceptions.RequestException as e:
            logger.log_error("intake_upload_exception", {
                "error": str(e),
                "error_type": type(e).__name__,
                "endpoint": self.upload_endpoint
            })
            raise IntakeServiceError(f"Failed to upload file: {e}") from e

        content_type_header = response.headers.get("content-type", "")
        if "application/json" not in content_type_header:
            logger.log_error("intake_upload_non_json", {
                "status_code": response.status_code,
                "response": response.text[:500]
            })
            raise IntakeServiceError(f"Server returned non-JSON response: {response.status_code}")

        try:
            result = response.json()
        except ValueError as e:
            logger.log_error("intake_upload_bad_json", {
                "status_code": response.status_code,
                "error": str(e)
            })
            raise IntakeServiceError(f"Server returned malformed JSON: {response.status_code}") from e

        logger.log_step("intake_upload_response_received", {
            "status_code": response.status_code,
            "success": result.get("success")
        })

        if not result.get("success") or not result.get("filePath"):
            raise IntakeServiceError(result.get("message") or "File upload failed")
        return result
