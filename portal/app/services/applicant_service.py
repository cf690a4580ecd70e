from datetime import datetime, timezone
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Optional, Tuple

from ..config import settings
from ..exceptions import ApplicantNotFoundError
from ..models.schemas import (
    ApplicantRecord,
    ApplicantStats,
    ApplicantStatus,
    ApplicantUpdate,
    DocumentDetails,
)
from ..utils.logging import logger
from .access_gate import AccessDecision, authorize
from .intake_client import IntakeClient

PDF_EXTENSIONS = {"pdf"}
IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "bmp"}


def normalize_status(value: Optional[str]) -> ApplicantStatus:
    for status in ApplicantStatus:
        if value and value.lower() == status.value.lower():
            return status
    return ApplicantStatus.PENDING


def file_kind(filename: Optional[str]) -> str:
    if not filename:
        return "document"
    ext = Path(filename).suffix.lower().lstrip(".")
    if ext in PDF_EXTENSIONS:
        return "pdf"
    if ext in IMAGE_EXTENSIONS:
        return "image"
    return "document"


def searchable_fields(name: str, passport_number: str) -> Dict[str, str]:
    return {
        "searchablePassport": passport_number.lower(),
        "searchableName": name.lower(),
    }


def to_record(document: Dict[str, Any]) -> ApplicantRecord:
    data = {key: value for key, value in document.items() if key != "_id"}
    data["status"] = normalize_status(document.get("status"))
    return ApplicantRecord(id=str(document["_id"]), **data)


def matches_search(record: ApplicantRecord, search: Optional[str]) -> bool:
    if not search:
        return True
    term = search.lower()
    return term in record.name.lower() or term in record.passportNumber.lower()


def sort_records(records: List[ApplicantRecord], sort: str = "newest") -> List[ApplicantRecord]:
    epoch = datetime.min.replace(tzinfo=timezone.utc)

    def uploaded(record: ApplicantRecord) -> datetime:
        if record.uploadedAt is None:
            return epoch
        if record.uploadedAt.tzinfo is None:
            return record.uploadedAt.replace(tzinfo=timezone.utc)
        return record.uploadedAt

    if sort == "oldest":
        return sorted(records, key=uploaded)
    if sort == "name":
        return sorted(records, key=lambda record: record.name.casefold())
    return sorted(records, key=uploaded, reverse=True)


def compute_stats(records: List[ApplicantRecord]) -> ApplicantStats:
    return ApplicantStats(
        total=len(records),
        approved=sum(1 for r in records if r.status == ApplicantStatus.APPROVED),
        pending=sum(1 for r in records if r.status == ApplicantStatus.PENDING),
        rejected=sum(1 for r in records if r.status == ApplicantStatus.REJECTED),
    )


class ApplicantService:
    """Applicant records: creation through the intake service, admin edits, employer access."""

    def __init__(self, store, intake_client: IntakeClient,
                 file_base_url: Optional[str] = None, portal_public_url: Optional[str] = None):
        self.store = store
        self.intake_client = intake_client
        self.file_base_url = (file_base_url or settings.file_base_url).rstrip("/")
        self.portal_public_url = (portal_public_url or settings.PORTAL_PUBLIC_URL).rstrip("/")

    def application_url(self, applicant_id: str) -> str:
        return f"{self.portal_public_url}/employer/document/{applicant_id}"

    async def create_applicant(
        self,
        name: str,
        passport_number: str,
        doc_password: str,
        file_obj: BinaryIO,
        filename: str,
        content_type: str,
        created_by: str,
    ) -> Tuple[ApplicantRecord, str]:
        """Upload the document, then record the applicant against the confirmed file path.

        Nothing is written to the record store unless the intake service confirmed the file.
        """
        upload = await self.intake_client.upload(file_obj, filename, content_type, passport_number)
        file_path = upload["filePath"]

        document = {
            "name": name,
            "passportNumber": passport_number,
            "docPassword": doc_password,
            "filePath": file_path,
            "fileName": upload.get("originalName") or filename,
            "fileType": upload.get("fileType") or content_type,
            "fileSize": upload.get("fileSize"),
            "fileUrl": f"{self.file_base_url}{file_path}",
            "uploadedAt": datetime.now(timezone.utc),
            "status": ApplicantStatus.APPROVED.value,
            "createdBy": created_by,
            **searchable_fields(name, passport_number),
        }
        applicant_id = self.store.save_document(document)
        logger.log_admin_action("applicant_created", created_by, applicant_id)

        record = to_record({"_id": applicant_id, **document})
        return record, self.application_url(applicant_id)

    def list_applicants(self, search: Optional[str] = None, status: Optional[str] = None,
                        sort: str = "newest") -> Tuple[List[ApplicantRecord], ApplicantStats]:
        """Return filtered and sorted records plus stats over the whole collection."""
        records = [to_record(document) for document in self.store.list_documents()]
        stats = compute_stats(records)

        selected = [record for record in records if matches_search(record, search)]
        if status and status.lower() != "all":
            wanted = normalize_status(status)
            selected = [record for record in selected if record.status == wanted]
        return sort_records(selected, sort), stats

    def get_applicant(self, applicant_id: str) -> ApplicantRecord:
        document = self.store.get_document(applicant_id)
        if document is None:
            raise ApplicantNotFoundError(applicant_id)
        return to_record(document)

    def update_applicant(self, applicant_id: str, update: ApplicantUpdate, updated_by: str) -> ApplicantRecord:
        changes = {
            "name": update.name,
            "passportNumber": update.passportNumber,
            "docPassword": update.docPassword,
            "status": update.status.value,
            "updatedAt": datetime.now(timezone.utc),
            **searchable_fields(update.name, update.passportNumber),
        }
        if not self.store.update_document(applicant_id, changes):
            raise ApplicantNotFoundError(applicant_id)
        logger.log_admin_action("applicant_updated", updated_by, applicant_id)
        return self.get_applicant(applicant_id)

    def delete_applicant(self, applicant_id: str, deleted_by: str) -> None:
        if not self.store.delete_document(applicant_id):
            raise ApplicantNotFoundError(applicant_id)
        logger.log_admin_action("applicant_deleted", deleted_by, applicant_id)

    def unlock_document(self, applicant_id: str, supplied_password: str) -> Tuple[AccessDecision, Optional[DocumentDetails]]:
        """Check the document password. Details are returned only on a grant and never cached."""
        record = self.get_applicant(applicant_id)
        decision = authorize(record.docPassword, supplied_password)
        logger.log_access_attempt(applicant_id, decision == AccessDecision.GRANTED)

        if decision != AccessDecision.GRANTED:
            return decision, None

        details = DocumentDetails(
            id=record.id,
            name=record.name,
            passportNumber=record.passportNumber,
            status=record.status,
            uploadedAt=record.uploadedAt,
            fileName=record.fileName,
            fileType=record.fileType,
            fileSize=record.fileSize,
            fileUrl=record.fileUrl,
            fileKind=file_kind(record.fileName),
        )
        return decision, details
