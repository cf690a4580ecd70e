"""Admin data-management routes"""

import time
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile

from ..dependencies import get_applicant_service, require_admin
from ..exceptions import InvalidInputError
from ..models.schemas import (
    ApplicantCreatedResponse,
    ApplicantListResponse,
    ApplicantRecord,
    ApplicantUpdate,
    MessageResponse,
    SortOrder,
)
from ..services.applicant_service import ApplicantService
from ..services.session_service import AdminSession
from ..utils.logging import logger

router = APIRouter(prefix="/api/v1/applicants", tags=["Applicants"])


@router.post("", response_model=ApplicantCreatedResponse)
async def create_applicant(
    request: Request,
    name: Optional[str] = Form(None),
    passportNumber: Optional[str] = Form(None),
    docPassword: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    session: AdminSession = Depends(require_admin),
    service: ApplicantService = Depends(get_applicant_service),
):
    """
    Upload an applicant's document and create their record.

    The file goes to the intake service first; the record is only written once the
    intake service returns a confirmed file path.
    """
    start_time = time.time()

    if not name or not passportNumber or not docPassword or file is None or not file.filename:
        raise InvalidInputError("Please fill all fields and select a file")

    logger.log_step("applicant_upload_received", {
        "url": str(request.url),
        "admin": session.email,
        "filename": file.filename,
        "content_type": file.content_type
    })

    record, application_url = await service.create_applicant(
        name=name,
        passport_number=passportNumber,
        doc_password=docPassword,
        file_obj=file.file,
        filename=file.filename,
        content_type=file.content_type or "application/octet-stream",
        created_by=session.email,
    )

    logger.log_step("applicant_upload_completed", {
        "applicant_id": record.id,
        "file_path": record.filePath,
        "process_time": time.time() - start_time
    })

    return ApplicantCreatedResponse(
        success=True,
        message="Data uploaded successfully! Application URL generated.",
        applicant=record,
        applicationUrl=application_url,
    )


@router.get("", response_model=ApplicantListResponse)
async def list_applicants(
    search: Optional[str] = None,
    status: Optional[str] = Query(None, description="all, Approved, Pending or Rejected"),
    sort: SortOrder = "newest",
    session: AdminSession = Depends(require_admin),
    service: ApplicantService = Depends(get_applicant_service),
):
    records, stats = service.list_applicants(search=search, status=status, sort=sort)
    return ApplicantListResponse(applicants=records, count=len(records), stats=stats)


@router.get("/{applicant_id}", response_model=ApplicantRecord)
async def get_applicant(
    applicant_id: str,
    session: AdminSession = Depends(require_admin),
    service: ApplicantService = Depends(get_applicant_service),
):
    return service.get_applicant(applicant_id)


@router.put("/{applicant_id}", response_model=ApplicantRecord)
async def update_applicant(
    applicant_id: str,
    update: ApplicantUpdate,
    session: AdminSession = Depends(require_admin),
    service: ApplicantService = Depends(get_applicant_service),
):
    if not update.name.strip() or not update.passportNumber.strip() or not update.docPassword:
        raise InvalidInputError("Name, passport number and document password are required")
    return service.update_applicant(applicant_id, update, updated_by=session.email)


@router.delete("/{applicant_id}", response_model=MessageResponse)
async def delete_applicant(
    applicant_id: str,
    session: AdminSession = Depends(require_admin),
    service: ApplicantService = Depends(get_applicant_service),
):
    service.delete_applicant(applicant_id, deleted_by=session.email)
    return MessageResponse(success=True, message="Applicant deleted successfully!")
