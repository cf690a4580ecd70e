"""Employer-facing routes: browse applicants and unlock a document with its password"""

from typing import Optional

from fastapi import APIRouter, Depends

from ..dependencies import get_applicant_service
from ..exceptions import InvalidInputError
from ..models.schemas import (
    AccessRequest,
    AccessResponse,
    DocumentSummary,
    EmployerApplicant,
    EmployerListResponse,
    SortOrder,
)
from ..services.access_gate import AccessDecision
from ..services.applicant_service import ApplicantService

router = APIRouter(prefix="/api/v1", tags=["Employer"])


@router.get("/employer/applicants", response_model=EmployerListResponse)
async def browse_applicants(
    search: Optional[str] = None,
    sort: SortOrder = "newest",
    service: ApplicantService = Depends(get_applicant_service),
):
    records, stats = service.list_applicants(search=search, sort=sort)
    applicants = [
        EmployerApplicant(
            id=record.id,
            name=record.name,
            passportNumber=record.passportNumber,
            status=record.status,
            uploadedAt=record.uploadedAt,
        )
        for record in records
    ]
    return EmployerListResponse(applicants=applicants, count=len(applicants), stats=stats)


@router.get("/documents/{applicant_id}", response_model=DocumentSummary)
async def document_summary(applicant_id: str, service: ApplicantService = Depends(get_applicant_service)):
    record = service.get_applicant(applicant_id)
    return DocumentSummary(
        id=record.id,
        name=record.name,
        passportNumber=record.passportNumber,
        status=record.status,
    )


@router.post("/documents/{applicant_id}/access", response_model=AccessResponse)
async def unlock_document(
    applicant_id: str,
    access: AccessRequest,
    service: ApplicantService = Depends(get_applicant_service),
):
    if not access.password:
        raise InvalidInputError("Please enter the document password")

    decision, details = service.unlock_document(applicant_id, access.password)
    if decision != AccessDecision.GRANTED:
        return AccessResponse(
            success=False,
            granted=False,
            message="Invalid password. Please try again.",
        )

    return AccessResponse(
        success=True,
        granted=True,
        message="Access granted",
        applicant=details,
    )
