from datetime import datetime
from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel


class ApplicantStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


SortOrder = Literal["newest", "oldest", "name"]


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class LoginResponse(BaseModel):
    success: bool
    token: str
    email: str
    expiresAt: datetime


class SessionInfo(BaseModel):
    authenticated: bool
    email: str
    expiresAt: datetime


class ApplicantRecord(BaseModel):
    id: str
    name: str
    passportNumber: str
    docPassword: Optional[str] = None
    filePath: Optional[str] = None
    fileName: Optional[str] = None
    fileType: Optional[str] = None
    fileSize: Optional[int] = None
    fileUrl: Optional[str] = None
    status: ApplicantStatus = ApplicantStatus.PENDING
    createdBy: Optional[str] = None
    uploadedAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None
    searchablePassport: Optional[str] = None
    searchableName: Optional[str] = None


class ApplicantUpdate(BaseModel):
    name: str
    passportNumber: str
    docPassword: str
    status: ApplicantStatus = ApplicantStatus.APPROVED


class ApplicantStats(BaseModel):
    total: int
    approved: int
    pending: int
    rejected: int


class ApplicantCreatedResponse(BaseModel):
    success: bool
    message: str
    applicant: ApplicantRecord
    applicationUrl: str


class ApplicantListResponse(BaseModel):
    applicants: List[ApplicantRecord]
    count: int
    stats: ApplicantStats


class EmployerApplicant(BaseModel):
    id: str
    name: str
    passportNumber: str
    status: ApplicantStatus
    uploadedAt: Optional[datetime] = None


class EmployerListResponse(BaseModel):
    applicants: List[EmployerApplicant]
    count: int
    stats: ApplicantStats


class DocumentSummary(BaseModel):
    id: str
    name: str
    passportNumber: str
    status: ApplicantStatus


class AccessRequest(BaseModel):
    password: Optional[str] = None


class DocumentDetails(DocumentSummary):
    uploadedAt: Optional[datetime] = None
    fileName: Optional[str] = None
    fileType: Optional[str] = None
    fileSize: Optional[int] = None
    fileUrl: Optional[str] = None
    fileKind: Literal["pdf", "image", "document"] = "document"


class AccessResponse(BaseModel):
    success: bool
    granted: bool
    message: str
    applicant: Optional[DocumentDetails] = None


class MessageResponse(BaseModel):
    success: bool
    message: str
    errors: Optional[Dict[str, str]] = None
