from pydantic import BaseModel


class StoredFile(BaseModel):
    passport_number: str
    stored_filename: str
    original_filename: str
    content_type: str
    size_bytes: int
    storage_path: str
    file_path: str
    stored_at: str


class IntakeResponse(BaseModel):
    success: bool
    message: str
    filePath: str
    fileName: str
    originalName: str
    fileSize: int
    fileType: str
    passportNumber: str


class IntakeErrorResponse(BaseModel):
    success: bool = False
    message: str
