import time
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse

from ..exceptions import IntakeFailed, IntakeValidationError
from ..models.metadata import IntakeErrorResponse, IntakeResponse
from ..utils.logging import logger

router = APIRouter(tags=["Intake"])


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=IntakeErrorResponse(message=message).model_dump(),
    )


@router.post(
    "/upload",
    response_model=IntakeResponse,
    responses={400: {"model": IntakeErrorResponse}, 500: {"model": IntakeErrorResponse}},
)
async def upload_file(
    request: Request,
    file: Optional[UploadFile] = File(None),
    passportNumber: Optional[str] = Form(None),
):
    start_time = time.time()

    logger.log_step("intake_request_received", {
        "method": request.method,
        "url": str(request.url),
        "origin": request.headers.get("origin"),
        "client": request.client.host if request.client else "unknown",
        "filename": file.filename if file is not None else None,
        "content_type": file.content_type if file is not None else None
    })

    try:
        stored = await request.app.state.intake_service.intake(file, passportNumber)
    except IntakeValidationError as ve:
        return error_response(ve.status_code, ve.message)
    except IntakeFailed as exc:
        logger.log_error("intake_request_failed", {
            "error": exc.message,
            "process_time": time.time() - start_time
        })
        return error_response(exc.status_code, IntakeFailed.public_message)

    logger.log_step("intake_completed", {
        "file_path": stored.file_path,
        "size_bytes": stored.size_bytes,
        "process_time": time.time() - start_time
    })

    return IntakeResponse(
        success=True,
        message="File uploaded successfully!",
        filePath=stored.file_path,
        fileName=stored.stored_filename,
        originalName=stored.original_filename,
        fileSize=stored.size_bytes,
        fileType=stored.content_type,
        passportNumber=stored.passport_number,
    )


@router.get("/health")
async def health_check():
    return {
        "status": "OK",
        "server": "running",
        "cors": "enabled"
    }


@router.get("/test-cors")
async def test_cors(request: Request):
    return {
        "message": "CORS test successful!",
        "origin": request.headers.get("origin"),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "cors": "working"
    }
