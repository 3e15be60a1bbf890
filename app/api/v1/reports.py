from datetime import date
from typing import List, Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_session_context, require_profile
from app.core.config import settings
from app.db.session import get_session
from app.schemas.auth import SessionContext
from app.schemas.report import AccessLogResponse, ReportResponse
from app.services.report_service import IntegrityViolationError, ReportService

router = APIRouter()

async def get_report_service(session: AsyncSession = Depends(get_session)) -> ReportService:
    return ReportService(session)

def client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None

@router.post("/", response_model=ReportResponse, status_code=201)
async def upload_report(
    request: Request,
    file: UploadFile = File(...),
    title: str = Form(...),
    report_type: str = Form(...),
    description: Optional[str] = Form(None),
    report_date: Optional[date] = Form(None),
    patient_id: Optional[UUID] = Form(None),
    ctx: SessionContext = Depends(get_session_context),
    service: ReportService = Depends(get_report_service)
):
    require_profile(ctx)
    # One byte past the limit is enough to reject an oversized file
    data = await file.read(settings.MAX_REPORT_SIZE_BYTES + 1)
    return await service.upload(
        ctx,
        data,
        filename=file.filename or "report",
        content_type=file.content_type,
        title=title,
        report_type=report_type,
        description=description,
        report_date=report_date,
        patient_id=patient_id,
        ip_address=client_ip(request)
    )

@router.get("/", response_model=List[ReportResponse])
async def read_reports(
    ctx: SessionContext = Depends(get_session_context),
    service: ReportService = Depends(get_report_service)
):
    require_profile(ctx)
    return await service.list_reports(ctx)

@router.get("/{report_id}", response_model=ReportResponse)
async def read_report(
    report_id: UUID,
    ctx: SessionContext = Depends(get_session_context),
    service: ReportService = Depends(get_report_service)
):
    require_profile(ctx)
    return await service.get_report(ctx, report_id)

@router.get("/{report_id}/file")
async def read_report_file(
    report_id: UUID,
    request: Request,
    action: Literal["view", "download"] = "view",
    ctx: SessionContext = Depends(get_session_context),
    service: ReportService = Depends(get_report_service)
):
    require_profile(ctx)
    try:
        report, data = await service.open_report(ctx, report_id, action, client_ip(request))
    except IntegrityViolationError:
        raise HTTPException(status_code=409, detail={
            "code": "integrity_violation",
            "message": "This file has been modified since upload and cannot be trusted."
        })

    disposition = "attachment" if action == "download" else "inline"
    filename = report.file_path.rsplit("/", 1)[-1]
    return Response(
        content=data,
        media_type=report.file_type or "application/octet-stream",
        headers={"Content-Disposition": f'{disposition}; filename="{filename}"'}
    )

@router.get("/{report_id}/access-log", response_model=List[AccessLogResponse])
async def read_access_log(
    report_id: UUID,
    ctx: SessionContext = Depends(get_session_context),
    service: ReportService = Depends(get_report_service)
):
    require_profile(ctx)
    return await service.access_log(ctx, report_id)
