import hmac
from datetime import date, datetime
from typing import List, Optional, Tuple
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import settings
from app.core.logger import logger
from app.core.storage import ReportStorage, report_storage
from app.core.utils import safe_filename, sha256_hex
from app.db.models import MedicalReport, PatientProfile, ReportAccessLog
from app.schemas.auth import SessionContext
from app.services.doctor_service import DoctorService


class IntegrityViolationError(Exception):
    """Stored file no longer matches the digest recorded at upload."""

    def __init__(self, report_id: UUID, expected: str, actual: str):
        super().__init__(f"Report {report_id} failed integrity check")
        self.report_id = report_id
        self.expected = expected
        self.actual = actual


class ReportService:
    def __init__(self, session: AsyncSession, storage: ReportStorage = report_storage):
        self.session = session
        self.storage = storage

    async def _log_access(self, report_id: UUID, ctx: SessionContext, action: str, ip_address: Optional[str]):
        self.session.add(ReportAccessLog(
            report_id=report_id,
            accessed_by_user_id=ctx.user_id,
            accessed_by_type=ctx.role,
            action=action,
            ip_address=ip_address
        ))
        await self.session.commit()

    async def _resolve_patient(self, ctx: SessionContext, patient_id: Optional[UUID]) -> PatientProfile:
        if ctx.is_patient:
            patient_id = ctx.profile_id
        elif patient_id is None:
            raise HTTPException(status_code=400, detail="patient_id is required")
        elif not await DoctorService(self.session).has_consulted(ctx.profile_id, patient_id):
            raise HTTPException(status_code=403, detail="You can only upload reports for patients who have consulted you")

        patient = await self.session.get(PatientProfile, patient_id)
        if not patient:
            raise HTTPException(status_code=404, detail="Patient not found")
        return patient

    async def upload(
        self,
        ctx: SessionContext,
        data: bytes,
        filename: str,
        content_type: Optional[str],
        title: str,
        report_type: str,
        description: Optional[str] = None,
        report_date: Optional[date] = None,
        patient_id: Optional[UUID] = None,
        ip_address: Optional[str] = None,
    ) -> MedicalReport:
        if not data:
            raise HTTPException(status_code=400, detail="Uploaded file is empty")
        if len(data) > settings.MAX_REPORT_SIZE_BYTES:
            raise HTTPException(status_code=413, detail="Uploaded file is too large")

        patient = await self._resolve_patient(ctx, patient_id)

        digest = sha256_hex(data)
        stamp = int(datetime.utcnow().timestamp() * 1000)
        file_path = f"{patient.user_id}/{stamp}_{safe_filename(filename)}"
        await self.storage.upload(file_path, data)

        report = MedicalReport(
            patient_id=patient.id,
            uploaded_by_doctor_id=ctx.profile_id if ctx.is_doctor else None,
            title=title,
            description=description,
            report_type=report_type,
            report_date=report_date or date.today(),
            file_path=file_path,
            file_size=len(data),
            file_type=content_type,
            hash=digest,
            is_verified=True
        )
        self.session.add(report)
        await self.session.commit()
        await self.session.refresh(report)

        await self._log_access(report.id, ctx, "upload", ip_address)
        logger.info(f"Report {report.id} stored for patient {patient.id} (sha256 {digest[:12]})")
        return report

    async def list_reports(self, ctx: SessionContext) -> List[MedicalReport]:
        if ctx.is_patient:
            stmt = select(MedicalReport).where(MedicalReport.patient_id == ctx.profile_id)
        else:
            patient_ids = await DoctorService(self.session).get_consulted_patient_ids(ctx.profile_id)
            if not patient_ids:
                return []
            stmt = select(MedicalReport).where(MedicalReport.patient_id.in_(patient_ids))
        stmt = stmt.order_by(MedicalReport.created_at.desc())
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_report(self, ctx: SessionContext, report_id: UUID) -> MedicalReport:
        report = await self.session.get(MedicalReport, report_id)
        if not report:
            raise HTTPException(status_code=404, detail="Report not found")

        if ctx.is_patient:
            allowed = report.patient_id == ctx.profile_id
        else:
            allowed = await DoctorService(self.session).has_consulted(ctx.profile_id, report.patient_id)
        if not allowed:
            raise HTTPException(status_code=404, detail="Report not found")
        return report

    async def open_report(
        self,
        ctx: SessionContext,
        report_id: UUID,
        action: str = "view",
        ip_address: Optional[str] = None,
    ) -> Tuple[MedicalReport, bytes]:
        """Return the report bytes after re-checking them against the stored digest."""
        report = await self.get_report(ctx, report_id)

        try:
            data = await self.storage.download(report.file_path)
        except FileNotFoundError:
            raise HTTPException(status_code=404, detail="Report file is missing from storage")

        current = sha256_hex(data)
        if not hmac.compare_digest(current, report.hash):
            await self._log_access(report.id, ctx, "integrity_failure", ip_address)
            logger.warning(f"Integrity violation on report {report.id}: expected {report.hash}, got {current}")
            raise IntegrityViolationError(report.id, report.hash, current)

        await self._log_access(report.id, ctx, action, ip_address)
        return report, data

    async def access_log(self, ctx: SessionContext, report_id: UUID) -> List[ReportAccessLog]:
        report = await self.get_report(ctx, report_id)
        if not ctx.is_patient:
            raise HTTPException(status_code=403, detail="Only the patient can view the access log")

        stmt = select(ReportAccessLog).where(
            ReportAccessLog.report_id == report.id
        ).order_by(ReportAccessLog.accessed_at.desc())
        result = await self.session.execute(stmt)
        return result.scalars().all()
