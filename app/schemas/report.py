from pydantic import BaseModel
from uuid import UUID
from datetime import date, datetime
from typing import Optional

class ReportResponse(BaseModel):
    id: UUID
    patient_id: UUID
    uploaded_by_doctor_id: Optional[UUID] = None
    title: str
    description: Optional[str] = None
    report_type: str
    report_date: date
    file_size: Optional[int] = None
    file_type: Optional[str] = None
    hash: str
    is_verified: bool
    created_at: datetime

    class Config:
        from_attributes = True

class AccessLogResponse(BaseModel):
    id: UUID
    report_id: UUID
    accessed_by_user_id: UUID
    accessed_by_type: str
    action: str
    ip_address: Optional[str] = None
    accessed_at: datetime

    class Config:
        from_attributes = True
