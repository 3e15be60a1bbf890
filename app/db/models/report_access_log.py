from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from uuid import UUID, uuid4

class ReportAccessLog(SQLModel, table=True):
    __tablename__ = "report_access_log"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    report_id: UUID = Field(foreign_key="medical_reports.id", index=True)
    accessed_by_user_id: UUID
    accessed_by_type: str # doctor, patient
    action: str # upload, view, download, integrity_failure
    ip_address: Optional[str] = None
    accessed_at: datetime = Field(default_factory=datetime.utcnow)
