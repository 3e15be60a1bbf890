from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from uuid import UUID, uuid4

class Message(SQLModel, table=True):
    __tablename__ = "messages"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    sender_id: UUID = Field(foreign_key="users.id", index=True)
    receiver_id: UUID = Field(foreign_key="users.id", index=True)
    sender_type: str # doctor, patient
    message: str
    read_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
