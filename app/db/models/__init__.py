from sqlmodel import SQLModel
from .user import User
from .doctor import DoctorProfile
from .patient import PatientProfile
from .availability import DoctorAvailability
from .appointment import Appointment
from .appointment_slot import AppointmentSlot
from .prescription import Prescription
from .message import Message
from .medical_report import MedicalReport
from .report_access_log import ReportAccessLog
from .health_metric import HealthMetric

__all__ = [
    "SQLModel",
    "User",
    "DoctorProfile",
    "PatientProfile",
    "DoctorAvailability",
    "Appointment",
    "AppointmentSlot",
    "Prescription",
    "Message",
    "MedicalReport",
    "ReportAccessLog",
    "HealthMetric",
]
