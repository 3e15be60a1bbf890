from fastapi import APIRouter
from app.api.v1 import (
    ai,
    appointments,
    auth,
    availability,
    doctors,
    health_metrics,
    messages,
    patients,
    prescriptions,
    realtime,
    reports,
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(doctors.router, prefix="/doctors", tags=["doctors"])
api_router.include_router(patients.router, prefix="/patients", tags=["patients"])
api_router.include_router(availability.router, prefix="/availability", tags=["availability"])
api_router.include_router(appointments.router, prefix="/appointments", tags=["appointments"])
api_router.include_router(prescriptions.router, prefix="/prescriptions", tags=["prescriptions"])
api_router.include_router(messages.router, prefix="/messages", tags=["messages"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
api_router.include_router(health_metrics.router, prefix="/health-metrics", tags=["health-metrics"])
api_router.include_router(ai.router, prefix="/ai", tags=["ai"])
api_router.include_router(realtime.router, prefix="/realtime", tags=["realtime"])
