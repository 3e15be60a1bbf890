from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.db.models import HealthMetric
from app.schemas.health_metric import BMIAnalysis, HealthMetricCreate

BMI_BANDS = [
    (18.5, "Underweight", "Consider a nutrient-rich diet with more protein and healthy fats, and check in with a doctor."),
    (25.0, "Healthy Weight", "Keep up the balanced diet and regular physical activity."),
    (30.0, "Overweight", "Aim for regular exercise and watch portion sizes and sugar intake."),
]


def calculate_bmi(weight_kg: Optional[float], height_cm: Optional[float]) -> Optional[float]:
    if not weight_kg or not height_cm:
        return None
    return round(weight_kg / (height_cm / 100) ** 2, 2)


def analyze_bmi(bmi: Optional[float]) -> Optional[BMIAnalysis]:
    if not bmi:
        return None
    for upper, status, advice in BMI_BANDS:
        if bmi < upper:
            return BMIAnalysis(bmi=bmi, status=status, advice=advice)
    return BMIAnalysis(
        bmi=bmi,
        status="Obese",
        advice="Consult a doctor for a weight management plan; diet and exercise changes are recommended.",
    )


class HealthMetricService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def record(self, patient_id: UUID, data: HealthMetricCreate) -> HealthMetric:
        values = data.model_dump(exclude={"recorded_at"})
        metric = HealthMetric(
            patient_id=patient_id,
            bmi=calculate_bmi(data.weight_kg, data.height_cm),
            recorded_at=data.recorded_at or datetime.utcnow(),
            **values
        )
        self.session.add(metric)
        await self.session.commit()
        await self.session.refresh(metric)
        return metric

    async def list_metrics(self, patient_id: UUID, limit: int = 100) -> List[HealthMetric]:
        stmt = select(HealthMetric).where(
            HealthMetric.patient_id == patient_id
        ).order_by(HealthMetric.recorded_at.desc()).limit(limit)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def latest_analysis(self, patient_id: UUID) -> Optional[BMIAnalysis]:
        stmt = select(HealthMetric).where(
            HealthMetric.patient_id == patient_id,
            HealthMetric.bmi != None
        ).order_by(HealthMetric.recorded_at.desc()).limit(1)
        result = await self.session.execute(stmt)
        latest = result.scalars().first()
        return analyze_bmi(latest.bmi) if latest else None
