from datetime import datetime
from typing import List
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import delete, select

from app.db.models import DoctorAvailability
from app.schemas.availability import AvailabilityCreate, AvailabilityUpdate

class AvailabilityService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_rules(self, doctor_id: UUID, active_only: bool = False) -> List[DoctorAvailability]:
        stmt = select(DoctorAvailability).where(DoctorAvailability.doctor_id == doctor_id)
        if active_only:
            stmt = stmt.where(DoctorAvailability.is_available == True)
        stmt = stmt.order_by(DoctorAvailability.day_of_week, DoctorAvailability.start_time)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_rules_for_day(self, doctor_id: UUID, day_of_week: int) -> List[DoctorAvailability]:
        stmt = select(DoctorAvailability).where(
            DoctorAvailability.doctor_id == doctor_id,
            DoctorAvailability.day_of_week == day_of_week,
            DoctorAvailability.is_available == True
        ).order_by(DoctorAvailability.start_time)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_available_days(self, doctor_id: UUID) -> List[int]:
        stmt = select(DoctorAvailability.day_of_week).where(
            DoctorAvailability.doctor_id == doctor_id,
            DoctorAvailability.is_available == True
        ).distinct().order_by(DoctorAvailability.day_of_week)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def replace_rules(self, doctor_id: UUID, rules: List[AvailabilityCreate]) -> List[DoctorAvailability]:
        # Group input rules by day
        rules_by_day = {}
        for rule in rules:
            rules_by_day.setdefault(rule.day_of_week, []).append(rule)

        new_rules = []

        for day, day_rules in rules_by_day.items():
            # 1. Delete existing rules for this day
            stmt = delete(DoctorAvailability).where(
                DoctorAvailability.doctor_id == doctor_id,
                DoctorAvailability.day_of_week == day
            )
            await self.session.execute(stmt)

            # 2. Add new rules
            for rule_data in day_rules:
                rule = DoctorAvailability(doctor_id=doctor_id, **rule_data.model_dump())
                self.session.add(rule)
                new_rules.append(rule)

        await self.session.commit()
        for rule in new_rules:
            await self.session.refresh(rule)

        return sorted(new_rules, key=lambda r: (r.day_of_week, r.start_time))

    async def get_owned_rule(self, doctor_id: UUID, rule_id: UUID) -> DoctorAvailability:
        rule = await self.session.get(DoctorAvailability, rule_id)
        if not rule or rule.doctor_id != doctor_id:
            raise HTTPException(status_code=404, detail="Availability rule not found")
        return rule

    async def update_rule(self, doctor_id: UUID, rule_id: UUID, rule_update: AvailabilityUpdate) -> DoctorAvailability:
        rule = await self.get_owned_rule(doctor_id, rule_id)

        update_data = rule_update.model_dump(exclude_unset=True)
        start_time = update_data.get("start_time", rule.start_time)
        end_time = update_data.get("end_time", rule.end_time)
        if end_time <= start_time:
            raise HTTPException(status_code=400, detail="end_time must be later than start_time")

        for key, value in update_data.items():
            setattr(rule, key, value)
        rule.updated_at = datetime.utcnow()

        self.session.add(rule)
        await self.session.commit()
        await self.session.refresh(rule)
        return rule

    async def deactivate_rule(self, doctor_id: UUID, rule_id: UUID) -> dict:
        rule = await self.get_owned_rule(doctor_id, rule_id)

        rule.is_available = False
        rule.updated_at = datetime.utcnow()
        self.session.add(rule)
        await self.session.commit()
        return {"message": "Availability deactivated successfully"}

    async def delete_rule(self, doctor_id: UUID, rule_id: UUID) -> dict:
        rule = await self.get_owned_rule(doctor_id, rule_id)
        await self.session.delete(rule)
        await self.session.commit()
        return {"message": "Availability removed"}
