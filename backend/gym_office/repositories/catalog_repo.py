"""Read-only lookups for client plans and equipment display data."""

from typing import Dict, Iterable, Optional

from gym_office.db.base import ClientPlan as ClientPlanModel
from gym_office.db.base import Equipment as EquipmentModel
from gym_office.domain.entities import ClientPlan, Equipment
from gym_office.domain.interfaces import IClientPlanReader, IEquipmentReader


class ClientPlanRepository(IClientPlanReader):
    def __init__(self, db_session):
        self.db = db_session

    def get_by_id(self, plan_id: int) -> Optional[ClientPlan]:
        db_plan = self.db.get(ClientPlanModel, plan_id)
        return self._to_domain(db_plan) if db_plan else None

    def _to_domain(self, db_plan: ClientPlanModel) -> ClientPlan:
        return ClientPlan(
            id=db_plan.id,
            name=db_plan.name,
            description=db_plan.description,
            monthly_price=db_plan.monthly_price,
            max_equipment_access=db_plan.max_equipment_access,
            has_maintenance_support=db_plan.has_maintenance_support,
            has_priority_support=db_plan.has_priority_support,
        )


class EquipmentRepository(IEquipmentReader):
    def __init__(self, db_session):
        self.db = db_session

    def get_by_ids(self, equipment_ids: Iterable[int]) -> Dict[int, Equipment]:
        ids = {i for i in equipment_ids if i is not None}
        if not ids:
            return {}
        rows = self.db.query(EquipmentModel).filter(EquipmentModel.id.in_(ids)).all()
        return {
            row.id: Equipment(id=row.id, name=row.name, type=row.type, image=row.image)
            for row in rows
        }
