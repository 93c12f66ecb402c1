from typing import Dict, Iterable, Optional

from gym_office.db.base import User as UserModel
from gym_office.domain.entities import User
from gym_office.domain.interfaces import IUserReader


class UserRepository(IUserReader):
    def __init__(self, db_session):
        self.db = db_session

    def get_by_id(self, user_id: int, for_update: bool = False) -> Optional[User]:
        query = self.db.query(UserModel).filter(UserModel.id == user_id)
        if for_update:
            query = query.with_for_update().populate_existing()
        db_user = query.first()
        return self._to_domain(db_user) if db_user else None

    def get_by_ids(self, user_ids: Iterable[int]) -> Dict[int, User]:
        ids = {i for i in user_ids if i is not None}
        if not ids:
            return {}
        rows = self.db.query(UserModel).filter(UserModel.id.in_(ids)).all()
        return {row.id: self._to_domain(row) for row in rows}

    def _to_domain(self, db_user: UserModel) -> User:
        return User(
            id=db_user.id,
            email=db_user.email,
            name=db_user.name,
            role=db_user.role,
            client_plan_id=db_user.client_plan_id,
            is_active=db_user.is_active,
            created_at=db_user.created_at,
        )
