from __future__ import annotations
from sqlalchemy import select, func
from sqlalchemy.orm import sessionmaker
from customer_sync.models.tables import Account


class AccountStore:
    def __init__(self, session_factory: sessionmaker):
        self._sessions = session_factory

    def count_with_mailgun(self) -> int:
        with self._sessions() as session:
            stmt = select(func.count()).select_from(Account).where(Account.mailgun_api_key.is_not(None))
            return session.execute(stmt).scalar_one()

    def find_with_mailgun(self, offset: int, limit: int) -> list[Account]:
        with self._sessions() as session:
            stmt = (
                select(Account)
                .where(Account.mailgun_api_key.is_not(None))
                .order_by(Account.id)
                .offset(offset)
                .limit(limit)
            )
            return list(session.execute(stmt).scalars().all())
