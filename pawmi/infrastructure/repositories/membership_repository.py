"""Repository de membros de conta (account_members)."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from pawmi.domain.sqlmodels import AccountMember


class MembershipRepository:
    """Consultas de vínculo usuário ↔ conta."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def first_accepted(self, user_id: str) -> Optional[AccountMember]:
        """
        Membership aceita mais antiga do usuário.

        Desempate determinístico quando o usuário pertence a várias contas
        e nenhuma "conta ativa" foi escolhida explicitamente.
        """
        stmt = (
            select(AccountMember)
            .where(AccountMember.user_id == user_id)
            .where(AccountMember.status == "accepted")
            .order_by(AccountMember.created_at.asc(), AccountMember.id.asc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()
