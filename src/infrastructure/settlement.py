"""
Settlement rail.

The transition engine moves settled earnings through a
``SettlementAdapter``.  Adapters receive the engine's open session and
must do all of their work inside it: if any later step of the operation
fails, the engine's rollback undoes the transfers as well.

``LedgerSettlementAdapter`` keeps account balances in the same database
as the ledger, plus an append-only journal of every non-zero transfer.
"""

from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from .models import AccountBalanceModel, SettlementTransferModel
from src.domain.errors import SettlementError

logger = logging.getLogger(__name__)


class SettlementAdapter(Protocol):
    async def transfer(
        self, session: AsyncSession, amount: int, sender: str, recipient: str
    ) -> None:
        """Move *amount* from *sender* to *recipient* or raise SettlementError."""
        ...

    async def deposit(self, session: AsyncSession, account: str, amount: int) -> int: ...

    async def balance(self, session: AsyncSession, account: str) -> int: ...


class LedgerSettlementAdapter:
    async def transfer(
        self, session: AsyncSession, amount: int, sender: str, recipient: str
    ) -> None:
        if amount < 0:
            raise SettlementError(f"Negative transfer amount {amount}")
        if amount == 0:
            return
        if sender == recipient:
            raise SettlementError("Sender and recipient are the same account")

        source = await session.get(
            AccountBalanceModel, sender, with_for_update=True
        )
        available = source.balance if source else 0
        if available < amount:
            raise SettlementError(
                f"Insufficient balance in {sender}: {available} < {amount}"
            )

        target = await self._account_for_update(session, recipient)
        source.balance -= amount
        target.balance += amount
        session.add(
            SettlementTransferModel(sender=sender, recipient=recipient, amount=amount)
        )
        await session.flush()
        logger.debug("Transferred %d from %s to %s", amount, sender, recipient)

    async def deposit(self, session: AsyncSession, account: str, amount: int) -> int:
        """Credit *account* from outside the ledger.  Returns the new balance."""
        if amount <= 0:
            raise SettlementError(f"Deposit amount must be positive, got {amount}")
        row = await self._account_for_update(session, account)
        row.balance += amount
        await session.flush()
        return row.balance

    async def balance(self, session: AsyncSession, account: str) -> int:
        row = await session.get(AccountBalanceModel, account)
        return row.balance if row else 0

    @staticmethod
    async def _account_for_update(
        session: AsyncSession, account: str
    ) -> AccountBalanceModel:
        row = await session.get(AccountBalanceModel, account, with_for_update=True)
        if row is None:
            row = AccountBalanceModel(account=account, balance=0)
            session.add(row)
        return row
