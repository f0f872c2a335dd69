import json
import logging
from typing import List, Optional

import sqlalchemy as sa

import txflow.db.models as db_models
from txflow import db
from txflow.models import CommitmentLevel, OperationType, PendingConfirmation

from .abc import ConfirmationCache

_logger = logging.getLogger(__name__)


def _to_confirmation(m: db_models.Confirmation) -> PendingConfirmation:
    return PendingConfirmation(
        signature=m.signature,
        operation_type=OperationType(m.operation_type),
        finality=CommitmentLevel(m.finality),
        status=m.status,  # type: ignore
        extras=json.loads(m.extras),
        error=m.error,
        created_at=m.watched_at,
        completed_at=m.completed_at,
    )


class DbConfirmationCache(ConfirmationCache):
    def __init__(self, max_size: int = 100) -> None:
        self.max_size = max_size

    async def save(self, confirmation: PendingConfirmation):
        async with db.session_scope() as sess:
            q = sa.select(db_models.Confirmation).where(
                db_models.Confirmation.signature == confirmation.signature
            )
            m = (await sess.scalars(q)).one_or_none()
            if m is None:
                m = db_models.Confirmation(
                    signature=confirmation.signature,
                    operation_type=int(confirmation.operation_type),
                    finality=confirmation.finality.value,
                    status=confirmation.status,
                    watched_at=confirmation.created_at,
                    completed_at=confirmation.completed_at,
                    error=confirmation.error,
                    extras=json.dumps(confirmation.extras, default=str),
                )
                sess.add(m)
            else:
                m.status = confirmation.status
                m.completed_at = confirmation.completed_at
                m.error = confirmation.error
            await sess.commit()

            count = (
                await sess.execute(sa.select(sa.func.count(db_models.Confirmation.id)))
            ).scalar_one()
            if count > self.max_size:
                q = (
                    sa.select(db_models.Confirmation.id)
                    .order_by(db_models.Confirmation.id)
                    .limit(count - self.max_size)
                )
                ids = list((await sess.scalars(q)).all())
                await sess.execute(
                    sa.delete(db_models.Confirmation).where(
                        db_models.Confirmation.id.in_(ids)
                    )
                )
                await sess.commit()
                _logger.debug(f"trimmed {len(ids)} confirmations from history")

    async def get(self, signature: str) -> Optional[PendingConfirmation]:
        async with db.session_scope() as sess:
            q = sa.select(db_models.Confirmation).where(
                db_models.Confirmation.signature == signature
            )
            m = (await sess.scalars(q)).one_or_none()
            if m is None:
                return None
            return _to_confirmation(m)

    async def load_all(self) -> List[PendingConfirmation]:
        limit = 100
        offset = 0

        all_confirmations = []
        async with db.session_scope() as sess:
            while True:
                q = (
                    sa.select(db_models.Confirmation)
                    .order_by(db_models.Confirmation.id)
                    .limit(limit)
                    .offset(offset)
                )
                confirmations = list((await sess.scalars(q)).all())
                all_confirmations.extend(confirmations)
                if len(confirmations) < limit:
                    break
                offset += len(confirmations)

        return [_to_confirmation(m) for m in all_confirmations]

    async def clear(self):
        async with db.session_scope() as sess:
            await sess.execute(sa.delete(db_models.Confirmation))
            await sess.commit()
