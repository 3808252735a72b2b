"""
Hebrew Study Backend - Vocab Set Activation Service
====================================================

What:  Lists vocab sets and changes their `is_active` flag.
Why:   The flashcard deck is built from the words of every active set.
How:   Two policies over the same column:

    Exclusive  activate(X): afterwards X is the only active set.
        SELECT id ... ORDER BY id FOR UPDATE   (404 if X is missing, nothing written)
        UPDATE vocab_sets SET is_active = (id = X), updated_at = <now if flag changes>

    Independent  toggle(X): flips X, other sets untouched.
        UPDATE vocab_sets SET is_active = NOT is_active, updated_at = now
        WHERE id = X RETURNING is_active       (no row → 404)

Concurrency:
    activate locks every set row in id order before writing. Two concurrent
    activations queue on the first row, so the second one starts only after
    the first commits and exactly one set stays active. The UPDATE then only
    touches rows the transaction already holds.
    toggle locks a single row with its UPDATE; concurrent toggles of the same
    set each flip the committed value, so no flip is lost.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import case, desc, not_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hebrewstudy.exceptions import NotFoundError, StorageError, ValidationError
from hebrewstudy.models.vocab_set import VocabSet
from hebrewstudy.schemas.vocab_set import (
    ActivateResponse,
    ToggleActiveResponse,
    VocabSetSummary,
)

logger = logging.getLogger(__name__)


class VocabSetService:
    """Activation and listing of vocab sets."""

    async def list_sets(self, db: AsyncSession) -> List[VocabSetSummary]:
        """All sets with their active flag, newest first."""
        try:
            result = await db.execute(
                select(VocabSet).order_by(desc(VocabSet.created_at), VocabSet.id)
            )
            sets = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing vocab sets: %s", str(e), exc_info=True)
            raise StorageError(
                message="Failed to fetch vocab sets",
                context={"error_type": type(e).__name__},
            ) from e

        return [VocabSetSummary.model_validate(vocab_set) for vocab_set in sets]

    async def activate(self, db: AsyncSession, set_id: str) -> ActivateResponse:
        """
        Make set_id the single active set.

        Raises:
            NotFoundError: no such set; no row is modified
            StorageError: a statement failed (the request transaction rolls back)
        """
        now = datetime.now(timezone.utc)
        try:
            result = await db.execute(
                select(VocabSet.id).order_by(VocabSet.id).with_for_update()
            )
            if set_id not in set(result.scalars().all()):
                raise NotFoundError(resource="Vocab set", resource_id=set_id)

            target = VocabSet.id == set_id
            await db.execute(
                update(VocabSet)
                .values(
                    is_active=target,
                    updated_at=case(
                        (VocabSet.is_active == target, VocabSet.updated_at),
                        else_=now,
                    ),
                )
                .execution_options(synchronize_session="fetch")
            )
        except NotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error activating vocab set %s: %s", set_id, str(e))
            raise StorageError(
                message="Failed to activate vocab set",
                context={"set_id": set_id, "error_type": type(e).__name__},
            ) from e

        logger.info("Vocab set %s is now the active set", set_id)
        return ActivateResponse(active_set_id=set_id)

    async def toggle(self, db: AsyncSession, set_id: Optional[str]) -> ToggleActiveResponse:
        """
        Flip one set's active flag in place.

        Raises:
            ValidationError: set_id missing (no statement is issued)
            NotFoundError: no such set
            StorageError: the UPDATE failed
        """
        if not set_id:
            raise ValidationError(message="Missing setId", field="setId")

        try:
            result = await db.execute(
                update(VocabSet)
                .where(VocabSet.id == set_id)
                .values(
                    is_active=not_(VocabSet.is_active),
                    updated_at=datetime.now(timezone.utc),
                )
                .returning(VocabSet.is_active)
            )
            new_status = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error toggling vocab set %s: %s", set_id, str(e))
            raise StorageError(
                message="Failed to toggle set status",
                context={"set_id": set_id, "error_type": type(e).__name__},
            ) from e

        if new_status is None:
            raise NotFoundError(resource="Vocab set", resource_id=set_id)

        logger.info("Vocab set %s toggled to is_active=%s", set_id, new_status)
        return ToggleActiveResponse(set_id=set_id, is_active=bool(new_status))


vocab_set_service = VocabSetService()
