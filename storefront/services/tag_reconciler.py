"""Service for synchronising a product's tag associations."""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.exceptions import UnknownTagError
from storefront.models import ProductTag, Tag

logger = logging.getLogger(__name__)


def parse_tag_ids(raw: str | Sequence[str | int] | None) -> list[int]:
    """
    Parse a tag submission into an ordered list of unique tag ids.

    Accepts a comma-separated string ("2, 5") or a sequence of tokens.
    Empty tokens are dropped; duplicates keep their first position.

    Raises:
        ValueError: If a token is not an integer
    """
    if raw is None:
        return []
    tokens = raw.split(",") if isinstance(raw, str) else raw

    tag_ids: list[int] = []
    for token in tokens:
        token = str(token).strip()
        if not token:
            continue
        tag_id = int(token)
        if tag_id not in tag_ids:
            tag_ids.append(tag_id)
    return tag_ids


@dataclass(frozen=True)
class ReconcilePlan:
    """Detach/attach operations moving current tags to a target set."""

    to_detach: list[int]
    to_attach: list[int]


@dataclass
class ReconcileResult:
    """Outcome of a reconcile call."""

    detached: list[int] = field(default_factory=list)
    attached: list[int] = field(default_factory=list)  # newly inserted only
    tag_ids: list[int] = field(default_factory=list)


def plan_reconciliation(current: Iterable[int], target: Sequence[int]) -> ReconcilePlan:
    """Compute the plan: detach current - target, attach the whole target."""
    target_set = set(target)
    return ReconcilePlan(
        to_detach=sorted(set(current) - target_set),
        to_attach=list(target),
    )


class TagReconciler:
    """Applies attach/detach operations on the product_tags table.

    Every method flushes but never commits; the caller owns the transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def current_tag_ids(self, product_id: int) -> set[int]:
        """Read the tag ids currently associated with a product."""
        result = await self.db.execute(
            select(ProductTag.tag_id).where(ProductTag.product_id == product_id)
        )
        return set(result.scalars().all())

    async def detach(self, product_id: int, tag_ids: Iterable[int]) -> int:
        """Remove associations; returns the number of rows deleted."""
        tag_ids = list(tag_ids)
        if not tag_ids:
            return 0

        result = await self.db.execute(
            delete(ProductTag).where(
                ProductTag.product_id == product_id,
                ProductTag.tag_id.in_(tag_ids),
            )
        )
        return result.rowcount or 0

    async def attach(self, product_id: int, tag_ids: Iterable[int]) -> list[int]:
        """
        Add associations, skipping pairs that already exist.

        Returns:
            The tag ids that were newly inserted

        Raises:
            UnknownTagError: If any tag id has no Tag row
        """
        tag_ids = list(dict.fromkeys(tag_ids))
        if not tag_ids:
            return []

        known_result = await self.db.execute(select(Tag.id).where(Tag.id.in_(tag_ids)))
        known = set(known_result.scalars().all())
        missing = [tid for tid in tag_ids if tid not in known]
        if missing:
            raise UnknownTagError(missing)

        existing = await self.current_tag_ids(product_id)
        added = [tid for tid in tag_ids if tid not in existing]
        for tag_id in added:
            self.db.add(ProductTag(product_id=product_id, tag_id=tag_id))

        await self.db.flush()
        return added

    async def reconcile(
        self, product_id: int, submitted: str | Sequence[str | int] | None
    ) -> ReconcileResult:
        """Make the product's tag set equal to the submitted one."""
        target = parse_tag_ids(submitted)

        # Read inside the caller's transaction, right before diffing
        current = await self.current_tag_ids(product_id)
        plan = plan_reconciliation(current, target)

        await self.detach(product_id, plan.to_detach)
        attached = await self.attach(product_id, plan.to_attach)

        logger.info(
            f"Reconciled tags for product {product_id}: "
            f"detached={plan.to_detach} attached={attached}"
        )
        return ReconcileResult(detached=plan.to_detach, attached=attached, tag_ids=target)
