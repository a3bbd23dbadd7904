"""Partnership capacity ledger.

The counter is adjusted with in-database arithmetic inside the caller's
transaction, after the partnership row has been locked, so two concurrent
enrollments cannot both pass the capacity check.
"""

from sqlalchemy import case, select, update
from sqlalchemy.orm import Session

from offer_tracker.db.models import Partnership


def can_enroll(partnership: Partnership) -> bool:
    """True while the partnership has a free slot."""
    return partnership.active_user_count < partnership.max_users


def lock_partnership(db: Session, partnership_id: int) -> Partnership | None:
    """Load a partnership with a row lock held until the transaction ends."""
    return db.execute(
        select(Partnership)
        .where(Partnership.id == partnership_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()


def lock_partnerships(db: Session, partnership_ids: list[int]) -> dict[int, Partnership]:
    """
    Lock several partnership rows.

    Rows are locked in ascending id order so two switches touching the same
    pair of partnerships cannot deadlock.
    """
    locked: dict[int, Partnership] = {}
    for partnership_id in sorted(set(partnership_ids)):
        partnership = lock_partnership(db, partnership_id)
        if partnership is not None:
            locked[partnership_id] = partnership
    return locked


def increment_active(db: Session, partnership_id: int) -> None:
    """Take one slot. Paired with a row entering the active status."""
    db.execute(
        update(Partnership)
        .where(Partnership.id == partnership_id)
        .values(active_user_count=Partnership.active_user_count + 1)
        .execution_options(synchronize_session="fetch")
    )


def decrement_active(db: Session, partnership_id: int) -> None:
    """Free one slot. Paired only with an active -> abandoned transition."""
    db.execute(
        update(Partnership)
        .where(Partnership.id == partnership_id)
        .values(
            active_user_count=case(
                (Partnership.active_user_count > 0, Partnership.active_user_count - 1),
                else_=0,
            )
        )
        .execution_options(synchronize_session="fetch")
    )
