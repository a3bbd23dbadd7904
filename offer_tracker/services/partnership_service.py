"""Partnership listing, catalog sync, and the user's own partnership view."""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from offer_tracker.core.catalog import PartnershipCatalog, get_catalog
from offer_tracker.core.config import settings
from offer_tracker.db.models import Partnership, UserPartnership
from offer_tracker.schemas.partnership import (
    AvailablePartnership,
    AvailablePartnershipsResponse,
    CriterionRead,
    EnrollmentRead,
    FullPartnership,
    PartnershipRead,
    UserPartnershipResponse,
)
from offer_tracker.services import capacity_service, card_generator, enrollment_service

logger = logging.getLogger(__name__)


def list_available_partnerships(db: Session) -> AvailablePartnershipsResponse:
    """Active partnerships split into those with free slots and those that are full."""
    partnerships = db.execute(
        select(Partnership)
        .where(Partnership.is_active.is_(True))
        .order_by(Partnership.id.asc())
    ).scalars().all()

    available: list[AvailablePartnership] = []
    full: list[FullPartnership] = []
    for p in partnerships:
        if capacity_service.can_enroll(p):
            available.append(
                AvailablePartnership(
                    id=p.id,
                    name=p.name,
                    linkedin_url=p.linkedin_url,
                    company=p.company,
                    role=p.role,
                    spots_remaining=p.spots_remaining,
                    max_users=p.max_users,
                )
            )
        else:
            full.append(
                FullPartnership(
                    id=p.id,
                    name=p.name,
                    linkedin_url=p.linkedin_url,
                    company=p.company,
                    role=p.role,
                )
            )
    return AvailablePartnershipsResponse(available=available, full=full)


def resolve_enrollment_criteria(
    enrollment: UserPartnership,
    catalog: PartnershipCatalog,
) -> list[CriterionRead]:
    """Criteria of the enrollment's partnership with the user's choices applied."""
    definition = catalog.get_partnership(enrollment.partnership_id)
    if definition is None:
        return []
    return [
        CriterionRead(
            type=c.type,
            count=c.count,
            metric=c.metric,
            is_primary=c.is_primary,
            is_from_choice=c.is_from_choice,
            choice_index=c.choice_index,
        )
        for c in card_generator.resolve_criteria(definition, enrollment.selections, catalog)
    ]


def to_enrollment_read(
    enrollment: UserPartnership,
    catalog: PartnershipCatalog | None = None,
    *,
    include_criteria: bool = False,
) -> EnrollmentRead:
    """Convert an enrollment row to its response schema."""
    criteria: list[CriterionRead] = []
    if include_criteria:
        criteria = resolve_enrollment_criteria(enrollment, catalog or get_catalog())
    return EnrollmentRead(
        id=enrollment.id,
        user_id=enrollment.user_id,
        partnership_id=enrollment.partnership_id,
        partnership_name=enrollment.partnership.name,
        status=enrollment.status,
        selections=dict(enrollment.selections or {}),
        started_at=enrollment.started_at,
        completed_at=enrollment.completed_at,
        partnership=PartnershipRead.model_validate(enrollment.partnership),
        criteria=criteria,
    )


def get_user_partnership(
    db: Session,
    user_id: UUID,
    catalog: PartnershipCatalog | None = None,
) -> UserPartnershipResponse:
    """The user's active enrollment (with resolved criteria) and completed history."""
    catalog = catalog or get_catalog()
    active = enrollment_service.get_active_enrollment(db, user_id)
    completed = enrollment_service.list_completed_enrollments(db, user_id)

    return UserPartnershipResponse(
        active=to_enrollment_read(active, catalog, include_criteria=True) if active else None,
        completed=[to_enrollment_read(e) for e in completed],
    )


def sync_catalog(
    db: Session,
    catalog: PartnershipCatalog | None = None,
    default_max_users: int | None = None,
) -> tuple[int, int, int]:
    """
    Upsert catalog partnerships into the database.

    Existing rows get their descriptive fields refreshed and are marked
    active again; max_users and active_user_count are left alone so running
    the sync never disturbs the capacity ledger. Rows whose id is no longer
    in the catalog are deactivated, never deleted, because enrollments
    reference them. Returns (created, updated, deactivated).
    """
    catalog = catalog or get_catalog()
    default_max_users = default_max_users or settings.DEFAULT_MAX_USERS
    created = updated = deactivated = 0

    for definition in catalog.partnerships.values():
        row = db.get(Partnership, definition.id)
        if row is None:
            db.add(
                Partnership(
                    id=definition.id,
                    name=definition.name,
                    company=definition.company,
                    role=definition.role,
                    linkedin_url=definition.linkedin_url,
                    max_users=definition.max_users or default_max_users,
                    active_user_count=0,
                    is_active=True,
                )
            )
            created += 1
        else:
            row.name = definition.name
            row.company = definition.company
            row.role = definition.role
            row.linkedin_url = definition.linkedin_url
            row.is_active = True
            updated += 1

    dropped = db.execute(
        select(Partnership).where(
            Partnership.id.not_in(list(catalog.partnerships)),
            Partnership.is_active.is_(True),
        )
    ).scalars().all()
    for row in dropped:
        row.is_active = False
        deactivated += 1

    db.commit()
    logger.info(
        f"Partnership catalog synced: {created} created, {updated} updated, "
        f"{deactivated} deactivated"
    )
    return created, updated, deactivated
