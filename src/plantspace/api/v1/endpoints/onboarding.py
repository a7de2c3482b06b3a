# src/plantspace/api/v1/endpoints/onboarding.py
"""First-run onboarding state."""

from datetime import timedelta, timezone
from typing import Any

from fastapi import APIRouter

from plantspace.api.v1.dependencies import CurrentUserDep, SessionDep
from plantspace.core.settings import settings
from plantspace.db.time import utcnow

router = APIRouter(prefix="/onboarding", tags=["onboarding"])


@router.post("/complete")
async def complete_onboarding(current_user: CurrentUserDep, db: SessionDep) -> dict[str, Any]:
    now = utcnow()
    current_user.has_completed_onboarding = True
    current_user.onboarding_completed_at = now
    db.commit()
    return {
        "message": "Onboarding completed successfully! Welcome to PlantSpace!",
        "completed_at": now.isoformat(),
    }


@router.post("/reset")
async def reset_onboarding(current_user: CurrentUserDep, db: SessionDep) -> dict[str, Any]:
    current_user.has_completed_onboarding = False
    current_user.onboarding_completed_at = None
    db.commit()
    return {"message": "Onboarding status reset successfully", "reset_at": utcnow().isoformat()}


@router.get("/status")
async def onboarding_status(current_user: CurrentUserDep) -> dict[str, Any]:
    """Report onboarding progress; accounts younger than the new-user window count as new."""
    created_at = current_user.created_at
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    is_new_user = utcnow() - created_at < timedelta(hours=settings.new_user_window_hours)

    completed_at = current_user.onboarding_completed_at
    return {
        "has_completed_onboarding": current_user.has_completed_onboarding,
        "onboarding_completed_at": completed_at.isoformat() if completed_at else None,
        "is_new_user": is_new_user,
        "should_show_onboarding": not current_user.has_completed_onboarding,
    }
