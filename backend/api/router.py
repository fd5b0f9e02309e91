from datetime import datetime, timezone

from fastapi import APIRouter

from api import applications, ats, auth, jobs

router = APIRouter(prefix="/v1")


@router.get("/health")
def health():
    return {
        "status": "ok",
        "time": datetime.now(timezone.utc).isoformat(),
    }


router.include_router(auth.router)
router.include_router(jobs.router)
router.include_router(ats.router)
router.include_router(applications.router)
