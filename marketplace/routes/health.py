from fastapi import APIRouter, Depends
from sqlalchemy import text

from marketplace.database import get_db
from marketplace.exceptions import StorageUnavailable
from marketplace.services.db_service import DatabaseService
from marketplace.utils.clock import utc_now

router = APIRouter()

@router.get("/check")
def health_check(db: DatabaseService = Depends(get_db)):
    db_status = "ok"

    try:
        # simple DB ping, single attempt
        db.execute(text("SELECT 1"), max_attempts=1)
    except StorageUnavailable:
        db_status = "failed"

    return {
        "status": "ok",
        "database": db_status,
        "timestamp": utc_now().isoformat()
    }
