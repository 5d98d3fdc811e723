import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from roomwise.api.deps import get_scheduling_store
from roomwise.core.exceptions import AppError
from roomwise.schemas.conflict import ConflictCheckRequest, ConflictVerdict
from roomwise.services.conflict_service import ConflictValidator, fail_closed_payload
from roomwise.services.store import SchedulingStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/check", response_model=ConflictVerdict, response_model_by_alias=True)
def check_conflicts(
    payload: ConflictCheckRequest,
    store: SchedulingStore = Depends(get_scheduling_store),
):
    try:
        return ConflictValidator(store).check(payload)
    except AppError as exc:
        logger.info("Conflict check rejected with %s: %s", exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content=fail_closed_payload(exc))
