from datetime import date

from fastapi import APIRouter, Depends, Query

from roomwise.api.deps import get_scheduling_store
from roomwise.core.config import get_settings
from roomwise.schemas.utilization import FilterOptionsOut, UtilizationReport
from roomwise.services.store import SchedulingStore
from roomwise.services.utilization_service import UtilizationAnalyzer, build_usage_filters

router = APIRouter()

settings = get_settings()


@router.get("/report", response_model=UtilizationReport, response_model_by_alias=True)
def utilization_report(
    period: str | None = Query(default=None),
    building: str | None = Query(default=None),
    floor: int | None = Query(default=None),
    department: str | None = Query(default=None),
    capacity_band: str | None = Query(default=None, alias="capacityBand"),
    semester: int | None = Query(default=None),
    academic_year: str | None = Query(default=None, alias="academicYear"),
    store: SchedulingStore = Depends(get_scheduling_store),
) -> UtilizationReport:
    filters = build_usage_filters(
        building=building,
        floor=floor,
        department=department,
        capacity_band=capacity_band,
        semester=semester,
        academic_year=academic_year,
    )
    return UtilizationAnalyzer(store).build_report(
        period or settings.default_report_period,
        filters,
        today=date.today(),
    )


@router.get("/filters", response_model=FilterOptionsOut, response_model_by_alias=True)
def utilization_filters(store: SchedulingStore = Depends(get_scheduling_store)) -> FilterOptionsOut:
    return UtilizationAnalyzer(store).filter_options()
