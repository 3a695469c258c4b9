import logging
from typing import Dict, Iterable, List

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.exc import SQLAlchemyError

from models import ADRReport
from schemas import MAX_ID, ADRReportCreate, ADRReportCreated, ADRReportOut, DrugStatistic
from storage import Storage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter()


def _drug_names(report: ADRReport) -> List[str]:
    names = [m.get("name", "").strip() for m in report.suspected_medications or []]
    names.append((report.suspected_medication_name or "").strip())
    seen = {}
    for name in names:
        if name and name.lower() not in seen:
            seen[name.lower()] = name
    return list(seen.values())


def summarize_reports(reports: Iterable[ADRReport]) -> List[DrugStatistic]:
    """
    Per-drug totals over the stored reports. A report counts once for every
    distinct suspected medication it names, and is serious when any
    seriousness criterion is ticked.
    """
    stats: Dict[str, DrugStatistic] = {}
    for report in reports:
        serious = bool(report.seriousness)
        for name in _drug_names(report):
            stat = stats.get(name.lower())
            if stat is None:
                stat = stats[name.lower()] = DrugStatistic(
                    drug_name=name,
                    total_reports=0,
                    serious_count=0,
                    non_serious_count=0,
                    last_reported=report.created_at,
                )
            stat.total_reports += 1
            if serious:
                stat.serious_count += 1
            else:
                stat.non_serious_count += 1
            stat.last_reported = max(stat.last_reported, report.created_at)
    return sorted(stats.values(), key=lambda s: s.drug_name.lower())


@router.post("", status_code=201, response_model=ADRReportCreated,
    summary="Submit an ADR Report",
    description="Validates and stores an adverse drug reaction report. Returns the new report id."
)
def submit_report(report: ADRReportCreate, storage: Storage = Depends(get_storage)):
    try:
        saved = storage.reports.create(**report.model_dump())
    except SQLAlchemyError:
        logger.exception("Failed to store ADR report")
        raise HTTPException(status_code=500, detail="An error occurred while submitting the report")
    logger.info("ADR report %d submitted (suspected medication: %s)", saved.id, saved.suspected_medication_name)
    return {"success": True, "message": "ADR report submitted successfully", "reportId": saved.id}


@router.get("", response_model=List[ADRReportOut], summary="List ADR Reports")
def list_reports(storage: Storage = Depends(get_storage)):
    try:
        return storage.reports.get_all()
    except SQLAlchemyError:
        logger.exception("Failed to list ADR reports")
        raise HTTPException(status_code=500, detail="An error occurred while fetching reports")


@router.get("/statistics", response_model=List[DrugStatistic],
    summary="ADR Statistics by Drug",
    description="Total, serious and non-serious report counts per suspected medication."
)
def report_statistics(storage: Storage = Depends(get_storage)):
    try:
        reports = storage.reports.get_all()
    except SQLAlchemyError:
        logger.exception("Failed to load ADR reports for statistics")
        raise HTTPException(status_code=500, detail="An error occurred while computing statistics")
    return summarize_reports(reports)


@router.get("/{report_id}", response_model=ADRReportOut, summary="Get an ADR Report")
def get_report(report_id: int = Path(..., ge=-MAX_ID, le=MAX_ID), storage: Storage = Depends(get_storage)):
    try:
        report = storage.reports.get(report_id)
    except SQLAlchemyError:
        logger.exception("Failed to load ADR report %d", report_id)
        raise HTTPException(status_code=500, detail="An error occurred while fetching the report")
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return report
