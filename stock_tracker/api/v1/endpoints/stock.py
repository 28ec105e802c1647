"""
Stock endpoints (every route is scoped to the authenticated caller):
  POST   /stocks/add                   – Record a weekly stock receipt
  GET    /stocks/                      – List the caller's stock records
  PUT    /stocks/update-sales/{id}     – Set the sold quantity of a record
  GET    /stocks/filter                – Records of a year, by week or week range
  GET    /stocks/report/pdf            – Filtered records as a PDF report
"""
from typing import Optional
import logging

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import StreamingResponse

from stock_tracker.core.dependencies import db_dependency, get_current_user_id
from stock_tracker.schemas.stock import (
    MAX_WEEK,
    StockCreate,
    StockResponse,
    StockSalesUpdate,
)
from stock_tracker.services.pdf_service import PDFService, describe_period
from stock_tracker.services.stock_service import StockService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stocks", tags=["Stocks"])


def week_query(alias: str, description: str):
    return Query(None, alias=alias, ge=1, le=MAX_WEEK, description=description)


@router.post(
    "/add",
    response_model=StockResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a stock record",
)
def add_stock(
    data: StockCreate,
    conn=Depends(db_dependency),
    user_id: int = Depends(get_current_user_id),
):
    """
    Record what was received for an item in a given week.

    The record is owned by the caller and starts with `quantitySold = 0`;
    use **PUT /stocks/update-sales/{id}** to record sales.
    """
    logger.info("Adding stock for user id=%s", user_id)
    service = StockService(conn)
    return service.add_stock(data, owner_id=user_id)


@router.get(
    "/",
    response_model=list[StockResponse],
    summary="List the caller's stock records",
)
def list_stocks(
    conn=Depends(db_dependency),
    user_id: int = Depends(get_current_user_id),
):
    """Return every record owned by the caller. Display order is up to the client."""
    logger.info("Listing stocks for user id=%s", user_id)
    service = StockService(conn)
    return service.list_stocks(user_id)


@router.put(
    "/update-sales/{stock_id}",
    response_model=StockResponse,
    summary="Update the sold quantity of a stock record",
)
def update_sales(
    stock_id: int,
    data: StockSalesUpdate,
    conn=Depends(db_dependency),
    user_id: int = Depends(get_current_user_id),
):
    """
    Overwrite `quantitySold` for one of the caller's records.

    - Unknown id, or a record owned by someone else → **404**.
    - `quantitySold` above `quantityReceived` → **400**, nothing is changed.
    """
    logger.info("Updating sales stock id=%s user id=%s", stock_id, user_id)
    service = StockService(conn)
    return service.update_sales(stock_id, data, owner_id=user_id)


@router.get(
    "/filter",
    response_model=list[StockResponse],
    summary="Filter stock records by week or week range",
)
def filter_stocks(
    year: int = Query(..., ge=1, description="Calendar year"),
    week: Optional[int] = week_query("week", "Single week of the year"),
    start_week: Optional[int] = week_query("startWeek", "First week of the range"),
    end_week: Optional[int] = week_query("endWeek", "Last week of the range"),
    conn=Depends(db_dependency),
    user_id: int = Depends(get_current_user_id),
):
    """
    Return the caller's records for `year`, ascending by week.

    When both `startWeek` and `endWeek` are given the inclusive range is used
    and `week` is ignored. Without either, the whole year is returned.
    """
    logger.info("Filtering stocks for user id=%s", user_id)
    service = StockService(conn)
    return service.filter_stocks(
        user_id,
        year,
        week=week,
        start_week=start_week,
        end_week=end_week,
    )


@router.get(
    "/report/pdf",
    summary="Export filtered stock records as PDF",
    response_class=StreamingResponse,
)
def export_stock_pdf(
    year: int = Query(..., ge=1, description="Calendar year"),
    week: Optional[int] = week_query("week", "Single week of the year"),
    start_week: Optional[int] = week_query("startWeek", "First week of the range"),
    end_week: Optional[int] = week_query("endWeek", "Last week of the range"),
    conn=Depends(db_dependency),
    user_id: int = Depends(get_current_user_id),
):
    """Same selection rules as **GET /stocks/filter**, rendered as a PDF table with totals."""
    logger.info("Exporting stock PDF for user id=%s year=%s", user_id, year)
    service = StockService(conn)
    records = service.filter_stocks(
        user_id,
        year,
        week=week,
        start_week=start_week,
        end_week=end_week,
    )

    period = describe_period(year, week, start_week, end_week)
    pdf_buffer = PDFService().generate_stock_report(records, period)
    filename = f"stock_report_{period.replace(', ', '_').replace(' ', '_').lower()}.pdf"

    return StreamingResponse(
        pdf_buffer,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
