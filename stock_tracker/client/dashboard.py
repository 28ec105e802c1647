"""
Headless stock dashboard.

Holds the records shown in the stock table and drives the edit workflow as
an explicit state machine::

    SIGNED_OUT   no token; nothing is fetched
    VIEWING      read-only table
    EDITING      a Draft holds the working copy of every displayed row
    SAVING       update-sales requests are in flight
    ERROR        a save failed; the Draft is kept so nothing typed is lost

The Draft only exists while EDITING, SAVING or ERROR and is dropped on
cancel or after a successful save. The add-row form is independent of the
edit states.
"""
import copy
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Callable, Optional

from stock_tracker.client.api_client import ApiError, StockApiClient
from stock_tracker.client.columns import (
    COLUMNS,
    NEW_ROW_FIELDS,
    column_for,
    parse_timestamp,
)
from stock_tracker.core.config import settings
from stock_tracker.core.weeks import current_week

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "Please fill in all required fields."
SAVE_FAILED_MESSAGE = "Failed to update stock"
ADD_FAILED_MESSAGE = "Failed to add stock"
SALES_FIELD = "quantitySold"


class DashboardState(str, Enum):
    SIGNED_OUT = "signed_out"
    VIEWING = "viewing"
    EDITING = "editing"
    SAVING = "saving"
    ERROR = "error"


DRAFT_STATES = {DashboardState.EDITING, DashboardState.SAVING, DashboardState.ERROR}


class DashboardStateError(RuntimeError):
    """An action was requested in a state that does not allow it."""


@dataclass
class Draft:
    """Working copy of the displayed rows, keyed by record id."""

    originals: dict[int, dict]
    rows: dict[int, dict] = field(default_factory=dict)

    @classmethod
    def snapshot(cls, records: list[dict]) -> "Draft":
        originals = {r["id"]: copy.deepcopy(r) for r in records}
        return cls(originals=originals, rows=copy.deepcopy(originals))

    def set(self, stock_id: int, field_name: str, value) -> None:
        if stock_id not in self.rows:
            raise ValueError(f"Stock id={stock_id} is not part of the draft")
        self.rows[stock_id][field_name] = value

    def edited_ids(self) -> list[int]:
        return [
            stock_id
            for stock_id, row in self.rows.items()
            if row != self.originals[stock_id]
        ]

    def sales_updates(self) -> list[tuple[int, int]]:
        """``(id, quantitySold)`` for every row whose sold quantity changed."""
        parse = column_for(SALES_FIELD).parse
        updates = []
        for stock_id in self.edited_ids():
            row = self.rows[stock_id]
            if row[SALES_FIELD] == self.originals[stock_id][SALES_FIELD]:
                continue
            try:
                updates.append((stock_id, parse(row[SALES_FIELD])))
            except (TypeError, ValueError) as e:
                item = row.get("itemName", stock_id)
                raise ValueError(f"Invalid quantity sold for {item}: {e}") from e
        return updates

    def unsent_labels(self) -> list[str]:
        """Labels of edited columns that update-sales does not carry."""
        changed = {
            name
            for stock_id in self.edited_ids()
            for name, value in self.rows[stock_id].items()
            if name != SALES_FIELD and value != self.originals[stock_id].get(name)
        }
        return [column.label for column in COLUMNS if column.field in changed]


def _log_alert(message: str) -> None:
    logger.warning("ALERT | %s", message)


def _saved_message(updated: bool, unsent: list[str]) -> Optional[str]:
    parts = []
    if updated:
        parts.append("Stocks updated")
    if unsent:
        parts.append(
            f"Changes to {', '.join(unsent)} were not saved; "
            f"only {column_for(SALES_FIELD).label} can be updated."
        )
    return ". ".join(parts) or None


class StockDashboard:
    def __init__(
        self,
        api: StockApiClient,
        notify: Optional[Callable[[str], None]] = None,
        today: Callable[[], date] = date.today,
        max_workers: Optional[int] = None,
    ) -> None:
        self.api = api
        self.notify = notify or _log_alert
        self._today = today
        self._max_workers = max_workers or settings.CLIENT_MAX_WORKERS
        self.state = DashboardState.SIGNED_OUT
        self.records: list[dict] = []
        self.new_row: Optional[dict] = None
        self._draft: Optional[Draft] = None

    @property
    def draft(self) -> Optional[Draft]:
        return self._draft if self.state in DRAFT_STATES else None

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Fetch the caller's records, newest first. Refused while a draft is open."""
        if self.state in DRAFT_STATES:
            raise DashboardStateError(
                f"Cannot reload while {self.state.value}; save or cancel first"
            )
        if not self.api.token:
            self._sign_out()
            return
        try:
            records = self.api.list_stocks()
        except ApiError as e:
            logger.error("Error fetching stocks: %s", e.message)
            if e.is_unauthorized:
                self.api.logout()
                self._sign_out()
                self.notify(e.message)
            return
        self.records = sorted(
            records, key=lambda r: parse_timestamp(r["createdAt"]), reverse=True
        )
        self._draft = None
        self.state = DashboardState.VIEWING

    def _sign_out(self) -> None:
        self.records = []
        self.new_row = None
        self._draft = None
        self.state = DashboardState.SIGNED_OUT

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def enter_edit(self) -> None:
        self._require(DashboardState.VIEWING)
        self._draft = Draft.snapshot(self.records)
        self.state = DashboardState.EDITING

    def edit_field(self, stock_id: int, field_name: str, value) -> None:
        """Change one cell of the working copy; the server is not contacted."""
        self._require(DashboardState.EDITING, DashboardState.ERROR)
        if not column_for(field_name).editable:
            raise ValueError(f"{field_name} cannot be edited")
        self._draft.set(stock_id, field_name, value)
        self.state = DashboardState.EDITING

    def cancel(self) -> None:
        self._require(DashboardState.EDITING, DashboardState.ERROR)
        self._draft = None
        self.state = DashboardState.VIEWING

    def save(self) -> bool:
        """
        Send one update-sales request per edited row, all at once.

        Rows are independent: when some requests fail the others stay
        applied, the draft is kept and a single alert is raised.
        """
        self._require(DashboardState.EDITING, DashboardState.ERROR)
        try:
            updates = self._draft.sales_updates()
        except ValueError as e:
            self.state = DashboardState.ERROR
            self.notify(str(e))
            return False

        unsent = self._draft.unsent_labels()

        self.state = DashboardState.SAVING
        try:
            failures = self._send_updates(updates)
        except Exception:
            logger.exception("Unexpected error while saving stock updates")
            self.state = DashboardState.ERROR
            self.notify(SAVE_FAILED_MESSAGE)
            raise
        if failures:
            self.state = DashboardState.ERROR
            self.notify(SAVE_FAILED_MESSAGE)
            return False

        self._draft = None
        self.state = DashboardState.VIEWING
        self.load()
        message = _saved_message(bool(updates), unsent)
        if message:
            self.notify(message)
        return True

    def _send_updates(self, updates: list[tuple[int, int]]) -> list[ApiError]:
        if not updates:
            return []
        workers = min(self._max_workers, len(updates))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [
                pool.submit(self.api.update_sales, stock_id, quantity_sold)
                for stock_id, quantity_sold in updates
            ]
        failures = []
        for (stock_id, _), future in zip(updates, futures):
            try:
                future.result()
            except ApiError as e:
                logger.error("Error updating stock id=%s: %s", stock_id, e.message)
                failures.append(e)
        return failures

    # ------------------------------------------------------------------
    # Add row
    # ------------------------------------------------------------------

    def open_new_row(self) -> None:
        if self.state == DashboardState.SIGNED_OUT:
            raise DashboardStateError("Sign in before adding stock")
        self.new_row = {name: "" for name in NEW_ROW_FIELDS}

    def edit_new_row(self, field_name: str, value) -> None:
        if self.new_row is None:
            raise DashboardStateError("No new row is open")
        if field_name not in NEW_ROW_FIELDS:
            raise ValueError(f"{field_name} is not part of the new row")
        self.new_row[field_name] = value

    def cancel_new_row(self) -> None:
        self.new_row = None

    def submit_new_row(self) -> Optional[dict]:
        """Create the record and put it at the top; the row stays open on failure."""
        if self.new_row is None:
            raise DashboardStateError("No new row is open")
        if any(str(self.new_row.get(name, "")).strip() == "" for name in NEW_ROW_FIELDS):
            self.notify(REQUIRED_FIELDS_MESSAGE)
            return None

        try:
            payload = {
                name: column_for(name).parse(self.new_row[name])
                for name in NEW_ROW_FIELDS
            }
        except (TypeError, ValueError) as e:
            self.notify(f"{ADD_FAILED_MESSAGE}: {e}")
            return None
        payload["week"], payload["year"] = current_week(self._today())

        try:
            created = self.api.add_stock(payload)
        except ApiError as e:
            logger.error("Error adding stock: %s", e.message)
            self.notify(ADD_FAILED_MESSAGE)
            return None

        self.records.insert(0, created)
        self.new_row = None
        self.notify("New stock added successfully!")
        return created

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def table(self) -> tuple[list[str], list[list[str]]]:
        """Header labels and display rows; draft values show while editing."""
        headers = [column.label for column in COLUMNS]
        draft = self.draft
        rows = []
        for record in self.records:
            source = record
            if draft is not None and record["id"] in draft.rows:
                source = draft.rows[record["id"]]
            rows.append([column.display(source.get(column.field)) for column in COLUMNS])
        return headers, rows

    def _require(self, *states: DashboardState) -> None:
        if self.state not in states:
            allowed = ", ".join(s.value for s in states)
            raise DashboardStateError(
                f"Action not allowed while {self.state.value} (needs {allowed})"
            )
