from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable, List, Sequence

from openpyxl.utils.datetime import from_excel

from callspend.errors import IncompleteRowError, InvalidFieldError
from callspend.models import (
    CALLER_MAX_LENGTH,
    RESULT_MAX_LENGTH,
    SERVICE_MAX_LENGTH,
    CallRecord,
)
from callspend.services.extractor import ExtractedRow

ROW_FIELDS = ("call_date", "caller", "receiver", "duration", "result", "cost", "service")
CENTS = Decimal("0.01")
DATE_FORMATS = (
    "%d.%m.%Y %H:%M:%S",
    "%d.%m.%Y %H:%M",
    "%d.%m.%Y",
    "%d/%m/%Y %H:%M:%S",
    "%d/%m/%Y",
)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_call_date(value: Any, row: int) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            converted = from_excel(value)
        except (ValueError, OverflowError) as exc:
            raise InvalidFieldError(row, "call_date", value, "not a valid spreadsheet date") from exc
        if isinstance(converted, datetime):
            return converted
        raise InvalidFieldError(row, "call_date", value, "not a valid spreadsheet date")
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            pass
        for fmt in DATE_FORMATS:
            try:
                return datetime.strptime(text, fmt)
            except ValueError:
                continue
    raise InvalidFieldError(row, "call_date", value, "expected a date")


def parse_subscriber(value: Any, row: int, field: str) -> str:
    if _is_blank(value) or isinstance(value, bool):
        raise InvalidFieldError(row, field, value, "subscriber is required")
    if isinstance(value, float) and value.is_integer():
        text = str(int(value))
    else:
        text = str(value).strip()
    if len(text) > CALLER_MAX_LENGTH:
        raise InvalidFieldError(row, field, value, f"longer than {CALLER_MAX_LENGTH} characters")
    return text


def parse_duration(value: Any, row: int) -> int:
    if _is_blank(value) or isinstance(value, bool):
        raise InvalidFieldError(row, "duration", value, "expected a whole number of minutes")
    try:
        number = Decimal(str(value).strip().replace(",", "."))
    except InvalidOperation as exc:
        raise InvalidFieldError(row, "duration", value, "expected a whole number of minutes") from exc
    if not number.is_finite() or number != number.to_integral_value():
        raise InvalidFieldError(row, "duration", value, "expected a whole number of minutes")
    if number < 0:
        raise InvalidFieldError(row, "duration", value, "must not be negative")
    return int(number)


def parse_cost(value: Any, row: int) -> Decimal:
    if _is_blank(value) or isinstance(value, bool):
        raise InvalidFieldError(row, "cost", value, "expected a decimal amount")
    try:
        amount = Decimal(str(value).strip().replace(",", "."))
    except InvalidOperation as exc:
        raise InvalidFieldError(row, "cost", value, "expected a decimal amount") from exc
    if not amount.is_finite():
        raise InvalidFieldError(row, "cost", value, "expected a decimal amount")
    if amount < 0:
        raise InvalidFieldError(row, "cost", value, "must not be negative")
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def parse_label(value: Any, row: int, field: str, max_length: int) -> str:
    if _is_blank(value):
        return ""
    text = str(value).strip()
    if len(text) > max_length:
        raise InvalidFieldError(row, field, value, f"longer than {max_length} characters")
    return text


def map_row(cells: Sequence[Any], row: int) -> CallRecord:
    """Convert one positional spreadsheet row into an unsaved CallRecord.

    Cells are ``(date, caller, receiver, duration, result, cost, service)``;
    anything after the seventh cell is ignored. Only the trailing ``service``
    cell may be missing; a shorter row is incomplete. ``upload_id`` is left
    unset for the caller to assign.
    """
    if len(cells) == len(ROW_FIELDS) - 1:
        cells = (*cells, None)
    if len(cells) < len(ROW_FIELDS):
        raise IncompleteRowError(row, len(cells), expected=len(ROW_FIELDS))
    call_date, caller, receiver, duration, result, cost, service = cells[: len(ROW_FIELDS)]
    return CallRecord(
        call_date=parse_call_date(call_date, row),
        caller=parse_subscriber(caller, row, "caller"),
        receiver=parse_subscriber(receiver, row, "receiver"),
        duration=parse_duration(duration, row),
        result=parse_label(result, row, "result", RESULT_MAX_LENGTH),
        cost=parse_cost(cost, row),
        service=parse_label(service, row, "service", SERVICE_MAX_LENGTH),
    )


def map_rows(rows: Iterable[ExtractedRow]) -> List[CallRecord]:
    return [map_row(extracted.cells, extracted.number) for extracted in rows]
