"""Helpers shared by the resource modules (products, memorabilia, ...)."""

from __future__ import annotations

from typing import Any, Mapping, TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError

from ..models.catalog import ListResponse

M = TypeVar("M", bound=BaseModel)


def parse_page(raw: Any, model: type[M]) -> ListResponse[M]:
    """Parse a list envelope, validating each row as *model*.

    Rows that fail validation are logged and skipped rather than failing
    the whole page.  A bare JSON list is accepted as a single page.  An
    envelope that does not validate yields a degraded page holding the
    rows that did parse.
    """
    if isinstance(raw, list):
        raw = {"rows": raw, "total": len(raw), "offset": 0}
    elif not isinstance(raw, dict):
        raw = {}

    data = dict(raw)
    rows: list[M] = []
    raw_rows = data.pop("rows", None)
    if not isinstance(raw_rows, list):
        raw_rows = []
    for item in raw_rows:
        try:
            rows.append(model.model_validate(item))
        except ValidationError as exc:
            item_id = item.get("id", "<unknown>") if isinstance(item, dict) else "<unknown>"
            logger.warning(f"Failed to parse {model.__name__} {item_id}: {exc}")
    try:
        return ListResponse[model].model_validate({**data, "rows": rows})
    except ValidationError as exc:
        logger.warning(f"Malformed {model.__name__} list envelope: {exc}")
        return ListResponse[model](
            rows=rows, total=len(rows), error=f"Malformed list response: {exc}"
        )


def dump_payload(data: BaseModel | Mapping[str, Any], partial: bool = False) -> dict[str, Any]:
    """Serialise a create/update payload for the request body.

    Create payloads drop ``None`` fields; partial (update) payloads send
    only the fields that were explicitly set.
    """
    if isinstance(data, BaseModel):
        if partial:
            return data.model_dump(mode="json", exclude_unset=True)
        return data.model_dump(mode="json", exclude_none=True)
    return dict(data)
