# src/alchemist/dataloader/rows.py
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

import pandas as pd
from pydantic import ValidationError

from alchemist.errors import DataError
from alchemist.normalizers.fields import is_blank
from alchemist.schemas.models import RECORD_TYPES, DatasetKind, _RecordModel

logger = logging.getLogger(__name__)


def resolve_kind(kind: DatasetKind | str, source: str) -> DatasetKind:
    """DatasetKind for `kind`; an unknown name is a DataError raised on behalf of `source`."""
    try:
        return DatasetKind(kind)
    except ValueError as e:
        raise DataError(
            f"Unknown dataset kind: {kind!r}",
            source=source,
            suggested_action="Use one of: clients, workers, tasks.",
        ) from e


def coerce_rows(kind: DatasetKind | str, rows: Any) -> tuple[_RecordModel, ...]:
    """
    @brief
    Turn a host-supplied row collection into an immutable tuple of records.

    @details
    Accepts a pandas DataFrame, or any iterable whose items are mappings
    (column -> cell) or records of the matching dataset type. Rows without
    a row handle get their position as `id`. The result is detached from
    the caller's containers, so later host-side mutation cannot leak into
    a running validation pass.

    Plain strings, bytes and single mappings are rejected: iterating them
    would yield characters or column names, not rows.

    @params
        kind : DatasetKind | str
            Dataset the rows belong to.
        rows : Any
            Row collection from the host.

    @returns
        Tuple of ClientRecord / WorkerRecord / TaskRecord.

    @raises
        DataError
            If `kind` is unknown, `rows` is not a row collection, or an item
            is neither a mapping nor a record of the right type.
    """
    # (1) Resolve dataset kind
    dataset = resolve_kind(kind, source="rows.coerce_rows")
    record_type = RECORD_TYPES[dataset]

    # (2) DataFrames become plain dict rows
    if isinstance(rows, pd.DataFrame):
        rows = rows.to_dict(orient="records")

    # (3) Reject containers that iterate into something other than rows
    if rows is None or isinstance(rows, (str, bytes, Mapping)) or not isinstance(rows, Iterable):
        raise DataError(
            f"{dataset.value} must be a collection of rows, got {type(rows).__name__}",
            source="rows.coerce_rows",
            suggested_action="Pass a list of dicts, a list of records or a pandas DataFrame.",
        )

    # (4) Build one record per row
    records: list[_RecordModel] = []
    for index, row in enumerate(rows):
        if isinstance(row, record_type):
            record = row if row.id is not None else row.model_copy(update={"id": index})
        elif isinstance(row, _RecordModel):
            raise DataError(
                f"{dataset.value} row {index + 1} is a {type(row).__name__}",
                source="rows.coerce_rows",
                suggested_action=f"Pass {record_type.__name__} rows for {dataset.value}.",
            )
        elif isinstance(row, Mapping):
            data = {str(k): v for k, v in row.items()}
            if is_blank(data.get("id")):
                data["id"] = index
            try:
                record = record_type.model_validate(data)
            except ValidationError as e:
                raise DataError(
                    f"{dataset.value} row {index + 1} has an unusable row handle: {e}",
                    source="rows.coerce_rows",
                    suggested_action="Row handles ('id') must be integers or strings.",
                ) from e
        else:
            raise DataError(
                f"{dataset.value} row {index + 1} is not a mapping: {type(row).__name__}",
                source="rows.coerce_rows",
                suggested_action="Each row must map column names to cell values.",
            )
        records.append(record)

    logger.debug("Coerced %d %s row(s)", len(records), dataset.value)
    return tuple(records)


__all__ = ["coerce_rows", "resolve_kind"]
