"""
Paging metadata derived from a listing's total match count.
"""
from __future__ import annotations

import math
from typing import Any, Dict

from pydantic import BaseModel, SerializerFunctionWrapHandler, model_serializer


class Metadata(BaseModel):
    """
    Position of a page within the full matched collection.

    All fields are zero when nothing matched; zero fields are dropped from
    the serialized form.
    """

    current_page: int = 0
    page_size: int = 0
    first_page: int = 0
    last_page: int = 0
    total_records: int = 0

    model_config = {"frozen": True}

    @model_serializer(mode="wrap")
    def _omit_zero(self, handler: SerializerFunctionWrapHandler) -> Dict[str, Any]:
        return {key: value for key, value in handler(self).items() if value != 0}


def calculate_metadata(total_records: int, page: int, page_size: int) -> Metadata:
    if total_records == 0:
        return Metadata()

    return Metadata(
        current_page=page,
        page_size=page_size,
        first_page=1,
        last_page=math.ceil(total_records / page_size),
        total_records=total_records,
    )


__all__ = ["Metadata", "calculate_metadata"]
