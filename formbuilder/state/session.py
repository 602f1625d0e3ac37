"""In-memory session state for placed fields."""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from itertools import count

from formbuilder.model.field import FormField


@dataclass(slots=True)
class FormSession:
    fields: list[FormField] = field(default_factory=list)
    _ids: count = field(default_factory=lambda: count(1), repr=False)

    def next_id(self) -> str:
        # Counter only moves forward so removed ids are never handed out again.
        while True:
            candidate = f"field_{next(self._ids)}"
            if self.get(candidate) is None:
                return candidate

    def get(self, field_id: str) -> FormField | None:
        for item in self.fields:
            if item.id == field_id:
                return item
        return None

    def index_of(self, field_id: str) -> int | None:
        for index, item in enumerate(self.fields):
            if item.id == field_id:
                return index
        return None

    def snapshot(self) -> list[FormField]:
        return deepcopy(self.fields)

    def __len__(self) -> int:
        return len(self.fields)
