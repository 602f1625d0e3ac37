"""Form field model definitions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FieldType(str, Enum):
    TEXT = "text"
    TEXTAREA = "textarea"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    DROPDOWN = "dropdown"
    SIGNATURE = "signature"
    LABEL = "label"
    UL = "ul"
    OL = "ol"

    @property
    def has_options(self) -> bool:
        return self in _OPTION_TYPES

    @property
    def is_square(self) -> bool:
        return self in (FieldType.CHECKBOX, FieldType.RADIO)

    @property
    def is_text_only(self) -> bool:
        """Kinds that emit static page text instead of a fillable widget."""
        return self in (FieldType.LABEL, FieldType.UL, FieldType.OL)


_OPTION_TYPES = frozenset({FieldType.DROPDOWN, FieldType.UL, FieldType.OL})


@dataclass(slots=True)
class FormField:
    id: str
    field_type: FieldType
    label: str
    x: float
    y: float
    width: float
    height: float
    options: list[str] | None = None

    def __post_init__(self) -> None:
        self.field_type = FieldType(self.field_type)
        if not self.field_type.has_options:
            self.options = None
        elif self.options is not None:
            self.options = list(self.options)
