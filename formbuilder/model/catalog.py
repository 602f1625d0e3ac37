"""Per-type defaults for newly placed fields."""

from __future__ import annotations

from dataclasses import dataclass

from formbuilder.model.field import FieldType

_NEW_OPTIONS = ("Option 1", "Option 2", "Option 3")
_LIST_ITEMS = ("Item 1", "Item 2", "Item 3")


@dataclass(frozen=True, slots=True)
class FieldSpec:
    field_type: FieldType
    display_name: str
    width: float
    height: float
    label: str
    options: tuple[str, ...] = ()        # given to a freshly added field
    empty_options: tuple[str, ...] = ()  # substituted when an edit leaves no options
    export_options: tuple[str, ...] = ()  # written when a field reaches export with none

    def initial_options(self) -> list[str] | None:
        if not self.field_type.has_options:
            return None
        return list(self.options)

    def fallback_options(self) -> list[str]:
        return list(self.empty_options)


FIELD_SPECS: dict[FieldType, FieldSpec] = {
    FieldType.TEXT: FieldSpec(FieldType.TEXT, "Text Input", 200.0, 30.0, "New Field"),
    FieldType.TEXTAREA: FieldSpec(FieldType.TEXTAREA, "Text Area", 200.0, 80.0, "Text Area"),
    FieldType.CHECKBOX: FieldSpec(FieldType.CHECKBOX, "Checkbox", 20.0, 20.0, "Checkbox"),
    FieldType.RADIO: FieldSpec(FieldType.RADIO, "Radio Button", 20.0, 20.0, "Radio Button"),
    FieldType.DROPDOWN: FieldSpec(
        FieldType.DROPDOWN,
        "Dropdown",
        200.0,
        30.0,
        "Dropdown",
        options=_NEW_OPTIONS,
        empty_options=("Option 1", "Option 2"),
        export_options=_NEW_OPTIONS,
    ),
    FieldType.SIGNATURE: FieldSpec(FieldType.SIGNATURE, "Signature", 150.0, 60.0, "Signature"),
    FieldType.LABEL: FieldSpec(
        FieldType.LABEL, "Static Text", 150.0, 30.0, "Double click to edit text"
    ),
    FieldType.UL: FieldSpec(
        FieldType.UL,
        "Bullet List",
        200.0,
        100.0,
        "Bullet List",
        options=_NEW_OPTIONS,
        empty_options=("Item 1", "Item 2"),
        export_options=_LIST_ITEMS,
    ),
    FieldType.OL: FieldSpec(
        FieldType.OL,
        "Numbered List",
        200.0,
        100.0,
        "Numbered List",
        options=_NEW_OPTIONS,
        empty_options=("Item 1", "Item 2"),
        export_options=_LIST_ITEMS,
    ),
}


def spec_for(field_type: FieldType | str) -> FieldSpec:
    return FIELD_SPECS[FieldType(field_type)]
