import pytest

from formbuilder.model.catalog import FIELD_SPECS, spec_for
from formbuilder.model.field import FieldType, FormField


def test_catalog_covers_every_field_type():
    assert set(FIELD_SPECS) == set(FieldType)


@pytest.mark.parametrize(
    "field_type, size",
    [
        (FieldType.TEXT, (200.0, 30.0)),
        (FieldType.TEXTAREA, (200.0, 80.0)),
        (FieldType.CHECKBOX, (20.0, 20.0)),
        (FieldType.RADIO, (20.0, 20.0)),
        (FieldType.SIGNATURE, (150.0, 60.0)),
        (FieldType.LABEL, (150.0, 30.0)),
        (FieldType.UL, (200.0, 100.0)),
    ],
)
def test_default_sizes(field_type, size):
    spec = spec_for(field_type)
    assert (spec.width, spec.height) == size


def test_only_list_like_types_carry_options():
    with_options = {t for t in FieldType if t.has_options}
    assert with_options == {FieldType.DROPDOWN, FieldType.UL, FieldType.OL}
    for field_type in FieldType:
        spec = spec_for(field_type)
        if field_type.has_options:
            assert spec.initial_options() == ["Option 1", "Option 2", "Option 3"]
            assert spec.fallback_options()
        else:
            assert spec.initial_options() is None


def test_fallback_lists_differ_by_kind():
    assert spec_for("dropdown").fallback_options() == ["Option 1", "Option 2"]
    assert spec_for("ul").fallback_options() == ["Item 1", "Item 2"]
    assert spec_for("ol").fallback_options() == ["Item 1", "Item 2"]


def test_options_dropped_for_types_without_options():
    field = FormField("a", FieldType.CHECKBOX, "Checkbox", 0, 0, 20, 20, options=["x"])
    assert field.options is None


def test_options_are_copied_for_list_types():
    source = ["A", "B"]
    field = FormField("a", FieldType.DROPDOWN, "Dropdown", 0, 0, 200, 30, options=source)
    source.append("C")
    assert field.options == ["A", "B"]


def test_field_type_accepts_plain_strings():
    field = FormField("a", "ol", "Numbered List", 0, 0, 200, 100)
    assert field.field_type is FieldType.OL
    assert field.field_type.is_text_only


def test_export_defaults_per_kind():
    assert spec_for("dropdown").export_options == ("Option 1", "Option 2", "Option 3")
    assert spec_for("ul").export_options == ("Item 1", "Item 2", "Item 3")
    assert spec_for("ol").export_options == ("Item 1", "Item 2", "Item 3")
    assert spec_for("text").export_options == ()
