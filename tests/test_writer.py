import logging

import fitz
import pytest

from formbuilder import config
from formbuilder.model.field import FieldType
from formbuilder.pdf import writer
from formbuilder.pdf.inspector import read_widgets
from formbuilder.pdf.writer import (
    PdfWriteError,
    check_field_bounds,
    emit_form_pdf,
    sanitize_field_name,
    to_pdf_y,
)


def _rect(widget):
    return (widget.x, widget.y, widget.width, widget.height)


def test_sanitize_field_name():
    assert sanitize_field_name("a b#1") == "a_b_1"
    assert sanitize_field_name("field_1.x-y") == "field_1.x-y"
    assert sanitize_field_name("ünï/côdé") == "_n__c_d_"


def test_y_is_flipped_to_bottom_origin(make_field):
    field = make_field(x=10, y=100, width=50, height=40)
    assert to_pdf_y(field) == config.PAGE_HEIGHT - 100 - 40


@pytest.mark.parametrize(
    "geometry, reason",
    [
        ((-5, 50, 200, 30), "coordinates out of bounds"),
        ((0, 50, 595, 30), None),
        ((1, 50, 595, 30), "coordinates out of bounds"),
        ((0, 0, 100, 842), None),
        ((0, 813, 100, 30), "coordinates out of bounds"),
        ((0, -1, 100, 30), "coordinates out of bounds"),
        ((10, 10, 0, 30), "invalid dimensions"),
        ((10, 10, 30, -2), "invalid dimensions"),
    ],
)
def test_bounds_are_inclusive(make_field, geometry, reason):
    x, y, width, height = geometry
    assert check_field_bounds(make_field(x=x, y=y, width=width, height=height)) == reason


def test_text_widget_placement(make_field):
    data = emit_form_pdf([make_field(FieldType.TEXT, x=50, y=50, width=200, height=30, id="name")])

    widgets = read_widgets(data)
    assert len(widgets) == 1
    widget = widgets[0]
    assert widget.kind == "text"
    assert widget.name == "name"
    assert widget.value == ""
    assert widget.multiline is False
    assert _rect(widget) == pytest.approx((50, 762, 200, 30))


@pytest.mark.parametrize(
    "field_type, kind",
    [
        (FieldType.TEXT, "text"),
        (FieldType.TEXTAREA, "text"),
        (FieldType.DROPDOWN, "choice"),
        (FieldType.SIGNATURE, "text"),
        (FieldType.RADIO, "radio"),
        (FieldType.CHECKBOX, "checkbox"),
    ],
)
def test_widget_bottom_matches_transform(make_field, field_type, kind):
    field = make_field(field_type, x=120, y=300, width=150, height=40)
    (widget,) = read_widgets(emit_form_pdf([field]))

    assert widget.kind == kind
    assert widget.y == pytest.approx(config.PAGE_HEIGHT - 300 - 40)
    assert widget.x == pytest.approx(120)
    assert widget.width == pytest.approx(150)
    assert widget.height == pytest.approx(40)


def test_textarea_and_signature_are_multiline(make_field):
    data = emit_form_pdf(
        [
            make_field(FieldType.TEXTAREA, id="notes", y=50, height=80),
            make_field(FieldType.SIGNATURE, id="sig", y=200, width=150, height=60),
        ]
    )
    widgets = {w.name: w for w in read_widgets(data)}

    assert widgets["notes"].multiline
    assert widgets["notes"].value == ""
    assert widgets["sig"].multiline
    assert widgets["sig"].value == config.SIGNATURE_PLACEHOLDER


def test_dropdown_keeps_option_order(make_field):
    field = make_field(FieldType.DROPDOWN, id="colour", options=["A", "B"])
    (widget,) = read_widgets(emit_form_pdf([field]))

    assert widget.kind == "choice"
    assert widget.options == ["A", "B"]


@pytest.mark.parametrize("options", [None, []])
def test_dropdown_without_options_uses_default(make_field, options):
    field = make_field(FieldType.DROPDOWN, options=options)
    (widget,) = read_widgets(emit_form_pdf([field]))

    assert widget.options == ["Option 1", "Option 2", "Option 3"]


def test_dropdown_has_no_preselection(make_field):
    field = make_field(FieldType.DROPDOWN, id="colour", options=["Red", "Green"])
    (widget,) = read_widgets(emit_form_pdf([field]))

    assert widget.value == ""
    assert _rect(widget) == pytest.approx((50, 762, 200, 30))


@pytest.mark.parametrize("field_type", [FieldType.UL, FieldType.OL])
def test_list_without_options_draws_default_items(make_field, open_pdf, field_type):
    field = make_field(field_type, height=100, options=None)
    text = open_pdf(emit_form_pdf([field]))[0].get_text()

    assert "Item 1" in text and "Item 3" in text
    assert "Option 1" not in text


def test_latin_accents_are_drawn(make_field, open_pdf):
    field = make_field(FieldType.LABEL, label="José Müller", width=200)
    assert "José Müller" in open_pdf(emit_form_pdf([field]))[0].get_text()


@pytest.mark.parametrize(
    "field_type, content",
    [
        (FieldType.LABEL, {"label": "名前"}),
        (FieldType.LABEL, {"label": "Name ✓"}),
        (FieldType.UL, {"options": ["Fine", "✓ done"]}),
        (FieldType.DROPDOWN, {"options": ["Да", "Нет"]}),
    ],
)
def test_text_outside_font_encoding_aborts(make_field, field_type, content):
    field = make_field(field_type, id="intl", height=60, **content)

    with pytest.raises(PdfWriteError, match="intl"):
        emit_form_pdf([field])


def test_checkbox_toggle(make_field):
    field = make_field(FieldType.CHECKBOX, id="agree", x=40, y=100, width=20, height=20)
    (widget,) = read_widgets(emit_form_pdf([field]))

    assert widget.kind == "checkbox"
    assert widget.name == "agree"
    assert widget.value == "Off"
    assert widget.on_state == "Yes"
    assert _rect(widget) == pytest.approx((40, 722, 20, 20))


def test_checkbox_covers_whole_rectangle(make_field):
    field = make_field(FieldType.CHECKBOX, id="wide", x=40, y=100, width=40, height=20)
    (widget,) = read_widgets(emit_form_pdf([field]))

    assert _rect(widget) == pytest.approx((40, 722, 40, 20))
    assert widget.on_state == "Yes"


def test_radio_gets_its_own_group(make_field):
    fields = [
        make_field(FieldType.RADIO, id="yes #1", x=40, y=100, width=20, height=20),
        make_field(FieldType.RADIO, id="no", x=80, y=100, width=20, height=20),
    ]
    widgets = {w.name: w for w in read_widgets(emit_form_pdf(fields))}

    assert set(widgets) == {"group_yes__1", "group_no"}
    assert widgets["group_yes__1"].kind == "radio"
    assert widgets["group_yes__1"].on_state == "yes__1"
    assert widgets["group_yes__1"].value == "Off"
    assert _rect(widgets["group_no"]) == pytest.approx((80, 722, 20, 20))


def test_sanitized_ids_name_widgets(make_field):
    (widget,) = read_widgets(emit_form_pdf([make_field(id="a b#1")]))
    assert widget.name == "a_b_1"


def test_text_only_types_emit_no_widgets(make_field, open_pdf):
    data = emit_form_pdf(
        [
            make_field(FieldType.LABEL, label="Applicant details", y=20, width=200, height=30),
            make_field(FieldType.UL, y=100, height=100, options=["Apples", "Pears"]),
            make_field(FieldType.OL, y=250, height=100, options=["First", "Second"]),
        ]
    )

    assert read_widgets(data) == []
    text = open_pdf(data)[0].get_text()
    assert "Applicant details" in text
    assert "Apples" in text and "Pears" in text
    assert "1. First" in text and "2. Second" in text


def test_label_text_sits_inside_its_box(make_field, open_pdf):
    field = make_field(FieldType.LABEL, label="Full name", x=60, y=200, width=150, height=30)
    page = open_pdf(emit_form_pdf([field]))[0]

    hits = page.search_for("Full name")
    assert hits
    assert fitz.Rect(60, 200, 210, 230).intersects(hits[0])


def test_list_lines_step_down(make_field, open_pdf):
    field = make_field(FieldType.OL, x=60, y=300, width=200, height=100, options=["Alpha", "Beta"])
    page = open_pdf(emit_form_pdf([field]))[0]

    first = page.search_for("Alpha")[0]
    second = page.search_for("Beta")[0]
    assert second.y0 - first.y0 == pytest.approx(config.LIST_LINE_HEIGHT, abs=0.5)


def test_footer_is_stamped(open_pdf):
    page = open_pdf(emit_form_pdf([]))[0]
    assert "Make PDF Read-only" in page.get_text()
    assert page.rect.width == config.PAGE_WIDTH
    assert page.rect.height == config.PAGE_HEIGHT


def test_out_of_bounds_fields_are_skipped(make_field, caplog):
    fields = [
        make_field(id="left", x=-5),
        make_field(id="edge", x=0, width=595),
        make_field(id="flat", height=0),
    ]
    with caplog.at_level(logging.WARNING, logger="formbuilder.pdf.writer"):
        widgets = read_widgets(emit_form_pdf(fields))

    assert [w.name for w in widgets] == ["edge"]
    assert "Skipping field left" in caplog.text
    assert "Skipping field flat" in caplog.text


def test_emission_is_repeatable_and_order_independent(make_field):
    fields = [
        make_field(FieldType.TEXT, id="a", y=50),
        make_field(FieldType.CHECKBOX, id="b", y=100, width=20, height=20),
        make_field(FieldType.RADIO, id="c", y=150, width=20, height=20),
        make_field(FieldType.DROPDOWN, id="d", y=200, options=["x", "y"]),
    ]

    first = read_widgets(emit_form_pdf(fields))
    second = read_widgets(emit_form_pdf(fields))
    reordered = read_widgets(emit_form_pdf(list(reversed(fields))))

    assert first == second
    assert sorted(first, key=lambda w: w.name) == sorted(reordered, key=lambda w: w.name)


def test_unexpected_failure_aborts(make_field, monkeypatch):
    def boom(fields):
        raise ValueError("canvas exploded")

    monkeypatch.setattr(writer, "_build_page_pdf", boom)

    with pytest.raises(PdfWriteError, match="canvas exploded"):
        emit_form_pdf([make_field()])
