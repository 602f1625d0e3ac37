"""PDF form writer using reportlab AcroForm widgets + pypdf."""

from __future__ import annotations

from collections.abc import Iterable
from io import BytesIO
import logging
import re

from pypdf import PdfReader, PdfWriter
from pypdf.generic import (
    ArrayObject,
    BooleanObject,
    DecodedStreamObject,
    DictionaryObject,
    FloatObject,
    IndirectObject,
    NameObject,
    NumberObject,
    TextStringObject,
)
from reportlab.lib import colors
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from formbuilder import config
from formbuilder.model.catalog import spec_for
from formbuilder.model.field import FieldType, FormField

logger = logging.getLogger(__name__)

_INVALID_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")

# Standard Type1 fonts are written with WinAnsiEncoding.
_STANDARD_FONT_CODEC = "cp1252"
_FONT_RESOURCE = "/Helv"
_DEFAULT_APPEARANCE = f"{_FONT_RESOURCE} {config.WIDGET_FONT_SIZE} Tf 0 g"

# Widgets ReportLab cannot write as needed; built afterwards with pypdf.
_POST_PASS_TYPES = frozenset({FieldType.CHECKBOX, FieldType.RADIO, FieldType.DROPDOWN})

# AcroForm field flags: noToggleToOff | radio, and combo
_RADIO_FIELD_FLAGS = (1 << 14) | (1 << 15)
_COMBO_FIELD_FLAGS = 1 << 17
_ANNOT_PRINT_FLAG = 1 << 2
_BEZIER_CIRCLE = 0.5523


class PdfWriteError(RuntimeError):
    """Raised when output generation fails."""


def sanitize_field_name(field_id: str) -> str:
    return _INVALID_NAME_CHARS.sub("_", field_id)


def to_pdf_y(field: FormField) -> float:
    """Bottom edge of the field in PDF space (origin bottom-left)."""
    return config.PAGE_HEIGHT - field.y - field.height


def check_field_bounds(field: FormField) -> str | None:
    """Return why the field cannot be emitted, or None when it fits the page."""
    if field.width <= 0 or field.height <= 0:
        return "invalid dimensions"
    pdf_y = to_pdf_y(field)
    if (
        field.x < 0
        or field.x + field.width > config.PAGE_WIDTH
        or pdf_y < 0
        or pdf_y + field.height > config.PAGE_HEIGHT
    ):
        return "coordinates out of bounds"
    return None


def emit_form_pdf(fields: Iterable[FormField]) -> bytes:
    """Render the fields onto a single fixed-size page with fillable widgets.

    Fields that do not fit the page are skipped and logged; any other failure,
    including text the page font cannot encode, aborts the whole document.
    """
    try:
        accepted: list[FormField] = []
        for field in fields:
            reason = check_field_bounds(field)
            if reason is not None:
                logger.warning("Skipping field %s: %s", field.id, reason)
                continue
            _check_encodable(field)
            accepted.append(field)

        page_pdf = _build_page_pdf(accepted)
        post_pass = [field for field in accepted if field.field_type in _POST_PASS_TYPES]
        data = _finalize_acroform(page_pdf, post_pass)
    except PdfWriteError:
        raise
    except Exception as exc:
        raise PdfWriteError(str(exc) or exc.__class__.__name__) from exc

    logger.info("Generated form PDF with %d field(s), %d bytes", len(accepted), len(data))
    return data


def _field_options(field: FormField) -> list[str]:
    return list(field.options or spec_for(field.field_type).export_options)


def _check_encodable(field: FormField) -> None:
    if field.field_type is FieldType.LABEL:
        texts = [field.label]
    elif field.field_type.has_options:
        texts = _field_options(field)
    else:
        return
    for text in texts:
        try:
            text.encode(_STANDARD_FONT_CODEC)
        except UnicodeEncodeError as exc:
            raise PdfWriteError(
                f"Field {field.id}: {text!r} cannot be drawn with {config.FONT_NAME}"
            ) from exc


def _build_page_pdf(fields: list[FormField]) -> BytesIO:
    buffer = BytesIO()
    report = canvas.Canvas(
        buffer,
        pagesize=(config.PAGE_WIDTH, config.PAGE_HEIGHT),
        invariant=1,
    )
    form = report.acroForm

    for field in fields:
        pdf_y = to_pdf_y(field)
        field_type = field.field_type

        if field_type is FieldType.LABEL:
            _draw_label(report, field, pdf_y)
        elif field_type in (FieldType.UL, FieldType.OL):
            _draw_list(report, field, pdf_y)
        elif field_type in (FieldType.TEXT, FieldType.TEXTAREA):
            form.textfield(
                name=sanitize_field_name(field.id),
                x=field.x,
                y=pdf_y,
                width=field.width,
                height=field.height,
                value="",
                fieldFlags="multiline" if field_type is FieldType.TEXTAREA else "",
                maxlen=None,
                fontName=config.FONT_NAME,
                fontSize=config.WIDGET_FONT_SIZE,
                borderWidth=1,
                borderColor=colors.black,
                fillColor=colors.white,
                textColor=colors.black,
            )
        elif field_type is FieldType.SIGNATURE:
            _draw_signature_box(report, field, pdf_y)
            form.textfield(
                name=sanitize_field_name(field.id),
                x=field.x,
                y=pdf_y,
                width=field.width,
                height=field.height,
                value=config.SIGNATURE_PLACEHOLDER,
                fieldFlags="multiline",
                maxlen=None,
                fontName=config.FONT_NAME,
                fontSize=config.WIDGET_FONT_SIZE,
                borderWidth=0,
                borderColor=None,
                fillColor=None,
                textColor=colors.black,
            )
        # Checkbox, radio and dropdown widgets are added by _finalize_acroform.

    _draw_footer(report)
    report.showPage()
    report.save()
    buffer.seek(0)
    return buffer


def _draw_label(report: canvas.Canvas, field: FormField, pdf_y: float) -> None:
    report.setFont(config.FONT_NAME, config.LABEL_FONT_SIZE)
    report.setFillColor(colors.black)
    report.drawString(field.x, pdf_y + field.height - config.TEXT_TOP_INSET, field.label)


def _draw_list(report: canvas.Canvas, field: FormField, pdf_y: float) -> None:
    items = _field_options(field)
    top = pdf_y + field.height - config.TEXT_TOP_INSET
    report.setFont(config.FONT_NAME, config.LIST_FONT_SIZE)
    report.setFillColor(colors.black)
    for index, item in enumerate(items):
        prefix = config.BULLET_PREFIX if field.field_type is FieldType.UL else f"{index + 1}. "
        report.drawString(field.x, top - index * config.LIST_LINE_HEIGHT, f"{prefix}{item}")


def _draw_signature_box(report: canvas.Canvas, field: FormField, pdf_y: float) -> None:
    report.saveState()
    report.setLineWidth(1)
    report.setStrokeColor(colors.black)
    report.setFillColor(colors.black)
    report.setFillAlpha(config.SIGNATURE_FILL_ALPHA)
    report.rect(field.x, pdf_y, field.width, field.height, stroke=1, fill=1)
    report.restoreState()


def _draw_footer(report: canvas.Canvas) -> None:
    lines = config.FOOTER_LINES
    report.saveState()
    report.setFont(config.FONT_NAME, config.FOOTER_FONT_SIZE)
    report.setFillGray(config.FOOTER_GRAY)
    for index, line in enumerate(lines):
        text_width = stringWidth(line, config.FONT_NAME, config.FOOTER_FONT_SIZE)
        x = max(config.FOOTER_MIN_X, (config.PAGE_WIDTH - text_width) / 2.0)
        y = config.FOOTER_BASELINE + (len(lines) - 1 - index) * config.FOOTER_LINE_HEIGHT
        report.drawString(x, y, line)
    report.restoreState()


def _finalize_acroform(page_pdf: BytesIO, fields: list[FormField]) -> bytes:
    reader = PdfReader(page_pdf)
    writer = PdfWriter(clone_from=reader)
    page = writer.pages[0]

    root = writer._root_object
    if "/AcroForm" in root:
        acroform = root["/AcroForm"].get_object()
    else:
        acroform = DictionaryObject()
        root[NameObject("/AcroForm")] = writer._add_object(acroform)
    if "/Fields" not in acroform:
        acroform[NameObject("/Fields")] = ArrayObject()
    form_fields = acroform["/Fields"].get_object()
    _ensure_widget_font(writer, acroform)

    for field in fields:
        if field.field_type is FieldType.CHECKBOX:
            field_ref = _add_checkbox_widget(writer, page, field)
        elif field.field_type is FieldType.RADIO:
            field_ref = _add_radio_widget(writer, page, field)
        else:
            field_ref = _add_choice_widget(writer, page, field)
        form_fields.append(field_ref)

    acroform[NameObject("/NeedAppearances")] = BooleanObject(True)

    output = BytesIO()
    writer.write(output)
    return output.getvalue()


def _ensure_widget_font(writer: PdfWriter, acroform: DictionaryObject) -> None:
    resources = acroform.get("/DR")
    if resources is None:
        resources = DictionaryObject()
        acroform[NameObject("/DR")] = resources
    else:
        resources = resources.get_object()

    fonts = resources.get("/Font")
    if fonts is None:
        fonts = DictionaryObject()
        resources[NameObject("/Font")] = fonts
    else:
        fonts = fonts.get_object()

    if _FONT_RESOURCE not in fonts:
        fonts[NameObject(_FONT_RESOURCE)] = writer._add_object(
            DictionaryObject(
                {
                    NameObject("/Type"): NameObject("/Font"),
                    NameObject("/Subtype"): NameObject("/Type1"),
                    NameObject("/BaseFont"): NameObject(f"/{config.FONT_NAME}"),
                    NameObject("/Encoding"): NameObject("/WinAnsiEncoding"),
                }
            )
        )
    if "/DA" not in acroform:
        acroform[NameObject("/DA")] = TextStringObject(_DEFAULT_APPEARANCE)


def _add_checkbox_widget(writer: PdfWriter, page, field: FormField) -> IndirectObject:
    # Built here rather than through ReportLab, whose checkboxes are always
    # square, so the widget covers the whole field rectangle.
    on_state = NameObject("/Yes")
    off_state = NameObject("/Off")
    widget = _widget_annotation(page, field)
    widget.update(
        {
            NameObject("/FT"): NameObject("/Btn"),
            NameObject("/Ff"): NumberObject(0),
            NameObject("/T"): TextStringObject(sanitize_field_name(field.id)),
            NameObject("/V"): off_state,
            NameObject("/AS"): off_state,
            NameObject("/AP"): DictionaryObject(
                {
                    NameObject("/N"): DictionaryObject(
                        {
                            on_state: writer._add_object(_checkbox_appearance(field.width, field.height, True)),
                            off_state: writer._add_object(_checkbox_appearance(field.width, field.height, False)),
                        }
                    )
                }
            ),
            NameObject("/MK"): _widget_colours(caption="4"),
        }
    )
    widget_ref = writer._add_object(widget)
    _append_annotation(page, widget_ref)
    return widget_ref


def _add_radio_widget(writer: PdfWriter, page, field: FormField) -> IndirectObject:
    # ReportLab only writes radio groups with two or more buttons, so the
    # one-button group is assembled here.
    name = sanitize_field_name(field.id)
    on_state = NameObject(f"/{name}")
    off_state = NameObject("/Off")

    group = DictionaryObject(
        {
            NameObject("/FT"): NameObject("/Btn"),
            NameObject("/Ff"): NumberObject(_RADIO_FIELD_FLAGS),
            NameObject("/T"): TextStringObject(f"group_{name}"),
            NameObject("/V"): off_state,
            NameObject("/Kids"): ArrayObject(),
        }
    )
    group_ref = writer._add_object(group)

    widget = _widget_annotation(page, field)
    widget.update(
        {
            NameObject("/Parent"): group_ref,
            NameObject("/AS"): off_state,
            NameObject("/AP"): DictionaryObject(
                {
                    NameObject("/N"): DictionaryObject(
                        {
                            on_state: writer._add_object(_radio_appearance(field.width, field.height, True)),
                            off_state: writer._add_object(_radio_appearance(field.width, field.height, False)),
                        }
                    )
                }
            ),
            NameObject("/MK"): _widget_colours(caption="l"),
        }
    )
    widget_ref = writer._add_object(widget)
    group["/Kids"].append(widget_ref)
    _append_annotation(page, widget_ref)
    return group_ref


def _add_choice_widget(writer: PdfWriter, page, field: FormField) -> IndirectObject:
    # No /V: the dropdown starts without a selection.
    options = _field_options(field)
    widget = _widget_annotation(page, field)
    widget.update(
        {
            NameObject("/FT"): NameObject("/Ch"),
            NameObject("/Ff"): NumberObject(_COMBO_FIELD_FLAGS),
            NameObject("/T"): TextStringObject(sanitize_field_name(field.id)),
            NameObject("/Opt"): ArrayObject([TextStringObject(option) for option in options]),
            NameObject("/DA"): TextStringObject(_DEFAULT_APPEARANCE),
            NameObject("/AP"): DictionaryObject(
                {NameObject("/N"): writer._add_object(_box_appearance(field.width, field.height))}
            ),
            NameObject("/MK"): _widget_colours(),
        }
    )
    widget_ref = writer._add_object(widget)
    _append_annotation(page, widget_ref)
    return widget_ref


def _widget_annotation(page, field: FormField) -> DictionaryObject:
    x = field.x
    y = to_pdf_y(field)
    widget = DictionaryObject(
        {
            NameObject("/Type"): NameObject("/Annot"),
            NameObject("/Subtype"): NameObject("/Widget"),
            NameObject("/Rect"): ArrayObject(
                [FloatObject(x), FloatObject(y), FloatObject(x + field.width), FloatObject(y + field.height)]
            ),
            NameObject("/F"): NumberObject(_ANNOT_PRINT_FLAG),
        }
    )
    if getattr(page, "indirect_reference", None) is not None:
        widget[NameObject("/P")] = page.indirect_reference
    return widget


def _widget_colours(caption: str | None = None) -> DictionaryObject:
    colours = DictionaryObject(
        {
            NameObject("/BC"): ArrayObject([FloatObject(0), FloatObject(0), FloatObject(0)]),
            NameObject("/BG"): ArrayObject([FloatObject(1), FloatObject(1), FloatObject(1)]),
        }
    )
    if caption is not None:
        colours[NameObject("/CA")] = TextStringObject(caption)
    return colours


def _append_annotation(page, widget_ref: IndirectObject) -> None:
    annots_obj = page.get("/Annots")
    if annots_obj is None:
        annots = ArrayObject()
    else:
        annots = annots_obj.get_object()
    annots.append(widget_ref)
    page[NameObject("/Annots")] = annots


def _appearance_stream(width: float, height: float, ops: list[str]) -> DecodedStreamObject:
    stream = DecodedStreamObject()
    stream.set_data("\n".join(ops).encode("ascii"))
    stream.update(
        {
            NameObject("/Type"): NameObject("/XObject"),
            NameObject("/Subtype"): NameObject("/Form"),
            NameObject("/BBox"): ArrayObject(
                [FloatObject(0), FloatObject(0), FloatObject(width), FloatObject(height)]
            ),
        }
    )
    return stream


def _box_ops(width: float, height: float) -> list[str]:
    return [
        "1 g",
        f"0 0 {width:.2f} {height:.2f} re f",
        "0 G",
        "1 w",
        f"0.50 0.50 {width - 1:.2f} {height - 1:.2f} re S",
    ]


def _box_appearance(width: float, height: float) -> DecodedStreamObject:
    return _appearance_stream(width, height, ["q", *_box_ops(width, height), "Q"])


def _checkbox_appearance(width: float, height: float, checked: bool) -> DecodedStreamObject:
    ops = ["q", *_box_ops(width, height)]
    if checked:
        ops += [
            "1.5 w",
            f"{width * 0.2:.2f} {height * 0.55:.2f} m",
            f"{width * 0.4:.2f} {height * 0.25:.2f} l",
            f"{width * 0.8:.2f} {height * 0.8:.2f} l",
            "S",
        ]
    ops.append("Q")
    return _appearance_stream(width, height, ops)


def _radio_appearance(width: float, height: float, selected: bool) -> DecodedStreamObject:
    cx = width / 2.0
    cy = height / 2.0
    radius = min(width, height) / 2.0 - 0.5
    ops = [
        "q",
        "1 g",
        _circle_path(cx, cy, radius),
        "f",
        "0 G",
        "1 w",
        _circle_path(cx, cy, radius),
        "S",
    ]
    if selected:
        ops += ["0 g", _circle_path(cx, cy, radius * 0.5), "f"]
    ops.append("Q")
    return _appearance_stream(width, height, ops)


def _circle_path(cx: float, cy: float, r: float) -> str:
    k = _BEZIER_CIRCLE * r
    points = [
        (cx + r, cy),
        (cx + r, cy + k), (cx + k, cy + r), (cx, cy + r),
        (cx - k, cy + r), (cx - r, cy + k), (cx - r, cy),
        (cx - r, cy - k), (cx - k, cy - r), (cx, cy - r),
        (cx + k, cy - r), (cx + r, cy - k), (cx + r, cy),
    ]
    parts = [f"{points[0][0]:.2f} {points[0][1]:.2f} m"]
    for i in range(1, len(points), 3):
        segment = " ".join(f"{px:.2f} {py:.2f}" for px, py in points[i:i + 3])
        parts.append(f"{segment} c")
    return " ".join(parts)
