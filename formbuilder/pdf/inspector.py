"""Read the AcroForm widgets of a PDF back into plain records."""

from __future__ import annotations

from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path

from pypdf import PdfReader
from pypdf.generic import ArrayObject, DictionaryObject, NameObject, StreamObject

_FLAG_MULTILINE = 1 << 12
_FLAG_RADIO = 1 << 15
_FLAG_PUSHBUTTON = 1 << 16


class PdfInspectError(RuntimeError):
    """Raised when form widgets cannot be read."""


@dataclass(slots=True)
class WidgetInfo:
    page_index: int
    name: str
    kind: str
    x: float
    y: float
    width: float
    height: float
    value: str = ""
    options: list[str] = field(default_factory=list)
    multiline: bool = False
    on_state: str | None = None


def read_widgets(source: bytes | str | Path) -> list[WidgetInfo]:
    widgets: list[WidgetInfo] = []

    try:
        reader = PdfReader(BytesIO(source) if isinstance(source, bytes) else str(source))
        for page_index, page in enumerate(reader.pages):
            annots = page.get("/Annots")
            if annots is None:
                continue
            for annot_ref in annots.get_object():
                annot = annot_ref.get_object()
                if annot.get("/Subtype") != "/Widget":
                    continue

                parent = annot.get("/Parent")
                parent_obj = parent.get_object() if parent is not None else None

                field_type = _inherited(annot, parent_obj, "/FT")
                rect = annot.get("/Rect")
                if field_type is None or rect is None:
                    continue

                llx, lly, urx, ury = (float(v) for v in rect)
                flags = int(_inherited(annot, parent_obj, "/Ff") or 0)
                value = _inherited(annot, parent_obj, "/V")
                if isinstance(value, NameObject):
                    value = value[1:]
                widgets.append(
                    WidgetInfo(
                        page_index=page_index,
                        name=str(_inherited(annot, parent_obj, "/T") or ""),
                        kind=_widget_kind(str(field_type), flags),
                        x=llx,
                        y=lly,
                        width=max(0.0, urx - llx),
                        height=max(0.0, ury - lly),
                        value=str(value or ""),
                        options=_option_labels(_inherited(annot, parent_obj, "/Opt")),
                        multiline=bool(flags & _FLAG_MULTILINE),
                        on_state=_on_state(annot),
                    )
                )
    except Exception as exc:
        raise PdfInspectError(f"Failed to read form widgets: {exc}") from exc

    return widgets


def _inherited(annot: DictionaryObject, parent: DictionaryObject | None, key: str):
    value = annot.get(key)
    if value is None and parent is not None:
        value = parent.get(key)
    return value.get_object() if value is not None else None


def _widget_kind(field_type: str, flags: int) -> str:
    if field_type == "/Tx":
        return "text"
    if field_type == "/Ch":
        return "choice"
    if field_type == "/Btn":
        if flags & _FLAG_PUSHBUTTON:
            return "button"
        return "radio" if flags & _FLAG_RADIO else "checkbox"
    return field_type.lstrip("/").lower()


def _option_labels(options) -> list[str]:
    labels: list[str] = []
    for option in options or []:
        option = option.get_object()
        if isinstance(option, ArrayObject):
            labels.append(str(option[-1].get_object()))
        else:
            labels.append(str(option))
    return labels


def _on_state(annot: DictionaryObject) -> str | None:
    appearance = annot.get("/AP")
    if appearance is None:
        return None
    normal = appearance.get_object().get("/N")
    if normal is None:
        return None
    normal = normal.get_object()
    if isinstance(normal, StreamObject) or not isinstance(normal, DictionaryObject):
        return None
    for state in normal.keys():
        if state != "/Off":
            return str(state)[1:]
    return None
