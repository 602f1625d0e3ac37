import fitz
import pytest

from formbuilder.model.field import FieldType, FormField
from formbuilder.state.controller import InteractionController


@pytest.fixture
def controller():
    return InteractionController()


@pytest.fixture
def make_field():
    counter = iter(range(1, 1000))

    def _make(field_type=FieldType.TEXT, x=50.0, y=50.0, width=200.0, height=30.0, **kwargs):
        kwargs.setdefault("id", f"f{next(counter)}")
        kwargs.setdefault("label", "")
        return FormField(
            field_type=FieldType(field_type),
            x=x,
            y=y,
            width=width,
            height=height,
            **kwargs,
        )

    return _make


@pytest.fixture
def open_pdf():
    opened = []

    def _open(data: bytes) -> fitz.Document:
        document = fitz.open(stream=data, filetype="pdf")
        opened.append(document)
        return document

    yield _open
    for document in opened:
        document.close()
