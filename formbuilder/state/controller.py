"""Field mutations and the per-field placement/resize/edit state machine."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
import logging

from formbuilder import config
from formbuilder.model.catalog import spec_for
from formbuilder.model.field import FieldType, FormField
from formbuilder.state.session import FormSession

logger = logging.getLogger(__name__)


class FieldNotFoundError(KeyError):
    """Raised when an operation names a field that is not in the session."""


class UnsupportedEditError(ValueError):
    """Raised when a label/options edit targets a type that does not carry it."""


class InvalidTransitionError(RuntimeError):
    """Raised when a gesture is started or finished from the wrong state."""


class FieldState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    RESIZING = "resizing"
    EDITING = "editing"


@dataclass(slots=True)
class _Gesture:
    field_id: str
    state: FieldState
    start_pointer: tuple[float, float] = (0.0, 0.0)
    start_geometry: tuple[float, float] = (0.0, 0.0)
    preview: tuple[float, float] | None = None


def parse_option_lines(text: str) -> list[str]:
    return [line for line in text.splitlines() if line.strip()]


class InteractionController:
    def __init__(self, session: FormSession | None = None) -> None:
        self.session = session if session is not None else FormSession()
        self._gesture: _Gesture | None = None

    @property
    def fields(self) -> list[FormField]:
        return self.session.fields

    def add_field(self, field_type: FieldType | str) -> FormField:
        spec = spec_for(field_type)
        x = min(config.PLACEMENT_X, config.PAGE_WIDTH - spec.width)
        y = config.PLACEMENT_Y + config.PLACEMENT_STEP * len(self.session)
        y = max(0.0, min(y, config.PAGE_HEIGHT - spec.height))
        field = FormField(
            id=self.session.next_id(),
            field_type=spec.field_type,
            label=spec.label,
            x=x,
            y=y,
            width=spec.width,
            height=spec.height,
            options=spec.initial_options(),
        )
        self.session.fields.append(field)
        logger.debug("Added %s field %s at (%.1f, %.1f)", field.field_type.value, field.id, x, y)
        return field

    def move_field(self, field_id: str, x: float, y: float) -> FormField:
        field = self._require(field_id)
        field.x = float(x)
        field.y = float(y)
        return field

    def resize_field(self, field_id: str, width: float, height: float) -> FormField:
        field = self._require(field_id)
        new_w = max(config.MIN_FIELD_SIZE, float(width))
        new_h = max(config.MIN_FIELD_SIZE, float(height))
        if field.field_type.is_square:
            new_w = new_h = max(new_w, new_h)
        field.width = new_w
        field.height = new_h
        return field

    def set_label(self, field_id: str, text: str) -> FormField:
        field = self._require(field_id)
        if field.field_type is not FieldType.LABEL:
            raise UnsupportedEditError(
                f"Field {field_id} of type {field.field_type.value} has no editable label"
            )
        field.label = " ".join(text.splitlines())
        return field

    def set_options(self, field_id: str, lines: Iterable[str]) -> FormField:
        field = self._require(field_id)
        if not field.field_type.has_options:
            raise UnsupportedEditError(
                f"Field {field_id} of type {field.field_type.value} has no options"
            )
        options = [line for line in lines if line.strip()]
        field.options = options or spec_for(field.field_type).fallback_options()
        return field

    def remove_field(self, field_id: str) -> None:
        index = self.session.index_of(field_id)
        if index is None:
            raise FieldNotFoundError(field_id)
        self.session.fields.pop(index)
        if self._gesture is not None and self._gesture.field_id == field_id:
            self._gesture = None
        logger.debug("Removed field %s", field_id)

    def state_of(self, field_id: str) -> FieldState:
        self._require(field_id)
        if self._gesture is not None and self._gesture.field_id == field_id:
            return self._gesture.state
        return FieldState.IDLE

    @property
    def active_field_id(self) -> str | None:
        return self._gesture.field_id if self._gesture is not None else None

    @property
    def drag_preview(self) -> tuple[float, float] | None:
        if self._gesture is None or self._gesture.state is not FieldState.DRAGGING:
            return None
        return self._gesture.preview

    # Drag

    def begin_drag(self, field_id: str, pointer_x: float, pointer_y: float) -> bool:
        field = self._require(field_id)
        if self.state_of(field_id) is FieldState.EDITING:
            return False
        self._ensure_no_gesture()
        self._gesture = _Gesture(
            field_id=field_id,
            state=FieldState.DRAGGING,
            start_pointer=(pointer_x, pointer_y),
            start_geometry=(field.x, field.y),
            preview=(field.x, field.y),
        )
        return True

    def drag_to(self, pointer_x: float, pointer_y: float) -> tuple[float, float]:
        gesture = self._expect(FieldState.DRAGGING)
        field = self._require(gesture.field_id)
        start_x, start_y = gesture.start_geometry
        x = start_x + (pointer_x - gesture.start_pointer[0])
        y = start_y + (pointer_y - gesture.start_pointer[1])
        x = max(0.0, min(x, max(0.0, config.PAGE_WIDTH - field.width)))
        y = max(0.0, min(y, max(0.0, config.PAGE_HEIGHT - field.height)))
        gesture.preview = (x, y)
        return gesture.preview

    def end_drag(self) -> FormField:
        gesture = self._expect(FieldState.DRAGGING)
        self._gesture = None
        x, y = gesture.preview or gesture.start_geometry
        return self.move_field(gesture.field_id, x, y)

    # Resize

    def begin_resize(self, field_id: str, pointer_x: float, pointer_y: float) -> bool:
        field = self._require(field_id)
        if self.state_of(field_id) is FieldState.EDITING:
            return False
        self._ensure_no_gesture()
        self._gesture = _Gesture(
            field_id=field_id,
            state=FieldState.RESIZING,
            start_pointer=(pointer_x, pointer_y),
            start_geometry=(field.width, field.height),
        )
        return True

    def resize_to(self, pointer_x: float, pointer_y: float) -> FormField:
        gesture = self._expect(FieldState.RESIZING)
        start_w, start_h = gesture.start_geometry
        return self.resize_field(
            gesture.field_id,
            start_w + (pointer_x - gesture.start_pointer[0]),
            start_h + (pointer_y - gesture.start_pointer[1]),
        )

    def end_resize(self) -> FormField:
        gesture = self._expect(FieldState.RESIZING)
        self._gesture = None
        return self._require(gesture.field_id)

    # Inline edit

    def can_edit(self, field_id: str) -> bool:
        field_type = self._require(field_id).field_type
        return field_type is FieldType.LABEL or field_type.has_options

    def begin_edit(self, field_id: str) -> str:
        """Enter edit mode and return the text the editor should start with."""
        field = self._require(field_id)
        if not self.can_edit(field_id):
            raise UnsupportedEditError(f"Field type {field.field_type.value} is not editable")
        self._ensure_no_gesture()
        self._gesture = _Gesture(field_id=field_id, state=FieldState.EDITING)
        if field.field_type is FieldType.LABEL:
            return field.label
        return "\n".join(field.options or [])

    def commit_edit(self, text: str) -> FormField:
        gesture = self._expect(FieldState.EDITING)
        self._gesture = None
        field = self._require(gesture.field_id)
        if field.field_type is FieldType.LABEL:
            return self.set_label(field.id, text)
        return self.set_options(field.id, parse_option_lines(text))

    def cancel_edit(self) -> None:
        self._expect(FieldState.EDITING)
        self._gesture = None

    def _require(self, field_id: str) -> FormField:
        field = self.session.get(field_id)
        if field is None:
            raise FieldNotFoundError(field_id)
        return field

    def _ensure_no_gesture(self) -> None:
        if self._gesture is not None:
            raise InvalidTransitionError(
                f"Field {self._gesture.field_id} is already {self._gesture.state.value}"
            )

    def _expect(self, state: FieldState) -> _Gesture:
        if self._gesture is None or self._gesture.state is not state:
            current = "idle" if self._gesture is None else self._gesture.state.value
            raise InvalidTransitionError(f"Expected {state.value} gesture, current state is {current}")
        return self._gesture
