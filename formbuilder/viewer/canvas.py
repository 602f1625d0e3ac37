"""Interactive page canvas for field placement, dragging, resizing and inline edits."""

from __future__ import annotations

import logging

from PySide6.QtCore import QEvent, QObject, QPointF, QRectF, Qt, Signal
from PySide6.QtGui import QColor, QFont, QPainter, QPen
from PySide6.QtWidgets import QLineEdit, QPlainTextEdit, QWidget

from formbuilder import config
from formbuilder.model.field import FieldType, FormField
from formbuilder.state.controller import FieldState, InteractionController

logger = logging.getLogger(__name__)

_PLACEHOLDERS = {
    FieldType.TEXT: "Text Input",
    FieldType.TEXTAREA: "Text Area",
    FieldType.SIGNATURE: "Signature",
}


class FormCanvas(QWidget):
    """Draws the page at one pixel per page unit, so widget and field coordinates match."""

    field_selection_changed = Signal(object)
    fields_changed = Signal()

    def __init__(self, controller: InteractionController) -> None:
        super().__init__()
        self._controller = controller
        self._selected_id: str | None = None
        self._editor: QLineEdit | QPlainTextEdit | None = None

        self.setMouseTracking(True)
        self.setFixedSize(int(config.PAGE_WIDTH), int(config.PAGE_HEIGHT))
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)

    @property
    def selected_field_id(self) -> str | None:
        return self._selected_id

    def select_field(self, field_id: str | None) -> None:
        self._selected_id = field_id
        field = self._controller.session.get(field_id) if field_id else None
        self.field_selection_changed.emit(field)
        self.update()

    def delete_selected_field(self) -> bool:
        if self._selected_id is None:
            return False
        self._close_editor(commit=False)
        self._controller.remove_field(self._selected_id)
        self.select_field(None)
        self.fields_changed.emit()
        return True

    def paintEvent(self, event) -> None:  # type: ignore[override]
        del event
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.fillRect(self.rect(), QColor("#ffffff"))

        preview = self._controller.drag_preview
        dragging_id = self._controller.active_field_id if preview is not None else None
        for field in self._controller.fields:
            rect = self._field_rect(field)
            if field.id == dragging_id:
                rect.moveTopLeft(QPointF(*preview))
            self._paint_field(painter, field, rect, selected=field.id == self._selected_id)

    def mousePressEvent(self, event) -> None:  # type: ignore[override]
        if event.button() != Qt.MouseButton.LeftButton:
            return

        pos = event.position()
        field = self._field_at(pos)
        if self._editor is not None and (field is None or field.id != self._editing_id()):
            self._close_editor(commit=True)

        self.select_field(field.id if field is not None else None)
        if field is None:
            return

        if self._resize_handle_rect(self._field_rect(field)).contains(pos):
            self._controller.begin_resize(field.id, pos.x(), pos.y())
        else:
            self._controller.begin_drag(field.id, pos.x(), pos.y())
        self.update()

    def mouseMoveEvent(self, event) -> None:  # type: ignore[override]
        field_id = self._controller.active_field_id
        if field_id is None:
            return

        pos = event.position()
        state = self._controller.state_of(field_id)
        if state is FieldState.DRAGGING:
            self._controller.drag_to(pos.x(), pos.y())
            self.update()
        elif state is FieldState.RESIZING:
            self._controller.resize_to(pos.x(), pos.y())
            self.fields_changed.emit()
            self.update()

    def mouseReleaseEvent(self, event) -> None:  # type: ignore[override]
        del event
        field_id = self._controller.active_field_id
        if field_id is None:
            return

        state = self._controller.state_of(field_id)
        if state is FieldState.DRAGGING:
            self._controller.end_drag()
        elif state is FieldState.RESIZING:
            self._controller.end_resize()
        else:
            return
        self.fields_changed.emit()
        self.update()

    def mouseDoubleClickEvent(self, event) -> None:  # type: ignore[override]
        field = self._field_at(event.position())
        if field is None or not self._controller.can_edit(field.id):
            return
        if self._editor is not None:
            self._close_editor(commit=True)
        if self._controller.active_field_id is not None:
            return
        self._open_editor(field)

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:  # type: ignore[override]
        if watched is self._editor and event.type() == QEvent.Type.FocusOut:
            self._close_editor(commit=True)
        return super().eventFilter(watched, event)

    def _open_editor(self, field: FormField) -> None:
        text = self._controller.begin_edit(field.id)
        logger.debug("Editing field %s", field.id)
        if field.field_type is FieldType.LABEL:
            editor: QLineEdit | QPlainTextEdit = QLineEdit(text, self)
            editor.returnPressed.connect(lambda: self._close_editor(commit=True))
        else:
            editor = QPlainTextEdit(self)
            editor.setPlainText(text)
            editor.setPlaceholderText("Enter options, one per line")
        rect = self._field_rect(field)
        editor.setGeometry(rect.toRect())
        editor.installEventFilter(self)
        editor.show()
        editor.setFocus()
        self._editor = editor
        self.update()

    def _close_editor(self, commit: bool) -> None:
        editor = self._editor
        if editor is None:
            return
        self._editor = None
        editor.removeEventFilter(self)

        if self._editing_id() is not None:
            if commit:
                text = editor.text() if isinstance(editor, QLineEdit) else editor.toPlainText()
                self._controller.commit_edit(text)
                self.fields_changed.emit()
            else:
                self._controller.cancel_edit()
        editor.hide()
        editor.deleteLater()
        self.update()

    def _editing_id(self) -> str | None:
        field_id = self._controller.active_field_id
        if field_id is None or self._controller.state_of(field_id) is not FieldState.EDITING:
            return None
        return field_id

    def _paint_field(self, painter: QPainter, field: FormField, rect: QRectF, selected: bool) -> None:
        field_type = field.field_type
        border = QColor("#c62828") if selected else QColor("#71717a")
        pen = QPen(border)
        pen.setWidth(2 if selected else 1)

        if field_type is FieldType.SIGNATURE:
            pen.setStyle(Qt.PenStyle.DashLine)
        if field_type is FieldType.LABEL and not selected:
            pen = QPen(Qt.PenStyle.NoPen)
        painter.setPen(pen)
        painter.setBrush(QColor("#f4f4f5") if field_type is FieldType.SIGNATURE else QColor("#fafafa"))
        if field_type is FieldType.LABEL:
            painter.setBrush(Qt.BrushStyle.NoBrush)

        if field_type is FieldType.RADIO:
            painter.drawEllipse(rect)
        elif field_type is FieldType.CHECKBOX:
            painter.drawRect(rect)
        else:
            painter.drawRoundedRect(rect, 3.0, 3.0)

        painter.setPen(QColor("#000000") if field_type.is_text_only else QColor("#a1a1aa"))
        text_rect = rect.adjusted(4.0, 2.0, -4.0, -2.0)
        if field_type is FieldType.LABEL:
            painter.setFont(QFont(config.FONT_NAME, config.LABEL_FONT_SIZE))
            painter.drawText(text_rect, Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignTop, field.label)
        elif field_type in (FieldType.UL, FieldType.OL):
            painter.setFont(QFont(config.FONT_NAME, config.LIST_FONT_SIZE))
            lines = [
                f"{config.BULLET_PREFIX if field_type is FieldType.UL else f'{i + 1}. '}{item}"
                for i, item in enumerate(field.options or [])
            ]
            painter.drawText(text_rect, Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignTop, "\n".join(lines))
        elif field_type is FieldType.DROPDOWN:
            options = field.options or []
            summary = options[0] if options else "Select"
            if len(options) > 1:
                summary += f"  +{len(options) - 1}"
            painter.drawText(text_rect, Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter, f"{summary}  ▾")
        elif field_type in _PLACEHOLDERS:
            painter.drawText(text_rect, Qt.AlignmentFlag.AlignCenter, _PLACEHOLDERS[field_type])

        if selected:
            painter.fillRect(self._resize_handle_rect(rect), QColor("#c62828"))

    def _field_rect(self, field: FormField) -> QRectF:
        return QRectF(field.x, field.y, field.width, field.height)

    def _resize_handle_rect(self, field_rect: QRectF) -> QRectF:
        handle_size = config.RESIZE_HANDLE_SIZE
        return QRectF(
            field_rect.right() - handle_size / 2.0,
            field_rect.bottom() - handle_size / 2.0,
            handle_size,
            handle_size,
        )

    def _field_at(self, pos: QPointF) -> FormField | None:
        fields = self._controller.fields
        for index in range(len(fields) - 1, -1, -1):
            rect = self._field_rect(fields[index])
            if rect.contains(pos) or self._resize_handle_rect(rect).contains(pos):
                return fields[index]
        return None
