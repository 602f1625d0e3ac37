"""Main application window for composing, exporting and locking forms."""

from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import (
    QFileDialog,
    QMainWindow,
    QMessageBox,
    QScrollArea,
    QToolBar,
)

from formbuilder import config
from formbuilder.model.catalog import FIELD_SPECS
from formbuilder.model.field import FieldType
from formbuilder.pdf.flattener import readonly_filename
from formbuilder.pdf.inspector import PdfInspectError, read_widgets
from formbuilder.state.controller import InteractionController
from formbuilder.ui.jobs import JobRunner
from formbuilder.viewer.canvas import FormCanvas


class MainWindow(QMainWindow):
    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle("PDF Form Builder")
        self.resize(900, 950)

        self._controller = InteractionController()
        self._jobs = JobRunner(self)
        self._jobs.succeeded.connect(self._on_job_succeeded)
        self._jobs.failed.connect(self._on_job_failed)

        self.canvas = FormCanvas(self._controller)
        self.canvas.fields_changed.connect(self._on_fields_changed)

        self.scroll_area = QScrollArea()
        self.scroll_area.setWidgetResizable(False)
        self.scroll_area.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.scroll_area.setWidget(self.canvas)
        self.setCentralWidget(self.scroll_area)

        self._build_toolbars()
        self.statusBar().showMessage("Ready")

    def _build_toolbars(self) -> None:
        toolbar = QToolBar("Main Toolbar")
        toolbar.setMovable(False)
        self.addToolBar(toolbar)

        export_action = QAction("Export PDF", self)
        export_action.setShortcut(QKeySequence.StandardKey.Save)
        export_action.triggered.connect(self.export_pdf)
        toolbar.addAction(export_action)

        readonly_action = QAction("Make PDF Read-only", self)
        readonly_action.triggered.connect(self.make_pdf_readonly)
        toolbar.addAction(readonly_action)

        delete_action = QAction("Delete Field", self)
        delete_action.triggered.connect(self.delete_selected_field)
        toolbar.addAction(delete_action)

        toolbox = QToolBar("Fields")
        toolbox.setMovable(False)
        self.addToolBar(Qt.ToolBarArea.LeftToolBarArea, toolbox)
        for field_type, spec in FIELD_SPECS.items():
            action = QAction(f"Add {spec.display_name}", self)
            action.triggered.connect(lambda _checked=False, t=field_type: self.add_field(t))
            toolbox.addAction(action)

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self._jobs.shutdown()
        super().closeEvent(event)

    def add_field(self, field_type: FieldType) -> None:
        field = self._controller.add_field(field_type)
        self.canvas.select_field(field.id)
        self._on_fields_changed()

    def delete_selected_field(self) -> None:
        if self.canvas.delete_selected_field():
            self.statusBar().showMessage(f"Deleted field. {len(self._controller.fields)} field(s)")
        else:
            self.statusBar().showMessage("No selected field to delete.")

    def export_pdf(self) -> None:
        if not self._controller.fields:
            self.statusBar().showMessage("Add at least one field before exporting.")
            return

        self._jobs.export_form(self._controller.session.snapshot(), config.EXPORT_FILENAME)
        self.statusBar().showMessage("Generating PDF…")

    def make_pdf_readonly(self) -> None:
        file_path, _ = QFileDialog.getOpenFileName(
            self,
            "Select Filled PDF",
            str(Path.home()),
            "PDF Files (*.pdf)",
        )
        if not file_path:
            return

        source = Path(file_path)
        try:
            data = source.read_bytes()
        except OSError as exc:
            QMessageBox.critical(self, "Open Failed", str(exc))
            return

        self._jobs.flatten(data, str(source.with_name(readonly_filename(source.name))))
        self.statusBar().showMessage(f"Locking {source.name}…")

    def keyPressEvent(self, event) -> None:  # type: ignore[override]
        if event.key() == Qt.Key.Key_Delete:
            self.delete_selected_field()
            event.accept()
            return
        super().keyPressEvent(event)

    def _on_fields_changed(self) -> None:
        self.statusBar().showMessage(f"{len(self._controller.fields)} field(s)")

    def _on_job_succeeded(self, tag: str, data: bytes, suggested: str) -> None:
        title = "Save Form PDF" if tag == "export" else "Save Read-only PDF"
        default_path = suggested if Path(suggested).is_absolute() else str(Path.home() / suggested)
        output_path, _ = QFileDialog.getSaveFileName(self, title, default_path, "PDF Files (*.pdf)")
        if not output_path:
            self.statusBar().showMessage("Save cancelled.")
            return

        try:
            Path(output_path).write_bytes(data)
        except OSError as exc:
            QMessageBox.critical(self, "Save Failed", str(exc))
            return

        if tag == "export":
            try:
                count = len(read_widgets(data))
            except PdfInspectError:
                count = 0
            self.statusBar().showMessage(f"Saved: {output_path} ({count} fillable field(s))")
        else:
            self.statusBar().showMessage(f"Saved read-only copy: {output_path}")

    def _on_job_failed(self, tag: str, error: Exception) -> None:
        if tag == "export":
            QMessageBox.critical(self, "Export Failed", f"Failed to generate PDF: {error}")
        else:
            QMessageBox.critical(
                self,
                "Read-only Failed",
                "Could not process the PDF. Please ensure the PDF is valid.",
            )
        self.statusBar().showMessage("Ready")
