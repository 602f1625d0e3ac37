"""Application-wide constants for the form builder."""

from __future__ import annotations

import os

# Page geometry (PDF points, A4)
PAGE_WIDTH = 595.0
PAGE_HEIGHT = 842.0

# Interaction
MIN_FIELD_SIZE = 20.0
RESIZE_HANDLE_SIZE = 10.0
PLACEMENT_X = 50.0
PLACEMENT_Y = 50.0
PLACEMENT_STEP = 40.0

# Emission
FONT_NAME = "Helvetica"
LABEL_FONT_SIZE = 12
LIST_FONT_SIZE = 10
LIST_LINE_HEIGHT = 14.0
TEXT_TOP_INSET = 10.0
WIDGET_FONT_SIZE = 10
BULLET_PREFIX = "• "
SIGNATURE_PLACEHOLDER = "Sign Here"
SIGNATURE_FILL_ALPHA = 0.1

FOOTER_LINES = (
    'Note: After filling this form, use the "Make PDF Read-only" action',
    "in the form builder to lock all fields and prevent further editing.",
)
FOOTER_FONT_SIZE = 7
FOOTER_LINE_HEIGHT = 10.0
FOOTER_BASELINE = 15.0
FOOTER_MIN_X = 20.0
FOOTER_GRAY = 0.4

# Files
EXPORT_FILENAME = "form.pdf"
READONLY_SUFFIX = "_readonly"

# Logging
LOG_LEVEL = os.getenv("FORMBUILDER_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
