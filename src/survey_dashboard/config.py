from __future__ import annotations

import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Project paths
# ---------------------------------------------------------------------------

# Root of the project (repo root)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Directory holding summaries.json and metadata.json (written by the R export step)
DATA_DIR = Path(
    os.getenv("SURVEY_DASHBOARD_DATA_DIR", "").strip() or PROJECT_ROOT / "data"
)

SUMMARIES_FILENAME = "summaries.json"
METADATA_FILENAME = "metadata.json"

# ---------------------------------------------------------------------------
# App identity
# ---------------------------------------------------------------------------

APP_NAME = "Teen Personality Traits Dashboard"
APP_VERSION = "0.1.0"
APP_SUBTITLE = "Explore means by demographic subgroups"
FOOTER_TEXT = (
    "Teen Personality Traits Analysis | CESR Education Data Team | "
    "University of Southern California"
)

# ---------------------------------------------------------------------------
# Remote data location
#
# When set, both data files are fetched over HTTP relative to this base URL
# (e.g. https://example.org/dashboard/data/). When empty, DATA_DIR is read.
# ---------------------------------------------------------------------------

DATA_BASE_URL = os.getenv("SURVEY_DASHBOARD_DATA_URL", "").strip()
HTTP_TIMEOUT_SECONDS = int(os.getenv("SURVEY_DASHBOARD_HTTP_TIMEOUT", "30"))

# ---------------------------------------------------------------------------
# Presentation
# ---------------------------------------------------------------------------

# Subgroups whose n falls below this are flagged in the notes section
SMALL_SAMPLE_THRESHOLD = 30

# Likert items are scored 1-5; scale scores use an automatic range
ITEM_AXIS_RANGE = (1, 5)

SERIES_COLORS = [
    "#2563eb",
    "#dc2626",
    "#16a34a",
    "#ca8a04",
    "#9333ea",
    "#0891b2",
    "#be185d",
    "#065f46",
]
