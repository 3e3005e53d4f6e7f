import sys
from pathlib import Path

sys.path.insert(0, str(Path("..", "..", "src").resolve()))

project = "ZoneMerge"
copyright = "2026, ZoneMerge developers"
author = "ZoneMerge developers"
release = "v1.0.0"
version = "v1.0.0"

extensions = [
    "myst_parser",
    "sphinx.ext.autodoc",
    "sphinx.ext.autosummary",
    "sphinx.ext.napoleon",
]

autodoc_member_order = "bysource"
autosummary_generate = True

exclude_patterns = ["_build", "Thumbs.db", ".DS_Store", ".venv"]

templates_path = ["_templates"]

html_theme = "alabaster"
