"""Configuration paths and defaults for docindex runs."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(os.environ.get("DOCINDEX_HOME", str(Path.home() / ".docindex"))).expanduser()
CONFIG_FILE = BASE_DIR / "config.toml"

# Documentation site layout, relative to the working directory
DATA_DIR = Path(os.environ.get("DOCINDEX_DATA_DIR", "src/data"))
PAGES_DIR = Path(os.environ.get("DOCINDEX_PAGES_DIR", "src/pages"))
MODULES_DIR = PAGES_DIR / "docs" / "modules"
LIBRARY_DESCRIPTION_FILE = DATA_DIR / "libraryDescription.json"
SEARCH_INDEX_FILE = DATA_DIR / "docIndex.json"

# Persisted doc output is pruned of these keys
KEYS_TO_IGNORE = frozenset({
    "lineNumber", "position", "code", "loc", "context",
    "path", "loose", "checked", "todos", "errors",
})

# Custom tags the parser reports as "unknown tag" but which are expected
ALLOWED_ERROR_TAGS = ("@curried", "@hoc", "@hocconfig", "@omit", "@required", "@template", "@ui")

# Modules that may be linked to without a matching doclet
LINK_EXCEPTIONS = ("spotlight/Spotlight",)

# Source paths are reported relative to this prefix
RAW_PREFIX = r".*/raw/enact/"

SKIP_DIRS = frozenset({
    "build", "node_modules", "sampler", "samples", "tests", "dist", "coverage",
})

DEFAULT_PATTERN = "*.js"
DEFAULT_CONCURRENCY = 8
PARSER_COMMAND = ("documentation", "build", "--shallow", "--format", "json")
