"""Library description extraction from package manifests and READMEs."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from . import config
from .models import Finding, FindingKind, LibraryDescription
from .reporter import EnvironmentFailure, FindingReporter
from .storage import save_json

logger = logging.getLogger(__name__)

# docs config keys that describe where to look rather than what to publish
_LOOKUP_KEYS = ("path", "hasPackageDir", "description")


def library_paths(path: Path, has_package_dir: bool) -> List[Tuple[str, Path]]:
    """``(name, path)`` for each library: ``packages/*`` or the path itself."""
    if not has_package_dir:
        return [(path.name, path)]
    package_dir = path / "packages"
    if not package_dir.is_dir():
        raise EnvironmentFailure(f"Unable to find libraries in {package_dir}")
    return [
        (entry.name, entry)
        for entry in sorted(package_dir.iterdir())
        if entry.is_dir() and entry.name != "sampler" and not entry.name.startswith(".")
    ]


def readme_description(library_path: Path) -> Optional[str]:
    """Return the blockquote summary on the third line of ``README.md``, if any."""
    readme = library_path / "README.md"
    try:
        lines = readme.read_text(encoding="utf-8").split("\n")
    except OSError:
        return None
    if len(lines) < 3 or "> " not in lines[2]:
        return None
    return lines[2].split("> ")[1] or None


def extract_library_descriptions(
    docs_config: Dict[str, Any],
    strict: bool = False,
    reporter: Optional[FindingReporter] = None,
) -> Dict[str, LibraryDescription]:
    """Collect version, dependencies, and description for every library.

    Args:
        docs_config: Output of :func:`config_manager.load_docs_config`
        strict: Report libraries without a readable ``package.json``
        reporter: Receives findings for unreadable manifests

    Returns:
        Mapping of library name to its description
    """
    root = Path(docs_config["path"])
    configured_description = docs_config.get("description")
    extra = {k: v for k, v in docs_config.items() if k not in _LOOKUP_KEYS}
    output: Dict[str, LibraryDescription] = {}

    for name, lib_path in library_paths(root, bool(docs_config.get("hasPackageDir"))):
        manifest_path = lib_path / "package.json"
        try:
            manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.debug("No usable package.json in %s: %s", lib_path, exc)
            if strict and reporter is not None:
                reporter.report(Finding(
                    kind=FindingKind.LIBRARY_MANIFEST,
                    message=f"Unable to load package.json in {lib_path}!",
                    location=str(manifest_path),
                ))
            continue

        description = (
            configured_description
            or readme_description(lib_path)
            or manifest.get("description", "")
        )
        output[name] = LibraryDescription(
            package_name=manifest.get("name", ""),
            version=manifest.get("version", ""),
            dependencies=manifest.get("dependencies") or {},
            description=description,
            extra=dict(extra),
        )
    return output


def save_library_descriptions(
    descriptions: Dict[str, LibraryDescription],
    path: Path = config.LIBRARY_DESCRIPTION_FILE,
) -> Path:
    save_json(path, {name: desc.to_dict() for name, desc in descriptions.items()})
    return path
