"""Cross-reference registry accumulated while doc records are ingested.

One registry lives for one full run. It grows monotonically during ingestion and
is frozen before references are resolved, so resolution always sees the whole
corpus regardless of the order directories were scanned in.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional, Set

from .models import ReferenceCitation


class RegistryFrozenError(RuntimeError):
    """Raised when the registry is mutated after ingestion finished."""


class SymbolRegistry:
    """Known statics, modules, libraries, references, and links for a run."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._frozen = False
        self.all_statics: Set[str] = set()
        self.all_modules: Set[str] = set()
        self.all_libraries: Set[str] = set()
        self.all_refs: Dict[str, List[ReferenceCitation]] = {}
        self.all_links: Dict[str, List[str]] = {}

    @staticmethod
    def library_of(identifier: str) -> str:
        return identifier.split("/")[0]

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    def _check_open(self) -> None:
        if self._frozen:
            raise RegistryFrozenError("registry is read-only once resolution has started")

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def register_static(self, identifier: str) -> bool:
        """Add ``memberof.name``; returns False if it was already known."""
        with self._lock:
            self._check_open()
            if identifier in self.all_statics:
                return False
            self.all_statics.add(identifier)
            return True

    def add_reference(
        self,
        target: str,
        kind: str,
        name: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        with self._lock:
            self._check_open()
            self.all_refs.setdefault(target, []).append(
                ReferenceCitation(kind=kind, name=name, context=context)
            )

    def add_link(self, url: str, module_name: str) -> None:
        with self._lock:
            self._check_open()
            citing = self.all_links.setdefault(url, [])
            if module_name not in citing:
                citing.append(module_name)

    def register_module(self, module_name: str) -> None:
        with self._lock:
            self._check_open()
            self.all_modules.add(module_name)
            self.all_libraries.add(self.library_of(module_name))

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def has_static(self, identifier: str) -> bool:
        return identifier in self.all_statics

    def has_module(self, module_name: str) -> bool:
        return module_name in self.all_modules

    def has_library(self, library: str) -> bool:
        return library in self.all_libraries

    def references(self) -> Dict[str, List[ReferenceCitation]]:
        return {key: list(value) for key, value in self.all_refs.items()}

    def links(self) -> Dict[str, List[str]]:
        return {key: list(value) for key, value in self.all_links.items()}

    def stats(self) -> Dict[str, int]:
        return {
            "modules": len(self.all_modules),
            "libraries": len(self.all_libraries),
            "statics": len(self.all_statics),
            "references": len(self.all_refs),
            "links": len(self.all_links),
        }
