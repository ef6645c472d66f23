"""Infer which library target a source folder belongs to.

Lookups are ordered cheapest first. Already-built caches are checked before
any new target is walked, and forced builds stop at the first target that
literally contains the source folder's name. First match wins; the order
targets were first indexed is the tie-break.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path

from loguru import logger

from .cache import CacheRegistry
from .signals import Entry, Lister, list_dir, signal_names

log = logger.bind(stage="match")


class Matcher:
    """Resolve source folder names to library targets for one run."""

    def __init__(
        self,
        registry: CacheRegistry,
        targets: Sequence[str],
        source_root: Path,
        lister: Lister = list_dir,
    ) -> None:
        self.registry = registry
        self.targets = list(targets)
        self.source_root = source_root
        self._lister = lister
        self._signatures: dict[Path, frozenset[str]] = {}

    def _source_path(self, source: str, parent: str | None) -> Path:
        """Children of a nested record live inside the parent folder."""
        if parent:
            return self.source_root / parent / source
        return self.source_root / source

    def signature(
        self,
        source: str,
        listing: Iterable[Entry] | None = None,
        parent: str | None = None,
    ) -> frozenset[str]:
        """Signal names directly under the source folder (memoized)."""
        path = self._source_path(source, parent)
        sig = self._signatures.get(path)
        if sig is not None:
            return sig
        if listing is None:
            listing = self._lister(path)
        sig = signal_names(listing)
        self._signatures[path] = sig
        return sig

    def find_target(
        self,
        source: str,
        listing: Iterable[Entry] | None = None,
        parent: str | None = None,
    ) -> str | None:
        """Return the target whose content overlaps the source, or None.

        parent names the nested record a child source belongs to.
        """
        # 1. Warm caches, by name plus any signature from an earlier lookup
        memo = self._signatures.get(self._source_path(source, parent), frozenset())
        names = {source} | memo
        target = self.registry.first_match(names)
        if target is not None:
            log.debug(f"'{source}' -> '{target}' (warm cache)")
            return target

        # 2-3. Build the signature, then retry the warm caches with it
        sig = self.signature(source, listing, parent)
        target = self.registry.first_match(sig)
        if target is not None:
            log.debug(f"'{source}' -> '{target}' (signature, warm cache)")
            return target

        # 4. Index remaining targets one at a time, looking for the source name
        for candidate in self.targets:
            if self.registry.is_built(candidate):
                continue
            cache = self.registry.get_or_build(candidate)
            if cache.contains(source):
                log.debug(f"'{source}' -> '{candidate}' (name found in target)")
                return candidate

        # 5. Everything is indexed now
        target = self.registry.first_match(sig)
        if target is not None:
            log.debug(f"'{source}' -> '{target}' (signature, full index)")
            return target

        log.debug(f"No target for '{source}' ({len(sig)} signal names)")
        return None
