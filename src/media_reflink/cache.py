"""Lazily built content index of library target folders.

Each target folder gets one ContentCache tree, built the first time the
target is looked up and reused for every later lookup in the same run. Walking
the library is the expensive part of matching, so CacheRegistry never lists
the same target twice.

A ContentCache node is either a leaf (a media file, or nothing further to
index) or a branch mapping signal names to child nodes. Containment checks
descend through every branch, so a name found three folders deep still
counts as evidence that the source belongs to that target.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from pathlib import Path

from loguru import logger

from .signals import Lister, classify, list_dir

log = logger.bind(stage="cache")


class ContentCache:
    """A leaf (children is None) or a branch of named child nodes."""

    __slots__ = ("children",)

    def __init__(self, children: dict[str, ContentCache] | None = None) -> None:
        self.children = children

    @classmethod
    def leaf(cls) -> ContentCache:
        return cls(None)

    @classmethod
    def branch(cls, children: dict[str, ContentCache] | None = None) -> ContentCache:
        return cls(dict(children) if children else {})

    @property
    def is_leaf(self) -> bool:
        return self.children is None

    # -- Queries --

    def contains(self, name: str) -> bool:
        """True if name is a key here or anywhere below. Leaves contain nothing."""
        if self.children is None:
            return False
        if name in self.children:
            return True
        return any(child.contains(name) for child in self.children.values())

    def contains_any(self, names: Iterable[str]) -> bool:
        """True if at least one of names is contained in this tree."""
        return any(self.contains(name) for name in names)

    def contains_key(self, name: str) -> bool:
        """Direct key check, no descent."""
        return self.children is not None and name in self.children

    def get(self, name: str) -> ContentCache | None:
        if self.children is None:
            return None
        return self.children.get(name)

    # -- Mutation (append only) --

    def insert(self, name: str) -> None:
        """Add name as a leaf. No-op on a leaf node."""
        if self.children is not None:
            self.children[name] = ContentCache.leaf()

    def insert_branch(self, name: str) -> ContentCache | None:
        """Add an empty branch under name and return it for population."""
        if self.children is None:
            return None
        node = ContentCache.branch()
        self.children[name] = node
        return node

    # -- Traversal --

    def keys(self) -> list[str]:
        return list(self.children) if self.children is not None else []

    def items(self) -> list[tuple[str, ContentCache]]:
        return list(self.children.items()) if self.children is not None else []

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self.children) if self.children is not None else 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ContentCache):
            return NotImplemented
        return self.children == other.children

    def __repr__(self) -> str:
        if self.children is None:
            return "ContentCache.leaf()"
        return f"ContentCache.branch({self.children!r})"

    def walk(self, prefix: tuple[str, ...] = ()) -> Iterator[tuple[tuple[str, ...], ContentCache]]:
        """Depth-first (path, node) pairs for every node below this one."""
        for name, child in self.items():
            path = prefix + (name,)
            yield path, child
            yield from child.walk(path)

    def names(self) -> set[str]:
        """Every signal name in the tree, at any depth."""
        return {path[-1] for path, _ in self.walk()}

    def depth(self) -> int:
        """Number of branch levels below this node (0 for leaf or empty)."""
        if not self.children:
            return 0
        return 1 + max(
            (child.depth() for child in self.children.values() if not child.is_leaf),
            default=0,
        )


class CacheRegistry:
    """Per-run owner of every target's ContentCache.

    Caches are added on first lookup and never rebuilt or evicted. Iteration
    order is insertion order, which is the tie-break when several targets
    match the same source.
    """

    def __init__(self, library_root: Path, lister: Lister = list_dir) -> None:
        self.library_root = library_root
        self._lister = lister
        self._caches: dict[str, ContentCache] = {}

    def get_or_build(self, target: str) -> ContentCache:
        """Return the target's cache, walking the library on first request."""
        cache = self._caches.get(target)
        if cache is not None:
            return cache

        cache = ContentCache.branch()
        self._fill(cache, self.library_root / target)
        # Only published after the walk completes
        self._caches[target] = cache
        log.debug(f"Indexed target '{target}': {len(cache.names())} names")
        return cache

    def _fill(self, node: ContentCache, directory: Path) -> None:
        """Recursively index directory into node."""
        for entry in self._lister(directory):
            sig = classify(entry)
            if sig is None:
                continue
            if sig.recurse is None:
                node.insert(sig.name)
            else:
                child = node.insert_branch(sig.name)
                if child is not None:
                    self._fill(child, sig.recurse)

    def first_match(self, names: Iterable[str]) -> str | None:
        """First built target, in insertion order, containing any of names."""
        wanted = frozenset(names)
        if not wanted:
            return None
        for target, cache in self._caches.items():
            if cache.contains_any(wanted):
                return target
        return None

    def is_built(self, target: str) -> bool:
        return target in self._caches

    def get(self, target: str) -> ContentCache | None:
        return self._caches.get(target)

    def __contains__(self, target: object) -> bool:
        return target in self._caches

    def __iter__(self) -> Iterator[tuple[str, ContentCache]]:
        return iter(list(self._caches.items()))

    def __len__(self) -> int:
        return len(self._caches)

    @property
    def targets(self) -> list[str]:
        return list(self._caches)
