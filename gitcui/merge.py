"""
Merge a commit's tree and a reference tree into one annotated tree.

The result keeps every entry of both sides, so deleted files stay visible
next to the ones that exist in the selected commit, and every node carries
the change status of its subtree.
"""
from __future__ import annotations

import functools
import logging
from typing import Iterable, Optional, Sequence

from gitcui.config import MAX_OPEN_DEPTH
from gitcui.models import (
    ZERO_HASH,
    AugmentedNode,
    ChangeKind,
    ChangeRecord,
    EntryKind,
    Snapshot,
    SnapshotEntry,
)

logger = logging.getLogger(__name__)

Contribution = tuple[str, ChangeKind]


def combine_status(a: ChangeKind, b: ChangeKind) -> ChangeKind:
    """Combine two child statuses into the status of their directory.

    UNCHANGED is neutral and MODIFY absorbs everything; an insertion next
    to a deletion reads as a modification of the directory.
    """
    if a is ChangeKind.UNCHANGED:
        return b
    if b is ChangeKind.UNCHANGED or a is b:
        return a
    return ChangeKind.MODIFY


def aggregate_status(statuses: Iterable[ChangeKind]) -> ChangeKind:
    return functools.reduce(combine_status, statuses, ChangeKind.UNCHANGED)


def build_augmented_tree(
    current: Optional[Snapshot],
    reference: Optional[Snapshot],
    changes: Sequence[ChangeRecord],
    max_open_depth: int = MAX_OPEN_DEPTH,
) -> AugmentedNode:
    """Build the annotated tree for `current` compared with `reference`.

    `changes` describes how `reference` turns into `current`. Either
    snapshot may be None, in which case that side is treated as empty.
    Directories within `max_open_depth` levels of the root, and any
    directory holding a change, start expanded.
    """
    contributions = [c for record in changes for c in record.contributions()]
    root = _build_dir(".", (), current, reference, contributions, max_open_depth)
    logger.debug(
        f"build_augmented_tree: {len(changes)} change(s), root status={root.status.value}"
    )
    return root


def _lookup(snapshot: Optional[Snapshot], name: str) -> Optional[Snapshot]:
    if snapshot is None:
        return None
    return snapshot.lookup(name)


def _collect_entries(
    current: Optional[Snapshot], reference: Optional[Snapshot]
) -> tuple[list[str], dict[str, SnapshotEntry]]:
    subdirs: set[str] = set()
    files: dict[str, SnapshotEntry] = {}
    # current comes first so its file entries win over the reference's
    for snapshot in (current, reference):
        if snapshot is None:
            continue
        for entry in snapshot.entries():
            if entry.is_dir:
                subdirs.add(entry.name)
            else:
                files.setdefault(entry.name, entry)
    return sorted(subdirs), files


def _build_dir(
    name: str,
    components: tuple[str, ...],
    current: Optional[Snapshot],
    reference: Optional[Snapshot],
    contributions: list[Contribution],
    depth: int,
) -> AugmentedNode:
    level = len(components)
    by_segment: dict[str, list[Contribution]] = {}
    by_path: dict[str, ChangeKind] = {}
    for path, kind in contributions:
        parts = path.split("/")
        if len(parts) <= level:
            logger.debug(f"_build_dir: change {path!r} ends above {'/'.join(components)!r}")
            continue
        by_segment.setdefault(parts[level], []).append((path, kind))
        if len(parts) == level + 1:
            # a path can collect both halves of two renames (a->b, b->a)
            by_path[path] = combine_status(by_path.get(path, ChangeKind.UNCHANGED), kind)

    subdirs, files = _collect_entries(current, reference)

    children: list[AugmentedNode] = []
    for subdir in subdirs:
        children.append(
            _build_dir(
                subdir,
                components + (subdir,),
                _lookup(current, subdir),
                _lookup(reference, subdir),
                by_segment.get(subdir, []),
                depth - 1,
            )
        )

    for filename in sorted(files):
        path = "/".join(components + (filename,))
        children.append(
            AugmentedNode(
                name=filename,
                path=path,
                kind=EntryKind.FILE,
                content_hash=files[filename].hash,
                status=by_path.pop(path, ChangeKind.UNCHANGED),
            )
        )

    for path in by_path:
        if path.split("/")[-1] not in subdirs:
            logger.debug(f"_build_dir: change {path!r} matches no entry on either side")

    status = aggregate_status(child.status for child in children)
    return AugmentedNode(
        name=name,
        path="/".join(components) or ".",
        kind=EntryKind.DIR,
        content_hash=current.hash if current is not None else ZERO_HASH,
        status=status,
        children=tuple(children),
        expanded=not (depth <= 0 and status is ChangeKind.UNCHANGED),
    )
