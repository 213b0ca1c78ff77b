"""Depth-first source discovery.

This module enumerates form sources under a root folder without recursion.
Folders are visited parent before children, children in provider order,
and each folder is expanded at most once.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from core.constants import FORM_FILE_TYPE
from core.providers import FolderProvider
from core.types import FolderRef, SourceRef


@dataclass(frozen=True)
class DiscoveredSource:
    """A source together with the folder path it was found under."""

    source: SourceRef
    folder_path: str


@dataclass(frozen=True)
class VisitedFolder:
    """A folder reached by the walk, with its slash-joined path and depth."""

    folder: FolderRef
    path: str
    depth: int


class SourceWalker:
    """Lazy depth-first walker over a folder provider."""

    def __init__(self, folders: FolderProvider, file_type: str = FORM_FILE_TYPE) -> None:
        self._folders = folders
        self._file_type = file_type

    def walk(self, root: FolderRef) -> Iterator[DiscoveredSource]:
        """Yield sources under ``root`` in depth-first document order.

        Args:
            root: Folder the walk starts from.

        Yields:
            Discovered sources with their slash-joined folder path.
        """
        for pending, sources in self.walk_folders(root):
            for source in sources:
                yield DiscoveredSource(source=source, folder_path=pending.path)

    def walk_folders(self, root: FolderRef) -> Iterator[tuple[VisitedFolder, list[SourceRef]]]:
        """Yield each visited folder with the sources it directly contains."""
        stack = [VisitedFolder(folder=root, path=root.name, depth=0)]
        visited_ids: set[str] = set()
        while stack:
            pending = stack.pop()
            if pending.folder.folder_id in visited_ids:
                continue
            visited_ids.add(pending.folder.folder_id)
            yield pending, list(self._folders.list_typed_files(pending.folder, self._file_type))
            subfolders = self._folders.list_subfolders(pending.folder)
            for child in reversed(list(subfolders)):
                stack.append(
                    VisitedFolder(
                        folder=child,
                        path=f"{pending.path}/{child.name}",
                        depth=pending.depth + 1,
                    )
                )
