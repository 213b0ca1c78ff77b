"""Directory-tree folder and form source provider.

This module exposes a local directory tree as the folder hierarchy the
reconcile engine walks. Form sources are ``*.form.json`` documents whose
id is their path relative to the forms root.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
import json
from pathlib import Path
from typing import Any, Mapping

from core.constants import FORM_FILE_SUFFIX, FORM_FILE_TYPE
from core.errors import RollcallSourceError
from core.types import FolderRef, FormResponse, SourceRef


@dataclass(frozen=True)
class FormDocument:
    """Opened form document payload."""

    source_id: str
    path: Path
    payload: Mapping[str, Any]


class LocalFormFolders:
    """Folder and source provider backed by a local directory tree."""

    def __init__(self, forms_root: Path) -> None:
        self._forms_root = forms_root.expanduser().resolve()

    def find_folder_by_name(self, name: str) -> FolderRef | None:
        """Find the first folder with a matching name, breadth-first in sorted order.

        Args:
            name: Exact folder name.

        Returns:
            Folder handle, or None when no folder matches.
        """
        if not self._forms_root.is_dir():
            return None
        queue = deque([self._forms_root])
        seen_paths: set[Path] = set()
        while queue:
            folder_path = queue.popleft()
            resolved_path = folder_path.resolve()
            if resolved_path in seen_paths:
                continue
            seen_paths.add(resolved_path)
            if folder_path.name == name:
                return self._folder_ref(folder_path)
            queue.extend(_child_directories(folder_path))
        return None

    def find_child_folder(self, folder: FolderRef, name: str) -> FolderRef | None:
        """Return the direct child folder with a matching name, if any."""
        for child_path in _child_directories(self._folder_path(folder)):
            if child_path.name == name:
                return self._folder_ref(child_path)
        return None

    def list_subfolders(self, folder: FolderRef) -> list[FolderRef]:
        """List direct child folders in name order."""
        return [
            self._folder_ref(child_path)
            for child_path in _child_directories(self._folder_path(folder))
        ]

    def list_typed_files(self, folder: FolderRef, file_type: str) -> list[SourceRef]:
        """List form documents directly inside a folder in name order.

        Args:
            folder: Folder to list.
            file_type: Requested document type; only ``form`` is supported.

        Returns:
            Source handles for matching documents.
        """
        if file_type != FORM_FILE_TYPE:
            return []
        folder_path = self._folder_path(folder)
        form_paths = sorted(
            path
            for path in folder_path.iterdir()
            if path.is_file() and path.name.endswith(FORM_FILE_SUFFIX)
        )
        return [
            SourceRef(
                source_id=self._relative_id(form_path),
                name=form_path.name[: -len(FORM_FILE_SUFFIX)],
            )
            for form_path in form_paths
        ]

    def open(self, source_id: str) -> FormDocument:
        """Open and parse a form document.

        Args:
            source_id: Path of the document relative to the forms root.

        Returns:
            Parsed document.

        Raises:
            RollcallSourceError: If the document is missing, not UTF-8, or not valid JSON.
        """
        form_path = (self._forms_root / source_id).resolve()
        if not form_path.is_relative_to(self._forms_root):
            raise RollcallSourceError(
                f"Form id '{source_id}' points outside the forms root {self._forms_root}. "
                "Use ids relative to the forms root."
            )
        try:
            payload = json.loads(form_path.read_text(encoding="utf-8"))
        except OSError as error:
            raise RollcallSourceError(
                f"Failed to open form at {form_path}: {error}. "
                "Check the file exists and is readable."
            ) from error
        except UnicodeDecodeError as error:
            raise RollcallSourceError(
                f"Failed to decode form at {form_path}: {error.reason}. "
                "Save the form as UTF-8; the form is retried on the next run."
            ) from error
        except json.JSONDecodeError as error:
            raise RollcallSourceError(
                f"Failed to parse form at {form_path}: {error.msg}. "
                "Fix the JSON syntax; the form is retried on the next run."
            ) from error
        if not isinstance(payload, dict):
            raise RollcallSourceError(
                f"Invalid form at {form_path}: expected a JSON object at top level."
            )
        return FormDocument(source_id=source_id, path=form_path, payload=payload)

    def list_responses(self, source: FormDocument) -> list[FormResponse]:
        """Parse submitted responses from an opened document.

        Raises:
            RollcallSourceError: If the responses payload is malformed.
        """
        raw_responses = source.payload.get("responses", [])
        if not isinstance(raw_responses, list):
            raise RollcallSourceError(
                f"Invalid form at {source.path}: field 'responses' must be a list."
            )
        return [
            _parse_response(source.path, raw_response, index)
            for index, raw_response in enumerate(raw_responses, 1)
        ]

    def _folder_ref(self, folder_path: Path) -> FolderRef:
        return FolderRef(folder_id=self._relative_id(folder_path), name=folder_path.name)

    def _folder_path(self, folder: FolderRef) -> Path:
        return self._forms_root / folder.folder_id

    def _relative_id(self, path: Path) -> str:
        return path.relative_to(self._forms_root).as_posix()


def _child_directories(folder_path: Path) -> list[Path]:
    """Return visible child directories in name order.

    Symlinked directories are not followed, so a link back to an ancestor
    cannot make the same forms reachable under a second path.
    """
    return sorted(
        path
        for path in folder_path.iterdir()
        if path.is_dir() and not path.is_symlink() and not path.name.startswith(".")
    )


def _parse_response(form_path: Path, raw_response: object, index: int) -> FormResponse:
    """Parse one raw response object.

    Args:
        form_path: Document path for error context.
        raw_response: Raw response payload.
        index: One-based response position.

    Returns:
        Typed response.

    Raises:
        RollcallSourceError: If the response shape is invalid.
    """
    if not isinstance(raw_response, dict):
        raise RollcallSourceError(
            f"Invalid response #{index} in form at {form_path}: expected a JSON object."
        )
    respondent_email = raw_response.get("respondent_email")
    if respondent_email is not None and not isinstance(respondent_email, str):
        raise RollcallSourceError(
            f"Invalid response #{index} in form at {form_path}: "
            "'respondent_email' must be a string or null."
        )
    raw_items = raw_response.get("items", [])
    if not isinstance(raw_items, list):
        raise RollcallSourceError(
            f"Invalid response #{index} in form at {form_path}: 'items' must be a list."
        )
    items: list[tuple[str, object]] = []
    for raw_item in raw_items:
        if not isinstance(raw_item, dict) or not isinstance(raw_item.get("title"), str):
            raise RollcallSourceError(
                f"Invalid item in response #{index} of form at {form_path}: "
                "expected an object with a string 'title'."
            )
        items.append((raw_item["title"], raw_item.get("answer")))
    return FormResponse(items=tuple(items), respondent_email=respondent_email)
