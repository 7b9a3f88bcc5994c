"""Path resolution and identifier validation.

Paths are slash-separated segments alternating collection / document, with
the owning project id as the first segment of a canonical path:

    project/collection/document[/collection/document...]   (document path)
    project/collection[/document/collection...]            (collection path)

Canonical document paths therefore have an odd segment count and canonical
collection paths an even one. All checks here run before any request.
"""

import re

from basebase.domain.exceptions import InvalidArgumentError

SEPARATOR = "/"
DATABASE_ID = "(default)"

PROJECT_ID_MAX_LENGTH = 30
DOCUMENT_ID_MAX_LENGTH = 255
COLLECTION_NAME_MAX_LENGTH = 255

_PROJECT_ID_RE = re.compile(r"^(?!-)[A-Za-z0-9_-]{1,30}(?<!-)$")
_DOCUMENT_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,255}$")
_COLLECTION_NAME_RE = re.compile(r"^[A-Za-z0-9_-]{1,255}$")
_NON_ALNUM_RE = re.compile(r"[^A-Za-z0-9]")


def validate_path(path: str) -> None:
    """Validate a raw collection or document path.

    Raises:
        InvalidArgumentError: If the path is empty, starts or ends with a
            separator, or contains an empty segment.
    """
    if not path or not isinstance(path, str):
        raise InvalidArgumentError("Path must be a non-empty string", field="path")
    if path.startswith(SEPARATOR) or path.endswith(SEPARATOR):
        raise InvalidArgumentError("Path cannot start or end with a slash", field="path")
    if any(segment == "" for segment in path.split(SEPARATOR)):
        raise InvalidArgumentError("Path cannot contain empty segments", field="path")


def validate_project_id(project_id: str) -> None:
    """Validate a project id: 1-30 of [A-Za-z0-9_-], no leading/trailing hyphen."""
    if not project_id or not isinstance(project_id, str):
        raise InvalidArgumentError("Project ID must be a non-empty string", field="project_id")
    if len(project_id) > PROJECT_ID_MAX_LENGTH:
        raise InvalidArgumentError(
            f"Project ID must not exceed {PROJECT_ID_MAX_LENGTH} characters",
            field="project_id",
        )
    if not _PROJECT_ID_RE.match(project_id):
        raise InvalidArgumentError(
            "Project ID must contain only letters, numbers, underscores and hyphens, "
            "and cannot start or end with a hyphen",
            field="project_id",
        )


def is_valid_project_id(project_id: str) -> bool:
    return isinstance(project_id, str) and bool(_PROJECT_ID_RE.match(project_id))


def validate_document_id(document_id: str) -> None:
    """Validate a document id: 1-255 of [A-Za-z0-9_-]."""
    if not document_id or not isinstance(document_id, str):
        raise InvalidArgumentError("Document ID must be a non-empty string", field="document_id")
    if SEPARATOR in document_id:
        raise InvalidArgumentError("Document ID cannot contain slashes", field="document_id")
    if len(document_id) > DOCUMENT_ID_MAX_LENGTH:
        raise InvalidArgumentError(
            f"Document ID must not exceed {DOCUMENT_ID_MAX_LENGTH} characters",
            field="document_id",
        )
    if not _DOCUMENT_ID_RE.match(document_id):
        raise InvalidArgumentError(
            "Document ID must contain only letters, numbers, underscores and hyphens",
            field="document_id",
        )


def validate_collection_name(name: str) -> None:
    """Validate a collection name: 1-255 of [A-Za-z0-9_-]."""
    if not name or not isinstance(name, str):
        raise InvalidArgumentError("Collection name must be a non-empty string", field="collection")
    if len(name) > COLLECTION_NAME_MAX_LENGTH:
        raise InvalidArgumentError(
            f"Collection name must not exceed {COLLECTION_NAME_MAX_LENGTH} characters",
            field="collection",
        )
    if not _COLLECTION_NAME_RE.match(name):
        raise InvalidArgumentError(
            "Collection name must contain only letters, numbers, underscores and hyphens",
            field="collection",
        )


def is_absolute_path(path: str) -> bool:
    """Segment-count rule: 3+ segments read as project/collection/document."""
    return len(path.split(SEPARATOR)) >= 3


def resolve_path(default_project_id: str, path: str) -> str:
    """Resolve a path with the segment-count rule.

    Paths of three or more segments are returned unchanged; shorter paths are
    treated as relative and get the default project prepended. This cannot
    tell a relative ``collection/doc`` from an absolute ``project/collection``;
    doc() and collection() use resolve_document_path / resolve_collection_path
    instead, which know the kind of path they expect.
    """
    validate_path(path)
    if is_absolute_path(path):
        return path
    return f"{default_project_id}{SEPARATOR}{path}"


def _validate_segments(segments: list[str]) -> None:
    """Validate a canonical segment list: project, then collection/document pairs."""
    validate_project_id(segments[0])
    for index, segment in enumerate(segments[1:]):
        if index % 2 == 0:
            validate_collection_name(segment)
        else:
            validate_document_id(segment)


def _qualify(
    default_project_id: str,
    path: str,
    project_name: str | None,
    canonical_parity: int,
    kind: str,
) -> list[str]:
    validate_path(path)
    segments = path.split(SEPARATOR)
    if project_name is not None:
        validate_project_id(project_name)
        segments = [project_name, *segments]
    elif len(segments) % 2 != canonical_parity:
        segments = [default_project_id, *segments]
    if len(segments) % 2 != canonical_parity or len(segments) < 2:
        raise InvalidArgumentError(
            f"Path {path!r} does not address a {kind}",
            field="path",
        )
    _validate_segments(segments)
    return segments


def resolve_document_path(
    default_project_id: str, path: str, project_name: str | None = None
) -> str:
    """Return the canonical project-qualified path of a document.

    With ``project_name`` the path is always relative. Without it, a path
    with an odd number of segments is already project-qualified and one with
    an even number is relative to ``default_project_id``.

    Raises:
        InvalidArgumentError: If the path is malformed, does not address a
            document, or holds an invalid project id, collection name or
            document id.
    """
    return SEPARATOR.join(_qualify(default_project_id, path, project_name, 1, "document"))


def resolve_collection_path(
    default_project_id: str, path: str, project_name: str | None = None
) -> str:
    """Return the canonical project-qualified path of a collection.

    Mirror of resolve_document_path: canonical collection paths have an even
    number of segments.
    """
    return SEPARATOR.join(_qualify(default_project_id, path, project_name, 0, "collection"))


def parse_path(full_path: str) -> tuple[str, str]:
    """Split a canonical path into (project_id, path relative to the project)."""
    parts = full_path.split(SEPARATOR)
    if len(parts) < 2 or not parts[0]:
        raise InvalidArgumentError("Invalid path format", field="path")
    return parts[0], SEPARATOR.join(parts[1:])


def documents_resource_name(project_id: str, relative_path: str = "") -> str:
    """Server resource name, e.g. projects/p/databases/(default)/documents/users/u1."""
    root = f"projects/{project_id}/databases/{DATABASE_ID}/documents"
    return f"{root}/{relative_path}" if relative_path else root


def get_project_id_from_api_key(api_key: str) -> str:
    """Derive a project id from an API key.

    Keys shaped ``bb_<project>_<rest>`` yield ``<project>``; any other key
    yields its first 16 alphanumeric characters.
    """
    if not api_key or not isinstance(api_key, str):
        raise InvalidArgumentError("API key must be a non-empty string", field="api_key")
    if api_key.startswith("bb_"):
        parts = api_key.split("_")
        if len(parts) >= 3 and parts[1]:
            return parts[1]
    return _NON_ALNUM_RE.sub("", api_key)[:16]
