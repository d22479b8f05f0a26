"""
Upload payload items and multipart form construction.

A content item is one unit of upload payload:

- ``file``: a local path whose bytes are streamed as ``content_file``
- ``path``: a reference to content already on the server, sent as ``content_path``
- ``html``: inline HTML sent as ``content_html``
"""

from __future__ import annotations

import os
from contextlib import ExitStack
from dataclasses import dataclass
from typing import Any, Dict, IO, List, Optional, Sequence, Tuple, Union

FIELD_BY_KIND = {
    "file": "content_file",
    "path": "content_path",
    "html": "content_html",
}

# requests ``files=`` entry: (field, (filename, value)); filename None marks a plain field
FormPart = Tuple[str, Tuple[Optional[str], Union[str, IO[bytes]]]]


@dataclass(frozen=True)
class ContentItem:
    """One upload payload item."""
    kind: str
    value: str

    def __post_init__(self) -> None:
        if self.kind not in FIELD_BY_KIND:
            raise ValueError(
                f"Invalid content item type: {self.kind}. "
                f"Valid: {list(FIELD_BY_KIND)}"
            )

    @property
    def field(self) -> str:
        return FIELD_BY_KIND[self.kind]

    @classmethod
    def file(cls, local_path: str) -> "ContentItem":
        return cls("file", local_path)

    @classmethod
    def path(cls, server_path: str) -> "ContentItem":
        return cls("path", server_path)

    @classmethod
    def html(cls, markup: str) -> "ContentItem":
        return cls("html", markup)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContentItem":
        """Build an item from the ``{"type": ..., "value": ...}`` shape."""
        return cls(kind=data["type"], value=data["value"])


def coerce_items(items: Sequence[Union[ContentItem, Dict[str, Any]]]) -> List[ContentItem]:
    return [i if isinstance(i, ContentItem) else ContentItem.from_dict(i) for i in items]


def build_form(
    items: Sequence[ContentItem],
    stack: ExitStack,
    mime_type: Optional[str] = None,
    request_url: bool = False,
) -> List[FormPart]:
    """
    Build the multipart parts for one upload, preserving item order.

    File items are opened in binary mode and registered on ``stack`` so the
    caller controls when the handles close.

    Args:
        items: Content items in caller order
        stack: ExitStack owning opened file handles
        mime_type: Optional declared type, sent as ``type``
        request_url: Ask the service to return a public URL (``get_url=true``)

    Returns:
        List of parts suitable for ``requests``' ``files=`` argument
    """
    parts: List[FormPart] = []
    for item in items:
        if item.kind == "file":
            fh = stack.enter_context(open(item.value, "rb"))
            parts.append((item.field, (os.path.basename(item.value), fh)))
        else:
            parts.append((item.field, (None, item.value)))

    if mime_type:
        parts.append(("type", (None, mime_type)))
    if request_url:
        parts.append(("get_url", (None, "true")))

    return parts


def rewind(parts: Optional[List[FormPart]]) -> None:
    """Seek file streams in a form back to the start before a resend."""
    for _, (_, value) in parts or []:
        if hasattr(value, "seek"):
            value.seek(0)
