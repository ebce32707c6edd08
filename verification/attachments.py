"""
Owned handles for files attached in the verification wizard.

Thumbnails, portfolio images and certificates are staged on local disk when
the user attaches them and are only pushed to the storage backend when the
wizard submits.  Each handle owns its staged file: ``release()`` deletes it
and drops any cached preview.  A handle is single-owner; copying the dict
form around does not copy ownership.
"""

from __future__ import annotations

import base64
import logging
import mimetypes
import os
import shutil
import uuid
from pathlib import Path
from typing import BinaryIO, Dict, Optional

from .exceptions import AttachmentReleasedError

logger = logging.getLogger(__name__)


class AttachmentHandle:
    """A staged upload plus its lazily-built preview URL."""

    def __init__(self, handle_id: str, name: str, content_type: str, size: int, path: Path):
        self.id = handle_id
        self.name = name
        self.content_type = content_type
        self.size = size
        self.path = Path(path)
        self._preview_url: Optional[str] = None
        self._released = False

    def __repr__(self):
        state = 'released' if self._released else 'staged'
        return f"<AttachmentHandle {self.name} ({self.size} bytes, {state})>"

    def __eq__(self, other):
        return isinstance(other, AttachmentHandle) and other.id == self.id

    def __hash__(self):
        return hash(self.id)

    @classmethod
    def stage(
        cls,
        fileobj: BinaryIO,
        staging_dir,
        name: str,
        content_type: Optional[str] = None,
    ) -> 'AttachmentHandle':
        """Copy ``fileobj`` into ``staging_dir`` and return the owning handle."""
        staging_dir = Path(staging_dir)
        staging_dir.mkdir(parents=True, exist_ok=True)

        handle_id = uuid.uuid4().hex
        suffix = Path(name).suffix
        path = staging_dir / f"{handle_id}{suffix}"
        try:
            with open(path, 'wb') as out:
                shutil.copyfileobj(fileobj, out)
        except OSError:
            path.unlink(missing_ok=True)
            raise

        content_type = content_type or mimetypes.guess_type(name)[0] or 'application/octet-stream'
        handle = cls(handle_id, name, content_type, path.stat().st_size, path)
        logger.debug("Staged attachment %s at %s", name, path)
        return handle

    @property
    def released(self) -> bool:
        return self._released

    def _ensure_live(self):
        if self._released:
            raise AttachmentReleasedError(f"Attachment {self.name} was already released")

    def open(self) -> BinaryIO:
        self._ensure_live()
        return open(self.path, 'rb')

    def read(self) -> bytes:
        with self.open() as fh:
            return fh.read()

    @property
    def is_image(self) -> bool:
        return self.content_type.startswith('image/')

    @property
    def preview_url(self) -> str:
        """Data URI for inline previews, built on first access."""
        self._ensure_live()
        if self._preview_url is None:
            encoded = base64.b64encode(self.read()).decode('ascii')
            self._preview_url = f"data:{self.content_type};base64,{encoded}"
        return self._preview_url

    def release(self) -> None:
        """Delete the staged file.  Safe to call more than once."""
        if self._released:
            return
        self._preview_url = None
        self._released = True
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass
        logger.debug("Released attachment %s", self.name)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'name': self.name,
            'content_type': self.content_type,
            'size': self.size,
            'path': str(self.path),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'AttachmentHandle':
        return cls(
            handle_id=data['id'],
            name=data['name'],
            content_type=data.get('content_type', 'application/octet-stream'),
            size=data.get('size', 0),
            path=Path(data['path']),
        )


def release_all(handles) -> int:
    """Release every handle in ``handles``; returns how many were live."""
    released = 0
    for handle in handles:
        if handle is not None and not handle.released:
            handle.release()
            released += 1
    return released
