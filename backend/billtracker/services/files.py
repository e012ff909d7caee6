# billtracker/services/files.py
"""Local attachment storage.

Paths handed to the store are relative to its root, e.g.
"invoices/1700000000_ab12cd34_boleto.pdf".
"""
import os
import time
import uuid
import logging
from typing import BinaryIO

from billtracker.services.errors import AttachmentMissing

logger = logging.getLogger(__name__)

INVOICE_DIR = "invoices"
PROOF_DIR = "proofs"

ALLOWED_EXTENSIONS = {".pdf", ".png", ".jpg", ".jpeg", ".gif", ".webp", ".doc", ".docx", ".txt"}


def invoice_path(stored_name: str) -> str:
    return f"{INVOICE_DIR}/{stored_name}"


def proof_path(stored_name: str) -> str:
    return f"{PROOF_DIR}/{stored_name}"


class LocalFileStore:
    def __init__(self, root: str):
        self.root = os.path.abspath(root)
        os.makedirs(self.root, exist_ok=True)

    def _resolve(self, path: str) -> str:
        full = os.path.abspath(os.path.join(self.root, path))
        # refuse anything that escapes the root (../../etc/passwd)
        if os.path.commonpath([full, self.root]) != self.root:
            raise ValueError(f"path escapes file store: {path}")
        return full

    def exists(self, path: str) -> bool:
        return os.path.isfile(self._resolve(path))

    def read(self, path: str) -> bytes:
        with open(self._resolve(path), "rb") as f:
            return f.read()

    def save(self, folder: str, original_name: str, stream: BinaryIO) -> str:
        """
        Store an upload under `folder` and return the stored filename
        (<timestamp>_<uuid8>_<original>), not the full path.
        """
        filename = os.path.basename(original_name or "")
        if not filename:
            raise ValueError("Missing filename")
        suffix = str(uuid.uuid4())[:8]
        save_name = f"{int(time.time())}_{suffix}_{filename}"
        dest = self._resolve(os.path.join(folder, save_name))
        os.makedirs(os.path.dirname(dest), exist_ok=True)
        with open(dest, "wb") as f:
            f.write(stream.read())
        return save_name

    def delete(self, path: str) -> None:
        """Best-effort removal; a missing file is not an error."""
        try:
            full = self._resolve(path)
            if os.path.exists(full):
                os.remove(full)
        except OSError:
            logger.exception("Failed to delete stored file %s", path)


def read_attachment(store, path: str) -> bytes:
    """Read a referenced attachment, raising AttachmentMissing when it isn't stored."""
    if not store.exists(path):
        raise AttachmentMissing(path)
    return store.read(path)
