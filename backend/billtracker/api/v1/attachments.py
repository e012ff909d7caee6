# billtracker/api/v1/attachments.py
"""Boleto (invoice) and comprovante (proof of payment) uploads for a bill."""
import io
import os
import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import Response

from billtracker.api.v1.bills import bill_to_dict
from billtracker.api.v1.deps import get_bill_repo, get_current_user, get_file_store, get_settings
from billtracker.db import models
from billtracker.db.repositories import BillRepository
from billtracker.services.errors import AttachmentMissing
from billtracker.services.files import ALLOWED_EXTENSIONS, INVOICE_DIR, PROOF_DIR, read_attachment

logger = logging.getLogger(__name__)
router = APIRouter(tags=["attachments"])

# kind -> (folder, stored-name column, original-name column)
KINDS = {
    "invoice": (INVOICE_DIR, "invoice_file", "invoice_filename"),
    "proof": (PROOF_DIR, "proof_file", "proof_filename"),
}


def _kind(kind: str):
    if kind not in KINDS:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown attachment kind")
    return KINDS[kind]


@router.post("/{bill_id}/{kind}")
def upload_attachment(
    bill_id: int,
    kind: str,
    file: UploadFile = File(...),
    current_user: models.User = Depends(get_current_user),
    repo: BillRepository = Depends(get_bill_repo),
    file_store=Depends(get_file_store),
    settings=Depends(get_settings),
):
    folder, file_col, name_col = _kind(kind)
    bill = repo.find_one(current_user.id, bill_id)
    if not bill:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bill not found")

    filename = os.path.basename(file.filename or "")
    if not filename:
        raise HTTPException(status_code=400, detail="Missing filename")
    ext = os.path.splitext(filename)[1].lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(status_code=400, detail=f"File type not allowed: {ext or '(none)'}")

    try:
        # one byte past the limit is enough to know it's too big
        content = file.file.read(settings.MAX_UPLOAD_BYTES + 1)
    finally:
        file.file.close()
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="File too large")

    stored = file_store.save(folder, filename, io.BytesIO(content))
    previous = getattr(bill, file_col)
    try:
        bill = repo.update(current_user.id, bill_id, {file_col: stored, name_col: filename})
    except Exception:
        repo.db.rollback()
        file_store.delete(f"{folder}/{stored}")
        raise

    if previous and previous != stored:
        file_store.delete(f"{folder}/{previous}")
    logger.info("Stored %s for bill %s as %s", kind, bill_id, stored)
    return bill_to_dict(bill, current_user)


@router.get("/{bill_id}/{kind}")
def download_attachment(
    bill_id: int,
    kind: str,
    current_user: models.User = Depends(get_current_user),
    repo: BillRepository = Depends(get_bill_repo),
    file_store=Depends(get_file_store),
):
    folder, file_col, name_col = _kind(kind)
    bill = repo.find_one(current_user.id, bill_id)
    if not bill:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bill not found")
    stored = getattr(bill, file_col)
    if not stored:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No file attached")

    try:
        content = read_attachment(file_store, f"{folder}/{stored}")
    except AttachmentMissing:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found on disk")

    download_name = getattr(bill, name_col) or stored
    return Response(
        content=content,
        media_type="application/octet-stream",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(download_name)}"},
    )
