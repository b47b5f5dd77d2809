import logging
import os
import secrets
import time

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from reimbursement.core.config import settings
from reimbursement.core.constants import ALLOWED_UPLOAD_TYPES
from reimbursement.core.permissions import Principal, get_current_principal

logger = logging.getLogger(__name__)

UPLOAD_DIR = settings.UPLOAD_DIR
UPLOAD_URL_PREFIX = "/uploads"
os.makedirs(UPLOAD_DIR, exist_ok=True)

router = APIRouter(tags=["Uploads"])


def stored_filename(original: str) -> str:
    """Unique on-disk name that keeps the original extension.

    The original stem is hex-encoded so non-ASCII names stay filesystem safe.
    """
    stem, ext = os.path.splitext(os.path.basename(original or ""))
    encoded = stem.encode("utf-8").hex()
    suffix = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}"
    return f"{encoded}-{suffix}{ext.lower()}"


def file_url(file_path: str) -> str:
    relative = os.path.relpath(file_path, UPLOAD_DIR).replace(os.sep, "/")
    return f"{UPLOAD_URL_PREFIX}/{relative}"


# -------------------------------------------------------------------
# UPLOAD RECEIPT
# POST /api/upload
# form-data key: file
# -------------------------------------------------------------------
@router.post("/upload", status_code=status.HTTP_200_OK)
def upload_file(
    file: UploadFile = File(None),
    principal: Principal = Depends(get_current_principal),
):
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file was uploaded")

    if file.content_type not in ALLOWED_UPLOAD_TYPES:
        raise HTTPException(
            status_code=400,
            detail="Unsupported file type. Only JPEG, PNG, GIF and PDF files are allowed",
        )

    # read one byte past the limit so oversize files are detected without
    # loading arbitrarily large bodies
    content = file.file.read(settings.MAX_UPLOAD_SIZE + 1)
    if len(content) > settings.MAX_UPLOAD_SIZE:
        raise HTTPException(status_code=400, detail="File exceeds the 5MB size limit")

    file_path = os.path.join(UPLOAD_DIR, stored_filename(file.filename))
    with open(file_path, "wb") as f:
        f.write(content)

    logger.info(
        "user id=%s uploaded %s (%d bytes) as %s",
        principal.id,
        file.filename,
        len(content),
        file_path,
    )

    return {
        "filePath": file_path,
        "fileName": file.filename,
        "fileUrl": file_url(file_path),
    }
