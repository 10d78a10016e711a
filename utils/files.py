import os
import shutil
import tempfile
from fastapi import UploadFile
from settings.config import settings
from utils.logger import get_logger

logger = get_logger("FILE_UTILS")

def stage_upload(file: UploadFile, directory: str | None = None) -> str:
    """
    Copy an incoming multipart file to local disk and return its path.
    The caller is responsible for discard_staged() once the upload is done.
    """
    directory = directory or settings.UPLOAD_TMP_DIR
    os.makedirs(directory, exist_ok=True)
    _, ext = os.path.splitext(file.filename or "")
    with tempfile.NamedTemporaryFile(delete=False, dir=directory, suffix=ext.lower()) as out:
        file.file.seek(0)
        shutil.copyfileobj(file.file, out)
    return out.name

def discard_staged(paths):
    for path in paths:
        try:
            os.remove(path)
        except FileNotFoundError:
            continue
        except OSError as e:
            logger.warning(f"Could not remove staged file {path}: {e}")
