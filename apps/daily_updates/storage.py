"""
File storage for daily update attachments.

STORAGE_PROVIDER selects the backend:
- LOCAL: FileSystemStorage rooted at UPLOAD_DIR, files named <uuid><ext>
- S3: not wired up yet; logs a warning and stores locally

``storage_path`` on an attachment is the name relative to the storage root.
"""

import logging
import os
import uuid
from dataclasses import dataclass

from django.conf import settings
from django.core.exceptions import PermissionDenied, SuspiciousFileOperation
from django.core.files.storage import FileSystemStorage

logger = logging.getLogger(__name__)

LOCAL = 'LOCAL'
S3 = 'S3'


@dataclass(frozen=True)
class StoredFile:
    stored_name: str
    storage_path: str
    storage_provider: str


class FileStorage:

    def __init__(self, provider=None, upload_dir=None):
        self.provider = (provider or getattr(settings, 'STORAGE_PROVIDER', LOCAL)).upper()
        self.local = FileSystemStorage(location=str(upload_dir or settings.UPLOAD_DIR))

        if self.provider == S3:
            self.s3_endpoint = settings.S3_ENDPOINT
            self.s3_bucket = settings.S3_BUCKET
            self.s3_region = settings.S3_REGION

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def upload(self, file):
        """Store an UploadedFile and return where it went."""
        ext = os.path.splitext(file.name)[1].lower()
        stored_name = f'{uuid.uuid4().hex}{ext}'

        if self.provider == S3:
            return self._upload_to_s3(file, stored_name)
        return self._upload_to_local(file, stored_name)

    def delete(self, storage_path, provider):
        if provider == S3:
            return self._delete_from_s3(storage_path)
        return self._delete_from_local(storage_path)

    def open(self, storage_path, provider):
        """
        Open a stored file for reading.

        Raises:
            FileNotFoundError: If the file is gone
            PermissionDenied: If the path resolves outside UPLOAD_DIR
        """
        if provider == S3:
            return self._open_from_s3(storage_path)
        return self._open_from_local(storage_path)

    def path(self, storage_path):
        """Absolute filesystem path of a locally stored file."""
        try:
            return self.local.path(storage_path)
        except SuspiciousFileOperation:
            raise PermissionDenied('Access denied')

    # -------------------------------------------------------------------------
    # Local storage
    # -------------------------------------------------------------------------

    def _upload_to_local(self, file, stored_name):
        if hasattr(file, 'seek'):
            file.seek(0)
        name = self.local.save(stored_name, file)
        return StoredFile(stored_name, name, LOCAL)

    def _delete_from_local(self, storage_path):
        try:
            self.local.delete(storage_path)
        except SuspiciousFileOperation:
            logger.warning('Refusing to delete file outside upload dir: %s', storage_path)
        except OSError as e:
            logger.warning('Failed to delete local file %s: %s', storage_path, e)

    def _open_from_local(self, storage_path):
        if not os.path.isfile(self.path(storage_path)):
            raise FileNotFoundError(f'File not found: {storage_path}')
        return self.local.open(storage_path, 'rb')

    # -------------------------------------------------------------------------
    # S3 storage (placeholder until credentials are provisioned)
    # -------------------------------------------------------------------------

    def _upload_to_s3(self, file, stored_name):
        logger.warning('S3 not fully configured, falling back to local storage')
        return self._upload_to_local(file, stored_name)

    def _delete_from_s3(self, storage_path):
        logger.warning('S3 delete not implemented, falling back to local')
        return self._delete_from_local(storage_path)

    def _open_from_s3(self, storage_path):
        logger.warning('S3 download not implemented, falling back to local')
        return self._open_from_local(storage_path)
