"""
Upload validation for daily update attachments.

Rules:
- Blocked (executable/script) extensions are always rejected
- Only allow-listed extensions and MIME types are accepted
- Each file is capped at MAX_UPLOAD_MB
- At most MAX_FILES_PER_UPDATE files per update

Messages are in Arabic, matching the rest of the API.
"""

import os

from django.conf import settings
from django.core.exceptions import ValidationError

ALLOWED_EXTENSIONS = {
    '.xlsx', '.xls', '.docx', '.doc', '.pptx', '.ppt',
    '.pdf', '.png', '.jpg', '.jpeg', '.webp',
    '.txt', '.csv', '.zip',
}

BLOCKED_EXTENSIONS = {
    '.exe', '.js', '.sh', '.bat', '.dll', '.apk', '.cmd',
    '.com', '.msi', '.ps1', '.vbs', '.wsf', '.scr', '.pif',
}

ALLOWED_MIME_TYPES = {
    'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    'application/vnd.ms-excel',
    'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
    'application/msword',
    'application/vnd.openxmlformats-officedocument.presentationml.presentation',
    'application/vnd.ms-powerpoint',
    'application/pdf',
    'image/png', 'image/jpeg', 'image/webp',
    'text/plain', 'text/csv',
    'application/zip', 'application/x-zip-compressed',
    'application/octet-stream',  # sent by some browsers for any binary
}


def max_file_size():
    return settings.MAX_UPLOAD_MB * 1024 * 1024


def max_files_per_update():
    return getattr(settings, 'MAX_FILES_PER_UPDATE', 10)


def validate_upload(file):
    """
    Validate one uploaded file.

    Raises:
        ValidationError: If the extension, MIME type or size is not allowed
    """
    ext = os.path.splitext(file.name)[1].lower()
    if ext in BLOCKED_EXTENSIONS:
        raise ValidationError(f'نوع الملف غير مسموح: {ext}')

    if ext not in ALLOWED_EXTENSIONS:
        allowed = ', '.join(sorted(ALLOWED_EXTENSIONS))
        raise ValidationError(f'نوع الملف غير مدعوم: {ext}. الأنواع المدعومة: {allowed}')

    content_type = (getattr(file, 'content_type', '') or '').split(';')[0].strip().lower()
    if content_type and content_type not in ALLOWED_MIME_TYPES:
        raise ValidationError(f'نوع المحتوى غير مدعوم: {content_type}')

    limit = max_file_size()
    if file.size > limit:
        raise ValidationError(
            f'حجم الملف {file.name} يتجاوز الحد الأقصى ({limit // (1024 * 1024)} MB)'
        )


def validate_file_count(new_count, existing_count=0):
    limit = max_files_per_update()
    if existing_count + new_count > limit:
        if existing_count:
            raise ValidationError(
                f'الحد الأقصى {limit} ملفات لكل تحديث. الموجود: {existing_count}'
            )
        raise ValidationError(f'الحد الأقصى {limit} ملفات لكل تحديث')
