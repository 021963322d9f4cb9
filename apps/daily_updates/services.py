"""
Service layer for daily_updates app.

All business logic for daily updates is centralized here.

Services:
- list_updates / get_update: queries with read state
- create_update / edit_update / delete_update / toggle_pin: CRUD with audit log
- add_attachments / get_attachment / open_attachment / delete_attachment
- mark_as_read / mark_all_as_read / get_unread_count: read tracking
"""

import logging

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction
from django.db.models import Exists, OuterRef
from django.http import Http404
from django.utils import timezone

from apps.activity_log.models import AuditLog, log_activity
from apps.common.api import form_errors

from .forms import DailyUpdateForm, bind_edit_form
from .models import DailyUpdate, DailyUpdateAttachment, DailyUpdateRead
from .permissions import can_manage_updates, can_edit_update
from .storage import FileStorage
from .validators import validate_upload, validate_file_count

logger = logging.getLogger(__name__)

ENTITY_TYPE = 'daily_update'

NOT_FOUND = 'التحديث غير موجود'
ATTACHMENT_NOT_FOUND = 'المرفق غير موجود'


# =============================================================================
# Serialization
# =============================================================================

def _user_summary(user):
    if user is None:
        return None
    return {
        'id': user.pk,
        'name': user.get_full_name(),
        'nameAr': user.name_ar,
        'role': user.role,
    }


def _track_summary(track):
    if track is None:
        return None
    return {
        'id': track.pk,
        'name': track.name,
        'nameAr': track.name_ar,
        'color': track.color,
    }


def serialize_attachment(attachment):
    return {
        'id': attachment.pk,
        'originalName': attachment.original_name,
        'mimeType': attachment.mime_type,
        'sizeBytes': attachment.size_bytes,
        'createdAt': attachment.created_at.isoformat() if attachment.created_at else None,
    }


def serialize_update(update, is_read=None):
    data = {
        'id': update.pk,
        'title': update.title,
        'titleAr': update.title_ar,
        'content': update.content,
        'contentAr': update.content_ar,
        'type': update.type,
        'status': update.status or None,
        'progress': update.progress,
        'priority': update.priority,
        'pinned': update.pinned,
        'trackId': update.track_id,
        'track': _track_summary(update.track),
        'author': _user_summary(update.author),
        'attachments': [serialize_attachment(a) for a in update.attachments.all()],
        'editHistory': update.edit_history,
        'createdAt': update.created_at.isoformat() if update.created_at else None,
        'updatedAt': update.updated_at.isoformat() if update.updated_at else None,
    }
    if is_read is not None:
        data['isRead'] = is_read
    return data


# =============================================================================
# Queries
# =============================================================================

def get_updates_queryset(user=None):
    """
    Active updates, pinned first then newest, with related rows loaded.

    When ``user`` is given each row is annotated with ``is_read``.
    """
    qs = DailyUpdate.objects.active().select_related(
        'author', 'track'
    ).prefetch_related('attachments').order_by('-pinned', '-created_at')

    if user is not None:
        qs = qs.annotate(
            is_read=Exists(DailyUpdateRead.objects.filter(update=OuterRef('pk'), user=user))
        )
    return qs


def get_update(pk):
    """
    Raises:
        Http404: If the update does not exist or is deleted
    """
    try:
        return get_updates_queryset().get(pk=pk)
    except DailyUpdate.DoesNotExist:
        raise Http404(NOT_FOUND)


def get_unread_count(user):
    return DailyUpdate.objects.active().exclude(reads__user=user).count()


# =============================================================================
# CRUD
# =============================================================================

def create_update(author, data, files=None, ip_address=None):
    """
    Publish a daily update with optional attachments.

    Args:
        author: User publishing the update (admin or PM)
        data: Form data (title, title_ar, content, ...)
        files: Optional list of UploadedFile
        ip_address: Request IP for the audit log

    Raises:
        PermissionDenied: If user cannot publish updates
        ValidationError: If the data or any file is invalid
    """
    if not can_manage_updates(author):
        raise PermissionDenied('لا تملك صلاحية نشر التحديثات')

    files = list(files or [])
    validate_file_count(len(files))
    for file in files:
        validate_upload(file)

    form = DailyUpdateForm(data=data)
    if not form.is_valid():
        raise form_errors(form.errors)

    storage = FileStorage()
    stored = []
    try:
        with transaction.atomic():
            update = form.save(commit=False)
            update.author = author
            update.save()

            _store_files(update, files, author, storage, stored)

            update = get_update(update.pk)
            log_activity(
                actor=author,
                action_type=AuditLog.ActionType.CREATE,
                entity_type=ENTITY_TYPE,
                entity_id=update.pk,
                track=update.track_id,
                after_data=serialize_update(update),
                ip_address=ip_address,
            )
    except Exception:
        _discard_files(stored, storage)
        raise

    logger.info('Daily update %s published by %s', update.pk, author.email)
    return update


def edit_update(update, user, data, ip_address=None):
    """
    Edit an update. Fields missing from ``data`` are left unchanged.

    The previous Arabic title and content are appended to edit_history.

    Raises:
        PermissionDenied: If user is not the author, an admin or a PM
        ValidationError: If the data is invalid
    """
    if not can_edit_update(user, update):
        raise PermissionDenied('لا يمكنك تعديل هذا التحديث')

    before = serialize_update(update)
    history_entry = {
        'editedBy': user.pk,
        'editedAt': timezone.now().isoformat(),
        'previousTitle': update.title_ar,
        'previousContent': update.content_ar or update.content,
    }

    form = bind_edit_form(update, data)
    if not form.is_valid():
        raise form_errors(form.errors)

    with transaction.atomic():
        update = form.save(commit=False)
        update.edit_history = list(update.edit_history or []) + [history_entry]
        update.save()

        update = get_update(update.pk)
        log_activity(
            actor=user,
            action_type=AuditLog.ActionType.UPDATE,
            entity_type=ENTITY_TYPE,
            entity_id=update.pk,
            track=before['trackId'],
            before_data=before,
            after_data=serialize_update(update),
            ip_address=ip_address,
        )

    return update


def delete_update(update, user, ip_address=None):
    """
    Soft delete an update. Attachments stay stored but are unreachable.

    Raises:
        PermissionDenied: If user is not the author, an admin or a PM
    """
    if not can_edit_update(user, update):
        raise PermissionDenied('لا يمكنك حذف هذا التحديث')

    before = serialize_update(update)

    with transaction.atomic():
        update.is_deleted = True
        update.save(update_fields=['is_deleted', 'updated_at'])

        log_activity(
            actor=user,
            action_type=AuditLog.ActionType.DELETE,
            entity_type=ENTITY_TYPE,
            entity_id=update.pk,
            track=update.track_id,
            before_data=before,
            ip_address=ip_address,
        )

    return True


def toggle_pin(update, user, ip_address=None):
    if not can_manage_updates(user):
        raise PermissionDenied('لا تملك صلاحية تثبيت التحديثات')

    with transaction.atomic():
        update.pinned = not update.pinned
        update.save(update_fields=['pinned', 'updated_at'])

        log_activity(
            actor=user,
            action_type=AuditLog.ActionType.PIN if update.pinned else AuditLog.ActionType.UNPIN,
            entity_type=ENTITY_TYPE,
            entity_id=update.pk,
            track=update.track_id,
            ip_address=ip_address,
        )

    return get_update(update.pk)


# =============================================================================
# Attachments
# =============================================================================

def _store_files(update, files, uploader, storage, stored):
    """Write files and their rows. Each written file is appended to ``stored``."""
    attachments = []
    for file in files:
        result = storage.upload(file)
        stored.append(result)
        attachments.append(DailyUpdateAttachment.objects.create(
            update=update,
            original_name=file.name,
            stored_name=result.stored_name,
            mime_type=getattr(file, 'content_type', '') or '',
            size_bytes=file.size,
            storage_provider=result.storage_provider,
            storage_path=result.storage_path,
            uploaded_by=uploader,
        ))
    return attachments


def _discard_files(stored, storage):
    """Remove files written by a transaction that rolled back."""
    for result in stored:
        storage.delete(result.storage_path, result.storage_provider)
    if stored:
        logger.warning('Removed %d orphaned upload(s) after rollback', len(stored))


def add_attachments(update, files, user):
    """
    Attach more files to an existing update.

    Raises:
        PermissionDenied: If user cannot manage updates
        ValidationError: If no files are given, the count limit is exceeded
            or a file is invalid
    """
    if not can_manage_updates(user):
        raise PermissionDenied('لا تملك صلاحية إضافة مرفقات')

    files = list(files or [])
    if not files:
        raise ValidationError('لم يتم اختيار ملفات')

    for file in files:
        validate_upload(file)

    storage = FileStorage()
    stored = []
    try:
        with transaction.atomic():
            # Lock the update so concurrent uploads see each other's rows
            update = DailyUpdate.objects.select_for_update().get(pk=update.pk)
            existing = DailyUpdateAttachment.objects.filter(update=update).count()
            validate_file_count(len(files), existing_count=existing)

            attachments = _store_files(update, files, user, storage, stored)
            log_activity(
                actor=user,
                action_type=AuditLog.ActionType.ATTACHMENT_ADDED,
                entity_type=ENTITY_TYPE,
                entity_id=update.pk,
                track=update.track_id,
                after_data={'attachments': [serialize_attachment(a) for a in attachments]},
            )
    except Exception:
        _discard_files(stored, storage)
        raise

    return attachments


def get_attachment(pk):
    """
    Raises:
        Http404: If the attachment is missing or its update is deleted
    """
    try:
        return DailyUpdateAttachment.objects.select_related('update').get(
            pk=pk, update__is_deleted=False
        )
    except DailyUpdateAttachment.DoesNotExist:
        raise Http404(ATTACHMENT_NOT_FOUND)


def open_attachment(pk, storage=None):
    """Return (file object, attachment) for download."""
    attachment = get_attachment(pk)
    storage = storage or FileStorage()
    try:
        handle = storage.open(attachment.storage_path, attachment.storage_provider)
    except FileNotFoundError:
        logger.warning('Attachment %s missing from storage: %s', pk, attachment.storage_path)
        raise Http404(ATTACHMENT_NOT_FOUND)
    return handle, attachment


def delete_attachment(pk, user, storage=None):
    if not can_manage_updates(user):
        raise PermissionDenied('لا تملك صلاحية حذف المرفقات')

    try:
        attachment = DailyUpdateAttachment.objects.select_related('update').get(pk=pk)
    except DailyUpdateAttachment.DoesNotExist:
        raise Http404(ATTACHMENT_NOT_FOUND)

    storage = storage or FileStorage()
    path, provider = attachment.storage_path, attachment.storage_provider

    with transaction.atomic():
        snapshot = serialize_attachment(attachment)
        update = attachment.update
        attachment.delete()
        log_activity(
            actor=user,
            action_type=AuditLog.ActionType.ATTACHMENT_REMOVED,
            entity_type=ENTITY_TYPE,
            entity_id=update.pk,
            track=update.track_id,
            before_data={'attachment': snapshot},
        )
        # Skipped if the transaction rolls back
        transaction.on_commit(lambda: storage.delete(path, provider))

    return True


# =============================================================================
# Read Tracking
# =============================================================================

def mark_as_read(update_pk, user):
    """
    Raises:
        Http404: If the update does not exist or is deleted
    """
    if not DailyUpdate.objects.active().filter(pk=update_pk).exists():
        raise Http404(NOT_FOUND)

    DailyUpdateRead.objects.get_or_create(update_id=update_pk, user=user)
    return True


def mark_all_as_read(user):
    """Mark every active unread update as read. Returns the number marked."""
    unread_ids = list(
        DailyUpdate.objects.active().exclude(reads__user=user).values_list('pk', flat=True)
    )
    if unread_ids:
        DailyUpdateRead.objects.bulk_create(
            [DailyUpdateRead(update_id=pk, user=user) for pk in unread_ids],
            ignore_conflicts=True,
        )
    return len(unread_ids)
