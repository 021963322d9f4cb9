"""
Views for daily_updates app.

JSON endpoints:
- List with filters, pagination and per-user read state
- Detail, create, edit, soft delete, pin toggle
- Attachment upload, download and removal
- Read tracking
"""

from django.contrib.auth.decorators import login_required
from django.http import FileResponse
from django.views.decorators.http import require_GET, require_POST, require_http_methods

from apps.common.api import json_view, paginate, client_ip, form_errors
from .filters import DailyUpdateFilter
from .services import (
    get_updates_queryset, get_update, get_unread_count, serialize_update,
    serialize_attachment, create_update, edit_update, delete_update, toggle_pin,
    add_attachments, open_attachment, delete_attachment,
    mark_as_read, mark_all_as_read,
)


# =============================================================================
# Updates
# =============================================================================

@login_required
@require_http_methods(["GET", "POST"])
@json_view
def update_list(request):
    """
    GET: paginated list (pinned first, newest first).
    POST: publish a new update (multipart, files under "files").
    """
    if request.method == 'POST':
        update = create_update(
            author=request.user,
            data=request.POST,
            files=request.FILES.getlist('files'),
            ip_address=client_ip(request),
        )
        return serialize_update(update)

    filterset = DailyUpdateFilter(request.GET, queryset=get_updates_queryset(user=request.user))
    if not filterset.is_valid():
        raise form_errors(filterset.errors)

    page, paginator = paginate(request, filterset.qs)

    return {
        'data': [serialize_update(u, is_read=u.is_read) for u in page.object_list],
        'total': paginator.count,
        'page': page.number,
        'pageSize': paginator.per_page,
        'totalPages': paginator.num_pages,
        'unreadCount': get_unread_count(request.user),
    }


@login_required
@require_GET
@json_view
def unread_count(request):
    return {'unreadCount': get_unread_count(request.user)}


@login_required
@require_GET
@json_view
def update_detail(request, pk):
    return serialize_update(get_update(pk))


@login_required
@require_POST
@json_view
def update_edit(request, pk):
    update = edit_update(
        get_update(pk), request.user, request.POST, ip_address=client_ip(request)
    )
    return serialize_update(update)


@login_required
@require_POST
@json_view
def update_delete(request, pk):
    delete_update(get_update(pk), request.user, ip_address=client_ip(request))
    return {'message': 'تم حذف التحديث'}


@login_required
@require_POST
@json_view
def update_pin(request, pk):
    update = toggle_pin(get_update(pk), request.user, ip_address=client_ip(request))
    return serialize_update(update)


# =============================================================================
# Read Tracking
# =============================================================================

@login_required
@require_POST
@json_view
def update_read(request, pk):
    mark_as_read(pk, request.user)
    return {'success': True}


@login_required
@require_POST
@json_view
def update_read_all(request):
    marked = mark_all_as_read(request.user)
    return {'success': True, 'marked': marked}


# =============================================================================
# Attachments
# =============================================================================

@login_required
@require_POST
@json_view
def attachment_upload(request, pk):
    attachments = add_attachments(get_update(pk), request.FILES.getlist('files'), request.user)
    return [serialize_attachment(a) for a in attachments]


@login_required
@require_GET
@json_view
def attachment_download(request, attachment_id):
    handle, attachment = open_attachment(attachment_id)
    return FileResponse(
        handle,
        as_attachment=True,
        filename=attachment.original_name,
        content_type=attachment.mime_type or 'application/octet-stream',
    )


@login_required
@require_POST
@json_view
def attachment_delete(request, attachment_id):
    delete_attachment(attachment_id, request.user)
    return {'message': 'تم حذف المرفق'}
