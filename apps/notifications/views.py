"""
Views for notifications app.

JSON endpoints for the current user's notification inbox.
"""

from django.contrib.auth.decorators import login_required
from django.views.decorators.http import require_GET, require_POST

from apps.common.api import json_view, paginate
from .services import (
    get_notifications_for_user, get_unread_count, mark_as_read, mark_all_as_read
)


@login_required
@require_GET
@json_view
def notification_list(request):
    """Paginated notifications, newest first. ?unread_only=true filters."""
    unread_only = request.GET.get('unread_only') == 'true'
    queryset = get_notifications_for_user(request.user, unread_only=unread_only)
    page, paginator = paginate(request, queryset)

    return {
        'data': [n.as_dict() for n in page.object_list],
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
@require_POST
@json_view
def notification_read(request, pk):
    notification = mark_as_read(pk, request.user)
    return notification.as_dict()


@login_required
@require_POST
@json_view
def notification_read_all(request):
    marked = mark_all_as_read(request.user)
    return {'success': True, 'marked': marked}
