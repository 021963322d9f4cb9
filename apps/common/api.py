"""
Helpers shared by the JSON views.

- json_view: turns service-layer exceptions into JSON error responses
- paginate: page/page_size handling with the same fallbacks as the list views
- client_ip: request IP for audit entries
"""

import functools
import logging

from django.core.exceptions import PermissionDenied, ValidationError
from django.core.paginator import Paginator, EmptyPage, PageNotAnInteger
from django.http import Http404, JsonResponse

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


def _validation_message(exc):
    if hasattr(exc, 'message_dict'):
        return '; '.join(
            f'{field}: {" ".join(messages)}' for field, messages in exc.message_dict.items()
        )
    return ' '.join(exc.messages)


def json_view(view):
    """
    Map service errors to JSON responses.

    ValidationError → 400, PermissionDenied → 403, Http404 → 404.
    A dict returned by the view is wrapped in a JsonResponse.
    """
    @functools.wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            response = view(request, *args, **kwargs)
        except ValidationError as e:
            return JsonResponse({'message': _validation_message(e)}, status=400)
        except PermissionDenied as e:
            return JsonResponse({'message': str(e) or 'Permission denied'}, status=403)
        except Http404 as e:
            return JsonResponse({'message': str(e) or 'Not found'}, status=404)

        if isinstance(response, (dict, list)):
            return JsonResponse(response, safe=False)
        return response

    return wrapper


def paginate(request, queryset, default_page_size=20):
    """Return (page, paginator) for the request's page and page_size params."""
    try:
        page_size = int(request.GET.get('page_size', default_page_size))
    except ValueError:
        page_size = default_page_size
    page_size = max(1, min(page_size, MAX_PAGE_SIZE))

    paginator = Paginator(queryset, page_size)
    page_number = request.GET.get('page', 1)
    try:
        page = paginator.page(page_number)
    except PageNotAnInteger:
        page = paginator.page(1)
    except EmptyPage:
        page = paginator.page(paginator.num_pages)
    return page, paginator


def client_ip(request):
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


def form_errors(errors):
    """ValidationError carrying a form's (or filterset's) field errors."""
    return ValidationError({
        field: [error['message'] for error in field_errors]
        for field, field_errors in errors.get_json_data().items()
    })
