"""
Daily update filters using django-filter.

- type, priority: exact choice
- track: track id
- pinned: only pinned updates when true
- search: title/content in either language
"""

import django_filters
from django.db.models import Q

from apps.tracks.models import Track
from .models import DailyUpdate


class DailyUpdateFilter(django_filters.FilterSet):
    """
    Usage in views:
        filterset = DailyUpdateFilter(request.GET, queryset=queryset)
        updates = filterset.qs
    """

    search = django_filters.CharFilter(method='filter_search', label='Search')
    type = django_filters.ChoiceFilter(choices=DailyUpdate.Type.choices)
    priority = django_filters.ChoiceFilter(choices=DailyUpdate.Priority.choices)
    track = django_filters.ModelChoiceFilter(queryset=Track.objects.all())
    pinned = django_filters.BooleanFilter(method='filter_pinned')

    class Meta:
        model = DailyUpdate
        fields = ['search', 'type', 'priority', 'track', 'pinned']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(title__icontains=value) |
            Q(title_ar__icontains=value) |
            Q(content__icontains=value) |
            Q(content_ar__icontains=value)
        )

    def filter_pinned(self, queryset, name, value):
        if value:
            return queryset.filter(pinned=True)
        return queryset
