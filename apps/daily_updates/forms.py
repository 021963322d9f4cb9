"""
Forms for daily_updates app.

DailyUpdateForm validates create and edit payloads. For edits, the view
fills missing fields from the instance so partial updates keep them.
"""

from django import forms
from django.core.exceptions import ValidationError
from django.forms.models import model_to_dict

from .models import DailyUpdate


class DailyUpdateForm(forms.ModelForm):

    class Meta:
        model = DailyUpdate
        fields = [
            'title', 'title_ar', 'content', 'content_ar', 'type',
            'status', 'progress', 'track', 'pinned', 'priority',
        ]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['type'].required = False
        self.fields['priority'].required = False

    def _clean_min_length(self, field, min_length=2):
        value = (self.cleaned_data.get(field) or '').strip()
        if len(value) < min_length:
            raise ValidationError(f'يجب أن يكون {min_length} أحرف على الأقل')
        return value

    def clean_title(self):
        return self._clean_min_length('title')

    def clean_title_ar(self):
        return self._clean_min_length('title_ar')

    def clean_content(self):
        return self._clean_min_length('content')

    def clean_type(self):
        return self.cleaned_data.get('type') or DailyUpdate.Type.GLOBAL

    def clean_priority(self):
        return self.cleaned_data.get('priority') or DailyUpdate.Priority.NORMAL


def bind_edit_form(update, data):
    """
    Build a DailyUpdateForm for a partial edit.

    Fields not present in ``data`` keep their current values.
    """
    merged = {
        key: value
        for key, value in model_to_dict(update, fields=DailyUpdateForm.Meta.fields).items()
        if value is not None
    }
    for key in DailyUpdateForm.Meta.fields:
        if key in data:
            merged[key] = data.get(key)
    return DailyUpdateForm(data=merged, instance=update)
