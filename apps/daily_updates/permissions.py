"""
Permission helpers for daily_updates app.

Role-based access control:
- Admin / PM: publish, edit, delete, pin updates and manage attachments
- Author: may edit or delete their own update
- Everyone authenticated: read updates, download attachments, mark as read
"""


def can_manage_updates(user):
    """Check if user can publish updates and manage attachments."""
    return user.is_authenticated and user.can_manage_updates()


def can_edit_update(user, update):
    """Author, admins and PMs can edit or delete an update."""
    if not user.is_authenticated:
        return False
    return update.author_id == user.pk or user.can_manage_updates()
