"""
Permission helpers for tasks app.

Role-based access control for task edits:
- Admin / PM: Any task
- Creator and primary assignee: Their own task
- Nobody edits a completed or cancelled task
"""


def can_edit_task(user, task):
    """
    Check if user can edit a task (due date, status).

    Rules:
    - Cannot edit terminal states
    - Admin and PM can edit any task
    - Creator and primary assignee can edit their task
    """
    if not user.is_authenticated:
        return False

    if task.status in task.TERMINAL_STATUSES:
        return False

    if user.is_admin() or user.is_pm():
        return True

    return user.pk in (task.created_by_id, task.assignee_user_id)
