"""
Notification API routes.
The browser polls these for the ephemeral notices queued on its client context.
"""

from flask_login import login_required

from services.client_context import current_client
from utils.api_response import api_success, api_error


def register_routes(bp):
    """Register notification API routes on the blueprint."""

    @bp.route('/notifications')
    @login_required
    def notification_list():
        """Unexpired notifications, oldest first."""
        context = current_client()
        notifications = context.notifications.active()

        return api_success(
            data=notifications,
            count=len(notifications),
            has_pending=context.has_pending
        )

    @bp.route('/notifications/<notification_id>', methods=['DELETE'])
    @login_required
    def notification_dismiss(notification_id):
        """Dismiss a notification before it expires."""
        context = current_client()
        if not context.notifications.dismiss(notification_id):
            return api_error('Notification not found', status=404)
        return api_success()
