"""
Centralized UI messages.
All user-facing text in one place for consistency.
"""

MESSAGES = {
    # Success messages
    'login_success': 'Login successful! Welcome back, {name}',
    'register_success': 'Registration successful! Welcome to {app_name}',
    'logout_success': 'You have been signed out',
    'reservation_created': 'Reservation submitted! Waiting for admin approval',
    'reservation_cancelled': 'Reservation cancelled',
    'reservation_approved': 'Reservation approved',
    'reservation_rejected': 'Reservation rejected',
    'facility_created': 'Facility added',
    'facility_updated': 'Facility updated',
    'facility_deleted': 'Facility deleted',
    'image_uploaded': 'Image uploaded',

    # Status change notices for the reservation owner
    'reservation_approved_notice': 'Congratulations! Your reservation at "{facility}" has been APPROVED by the admin.',
    'reservation_rejected_notice': 'Sorry, your reservation at "{facility}" was REJECTED. Reason: {note}',
    'no_admin_note': 'No note provided.',

    # Error messages
    'invalid_credentials': 'Incorrect email or password',
    'register_failed': 'Registration failed. The email may already be registered',
    'permission_denied': 'You do not have permission for this action',
    'login_required': 'Please sign in to continue',
    'reservation_not_found': 'Reservation not found',
    'facility_not_found': 'Facility not found',
    'facility_unavailable': 'This facility is not available for booking',
    'reservation_create_failed': 'Could not create the reservation',
    'reservation_cancel_failed': 'Could not cancel the reservation',
    'reservation_cancel_not_allowed': 'Only your own pending reservations can be cancelled',
    'reservation_update_failed': 'Could not update the reservation',
    'rejection_note_required': 'Please provide a reason for the rejection',
    'facility_save_failed': 'Could not save the facility',
    'facility_delete_failed': 'Could not delete the facility',
    'facility_fields_required': 'Please complete all required facility details',
    'no_file': 'Please choose an image to upload',
    'invalid_file_type': 'The file must be an image',
    'file_too_large': 'Maximum file size is {max_mb}MB',
    'upload_failed': 'Could not upload the image: {error}',
    'password_too_short': 'Password must be at least {min_length} characters',

    # Validation messages
    'field_required': 'This field is required',
    'invalid_value': 'Invalid value',
}


def get_message(key: str, **kwargs) -> str:
    """
    Get message with optional formatting.

    Args:
        key: Message key
        **kwargs: Format parameters

    Returns:
        Formatted message or key if not found
    """
    message = MESSAGES.get(key, key)
    if kwargs:
        return message.format(**kwargs)
    return message
