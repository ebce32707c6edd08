from .auth import is_admin


def current_user(request):
    """Expose the admin flag to every template for navigation links."""
    user = getattr(request, 'user', None)
    return {'is_admin_user': bool(user and user.is_authenticated and is_admin(user))}
