"""
Django system checks for required configuration.

Runs automatically on `manage.py runserver`, `migrate`, and `check`.
"""
import os

from django.conf import settings
from django.core.checks import Error, Warning, register


@register()
def check_required_settings(app_configs, **kwargs):
    errors = []
    config = getattr(settings, "WAQTI_CONFIG", {})

    # E001: Admin rule must be configured
    if not config.get("admin_email") and not config.get("admin_user_id"):
        errors.append(Error(
            "No admin identity configured.",
            hint="Set WAQTI_ADMIN_EMAIL or WAQTI_ADMIN_USER_ID in .env",
            id="waqti.E001",
        ))

    # E002: DATABASE_URL required in production
    if not settings.DEBUG and not os.environ.get("DATABASE_URL"):
        errors.append(Error(
            "DATABASE_URL not set in production.",
            hint="Set DATABASE_URL for PostgreSQL connection.",
            id="waqti.E002",
        ))

    # E003: Insecure SECRET_KEY in production
    if not settings.DEBUG and "insecure" in settings.SECRET_KEY:
        errors.append(Error(
            "SECRET_KEY contains 'insecure' and is not safe for production.",
            hint="Generate a secure SECRET_KEY.",
            id="waqti.E003",
        ))

    # W001: Staging directory for wizard uploads
    if not config.get("staging_dir"):
        errors.append(Warning(
            "No staging directory configured for verification uploads.",
            hint="Set WAQTI_STAGING_DIR.",
            id="waqti.W001",
        ))

    # W002: Admin email left at the public default in production
    if not settings.DEBUG and config.get("admin_email") == "admin@waqti.com":
        errors.append(Warning(
            "Admin email is the default address.",
            hint="Set WAQTI_ADMIN_EMAIL to a mailbox you control.",
            id="waqti.W002",
        ))

    return errors
