"""
Operator alerts.

Every alert is logged.  When configured in ``WAQTI_CONFIG`` it is also
posted to a Slack webhook and, at or above ``alert_email_min_severity``,
mailed to the operations mailbox.  The request's correlation id is appended
so an alert can be matched with the request logs that produced it.
"""
import logging

import requests
from django.conf import settings
from django.core.mail import send_mail

from config.logging_filters import get_correlation_id

logger = logging.getLogger("alerting")

SEVERITIES = ("info", "warning", "critical")

SLACK_ICONS = {
    "critical": ":red_circle:",
    "warning": ":warning:",
    "info": ":hourglass:",
}


def _rank(severity: str) -> int:
    return SEVERITIES.index(severity) if severity in SEVERITIES else 0


def _post_slack(webhook: str, severity: str, title: str, body: str) -> None:
    try:
        requests.post(
            webhook,
            json={"text": f"{SLACK_ICONS.get(severity, SLACK_ICONS['info'])} *{title}*\n{body}"},
            timeout=5,
        ).raise_for_status()
    except requests.RequestException:
        logger.exception("Slack alert %r was not delivered", title)


def send_alert(severity: str, title: str, detail: str = "") -> None:
    """Log ``title``/``detail`` at ``severity`` and fan out to the configured channels."""
    config = getattr(settings, "WAQTI_CONFIG", {})
    body = f"{detail} [cid={get_correlation_id()}]" if detail else f"[cid={get_correlation_id()}]"

    level = {"critical": logging.CRITICAL, "warning": logging.WARNING}.get(severity, logging.INFO)
    logger.log(level, "ALERT [%s]: %s -- %s", severity.upper(), title, body)

    webhook = config.get("slack_webhook_url")
    if webhook:
        _post_slack(webhook, severity, title, body)

    mailbox = config.get("alert_email")
    if mailbox and _rank(severity) >= _rank(config.get("alert_email_min_severity", "critical")):
        send_mail(
            subject=f"[Waqti {severity.upper()}] {title}",
            message=body,
            from_email=None,
            recipient_list=[mailbox],
            fail_silently=True,
        )
