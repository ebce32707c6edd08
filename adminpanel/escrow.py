"""
Escrow oversight: filtering, totals, auto-release countdown and the
release/refund actions.
"""

import csv
import logging
import math
from dataclasses import dataclass
from decimal import Decimal

from django.db import transaction
from django.db.models import Q, Sum
from django.utils import timezone

from marketplace.models import EscrowItem

from .exceptions import EscrowActionError

logger = logging.getLogger(__name__)

STATUS_FILTERS = ('all',) + tuple(EscrowItem.Status.values)
ACTIONS = ('release', 'refund')

CSV_HEADER = [
    'id', 'project_title', 'client', 'freelancer', 'amount', 'currency',
    'status', 'created_at', 'due_date', 'auto_release_date',
]


@dataclass
class EscrowTotals:
    held_count: int = 0
    held_hours: Decimal = Decimal('0')
    held_aed: Decimal = Decimal('0')
    disputed_count: int = 0


def filter_escrow(queryset=None, search: str = '', status: str = 'all'):
    """Case-insensitive match on project, client or freelancer name plus status."""
    qs = queryset if queryset is not None else EscrowItem.objects.all()
    qs = qs.select_related('client', 'freelancer')
    search = (search or '').strip()
    if search:
        qs = qs.filter(
            Q(project_title__icontains=search)
            | Q(client__full_name__icontains=search)
            | Q(client__username__icontains=search)
            | Q(freelancer__full_name__icontains=search)
            | Q(freelancer__username__icontains=search)
        )
    if status and status != 'all':
        qs = qs.filter(status=status)
    return qs


def escrow_totals(queryset=None) -> EscrowTotals:
    qs = queryset if queryset is not None else EscrowItem.objects.all()
    held = qs.filter(status=EscrowItem.Status.HELD)

    def total(currency):
        return held.filter(currency=currency).aggregate(total=Sum('amount'))['total'] or Decimal('0')

    return EscrowTotals(
        held_count=held.count(),
        held_hours=total(EscrowItem.Currency.HOURS),
        held_aed=total(EscrowItem.Currency.AED),
        disputed_count=qs.filter(status=EscrowItem.Status.DISPUTED).count(),
    )


def days_until_auto_release(item, now=None):
    """Whole days (rounded up) until auto-release; negative once overdue."""
    if item.auto_release_date is None:
        return None
    now = now or timezone.now()
    seconds = (item.auto_release_date - now).total_seconds()
    return math.ceil(seconds / 86400)


def apply_action(item_id, action: str, acting_user=None, now=None) -> EscrowItem:
    """Release or refund a held escrow item."""
    if action not in ACTIONS:
        raise EscrowActionError(f"Unknown escrow action: {action}")
    with transaction.atomic():
        try:
            item = EscrowItem.objects.select_for_update().get(pk=item_id)
        except (EscrowItem.DoesNotExist, ValueError):
            raise EscrowActionError(f"Escrow item {item_id} not found") from None
        if item.status != EscrowItem.Status.HELD:
            raise EscrowActionError(
                f"Only held escrow can be {action}d; this item is {item.get_status_display().lower()}."
            )
        item.status = (
            EscrowItem.Status.RELEASED if action == 'release' else EscrowItem.Status.REFUNDED
        )
        item.resolved_at = now or timezone.now()
        item.resolved_by = acting_user
        item.save(update_fields=['status', 'resolved_at', 'resolved_by', 'updated_at'])
    logger.info("Escrow %s %sd by %s (%s %s)", item.pk, action, acting_user, item.amount, item.currency)
    return item


def write_csv(items, stream):
    """Write ``items`` as CSV rows to ``stream``."""
    writer = csv.writer(stream)
    writer.writerow(CSV_HEADER)
    for item in items:
        writer.writerow([
            item.pk,
            item.project_title,
            item.client_name,
            item.freelancer_name,
            item.amount,
            item.currency,
            item.status,
            item.created_at.isoformat(),
            item.due_date.isoformat() if item.due_date else '',
            item.auto_release_date.isoformat() if item.auto_release_date else '',
        ])
    return stream
