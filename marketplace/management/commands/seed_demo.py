"""
Populate the database with demo users, services, projects, escrow and
saved searches.

Usage:
    python manage.py seed_demo           # create missing demo rows
    python manage.py seed_demo --reset   # delete demo rows first
"""

from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from marketplace import demo_data
from marketplace.models import EscrowItem, Project, SavedSearch, Service


class Command(BaseCommand):
    help = 'Seed demo marketplace data for local development'

    def add_arguments(self, parser):
        parser.add_argument(
            '--reset', action='store_true',
            help='Delete existing demo users (and everything they own) first',
        )

    @transaction.atomic
    def handle(self, **options):
        User = get_user_model()
        usernames = [u['username'] for u in demo_data.DEMO_USERS]

        if options['reset']:
            deleted, _ = User.objects.filter(username__in=usernames).delete()
            self.stdout.write(f'Deleted {deleted} demo rows.')

        users = {}
        for fields in demo_data.DEMO_USERS:
            user, created = User.objects.get_or_create(
                username=fields['username'],
                defaults={
                    'email': fields['email'],
                    'full_name': fields['full_name'],
                    'role': fields['role'],
                    'email_verified': True,
                    'walkthrough_completed': True,
                },
            )
            if created:
                user.set_password(demo_data.DEMO_PASSWORD)
                user.save(update_fields=['password'])
            users[user.username] = user

        for fields in demo_data.DEMO_SERVICES:
            Service.objects.get_or_create(
                provider=users[fields['provider']],
                title=fields['title'],
                defaults={
                    'category': fields['category'],
                    'hourly_rate': Decimal(str(fields['hourly_rate'])),
                },
            )

        projects = {}
        for fields in demo_data.DEMO_PROJECTS:
            project, _ = Project.objects.get_or_create(
                client=users[fields['client']],
                title=fields['title'],
                defaults={
                    'category': fields['category'],
                    'budget_hours': Decimal(str(fields['budget_hours'])),
                },
            )
            projects[fields['client']] = project

        now = timezone.now()
        for fields in demo_data.DEMO_ESCROW:
            EscrowItem.objects.get_or_create(
                project_title=fields['project_title'],
                client=users[fields['client']],
                freelancer=users[fields['freelancer']],
                defaults={
                    'project': projects.get(fields['client']),
                    'amount': Decimal(str(fields['amount'])),
                    'currency': fields['currency'],
                    'status': fields['status'],
                    'description': fields['description'],
                    'due_date': now + timedelta(days=fields['due_in_days']),
                    'auto_release_date': now + timedelta(days=fields['auto_release_in_days']),
                },
            )

        for fields in demo_data.DEMO_SAVED_SEARCHES:
            SavedSearch.objects.get_or_create(
                user=users[fields['user']],
                name=fields['name'],
                defaults={k: v for k, v in fields.items() if k not in ('user', 'name')},
            )

        self.stdout.write(self.style.SUCCESS(
            f'Demo data ready: {len(users)} users, {Service.objects.count()} services, '
            f'{EscrowItem.objects.count()} escrow items. Password: {demo_data.DEMO_PASSWORD}'
        ))
