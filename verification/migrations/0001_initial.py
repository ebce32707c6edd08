# Generated manually for the verification models

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='FreelancerVerification',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('in_progress', 'In Progress'), ('under_review', 'Under Review'), ('approved', 'Approved'), ('rejected', 'Rejected')], default='pending', max_length=20)),
                ('current_step', models.PositiveSmallIntegerField(default=1)),
                ('username', models.CharField(blank=True, max_length=150)),
                ('job_title', models.CharField(blank=True, max_length=255)),
                ('specialization', models.CharField(blank=True, max_length=255)),
                ('steps', models.JSONField(blank=True, default=dict, help_text='Snapshot of the four wizard sub-records at submission time')),
                ('admission_score', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('submitted_at', models.DateTimeField(blank=True, null=True)),
                ('reviewed_at', models.DateTimeField(blank=True, null=True)),
                ('rejection_reason', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('reviewed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='reviewed_verifications', to=settings.AUTH_USER_MODEL)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='freelancer_verification', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Freelancer Verification',
                'verbose_name_plural': 'Freelancer Verifications',
                'ordering': ['-submitted_at', '-created_at'],
            },
        ),
        migrations.CreateModel(
            name='VerificationAttachment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('kind', models.CharField(choices=[('thumbnail', 'Portfolio Thumbnail'), ('image', 'Portfolio Image'), ('certificate', 'Certificate')], max_length=20)),
                ('slot', models.PositiveSmallIntegerField(blank=True, help_text='Portfolio slot (0-2) for thumbnails and images', null=True)),
                ('file', models.FileField(upload_to='verification/%Y/%m/')),
                ('original_name', models.CharField(max_length=255)),
                ('content_type', models.CharField(blank=True, max_length=100)),
                ('size', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('verification', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='attachments', to='verification.freelancerverification')),
            ],
            options={
                'verbose_name': 'Verification Attachment',
                'verbose_name_plural': 'Verification Attachments',
                'ordering': ['kind', 'slot', 'created_at'],
            },
        ),
        migrations.CreateModel(
            name='VerificationReview',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('decision', models.CharField(choices=[('approved', 'Approved'), ('rejected', 'Rejected'), ('needs_revision', 'Needs Revision')], max_length=20)),
                ('comments', models.TextField(blank=True)),
                ('checklist', models.JSONField(blank=True, default=dict, help_text='profile_complete, portfolio_quality, skills_verified, documents_valid')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('reviewer', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='verification_reviews', to=settings.AUTH_USER_MODEL)),
                ('verification', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='reviews', to='verification.freelancerverification')),
            ],
            options={
                'verbose_name': 'Verification Review',
                'verbose_name_plural': 'Verification Reviews',
                'ordering': ['-created_at'],
            },
        ),
    ]
