import cores.models
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
            name='PlatformSetting',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('default_pass_percentage', models.PositiveIntegerField(default=40, help_text='Default pass mark percentage')),
                ('default_exam_duration', models.PositiveIntegerField(default=120, help_text='Default duration in minutes')),
                ('grade_bands', models.JSONField(default=cores.models.default_grade_bands, help_text='List of [minimum percentage, grade], highest band first')),
            ],
        ),
        migrations.CreateModel(
            name='AuditLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(choices=[('START', 'Attempt Started'), ('SUBMIT', 'Attempt Submitted'), ('EXPIRE', 'Attempt Expired'), ('ABANDON', 'Attempt Abandoned'), ('REGRADE', 'Re-grade'), ('PUBLISH', 'Exam Published'), ('SETTINGS', 'Settings Changed')], max_length=20)),
                ('target_model', models.CharField(help_text='e.g., Attempt, Exam, Result', max_length=50)),
                ('target_object_id', models.CharField(blank=True, max_length=100, null=True)),
                ('details', models.TextField(blank=True, help_text='Description of changes')),
                ('timestamp', models.DateTimeField(auto_now_add=True)),
                ('actor', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='audit_logs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-timestamp'],
            },
        ),
    ]
