import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('exams', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Attempt',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=[('in_progress', 'In progress'), ('submitted', 'Submitted'), ('expired', 'Expired'), ('abandoned', 'Abandoned')], default='in_progress', max_length=20)),
                ('started_at', models.DateTimeField()),
                ('deadline_at', models.DateTimeField()),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('last_active_at', models.DateTimeField(blank=True, null=True)),
                ('shuffle_seed', models.BigIntegerField()),
                ('current_section_id', models.CharField(blank=True, max_length=64)),
                ('section_entered_at', models.DateTimeField(blank=True, null=True)),
                ('section_time_spent', models.JSONField(blank=True, default=dict)),
                ('nav_seq', models.PositiveIntegerField(blank=True, null=True)),
                ('exam', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='attempts', to='exams.exam')),
                ('snapshot', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='attempts', to='exams.examsnapshot')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='attempts', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-started_at'],
            },
        ),
        migrations.CreateModel(
            name='AnswerRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('question_id', models.CharField(max_length=64)),
                ('section_id', models.CharField(blank=True, max_length=64)),
                ('selected_option_ids', models.JSONField(blank=True, default=list)),
                ('marked_for_review', models.BooleanField(default=False)),
                ('visited', models.BooleanField(default=False)),
                ('status', models.CharField(choices=[('unanswered', 'Unanswered'), ('answered', 'Answered'), ('skipped', 'Skipped')], default='unanswered', max_length=20)),
                ('time_spent_seconds', models.PositiveIntegerField(default=0)),
                ('last_modified_at', models.DateTimeField(blank=True, null=True)),
                ('client_seq', models.PositiveIntegerField(blank=True, null=True)),
                ('attempt', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='answers', to='assessments.attempt')),
            ],
            options={
                'ordering': ['id'],
                'unique_together': {('attempt', 'question_id')},
            },
        ),
        migrations.AddIndex(
            model_name='attempt',
            index=models.Index(fields=['status', 'deadline_at'], name='attempt_status_deadline_idx'),
        ),
        migrations.AddConstraint(
            model_name='attempt',
            constraint=models.UniqueConstraint(condition=models.Q(('status', 'in_progress')), fields=('user', 'exam'), name='one_in_progress_attempt_per_user_exam'),
        ),
    ]
