import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('assessments', '0001_initial'),
        ('exams', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Result',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('version', models.PositiveIntegerField()),
                ('is_current', models.BooleanField(default=True)),
                ('key_version', models.PositiveIntegerField()),
                ('score', models.DecimalField(decimal_places=2, max_digits=9)),
                ('max_score', models.DecimalField(decimal_places=2, max_digits=9)),
                ('percentage', models.DecimalField(decimal_places=2, max_digits=7)),
                ('grade', models.CharField(max_length=10)),
                ('passed', models.BooleanField(default=False)),
                ('total_questions', models.PositiveIntegerField(default=0)),
                ('attempted', models.PositiveIntegerField(default=0)),
                ('correct', models.PositiveIntegerField(default=0)),
                ('wrong', models.PositiveIntegerField(default=0)),
                ('partially_correct', models.PositiveIntegerField(default=0)),
                ('skipped', models.PositiveIntegerField(default=0)),
                ('section_breakdown', models.JSONField(blank=True, default=list)),
                ('question_breakdown', models.JSONField(blank=True, default=list)),
                ('rank', models.PositiveIntegerField(blank=True, null=True)),
                ('percentile', models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ('speed', models.DecimalField(blank=True, decimal_places=2, help_text='Questions attempted per minute', max_digits=8, null=True)),
                ('accuracy', models.DecimalField(blank=True, decimal_places=4, help_text='correct / (correct + wrong)', max_digits=5, null=True)),
                ('time_taken_seconds', models.PositiveIntegerField(default=0)),
                ('finalized_by', models.CharField(choices=[('submit', 'Submitted by candidate'), ('expiry', 'Deadline expiry'), ('regrade', 'Re-grade')], max_length=10)),
                ('answers_locked_at', models.DateTimeField()),
                ('completed_at', models.DateTimeField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('attempt', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='results', to='assessments.attempt')),
                ('snapshot', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='results', to='exams.examsnapshot')),
            ],
            options={
                'ordering': ['attempt', '-version'],
            },
        ),
        migrations.AddConstraint(
            model_name='result',
            constraint=models.UniqueConstraint(fields=('attempt', 'version'), name='unique_result_version'),
        ),
    ]
