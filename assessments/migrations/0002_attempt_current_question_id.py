from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('assessments', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='attempt',
            name='current_question_id',
            field=models.CharField(blank=True, max_length=64),
        ),
    ]
