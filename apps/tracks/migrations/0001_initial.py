from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Track',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text='Track name (English)', max_length=100, unique=True)),
                ('name_ar', models.CharField(help_text='Track name (Arabic)', max_length=100)),
                ('color', models.CharField(default='#3498db', help_text='Hex color, e.g. #3498db', max_length=7)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'track',
                'verbose_name_plural': 'tracks',
                'ordering': ['name'],
            },
        ),
    ]
