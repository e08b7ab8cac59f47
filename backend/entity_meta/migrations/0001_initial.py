# Generated migration for entity_meta app
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='EntityMeta',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('rel_id', models.BigIntegerField()),
                ('rel_type', models.CharField(max_length=50)),
                ('name', models.CharField(max_length=100)),
                ('value', models.TextField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Entity Meta',
                'verbose_name_plural': 'Entity Meta',
                'db_table': 'entity_meta_entitymeta',
                'ordering': ['id'],
            },
        ),
        migrations.AddConstraint(
            model_name='entitymeta',
            constraint=models.UniqueConstraint(fields=('rel_id', 'rel_type', 'name'), name='unique_entity_meta_key'),
        ),
    ]
