# Generated migration for installations app
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('hosting', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='InstallStep',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('step_type', models.CharField(choices=[('PRE_INSTALLATION', 'Pre-installation'), ('DB_CREATION', 'Database creation'), ('CPANEL_ENTRY', 'cPanel entry'), ('CLOUDFLARE_ENTRY', 'Cloudflare entry'), ('DIRECTORY_SETUP', 'Directory setup')], max_length=30)),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('IN_PROGRESS', 'In progress'), ('SUCCESS', 'Success'), ('FAILED', 'Failed')], default='PENDING', max_length=20)),
                ('step_data', models.JSONField(blank=True, null=True)),
                ('error_msg', models.TextField(blank=True, null=True)),
                ('step_order', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('site', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='steps', to='hosting.site')),
            ],
            options={
                'verbose_name': 'Install Step',
                'verbose_name_plural': 'Install Steps',
                'db_table': 'installations_installstep',
                'ordering': ['step_order', 'id'],
            },
        ),
        migrations.AddConstraint(
            model_name='installstep',
            constraint=models.UniqueConstraint(fields=('site', 'step_type'), name='unique_step_per_site'),
        ),
    ]
