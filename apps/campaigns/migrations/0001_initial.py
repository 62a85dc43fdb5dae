import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Campaign',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100, verbose_name='nombre')),
                ('description', models.CharField(blank=True, max_length=255, verbose_name='descripción')),
                ('type', models.CharField(choices=[('Esquema', 'Esquema'), ('Acelerador', 'Acelerador'), ('Información', 'Información')], max_length=20, verbose_name='tipo')),
                ('image', models.ImageField(blank=True, help_text='jpeg, png or gif, max 2MB', upload_to='campaigns/', verbose_name='imagen')),
                ('date_start', models.DateField(verbose_name='fecha de inicio')),
                ('date_end', models.DateField(verbose_name='fecha de fin')),
                ('status', models.BooleanField(default=True, verbose_name='activa')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='campaigns', to='core.company')),
            ],
            options={
                'verbose_name': 'campaña',
                'verbose_name_plural': 'campañas',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['status', 'date_end'], name='campaign_status_end_idx')],
                'constraints': [
                    models.UniqueConstraint(fields=('company', 'name'), name='unique_campaign_name_per_company'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Notification',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=255, verbose_name='título')),
                ('description', models.TextField(verbose_name='descripción')),
                ('type', models.CharField(choices=[('URGENT', 'Urgente'), ('ALERT', 'Alerta')], max_length=10, verbose_name='tipo')),
                ('status', models.BooleanField(default=True, verbose_name='activa')),
                ('start_date', models.DateField(verbose_name='fecha de inicio')),
                ('end_date', models.DateField(blank=True, null=True, verbose_name='fecha de fin')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to='core.company')),
            ],
            options={
                'verbose_name': 'notificación',
                'verbose_name_plural': 'notificaciones',
                'ordering': ['-created_at'],
            },
        ),
    ]
