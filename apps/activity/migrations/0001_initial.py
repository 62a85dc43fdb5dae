import django.core.serializers.json
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
            name='ActivityLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(db_index=True, max_length=50, verbose_name='acción')),
                ('description', models.TextField(blank=True, verbose_name='descripción')),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True, verbose_name='dirección IP')),
                ('user_agent', models.TextField(blank=True)),
                ('device_type', models.CharField(choices=[('phone', 'Celular'), ('tablet', 'Tablet'), ('desktop', 'Escritorio'), ('unknown', 'Desconocido')], default='unknown', max_length=10, verbose_name='dispositivo')),
                ('app_state', models.CharField(default='active', help_text='App-State header sent by the PWA', max_length=20)),
                ('route', models.CharField(blank=True, max_length=255, verbose_name='ruta')),
                ('additional_data', models.JSONField(blank=True, default=dict, encoder=django.core.serializers.json.DjangoJSONEncoder)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='activity_logs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'registro de actividad',
                'verbose_name_plural': 'registros de actividad',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['user', 'created_at'], name='activity_user_created_idx'),
                    models.Index(fields=['action', 'created_at'], name='activity_action_created_idx'),
                ],
            },
        ),
    ]
