import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Zonal',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text='3-20 characters', max_length=20, verbose_name='nombre')),
                ('short_name', models.CharField(help_text='2-10 characters', max_length=10, verbose_name='abreviatura')),
                ('active', models.BooleanField(default=True, verbose_name='activo')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='zonals', to='core.company')),
            ],
            options={
                'verbose_name': 'zonal',
                'verbose_name_plural': 'zonales',
                'ordering': ['name'],
                'constraints': [
                    models.UniqueConstraint(fields=('company', 'name'), name='unique_zonal_name_per_company'),
                    models.UniqueConstraint(fields=('company', 'short_name'), name='unique_zonal_short_name_per_company'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Circuit',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=50, unique=True, verbose_name='nombre')),
                ('address', models.CharField(blank=True, max_length=255, verbose_name='dirección')),
                ('active', models.BooleanField(default=True, verbose_name='activo')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('zonal', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='circuits', to='territories.zonal')),
            ],
            options={
                'verbose_name': 'circuito',
                'verbose_name_plural': 'circuitos',
                'ordering': ['name'],
                'indexes': [models.Index(fields=['zonal', 'active'], name='circuit_zonal_active_idx')],
            },
        ),
        migrations.CreateModel(
            name='Tack',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=20, unique=True, verbose_name='nombre')),
                ('active', models.BooleanField(default=True, verbose_name='activo')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('circuit', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='tacks', to='territories.circuit')),
            ],
            options={
                'verbose_name': 'ruta',
                'verbose_name_plural': 'rutas',
                'ordering': ['name'],
            },
        ),
    ]
