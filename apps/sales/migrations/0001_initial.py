import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('catalog', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Sale',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField(db_index=True, verbose_name='fecha')),
                ('telefono', models.CharField(max_length=9, validators=[django.core.validators.RegexValidator(message='El teléfono debe tener 9 dígitos, ser solo números y empezar con 9', regex='^9\\d{8}$')], verbose_name='teléfono')),
                ('cluster_quality', models.CharField(blank=True, choices=[('A+', 'A+'), ('A', 'A'), ('B', 'B'), ('C', 'C')], max_length=2, null=True, verbose_name='calidad de cluster')),
                ('recharge_date', models.DateField(blank=True, null=True, verbose_name='fecha de recarga')),
                ('recharge_amount', models.PositiveIntegerField(blank=True, null=True, verbose_name='monto de recarga')),
                ('accumulated_amount', models.PositiveIntegerField(blank=True, null=True, verbose_name='monto acumulado')),
                ('commissionable_charge', models.BooleanField(default=False, verbose_name='comisionable')),
                ('action', models.CharField(blank=True, choices=[('REGULAR', 'Regular'), ('PREMIUM', 'Premium')], max_length=10, null=True, verbose_name='acción')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(help_text='PDV that made the sale', on_delete=django.db.models.deletion.PROTECT, related_name='sales', to=settings.AUTH_USER_MODEL)),
                ('webproduct', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='sales', to='catalog.webproduct')),
            ],
            options={
                'verbose_name': 'venta',
                'verbose_name_plural': 'ventas',
                'ordering': ['-date', '-created_at'],
                'indexes': [
                    models.Index(fields=['telefono', 'date'], name='sale_phone_date_idx'),
                    models.Index(fields=['user', 'date'], name='sale_user_date_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Share',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('year', models.PositiveIntegerField(verbose_name='año')),
                ('month', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(12)], verbose_name='mes')),
                ('amount', models.PositiveIntegerField(default=0, verbose_name='monto')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='shares', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'cuota',
                'verbose_name_plural': 'cuotas',
                'ordering': ['-year', '-month'],
                'constraints': [
                    models.UniqueConstraint(fields=('user', 'year', 'month'), name='unique_share_per_user_period'),
                ],
            },
        ),
    ]
