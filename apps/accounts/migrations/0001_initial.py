import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


DNI_VALIDATOR = django.core.validators.RegexValidator(
    message='El DNI debe tener exactamente 8 dígitos numéricos.', regex='^\\d{8}$'
)
CEL_VALIDATOR = django.core.validators.RegexValidator(
    message='El celular debe tener exactamente 9 dígitos numéricos.', regex='^\\d{9}$'
)


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
        ('core', '0001_initial'),
        ('territories', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='User',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('dni', models.CharField(help_text='8 digits. Used for login.', max_length=8, unique=True, validators=[DNI_VALIDATOR], verbose_name='DNI')),
                ('name', models.CharField(help_text='Full name', max_length=255, verbose_name='nombre')),
                ('email', models.EmailField(blank=True, max_length=255, null=True, verbose_name='email')),
                ('cel', models.CharField(blank=True, help_text='9 digits', max_length=9, validators=[CEL_VALIDATOR], verbose_name='celular')),
                ('role', models.CharField(choices=[('admin', 'Administrador'), ('qa', 'QA'), ('zonificado', 'Zonificado'), ('pdv', 'PDV')], db_index=True, default='pdv', max_length=20, verbose_name='rol')),
                ('is_active', models.BooleanField(default=True, verbose_name='activo')),
                ('is_staff', models.BooleanField(default=False, help_text='Designates whether the user can log into admin site.', verbose_name='staff')),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('company', models.ForeignKey(blank=True, help_text='The company this user belongs to', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='users', to='core.company')),
                ('circuit', models.ForeignKey(blank=True, help_text='Circuit where the PDV works', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='users', to='territories.circuit')),
                ('zonificador', models.ForeignKey(blank=True, help_text='Supervisor of this PDV', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='zonificados', to=settings.AUTH_USER_MODEL)),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'verbose_name': 'usuario',
                'verbose_name_plural': 'usuarios',
                'ordering': ['name'],
                'indexes': [
                    models.Index(fields=['company', 'role'], name='user_company_role_idx'),
                    models.Index(fields=['is_active'], name='user_active_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Seller',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(blank=True, max_length=60, verbose_name='nombre')),
                ('dni', models.CharField(max_length=8, unique=True, validators=[DNI_VALIDATOR], verbose_name='DNI')),
                ('cel', models.CharField(blank=True, max_length=9, null=True, unique=True, validators=[CEL_VALIDATOR], verbose_name='celular')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('pdv', models.ForeignKey(help_text='PDV this seller works for', on_delete=django.db.models.deletion.CASCADE, related_name='sellers', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'vendedor',
                'verbose_name_plural': 'vendedores',
                'ordering': ['name'],
            },
        ),
    ]
