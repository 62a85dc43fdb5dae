from django import forms
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from crispy_forms.helper import FormHelper
from crispy_forms.layout import Layout, Submit, Field
from crispy_forms.bootstrap import FormActions

from apps.territories.models import Circuit
from .models import ROLE_CHOICES, ROLE_ZONIFICADO, Seller, User, pad_dni


# LOGIN FORM
class LoginForm(forms.Form):
    dni = forms.CharField(
        label='DNI',
        max_length=8,
        required=True,
        widget=forms.TextInput(attrs={
            'class': 'form-control',
            'placeholder': '12345678',
            'autofocus': True,
            'inputmode': 'numeric',
        })
    )

    password = forms.CharField(
        label='Contraseña',
        required=True,
        widget=forms.PasswordInput(attrs={
            'class': 'form-control',
            'placeholder': 'Ingresa tu contraseña',
        })
    )

    remember = forms.BooleanField(
        label='Recordarme',
        required=False,
        initial=False,
        widget=forms.CheckboxInput(attrs={
            'class': 'form-check-input',
        })
    )

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.helper = FormHelper()
        self.helper.form_method = 'post'

        self.helper.layout = Layout(
            Field('dni', css_class='mb-3'),
            Field('password', css_class='mb-3'),
            Field('remember', css_class='mb-3'),
            FormActions(
                Submit('submit', 'Ingresar', css_class='btn btn-primary btn-block w-100')
            )
        )

    def clean_dni(self):
        return pad_dni(self.cleaned_data.get('dni', ''))


# USER FORM (store + update)
class UserForm(forms.ModelForm):
    """
    Back-office user form

    The password is required on create and optional on update; when given
    it must match ``password_confirmation`` and is stored hashed.
    """

    password = forms.CharField(required=False, widget=forms.PasswordInput(attrs={'class': 'form-control'}))
    password_confirmation = forms.CharField(required=False, widget=forms.PasswordInput(attrs={'class': 'form-control'}))

    class Meta:
        model = User
        fields = ['name', 'email', 'dni', 'cel', 'circuit', 'zonificador', 'role', 'is_active']
        widgets = {
            'name': forms.TextInput(attrs={'class': 'form-control'}),
            'email': forms.EmailInput(attrs={'class': 'form-control'}),
            'dni': forms.TextInput(attrs={'class': 'form-control'}),
            'cel': forms.TextInput(attrs={'class': 'form-control'}),
            'circuit': forms.Select(attrs={'class': 'form-select'}),
            'zonificador': forms.Select(attrs={'class': 'form-select'}),
            'role': forms.Select(attrs={'class': 'form-select'}),
        }
        error_messages = {
            'name': {
                'required': 'El nombre es requerido',
                'max_length': 'El nombre no puede tener más de 255 caracteres',
            },
            'email': {
                'invalid': 'El correo electrónico debe ser válido',
            },
            'dni': {
                'required': 'El DNI es requerido',
                'unique': 'Este DNI ya está en uso',
            },
            'cel': {
                'required': 'El número de celular es requerido',
            },
            'circuit': {
                'required': 'El circuito es requerido',
                'invalid_choice': 'El circuito seleccionado no existe',
            },
            'zonificador': {
                'invalid_choice': 'El zonificador seleccionado no existe',
            },
            'role': {
                'required': 'El rol es requerido',
                'invalid_choice': 'El rol seleccionado no existe',
            },
        }

    def __init__(self, *args, **kwargs):
        self.company = kwargs.pop('company', None)
        super().__init__(*args, **kwargs)
        self.fields['circuit'].required = True
        self.fields['cel'].required = True
        self.fields['role'].choices = ROLE_CHOICES
        self.fields['circuit'].queryset = Circuit.objects.filter(zonal__company=self.company)
        self.fields['zonificador'].queryset = User.objects.filter(company=self.company, role=ROLE_ZONIFICADO)
        if not self.instance.pk:
            self.fields['password'].required = True
            self.fields['password'].error_messages['required'] = 'La contraseña es requerida'

    def clean_dni(self):
        return pad_dni(self.cleaned_data.get('dni'))

    def clean_email(self):
        email = (self.cleaned_data.get('email') or '').strip().lower()
        if not email:
            return None
        duplicates = User.objects.filter(email__iexact=email)
        if self.instance.pk:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise ValidationError('Este correo electrónico ya está en uso')
        return email

    def clean_cel(self):
        cel = self.cleaned_data.get('cel')
        duplicates = User.objects.filter(cel=cel)
        if self.instance.pk:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise ValidationError('Este número de celular ya está en uso')
        return cel

    def clean(self):
        cleaned_data = super().clean()
        password = cleaned_data.get('password')
        if password:
            if password != cleaned_data.get('password_confirmation'):
                self.add_error('password_confirmation', 'Las contraseñas no coinciden')
            else:
                try:
                    validate_password(password, self.instance)
                except ValidationError as error:
                    self.add_error('password', error)
        return cleaned_data

    def save(self, commit=True):
        user = super().save(commit=False)
        user.company = self.company
        password = self.cleaned_data.get('password')
        if password:
            user.set_password(password)
        if commit:
            user.save()
        return user


class SellerForm(forms.ModelForm):
    class Meta:
        model = Seller
        fields = ['name', 'dni', 'cel']
        widgets = {
            'name': forms.TextInput(attrs={'class': 'form-control'}),
            'dni': forms.TextInput(attrs={'class': 'form-control'}),
            'cel': forms.TextInput(attrs={'class': 'form-control'}),
        }
        error_messages = {
            'name': {
                'max_length': 'El nombre no puede tener más de 60 caracteres.',
            },
            'dni': {
                'required': 'El DNI es obligatorio.',
                'unique': 'Este DNI ya está registrado.',
            },
            'cel': {
                'unique': 'Este número de celular ya está registrado.',
            },
        }

    def clean_cel(self):
        return self.cleaned_data.get('cel') or None


class BulkCreateForm(forms.Form):
    """DNIs to create as placeholder PDV users, one per line or comma separated."""

    dnis = forms.CharField(
        widget=forms.Textarea(attrs={'class': 'form-control', 'rows': 6}),
        error_messages={'required': 'Ingresa al menos un DNI.'},
    )

    def clean_dnis(self):
        raw = self.cleaned_data['dnis'].replace(',', '\n').splitlines()
        dnis = [value.strip() for value in raw if value.strip()]
        if not dnis:
            raise ValidationError('Ingresa al menos un DNI.')
        for dni in dnis:
            if not dni.isdigit() or len(dni) > 8:
                raise ValidationError(f'DNI no válido: {dni}')
        return dnis
