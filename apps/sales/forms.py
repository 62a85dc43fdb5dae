import os

from django import forms
from django.conf import settings
from django.core.exceptions import ValidationError
from django.utils import timezone

from apps.accounts.models import ROLE_PDV, User
from apps.catalog.models import WebProduct
from apps.core.utils import month_label
from .models import Sale, Share


class SaleForm(forms.ModelForm):
    class Meta:
        model = Sale
        fields = [
            'date', 'telefono', 'cluster_quality', 'recharge_date', 'recharge_amount',
            'accumulated_amount', 'commissionable_charge', 'action', 'user', 'webproduct',
        ]
        widgets = {
            'date': forms.DateInput(attrs={'class': 'form-control', 'type': 'date'}),
            'telefono': forms.TextInput(attrs={'class': 'form-control', 'placeholder': '9XXXXXXXX'}),
            'cluster_quality': forms.Select(attrs={'class': 'form-select'}),
            'recharge_date': forms.DateInput(attrs={'class': 'form-control', 'type': 'date'}),
            'recharge_amount': forms.NumberInput(attrs={'class': 'form-control', 'min': 0}),
            'accumulated_amount': forms.NumberInput(attrs={'class': 'form-control', 'min': 0}),
            'action': forms.Select(attrs={'class': 'form-select'}),
            'user': forms.Select(attrs={'class': 'form-select'}),
            'webproduct': forms.Select(attrs={'class': 'form-select'}),
        }
        error_messages = {
            'date': {
                'required': 'La fecha es obligatoria.',
                'invalid': 'La fecha no tiene un formato válido.',
            },
            'telefono': {
                'required': 'El teléfono es obligatorio.',
            },
            'cluster_quality': {
                'invalid_choice': 'La calidad del cluster debe ser A+, A, B o C.',
            },
            'recharge_date': {
                'invalid': 'La fecha de recarga no tiene un formato válido.',
            },
            'recharge_amount': {
                'invalid': 'El monto de recarga debe ser un número entero.',
                'min_value': 'El monto de recarga no puede ser negativo.',
            },
            'accumulated_amount': {
                'invalid': 'El monto acumulado debe ser un número entero.',
                'min_value': 'El monto acumulado no puede ser negativo.',
            },
            'action': {
                'invalid_choice': 'La acción debe ser REGULAR o PREMIUM.',
            },
            'user': {
                'required': 'El usuario es obligatorio.',
                'invalid_choice': 'El usuario seleccionado no es válido.',
            },
            'webproduct': {
                'required': 'El producto web es obligatorio.',
                'invalid_choice': 'El producto web seleccionado no es válido.',
            },
        }

    def __init__(self, *args, **kwargs):
        self.company = kwargs.pop('company', None)
        super().__init__(*args, **kwargs)
        self.fields['user'].queryset = User.objects.filter(company=self.company, role=ROLE_PDV)
        self.fields['webproduct'].queryset = WebProduct.objects.filter(product__company=self.company)

    def clean(self):
        cleaned_data = super().clean()
        telefono = cleaned_data.get('telefono')
        sale_date = cleaned_data.get('date')
        if telefono and sale_date:
            duplicates = Sale.objects.filter(
                user__company=self.company,
                telefono=telefono,
                date__year=sale_date.year,
                date__month=sale_date.month,
            )
            if self.instance.pk:
                duplicates = duplicates.exclude(pk=self.instance.pk)
            if duplicates.exists():
                self.add_error(
                    'telefono',
                    f'El teléfono {telefono} ya existe en el mes de {month_label(sale_date.year, sale_date.month)}',
                )
        return cleaned_data


class ShareForm(forms.ModelForm):
    year = forms.IntegerField(
        min_value=2000,
        error_messages={
            'required': 'El año es obligatorio.',
            'invalid': 'El año debe ser un número entero.',
            'min_value': 'El año debe ser 2000 o posterior.',
        },
    )
    month = forms.IntegerField(
        min_value=1,
        max_value=12,
        error_messages={
            'required': 'El mes es obligatorio.',
            'invalid': 'El mes debe ser un número entero.',
            'min_value': 'El mes debe estar entre 1 y 12.',
            'max_value': 'El mes debe estar entre 1 y 12.',
        },
    )
    amount = forms.IntegerField(
        min_value=0,
        error_messages={
            'required': 'El monto es obligatorio.',
            'invalid': 'El monto debe ser un número entero.',
            'min_value': 'El monto no puede ser negativo.',
        },
    )

    class Meta:
        model = Share
        fields = ['year', 'month', 'amount', 'user']
        widgets = {
            'user': forms.Select(attrs={'class': 'form-select'}),
        }
        error_messages = {
            'user': {
                'required': 'El PDV es obligatorio.',
                'invalid_choice': 'El PDV seleccionado no es válido.',
            },
        }

    def __init__(self, *args, **kwargs):
        self.company = kwargs.pop('company', None)
        super().__init__(*args, **kwargs)
        self.fields['user'].queryset = User.objects.filter(company=self.company, role=ROLE_PDV)

    def clean_year(self):
        year = self.cleaned_data['year']
        if year > timezone.localdate().year:
            raise ValidationError('El año no puede ser mayor al año actual.')
        return year

    def clean(self):
        cleaned_data = super().clean()
        user = cleaned_data.get('user')
        year = cleaned_data.get('year')
        month = cleaned_data.get('month')
        if user and year and month:
            duplicates = Share.objects.filter(user=user, year=year, month=month)
            if self.instance.pk:
                duplicates = duplicates.exclude(pk=self.instance.pk)
            if duplicates.exists():
                self.add_error('user', 'Ya existe una cuota para este PDV en el mes y año seleccionados.')
        return cleaned_data


class UploadForm(forms.Form):
    ALLOWED_EXTENSIONS = ['.xlsx']

    file = forms.FileField(error_messages={'required': 'Seleccione un archivo para importar.'})

    def clean_file(self):
        uploaded = self.cleaned_data['file']
        extension = os.path.splitext(uploaded.name)[1].lower()
        if extension not in self.ALLOWED_EXTENSIONS:
            raise ValidationError('El archivo debe ser de tipo: xlsx')
        if uploaded.size > settings.BULK_IMPORT_MAX_FILE_SIZE:
            raise ValidationError('El archivo no debe pesar más de 10MB')
        return uploaded
