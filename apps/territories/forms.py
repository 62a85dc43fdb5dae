from django import forms
from django.core.exceptions import ValidationError

from .models import Zonal, Circuit, Tack


class ZonalForm(forms.ModelForm):
    class Meta:
        model = Zonal
        fields = ['name', 'short_name', 'active']
        widgets = {
            'name': forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'e.g. LIMA NORTE'}),
            'short_name': forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'e.g. LN'}),
        }
        error_messages = {
            'name': {
                'required': 'El nombre es obligatorio',
                'max_length': 'El nombre no puede tener más de 20 caracteres',
            },
            'short_name': {
                'required': 'El nombre corto es obligatorio',
                'max_length': 'El nombre corto no puede tener más de 10 caracteres',
            },
        }

    def __init__(self, *args, **kwargs):
        self.company = kwargs.pop('company', None)
        super().__init__(*args, **kwargs)

    def _siblings(self):
        queryset = Zonal.objects.filter(company=self.company)
        if self.instance.pk:
            queryset = queryset.exclude(pk=self.instance.pk)
        return queryset

    def clean_name(self):
        name = self.cleaned_data.get('name', '').strip()
        if len(name) < 3:
            raise ValidationError('El nombre debe tener al menos 3 caracteres')
        if self._siblings().filter(name__iexact=name).exists():
            raise ValidationError('Ya existe un zonal con este nombre')
        return name

    def clean_short_name(self):
        short_name = self.cleaned_data.get('short_name', '').strip()
        if len(short_name) < 2:
            raise ValidationError('El nombre corto debe tener al menos 2 caracteres')
        if self._siblings().filter(short_name__iexact=short_name).exists():
            raise ValidationError('Ya existe un zonal con este nombre corto')
        return short_name


class CircuitForm(forms.ModelForm):
    class Meta:
        model = Circuit
        fields = ['name', 'address', 'active', 'zonal']
        widgets = {
            'name': forms.TextInput(attrs={'class': 'form-control'}),
            'address': forms.TextInput(attrs={'class': 'form-control'}),
            'zonal': forms.Select(attrs={'class': 'form-select'}),
        }
        error_messages = {
            'name': {
                'required': 'El nombre es requerido',
                'max_length': 'El nombre no puede tener más de 50 caracteres',
                'unique': 'Ya existe un circuito con este nombre',
            },
            'zonal': {
                'required': 'La zonal es requerida',
                'invalid_choice': 'La zonal seleccionada no es válida',
            },
        }

    def __init__(self, *args, **kwargs):
        company = kwargs.pop('company', None)
        super().__init__(*args, **kwargs)
        self.fields['zonal'].queryset = Zonal.objects.filter(company=company).order_by('name')

    def clean_name(self):
        name = self.cleaned_data.get('name', '').strip()
        if len(name) < 3:
            raise ValidationError('El nombre debe tener al menos 3 caracteres')
        return name


class TackForm(forms.ModelForm):
    class Meta:
        model = Tack
        fields = ['name', 'active']
        widgets = {
            'name': forms.TextInput(attrs={'class': 'form-control'}),
        }
        error_messages = {
            'name': {
                'required': 'El nombre es requerido',
                'max_length': 'El nombre no puede tener más de 20 caracteres',
                'unique': 'Ya existe una ruta con este nombre',
            },
        }
