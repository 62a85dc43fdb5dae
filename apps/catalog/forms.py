from django import forms
from django.core.exceptions import ValidationError

from .models import Product, WebProduct


class ProductForm(forms.ModelForm):
    class Meta:
        model = Product
        fields = ['name', 'description', 'active']
        widgets = {
            'name': forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'e.g. PREPAGO'}),
            'description': forms.TextInput(attrs={'class': 'form-control'}),
        }
        error_messages = {
            'name': {
                'required': 'El nombre es obligatorio',
                'max_length': 'El nombre no puede tener más de 255 caracteres',
            },
            'description': {
                'max_length': 'La descripción no puede tener más de 255 caracteres',
            },
        }

    def __init__(self, *args, **kwargs):
        self.company = kwargs.pop('company', None)
        super().__init__(*args, **kwargs)

    def clean_name(self):
        name = self.cleaned_data.get('name', '').strip()
        if len(name) < 3:
            raise ValidationError('El nombre debe tener al menos 3 caracteres')

        duplicates = Product.objects.filter(company=self.company, name__iexact=name)
        if self.instance.pk:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise ValidationError('Ya existe un producto con este nombre')
        return name


class WebProductForm(forms.ModelForm):
    class Meta:
        model = WebProduct
        fields = ['name', 'description']
        widgets = {
            'name': forms.TextInput(attrs={'class': 'form-control'}),
            'description': forms.Textarea(attrs={'class': 'form-control', 'rows': 3}),
        }
        error_messages = {
            'name': {
                'required': 'El nombre es requerido',
                'max_length': 'El nombre no puede tener más de 255 caracteres',
            },
        }

    def __init__(self, *args, **kwargs):
        self.company = kwargs.pop('company', None)
        super().__init__(*args, **kwargs)

    def clean_name(self):
        name = self.cleaned_data.get('name', '').strip()

        # Imports resolve web products by exact name inside the company
        duplicates = WebProduct.objects.filter(product__company=self.company, name=name)
        if self.instance.pk:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise ValidationError('Ya existe un producto web con este nombre')
        return name
