import os

from django import forms
from django.conf import settings
from django.core.exceptions import ValidationError

from .models import Campaign, Notification


class CampaignForm(forms.ModelForm):
    ALLOWED_IMAGE_EXTENSIONS = ['.jpeg', '.jpg', '.png', '.gif']

    class Meta:
        model = Campaign
        fields = ['name', 'description', 'type', 'image', 'date_start', 'date_end', 'status']
        widgets = {
            'name': forms.TextInput(attrs={'class': 'form-control'}),
            'description': forms.TextInput(attrs={'class': 'form-control'}),
            'type': forms.Select(attrs={'class': 'form-select'}),
            'image': forms.FileInput(attrs={'class': 'form-control', 'accept': 'image/*'}),
            'date_start': forms.DateInput(attrs={'class': 'form-control', 'type': 'date'}),
            'date_end': forms.DateInput(attrs={'class': 'form-control', 'type': 'date'}),
        }
        error_messages = {
            'name': {
                'required': 'El nombre es requerido',
                'max_length': 'El nombre no puede tener más de 100 caracteres',
            },
            'description': {
                'max_length': 'La descripción no puede tener más de 255 caracteres',
            },
            'type': {
                'required': 'El tipo es requerido',
                'invalid_choice': 'El tipo debe ser Esquema, Acelerador o Información',
            },
            'image': {
                'invalid_image': 'El archivo debe ser una imagen',
            },
            'date_start': {
                'required': 'La fecha de inicio es requerida',
                'invalid': 'La fecha de inicio debe ser una fecha válida',
            },
            'date_end': {
                'required': 'La fecha de fin es requerida',
                'invalid': 'La fecha de fin debe ser una fecha válida',
            },
        }

    def __init__(self, *args, **kwargs):
        self.company = kwargs.pop('company', None)
        super().__init__(*args, **kwargs)

    def clean_name(self):
        name = self.cleaned_data.get('name', '').strip()
        duplicates = Campaign.objects.filter(company=self.company, name=name)
        if self.instance.pk:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise ValidationError('Este nombre de campaña ya existe')
        return name

    def clean_image(self):
        image = self.cleaned_data.get('image')

        # Required on create; on update the stored image is kept
        if not image:
            if not self.instance.pk:
                raise ValidationError('La imagen es requerida')
            return image

        if image == self.instance.image:
            return image

        extension = os.path.splitext(image.name)[1].lower()
        if extension not in self.ALLOWED_IMAGE_EXTENSIONS:
            raise ValidationError('La imagen debe ser de tipo: jpeg, png, jpg, gif')

        if image.size > settings.CAMPAIGN_IMAGE_MAX_SIZE:
            raise ValidationError('La imagen no debe pesar más de 2MB')
        return image

    def clean(self):
        cleaned_data = super().clean()
        date_start = cleaned_data.get('date_start')
        date_end = cleaned_data.get('date_end')
        if date_start and date_end and date_end < date_start:
            self.add_error('date_end', 'La fecha de fin debe ser posterior o igual a la fecha de inicio')
        return cleaned_data


class CampaignFilterForm(forms.Form):
    year = forms.CharField(required=False)
    month = forms.CharField(required=False)

    def filter(self, queryset):
        year = self.cleaned_data.get('year')
        month = self.cleaned_data.get('month')
        if year and year != 'all' and year.isdigit():
            queryset = queryset.filter(date_start__year=int(year))
        if month and month != 'all' and month.isdigit():
            queryset = queryset.filter(date_start__month=int(month))
        return queryset


class NotificationForm(forms.ModelForm):
    class Meta:
        model = Notification
        fields = ['title', 'description', 'type', 'status', 'start_date', 'end_date']
        widgets = {
            'title': forms.TextInput(attrs={'class': 'form-control'}),
            'description': forms.Textarea(attrs={'class': 'form-control', 'rows': 3}),
            'type': forms.Select(attrs={'class': 'form-select'}),
            'start_date': forms.DateInput(attrs={'class': 'form-control', 'type': 'date'}),
            'end_date': forms.DateInput(attrs={'class': 'form-control', 'type': 'date'}),
        }
        error_messages = {
            'title': {
                'required': 'El título es obligatorio',
                'max_length': 'El título no puede tener más de 255 caracteres',
            },
            'description': {
                'required': 'La descripción es obligatoria',
            },
            'type': {
                'required': 'El tipo es obligatorio',
                'invalid_choice': 'El tipo debe ser URGENT o ALERT',
            },
            'start_date': {
                'required': 'La fecha de inicio es obligatoria',
                'invalid': 'La fecha de inicio debe ser una fecha válida',
            },
            'end_date': {
                'invalid': 'La fecha de fin debe ser una fecha válida',
            },
        }

    def clean_title(self):
        title = self.cleaned_data.get('title', '').strip()
        if len(title) < 3:
            raise ValidationError('El título debe tener al menos 3 caracteres')
        return title

    def clean_description(self):
        description = self.cleaned_data.get('description', '').strip()
        if len(description) < 10:
            raise ValidationError('La descripción debe tener al menos 10 caracteres')
        return description

    def clean(self):
        cleaned_data = super().clean()
        start_date = cleaned_data.get('start_date')
        end_date = cleaned_data.get('end_date')
        if start_date and end_date and end_date <= start_date:
            self.add_error('end_date', 'La fecha de fin debe ser posterior a la fecha de inicio')
        return cleaned_data
