from django.db import models
from django.utils.text import slugify


class Company(models.Model):
    """Tenant root: every back-office record belongs to one company."""

    name = models.CharField(max_length=200, unique=True, help_text="Company name")
    slug = models.SlugField(max_length=200, unique=True, help_text="URL-friendly name (auto-generated)")
    description = models.TextField(blank=True, help_text="Brief description about the company")

    # Status
    is_active = models.BooleanField(default=True, help_text="Is company active?")

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Company"
        verbose_name_plural = "Companies"
        ordering = ['name']
        indexes = [
            models.Index(fields=['is_active'], name='company_active_idx'),
        ]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.name)
        super().save(*args, **kwargs)

    def get_active_users_count(self):
        return self.users.filter(is_active=True).count()
