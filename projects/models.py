import uuid

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from .market_sectors import DEFAULT_SECTOR, SECTOR_CHOICES


class Project(models.Model):
    """
    A portfolio project shown as a pin on the map.

    Columns use the flat snake_case storage schema; coordinates are stored as
    two scalar columns and recomposed into a pair by the repository.
    """
    STATUS_ACTIVE = 'Active'
    STATUS_INACTIVE = 'Inactive'
    STATUS_DORMANT = 'Dormant'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_INACTIVE, 'Inactive'),
        (STATUS_DORMANT, 'Dormant'),
    ]

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Opaque project identifier"
    )
    title = models.CharField(
        max_length=500,
        help_text="Project title"
    )
    address = models.CharField(
        max_length=500,
        blank=True,
        default='',
        help_text="Street address or site name (optional)"
    )
    city = models.CharField(
        max_length=200,
        help_text="City the project is located in"
    )
    latitude = models.FloatField(
        validators=[MinValueValidator(-90), MaxValueValidator(90)]
    )
    longitude = models.FloatField(
        validators=[MinValueValidator(-180), MaxValueValidator(180)]
    )
    market_sector = models.CharField(
        max_length=50,
        choices=SECTOR_CHOICES,
        default=DEFAULT_SECTOR,
        db_index=True
    )
    building_type = models.CharField(
        max_length=200,
        blank=True,
        null=True,
        help_text="Free-text building type (e.g., 'Visitor Center')"
    )
    description = models.TextField(
        blank=True,
        default='',
        help_text="Long project description"
    )
    mini_description = models.TextField(
        blank=True,
        null=True,
        help_text="Short description, shown when the long one is blank"
    )
    image_urls = models.JSONField(
        default=list,
        blank=True,
        help_text="Ordered list of image URLs or data URIs"
    )
    client = models.CharField(
        max_length=500,
        help_text="Primary client name"
    )
    project_manager = models.CharField(
        max_length=200,
        blank=True,
        default=''
    )
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_ACTIVE,
        db_index=True
    )
    compensation = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=0,
        validators=[MinValueValidator(0)],
        help_text="Fee for the project (admin only)"
    )
    year = models.IntegerField(
        null=True,
        blank=True
    )
    featured = models.BooleanField(default=False)
    recent = models.BooleanField(default=False)

    # Audit fields
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='projects_pr_created_4f0a1c_idx'),
            models.Index(fields=['city'], name='projects_pr_city_9b2e7d_idx'),
        ]
        verbose_name = 'Project'
        verbose_name_plural = 'Projects'

    def __str__(self):
        return f"{self.title} ({self.city})"

    @property
    def coordinates(self):
        return (self.latitude, self.longitude)
