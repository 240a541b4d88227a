import uuid

import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='Project',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Opaque project identifier', primary_key=True, serialize=False)),
                ('title', models.CharField(help_text='Project title', max_length=500)),
                ('address', models.CharField(blank=True, default='', help_text='Street address or site name (optional)', max_length=500)),
                ('city', models.CharField(help_text='City the project is located in', max_length=200)),
                ('latitude', models.FloatField(validators=[django.core.validators.MinValueValidator(-90), django.core.validators.MaxValueValidator(90)])),
                ('longitude', models.FloatField(validators=[django.core.validators.MinValueValidator(-180), django.core.validators.MaxValueValidator(180)])),
                ('market_sector', models.CharField(choices=[('commercial', 'Commercial'), ('education', 'Education'), ('government', 'Government'), ('manufacturing', 'Manufacturing & Distribution'), ('mixed-use', 'Mixed Use'), ('parks', 'Parks & Recreation'), ('housing', 'Housing'), ('professional', 'Professional Offices'), ('industrial', 'Industrial/Manufacturing'), ('research', 'Research and Development')], db_index=True, default='commercial', max_length=50)),
                ('building_type', models.CharField(blank=True, help_text="Free-text building type (e.g., 'Visitor Center')", max_length=200, null=True)),
                ('description', models.TextField(blank=True, default='', help_text='Long project description')),
                ('mini_description', models.TextField(blank=True, help_text='Short description, shown when the long one is blank', null=True)),
                ('image_urls', models.JSONField(blank=True, default=list, help_text='Ordered list of image URLs or data URIs')),
                ('client', models.CharField(help_text='Primary client name', max_length=500)),
                ('project_manager', models.CharField(blank=True, default='', max_length=200)),
                ('status', models.CharField(choices=[('Active', 'Active'), ('Inactive', 'Inactive'), ('Dormant', 'Dormant')], db_index=True, default='Active', max_length=20)),
                ('compensation', models.DecimalField(decimal_places=2, default=0, help_text='Fee for the project (admin only)', max_digits=14, validators=[django.core.validators.MinValueValidator(0)])),
                ('year', models.IntegerField(blank=True, null=True)),
                ('featured', models.BooleanField(default=False)),
                ('recent', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Project',
                'verbose_name_plural': 'Projects',
                'ordering': ['-created_at'],
            },
        ),
        migrations.AddIndex(
            model_name='project',
            index=models.Index(fields=['-created_at'], name='projects_pr_created_4f0a1c_idx'),
        ),
        migrations.AddIndex(
            model_name='project',
            index=models.Index(fields=['city'], name='projects_pr_city_9b2e7d_idx'),
        ),
    ]
