"""
Django settings for the portfolio project.

Values come from the environment, with a local .env file loaded first.
For the full list of Django settings see
https://docs.djangoproject.com/en/5.2/ref/settings/
"""
import json
import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / '.env')


def env_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def env_list(name, default):
    value = os.getenv(name)
    if not value:
        return list(default)
    return [item.strip() for item in value.split(',') if item.strip()]


SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'django-insecure-portfolio-dev-key')

DEBUG = env_bool('DJANGO_DEBUG', True)

ALLOWED_HOSTS = env_list('DJANGO_ALLOWED_HOSTS', ['localhost', '127.0.0.1', 'testserver'])


INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'projects',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'portfolio.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'portfolio.wsgi.application'


# Database
# PostgreSQL in production (DATABASE_ENGINE=postgres), SQLite locally.
if os.getenv('DATABASE_ENGINE', 'sqlite').lower() == 'postgres':
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.postgresql',
            'NAME': os.getenv('POSTGRES_DB', 'portfolio'),
            'USER': os.getenv('POSTGRES_USER', 'postgres'),
            'PASSWORD': os.getenv('POSTGRES_PASSWORD', 'postgres'),
            'HOST': os.getenv('POSTGRES_HOST', 'localhost'),
            'PORT': os.getenv('POSTGRES_PORT', '5432'),
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': BASE_DIR / 'db.sqlite3',
        }
    }


AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator'},
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
    {'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator'},
    {'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator'},
]


LANGUAGE_CODE = 'en-us'

TIME_ZONE = os.getenv('TIME_ZONE', 'America/New_York')

USE_I18N = True

USE_TZ = True


STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# Uploaded images are sent inline as base64, which easily exceeds Django's 2.5 MB default
DATA_UPLOAD_MAX_MEMORY_SIZE = 60 * 1024 * 1024
FILE_UPLOAD_MAX_MEMORY_SIZE = 60 * 1024 * 1024


# Logging
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'standard': {
            'format': '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
            'datefmt': '%Y-%m-%d %H:%M:%S',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'standard',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'projects': {'level': LOG_LEVEL},
        'portfolio': {'level': LOG_LEVEL},
        'urllib3': {'level': 'WARNING'},
    },
}


# Portfolio settings

# Admin gate for the map UI. Not a security boundary: Django admin and the
# database enforce their own permissions.
PORTFOLIO_ADMIN_EMAIL = os.getenv('PORTFOLIO_ADMIN_EMAIL', '')
PORTFOLIO_ADMIN_PASSWORD = os.getenv('PORTFOLIO_ADMIN_PASSWORD', '')

# Geocoding (Nominatim compatible)
PORTFOLIO_GEOCODER_URL = os.getenv('PORTFOLIO_GEOCODER_URL', 'https://nominatim.openstreetmap.org')
PORTFOLIO_GEOCODER_USER_AGENT = os.getenv('PORTFOLIO_GEOCODER_USER_AGENT', 'portfolio-map/1.0')
PORTFOLIO_GEOCODER_TIMEOUT = float(os.getenv('PORTFOLIO_GEOCODER_TIMEOUT', '10'))
# Nominatim's usage policy allows one request per second
PORTFOLIO_GEOCODER_MIN_INTERVAL = float(os.getenv('PORTFOLIO_GEOCODER_MIN_INTERVAL', '1.0'))
# State qualifiers tried in order when a bare city lookup fails
PORTFOLIO_GEOCODER_STATES = env_list('PORTFOLIO_GEOCODER_STATES', ['NY', 'VT', 'MA', 'CT', 'NJ', 'PA'])
# Cities that resolve to the wrong place without extra qualification
PORTFOLIO_CITY_ALIASES = json.loads(os.getenv('PORTFOLIO_CITY_ALIASES', '{}')) or {
    'west milton': 'West Milton, Saratoga County, NY',
    'knolls': 'Knolls Atomic Power Laboratory, Niskayuna, NY',
    'sackets harbor': 'Sackets Harbor, Jefferson County, NY',
    'rome': 'Rome, Oneida County, NY',
    'troy': 'Troy, Rensselaer County, NY',
    'albany': 'Albany, Albany County, NY',
}

# How featured/recent are assigned to imported projects: none, random or rule
PORTFOLIO_IMPORT_FLAG_POLICY = os.getenv('PORTFOLIO_IMPORT_FLAG_POLICY', 'none')
PORTFOLIO_FEATURED_MIN_COMPENSATION = float(os.getenv('PORTFOLIO_FEATURED_MIN_COMPENSATION', '150000'))

# Image storage: inline data URIs unless Cloudinary is configured
CLOUDINARY_CLOUD_NAME = os.getenv('CLOUDINARY_CLOUD_NAME', '')
CLOUDINARY_API_KEY = os.getenv('CLOUDINARY_API_KEY', '')
CLOUDINARY_API_SECRET = os.getenv('CLOUDINARY_API_SECRET', '')
