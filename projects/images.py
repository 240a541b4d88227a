"""
Project image handling.

Uploaded photos are checked, shrunk to at most 1200px on the long edge and
re-encoded as JPEG. They are stored inline as data URIs, or uploaded to
Cloudinary when CLOUDINARY_CLOUD_NAME is configured.
"""
import base64
import io
import logging

import cloudinary
import cloudinary.uploader
from django.conf import settings
from django.utils.text import slugify
from PIL import Image, UnidentifiedImageError

from .exceptions import ImageValidationError

logger = logging.getLogger(__name__)

VALID_CONTENT_TYPES = ('image/jpeg', 'image/jpg', 'image/png', 'image/webp')
MAX_IMAGE_BYTES = 50 * 1024 * 1024
LARGE_IMAGE_BYTES = 10 * 1024 * 1024
MAX_DIMENSION = 1200
DEFAULT_QUALITY = 80
LARGE_IMAGE_QUALITY = 70


def validate_image_file(uploaded_file):
    """Raise ImageValidationError unless the upload is a JPEG, PNG or WebP under 50MB."""
    content_type = (getattr(uploaded_file, 'content_type', '') or '').lower()
    if content_type not in VALID_CONTENT_TYPES:
        raise ImageValidationError('Please upload only JPEG, PNG, or WebP images.')
    if uploaded_file.size > MAX_IMAGE_BYTES:
        raise ImageValidationError('Image size must be less than 50MB.')


def resize_image(img, max_dimension=MAX_DIMENSION):
    """
    Shrink an image so neither side exceeds max_dimension, keeping aspect ratio.
    Flattens transparency onto white since the result is saved as JPEG.
    """
    if img.mode in ('RGBA', 'P', 'LA'):
        background = Image.new('RGB', img.size, (255, 255, 255))
        if img.mode == 'P':
            img = img.convert('RGBA')
        background.paste(img, mask=img.split()[-1] if img.mode in ('RGBA', 'LA') else None)
        img = background
    elif img.mode != 'RGB':
        img = img.convert('RGB')

    if img.width > max_dimension or img.height > max_dimension:
        img.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)
    return img


def encode_jpeg(img, quality=DEFAULT_QUALITY):
    output = io.BytesIO()
    img.save(output, format='JPEG', quality=quality)
    output.seek(0)
    return output


def to_data_uri(jpeg_bytes):
    return 'data:image/jpeg;base64,' + base64.b64encode(jpeg_bytes).decode('ascii')


def upload_to_cloudinary(image_bytes, title):
    """Upload image to Cloudinary and return its secure URL."""
    public_id = f"projects/{slugify(title) or 'image'}"
    result = cloudinary.uploader.upload(
        image_bytes,
        public_id=public_id,
        overwrite=False,
        unique_filename=True,
        resource_type='image',
    )
    return result['secure_url']


def store_image(uploaded_file, title=''):
    """
    Validate, resize and store an uploaded image.

    Returns:
        URL to put in a project's imageUrls list
    """
    validate_image_file(uploaded_file)

    try:
        img = Image.open(uploaded_file)
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ImageValidationError(f'Could not read image: {e}') from e

    quality = LARGE_IMAGE_QUALITY if uploaded_file.size > LARGE_IMAGE_BYTES else DEFAULT_QUALITY
    jpeg = encode_jpeg(resize_image(img), quality=quality)

    if settings.CLOUDINARY_CLOUD_NAME:
        cloudinary.config(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
        )
        url = upload_to_cloudinary(jpeg, title or getattr(uploaded_file, 'name', ''))
        logger.info('Uploaded image for %r to Cloudinary', title)
        return url

    return to_data_uri(jpeg.getvalue())
