"""Tests for project image validation, resizing and storage."""
import base64
import io

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase, override_settings
from PIL import Image
from unittest import mock

from projects.exceptions import ImageValidationError
from projects.images import resize_image, store_image, validate_image_file


def image_upload(size=(100, 50), mode='RGB', fmt='PNG', content_type='image/png', name='photo.png'):
    buffer = io.BytesIO()
    Image.new(mode, size, color=(200, 10, 10, 128) if mode == 'RGBA' else (200, 10, 10)).save(buffer, format=fmt)
    return SimpleUploadedFile(name, buffer.getvalue(), content_type=content_type)


class ValidateImageTests(SimpleTestCase):

    def test_accepts_supported_types(self):
        validate_image_file(image_upload())

    def test_rejects_other_types(self):
        upload = SimpleUploadedFile('notes.txt', b'hello', content_type='text/plain')
        with self.assertRaises(ImageValidationError):
            validate_image_file(upload)

    def test_rejects_large_files(self):
        upload = mock.Mock(content_type='image/jpeg', size=51 * 1024 * 1024)
        with self.assertRaises(ImageValidationError):
            validate_image_file(upload)


class ResizeImageTests(SimpleTestCase):

    def test_long_edge_is_capped(self):
        img = resize_image(Image.new('RGB', (2400, 1200)))
        self.assertEqual(img.size, (1200, 600))

    def test_small_images_are_not_enlarged(self):
        self.assertEqual(resize_image(Image.new('RGB', (300, 200))).size, (300, 200))

    def test_transparency_is_flattened(self):
        img = resize_image(Image.new('RGBA', (10, 10), (0, 0, 0, 0)))
        self.assertEqual(img.mode, 'RGB')
        self.assertEqual(img.getpixel((0, 0)), (255, 255, 255))


@override_settings(CLOUDINARY_CLOUD_NAME='')
class StoreImageTests(SimpleTestCase):

    def test_data_uri_without_cloudinary(self):
        url = store_image(image_upload(size=(2000, 1000), mode='RGBA'), 'Library')

        self.assertTrue(url.startswith('data:image/jpeg;base64,'))
        stored = Image.open(io.BytesIO(base64.b64decode(url.split(',', 1)[1])))
        self.assertEqual(stored.format, 'JPEG')
        self.assertEqual(stored.size, (1200, 600))

    def test_unreadable_image(self):
        upload = SimpleUploadedFile('broken.png', b'not an image', content_type='image/png')
        with self.assertRaises(ImageValidationError):
            store_image(upload, 'Library')

    @override_settings(CLOUDINARY_CLOUD_NAME='demo', CLOUDINARY_API_KEY='key', CLOUDINARY_API_SECRET='secret')
    @mock.patch('projects.images.cloudinary.uploader.upload')
    def test_uploads_to_cloudinary_when_configured(self, mock_upload):
        mock_upload.return_value = {'secure_url': 'https://res.cloudinary.com/demo/image/upload/library.jpg'}

        url = store_image(image_upload(), 'Main Street Library')

        self.assertEqual(url, 'https://res.cloudinary.com/demo/image/upload/library.jpg')
        self.assertEqual(mock_upload.call_args[1]['public_id'], 'projects/main-street-library')
