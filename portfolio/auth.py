"""
Admin gate for the map UI.

Logging in sets a flag in the Django session; mutating API endpoints are
wrapped with `admin_required`. This only decides what the UI offers. Records
in the database are protected by Django's own admin permissions.
"""
import json
import logging
from functools import wraps

from django.conf import settings
from django.http import JsonResponse
from django.utils.crypto import constant_time_compare
from django.views.decorators.http import require_http_methods, require_POST

logger = logging.getLogger(__name__)

SESSION_FLAG = 'admin_authenticated'
SESSION_EMAIL = 'admin_email'


def is_admin(request):
    return bool(request.session.get(SESSION_FLAG, False))


def admin_required(view_func):
    """Reject the request with a JSON 403 unless the session is logged in."""
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not is_admin(request):
            return JsonResponse({'success': False, 'error': 'Admin login required'}, status=403)
        return view_func(request, *args, **kwargs)
    return wrapper


def check_credentials(email, password):
    expected_email = settings.PORTFOLIO_ADMIN_EMAIL
    expected_password = settings.PORTFOLIO_ADMIN_PASSWORD
    if not expected_email or not expected_password:
        # Unconfigured gate stays closed
        return False
    return (
        constant_time_compare(email.strip().lower(), expected_email.strip().lower())
        and constant_time_compare(password, expected_password)
    )


@require_POST
def login_view(request):
    """Log in with email and password (JSON body or form fields)."""
    if request.content_type == 'application/json':
        try:
            data = json.loads(request.body or b'{}')
        except json.JSONDecodeError:
            return JsonResponse({'success': False, 'error': 'Invalid JSON'}, status=400)
    else:
        data = request.POST

    email = (data.get('email') or '').strip()
    password = data.get('password') or ''
    if not email or not password:
        return JsonResponse({'success': False, 'error': 'Email and password are required'}, status=400)

    if not check_credentials(email, password):
        logger.warning('Failed admin login for %s', email)
        return JsonResponse({'success': False, 'error': 'Invalid email or password'}, status=403)

    request.session.cycle_key()
    request.session[SESSION_FLAG] = True
    request.session[SESSION_EMAIL] = email
    logger.info('Admin logged in: %s', email)
    return JsonResponse({'success': True, 'is_admin': True, 'email': email})


@require_POST
def logout_view(request):
    request.session.pop(SESSION_FLAG, None)
    request.session.pop(SESSION_EMAIL, None)
    return JsonResponse({'success': True, 'is_admin': False})


@require_http_methods(["GET"])
def status_view(request):
    return JsonResponse({
        'success': True,
        'is_admin': is_admin(request),
        'email': request.session.get(SESSION_EMAIL) if is_admin(request) else None,
    })
