"""Middleware enforcing the first-login password change and shaping API errors as JSON."""
from __future__ import annotations

import logging

from django.core.exceptions import ObjectDoesNotExist, PermissionDenied, ValidationError
from django.db import IntegrityError
from django.http import Http404, JsonResponse
from django.urls import Resolver404, resolve

from akademik.exceptions import AkademikError
from akademik.models import Akun

logger = logging.getLogger(__name__)

API_PREFIX = "/api/"


def error_payload(message: str, status: int) -> JsonResponse:
    return JsonResponse({"success": False, "message": message, "data": None}, status=status)


class ForcePasswordChangeMiddleware:
    """Block API calls from accounts still using the default password."""

    allowed_url_names = {
        "auth_change_password",
        "auth_me",
        "auth_logout",
        "auth_csrf",
    }

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if request.user.is_authenticated and request.path_info.startswith(API_PREFIX):
            must_change = Akun.objects.filter(user=request.user, must_change_password=True).exists()
            if must_change and not self._is_allowed_path(request):
                return error_payload("Silakan ganti password default terlebih dahulu", 403)
        return self.get_response(request)

    def _is_allowed_path(self, request) -> bool:
        try:
            resolver_match = resolve(request.path_info)
        except Resolver404:
            return False
        return resolver_match.url_name in self.allowed_url_names


class ApiErrorMiddleware:
    """Answer exceptions raised under /api/ with the JSON envelope."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        return self.get_response(request)

    def process_exception(self, request, exception):
        if not request.path_info.startswith(API_PREFIX):
            return None

        if isinstance(exception, AkademikError):
            logger.warning("%s %s ditolak: %s", request.method, request.path_info, exception.message)
            return error_payload(exception.message, exception.status_code)
        if isinstance(exception, ValidationError):
            message = "; ".join(exception.messages)
            logger.warning("%s %s tidak valid: %s", request.method, request.path_info, message)
            return error_payload(message, 400)
        if isinstance(exception, (ObjectDoesNotExist, Http404)):
            return error_payload("Data tidak ditemukan", 404)
        if isinstance(exception, PermissionDenied):
            return error_payload(str(exception) or "Anda tidak memiliki akses", 403)
        if isinstance(exception, IntegrityError):
            logger.warning("Integrity error pada %s: %s", request.path_info, exception)
            return error_payload("Data sudah digunakan atau masih direferensikan", 400)

        logger.exception("Kesalahan tak terduga pada %s %s", request.method, request.path_info)
        return None
