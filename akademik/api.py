"""JSON envelope, payload parsing, pagination and role-gated base views for the API."""
from __future__ import annotations

import json

from django.conf import settings
from django.core.paginator import Paginator
from django.http import JsonResponse
from django.utils.dateparse import parse_date
from django.views import View

from .exceptions import AkademikError
from .forms import pesan_form
from .models import role_of

UNSAFE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


def api_response(data=None, message: str = "", status: int = 200, pagination: dict | None = None) -> JsonResponse:
    payload = {"success": True, "message": message, "data": data}
    if pagination is not None:
        payload["pagination"] = pagination
    return JsonResponse(payload, status=status)


def api_error(message: str, status: int = 400) -> JsonResponse:
    return JsonResponse({"success": False, "message": message, "data": None}, status=status)


def parse_payload(request) -> dict:
    """Read a JSON body, or fall back to form-encoded/multipart fields."""
    if request.content_type == "application/json":
        if not request.body:
            return {}
        try:
            payload = json.loads(request.body)
        except ValueError:
            raise AkademikError("Format JSON tidak valid")
        if not isinstance(payload, dict):
            raise AkademikError("Body permintaan harus berupa objek JSON")
        return payload
    return request.POST.dict()


def parse_int(value, label: str, required: bool = True) -> int | None:
    if value in (None, ""):
        if required:
            raise AkademikError(f"{label} wajib diisi")
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise AkademikError(f"{label} tidak valid")


def parse_tanggal(value):
    """Parse a YYYY-MM-DD value; empty input gives None."""
    if value in (None, ""):
        return None
    try:
        tanggal = parse_date(str(value))
    except ValueError:
        tanggal = None
    if tanggal is None:
        raise AkademikError("Format tanggal tidak valid")
    return tanggal


def parse_bool(value) -> bool | None:
    if value in (None, ""):
        return None
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "ya")


def paginate(request, queryset, serializer):
    """Slice a queryset by ``page``/``limit`` query params; returns (items, pagination)."""
    page = parse_int(request.GET.get("page"), "Page", required=False) or 1
    limit = parse_int(request.GET.get("limit"), "Limit", required=False) or settings.API_DEFAULT_PAGE_SIZE
    limit = max(1, min(limit, settings.API_MAX_PAGE_SIZE))
    paginator = Paginator(queryset, limit)
    page_obj = paginator.get_page(page)
    pagination = {
        "page": page_obj.number,
        "limit": limit,
        "total": paginator.count,
        "total_pages": paginator.num_pages if paginator.count else 0,
    }
    return [serializer(obj) for obj in page_obj.object_list], pagination


def validate_form(form_class, data: dict, instance=None, **kwargs):
    """Bind and validate a model form, raising AkademikError with flattened messages."""
    form = form_class(data=data, instance=instance, **kwargs)
    if not form.is_valid():
        raise AkademikError(pesan_form(form))
    return form


class ApiView(View):
    """Base view answering JSON; checks login and role before dispatching.

    ``allowed_roles`` gates every method, ``write_roles`` additionally gates
    POST/PUT/PATCH/DELETE. ``None`` means any authenticated user.
    """

    allowed_roles: tuple[str, ...] | None = None
    write_roles: tuple[str, ...] | None = None
    login_required = True

    def dispatch(self, request, *args, **kwargs):
        if self.login_required and not request.user.is_authenticated:
            return api_error("Silakan login terlebih dahulu", 401)
        self.role = role_of(request.user)
        roles = self.allowed_roles
        if request.method in UNSAFE_METHODS and self.write_roles is not None:
            roles = self.write_roles
        if roles is not None and self.role not in roles:
            return api_error("Anda tidak memiliki akses", 403)
        return super().dispatch(request, *args, **kwargs)

    def http_method_not_allowed(self, request, *args, **kwargs):
        return api_error("Metode tidak diizinkan", 405)

    def get_payload(self) -> dict:
        return parse_payload(self.request)

    @property
    def dosen(self):
        return getattr(self.request.user, "dosen", None)

    @property
    def mahasiswa(self):
        return getattr(self.request.user, "mahasiswa", None)

    def require_dosen(self):
        if self.dosen is None:
            raise AkademikError("Data dosen tidak ditemukan", 404)
        return self.dosen

    def require_mahasiswa(self):
        if self.mahasiswa is None:
            raise AkademikError("Data mahasiswa tidak ditemukan", 404)
        return self.mahasiswa
