"""Authentication backend resolving NIM, NIDN, NUPTK, username or user id logins."""
from __future__ import annotations

import re

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend

from .akun import USERNAME_PATTERN
from .exceptions import AkademikError
from .models import Akun, Dosen, Mahasiswa, role_of

User = get_user_model()

DIGITS_10 = re.compile(r"^\d{10}$")
DIGITS_16 = re.compile(r"^\d{16}$")
USER_ID = re.compile(r"^\d{1,9}$")


def resolve_identifier(identifier: str):
    """Find the user an identifier points at, raising AkademikError with the precise reason."""
    identifier = (identifier or "").strip()
    if DIGITS_10.match(identifier):
        mahasiswa = Mahasiswa.objects.select_related("user").filter(nim=identifier).first()
        if mahasiswa:
            return mahasiswa.user
        dosen = Dosen.objects.select_related("user").filter(nidn=identifier).first()
        if dosen:
            return dosen.user
        raise AkademikError("NIM/NIDN atau password salah", 401)
    if DIGITS_16.match(identifier):
        dosen = Dosen.objects.select_related("user").filter(nuptk=identifier).first()
        if dosen is None:
            raise AkademikError("NUPTK atau password salah", 401)
        return dosen.user
    if USERNAME_PATTERN.match(identifier):
        user = User.objects.filter(username=identifier).first()
        if user is None:
            raise AkademikError("Username atau password salah", 401)
        if role_of(user) == Akun.ROLE_MAHASISWA:
            raise AkademikError("Mahasiswa harus login menggunakan NIM", 403)
        return user
    if USER_ID.match(identifier):
        user = User.objects.filter(pk=int(identifier)).first()
        if user is None:
            raise AkademikError("User tidak ditemukan", 401)
        return user
    raise AkademikError("Format identifier tidak valid", 400)


class IdentifierBackend(ModelBackend):
    """Log in with ``identifier`` instead of ``username``.

    Lookup failures raise ``AkademikError`` so the login endpoint can tell the
    caller which identifier type was rejected. Calls without ``identifier``
    return ``None`` and fall through to the next backend (the admin login form).
    """

    def authenticate(self, request, identifier=None, password=None, **kwargs):
        if identifier is None:
            return None
        user = resolve_identifier(identifier)
        if not user.is_active:
            raise AkademikError("Akun Anda telah dinonaktifkan", 403)
        if not password or not user.check_password(password):
            raise AkademikError("Identifier atau password salah", 401)
        return user
