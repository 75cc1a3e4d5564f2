"""Account provisioning: users with roles, lecturer and student logins, password changes."""
from __future__ import annotations

import logging
import re

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction

from .exceptions import AkademikError
from .forms import DosenForm, MahasiswaForm, pesan_form
from .models import Akun, Dosen, Mahasiswa

logger = logging.getLogger(__name__)

User = get_user_model()

USERNAME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9_-]*$")


def validasi_username(username: str) -> str:
    username = (username or "").strip()
    if not USERNAME_PATTERN.match(username):
        raise AkademikError(
            "Username harus diawali huruf dan hanya boleh mengandung huruf, angka, underscore, atau hyphen"
        )
    return username


def buat_pengguna(
    username: str,
    role: str,
    password: str | None = None,
    *,
    nama: str = "",
    wajib_ganti_password: bool | None = None,
):
    """Create a user plus its Akun; without a password the default one is assigned."""
    if User.objects.filter(username=username).exists():
        raise AkademikError("Username sudah digunakan")
    user = User(username=username, first_name=nama[:150], is_staff=role == Akun.ROLE_ADMIN)
    user.set_password(password or settings.DEFAULT_INITIAL_PASSWORD)
    user.save()
    if wajib_ganti_password is None:
        wajib_ganti_password = password is None and role != Akun.ROLE_ADMIN
    # the post_save signal already cached a default Akun on the instance
    user.akun, _ = Akun.objects.update_or_create(
        user=user,
        defaults={"role": role, "must_change_password": wajib_ganti_password},
    )
    return user


def _pastikan_unik(nim: str | None = None, nidn: str | None = None, nuptk: str | None = None) -> None:
    if nim and Mahasiswa.objects.filter(nim=nim).exists():
        raise AkademikError("NIM sudah digunakan")
    if nidn and Dosen.objects.filter(nidn=nidn).exists():
        raise AkademikError("NIDN sudah digunakan")
    if nuptk and Dosen.objects.filter(nuptk=nuptk).exists():
        raise AkademikError("NUPTK sudah digunakan")


def buat_dosen(data: dict, *, username: str | None = None, password: str | None = None, **kwargs) -> Dosen:
    """Create a lecturer and the login behind it; ``data`` holds Dosen field values."""
    _pastikan_unik(nidn=data.get("nidn"), nuptk=data.get("nuptk"))
    username = validasi_username(username) if username else data["nidn"]
    with transaction.atomic():
        user = buat_pengguna(username, Akun.ROLE_DOSEN, password, nama=data.get("nama_lengkap", ""), **kwargs)
        dosen = Dosen(user=user, **data)
        dosen.full_clean()
        dosen.save()
    logger.info("Dosen %s dibuat dengan username %s", dosen.nidn, username)
    return dosen


def buat_mahasiswa(data: dict, *, password: str | None = None, **kwargs) -> Mahasiswa:
    """Create a student whose username is always the NIM."""
    _pastikan_unik(nim=data.get("nim"))
    with transaction.atomic():
        user = buat_pengguna(data["nim"], Akun.ROLE_MAHASISWA, password, nama=data.get("nama_lengkap", ""), **kwargs)
        mahasiswa = Mahasiswa(user=user, **data)
        mahasiswa.full_clean()
        mahasiswa.save()
    logger.info("Mahasiswa %s dibuat", mahasiswa.nim)
    return mahasiswa


def register(payload: dict):
    """Create an account of any role, following the per-role username rules."""
    role = (payload.get("role") or "").upper()
    if role not in dict(Akun.ROLE_CHOICES):
        raise AkademikError("Role tidak valid")
    username = (payload.get("username") or "").strip() or None
    password = payload.get("password") or None

    if role in (Akun.ROLE_ADMIN, Akun.ROLE_KEUANGAN):
        if not username:
            raise AkademikError("Username wajib untuk role ADMIN atau KEUANGAN")
        return buat_pengguna(validasi_username(username), role, password, nama=payload.get("nama", ""))
    if role == Akun.ROLE_MAHASISWA and username:
        raise AkademikError("Mahasiswa tidak boleh memiliki username")
    profil = payload.get("profil") or {}
    if not isinstance(profil, dict):
        raise AkademikError("Data profil tidak valid")
    if role == Akun.ROLE_MAHASISWA:
        return buat_mahasiswa(bersihkan_profil(MahasiswaForm, profil), password=password).user
    return buat_dosen(bersihkan_profil(DosenForm, profil), username=username, password=password).user


def bersihkan_profil(form_class, profil: dict) -> dict:
    """Validate raw profile values through a model form and return the cleaned fields."""
    nim, nidn, nuptk = profil.get("nim"), profil.get("nidn"), profil.get("nuptk")
    _pastikan_unik(nim=nim, nidn=nidn, nuptk=nuptk)
    form = form_class(data=profil)
    if not form.is_valid():
        raise AkademikError(pesan_form(form))
    return form.cleaned_data


def ganti_password(user, password_lama: str, password_baru: str, konfirmasi: str) -> None:
    if not password_lama or not password_baru:
        raise AkademikError("Password lama dan password baru wajib diisi")
    if password_baru != konfirmasi:
        raise AkademikError("Password baru tidak cocok dengan konfirmasi")
    if not user.check_password(password_lama):
        raise AkademikError("Password lama tidak sesuai")
    if password_lama == password_baru:
        raise AkademikError("Password baru tidak boleh sama dengan password lama")
    if len(password_baru) < 6:
        raise AkademikError("Password baru minimal 6 karakter")
    user.set_password(password_baru)
    user.save(update_fields=["password"])
    Akun.objects.filter(user=user).update(must_change_password=False)
    logger.info("Password pengguna %s diganti", user.username)


def ganti_username(user, username_baru: str) -> None:
    username_baru = validasi_username(username_baru)
    if User.objects.filter(username=username_baru).exclude(pk=user.pk).exists():
        raise AkademikError("Username sudah digunakan")
    user.username = username_baru
    user.save(update_fields=["username"])
