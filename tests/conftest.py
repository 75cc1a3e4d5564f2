from __future__ import annotations

import datetime

import pytest
from django.test import Client
from django.utils import timezone

from akademik.akun import buat_dosen, buat_mahasiswa, buat_pengguna
from akademik.models import (
    KRS,
    Akun,
    KelasMataKuliah,
    KRSDetail,
    MataKuliah,
    Prodi,
    Ruangan,
    Semester,
)

PASSWORD = "rahasia123"


@pytest.fixture(autouse=True)
def media_root(settings, tmp_path):
    settings.MEDIA_ROOT = tmp_path / "uploads"
    return settings.MEDIA_ROOT


@pytest.fixture
def prodi(db):
    return Prodi.objects.create(kode="PAK", nama="Pendidikan Agama Kristen")


@pytest.fixture
def admin_user(db):
    return buat_pengguna("admin", Akun.ROLE_ADMIN, PASSWORD, nama="Administrator")


@pytest.fixture
def keuangan_user(db):
    return buat_pengguna("keuangan", Akun.ROLE_KEUANGAN, PASSWORD, nama="Bagian Keuangan")


@pytest.fixture
def dosen(prodi):
    return buat_dosen(
        {"nidn": "0101018001", "nama_lengkap": "Yohanes Sitorus", "prodi": prodi},
        username="yohanes",
        password=PASSWORD,
    )


@pytest.fixture
def dosen_lain(prodi):
    return buat_dosen(
        {"nidn": "0202028502", "nama_lengkap": "Maria Simanjuntak", "prodi": prodi},
        username="maria",
        password=PASSWORD,
    )


@pytest.fixture
def mahasiswa(prodi, dosen):
    return buat_mahasiswa(
        {
            "nim": "2024010001",
            "nama_lengkap": "Andreas Nainggolan",
            "prodi": prodi,
            "angkatan": 2024,
            "dosen_wali": dosen,
        },
        password=PASSWORD,
    )


@pytest.fixture
def mahasiswa_lain(prodi, dosen_lain):
    return buat_mahasiswa(
        {
            "nim": "2024010002",
            "nama_lengkap": "Ruth Hutapea",
            "prodi": prodi,
            "angkatan": 2024,
            "dosen_wali": dosen_lain,
        },
        password=PASSWORD,
    )


def buat_semester(tahun="2024/2025", periode=Semester.PERIODE_GANJIL, aktif=True, krs_terbuka=True):
    now = timezone.now()
    if krs_terbuka:
        krs_mulai, krs_selesai = now - datetime.timedelta(days=1), now + datetime.timedelta(days=7)
    else:
        krs_mulai, krs_selesai = now - datetime.timedelta(days=30), now - datetime.timedelta(days=20)
    tahun_awal = int(tahun[:4])
    if periode == Semester.PERIODE_GANJIL:
        mulai = datetime.date(tahun_awal, 9, 1)
    else:
        mulai = datetime.date(tahun_awal + 1, 2, 15)
    return Semester.objects.create(
        tahun_akademik=tahun,
        periode=periode,
        is_active=aktif,
        tanggal_mulai=mulai,
        tanggal_selesai=mulai + datetime.timedelta(days=150),
        periode_krs_mulai=krs_mulai,
        periode_krs_selesai=krs_selesai,
    )


@pytest.fixture
def semester(db):
    return buat_semester()


@pytest.fixture
def make_semester(db):
    return buat_semester


@pytest.fixture
def make_kelas(semester, dosen):
    counter = {"n": 0}

    def factory(
        sks=3,
        hari="Senin",
        mulai=datetime.time(8, 0),
        selesai=datetime.time(10, 30),
        kuota=30,
        pengampu=None,
        semester_kelas=None,
        mata_kuliah=None,
    ):
        counter["n"] += 1
        n = counter["n"]
        mata_kuliah = mata_kuliah or MataKuliah.objects.create(
            kode_mk=f"MK{n:03d}", nama_mk=f"Mata Kuliah {n}", sks=sks, semester_ideal=1
        )
        return KelasMataKuliah.objects.create(
            mata_kuliah=mata_kuliah,
            semester=semester_kelas or semester,
            dosen=pengampu or dosen,
            ruangan=Ruangan.objects.create(nama=f"R{n:03d}"),
            hari=hari,
            jam_mulai=mulai,
            jam_selesai=selesai,
            kuota_max=kuota,
        )

    return factory


@pytest.fixture
def kelas_list(make_kelas):
    """Four non-overlapping 3-SKS classes: exactly the 12 SKS minimum."""
    return [make_kelas(hari=hari) for hari in ("Senin", "Selasa", "Rabu", "Kamis")]


@pytest.fixture
def make_krs():
    def factory(mahasiswa, semester, kelas_list, status=KRS.STATUS_APPROVED):
        krs = KRS.objects.create(
            mahasiswa=mahasiswa,
            semester=semester,
            status=status,
            total_sks=sum(kelas.mata_kuliah.sks for kelas in kelas_list),
        )
        KRSDetail.objects.bulk_create([KRSDetail(krs=krs, kelas_mk=kelas) for kelas in kelas_list])
        return krs

    return factory


@pytest.fixture
def client_for(db):
    def factory(user):
        client = Client()
        client.force_login(user)
        return client

    return factory
