"""Seed the minimum set of accounts and master data needed to log in and explore."""
from __future__ import annotations

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from akademik.akun import buat_dosen, buat_mahasiswa, buat_pengguna
from akademik.models import (
    KHS,
    KRS,
    Akun,
    Dosen,
    KelasMataKuliah,
    Mahasiswa,
    MataKuliah,
    Nilai,
    PaketKRS,
    Presensi,
    Prodi,
    Ruangan,
    Semester,
)
from keuangan.models import Pembayaran

User = get_user_model()

PRODI = [
    ("PAK", "Pendidikan Agama Kristen"),
    ("TEO", "Teologi"),
]

DOSEN = [
    ("0101018001", "Dr. Yohanes Sitorus, M.Th.", "PAK", "Lektor Kepala", "dosen1"),
    ("0202028502", "Maria Simanjuntak, M.Pd.K.", "TEO", "Lektor", "dosen2"),
]

MAHASISWA = [
    ("2024010001", "Andreas Nainggolan", "L", "PAK", 2024, "0101018001"),
    ("2024020001", "Ruth Hutapea", "P", "TEO", 2024, "0202028502"),
]

# urutan hapus mengikuti relasi PROTECT
FLUSH_ORDER = [
    Pembayaran,
    Presensi,
    KHS,
    Nilai,
    KRS,
    PaketKRS,
    KelasMataKuliah,
    Ruangan,
    MataKuliah,
    Semester,
    Mahasiswa,
    Dosen,
    Prodi,
]


class Command(BaseCommand):
    help = "Seed admin, keuangan, two prodi and a pair of dosen and mahasiswa accounts"

    def add_arguments(self, parser):
        parser.add_argument("--flush", action="store_true", help="Hapus seluruh data akademik sebelum seeding")

    def handle(self, *args, **options):
        with transaction.atomic():
            if options["flush"]:
                self.flush()
            self.seed()
        self.stdout.write(self.style.SUCCESS(f"Seeding selesai. Password semua akun: {settings.DEFAULT_INITIAL_PASSWORD}"))

    def flush(self):
        self.stdout.write(self.style.WARNING("Menghapus data akademik..."))
        for model in FLUSH_ORDER:
            jumlah, _ = model.objects.all().delete()
            self.stdout.write(f"  {model._meta.verbose_name_plural}: {jumlah} baris dihapus")
        User.objects.filter(is_superuser=False).delete()

    def seed(self):
        admin_user, created = User.objects.get_or_create(
            username="admin",
            defaults={"first_name": "Administrator", "is_staff": True, "is_superuser": True},
        )
        if created:
            admin_user.set_password(settings.DEFAULT_INITIAL_PASSWORD)
            admin_user.save(update_fields=["password"])
            self.stdout.write(self.style.SUCCESS("Membuat admin"))
        Akun.objects.update_or_create(
            user=admin_user, defaults={"role": Akun.ROLE_ADMIN, "must_change_password": False}
        )

        if not User.objects.filter(username="keuangan").exists():
            buat_pengguna(
                "keuangan", Akun.ROLE_KEUANGAN, settings.DEFAULT_INITIAL_PASSWORD, nama="Bagian Keuangan"
            )
            self.stdout.write(self.style.SUCCESS("Membuat keuangan"))

        prodi = {}
        for kode, nama in PRODI:
            prodi[kode], _ = Prodi.objects.get_or_create(kode=kode, defaults={"nama": nama})

        for nidn, nama, kode_prodi, jafung, username in DOSEN:
            if Dosen.objects.filter(nidn=nidn).exists():
                continue
            buat_dosen(
                {"nidn": nidn, "nama_lengkap": nama, "prodi": prodi[kode_prodi], "jafung": jafung},
                username=username,
            )
            self.stdout.write(self.style.SUCCESS(f"Membuat dosen {username}"))

        for nim, nama, jenis_kelamin, kode_prodi, angkatan, nidn_wali in MAHASISWA:
            if Mahasiswa.objects.filter(nim=nim).exists():
                continue
            buat_mahasiswa(
                {
                    "nim": nim,
                    "nama_lengkap": nama,
                    "jenis_kelamin": jenis_kelamin,
                    "prodi": prodi[kode_prodi],
                    "angkatan": angkatan,
                    "dosen_wali": Dosen.objects.get(nidn=nidn_wali),
                }
            )
            self.stdout.write(self.style.SUCCESS(f"Membuat mahasiswa {nim}"))
