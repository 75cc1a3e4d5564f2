"""Grow the demo dataset with semesters, classes, KRS, grades, payments and attendance.

Every step looks rows up before creating them, so the command can be re-run on
an already seeded database without duplicating anything.
"""
from __future__ import annotations

import datetime
import random

from django.contrib.auth import get_user_model
from django.core.files.base import ContentFile
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from akademik.akun import buat_dosen, buat_mahasiswa
from akademik.models import (
    KRS,
    Akun,
    Dosen,
    KelasMataKuliah,
    KRSDetail,
    Mahasiswa,
    MataKuliah,
    Nilai,
    PaketKRS,
    PaketKRSDetail,
    Presensi,
    PresensiDetail,
    Prodi,
    Ruangan,
    Semester,
)
from akademik.penilaian import generate_khs
from akademik.presensi import buat_presensi
from keuangan.models import Pembayaran

User = get_user_model()

DOSEN = [
    ("0303038803", "Pdt. Samuel Lumbantobing, M.Th.", "TEO", "Asisten Ahli", "dosen3"),
    ("0404049004", "Debora Panjaitan, M.Pd.", "PAK", "Lektor", "dosen4"),
    ("0505058705", "Dr. Paulus Sinaga, M.Si.", "PAK", "Lektor Kepala", "dosen5"),
]

NAMA_MAHASISWA = [
    ("Benyamin Purba", "L"),
    ("Ester Silalahi", "P"),
    ("Daniel Manurung", "L"),
    ("Lidia Situmorang", "P"),
    ("Timotius Siregar", "L"),
    ("Priska Tambunan", "P"),
    ("Yosua Harahap", "L"),
    ("Naomi Simatupang", "P"),
]

MATA_KULIAH = [
    ("PAK101", "Pengantar Perjanjian Lama", 3, 1),
    ("PAK102", "Pengantar Perjanjian Baru", 3, 1),
    ("PAK103", "Bahasa Indonesia", 2, 1),
    ("PAK104", "Psikologi Perkembangan", 2, 1),
    ("PAK105", "Filsafat Pendidikan", 2, 1),
    ("PAK201", "Dogmatika I", 3, 2),
    ("PAK202", "Sejarah Gereja Umum", 3, 2),
    ("PAK203", "Bahasa Yunani I", 2, 2),
    ("PAK204", "Kurikulum PAK", 3, 2),
    ("PAK205", "Etika Kristen", 2, 2),
    ("PAK301", "Hermeneutik", 3, 3),
    ("PAK302", "Homiletika", 2, 3),
    ("PAK303", "Strategi Belajar Mengajar", 3, 3),
    ("PAK304", "Teologi Sistematika", 3, 3),
    ("PAK305", "Misiologi", 2, 3),
]

RUANGAN = [("R101", 40), ("R102", 40), ("R201", 30), ("R202", 30), ("AULA", 120)]

SLOT_JAM = [
    (datetime.time(8, 0), datetime.time(9, 40)),
    (datetime.time(10, 0), datetime.time(11, 40)),
    (datetime.time(13, 0), datetime.time(14, 40)),
]
HARI = [hari for hari, _ in KelasMataKuliah.HARI_CHOICES]
# satu slot per kelas dalam satu semester, sehingga ruangan dan dosen tidak pernah bentrok
SLOT = [(hari, mulai, selesai) for hari in HARI for mulai, selesai in SLOT_JAM]

STATUS_KRS = [KRS.STATUS_DRAFT, KRS.STATUS_SUBMITTED, KRS.STATUS_APPROVED]
STATUS_PEMBAYARAN = [Pembayaran.STATUS_PENDING, Pembayaran.STATUS_APPROVED, Pembayaran.STATUS_REJECTED]
STATUS_PRESENSI = [
    PresensiDetail.STATUS_HADIR,
    PresensiDetail.STATUS_HADIR,
    PresensiDetail.STATUS_HADIR,
    PresensiDetail.STATUS_IZIN,
    PresensiDetail.STATUS_SAKIT,
    PresensiDetail.STATUS_ALPHA,
]

BUKTI_PDF = b"%PDF-1.4\n1 0 obj << /Type /Catalog >> endobj\ntrailer << /Root 1 0 R >>\n%%EOF\n"


class Command(BaseCommand):
    help = "Add semesters, classes, KRS, grades, payments and attendance on top of the base seed"

    def add_arguments(self, parser):
        parser.add_argument("--seed", type=int, default=2024, help="Seed angka acak agar hasil dapat diulang")

    def handle(self, *args, **options):
        self.rng = random.Random(options["seed"])
        self.now = timezone.now()
        with transaction.atomic():
            prodi = self.seed_prodi()
            dosen = self.seed_dosen(prodi)
            mahasiswa = self.seed_mahasiswa(prodi, dosen)
            mata_kuliah = self.seed_mata_kuliah()
            semesters = self.seed_semester()
            ruangan = self.seed_ruangan()
            aktif = semesters[2]
            kelas_aktif = self.seed_kelas(aktif, mata_kuliah, dosen, ruangan)
            self.seed_paket(prodi["PAK"], aktif, kelas_aktif)
            self.seed_riwayat(semesters[:2], mata_kuliah, dosen, ruangan, mahasiswa)
            self.seed_krs(aktif, kelas_aktif, mahasiswa)
            self.seed_pembayaran(aktif, mahasiswa)
            self.seed_presensi(aktif)
        self.stdout.write(self.style.SUCCESS("Seeding inkremental selesai."))

    def seed_prodi(self) -> dict:
        prodi = {}
        for kode, nama in (("PAK", "Pendidikan Agama Kristen"), ("TEO", "Teologi")):
            prodi[kode], _ = Prodi.objects.get_or_create(kode=kode, defaults={"nama": nama})
        return prodi

    def seed_dosen(self, prodi) -> list[Dosen]:
        for nidn, nama, kode_prodi, jafung, username in DOSEN:
            if Dosen.objects.filter(nidn=nidn).exists():
                continue
            buat_dosen(
                {"nidn": nidn, "nama_lengkap": nama, "prodi": prodi[kode_prodi], "jafung": jafung},
                username=username,
            )
            self.stdout.write(self.style.SUCCESS(f"Membuat dosen {username}"))
        return list(Dosen.objects.filter(status=Dosen.STATUS_AKTIF).order_by("nidn"))

    def seed_mahasiswa(self, prodi, dosen) -> list[Mahasiswa]:
        dibuat = 0
        for index, (nama, jenis_kelamin) in enumerate(NAMA_MAHASISWA):
            angkatan = 2023 if index < 4 else 2024
            kode_prodi = "PAK" if index % 2 == 0 else "TEO"
            urut = "01" if kode_prodi == "PAK" else "02"
            nim = f"{angkatan}{urut}{index + 10:04d}"
            if Mahasiswa.objects.filter(nim=nim).exists():
                continue
            buat_mahasiswa(
                {
                    "nim": nim,
                    "nama_lengkap": nama,
                    "jenis_kelamin": jenis_kelamin,
                    "prodi": prodi[kode_prodi],
                    "angkatan": angkatan,
                    "dosen_wali": self.rng.choice(dosen),
                }
            )
            dibuat += 1
        self.stdout.write(self.style.SUCCESS(f"Mahasiswa baru: {dibuat}"))
        return list(Mahasiswa.objects.filter(status=Mahasiswa.STATUS_AKTIF).select_related("dosen_wali__user"))

    def seed_mata_kuliah(self) -> list[MataKuliah]:
        hasil = []
        for kode, nama, sks, semester_ideal in MATA_KULIAH:
            mk, _ = MataKuliah.objects.get_or_create(
                kode_mk=kode, defaults={"nama_mk": nama, "sks": sks, "semester_ideal": semester_ideal}
            )
            hasil.append(mk)
        self.stdout.write(self.style.SUCCESS(f"Mata kuliah tersedia: {len(hasil)}"))
        return hasil

    def _semester(self, tahun, periode, mulai: datetime.date, selesai: datetime.date) -> Semester:
        krs_mulai = timezone.make_aware(datetime.datetime.combine(mulai - datetime.timedelta(days=21), datetime.time(8)))
        semester, _ = Semester.objects.get_or_create(
            tahun_akademik=tahun,
            periode=periode,
            defaults={
                "tanggal_mulai": mulai,
                "tanggal_selesai": selesai,
                "periode_krs_mulai": krs_mulai,
                "periode_krs_selesai": krs_mulai + datetime.timedelta(days=14),
            },
        )
        return semester

    def seed_semester(self) -> list[Semester]:
        semesters = [
            self._semester("2023/2024", Semester.PERIODE_GANJIL, datetime.date(2023, 9, 1), datetime.date(2024, 1, 31)),
            self._semester("2023/2024", Semester.PERIODE_GENAP, datetime.date(2024, 2, 15), datetime.date(2024, 6, 30)),
            self._semester("2024/2025", Semester.PERIODE_GANJIL, datetime.date(2024, 9, 1), datetime.date(2025, 1, 31)),
            self._semester("2024/2025", Semester.PERIODE_GENAP, datetime.date(2025, 2, 15), datetime.date(2025, 6, 30)),
        ]
        aktif = semesters[2]
        aktif.periode_krs_mulai = self.now - datetime.timedelta(days=7)
        aktif.periode_krs_selesai = self.now + datetime.timedelta(days=14)
        aktif.periode_perbaikan_krs_mulai = self.now + datetime.timedelta(days=15)
        aktif.periode_perbaikan_krs_selesai = self.now + datetime.timedelta(days=21)
        aktif.save()
        aktif.aktifkan()
        self.stdout.write(self.style.SUCCESS(f"Semester aktif: {aktif.label} (periode KRS dibuka)"))
        return semesters

    def seed_ruangan(self) -> list[Ruangan]:
        return [
            Ruangan.objects.get_or_create(nama=nama, defaults={"kapasitas": kapasitas})[0]
            for nama, kapasitas in RUANGAN
        ]

    def seed_kelas(self, semester, mata_kuliah, dosen, ruangan) -> list[KelasMataKuliah]:
        hasil = []
        dibuat = 0
        for index, mk in enumerate(mata_kuliah):
            kelas = KelasMataKuliah.objects.filter(mata_kuliah=mk, semester=semester).first()
            if kelas is None:
                hari, mulai, selesai = SLOT[index % len(SLOT)]
                kelas = KelasMataKuliah.objects.create(
                    mata_kuliah=mk,
                    semester=semester,
                    dosen=self.rng.choice(dosen),
                    ruangan=self.rng.choice(ruangan),
                    hari=hari,
                    jam_mulai=mulai,
                    jam_selesai=selesai,
                    kuota_max=self.rng.choice([25, 30, 40]),
                )
                dibuat += 1
            hasil.append(kelas)
        self.stdout.write(self.style.SUCCESS(f"Kelas {semester.label}: {dibuat} baru, {len(hasil)} total"))
        return hasil

    def seed_paket(self, prodi, semester, kelas_list) -> PaketKRS:
        paket, created = PaketKRS.objects.get_or_create(
            nama_paket=f"Paket Semester 1 {prodi.kode} 2024",
            semester=semester,
            defaults={"prodi": prodi, "angkatan": 2024, "semester_paket": 1},
        )
        if created:
            for kelas in kelas_list:
                if kelas.mata_kuliah.semester_ideal == 1:
                    PaketKRSDetail.objects.create(paket=paket, kelas_mk=kelas)
            paket.total_sks = paket.hitung_total_sks()
            paket.save(update_fields=["total_sks"])
            self.stdout.write(self.style.SUCCESS(f"Membuat {paket.nama_paket} ({paket.total_sks} SKS)"))
        return paket

    def _krs(self, mahasiswa, semester, kelas_list, status) -> tuple[KRS, bool]:
        krs, created = KRS.objects.get_or_create(mahasiswa=mahasiswa, semester=semester, defaults={"status": status})
        if not created:
            return krs, False
        KRSDetail.objects.bulk_create([KRSDetail(krs=krs, kelas_mk=kelas) for kelas in kelas_list])
        krs.total_sks = sum(kelas.mata_kuliah.sks for kelas in kelas_list)
        if status != KRS.STATUS_DRAFT:
            krs.tanggal_submit = self.now
        if status == KRS.STATUS_APPROVED:
            krs.tanggal_approval = self.now
            krs.approved_by = mahasiswa.dosen_wali.user if mahasiswa.dosen_wali_id else None
        krs.save()
        return krs, True

    def seed_riwayat(self, semesters, mata_kuliah, dosen, ruangan, mahasiswa):
        """Approved KRS, final grades and KHS for the 2023 cohort in past semesters."""
        angkatan_lama = [mhs for mhs in mahasiswa if mhs.angkatan == 2023]
        for urutan, semester in enumerate(semesters):
            mk_semester = [mk for mk in mata_kuliah if mk.semester_ideal == urutan + 1]
            kelas_list = self.seed_kelas(semester, mk_semester, dosen, ruangan)
            for mhs in angkatan_lama:
                self._krs(mhs, semester, kelas_list, KRS.STATUS_APPROVED)
                for kelas in kelas_list:
                    Nilai.objects.get_or_create(
                        mahasiswa=mhs,
                        kelas_mk=kelas,
                        defaults={
                            "nilai_angka": self.rng.randint(55, 98),
                            "is_finalized": True,
                            "input_by": kelas.dosen.user,
                        },
                    )
            if angkatan_lama:
                generate_khs([mhs.pk for mhs in angkatan_lama], semester)
                self.stdout.write(self.style.SUCCESS(f"KHS {semester.label}: {len(angkatan_lama)} mahasiswa"))

    def seed_krs(self, semester, kelas_list, mahasiswa):
        dibuat = 0
        for index, mhs in enumerate(mahasiswa):
            status = STATUS_KRS[index % len(STATUS_KRS)]
            pilihan = self.rng.sample(kelas_list, k=min(5, len(kelas_list)))
            _, created = self._krs(mhs, semester, pilihan, status)
            dibuat += created
        self.stdout.write(self.style.SUCCESS(f"KRS {semester.label}: {dibuat} baru"))

    def seed_pembayaran(self, semester, mahasiswa):
        verifikator = User.objects.filter(akun__role=Akun.ROLE_KEUANGAN).first()
        dibuat = 0
        for index, mhs in enumerate(mahasiswa):
            if Pembayaran.objects.filter(mahasiswa=mhs, semester=semester, jenis=Pembayaran.JENIS_KRS).exists():
                continue
            status = STATUS_PEMBAYARAN[index % len(STATUS_PEMBAYARAN)]
            pembayaran = Pembayaran(
                mahasiswa=mhs,
                semester=semester,
                jenis=Pembayaran.JENIS_KRS,
                nominal=self.rng.choice([2500000, 3000000, 3500000]),
                status=status,
            )
            if status != Pembayaran.STATUS_PENDING:
                pembayaran.verified_at = self.now
                pembayaran.verified_by = verifikator
                if status == Pembayaran.STATUS_REJECTED:
                    pembayaran.catatan = "Nominal tidak sesuai dengan tagihan"
            pembayaran.bukti.save(f"bukti_{mhs.nim}.pdf", ContentFile(BUKTI_PDF), save=False)
            pembayaran.save()
            dibuat += 1
            if index % 3 == 0:
                bulanan = Pembayaran(
                    mahasiswa=mhs,
                    jenis=Pembayaran.JENIS_KOMITMEN_BULANAN,
                    nominal=500000,
                    bulan_pembayaran=semester.tanggal_mulai.replace(day=1),
                )
                bulanan.bukti.save(f"bulanan_{mhs.nim}.pdf", ContentFile(BUKTI_PDF), save=False)
                bulanan.save()
                dibuat += 1
        self.stdout.write(self.style.SUCCESS(f"Pembayaran baru: {dibuat}"))

    def seed_presensi(self, semester):
        kelas_disetujui = KelasMataKuliah.objects.filter(
            semester=semester, krs_detail__krs__status=KRS.STATUS_APPROVED
        ).select_related("dosen__user").distinct()
        dibuat = 0
        for kelas in kelas_disetujui:
            for pertemuan in range(1, 4):
                if Presensi.objects.filter(kelas_mk=kelas, pertemuan=pertemuan).exists():
                    continue
                tanggal = semester.tanggal_mulai + datetime.timedelta(weeks=pertemuan - 1)
                presensi = buat_presensi(kelas, pertemuan, tanggal, kelas.dosen.user, materi=f"Pertemuan {pertemuan}")
                detail = list(presensi.detail.all())
                for item in detail:
                    item.status = self.rng.choice(STATUS_PRESENSI)
                PresensiDetail.objects.bulk_update(detail, ["status"])
                dibuat += 1
        self.stdout.write(self.style.SUCCESS(f"Sesi presensi baru: {dibuat}"))
