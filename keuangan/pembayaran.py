"""Payment submission, duplicate rules, verification and statistics."""
from __future__ import annotations

import datetime
import logging
import os
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.db.models import Count, Q, Sum
from django.utils import timezone
from django.utils.dateparse import parse_date

from akademik.api import parse_int
from akademik.exceptions import AkademikError
from akademik.models import Semester

from .models import Pembayaran

logger = logging.getLogger(__name__)

EKSTENSI_BUKTI = {".jpg", ".jpeg", ".png", ".pdf"}
CONTENT_TYPE_BUKTI = {"image/jpeg", "image/png", "application/pdf"}

PESAN_SUDAH_DISETUJUI = {
    Pembayaran.JENIS_KRS: "Pembayaran KRS untuk semester ini sudah disetujui",
    Pembayaran.JENIS_TENGAH_SEMESTER: "Pembayaran tengah semester untuk semester ini sudah disetujui",
    Pembayaran.JENIS_KOMITMEN_BULANAN: "Pembayaran komitmen bulan ini sudah disetujui",
}


def validasi_bukti(bukti) -> None:
    if not bukti:
        raise AkademikError("Bukti pembayaran wajib diupload")
    ekstensi = os.path.splitext(bukti.name or "")[1].lower()
    content_type = getattr(bukti, "content_type", None)
    if ekstensi not in EKSTENSI_BUKTI or (content_type and content_type not in CONTENT_TYPE_BUKTI):
        raise AkademikError("Bukti pembayaran harus berupa gambar (JPG/PNG) atau PDF")
    if bukti.size > settings.MAX_UPLOAD_SIZE:
        batas = settings.MAX_UPLOAD_SIZE // (1024 * 1024)
        raise AkademikError(f"Ukuran file maksimal {batas}MB")


def parse_nominal(nominal) -> Decimal:
    try:
        nilai = Decimal(str(nominal))
    except (InvalidOperation, TypeError, ValueError):
        raise AkademikError("Nominal tidak valid")
    if not nilai.is_finite() or nilai <= 0:
        raise AkademikError("Nominal harus lebih dari 0")
    return nilai


def parse_bulan(bulan) -> datetime.date | None:
    """Accept a date, ``YYYY-MM`` or ``YYYY-MM-DD``; the result is the first of that month."""
    if not bulan:
        return None
    if isinstance(bulan, datetime.date):
        tanggal = bulan
    else:
        teks = str(bulan).strip()
        try:
            tanggal = parse_date(teks if len(teks) > 7 else f"{teks}-01")
        except ValueError:
            tanggal = None
        if tanggal is None:
            raise AkademikError("Format bulan pembayaran tidak valid (YYYY-MM)")
    return tanggal.replace(day=1)


def _duplikat(mahasiswa, jenis, semester, bulan):
    qs = Pembayaran.objects.filter(mahasiswa=mahasiswa, jenis=jenis).exclude(status=Pembayaran.STATUS_REJECTED)
    if jenis == Pembayaran.JENIS_KOMITMEN_BULANAN:
        return qs.filter(bulan_pembayaran=bulan)
    if jenis in Pembayaran.JENIS_PER_SEMESTER:
        return qs.filter(semester=semester)
    return qs


def cek_duplikat(mahasiswa, jenis, semester=None, bulan=None) -> None:
    qs = _duplikat(mahasiswa, jenis, semester, bulan)
    if qs.filter(status=Pembayaran.STATUS_PENDING).exists():
        raise AkademikError("Sudah ada pembayaran yang sedang diproses")
    if qs.filter(status=Pembayaran.STATUS_APPROVED).exists():
        label = dict(Pembayaran.JENIS_CHOICES)[jenis]
        raise AkademikError(PESAN_SUDAH_DISETUJUI.get(jenis, f"Pembayaran {label} sudah disetujui"))


def ajukan_pembayaran(mahasiswa, jenis, nominal, bukti, semester_id=None, bulan_pembayaran=None) -> Pembayaran:
    jenis = (jenis or "").upper()
    if jenis not in dict(Pembayaran.JENIS_CHOICES):
        raise AkademikError("Jenis pembayaran tidak valid")
    nominal = parse_nominal(nominal)
    validasi_bukti(bukti)

    semester = None
    if semester_id:
        semester = Semester.objects.filter(pk=semester_id).first()
        if semester is None:
            raise AkademikError("Semester tidak ditemukan", 404)
    if jenis in Pembayaran.JENIS_PER_SEMESTER:
        semester = semester or Semester.aktif()
        if semester is None:
            raise AkademikError("Semester wajib diisi untuk jenis pembayaran ini")

    bulan = parse_bulan(bulan_pembayaran)
    if jenis == Pembayaran.JENIS_KOMITMEN_BULANAN and bulan is None:
        raise AkademikError("Bulan pembayaran wajib diisi untuk komitmen bulanan")

    cek_duplikat(mahasiswa, jenis, semester, bulan)
    pembayaran = Pembayaran.objects.create(
        mahasiswa=mahasiswa,
        semester=semester,
        jenis=jenis,
        nominal=nominal,
        bukti=bukti,
        bulan_pembayaran=bulan,
    )
    logger.info("Pembayaran %s (%s) diajukan oleh %s", pembayaran.pk, jenis, mahasiswa.nim)
    return pembayaran


def verifikasi(pembayaran, user, approve: bool, catatan: str = "") -> Pembayaran:
    if pembayaran.status != Pembayaran.STATUS_PENDING:
        raise AkademikError("Pembayaran sudah diverifikasi sebelumnya")
    catatan = (catatan or "").strip()
    if not approve and not catatan:
        raise AkademikError("Catatan penolakan wajib diisi")
    pembayaran.status = Pembayaran.STATUS_APPROVED if approve else Pembayaran.STATUS_REJECTED
    pembayaran.catatan = catatan
    pembayaran.verified_at = timezone.now()
    pembayaran.verified_by = user
    pembayaran.save()
    logger.info("Pembayaran %s diverifikasi %s oleh %s", pembayaran.pk, pembayaran.status, user.username)
    return pembayaran


def filter_pembayaran(qs, params):
    if params.get("status"):
        qs = qs.filter(status=params["status"].upper())
    if params.get("jenis"):
        qs = qs.filter(jenis=params["jenis"].upper())
    semester_id = parse_int(params.get("semester_id"), "Semester ID", required=False)
    if semester_id:
        qs = qs.filter(semester_id=semester_id)
    search = (params.get("search") or "").strip()
    if search:
        qs = qs.filter(Q(mahasiswa__nim__icontains=search) | Q(mahasiswa__nama_lengkap__icontains=search))
    return qs


def statistik_kosong() -> dict:
    return {"total": 0, "pending": 0, "approved": 0, "rejected": 0, "total_nominal": Decimal("0")}


def statistik(semester_id=None, jenis=None) -> dict:
    qs = Pembayaran.objects.all()
    if semester_id:
        qs = qs.filter(semester_id=semester_id)
    if jenis:
        qs = qs.filter(jenis=jenis)
    hasil = qs.aggregate(
        total=Count("id"),
        pending=Count("id", filter=Q(status=Pembayaran.STATUS_PENDING)),
        approved=Count("id", filter=Q(status=Pembayaran.STATUS_APPROVED)),
        rejected=Count("id", filter=Q(status=Pembayaran.STATUS_REJECTED)),
        total_nominal=Sum("nominal", filter=Q(status=Pembayaran.STATUS_APPROVED)),
    )
    hasil["total_nominal"] = hasil["total_nominal"] or Decimal("0")
    return hasil
