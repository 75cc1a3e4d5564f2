"""Attendance sessions per class meeting and the statistics derived from them."""
from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.db import transaction

from .exceptions import AkademikError
from .models import Mahasiswa, Presensi, PresensiDetail
from .penilaian import cek_pengampu

logger = logging.getLogger(__name__)

STATUS_VALID = {status for status, _ in PresensiDetail.STATUS_CHOICES}


def buat_presensi(kelas, pertemuan, tanggal, user, materi: str = "", catatan: str = "") -> Presensi:
    """Open meeting ``pertemuan`` for ``kelas`` with every enrolled student marked ALPHA."""
    cek_pengampu(kelas, user, "Anda tidak memiliki akses untuk kelas ini")
    maksimal = settings.PRESENSI_MAX_PERTEMUAN
    if not isinstance(pertemuan, int) or not 1 <= pertemuan <= maksimal:
        raise AkademikError(f"Pertemuan harus antara 1 dan {maksimal}")
    if not tanggal:
        raise AkademikError("Tanggal wajib diisi")
    if Presensi.objects.filter(kelas_mk=kelas, pertemuan=pertemuan).exists():
        raise AkademikError(f"Pertemuan {pertemuan} sudah ada untuk kelas ini")

    with transaction.atomic():
        presensi = Presensi.objects.create(
            kelas_mk=kelas,
            pertemuan=pertemuan,
            tanggal=tanggal,
            materi=materi or "",
            catatan=catatan or "",
            created_by=user,
        )
        PresensiDetail.objects.bulk_create(
            [
                PresensiDetail(presensi=presensi, mahasiswa=mahasiswa, status=PresensiDetail.STATUS_ALPHA)
                for mahasiswa in kelas.mahasiswa_terdaftar()
            ]
        )
    logger.info("Presensi pertemuan %s dibuat untuk kelas %s", pertemuan, kelas.pk)
    return presensi


def ubah_presensi_detail(presensi, updates, user, materi=None, catatan=None) -> Presensi:
    cek_pengampu(presensi.kelas_mk, user, "Anda tidak memiliki akses untuk kelas ini")
    if not isinstance(updates, list) or not updates:
        raise AkademikError("Updates array wajib diisi")

    with transaction.atomic():
        for update in updates:
            if not isinstance(update, dict) or not update.get("mahasiswa_id"):
                raise AkademikError("Setiap update harus memiliki mahasiswa_id")
            status = str(update.get("status") or "").upper()
            if status not in STATUS_VALID:
                raise AkademikError(f"Status presensi tidak valid: {update.get('status')}")
            detail = presensi.detail.filter(mahasiswa_id=update["mahasiswa_id"]).first()
            if detail is None:
                mahasiswa = Mahasiswa.objects.filter(pk=update["mahasiswa_id"]).first()
                if mahasiswa is None:
                    raise AkademikError(f"Mahasiswa dengan ID {update['mahasiswa_id']} tidak ditemukan", 404)
                detail = PresensiDetail(presensi=presensi, mahasiswa=mahasiswa)
            detail.status = status
            detail.keterangan = update.get("keterangan") or ""
            detail.save()
        fields = []
        if materi is not None:
            presensi.materi = materi
            fields.append("materi")
        if catatan is not None:
            presensi.catatan = catatan
            fields.append("catatan")
        if fields:
            presensi.save(update_fields=fields)
    return presensi


def hapus_presensi(presensi, user) -> None:
    cek_pengampu(presensi.kelas_mk, user, "Anda tidak memiliki akses untuk kelas ini")
    logger.info("Presensi %s (pertemuan %s) dihapus", presensi.pk, presensi.pertemuan)
    presensi.delete()


def _hitung(statuses) -> dict:
    statuses = list(statuses)
    total = len(statuses)
    hadir = statuses.count(PresensiDetail.STATUS_HADIR)
    persentase = Decimal("0")
    if total:
        persentase = (Decimal(hadir) * 100 / total).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return {
        "total": total,
        "hadir": hadir,
        "tidak_hadir": statuses.count(PresensiDetail.STATUS_TIDAK_HADIR),
        "izin": statuses.count(PresensiDetail.STATUS_IZIN),
        "sakit": statuses.count(PresensiDetail.STATUS_SAKIT),
        "alpha": statuses.count(PresensiDetail.STATUS_ALPHA),
        "persentase": persentase,
    }


def statistik_mahasiswa(mahasiswa, kelas) -> dict:
    statuses = PresensiDetail.objects.filter(mahasiswa=mahasiswa, presensi__kelas_mk=kelas).values_list(
        "status", flat=True
    )
    return _hitung(statuses)


def statistik_kelas(kelas) -> list[dict]:
    per_mahasiswa = {}
    details = (
        PresensiDetail.objects.filter(presensi__kelas_mk=kelas)
        .select_related("mahasiswa")
        .order_by("mahasiswa__nim")
    )
    for detail in details:
        per_mahasiswa.setdefault(detail.mahasiswa, []).append(detail.status)
    return [{"mahasiswa": mahasiswa, **_hitung(statuses)} for mahasiswa, statuses in per_mahasiswa.items()]
