"""Grade entry, finalization and KHS/transcript generation."""
from __future__ import annotations

import logging
from collections import OrderedDict
from decimal import Decimal

from django.db import transaction

from .exceptions import AkademikError
from .grading import can_graduate, hitung_ipk, hitung_ips, nilai_angka_to_huruf, predikat, total_sks
from .models import KHS, KRS, Akun, Mahasiswa, Nilai, Semester, role_of

logger = logging.getLogger(__name__)


def _rows(nilai_qs) -> list[tuple[int, str]]:
    return [(nilai.kelas_mk.mata_kuliah.sks, nilai.nilai_huruf) for nilai in nilai_qs]


def cek_pengampu(kelas, user, pesan: str = "Anda bukan dosen pengampu kelas ini") -> None:
    """Admins pass; a dosen must teach ``kelas``; everyone else is refused."""
    role = role_of(user)
    if role == Akun.ROLE_ADMIN:
        return
    dosen = getattr(user, "dosen", None)
    if role != Akun.ROLE_DOSEN or dosen is None or kelas.dosen_id != dosen.pk:
        raise AkademikError(pesan, 403)


def terdaftar_di_kelas(mahasiswa, kelas) -> bool:
    return KRS.objects.filter(
        mahasiswa=mahasiswa,
        semester_id=kelas.semester_id,
        status=KRS.STATUS_APPROVED,
        detail__kelas_mk=kelas,
    ).exists()


def simpan_nilai_batch(kelas, entries, user) -> list[Nilai]:
    if not isinstance(entries, list) or not entries:
        raise AkademikError("Data nilai harus berupa array dan tidak boleh kosong")
    if Nilai.objects.filter(kelas_mk=kelas, is_finalized=True).exists():
        raise AkademikError("Nilai sudah difinalisasi. Silakan unlock terlebih dahulu untuk mengedit")

    bersih = []
    for entry in entries:
        if not isinstance(entry, dict) or entry.get("mahasiswa_id") in (None, "") or entry.get("nilai_angka") in (None, ""):
            raise AkademikError("Setiap nilai harus memiliki mahasiswa_id dan nilai_angka")
        nilai_angka_to_huruf(entry["nilai_angka"])
        mahasiswa = Mahasiswa.objects.filter(pk=entry["mahasiswa_id"]).first()
        if mahasiswa is None:
            raise AkademikError(f"Mahasiswa dengan ID {entry['mahasiswa_id']} tidak ditemukan", 404)
        if not terdaftar_di_kelas(mahasiswa, kelas):
            raise AkademikError(f"Mahasiswa {mahasiswa.nim} tidak terdaftar di kelas ini")
        bersih.append((mahasiswa, Decimal(str(entry["nilai_angka"]))))

    hasil = []
    with transaction.atomic():
        for mahasiswa, nilai_angka in bersih:
            nilai, _ = Nilai.objects.update_or_create(
                mahasiswa=mahasiswa,
                kelas_mk=kelas,
                defaults={
                    "semester_id": kelas.semester_id,
                    "nilai_angka": nilai_angka,
                    "input_by": user,
                },
            )
            hasil.append(nilai)
    logger.info("%s nilai disimpan untuk kelas %s", len(hasil), kelas.pk)
    return hasil


def finalisasi_nilai(kelas, user) -> int:
    cek_pengampu(kelas, user)
    nilai_qs = Nilai.objects.filter(kelas_mk=kelas)
    jumlah_nilai = nilai_qs.count()
    if jumlah_nilai == 0:
        raise AkademikError("Tidak ada nilai yang dapat difinalisasi")
    jumlah_mahasiswa = kelas.mahasiswa_terdaftar().count()
    if jumlah_nilai < jumlah_mahasiswa:
        raise AkademikError(f"Masih ada {jumlah_mahasiswa - jumlah_nilai} mahasiswa yang belum dinilai")

    with transaction.atomic():
        nilai_qs.update(is_finalized=True)
        mahasiswa_ids = list(nilai_qs.values_list("mahasiswa_id", flat=True))
        generate_khs(mahasiswa_ids, kelas.semester)
    logger.info("Nilai kelas %s difinalisasi oleh %s", kelas.pk, user.username)
    return jumlah_nilai


def unlock_nilai(kelas) -> int:
    jumlah = Nilai.objects.filter(kelas_mk=kelas, is_finalized=True).update(is_finalized=False)
    logger.info("Nilai kelas %s dibuka kembali (%s baris)", kelas.pk, jumlah)
    return jumlah


def _nilai_final(mahasiswa_id, semester_qs):
    return Nilai.objects.filter(
        mahasiswa_id=mahasiswa_id, is_finalized=True, semester__in=semester_qs
    ).select_related("kelas_mk__mata_kuliah")


def generate_khs(mahasiswa_ids, semester) -> list[KHS]:
    """Recompute KHS rows for ``semester`` from finalized grades."""
    if not isinstance(mahasiswa_ids, (list, tuple)) or not mahasiswa_ids:
        raise AkademikError("Mahasiswa IDs harus berupa array dan tidak boleh kosong")
    if semester is None:
        raise AkademikError("Semester ID wajib disediakan")

    hasil = []
    semester_ini = Semester.objects.filter(pk=semester.pk)
    sampai = semester.semester_sampai()
    for mahasiswa_id in dict.fromkeys(mahasiswa_ids):
        rows_semester = _rows(_nilai_final(mahasiswa_id, semester_ini))
        rows_kumulatif = _rows(_nilai_final(mahasiswa_id, sampai))
        khs, _ = KHS.objects.update_or_create(
            mahasiswa_id=mahasiswa_id,
            semester=semester,
            defaults={
                "ips": hitung_ips(rows_semester),
                "ipk": hitung_ipk(rows_kumulatif),
                "total_sks_semester": total_sks(rows_semester),
                "total_sks_kumulatif": total_sks(rows_kumulatif),
            },
        )
        hasil.append(khs)
    logger.info("KHS %s dibuat untuk %s mahasiswa", semester.label, len(hasil))
    return hasil


def nilai_semester(mahasiswa, semester):
    return (
        Nilai.objects.filter(mahasiswa=mahasiswa, semester=semester, is_finalized=True)
        .select_related("kelas_mk__mata_kuliah")
        .order_by("kelas_mk__mata_kuliah__kode_mk")
    )


def transkrip(mahasiswa) -> dict:
    """Profile, chronological KHS, finalized grades per semester and a graduation summary."""
    khs_list = list(
        KHS.objects.filter(mahasiswa=mahasiswa)
        .select_related("semester")
        .order_by("semester__tahun_akademik", "semester__periode")
    )
    per_semester = OrderedDict()
    for khs in khs_list:
        per_semester[khs.semester] = list(nilai_semester(mahasiswa, khs.semester))

    terakhir = khs_list[-1] if khs_list else None
    ipk = terakhir.ipk if terakhir else 0
    sks = terakhir.total_sks_kumulatif if terakhir else 0
    return {
        "mahasiswa": mahasiswa,
        "khs": khs_list,
        "nilai_per_semester": per_semester,
        "ringkasan": {
            "ipk": ipk,
            "total_sks": sks,
            "predikat": predikat(ipk),
            "jumlah_semester": len(khs_list),
            "dapat_lulus": can_graduate(ipk, sks),
        },
    }


def khs_untuk(user):
    qs = KHS.objects.select_related("mahasiswa", "semester")
    role = role_of(user)
    if role == Akun.ROLE_ADMIN:
        return qs
    if role == Akun.ROLE_DOSEN:
        return qs.filter(mahasiswa__dosen_wali__user=user)
    if role == Akun.ROLE_MAHASISWA:
        return qs.filter(mahasiswa__user=user)
    return qs.none()


def cek_akses_mahasiswa(user, mahasiswa) -> None:
    """Students see themselves, lecturers their advisees, admins everyone."""
    role = role_of(user)
    if role == Akun.ROLE_ADMIN:
        return
    if role == Akun.ROLE_MAHASISWA and mahasiswa.user_id == user.pk:
        return
    if role == Akun.ROLE_DOSEN and mahasiswa.dosen_wali_id and mahasiswa.dosen_wali.user_id == user.pk:
        return
    raise AkademikError("Anda tidak memiliki akses ke data mahasiswa ini", 403)
