"""KRS (study plan) validation rules and the DRAFT -> SUBMITTED -> APPROVED/REJECTED workflow."""
from __future__ import annotations

import logging

from django.conf import settings
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from .api import parse_int
from .exceptions import AkademikError
from .grading import max_sks_for_ips
from .models import KHS, KRS, Akun, KelasMataKuliah, KRSDetail, PaketKRS, PaketKRSDetail, role_of

logger = logging.getLogger(__name__)

STATUS_TERDAFTAR = (KRS.STATUS_SUBMITTED, KRS.STATUS_APPROVED)
STATUS_DAPAT_DIUBAH = (KRS.STATUS_DRAFT, KRS.STATUS_REJECTED)


def cek_periode_krs(semester, waktu=None) -> None:
    """Raise unless ``waktu`` falls inside the KRS window or the revision window."""
    waktu = waktu or timezone.now()
    if semester.dalam_periode_krs(waktu) or semester.dalam_periode_perbaikan(waktu):
        return
    if waktu < semester.periode_krs_mulai:
        raise AkademikError("Periode KRS belum dimulai")
    raise AkademikError("Periode KRS sudah berakhir")


def _bentrok(a: KelasMataKuliah, b: KelasMataKuliah) -> bool:
    return a.hari == b.hari and a.jam_mulai < b.jam_selesai and b.jam_mulai < a.jam_selesai


def cek_bentrok_jadwal(kelas_list) -> list[str]:
    kelas_list = list(kelas_list)
    bentrok = []
    for index, a in enumerate(kelas_list):
        for b in kelas_list[index + 1:]:
            if _bentrok(a, b):
                bentrok.append(
                    f"{a.mata_kuliah.nama_mk} vs {b.mata_kuliah.nama_mk} "
                    f"({a.hari} {a.jam_mulai:%H:%M}-{a.jam_selesai:%H:%M})"
                )
    return bentrok


def hitung_total_sks(kelas_list) -> int:
    return sum(kelas.mata_kuliah.sks for kelas in kelas_list)


def batas_sks(mahasiswa, semester=None) -> int:
    """SKS ceiling from the IPS of the latest KHS before ``semester``."""
    khs = KHS.objects.filter(mahasiswa=mahasiswa)
    if semester is not None:
        khs = khs.filter(semester__in=semester.semester_sebelum())
    terakhir = khs.order_by("-semester__tahun_akademik", "-semester__periode").first()
    if terakhir is None:
        return settings.KRS_DEFAULT_MAX_SKS
    return max_sks_for_ips(terakhir.ips)


def cek_batas_sks(mahasiswa, total: int, semester=None) -> list[str]:
    errors = []
    if total < settings.KRS_MIN_SKS:
        errors.append(f"Total SKS minimal {settings.KRS_MIN_SKS}, saat ini: {total}")
    maksimal = batas_sks(mahasiswa, semester)
    if total > maksimal:
        errors.append(f"Total SKS maksimal {maksimal} (berdasarkan IPS), saat ini: {total}")
    return errors


def jumlah_terdaftar(kelas, exclude_krs=None) -> int:
    qs = KRSDetail.objects.filter(kelas_mk=kelas, krs__status__in=STATUS_TERDAFTAR)
    if exclude_krs is not None:
        qs = qs.exclude(krs=exclude_krs)
    return qs.count()


def cek_kuota(kelas_list, exclude_krs=None) -> list[str]:
    penuh = []
    for kelas in kelas_list:
        terisi = jumlah_terdaftar(kelas, exclude_krs)
        if terisi >= kelas.kuota_max:
            penuh.append(f"Kelas {kelas.mata_kuliah.nama_mk} sudah penuh ({terisi}/{kelas.kuota_max})")
    return penuh


def ambil_kelas(kelas_ids, semester) -> list[KelasMataKuliah]:
    """Load the chosen classes, all of which must belong to ``semester``."""
    if not isinstance(kelas_ids, (list, tuple)) or not kelas_ids:
        raise AkademikError("Daftar kelas tidak boleh kosong")
    try:
        ids = {int(pk) for pk in kelas_ids}
    except (TypeError, ValueError):
        raise AkademikError("Daftar kelas tidak valid")
    kelas_list = list(
        KelasMataKuliah.objects.filter(pk__in=ids, semester=semester).select_related(
            "mata_kuliah", "dosen", "ruangan"
        )
    )
    if len(kelas_list) != len(ids):
        raise AkademikError("Beberapa kelas tidak ditemukan atau bukan dari semester yang dipilih")
    dipilih = {}
    for kelas in kelas_list:
        if kelas.mata_kuliah_id in dipilih:
            raise AkademikError(f"Mata kuliah {kelas.mata_kuliah.nama_mk} dipilih lebih dari satu kali")
        dipilih[kelas.mata_kuliah_id] = kelas
    return kelas_list


def validasi_krs(mahasiswa, semester, kelas_list, *, periode: bool = True, kuota: bool = False, exclude_krs=None):
    """Collect every rule violation into one error; the period check fails fast."""
    if periode:
        cek_periode_krs(semester)
    errors = []
    bentrok = cek_bentrok_jadwal(kelas_list)
    if bentrok:
        errors.append("Jadwal bentrok: " + ", ".join(bentrok))
    errors.extend(cek_batas_sks(mahasiswa, hitung_total_sks(kelas_list), semester))
    if kuota:
        errors.extend(cek_kuota(kelas_list, exclude_krs))
    if errors:
        raise AkademikError("; ".join(errors))


def _ganti_detail(krs, kelas_list) -> None:
    krs.detail.all().delete()
    KRSDetail.objects.bulk_create([KRSDetail(krs=krs, kelas_mk=kelas) for kelas in kelas_list])


def buat_krs(mahasiswa, semester, *, paket=None, kelas_ids=None, actor=None) -> tuple[KRS, list[str]]:
    """Create a DRAFT KRS from a package or a manual class list.

    Returns the KRS plus quota warnings; full classes do not block a draft,
    only its submission.
    """
    if KRS.objects.filter(mahasiswa=mahasiswa, semester=semester).exists():
        raise AkademikError("KRS untuk semester ini sudah dibuat")
    cek_periode = role_of(actor) != Akun.ROLE_ADMIN

    if paket is not None:
        if paket.semester_id != semester.pk:
            raise AkademikError("Paket KRS bukan untuk semester yang dipilih")
        if cek_periode:
            cek_periode_krs(semester)
        kelas_list = paket.daftar_kelas()
        total = paket.total_sks
        is_modified = False
    elif kelas_ids:
        kelas_list = ambil_kelas(kelas_ids, semester)
        validasi_krs(mahasiswa, semester, kelas_list, periode=cek_periode)
        total = hitung_total_sks(kelas_list)
        is_modified = True
    else:
        raise AkademikError("Paket KRS atau daftar kelas harus disediakan")

    peringatan = cek_kuota(kelas_list)
    with transaction.atomic():
        krs = KRS.objects.create(
            mahasiswa=mahasiswa,
            semester=semester,
            paket_krs=paket,
            status=KRS.STATUS_DRAFT,
            total_sks=total,
            is_modified=is_modified,
        )
        _ganti_detail(krs, kelas_list)
    if peringatan:
        logger.warning("KRS %s dibuat dengan kelas penuh: %s", krs.pk, "; ".join(peringatan))
    logger.info("KRS %s dibuat untuk %s (%s SKS)", krs.pk, mahasiswa.nim, total)
    return krs, peringatan


def ubah_krs(krs, kelas_ids, actor=None) -> KRS:
    if krs.status not in STATUS_DAPAT_DIUBAH:
        raise AkademikError("KRS hanya dapat diubah saat status DRAFT atau REJECTED")
    kelas_list = ambil_kelas(kelas_ids, krs.semester)
    is_admin = role_of(actor) == Akun.ROLE_ADMIN
    validasi_krs(krs.mahasiswa, krs.semester, kelas_list, periode=not is_admin)

    with transaction.atomic():
        _ganti_detail(krs, kelas_list)
        krs.total_sks = hitung_total_sks(kelas_list)
        krs.is_modified = True
        if krs.status == KRS.STATUS_REJECTED:
            krs.status = KRS.STATUS_DRAFT
            krs.reset_approval()
        krs.save()
    logger.info("KRS %s diubah (%s SKS)", krs.pk, krs.total_sks)
    return krs


def hapus_krs(krs) -> None:
    if krs.status != KRS.STATUS_DRAFT:
        raise AkademikError("KRS hanya dapat dihapus saat status DRAFT")
    krs.delete()


def submit_krs(krs) -> KRS:
    if krs.status not in STATUS_DAPAT_DIUBAH:
        raise AkademikError("KRS hanya dapat disubmit dari status DRAFT atau REJECTED")
    kelas_list = krs.daftar_kelas()
    if not kelas_list:
        raise AkademikError("KRS belum memiliki mata kuliah")
    validasi_krs(krs.mahasiswa, krs.semester, kelas_list, periode=False, kuota=True, exclude_krs=krs)

    krs.status = KRS.STATUS_SUBMITTED
    krs.tanggal_submit = timezone.now()
    krs.reset_approval()
    krs.save()
    logger.info("KRS %s disubmit oleh %s", krs.pk, krs.mahasiswa.nim)
    return krs


def _cek_dosen_wali(krs, user) -> None:
    if role_of(user) != Akun.ROLE_DOSEN:
        return
    dosen = getattr(user, "dosen", None)
    if dosen is None or krs.mahasiswa.dosen_wali_id != dosen.pk:
        raise AkademikError("Anda bukan dosen wali mahasiswa ini", 403)


def approve_krs(krs, user, catatan: str = "") -> KRS:
    _cek_dosen_wali(krs, user)
    if krs.status != KRS.STATUS_SUBMITTED:
        raise AkademikError("KRS hanya dapat disetujui saat status SUBMITTED")
    krs.status = KRS.STATUS_APPROVED
    krs.approved_by = user
    krs.tanggal_approval = timezone.now()
    krs.catatan_admin = (catatan or "").strip()
    krs.save()
    logger.info("KRS %s disetujui oleh %s", krs.pk, user.username)
    return krs


def reject_krs(krs, user, catatan: str) -> KRS:
    _cek_dosen_wali(krs, user)
    if krs.status != KRS.STATUS_SUBMITTED:
        raise AkademikError("KRS hanya dapat ditolak saat status SUBMITTED")
    catatan = (catatan or "").strip()
    if not catatan:
        raise AkademikError("Catatan penolakan wajib diisi")
    krs.status = KRS.STATUS_REJECTED
    krs.approved_by = user
    krs.tanggal_approval = timezone.now()
    krs.catatan_admin = catatan
    krs.save()
    logger.info("KRS %s ditolak oleh %s", krs.pk, user.username)
    return krs


def krs_untuk(user):
    """KRS rows visible to ``user``: own KRS, advisees' KRS, or all of them."""
    qs = KRS.objects.select_related("mahasiswa", "semester", "approved_by")
    role = role_of(user)
    if role == Akun.ROLE_ADMIN:
        return qs
    if role == Akun.ROLE_DOSEN:
        return qs.filter(mahasiswa__dosen_wali__user=user)
    if role == Akun.ROLE_MAHASISWA:
        return qs.filter(mahasiswa__user=user)
    return qs.none()


SORT_KRS = {
    "terbaru": ["-updated_at"],
    "terlama": ["updated_at"],
    "nim": ["mahasiswa__nim"],
    "nama": ["mahasiswa__nama_lengkap"],
}


def filter_krs(qs, params):
    search = (params.get("search") or "").strip()
    if search:
        qs = qs.filter(Q(mahasiswa__nim__icontains=search) | Q(mahasiswa__nama_lengkap__icontains=search))
    semester_id = parse_int(params.get("semester_id"), "Semester ID", required=False)
    if semester_id:
        qs = qs.filter(semester_id=semester_id)
    mahasiswa_id = parse_int(params.get("mahasiswa_id"), "Mahasiswa ID", required=False)
    if mahasiswa_id:
        qs = qs.filter(mahasiswa_id=mahasiswa_id)
    if params.get("status"):
        qs = qs.filter(status=params["status"].upper())
    return qs.order_by(*SORT_KRS.get(params.get("sort") or "terbaru", SORT_KRS["terbaru"]))


def _cek_total_paket(total: int) -> None:
    if total > settings.PAKET_MAX_SKS:
        raise AkademikError(f"Total SKS melebihi batas maksimal ({settings.PAKET_MAX_SKS} SKS)")


def simpan_paket(paket, kelas_ids=None) -> PaketKRS:
    """Save a package and, when ``kelas_ids`` is given, replace its class list."""
    with transaction.atomic():
        if kelas_ids is not None:
            kelas_list = ambil_kelas(kelas_ids, paket.semester) if kelas_ids else []
            _cek_total_paket(hitung_total_sks(kelas_list))
            paket.save()
            paket.detail.all().delete()
            PaketKRSDetail.objects.bulk_create([PaketKRSDetail(paket=paket, kelas_mk=kelas) for kelas in kelas_list])
        elif paket.pk and paket.detail.exclude(kelas_mk__semester=paket.semester).exists():
            raise AkademikError("Beberapa kelas tidak ditemukan atau bukan dari semester yang dipilih")
        paket.total_sks = paket.hitung_total_sks() if paket.pk else 0
        paket.save()
    return paket


def tambah_kelas_paket(paket, kelas_id) -> PaketKRS:
    kelas = KelasMataKuliah.objects.filter(pk=kelas_id, semester=paket.semester).select_related("mata_kuliah").first()
    if kelas is None:
        raise AkademikError("Beberapa kelas tidak ditemukan atau bukan dari semester yang dipilih")
    if paket.detail.filter(kelas_mk__mata_kuliah=kelas.mata_kuliah).exists():
        raise AkademikError("Mata kuliah sudah ada dalam paket")
    _cek_total_paket(paket.hitung_total_sks() + kelas.mata_kuliah.sks)
    with transaction.atomic():
        PaketKRSDetail.objects.create(paket=paket, kelas_mk=kelas)
        paket.total_sks = paket.hitung_total_sks()
        paket.save(update_fields=["total_sks", "updated_at"])
    return paket


def hapus_kelas_paket(paket, kelas_id) -> PaketKRS:
    deleted, _ = paket.detail.filter(kelas_mk_id=kelas_id).delete()
    if not deleted:
        raise AkademikError("Mata kuliah tidak ditemukan dalam paket", 404)
    paket.total_sks = paket.hitung_total_sks()
    paket.save(update_fields=["total_sks", "updated_at"])
    return paket
