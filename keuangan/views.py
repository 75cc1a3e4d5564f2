"""Payment endpoints for students and the finance office."""
from __future__ import annotations

from django.db.models import Count, Q
from django.http import FileResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone

from akademik.api import ApiView, api_response, paginate, parse_bool, parse_int
from akademik.exceptions import AkademikError
from akademik.exports import excel_response, pdf_response
from akademik.models import Akun, KRS, Mahasiswa, Semester
from akademik.serializers import date_value, decimal_value, serialize_mahasiswa_ringkas, serialize_semester

from . import pembayaran as pembayaran_service
from .exports import pdf_laporan_pembayaran, workbook_pembayaran
from .models import Pembayaran

ADMIN = Akun.ROLE_ADMIN
KEUANGAN = Akun.ROLE_KEUANGAN
MAHASISWA = Akun.ROLE_MAHASISWA


def serialize_pembayaran(pembayaran) -> dict:
    return {
        "id": pembayaran.pk,
        "mahasiswa": serialize_mahasiswa_ringkas(pembayaran.mahasiswa),
        "semester": serialize_semester(pembayaran.semester),
        "jenis": pembayaran.jenis,
        "jenis_label": pembayaran.get_jenis_display(),
        "nominal": decimal_value(pembayaran.nominal),
        "status": pembayaran.status,
        "catatan": pembayaran.catatan,
        "bulan_pembayaran": date_value(pembayaran.bulan_pembayaran),
        "uploaded_at": date_value(pembayaran.uploaded_at),
        "verified_at": date_value(pembayaran.verified_at),
        "verified_by": pembayaran.verified_by.username if pembayaran.verified_by_id else None,
    }


def serialize_statistik_pembayaran(statistik: dict) -> dict:
    return {**statistik, "total_nominal": decimal_value(statistik["total_nominal"])}


def base_queryset():
    return Pembayaran.objects.select_related("mahasiswa", "semester", "verified_by")


class PembayaranListView(ApiView):
    allowed_roles = (ADMIN, KEUANGAN, MAHASISWA)
    write_roles = (MAHASISWA,)

    def get(self, request):
        if self.role == MAHASISWA:
            raise AkademikError("Anda tidak memiliki akses", 403)
        qs = pembayaran_service.filter_pembayaran(base_queryset(), request.GET)
        if parse_bool(request.GET.get("export")):
            return excel_response(workbook_pembayaran(qs), "data_pembayaran.xlsx")
        items, pagination = paginate(request, qs, serialize_pembayaran)
        return api_response(items, pagination=pagination)

    def post(self, request):
        mahasiswa = self.require_mahasiswa()
        pembayaran = pembayaran_service.ajukan_pembayaran(
            mahasiswa,
            request.POST.get("jenis"),
            request.POST.get("nominal"),
            request.FILES.get("bukti"),
            semester_id=request.POST.get("semester_id") or None,
            bulan_pembayaran=request.POST.get("bulan_pembayaran") or None,
        )
        return api_response(serialize_pembayaran(pembayaran), "Bukti pembayaran berhasil diupload", 201)


class RiwayatPembayaranView(ApiView):
    allowed_roles = (MAHASISWA,)

    def get(self, request):
        mahasiswa = self.require_mahasiswa()
        qs = pembayaran_service.filter_pembayaran(base_queryset().filter(mahasiswa=mahasiswa), request.GET)
        items, pagination = paginate(request, qs, serialize_pembayaran)
        return api_response(items, pagination=pagination)


class PembayaranDetailMixin:
    def get_pembayaran(self, pk):
        pembayaran = get_object_or_404(base_queryset(), pk=pk)
        if self.role == MAHASISWA and pembayaran.mahasiswa.user_id != self.request.user.pk:
            raise AkademikError("Anda tidak memiliki akses ke file ini", 403)
        return pembayaran


class PembayaranDetailView(PembayaranDetailMixin, ApiView):
    allowed_roles = (ADMIN, KEUANGAN, MAHASISWA)

    def get(self, request, pk):
        return api_response(serialize_pembayaran(self.get_pembayaran(pk)))


class PembayaranApproveView(PembayaranDetailMixin, ApiView):
    allowed_roles = (ADMIN, KEUANGAN)
    approve = True
    pesan = "Pembayaran berhasil disetujui"

    def post(self, request, pk):
        pembayaran = pembayaran_service.verifikasi(
            self.get_pembayaran(pk), request.user, self.approve, self.get_payload().get("catatan") or ""
        )
        return api_response(serialize_pembayaran(pembayaran), self.pesan)


class PembayaranRejectView(PembayaranApproveView):
    approve = False
    pesan = "Pembayaran berhasil ditolak"


class BuktiPembayaranView(PembayaranDetailMixin, ApiView):
    allowed_roles = (ADMIN, KEUANGAN, MAHASISWA)

    def get(self, request, pk):
        pembayaran = self.get_pembayaran(pk)
        if not pembayaran.bukti or not pembayaran.bukti.storage.exists(pembayaran.bukti.name):
            raise AkademikError("Bukti pembayaran tidak tersedia", 404)
        return FileResponse(pembayaran.bukti.open("rb"))


class StatistikPembayaranView(ApiView):
    allowed_roles = (ADMIN, KEUANGAN)

    def get(self, request):
        statistik = pembayaran_service.statistik(
            semester_id=parse_int(request.GET.get("semester_id"), "Semester ID", required=False),
            jenis=(request.GET.get("jenis") or "").upper() or None,
        )
        return api_response(serialize_statistik_pembayaran(statistik))


class LaporanPembayaranPdfView(ApiView):
    allowed_roles = (ADMIN, KEUANGAN)

    def get(self, request):
        qs = pembayaran_service.filter_pembayaran(base_queryset(), request.GET)
        statistik = pembayaran_service.statistik(
            semester_id=parse_int(request.GET.get("semester_id"), "Semester ID", required=False),
            jenis=(request.GET.get("jenis") or "").upper() or None,
        )
        keterangan = ", ".join(f"{key}={value}" for key, value in request.GET.items() if value) or "Semua"
        return pdf_response(pdf_laporan_pembayaran(qs, statistik, keterangan), "laporan_pembayaran.pdf")


class KeuanganDashboardView(ApiView):
    allowed_roles = (ADMIN, KEUANGAN)

    def get(self, request):
        semester = Semester.aktif()
        # tanpa semester aktif tidak ada periode yang dihitung
        if semester is None:
            statistik = pembayaran_service.statistik_kosong()
        else:
            statistik = pembayaran_service.statistik(semester_id=semester.pk)
        hari_ini = timezone.localdate()
        hari_ini_counts = Pembayaran.objects.aggregate(
            diterima=Count("id", filter=Q(uploaded_at__date=hari_ini)),
            diverifikasi=Count("id", filter=Q(verified_at__date=hari_ini, status=Pembayaran.STATUS_APPROVED)),
            ditolak=Count("id", filter=Q(verified_at__date=hari_ini, status=Pembayaran.STATUS_REJECTED)),
        )
        sudah_bayar = 0
        mahasiswa_aktif = Mahasiswa.objects.filter(status=Mahasiswa.STATUS_AKTIF).count()
        if semester is not None:
            sudah_bayar = (
                Pembayaran.objects.filter(
                    semester=semester, jenis=Pembayaran.JENIS_KRS, status=Pembayaran.STATUS_APPROVED
                )
                .values("mahasiswa")
                .distinct()
                .count()
            )
        terbaru = base_queryset().order_by("-uploaded_at")[:10]
        return api_response(
            {
                "semester_aktif": serialize_semester(semester),
                "statistik": serialize_statistik_pembayaran(statistik),
                "hari_ini": hari_ini_counts,
                "mahasiswa_krs": {
                    "sudah_bayar": sudah_bayar,
                    "belum_bayar": max(mahasiswa_aktif - sudah_bayar, 0),
                    "krs_disetujui": KRS.objects.filter(semester=semester, status=KRS.STATUS_APPROVED).count()
                    if semester
                    else 0,
                },
                "aktivitas_terbaru": [serialize_pembayaran(p) for p in terbaru],
            }
        )
