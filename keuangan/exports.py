"""Payment list workbook and the printable payment report."""
from __future__ import annotations

from django.utils import timezone

from akademik.exports import build_pdf, build_workbook


def _baris(pembayaran_qs):
    for index, pembayaran in enumerate(pembayaran_qs, start=1):
        yield (
            index,
            pembayaran.mahasiswa.nim,
            pembayaran.mahasiswa.nama_lengkap,
            pembayaran.get_jenis_display(),
            pembayaran.semester.label if pembayaran.semester else "-",
            f"{pembayaran.bulan_pembayaran:%m-%Y}" if pembayaran.bulan_pembayaran else "-",
            float(pembayaran.nominal),
            pembayaran.get_status_display(),
            f"{timezone.localtime(pembayaran.uploaded_at):%d-%m-%Y}",
        )


HEADERS = ["No", "NIM", "Nama", "Jenis", "Semester", "Bulan", "Nominal", "Status", "Tanggal Upload"]


def workbook_pembayaran(pembayaran_qs):
    return build_workbook("Data Pembayaran", HEADERS, _baris(pembayaran_qs))


def pdf_laporan_pembayaran(pembayaran_qs, statistik: dict, keterangan: str = "Semua") -> bytes:
    rows = [row[:6] + (f"Rp {row[6]:,.0f}".replace(",", "."),) + row[7:] for row in _baris(pembayaran_qs)]
    ringkasan = [
        ("Total pengajuan", statistik["total"]),
        ("Menunggu verifikasi", statistik["pending"]),
        ("Disetujui", statistik["approved"]),
        ("Ditolak", statistik["rejected"]),
        ("Total diterima", f"Rp {statistik['total_nominal']:,.0f}".replace(",", ".")),
    ]
    return build_pdf("LAPORAN PEMBAYARAN", [("Filter", keterangan)], HEADERS, rows, ringkasan)
