"""Downloadable reports: Excel workbooks, PDF cards and the weekly schedule grid."""
from __future__ import annotations

import csv
import io
from collections import defaultdict

from django.http import HttpResponse
from django.utils import timezone
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .grading import keterangan_huruf, predikat
from .models import KelasMataKuliah

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

HEADER_FILL = PatternFill(start_color="D9E1F2", end_color="D9E1F2", fill_type="solid")
THIN = Side(style="thin", color="000000")
BORDER_THIN = Border(left=THIN, right=THIN, top=THIN, bottom=THIN)


def build_workbook(title: str, headers: list[str], rows) -> Workbook:
    """One sheet: bold title row, filled header row, bordered data, fitted widths."""
    wb = Workbook()
    ws = wb.active
    ws.title = title[:31]

    ws.cell(row=1, column=1, value=title).font = Font(bold=True, size=14)
    ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=max(len(headers), 1))
    ws.cell(row=2, column=1, value=f"Dicetak: {timezone.localtime():%d-%m-%Y %H:%M}").font = Font(italic=True, size=9)

    header_row = 4
    for col, header in enumerate(headers, start=1):
        cell = ws.cell(row=header_row, column=col, value=header)
        cell.font = Font(bold=True)
        cell.fill = HEADER_FILL
        cell.border = BORDER_THIN
        cell.alignment = Alignment(horizontal="center", vertical="center")

    current_row = header_row
    for row in rows:
        current_row += 1
        for col, value in enumerate(row, start=1):
            cell = ws.cell(row=current_row, column=col, value=value)
            cell.border = BORDER_THIN

    for col in range(1, len(headers) + 1):
        column_letter = get_column_letter(col)
        max_length = max(
            len(str(ws.cell(row=row, column=col).value or "")) for row in range(header_row, current_row + 1)
        )
        ws.column_dimensions[column_letter].width = min(max(max_length + 2, 10), 50)
    return wb


def excel_response(wb: Workbook, filename: str) -> HttpResponse:
    response = HttpResponse(content_type=XLSX_CONTENT_TYPE)
    response["Content-Disposition"] = f"attachment; filename={filename}"
    wb.save(response)
    return response


def _styles():
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle("Judul", parent=styles["Title"], fontSize=14, alignment=TA_CENTER)
    small = ParagraphStyle("Kecil", parent=styles["Normal"], fontSize=8, leading=10)
    return styles, title_style, small


def build_pdf(title: str, identitas: list[tuple[str, str]], headers: list[str], rows, ringkasan=None) -> bytes:
    """Render a titled A4 document with an identity block, a gridded table and an optional summary."""
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, rightMargin=30, leftMargin=30, topMargin=30, bottomMargin=30)
    styles, title_style, small = _styles()

    elements = [Paragraph(title, title_style), Spacer(1, 12)]
    if identitas:
        kop = Table([[label, ":", value] for label, value in identitas], colWidths=[110, 10, 360], hAlign="LEFT")
        kop.setStyle(TableStyle([("FONTSIZE", (0, 0), (-1, -1), 9), ("BOTTOMPADDING", (0, 0), (-1, -1), 2)]))
        elements.extend([kop, Spacer(1, 12)])

    data = [headers] + [[Paragraph(str(value), small) for value in row] for row in rows]
    table = Table(data, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("GRID", (0, 0), (-1, -1), 0.5, colors.black),
                ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 8),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ]
        )
    )
    elements.append(table)

    if ringkasan:
        elements.append(Spacer(1, 12))
        for label, value in ringkasan:
            elements.append(Paragraph(f"<b>{label}</b>: {value}", styles["Normal"]))

    elements.append(Spacer(1, 16))
    elements.append(Paragraph(f"Dicetak pada {timezone.localtime():%d-%m-%Y %H:%M}", small))
    doc.build(elements)
    return buffer.getvalue()


def pdf_response(content: bytes, filename: str) -> HttpResponse:
    response = HttpResponse(content, content_type="application/pdf")
    response["Content-Disposition"] = f"attachment; filename={filename}"
    return response


def _identitas_mahasiswa(mahasiswa) -> list[tuple[str, str]]:
    return [
        ("NIM", mahasiswa.nim),
        ("Nama", mahasiswa.nama_lengkap),
        ("Program Studi", mahasiswa.prodi.nama),
        ("Angkatan", str(mahasiswa.angkatan)),
        ("Dosen Wali", mahasiswa.dosen_wali.nama_lengkap if mahasiswa.dosen_wali else "-"),
    ]


# Excel


def workbook_krs(krs_qs) -> Workbook:
    rows = [
        (
            index,
            krs.mahasiswa.nim,
            krs.mahasiswa.nama_lengkap,
            krs.semester.label,
            krs.total_sks,
            krs.get_status_display(),
            f"{timezone.localtime(krs.tanggal_submit):%d-%m-%Y %H:%M}" if krs.tanggal_submit else "-",
            krs.catatan_admin or "-",
        )
        for index, krs in enumerate(krs_qs, start=1)
    ]
    return build_workbook(
        "Daftar KRS",
        ["No", "NIM", "Nama", "Semester", "Total SKS", "Status", "Tanggal Submit", "Catatan"],
        rows,
    )


def workbook_nilai(kelas, nilai_qs) -> Workbook:
    rows = [
        (
            index,
            nilai.mahasiswa.nim,
            nilai.mahasiswa.nama_lengkap,
            float(nilai.nilai_angka),
            nilai.nilai_huruf,
            float(nilai.bobot or 0),
            keterangan_huruf(nilai.nilai_huruf),
            "Final" if nilai.is_finalized else "Draft",
        )
        for index, nilai in enumerate(nilai_qs, start=1)
    ]
    return build_workbook(
        f"Nilai {kelas.mata_kuliah.kode_mk}",
        ["No", "NIM", "Nama", "Nilai Angka", "Nilai Huruf", "Bobot", "Keterangan", "Status"],
        rows,
    )


def workbook_mahasiswa(mahasiswa_qs) -> Workbook:
    rows = [
        (
            index,
            mahasiswa.nim,
            mahasiswa.nama_lengkap,
            mahasiswa.prodi.nama,
            mahasiswa.angkatan,
            mahasiswa.get_jenis_kelamin_display() or "-",
            mahasiswa.dosen_wali.nama_lengkap if mahasiswa.dosen_wali else "-",
            mahasiswa.get_status_display(),
        )
        for index, mahasiswa in enumerate(mahasiswa_qs, start=1)
    ]
    return build_workbook(
        "Data Mahasiswa",
        ["No", "NIM", "Nama", "Prodi", "Angkatan", "Jenis Kelamin", "Dosen Wali", "Status"],
        rows,
    )


def workbook_dosen(dosen_qs) -> Workbook:
    rows = [
        (
            index,
            dosen.nidn,
            dosen.nuptk or "-",
            dosen.nama_lengkap,
            dosen.prodi.nama if dosen.prodi else "-",
            dosen.jafung or "-",
            dosen.get_status_display(),
        )
        for index, dosen in enumerate(dosen_qs, start=1)
    ]
    return build_workbook(
        "Data Dosen",
        ["No", "NIDN", "NUPTK", "Nama", "Prodi", "Jabatan Fungsional", "Status"],
        rows,
    )


# PDF


def pdf_krs(krs) -> bytes:
    rows = [
        (
            index,
            kelas.mata_kuliah.kode_mk,
            kelas.mata_kuliah.nama_mk,
            kelas.mata_kuliah.sks,
            kelas.jadwal_label,
            kelas.ruangan.nama,
            kelas.dosen.nama_lengkap,
        )
        for index, kelas in enumerate(krs.daftar_kelas(), start=1)
    ]
    identitas = _identitas_mahasiswa(krs.mahasiswa) + [
        ("Semester", krs.semester.label),
        ("Status", krs.get_status_display()),
    ]
    return build_pdf(
        "KARTU RENCANA STUDI",
        identitas,
        ["No", "Kode", "Mata Kuliah", "SKS", "Jadwal", "Ruang", "Dosen"],
        rows,
        [("Total SKS", krs.total_sks)],
    )


def _baris_nilai(nilai_list):
    return [
        (
            index,
            nilai.kelas_mk.mata_kuliah.kode_mk,
            nilai.kelas_mk.mata_kuliah.nama_mk,
            nilai.kelas_mk.mata_kuliah.sks,
            nilai.nilai_huruf,
            f"{nilai.bobot:.2f}",
            f"{nilai.kelas_mk.mata_kuliah.sks * nilai.bobot:.2f}",
        )
        for index, nilai in enumerate(nilai_list, start=1)
    ]


HEADER_NILAI = ["No", "Kode", "Mata Kuliah", "SKS", "Huruf", "Bobot", "Mutu"]


def pdf_khs(khs, nilai_list) -> bytes:
    identitas = _identitas_mahasiswa(khs.mahasiswa) + [("Semester", khs.semester.label)]
    ringkasan = [
        ("SKS Semester", khs.total_sks_semester),
        ("IPS", f"{khs.ips:.2f}"),
        ("SKS Kumulatif", khs.total_sks_kumulatif),
        ("IPK", f"{khs.ipk:.2f}"),
    ]
    return build_pdf("KARTU HASIL STUDI", identitas, HEADER_NILAI, _baris_nilai(nilai_list), ringkasan)


def pdf_transkrip(data: dict) -> bytes:
    """``data`` is the dict built by ``penilaian.transkrip``."""
    rows = []
    for semester, nilai_list in data["nilai_per_semester"].items():
        for row in _baris_nilai(nilai_list):
            rows.append((semester.label,) + row[1:])
    ringkasan = data["ringkasan"]
    return build_pdf(
        "TRANSKRIP NILAI",
        _identitas_mahasiswa(data["mahasiswa"]),
        ["Semester"] + HEADER_NILAI[1:],
        rows,
        [
            ("Total SKS", ringkasan["total_sks"]),
            ("IPK", f"{ringkasan['ipk']:.2f}"),
            ("Predikat", predikat(ringkasan["ipk"])),
        ],
    )


# CSV


def jadwal_csv(kelas_list, filename: str) -> HttpResponse:
    """Weekly grid: one row per time slot, one column per day."""
    days = [choice[0] for choice in KelasMataKuliah.HARI_CHOICES]
    slot_matrix = defaultdict(lambda: defaultdict(list))
    for kelas in kelas_list:
        key = (kelas.jam_mulai, kelas.jam_selesai)
        label = (
            f"{kelas.mata_kuliah.nama_mk}\n"
            f"{kelas.mata_kuliah.kode_mk} ({kelas.mata_kuliah.sks} SKS)\n"
            f"{kelas.dosen.nama_lengkap}"
        )
        slot_matrix[key][kelas.hari].append(f"{label}\n@{kelas.ruangan.nama}")

    response = HttpResponse(content_type="text/csv")
    response["Content-Disposition"] = f"attachment; filename={filename}"
    writer = csv.writer(response)
    writer.writerow(["Jam"] + days)
    for slot_range in sorted(slot_matrix.keys()):
        row = [f"{slot_range[0]:%H:%M}-{slot_range[1]:%H:%M}"]
        for day in days:
            row.append("\n---\n".join(slot_matrix[slot_range].get(day, [])))
        writer.writerow(row)
    return response
