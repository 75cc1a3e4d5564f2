import csv
import datetime
import io

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse
from openpyxl import load_workbook

from akademik import exports
from akademik.models import KelasMKFile, Mahasiswa
from akademik.status import status_badge, status_variant

pytestmark = pytest.mark.django_db


def test_workbook_layout(mahasiswa, mahasiswa_lain):
    wb = exports.workbook_mahasiswa(Mahasiswa.objects.select_related("prodi", "dosen_wali").order_by("nim"))
    ws = wb.active
    assert ws.title == "Data Mahasiswa"
    assert ws["A1"].value == "Data Mahasiswa"
    assert ws["A1"].font.bold
    assert [cell.value for cell in ws[4]] == ["No", "NIM", "Nama", "Prodi", "Angkatan", "Jenis Kelamin", "Dosen Wali", "Status"]
    assert [cell.value for cell in ws[5]][:3] == [1, "2024010001", "Andreas Nainggolan"]
    assert ws["G6"].value == "Maria Simanjuntak"
    assert ws.max_row == 6


def test_excel_response_round_trips(dosen):
    response = exports.excel_response(exports.workbook_dosen([dosen]), "dosen.xlsx")
    assert response["Content-Type"] == exports.XLSX_CONTENT_TYPE
    ws = load_workbook(io.BytesIO(response.content)).active
    assert ws["B5"].value == "0101018001"
    assert ws["C5"].value == "-"


def test_pdf_builder_produces_a_document():
    content = exports.build_pdf("Judul", [("NIM", "2024010001")], ["No", "Nama"], [(1, "A & B <C>")], [("Total", 3)])
    assert content.startswith(b"%PDF")
    assert len(content) > 500


def test_krs_pdf_endpoint(client_for, mahasiswa, semester, kelas_list, make_krs):
    krs = make_krs(mahasiswa, semester, kelas_list)
    response = client_for(mahasiswa.user).get(reverse("krs_pdf", args=[krs.pk]))
    assert response.status_code == 200
    assert response["Content-Disposition"] == "attachment; filename=krs_2024010001.pdf"
    assert response.content.startswith(b"%PDF")


class TestJadwalCsv:
    def read(self, response):
        return list(csv.reader(io.StringIO(response.content.decode())))

    def test_student_grid(self, client_for, mahasiswa, semester, make_kelas, make_krs):
        pagi_senin = make_kelas(hari="Senin")
        pagi_rabu = make_kelas(hari="Rabu")
        siang = make_kelas(hari="Senin", mulai=datetime.time(13, 0), selesai=datetime.time(15, 0), sks=2)
        make_krs(mahasiswa, semester, [pagi_senin, pagi_rabu, siang])

        response = client_for(mahasiswa.user).get(reverse("jadwal_mahasiswa_csv"))
        assert response["Content-Type"] == "text/csv"
        assert response["Content-Disposition"] == "attachment; filename=jadwal_2024010001.csv"
        rows = self.read(response)
        assert rows[0] == ["Jam", "Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu"]
        assert [row[0] for row in rows[1:]] == ["08:00-10:30", "13:00-15:00"]
        assert rows[1][1].startswith(pagi_senin.mata_kuliah.nama_mk)
        assert rows[1][1].endswith(f"@{pagi_senin.ruangan.nama}")
        assert rows[1][2] == ""
        assert "(2 SKS)" in rows[2][1]

    def test_student_without_approved_krs(self, client_for, mahasiswa, semester, kelas_list, make_krs):
        make_krs(mahasiswa, semester, kelas_list, status="SUBMITTED")
        response = client_for(mahasiswa.user).get(reverse("jadwal_mahasiswa_csv"))
        assert response.status_code == 404
        assert response.json()["message"] == "KRS yang disetujui untuk semester ini tidak ditemukan"

    def test_lecturer_grid(self, client_for, dosen, dosen_lain, make_kelas):
        make_kelas(hari="Selasa")
        make_kelas(hari="Selasa", pengampu=dosen_lain)
        rows = self.read(client_for(dosen.user).get(reverse("jadwal_dosen_csv")))
        assert len(rows) == 2
        assert "Yohanes Sitorus" in rows[1][2]
        assert "---" not in rows[1][2]


class TestKelasFile:
    def upload(self, client, kelas, **data):
        data.setdefault("file", SimpleUploadedFile("rps.pdf", b"%PDF-1.4 rps", content_type="application/pdf"))
        return client.post(reverse("kelas_files", args=[kelas.pk]), data)

    def test_lecturer_uploads_and_student_downloads(self, client_for, dosen, mahasiswa, semester, make_kelas, make_krs):
        kelas = make_kelas()
        make_krs(mahasiswa, semester, [kelas])
        response = self.upload(client_for(dosen.user), kelas, tipe="rps")
        assert response.status_code == 201
        berkas = response.json()["data"]
        assert berkas["tipe"] == "RPS"
        assert berkas["nama_file"] == "rps.pdf"

        client = client_for(mahasiswa.user)
        assert [row["id"] for row in client.get(reverse("kelas_files", args=[kelas.pk])).json()["data"]] == [berkas["id"]]
        download = client.get(reverse("kelas_file_download", args=[berkas["id"]]))
        assert download.status_code == 200
        assert b"".join(download.streaming_content) == b"%PDF-1.4 rps"

    def test_single_rps_per_class(self, client_for, dosen, make_kelas):
        kelas = make_kelas()
        client = client_for(dosen.user)
        self.upload(client, kelas, tipe="RPS")
        response = self.upload(client, kelas, tipe="RPS")
        assert response.status_code == 400
        assert response.json()["message"] == "RPS sudah ada untuk kelas ini. Hapus file lama terlebih dahulu."

    def test_material_needs_week(self, client_for, dosen, make_kelas):
        kelas = make_kelas()
        client = client_for(dosen.user)
        response = self.upload(client, kelas, tipe="MATERI")
        assert response.json()["message"] == "Minggu ke wajib diisi untuk MATERI"
        response = self.upload(client, kelas, tipe="MATERI", minggu_ke="3", nama_file="Pertemuan 3")
        assert response.json()["data"]["minggu_ke"] == 3

    def test_only_the_owner_manages_files(self, client_for, dosen, dosen_lain, make_kelas):
        kelas = make_kelas()
        response = self.upload(client_for(dosen_lain.user), kelas, tipe="RPS")
        assert response.status_code == 403
        berkas_id = self.upload(client_for(dosen.user), kelas, tipe="RPS").json()["data"]["id"]

        other = client_for(dosen_lain.user)
        response = other.delete(reverse("kelas_file_detail", args=[berkas_id]))
        assert response.json()["message"] == "Anda tidak memiliki akses untuk menghapus file ini"

        owner = client_for(dosen.user)
        response = owner.put(
            reverse("kelas_file_detail", args=[berkas_id]), {"nama_file": "RPS 2024"}, content_type="application/json"
        )
        assert response.json()["data"]["nama_file"] == "RPS 2024"
        assert owner.delete(reverse("kelas_file_detail", args=[berkas_id])).status_code == 200
        assert not KelasMKFile.objects.exists()

    def test_unenrolled_student_cannot_list(self, client_for, mahasiswa, make_kelas):
        kelas = make_kelas()
        assert client_for(mahasiswa.user).get(reverse("kelas_files", args=[kelas.pk])).status_code == 403


@pytest.mark.parametrize(
    "status, variant",
    [
        ("APPROVED", "success"),
        ("aktif", "success"),
        ("PENDING", "warning"),
        ("DRAFT", "warning"),
        ("REJECTED", "danger"),
        ("NON_AKTIF", "danger"),
        ("SUBMITTED", "info"),
        ("CUTI", "default"),
        (None, "default"),
    ],
)
def test_status_variant(status, variant):
    assert status_variant(status) == variant


def test_status_badge_escapes_label():
    html = status_badge("REJECTED", label="<b>Ditolak</b>")
    assert "#fee2e2" in html
    assert "&lt;b&gt;Ditolak&lt;/b&gt;" in html
    assert "✖" in html
    assert "✖" not in status_badge("REJECTED", show_icon=False)


class TestDashboards:
    def test_admin(self, client_for, admin_user, mahasiswa, semester, kelas_list, make_krs):
        make_krs(mahasiswa, semester, kelas_list, status="SUBMITTED")
        data = client_for(admin_user).get(reverse("dashboard_admin")).json()["data"]
        assert data["mahasiswa"] == {"total": 1, "aktif": 1}
        assert data["krs"]["pending"] == 1
        assert data["semester_aktif"]["id"] == semester.pk
        assert len(data["aktivitas_terbaru"]) == 1

    def test_lecturer(self, client_for, dosen, mahasiswa, semester, kelas_list, make_krs):
        make_krs(mahasiswa, semester, kelas_list, status="SUBMITTED")
        data = client_for(dosen.user).get(reverse("dashboard_dosen")).json()["data"]
        assert data["total_mahasiswa_bimbingan"] == 1
        assert data["kelas_diampu"] == 4
        assert data["krs_menunggu_persetujuan"] == 1

    def test_student(self, client_for, mahasiswa, semester, kelas_list, make_krs):
        make_krs(mahasiswa, semester, kelas_list)
        data = client_for(mahasiswa.user).get(reverse("dashboard_mahasiswa")).json()["data"]
        assert data["nim"] == mahasiswa.nim
        assert data["ipk"] is None
        assert data["sks_lulus"] == 0
        assert data["status_krs"] == "APPROVED"

    def test_roles_are_enforced(self, client_for, mahasiswa):
        assert client_for(mahasiswa.user).get(reverse("dashboard_admin")).status_code == 403
