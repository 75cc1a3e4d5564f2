import datetime
from decimal import Decimal

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse

from akademik.exceptions import AkademikError
from keuangan import pembayaran as pembayaran_service
from keuangan.models import Pembayaran

pytestmark = pytest.mark.django_db

PDF_BYTES = b"%PDF-1.4\n%bukti\n"


def bukti(nama="bukti.pdf", content_type="application/pdf", isi=PDF_BYTES):
    return SimpleUploadedFile(nama, isi, content_type=content_type)


def ajukan(mahasiswa, jenis=Pembayaran.JENIS_KRS, **kwargs):
    kwargs.setdefault("bukti", bukti())
    return pembayaran_service.ajukan_pembayaran(mahasiswa, jenis, kwargs.pop("nominal", "2500000"), **kwargs)


def test_krs_payment_defaults_to_active_semester(mahasiswa, semester):
    pembayaran = ajukan(mahasiswa)
    assert pembayaran.status == Pembayaran.STATUS_PENDING
    assert pembayaran.semester == semester
    assert pembayaran.nominal == Decimal("2500000")
    assert pembayaran.bukti.name.startswith("bukti-pembayaran/")


def test_per_semester_payment_needs_a_semester(mahasiswa):
    with pytest.raises(AkademikError, match="Semester wajib diisi"):
        ajukan(mahasiswa)


def test_one_off_payment_has_no_semester(mahasiswa):
    assert ajukan(mahasiswa, Pembayaran.JENIS_WISUDA).semester is None


def test_monthly_commitment_is_keyed_by_month(mahasiswa):
    pertama = ajukan(mahasiswa, Pembayaran.JENIS_KOMITMEN_BULANAN, bulan_pembayaran="2024-09")
    assert pertama.bulan_pembayaran == datetime.date(2024, 9, 1)
    ajukan(mahasiswa, Pembayaran.JENIS_KOMITMEN_BULANAN, bulan_pembayaran="2024-10-15")
    with pytest.raises(AkademikError, match="sedang diproses"):
        ajukan(mahasiswa, Pembayaran.JENIS_KOMITMEN_BULANAN, bulan_pembayaran="2024-09-20")
    with pytest.raises(AkademikError, match="Bulan pembayaran wajib diisi"):
        ajukan(mahasiswa, Pembayaran.JENIS_KOMITMEN_BULANAN)
    with pytest.raises(AkademikError, match="YYYY-MM"):
        ajukan(mahasiswa, Pembayaran.JENIS_KOMITMEN_BULANAN, bulan_pembayaran="September")


def test_duplicate_rules_follow_verification(mahasiswa, semester, keuangan_user):
    pertama = ajukan(mahasiswa)
    with pytest.raises(AkademikError, match="Sudah ada pembayaran yang sedang diproses"):
        ajukan(mahasiswa)

    pembayaran_service.verifikasi(pertama, keuangan_user, approve=False, catatan="Bukti buram")
    kedua = ajukan(mahasiswa)
    pembayaran_service.verifikasi(kedua, keuangan_user, approve=True)
    with pytest.raises(AkademikError, match="Pembayaran KRS untuk semester ini sudah disetujui"):
        ajukan(mahasiswa)


def test_other_semester_is_independent(mahasiswa, semester, make_semester):
    ajukan(mahasiswa)
    lain = make_semester("2024/2025", "GENAP", aktif=False)
    assert ajukan(mahasiswa, semester_id=lain.pk).semester == lain


@pytest.mark.parametrize(
    "kwargs, pesan",
    [
        ({"nominal": "0"}, "lebih dari 0"),
        ({"nominal": "-5"}, "lebih dari 0"),
        ({"nominal": "abc"}, "Nominal tidak valid"),
        ({"bukti": None}, "wajib diupload"),
        ({"bukti": bukti("bukti.exe", "application/octet-stream")}, "JPG/PNG"),
        ({"bukti": bukti("bukti.pdf", "text/html")}, "JPG/PNG"),
        ({"semester_id": 999999}, "Semester tidak ditemukan"),
    ],
)
def test_submission_validation(mahasiswa, semester, kwargs, pesan):
    with pytest.raises(AkademikError, match=pesan):
        ajukan(mahasiswa, **kwargs)


def test_unknown_type(mahasiswa):
    with pytest.raises(AkademikError, match="Jenis pembayaran tidak valid"):
        ajukan(mahasiswa, "SPP")


def test_upload_size_limit(mahasiswa, semester, settings):
    settings.MAX_UPLOAD_SIZE = 10
    with pytest.raises(AkademikError, match="Ukuran file maksimal"):
        ajukan(mahasiswa)


def test_verification_is_one_shot(mahasiswa, semester, keuangan_user):
    pembayaran = ajukan(mahasiswa)
    with pytest.raises(AkademikError, match="Catatan penolakan wajib diisi"):
        pembayaran_service.verifikasi(pembayaran, keuangan_user, approve=False, catatan="  ")
    pembayaran_service.verifikasi(pembayaran, keuangan_user, approve=True, catatan="OK")
    assert pembayaran.verified_by == keuangan_user
    assert pembayaran.verified_at is not None
    with pytest.raises(AkademikError, match="sudah diverifikasi"):
        pembayaran_service.verifikasi(pembayaran, keuangan_user, approve=False, catatan="Batal")


def test_statistics(mahasiswa, mahasiswa_lain, semester, keuangan_user):
    disetujui = ajukan(mahasiswa, nominal="1500000")
    pembayaran_service.verifikasi(disetujui, keuangan_user, approve=True)
    ajukan(mahasiswa_lain, nominal="2000000")
    ajukan(mahasiswa, Pembayaran.JENIS_WISUDA, nominal="750000")

    statistik = pembayaran_service.statistik()
    assert statistik["total"] == 3
    assert statistik["pending"] == 2
    assert statistik["approved"] == 1
    assert statistik["rejected"] == 0
    assert statistik["total_nominal"] == Decimal("1500000")

    per_semester = pembayaran_service.statistik(semester_id=semester.pk, jenis=Pembayaran.JENIS_KRS)
    assert per_semester["total"] == 2
    assert pembayaran_service.statistik(jenis=Pembayaran.JENIS_PPL)["total_nominal"] == Decimal("0")


def test_filter_by_search(mahasiswa, mahasiswa_lain, semester):
    ajukan(mahasiswa)
    ajukan(mahasiswa_lain)
    qs = pembayaran_service.filter_pembayaran(Pembayaran.objects.all(), {"search": "ruth", "status": "pending"})
    assert [p.mahasiswa for p in qs] == [mahasiswa_lain]


class TestPembayaranApi:
    def test_student_uploads_and_sees_history(self, client_for, mahasiswa, semester):
        client = client_for(mahasiswa.user)
        response = client.post(
            reverse("pembayaran_list"), {"jenis": "KRS", "nominal": "2500000", "bukti": bukti()}
        )
        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Bukti pembayaran berhasil diupload"
        assert body["data"]["status"] == "PENDING"
        assert body["data"]["nominal"] == 2500000.0

        riwayat = client.get(reverse("pembayaran_riwayat")).json()
        assert riwayat["pagination"]["total"] == 1
        assert client.get(reverse("pembayaran_list")).status_code == 403

    def test_finance_approves_and_rejects(self, client_for, keuangan_user, mahasiswa, mahasiswa_lain, semester):
        satu = ajukan(mahasiswa)
        dua = ajukan(mahasiswa_lain)
        client = client_for(keuangan_user)

        response = client.post(reverse("pembayaran_approve", args=[satu.pk]), {}, content_type="application/json")
        assert response.json()["data"]["status"] == "APPROVED"
        assert response.json()["data"]["verified_by"] == "keuangan"

        response = client.post(reverse("pembayaran_reject", args=[dua.pk]), {}, content_type="application/json")
        assert response.status_code == 400
        assert response.json()["message"] == "Catatan penolakan wajib diisi"
        response = client.post(
            reverse("pembayaran_reject", args=[dua.pk]), {"catatan": "Nominal kurang"}, content_type="application/json"
        )
        assert response.json()["data"]["catatan"] == "Nominal kurang"

        statistik = client.get(reverse("pembayaran_statistik")).json()["data"]
        assert statistik["approved"] == 1
        assert statistik["rejected"] == 1
        assert statistik["total_nominal"] == 2500000.0

    def test_student_cannot_verify(self, client_for, mahasiswa, semester):
        pembayaran = ajukan(mahasiswa)
        response = client_for(mahasiswa.user).post(reverse("pembayaran_approve", args=[pembayaran.pk]))
        assert response.status_code == 403

    def test_receipt_is_private_to_its_owner(self, client_for, mahasiswa, mahasiswa_lain, keuangan_user, semester):
        pembayaran = ajukan(mahasiswa)
        url = reverse("pembayaran_bukti", args=[pembayaran.pk])

        response = client_for(mahasiswa.user).get(url)
        assert response.status_code == 200
        assert b"".join(response.streaming_content) == PDF_BYTES
        assert client_for(keuangan_user).get(url).status_code == 200

        response = client_for(mahasiswa_lain.user).get(url)
        assert response.status_code == 403
        assert response.json()["message"] == "Anda tidak memiliki akses ke file ini"

    def test_list_filters_and_exports(self, client_for, keuangan_user, mahasiswa, mahasiswa_lain, semester):
        ajukan(mahasiswa)
        ajukan(mahasiswa_lain, Pembayaran.JENIS_WISUDA)
        client = client_for(keuangan_user)

        data = client.get(reverse("pembayaran_list"), {"jenis": "wisuda"}).json()["data"]
        assert [row["mahasiswa"]["nim"] for row in data] == ["2024010002"]

        response = client.get(reverse("pembayaran_list"), {"export": "true"})
        assert response["Content-Disposition"] == "attachment; filename=data_pembayaran.xlsx"

        response = client.get(reverse("pembayaran_laporan_pdf"))
        assert response.content.startswith(b"%PDF")

    def test_finance_dashboard(self, client_for, keuangan_user, mahasiswa, semester):
        ajukan(mahasiswa)
        data = client_for(keuangan_user).get(reverse("dashboard_keuangan")).json()["data"]
        assert data["statistik"]["pending"] == 1
        assert data["hari_ini"]["diterima"] == 1
        assert data["mahasiswa_krs"]["belum_bayar"] == 1
        assert len(data["aktivitas_terbaru"]) == 1

    def test_finance_dashboard_without_active_semester(self, client_for, keuangan_user, mahasiswa, semester):
        ajukan(mahasiswa)
        semester.is_active = False
        semester.save()
        data = client_for(keuangan_user).get(reverse("dashboard_keuangan")).json()["data"]
        assert data["semester_aktif"] is None
        assert data["statistik"] == {"total": 0, "pending": 0, "approved": 0, "rejected": 0, "total_nominal": 0.0}
        assert len(data["aktivitas_terbaru"]) == 1
