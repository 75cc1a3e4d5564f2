import pytest
from django.urls import reverse

from akademik.models import Dosen, KelasMataKuliah, Mahasiswa, MataKuliah, Prodi, Ruangan, Semester

pytestmark = pytest.mark.django_db

JSON = "application/json"


@pytest.fixture
def admin_client(client_for, admin_user):
    return client_for(admin_user)


class TestProdi:
    def test_create_list_and_search(self, admin_client, prodi):
        response = admin_client.post(reverse("prodi_list"), {"kode": "TEO", "nama": "Teologi"}, content_type=JSON)
        assert response.status_code == 201
        assert response.json()["message"] == "Program Studi berhasil dibuat"
        assert response.json()["data"]["jenjang"] == "S1"

        body = admin_client.get(reverse("prodi_list"), {"search": "teo"}).json()
        assert [row["kode"] for row in body["data"]] == ["TEO"]
        assert body["pagination"] == {"page": 1, "limit": 10, "total": 1, "total_pages": 1}

    def test_duplicate_code_is_rejected(self, admin_client, prodi):
        response = admin_client.post(reverse("prodi_list"), {"kode": "PAK", "nama": "Lagi"}, content_type=JSON)
        assert response.status_code == 400
        assert response.json()["success"] is False
        assert "Kode Prodi" in response.json()["message"]

    def test_partial_update(self, admin_client, prodi):
        response = admin_client.patch(
            reverse("prodi_detail", args=[prodi.pk]), {"nama": "PAK Baru"}, content_type=JSON
        )
        assert response.status_code == 200
        prodi.refresh_from_db()
        assert prodi.nama == "PAK Baru"
        assert prodi.kode == "PAK"

    def test_any_logged_in_user_reads_only_admin_writes(self, client_for, mahasiswa, prodi):
        client = client_for(mahasiswa.user)
        assert client.get(reverse("prodi_list")).status_code == 200
        response = client.post(reverse("prodi_list"), {"kode": "X", "nama": "X"}, content_type=JSON)
        assert response.status_code == 403
        assert response.json()["message"] == "Anda tidak memiliki akses"

    def test_anonymous_is_401(self, client, prodi):
        response = client.get(reverse("prodi_list"))
        assert response.status_code == 401
        assert response.json()["message"] == "Silakan login terlebih dahulu"


class TestDosen:
    def test_create_gives_nidn_login_with_default_password(self, admin_client, prodi, settings):
        response = admin_client.post(
            reverse("dosen_list"),
            {"nidn": "0303039001", "nama_lengkap": "Paulus Tambunan", "prodi": prodi.pk},
            content_type=JSON,
        )
        assert response.status_code == 201
        dosen = Dosen.objects.get(nidn="0303039001")
        assert dosen.user.username == "0303039001"
        assert dosen.user.check_password(settings.DEFAULT_INITIAL_PASSWORD)
        assert dosen.user.akun.must_change_password is True

    def test_duplicate_nidn(self, admin_client, dosen, prodi):
        response = admin_client.post(
            reverse("dosen_list"),
            {"nidn": dosen.nidn, "nama_lengkap": "Kembar", "prodi": prodi.pk},
            content_type=JSON,
        )
        assert response.json()["message"] == "NIDN sudah digunakan"

    def test_delete_blocked_while_advising_active_students(self, admin_client, dosen, mahasiswa):
        response = admin_client.delete(reverse("dosen_detail", args=[dosen.pk]))
        assert response.status_code == 400
        assert response.json()["message"] == "Tidak dapat menghapus dosen. Masih ada 1 mahasiswa bimbingan aktif"

    def test_delete_deactivates(self, admin_client, dosen_lain):
        assert admin_client.delete(reverse("dosen_detail", args=[dosen_lain.pk])).status_code == 200
        dosen_lain.refresh_from_db()
        assert dosen_lain.status == Dosen.STATUS_NON_AKTIF
        assert dosen_lain.user.is_active is False

    def test_lecturer_can_read_but_student_cannot(self, client_for, dosen, mahasiswa):
        assert client_for(dosen.user).get(reverse("dosen_list")).status_code == 200
        assert client_for(mahasiswa.user).get(reverse("dosen_list")).status_code == 403

    def test_excel_export(self, admin_client, dosen):
        response = admin_client.get(reverse("dosen_list"), {"export": "1"})
        assert response["Content-Disposition"] == "attachment; filename=data_dosen.xlsx"


class TestMahasiswa:
    def test_create_uses_nim_as_username(self, admin_client, prodi, dosen):
        response = admin_client.post(
            reverse("mahasiswa_list"),
            {
                "nim": "2024010099",
                "nama_lengkap": "Debora Silalahi",
                "prodi": prodi.pk,
                "angkatan": 2024,
                "dosen_wali": dosen.pk,
                "jenis_kelamin": "P",
            },
            content_type=JSON,
        )
        assert response.status_code == 201, response.json()
        assert Mahasiswa.objects.get(nim="2024010099").user.username == "2024010099"

    def test_filters(self, admin_client, mahasiswa, mahasiswa_lain, dosen):
        rows = admin_client.get(reverse("mahasiswa_list"), {"dosen_wali_id": dosen.pk}).json()["data"]
        assert [row["nim"] for row in rows] == [mahasiswa.nim]
        rows = admin_client.get(reverse("mahasiswa_list"), {"search": "hutapea"}).json()["data"]
        assert [row["nim"] for row in rows] == [mahasiswa_lain.nim]

    def test_delete_is_soft(self, admin_client, mahasiswa):
        admin_client.delete(reverse("mahasiswa_detail", args=[mahasiswa.pk]))
        mahasiswa.refresh_from_db()
        assert mahasiswa.status == Mahasiswa.STATUS_NON_AKTIF
        assert not mahasiswa.user.is_active

    def test_student_history_is_private(self, client_for, mahasiswa, mahasiswa_lain):
        client = client_for(mahasiswa.user)
        assert client.get(reverse("mahasiswa_krs", args=[mahasiswa.pk])).status_code == 200
        assert client.get(reverse("mahasiswa_khs", args=[mahasiswa_lain.pk])).status_code == 403


class TestSemester:
    def test_activate_switches_the_active_semester(self, admin_client, semester, make_semester):
        genap = make_semester("2024/2025", Semester.PERIODE_GENAP, aktif=False)
        response = admin_client.post(reverse("semester_activate", args=[genap.pk]))
        assert response.json()["message"] == "Semester 2024/2025 Genap diaktifkan"
        assert list(Semester.objects.filter(is_active=True)) == [genap]
        assert admin_client.get(reverse("semester_active")).json()["data"]["id"] == genap.pk

    def test_no_active_semester(self, admin_client, db):
        response = admin_client.get(reverse("semester_active"))
        assert response.status_code == 404
        assert response.json()["message"] == "Belum ada semester aktif"

    def test_create_validates_dates(self, admin_client):
        payload = {
            "tahun_akademik": "2025/2026",
            "periode": "GANJIL",
            "tanggal_mulai": "2025-09-01",
            "tanggal_selesai": "2025-08-01",
            "periode_krs_mulai": "2025-08-01T08:00:00",
            "periode_krs_selesai": "2025-08-15T17:00:00",
        }
        response = admin_client.post(reverse("semester_list"), payload, content_type=JSON)
        assert response.status_code == 400
        assert "Tanggal selesai harus setelah tanggal mulai" in response.json()["message"]

        payload["tanggal_selesai"] = "2026-01-31"
        response = admin_client.post(reverse("semester_list"), payload, content_type=JSON)
        assert response.status_code == 201
        assert response.json()["data"]["is_active"] is False

    def test_duplicate_semester(self, admin_client, semester):
        payload = {
            "tahun_akademik": semester.tahun_akademik,
            "periode": semester.periode,
            "tanggal_mulai": "2024-09-01",
            "tanggal_selesai": "2025-01-31",
            "periode_krs_mulai": "2024-08-01T08:00:00",
            "periode_krs_selesai": "2024-08-15T17:00:00",
        }
        response = admin_client.post(reverse("semester_list"), payload, content_type=JSON)
        assert response.json()["message"] == "Semester ini sudah ada"

    def test_delete_blocked_by_classes(self, admin_client, semester, make_kelas):
        make_kelas()
        response = admin_client.delete(reverse("semester_detail", args=[semester.pk]))
        assert response.json()["message"] == "Tidak dapat menghapus semester. Masih ada data yang terkait: 1 kelas"


class TestKelas:
    def payload(self, semester, dosen, mata_kuliah, ruangan, **extra):
        data = {
            "mata_kuliah": mata_kuliah.pk,
            "semester": semester.pk,
            "dosen": dosen.pk,
            "ruangan": ruangan.pk,
            "hari": "Senin",
            "jam_mulai": "08:00",
            "jam_selesai": "10:30",
            "kuota_max": 30,
        }
        data.update(extra)
        return data

    @pytest.fixture
    def mata_kuliah(self, db):
        return MataKuliah.objects.create(kode_mk="PAK101", nama_mk="Pengantar PAK", sks=3, semester_ideal=1)

    @pytest.fixture
    def ruangan(self, db):
        return Ruangan.objects.create(nama="A101")

    def test_create_and_room_conflict(self, admin_client, semester, dosen, dosen_lain, mata_kuliah, ruangan):
        response = admin_client.post(
            reverse("kelas_list"), self.payload(semester, dosen, mata_kuliah, ruangan), content_type=JSON
        )
        assert response.status_code == 201
        assert response.json()["data"]["jumlah_terdaftar"] == 0

        response = admin_client.post(
            reverse("kelas_list"),
            self.payload(semester, dosen_lain, mata_kuliah, ruangan, jam_mulai="10:00", jam_selesai="12:00"),
            content_type=JSON,
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Ruangan sudah digunakan pada waktu yang sama (Pengantar PAK)"

    def test_lecturer_conflict(self, admin_client, semester, dosen, mata_kuliah, ruangan):
        admin_client.post(reverse("kelas_list"), self.payload(semester, dosen, mata_kuliah, ruangan), content_type=JSON)
        lain = Ruangan.objects.create(nama="B202")
        response = admin_client.post(
            reverse("kelas_list"), self.payload(semester, dosen, mata_kuliah, lain), content_type=JSON
        )
        assert response.json()["message"].startswith("Dosen sudah mengajar kelas lain")

    def test_end_before_start(self, admin_client, semester, dosen, mata_kuliah, ruangan):
        response = admin_client.post(
            reverse("kelas_list"),
            self.payload(semester, dosen, mata_kuliah, ruangan, jam_mulai="10:00", jam_selesai="09:00"),
            content_type=JSON,
        )
        assert "Jam selesai harus setelah jam mulai" in response.json()["message"]

    def test_inactive_course_or_room(self, admin_client, semester, dosen, mata_kuliah, ruangan):
        mata_kuliah.is_active = False
        mata_kuliah.save()
        response = admin_client.post(
            reverse("kelas_list"), self.payload(semester, dosen, mata_kuliah, ruangan), content_type=JSON
        )
        assert "Mata kuliah sudah tidak aktif" in response.json()["message"]

    def test_delete_blocked_by_enrolment(self, admin_client, make_kelas, make_krs, mahasiswa, semester):
        kelas = make_kelas()
        make_krs(mahasiswa, semester, [kelas])
        response = admin_client.delete(reverse("kelas_detail", args=[kelas.pk]))
        assert response.json()["message"] == "Tidak dapat menghapus kelas. Masih ada 1 mahasiswa yang terdaftar"
        assert KelasMataKuliah.objects.filter(pk=kelas.pk).exists()

    def test_course_in_active_semester_cannot_be_deleted(self, admin_client, make_kelas):
        kelas = make_kelas()
        response = admin_client.delete(reverse("mata_kuliah_detail", args=[kelas.mata_kuliah_id]))
        assert response.json()["message"] == "Tidak dapat menghapus mata kuliah yang masih digunakan di semester aktif"
        response = admin_client.delete(reverse("ruangan_detail", args=[kelas.ruangan_id]))
        assert response.json()["message"] == "Tidak dapat menghapus ruangan yang masih digunakan di semester aktif"

    def test_unused_course_is_deactivated(self, admin_client, mata_kuliah):
        admin_client.delete(reverse("mata_kuliah_detail", args=[mata_kuliah.pk]))
        mata_kuliah.refresh_from_db()
        assert mata_kuliah.is_active is False

    def test_class_roster(self, client_for, dosen, make_kelas, make_krs, mahasiswa, mahasiswa_lain, semester):
        kelas = make_kelas()
        make_krs(mahasiswa, semester, [kelas])
        make_krs(mahasiswa_lain, semester, [kelas], status="SUBMITTED")
        rows = client_for(dosen.user).get(reverse("kelas_mahasiswa", args=[kelas.pk])).json()["data"]
        assert [row["nim"] for row in rows] == [mahasiswa.nim]


def test_unknown_prodi_is_404(admin_client):
    response = admin_client.get(reverse("prodi_detail", args=[999]))
    assert response.status_code == 404
    assert response.json()["success"] is False
    assert not Prodi.objects.exists()


@pytest.mark.parametrize(
    "url_name, params",
    [
        ("mahasiswa_list", {"angkatan": "abc"}),
        ("dosen_list", {"prodi_id": "satu"}),
        ("kelas_list", {"semester_id": "x"}),
        ("krs_list", {"mahasiswa_id": "x"}),
        ("khs_list", {"semester_id": "x"}),
        ("pembayaran_list", {"semester_id": "x"}),
        ("pembayaran_statistik", {"semester_id": "x"}),
    ],
)
def test_non_numeric_filters_are_rejected(client_for, admin_user, url_name, params):
    response = client_for(admin_user).get(reverse(url_name), params)
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"].endswith("tidak valid")
