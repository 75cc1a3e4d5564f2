from decimal import Decimal

import pytest
from django.urls import reverse

from akademik import penilaian
from akademik.exceptions import AkademikError
from akademik.models import KHS, KRS, Nilai, Semester

pytestmark = pytest.mark.django_db


@pytest.fixture
def kelas(make_kelas):
    return make_kelas()


@pytest.fixture
def terdaftar(mahasiswa, mahasiswa_lain, semester, kelas, make_krs):
    make_krs(mahasiswa, semester, [kelas])
    make_krs(mahasiswa_lain, semester, [kelas])
    return [mahasiswa, mahasiswa_lain]


def test_grade_letter_and_weight_are_derived_on_save(mahasiswa, semester, kelas):
    nilai = Nilai.objects.create(mahasiswa=mahasiswa, kelas_mk=kelas, nilai_angka=Decimal("78.50"))
    assert nilai.nilai_huruf == "B"
    assert nilai.bobot == Decimal("3.00")
    assert nilai.semester == semester


def test_batch_save_creates_then_updates(terdaftar, kelas, dosen):
    mahasiswa, mahasiswa_lain = terdaftar
    hasil = penilaian.simpan_nilai_batch(
        kelas,
        [{"mahasiswa_id": mahasiswa.pk, "nilai_angka": 92}, {"mahasiswa_id": mahasiswa_lain.pk, "nilai_angka": "55.5"}],
        dosen.user,
    )
    assert [n.nilai_huruf for n in hasil] == ["A", "CD"]

    penilaian.simpan_nilai_batch(kelas, [{"mahasiswa_id": mahasiswa.pk, "nilai_angka": 70}], dosen.user)
    nilai = Nilai.objects.get(mahasiswa=mahasiswa, kelas_mk=kelas)
    assert nilai.nilai_huruf == "BC"
    assert nilai.input_by == dosen.user
    assert Nilai.objects.filter(kelas_mk=kelas).count() == 2


@pytest.mark.parametrize(
    "entries, pesan",
    [
        ([], "tidak boleh kosong"),
        ("bukan list", "tidak boleh kosong"),
        ([{"mahasiswa_id": 1}], "mahasiswa_id dan nilai_angka"),
        ([{"nilai_angka": 80}], "mahasiswa_id dan nilai_angka"),
    ],
)
def test_batch_rejects_malformed_entries(kelas, dosen, entries, pesan):
    with pytest.raises(AkademikError, match=pesan):
        penilaian.simpan_nilai_batch(kelas, entries, dosen.user)


def test_batch_rejects_out_of_range_score(terdaftar, kelas, dosen):
    with pytest.raises(AkademikError, match="antara 0-100"):
        penilaian.simpan_nilai_batch(kelas, [{"mahasiswa_id": terdaftar[0].pk, "nilai_angka": 101}], dosen.user)
    assert not Nilai.objects.exists()


def test_batch_rejects_student_without_approved_krs(mahasiswa, kelas, dosen, semester, make_krs):
    make_krs(mahasiswa, semester, [kelas], status=KRS.STATUS_SUBMITTED)
    with pytest.raises(AkademikError, match="tidak terdaftar di kelas ini"):
        penilaian.simpan_nilai_batch(kelas, [{"mahasiswa_id": mahasiswa.pk, "nilai_angka": 80}], dosen.user)


def test_batch_unknown_student_is_404(kelas, dosen):
    with pytest.raises(AkademikError) as excinfo:
        penilaian.simpan_nilai_batch(kelas, [{"mahasiswa_id": 999999, "nilai_angka": 80}], dosen.user)
    assert excinfo.value.status_code == 404


def test_finalize_requires_every_enrolled_student(terdaftar, kelas, dosen):
    penilaian.simpan_nilai_batch(kelas, [{"mahasiswa_id": terdaftar[0].pk, "nilai_angka": 80}], dosen.user)
    with pytest.raises(AkademikError, match="Masih ada 1 mahasiswa"):
        penilaian.finalisasi_nilai(kelas, dosen.user)


def test_finalize_without_grades(kelas, dosen):
    with pytest.raises(AkademikError, match="Tidak ada nilai"):
        penilaian.finalisasi_nilai(kelas, dosen.user)


def test_finalize_locks_grades_and_builds_khs(terdaftar, kelas, dosen, semester):
    mahasiswa, mahasiswa_lain = terdaftar
    penilaian.simpan_nilai_batch(
        kelas,
        [{"mahasiswa_id": mahasiswa.pk, "nilai_angka": 95}, {"mahasiswa_id": mahasiswa_lain.pk, "nilai_angka": 62}],
        dosen.user,
    )
    assert penilaian.finalisasi_nilai(kelas, dosen.user) == 2

    khs = KHS.objects.get(mahasiswa=mahasiswa, semester=semester)
    assert khs.ips == Decimal("4.00")
    assert khs.total_sks_semester == 3
    assert KHS.objects.get(mahasiswa=mahasiswa_lain).ips == Decimal("2.00")

    with pytest.raises(AkademikError, match="sudah difinalisasi"):
        penilaian.simpan_nilai_batch(kelas, [{"mahasiswa_id": mahasiswa.pk, "nilai_angka": 50}], dosen.user)

    assert penilaian.unlock_nilai(kelas) == 2
    penilaian.simpan_nilai_batch(kelas, [{"mahasiswa_id": mahasiswa.pk, "nilai_angka": 50}], dosen.user)


def test_only_the_teaching_lecturer_finalizes(terdaftar, kelas, dosen_lain, admin_user):
    with pytest.raises(AkademikError) as excinfo:
        penilaian.finalisasi_nilai(kelas, dosen_lain.user)
    assert excinfo.value.status_code == 403
    penilaian.cek_pengampu(kelas, admin_user)


def test_khs_accumulates_ipk_over_semesters(mahasiswa, semester, make_semester, make_kelas, make_krs):
    lalu = make_semester("2023/2024", Semester.PERIODE_GENAP, aktif=False)
    kelas_lalu = make_kelas(semester_kelas=lalu)
    kelas_kini = make_kelas(hari="Selasa")
    make_krs(mahasiswa, lalu, [kelas_lalu])
    make_krs(mahasiswa, semester, [kelas_kini])
    Nilai.objects.create(mahasiswa=mahasiswa, kelas_mk=kelas_lalu, nilai_angka=95, is_finalized=True)
    Nilai.objects.create(mahasiswa=mahasiswa, kelas_mk=kelas_kini, nilai_angka=65, is_finalized=True)

    penilaian.generate_khs([mahasiswa.pk], lalu)
    [khs] = penilaian.generate_khs([mahasiswa.pk, mahasiswa.pk], semester)

    assert khs.ips == Decimal("2.00")
    assert khs.ipk == Decimal("3.00")
    assert khs.total_sks_kumulatif == 6
    assert KHS.objects.filter(mahasiswa=mahasiswa).count() == 2

    data = penilaian.transkrip(mahasiswa)
    assert [k.semester for k in data["khs"]] == [lalu, semester]
    assert list(data["nilai_per_semester"]) == [lalu, semester]
    assert data["ringkasan"]["ipk"] == Decimal("3.00")
    assert data["ringkasan"]["predikat"] == "Sangat Memuaskan"
    assert data["ringkasan"]["jumlah_semester"] == 2
    assert data["ringkasan"]["dapat_lulus"] is False


def test_generate_khs_validates_input(semester):
    with pytest.raises(AkademikError, match="Mahasiswa IDs"):
        penilaian.generate_khs([], semester)
    with pytest.raises(AkademikError, match="Semester ID wajib"):
        penilaian.generate_khs([1], None)


def test_draft_grades_are_ignored_by_khs(mahasiswa, semester, kelas, make_krs):
    make_krs(mahasiswa, semester, [kelas])
    Nilai.objects.create(mahasiswa=mahasiswa, kelas_mk=kelas, nilai_angka=95)
    [khs] = penilaian.generate_khs([mahasiswa.pk], semester)
    assert khs.ips == Decimal("0.00")
    assert khs.total_sks_semester == 0


def test_transcript_without_history(mahasiswa):
    data = penilaian.transkrip(mahasiswa)
    assert data["khs"] == []
    assert data["ringkasan"]["predikat"] == "Kurang"


def test_access_to_student_records(mahasiswa, mahasiswa_lain, dosen, admin_user, keuangan_user):
    penilaian.cek_akses_mahasiswa(mahasiswa.user, mahasiswa)
    penilaian.cek_akses_mahasiswa(dosen.user, mahasiswa)
    penilaian.cek_akses_mahasiswa(admin_user, mahasiswa_lain)
    for user, target in ((mahasiswa.user, mahasiswa_lain), (dosen.user, mahasiswa_lain), (keuangan_user, mahasiswa)):
        with pytest.raises(AkademikError, match="tidak memiliki akses ke data mahasiswa"):
            penilaian.cek_akses_mahasiswa(user, target)


class TestNilaiApi:
    def test_lecturer_saves_grades(self, client_for, dosen, terdaftar, kelas):
        response = client_for(dosen.user).post(
            reverse("nilai_kelas", args=[kelas.pk]),
            {"nilai": [{"mahasiswa_id": terdaftar[0].pk, "nilai_angka": 88}]},
            content_type="application/json",
        )
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "1 nilai berhasil disimpan"
        assert body["data"][0]["nilai_huruf"] == "AB"
        assert body["data"][0]["keterangan"] == "Baik Sekali"

    def test_grade_sheet_lists_every_enrolled_student(self, client_for, dosen, terdaftar, kelas):
        response = client_for(dosen.user).get(reverse("nilai_kelas", args=[kelas.pk]))
        data = response.json()["data"]
        assert [row["mahasiswa"]["nim"] for row in data["mahasiswa"]] == ["2024010001", "2024010002"]
        assert all(row["nilai"] is None for row in data["mahasiswa"])
        assert data["is_finalized"] is False

    def test_other_lecturer_is_refused(self, client_for, dosen_lain, kelas):
        response = client_for(dosen_lain.user).get(reverse("nilai_kelas", args=[kelas.pk]))
        assert response.status_code == 403
        assert response.json()["message"] == "Anda bukan dosen pengampu kelas ini"

    def test_student_transcript_is_private(self, client_for, mahasiswa, mahasiswa_lain):
        client = client_for(mahasiswa.user)
        assert client.get(reverse("transkrip", args=[mahasiswa.pk])).status_code == 200
        assert client.get(reverse("transkrip", args=[mahasiswa_lain.pk])).status_code == 403

    def test_transcript_pdf(self, client_for, admin_user, mahasiswa):
        response = client_for(admin_user).get(reverse("transkrip_pdf", args=[mahasiswa.pk]))
        assert response.status_code == 200
        assert response["Content-Type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")
