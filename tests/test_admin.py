import pytest
from django.contrib.auth import get_user_model
from django.urls import reverse

from akademik.models import KRS, Akun, Semester
from keuangan.models import Pembayaran

from .test_pembayaran import ajukan

pytestmark = pytest.mark.django_db


@pytest.fixture
def superuser(db):
    return get_user_model().objects.create_superuser("root", "root@example.com", "rahasia123")


@pytest.fixture
def admin_site(client_for, superuser):
    return client_for(superuser)


def run_action(client, model, action, pks, **extra):
    url = reverse(f"admin:{model._meta.app_label}_{model._meta.model_name}_changelist")
    return client.post(url, {"action": action, "_selected_action": pks, "index": 0, **extra})


def test_changelists_render(admin_site, mahasiswa, semester, kelas_list, make_krs):
    make_krs(mahasiswa, semester, kelas_list, status=KRS.STATUS_SUBMITTED)
    for name in ("akademik_krs", "akademik_mahasiswa", "akademik_dosen", "auth_user", "keuangan_pembayaran"):
        assert admin_site.get(reverse(f"admin:{name}_changelist")).status_code == 200


def test_krs_bulk_decisions(admin_site, mahasiswa, mahasiswa_lain, semester, kelas_list, make_krs):
    satu = make_krs(mahasiswa, semester, kelas_list, status=KRS.STATUS_SUBMITTED)
    dua = make_krs(mahasiswa_lain, semester, kelas_list, status=KRS.STATUS_SUBMITTED)

    response = run_action(admin_site, KRS, "tolak", [dua.pk])
    assert response.status_code == 302
    dua.refresh_from_db()
    assert dua.status == KRS.STATUS_SUBMITTED

    run_action(admin_site, KRS, "tolak", [dua.pk], catatan="Kurang SKS wajib")
    run_action(admin_site, KRS, "setujui", [satu.pk])
    satu.refresh_from_db()
    dua.refresh_from_db()
    assert satu.status == KRS.STATUS_APPROVED
    assert dua.status == KRS.STATUS_REJECTED
    assert dua.catatan_admin == "Kurang SKS wajib"


def test_krs_export_action(admin_site, mahasiswa, semester, kelas_list, make_krs):
    krs = make_krs(mahasiswa, semester, kelas_list)
    response = run_action(admin_site, KRS, "export_excel", [krs.pk])
    assert response["Content-Disposition"] == "attachment; filename=daftar_krs.xlsx"


def test_semester_activation_needs_exactly_one(admin_site, semester, make_semester):
    genap = make_semester("2024/2025", Semester.PERIODE_GENAP, aktif=False)
    run_action(admin_site, Semester, "aktifkan", [semester.pk, genap.pk])
    assert Semester.aktif() == semester
    run_action(admin_site, Semester, "aktifkan", [genap.pk])
    assert Semester.aktif() == genap


def test_payment_bulk_verification(admin_site, mahasiswa, mahasiswa_lain, semester):
    satu = ajukan(mahasiswa)
    dua = ajukan(mahasiswa_lain)
    run_action(admin_site, Pembayaran, "setujui", [satu.pk])
    run_action(admin_site, Pembayaran, "tolak", [dua.pk], catatan="Bukti tidak terbaca")
    satu.refresh_from_db()
    dua.refresh_from_db()
    assert satu.status == Pembayaran.STATUS_APPROVED
    assert dua.status == Pembayaran.STATUS_REJECTED
    assert dua.verified_by.username == "root"


def test_add_user_with_role(admin_site):
    response = admin_site.post(
        reverse("admin:auth_user_add"),
        {
            "username": "kasir",
            "usable_password": "true",
            "password1": "KasirKampus#2024",
            "password2": "KasirKampus#2024",
            "akun-TOTAL_FORMS": "1",
            "akun-INITIAL_FORMS": "0",
            "akun-MIN_NUM_FORMS": "0",
            "akun-MAX_NUM_FORMS": "1",
            "akun-0-role": "KEUANGAN",
            "_save": "Simpan",
        },
    )
    assert response.status_code == 302
    akun = Akun.objects.get(user__username="kasir")
    assert akun.role == Akun.ROLE_KEUANGAN
    assert akun.must_change_password is False
    assert Akun.objects.filter(user__username="kasir").count() == 1
