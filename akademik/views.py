"""JSON endpoints for authentication, master data, KRS, grades, attendance and dashboards."""
from __future__ import annotations

import logging

from django.conf import settings
from django.contrib.auth import authenticate, login, logout, update_session_auth_hash
from django.db.models import Count, Q
from django.forms.models import model_to_dict
from django.http import FileResponse
from django.middleware.csrf import get_token
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.utils.decorators import method_decorator
from django.views.decorators.csrf import ensure_csrf_cookie

from . import akun, exports, krs as krs_service, penilaian, presensi as presensi_service
from .api import ApiView, api_response, paginate, parse_bool, parse_int, parse_tanggal, validate_form
from .exceptions import AkademikError
from .forms import (
    DosenForm,
    KelasMataKuliahForm,
    MahasiswaForm,
    MataKuliahForm,
    PaketKRSForm,
    ProdiForm,
    RuanganForm,
    SemesterForm,
)
from .models import (
    KHS,
    KRS,
    Akun,
    Dosen,
    KelasMataKuliah,
    KelasMKFile,
    Mahasiswa,
    MataKuliah,
    Nilai,
    PaketKRS,
    Presensi,
    Prodi,
    Ruangan,
    Semester,
    role_of,
)
from .serializers import (
    serialize_dosen,
    serialize_kelas,
    serialize_kelas_file,
    serialize_khs,
    serialize_krs,
    serialize_mahasiswa,
    serialize_mahasiswa_ringkas,
    serialize_mata_kuliah,
    serialize_nilai,
    serialize_nilai_mk,
    serialize_paket,
    serialize_presensi,
    serialize_prodi,
    serialize_ruangan,
    serialize_semester,
    serialize_statistik,
    serialize_user,
)

logger = logging.getLogger(__name__)

ADMIN = Akun.ROLE_ADMIN
DOSEN = Akun.ROLE_DOSEN
MAHASISWA = Akun.ROLE_MAHASISWA
KEUANGAN = Akun.ROLE_KEUANGAN

HARI_INDONESIA = ["Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu", "Minggu"]


def kelas_dengan_terdaftar(qs):
    """Annotate classes with the SUBMITTED/APPROVED enrolment count."""
    return qs.select_related("mata_kuliah", "dosen", "ruangan").annotate(
        terdaftar=Count(
            "krs_detail",
            filter=Q(krs_detail__krs__status__in=krs_service.STATUS_TERDAFTAR),
            distinct=True,
        )
    )


def semester_dari(params):
    """Semester named by ``semester_id``, else the active one."""
    semester_id = parse_int(params.get("semester_id"), "Semester ID", required=False)
    if semester_id:
        return get_object_or_404(Semester, pk=semester_id)
    semester = Semester.aktif()
    if semester is None:
        raise AkademikError("Belum ada semester aktif", 404)
    return semester


def jadwal_hari_ini(kelas_qs):
    hari = HARI_INDONESIA[timezone.localdate().weekday()]
    return [serialize_kelas(kelas) for kelas in kelas_qs.filter(hari=hari).order_by("jam_mulai")]


# ---------------------------------------------------------------------------
# Autentikasi
# ---------------------------------------------------------------------------


@method_decorator(ensure_csrf_cookie, name="dispatch")
class CsrfView(ApiView):
    login_required = False

    def get(self, request):
        return api_response({"csrf_token": get_token(request)})


class LoginView(ApiView):
    login_required = False

    def post(self, request):
        payload = self.get_payload()
        identifier = (payload.get("identifier") or "").strip()
        password = payload.get("password") or ""
        if not identifier or not password:
            raise AkademikError("Identifier dan password wajib diisi")
        user = authenticate(request, identifier=identifier, password=password)
        if user is None:
            raise AkademikError("Identifier atau password salah", 401)
        login(request, user)
        logger.info("Login berhasil: %s", user.username)
        return api_response(serialize_user(user), "Login berhasil")


class LogoutView(ApiView):
    def post(self, request):
        logout(request)
        return api_response(message="Logout berhasil")


class MeView(ApiView):
    def get(self, request):
        return api_response(serialize_user(request.user))


class ChangePasswordView(ApiView):
    def post(self, request):
        payload = self.get_payload()
        akun.ganti_password(
            request.user,
            payload.get("old_password"),
            payload.get("new_password"),
            payload.get("confirm_password"),
        )
        update_session_auth_hash(request, request.user)
        return api_response(message="Password berhasil diubah")


class ChangeUsernameView(ApiView):
    allowed_roles = (ADMIN, KEUANGAN)

    def post(self, request):
        akun.ganti_username(request.user, self.get_payload().get("new_username"))
        return api_response(serialize_user(request.user), "Username berhasil diubah")


class RegisterView(ApiView):
    allowed_roles = (ADMIN,)

    def post(self, request):
        user = akun.register(self.get_payload())
        return api_response(serialize_user(user), "User berhasil didaftarkan", 201)


# ---------------------------------------------------------------------------
# Master data
# ---------------------------------------------------------------------------


class MasterDataMixin:
    """Shared list/detail plumbing; subclasses name the model, form and serializer."""

    model = None
    form_class = None
    serializer = None
    search_fields: tuple[str, ...] = ()
    filter_fields: dict[str, str] = {}
    integer_filters = ("angkatan", "semester_ideal")
    export = None
    allowed_roles = (ADMIN, DOSEN)
    write_roles = (ADMIN,)

    @property
    def label(self) -> str:
        return str(self.model._meta.verbose_name)

    def get_queryset(self):
        return self.model.objects.all()

    def filter_queryset(self, qs):
        params = self.request.GET
        search = (params.get("search") or "").strip()
        if search and self.search_fields:
            condition = Q()
            for field in self.search_fields:
                condition |= Q(**{f"{field}__icontains": search})
            qs = qs.filter(condition)
        for param, lookup in self.filter_fields.items():
            value = params.get(param)
            if value in (None, ""):
                continue
            if lookup.endswith("is_active"):
                value = parse_bool(value)
            elif lookup.endswith("_id") or lookup in self.integer_filters:
                value = parse_int(value, param)
            qs = qs.filter(**{lookup: value})
        return qs

    def serialize(self, obj):
        return type(self).serializer(obj)

    def perform_create(self, data):
        return validate_form(self.form_class, data).save()

    def perform_update(self, obj, data):
        merged = model_to_dict(obj, fields=self.form_class._meta.fields)
        merged.update(data)
        return validate_form(self.form_class, merged, instance=obj).save()

    def perform_delete(self, obj):
        obj.delete()


class MasterListView(MasterDataMixin, ApiView):
    def get(self, request):
        qs = self.filter_queryset(self.get_queryset())
        if self.export and parse_bool(request.GET.get("export")):
            builder, filename = self.export
            return exports.excel_response(builder(qs), filename)
        items, pagination = paginate(request, qs, self.serialize)
        return api_response(items, pagination=pagination)

    def post(self, request):
        obj = self.perform_create(self.get_payload())
        return api_response(self.serialize(obj), f"{self.label} berhasil dibuat", 201)


class MasterDetailView(MasterDataMixin, ApiView):
    def get_object(self):
        return get_object_or_404(self.get_queryset(), pk=self.kwargs["pk"])

    def get(self, request, pk):
        return api_response(self.serialize(self.get_object()))

    def put(self, request, pk):
        obj = self.perform_update(self.get_object(), self.get_payload())
        return api_response(self.serialize(obj), f"{self.label} berhasil diperbarui")

    patch = put

    def delete(self, request, pk):
        self.perform_delete(self.get_object())
        return api_response(message=f"{self.label} berhasil dihapus")


class ProdiMixin:
    model = Prodi
    form_class = ProdiForm
    serializer = serialize_prodi
    search_fields = ("kode", "nama")
    filter_fields = {"is_active": "is_active"}
    allowed_roles = None


class ProdiListView(ProdiMixin, MasterListView):
    pass


class ProdiDetailView(ProdiMixin, MasterDetailView):
    pass


class DosenMixin:
    model = Dosen
    form_class = DosenForm
    serializer = serialize_dosen
    search_fields = ("nidn", "nuptk", "nama_lengkap")
    filter_fields = {"prodi_id": "prodi_id", "status": "status"}
    export = (exports.workbook_dosen, "data_dosen.xlsx")

    def get_queryset(self):
        return Dosen.objects.select_related("user", "prodi")

    def perform_create(self, data):
        profil = akun.bersihkan_profil(DosenForm, data)
        return akun.buat_dosen(profil, username=data.get("username") or None, password=data.get("password") or None)

    def perform_delete(self, dosen):
        aktif = dosen.mahasiswa_bimbingan.filter(
            status__in=[Mahasiswa.STATUS_AKTIF, Mahasiswa.STATUS_CUTI]
        ).count()
        if aktif:
            raise AkademikError(f"Tidak dapat menghapus dosen. Masih ada {aktif} mahasiswa bimbingan aktif")
        dosen.status = Dosen.STATUS_NON_AKTIF
        dosen.save(update_fields=["status"])
        dosen.user.is_active = False
        dosen.user.save(update_fields=["is_active"])
        logger.info("Dosen %s dinonaktifkan", dosen.nidn)


class DosenListView(DosenMixin, MasterListView):
    pass


class DosenDetailView(DosenMixin, MasterDetailView):
    pass


class MahasiswaMixin:
    model = Mahasiswa
    form_class = MahasiswaForm
    serializer = serialize_mahasiswa
    search_fields = ("nim", "nama_lengkap")
    filter_fields = {
        "prodi_id": "prodi_id",
        "angkatan": "angkatan",
        "status": "status",
        "dosen_wali_id": "dosen_wali_id",
    }
    export = (exports.workbook_mahasiswa, "data_mahasiswa.xlsx")

    def get_queryset(self):
        return Mahasiswa.objects.select_related("user", "prodi", "dosen_wali")

    def perform_create(self, data):
        profil = akun.bersihkan_profil(MahasiswaForm, data)
        return akun.buat_mahasiswa(profil, password=data.get("password") or None)

    def perform_delete(self, mahasiswa):
        mahasiswa.status = Mahasiswa.STATUS_NON_AKTIF
        mahasiswa.save(update_fields=["status"])
        mahasiswa.user.is_active = False
        mahasiswa.user.save(update_fields=["is_active"])
        logger.info("Mahasiswa %s dinonaktifkan", mahasiswa.nim)


class MahasiswaListView(MahasiswaMixin, MasterListView):
    pass


class MahasiswaDetailView(MahasiswaMixin, MasterDetailView):
    pass


class MahasiswaKRSView(ApiView):
    allowed_roles = (ADMIN, DOSEN, MAHASISWA)

    def get(self, request, pk):
        mahasiswa = get_object_or_404(Mahasiswa, pk=pk)
        penilaian.cek_akses_mahasiswa(request.user, mahasiswa)
        qs = KRS.objects.filter(mahasiswa=mahasiswa).select_related("mahasiswa", "semester", "approved_by")
        return api_response([serialize_krs(krs, with_detail=False) for krs in qs])


class MahasiswaKHSView(ApiView):
    allowed_roles = (ADMIN, DOSEN, MAHASISWA)

    def get(self, request, pk):
        mahasiswa = get_object_or_404(Mahasiswa, pk=pk)
        penilaian.cek_akses_mahasiswa(request.user, mahasiswa)
        qs = KHS.objects.filter(mahasiswa=mahasiswa).select_related("mahasiswa", "semester")
        return api_response([serialize_khs(khs) for khs in qs.order_by("semester__tahun_akademik", "semester__periode")])


def cek_dipakai_semester_aktif(**lookup) -> bool:
    return KelasMataKuliah.objects.filter(semester__is_active=True, **lookup).exists()


class MataKuliahMixin:
    model = MataKuliah
    form_class = MataKuliahForm
    serializer = serialize_mata_kuliah
    search_fields = ("kode_mk", "nama_mk")
    filter_fields = {"semester_ideal": "semester_ideal", "is_active": "is_active"}
    allowed_roles = None

    def perform_delete(self, mata_kuliah):
        if cek_dipakai_semester_aktif(mata_kuliah=mata_kuliah):
            raise AkademikError("Tidak dapat menghapus mata kuliah yang masih digunakan di semester aktif")
        mata_kuliah.is_active = False
        mata_kuliah.save(update_fields=["is_active"])


class MataKuliahListView(MataKuliahMixin, MasterListView):
    pass


class MataKuliahDetailView(MataKuliahMixin, MasterDetailView):
    pass


class RuanganMixin:
    model = Ruangan
    form_class = RuanganForm
    serializer = serialize_ruangan
    search_fields = ("nama",)
    filter_fields = {"is_active": "is_active"}
    allowed_roles = None

    def perform_delete(self, ruangan):
        if cek_dipakai_semester_aktif(ruangan=ruangan):
            raise AkademikError("Tidak dapat menghapus ruangan yang masih digunakan di semester aktif")
        ruangan.is_active = False
        ruangan.save(update_fields=["is_active"])


class RuanganListView(RuanganMixin, MasterListView):
    pass


class RuanganDetailView(RuanganMixin, MasterDetailView):
    pass


class SemesterMixin:
    model = Semester
    form_class = SemesterForm
    serializer = serialize_semester
    search_fields = ("tahun_akademik",)
    filter_fields = {"is_active": "is_active", "periode": "periode"}
    allowed_roles = None

    def perform_delete(self, semester):
        terkait = [
            (semester.kelas.count(), "kelas"),
            (semester.krs.count(), "KRS"),
            (semester.khs.count(), "KHS"),
        ]
        terkait = [f"{jumlah} {label}" for jumlah, label in terkait if jumlah]
        if terkait:
            raise AkademikError(
                "Tidak dapat menghapus semester. Masih ada data yang terkait: " + ", ".join(terkait)
            )
        semester.delete()


class SemesterListView(SemesterMixin, MasterListView):
    pass


class SemesterDetailView(SemesterMixin, MasterDetailView):
    pass


class SemesterAktifView(ApiView):
    def get(self, request):
        semester = Semester.aktif()
        if semester is None:
            raise AkademikError("Belum ada semester aktif", 404)
        return api_response(serialize_semester(semester))


class SemesterActivateView(ApiView):
    allowed_roles = (ADMIN,)

    def post(self, request, pk):
        semester = get_object_or_404(Semester, pk=pk)
        semester.aktifkan()
        logger.info("Semester %s diaktifkan", semester.label)
        return api_response(serialize_semester(semester), f"Semester {semester.label} diaktifkan")


class KelasMixin:
    model = KelasMataKuliah
    form_class = KelasMataKuliahForm
    search_fields = ("mata_kuliah__kode_mk", "mata_kuliah__nama_mk", "dosen__nama_lengkap")
    filter_fields = {
        "semester_id": "semester_id",
        "dosen_id": "dosen_id",
        "hari": "hari",
        "mata_kuliah_id": "mata_kuliah_id",
    }
    allowed_roles = None

    def get_queryset(self):
        return kelas_dengan_terdaftar(KelasMataKuliah.objects.all())

    def serialize(self, kelas):
        terdaftar = getattr(kelas, "terdaftar", None)
        if terdaftar is None:
            terdaftar = kelas.jumlah_terdaftar()
        return serialize_kelas(kelas, terdaftar)

    def perform_delete(self, kelas):
        terdaftar = kelas.jumlah_terdaftar()
        if terdaftar:
            raise AkademikError(f"Tidak dapat menghapus kelas. Masih ada {terdaftar} mahasiswa yang terdaftar")
        kelas.delete()


class KelasListView(KelasMixin, MasterListView):
    pass


class KelasDetailView(KelasMixin, MasterDetailView):
    pass


class KelasMahasiswaView(ApiView):
    """Students holding the class in an approved KRS."""

    allowed_roles = (ADMIN, DOSEN)

    def get(self, request, pk):
        kelas = get_object_or_404(KelasMataKuliah, pk=pk)
        return api_response([serialize_mahasiswa_ringkas(m) for m in kelas.mahasiswa_terdaftar().order_by("nim")])


class PaketMixin:
    model = PaketKRS
    form_class = PaketKRSForm
    serializer = serialize_paket
    search_fields = ("nama_paket",)
    filter_fields = {"prodi_id": "prodi_id", "angkatan": "angkatan", "semester_id": "semester_id"}
    allowed_roles = None

    def get_queryset(self):
        return PaketKRS.objects.select_related("prodi", "semester")

    def serialize(self, paket):
        return serialize_paket(paket, with_kelas=self.kwargs.get("pk") is not None)

    def perform_create(self, data):
        form = validate_form(PaketKRSForm, data)
        paket = form.save(commit=False)
        paket.created_by = self.request.user
        return krs_service.simpan_paket(paket, form.cleaned_data.get("kelas_ids") or [])

    def perform_update(self, paket, data):
        merged = model_to_dict(paket, fields=PaketKRSForm._meta.fields)
        merged.update(data)
        form = validate_form(PaketKRSForm, merged, instance=paket)
        return krs_service.simpan_paket(form.save(commit=False), form.cleaned_data.get("kelas_ids"))


class PaketListView(PaketMixin, MasterListView):
    pass


class PaketDetailView(PaketMixin, MasterDetailView):
    pass


class PaketKelasView(ApiView):
    allowed_roles = (ADMIN,)

    def post(self, request, pk, kelas_id=None):
        paket = get_object_or_404(PaketKRS, pk=pk)
        kelas_id = kelas_id or parse_int(self.get_payload().get("kelas_mk_id"), "Kelas MK ID")
        paket = krs_service.tambah_kelas_paket(paket, kelas_id)
        return api_response(serialize_paket(paket), "Mata kuliah berhasil ditambahkan ke paket")

    def delete(self, request, pk, kelas_id=None):
        paket = get_object_or_404(PaketKRS, pk=pk)
        kelas_id = kelas_id or parse_int(self.get_payload().get("kelas_mk_id"), "Kelas MK ID")
        paket = krs_service.hapus_kelas_paket(paket, kelas_id)
        return api_response(serialize_paket(paket), "Mata kuliah berhasil dihapus dari paket")


# ---------------------------------------------------------------------------
# KRS
# ---------------------------------------------------------------------------


class KRSMixin:
    allowed_roles = (ADMIN, DOSEN, MAHASISWA)
    write_roles = (ADMIN, MAHASISWA)

    def get_krs(self, pk):
        return get_object_or_404(krs_service.krs_untuk(self.request.user), pk=pk)

    def get_keputusan_krs(self, pk):
        # unscoped: a lecturer who is not the advisor gets 403, not 404
        return get_object_or_404(KRS.objects.select_related("mahasiswa", "semester"), pk=pk)


class KRSListView(KRSMixin, ApiView):
    def get(self, request):
        qs = krs_service.filter_krs(krs_service.krs_untuk(request.user), request.GET)
        if parse_bool(request.GET.get("export")):
            return exports.excel_response(exports.workbook_krs(qs), "daftar_krs.xlsx")
        items, pagination = paginate(request, qs, lambda krs: serialize_krs(krs, with_detail=False))
        return api_response(items, pagination=pagination)

    def post(self, request):
        payload = self.get_payload()
        if self.role == MAHASISWA:
            mahasiswa = self.require_mahasiswa()
        else:
            mahasiswa = get_object_or_404(Mahasiswa, pk=parse_int(payload.get("mahasiswa_id"), "Mahasiswa ID"))
        semester = semester_dari(payload)
        paket = None
        paket_id = parse_int(payload.get("paket_krs_id"), "Paket KRS ID", required=False)
        if paket_id:
            paket = get_object_or_404(PaketKRS, pk=paket_id)
        krs, peringatan = krs_service.buat_krs(
            mahasiswa, semester, paket=paket, kelas_ids=payload.get("kelas_ids"), actor=request.user
        )
        data = serialize_krs(krs)
        data["peringatan"] = peringatan
        return api_response(data, "KRS berhasil dibuat", 201)


class KRSDetailView(KRSMixin, ApiView):
    def get(self, request, pk):
        return api_response(serialize_krs(self.get_krs(pk)))

    def put(self, request, pk):
        krs = krs_service.ubah_krs(self.get_krs(pk), self.get_payload().get("kelas_ids"), actor=request.user)
        return api_response(serialize_krs(krs), "KRS berhasil diperbarui")

    def delete(self, request, pk):
        krs_service.hapus_krs(self.get_krs(pk))
        return api_response(message="KRS berhasil dihapus")


class KRSSubmitView(KRSMixin, ApiView):
    def post(self, request, pk):
        krs = krs_service.submit_krs(self.get_krs(pk))
        return api_response(serialize_krs(krs), "KRS berhasil disubmit")


class KRSApproveView(KRSMixin, ApiView):
    write_roles = (ADMIN, DOSEN)

    def post(self, request, pk):
        catatan = self.get_payload().get("catatan") or ""
        krs = krs_service.approve_krs(self.get_keputusan_krs(pk), request.user, catatan)
        return api_response(serialize_krs(krs), "KRS berhasil disetujui")


class KRSRejectView(KRSMixin, ApiView):
    write_roles = (ADMIN, DOSEN)

    def post(self, request, pk):
        catatan = self.get_payload().get("catatan") or ""
        krs = krs_service.reject_krs(self.get_keputusan_krs(pk), request.user, catatan)
        return api_response(serialize_krs(krs), "KRS berhasil ditolak")


class KRSPdfView(KRSMixin, ApiView):
    def get(self, request, pk):
        krs = self.get_krs(pk)
        return exports.pdf_response(exports.pdf_krs(krs), f"krs_{krs.mahasiswa.nim}.pdf")


class KelasTersediaView(ApiView):
    """Classes offered in a semester with their remaining quota."""

    allowed_roles = (ADMIN, MAHASISWA)

    def get(self, request):
        semester = semester_dari(request.GET)
        qs = kelas_dengan_terdaftar(KelasMataKuliah.objects.filter(semester=semester, mata_kuliah__is_active=True))
        return api_response([serialize_kelas(kelas, kelas.terdaftar) for kelas in qs])


class PaketTersediaView(ApiView):
    allowed_roles = (MAHASISWA,)

    def get(self, request):
        mahasiswa = self.require_mahasiswa()
        semester = semester_dari(request.GET)
        qs = PaketKRS.objects.filter(semester=semester, prodi=mahasiswa.prodi, angkatan=mahasiswa.angkatan)
        return api_response([serialize_paket(paket) for paket in qs.select_related("prodi", "semester")])


# ---------------------------------------------------------------------------
# Nilai, KHS, transkrip
# ---------------------------------------------------------------------------


class NilaiKelasView(ApiView):
    allowed_roles = (ADMIN, DOSEN)

    def get(self, request, kelas_id):
        kelas = get_object_or_404(KelasMataKuliah.objects.select_related("mata_kuliah", "dosen", "ruangan"), pk=kelas_id)
        penilaian.cek_pengampu(kelas, request.user)
        nilai_qs = Nilai.objects.filter(kelas_mk=kelas).select_related("mahasiswa").order_by("mahasiswa__nim")
        if parse_bool(request.GET.get("export")):
            return exports.excel_response(exports.workbook_nilai(kelas, nilai_qs), f"nilai_{kelas.mata_kuliah.kode_mk}.xlsx")
        nilai_map = {nilai.mahasiswa_id: nilai for nilai in nilai_qs}
        daftar = [
            {
                "mahasiswa": serialize_mahasiswa_ringkas(mahasiswa),
                "nilai": serialize_nilai(nilai_map[mahasiswa.pk]) if mahasiswa.pk in nilai_map else None,
            }
            for mahasiswa in kelas.mahasiswa_terdaftar().order_by("nim")
        ]
        return api_response(
            {
                "kelas": serialize_kelas(kelas),
                "is_finalized": any(nilai.is_finalized for nilai in nilai_map.values()),
                "mahasiswa": daftar,
            }
        )

    def post(self, request, kelas_id):
        kelas = get_object_or_404(KelasMataKuliah, pk=kelas_id)
        penilaian.cek_pengampu(kelas, request.user)
        hasil = penilaian.simpan_nilai_batch(kelas, self.get_payload().get("nilai"), request.user)
        return api_response([serialize_nilai(nilai) for nilai in hasil], f"{len(hasil)} nilai berhasil disimpan")


class NilaiFinalizeView(ApiView):
    allowed_roles = (ADMIN, DOSEN)

    def post(self, request, kelas_id):
        kelas = get_object_or_404(KelasMataKuliah, pk=kelas_id)
        jumlah = penilaian.finalisasi_nilai(kelas, request.user)
        return api_response({"jumlah": jumlah}, f"{jumlah} nilai berhasil difinalisasi")


class NilaiUnlockView(ApiView):
    allowed_roles = (ADMIN,)

    def post(self, request, kelas_id):
        kelas = get_object_or_404(KelasMataKuliah, pk=kelas_id)
        jumlah = penilaian.unlock_nilai(kelas)
        return api_response({"jumlah": jumlah}, "Nilai berhasil dibuka kembali")


class KHSListView(ApiView):
    allowed_roles = (ADMIN, DOSEN, MAHASISWA)

    def get(self, request):
        qs = penilaian.khs_untuk(request.user)
        semester_id = parse_int(request.GET.get("semester_id"), "Semester ID", required=False)
        if semester_id:
            qs = qs.filter(semester_id=semester_id)
        mahasiswa_id = parse_int(request.GET.get("mahasiswa_id"), "Mahasiswa ID", required=False)
        if mahasiswa_id:
            qs = qs.filter(mahasiswa_id=mahasiswa_id)
        items, pagination = paginate(request, qs, serialize_khs)
        return api_response(items, pagination=pagination)


class KHSGenerateView(ApiView):
    allowed_roles = (ADMIN,)

    def post(self, request):
        payload = self.get_payload()
        semester_id = parse_int(payload.get("semester_id"), "Semester ID", required=False)
        semester = get_object_or_404(Semester, pk=semester_id) if semester_id else None
        hasil = penilaian.generate_khs(payload.get("mahasiswa_ids"), semester)
        return api_response([serialize_khs(khs) for khs in hasil], f"KHS berhasil dibuat untuk {len(hasil)} mahasiswa")


class KHSDetailView(ApiView):
    allowed_roles = (ADMIN, DOSEN, MAHASISWA)

    def get_khs(self, pk):
        return get_object_or_404(penilaian.khs_untuk(self.request.user), pk=pk)

    def get(self, request, pk):
        khs = self.get_khs(pk)
        return api_response(serialize_khs(khs, penilaian.nilai_semester(khs.mahasiswa, khs.semester)))


class KHSPdfView(KHSDetailView):
    def get(self, request, pk):
        khs = self.get_khs(pk)
        content = exports.pdf_khs(khs, penilaian.nilai_semester(khs.mahasiswa, khs.semester))
        return exports.pdf_response(content, f"khs_{khs.mahasiswa.nim}_{khs.semester.pk}.pdf")


class TranskripView(ApiView):
    allowed_roles = (ADMIN, DOSEN, MAHASISWA)

    def get_data(self, mahasiswa_id):
        mahasiswa = get_object_or_404(Mahasiswa.objects.select_related("prodi", "dosen_wali"), pk=mahasiswa_id)
        penilaian.cek_akses_mahasiswa(self.request.user, mahasiswa)
        return penilaian.transkrip(mahasiswa)

    def get(self, request, mahasiswa_id):
        data = self.get_data(mahasiswa_id)
        ringkasan = data["ringkasan"]
        return api_response(
            {
                "mahasiswa": serialize_mahasiswa(data["mahasiswa"]),
                "khs": [serialize_khs(khs) for khs in data["khs"]],
                "nilai_per_semester": [
                    {"semester": serialize_semester(semester), "nilai": [serialize_nilai_mk(n) for n in nilai_list]}
                    for semester, nilai_list in data["nilai_per_semester"].items()
                ],
                "ringkasan": {**ringkasan, "ipk": float(ringkasan["ipk"])},
            }
        )


class TranskripPdfView(TranskripView):
    def get(self, request, mahasiswa_id):
        data = self.get_data(mahasiswa_id)
        return exports.pdf_response(exports.pdf_transkrip(data), f"transkrip_{data['mahasiswa'].nim}.pdf")


# ---------------------------------------------------------------------------
# Presensi
# ---------------------------------------------------------------------------


def cek_akses_kelas(user, kelas, pesan_mahasiswa="Anda tidak terdaftar di kelas ini", pesan_dosen=None):
    """Owner dosen, enrolled mahasiswa and admins may read a class's attendance or files."""
    role = role_of(user)
    if role == ADMIN:
        return
    if role == MAHASISWA:
        mahasiswa = getattr(user, "mahasiswa", None)
        if mahasiswa is None or not penilaian.terdaftar_di_kelas(mahasiswa, kelas):
            raise AkademikError(pesan_mahasiswa, 403)
        return
    penilaian.cek_pengampu(kelas, user, pesan_dosen or "Anda tidak memiliki akses untuk kelas ini")


class PresensiKelasView(ApiView):
    allowed_roles = (ADMIN, DOSEN, MAHASISWA)
    write_roles = (ADMIN, DOSEN)

    def get(self, request, kelas_id):
        kelas = get_object_or_404(KelasMataKuliah, pk=kelas_id)
        cek_akses_kelas(request.user, kelas)
        qs = Presensi.objects.filter(kelas_mk=kelas).order_by("pertemuan")
        return api_response([serialize_presensi(presensi, with_detail=False) for presensi in qs])

    def post(self, request, kelas_id):
        kelas = get_object_or_404(KelasMataKuliah, pk=kelas_id)
        payload = self.get_payload()
        presensi = presensi_service.buat_presensi(
            kelas,
            parse_int(payload.get("pertemuan"), "Pertemuan"),
            parse_tanggal(payload.get("tanggal")),
            request.user,
            materi=payload.get("materi") or "",
            catatan=payload.get("catatan") or "",
        )
        return api_response(serialize_presensi(presensi), "Presensi berhasil dibuat", 201)


class PresensiDetailView(ApiView):
    allowed_roles = (ADMIN, DOSEN, MAHASISWA)
    write_roles = (ADMIN, DOSEN)

    def get_presensi(self, pk):
        return get_object_or_404(Presensi.objects.select_related("kelas_mk"), pk=pk)

    def get(self, request, pk):
        presensi = self.get_presensi(pk)
        cek_akses_kelas(request.user, presensi.kelas_mk)
        return api_response(serialize_presensi(presensi))

    def put(self, request, pk):
        payload = self.get_payload()
        presensi = presensi_service.ubah_presensi_detail(
            self.get_presensi(pk),
            payload.get("updates"),
            request.user,
            materi=payload.get("materi"),
            catatan=payload.get("catatan"),
        )
        return api_response(serialize_presensi(presensi), "Presensi berhasil diperbarui")

    def delete(self, request, pk):
        presensi_service.hapus_presensi(self.get_presensi(pk), request.user)
        return api_response(message="Presensi berhasil dihapus")


class DosenKelasSayaView(ApiView):
    allowed_roles = (DOSEN,)

    def get(self, request):
        dosen = self.require_dosen()
        semester = semester_dari(request.GET)
        qs = kelas_dengan_terdaftar(KelasMataKuliah.objects.filter(dosen=dosen, semester=semester)).annotate(
            jumlah_pertemuan=Count("presensi", distinct=True)
        )
        data = []
        for kelas in qs:
            item = serialize_kelas(kelas, kelas.terdaftar)
            item["jumlah_pertemuan"] = kelas.jumlah_pertemuan
            data.append(item)
        return api_response(data)


class MahasiswaKelasSayaView(ApiView):
    allowed_roles = (MAHASISWA,)

    def get(self, request):
        mahasiswa = self.require_mahasiswa()
        semester = semester_dari(request.GET)
        qs = KelasMataKuliah.objects.filter(
            semester=semester,
            krs_detail__krs__mahasiswa=mahasiswa,
            krs_detail__krs__status=KRS.STATUS_APPROVED,
        ).select_related("mata_kuliah", "dosen", "ruangan")
        data = []
        for kelas in qs.distinct():
            item = serialize_kelas(kelas)
            statistik = presensi_service.statistik_mahasiswa(mahasiswa, kelas)
            item["statistik"] = serialize_statistik(statistik)
            data.append(item)
        return api_response(data)


class StatistikMahasiswaView(ApiView):
    allowed_roles = (ADMIN, DOSEN, MAHASISWA)

    def get(self, request, mahasiswa_id, kelas_id):
        mahasiswa = get_object_or_404(Mahasiswa, pk=mahasiswa_id)
        kelas = get_object_or_404(KelasMataKuliah, pk=kelas_id)
        if self.role == MAHASISWA:
            if mahasiswa.user_id != request.user.pk:
                raise AkademikError("Anda hanya bisa melihat data Anda sendiri", 403)
        else:
            cek_akses_kelas(request.user, kelas)
        statistik = presensi_service.statistik_mahasiswa(mahasiswa, kelas)
        return api_response(serialize_statistik({"mahasiswa": mahasiswa, **statistik}))


class StatistikKelasView(ApiView):
    allowed_roles = (ADMIN, DOSEN)

    def get(self, request, kelas_id):
        kelas = get_object_or_404(KelasMataKuliah, pk=kelas_id)
        cek_akses_kelas(request.user, kelas)
        return api_response([serialize_statistik(row) for row in presensi_service.statistik_kelas(kelas)])


# ---------------------------------------------------------------------------
# File kelas (RPS, RPP, materi)
# ---------------------------------------------------------------------------


class KelasFileListView(ApiView):
    allowed_roles = (ADMIN, DOSEN, MAHASISWA)
    write_roles = (DOSEN,)

    def get(self, request, kelas_id):
        kelas = get_object_or_404(KelasMataKuliah, pk=kelas_id)
        cek_akses_kelas(request.user, kelas, pesan_dosen="Anda tidak memiliki akses ke kelas ini")
        qs = kelas.files.select_related("uploaded_by")
        if request.GET.get("tipe"):
            qs = qs.filter(tipe=request.GET["tipe"].upper())
        return api_response([serialize_kelas_file(berkas) for berkas in qs])

    def post(self, request, kelas_id):
        kelas = get_object_or_404(KelasMataKuliah, pk=kelas_id)
        dosen = self.require_dosen()
        if kelas.dosen_id != dosen.pk:
            raise AkademikError("Anda tidak memiliki akses ke kelas ini", 403)
        upload = request.FILES.get("file")
        if upload is None:
            raise AkademikError("File wajib diupload")
        if upload.size > settings.MAX_MATERI_UPLOAD_SIZE:
            raise AkademikError(f"Ukuran file maksimal {settings.MAX_MATERI_UPLOAD_SIZE // (1024 * 1024)}MB")
        berkas = KelasMKFile(
            kelas_mk=kelas,
            tipe=(request.POST.get("tipe") or "").upper(),
            nama_file=request.POST.get("nama_file") or upload.name,
            file=upload,
            minggu_ke=parse_int(request.POST.get("minggu_ke"), "Minggu ke", required=False),
            keterangan=request.POST.get("keterangan") or "",
            uploaded_by=dosen,
        )
        berkas.save()
        logger.info("File %s diunggah ke kelas %s oleh %s", berkas.tipe, kelas.pk, dosen.nidn)
        return api_response(serialize_kelas_file(berkas), "File berhasil diupload", 201)


class KelasFileDetailView(ApiView):
    allowed_roles = (DOSEN,)

    def get_berkas(self, pk, pesan):
        berkas = get_object_or_404(KelasMKFile, pk=pk)
        if berkas.uploaded_by_id != self.require_dosen().pk:
            raise AkademikError(pesan, 403)
        return berkas

    def put(self, request, pk):
        berkas = self.get_berkas(pk, "Anda tidak memiliki akses untuk mengubah file ini")
        payload = self.get_payload()
        nama_file = (payload.get("nama_file") or "").strip()
        if not nama_file:
            raise AkademikError("Nama file wajib diisi")
        berkas.nama_file = nama_file
        if "keterangan" in payload:
            berkas.keterangan = payload.get("keterangan") or ""
        berkas.save()
        return api_response(serialize_kelas_file(berkas), "File berhasil diubah")

    patch = put

    def delete(self, request, pk):
        berkas = self.get_berkas(pk, "Anda tidak memiliki akses untuk menghapus file ini")
        berkas.file.delete(save=False)
        berkas.delete()
        return api_response(message="File berhasil dihapus")


class KelasFileDownloadView(ApiView):
    allowed_roles = (ADMIN, DOSEN, MAHASISWA)

    def get(self, request, pk):
        berkas = get_object_or_404(KelasMKFile.objects.select_related("kelas_mk"), pk=pk)
        cek_akses_kelas(request.user, berkas.kelas_mk, pesan_dosen="Anda tidak memiliki akses ke kelas ini")
        if not berkas.file or not berkas.file.storage.exists(berkas.file.name):
            raise AkademikError("File tidak ditemukan", 404)
        return FileResponse(berkas.file.open("rb"), as_attachment=True, filename=berkas.nama_file)


# ---------------------------------------------------------------------------
# Jadwal (CSV)
# ---------------------------------------------------------------------------


class JadwalMahasiswaCsvView(ApiView):
    allowed_roles = (MAHASISWA,)

    def get(self, request):
        mahasiswa = self.require_mahasiswa()
        semester = semester_dari(request.GET)
        krs = KRS.objects.filter(mahasiswa=mahasiswa, semester=semester, status=KRS.STATUS_APPROVED).first()
        if krs is None:
            raise AkademikError("KRS yang disetujui untuk semester ini tidak ditemukan", 404)
        return exports.jadwal_csv(krs.daftar_kelas(), f"jadwal_{mahasiswa.nim}.csv")


class JadwalDosenCsvView(ApiView):
    allowed_roles = (DOSEN,)

    def get(self, request):
        dosen = self.require_dosen()
        semester = semester_dari(request.GET)
        kelas_qs = KelasMataKuliah.objects.filter(dosen=dosen, semester=semester).select_related(
            "mata_kuliah", "dosen", "ruangan"
        )
        return exports.jadwal_csv(kelas_qs, f"jadwal_mengajar_{dosen.nidn}.csv")


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


class AdminDashboardView(ApiView):
    allowed_roles = (ADMIN,)

    def get(self, request):
        krs_counts = KRS.objects.aggregate(
            pending=Count("id", filter=Q(status=KRS.STATUS_SUBMITTED)),
            approved=Count("id", filter=Q(status=KRS.STATUS_APPROVED)),
            rejected=Count("id", filter=Q(status=KRS.STATUS_REJECTED)),
        )
        terbaru = KRS.objects.select_related("mahasiswa", "semester", "approved_by").order_by("-updated_at")[:5]
        return api_response(
            {
                "mahasiswa": {
                    "total": Mahasiswa.objects.count(),
                    "aktif": Mahasiswa.objects.filter(status=Mahasiswa.STATUS_AKTIF).count(),
                },
                "dosen": {
                    "total": Dosen.objects.count(),
                    "aktif": Dosen.objects.filter(status=Dosen.STATUS_AKTIF).count(),
                },
                "mata_kuliah": {
                    "total": MataKuliah.objects.count(),
                    "aktif": MataKuliah.objects.filter(is_active=True).count(),
                },
                "krs": krs_counts,
                "semester_aktif": serialize_semester(Semester.aktif()),
                "aktivitas_terbaru": [serialize_krs(krs, with_detail=False) for krs in terbaru],
            }
        )


class DosenDashboardView(ApiView):
    allowed_roles = (DOSEN,)

    def get(self, request):
        dosen = self.require_dosen()
        semester = Semester.aktif()
        bimbingan = dosen.mahasiswa_bimbingan.all()
        kelas_qs = KelasMataKuliah.objects.filter(dosen=dosen, semester=semester).select_related(
            "mata_kuliah", "dosen", "ruangan"
        )
        return api_response(
            {
                "dosen": serialize_dosen(dosen),
                "total_mahasiswa_bimbingan": bimbingan.count(),
                "mahasiswa_bimbingan_aktif": bimbingan.filter(status=Mahasiswa.STATUS_AKTIF).count(),
                "kelas_diampu": kelas_qs.count(),
                "krs_menunggu_persetujuan": KRS.objects.filter(
                    mahasiswa__dosen_wali=dosen, status=KRS.STATUS_SUBMITTED
                ).count(),
                "semester_aktif": serialize_semester(semester),
                "jadwal_hari_ini": jadwal_hari_ini(kelas_qs),
            }
        )


class MahasiswaDashboardView(ApiView):
    allowed_roles = (MAHASISWA,)

    def get(self, request):
        mahasiswa = self.require_mahasiswa()
        semester = Semester.aktif()
        khs_terakhir = (
            KHS.objects.filter(mahasiswa=mahasiswa)
            .order_by("-semester__tahun_akademik", "-semester__periode")
            .first()
        )
        sks_lulus = sum(
            nilai.kelas_mk.mata_kuliah.sks
            for nilai in Nilai.objects.filter(
                mahasiswa=mahasiswa, is_finalized=True, nilai_huruf__in=["A", "AB", "B", "BC", "C"]
            ).select_related("kelas_mk__mata_kuliah")
        )
        krs = KRS.objects.filter(mahasiswa=mahasiswa, semester=semester).first() if semester else None
        jadwal = []
        if krs is not None and krs.status == KRS.STATUS_APPROVED:
            jadwal = jadwal_hari_ini(
                KelasMataKuliah.objects.filter(krs_detail__krs=krs).select_related("mata_kuliah", "dosen", "ruangan")
            )
        return api_response(
            {
                "nim": mahasiswa.nim,
                "nama": mahasiswa.nama_lengkap,
                "prodi": serialize_prodi(mahasiswa.prodi),
                "angkatan": mahasiswa.angkatan,
                "dosen_wali": mahasiswa.dosen_wali.nama_lengkap if mahasiswa.dosen_wali else None,
                "ips_terakhir": float(khs_terakhir.ips) if khs_terakhir else None,
                "ipk": float(khs_terakhir.ipk) if khs_terakhir else None,
                "sks_lulus": sks_lulus,
                "status_krs": krs.status if krs else None,
                "semester_aktif": serialize_semester(semester),
                "jadwal_hari_ini": jadwal,
            }
        )
