"""Admin configuration for the academic domain."""
from django.contrib import admin, messages
from django.contrib.auth import get_user_model
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin
from django.forms.models import BaseInlineFormSet

from . import exports, krs as krs_service, penilaian
from .exceptions import AkademikError
from .forms import CatatanActionForm
from .models import (
    KHS,
    KRS,
    Akun,
    Dosen,
    KelasMataKuliah,
    KelasMKFile,
    KRSDetail,
    Mahasiswa,
    MataKuliah,
    Nilai,
    PaketKRS,
    PaketKRSDetail,
    Presensi,
    PresensiDetail,
    Prodi,
    Ruangan,
    Semester,
    role_of,
)
from .status import status_badge

User = get_user_model()
admin.site.unregister(User)

admin.site.site_header = "SIAKAD"
admin.site.site_title = "SIAKAD"


class AkunInlineFormSet(BaseInlineFormSet):
    """Saving a new user already created its Akun, so an added row updates that one."""

    def save_new(self, form, commit=True):
        akun, _ = Akun.objects.update_or_create(
            user=self.instance,
            defaults={
                "role": form.cleaned_data["role"],
                "must_change_password": form.cleaned_data["must_change_password"],
            },
        )
        self.instance.akun = akun
        return akun


class AkunInline(admin.StackedInline):
    model = Akun
    formset = AkunInlineFormSet
    can_delete = False
    fields = ("role", "must_change_password")


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    inlines = [AkunInline]
    list_display = ("username", "get_full_name", "get_role", "is_active", "is_staff")
    list_filter = ("akun__role", "is_active", "is_staff")

    @admin.display(description="Peran")
    def get_role(self, obj):
        return role_of(obj) or "-"


@admin.register(Akun)
class AkunAdmin(admin.ModelAdmin):
    list_display = ("user", "role", "must_change_password", "updated_at")
    list_filter = ("role", "must_change_password")
    search_fields = ("user__username",)


@admin.register(Prodi)
class ProdiAdmin(admin.ModelAdmin):
    list_display = ("kode", "nama", "jenjang", "is_active")
    list_filter = ("jenjang", "is_active")
    search_fields = ("kode", "nama")


@admin.register(Dosen)
class DosenAdmin(admin.ModelAdmin):
    list_display = ("nidn", "nama_lengkap", "prodi", "jafung", "status_label")
    list_filter = ("status", "prodi")
    search_fields = ("nidn", "nuptk", "nama_lengkap", "user__username")
    actions = ["export_excel"]

    @admin.display(description="Status", ordering="status")
    def status_label(self, obj):
        return status_badge(obj.status, obj.get_status_display())

    @admin.action(description="Ekspor dosen terpilih ke Excel")
    def export_excel(self, request, queryset):
        return exports.excel_response(exports.workbook_dosen(queryset.select_related("prodi")), "data_dosen.xlsx")


@admin.register(Mahasiswa)
class MahasiswaAdmin(admin.ModelAdmin):
    list_display = ("nim", "nama_lengkap", "prodi", "angkatan", "dosen_wali", "status_label")
    list_filter = ("status", "prodi", "angkatan")
    search_fields = ("nim", "nama_lengkap", "user__username")
    autocomplete_fields = ("dosen_wali",)
    actions = ["export_excel"]

    @admin.display(description="Status", ordering="status")
    def status_label(self, obj):
        return status_badge(obj.status, obj.get_status_display())

    @admin.action(description="Ekspor mahasiswa terpilih ke Excel")
    def export_excel(self, request, queryset):
        qs = queryset.select_related("prodi", "dosen_wali")
        return exports.excel_response(exports.workbook_mahasiswa(qs), "data_mahasiswa.xlsx")


@admin.register(MataKuliah)
class MataKuliahAdmin(admin.ModelAdmin):
    list_display = ("kode_mk", "nama_mk", "sks", "semester_ideal", "is_lintas_prodi", "is_active")
    list_filter = ("semester_ideal", "is_lintas_prodi", "is_active")
    search_fields = ("kode_mk", "nama_mk")


@admin.register(Semester)
class SemesterAdmin(admin.ModelAdmin):
    list_display = ("label", "is_active", "tanggal_mulai", "tanggal_selesai", "periode_krs_mulai", "periode_krs_selesai")
    list_filter = ("periode", "is_active")
    search_fields = ("tahun_akademik",)
    actions = ["aktifkan"]

    @admin.action(description="Jadikan semester aktif")
    def aktifkan(self, request, queryset):
        if queryset.count() != 1:
            self.message_user(request, "Pilih tepat satu semester untuk diaktifkan.", level=messages.ERROR)
            return
        semester = queryset.get()
        semester.aktifkan()
        self.message_user(request, f"Semester {semester.label} sekarang aktif.", level=messages.SUCCESS)


@admin.register(Ruangan)
class RuanganAdmin(admin.ModelAdmin):
    list_display = ("nama", "kapasitas", "is_active")
    list_filter = ("is_active",)
    search_fields = ("nama",)


class KelasMKFileInline(admin.TabularInline):
    model = KelasMKFile
    extra = 0
    fields = ("tipe", "nama_file", "file", "minggu_ke", "uploaded_by", "uploaded_at")
    readonly_fields = ("uploaded_at",)


@admin.register(KelasMataKuliah)
class KelasMataKuliahAdmin(admin.ModelAdmin):
    list_display = ("mata_kuliah", "semester", "dosen", "ruangan", "hari", "jam_mulai", "jam_selesai", "kuota_max")
    list_filter = ("semester", "hari", "ruangan")
    search_fields = ("mata_kuliah__kode_mk", "mata_kuliah__nama_mk", "dosen__nama_lengkap")
    inlines = [KelasMKFileInline]
    actions = ["finalisasi_nilai", "unlock_nilai"]

    @admin.action(description="Finalisasi nilai kelas terpilih")
    def finalisasi_nilai(self, request, queryset):
        berhasil = 0
        for kelas in queryset.select_related("mata_kuliah", "semester"):
            try:
                penilaian.finalisasi_nilai(kelas, request.user)
            except AkademikError as exc:
                self.message_user(request, f"{kelas.mata_kuliah.nama_mk}: {exc.message}", level=messages.WARNING)
            else:
                berhasil += 1
        if berhasil:
            self.message_user(request, f"Nilai {berhasil} kelas berhasil difinalisasi.", level=messages.SUCCESS)

    @admin.action(description="Buka kembali nilai kelas terpilih")
    def unlock_nilai(self, request, queryset):
        total = sum(penilaian.unlock_nilai(kelas) for kelas in queryset)
        self.message_user(request, f"{total} nilai dibuka kembali.", level=messages.SUCCESS)


class PaketKRSDetailInline(admin.TabularInline):
    model = PaketKRSDetail
    extra = 0
    autocomplete_fields = ("kelas_mk",)


@admin.register(PaketKRS)
class PaketKRSAdmin(admin.ModelAdmin):
    list_display = ("nama_paket", "prodi", "angkatan", "semester_paket", "semester", "total_sks")
    list_filter = ("prodi", "angkatan", "semester")
    search_fields = ("nama_paket",)
    readonly_fields = ("total_sks",)
    inlines = [PaketKRSDetailInline]

    def save_related(self, request, form, formsets, change):
        super().save_related(request, form, formsets, change)
        paket = form.instance
        paket.total_sks = paket.hitung_total_sks()
        paket.save(update_fields=["total_sks"])


class KRSDetailInline(admin.TabularInline):
    model = KRSDetail
    extra = 0
    autocomplete_fields = ("kelas_mk",)


@admin.register(KRS)
class KRSAdmin(admin.ModelAdmin):
    list_display = ("mahasiswa", "semester", "total_sks", "status_label", "tanggal_submit", "approved_by")
    list_filter = ("status", "semester", "mahasiswa__prodi")
    search_fields = ("mahasiswa__nim", "mahasiswa__nama_lengkap")
    readonly_fields = ("tanggal_submit", "tanggal_approval", "approved_by", "created_at", "updated_at")
    inlines = [KRSDetailInline]
    action_form = CatatanActionForm
    actions = ["setujui", "tolak", "export_excel"]

    @admin.display(description="Status", ordering="status")
    def status_label(self, obj):
        return status_badge(obj.status, obj.get_status_display())

    def _putuskan(self, request, queryset, keputusan, label):
        catatan = request.POST.get("catatan", "")
        berhasil = 0
        for krs in queryset.filter(status=KRS.STATUS_SUBMITTED).select_related("mahasiswa"):
            try:
                keputusan(krs, request.user, catatan)
            except AkademikError as exc:
                self.message_user(request, f"{krs.mahasiswa.nim}: {exc.message}", level=messages.ERROR)
                return
            berhasil += 1
        if berhasil:
            self.message_user(request, f"{berhasil} KRS berhasil {label}.", level=messages.SUCCESS)
        else:
            self.message_user(request, "Tidak ada KRS berstatus SUBMITTED yang dipilih.", level=messages.INFO)

    @admin.action(description="Setujui KRS terpilih")
    def setujui(self, request, queryset):
        self._putuskan(request, queryset, krs_service.approve_krs, "disetujui")

    @admin.action(description="Tolak KRS terpilih (isi catatan)")
    def tolak(self, request, queryset):
        self._putuskan(request, queryset, krs_service.reject_krs, "ditolak")

    @admin.action(description="Ekspor KRS terpilih ke Excel")
    def export_excel(self, request, queryset):
        qs = queryset.select_related("mahasiswa", "semester")
        return exports.excel_response(exports.workbook_krs(qs), "daftar_krs.xlsx")


@admin.register(Nilai)
class NilaiAdmin(admin.ModelAdmin):
    list_display = ("mahasiswa", "kelas_mk", "nilai_angka", "nilai_huruf", "bobot", "is_finalized")
    list_filter = ("is_finalized", "nilai_huruf", "semester")
    search_fields = ("mahasiswa__nim", "mahasiswa__nama_lengkap", "kelas_mk__mata_kuliah__kode_mk")
    readonly_fields = ("nilai_huruf", "bobot", "tanggal_input")


@admin.register(KHS)
class KHSAdmin(admin.ModelAdmin):
    list_display = ("mahasiswa", "semester", "ips", "ipk", "total_sks_semester", "total_sks_kumulatif")
    list_filter = ("semester",)
    search_fields = ("mahasiswa__nim", "mahasiswa__nama_lengkap")


class PresensiDetailInline(admin.TabularInline):
    model = PresensiDetail
    extra = 0
    fields = ("mahasiswa", "status", "keterangan")


@admin.register(Presensi)
class PresensiAdmin(admin.ModelAdmin):
    list_display = ("kelas_mk", "pertemuan", "tanggal", "materi")
    list_filter = ("kelas_mk__semester", "tanggal")
    search_fields = ("kelas_mk__mata_kuliah__nama_mk", "materi")
    inlines = [PresensiDetailInline]
