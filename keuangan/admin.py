"""Admin configuration for payments."""
from django.contrib import admin, messages

from akademik.exceptions import AkademikError
from akademik.exports import excel_response
from akademik.forms import CatatanActionForm
from akademik.status import status_badge

from . import pembayaran as pembayaran_service
from .exports import workbook_pembayaran
from .models import Pembayaran


@admin.register(Pembayaran)
class PembayaranAdmin(admin.ModelAdmin):
    list_display = ("mahasiswa", "jenis", "semester", "bulan_pembayaran", "nominal", "status_label", "uploaded_at")
    list_filter = ("status", "jenis", "semester")
    search_fields = ("mahasiswa__nim", "mahasiswa__nama_lengkap")
    readonly_fields = ("uploaded_at", "verified_at", "verified_by")
    action_form = CatatanActionForm
    actions = ["setujui", "tolak", "export_excel"]

    @admin.display(description="Status", ordering="status")
    def status_label(self, obj):
        return status_badge(obj.status, obj.get_status_display())

    def _verifikasi(self, request, queryset, approve: bool):
        catatan = request.POST.get("catatan", "")
        berhasil = 0
        for pembayaran in queryset.filter(status=Pembayaran.STATUS_PENDING):
            try:
                pembayaran_service.verifikasi(pembayaran, request.user, approve, catatan)
            except AkademikError as exc:
                self.message_user(request, exc.message, level=messages.ERROR)
                return
            berhasil += 1
        label = "disetujui" if approve else "ditolak"
        self.message_user(request, f"{berhasil} pembayaran {label}.", level=messages.SUCCESS)

    @admin.action(description="Setujui pembayaran terpilih")
    def setujui(self, request, queryset):
        self._verifikasi(request, queryset, True)

    @admin.action(description="Tolak pembayaran terpilih (isi catatan)")
    def tolak(self, request, queryset):
        self._verifikasi(request, queryset, False)

    @admin.action(description="Ekspor pembayaran terpilih ke Excel")
    def export_excel(self, request, queryset):
        qs = queryset.select_related("mahasiswa", "semester")
        return excel_response(workbook_pembayaran(qs), "data_pembayaran.xlsx")
