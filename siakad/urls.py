"""URL configuration for the siakad project."""
from django.contrib import admin
from django.urls import include, path

from akademik import views
from keuangan import views as keuangan_views

auth_patterns = [
    path("csrf/", views.CsrfView.as_view(), name="auth_csrf"),
    path("login/", views.LoginView.as_view(), name="auth_login"),
    path("logout/", views.LogoutView.as_view(), name="auth_logout"),
    path("me/", views.MeView.as_view(), name="auth_me"),
    path("change-password/", views.ChangePasswordView.as_view(), name="auth_change_password"),
    path("change-username/", views.ChangeUsernameView.as_view(), name="auth_change_username"),
    path("register/", views.RegisterView.as_view(), name="auth_register"),
]

master_patterns = [
    path("prodi/", views.ProdiListView.as_view(), name="prodi_list"),
    path("prodi/<int:pk>/", views.ProdiDetailView.as_view(), name="prodi_detail"),
    path("dosen/", views.DosenListView.as_view(), name="dosen_list"),
    path("dosen/<int:pk>/", views.DosenDetailView.as_view(), name="dosen_detail"),
    path("mahasiswa/", views.MahasiswaListView.as_view(), name="mahasiswa_list"),
    path("mahasiswa/<int:pk>/", views.MahasiswaDetailView.as_view(), name="mahasiswa_detail"),
    path("mahasiswa/<int:pk>/krs/", views.MahasiswaKRSView.as_view(), name="mahasiswa_krs"),
    path("mahasiswa/<int:pk>/khs/", views.MahasiswaKHSView.as_view(), name="mahasiswa_khs"),
    path("mata-kuliah/", views.MataKuliahListView.as_view(), name="mata_kuliah_list"),
    path("mata-kuliah/<int:pk>/", views.MataKuliahDetailView.as_view(), name="mata_kuliah_detail"),
    path("semester/", views.SemesterListView.as_view(), name="semester_list"),
    path("semester/active/", views.SemesterAktifView.as_view(), name="semester_active"),
    path("semester/<int:pk>/", views.SemesterDetailView.as_view(), name="semester_detail"),
    path("semester/<int:pk>/activate/", views.SemesterActivateView.as_view(), name="semester_activate"),
    path("ruangan/", views.RuanganListView.as_view(), name="ruangan_list"),
    path("ruangan/<int:pk>/", views.RuanganDetailView.as_view(), name="ruangan_detail"),
    path("kelas-mk/", views.KelasListView.as_view(), name="kelas_list"),
    path("kelas-mk/<int:pk>/", views.KelasDetailView.as_view(), name="kelas_detail"),
    path("kelas-mk/<int:pk>/mahasiswa/", views.KelasMahasiswaView.as_view(), name="kelas_mahasiswa"),
    path("kelas-mk/<int:kelas_id>/files/", views.KelasFileListView.as_view(), name="kelas_files"),
    path("kelas-files/<int:pk>/", views.KelasFileDetailView.as_view(), name="kelas_file_detail"),
    path("kelas-files/<int:pk>/download/", views.KelasFileDownloadView.as_view(), name="kelas_file_download"),
    path("paket-krs/", views.PaketListView.as_view(), name="paket_list"),
    path("paket-krs/<int:pk>/", views.PaketDetailView.as_view(), name="paket_detail"),
    path("paket-krs/<int:pk>/kelas/", views.PaketKelasView.as_view(), name="paket_kelas_add"),
    path("paket-krs/<int:pk>/kelas/<int:kelas_id>/", views.PaketKelasView.as_view(), name="paket_kelas_remove"),
]

krs_patterns = [
    path("", views.KRSListView.as_view(), name="krs_list"),
    path("kelas-tersedia/", views.KelasTersediaView.as_view(), name="krs_kelas_tersedia"),
    path("paket-tersedia/", views.PaketTersediaView.as_view(), name="krs_paket_tersedia"),
    path("<int:pk>/", views.KRSDetailView.as_view(), name="krs_detail"),
    path("<int:pk>/submit/", views.KRSSubmitView.as_view(), name="krs_submit"),
    path("<int:pk>/approve/", views.KRSApproveView.as_view(), name="krs_approve"),
    path("<int:pk>/reject/", views.KRSRejectView.as_view(), name="krs_reject"),
    path("<int:pk>/pdf/", views.KRSPdfView.as_view(), name="krs_pdf"),
]

nilai_patterns = [
    path("nilai/kelas/<int:kelas_id>/", views.NilaiKelasView.as_view(), name="nilai_kelas"),
    path("nilai/kelas/<int:kelas_id>/finalize/", views.NilaiFinalizeView.as_view(), name="nilai_finalize"),
    path("nilai/kelas/<int:kelas_id>/unlock/", views.NilaiUnlockView.as_view(), name="nilai_unlock"),
    path("khs/", views.KHSListView.as_view(), name="khs_list"),
    path("khs/generate/", views.KHSGenerateView.as_view(), name="khs_generate"),
    path("khs/<int:pk>/", views.KHSDetailView.as_view(), name="khs_detail"),
    path("khs/<int:pk>/pdf/", views.KHSPdfView.as_view(), name="khs_pdf"),
    path("transkrip/<int:mahasiswa_id>/", views.TranskripView.as_view(), name="transkrip"),
    path("transkrip/<int:mahasiswa_id>/pdf/", views.TranskripPdfView.as_view(), name="transkrip_pdf"),
]

presensi_patterns = [
    path("kelas/<int:kelas_id>/", views.PresensiKelasView.as_view(), name="presensi_kelas"),
    path("<int:pk>/", views.PresensiDetailView.as_view(), name="presensi_detail"),
    path("dosen/kelas/", views.DosenKelasSayaView.as_view(), name="presensi_dosen_kelas"),
    path("mahasiswa/kelas/", views.MahasiswaKelasSayaView.as_view(), name="presensi_mahasiswa_kelas"),
    path(
        "statistik/mahasiswa/<int:mahasiswa_id>/kelas/<int:kelas_id>/",
        views.StatistikMahasiswaView.as_view(),
        name="presensi_statistik_mahasiswa",
    ),
    path("statistik/kelas/<int:kelas_id>/", views.StatistikKelasView.as_view(), name="presensi_statistik_kelas"),
]

pembayaran_patterns = [
    path("", keuangan_views.PembayaranListView.as_view(), name="pembayaran_list"),
    path("riwayat/", keuangan_views.RiwayatPembayaranView.as_view(), name="pembayaran_riwayat"),
    path("statistik/", keuangan_views.StatistikPembayaranView.as_view(), name="pembayaran_statistik"),
    path("laporan/pdf/", keuangan_views.LaporanPembayaranPdfView.as_view(), name="pembayaran_laporan_pdf"),
    path("<int:pk>/", keuangan_views.PembayaranDetailView.as_view(), name="pembayaran_detail"),
    path("<int:pk>/approve/", keuangan_views.PembayaranApproveView.as_view(), name="pembayaran_approve"),
    path("<int:pk>/reject/", keuangan_views.PembayaranRejectView.as_view(), name="pembayaran_reject"),
    path("<int:pk>/bukti/", keuangan_views.BuktiPembayaranView.as_view(), name="pembayaran_bukti"),
]

dashboard_patterns = [
    path("admin/", views.AdminDashboardView.as_view(), name="dashboard_admin"),
    path("dosen/", views.DosenDashboardView.as_view(), name="dashboard_dosen"),
    path("mahasiswa/", views.MahasiswaDashboardView.as_view(), name="dashboard_mahasiswa"),
    path("keuangan/", keuangan_views.KeuanganDashboardView.as_view(), name="dashboard_keuangan"),
]

api_patterns = [
    path("auth/", include(auth_patterns)),
    path("", include(master_patterns)),
    path("krs/", include(krs_patterns)),
    path("", include(nilai_patterns)),
    path("presensi/", include(presensi_patterns)),
    path("pembayaran/", include(pembayaran_patterns)),
    path("dashboard/", include(dashboard_patterns)),
    path("jadwal/mahasiswa/csv/", views.JadwalMahasiswaCsvView.as_view(), name="jadwal_mahasiswa_csv"),
    path("jadwal/dosen/csv/", views.JadwalDosenCsvView.as_view(), name="jadwal_dosen_csv"),
]

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include(api_patterns)),
]
