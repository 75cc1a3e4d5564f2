import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Prodi",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("kode", models.CharField(max_length=10, unique=True, verbose_name="Kode Prodi")),
                ("nama", models.CharField(max_length=150, verbose_name="Nama Prodi")),
                ("jenjang", models.CharField(default="S1", max_length=10, verbose_name="Jenjang")),
                ("is_active", models.BooleanField(default=True, verbose_name="Aktif")),
            ],
            options={
                "verbose_name": "Program Studi",
                "verbose_name_plural": "Program Studi",
                "ordering": ["kode"],
            },
        ),
        migrations.CreateModel(
            name="MataKuliah",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("kode_mk", models.CharField(max_length=20, unique=True, verbose_name="Kode MK")),
                ("nama_mk", models.CharField(max_length=150, verbose_name="Nama Mata Kuliah")),
                (
                    "sks",
                    models.PositiveSmallIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(6),
                        ],
                        verbose_name="SKS",
                    ),
                ),
                (
                    "semester_ideal",
                    models.PositiveSmallIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(8),
                        ],
                        verbose_name="Semester Ideal",
                    ),
                ),
                ("is_lintas_prodi", models.BooleanField(default=False, verbose_name="Lintas Prodi")),
                ("is_active", models.BooleanField(default=True, verbose_name="Aktif")),
                ("deskripsi", models.TextField(blank=True, verbose_name="Deskripsi")),
            ],
            options={
                "verbose_name": "Mata Kuliah",
                "verbose_name_plural": "Mata Kuliah",
                "ordering": ["kode_mk"],
            },
        ),
        migrations.CreateModel(
            name="Ruangan",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("nama", models.CharField(max_length=50, unique=True, verbose_name="Nama Ruangan")),
                ("kapasitas", models.PositiveSmallIntegerField(default=40, verbose_name="Kapasitas")),
                ("is_active", models.BooleanField(default=True, verbose_name="Aktif")),
            ],
            options={
                "verbose_name": "Ruangan",
                "verbose_name_plural": "Ruangan",
                "ordering": ["nama"],
            },
        ),
        migrations.CreateModel(
            name="Semester",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "tahun_akademik",
                    models.CharField(
                        max_length=9,
                        validators=[
                            django.core.validators.RegexValidator(
                                "^\\d{4}/\\d{4}$", "Format tahun akademik harus YYYY/YYYY"
                            )
                        ],
                        verbose_name="Tahun Akademik",
                    ),
                ),
                (
                    "periode",
                    models.CharField(
                        choices=[("GANJIL", "Ganjil"), ("GENAP", "Genap")], max_length=10, verbose_name="Periode"
                    ),
                ),
                ("is_active", models.BooleanField(default=False, verbose_name="Semester Aktif")),
                ("tanggal_mulai", models.DateField(verbose_name="Tanggal Mulai")),
                ("tanggal_selesai", models.DateField(verbose_name="Tanggal Selesai")),
                ("periode_krs_mulai", models.DateTimeField(verbose_name="Periode KRS Mulai")),
                ("periode_krs_selesai", models.DateTimeField(verbose_name="Periode KRS Selesai")),
                (
                    "periode_perbaikan_krs_mulai",
                    models.DateTimeField(blank=True, null=True, verbose_name="Perbaikan KRS Mulai"),
                ),
                (
                    "periode_perbaikan_krs_selesai",
                    models.DateTimeField(blank=True, null=True, verbose_name="Perbaikan KRS Selesai"),
                ),
            ],
            options={
                "verbose_name": "Semester",
                "verbose_name_plural": "Semester",
                "ordering": ["-tahun_akademik", "-periode"],
                "unique_together": {("tahun_akademik", "periode")},
            },
        ),
        migrations.CreateModel(
            name="Akun",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "role",
                    models.CharField(
                        choices=[
                            ("ADMIN", "Admin"),
                            ("DOSEN", "Dosen"),
                            ("MAHASISWA", "Mahasiswa"),
                            ("KEUANGAN", "Keuangan"),
                        ],
                        default="MAHASISWA",
                        max_length=20,
                        verbose_name="Peran",
                    ),
                ),
                ("must_change_password", models.BooleanField(default=True, verbose_name="Wajib ganti password")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="akun",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Pengguna",
                    ),
                ),
            ],
            options={
                "verbose_name": "Akun",
                "verbose_name_plural": "Akun",
            },
        ),
        migrations.CreateModel(
            name="Dosen",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "nidn",
                    models.CharField(
                        max_length=10,
                        unique=True,
                        validators=[
                            django.core.validators.RegexValidator(
                                "^\\d{10}$", "NIDN harus terdiri dari 10 digit angka"
                            )
                        ],
                        verbose_name="NIDN",
                    ),
                ),
                (
                    "nuptk",
                    models.CharField(
                        blank=True,
                        max_length=16,
                        null=True,
                        unique=True,
                        validators=[
                            django.core.validators.RegexValidator(
                                "^\\d{16}$", "NUPTK harus terdiri dari 16 digit angka"
                            )
                        ],
                        verbose_name="NUPTK",
                    ),
                ),
                ("nama_lengkap", models.CharField(max_length=150, verbose_name="Nama Lengkap")),
                (
                    "status",
                    models.CharField(
                        choices=[("AKTIF", "Aktif"), ("NON_AKTIF", "Non Aktif")],
                        default="AKTIF",
                        max_length=20,
                        verbose_name="Status",
                    ),
                ),
                ("posisi", models.CharField(blank=True, max_length=100, verbose_name="Posisi")),
                ("jafung", models.CharField(blank=True, max_length=100, verbose_name="Jabatan Fungsional")),
                ("alumni", models.CharField(blank=True, max_length=150, verbose_name="Alumni")),
                ("lama_mengajar", models.CharField(blank=True, max_length=50, verbose_name="Lama Mengajar")),
                ("tempat_lahir", models.CharField(blank=True, max_length=100, verbose_name="Tempat Lahir")),
                ("tanggal_lahir", models.DateField(blank=True, null=True, verbose_name="Tanggal Lahir")),
                (
                    "prodi",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="daftar_dosen",
                        to="akademik.prodi",
                        verbose_name="Prodi",
                    ),
                ),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="dosen",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Pengguna",
                    ),
                ),
            ],
            options={
                "verbose_name": "Dosen",
                "verbose_name_plural": "Dosen",
                "ordering": ["nama_lengkap"],
            },
        ),
        migrations.CreateModel(
            name="Mahasiswa",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "nim",
                    models.CharField(
                        max_length=10,
                        unique=True,
                        validators=[
                            django.core.validators.RegexValidator(
                                "^\\d{10}$", "NIM harus terdiri dari 10 digit angka"
                            )
                        ],
                        verbose_name="NIM",
                    ),
                ),
                ("nama_lengkap", models.CharField(max_length=150, verbose_name="Nama Lengkap")),
                (
                    "tempat_tanggal_lahir",
                    models.CharField(blank=True, max_length=150, verbose_name="Tempat, Tanggal Lahir"),
                ),
                (
                    "jenis_kelamin",
                    models.CharField(
                        blank=True,
                        choices=[("L", "Laki-laki"), ("P", "Perempuan")],
                        max_length=1,
                        verbose_name="Jenis Kelamin",
                    ),
                ),
                ("alamat", models.TextField(blank=True, verbose_name="Alamat")),
                ("angkatan", models.PositiveSmallIntegerField(verbose_name="Angkatan")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("AKTIF", "Aktif"),
                            ("NON_AKTIF", "Non Aktif"),
                            ("CUTI", "Cuti"),
                            ("LULUS", "Lulus"),
                            ("DO", "Drop Out"),
                        ],
                        default="AKTIF",
                        max_length=20,
                        verbose_name="Status",
                    ),
                ),
                (
                    "dosen_wali",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="mahasiswa_bimbingan",
                        to="akademik.dosen",
                        verbose_name="Dosen Wali",
                    ),
                ),
                (
                    "prodi",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="daftar_mahasiswa",
                        to="akademik.prodi",
                        verbose_name="Prodi",
                    ),
                ),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="mahasiswa",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Pengguna",
                    ),
                ),
            ],
            options={
                "verbose_name": "Mahasiswa",
                "verbose_name_plural": "Mahasiswa",
                "ordering": ["nim"],
            },
        ),
        migrations.CreateModel(
            name="KelasMataKuliah",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "hari",
                    models.CharField(
                        choices=[
                            ("Senin", "Senin"),
                            ("Selasa", "Selasa"),
                            ("Rabu", "Rabu"),
                            ("Kamis", "Kamis"),
                            ("Jumat", "Jumat"),
                            ("Sabtu", "Sabtu"),
                        ],
                        max_length=10,
                        verbose_name="Hari",
                    ),
                ),
                ("jam_mulai", models.TimeField(verbose_name="Jam Mulai")),
                ("jam_selesai", models.TimeField(verbose_name="Jam Selesai")),
                ("kuota_max", models.PositiveSmallIntegerField(default=30, verbose_name="Kuota Maksimal")),
                ("keterangan", models.CharField(blank=True, max_length=255, verbose_name="Keterangan")),
                (
                    "dosen",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="kelas_mengajar",
                        to="akademik.dosen",
                        verbose_name="Dosen Pengampu",
                    ),
                ),
                (
                    "mata_kuliah",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="kelas",
                        to="akademik.matakuliah",
                        verbose_name="Mata Kuliah",
                    ),
                ),
                (
                    "ruangan",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="kelas",
                        to="akademik.ruangan",
                        verbose_name="Ruangan",
                    ),
                ),
                (
                    "semester",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="kelas",
                        to="akademik.semester",
                        verbose_name="Semester",
                    ),
                ),
            ],
            options={
                "verbose_name": "Kelas Mata Kuliah",
                "verbose_name_plural": "Kelas Mata Kuliah",
                "ordering": ["mata_kuliah__kode_mk", "id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("jam_selesai__gt", models.F("jam_mulai"))),
                        name="kelas_jam_selesai_setelah_mulai",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="KelasMKFile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "tipe",
                    models.CharField(
                        choices=[
                            ("RPS", "Rencana Pembelajaran Semester"),
                            ("RPP", "Rencana Pelaksanaan Pembelajaran"),
                            ("MATERI", "Materi"),
                        ],
                        max_length=10,
                        verbose_name="Tipe File",
                    ),
                ),
                ("nama_file", models.CharField(max_length=255, verbose_name="Nama File")),
                ("file", models.FileField(upload_to="kelas-mk/%Y/%m/", verbose_name="File")),
                (
                    "minggu_ke",
                    models.PositiveSmallIntegerField(
                        blank=True,
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(16),
                        ],
                        verbose_name="Minggu Ke",
                    ),
                ),
                ("keterangan", models.CharField(blank=True, max_length=255, verbose_name="Keterangan")),
                ("uploaded_at", models.DateTimeField(auto_now_add=True, verbose_name="Diunggah pada")),
                (
                    "kelas_mk",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="files",
                        to="akademik.kelasmatakuliah",
                        verbose_name="Kelas",
                    ),
                ),
                (
                    "uploaded_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="files",
                        to="akademik.dosen",
                        verbose_name="Diunggah oleh",
                    ),
                ),
            ],
            options={
                "verbose_name": "File Kelas",
                "verbose_name_plural": "File Kelas",
                "ordering": ["kelas_mk", "tipe", "minggu_ke", "-uploaded_at"],
            },
        ),
        migrations.CreateModel(
            name="PaketKRS",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("nama_paket", models.CharField(max_length=150, verbose_name="Nama Paket")),
                ("angkatan", models.PositiveSmallIntegerField(verbose_name="Angkatan")),
                (
                    "semester_paket",
                    models.PositiveSmallIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(8),
                        ],
                        verbose_name="Semester Ke",
                    ),
                ),
                ("total_sks", models.PositiveSmallIntegerField(default=0, verbose_name="Total SKS")),
                ("keterangan", models.TextField(blank=True, verbose_name="Keterangan")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="paket_krs_dibuat",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Dibuat oleh",
                    ),
                ),
                (
                    "prodi",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="paket_krs",
                        to="akademik.prodi",
                        verbose_name="Prodi",
                    ),
                ),
                (
                    "semester",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="paket_krs",
                        to="akademik.semester",
                        verbose_name="Semester",
                    ),
                ),
            ],
            options={
                "verbose_name": "Paket KRS",
                "verbose_name_plural": "Paket KRS",
                "ordering": ["-semester__tahun_akademik", "prodi__kode", "angkatan"],
            },
        ),
        migrations.CreateModel(
            name="PaketKRSDetail",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "kelas_mk",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="paket_detail",
                        to="akademik.kelasmatakuliah",
                        verbose_name="Kelas",
                    ),
                ),
                (
                    "paket",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="detail",
                        to="akademik.paketkrs",
                        verbose_name="Paket",
                    ),
                ),
            ],
            options={
                "verbose_name": "Isi Paket KRS",
                "verbose_name_plural": "Isi Paket KRS",
                "unique_together": {("paket", "kelas_mk")},
            },
        ),
        migrations.CreateModel(
            name="KRS",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("DRAFT", "Draft"),
                            ("SUBMITTED", "Diajukan"),
                            ("APPROVED", "Disetujui"),
                            ("REJECTED", "Ditolak"),
                        ],
                        default="DRAFT",
                        max_length=20,
                        verbose_name="Status",
                    ),
                ),
                ("total_sks", models.PositiveSmallIntegerField(default=0, verbose_name="Total SKS")),
                ("is_modified", models.BooleanField(default=False, verbose_name="Diubah dari paket")),
                ("catatan_admin", models.TextField(blank=True, verbose_name="Catatan")),
                ("tanggal_submit", models.DateTimeField(blank=True, null=True, verbose_name="Tanggal Submit")),
                ("tanggal_approval", models.DateTimeField(blank=True, null=True, verbose_name="Tanggal Persetujuan")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "approved_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="krs_diverifikasi",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Diverifikasi oleh",
                    ),
                ),
                (
                    "mahasiswa",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="krs",
                        to="akademik.mahasiswa",
                        verbose_name="Mahasiswa",
                    ),
                ),
                (
                    "paket_krs",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="krs",
                        to="akademik.paketkrs",
                        verbose_name="Paket KRS",
                    ),
                ),
                (
                    "semester",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="krs",
                        to="akademik.semester",
                        verbose_name="Semester",
                    ),
                ),
            ],
            options={
                "verbose_name": "KRS",
                "verbose_name_plural": "KRS",
                "ordering": ["-updated_at"],
                "unique_together": {("mahasiswa", "semester")},
            },
        ),
        migrations.CreateModel(
            name="KRSDetail",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "kelas_mk",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="krs_detail",
                        to="akademik.kelasmatakuliah",
                        verbose_name="Kelas",
                    ),
                ),
                (
                    "krs",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="detail",
                        to="akademik.krs",
                        verbose_name="KRS",
                    ),
                ),
            ],
            options={
                "verbose_name": "Detail KRS",
                "verbose_name_plural": "Detail KRS",
                "unique_together": {("krs", "kelas_mk")},
            },
        ),
        migrations.CreateModel(
            name="Nilai",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "nilai_angka",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(100),
                        ],
                        verbose_name="Nilai Angka",
                    ),
                ),
                (
                    "nilai_huruf",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("A", "A"),
                            ("AB", "AB"),
                            ("B", "B"),
                            ("BC", "BC"),
                            ("C", "C"),
                            ("CD", "CD"),
                            ("D", "D"),
                            ("E", "E"),
                        ],
                        max_length=2,
                        verbose_name="Nilai Huruf",
                    ),
                ),
                (
                    "bobot",
                    models.DecimalField(blank=True, decimal_places=2, max_digits=3, null=True, verbose_name="Bobot"),
                ),
                ("is_finalized", models.BooleanField(default=False, verbose_name="Final")),
                ("tanggal_input", models.DateTimeField(auto_now=True, verbose_name="Tanggal Input")),
                (
                    "input_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="nilai_diinput",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Diinput oleh",
                    ),
                ),
                (
                    "kelas_mk",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="nilai",
                        to="akademik.kelasmatakuliah",
                        verbose_name="Kelas",
                    ),
                ),
                (
                    "mahasiswa",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="nilai",
                        to="akademik.mahasiswa",
                        verbose_name="Mahasiswa",
                    ),
                ),
                (
                    "semester",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="nilai",
                        to="akademik.semester",
                        verbose_name="Semester",
                    ),
                ),
            ],
            options={
                "verbose_name": "Nilai",
                "verbose_name_plural": "Nilai",
                "ordering": ["kelas_mk", "mahasiswa__nim"],
                "unique_together": {("mahasiswa", "kelas_mk")},
            },
        ),
        migrations.CreateModel(
            name="KHS",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("ips", models.DecimalField(decimal_places=2, default=0, max_digits=3, verbose_name="IPS")),
                ("ipk", models.DecimalField(decimal_places=2, default=0, max_digits=3, verbose_name="IPK")),
                ("total_sks_semester", models.PositiveSmallIntegerField(default=0, verbose_name="SKS Semester")),
                ("total_sks_kumulatif", models.PositiveSmallIntegerField(default=0, verbose_name="SKS Kumulatif")),
                ("tanggal_generate", models.DateTimeField(auto_now=True, verbose_name="Tanggal Generate")),
                (
                    "mahasiswa",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="khs",
                        to="akademik.mahasiswa",
                        verbose_name="Mahasiswa",
                    ),
                ),
                (
                    "semester",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="khs",
                        to="akademik.semester",
                        verbose_name="Semester",
                    ),
                ),
            ],
            options={
                "verbose_name": "KHS",
                "verbose_name_plural": "KHS",
                "ordering": ["mahasiswa__nim", "semester__tahun_akademik", "semester__periode"],
                "unique_together": {("mahasiswa", "semester")},
            },
        ),
        migrations.CreateModel(
            name="Presensi",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "pertemuan",
                    models.PositiveSmallIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(16),
                        ],
                        verbose_name="Pertemuan Ke",
                    ),
                ),
                ("tanggal", models.DateField(verbose_name="Tanggal")),
                ("materi", models.CharField(blank=True, max_length=255, verbose_name="Materi")),
                ("catatan", models.TextField(blank=True, verbose_name="Catatan")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="presensi_dibuat",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Dibuat oleh",
                    ),
                ),
                (
                    "kelas_mk",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="presensi",
                        to="akademik.kelasmatakuliah",
                        verbose_name="Kelas",
                    ),
                ),
            ],
            options={
                "verbose_name": "Presensi",
                "verbose_name_plural": "Presensi",
                "ordering": ["kelas_mk", "pertemuan"],
                "unique_together": {("kelas_mk", "pertemuan")},
            },
        ),
        migrations.CreateModel(
            name="PresensiDetail",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("HADIR", "Hadir"),
                            ("TIDAK_HADIR", "Tidak Hadir"),
                            ("IZIN", "Izin"),
                            ("SAKIT", "Sakit"),
                            ("ALPHA", "Alpha"),
                        ],
                        default="ALPHA",
                        max_length=20,
                        verbose_name="Status",
                    ),
                ),
                ("keterangan", models.CharField(blank=True, max_length=255, verbose_name="Keterangan")),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "mahasiswa",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="presensi_detail",
                        to="akademik.mahasiswa",
                        verbose_name="Mahasiswa",
                    ),
                ),
                (
                    "presensi",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="detail",
                        to="akademik.presensi",
                        verbose_name="Presensi",
                    ),
                ),
            ],
            options={
                "verbose_name": "Detail Presensi",
                "verbose_name_plural": "Detail Presensi",
                "ordering": ["presensi", "mahasiswa__nim"],
                "unique_together": {("presensi", "mahasiswa")},
            },
        ),
    ]
