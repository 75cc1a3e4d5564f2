"""Django models for the academic records domain: master data, KRS, grades and attendance."""
from __future__ import annotations

import datetime

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator, RegexValidator
from django.db import models, transaction
from django.db.models import Q

from .grading import NILAI_HURUF_CHOICES, huruf_to_bobot, nilai_angka_to_huruf

User = get_user_model()

nim_validator = RegexValidator(r"^\d{10}$", "NIM harus terdiri dari 10 digit angka")
nidn_validator = RegexValidator(r"^\d{10}$", "NIDN harus terdiri dari 10 digit angka")
nuptk_validator = RegexValidator(r"^\d{16}$", "NUPTK harus terdiri dari 16 digit angka")
tahun_akademik_validator = RegexValidator(r"^\d{4}/\d{4}$", "Format tahun akademik harus YYYY/YYYY")


class Akun(models.Model):
    ROLE_ADMIN = "ADMIN"
    ROLE_DOSEN = "DOSEN"
    ROLE_MAHASISWA = "MAHASISWA"
    ROLE_KEUANGAN = "KEUANGAN"
    ROLE_CHOICES = [
        (ROLE_ADMIN, "Admin"),
        (ROLE_DOSEN, "Dosen"),
        (ROLE_MAHASISWA, "Mahasiswa"),
        (ROLE_KEUANGAN, "Keuangan"),
    ]

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="akun", verbose_name="Pengguna")
    role = models.CharField("Peran", max_length=20, choices=ROLE_CHOICES, default=ROLE_MAHASISWA)
    must_change_password = models.BooleanField("Wajib ganti password", default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Akun"
        verbose_name_plural = "Akun"

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return f"{self.user.username} ({self.role})"


def role_of(user) -> str | None:
    """Role of an authenticated user; superusers without an Akun count as admins."""
    if user is None or not user.is_authenticated:
        return None
    akun = getattr(user, "akun", None)
    if akun is not None:
        return akun.role
    if user.is_superuser:
        return Akun.ROLE_ADMIN
    return None


class Prodi(models.Model):
    kode = models.CharField("Kode Prodi", max_length=10, unique=True)
    nama = models.CharField("Nama Prodi", max_length=150)
    jenjang = models.CharField("Jenjang", max_length=10, default="S1")
    is_active = models.BooleanField("Aktif", default=True)

    class Meta:
        verbose_name = "Program Studi"
        verbose_name_plural = "Program Studi"
        ordering = ["kode"]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return f"{self.kode} - {self.nama}"


class Dosen(models.Model):
    STATUS_AKTIF = "AKTIF"
    STATUS_NON_AKTIF = "NON_AKTIF"
    STATUS_CHOICES = [
        (STATUS_AKTIF, "Aktif"),
        (STATUS_NON_AKTIF, "Non Aktif"),
    ]

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="dosen", verbose_name="Pengguna")
    nidn = models.CharField("NIDN", max_length=10, unique=True, validators=[nidn_validator])
    nuptk = models.CharField(
        "NUPTK", max_length=16, unique=True, null=True, blank=True, validators=[nuptk_validator]
    )
    nama_lengkap = models.CharField("Nama Lengkap", max_length=150)
    prodi = models.ForeignKey(
        Prodi,
        on_delete=models.PROTECT,
        related_name="daftar_dosen",
        verbose_name="Prodi",
        null=True,
        blank=True,
    )
    status = models.CharField("Status", max_length=20, choices=STATUS_CHOICES, default=STATUS_AKTIF)
    posisi = models.CharField("Posisi", max_length=100, blank=True)
    jafung = models.CharField("Jabatan Fungsional", max_length=100, blank=True)
    alumni = models.CharField("Alumni", max_length=150, blank=True)
    lama_mengajar = models.CharField("Lama Mengajar", max_length=50, blank=True)
    tempat_lahir = models.CharField("Tempat Lahir", max_length=100, blank=True)
    tanggal_lahir = models.DateField("Tanggal Lahir", null=True, blank=True)

    class Meta:
        verbose_name = "Dosen"
        verbose_name_plural = "Dosen"
        ordering = ["nama_lengkap"]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return f"{self.nama_lengkap} ({self.nidn})"


class Mahasiswa(models.Model):
    STATUS_AKTIF = "AKTIF"
    STATUS_NON_AKTIF = "NON_AKTIF"
    STATUS_CUTI = "CUTI"
    STATUS_LULUS = "LULUS"
    STATUS_DO = "DO"
    STATUS_CHOICES = [
        (STATUS_AKTIF, "Aktif"),
        (STATUS_NON_AKTIF, "Non Aktif"),
        (STATUS_CUTI, "Cuti"),
        (STATUS_LULUS, "Lulus"),
        (STATUS_DO, "Drop Out"),
    ]
    JENIS_KELAMIN_CHOICES = [
        ("L", "Laki-laki"),
        ("P", "Perempuan"),
    ]

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="mahasiswa", verbose_name="Pengguna")
    nim = models.CharField("NIM", max_length=10, unique=True, validators=[nim_validator])
    nama_lengkap = models.CharField("Nama Lengkap", max_length=150)
    tempat_tanggal_lahir = models.CharField("Tempat, Tanggal Lahir", max_length=150, blank=True)
    jenis_kelamin = models.CharField("Jenis Kelamin", max_length=1, choices=JENIS_KELAMIN_CHOICES, blank=True)
    alamat = models.TextField("Alamat", blank=True)
    prodi = models.ForeignKey(Prodi, on_delete=models.PROTECT, related_name="daftar_mahasiswa", verbose_name="Prodi")
    angkatan = models.PositiveSmallIntegerField("Angkatan")
    dosen_wali = models.ForeignKey(
        Dosen,
        on_delete=models.SET_NULL,
        related_name="mahasiswa_bimbingan",
        verbose_name="Dosen Wali",
        null=True,
        blank=True,
    )
    status = models.CharField("Status", max_length=20, choices=STATUS_CHOICES, default=STATUS_AKTIF)

    class Meta:
        verbose_name = "Mahasiswa"
        verbose_name_plural = "Mahasiswa"
        ordering = ["nim"]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return f"{self.nim} - {self.nama_lengkap}"


class MataKuliah(models.Model):
    kode_mk = models.CharField("Kode MK", max_length=20, unique=True)
    nama_mk = models.CharField("Nama Mata Kuliah", max_length=150)
    sks = models.PositiveSmallIntegerField("SKS", validators=[MinValueValidator(1), MaxValueValidator(6)])
    semester_ideal = models.PositiveSmallIntegerField(
        "Semester Ideal", validators=[MinValueValidator(1), MaxValueValidator(8)]
    )
    is_lintas_prodi = models.BooleanField("Lintas Prodi", default=False)
    is_active = models.BooleanField("Aktif", default=True)
    deskripsi = models.TextField("Deskripsi", blank=True)

    class Meta:
        verbose_name = "Mata Kuliah"
        verbose_name_plural = "Mata Kuliah"
        ordering = ["kode_mk"]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return f"{self.kode_mk} - {self.nama_mk}"


class Semester(models.Model):
    PERIODE_GANJIL = "GANJIL"
    PERIODE_GENAP = "GENAP"
    PERIODE_CHOICES = [
        (PERIODE_GANJIL, "Ganjil"),
        (PERIODE_GENAP, "Genap"),
    ]

    tahun_akademik = models.CharField("Tahun Akademik", max_length=9, validators=[tahun_akademik_validator])
    periode = models.CharField("Periode", max_length=10, choices=PERIODE_CHOICES)
    is_active = models.BooleanField("Semester Aktif", default=False)
    tanggal_mulai = models.DateField("Tanggal Mulai")
    tanggal_selesai = models.DateField("Tanggal Selesai")
    periode_krs_mulai = models.DateTimeField("Periode KRS Mulai")
    periode_krs_selesai = models.DateTimeField("Periode KRS Selesai")
    periode_perbaikan_krs_mulai = models.DateTimeField("Perbaikan KRS Mulai", null=True, blank=True)
    periode_perbaikan_krs_selesai = models.DateTimeField("Perbaikan KRS Selesai", null=True, blank=True)

    class Meta:
        verbose_name = "Semester"
        verbose_name_plural = "Semester"
        unique_together = [("tahun_akademik", "periode")]
        # "GANJIL" < "GENAP", sehingga urutan alfabet sama dengan urutan kronologis
        ordering = ["-tahun_akademik", "-periode"]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return self.label

    @property
    def label(self) -> str:
        return f"{self.tahun_akademik} {self.get_periode_display()}"

    def clean(self):
        super().clean()
        errors = {}
        if self.tanggal_mulai and self.tanggal_selesai and self.tanggal_selesai <= self.tanggal_mulai:
            errors["tanggal_selesai"] = "Tanggal selesai harus setelah tanggal mulai"
        if (
            self.periode_krs_mulai
            and self.periode_krs_selesai
            and self.periode_krs_selesai <= self.periode_krs_mulai
        ):
            errors["periode_krs_selesai"] = "Periode KRS selesai harus setelah periode mulai"
        perbaikan = (self.periode_perbaikan_krs_mulai, self.periode_perbaikan_krs_selesai)
        if any(perbaikan) and not all(perbaikan):
            errors["periode_perbaikan_krs_selesai"] = "Periode perbaikan KRS harus diisi lengkap"
        elif all(perbaikan) and perbaikan[1] <= perbaikan[0]:
            errors["periode_perbaikan_krs_selesai"] = "Periode perbaikan KRS selesai harus setelah periode mulai"
        if errors:
            raise ValidationError(errors)

    def unique_error_message(self, model_class, unique_check):
        if tuple(unique_check) == ("tahun_akademik", "periode"):
            return ValidationError("Semester ini sudah ada", code="unique_together")
        return super().unique_error_message(model_class, unique_check)

    @classmethod
    def aktif(cls) -> "Semester | None":
        return cls.objects.filter(is_active=True).first()

    def semester_sampai(self):
        """Semesters ordered at or before this one, this one included."""
        return Semester.objects.filter(
            Q(tahun_akademik__lt=self.tahun_akademik)
            | Q(tahun_akademik=self.tahun_akademik, periode__lte=self.periode)
        )

    def semester_sebelum(self):
        return self.semester_sampai().exclude(pk=self.pk)

    def dalam_periode_krs(self, waktu: datetime.datetime) -> bool:
        return self.periode_krs_mulai <= waktu <= self.periode_krs_selesai

    def dalam_periode_perbaikan(self, waktu: datetime.datetime) -> bool:
        if not (self.periode_perbaikan_krs_mulai and self.periode_perbaikan_krs_selesai):
            return False
        return self.periode_perbaikan_krs_mulai <= waktu <= self.periode_perbaikan_krs_selesai

    def aktifkan(self) -> None:
        """Make this the only active semester."""
        with transaction.atomic():
            Semester.objects.exclude(pk=self.pk).filter(is_active=True).update(is_active=False)
            self.is_active = True
            self.save(update_fields=["is_active"])


class Ruangan(models.Model):
    nama = models.CharField("Nama Ruangan", max_length=50, unique=True)
    kapasitas = models.PositiveSmallIntegerField("Kapasitas", default=40)
    is_active = models.BooleanField("Aktif", default=True)

    class Meta:
        verbose_name = "Ruangan"
        verbose_name_plural = "Ruangan"
        ordering = ["nama"]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return self.nama


class KelasMataKuliah(models.Model):
    HARI_CHOICES = [
        ("Senin", "Senin"),
        ("Selasa", "Selasa"),
        ("Rabu", "Rabu"),
        ("Kamis", "Kamis"),
        ("Jumat", "Jumat"),
        ("Sabtu", "Sabtu"),
    ]
    URUTAN_HARI = {hari: index for index, (hari, _) in enumerate(HARI_CHOICES)}

    mata_kuliah = models.ForeignKey(MataKuliah, on_delete=models.PROTECT, related_name="kelas", verbose_name="Mata Kuliah")
    semester = models.ForeignKey(Semester, on_delete=models.PROTECT, related_name="kelas", verbose_name="Semester")
    dosen = models.ForeignKey(Dosen, on_delete=models.PROTECT, related_name="kelas_mengajar", verbose_name="Dosen Pengampu")
    ruangan = models.ForeignKey(Ruangan, on_delete=models.PROTECT, related_name="kelas", verbose_name="Ruangan")
    hari = models.CharField("Hari", max_length=10, choices=HARI_CHOICES)
    jam_mulai = models.TimeField("Jam Mulai")
    jam_selesai = models.TimeField("Jam Selesai")
    kuota_max = models.PositiveSmallIntegerField("Kuota Maksimal", default=30)
    keterangan = models.CharField("Keterangan", max_length=255, blank=True)

    class Meta:
        verbose_name = "Kelas Mata Kuliah"
        verbose_name_plural = "Kelas Mata Kuliah"
        ordering = ["mata_kuliah__kode_mk", "id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(jam_selesai__gt=models.F("jam_mulai")),
                name="kelas_jam_selesai_setelah_mulai",
            )
        ]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return f"{self.mata_kuliah.nama_mk} ({self.jadwal_label})"

    @property
    def jadwal_label(self) -> str:
        return f"{self.hari} {self.jam_mulai:%H:%M}-{self.jam_selesai:%H:%M}"

    def clean(self):
        super().clean()
        if self.jam_mulai and self.jam_selesai and self.jam_selesai <= self.jam_mulai:
            raise ValidationError({"jam_selesai": "Jam selesai harus setelah jam mulai"})
        if not (self.semester_id and self.hari and self.jam_mulai and self.jam_selesai):
            return

        overlapping = (
            KelasMataKuliah.objects.filter(
                semester_id=self.semester_id,
                hari=self.hari,
                jam_mulai__lt=self.jam_selesai,
                jam_selesai__gt=self.jam_mulai,
            )
            .exclude(pk=self.pk)
            .select_related("mata_kuliah")
        )
        if self.ruangan_id:
            bentrok = overlapping.filter(ruangan_id=self.ruangan_id).first()
            if bentrok:
                raise ValidationError(
                    f"Ruangan sudah digunakan pada waktu yang sama ({bentrok.mata_kuliah.nama_mk})"
                )
        if self.dosen_id:
            bentrok = overlapping.filter(dosen_id=self.dosen_id).first()
            if bentrok:
                raise ValidationError(
                    f"Dosen sudah mengajar kelas lain pada waktu yang sama ({bentrok.mata_kuliah.nama_mk})"
                )

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    def jumlah_terdaftar(self) -> int:
        """Students holding this class in a SUBMITTED or APPROVED KRS."""
        return KRSDetail.objects.filter(
            kelas_mk=self,
            krs__status__in=[KRS.STATUS_SUBMITTED, KRS.STATUS_APPROVED],
        ).count()

    def mahasiswa_terdaftar(self):
        """Students whose APPROVED KRS for the class's semester contains this class."""
        return Mahasiswa.objects.filter(
            krs__status=KRS.STATUS_APPROVED,
            krs__semester_id=self.semester_id,
            krs__detail__kelas_mk=self,
        ).distinct()


class KelasMKFile(models.Model):
    TIPE_RPS = "RPS"
    TIPE_RPP = "RPP"
    TIPE_MATERI = "MATERI"
    TIPE_CHOICES = [
        (TIPE_RPS, "Rencana Pembelajaran Semester"),
        (TIPE_RPP, "Rencana Pelaksanaan Pembelajaran"),
        (TIPE_MATERI, "Materi"),
    ]

    kelas_mk = models.ForeignKey(KelasMataKuliah, on_delete=models.CASCADE, related_name="files", verbose_name="Kelas")
    tipe = models.CharField("Tipe File", max_length=10, choices=TIPE_CHOICES)
    nama_file = models.CharField("Nama File", max_length=255)
    file = models.FileField("File", upload_to="kelas-mk/%Y/%m/")
    minggu_ke = models.PositiveSmallIntegerField(
        "Minggu Ke", null=True, blank=True, validators=[MinValueValidator(1), MaxValueValidator(16)]
    )
    keterangan = models.CharField("Keterangan", max_length=255, blank=True)
    uploaded_by = models.ForeignKey(
        Dosen, on_delete=models.SET_NULL, related_name="files", verbose_name="Diunggah oleh", null=True, blank=True
    )
    uploaded_at = models.DateTimeField("Diunggah pada", auto_now_add=True)

    class Meta:
        verbose_name = "File Kelas"
        verbose_name_plural = "File Kelas"
        ordering = ["kelas_mk", "tipe", "minggu_ke", "-uploaded_at"]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return f"{self.tipe} - {self.nama_file}"

    def clean(self):
        super().clean()
        if self.tipe == self.TIPE_MATERI and not self.minggu_ke:
            raise ValidationError({"minggu_ke": "Minggu ke wajib diisi untuk MATERI"})
        if self.tipe in (self.TIPE_RPS, self.TIPE_RPP) and self.kelas_mk_id:
            duplikat = KelasMKFile.objects.filter(kelas_mk_id=self.kelas_mk_id, tipe=self.tipe).exclude(pk=self.pk)
            if duplikat.exists():
                raise ValidationError(
                    f"{self.tipe} sudah ada untuk kelas ini. Hapus file lama terlebih dahulu."
                )

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)


class PaketKRS(models.Model):
    nama_paket = models.CharField("Nama Paket", max_length=150)
    angkatan = models.PositiveSmallIntegerField("Angkatan")
    prodi = models.ForeignKey(Prodi, on_delete=models.PROTECT, related_name="paket_krs", verbose_name="Prodi")
    semester_paket = models.PositiveSmallIntegerField(
        "Semester Ke", validators=[MinValueValidator(1), MaxValueValidator(8)]
    )
    semester = models.ForeignKey(Semester, on_delete=models.PROTECT, related_name="paket_krs", verbose_name="Semester")
    total_sks = models.PositiveSmallIntegerField("Total SKS", default=0)
    keterangan = models.TextField("Keterangan", blank=True)
    created_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, related_name="paket_krs_dibuat", verbose_name="Dibuat oleh", null=True, blank=True
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Paket KRS"
        verbose_name_plural = "Paket KRS"
        ordering = ["-semester__tahun_akademik", "prodi__kode", "angkatan"]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return self.nama_paket

    def daftar_kelas(self) -> list[KelasMataKuliah]:
        return [
            detail.kelas_mk
            for detail in self.detail.select_related("kelas_mk__mata_kuliah", "kelas_mk__dosen", "kelas_mk__ruangan")
        ]

    def hitung_total_sks(self) -> int:
        return sum(kelas.mata_kuliah.sks for kelas in self.daftar_kelas())


class PaketKRSDetail(models.Model):
    paket = models.ForeignKey(PaketKRS, on_delete=models.CASCADE, related_name="detail", verbose_name="Paket")
    kelas_mk = models.ForeignKey(
        KelasMataKuliah, on_delete=models.CASCADE, related_name="paket_detail", verbose_name="Kelas"
    )

    class Meta:
        verbose_name = "Isi Paket KRS"
        verbose_name_plural = "Isi Paket KRS"
        unique_together = [("paket", "kelas_mk")]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return f"{self.paket} / {self.kelas_mk}"


class KRS(models.Model):
    STATUS_DRAFT = "DRAFT"
    STATUS_SUBMITTED = "SUBMITTED"
    STATUS_APPROVED = "APPROVED"
    STATUS_REJECTED = "REJECTED"
    STATUS_CHOICES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_SUBMITTED, "Diajukan"),
        (STATUS_APPROVED, "Disetujui"),
        (STATUS_REJECTED, "Ditolak"),
    ]

    mahasiswa = models.ForeignKey(Mahasiswa, on_delete=models.CASCADE, related_name="krs", verbose_name="Mahasiswa")
    semester = models.ForeignKey(Semester, on_delete=models.PROTECT, related_name="krs", verbose_name="Semester")
    paket_krs = models.ForeignKey(
        PaketKRS, on_delete=models.SET_NULL, related_name="krs", verbose_name="Paket KRS", null=True, blank=True
    )
    status = models.CharField("Status", max_length=20, choices=STATUS_CHOICES, default=STATUS_DRAFT)
    total_sks = models.PositiveSmallIntegerField("Total SKS", default=0)
    is_modified = models.BooleanField("Diubah dari paket", default=False)
    catatan_admin = models.TextField("Catatan", blank=True)
    tanggal_submit = models.DateTimeField("Tanggal Submit", null=True, blank=True)
    tanggal_approval = models.DateTimeField("Tanggal Persetujuan", null=True, blank=True)
    approved_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, related_name="krs_diverifikasi", verbose_name="Diverifikasi oleh", null=True, blank=True
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "KRS"
        verbose_name_plural = "KRS"
        unique_together = [("mahasiswa", "semester")]
        ordering = ["-updated_at"]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return f"KRS {self.mahasiswa.nim} {self.semester.label}"

    def unique_error_message(self, model_class, unique_check):
        if tuple(unique_check) == ("mahasiswa", "semester"):
            return ValidationError("KRS untuk semester ini sudah dibuat", code="unique_together")
        return super().unique_error_message(model_class, unique_check)

    def daftar_kelas(self) -> list[KelasMataKuliah]:
        return [
            detail.kelas_mk
            for detail in self.detail.select_related("kelas_mk__mata_kuliah", "kelas_mk__dosen", "kelas_mk__ruangan")
        ]

    def reset_approval(self) -> None:
        self.catatan_admin = ""
        self.tanggal_approval = None
        self.approved_by = None


class KRSDetail(models.Model):
    krs = models.ForeignKey(KRS, on_delete=models.CASCADE, related_name="detail", verbose_name="KRS")
    kelas_mk = models.ForeignKey(
        KelasMataKuliah, on_delete=models.PROTECT, related_name="krs_detail", verbose_name="Kelas"
    )

    class Meta:
        verbose_name = "Detail KRS"
        verbose_name_plural = "Detail KRS"
        unique_together = [("krs", "kelas_mk")]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return f"{self.krs} / {self.kelas_mk}"


class Nilai(models.Model):
    mahasiswa = models.ForeignKey(Mahasiswa, on_delete=models.CASCADE, related_name="nilai", verbose_name="Mahasiswa")
    kelas_mk = models.ForeignKey(KelasMataKuliah, on_delete=models.PROTECT, related_name="nilai", verbose_name="Kelas")
    semester = models.ForeignKey(Semester, on_delete=models.PROTECT, related_name="nilai", verbose_name="Semester")
    nilai_angka = models.DecimalField(
        "Nilai Angka",
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    nilai_huruf = models.CharField("Nilai Huruf", max_length=2, choices=NILAI_HURUF_CHOICES, blank=True)
    bobot = models.DecimalField("Bobot", max_digits=3, decimal_places=2, null=True, blank=True)
    is_finalized = models.BooleanField("Final", default=False)
    input_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, related_name="nilai_diinput", verbose_name="Diinput oleh", null=True, blank=True
    )
    tanggal_input = models.DateTimeField("Tanggal Input", auto_now=True)

    class Meta:
        verbose_name = "Nilai"
        verbose_name_plural = "Nilai"
        unique_together = [("mahasiswa", "kelas_mk")]
        ordering = ["kelas_mk", "mahasiswa__nim"]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return f"{self.mahasiswa.nim} {self.kelas_mk.mata_kuliah.kode_mk}: {self.nilai_huruf}"

    def save(self, *args, **kwargs):
        if self.semester_id is None and self.kelas_mk_id:
            self.semester_id = self.kelas_mk.semester_id
        self.nilai_huruf = nilai_angka_to_huruf(self.nilai_angka)
        self.bobot = huruf_to_bobot(self.nilai_huruf)
        super().save(*args, **kwargs)


class KHS(models.Model):
    mahasiswa = models.ForeignKey(Mahasiswa, on_delete=models.CASCADE, related_name="khs", verbose_name="Mahasiswa")
    semester = models.ForeignKey(Semester, on_delete=models.PROTECT, related_name="khs", verbose_name="Semester")
    ips = models.DecimalField("IPS", max_digits=3, decimal_places=2, default=0)
    ipk = models.DecimalField("IPK", max_digits=3, decimal_places=2, default=0)
    total_sks_semester = models.PositiveSmallIntegerField("SKS Semester", default=0)
    total_sks_kumulatif = models.PositiveSmallIntegerField("SKS Kumulatif", default=0)
    tanggal_generate = models.DateTimeField("Tanggal Generate", auto_now=True)

    class Meta:
        verbose_name = "KHS"
        verbose_name_plural = "KHS"
        unique_together = [("mahasiswa", "semester")]
        ordering = ["mahasiswa__nim", "semester__tahun_akademik", "semester__periode"]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return f"KHS {self.mahasiswa.nim} {self.semester.label}"


class Presensi(models.Model):
    kelas_mk = models.ForeignKey(KelasMataKuliah, on_delete=models.CASCADE, related_name="presensi", verbose_name="Kelas")
    pertemuan = models.PositiveSmallIntegerField(
        "Pertemuan Ke", validators=[MinValueValidator(1), MaxValueValidator(16)]
    )
    tanggal = models.DateField("Tanggal")
    materi = models.CharField("Materi", max_length=255, blank=True)
    catatan = models.TextField("Catatan", blank=True)
    created_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, related_name="presensi_dibuat", verbose_name="Dibuat oleh", null=True, blank=True
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Presensi"
        verbose_name_plural = "Presensi"
        unique_together = [("kelas_mk", "pertemuan")]
        ordering = ["kelas_mk", "pertemuan"]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return f"{self.kelas_mk} - Pertemuan {self.pertemuan}"

    def unique_error_message(self, model_class, unique_check):
        if tuple(unique_check) == ("kelas_mk", "pertemuan"):
            return ValidationError(f"Pertemuan {self.pertemuan} sudah ada untuk kelas ini", code="unique_together")
        return super().unique_error_message(model_class, unique_check)


class PresensiDetail(models.Model):
    STATUS_HADIR = "HADIR"
    STATUS_TIDAK_HADIR = "TIDAK_HADIR"
    STATUS_IZIN = "IZIN"
    STATUS_SAKIT = "SAKIT"
    STATUS_ALPHA = "ALPHA"
    STATUS_CHOICES = [
        (STATUS_HADIR, "Hadir"),
        (STATUS_TIDAK_HADIR, "Tidak Hadir"),
        (STATUS_IZIN, "Izin"),
        (STATUS_SAKIT, "Sakit"),
        (STATUS_ALPHA, "Alpha"),
    ]

    presensi = models.ForeignKey(Presensi, on_delete=models.CASCADE, related_name="detail", verbose_name="Presensi")
    mahasiswa = models.ForeignKey(
        Mahasiswa, on_delete=models.CASCADE, related_name="presensi_detail", verbose_name="Mahasiswa"
    )
    status = models.CharField("Status", max_length=20, choices=STATUS_CHOICES, default=STATUS_ALPHA)
    keterangan = models.CharField("Keterangan", max_length=255, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Detail Presensi"
        verbose_name_plural = "Detail Presensi"
        unique_together = [("presensi", "mahasiswa")]
        ordering = ["presensi", "mahasiswa__nim"]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return f"{self.mahasiswa.nim}: {self.status}"
