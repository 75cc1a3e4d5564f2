"""Payment records uploaded by students and verified by the finance office."""
from __future__ import annotations

from django.contrib.auth import get_user_model
from django.core.validators import MinValueValidator
from django.db import models

from akademik.models import Mahasiswa, Semester

User = get_user_model()


class Pembayaran(models.Model):
    JENIS_KRS = "KRS"
    JENIS_TENGAH_SEMESTER = "TENGAH_SEMESTER"
    JENIS_PPL = "PPL"
    JENIS_SKRIPSI = "SKRIPSI"
    JENIS_WISUDA = "WISUDA"
    JENIS_KOMITMEN_BULANAN = "KOMITMEN_BULANAN"
    JENIS_CHOICES = [
        (JENIS_KRS, "KRS"),
        (JENIS_TENGAH_SEMESTER, "Tengah Semester"),
        (JENIS_PPL, "PPL"),
        (JENIS_SKRIPSI, "Skripsi"),
        (JENIS_WISUDA, "Wisuda"),
        (JENIS_KOMITMEN_BULANAN, "Komitmen Bulanan"),
    ]
    # jenis yang selalu terikat pada satu semester
    JENIS_PER_SEMESTER = {JENIS_KRS, JENIS_TENGAH_SEMESTER}

    STATUS_PENDING = "PENDING"
    STATUS_APPROVED = "APPROVED"
    STATUS_REJECTED = "REJECTED"
    STATUS_CHOICES = [
        (STATUS_PENDING, "Menunggu Verifikasi"),
        (STATUS_APPROVED, "Disetujui"),
        (STATUS_REJECTED, "Ditolak"),
    ]

    mahasiswa = models.ForeignKey(
        Mahasiswa, on_delete=models.CASCADE, related_name="pembayaran", verbose_name="Mahasiswa"
    )
    semester = models.ForeignKey(
        Semester,
        on_delete=models.PROTECT,
        related_name="pembayaran",
        verbose_name="Semester",
        null=True,
        blank=True,
    )
    jenis = models.CharField("Jenis Pembayaran", max_length=20, choices=JENIS_CHOICES)
    nominal = models.DecimalField("Nominal", max_digits=12, decimal_places=2, validators=[MinValueValidator(1)])
    bukti = models.FileField("Bukti Pembayaran", upload_to="bukti-pembayaran/%Y/%m/")
    status = models.CharField("Status", max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    catatan = models.TextField("Catatan", blank=True)
    bulan_pembayaran = models.DateField("Bulan Pembayaran", null=True, blank=True)
    uploaded_at = models.DateTimeField("Diunggah pada", auto_now_add=True)
    verified_at = models.DateTimeField("Diverifikasi pada", null=True, blank=True)
    verified_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        related_name="pembayaran_diverifikasi",
        verbose_name="Diverifikasi oleh",
        null=True,
        blank=True,
    )

    class Meta:
        verbose_name = "Pembayaran"
        verbose_name_plural = "Pembayaran"
        ordering = ["-uploaded_at"]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return f"{self.mahasiswa.nim} {self.get_jenis_display()} ({self.status})"
