import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("akademik", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Pembayaran",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "jenis",
                    models.CharField(
                        choices=[
                            ("KRS", "KRS"),
                            ("TENGAH_SEMESTER", "Tengah Semester"),
                            ("PPL", "PPL"),
                            ("SKRIPSI", "Skripsi"),
                            ("WISUDA", "Wisuda"),
                            ("KOMITMEN_BULANAN", "Komitmen Bulanan"),
                        ],
                        max_length=20,
                        verbose_name="Jenis Pembayaran",
                    ),
                ),
                (
                    "nominal",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(1)],
                        verbose_name="Nominal",
                    ),
                ),
                ("bukti", models.FileField(upload_to="bukti-pembayaran/%Y/%m/", verbose_name="Bukti Pembayaran")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Menunggu Verifikasi"),
                            ("APPROVED", "Disetujui"),
                            ("REJECTED", "Ditolak"),
                        ],
                        default="PENDING",
                        max_length=20,
                        verbose_name="Status",
                    ),
                ),
                ("catatan", models.TextField(blank=True, verbose_name="Catatan")),
                ("bulan_pembayaran", models.DateField(blank=True, null=True, verbose_name="Bulan Pembayaran")),
                ("uploaded_at", models.DateTimeField(auto_now_add=True, verbose_name="Diunggah pada")),
                ("verified_at", models.DateTimeField(blank=True, null=True, verbose_name="Diverifikasi pada")),
                (
                    "mahasiswa",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="pembayaran",
                        to="akademik.mahasiswa",
                        verbose_name="Mahasiswa",
                    ),
                ),
                (
                    "semester",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="pembayaran",
                        to="akademik.semester",
                        verbose_name="Semester",
                    ),
                ),
                (
                    "verified_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="pembayaran_diverifikasi",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Diverifikasi oleh",
                    ),
                ),
            ],
            options={
                "verbose_name": "Pembayaran",
                "verbose_name_plural": "Pembayaran",
                "ordering": ["-uploaded_at"],
            },
        ),
    ]
