"""Forms validating API payloads and admin helper actions."""
from __future__ import annotations

from django import forms
from django.contrib.admin.helpers import ActionForm
from django.core.exceptions import FieldDoesNotExist

from .models import (
    Dosen,
    KelasMataKuliah,
    Mahasiswa,
    MataKuliah,
    PaketKRS,
    Prodi,
    Ruangan,
    Semester,
)


class PayloadModelForm(forms.ModelForm):
    """ModelForm bound to JSON payloads: fields left out of the payload take the model default."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for name, field in self.fields.items():
            model_field = self._model_field(name)
            if model_field is not None and model_field.has_default():
                field.required = False

    def _model_field(self, name):
        try:
            return self._meta.model._meta.get_field(name)
        except FieldDoesNotExist:
            return None

    def clean(self):
        cleaned_data = super().clean()
        for name in self.fields:
            model_field = self._model_field(name)
            if name not in self.data and model_field is not None and model_field.has_default():
                cleaned_data[name] = model_field.get_default()
        return cleaned_data


class ProdiForm(PayloadModelForm):
    class Meta:
        model = Prodi
        fields = ("kode", "nama", "jenjang", "is_active")


class DosenForm(PayloadModelForm):
    class Meta:
        model = Dosen
        fields = (
            "nidn",
            "nuptk",
            "nama_lengkap",
            "prodi",
            "status",
            "posisi",
            "jafung",
            "alumni",
            "lama_mengajar",
            "tempat_lahir",
            "tanggal_lahir",
        )

    def clean_nuptk(self):
        # string kosong disimpan sebagai NULL agar tidak melanggar unique
        return self.cleaned_data.get("nuptk") or None


class MahasiswaForm(PayloadModelForm):
    class Meta:
        model = Mahasiswa
        fields = (
            "nim",
            "nama_lengkap",
            "tempat_tanggal_lahir",
            "jenis_kelamin",
            "alamat",
            "prodi",
            "angkatan",
            "dosen_wali",
            "status",
        )


class MataKuliahForm(PayloadModelForm):
    class Meta:
        model = MataKuliah
        fields = ("kode_mk", "nama_mk", "sks", "semester_ideal", "is_lintas_prodi", "is_active", "deskripsi")


class SemesterForm(PayloadModelForm):
    class Meta:
        model = Semester
        fields = (
            "tahun_akademik",
            "periode",
            "tanggal_mulai",
            "tanggal_selesai",
            "periode_krs_mulai",
            "periode_krs_selesai",
            "periode_perbaikan_krs_mulai",
            "periode_perbaikan_krs_selesai",
        )


class RuanganForm(PayloadModelForm):
    class Meta:
        model = Ruangan
        fields = ("nama", "kapasitas", "is_active")


class KelasMataKuliahForm(PayloadModelForm):
    class Meta:
        model = KelasMataKuliah
        fields = ("mata_kuliah", "semester", "dosen", "ruangan", "hari", "jam_mulai", "jam_selesai", "kuota_max", "keterangan")

    def clean_mata_kuliah(self):
        mata_kuliah = self.cleaned_data["mata_kuliah"]
        if not mata_kuliah.is_active:
            raise forms.ValidationError("Mata kuliah sudah tidak aktif")
        return mata_kuliah

    def clean_ruangan(self):
        ruangan = self.cleaned_data["ruangan"]
        if not ruangan.is_active:
            raise forms.ValidationError("Ruangan sudah tidak aktif")
        return ruangan


class PaketKRSForm(PayloadModelForm):
    kelas_ids = forms.JSONField(label="Daftar kelas", required=False)

    class Meta:
        model = PaketKRS
        fields = ("nama_paket", "angkatan", "prodi", "semester_paket", "semester", "keterangan")

    def clean_kelas_ids(self):
        kelas_ids = self.cleaned_data.get("kelas_ids")
        if kelas_ids in (None, ""):
            return None
        if not isinstance(kelas_ids, list):
            raise forms.ValidationError("Daftar kelas harus berupa array")
        try:
            return [int(value) for value in kelas_ids]
        except (TypeError, ValueError):
            raise forms.ValidationError("Daftar kelas tidak valid")


class CatatanActionForm(ActionForm):
    catatan = forms.CharField(label="Catatan", required=False)


def pesan_form(form) -> str:
    """Flatten form errors into one message line."""
    pesan = []
    for field, errors in form.errors.items():
        label = form.fields[field].label if field in form.fields else None
        for error in errors:
            pesan.append(f"{label}: {error}" if label else error)
    return "; ".join(pesan)
