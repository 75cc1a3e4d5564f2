"""Plain dict builders turning academic models into JSON-ready payloads."""
from __future__ import annotations

from decimal import Decimal

from .grading import keterangan_huruf
from .models import role_of


def decimal_value(value) -> float | None:
    if value is None:
        return None
    return float(Decimal(value).quantize(Decimal("0.01")))


def date_value(value) -> str | None:
    return value.isoformat() if value else None


def time_value(value) -> str | None:
    return value.strftime("%H:%M") if value else None


def serialize_user(user) -> dict:
    data = {
        "id": user.pk,
        "username": user.username,
        "nama": user.get_full_name() or user.username,
        "role": role_of(user),
        "is_active": user.is_active,
        "must_change_password": getattr(getattr(user, "akun", None), "must_change_password", False),
        "mahasiswa": None,
        "dosen": None,
    }
    mahasiswa = getattr(user, "mahasiswa", None)
    if mahasiswa is not None:
        data["mahasiswa"] = serialize_mahasiswa(mahasiswa)
    dosen = getattr(user, "dosen", None)
    if dosen is not None:
        data["dosen"] = serialize_dosen(dosen)
    return data


def serialize_prodi(prodi) -> dict | None:
    if prodi is None:
        return None
    return {
        "id": prodi.pk,
        "kode": prodi.kode,
        "nama": prodi.nama,
        "jenjang": prodi.jenjang,
        "is_active": prodi.is_active,
    }


def serialize_dosen_ringkas(dosen) -> dict | None:
    if dosen is None:
        return None
    return {"id": dosen.pk, "nidn": dosen.nidn, "nama_lengkap": dosen.nama_lengkap}


def serialize_dosen(dosen) -> dict:
    return {
        "id": dosen.pk,
        "user_id": dosen.user_id,
        "username": dosen.user.username,
        "nidn": dosen.nidn,
        "nuptk": dosen.nuptk,
        "nama_lengkap": dosen.nama_lengkap,
        "prodi": serialize_prodi(dosen.prodi),
        "status": dosen.status,
        "posisi": dosen.posisi,
        "jafung": dosen.jafung,
        "alumni": dosen.alumni,
        "lama_mengajar": dosen.lama_mengajar,
        "tempat_lahir": dosen.tempat_lahir,
        "tanggal_lahir": date_value(dosen.tanggal_lahir),
        "is_active": dosen.user.is_active,
    }


def serialize_mahasiswa_ringkas(mahasiswa) -> dict:
    return {"id": mahasiswa.pk, "nim": mahasiswa.nim, "nama_lengkap": mahasiswa.nama_lengkap}


def serialize_mahasiswa(mahasiswa) -> dict:
    return {
        "id": mahasiswa.pk,
        "user_id": mahasiswa.user_id,
        "nim": mahasiswa.nim,
        "nama_lengkap": mahasiswa.nama_lengkap,
        "tempat_tanggal_lahir": mahasiswa.tempat_tanggal_lahir,
        "jenis_kelamin": mahasiswa.jenis_kelamin,
        "alamat": mahasiswa.alamat,
        "prodi": serialize_prodi(mahasiswa.prodi),
        "angkatan": mahasiswa.angkatan,
        "dosen_wali": serialize_dosen_ringkas(mahasiswa.dosen_wali),
        "status": mahasiswa.status,
        "is_active": mahasiswa.user.is_active,
    }


def serialize_mata_kuliah(mata_kuliah) -> dict:
    return {
        "id": mata_kuliah.pk,
        "kode_mk": mata_kuliah.kode_mk,
        "nama_mk": mata_kuliah.nama_mk,
        "sks": mata_kuliah.sks,
        "semester_ideal": mata_kuliah.semester_ideal,
        "is_lintas_prodi": mata_kuliah.is_lintas_prodi,
        "is_active": mata_kuliah.is_active,
        "deskripsi": mata_kuliah.deskripsi,
    }


def serialize_semester(semester) -> dict | None:
    if semester is None:
        return None
    return {
        "id": semester.pk,
        "tahun_akademik": semester.tahun_akademik,
        "periode": semester.periode,
        "label": semester.label,
        "is_active": semester.is_active,
        "tanggal_mulai": date_value(semester.tanggal_mulai),
        "tanggal_selesai": date_value(semester.tanggal_selesai),
        "periode_krs_mulai": date_value(semester.periode_krs_mulai),
        "periode_krs_selesai": date_value(semester.periode_krs_selesai),
        "periode_perbaikan_krs_mulai": date_value(semester.periode_perbaikan_krs_mulai),
        "periode_perbaikan_krs_selesai": date_value(semester.periode_perbaikan_krs_selesai),
    }


def serialize_ruangan(ruangan) -> dict:
    return {"id": ruangan.pk, "nama": ruangan.nama, "kapasitas": ruangan.kapasitas, "is_active": ruangan.is_active}


def serialize_kelas(kelas, terdaftar: int | None = None) -> dict:
    data = {
        "id": kelas.pk,
        "mata_kuliah": serialize_mata_kuliah(kelas.mata_kuliah),
        "semester_id": kelas.semester_id,
        "dosen": serialize_dosen_ringkas(kelas.dosen),
        "ruangan": {"id": kelas.ruangan_id, "nama": kelas.ruangan.nama},
        "hari": kelas.hari,
        "jam_mulai": time_value(kelas.jam_mulai),
        "jam_selesai": time_value(kelas.jam_selesai),
        "kuota_max": kelas.kuota_max,
        "keterangan": kelas.keterangan,
    }
    if terdaftar is not None:
        data["jumlah_terdaftar"] = terdaftar
        data["sisa_kuota"] = max(kelas.kuota_max - terdaftar, 0)
    return data


def serialize_kelas_file(berkas) -> dict:
    return {
        "id": berkas.pk,
        "kelas_mk_id": berkas.kelas_mk_id,
        "tipe": berkas.tipe,
        "nama_file": berkas.nama_file,
        "minggu_ke": berkas.minggu_ke,
        "keterangan": berkas.keterangan,
        "uploaded_by": serialize_dosen_ringkas(berkas.uploaded_by),
        "uploaded_at": date_value(berkas.uploaded_at),
    }


def serialize_paket(paket, with_kelas: bool = True) -> dict:
    data = {
        "id": paket.pk,
        "nama_paket": paket.nama_paket,
        "angkatan": paket.angkatan,
        "prodi": serialize_prodi(paket.prodi),
        "semester_paket": paket.semester_paket,
        "semester": serialize_semester(paket.semester),
        "total_sks": paket.total_sks,
        "keterangan": paket.keterangan,
    }
    if with_kelas:
        data["kelas"] = [serialize_kelas(kelas) for kelas in paket.daftar_kelas()]
    return data


def serialize_krs(krs, with_detail: bool = True) -> dict:
    data = {
        "id": krs.pk,
        "mahasiswa": serialize_mahasiswa_ringkas(krs.mahasiswa),
        "semester": serialize_semester(krs.semester),
        "paket_krs_id": krs.paket_krs_id,
        "status": krs.status,
        "total_sks": krs.total_sks,
        "is_modified": krs.is_modified,
        "catatan_admin": krs.catatan_admin,
        "tanggal_submit": date_value(krs.tanggal_submit),
        "tanggal_approval": date_value(krs.tanggal_approval),
        "approved_by": krs.approved_by.username if krs.approved_by_id else None,
        "updated_at": date_value(krs.updated_at),
    }
    if with_detail:
        data["kelas"] = [serialize_kelas(kelas) for kelas in krs.daftar_kelas()]
    return data


def serialize_nilai(nilai) -> dict:
    return {
        "id": nilai.pk,
        "mahasiswa": serialize_mahasiswa_ringkas(nilai.mahasiswa),
        "kelas_mk_id": nilai.kelas_mk_id,
        "semester_id": nilai.semester_id,
        "nilai_angka": decimal_value(nilai.nilai_angka),
        "nilai_huruf": nilai.nilai_huruf,
        "bobot": decimal_value(nilai.bobot),
        "keterangan": keterangan_huruf(nilai.nilai_huruf),
        "is_finalized": nilai.is_finalized,
        "tanggal_input": date_value(nilai.tanggal_input),
    }


def serialize_nilai_mk(nilai) -> dict:
    """A grade as it appears on KHS and transcripts: course identity plus the letter."""
    mata_kuliah = nilai.kelas_mk.mata_kuliah
    return {
        "kode_mk": mata_kuliah.kode_mk,
        "nama_mk": mata_kuliah.nama_mk,
        "sks": mata_kuliah.sks,
        "nilai_angka": decimal_value(nilai.nilai_angka),
        "nilai_huruf": nilai.nilai_huruf,
        "bobot": decimal_value(nilai.bobot),
        "mutu": decimal_value(Decimal(mata_kuliah.sks) * (nilai.bobot or 0)),
    }


def serialize_khs(khs, nilai_list=None) -> dict:
    data = {
        "id": khs.pk,
        "mahasiswa": serialize_mahasiswa_ringkas(khs.mahasiswa),
        "semester": serialize_semester(khs.semester),
        "ips": decimal_value(khs.ips),
        "ipk": decimal_value(khs.ipk),
        "total_sks_semester": khs.total_sks_semester,
        "total_sks_kumulatif": khs.total_sks_kumulatif,
        "tanggal_generate": date_value(khs.tanggal_generate),
    }
    if nilai_list is not None:
        data["nilai"] = [serialize_nilai_mk(nilai) for nilai in nilai_list]
    return data


def serialize_presensi(presensi, with_detail: bool = True) -> dict:
    data = {
        "id": presensi.pk,
        "kelas_mk_id": presensi.kelas_mk_id,
        "pertemuan": presensi.pertemuan,
        "tanggal": date_value(presensi.tanggal),
        "materi": presensi.materi,
        "catatan": presensi.catatan,
    }
    if with_detail:
        data["detail"] = [
            {
                "id": detail.pk,
                "mahasiswa": serialize_mahasiswa_ringkas(detail.mahasiswa),
                "status": detail.status,
                "keterangan": detail.keterangan,
            }
            for detail in presensi.detail.select_related("mahasiswa")
        ]
    return data


def serialize_statistik(statistik: dict) -> dict:
    data = dict(statistik)
    if "mahasiswa" in data and not isinstance(data["mahasiswa"], dict):
        data["mahasiswa"] = serialize_mahasiswa_ringkas(data["mahasiswa"])
    data["persentase"] = float(data["persentase"])
    return data
