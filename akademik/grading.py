"""Grade conversion, GPA arithmetic and credit-load rules.

Grade rows are passed around as ``(sks, nilai_huruf)`` pairs so the same
functions serve semester (IPS) and cumulative (IPK) calculations. Rows without
a letter grade are ignored.
"""
from __future__ import annotations

from collections import Counter
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable

from django.conf import settings

from .exceptions import AkademikError

# (batas bawah, huruf, bobot, keterangan), urut dari nilai tertinggi
SKALA_NILAI = [
    (91, "A", Decimal("4.00"), "Sangat Baik"),
    (81, "AB", Decimal("3.50"), "Baik Sekali"),
    (74, "B", Decimal("3.00"), "Baik"),
    (68, "BC", Decimal("2.50"), "Cukup Baik"),
    (60, "C", Decimal("2.00"), "Cukup"),
    (51, "CD", Decimal("1.50"), "Kurang"),
    (41, "D", Decimal("1.00"), "Sangat Kurang"),
    (0, "E", Decimal("0.00"), "Gagal"),
]

NILAI_HURUF_CHOICES = [(huruf, huruf) for _, huruf, _, _ in SKALA_NILAI]
BOBOT = {huruf: bobot for _, huruf, bobot, _ in SKALA_NILAI}
KETERANGAN = {huruf: keterangan for _, huruf, _, keterangan in SKALA_NILAI}
HURUF_LULUS = {"A", "AB", "B", "BC", "C"}

PREDIKAT = [
    (Decimal("3.51"), "Cum Laude"),
    (Decimal("3.00"), "Sangat Memuaskan"),
    (Decimal("2.76"), "Memuaskan"),
    (Decimal("2.00"), "Cukup"),
]

# (IPS minimal, SKS maksimal) untuk semester berikutnya
BATAS_SKS = [
    (Decimal("3.00"), 24),
    (Decimal("2.50"), 21),
    (Decimal("2.00"), 18),
]
BATAS_SKS_TERENDAH = 15

GradeRow = tuple[int, "str | None"]


def _to_decimal(value) -> Decimal:
    try:
        number = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise AkademikError("Nilai angka harus berupa angka")
    if not number.is_finite():
        raise AkademikError("Nilai angka harus berupa angka")
    return number


def nilai_angka_to_huruf(nilai_angka) -> str:
    """Convert a 0-100 score into its letter grade."""
    angka = _to_decimal(nilai_angka)
    if angka < 0 or angka > 100:
        raise AkademikError("Nilai angka harus antara 0-100")
    for batas, huruf, _, _ in SKALA_NILAI:
        if angka >= batas:
            return huruf
    return "E"


def huruf_to_bobot(nilai_huruf: str) -> Decimal:
    try:
        return BOBOT[nilai_huruf]
    except KeyError:
        raise AkademikError(f"Nilai huruf tidak valid: {nilai_huruf}")


def keterangan_huruf(nilai_huruf: str) -> str:
    return KETERANGAN.get(nilai_huruf, "-")


def is_lulus(nilai_huruf: str | None) -> bool:
    return nilai_huruf in HURUF_LULUS


def grade_level(nilai_huruf: str | None) -> str:
    if nilai_huruf in ("A", "AB"):
        return "excellent"
    if nilai_huruf in ("B", "BC"):
        return "good"
    if nilai_huruf == "C":
        return "average"
    if nilai_huruf in ("CD", "D"):
        return "poor"
    return "fail"


def _rata_rata_bobot(rows: Iterable[GradeRow]) -> Decimal:
    total_mutu = Decimal("0")
    total_sks = 0
    for sks, huruf in rows:
        if not huruf:
            continue
        total_mutu += Decimal(sks) * huruf_to_bobot(huruf)
        total_sks += sks
    if total_sks == 0:
        return Decimal("0.00")
    return (total_mutu / total_sks).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def hitung_ips(rows: Iterable[GradeRow]) -> Decimal:
    """Semester GPA: sum(sks * bobot) / sum(sks) over one semester's grades."""
    return _rata_rata_bobot(rows)


def hitung_ipk(rows: Iterable[GradeRow]) -> Decimal:
    """Cumulative GPA over every finalized grade up to a semester."""
    return _rata_rata_bobot(rows)


def total_sks(rows: Iterable[GradeRow]) -> int:
    return sum(sks for sks, huruf in rows if huruf)


def predikat(ipk) -> str:
    nilai = Decimal(str(ipk or 0))
    for batas, label in PREDIKAT:
        if nilai >= batas:
            return label
    return "Kurang"


def can_graduate(ipk, sks: int) -> bool:
    return float(ipk or 0) >= settings.LULUS_MIN_IPK and sks >= settings.LULUS_MIN_SKS


def ringkasan_semester(rows: Iterable[GradeRow]) -> dict:
    rows = [row for row in rows if row[1]]
    distribusi = Counter(huruf for _, huruf in rows)
    return {
        "ips": hitung_ips(rows),
        "total_sks": total_sks(rows),
        "total_mk": len(rows),
        "distribusi": {huruf: distribusi.get(huruf, 0) for _, huruf, _, _ in SKALA_NILAI},
    }


def max_sks_for_ips(ips) -> int:
    """Credit ceiling for the next KRS, from the previous semester's IPS."""
    if ips is None:
        return settings.KRS_DEFAULT_MAX_SKS
    nilai = Decimal(str(ips))
    for batas, maks in BATAS_SKS:
        if nilai >= batas:
            return maks
    return BATAS_SKS_TERENDAH
