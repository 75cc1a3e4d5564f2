from decimal import Decimal

import pytest

from akademik import grading
from akademik.exceptions import AkademikError


@pytest.mark.parametrize(
    "angka, huruf",
    [
        (100, "A"),
        (91, "A"),
        (90.99, "AB"),
        (81, "AB"),
        (80, "B"),
        (74, "B"),
        (73.5, "BC"),
        (68, "BC"),
        (60, "C"),
        (59, "CD"),
        (51, "CD"),
        (50, "D"),
        (41, "D"),
        (40.99, "E"),
        (0, "E"),
        ("85.5", "AB"),
    ],
)
def test_nilai_angka_to_huruf_boundaries(angka, huruf):
    assert grading.nilai_angka_to_huruf(angka) == huruf


@pytest.mark.parametrize("angka", [-1, 100.01, "abc", None, "nan"])
def test_nilai_angka_to_huruf_rejects_invalid(angka):
    with pytest.raises(AkademikError):
        grading.nilai_angka_to_huruf(angka)


def test_bobot_and_keterangan():
    assert grading.huruf_to_bobot("AB") == Decimal("3.50")
    assert grading.huruf_to_bobot("E") == Decimal("0.00")
    assert grading.keterangan_huruf("C") == "Cukup"
    assert grading.keterangan_huruf("Z") == "-"
    with pytest.raises(AkademikError):
        grading.huruf_to_bobot("F")


def test_lulus_and_level():
    assert grading.is_lulus("C")
    assert not grading.is_lulus("CD")
    assert not grading.is_lulus(None)
    assert grading.grade_level("AB") == "excellent"
    assert grading.grade_level("BC") == "good"
    assert grading.grade_level("C") == "average"
    assert grading.grade_level("D") == "poor"
    assert grading.grade_level("E") == "fail"


def test_ips_weights_by_sks_and_skips_ungraded_rows():
    rows = [(3, "A"), (2, "B"), (3, "C"), (4, None)]
    # (12 + 6 + 6) / 8
    assert grading.hitung_ips(rows) == Decimal("3.00")
    assert grading.total_sks(rows) == 8


def test_ips_rounds_half_up_to_two_decimals():
    rows = [(3, "A"), (3, "AB"), (2, "BC")]
    # (12 + 10.5 + 5) / 8 = 3.4375
    assert grading.hitung_ips(rows) == Decimal("3.44")


def test_empty_rows_give_zero():
    assert grading.hitung_ips([]) == Decimal("0.00")
    assert grading.hitung_ipk([(3, None)]) == Decimal("0.00")


@pytest.mark.parametrize(
    "ipk, label",
    [(Decimal("3.75"), "Cum Laude"), ("3.51", "Cum Laude"), (3.2, "Sangat Memuaskan"), (2.8, "Memuaskan"), (2.1, "Cukup"), (1.5, "Kurang"), (None, "Kurang")],
)
def test_predikat(ipk, label):
    assert grading.predikat(ipk) == label


def test_can_graduate_needs_ipk_and_sks(settings):
    settings.LULUS_MIN_IPK = 2.0
    settings.LULUS_MIN_SKS = 144
    assert grading.can_graduate(Decimal("2.00"), 144)
    assert not grading.can_graduate(Decimal("1.99"), 150)
    assert not grading.can_graduate(Decimal("3.50"), 143)


@pytest.mark.parametrize(
    "ips, maks",
    [(Decimal("3.50"), 24), (Decimal("3.00"), 24), (Decimal("2.99"), 21), (Decimal("2.50"), 21), (Decimal("2.00"), 18), (Decimal("1.99"), 15), (0, 15)],
)
def test_max_sks_for_ips(ips, maks):
    assert grading.max_sks_for_ips(ips) == maks


def test_max_sks_without_history_uses_default(settings):
    settings.KRS_DEFAULT_MAX_SKS = 24
    assert grading.max_sks_for_ips(None) == 24


def test_ringkasan_semester_counts_distribution():
    ringkasan = grading.ringkasan_semester([(3, "A"), (3, "A"), (2, "C"), (2, None)])
    assert ringkasan["total_mk"] == 3
    assert ringkasan["total_sks"] == 8
    assert ringkasan["distribusi"]["A"] == 2
    assert ringkasan["distribusi"]["C"] == 1
    assert ringkasan["distribusi"]["E"] == 0
    assert list(ringkasan["distribusi"]) == ["A", "AB", "B", "BC", "C", "CD", "D", "E"]
