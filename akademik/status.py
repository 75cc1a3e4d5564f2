"""Colour-coded status badges for admin list columns."""
from __future__ import annotations

from django.utils.html import format_html

VARIANT_STATUS = {
    "success": ("active", "aktif", "approved", "disetujui", "completed", "selesai", "success", "berhasil", "lulus"),
    "warning": ("pending", "menunggu", "waiting", "draft", "review"),
    "danger": ("inactive", "nonaktif", "non_aktif", "rejected", "ditolak", "failed", "gagal", "expired"),
    "info": ("info", "informasi", "new", "baru", "submitted"),
}
STATUS_MAP = {status: variant for variant, statuses in VARIANT_STATUS.items() for status in statuses}

# (latar, teks, border, ikon)
VARIANT_STYLES = {
    "success": ("#dcfce7", "#166534", "#bbf7d0", "✔"),
    "warning": ("#fef9c3", "#854d0e", "#fef08a", "⏱"),
    "danger": ("#fee2e2", "#991b1b", "#fecaca", "✖"),
    "info": ("#dbeafe", "#1e40af", "#bfdbfe", "ℹ"),
    "default": ("#f3f4f6", "#1f2937", "#e5e7eb", "!"),
}


def status_variant(status) -> str:
    return STATUS_MAP.get(str(status or "").strip().lower(), "default")


def status_badge(status, label=None, show_icon: bool = True):
    """Render ``status`` as an inline badge; ``label`` overrides the visible text."""
    background, color, border, icon = VARIANT_STYLES[status_variant(status)]
    return format_html(
        '<span style="display:inline-block;padding:1px 8px;border-radius:9999px;'
        'background:{};color:{};border:1px solid {};font-weight:500;">{}{}</span>',
        background,
        color,
        border,
        f"{icon} " if show_icon else "",
        label or status,
    )
