"""Signals to provision default passwords and account roles for users."""
from __future__ import annotations

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db.models.signals import post_save
from django.dispatch import receiver

from akademik.models import Akun

User = get_user_model()
DEFAULT_INITIAL_PASSWORD = getattr(settings, "DEFAULT_INITIAL_PASSWORD", "password123")


@receiver(post_save, sender=User)
def ensure_default_password_and_akun(sender, instance: User, created: bool, **kwargs):
    if kwargs.get("raw"):
        return

    if created and not instance.has_usable_password():
        instance.set_password(DEFAULT_INITIAL_PASSWORD)
        User.objects.filter(pk=instance.pk).update(password=instance.password)

    if created:
        is_admin = instance.is_staff or instance.is_superuser
        Akun.objects.get_or_create(
            user=instance,
            defaults={
                "role": Akun.ROLE_ADMIN if is_admin else Akun.ROLE_MAHASISWA,
                "must_change_password": not is_admin,
            },
        )
