"""Django settings for the SIAKAD academic information system."""
import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")

SECRET_KEY = os.getenv("SIAKAD_SECRET_KEY", "django-insecure-siakad-dev-secret-key")
DEBUG = os.getenv("SIAKAD_DEBUG", "1").strip() not in ("0", "false", "False")
ALLOWED_HOSTS: list[str] = [
    host.strip() for host in os.getenv("SIAKAD_ALLOWED_HOSTS", "*").split(",") if host.strip()
]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "akademik.apps.AkademikConfig",
    "keuangan.apps.KeuanganConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "akademik.middleware.ForcePasswordChangeMiddleware",
    "akademik.middleware.ApiErrorMiddleware",
]

ROOT_URLCONF = "siakad.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "siakad.wsgi.application"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.getenv("SIAKAD_DB_PATH", str(BASE_DIR / "siakad.db")),
    }
}

AUTHENTICATION_BACKENDS = [
    "akademik.backends.IdentifierBackend",
    "django.contrib.auth.backends.ModelBackend",
]

AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
        "OPTIONS": {"min_length": 6},
    },
]

LANGUAGE_CODE = "id"
TIME_ZONE = os.getenv("SIAKAD_TIME_ZONE", "Asia/Jakarta")
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
MEDIA_URL = "uploads/"
MEDIA_ROOT = Path(os.getenv("SIAKAD_MEDIA_ROOT", str(BASE_DIR / "uploads")))
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LOG_LEVEL = os.getenv("SIAKAD_LOG_LEVEL", "INFO").strip().upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "loggers": {
        "akademik": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "keuangan": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "django.request": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
    },
}

# Password bawaan untuk akun baru, wajib diganti saat login pertama
DEFAULT_INITIAL_PASSWORD = "password123"

# Aturan akademik
KRS_MIN_SKS = 12
KRS_DEFAULT_MAX_SKS = 24
PAKET_MAX_SKS = 24
KELAS_DEFAULT_KUOTA = 30
PRESENSI_MAX_PERTEMUAN = 16
LULUS_MIN_IPK = 2.0
LULUS_MIN_SKS = 144

API_DEFAULT_PAGE_SIZE = 10
API_MAX_PAGE_SIZE = 100

MAX_UPLOAD_SIZE = 5 * 1024 * 1024
MAX_MATERI_UPLOAD_SIZE = 10 * 1024 * 1024
