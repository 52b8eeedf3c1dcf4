from pathlib import Path
import os
from dotenv import load_dotenv

load_dotenv()

# Build paths
BASE_DIR = Path(__file__).resolve().parent.parent

# SECURITY
SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY')
if not SECRET_KEY:
    raise ValueError(
        "Umgebungsvariable DJANGO_SECRET_KEY muss gesetzt sein. "
        "Fuer lokale Entwicklung bitte in .env eintragen."
    )

# DEBUG: Default False – muss explizit auf 'True' gesetzt werden
DEBUG = os.environ.get('DEBUG', 'False') == 'True'

ALLOWED_HOSTS = [
    'localhost',
    '127.0.0.1',
    '.onrender.com',
    '.railway.app',
    '.up.railway.app',
]

CSRF_TRUSTED_ORIGINS = [
    'https://*.onrender.com',
    'https://*.railway.app',
    'https://*.up.railway.app',
]

# Application definition
INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'django_filters',
    'zeitkonto.apps.ZeitkontoConfig',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'whitenoise.middleware.WhiteNoiseMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'config.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'config.wsgi.application'

# Database - AUTOMATISCH lokal=SQLite, Render/Supabase=PostgreSQL
if os.environ.get('DATABASE_URL'):
    # Production/Supabase: PostgreSQL mit Connection Pooling
    import dj_database_url
    DATABASES = {
        'default': dj_database_url.config(
            default=os.environ.get('DATABASE_URL'),
            conn_max_age=600,
            conn_health_checks=True,
        )
    }
else:
    # Development: SQLite lokal
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': BASE_DIR / 'db.sqlite3',
            'OPTIONS': {
                'timeout': 20,
            },
        }
    }

# Password validation
AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator'},
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
    {'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator'},
    {'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator'},
]

# Internationalization
LANGUAGE_CODE = 'de-de'
TIME_ZONE = 'Europe/Berlin'
USE_I18N = True
USE_TZ = True
DEFAULT_CHARSET = 'utf-8'

# Static files
STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'
STORAGES = {
    'default': {
        'BACKEND': 'django.core.files.storage.FileSystemStorage',
    },
    'staticfiles': {
        'BACKEND': 'whitenoise.storage.CompressedManifestStaticFilesStorage',
    },
}

# Default primary key field type
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# Login/Logout URLs
LOGIN_URL = '/accounts/login/'
LOGIN_REDIRECT_URL = '/admin/'
LOGOUT_REDIRECT_URL = '/accounts/login/'

# Logging
ZEITKONTO_LOG_LEVEL = os.environ.get('ZEITKONTO_LOG_LEVEL', 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'einfach': {
            'format': '{asctime} {levelname} {name}: {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'einfach',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'zeitkonto': {
            'handlers': ['console'],
            'level': ZEITKONTO_LOG_LEVEL,
            'propagate': False,
        },
    },
}

# Stundensaldo-Einstellungen
# Klasse des Speichers, aus dem Soll-/Ist-Zeiten gelesen werden
ZEITKONTO_SPEICHER = os.environ.get(
    'ZEITKONTO_SPEICHER', 'zeitkonto.speicher.DjangoSpeicher'
)
# 'ueberspringen' oder 'fehler' fuer Eintraege mit kaputten Zeitstempeln
ZEITKONTO_FEHLERHAFTE_EINTRAEGE = os.environ.get(
    'ZEITKONTO_FEHLERHAFTE_EINTRAEGE', 'ueberspringen'
)
# Saldo nach jeder Aenderung an Soll-/Ist-Zeiten neu berechnen
ZEITKONTO_AUTO_NEUBERECHNUNG = (
    os.environ.get('ZEITKONTO_AUTO_NEUBERECHNUNG', 'True') == 'True'
)
# Gemeinsames Geheimnis fuer den Aenderungs-Webhook (leer = deaktiviert)
ZEITKONTO_WEBHOOK_SECRET = os.environ.get('ZEITKONTO_WEBHOOK_SECRET', '')

# HTTPS-Sicherheitseinstellungen (nur in Produktion aktiv, d.h. wenn DEBUG=False)
if not DEBUG:
    # Railway/Render terminiert SSL am Load Balancer – kein SSL-Redirect noetig.
    # Stattdessen X-Forwarded-Proto-Header vertrauen damit Django weiss,
    # dass die Verbindung zum Client verschluesselt ist.
    SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
    SECURE_HSTS_SECONDS = 31536000  # 1 Jahr
    SECURE_HSTS_INCLUDE_SUBDOMAINS = True
    SECURE_HSTS_PRELOAD = True
    SESSION_COOKIE_SECURE = True
    CSRF_COOKIE_SECURE = True
    SECURE_CONTENT_TYPE_NOSNIFF = True
    X_FRAME_OPTIONS = "DENY"
