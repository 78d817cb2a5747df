import os
from pathlib import Path
from dotenv import load_dotenv # Cargador de secretos

BASE_DIR = Path(__file__).resolve().parent.parent

# --- CARGAR VARIABLES DE ENTORNO ---
# Carga el archivo .env desde la raíz del proyecto
load_dotenv(BASE_DIR / '.env')


def _env_bool(name: str, default: str = 'False') -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'si', 'sí', 'on')


# --- SEGURIDAD ---
SECRET_KEY = os.getenv('SECRET_KEY', 'django-insecure-solo-para-desarrollo')
DEBUG = _env_bool('DEBUG')
ALLOWED_HOSTS = [h for h in os.getenv('ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',') if h]

# -------------------------------------------------
# CSRF / CORS – SPA de inventario
# -------------------------------------------------
TRUSTED_URLS = [u for u in os.getenv('TRUSTED_ORIGINS', '').split(',') if u]

CSRF_TRUSTED_ORIGINS = TRUSTED_URLS
CORS_ALLOWED_ORIGINS = TRUSTED_URLS

CSRF_COOKIE_NAME = 'csrftoken'
CSRF_COOKIE_HTTPONLY = False
CSRF_COOKIE_SECURE = not DEBUG
CSRF_COOKIE_SAMESITE = 'Lax'
CSRF_HEADER_NAME = 'HTTP_X_CSRFTOKEN'

SESSION_COOKIE_SECURE = not DEBUG
SESSION_COOKIE_SAMESITE = 'Lax'

CORS_ALLOW_CREDENTIALS = True

# -------------------------------------------------
# Apps Instaladas
# -------------------------------------------------
APPEND_SLASH = True

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    'rest_framework',
    'django_filters',
    'corsheaders',

    'productos',
    'inventario',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'corsheaders.middleware.CorsMiddleware',
    'whitenoise.middleware.WhiteNoiseMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'core.urls'
WSGI_APPLICATION = 'core.wsgi.application'

LANGUAGE_CODE = 'es'
TIME_ZONE = os.getenv('TIME_ZONE', 'America/Lima')
USE_I18N = True
USE_TZ = True

# --- Base de datos ---
# DATABASE_ENGINE=mysql en producción; SQLite para desarrollo y tests.
if os.getenv('DATABASE_ENGINE', 'sqlite').lower() == 'mysql':
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.mysql',
            'NAME': os.getenv('DATABASE_NAME'),
            'USER': os.getenv('DATABASE_USER'),
            'PASSWORD': os.getenv('DATABASE_PASSWORD'),
            'HOST': os.getenv('DATABASE_HOST', 'localhost'),
            'PORT': os.getenv('DATABASE_PORT', '3306'),
            'OPTIONS': {
                'charset': 'utf8mb4',
                'init_command': "SET sql_mode='STRICT_TRANS_TABLES'",
            },
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': os.getenv('DATABASE_NAME') or (BASE_DIR / 'db.sqlite3'),
        }
    }

# --- DRF ---
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework.authentication.SessionAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.IsAuthenticated",
    ],
    "DEFAULT_PAGINATION_CLASS": "rest_framework.pagination.PageNumberPagination",
    "PAGE_SIZE": 50,
    "DEFAULT_FILTER_BACKENDS": [
        "django_filters.rest_framework.DjangoFilterBackend",
        "rest_framework.filters.SearchFilter",
        "rest_framework.filters.OrderingFilter",
    ],
}

# --- Inventario: sincronización catálogo <-> libro de movimientos ---
INVENTARIO_PRODUCT_MODEL = 'productos.Producto'
INVENTARIO_SYNC = {
    'EXCLUDE_INACTIVE': _env_bool('INVENTARIO_EXCLUDE_INACTIVE'),
    'CHECK_CONTINUITY': _env_bool('INVENTARIO_CHECK_CONTINUITY', 'True'),
    'CLEAN_CONFIRMATION': os.getenv('INVENTARIO_CLEAN_CONFIRMATION', 'IRREVERSIBLE'),
    'PLACEHOLDER_PREFIX': 'Producto Migrado',
    'PLACEHOLDER_SKU_PREFIX': 'MIG-',
    'DEFAULT_UNIT_SYMBOL': 'UND',
    'MAX_LISTED_IDS': int(os.getenv('INVENTARIO_MAX_LISTED_IDS', '50')),
}

# --- Celery ---
CELERY_BROKER_URL = os.getenv('CELERY_BROKER_URL', 'redis://localhost:6379/0')
CELERY_RESULT_BACKEND = os.getenv('CELERY_RESULT_BACKEND', CELERY_BROKER_URL)
CELERY_TASK_ALWAYS_EAGER = _env_bool('CELERY_TASK_ALWAYS_EAGER')
CELERY_TIMEZONE = TIME_ZONE
CELERY_BEAT_SCHEDULE = {
    'revalidar-sincronizacion-inventario': {
        'task': 'inventario.tasks.revalidar_sincronizacion_task',
        'schedule': float(os.getenv('INVENTARIO_REVALIDAR_SEGUNDOS', '3600')),
    },
}

# --- Templates ---
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

# --- Archivos estáticos (cPanel Passenger Ready) ---
STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'
STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'whitenoise.storage.CompressedManifestStaticFilesStorage'},
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# --- LOGGING ---
LOG_FILE = os.getenv('LOG_FILE', '')
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

_LOG_HANDLERS = ['console']

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'level': LOG_LEVEL,
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'loggers': {
        'django': {
            'handlers': _LOG_HANDLERS,
            'level': 'INFO',
            'propagate': False,
        },
        'inventario': {
            'handlers': _LOG_HANDLERS,
            'level': LOG_LEVEL,
            'propagate': False,
        },
        'productos': {
            'handlers': _LOG_HANDLERS,
            'level': LOG_LEVEL,
            'propagate': False,
        },
    },
}

if LOG_FILE:
    LOGGING['handlers']['file'] = {
        'level': LOG_LEVEL,
        'class': 'logging.handlers.RotatingFileHandler',
        'filename': LOG_FILE,
        'maxBytes': 1024 * 1024 * 5,  # 5MB
        'backupCount': 5,
        'formatter': 'verbose',
    }
    _LOG_HANDLERS.append('file')
