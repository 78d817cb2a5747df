# passenger_wsgi.py (entrada para cPanel/Passenger)

import os
import sys

# Asegura el path del proyecto (carpeta de este archivo)
PROJECT_PATH = os.path.dirname(os.path.abspath(__file__))
if PROJECT_PATH not in sys.path:
    sys.path.insert(0, PROJECT_PATH)

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "core.settings")

from core.wsgi import application  # noqa: E402,F401
