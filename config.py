"""
Configuración centralizada de la aplicación
"""
import os
import logging
import sys

from dotenv import load_dotenv

load_dotenv()

# ============================================
# CONFIGURACIÓN DE LOGGING
# ============================================
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s',
    stream=sys.stdout
)
logger = logging.getLogger(__name__)

# Silenciar logs verbosos de reportlab
logging.getLogger('reportlab').setLevel(logging.WARNING)

# ============================================
# CONFIGURACIÓN DE FLASK
# ============================================
class Config:
    """Configuración base de la aplicación"""

    # Secret key
    SECRET_KEY = os.environ.get("SECRET_KEY")
    if not SECRET_KEY:
        raise RuntimeError("SECRET_KEY environment variable is not set")

    # Supabase
    SUPABASE_URL = os.environ.get("SUPABASE_URL", "https://localhost.supabase.co").rstrip("/")
    SUPABASE_KEY = os.environ.get("SUPABASE_KEY")
    SUPABASE_SERVICE_KEY = os.environ.get("SUPABASE_SERVICE_KEY")

    if not SUPABASE_KEY:
        raise RuntimeError("SUPABASE_KEY environment variable is not set")

    # Aplicación
    APP_NAME = os.environ.get("APP_NAME", "InspecciónPro 4x4")
    APP_VERSION = os.environ.get("APP_VERSION", "1.0.0")

    # Buckets de Storage
    BUCKET_FOTOS = "inspection-photos"
    BUCKET_FOTOS_ALTERNATIVO = "inspection-images"
    BUCKET_FOTOS_TEMPORAL = "temp-inspections"
    BUCKET_REPORTES = "inspection-reports"

    # Límite de subida de imágenes (5MB)
    MAX_IMAGE_SIZE = 5 * 1024 * 1024
    ALLOWED_IMAGE_TYPES = ["image/jpeg", "image/png", "image/webp", "image/gif"]

    # Headers para operaciones de storage (usa service key si está disponible)
    @property
    def STORAGE_HEADERS(self):
        storage_key = self.SUPABASE_SERVICE_KEY if self.SUPABASE_SERVICE_KEY else self.SUPABASE_KEY
        return {
            "apikey": storage_key,
            "Authorization": f"Bearer {storage_key}",
        }

    def auth_headers(self, access_token=None):
        """Headers con el JWT del usuario (RLS de Supabase aplica sobre auth.uid())"""
        return {
            "apikey": self.SUPABASE_KEY,
            "Authorization": f"Bearer {access_token or self.SUPABASE_KEY}",
            "Content-Type": "application/json",
            "Prefer": "return=representation"
        }


# Instancia global de configuración
config = Config()

# ============================================
# CONSTANTES DE CACHÉ (en minutos)
# ============================================
CACHE_TTL_METRICAS = 5
