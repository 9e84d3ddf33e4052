"""
API JSON de inspecciones

Incluye:
- CRUD de inspecciones con token Bearer de Supabase
- Subida de imágenes en base64
- Checklist y métricas del usuario
"""

from .api_bp import api_bp

__all__ = ['api_bp']
