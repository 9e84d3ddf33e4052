"""
Módulo de Reportes

Reporte mensual de inspecciones en Excel
"""

from .reportes_bp import reportes_bp

__all__ = ['reportes_bp']
