"""
Módulo de gestión de Inspecciones

Incluye funcionalidades para:
- Dashboard paginado con filtro de estado
- Alta de inspecciones con datos del vehículo
- Evaluación de ítems del checklist y fotos
- Cierre de la inspección y reporte PDF
"""

from .inspecciones_bp import inspecciones_bp

__all__ = ['inspecciones_bp']
