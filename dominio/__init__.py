"""
Dominio de InspecciónPro 4x4

Entidades con validación y reglas de negocio:
- Vehicle: datos del vehículo inspeccionado
- InspectionItem: ítem individual del checklist (puntuación 1-10)
- Inspection: inspección completa con métricas agregadas
- User: usuario/inspector y sus permisos
"""

from .errores import DomainError, ValidationError, ItemNotFoundError, PermissionDeniedError
from .comun import CONDICIONES, condition_from_score, get_condition_by_score
from .item_inspeccion import InspectionItem
from .inspeccion import Inspection
from .vehiculo import Vehicle
from .usuario import User
from . import checklist

__all__ = [
    'DomainError', 'ValidationError', 'ItemNotFoundError', 'PermissionDeniedError',
    'CONDICIONES', 'condition_from_score', 'get_condition_by_score',
    'InspectionItem', 'Inspection', 'Vehicle', 'User', 'checklist',
]
