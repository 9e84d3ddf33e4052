"""
Excepciones de reglas de negocio
"""


class DomainError(Exception):
    """Error base del dominio de inspecciones"""


class ValidationError(DomainError):
    """Datos inválidos para una entidad"""

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.errors = errors or [message]


class ItemNotFoundError(DomainError):
    """No existe un ítem con esa categoría y nombre en la inspección"""


class PermissionDeniedError(DomainError):
    """El usuario no tiene permisos para la operación"""
