"""
Módulo de autenticación

Incluye:
- Login y logout contra Supabase Auth
- Registro y recuperación de contraseña
- Perfil del usuario
"""

from .auth_bp import auth_bp

__all__ = ['auth_bp']
