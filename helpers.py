"""
HELPERS.PY - Funciones auxiliares para InspecciónPro 4x4
Decoradores de autenticación, permisos por perfil y manejo del token de sesión
"""

import logging
import time
from functools import wraps

from flask import session, redirect, request, jsonify, g

from services import auth_service
from utils.messages import flash_error

logger = logging.getLogger(__name__)

# Margen antes de la expiración para renovar el access_token (segundos)
MARGEN_RENOVACION = 60

# ============================================
# PERMISOS POR PERFIL
# ============================================

PERMISOS_POR_PERFIL = {
    'admin': {
        'inspecciones': ['read', 'write', 'delete'],
        'reportes': ['read', 'write'],
        'usuarios': ['read', 'write', 'delete'],
    },
    'supervisor': {
        'inspecciones': ['read', 'write', 'delete'],
        'reportes': ['read', 'write'],
        'usuarios': ['read'],
    },
    'inspector': {
        'inspecciones': ['read', 'write', 'delete'],
        'reportes': ['read'],
    },
    'viewer': {
        'inspecciones': ['read'],
        'reportes': ['read'],
    },
}


def obtener_perfil_usuario():
    """Perfil del usuario en sesión ('viewer' si no hay)"""
    return session.get("perfil", "viewer")


def tiene_permiso(modulo, accion='read'):
    permisos = PERMISOS_POR_PERFIL.get(obtener_perfil_usuario(), {})
    return accion in permisos.get(modulo, [])


def puede_escribir(modulo):
    return tiene_permiso(modulo, 'write')


def puede_eliminar(modulo):
    return tiene_permiso(modulo, 'delete')


def obtener_modulos_permitidos():
    return list(PERMISOS_POR_PERFIL.get(obtener_perfil_usuario(), {}).keys())


# ============================================
# SESIÓN
# ============================================

def guardar_sesion(sesion_auth, usuario):
    """Guarda en la sesión de Flask los tokens de Supabase y los datos del usuario"""
    session["usuario"] = usuario.display_name()
    session["usuario_id"] = usuario.id
    session["email"] = usuario.email
    session["perfil"] = usuario.role
    session["access_token"] = sesion_auth.get("access_token")
    session["refresh_token"] = sesion_auth.get("refresh_token")
    session["expires_at"] = int(time.time()) + int(sesion_auth.get("expires_in") or 3600)


def token_sesion():
    """
    Devuelve el access_token de la sesión, renovándolo si está por expirar.
    Si la renovación falla se limpia la sesión y devuelve None.
    """
    token = session.get("access_token")
    if not token:
        return None

    if session.get("expires_at", 0) - MARGEN_RENOVACION > time.time():
        return token

    try:
        nueva = auth_service.refresh_session(session.get("refresh_token"))
    except auth_service.AuthError as e:
        logger.warning(f"⚠️ No se pudo renovar la sesión: {str(e)}")
        session.clear()
        return None

    session["access_token"] = nueva.get("access_token")
    session["refresh_token"] = nueva.get("refresh_token", session.get("refresh_token"))
    session["expires_at"] = int(time.time()) + int(nueva.get("expires_in") or 3600)
    logger.info("🔄 Sesión renovada")
    return session["access_token"]


# ============================================
# DECORADORES
# ============================================

def login_required(f):
    """Decorador para proteger rutas que requieren autenticación"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if "usuario" not in session:
            return redirect("/")
        g.access_token = token_sesion()
        if not g.access_token:
            flash_error("Tu sesión ha expirado. Inicia sesión de nuevo.")
            return redirect("/")
        return f(*args, **kwargs)
    return decorated_function


def requiere_permiso(modulo, accion='read'):
    """Decorador que exige un permiso del perfil sobre un módulo"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not tiene_permiso(modulo, accion):
                flash_error("No tienes permisos para realizar esta acción")
                return redirect("/home")
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def token_required(f):
    """
    Decorador para la API JSON: exige 'Authorization: Bearer <token>' válido
    y deja el usuario de Supabase en g.usuario_api y el token en g.access_token
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization", "")
        if not auth_header.startswith("Bearer "):
            return jsonify({"success": False, "error": "Token de autorización requerido"}), 401

        token = auth_header.replace("Bearer ", "", 1).strip()
        if not token:
            return jsonify({"success": False, "error": "Token vacío o inválido"}), 401

        try:
            g.usuario_api = auth_service.get_user(token)
        except auth_service.AuthError as e:
            return jsonify({"success": False, "error": str(e)}), 401

        g.access_token = token
        return f(*args, **kwargs)
    return decorated_function
