"""
Servicio de autenticación contra Supabase Auth (GoTrue /auth/v1)

Todas las funciones devuelven el JSON de Supabase o lanzan AuthError con un
mensaje listo para mostrar al usuario.
"""
import logging

import requests
from config import config

logger = logging.getLogger(__name__)

AUTH_TIMEOUT = 10

# Mensajes de GoTrue traducidos para la interfaz
MENSAJES_ERROR = {
    'invalid_grant': 'Email o contraseña incorrectos',
    'Invalid login credentials': 'Email o contraseña incorrectos',
    'Email not confirmed': 'Debes confirmar tu email antes de iniciar sesión',
    'User already registered': 'Ya existe una cuenta con este email',
    'Password should be at least 6 characters': 'La contraseña debe tener al menos 6 caracteres',
}


class AuthError(Exception):
    """Error de autenticación con el código HTTP recibido"""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


def _auth_url(path):
    return f"{config.SUPABASE_URL}/auth/v1/{path}"


def _headers(access_token=None):
    headers = {
        "apikey": config.SUPABASE_KEY,
        "Content-Type": "application/json",
    }
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    return headers


def _mensaje_error(response):
    try:
        data = response.json()
    except ValueError:
        return f"Error de autenticación ({response.status_code})"

    mensaje = (
        data.get('error_description')
        or data.get('msg')
        or data.get('message')
        or data.get('error')
        or f"Error de autenticación ({response.status_code})"
    )
    return MENSAJES_ERROR.get(mensaje, mensaje)


def _request(metodo, path, json=None, access_token=None, operacion=''):
    try:
        response = requests.request(
            metodo, _auth_url(path), json=json,
            headers=_headers(access_token), timeout=AUTH_TIMEOUT
        )
    except requests.exceptions.RequestException as e:
        logger.error(f"❌ Excepción en {operacion}: {type(e).__name__}: {str(e)}")
        raise AuthError('No se pudo conectar con el servicio de autenticación')

    if not response.ok:
        mensaje = _mensaje_error(response)
        logger.warning(f"⚠️ Error en {operacion}: {response.status_code} - {mensaje}")
        raise AuthError(mensaje, response.status_code)

    if not response.content:
        return {}
    return response.json()


def sign_up(email, password, metadata=None):
    """
    Registra un nuevo usuario

    Args:
        email: Email del usuario
        password: Contraseña (mínimo 6 caracteres)
        metadata: Datos adicionales guardados en user_metadata (full_name, phone...)

    Returns:
        Respuesta de Supabase (usuario y, si no requiere confirmación, sesión)
    """
    if not email or not password:
        raise AuthError('Email y contraseña son requeridos')
    if len(password) < 6:
        raise AuthError('La contraseña debe tener al menos 6 caracteres')

    logger.info(f"🔄 Registrando usuario {email}")
    return _request(
        'POST', 'signup',
        json={'email': email.strip().lower(), 'password': password, 'data': metadata or {}},
        operacion='sign_up'
    )


def sign_in(email, password):
    """
    Inicia sesión con email y contraseña (password grant)

    Returns:
        Diccionario con access_token, refresh_token, expires_in y user
    """
    if not email or not password:
        raise AuthError('Email y contraseña son requeridos')

    sesion = _request(
        'POST', 'token?grant_type=password',
        json={'email': email.strip().lower(), 'password': password},
        operacion='sign_in'
    )
    logger.info(f"✅ Sesión iniciada para {email}")
    return sesion


def refresh_session(refresh_token):
    """Obtiene un nuevo access_token a partir del refresh_token"""
    if not refresh_token:
        raise AuthError('Sesión expirada')

    return _request(
        'POST', 'token?grant_type=refresh_token',
        json={'refresh_token': refresh_token},
        operacion='refresh_session'
    )


def sign_out(access_token):
    """Cierra la sesión en Supabase; un token vencido no se considera error"""
    if not access_token:
        return
    try:
        _request('POST', 'logout', access_token=access_token, operacion='sign_out')
    except AuthError as e:
        if e.status_code not in (401, 403):
            raise


def get_user(access_token):
    """
    Devuelve el usuario asociado al token

    Raises:
        AuthError: si el token es inválido o expiró
    """
    if not access_token:
        raise AuthError('Token de autorización requerido', 401)

    try:
        return _request('GET', 'user', access_token=access_token, operacion='get_user')
    except AuthError as e:
        if e.status_code in (401, 403):
            raise AuthError('Token inválido o expirado', 401)
        raise


def reset_password(email):
    """Envía el email de recuperación de contraseña"""
    if not email:
        raise AuthError('Email requerido')

    _request('POST', 'recover', json={'email': email.strip().lower()}, operacion='reset_password')
    logger.info(f"📧 Email de recuperación enviado a {email}")


def update_password(access_token, new_password):
    if not new_password or len(new_password) < 6:
        raise AuthError('La contraseña debe tener al menos 6 caracteres')

    return _request(
        'PUT', 'user', json={'password': new_password},
        access_token=access_token, operacion='update_password'
    )


def update_profile(access_token, metadata):
    """Actualiza user_metadata del usuario autenticado"""
    return _request(
        'PUT', 'user', json={'data': metadata},
        access_token=access_token, operacion='update_profile'
    )
