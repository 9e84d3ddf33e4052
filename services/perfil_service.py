"""
Perfiles de usuario (tabla `profiles`): rol, empresa, preferencias y contador
de inspecciones. El id del perfil es el mismo que el del usuario en Supabase Auth.
"""
import logging

from dominio import User
from dominio.comun import ahora_iso
from services.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

CAMPOS_PERFIL = (
    'full_name', 'phone', 'company', 'role', 'preferences', 'avatar_url',
    'total_inspections', 'is_active',
)


def obtener_perfil(user_id, access_token=None):
    """Devuelve la fila del perfil o None si aún no existe"""
    return SupabaseClient(access_token).get_by_id('profiles', user_id)


def cargar_usuario(auth_user, access_token=None):
    """Construye la entidad User combinando Supabase Auth y la tabla profiles"""
    perfil = obtener_perfil(auth_user.get('id'), access_token)
    if perfil is None:
        logger.info(f"ℹ️ Usuario {auth_user.get('email')} sin perfil, se usa el rol por defecto")
    return User.from_auth_data(auth_user, perfil)


def guardar_perfil(usuario, access_token=None):
    """Crea o actualiza el perfil del usuario"""
    db = SupabaseClient(access_token)
    datos = {campo: getattr(usuario, campo) for campo in CAMPOS_PERFIL}
    datos['email'] = usuario.email
    datos['updated_at'] = ahora_iso()

    if db.get_by_id('profiles', usuario.id, select='id'):
        resultado = db.patch('profiles', usuario.id, datos)
    else:
        resultado = db.post('profiles', {**datos, 'id': usuario.id})

    if resultado is None:
        logger.warning(f"⚠️ No se pudo guardar el perfil de {usuario.email}")
    return resultado
