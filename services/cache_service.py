"""
Servicio centralizado de caché para optimizar consultas a Supabase
"""
import logging
from datetime import datetime, timedelta

from config import CACHE_TTL_METRICAS
from services import metricas_service
from services.inspeccion_repository import InspeccionRepository

logger = logging.getLogger(__name__)

# ============================================
# ESTRUCTURAS DE CACHÉ
# ============================================

# Caché de métricas del dashboard por usuario (5 min)
# {user_id: {'data': ..., 'timestamp': datetime}}
cache_metricas = {}


# ============================================
# FUNCIONES DE CACHÉ
# ============================================

def _purgar_expiradas(now):
    """Elimina las entradas cuyo TTL ya venció"""
    limite = timedelta(minutes=CACHE_TTL_METRICAS)
    vencidos = [u for u, entrada in cache_metricas.items() if now - entrada['timestamp'] > limite]
    for user_id in vencidos:
        del cache_metricas[user_id]


def get_metricas_cached(user_id, cargar):
    """
    Obtiene las métricas del dashboard del usuario usando caché.
    Se renuevan cada CACHE_TTL_METRICAS minutos o tras invalidar_metricas().

    Args:
        user_id: ID del usuario
        cargar: función sin argumentos que calcula las métricas

    Returns:
        Las métricas (cacheadas o recién calculadas)
    """
    now = datetime.now()
    entrada = cache_metricas.get(user_id)

    if entrada and (now - entrada['timestamp']) <= timedelta(minutes=CACHE_TTL_METRICAS):
        return entrada['data']

    logger.info(f"🔄 Calculando métricas del usuario {user_id}...")
    data = cargar()
    _purgar_expiradas(now)
    cache_metricas[user_id] = {'data': data, 'timestamp': now}
    logger.info(f"✅ Caché de métricas actualizado para {user_id}")
    return data


def invalidar_metricas(user_id):
    """Descarta las métricas cacheadas del usuario (tras crear, editar o eliminar)"""
    cache_metricas.pop(user_id, None)


def clear_all_caches():
    """Limpia todos los cachés (útil para testing o forzar actualización)"""
    cache_metricas.clear()
    logger.info("🗑️ Todos los cachés han sido limpiados")


def get_resumen_cached(usuario, access_token=None):
    """
    Resumen de métricas del usuario (metricas_service.summary_report)
    con todas sus inspecciones y vehículos, cacheado por usuario
    """

    def cargar():
        repo = InspeccionRepository(access_token)
        inspecciones = repo.listar(usuario.id, limit=None)
        vehiculos = repo.listar_vehiculos(usuario.id)
        return metricas_service.summary_report(usuario, inspecciones, vehiculos)

    return get_metricas_cached(usuario.id, cargar)
