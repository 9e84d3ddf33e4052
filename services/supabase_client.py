"""
Cliente simplificado para operaciones con Supabase (PostgREST)
"""
import logging

import requests
from config import config

logger = logging.getLogger(__name__)


class SupabaseError(Exception):
    """Error de comunicación con Supabase"""

    def __init__(self, message, status_code=None, details=None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class SupabaseClient:
    """Cliente para interactuar con las tablas de Supabase"""

    def __init__(self, access_token=None):
        self.url = config.SUPABASE_URL
        self.headers = config.auth_headers(access_token)

    def _log_error(self, metodo, table, response):
        logger.warning(f"⚠️ Error en {metodo} {table}: {response.status_code}")
        logger.warning(f"📄 Respuesta: {response.text[:200]}")

    def get(self, table, select="*", filters=None, order=None, limit=None, offset=None, timeout=10):
        """
        Realiza una consulta GET a una tabla

        Args:
            table: Nombre de la tabla
            select: Campos a seleccionar (default: *)
            filters: Diccionario de filtros {campo: valor}
            order: Ordenamiento (ej: "created_at.desc")
            limit: Límite de resultados
            offset: Desplazamiento para paginación
            timeout: Timeout en segundos

        Returns:
            Lista de resultados o None si hay error
        """
        url = f"{self.url}/rest/v1/{table}?select={select}"

        if filters:
            for key, value in filters.items():
                url += f"&{key}={value}"

        if order:
            url += f"&order={order}"

        if limit:
            url += f"&limit={limit}"

        if offset:
            url += f"&offset={offset}"

        try:
            response = requests.get(url, headers=self.headers, timeout=timeout)
            if response.ok:
                return response.json()
            self._log_error("GET", table, response)
            return None
        except requests.exceptions.RequestException as e:
            logger.error(f"❌ Excepción en GET {table}: {type(e).__name__}: {str(e)}")
            return None

    def get_by_id(self, table, record_id, select="*"):
        """
        Obtiene un registro por ID

        Returns:
            Diccionario con el registro o None si no existe
        """
        result = self.get(table, select=select, filters={"id": f"eq.{record_id}"})
        if result and len(result) > 0:
            return result[0]
        return None

    def post(self, table, data, timeout=10):
        """
        Crea un nuevo registro

        Args:
            table: Nombre de la tabla
            data: Diccionario con los datos a insertar
            timeout: Timeout en segundos

        Returns:
            Registro creado o None si hay error
        """
        url = f"{self.url}/rest/v1/{table}"

        try:
            response = requests.post(url, json=data, headers=self.headers, timeout=timeout)
            if response.ok:
                result = response.json()
                return result[0] if result else None
            self._log_error("POST", table, response)
            return None
        except requests.exceptions.RequestException as e:
            logger.error(f"❌ Excepción en POST {table}: {type(e).__name__}: {str(e)}")
            return None

    def patch(self, table, record_id, data, timeout=10):
        """
        Actualiza un registro existente

        Returns:
            Registro actualizado o None si hay error
        """
        url = f"{self.url}/rest/v1/{table}?id=eq.{record_id}"

        try:
            response = requests.patch(url, json=data, headers=self.headers, timeout=timeout)
            if response.ok:
                result = response.json()
                return result[0] if result else None
            self._log_error("PATCH", table, response)
            return None
        except requests.exceptions.RequestException as e:
            logger.error(f"❌ Excepción en PATCH {table}: {type(e).__name__}: {str(e)}")
            return None

    def delete(self, table, record_id, timeout=10):
        """
        Elimina un registro

        Returns:
            True si se eliminó correctamente, False si hubo error
        """
        return self.delete_where(table, {"id": f"eq.{record_id}"}, timeout=timeout)

    def delete_where(self, table, filters, timeout=10):
        """Elimina todos los registros que cumplen los filtros"""
        condiciones = "&".join(f"{key}={value}" for key, value in filters.items())
        url = f"{self.url}/rest/v1/{table}?{condiciones}"

        try:
            response = requests.delete(url, headers=self.headers, timeout=timeout)
            if response.ok:
                return True
            self._log_error("DELETE", table, response)
            return False
        except requests.exceptions.RequestException as e:
            logger.error(f"❌ Excepción en DELETE {table}: {type(e).__name__}: {str(e)}")
            return False

    def count(self, table, filters=None, timeout=10):
        """
        Cuenta registros en una tabla usando Content-Range

        Returns:
            Número de registros o 0 si hay error
        """
        url = f"{self.url}/rest/v1/{table}?select=id"
        if filters:
            for key, value in filters.items():
                url += f"&{key}={value}"

        headers = {**self.headers, "Prefer": "count=exact", "Range": "0-0"}
        try:
            response = requests.get(url, headers=headers, timeout=timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"❌ Excepción en COUNT {table}: {type(e).__name__}: {str(e)}")
            return 0

        if not response.ok:
            self._log_error("COUNT", table, response)
            return 0

        content_range = response.headers.get("Content-Range", "")
        try:
            return int(content_range.split("/")[-1])
        except (ValueError, IndexError):
            return len(response.json() or [])


# Instancia global del cliente (anon key)
db = SupabaseClient()
