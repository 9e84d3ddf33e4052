"""
Constantes y utilidades compartidas por las entidades del dominio
"""
import re
from datetime import datetime, timezone
from typing import Optional

# ============================================
# CONDICIONES (bucket determinista de la puntuación)
# ============================================

CONDICIONES = {
    'EXCELENTE': {'min': 9, 'color': '#10B981', 'prioridad': 1},
    'BUENO': {'min': 7, 'color': '#3B82F6', 'prioridad': 2},
    'REGULAR': {'min': 5, 'color': '#F59E0B', 'prioridad': 3},
    'DEFICIENTE': {'min': 3, 'color': '#F97316', 'prioridad': 4},
    'CRÍTICO': {'min': 0, 'color': '#EF4444', 'prioridad': 5},
}

COLOR_NO_EVALUADO = '#6B7280'

PRIORIDADES = ['low', 'medium', 'high']

UUID_REGEX = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE
)


def condition_from_score(score) -> Optional[str]:
    """Convierte una puntuación (1-10) en su condición"""
    if not score:
        return None
    if score >= 9:
        return 'EXCELENTE'
    if score >= 7:
        return 'BUENO'
    if score >= 5:
        return 'REGULAR'
    if score >= 3:
        return 'DEFICIENTE'
    return 'CRÍTICO'


def get_condition_by_score(score):
    """
    Devuelve la condición con sus atributos de presentación.

    Acepta puntuaciones decimales (promedios). Una puntuación vacía o 0
    se trata como CRÍTICO, igual que el resto de valores bajos.

    Returns:
        Diccionario {'name', 'min', 'color', 'prioridad'}
    """
    nombre = condition_from_score(score) or 'CRÍTICO'
    return {'name': nombre, **CONDICIONES[nombre]}


# ============================================
# UTILIDADES
# ============================================

def ahora_iso():
    """Timestamp actual en ISO 8601 (UTC)"""
    return datetime.now(timezone.utc).isoformat()


def parse_fecha_iso(valor) -> Optional[datetime]:
    """Convierte un timestamp ISO (con o sin zona) a datetime con zona UTC"""
    if not valor:
        return None
    if isinstance(valor, datetime):
        fecha = valor
    else:
        try:
            fecha = datetime.fromisoformat(str(valor).replace('Z', '+00:00'))
        except ValueError:
            return None
    if fecha.tzinfo is None:
        fecha = fecha.replace(tzinfo=timezone.utc)
    return fecha


def normalizar_texto(valor):
    """Recorta y colapsa espacios repetidos"""
    if valor is None:
        return ''
    return re.sub(r'\s+', ' ', str(valor).strip())


def texto_o_none(valor):
    """Recorta el texto y devuelve None si queda vacío"""
    if valor is None:
        return None
    valor = str(valor).strip()
    return valor or None


def es_uuid(valor):
    return isinstance(valor, str) and bool(UUID_REGEX.match(valor))
