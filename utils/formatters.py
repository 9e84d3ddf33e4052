"""
Utilidades para formateo y transformación de datos
"""
from datetime import datetime


def limpiar_none(data):
    """Convierte valores None a strings vacíos para evitar mostrar 'none' en formularios"""
    if isinstance(data, dict):
        return {k: (v if v is not None else '') for k, v in data.items()}
    return data


def format_fecha_filter(fecha_str):
    """Formatea fechas al formato dd/mm/yyyy para mostrar en templates"""
    if not fecha_str or fecha_str == "-":
        return "-"
    try:
        # Manejar timestamps ISO con T y timezone
        fecha_limpia = str(fecha_str).split('T')[0]
        fecha = datetime.strptime(fecha_limpia, '%Y-%m-%d')
        return fecha.strftime('%d/%m/%Y')
    except ValueError:
        # Si ya está en otro formato se muestra tal cual
        return str(fecha_str)


def format_cop_filter(valor):
    """Formatea un importe en pesos colombianos con separador de miles: $1.234.567"""
    try:
        importe = float(valor or 0)
    except (TypeError, ValueError):
        return "-"
    return f"${importe:,.0f}".replace(',', '.')


def format_kilometraje(km):
    if not km:
        return "-"
    return f"{int(km):,} km".replace(',', '.')
