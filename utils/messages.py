"""
Wrapper unificado para mensajes flash() - UX consistente
"""
from flask import flash as flask_flash


EMOJIS = {
    'success': '✅',
    'error': '❌',
    'warning': '⚠️',
    'info': 'ℹ️'
}


def _flash(message, category, use_emoji):
    if use_emoji:
        message = f"{EMOJIS[category]} {message}"
    flask_flash(message, category)


def flash_success(message, use_emoji=False):
    """
    Muestra un mensaje de éxito

    Ejemplo:
        flash_success("Inspección creada correctamente")
    """
    _flash(message, 'success', use_emoji)


def flash_error(message, use_emoji=False):
    """
    Muestra un mensaje de error

    Ejemplo:
        flash_error("No se pudo guardar la evaluación", use_emoji=True)  # "❌ No se pudo..."
    """
    _flash(message, 'error', use_emoji)


def flash_warning(message, use_emoji=False):
    _flash(message, 'warning', use_emoji)


def flash_info(message, use_emoji=False):
    _flash(message, 'info', use_emoji)


def flash_validacion(error):
    """
    Muestra un ValidationError del dominio: un mensaje por cada error de la
    lista si la trae, o el mensaje general si no
    """
    errores = getattr(error, 'errors', None) or [str(error)]
    for mensaje in errores:
        flash_error(mensaje)
