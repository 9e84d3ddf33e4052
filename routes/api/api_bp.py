"""
API JSON de inspecciones

Autenticación por 'Authorization: Bearer <access_token>' de Supabase.
Todas las respuestas llevan {success: bool, ...} y cabeceras CORS abiertas.
"""
import logging

from flask import Blueprint, request, jsonify, g

import helpers
from dominio import InspectionItem, ItemNotFoundError, PermissionDeniedError, checklist
from dominio.comun import es_uuid
from services import storage_service, perfil_service
from services.cache_service import get_resumen_cached, invalidar_metricas
from services.inspeccion_repository import InspeccionRepository, LIMITE_POR_DEFECTO
from services.supabase_client import SupabaseError

logger = logging.getLogger(__name__)

api_bp = Blueprint('api', __name__, url_prefix='/api')

CORS_HEADERS = {
    'Access-Control-Allow-Credentials': 'true',
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'GET,OPTIONS,PATCH,DELETE,POST,PUT',
    'Access-Control-Allow-Headers': (
        'X-CSRF-Token, X-Requested-With, Accept, Accept-Version, Content-Length, '
        'Content-MD5, Content-Type, Date, X-Api-Version, Authorization'
    ),
}


@api_bp.after_request
def agregar_cors(response):
    response.headers.update(CORS_HEADERS)
    if request.path.startswith('/api/inspections/'):
        response.headers['Cache-Control'] = 'no-cache, no-store, must-revalidate'
        response.headers['X-Content-Type-Options'] = 'nosniff'
    return response


def respuesta_error(mensaje, status, details=None):
    cuerpo = {"success": False, "error": mensaje}
    if details is not None:
        cuerpo["details"] = details
    return jsonify(cuerpo), status


def _user_id():
    return g.usuario_api.get('id')


def _es_numero(valor):
    try:
        float(valor)
    except (TypeError, ValueError):
        return False
    return True


def validar_inspection_data(inspection_data):
    """Aplica las reglas de InspectionItem a cada {categoria: {item: dato}}"""
    if not isinstance(inspection_data, dict):
        return ['inspection_data debe ser un objeto {categoría: {ítem: datos}}']

    errores = []
    for categoria, items in inspection_data.items():
        if not isinstance(items, dict):
            errores.append(f'{categoria}: los ítems deben ser un objeto')
            continue
        for nombre, dato in items.items():
            if not isinstance(dato, dict):
                errores.append(f'{categoria} - {nombre}: datos del ítem inválidos')
                continue
            _, errores_item = InspectionItem.validate_data({
                'category': categoria,
                'item_name': nombre,
                'score': dato.get('score'),
                'priority': dato.get('priority'),
                'repair_cost': dato.get('repairCost', dato.get('repair_cost')),
            })
            errores.extend(f'{categoria} - {nombre}: {error}' for error in errores_item)
    return errores


def validar_datos_inspeccion(data):
    """
    Valida los campos de una fila de inspección enviada por el cliente

    Returns:
        Lista de errores (vacía si es válida)
    """
    if not isinstance(data, dict):
        return ['Los datos de actualización son requeridos']

    errores = []
    vehiculo = data.get('vehicle_info')
    if isinstance(vehiculo, dict):
        for campo, mensaje in (
            ('marca', 'La marca del vehículo no puede estar vacía'),
            ('modelo', 'El modelo del vehículo no puede estar vacío'),
            ('placa', 'La placa del vehículo no puede estar vacía'),
        ):
            if campo in vehiculo and not str(vehiculo[campo] or '').strip():
                errores.append(mensaje)

    if 'total_score' in data:
        valor = data['total_score']
        if not _es_numero(valor) or not 0 <= float(valor) <= 100:
            errores.append('El puntaje total debe estar entre 0 y 100')

    if 'total_repair_cost' in data:
        valor = data['total_repair_cost']
        if not _es_numero(valor) or float(valor) < 0:
            errores.append('El costo de reparación no puede ser negativo')

    if 'inspection_data' in data:
        errores.extend(validar_inspection_data(data['inspection_data']))

    return errores


# ============================================
# INSPECCIONES
# ============================================

@api_bp.route('/inspections', methods=['GET'])
@helpers.token_required
def listar_inspecciones():
    """Últimas inspecciones del usuario (máximo 50)"""
    try:
        filas = InspeccionRepository(g.access_token).listar_filas(_user_id(), limit=LIMITE_POR_DEFECTO)
    except SupabaseError as e:
        logger.error(f"❌ API Error: {str(e)}")
        return respuesta_error(str(e) or 'Error interno del servidor', 500)
    return jsonify({"success": True, "data": filas})


@api_bp.route('/inspections', methods=['POST'])
@helpers.token_required
def crear_inspeccion():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return respuesta_error('Datos de la inspección requeridos', 400)

    vehiculo = data.get('vehicle_info')
    if not isinstance(vehiculo, dict) or not str(vehiculo.get('placa') or '').strip():
        return respuesta_error('Información del vehículo y placa son requeridos', 400)

    errores = validar_datos_inspeccion(data)
    if errores:
        return respuesta_error('Datos de la inspección inválidos', 400, errores)

    try:
        creada = InspeccionRepository(g.access_token).crear_fila(data, _user_id())
    except SupabaseError as e:
        logger.error(f"❌ API Error: {str(e)}")
        return respuesta_error(str(e), 500, e.details)

    invalidar_metricas(_user_id())
    return jsonify({"success": True, "data": creada})


@api_bp.route('/inspections/<inspection_id>', methods=['GET', 'PUT', 'DELETE'])
@helpers.token_required
def inspeccion_por_id(inspection_id):
    if not es_uuid(inspection_id):
        return respuesta_error('ID de inspección inválido', 400)

    repo = InspeccionRepository(g.access_token)
    try:
        repo.verificar_propiedad(inspection_id, _user_id())
    except ItemNotFoundError as e:
        return respuesta_error(str(e), 404)
    except PermissionDeniedError as e:
        return respuesta_error(str(e), 403)

    try:
        if request.method == 'GET':
            logger.info(f"📄 Obteniendo inspección {inspection_id}")
            return jsonify({"success": True, "data": repo.obtener_fila(inspection_id)})

        if request.method == 'PUT':
            data = request.get_json(silent=True)
            errores = validar_datos_inspeccion(data)
            if errores:
                return respuesta_error('Datos de actualización inválidos', 400, errores)

            actualizada = repo.actualizar_fila(inspection_id, data)
            invalidar_metricas(_user_id())
            logger.info(f"✏️ Inspección actualizada {inspection_id}")
            return jsonify({
                "success": True,
                "data": actualizada,
                "message": "Inspección actualizada exitosamente"
            })

        repo.eliminar(inspection_id)
        invalidar_metricas(_user_id())
        return jsonify({
            "success": True,
            "message": "Inspección eliminada exitosamente",
            "data": {"id": inspection_id}
        })

    except ItemNotFoundError as e:
        return respuesta_error(str(e), 404)
    except SupabaseError as e:
        logger.error(f"❌ Error en /api/inspections/{inspection_id}: {str(e)}")
        return respuesta_error(str(e), 500, e.details)


# ============================================
# IMÁGENES
# ============================================

@api_bp.route('/upload-image', methods=['POST'])
@helpers.token_required
def upload_image():
    """
    Sube una foto en base64: {image, fileName, userId, category, itemName}

    Prueba inspection-photos, luego inspection-images y por último
    temp-inspections.
    """
    data = request.get_json(silent=True) or {}
    image = data.get('image')
    file_name = data.get('fileName')

    if not image or not file_name:
        return respuesta_error('Imagen y nombre de archivo son requeridos', 400)

    if data.get('userId') and data['userId'] != _user_id():
        return respuesta_error('No tienes permisos para subir imágenes de otro usuario', 403)

    logger.info("📤 Procesando upload de imagen...")
    try:
        foto = storage_service.subir_imagen(
            image,
            file_name,
            user_id=_user_id(),
            category=data.get('category'),
            item_name=data.get('itemName'),
        )
    except storage_service.StorageError as e:
        if e.details:
            return respuesta_error(str(e), 500, e.details)
        return respuesta_error(str(e), 400)

    return jsonify({
        "success": True,
        "url": foto['url'],
        "fileName": foto['file_name'],
        "bucket": foto['bucket'],
        "originalName": foto['original_name'],
        "size": foto['size'],
        "message": f"Imagen subida exitosamente a {foto['bucket']}",
    })


# ============================================
# CHECKLIST Y MÉTRICAS
# ============================================

@api_bp.route('/checklist', methods=['GET'])
def obtener_checklist():
    return jsonify({
        "success": True,
        "data": checklist.CHECKLIST,
        "total_items": checklist.total_items(),
        "categories": checklist.categories(),
    })


def serializar_reporte(reporte):
    """Convierte las entidades del resumen de métricas en dicts JSON"""
    vehiculos = []
    for vm in reporte['trends']['vehicle_metrics']:
        ultima = vm['last_inspection']
        vehiculos.append({
            **vm,
            'vehicle': vm['vehicle'].to_dict(),
            'last_inspection': ultima.to_summary() if ultima else None,
        })

    return {
        **reporte,
        'trends': {**reporte['trends'], 'vehicle_metrics': vehiculos},
    }


@api_bp.route('/metrics', methods=['GET'])
@helpers.token_required
def metricas():
    """Resumen de métricas del usuario (cacheado)"""
    try:
        usuario = perfil_service.cargar_usuario(g.usuario_api, g.access_token)
        reporte = get_resumen_cached(usuario, g.access_token)
    except SupabaseError as e:
        logger.error(f"❌ Error calculando métricas: {str(e)}")
        return respuesta_error(str(e), 500)

    return jsonify({"success": True, "data": serializar_reporte(reporte)})
