"""
Blueprint para gestión de Inspecciones de vehículos 4x4

Este módulo incluye:
- Dashboard paginado con filtro por estado
- Creación de inspecciones a partir de los datos del vehículo
- Evaluación de ítems del checklist (puntuación, costo, notas, fotos)
- Cierre de la inspección y reporte PDF
"""
import io
import logging

from flask import Blueprint, render_template, request, redirect, url_for, session, send_file, g

import helpers
from dominio import (
    Inspection, InspectionItem, Vehicle,
    ValidationError, ItemNotFoundError, PermissionDeniedError,
)
from services import storage_service, pdf_service, metricas_service
from services.cache_service import invalidar_metricas
from services.inspeccion_repository import InspeccionRepository
from services.supabase_client import SupabaseError
from utils.formatters import limpiar_none
from utils.messages import flash_success, flash_error, flash_warning, flash_validacion
from utils.pagination import get_pagination

logger = logging.getLogger(__name__)

# Crear Blueprint con prefijo /inspecciones
inspecciones_bp = Blueprint('inspecciones', __name__, url_prefix='/inspecciones')

CAMPOS_VEHICULO = ('marca', 'modelo', 'ano', 'placa', 'kilometraje', 'color', 'numero_motor', 'numero_chasis')


def _repo():
    return InspeccionRepository(g.access_token)


def _cargar_inspeccion(inspeccion_id):
    """Carga la inspección del usuario en sesión; None (con flash) si no es posible"""
    try:
        return _repo().obtener(inspeccion_id, session["usuario_id"])
    except ItemNotFoundError:
        flash_error("Inspección no encontrada")
    except PermissionDeniedError as e:
        flash_error(str(e))
    except SupabaseError as e:
        flash_error(f"Error al obtener inspección: {str(e)}")
    return None


def _guardar(inspeccion):
    try:
        _repo().guardar(inspeccion)
    except SupabaseError as e:
        flash_error(str(e))
        return False
    invalidar_metricas(session["usuario_id"])
    return True


def _volver(inspeccion_id, categoria=None):
    return redirect(url_for('inspecciones.ver', inspeccion_id=inspeccion_id, categoria=categoria))


def _esta_cerrada(inspeccion):
    """Las inspecciones completadas o archivadas ya no se modifican"""
    if inspeccion.status in ('completed', 'archived'):
        flash_error("La inspección ya está cerrada")
        return True
    return False


# ============================================
# DASHBOARD DE INSPECCIONES
# ============================================

@inspecciones_bp.route('')
@helpers.login_required
@helpers.requiere_permiso('inspecciones', 'read')
def dashboard():
    """Listado de inspecciones del usuario con filtro por estado"""
    estado = request.args.get('estado') or None
    if estado not in Inspection.valid_statuses():
        estado = None

    pagination = get_pagination(per_page_default=20)
    repo = _repo()

    try:
        pagination.total = repo.contar(session["usuario_id"], estado)
        inspecciones = repo.listar(session["usuario_id"], estado, pagination.limit, pagination.offset)
    except SupabaseError as e:
        flash_error(str(e))
        inspecciones = []

    return render_template(
        "inspecciones_dashboard.html",
        inspecciones=inspecciones,
        pagination=pagination,
        estado=estado,
        estados=Inspection.valid_statuses()
    )


# ============================================
# NUEVA INSPECCIÓN
# ============================================

@inspecciones_bp.route('/nueva', methods=["GET", "POST"])
@helpers.login_required
@helpers.requiere_permiso('inspecciones', 'write')
def nueva():
    """Registrar el vehículo y crear la inspección con el checklist completo"""

    if request.method == "POST":
        datos = {campo: request.form.get(campo) for campo in CAMPOS_VEHICULO}

        try:
            vehiculo = Vehicle(user_id=session["usuario_id"], **datos)
        except ValidationError as e:
            flash_validacion(e)
            return render_template("nueva_inspeccion.html", datos=limpiar_none(request.form.to_dict()), marcas=Vehicle.supported_brands())

        valido, advertencias = vehiculo.validate()
        if not valido:
            for advertencia in advertencias:
                flash_warning(advertencia)

        repo = _repo()
        try:
            vehiculo = repo.obtener_o_crear_vehiculo(vehiculo, session["usuario_id"])
            inspeccion = Inspection.create_from_checklist(
                session["usuario_id"],
                vehiculo.id,
                vehicle=vehiculo,
                inspector_name=request.form.get("inspector_name") or session.get("usuario"),
                notes=request.form.get("notes"),
            )
            repo.crear(inspeccion)
        except SupabaseError as e:
            flash_error(str(e))
            return render_template("nueva_inspeccion.html", datos=limpiar_none(request.form.to_dict()), marcas=Vehicle.supported_brands())

        invalidar_metricas(session["usuario_id"])
        flash_success(f"Inspección creada para {vehiculo}")
        return redirect(url_for('inspecciones.ver', inspeccion_id=inspeccion.id))

    return render_template("nueva_inspeccion.html", datos={}, marcas=Vehicle.supported_brands())


# ============================================
# VER / EVALUAR
# ============================================

@inspecciones_bp.route('/ver/<inspeccion_id>')
@helpers.login_required
@helpers.requiere_permiso('inspecciones', 'read')
def ver(inspeccion_id):
    """Detalle de la inspección con el checklist agrupado por categoría"""
    inspeccion = _cargar_inspeccion(inspeccion_id)
    if inspeccion is None:
        return redirect(url_for('inspecciones.dashboard'))

    categorias = inspeccion.categories()
    categoria = request.args.get('categoria')
    if categoria not in categorias:
        categoria = categorias[0] if categorias else None

    metricas = inspeccion.get_detailed_metrics()

    return render_template(
        "ver_inspeccion.html",
        inspeccion=inspeccion,
        categorias=categorias,
        categoria=categoria,
        items=inspeccion.items_by_category(categoria) if categoria else [],
        metricas=metricas,
        insights=metricas_service.inspection_insights(metricas),
        prioridades=InspectionItem.valid_priorities(),
    )


@inspecciones_bp.route('/evaluar/<inspeccion_id>', methods=["POST"])
@helpers.login_required
@helpers.requiere_permiso('inspecciones', 'write')
def evaluar(inspeccion_id):
    """Guardar la evaluación de un ítem"""
    categoria = request.form.get("category")
    item_name = request.form.get("item_name")

    inspeccion = _cargar_inspeccion(inspeccion_id)
    if inspeccion is None:
        return redirect(url_for('inspecciones.dashboard'))

    if _esta_cerrada(inspeccion):
        return _volver(inspeccion_id, categoria)

    try:
        inspeccion.evaluate_item(
            categoria,
            item_name,
            score=request.form.get("score"),
            notes=request.form.get("notes"),
            repair_cost=request.form.get("repair_cost"),
            priority=request.form.get("priority") or 'medium',
            evaluated_by=session["usuario_id"],
        )
    except ItemNotFoundError as e:
        flash_error(str(e))
        return _volver(inspeccion_id, categoria)
    except ValidationError as e:
        flash_validacion(e)
        return _volver(inspeccion_id, categoria)

    if inspeccion.status == 'draft':
        inspeccion.update(status='in_progress')

    if _guardar(inspeccion):
        flash_success(f"{item_name} evaluado")
    return _volver(inspeccion_id, categoria)


@inspecciones_bp.route('/pendiente/<inspeccion_id>', methods=["POST"])
@helpers.login_required
@helpers.requiere_permiso('inspecciones', 'write')
def marcar_pendiente(inspeccion_id):
    """Descartar la evaluación de un ítem"""
    categoria = request.form.get("category")
    item_name = request.form.get("item_name")

    inspeccion = _cargar_inspeccion(inspeccion_id)
    if inspeccion is None:
        return redirect(url_for('inspecciones.dashboard'))

    if _esta_cerrada(inspeccion):
        return _volver(inspeccion_id, categoria)

    try:
        inspeccion.mark_item_pending(categoria, item_name)
    except ItemNotFoundError as e:
        flash_error(str(e))
        return _volver(inspeccion_id, categoria)

    if _guardar(inspeccion):
        flash_success(f"{item_name} marcado como pendiente")
    return _volver(inspeccion_id, categoria)


# ============================================
# FOTOS
# ============================================

@inspecciones_bp.route('/foto/<inspeccion_id>', methods=["POST"])
@helpers.login_required
@helpers.requiere_permiso('inspecciones', 'write')
def subir_foto(inspeccion_id):
    """Subir una foto a un ítem de la inspección"""
    categoria = request.form.get("category")
    item_name = request.form.get("item_name")

    if 'foto' not in request.files or request.files['foto'].filename == '':
        flash_error("No se seleccionó ninguna imagen")
        return _volver(inspeccion_id, categoria)

    inspeccion = _cargar_inspeccion(inspeccion_id)
    if inspeccion is None:
        return redirect(url_for('inspecciones.dashboard'))

    if _esta_cerrada(inspeccion):
        return _volver(inspeccion_id, categoria)

    if inspeccion.find_item(categoria, item_name) is None:
        flash_error(f"Item no encontrado: {categoria} - {item_name}")
        return _volver(inspeccion_id, categoria)

    archivo = request.files['foto']
    try:
        foto = storage_service.subir_imagen(
            archivo.read(), archivo.filename,
            user_id=session["usuario_id"], category=categoria, item_name=item_name
        )
    except storage_service.StorageError as e:
        flash_error(str(e))
        return _volver(inspeccion_id, categoria)

    inspeccion.add_item_image(categoria, item_name, {
        'url': foto['url'],
        'file_name': foto['file_name'],
        'size': foto['size'],
    })

    if _guardar(inspeccion):
        _repo().registrar_foto(inspeccion_id, session["usuario_id"], categoria, item_name, foto)
        flash_success("Foto subida correctamente")
    return _volver(inspeccion_id, categoria)


# ============================================
# EDITAR / COMPLETAR / ELIMINAR
# ============================================

@inspecciones_bp.route('/editar/<inspeccion_id>', methods=["POST"])
@helpers.login_required
@helpers.requiere_permiso('inspecciones', 'write')
def editar(inspeccion_id):
    """Actualizar inspector y observaciones"""
    inspeccion = _cargar_inspeccion(inspeccion_id)
    if inspeccion is None:
        return redirect(url_for('inspecciones.dashboard'))

    if _esta_cerrada(inspeccion):
        return _volver(inspeccion_id)

    inspeccion.update(
        inspector_name=request.form.get("inspector_name"),
        notes=request.form.get("notes"),
    )
    if _guardar(inspeccion):
        flash_success("Inspección actualizada correctamente")
    return _volver(inspeccion_id)


@inspecciones_bp.route('/completar/<inspeccion_id>', methods=["POST"])
@helpers.login_required
@helpers.requiere_permiso('inspecciones', 'write')
def completar(inspeccion_id):
    """Cerrar la inspección (requiere al menos 80% de ítems evaluados)"""
    inspeccion = _cargar_inspeccion(inspeccion_id)
    if inspeccion is None:
        return redirect(url_for('inspecciones.dashboard'))

    if inspeccion.status == 'completed':
        flash_warning("La inspección ya estaba completada")
        return _volver(inspeccion_id)

    try:
        inspeccion.complete()
    except ValidationError as e:
        flash_error(f"{str(e)} Evaluados: {round(inspeccion.completion_percentage)}%")
        return _volver(inspeccion_id)

    if not _guardar(inspeccion):
        return _volver(inspeccion_id)

    # El reporte se archiva en Storage; si falla la inspección queda igualmente cerrada
    try:
        storage_service.subir_reporte_pdf(
            pdf_service.generar_pdf_inspeccion(inspeccion),
            session["usuario_id"],
            inspeccion.id
        )
    except storage_service.StorageError as e:
        logger.warning(f"⚠️ No se pudo archivar el PDF de {inspeccion.id}: {str(e)}")

    flash_success("Inspección completada")
    return _volver(inspeccion_id)


@inspecciones_bp.route('/eliminar/<inspeccion_id>')
@helpers.login_required
@helpers.requiere_permiso('inspecciones', 'delete')
def eliminar(inspeccion_id):
    """Eliminar inspección y sus fotos registradas"""
    repo = _repo()
    try:
        repo.verificar_propiedad(inspeccion_id, session["usuario_id"])
        repo.eliminar(inspeccion_id)
    except (ItemNotFoundError, PermissionDeniedError, SupabaseError) as e:
        flash_error(f"Error al eliminar inspección: {str(e)}")
        return redirect(url_for('inspecciones.dashboard'))

    invalidar_metricas(session["usuario_id"])
    flash_success("Inspección eliminada correctamente")
    return redirect(url_for('inspecciones.dashboard'))


# ============================================
# REPORTE PDF
# ============================================

@inspecciones_bp.route('/pdf/<inspeccion_id>')
@helpers.login_required
@helpers.requiere_permiso('inspecciones', 'read')
def descargar_pdf(inspeccion_id):
    """Descargar el reporte PDF de la inspección"""
    inspeccion = _cargar_inspeccion(inspeccion_id)
    if inspeccion is None:
        return redirect(url_for('inspecciones.dashboard'))

    pdf = pdf_service.generar_pdf_inspeccion(
        inspeccion,
        incluir_pendientes=request.args.get('completo') == '1'
    )

    return send_file(
        io.BytesIO(pdf),
        mimetype='application/pdf',
        as_attachment=True,
        download_name=pdf_service.nombre_archivo_pdf(inspeccion)
    )
