"""
Repositorio de inspecciones sobre Supabase

Fila de la tabla `inspections`:
    vehicle_info        datos del vehículo (marca, modelo, ano, placa, ...)
    inspection_data     {categoria: {item: {score, condition, notes, repairCost,
                         priority, evaluated, completed, images, evaluatedAt,
                         evaluatedBy}}}
    photos              {"categoria - item": [urls]} derivado de las imágenes
    total_score         puntuación media de los ítems evaluados (0-10)
    total_repair_cost   suma de costos de reparación
    completion_percentage, status, notes, inspector_name, inspection_date

Solo se guardan en inspection_data los ítems con algún dato; al leer, el
resto se completa con el checklist.
"""
import logging

from dominio import (
    Inspection, InspectionItem, Vehicle,
    ItemNotFoundError, PermissionDeniedError, ValidationError,
    checklist,
)
from dominio.comun import ahora_iso, es_uuid
from services.supabase_client import SupabaseClient, SupabaseError

logger = logging.getLogger(__name__)

LIMITE_POR_DEFECTO = 50

# Campos que el cliente nunca puede sobrescribir
CAMPOS_PROTEGIDOS = ('id', 'user_id', 'created_at')


# ============================================
# MAPEO FILA <-> ENTIDAD
# ============================================

def item_a_dato(item):
    return {
        'score': item.score,
        'condition': item.condition,
        'notes': item.notes,
        'repairCost': item.repair_cost,
        'priority': item.priority,
        'evaluated': item.is_evaluated(),
        'completed': item.completed,
        'images': [dict(imagen) for imagen in item.images],
        'evaluatedAt': item.evaluated_at,
        'evaluatedBy': item.evaluated_by,
    }


def dato_a_item(category, item_name, dato, inspection_id=None):
    dato = dato or {}
    return InspectionItem(
        category=category,
        item_name=item_name,
        inspection_id=inspection_id,
        # La condición se deriva de nuevo de la puntuación guardada
        score=dato.get('score') or None,
        notes=dato.get('notes'),
        repair_cost=dato.get('repairCost', dato.get('repair_cost', 0)),
        priority=dato.get('priority') or 'medium',
        completed=dato.get('completed', dato.get('evaluated', False)),
        images=dato.get('images'),
        evaluated_at=dato.get('evaluatedAt'),
        evaluated_by=dato.get('evaluatedBy'),
        structure=checklist.get_item(category, item_name),
    )


def _item_tiene_datos(item):
    return item.is_evaluated() or item.notes or item.images or item.repair_cost > 0


def fila_a_inspeccion(fila):
    """Construye la entidad Inspection a partir de una fila de Supabase"""
    vehicle_info = fila.get('vehicle_info') or {}
    metadata = {}

    try:
        vehiculo = Vehicle.from_dict({**vehicle_info, 'id': fila.get('vehicle_id')})
    except ValidationError as e:
        logger.warning(f"⚠️ Vehículo inválido en inspección {fila.get('id')}: {str(e)}")
        vehiculo = None
        metadata['vehicle_info'] = vehicle_info

    inspeccion = Inspection.create_from_checklist(
        user_id=fila.get('user_id'),
        vehicle_id=fila.get('vehicle_id') or vehicle_info.get('placa') or 'sin-vehiculo',
        id=fila.get('id'),
        vehicle=vehiculo,
        status=fila.get('status') or 'draft',
        notes=fila.get('notes'),
        inspector_name=fila.get('inspector_name'),
        inspection_date=fila.get('inspection_date'),
        metadata=metadata,
        created_at=fila.get('created_at'),
        updated_at=fila.get('updated_at'),
    )

    for categoria, items in (fila.get('inspection_data') or {}).items():
        if not isinstance(items, dict):
            continue
        for nombre, dato in items.items():
            if dato is not None and not isinstance(dato, dict):
                logger.warning(f"⚠️ Ítem ilegible en inspección {fila.get('id')}: {categoria} - {nombre}")
                continue
            try:
                item = dato_a_item(categoria, nombre, dato, inspeccion.id)
            except ValidationError as e:
                # Se conserva el ítem vacío del checklist
                logger.warning(f"⚠️ Ítem inválido en inspección {fila.get('id')}: {categoria} - {nombre}: {str(e)}")
                continue
            inspeccion.add_item(item)

    # La fecha de actualización es la de la fila, no la del recálculo
    inspeccion.updated_at = fila.get('updated_at') or inspeccion.updated_at
    return inspeccion


def inspeccion_a_fila(inspeccion):
    """Serializa la entidad al formato de la tabla `inspections`"""
    inspection_data = {}
    photos = {}

    for item in inspeccion.items:
        if not _item_tiene_datos(item):
            continue
        inspection_data.setdefault(item.category, {})[item.item_name] = item_a_dato(item)
        if item.images:
            photos[f"{item.category} - {item.item_name}"] = [imagen['url'] for imagen in item.images]

    if isinstance(inspeccion.vehicle, Vehicle):
        vehicle_info = inspeccion.vehicle.to_dict()
        for campo in ('id', 'user_id', 'created_at', 'updated_at'):
            vehicle_info.pop(campo, None)
    else:
        vehicle_info = inspeccion.metadata.get('vehicle_info') or {}

    return {
        'user_id': inspeccion.user_id,
        'vehicle_id': inspeccion.vehicle_id if es_uuid(inspeccion.vehicle_id) else None,
        'vehicle_info': vehicle_info,
        'inspection_data': inspection_data,
        'photos': photos,
        'status': inspeccion.status,
        'notes': inspeccion.notes,
        'inspector_name': inspeccion.inspector_name,
        'inspection_date': inspeccion.inspection_date,
        'total_score': round(inspeccion.overall_score, 2) if inspeccion.overall_score else 0,
        'total_repair_cost': inspeccion.total_repair_cost,
        'completion_percentage': round(inspeccion.completion_percentage, 2),
        'updated_at': ahora_iso(),
    }


def normalizar_fila(fila):
    """Garantiza que los campos JSON de la fila sean diccionarios"""
    if not isinstance(fila.get('vehicle_info'), dict):
        fila['vehicle_info'] = {'marca': '', 'modelo': '', 'placa': '', 'ano': '', 'kilometraje': ''}
    if not isinstance(fila.get('inspection_data'), dict):
        fila['inspection_data'] = {}
    if not isinstance(fila.get('photos'), dict):
        fila['photos'] = {}
    return fila


# ============================================
# REPOSITORIO
# ============================================

class InspeccionRepository:
    """Acceso a inspections, vehicles e inspection_photos con el token del usuario"""

    def __init__(self, access_token=None, client=None):
        self.db = client or SupabaseClient(access_token)

    # ---------- Filas crudas (API JSON) ----------

    def listar_filas(self, user_id, status=None, limit=LIMITE_POR_DEFECTO, offset=0):
        filtros = {'user_id': f'eq.{user_id}'}
        if status:
            filtros['status'] = f'eq.{status}'

        filas = self.db.get('inspections', filters=filtros, order='created_at.desc',
                            limit=limit, offset=offset)
        if filas is None:
            raise SupabaseError('Error cargando inspecciones')
        return [normalizar_fila(fila) for fila in filas]

    def contar(self, user_id, status=None):
        filtros = {'user_id': f'eq.{user_id}'}
        if status:
            filtros['status'] = f'eq.{status}'
        return self.db.count('inspections', filters=filtros)

    def obtener_fila(self, inspection_id):
        fila = self.db.get_by_id('inspections', inspection_id)
        if fila is None:
            raise ItemNotFoundError('Inspección no encontrada')
        return normalizar_fila(fila)

    def crear_fila(self, data, user_id):
        fila = {k: v for k, v in data.items() if k not in CAMPOS_PROTEGIDOS}
        fila['user_id'] = user_id
        fila['created_at'] = ahora_iso()

        creada = self.db.post('inspections', fila)
        if creada is None:
            raise SupabaseError('Error guardando la inspección')
        logger.info(f"✅ Inspección creada: {creada.get('id')}")
        return creada

    def actualizar_fila(self, inspection_id, cambios):
        datos = {k: v for k, v in cambios.items() if k not in CAMPOS_PROTEGIDOS}
        datos['updated_at'] = ahora_iso()

        actualizada = self.db.patch('inspections', inspection_id, datos)
        if actualizada is None:
            raise SupabaseError('Error actualizando la inspección')
        return actualizada

    def verificar_propiedad(self, inspection_id, user_id):
        """
        Comprueba que la inspección pertenece al usuario

        Raises:
            ItemNotFoundError: la inspección no existe
            PermissionDeniedError: pertenece a otro usuario
        """
        fila = self.db.get_by_id('inspections', inspection_id, select='id,user_id')
        if fila is None:
            raise ItemNotFoundError('Inspección no encontrada')
        if fila.get('user_id') != user_id:
            raise PermissionDeniedError('No tienes permisos para esta inspección')
        return True

    # ---------- Entidades ----------

    def listar(self, user_id, status=None, limit=LIMITE_POR_DEFECTO, offset=0):
        return [fila_a_inspeccion(fila) for fila in self.listar_filas(user_id, status, limit, offset)]

    def listar_por_rango(self, user_id, desde, hasta):
        """Inspecciones del usuario creadas entre dos fechas ISO (hasta exclusivo)"""
        filas = self.db.get(
            'inspections',
            filters={
                'user_id': f'eq.{user_id}',
                'and': f'(created_at.gte.{desde},created_at.lt.{hasta})',
            },
            order='created_at.asc'
        )
        if filas is None:
            raise SupabaseError('Error cargando inspecciones')
        return [fila_a_inspeccion(normalizar_fila(fila)) for fila in filas]

    def obtener(self, inspection_id, user_id=None):
        if user_id is not None:
            self.verificar_propiedad(inspection_id, user_id)
        return fila_a_inspeccion(self.obtener_fila(inspection_id))

    def crear(self, inspeccion):
        fila = inspeccion_a_fila(inspeccion)
        fila['created_at'] = inspeccion.created_at

        creada = self.db.post('inspections', fila)
        if creada is None:
            raise SupabaseError('Error guardando la inspección')

        inspeccion.id = creada.get('id')
        for item in inspeccion.items:
            item.inspection_id = inspeccion.id
        logger.info(f"✅ Inspección creada: {inspeccion.id}")
        return inspeccion

    def guardar(self, inspeccion):
        if not inspeccion.id:
            return self.crear(inspeccion)

        actualizada = self.db.patch('inspections', inspeccion.id, inspeccion_a_fila(inspeccion))
        if actualizada is None:
            raise SupabaseError('Error actualizando la inspección')
        return inspeccion

    def eliminar(self, inspection_id):
        """Elimina las fotos registradas y luego la inspección"""
        if not self.db.delete_where('inspection_photos', {'inspection_id': f'eq.{inspection_id}'}):
            logger.warning(f"⚠️ No se pudieron eliminar las fotos de la inspección {inspection_id}")

        if not self.db.delete('inspections', inspection_id):
            raise SupabaseError('Error eliminando la inspección')
        logger.info(f"🗑️ Inspección eliminada: {inspection_id}")
        return True

    def registrar_foto(self, inspection_id, user_id, category, item_name, foto):
        """Registra la foto subida en inspection_photos (no bloquea si falla)"""
        registro = self.db.post('inspection_photos', {
            'inspection_id': inspection_id,
            'user_id': user_id,
            'category': category,
            'item_name': item_name,
            'url': foto.get('url'),
            'file_name': foto.get('file_name'),
            'bucket': foto.get('bucket'),
            'size': foto.get('size'),
        })
        if registro is None:
            logger.warning(f"⚠️ No se pudo registrar la foto de {category} - {item_name}")
        return registro

    # ---------- Vehículos ----------

    def listar_vehiculos(self, user_id):
        filas = self.db.get('vehicles', filters={'user_id': f'eq.{user_id}'}, order='created_at.desc')
        vehiculos = []
        for fila in filas or []:
            try:
                vehiculos.append(Vehicle.from_dict(fila))
            except ValidationError as e:
                logger.warning(f"⚠️ Vehículo inválido {fila.get('id')}: {str(e)}")
        return vehiculos

    def obtener_o_crear_vehiculo(self, vehiculo, user_id):
        """Busca el vehículo del usuario por placa; si no existe lo crea"""
        existentes = self.db.get(
            'vehicles',
            filters={'user_id': f'eq.{user_id}', 'placa': f'eq.{vehiculo.placa}'},
            limit=1
        )
        if existentes:
            datos = {**existentes[0], **{
                k: v for k, v in vehiculo.to_dict().items()
                if v is not None and k not in ('id', 'user_id', 'created_at', 'updated_at')
            }}
            actualizado = Vehicle.from_dict(datos)
            self.db.patch('vehicles', actualizado.id, {
                'kilometraje': actualizado.kilometraje,
                'color': actualizado.color,
                'updated_at': ahora_iso(),
            })
            return actualizado

        datos = vehiculo.to_dict()
        datos.pop('id', None)
        datos['user_id'] = user_id

        creado = self.db.post('vehicles', datos)
        if creado is None:
            raise SupabaseError('Error guardando el vehículo')
        logger.info(f"🚙 Vehículo registrado: {vehiculo}")
        return Vehicle.from_dict(creado)
