"""
Entidad Inspection - inspección completa de un vehículo

Una inspección posee sus ítems indexados por (categoría, nombre) y mantiene
tres métricas agregadas que se recalculan cada vez que cambia un ítem:

- completion_percentage: ítems evaluados / ítems totales * 100
- overall_score: media de las puntuaciones de los ítems evaluados
- total_repair_cost: suma de costos de reparación de todos los ítems
"""
from typing import Dict, List, Optional

from .comun import ahora_iso, condition_from_score, texto_o_none
from .errores import ItemNotFoundError, ValidationError
from .item_inspeccion import InspectionItem
from . import checklist as checklist_mod

ESTADOS_VALIDOS = ['draft', 'in_progress', 'completed', 'archived']

# Progreso mínimo para poder cerrar una inspección
PORCENTAJE_MINIMO_COMPLETAR = 80

APP_VERSION = '1.0.0'


class Inspection:
    """Inspección de vehículo con sus ítems y métricas"""

    CAMPOS_ACTUALIZABLES = ('status', 'notes', 'inspector_name', 'inspection_date', 'metadata')

    def __init__(self, user_id=None, vehicle_id=None, id=None, vehicle=None,
                 status='draft', items=None, notes=None, inspector_name=None,
                 inspection_date=None, overall_score=None, completion_percentage=0,
                 total_repair_cost=0, metadata=None, created_at=None, updated_at=None):
        self._validar_requeridos(user_id, vehicle_id)

        self.id = id
        self.user_id = user_id
        self.vehicle_id = vehicle_id
        self.vehicle = vehicle

        self.status = self._validar_estado(status)
        self.notes = texto_o_none(notes)
        self.inspector_name = texto_o_none(inspector_name)
        self.inspection_date = inspection_date or ahora_iso()

        self.items: List[InspectionItem] = self._procesar_items(items)
        self.overall_score: Optional[float] = overall_score
        self.completion_percentage = completion_percentage
        self.total_repair_cost = total_repair_cost

        self.metadata = {
            'app_version': APP_VERSION,
            'structure': None,
            'last_calculation': None,
            **(metadata or {}),
        }

        self.created_at = created_at or ahora_iso()
        self.updated_at = updated_at or ahora_iso()

        if self.items:
            self._recalcular_metricas()

    # ============================================
    # VALIDACIONES
    # ============================================

    @staticmethod
    def _validar_requeridos(user_id, vehicle_id):
        if not user_id:
            raise ValidationError('ID de usuario requerido')
        if not vehicle_id:
            raise ValidationError('ID de vehículo requerido')

    @staticmethod
    def _validar_estado(status):
        if status not in ESTADOS_VALIDOS:
            raise ValidationError(
                f"Estado inválido: {status}. Debe ser uno de: {', '.join(ESTADOS_VALIDOS)}"
            )
        return status

    def _procesar_items(self, items):
        if not isinstance(items, list):
            return []

        procesados = []
        for item in items:
            if isinstance(item, InspectionItem):
                procesados.append(item)
            else:
                procesados.append(InspectionItem.from_dict({**item, 'inspection_id': self.id}))
        return procesados

    # ============================================
    # ÍTEMS
    # ============================================

    def add_item(self, item):
        """Agrega un ítem; si ya existe uno con la misma categoría y nombre lo reemplaza"""
        if not isinstance(item, InspectionItem):
            item = InspectionItem.from_dict({**item, 'inspection_id': self.id})

        indice = self._indice_item(item.category, item.item_name)
        if indice is None:
            self.items.append(item)
        else:
            self.items[indice] = item

        self._recalcular_metricas()
        self._actualizar_timestamp()
        return self

    def evaluate_item(self, category, item_name, **evaluacion):
        """
        Evalúa un ítem existente y recalcula las métricas.

        Raises:
            ItemNotFoundError: si no existe el ítem
            ValidationError: si la evaluación es inválida
        """
        indice = self._indice_item(category, item_name)
        if indice is None:
            raise ItemNotFoundError(f'Item no encontrado: {category} - {item_name}')

        self.items[indice] = self.items[indice].evaluate(**evaluacion)

        self._recalcular_metricas()
        self._actualizar_timestamp()
        return self

    def mark_item_pending(self, category, item_name):
        item = self.find_item(category, item_name)
        if item is None:
            raise ItemNotFoundError(f'Item no encontrado: {category} - {item_name}')

        item.mark_as_pending()
        self._recalcular_metricas()
        self._actualizar_timestamp()
        return self

    def add_item_image(self, category, item_name, imagen):
        item = self.find_item(category, item_name)
        if item is None:
            raise ItemNotFoundError(f'Item no encontrado: {category} - {item_name}')

        item.add_image(imagen)
        self._actualizar_timestamp()
        return self

    def _indice_item(self, category, item_name):
        for indice, item in enumerate(self.items):
            if item.category == category and item.item_name == item_name:
                return indice
        return None

    def find_item(self, category, item_name) -> Optional[InspectionItem]:
        indice = self._indice_item(category, item_name)
        return self.items[indice] if indice is not None else None

    def items_by_category(self, category):
        return [item for item in self.items if item.category == category]

    def categories(self):
        return sorted({item.category for item in self.items})

    # ============================================
    # ESTADO
    # ============================================

    def is_complete(self):
        return self.completion_percentage >= 100

    def can_be_completed(self):
        return self.completion_percentage >= PORCENTAJE_MINIMO_COMPLETAR

    def complete(self):
        """Marca la inspección como completada (requiere >= 80% de progreso)"""
        if not self.can_be_completed():
            raise ValidationError('La inspección no puede ser completada. Progreso insuficiente.')

        self.status = 'completed'
        self.inspection_date = ahora_iso()
        self._actualizar_timestamp()
        return self

    def overall_condition(self):
        if not self.overall_score:
            return 'NO_EVALUADO'
        return condition_from_score(self.overall_score)

    def critical_items(self):
        return [item for item in self.items if item.score and item.score <= 3]

    def items_needing_repair(self):
        return [item for item in self.items if item.repair_cost > 0]

    def cost_by_priority(self):
        costos = {'high': 0, 'medium': 0, 'low': 0}
        for item in self.items:
            if item.repair_cost > 0:
                costos[item.priority] += item.repair_cost
        return costos

    # ============================================
    # MÉTRICAS
    # ============================================

    def _recalcular_metricas(self):
        evaluados = [item for item in self.items if item.is_evaluated()]
        total = len(self.items)

        self.completion_percentage = (len(evaluados) / total) * 100 if total > 0 else 0

        if evaluados:
            self.overall_score = sum(item.score for item in evaluados) / len(evaluados)
        else:
            self.overall_score = None

        self.total_repair_cost = sum(item.repair_cost or 0 for item in self.items)

        self.metadata['last_calculation'] = ahora_iso()
        return self

    def get_detailed_metrics(self) -> Dict:
        """Métricas generales, por categoría y análisis adicional"""
        metricas_categorias = {}

        for categoria in self.categories():
            items_categoria = self.items_by_category(categoria)
            evaluados = [item for item in items_categoria if item.is_evaluated()]

            metricas_categorias[categoria] = {
                'total_items': len(items_categoria),
                'evaluated_items': len(evaluados),
                'completion_percentage': (len(evaluados) / len(items_categoria)) * 100 if items_categoria else 0,
                'average_score': sum(item.score for item in evaluados) / len(evaluados) if evaluados else 0,
                'total_repair_cost': sum(item.repair_cost or 0 for item in items_categoria),
                'critical_items': len([item for item in items_categoria if item.score and item.score <= 3]),
            }

        return {
            'overall_score': self.overall_score or 0,
            'completion_percentage': self.completion_percentage,
            'total_items': len(self.items),
            'evaluated_items': len([item for item in self.items if item.is_evaluated()]),
            'total_repair_cost': self.total_repair_cost,

            'categories': metricas_categorias,

            'condition': self.overall_condition(),
            'critical_items_count': len(self.critical_items()),
            'repair_items_count': len(self.items_needing_repair()),
            'cost_by_priority': self.cost_by_priority(),

            'is_complete': self.is_complete(),
            'can_be_completed': self.can_be_completed(),
            'last_calculated': self.metadata.get('last_calculation'),
        }

    # ============================================
    # UTILIDADES
    # ============================================

    def _actualizar_timestamp(self):
        self.updated_at = ahora_iso()

    def update(self, **cambios):
        """Actualiza solo los campos permitidos; el resto se ignora"""
        for campo, valor in cambios.items():
            if campo not in self.CAMPOS_ACTUALIZABLES:
                continue
            if campo == 'status':
                valor = self._validar_estado(valor)
            elif campo in ('notes', 'inspector_name'):
                valor = texto_o_none(valor)
            setattr(self, campo, valor)

        self._actualizar_timestamp()
        return self

    def clone(self):
        datos = self.to_dict()
        datos['id'] = None
        datos['created_at'] = ahora_iso()
        datos['updated_at'] = ahora_iso()
        return Inspection.from_dict(datos)

    def vehicle_label(self):
        if self.vehicle is None:
            return f'Vehículo {self.vehicle_id}'
        return str(self.vehicle)

    def to_dict(self):
        vehiculo = self.vehicle.to_dict() if hasattr(self.vehicle, 'to_dict') else self.vehicle
        return {
            'id': self.id,
            'user_id': self.user_id,
            'vehicle_id': self.vehicle_id,
            'vehicle': vehiculo,
            'status': self.status,
            'items': [item.to_dict() for item in self.items],
            'notes': self.notes,
            'inspector_name': self.inspector_name,
            'inspection_date': self.inspection_date,
            'overall_score': self.overall_score,
            'completion_percentage': self.completion_percentage,
            'total_repair_cost': self.total_repair_cost,
            'metadata': dict(self.metadata),
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }

    def to_summary(self):
        return {
            'id': self.id,
            'vehicle': self.vehicle_label(),
            'status': self.status,
            'condition': self.overall_condition(),
            'progress': f'{round(self.completion_percentage)}%',
            'score': f'{self.overall_score:.1f}/10' if self.overall_score else 'No evaluado',
            'repair_cost': self.total_repair_cost,
            'inspection_date': self.inspection_date,
            'critical_items': len(self.critical_items()),
        }

    def validate(self):
        """
        Valida la integridad de la inspección y de todos sus ítems.

        Returns:
            Tupla (es_valido, errores)
        """
        errores = []

        if not self.user_id:
            errores.append('ID de usuario requerido')
        if not self.vehicle_id:
            errores.append('ID de vehículo requerido')

        try:
            self._validar_estado(self.status)
        except ValidationError as e:
            errores.append(str(e))

        for numero, item in enumerate(self.items, start=1):
            valido, errores_item = item.validate()
            if not valido:
                errores.append(f"Item {numero}: {', '.join(errores_item)}")

        if self.status == 'completed' and self.completion_percentage < PORCENTAJE_MINIMO_COMPLETAR:
            errores.append('Inspección marcada como completada pero el progreso es insuficiente')

        return len(errores) == 0, errores

    # ============================================
    # CONSTRUCTORES
    # ============================================

    @classmethod
    def create_empty(cls, user_id, vehicle_id):
        return cls(user_id=user_id, vehicle_id=vehicle_id, status='draft')

    @classmethod
    def create_from_checklist(cls, user_id, vehicle_id, estructura=None, **kwargs):
        """Crea una inspección con todos los ítems del checklist sin evaluar"""
        estructura = estructura or checklist_mod.CHECKLIST
        inspeccion = cls(user_id=user_id, vehicle_id=vehicle_id, **kwargs)
        for categoria, items in estructura.items():
            for definicion in items:
                inspeccion.items.append(
                    InspectionItem.from_checklist_structure(definicion, categoria, inspeccion.id)
                )
        inspeccion.metadata['structure'] = 'checklist_4x4'
        inspeccion._recalcular_metricas()
        return inspeccion

    @classmethod
    def from_dict(cls, data):
        campos = {
            'id', 'user_id', 'vehicle_id', 'vehicle', 'status', 'items', 'notes',
            'inspector_name', 'inspection_date', 'overall_score',
            'completion_percentage', 'total_repair_cost', 'metadata',
            'created_at', 'updated_at',
        }
        return cls(**{k: v for k, v in data.items() if k in campos})

    @staticmethod
    def valid_statuses():
        return list(ESTADOS_VALIDOS)

    @staticmethod
    def validate_data(data):
        errores = []
        if not data.get('user_id'):
            errores.append('ID de usuario requerido')
        if not data.get('vehicle_id'):
            errores.append('ID de vehículo requerido')
        return len(errores) == 0, errores

    def __repr__(self):
        return f'<Inspection {self.id} {self.status} {round(self.completion_percentage)}%>'
