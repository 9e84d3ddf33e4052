"""
Entidad InspectionItem - ítem individual del checklist de inspección

Cada ítem se identifica por (categoría, nombre) dentro de una inspección y
guarda su evaluación: puntuación entera 1-10, condición derivada de la
puntuación, costo estimado de reparación, prioridad, notas e imágenes.
"""
import math

from .comun import (
    CONDICIONES, COLOR_NO_EVALUADO, PRIORIDADES,
    ahora_iso, condition_from_score, normalizar_texto, texto_o_none,
)
from .errores import ValidationError


def _redondear(valor):
    """Redondeo half-up (7.5 -> 8)"""
    return int(math.floor(valor + 0.5))


class InspectionItem:
    """Ítem individual de inspección con su evaluación"""

    def __init__(self, category=None, item_name=None, id=None, inspection_id=None,
                 score=None, condition=None, notes=None, repair_cost=0,
                 priority='medium', completed=False, images=None,
                 evaluated_at=None, evaluated_by=None, structure=None,
                 created_at=None, updated_at=None):
        self._validar_requeridos(category, item_name)

        self.id = id
        self.inspection_id = inspection_id

        self.category = normalizar_texto(category)
        self.item_name = normalizar_texto(item_name)

        # Evaluación
        self.score = self._validar_score(score)
        self.condition = self._validar_condicion(condition)
        if self.score is not None and self.condition is None:
            self.condition = condition_from_score(self.score)
        self.notes = texto_o_none(notes)
        self.repair_cost = self._validar_costo(repair_cost)
        self.priority = self._validar_prioridad(priority)
        self.completed = bool(completed)

        self.images = self._procesar_imagenes(images)

        self.evaluated_at = evaluated_at
        self.evaluated_by = evaluated_by
        # Definición original del ítem en el checklist
        self.structure = structure

        self.created_at = created_at or ahora_iso()
        self.updated_at = updated_at or ahora_iso()

    # ============================================
    # VALIDACIONES
    # ============================================

    @staticmethod
    def _validar_requeridos(category, item_name):
        if not normalizar_texto(category):
            raise ValidationError('Categoría requerida')
        if not normalizar_texto(item_name):
            raise ValidationError('Nombre del item requerido')

    @staticmethod
    def _validar_score(score):
        if score is None or score == '':
            return None
        try:
            valor = float(score)
        except (TypeError, ValueError):
            raise ValidationError('Puntuación debe estar entre 1 y 10')
        if math.isnan(valor) or valor < 1 or valor > 10:
            raise ValidationError('Puntuación debe estar entre 1 y 10')
        return _redondear(valor)

    @staticmethod
    def _validar_condicion(condition):
        if not condition:
            return None
        condicion = str(condition).upper()
        if condicion not in CONDICIONES:
            raise ValidationError(f'Condición inválida: {condition}')
        return condicion

    @staticmethod
    def _validar_costo(costo):
        try:
            valor = float(costo) if costo not in (None, '') else 0.0
        except (TypeError, ValueError):
            valor = 0.0
        if math.isnan(valor):
            valor = 0.0
        if valor < 0:
            raise ValidationError('Costo de reparación no puede ser negativo')
        return _redondear(valor)

    @staticmethod
    def _validar_prioridad(priority):
        if priority not in PRIORIDADES:
            raise ValidationError(f'Prioridad inválida: {priority}')
        return priority

    @staticmethod
    def _procesar_imagenes(images):
        if not isinstance(images, list):
            return []

        procesadas = []
        for imagen in images:
            if isinstance(imagen, str):
                procesadas.append({'url': imagen, 'uploaded_at': ahora_iso()})
            elif isinstance(imagen, dict):
                procesadas.append({
                    'url': imagen.get('url') or '',
                    'file_name': imagen.get('file_name'),
                    'size': imagen.get('size'),
                    'uploaded_at': imagen.get('uploaded_at') or ahora_iso(),
                })
        return procesadas

    # ============================================
    # REGLAS DE NEGOCIO
    # ============================================

    def evaluate(self, score, notes=None, repair_cost=0, priority='medium',
                 evaluated_by=None, images=None):
        """
        Evalúa el ítem con una nueva puntuación.

        Devuelve un ítem nuevo; la condición se deriva siempre de la
        puntuación ya redondeada. Las imágenes nuevas se agregan a las
        existentes y, si no llegan notas, se conservan las anteriores.
        """
        puntuacion = self._validar_score(score)
        if puntuacion is None:
            raise ValidationError('Puntuación requerida para evaluar el item')

        datos = self.to_dict()
        datos.update({
            'score': puntuacion,
            'condition': condition_from_score(puntuacion),
            'notes': texto_o_none(notes) or self.notes,
            'repair_cost': self._validar_costo(repair_cost),
            'priority': self._validar_prioridad(priority),
            'completed': True,
            'evaluated_at': ahora_iso(),
            'evaluated_by': evaluated_by or self.evaluated_by,
            'updated_at': ahora_iso(),
        })
        if images:
            datos['images'] = self.images + self._procesar_imagenes(images)

        return InspectionItem(**datos)

    def is_evaluated(self):
        return self.score is not None

    def is_complete(self):
        return self.completed and self.is_evaluated()

    def is_critical(self):
        """Puntuación <= 3"""
        return self.score is not None and self.score <= 3

    def needs_repair(self):
        return self.repair_cost > 0

    def urgency_level(self):
        """Nivel de urgencia combinando puntuación y prioridad"""
        if not self.is_evaluated():
            return 'NO_EVALUADO'

        if self.is_critical():
            return 'URGENTE' if self.priority == 'high' else 'ALTA'

        if self.score <= 5:
            return 'ALTA' if self.priority == 'high' else 'MEDIA'

        return 'BAJA'

    def status_color(self):
        if not self.is_evaluated() or self.condition not in CONDICIONES:
            return COLOR_NO_EVALUADO
        return CONDICIONES[self.condition]['color']

    def add_image(self, imagen):
        procesadas = self._procesar_imagenes([imagen])
        if procesadas:
            self.images.append(procesadas[0])
            self.updated_at = ahora_iso()
        return self

    def remove_image(self, index):
        if 0 <= index < len(self.images):
            self.images.pop(index)
            self.updated_at = ahora_iso()
        return self

    def update_notes(self, notes):
        self.notes = texto_o_none(notes)
        self.updated_at = ahora_iso()
        return self

    def mark_as_pending(self):
        """Descarta la evaluación (puntuación, condición y completado)"""
        self.score = None
        self.condition = None
        self.completed = False
        self.evaluated_at = None
        self.updated_at = ahora_iso()
        return self

    def recommendation(self):
        if not self.is_evaluated():
            return 'Pendiente de evaluación'
        if self.is_critical():
            return 'Requiere atención inmediata. Revisar antes de usar el vehículo.'
        if self.score <= 5:
            return 'Se recomienda revisar y considerar reparación.'
        if self.score <= 7:
            return 'En condición aceptable. Monitorear en futuras inspecciones.'
        return 'En excelente condición. Mantener cuidado regular.'

    # ============================================
    # CONVERSIONES
    # ============================================

    def summary(self):
        return {
            'item': f'{self.category} - {self.item_name}',
            'status': 'Evaluado' if self.is_evaluated() else 'Pendiente',
            'condition': self.condition or 'No evaluado',
            'score': f'{self.score}/10' if self.score else 'Sin puntuación',
            'urgency': self.urgency_level(),
            'repair_cost': self.repair_cost,
            'has_images': len(self.images) > 0,
            'images_count': len(self.images),
            'last_updated': self.updated_at,
        }

    def to_dict(self):
        return {
            'id': self.id,
            'inspection_id': self.inspection_id,
            'category': self.category,
            'item_name': self.item_name,
            'score': self.score,
            'condition': self.condition,
            'notes': self.notes,
            'repair_cost': self.repair_cost,
            'priority': self.priority,
            'completed': self.completed,
            'images': [dict(imagen) for imagen in self.images],
            'evaluated_at': self.evaluated_at,
            'evaluated_by': self.evaluated_by,
            'structure': self.structure,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }

    def to_report_format(self):
        return {
            'categoria': self.category,
            'item': self.item_name,
            'puntuacion': self.score or 'No evaluado',
            'condicion': self.condition or 'No evaluado',
            'costo_reparacion': self.repair_cost,
            'prioridad': self.priority,
            'notas': self.notes or 'Sin notas',
            'recomendacion': self.recommendation(),
            'imagenes': len(self.images),
            'evaluado': 'Sí' if self.is_evaluated() else 'No',
        }

    def validate(self):
        """
        Valida la integridad del ítem.

        Returns:
            Tupla (es_valido, errores)
        """
        errores = []

        if not self.category:
            errores.append('Categoría requerida')
        if not self.item_name:
            errores.append('Nombre del item requerido')

        if self.completed and not self.is_evaluated():
            errores.append('Item marcado como completado pero sin evaluación')

        if self.score is not None:
            try:
                self._validar_score(self.score)
            except ValidationError as e:
                errores.append(str(e))

        if self.condition:
            try:
                self._validar_condicion(self.condition)
            except ValidationError as e:
                errores.append(str(e))

        if self.score and self.condition:
            esperada = condition_from_score(self.score)
            if self.condition != esperada:
                errores.append(
                    f'Inconsistencia: puntuación {self.score} no coincide con condición {self.condition}'
                )

        return len(errores) == 0, errores

    # ============================================
    # CONSTRUCTORES
    # ============================================

    @classmethod
    def create_empty(cls, category, item_name, inspection_id=None):
        return cls(category=category, item_name=item_name, inspection_id=inspection_id)

    @classmethod
    def from_checklist_structure(cls, structure, category, inspection_id=None):
        """Crea un ítem vacío a partir de su definición en el checklist"""
        return cls(
            category=category,
            item_name=structure.get('name') or structure.get('item') or 'Item sin nombre',
            inspection_id=inspection_id,
            structure=structure,
            repair_cost=structure.get('default_cost', 0),
            priority=structure.get('priority', 'medium'),
        )

    @classmethod
    def from_dict(cls, data):
        campos = {
            'id', 'inspection_id', 'category', 'item_name', 'score', 'condition',
            'notes', 'repair_cost', 'priority', 'completed', 'images',
            'evaluated_at', 'evaluated_by', 'structure', 'created_at', 'updated_at',
        }
        return cls(**{k: v for k, v in data.items() if k in campos})

    @staticmethod
    def valid_priorities():
        return list(PRIORIDADES)

    @staticmethod
    def validate_data(data):
        """Valida datos crudos antes de construir un ítem"""
        errores = []

        if not normalizar_texto(data.get('category')):
            errores.append('Categoría requerida')
        if not normalizar_texto(data.get('item_name')):
            errores.append('Nombre del item requerido')

        score = data.get('score')
        if score is not None and score != '':
            try:
                valor = float(score)
                if valor < 1 or valor > 10:
                    errores.append('Puntuación debe estar entre 1 y 10')
            except (TypeError, ValueError):
                errores.append('Puntuación debe estar entre 1 y 10')

        priority = data.get('priority')
        if priority is not None and priority not in PRIORIDADES:
            errores.append(f'Prioridad inválida: {priority}')

        costo = data.get('repair_cost')
        if costo is not None and costo != '':
            try:
                if float(costo) < 0:
                    errores.append('Costo de reparación no puede ser negativo')
            except (TypeError, ValueError):
                errores.append('Costo de reparación inválido')

        return len(errores) == 0, errores

    def __repr__(self):
        return f'<InspectionItem {self.category} - {self.item_name} score={self.score}>'
