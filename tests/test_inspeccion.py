"""
Pruebas de la entidad Inspection: ítems, métricas agregadas y estados
"""
import pytest

from dominio import Inspection, InspectionItem, ValidationError, ItemNotFoundError, checklist
from conftest import USER_ID, VEHICULO_ID


def evaluar_primeros(inspeccion, cantidad, score=8):
    for item in list(inspeccion.items[:cantidad]):
        inspeccion.evaluate_item(item.category, item.item_name, score=score)
    return inspeccion


class TestCreacion:
    def test_requiere_usuario_y_vehiculo(self):
        with pytest.raises(ValidationError):
            Inspection(user_id=None, vehicle_id=VEHICULO_ID)
        with pytest.raises(ValidationError):
            Inspection(user_id=USER_ID, vehicle_id='')

    def test_estado_invalido(self):
        with pytest.raises(ValidationError):
            Inspection(user_id=USER_ID, vehicle_id=VEHICULO_ID, status='cerrada')

    def test_desde_checklist(self, inspeccion):
        assert len(inspeccion.items) == checklist.total_items()
        assert inspeccion.status == 'draft'
        assert inspeccion.completion_percentage == 0
        assert inspeccion.overall_score is None
        assert inspeccion.metadata['structure'] == 'checklist_4x4'
        assert inspeccion.categories() == sorted(checklist.categories())

    def test_vacia(self):
        inspeccion = Inspection.create_empty(USER_ID, VEHICULO_ID)
        assert inspeccion.items == []
        assert inspeccion.completion_percentage == 0
        assert inspeccion.overall_condition() == 'NO_EVALUADO'


class TestMetricas:
    def test_progreso_puntuacion_y_costo(self):
        inspeccion = Inspection(user_id=USER_ID, vehicle_id=VEHICULO_ID)
        inspeccion.add_item(InspectionItem.create_empty('Motor', 'Correas'))
        inspeccion.add_item(InspectionItem.create_empty('Motor', 'Radiador'))
        inspeccion.add_item(InspectionItem.create_empty('Dirección', 'Terminales'))
        inspeccion.add_item(InspectionItem.create_empty('Dirección', 'Rótulas'))

        inspeccion.evaluate_item('Motor', 'Correas', score=8, repair_cost=0)
        inspeccion.evaluate_item('Motor', 'Radiador', score=4, repair_cost=200000)

        assert inspeccion.completion_percentage == 50
        assert inspeccion.overall_score == 6
        assert inspeccion.total_repair_cost == 200000
        assert inspeccion.overall_condition() == 'REGULAR'

    def test_add_item_reemplaza_por_categoria_y_nombre(self):
        inspeccion = Inspection(user_id=USER_ID, vehicle_id=VEHICULO_ID)
        inspeccion.add_item(InspectionItem.create_empty('Motor', 'Correas'))
        inspeccion.add_item({'category': 'Motor', 'item_name': 'Correas', 'score': 9})

        assert len(inspeccion.items) == 1
        assert inspeccion.items[0].score == 9
        assert inspeccion.completion_percentage == 100

    def test_marcar_pendiente_recalcula(self, inspeccion):
        item = inspeccion.items[0]
        inspeccion.evaluate_item(item.category, item.item_name, score=2)
        assert inspeccion.overall_score == 2

        inspeccion.mark_item_pending(item.category, item.item_name)
        assert inspeccion.overall_score is None
        assert inspeccion.completion_percentage == 0

    def test_item_inexistente(self, inspeccion):
        with pytest.raises(ItemNotFoundError):
            inspeccion.evaluate_item('Motor', 'No existe', score=5)
        with pytest.raises(ItemNotFoundError):
            inspeccion.mark_item_pending('Motor', 'No existe')
        with pytest.raises(ItemNotFoundError):
            inspeccion.add_item_image('Motor', 'No existe', 'https://x/1.jpg')

    def test_evaluacion_invalida_no_modifica(self, inspeccion):
        item = inspeccion.items[0]
        with pytest.raises(ValidationError):
            inspeccion.evaluate_item(item.category, item.item_name, score=15)
        assert inspeccion.completion_percentage == 0

    def test_criticos_y_costos_por_prioridad(self, inspeccion):
        a, b, c = inspeccion.items[:3]
        inspeccion.evaluate_item(a.category, a.item_name, score=2, repair_cost=100, priority='high')
        inspeccion.evaluate_item(b.category, b.item_name, score=3, repair_cost=50, priority='low')
        inspeccion.evaluate_item(c.category, c.item_name, score=9)

        assert len(inspeccion.critical_items()) == 2
        assert len(inspeccion.items_needing_repair()) == 2
        assert inspeccion.cost_by_priority() == {'high': 100, 'medium': 0, 'low': 50}

    def test_metricas_detalladas(self, inspeccion):
        evaluar_primeros(inspeccion, 3, score=6)
        metricas = inspeccion.get_detailed_metrics()

        assert metricas['total_items'] == 64
        assert metricas['evaluated_items'] == 3
        assert metricas['condition'] == 'REGULAR'
        primera = checklist.categories()[0]
        assert metricas['categories'][primera]['evaluated_items'] == 3
        assert metricas['categories'][primera]['average_score'] == 6
        assert not metricas['can_be_completed']


class TestEstados:
    def test_no_completa_con_progreso_insuficiente(self, inspeccion):
        evaluar_primeros(inspeccion, 51)
        assert inspeccion.completion_percentage < 80
        with pytest.raises(ValidationError, match='Progreso insuficiente'):
            inspeccion.complete()
        assert inspeccion.status == 'draft'

    def test_completa_desde_80_por_ciento(self, inspeccion):
        evaluar_primeros(inspeccion, 52)
        inspeccion.complete()
        assert inspeccion.status == 'completed'
        assert not inspeccion.is_complete()
        assert inspeccion.validate() == (True, [])

    def test_update_solo_campos_permitidos(self, inspeccion):
        inspeccion.update(status='in_progress', notes='  Revisión general  ', user_id='otro')
        assert inspeccion.status == 'in_progress'
        assert inspeccion.notes == 'Revisión general'
        assert inspeccion.user_id == USER_ID

    def test_update_estado_invalido(self, inspeccion):
        with pytest.raises(ValidationError):
            inspeccion.update(status='borrado')


class TestConversiones:
    def test_resumen(self, inspeccion):
        evaluar_primeros(inspeccion, 2, score=7)
        resumen = inspeccion.to_summary()
        assert resumen['vehicle'] == 'Toyota Land Cruiser Prado 2018 (ABC123)'
        assert resumen['score'] == '7.0/10'
        assert resumen['progress'] == '3%'

    def test_etiqueta_sin_vehiculo(self):
        inspeccion = Inspection(user_id=USER_ID, vehicle_id='v-1')
        assert inspeccion.vehicle_label() == 'Vehículo v-1'

    def test_clone_y_from_dict(self, inspeccion):
        evaluar_primeros(inspeccion, 4, score=5)
        copia = inspeccion.clone()

        assert copia.id is None
        assert len(copia.items) == 64
        assert copia.completion_percentage == inspeccion.completion_percentage
        assert copia.vehicle['placa'] == 'ABC123'

    def test_validate_data(self):
        assert Inspection.validate_data({'user_id': USER_ID, 'vehicle_id': VEHICULO_ID}) == (True, [])
        valido, errores = Inspection.validate_data({})
        assert not valido
        assert len(errores) == 2
