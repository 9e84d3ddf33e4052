"""
Pruebas de métricas del dashboard
"""
import pytest

from dominio import Inspection, Vehicle
from services import metricas_service
from conftest import USER_ID, VEHICULO_ID


def crear_inspeccion(score, fecha, status='completed', vehicle_id=VEHICULO_ID, repair_cost=0,
                     category='Motor'):
    items = []
    if score is not None:
        items.append({'category': category, 'item_name': 'Ruidos anormales', 'score': score,
                      'repair_cost': repair_cost, 'completed': True})
    return Inspection(user_id=USER_ID, vehicle_id=vehicle_id, status=status,
                      items=items, created_at=fecha)


@pytest.fixture
def historial():
    return [
        crear_inspeccion(6, '2024-01-15T10:00:00+00:00', repair_cost=500000),
        crear_inspeccion(8, '2024-02-20T10:00:00+00:00', repair_cost=100000),
        crear_inspeccion(None, '2024-02-25T10:00:00+00:00', status='draft'),
    ]


class TestUserStats:
    def test_sin_inspecciones(self):
        stats = metricas_service.user_stats([])
        assert stats['total_inspections'] == 0
        assert stats['completion_rate'] == 0

    def test_totales(self, historial):
        stats = metricas_service.user_stats(historial)
        assert stats['total_inspections'] == 3
        assert stats['completed_inspections'] == 2
        assert stats['draft_inspections'] == 1
        assert stats['average_score'] == 7.0
        assert stats['total_repair_cost'] == 600000
        assert stats['completion_rate'] == 66.7
        assert stats['inspections_by_month'] == {'2024-1': 1, '2024-2': 2}


class TestVehiculos:
    def test_metricas_y_tendencia(self, historial, vehiculo):
        metricas = metricas_service.vehicle_metrics([vehiculo], historial)[0]

        assert metricas['total_inspections'] == 3
        assert metricas['completed_inspections'] == 2
        assert metricas['average_score'] == 7.0
        assert metricas['trend'] == 'improving'
        assert metricas['condition'] == 'BUENO'
        assert metricas['last_inspection'] is historial[2]

    def test_vehiculo_sin_inspecciones(self, vehiculo):
        metricas = metricas_service.vehicle_metrics([vehiculo], [])[0]
        assert metricas['condition'] == 'NO_EVALUADO'
        assert metricas['last_inspection'] is None
        assert metricas_service.average_vehicle_condition([metricas]) == 0

    def test_comparacion_con_anterior(self, historial):
        comparacion = metricas_service.compare_with_previous(historial, VEHICULO_ID)
        assert comparacion['has_comparison']
        assert comparacion['score_difference'] == 2
        assert comparacion['cost_difference'] == -400000
        assert comparacion['days_between'] == 36

    def test_comparacion_insuficiente(self, historial):
        assert metricas_service.compare_with_previous(historial[:1], VEHICULO_ID) == {'has_comparison': False}


class TestCategorias:
    def test_sin_completadas(self):
        assert metricas_service.category_analysis([crear_inspeccion(5, None, status='draft')]) == {}

    def test_una_inspeccion(self):
        analisis = metricas_service.category_analysis([crear_inspeccion(2, '2024-01-01T00:00:00Z')])
        assert analisis['Motor']['trend'] == 'insufficient_data'
        assert analisis['Motor']['critical_count'] == 1

    def test_tendencia_recientes_contra_anteriores(self):
        inspecciones = [
            crear_inspeccion(2, '2024-01-01T00:00:00Z'),
            crear_inspeccion(8, '2024-02-01T00:00:00Z'),
            crear_inspeccion(8, '2024-03-01T00:00:00Z'),
            crear_inspeccion(8, '2024-04-01T00:00:00Z'),
        ]
        analisis = metricas_service.category_analysis(inspecciones)
        assert analisis['Motor']['trend'] == 'improving'
        assert analisis['Motor']['average_score'] == 6.5
        assert analisis['Motor']['total_evaluations'] == 4


class TestInsights:
    def test_sin_metricas(self):
        assert metricas_service.inspection_insights({}) == []

    def test_inspeccion_critica(self):
        insights = metricas_service.inspection_insights({
            'completion_percentage': 30,
            'overall_score': 2,
            'critical_items_count': 4,
            'total_repair_cost': 6000000,
        })
        titulos = [insight['title'] for insight in insights]
        assert titulos == [
            'Inspección en progreso', 'Estado crítico detectado', '4 items críticos', 'Costos de reparación',
        ]
        assert insights[-1]['type'] == 'warning'
        assert insights[-1]['message'] == 'Estimado: $6.000.000 COP'

    def test_excelente_estado(self, inspeccion):
        for item in inspeccion.items:
            inspeccion.evaluate_item(item.category, item.item_name, score=10)
        insights = metricas_service.inspection_insights(inspeccion.get_detailed_metrics())
        assert [insight['type'] for insight in insights] == ['success']


class TestRecomendaciones:
    def test_vehiculo_antiguo_y_costoso(self):
        antiguo = Vehicle(id='v-viejo', marca='Toyota', modelo='Land Cruiser', ano=1995, placa='OLD095')
        inspecciones = [crear_inspeccion(4, '2024-01-01T00:00:00Z', vehicle_id='v-viejo', repair_cost=3500000)]

        por_vehiculo = metricas_service.vehicle_metrics([antiguo], inspecciones)
        por_categoria = metricas_service.category_analysis(inspecciones)
        tipos = [r['type'] for r in metricas_service.recommendations(por_vehiculo, por_categoria)]

        assert tipos == ['maintenance', 'inspection', 'financial']

    def test_resumen(self, historial, vehiculo, usuario):
        reporte = metricas_service.summary_report(usuario, historial, [vehiculo])
        assert reporte['user']['name'] == 'Carlos Perez'
        assert reporte['overview']['total_vehicles'] == 1
        assert reporte['overview']['completed_inspections'] == 2
        assert reporte['average_vehicle_condition'] == 7.0

    def test_resumen_sin_usuario(self):
        reporte = metricas_service.summary_report(None, [], [])
        assert reporte['user']['name'] == 'Usuario'
        assert reporte['recommendations'] == []


class TestFormato:
    def test_moneda(self):
        assert metricas_service.format_currency(1234567) == '$1.234.567 COP'
        assert metricas_service.format_currency(0) == '$0 COP'
        assert metricas_service.format_currency(None) == '$0 COP'

    def test_porcentaje_y_puntuacion(self):
        assert metricas_service.format_percentage(50) == '50.0%'
        assert metricas_service.format_percentage(33.333, 2) == '33.33%'
        assert metricas_service.format_percentage(None) == '0.0%'
        assert metricas_service.format_score(7) == '7.0/10'
        assert metricas_service.format_score(None) == 'No evaluado'
