"""
Pruebas del dashboard principal y la configuración de la aplicación
"""
from unittest.mock import patch

from conftest import fila_inspeccion, iniciar_sesion


@patch('services.perfil_service.obtener_perfil', return_value={'full_name': 'Carlos Pérez'})
def test_dashboard(mock_perfil, client, db, vehiculo):
    iniciar_sesion(client)

    def get(tabla, **kwargs):
        if tabla == 'vehicles':
            return [vehiculo.to_dict()]
        return [fila_inspeccion(vehicle_id=vehiculo.id, status='completed')]
    db.get.side_effect = get

    response = client.get('/home')
    html = response.get_data(as_text=True)

    assert response.status_code == 200
    assert 'Hola, Carlos Pérez' in html
    assert 'Toyota Land Cruiser Prado 2018 (ABC123)' in html
    assert 'de 64 ítems' in html


@patch('services.perfil_service.obtener_perfil', return_value=None)
def test_dashboard_sin_conexion(mock_perfil, client, db):
    iniciar_sesion(client)
    db.get.return_value = None

    response = client.get('/home')

    assert response.status_code == 200
    assert 'Aún no tienes inspecciones' in response.get_data(as_text=True)


def test_filtros_registrados(app):
    for nombre in ('format_fecha', 'format_cop', 'format_km', 'format_score', 'format_pct'):
        assert nombre in app.jinja_env.filters


def test_blueprints_registrados(app):
    assert {'auth', 'inspecciones', 'api', 'reportes'} <= set(app.blueprints)
