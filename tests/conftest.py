import os
import sys
from unittest.mock import patch

import pytest

# Variables requeridas por config.py antes de importar la aplicación
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")

# Añadir el directorio raíz al path para asegurar que los módulos se encuentren
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from dominio import Inspection, Vehicle, User  # noqa: E402

USER_ID = "11111111-1111-4111-8111-111111111111"
OTRO_USER_ID = "22222222-2222-4222-8222-222222222222"
INSPECCION_ID = "33333333-3333-4333-8333-333333333333"
VEHICULO_ID = "44444444-4444-4444-8444-444444444444"


@pytest.fixture
def vehiculo():
    return Vehicle(
        id=VEHICULO_ID,
        user_id=USER_ID,
        marca="toyota",
        modelo="Land Cruiser Prado",
        ano=2018,
        placa="abc-123",
        kilometraje="85.000",
        color="Blanco",
    )


@pytest.fixture
def inspeccion(vehiculo):
    """Inspección con el checklist completo y sin evaluar"""
    return Inspection.create_from_checklist(
        USER_ID, vehiculo.id, id=INSPECCION_ID, vehicle=vehiculo, inspector_name="Carlos Pérez"
    )


@pytest.fixture
def usuario():
    return User(id=USER_ID, email="Carlos.Perez@Example.com", role="inspector")


@pytest.fixture
def app():
    """Instancia de la aplicación Flask en modo testing"""
    from app import app as flask_app

    flask_app.config["TESTING"] = True
    yield flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture(autouse=True)
def limpiar_cache():
    from services.cache_service import clear_all_caches

    clear_all_caches()
    yield
    clear_all_caches()


def iniciar_sesion(client, perfil="inspector", user_id=USER_ID, expira_en=3600):
    """Deja una sesión de Flask válida sin pasar por Supabase"""
    import time

    with client.session_transaction() as sess:
        sess["usuario"] = "Carlos Pérez"
        sess["usuario_id"] = user_id
        sess["email"] = "carlos.perez@example.com"
        sess["perfil"] = perfil
        sess["access_token"] = "token-usuario"
        sess["refresh_token"] = "refresh-usuario"
        sess["expires_at"] = int(time.time()) + expira_en


def fila_inspeccion(**cambios):
    """Fila de la tabla inspections tal como la devuelve PostgREST"""
    fila = {
        'id': INSPECCION_ID,
        'user_id': USER_ID,
        'vehicle_id': VEHICULO_ID,
        'vehicle_info': {'marca': 'Toyota', 'modelo': 'Hilux', 'ano': 2016, 'placa': 'HIL016'},
        'inspection_data': {
            'Motor': {
                'Ruidos anormales': {'score': 7, 'notes': 'Sin golpeteos', 'repairCost': 0,
                                     'priority': 'medium', 'evaluated': True, 'completed': True},
            },
        },
        'photos': {},
        'status': 'in_progress',
        'total_score': 7,
        'total_repair_cost': 0,
        'completion_percentage': 1.56,
        'inspection_date': '2024-03-10T10:00:00+00:00',
        'created_at': '2024-03-10T10:00:00+00:00',
        'updated_at': '2024-03-10T11:00:00+00:00',
    }
    fila.update(cambios)
    return fila


@pytest.fixture
def db():
    """Cliente Supabase simulado que reciben los repositorios"""
    with patch('services.inspeccion_repository.SupabaseClient') as mock_client:
        yield mock_client.return_value
