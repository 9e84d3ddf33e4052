"""
Pruebas de la API JSON (/api)
"""
from unittest.mock import patch

import pytest

from services.auth_service import AuthError
from services.storage_service import StorageError
from conftest import USER_ID, OTRO_USER_ID, INSPECCION_ID, fila_inspeccion

AUTH = {'Authorization': 'Bearer token-api'}


@pytest.fixture(autouse=True)
def usuario_api():
    with patch('services.auth_service.get_user') as mock_get_user:
        mock_get_user.return_value = {'id': USER_ID, 'email': 'carlos.perez@example.com'}
        yield mock_get_user


class TestAutenticacion:
    def test_sin_token(self, client):
        response = client.get('/api/inspections')
        assert response.status_code == 401
        assert response.get_json()['success'] is False

    def test_token_invalido(self, client, usuario_api):
        usuario_api.side_effect = AuthError('Token inválido o expirado', 401)
        response = client.get('/api/inspections', headers=AUTH)
        assert response.status_code == 401
        assert response.get_json()['error'] == 'Token inválido o expirado'

    def test_cabeceras_cors(self, client):
        response = client.get('/api/checklist')
        assert response.headers['Access-Control-Allow-Origin'] == '*'
        assert 'Authorization' in response.headers['Access-Control-Allow-Headers']

    def test_preflight(self, client):
        response = client.options('/api/inspections')
        assert response.status_code == 200
        assert 'PUT' in response.headers['Access-Control-Allow-Methods']


class TestListarYCrear:
    def test_listar(self, client, db):
        db.get.return_value = [fila_inspeccion(vehicle_info=None)]

        response = client.get('/api/inspections', headers=AUTH)
        body = response.get_json()

        assert response.status_code == 200
        assert body['success'] is True
        assert body['data'][0]['vehicle_info']['placa'] == ''
        assert db.get.call_args[1]['limit'] == 50
        assert db.get.call_args[1]['filters'] == {'user_id': f'eq.{USER_ID}'}

    def test_listar_error(self, client, db):
        db.get.return_value = None
        response = client.get('/api/inspections', headers=AUTH)
        assert response.status_code == 500
        assert response.get_json()['success'] is False

    def test_crear_sin_datos(self, client, db):
        response = client.post('/api/inspections', headers=AUTH, data='no-json', content_type='text/plain')
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Datos de la inspección requeridos'

    def test_crear_sin_placa(self, client, db):
        response = client.post('/api/inspections', headers=AUTH, json={'vehicle_info': {'marca': 'Toyota'}})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Información del vehículo y placa son requeridos'

    def test_crear_con_costo_negativo(self, client, db):
        response = client.post('/api/inspections', headers=AUTH, json={
            'vehicle_info': {'placa': 'ABC123', 'marca': ''},
            'total_repair_cost': -5,
        })
        body = response.get_json()

        assert response.status_code == 400
        assert body['error'] == 'Datos de la inspección inválidos'
        assert body['details'] == [
            'La marca del vehículo no puede estar vacía',
            'El costo de reparación no puede ser negativo',
        ]

    def test_crear(self, client, db):
        db.post.return_value = {'id': INSPECCION_ID, 'user_id': USER_ID}

        response = client.post('/api/inspections', headers=AUTH, json={
            'user_id': OTRO_USER_ID,
            'vehicle_info': {'marca': 'Toyota', 'modelo': 'Hilux', 'placa': 'ABC123'},
            'inspection_data': {},
            'total_score': 0,
        })

        assert response.status_code == 200
        assert response.get_json()['data']['id'] == INSPECCION_ID
        tabla, fila = db.post.call_args[0]
        assert tabla == 'inspections'
        assert fila['user_id'] == USER_ID

    def test_crear_con_items_invalidos(self, client, db):
        response = client.post('/api/inspections', headers=AUTH, json={
            'vehicle_info': {'marca': 'Toyota', 'modelo': 'Hilux', 'placa': 'ABC123'},
            'inspection_data': {'Motor': ['Ruidos anormales']},
        })

        assert response.status_code == 400
        assert response.get_json()['details'] == ['Motor: los ítems deben ser un objeto']
        db.post.assert_not_called()


class TestPorId:
    def test_id_invalido(self, client, db):
        response = client.get('/api/inspections/123', headers=AUTH)
        assert response.status_code == 400
        assert response.get_json()['error'] == 'ID de inspección inválido'
        db.get_by_id.assert_not_called()

    def test_no_encontrada(self, client, db):
        db.get_by_id.return_value = None
        response = client.get(f'/api/inspections/{INSPECCION_ID}', headers=AUTH)
        assert response.status_code == 404

    def test_de_otro_usuario(self, client, db):
        db.get_by_id.return_value = {'id': INSPECCION_ID, 'user_id': OTRO_USER_ID}
        for metodo in (client.get, client.put, client.delete):
            response = metodo(f'/api/inspections/{INSPECCION_ID}', headers=AUTH, json={})
            assert response.status_code == 403
        db.patch.assert_not_called()
        db.delete.assert_not_called()

    def test_obtener(self, client, db):
        db.get_by_id.return_value = fila_inspeccion()

        response = client.get(f'/api/inspections/{INSPECCION_ID}', headers=AUTH)

        assert response.status_code == 200
        assert response.get_json()['data']['id'] == INSPECCION_ID
        assert response.headers['Cache-Control'] == 'no-cache, no-store, must-revalidate'
        assert response.headers['X-Content-Type-Options'] == 'nosniff'

    def test_actualizar_invalida(self, client, db):
        db.get_by_id.return_value = fila_inspeccion()

        response = client.put(f'/api/inspections/{INSPECCION_ID}', headers=AUTH, json={'total_score': 150})

        assert response.status_code == 400
        assert response.get_json()['details'] == ['El puntaje total debe estar entre 0 y 100']
        db.patch.assert_not_called()

    def test_actualizar_items_invalidos(self, client, db):
        db.get_by_id.return_value = fila_inspeccion()

        response = client.put(f'/api/inspections/{INSPECCION_ID}', headers=AUTH, json={
            'inspection_data': {
                'Motor': {
                    'Ruidos anormales': {'score': 15, 'priority': 'urgent'},
                    'Vibraciones': {'score': 6, 'repairCost': -100},
                    'Humo del escape': {'score': 8, 'priority': 'low', 'repairCost': 0},
                },
            },
        })

        assert response.status_code == 400
        assert response.get_json()['details'] == [
            'Motor - Ruidos anormales: Puntuación debe estar entre 1 y 10',
            'Motor - Ruidos anormales: Prioridad inválida: urgent',
            'Motor - Vibraciones: Costo de reparación no puede ser negativo',
        ]
        db.patch.assert_not_called()

    def test_actualizar_sin_cuerpo(self, client, db):
        db.get_by_id.return_value = fila_inspeccion()
        response = client.put(f'/api/inspections/{INSPECCION_ID}', headers=AUTH)
        assert response.status_code == 400
        assert response.get_json()['details'] == ['Los datos de actualización son requeridos']

    def test_actualizar(self, client, db):
        db.get_by_id.return_value = fila_inspeccion()
        db.patch.return_value = {'id': INSPECCION_ID, 'status': 'completed'}

        response = client.put(f'/api/inspections/{INSPECCION_ID}', headers=AUTH, json={
            'status': 'completed', 'user_id': OTRO_USER_ID,
        })

        assert response.status_code == 200
        assert response.get_json()['message'] == 'Inspección actualizada exitosamente'
        cambios = db.patch.call_args[0][2]
        assert cambios['status'] == 'completed'
        assert 'user_id' not in cambios

    def test_eliminar(self, client, db):
        db.get_by_id.return_value = {'id': INSPECCION_ID, 'user_id': USER_ID}
        db.delete_where.return_value = True
        db.delete.return_value = True

        response = client.delete(f'/api/inspections/{INSPECCION_ID}', headers=AUTH)

        assert response.status_code == 200
        assert response.get_json()['data'] == {'id': INSPECCION_ID}

    def test_eliminar_error(self, client, db):
        db.get_by_id.return_value = {'id': INSPECCION_ID, 'user_id': USER_ID}
        db.delete_where.return_value = True
        db.delete.return_value = False

        response = client.delete(f'/api/inspections/{INSPECCION_ID}', headers=AUTH)
        assert response.status_code == 500


class TestUploadImage:
    def test_datos_requeridos(self, client):
        response = client.post('/api/upload-image', headers=AUTH, json={'image': 'abc'})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Imagen y nombre de archivo son requeridos'

    @patch('services.storage_service.subir_imagen')
    def test_subida(self, mock_subir, client):
        mock_subir.return_value = {
            'url': 'https://test.supabase.co/storage/v1/object/public/inspection-images/x.jpg',
            'file_name': 'x.jpg', 'bucket': 'inspection-images', 'original_name': 'foto.jpg', 'size': 10,
        }

        response = client.post('/api/upload-image', headers=AUTH, json={
            'image': 'data:image/jpeg;base64,AAAA', 'fileName': 'foto.jpg',
            'category': 'Motor', 'itemName': 'Vibraciones',
        })
        body = response.get_json()

        assert response.status_code == 200
        assert body['bucket'] == 'inspection-images'
        assert body['fileName'] == 'x.jpg'
        assert body['originalName'] == 'foto.jpg'
        assert body['message'] == 'Imagen subida exitosamente a inspection-images'
        assert mock_subir.call_args[1] == {'user_id': USER_ID, 'category': 'Motor', 'item_name': 'Vibraciones'}

    @patch('services.storage_service.subir_imagen')
    def test_subida_a_carpeta_de_otro_usuario(self, mock_subir, client):
        response = client.post('/api/upload-image', headers=AUTH, json={
            'image': 'AAAA', 'fileName': 'foto.jpg', 'userId': OTRO_USER_ID,
            'category': 'Motor', 'itemName': 'Vibraciones',
        })

        assert response.status_code == 403
        assert response.get_json()['success'] is False
        mock_subir.assert_not_called()

    @patch('services.storage_service.subir_imagen')
    def test_imagen_invalida(self, mock_subir, client):
        mock_subir.side_effect = StorageError('La imagen es muy grande. Máximo 5MB permitido.')
        response = client.post('/api/upload-image', headers=AUTH, json={'image': 'AAAA', 'fileName': 'f.jpg'})
        assert response.status_code == 400

    @patch('services.storage_service.subir_imagen')
    def test_todos_los_buckets_fallan(self, mock_subir, client):
        mock_subir.side_effect = StorageError('No se pudo subir la imagen. Buckets no disponibles.',
                                              {'primary': '404', 'alternative': '404', 'temp': '500'})
        response = client.post('/api/upload-image', headers=AUTH, json={'image': 'AAAA', 'fileName': 'f.jpg'})

        assert response.status_code == 500
        assert response.get_json()['details']['temp'] == '500'


class TestChecklistYMetricas:
    def test_checklist_publico(self, client, usuario_api):
        response = client.get('/api/checklist')
        body = response.get_json()

        assert response.status_code == 200
        assert body['total_items'] == 64
        assert body['categories'][0] == 'Documentación Legal'
        assert body['data']['Documentación Legal'][0]['name'] == 'SOAT vigente'
        usuario_api.assert_not_called()

    @patch('services.perfil_service.obtener_perfil', return_value=None)
    def test_metricas(self, mock_perfil, client, db, vehiculo):
        def get(tabla, **kwargs):
            if tabla == 'vehicles':
                return [vehiculo.to_dict()]
            return [fila_inspeccion(vehicle_id=vehiculo.id, status='completed')]
        db.get.side_effect = get

        response = client.get('/api/metrics', headers=AUTH)
        data = response.get_json()['data']

        assert response.status_code == 200
        assert data['overview']['total_vehicles'] == 1
        assert data['overview']['completed_inspections'] == 1
        metricas_vehiculo = data['trends']['vehicle_metrics'][0]
        assert metricas_vehiculo['vehicle']['placa'] == 'ABC123'
        assert metricas_vehiculo['last_inspection']['score'] == '7.0/10'
