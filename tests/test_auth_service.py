"""
Pruebas del servicio de autenticación (Supabase Auth mockeado)
"""
from unittest.mock import patch, MagicMock

import pytest
import requests

from services import auth_service
from services.auth_service import AuthError


def respuesta(status=200, json_data=None, content=b'{}'):
    response = MagicMock()
    response.status_code = status
    response.ok = 200 <= status < 300
    response.json.return_value = json_data if json_data is not None else {}
    response.content = content
    return response


@patch('services.auth_service.requests.request')
def test_sign_in_normaliza_email(mock_request):
    mock_request.return_value = respuesta(json_data={'access_token': 'a', 'user': {'id': 'u'}})

    sesion = auth_service.sign_in('  Carlos@Example.com ', 'secreto123')

    assert sesion['access_token'] == 'a'
    metodo, url = mock_request.call_args[0]
    assert metodo == 'POST'
    assert url == 'https://test.supabase.co/auth/v1/token?grant_type=password'
    assert mock_request.call_args[1]['json']['email'] == 'carlos@example.com'


@patch('services.auth_service.requests.request')
def test_sign_in_credenciales_incorrectas(mock_request):
    mock_request.return_value = respuesta(400, {'error': 'invalid_grant', 'error_description': 'Invalid login credentials'})

    with pytest.raises(AuthError, match='Email o contraseña incorrectos') as excinfo:
        auth_service.sign_in('a@b.co', 'mala')
    assert excinfo.value.status_code == 400


def test_sign_in_requiere_datos():
    with pytest.raises(AuthError):
        auth_service.sign_in('', 'x')


def test_sign_up_valida_longitud_de_contrasena():
    with pytest.raises(AuthError, match='al menos 6'):
        auth_service.sign_up('a@b.co', '123')


@patch('services.auth_service.requests.request')
def test_sign_up_envia_metadata(mock_request):
    mock_request.return_value = respuesta(json_data={'id': 'u'})
    auth_service.sign_up('a@b.co', 'secreto123', {'full_name': 'Ana'})
    assert mock_request.call_args[1]['json']['data'] == {'full_name': 'Ana'}


@patch('services.auth_service.requests.request')
def test_error_de_red(mock_request):
    mock_request.side_effect = requests.exceptions.ConnectionError('sin red')
    with pytest.raises(AuthError, match='No se pudo conectar'):
        auth_service.reset_password('a@b.co')


@patch('services.auth_service.requests.request')
def test_get_user_token_vencido(mock_request):
    mock_request.return_value = respuesta(401, {'msg': 'JWT expired'})

    with pytest.raises(AuthError, match='Token inválido o expirado') as excinfo:
        auth_service.get_user('vencido')
    assert excinfo.value.status_code == 401


def test_get_user_sin_token():
    with pytest.raises(AuthError) as excinfo:
        auth_service.get_user(None)
    assert excinfo.value.status_code == 401


@patch('services.auth_service.requests.request')
def test_get_user_envia_bearer(mock_request):
    mock_request.return_value = respuesta(json_data={'id': 'u', 'email': 'a@b.co'})
    assert auth_service.get_user('token')['id'] == 'u'
    assert mock_request.call_args[1]['headers']['Authorization'] == 'Bearer token'


@patch('services.auth_service.requests.request')
def test_sign_out_ignora_token_vencido(mock_request):
    mock_request.return_value = respuesta(401, {'msg': 'expired'})
    auth_service.sign_out('vencido')

    mock_request.return_value = respuesta(500, {'msg': 'boom'})
    with pytest.raises(AuthError):
        auth_service.sign_out('token')


@patch('services.auth_service.requests.request')
def test_respuesta_vacia(mock_request):
    mock_request.return_value = respuesta(204, content=b'')
    assert auth_service.update_profile('token', {'full_name': 'Ana'}) == {}


def test_refresh_sin_token():
    with pytest.raises(AuthError, match='Sesión expirada'):
        auth_service.refresh_session(None)
