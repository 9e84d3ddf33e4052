"""
Pruebas de la entidad Vehicle
"""
from datetime import datetime

import pytest

from dominio import Vehicle, ValidationError


def crear(**cambios):
    datos = {'marca': 'Toyota', 'modelo': 'Hilux', 'ano': 2015, 'placa': 'XYZ987'}
    datos.update(cambios)
    return Vehicle(**datos)


class TestNormalizacion:
    def test_marca_y_placa(self, vehiculo):
        assert vehiculo.marca == 'Toyota'
        assert vehiculo.placa == 'ABC123'
        assert vehiculo.kilometraje == 85000
        assert str(vehiculo) == 'Toyota Land Cruiser Prado 2018 (ABC123)'

    @pytest.mark.parametrize("marca,esperada", [
        ('vw', 'Volkswagen'),
        ('LAND ROVER', 'Land Rover'),
        ('mercedes', 'Mercedes-Benz'),
        ('great wall', 'Great Wall'),
    ])
    def test_marcas(self, marca, esperada):
        assert crear(marca=marca).marca == esperada

    def test_placa_formato_nuevo(self):
        assert crear(placa='abc 12d').placa == 'ABC12D'

    def test_kilometraje_con_coma(self):
        assert crear(kilometraje='120,500').kilometraje == 120500


class TestValidaciones:
    def test_campos_requeridos(self):
        with pytest.raises(ValidationError) as excinfo:
            Vehicle(marca='', modelo='', ano=None, placa='')
        assert len(excinfo.value.errors) == 4

    def test_placa_invalida(self):
        with pytest.raises(ValidationError, match='placa'):
            crear(placa='12ABC3')

    def test_ano_fuera_de_rango(self):
        with pytest.raises(ValidationError):
            crear(ano=1989)
        with pytest.raises(ValidationError):
            crear(ano=datetime.now().year + 2)
        assert crear(ano=datetime.now().year + 1).ano == datetime.now().year + 1

    def test_kilometraje_invalido(self):
        with pytest.raises(ValidationError):
            crear(kilometraje='mucho')

    def test_validate(self, vehiculo):
        assert vehiculo.validate() == (True, [])

    def test_kilometraje_inconsistente(self):
        ano = datetime.now().year - 2
        valido, errores = crear(ano=ano, kilometraje=500000).validate()
        assert not valido
        assert 'Kilometraje inconsistente con la edad del vehículo' in errores

    def test_validate_data_acepta_ano_con_tilde(self):
        assert Vehicle.validate_data({'marca': 'Jeep', 'modelo': 'Wrangler', 'año': 2020, 'placa': 'JEP123'})[0]
        valido, errores = Vehicle.validate_data({'marca': 'Jeep'})
        assert not valido
        assert len(errores) == 3


class TestReglas:
    def test_categoria_por_edad(self):
        actual = datetime.now().year
        assert crear(ano=actual).age_category() == 'NUEVO'
        assert crear(ano=actual - 6).age_category() == 'SEMINUEVO'
        assert crear(ano=actual - 12).age_category() == 'USADO'
        assert crear(ano=actual - 20).age_category() == 'ANTIGUO'
        assert crear(ano=1990).is_old_vehicle()
        assert crear(ano=1990).is_classic_vehicle()
        assert not crear(ano=actual - 20).is_classic_vehicle()

    def test_frecuencia_de_inspeccion(self):
        actual = datetime.now().year
        assert crear(ano=actual - 2).inspection_frequency() is None
        assert not crear(ano=actual - 2).needs_technical_inspection()
        assert crear(ano=actual - 8).inspection_frequency() == 24
        assert crear(ano=actual - 15).inspection_frequency() == 12
        assert crear(ano=1990).inspection_frequency() == 6

    def test_nivel_de_uso(self):
        ano = datetime.now().year - 10
        assert crear(ano=ano).usage_level() == 'DESCONOCIDO'
        assert crear(ano=ano, kilometraje=50000).usage_level() == 'BAJO'
        assert crear(ano=ano, kilometraje=200000).usage_level() == 'NORMAL'
        assert crear(ano=ano, kilometraje=300000).usage_level() == 'ALTO'
        assert crear(ano=ano, kilometraje=450000).usage_level() == 'EXCESIVO'

    def test_vehiculo_del_ano_con_recorrido(self):
        assert crear(ano=datetime.now().year, kilometraje=1000).usage_level() == 'EXCESIVO'


class TestConversiones:
    def test_update_devuelve_vehiculo_nuevo(self, vehiculo):
        actualizado = vehiculo.update(kilometraje=90000, color='Gris')
        assert actualizado is not vehiculo
        assert actualizado.kilometraje == 90000
        assert vehiculo.kilometraje == 85000
        assert actualizado.placa == 'ABC123'

    def test_update_valida(self, vehiculo):
        with pytest.raises(ValidationError):
            vehiculo.update(placa='no-valida')

    def test_from_dict_con_ano_antiguo(self):
        vehiculo = Vehicle.from_dict({'marca': 'Kia', 'modelo': 'Sorento', 'año': 2019, 'placa': 'KIA019'})
        assert vehiculo.ano == 2019

    def test_resumen(self, vehiculo):
        resumen = vehiculo.summary()
        assert resumen['vehicle'] == str(vehiculo)
        assert resumen['plate_valid']

    def test_marcas_soportadas(self):
        marcas = Vehicle.supported_brands()
        assert 'Toyota' in marcas
        assert marcas[-1] == 'Otro'
