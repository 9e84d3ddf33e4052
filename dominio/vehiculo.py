"""
Entidad Vehicle - vehículo inspeccionado
"""
import re
from datetime import datetime

from .comun import ahora_iso, normalizar_texto
from .errores import ValidationError

ANO_MINIMO = 1990
KM_PROMEDIO_ANUAL = 20000
KM_MAXIMO = 999999

MARCAS_CONOCIDAS = {
    'toyota': 'Toyota',
    'honda': 'Honda',
    'ford': 'Ford',
    'chevrolet': 'Chevrolet',
    'chevy': 'Chevrolet',
    'nissan': 'Nissan',
    'hyundai': 'Hyundai',
    'kia': 'Kia',
    'volkswagen': 'Volkswagen',
    'vw': 'Volkswagen',
    'bmw': 'BMW',
    'mercedes': 'Mercedes-Benz',
    'mercedes-benz': 'Mercedes-Benz',
    'audi': 'Audi',
    'mazda': 'Mazda',
    'subaru': 'Subaru',
    'jeep': 'Jeep',
    'land rover': 'Land Rover',
    'landrover': 'Land Rover',
    'mitsubishi': 'Mitsubishi',
    'suzuki': 'Suzuki',
}

# Placas colombianas: ABC123 (tradicional) o ABC12D (motos / formato nuevo)
FORMATOS_PLACA = [
    re.compile(r'^[A-Z]{3}[0-9]{3}$'),
    re.compile(r'^[A-Z]{3}[0-9]{2}[A-Z]$'),
]


def ano_maximo():
    return datetime.now().year + 1


def es_placa_valida(placa):
    if not placa:
        return False
    normalizada = re.sub(r'[\s-]', '', str(placa).upper())
    return any(formato.match(normalizada) for formato in FORMATOS_PLACA)


class Vehicle:
    """Vehículo con datos normalizados y reglas de antigüedad y uso"""

    def __init__(self, marca=None, modelo=None, ano=None, placa=None, id=None,
                 kilometraje=None, color=None, numero_motor=None, numero_chasis=None,
                 user_id=None, created_at=None, updated_at=None):
        self._validar_requeridos(marca, modelo, ano, placa)

        self.id = id
        self.user_id = user_id

        self.marca = self._normalizar_marca(marca)
        self.modelo = normalizar_texto(modelo)
        self.ano = self._validar_ano(ano)
        self.placa = self._normalizar_placa(placa)

        self.kilometraje = self._parse_kilometraje(kilometraje)
        self.color = normalizar_texto(color) if color else None
        self.numero_motor = normalizar_texto(numero_motor) if numero_motor else None
        self.numero_chasis = normalizar_texto(numero_chasis) if numero_chasis else None

        self.created_at = created_at or ahora_iso()
        self.updated_at = updated_at or ahora_iso()

    # ============================================
    # VALIDACIONES
    # ============================================

    @staticmethod
    def _validar_requeridos(marca, modelo, ano, placa):
        errores = []
        if not normalizar_texto(marca):
            errores.append('Marca es requerida')
        if not normalizar_texto(modelo):
            errores.append('Modelo es requerido')
        if not ano:
            errores.append('Año es requerido')
        if not normalizar_texto(placa):
            errores.append('Placa es requerida')

        if errores:
            raise ValidationError(f"Datos de vehículo inválidos: {', '.join(errores)}", errores)

    @staticmethod
    def _normalizar_marca(marca):
        clave = normalizar_texto(marca).lower()
        if clave in MARCAS_CONOCIDAS:
            return MARCAS_CONOCIDAS[clave]
        return ' '.join(palabra.capitalize() for palabra in clave.split(' '))

    @staticmethod
    def _validar_ano(ano):
        try:
            valor = int(str(ano).strip())
        except (TypeError, ValueError):
            valor = None

        maximo = ano_maximo()
        if valor is None or valor < ANO_MINIMO or valor > maximo:
            raise ValidationError(f'Año inválido. Debe estar entre {ANO_MINIMO} y {maximo}')
        return valor

    @staticmethod
    def _normalizar_placa(placa):
        normalizada = re.sub(r'[\s-]', '', str(placa).upper())
        if not es_placa_valida(normalizada):
            raise ValidationError('Formato de placa inválido')
        return normalizada

    @staticmethod
    def _parse_kilometraje(kilometraje):
        if kilometraje in (None, ''):
            return None
        if isinstance(kilometraje, (int, float)):
            return int(kilometraje)
        try:
            # Admite separador de miles: "45.000" o "45,000"
            return int(str(kilometraje).strip().replace('.', '').replace(',', ''))
        except ValueError:
            raise ValidationError('Kilometraje inválido')

    # ============================================
    # REGLAS DE NEGOCIO
    # ============================================

    def is_valid_plate_format(self, placa=None):
        return es_placa_valida(placa if placa is not None else self.placa)

    def age(self):
        return datetime.now().year - self.ano

    def is_old_vehicle(self):
        return self.age() > 15

    def is_classic_vehicle(self):
        return self.age() > 30

    def age_category(self):
        edad = self.age()
        if edad <= 3:
            return 'NUEVO'
        if edad <= 8:
            return 'SEMINUEVO'
        if edad <= 15:
            return 'USADO'
        if edad <= 30:
            return 'ANTIGUO'
        return 'CLÁSICO'

    def needs_technical_inspection(self):
        """Revisión técnico-mecánica obligatoria a partir de 4 años"""
        return self.age() > 4

    def inspection_frequency(self):
        """Frecuencia recomendada de inspección en meses (None si no aplica)"""
        edad = self.age()
        if edad <= 4:
            return None
        if edad <= 10:
            return 24
        if edad <= 20:
            return 12
        return 6

    def is_valid_kilometraje(self, kilometraje=None):
        kilometraje = kilometraje if kilometraje is not None else self.kilometraje
        if not kilometraje:
            return True
        maximo_esperado = self.age() * KM_PROMEDIO_ANUAL * 1.5
        return kilometraje <= maximo_esperado

    def usage_level(self):
        if not self.kilometraje:
            return 'DESCONOCIDO'

        esperado = self.age() * KM_PROMEDIO_ANUAL
        if esperado <= 0:
            # Vehículo del año en curso: cualquier recorrido supera lo esperado
            return 'EXCESIVO'

        ratio = self.kilometraje / esperado
        if ratio < 0.5:
            return 'BAJO'
        if ratio < 1.2:
            return 'NORMAL'
        if ratio < 2.0:
            return 'ALTO'
        return 'EXCESIVO'

    # ============================================
    # UTILIDADES
    # ============================================

    def update(self, **cambios):
        """Devuelve un vehículo nuevo con los cambios aplicados y validados"""
        datos = self.to_dict()
        datos.update(cambios)
        datos['updated_at'] = ahora_iso()
        return Vehicle.from_dict(datos)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'marca': self.marca,
            'modelo': self.modelo,
            'ano': self.ano,
            'placa': self.placa,
            'kilometraje': self.kilometraje,
            'color': self.color,
            'numero_motor': self.numero_motor,
            'numero_chasis': self.numero_chasis,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }

    def __str__(self):
        return f'{self.marca} {self.modelo} {self.ano} ({self.placa})'

    def summary(self):
        return {
            'vehicle': str(self),
            'age': f'{self.age()} años',
            'category': self.age_category(),
            'usage_level': self.usage_level(),
            'needs_inspection': self.needs_technical_inspection(),
            'inspection_frequency': self.inspection_frequency(),
            'plate_valid': self.is_valid_plate_format(),
            'kilometraje_valid': self.is_valid_kilometraje(),
        }

    def validate(self):
        errores = []

        if not self.is_valid_plate_format():
            errores.append('Formato de placa inválido')

        if not self.is_valid_kilometraje():
            errores.append('Kilometraje inconsistente con la edad del vehículo')

        if self.ano < ANO_MINIMO or self.ano > ano_maximo():
            errores.append('Año fuera del rango válido')

        if self.kilometraje and (self.kilometraje < 0 or self.kilometraje > KM_MAXIMO):
            errores.append('Kilometraje fuera del rango válido')

        return len(errores) == 0, errores

    # ============================================
    # CONSTRUCTORES
    # ============================================

    @classmethod
    def from_dict(cls, data):
        campos = {
            'id', 'user_id', 'marca', 'modelo', 'ano', 'placa', 'kilometraje',
            'color', 'numero_motor', 'numero_chasis', 'created_at', 'updated_at',
        }
        datos = {k: v for k, v in data.items() if k in campos}
        # Registros antiguos guardan el año como 'año'
        if 'ano' not in datos and 'año' in data:
            datos['ano'] = data['año']
        return cls(**datos)

    @staticmethod
    def validate_data(data):
        errores = []
        if not normalizar_texto(data.get('marca')):
            errores.append('Marca requerida')
        if not normalizar_texto(data.get('modelo')):
            errores.append('Modelo requerido')
        if not (data.get('ano') or data.get('año')):
            errores.append('Año requerido')
        if not normalizar_texto(data.get('placa')):
            errores.append('Placa requerida')
        return len(errores) == 0, errores

    @staticmethod
    def supported_brands():
        return [
            'Toyota', 'Honda', 'Ford', 'Chevrolet', 'Nissan', 'Hyundai',
            'Kia', 'Volkswagen', 'BMW', 'Mercedes-Benz', 'Audi', 'Mazda',
            'Subaru', 'Jeep', 'Land Rover', 'Mitsubishi', 'Suzuki', 'Otro',
        ]
