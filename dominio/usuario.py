"""
Entidad User - usuario de la aplicación (inspector, supervisor, admin o visualizador)
"""
import re
from datetime import datetime, timezone

from .comun import ahora_iso, parse_fecha_iso, texto_o_none
from .errores import PermissionDeniedError, ValidationError

ROLES_VALIDOS = ['inspector', 'admin', 'supervisor', 'viewer']

EMAIL_REGEX = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

NIVELES_EXPERIENCIA = [
    {'level': 'NUEVO', 'min': 0, 'max': 0},
    {'level': 'PRINCIPIANTE', 'min': 1, 'max': 4},
    {'level': 'INTERMEDIO', 'min': 5, 'max': 19},
    {'level': 'AVANZADO', 'min': 20, 'max': 99},
    {'level': 'EXPERTO', 'min': 100, 'max': None},
]


def preferencias_por_defecto():
    return {
        'theme': 'light',
        'language': 'es',
        'notifications': {
            'email': True,
            'push': False,
            'inspection_reminders': True,
        },
        'inspection': {
            'auto_save': True,
            'show_tips': True,
            'default_view': 'categories',
        },
        'privacy': {
            'share_stats': False,
            'public_profile': False,
        },
    }


def _dias_desde(fecha_iso):
    fecha = parse_fecha_iso(fecha_iso)
    if fecha is None:
        return None
    return (datetime.now(timezone.utc) - fecha).total_seconds() / 86400


class User:
    """Usuario autenticado con perfil, rol y preferencias"""

    CAMPOS_PERFIL = ('full_name', 'phone', 'company', 'avatar_url', 'preferences')

    def __init__(self, id=None, email=None, full_name=None, phone=None, company=None,
                 role='inspector', preferences=None, avatar_url=None, last_login=None,
                 total_inspections=0, is_active=True, email_verified=False,
                 created_at=None, updated_at=None):
        if not id:
            raise ValidationError('ID de usuario requerido')
        if not email:
            raise ValidationError('Email requerido')

        self.id = id
        self.email = self._validar_email(email)

        self.full_name = texto_o_none(full_name)
        self.phone = self._validar_telefono(phone)
        self.company = texto_o_none(company)
        self.avatar_url = texto_o_none(avatar_url)

        self.role = self._validar_rol(role or 'inspector')
        self.preferences = self._fusionar_preferencias(preferences)
        self.last_login = last_login
        try:
            self.total_inspections = max(0, int(total_inspections or 0))
        except (TypeError, ValueError):
            self.total_inspections = 0
        self.is_active = bool(is_active)
        self.email_verified = bool(email_verified)

        self.created_at = created_at or ahora_iso()
        self.updated_at = updated_at or ahora_iso()

    # ============================================
    # VALIDACIONES
    # ============================================

    @staticmethod
    def _validar_email(email):
        normalizado = str(email).strip().lower()
        if not EMAIL_REGEX.match(normalizado):
            raise ValidationError('Formato de email inválido')
        return normalizado

    @staticmethod
    def _validar_telefono(phone):
        if not phone:
            return None
        normalizado = re.sub(r'[^\d\s+-]', '', str(phone)).strip()
        if normalizado and len(normalizado) < 7:
            raise ValidationError('Número de teléfono muy corto')
        return normalizado or None

    @staticmethod
    def _validar_rol(role):
        if role not in ROLES_VALIDOS:
            raise ValidationError(
                f"Rol inválido: {role}. Debe ser uno de: {', '.join(ROLES_VALIDOS)}"
            )
        return role

    @staticmethod
    def _fusionar_preferencias(preferences):
        if not isinstance(preferences, dict):
            return preferencias_por_defecto()
        return {**preferencias_por_defecto(), **preferences}

    # ============================================
    # PERMISOS
    # ============================================

    def is_admin(self):
        return self.role == 'admin'

    def is_supervisor(self):
        return self.role == 'supervisor' or self.is_admin()

    def can_create_inspections(self):
        return self.role in ('inspector', 'supervisor', 'admin') and self.is_active

    def can_view_all_inspections(self):
        return self.is_supervisor()

    def can_edit_system_settings(self):
        return self.is_admin()

    # ============================================
    # PRESENTACIÓN
    # ============================================

    def display_name(self):
        if self.full_name:
            return self.full_name

        nombre_email = self.email.split('@')[0]
        palabras = re.sub(r'[._-]', ' ', nombre_email).split(' ')
        return ' '.join(p[:1].upper() + p[1:] for p in palabras)

    def initials(self):
        palabras = [p for p in self.display_name().split(' ') if p]
        if len(palabras) == 1:
            return palabras[0][:2].upper()
        return ''.join(p[0] for p in palabras[:2]).upper()

    def experience_level(self):
        for nivel in NIVELES_EXPERIENCIA:
            if nivel['max'] is None or self.total_inspections <= nivel['max']:
                return nivel['level']
        return NIVELES_EXPERIENCIA[-1]['level']

    def is_new_user(self):
        dias = _dias_desde(self.created_at)
        return dias is not None and dias < 7

    def is_recently_active(self):
        dias = _dias_desde(self.last_login)
        return dias is not None and dias < 30

    # ============================================
    # CAMBIOS DE ESTADO
    # ============================================

    def _actualizar_timestamp(self):
        self.updated_at = ahora_iso()

    def update_last_login(self):
        self.last_login = ahora_iso()
        self._actualizar_timestamp()
        return self

    def increment_inspections(self, count=1):
        self.total_inspections += count
        self._actualizar_timestamp()
        return self

    def update_preferences(self, nuevas):
        self.preferences = {**self.preferences, **(nuevas or {})}
        self._actualizar_timestamp()
        return self

    def change_role(self, nuevo_rol, changed_by):
        """Solo un administrador puede cambiar roles"""
        if changed_by is None or not changed_by.is_admin():
            raise PermissionDeniedError('Solo administradores pueden cambiar roles')

        self.role = self._validar_rol(nuevo_rol)
        self._actualizar_timestamp()
        return self

    def set_active(self, activo, changed_by):
        """Solo supervisores (o admins) pueden activar/desactivar usuarios"""
        if changed_by is None or not changed_by.is_supervisor():
            raise PermissionDeniedError('Solo supervisores pueden activar/desactivar usuarios')

        self.is_active = bool(activo)
        self._actualizar_timestamp()
        return self

    def verify_email(self):
        self.email_verified = True
        self._actualizar_timestamp()
        return self

    def update_profile(self, **cambios):
        """Actualiza los campos de perfil permitidos, ignorando el resto"""
        validos = {k: v for k, v in cambios.items() if k in self.CAMPOS_PERFIL and v is not None}

        if 'phone' in validos:
            validos['phone'] = self._validar_telefono(validos['phone'])

        if 'preferences' in validos:
            validos['preferences'] = {**self.preferences, **validos['preferences']}

        for campo in ('full_name', 'company', 'avatar_url'):
            if campo in validos:
                validos[campo] = texto_o_none(validos[campo])

        for campo, valor in validos.items():
            setattr(self, campo, valor)

        self._actualizar_timestamp()
        return self

    # ============================================
    # CONVERSIONES
    # ============================================

    def stats(self):
        dias_creacion = _dias_desde(self.created_at)
        dias_login = _dias_desde(self.last_login)
        return {
            'total_inspections': self.total_inspections,
            'experience_level': self.experience_level(),
            'is_new_user': self.is_new_user(),
            'is_recently_active': self.is_recently_active(),
            'days_since_creation': int(dias_creacion) if dias_creacion is not None else 0,
            'days_since_last_login': int(dias_login) if dias_login is not None else None,
            'account_status': 'ACTIVO' if self.is_active else 'INACTIVO',
            'email_status': 'VERIFICADO' if self.email_verified else 'PENDIENTE',
        }

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'full_name': self.full_name,
            'phone': self.phone,
            'company': self.company,
            'role': self.role,
            'preferences': self.preferences,
            'avatar_url': self.avatar_url,
            'last_login': self.last_login,
            'total_inspections': self.total_inspections,
            'is_active': self.is_active,
            'email_verified': self.email_verified,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }

    def to_public_profile(self):
        compartir = self.preferences.get('privacy', {}).get('share_stats')
        return {
            'id': self.id,
            'display_name': self.display_name(),
            'initials': self.initials(),
            'company': self.company,
            'experience_level': self.experience_level(),
            'total_inspections': self.total_inspections if compartir else None,
            'avatar_url': self.avatar_url,
            'is_active': self.is_active,
        }

    def to_session_data(self):
        return {
            'id': self.id,
            'email': self.email,
            'display_name': self.display_name(),
            'role': self.role,
            'permissions': {
                'can_create_inspections': self.can_create_inspections(),
                'can_view_all_inspections': self.can_view_all_inspections(),
                'can_edit_system_settings': self.can_edit_system_settings(),
                'is_admin': self.is_admin(),
                'is_supervisor': self.is_supervisor(),
            },
            'preferences': self.preferences,
            'is_active': self.is_active,
            'email_verified': self.email_verified,
        }

    def validate(self):
        errores = []

        try:
            self._validar_email(self.email)
        except ValidationError as e:
            errores.append(str(e))

        try:
            self._validar_rol(self.role)
        except ValidationError as e:
            errores.append(str(e))

        if self.phone:
            try:
                self._validar_telefono(self.phone)
            except ValidationError as e:
                errores.append(str(e))

        if self.total_inspections < 0:
            errores.append('Total de inspecciones no puede ser negativo')

        return len(errores) == 0, errores

    # ============================================
    # CONSTRUCTORES
    # ============================================

    @classmethod
    def from_auth_data(cls, auth_user, perfil=None):
        """
        Crea el usuario a partir de la respuesta de Supabase Auth.

        Args:
            auth_user: diccionario 'user' devuelto por /auth/v1
            perfil: fila opcional de la tabla profiles (rol, empresa, ...)
        """
        metadata = auth_user.get('user_metadata') or {}
        perfil = perfil or {}
        return cls(
            id=auth_user.get('id'),
            email=auth_user.get('email'),
            full_name=perfil.get('full_name') or metadata.get('full_name'),
            phone=perfil.get('phone') or metadata.get('phone'),
            company=perfil.get('company'),
            role=perfil.get('role') or 'inspector',
            preferences=perfil.get('preferences'),
            avatar_url=perfil.get('avatar_url'),
            total_inspections=perfil.get('total_inspections', 0),
            is_active=perfil.get('is_active', True),
            email_verified=bool(auth_user.get('email_confirmed_at')),
            last_login=auth_user.get('last_sign_in_at') or ahora_iso(),
            created_at=auth_user.get('created_at') or ahora_iso(),
        )

    @staticmethod
    def validate_data(data):
        errores = []
        if not data.get('id'):
            errores.append('ID requerido')
        if not data.get('email'):
            errores.append('Email requerido')
        return len(errores) == 0, errores
