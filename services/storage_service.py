"""
Servicio de Supabase Storage para fotos de inspección y reportes PDF
"""
import base64
import binascii
import logging
import re
import time
import unicodedata
import uuid

import requests
from config import config

logger = logging.getLogger(__name__)

EXTENSIONES = {
    'jpg': 'image/jpeg',
    'jpeg': 'image/jpeg',
    'png': 'image/png',
    'webp': 'image/webp',
    'gif': 'image/gif',
}

DATA_URL_REGEX = re.compile(r'^data:(image/[\w+.-]+);base64,')


class StorageError(Exception):
    """Error al subir o eliminar archivos en Storage"""

    def __init__(self, message, details=None):
        super().__init__(message)
        self.details = details or {}


# ============================================
# UTILIDADES
# ============================================

def _segmento(texto):
    """Convierte un texto libre en un segmento de ruta seguro (sin acentos ni espacios)"""
    normalizado = unicodedata.normalize('NFKD', str(texto)).encode('ascii', 'ignore').decode('ascii')
    normalizado = re.sub(r'[^A-Za-z0-9]+', '-', normalizado).strip('-').lower()
    return normalizado or 'sin-nombre'


def decodificar_imagen(image):
    """
    Devuelve los bytes de la imagen y el content-type declarado (si lo hay)

    Args:
        image: bytes o cadena base64, con o sin prefijo data:image/...;base64,
    """
    if isinstance(image, (bytes, bytearray)):
        return bytes(image), None

    if not isinstance(image, str) or not image:
        raise StorageError('Imagen y nombre de archivo son requeridos')

    content_type = None
    match = DATA_URL_REGEX.match(image)
    if match:
        content_type = match.group(1)
        image = image[match.end():]

    try:
        return base64.b64decode(image, validate=True), content_type
    except (binascii.Error, ValueError):
        raise StorageError('La imagen no está codificada en base64 válido')


def tipo_contenido(file_name, declarado=None):
    """Content-type de la imagen; solo se admiten jpeg, png, webp y gif"""
    if declarado:
        content_type = declarado
    else:
        extension = file_name.rsplit('.', 1)[-1].lower() if '.' in file_name else 'jpg'
        content_type = EXTENSIONES.get(extension)

    if content_type not in config.ALLOWED_IMAGE_TYPES:
        raise StorageError('Tipo de imagen no permitido. Use JPG, PNG, WEBP o GIF.')
    return content_type


def generar_ruta(file_name, user_id=None, category=None, item_name=None):
    """
    Ruta única dentro del bucket:
    usuario/categoria/item/timestamp-rand.ext o uploads/timestamp-rand-nombre
    """
    timestamp = int(time.time() * 1000)
    random_id = uuid.uuid4().hex[:6]
    extension = file_name.rsplit('.', 1)[-1].lower() if '.' in file_name else 'jpg'

    if user_id and category and item_name:
        return f"{user_id}/{_segmento(category)}/{_segmento(item_name)}/{timestamp}-{random_id}.{extension}"
    return f"uploads/{timestamp}-{random_id}-{_segmento(file_name.rsplit('.', 1)[0])}.{extension}"


def url_publica(bucket, path):
    return f"{config.SUPABASE_URL}/storage/v1/object/public/{bucket}/{path}"


# ============================================
# OPERACIONES
# ============================================

def subir_archivo(bucket, path, content, content_type, upsert=False):
    """
    Sube un archivo a un bucket

    Raises:
        StorageError: si Supabase rechaza la subida
    """
    headers = {
        **config.STORAGE_HEADERS,
        "Content-Type": content_type,
        "Cache-Control": "3600",
    }
    if upsert:
        headers["x-upsert"] = "true"

    try:
        response = requests.post(
            f"{config.SUPABASE_URL}/storage/v1/object/{bucket}/{path}",
            data=content,
            headers=headers,
            timeout=30
        )
    except requests.exceptions.RequestException as e:
        raise StorageError(f"{type(e).__name__}: {str(e)}")

    if response.status_code not in [200, 201]:
        raise StorageError(f"{response.status_code}: {response.text[:200]}")
    return path


def listar_buckets():
    """Buckets del proyecto; lista vacía si Storage no responde"""
    try:
        response = requests.get(
            f"{config.SUPABASE_URL}/storage/v1/bucket",
            headers=config.STORAGE_HEADERS,
            timeout=10
        )
    except requests.exceptions.RequestException as e:
        logger.error(f"❌ Error listando buckets: {type(e).__name__}: {str(e)}")
        return []

    if not response.ok:
        logger.warning(f"⚠️ Error listando buckets: {response.status_code}")
        return []
    return response.json()


def crear_bucket(bucket_id, public=True, file_size_limit=None, allowed_mime_types=None):
    """Crea un bucket; devuelve True si se creó o ya existía"""
    bucket_data = {
        "id": bucket_id,
        "name": bucket_id,
        "public": public,
    }
    if file_size_limit:
        bucket_data["file_size_limit"] = file_size_limit
    if allowed_mime_types:
        bucket_data["allowed_mime_types"] = allowed_mime_types

    try:
        response = requests.post(
            f"{config.SUPABASE_URL}/storage/v1/bucket",
            json=bucket_data,
            headers={**config.STORAGE_HEADERS, "Content-Type": "application/json"},
            timeout=10
        )
    except requests.exceptions.RequestException as e:
        logger.error(f"❌ Error creando bucket {bucket_id}: {type(e).__name__}: {str(e)}")
        return False

    if response.ok or response.status_code == 409 or 'already exists' in response.text:
        return True
    logger.warning(f"⚠️ No se pudo crear bucket {bucket_id}: {response.status_code}")
    return False


def subir_imagen(image, file_name, user_id=None, category=None, item_name=None):
    """
    Sube una foto de inspección probando los buckets en orden:
    inspection-photos, inspection-images y, si ambos fallan, temp-inspections
    (que se intenta crear antes de subir).

    Returns:
        Diccionario con url, file_name, bucket, original_name y size

    Raises:
        StorageError: datos inválidos o todos los buckets fallaron
    """
    if not image or not file_name:
        raise StorageError('Imagen y nombre de archivo son requeridos')

    contenido, declarado = decodificar_imagen(image)

    if len(contenido) > config.MAX_IMAGE_SIZE:
        raise StorageError('La imagen es muy grande. Máximo 5MB permitido.')

    content_type = tipo_contenido(file_name, declarado)
    ruta = generar_ruta(file_name, user_id, category, item_name)
    logger.info(f"📁 Nombre de archivo generado: {ruta}")

    errores = {}
    buckets = [
        ('primary', config.BUCKET_FOTOS),
        ('alternative', config.BUCKET_FOTOS_ALTERNATIVO),
        ('temp', config.BUCKET_FOTOS_TEMPORAL),
    ]

    for intento, bucket in buckets:
        if intento == 'temp':
            crear_bucket(
                bucket,
                public=True,
                file_size_limit=config.MAX_IMAGE_SIZE,
                allowed_mime_types=config.ALLOWED_IMAGE_TYPES
            )
        try:
            logger.info(f"🔄 Intentando subir a bucket: {bucket}")
            subir_archivo(bucket, ruta, contenido, content_type)
        except StorageError as e:
            logger.warning(f"⚠️ Error en bucket {bucket}: {str(e)}")
            errores[intento] = str(e)
            continue

        logger.info(f"✅ Upload exitoso en bucket {bucket}")
        return {
            'url': url_publica(bucket, ruta),
            'file_name': ruta,
            'bucket': bucket,
            'original_name': file_name,
            'size': len(contenido),
        }

    logger.error("❌ Todos los buckets fallaron")
    raise StorageError('No se pudo subir la imagen. Buckets no disponibles.', errores)


def subir_reporte_pdf(pdf_bytes, user_id, inspection_id):
    """Sube (reemplazando) el PDF del reporte y devuelve su URL pública"""
    ruta = f"{user_id}/inspeccion_{inspection_id}.pdf"
    subir_archivo(config.BUCKET_REPORTES, ruta, pdf_bytes, "application/pdf", upsert=True)
    return url_publica(config.BUCKET_REPORTES, ruta)
