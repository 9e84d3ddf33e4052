#!/usr/bin/env python3
"""
Script de configuración de Supabase Storage para InspecciónPro 4x4
Crea los buckets de fotos (principal, alternativo y temporal) y el de reportes PDF
"""

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import config
from services import storage_service

BUCKETS = [
    {
        "id": config.BUCKET_FOTOS,
        "file_size_limit": config.MAX_IMAGE_SIZE,
        "allowed_mime_types": config.ALLOWED_IMAGE_TYPES,
    },
    {
        "id": config.BUCKET_FOTOS_ALTERNATIVO,
        "file_size_limit": config.MAX_IMAGE_SIZE,
        "allowed_mime_types": config.ALLOWED_IMAGE_TYPES,
    },
    {
        "id": config.BUCKET_FOTOS_TEMPORAL,
        "file_size_limit": config.MAX_IMAGE_SIZE,
        "allowed_mime_types": config.ALLOWED_IMAGE_TYPES,
    },
    {
        "id": config.BUCKET_REPORTES,
        "file_size_limit": 52428800,  # 50 MB
        "allowed_mime_types": ["application/pdf"],
    },
]


def verificar_buckets():
    """Devuelve los ids de BUCKETS que aún no existen"""
    print("🔍 Verificando buckets...")
    existentes = {b.get('id') or b.get('name') for b in storage_service.listar_buckets()}

    faltantes = []
    for bucket in BUCKETS:
        if bucket["id"] in existentes:
            print(f"   ✓ {bucket['id']}")
        else:
            print(f"   ✗ {bucket['id']} (no existe)")
            faltantes.append(bucket["id"])
    return faltantes


def main():
    print("=" * 60)
    print("🚀 Setup de Supabase Storage para InspecciónPro 4x4")
    print("=" * 60)
    print()

    if not config.SUPABASE_SERVICE_KEY:
        print("⚠️  SUPABASE_SERVICE_KEY no configurada: se usará la anon key (puede no tener permisos)")

    faltantes = verificar_buckets()
    if not faltantes:
        print("\n✅ Todos los buckets están configurados correctamente")
        return

    print("\n" + "=" * 60)
    errores = []
    for bucket in BUCKETS:
        if bucket["id"] not in faltantes:
            continue
        print(f"📦 Creando bucket '{bucket['id']}'...")
        if storage_service.crear_bucket(
            bucket["id"],
            public=True,
            file_size_limit=bucket["file_size_limit"],
            allowed_mime_types=bucket["allowed_mime_types"]
        ):
            print("✅ Bucket creado (o ya existía)")
        else:
            errores.append(bucket["id"])

    print()
    if errores:
        print(f"❌ No se pudieron crear: {', '.join(errores)}")
        print("\n💡 Solución alternativa:")
        print("   1. Ve a Supabase Dashboard → Storage")
        print("   2. Click en 'New bucket' y crea cada bucket como público")
        sys.exit(1)

    print("=" * 60)
    print("✅ CONFIGURACIÓN COMPLETADA")
    print("=" * 60)


if __name__ == "__main__":
    main()
