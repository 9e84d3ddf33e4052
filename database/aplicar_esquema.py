#!/usr/bin/env python3
"""
Script para aplicar el esquema de InspecciónPro 4x4 a Supabase
(profiles, vehicles, inspections, inspection_photos y políticas RLS)
"""

import os
import sys
from urllib.parse import urlparse

import psycopg2

TABLAS = ('profiles', 'vehicles', 'inspections', 'inspection_photos')


def host_base_datos():
    """db.<ref>.supabase.co a partir de SUPABASE_URL, o SUPABASE_DB_HOST si está definido"""
    host = os.environ.get("SUPABASE_DB_HOST")
    if host:
        return host

    supabase_url = os.environ.get("SUPABASE_URL")
    if not supabase_url:
        return None
    return f"db.{urlparse(supabase_url).hostname}"


def aplicar_esquema():
    """Aplica el esquema SQL a Supabase usando psycopg2"""

    host = host_base_datos()
    supabase_password = os.environ.get("SUPABASE_DB_PASSWORD")

    if not host or not supabase_password:
        print("❌ ERROR: Variables SUPABASE_URL (o SUPABASE_DB_HOST) y SUPABASE_DB_PASSWORD requeridas")
        print("\nConfigurar con:")
        print("  export SUPABASE_URL='https://<ref>.supabase.co'")
        print("  export SUPABASE_DB_PASSWORD='tu_password'")
        print("\nEncuentra el password en:")
        print("  Supabase Dashboard → Settings → Database → Connection String")
        sys.exit(1)

    schema_path = os.path.join(os.path.dirname(__file__), "inspecciones_schema.sql")

    print("📋 Aplicando esquema de InspecciónPro 4x4 a Supabase...")
    print(f"   Servidor: {host}")

    try:
        print("\n🔌 Conectando a Supabase...")
        conn = psycopg2.connect(
            host=host, port=5432, dbname="postgres", user="postgres", password=supabase_password
        )
        cur = conn.cursor()

        print(f"📄 Leyendo {schema_path}...")
        with open(schema_path, 'r', encoding='utf-8') as f:
            schema_sql = f.read()

        print("⚙️  Ejecutando SQL...")
        cur.execute(schema_sql)
        conn.commit()

        print("\n✅ ¡Esquema aplicado correctamente!")

        print("\n📊 Verificando tablas creadas...")
        cur.execute("""
            SELECT table_name
            FROM information_schema.tables
            WHERE table_schema = 'public'
            AND table_name IN %s
            ORDER BY table_name;
        """, (TABLAS,))

        tables = cur.fetchall()
        print(f"\n   Tablas creadas ({len(tables)}/{len(TABLAS)}):")
        for table in tables:
            print(f"   ✓ {table[0]}")

        print("\n" + "=" * 60)
        print("🎉 ¡Esquema aplicado exitosamente!")
        print("=" * 60)
        print("\n📌 Próximo paso:")
        print("   python scripts/setup_storage_bucket.py")

        cur.close()
        conn.close()

    except psycopg2.Error as e:
        print("\n❌ ERROR de base de datos:")
        print(f"   {e}")
        sys.exit(1)
    except FileNotFoundError:
        print("\n❌ ERROR: No se encontró el archivo inspecciones_schema.sql")
        print(f"   Ruta esperada: {schema_path}")
        sys.exit(1)


if __name__ == "__main__":
    aplicar_esquema()
