from flask import Flask, render_template, session, g
import os
import json
import logging

import helpers
from config import config
from dominio import checklist
from routes.auth import auth_bp
from routes.inspecciones import inspecciones_bp
from routes.api import api_bp
from routes.reportes import reportes_bp
from services import metricas_service, perfil_service
from services.cache_service import get_resumen_cached
from services.inspeccion_repository import InspeccionRepository
from services.supabase_client import SupabaseError
from utils.formatters import format_fecha_filter, format_cop_filter, format_kilometraje
from utils.messages import flash_error

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = config.SECRET_KEY
app.config['MAX_CONTENT_LENGTH'] = config.MAX_IMAGE_SIZE * 2

# Filtros Jinja2
app.add_template_filter(format_fecha_filter, 'format_fecha')
app.add_template_filter(format_cop_filter, 'format_cop')
app.add_template_filter(format_kilometraje, 'format_km')
app.add_template_filter(metricas_service.format_score, 'format_score')
app.add_template_filter(metricas_service.format_percentage, 'format_pct')

# Blueprints
app.register_blueprint(auth_bp)
app.register_blueprint(inspecciones_bp)
app.register_blueprint(api_bp)
app.register_blueprint(reportes_bp)

# ============================================
# FUNCIONES DE CONTEXTO PARA TEMPLATES
# ============================================
# Registra funciones de permisos para que estén disponibles en Jinja2

@app.context_processor
def inject_permisos():
    """Inyecta funciones de control de acceso en todos los templates"""
    perfil_actual = helpers.obtener_perfil_usuario()

    return {
        'tiene_permiso': helpers.tiene_permiso,
        'puede_escribir': helpers.puede_escribir,
        'puede_eliminar': helpers.puede_eliminar,
        'obtener_modulos_permitidos': helpers.obtener_modulos_permitidos,
        'perfil_usuario': perfil_actual,
        'permisos_usuario_json': json.dumps(helpers.PERMISOS_POR_PERFIL.get(perfil_actual, {})),
        'app_name': config.APP_NAME,
        'app_version': config.APP_VERSION,
    }


# ============================================
# DASHBOARD
# ============================================

@app.route("/home")
@helpers.login_required
def home():
    """Dashboard: resumen de métricas, vehículos y últimas inspecciones"""
    usuario = perfil_service.cargar_usuario(
        {"id": session["usuario_id"], "email": session.get("email")},
        g.access_token
    )

    try:
        resumen = get_resumen_cached(usuario, g.access_token)
        recientes = InspeccionRepository(g.access_token).listar(usuario.id, limit=5)
    except SupabaseError as e:
        flash_error(f"Error cargando el dashboard: {str(e)}")
        resumen = metricas_service.summary_report(usuario, [], [])
        recientes = []

    return render_template(
        "home.html",
        usuario=usuario,
        resumen=resumen,
        recientes=recientes,
        total_items_checklist=checklist.total_items(),
        format_currency=metricas_service.format_currency,
    )


# ============================================
# CIERRE
# ============================================

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    app.run(host="0.0.0.0", port=port, debug=False)
