"""
Blueprint de Reportes

Generación de reportes mensuales en formato Excel con:
- Inspecciones realizadas en el mes
- Ítems críticos detectados
- Resumen por categoría del checklist
"""

from flask import Blueprint, render_template, request, session, Response, g
from datetime import date
import io
import logging
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side

import helpers
from dominio.comun import parse_fecha_iso
from services import metricas_service
from services.inspeccion_repository import InspeccionRepository
from services.supabase_client import SupabaseError
from utils.messages import flash_error

logger = logging.getLogger(__name__)

# Crear Blueprint
reportes_bp = Blueprint('reportes', __name__)

MESES = ['', 'ENERO', 'FEBRERO', 'MARZO', 'ABRIL', 'MAYO', 'JUNIO',
         'JULIO', 'AGOSTO', 'SEPTIEMBRE', 'OCTUBRE', 'NOVIEMBRE', 'DICIEMBRE']

ESTADOS_MAP = {
    'draft': '📝 Borrador',
    'in_progress': '🔧 En progreso',
    'completed': '✅ Completada',
    'archived': '📦 Archivada',
}

THIN_BORDER = Border(
    left=Side(style='thin'),
    right=Side(style='thin'),
    top=Side(style='thin'),
    bottom=Side(style='thin')
)


def formatear_fecha(fecha_str):
    """ISO -> dd/mm/aaaa"""
    fecha = parse_fecha_iso(fecha_str)
    return fecha.strftime('%d/%m/%Y') if fecha else (fecha_str or '')


def rango_mes(mes, ano):
    """Fechas ISO [inicio, fin) del mes"""
    inicio = date(ano, mes, 1)
    fin = date(ano + 1, 1, 1) if mes == 12 else date(ano, mes + 1, 1)
    return inicio.isoformat(), fin.isoformat()


def _hoja(ws, headers, filas, anchos):
    for col, header in enumerate(headers, 1):
        cell = ws.cell(row=1, column=col)
        cell.value = header
        cell.font = Font(bold=True, color="FFFFFF")
        cell.fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
        cell.alignment = Alignment(horizontal='center')
        cell.border = THIN_BORDER

    for row, valores in enumerate(filas, 2):
        for col, valor in enumerate(valores, 1):
            ws.cell(row=row, column=col, value=valor).border = THIN_BORDER

    for letra, ancho in anchos.items():
        ws.column_dimensions[letra].width = ancho


def generar_excel_mensual(inspecciones):
    """Libro Excel con tres pestañas a partir de entidades Inspection"""
    wb = Workbook()

    ws1 = wb.active
    ws1.title = "INSPECCIONES"
    _hoja(
        ws1,
        ['FECHA', 'VEHÍCULO', 'INSPECTOR', 'ESTADO', 'PUNTUACIÓN', 'CONDICIÓN', 'PROGRESO', 'COSTO REPARACIÓN'],
        [
            [
                formatear_fecha(inspeccion.inspection_date),
                inspeccion.vehicle_label(),
                inspeccion.inspector_name or '',
                ESTADOS_MAP.get(inspeccion.status, inspeccion.status),
                round(inspeccion.overall_score, 1) if inspeccion.overall_score else None,
                inspeccion.overall_condition(),
                f"{round(inspeccion.completion_percentage)}%",
                inspeccion.total_repair_cost or 0,
            ]
            for inspeccion in inspecciones
        ],
        {'A': 12, 'B': 40, 'C': 25, 'D': 18, 'E': 12, 'F': 15, 'G': 12, 'H': 20}
    )

    ws2 = wb.create_sheet(title="ÍTEMS CRÍTICOS")
    criticos = []
    for inspeccion in inspecciones:
        for item in inspeccion.critical_items():
            criticos.append([
                formatear_fecha(inspeccion.inspection_date),
                inspeccion.vehicle_label(),
                item.category,
                item.item_name,
                item.score,
                item.repair_cost,
                item.priority,
                item.notes or '',
            ])
    _hoja(
        ws2,
        ['FECHA', 'VEHÍCULO', 'CATEGORÍA', 'ÍTEM', 'PUNTUACIÓN', 'COSTO', 'PRIORIDAD', 'OBSERVACIONES'],
        criticos,
        {'A': 12, 'B': 40, 'C': 25, 'D': 35, 'E': 12, 'F': 15, 'G': 12, 'H': 60}
    )

    ws3 = wb.create_sheet(title="POR CATEGORÍA")
    analisis = metricas_service.category_analysis(inspecciones)
    _hoja(
        ws3,
        ['CATEGORÍA', 'ÍTEMS EVALUADOS', 'PUNTUACIÓN MEDIA', 'ÍTEMS CRÍTICOS', 'COSTO REPARACIÓN', 'TENDENCIA'],
        [
            [
                nombre,
                datos['total_evaluations'],
                datos['average_score'],
                datos['critical_count'],
                datos['total_repair_cost'],
                datos['trend'],
            ]
            for nombre, datos in analisis.items()
        ],
        {'A': 30, 'B': 16, 'C': 18, 'D': 15, 'E': 20, 'F': 18}
    )

    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()


@reportes_bp.route('/reporte_mensual', methods=["GET", "POST"])
@helpers.login_required
@helpers.requiere_permiso('reportes', 'read')
def reporte_mensual():
    """Generar reporte mensual en Excel con las inspecciones del usuario"""
    if request.method == "POST":
        try:
            mes = int(request.form.get("mes"))
            ano = int(request.form.get("ano"))
            desde, hasta = rango_mes(mes, ano)
        except (TypeError, ValueError):
            flash_error("Mes o año inválido")
            return render_template("reporte_mensual.html")

        try:
            inspecciones = InspeccionRepository(g.access_token).listar_por_rango(
                session["usuario_id"], desde, hasta
            )
        except SupabaseError as e:
            flash_error(f"Error al obtener datos: {str(e)}")
            return render_template("reporte_mensual.html")

        logger.info(f"📊 Reporte {mes}/{ano}: {len(inspecciones)} inspecciones")
        filename = f"INSPECCIONES 4X4 {MESES[mes]} {ano}.xlsx"

        return Response(
            generar_excel_mensual(inspecciones),
            mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
            headers={
                'Content-Disposition': f'attachment; filename="{filename}"',
                'Content-Type': 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
            }
        )

    return render_template("reporte_mensual.html")
