"""
Generación del reporte PDF de una inspección con reportlab
"""
import io
import logging
from datetime import datetime
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import cm
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer

from config import config
from dominio.comun import CONDICIONES, COLOR_NO_EVALUADO
from services.metricas_service import format_currency, format_score

logger = logging.getLogger(__name__)

COLOR_CABECERA = colors.HexColor('#003366')
COLOR_FILA_ALTERNA = colors.HexColor('#F3F4F6')

ESTADOS = {
    'draft': 'Borrador',
    'in_progress': 'En progreso',
    'completed': 'Completada',
    'archived': 'Archivada',
}


def _estilos():
    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle('Celda', parent=styles['Normal'], fontSize=8, leading=10))
    return styles


def _fecha(valor):
    if not valor:
        return '-'
    return str(valor).split('T')[0]


def _tabla_clave_valor(filas, ancho_clave=5 * cm, ancho_valor=12 * cm):
    tabla = Table(filas, colWidths=[ancho_clave, ancho_valor])
    tabla.setStyle(TableStyle([
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('BACKGROUND', (0, 0), (0, -1), COLOR_FILA_ALTERNA),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.lightgrey),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
    ]))
    return tabla


def _seccion_vehiculo(inspeccion, styles):
    elementos = [Paragraph('<b>DATOS DEL VEHÍCULO</b>', styles['Heading2'])]

    vehiculo = inspeccion.vehicle
    if vehiculo is None:
        info = inspeccion.metadata.get('vehicle_info') or {}
        filas = [
            ['Marca', info.get('marca') or '-'],
            ['Modelo', info.get('modelo') or '-'],
            ['Año', str(info.get('ano') or info.get('año') or '-')],
            ['Placa', info.get('placa') or '-'],
        ]
    else:
        filas = [
            ['Marca', vehiculo.marca],
            ['Modelo', vehiculo.modelo],
            ['Año', str(vehiculo.ano)],
            ['Placa', vehiculo.placa],
            ['Kilometraje', f'{vehiculo.kilometraje:,} km'.replace(',', '.') if vehiculo.kilometraje else '-'],
            ['Color', vehiculo.color or '-'],
            ['Número de motor', vehiculo.numero_motor or '-'],
            ['Número de chasis', vehiculo.numero_chasis or '-'],
        ]

    elementos.append(_tabla_clave_valor(filas))
    return elementos


def _seccion_inspeccion(inspeccion, styles):
    filas = [
        ['Inspector', inspeccion.inspector_name or '-'],
        ['Fecha de inspección', _fecha(inspeccion.inspection_date)],
        ['Estado', ESTADOS.get(inspeccion.status, inspeccion.status)],
    ]
    if inspeccion.notes:
        filas.append(['Observaciones', Paragraph(escape(inspeccion.notes), styles['Celda'])])

    return [
        Paragraph('<b>DATOS DE LA INSPECCIÓN</b>', styles['Heading2']),
        _tabla_clave_valor(filas),
    ]


def _seccion_resumen(metricas, styles):
    condicion = metricas['condition']
    color = colors.HexColor(CONDICIONES[condicion]['color'] if condicion in CONDICIONES else COLOR_NO_EVALUADO)

    filas = [
        ['Puntuación general', 'Condición', 'Progreso', 'Costo estimado', 'Ítems críticos'],
        [
            format_score(metricas['overall_score']),
            condicion.replace('_', ' '),
            f"{round(metricas['completion_percentage'])}%",
            format_currency(metricas['total_repair_cost']),
            str(metricas['critical_items_count']),
        ],
    ]

    tabla = Table(filas, colWidths=[3.4 * cm] * 5)
    tabla.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), COLOR_CABECERA),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
        ('BACKGROUND', (1, 1), (1, 1), color),
        ('TEXTCOLOR', (1, 1), (1, 1), colors.white),
        ('FONTNAME', (0, 1), (-1, 1), 'Helvetica-Bold'),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('TOPPADDING', (0, 1), (-1, 1), 8),
        ('BOTTOMPADDING', (0, 1), (-1, 1), 8),
    ]))

    return [Paragraph('<b>RESUMEN</b>', styles['Heading2']), tabla]


def _seccion_categorias(metricas, styles):
    filas = [['Categoría', 'Evaluados', 'Progreso', 'Promedio', 'Críticos', 'Costo']]
    for nombre, datos in metricas['categories'].items():
        filas.append([
            Paragraph(escape(nombre), styles['Celda']),
            f"{datos['evaluated_items']}/{datos['total_items']}",
            f"{round(datos['completion_percentage'])}%",
            format_score(datos['average_score']),
            str(datos['critical_items']),
            format_currency(datos['total_repair_cost']),
        ])

    tabla = Table(filas, colWidths=[5 * cm, 2 * cm, 2 * cm, 2.2 * cm, 1.8 * cm, 4 * cm], repeatRows=1)
    tabla.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), COLOR_CABECERA),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 8),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, COLOR_FILA_ALTERNA]),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
    ]))

    return [Paragraph('<b>DETALLE POR CATEGORÍA</b>', styles['Heading2']), tabla]


def _tabla_items(items, styles):
    filas = [['Ítem', 'Puntuación', 'Condición', 'Costo', 'Notas']]
    estilo = [
        ('BACKGROUND', (0, 0), (-1, 0), COLOR_CABECERA),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 8),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
    ]

    for fila, item in enumerate(items, start=1):
        filas.append([
            Paragraph(escape(item.item_name), styles['Celda']),
            f'{item.score}/10' if item.score else '-',
            item.condition or 'No evaluado',
            format_currency(item.repair_cost) if item.repair_cost else '-',
            Paragraph(escape(item.notes or ''), styles['Celda']),
        ])
        estilo.append(('TEXTCOLOR', (2, fila), (2, fila), colors.HexColor(item.status_color())))

    tabla = Table(filas, colWidths=[5.5 * cm, 2 * cm, 2.5 * cm, 3 * cm, 4 * cm], repeatRows=1)
    tabla.setStyle(TableStyle(estilo))
    return tabla


def _pie_pagina(canvas, doc):
    canvas.saveState()
    canvas.setFont('Helvetica', 7)
    canvas.setFillColor(colors.grey)
    canvas.drawString(
        2 * cm, 1.2 * cm,
        f"{config.APP_NAME} v{config.APP_VERSION} - Generado el {datetime.now().strftime('%d/%m/%Y %H:%M')}"
    )
    canvas.drawRightString(A4[0] - 2 * cm, 1.2 * cm, f"Página {doc.page}")
    canvas.restoreState()


def generar_pdf_inspeccion(inspeccion, incluir_pendientes=False):
    """
    Genera el reporte PDF de la inspección

    Args:
        inspeccion: entidad Inspection
        incluir_pendientes: si False, el detalle solo lista ítems con algún dato

    Returns:
        bytes del PDF
    """
    pdf_buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        pdf_buffer,
        pagesize=A4,
        rightMargin=2 * cm,
        leftMargin=2 * cm,
        topMargin=1.5 * cm,
        bottomMargin=2 * cm,
        title=f'Inspección {inspeccion.vehicle_label()}',
        author=config.APP_NAME,
    )

    styles = _estilos()
    metricas = inspeccion.get_detailed_metrics()
    elementos = []

    # Cabecera
    elementos.append(Paragraph(f'<b>{escape(config.APP_NAME)}</b>', styles['Title']))
    elementos.append(Paragraph('<b>REPORTE DE INSPECCIÓN VEHICULAR</b>', styles['Heading2']))
    elementos.append(Paragraph(f'<i>{escape(inspeccion.vehicle_label())}</i>', styles['Normal']))
    elementos.append(Spacer(1, 0.5 * cm))

    elementos.extend(_seccion_vehiculo(inspeccion, styles))
    elementos.append(Spacer(1, 0.4 * cm))
    elementos.extend(_seccion_inspeccion(inspeccion, styles))
    elementos.append(Spacer(1, 0.4 * cm))
    elementos.extend(_seccion_resumen(metricas, styles))
    elementos.append(Spacer(1, 0.4 * cm))
    elementos.extend(_seccion_categorias(metricas, styles))
    elementos.append(Spacer(1, 0.4 * cm))

    # Detalle de ítems por categoría
    elementos.append(Paragraph('<b>DETALLE DE ÍTEMS</b>', styles['Heading2']))
    for categoria in inspeccion.categories():
        items = inspeccion.items_by_category(categoria)
        if not incluir_pendientes:
            items = [i for i in items if i.is_evaluated() or i.notes or i.repair_cost]
        if not items:
            continue

        elementos.append(Paragraph(f'<b>{escape(categoria)}</b>', styles['Heading3']))
        elementos.append(_tabla_items(items, styles))
        elementos.append(Spacer(1, 0.3 * cm))

    doc.build(elementos, onFirstPage=_pie_pagina, onLaterPages=_pie_pagina)

    logger.info(f"📄 PDF generado para la inspección {inspeccion.id}")
    pdf_buffer.seek(0)
    return pdf_buffer.read()


def nombre_archivo_pdf(inspeccion):
    placa = inspeccion.vehicle.placa if inspeccion.vehicle is not None else 'vehiculo'
    return f"inspeccion_{placa}_{datetime.now().strftime('%Y%m%d')}.pdf"
