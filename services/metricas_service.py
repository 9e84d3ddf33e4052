"""
Métricas y análisis del dashboard de inspecciones

Trabaja sobre entidades Inspection y Vehicle ya cargadas; no hace consultas.
"""
import math
from datetime import datetime, timezone

from dominio.comun import get_condition_by_score, parse_fecha_iso

# Umbrales de tendencia (diferencia de puntuación media)
UMBRAL_TENDENCIA_VEHICULO = 0.5
UMBRAL_TENDENCIA_CATEGORIA = 0.3

# Niveles de costo de reparación (COP)
COSTO_ALTO = 5000000
COSTO_MEDIO = 1000000
COSTO_ALTO_VEHICULO = 3000000

_FECHA_MINIMA = datetime.min.replace(tzinfo=timezone.utc)


def _redondear_1(valor):
    """Redondeo half-up a un decimal"""
    return math.floor(valor * 10 + 0.5) / 10


def _fecha(inspeccion):
    return parse_fecha_iso(inspeccion.created_at) or _FECHA_MINIMA


def _promedio_puntuacion(inspecciones):
    puntuadas = [i for i in inspecciones if i.overall_score]
    if not puntuadas:
        return 0
    return sum(i.overall_score for i in puntuadas) / len(puntuadas)


def _tendencia(diferencia, umbral):
    if diferencia > umbral:
        return 'improving'
    if diferencia < -umbral:
        return 'declining'
    return 'stable'


# ============================================
# ESTADÍSTICAS DEL USUARIO
# ============================================

def user_stats(inspecciones):
    """Totales, media de completadas, costo y distribución mensual"""
    if not inspecciones:
        return {
            'total_inspections': 0,
            'completed_inspections': 0,
            'draft_inspections': 0,
            'average_score': 0,
            'total_repair_cost': 0,
            'inspections_by_month': {},
            'completion_rate': 0,
        }

    completadas = [i for i in inspecciones if i.status == 'completed']
    borradores = [i for i in inspecciones if i.status == 'draft']

    por_mes = {}
    for inspeccion in inspecciones:
        fecha = parse_fecha_iso(inspeccion.created_at)
        if fecha is None:
            continue
        clave = f'{fecha.year}-{fecha.month}'
        por_mes[clave] = por_mes.get(clave, 0) + 1

    return {
        'total_inspections': len(inspecciones),
        'completed_inspections': len(completadas),
        'draft_inspections': len(borradores),
        'average_score': _redondear_1(_promedio_puntuacion(completadas)),
        'total_repair_cost': sum(i.total_repair_cost or 0 for i in completadas),
        'inspections_by_month': por_mes,
        'completion_rate': _redondear_1(len(completadas) / len(inspecciones) * 100),
    }


# ============================================
# MÉTRICAS POR VEHÍCULO
# ============================================

def vehicle_metrics(vehiculos, inspecciones):
    resultado = []

    for vehiculo in vehiculos:
        del_vehiculo = sorted(
            [i for i in inspecciones if i.vehicle_id == vehiculo.id],
            key=_fecha, reverse=True
        )
        completadas = [i for i in del_vehiculo if i.status == 'completed']
        promedio = _promedio_puntuacion(completadas)

        # Tendencia entre las dos últimas completadas con puntuación
        ultimas = [i for i in completadas if i.overall_score][:2]
        tendencia = 'stable'
        if len(ultimas) == 2:
            tendencia = _tendencia(
                ultimas[0].overall_score - ultimas[1].overall_score,
                UMBRAL_TENDENCIA_VEHICULO
            )

        resultado.append({
            'vehicle': vehiculo,
            'total_inspections': len(del_vehiculo),
            'completed_inspections': len(completadas),
            'last_inspection': del_vehiculo[0] if del_vehiculo else None,
            'average_score': _redondear_1(promedio),
            'trend': tendencia,
            'total_repair_cost': sum(i.total_repair_cost or 0 for i in completadas),
            'condition': get_condition_by_score(promedio)['name'] if promedio > 0 else 'NO_EVALUADO',
        })

    return resultado


def average_vehicle_condition(metricas_vehiculos):
    if not metricas_vehiculos:
        return 0
    return sum(vm['average_score'] for vm in metricas_vehiculos) / len(metricas_vehiculos)


# ============================================
# ANÁLISIS POR CATEGORÍA
# ============================================

def category_analysis(inspecciones):
    """
    Agrega las métricas por categoría de todas las inspecciones completadas.

    La media es ponderada por ítems evaluados. La tendencia compara las tres
    inspecciones más recientes contra las anteriores; con menos de dos puntos
    se marca como 'insufficient_data'.
    """
    completadas = sorted([i for i in inspecciones if i.status == 'completed'], key=_fecha)
    if not completadas:
        return {}

    categorias = {}
    for inspeccion in completadas:
        metricas = inspeccion.get_detailed_metrics()
        for nombre, datos_categoria in metricas['categories'].items():
            datos = categorias.setdefault(nombre, {
                'total_evaluations': 0,
                'total_score': 0,
                'total_repair_cost': 0,
                'critical_count': 0,
                'trends': [],
            })
            evaluados = datos_categoria['evaluated_items']
            datos['total_evaluations'] += evaluados
            datos['total_score'] += datos_categoria['average_score'] * evaluados
            datos['total_repair_cost'] += datos_categoria['total_repair_cost']
            datos['critical_count'] += datos_categoria['critical_items']
            datos['trends'].append({
                'date': inspeccion.created_at,
                'score': datos_categoria['average_score'],
            })

    for datos in categorias.values():
        promedio = datos['total_score'] / datos['total_evaluations'] if datos['total_evaluations'] else 0
        datos['average_score'] = _redondear_1(promedio)

        puntos = datos['trends']
        if len(puntos) < 2:
            datos['trend'] = 'insufficient_data'
            continue

        recientes = puntos[-3:]
        anteriores = puntos[:-3]
        if not anteriores:
            datos['trend'] = 'stable'
            continue

        media_recientes = sum(p['score'] for p in recientes) / len(recientes)
        media_anteriores = sum(p['score'] for p in anteriores) / len(anteriores)
        datos['trend'] = _tendencia(media_recientes - media_anteriores, UMBRAL_TENDENCIA_CATEGORIA)

    return categorias


# ============================================
# INSIGHTS DE UNA INSPECCIÓN
# ============================================

def inspection_insights(metricas):
    """
    Avisos para la inspección en curso a partir de get_detailed_metrics()

    Returns:
        Lista de dicts {type, title, message, priority}
    """
    if not metricas:
        return []

    insights = []
    progreso = metricas.get('completion_percentage', 0)

    if progreso < 50:
        insights.append({
            'type': 'info',
            'title': 'Inspección en progreso',
            'message': f'{round(progreso)}% completado',
            'priority': 'low',
        })
    elif progreso < 80:
        insights.append({
            'type': 'warning',
            'title': 'Inspección casi completa',
            'message': 'Complete más items para obtener resultados precisos',
            'priority': 'medium',
        })

    puntuacion = metricas.get('overall_score') or 0
    if puntuacion > 0:
        condicion = get_condition_by_score(puntuacion)['name']
        if condicion == 'CRÍTICO':
            insights.append({
                'type': 'error',
                'title': 'Estado crítico detectado',
                'message': 'El vehículo requiere atención inmediata',
                'priority': 'high',
            })
        elif condicion == 'DEFICIENTE':
            insights.append({
                'type': 'warning',
                'title': 'Estado deficiente',
                'message': 'Se recomienda reparación antes del uso',
                'priority': 'high',
            })
        elif condicion == 'EXCELENTE':
            insights.append({
                'type': 'success',
                'title': 'Excelente estado',
                'message': 'El vehículo está en óptimas condiciones',
                'priority': 'low',
            })

    criticos = metricas.get('critical_items_count', 0)
    if criticos > 0:
        insights.append({
            'type': 'error',
            'title': f'{criticos} items críticos',
            'message': 'Revisar items con puntuación ≤ 3',
            'priority': 'high',
        })

    costo = metricas.get('total_repair_cost', 0)
    if costo > 0:
        if costo > COSTO_ALTO:
            nivel = 'high'
        elif costo > COSTO_MEDIO:
            nivel = 'medium'
        else:
            nivel = 'low'
        insights.append({
            'type': 'warning' if nivel == 'high' else 'info',
            'title': 'Costos de reparación',
            'message': f'Estimado: {format_currency(costo)}',
            'priority': 'medium' if nivel == 'high' else 'low',
        })

    return insights


# ============================================
# RECOMENDACIONES Y COMPARACIONES
# ============================================

def recommendations(metricas_vehiculos, analisis_categorias):
    recomendaciones = []

    antiguos = [
        vm for vm in metricas_vehiculos
        if vm['vehicle'].is_old_vehicle() and vm['average_score'] < 7
    ]
    if antiguos:
        recomendaciones.append({
            'type': 'maintenance',
            'priority': 'high',
            'title': 'Vehículos antiguos requieren atención',
            'description': f'{len(antiguos)} vehículo(s) de más de 15 años con puntuación baja',
            'action': 'Programar mantenimiento preventivo',
        })

    criticas = sorted(
        [(nombre, datos) for nombre, datos in analisis_categorias.items() if datos['average_score'] < 5],
        key=lambda par: par[1]['average_score']
    )
    if criticas:
        nombre, datos = criticas[0]
        recomendaciones.append({
            'type': 'inspection',
            'priority': 'medium',
            'title': f'Categoría "{nombre}" requiere atención',
            'description': f"Puntuación promedio: {datos['average_score']:.1f}/10",
            'action': 'Revisar y mejorar elementos de esta categoría',
        })

    costosos = [vm for vm in metricas_vehiculos if vm['total_repair_cost'] > COSTO_ALTO_VEHICULO]
    if costosos:
        recomendaciones.append({
            'type': 'financial',
            'priority': 'medium',
            'title': 'Costos de reparación elevados',
            'description': f'{len(costosos)} vehículo(s) con costos > $3M COP',
            'action': 'Evaluar viabilidad económica de reparaciones',
        })

    return recomendaciones


def compare_with_previous(inspecciones, vehicle_id):
    """Compara las dos últimas inspecciones completadas de un vehículo"""
    completadas = sorted(
        [i for i in inspecciones if i.vehicle_id == vehicle_id and i.status == 'completed'],
        key=_fecha, reverse=True
    )
    if len(completadas) < 2:
        return {'has_comparison': False}

    ultima, anterior = completadas[0], completadas[1]
    diferencia = (ultima.overall_score or 0) - (anterior.overall_score or 0)

    return {
        'has_comparison': True,
        'score_difference': diferencia,
        'cost_difference': (ultima.total_repair_cost or 0) - (anterior.total_repair_cost or 0),
        'trend': _tendencia(diferencia, UMBRAL_TENDENCIA_VEHICULO),
        'days_between': (_fecha(ultima) - _fecha(anterior)).days,
    }


def summary_report(usuario, inspecciones, vehiculos):
    """Resumen consolidado para el dashboard y la API de métricas"""
    estadisticas = user_stats(inspecciones)
    por_vehiculo = vehicle_metrics(vehiculos, inspecciones)
    por_categoria = category_analysis(inspecciones)

    return {
        'user': {
            'name': usuario.display_name() if usuario else 'Usuario',
            'total_inspections': estadisticas['total_inspections'],
            'average_score': estadisticas['average_score'],
            'experience_level': usuario.experience_level() if usuario else 'NUEVO',
        },
        'overview': {
            'total_vehicles': len(vehiculos),
            'total_inspections': estadisticas['total_inspections'],
            'completed_inspections': estadisticas['completed_inspections'],
            'completion_rate': estadisticas['completion_rate'],
            'total_repair_cost': estadisticas['total_repair_cost'],
        },
        'stats': estadisticas,
        'trends': {
            'category_analysis': por_categoria,
            'vehicle_metrics': por_vehiculo[:5],
        },
        'recommendations': recommendations(por_vehiculo, por_categoria),
        'average_vehicle_condition': average_vehicle_condition(por_vehiculo),
    }


# ============================================
# FORMATO
# ============================================

def format_currency(amount):
    """Formatea pesos colombianos: $1.234.567 COP"""
    if not amount:
        return '$0 COP'
    entero = int(math.floor(abs(amount) + 0.5))
    signo = '-' if amount < 0 else ''
    return f"{signo}${entero:,}".replace(',', '.') + ' COP'


def format_percentage(value, decimals=1):
    return f'{(value or 0):.{decimals}f}%'


def format_score(score):
    if not score:
        return 'No evaluado'
    return f'{score:.1f}/10'
