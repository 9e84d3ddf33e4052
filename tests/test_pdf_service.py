"""
Pruebas del reporte PDF de inspección
"""
from dominio import Inspection
from services.pdf_service import generar_pdf_inspeccion, nombre_archivo_pdf
from conftest import USER_ID


def test_genera_pdf(inspeccion):
    inspeccion.evaluate_item('Motor', 'Ruidos anormales', score=2, notes='Golpeteo <fuerte> & humo',
                             repair_cost=1500000, priority='high')
    pdf = generar_pdf_inspeccion(inspeccion)

    assert pdf.startswith(b'%PDF')
    assert len(pdf) > 1000


def test_incluye_pendientes(inspeccion):
    solo_evaluados = generar_pdf_inspeccion(inspeccion)
    completo = generar_pdf_inspeccion(inspeccion, incluir_pendientes=True)
    assert len(completo) > len(solo_evaluados)


def test_inspeccion_sin_vehiculo():
    inspeccion = Inspection.create_from_checklist(USER_ID, 'sin-vehiculo')
    assert generar_pdf_inspeccion(inspeccion).startswith(b'%PDF')
    assert nombre_archivo_pdf(inspeccion).startswith('inspeccion_vehiculo_')


def test_nombre_de_archivo(inspeccion):
    nombre = nombre_archivo_pdf(inspeccion)
    assert nombre.startswith('inspeccion_ABC123_')
    assert nombre.endswith('.pdf')
