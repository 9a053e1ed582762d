"""
Shared fixtures for the Error Code Viewer tests.
"""
import io

import pandas as pd
import pytest
from PySide6.QtCore import QCoreApplication

from errorcode_viewer.core import ErrorRecord, ManualLink


@pytest.fixture(scope="session")
def qapp():
    """A Qt application instance for QObject signal tests."""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    return app


@pytest.fixture
def sample_records():
    """A small set of records across three brands."""
    return [
        ErrorRecord(
            id=1,
            brand="schneider",
            brand_name="Schneider Electric",
            model="ATV320",
            error_code="F0001",
            title="Fallo de Precarga",
            description="Circuito de precarga detecta niveles anormales de tensión en el bus DC.",
            causes=["Relé de carga desgastado o dañado", "Tensión de alimentación demasiado baja"],
            solutions=["Verificar la tensión de alimentación del variador"],
            severity="alto",
            diagram="img/schneider/atv320_f0001.png",
            manual_links=[ManualLink("Manual ATV320", "https://www.se.com/manuales/atv320")],
            updated_at="2024-03-01T10:00:00Z"
        ),
        ErrorRecord(
            id=2,
            brand="schneider",
            brand_name="Schneider Electric",
            model="ATV320",
            error_code="F0002",
            title="Sobrecalentamiento IGBT",
            description="Temperatura excesiva en los módulos IGBT del inversor.",
            causes=["Ventilador bloqueado o defectuoso"],
            solutions=["Verificar el estado del ventilador"],
            severity="alto",
            manual_links=[
                ManualLink("Manual ATV320", "https://www.se.com/manuales/atv320"),
                ManualLink("Guía de refrigeración", "https://www.se.com/guias/refrigeracion"),
            ],
            updated_at="2024-05-12T08:30:00Z"
        ),
        ErrorRecord(
            id=4,
            brand="siemens",
            brand_name="Siemens",
            model="SIMATIC S7-1200",
            error_code="SF001",
            title="Fallo del Sistema",
            description="Error general del sistema en la CPU.",
            causes=["Error en el programa de usuario"],
            solutions=["Revisar el buffer de diagnóstico"],
            severity="crítico"
        ),
        ErrorRecord(
            id=11,
            brand="omron",
            brand_name="Omron",
            model="NX1P2",
            error_code="A401",
            title="Batería baja",
            description="La tensión de la batería de respaldo es baja.",
            causes=["Batería agotada"],
            solutions=["Reemplazar la batería"],
            severity="bajo"
        ),
    ]


@pytest.fixture
def make_workbook():
    """Build .xlsx bytes in memory from a list of rows (first row is the header)."""
    def _make(rows):
        buffer = io.BytesIO()
        pd.DataFrame(rows).to_excel(buffer, index=False, header=False, engine="openpyxl")
        return buffer.getvalue()
    return _make
