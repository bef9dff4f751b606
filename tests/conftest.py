"""
Shared pytest fixtures for the warranty invoice pipeline tests.
"""

import io
from datetime import date

import pytest
from PIL import Image

from warranty_invoice.config import ConfigurationManager, ENV_OVERRIDES
from warranty_invoice.input_handler.handler import RawDocument


SAMPLE_INVOICE_TEXT = """T. MYHRVOLD AS
Faktura nr. 2313044
Fakturadato: 03.11.2023
Service nr: 1045521
Prosjekt nr: 4400123
Kundenr: 20117
Ordreadresse: Storgata 12, 7010 Trondheim
Tekniker: Ola Nordmann
Oppdrag: Bytte kompressor på kjøledisk

Produktnr  Beskrivelse  Antall  Pris  Beløp
T1  Arbeid montør  3,00  650,00  1 950,00
RT1  Reisetid  1,00  450,00  450,00
KM  Kjøring  25,00  5,00  125,00
K-2201  Kompressor  1,00  550,00  550,00

Ordresum: 3 075,00
"""


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Every test starts from settings.yaml without credentials."""
    for env_var in list(ENV_OVERRIDES) + ["WARRANTY_INVOICE_CONFIG"]:
        monkeypatch.delenv(env_var, raising=False)
    ConfigurationManager.reset()
    yield
    ConfigurationManager.reset()


@pytest.fixture
def sample_text():
    return SAMPLE_INVOICE_TEXT


@pytest.fixture
def fixed_today():
    return lambda: date(2024, 1, 15)


def make_image_bytes(size=(40, 30), color=(255, 255, 255), mode="RGB", fmt="PNG"):
    image = Image.new(mode, size, color)
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def png_document():
    return RawDocument(data=make_image_bytes(), media_type="image/png", filename="invoice.png")


@pytest.fixture
def image_bytes():
    return make_image_bytes
