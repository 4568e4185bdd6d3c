import pytest

from spl_ingest.core.exceptions import MarkupError
from spl_ingest.services.section_orchestrator import normalize_guid


def test_guid_is_lowercased():
    assert normalize_guid("6B0C5F0E-8A44-4B7E-9A4C-2F7A8E3D1C55") == "6b0c5f0e-8a44-4b7e-9a4c-2f7a8e3d1c55"


def test_braced_guid_is_canonicalized():
    assert normalize_guid("{6b0c5f0e-8a44-4b7e-9a4c-2f7a8e3d1c55}") == "6b0c5f0e-8a44-4b7e-9a4c-2f7a8e3d1c55"


@pytest.mark.parametrize("value", [None, "not-a-guid", "1234"])
def test_invalid_guid_raises(value):
    with pytest.raises(MarkupError):
        normalize_guid(value)
