"""
Pytest fixtures for the landed cost tests.

Provides:
- a base Rate Oracle request
- an in-memory reference table
- Flask app factory wired with test doubles
"""

import os
import sys

import pytest

os.environ.setdefault("REFERENCE_DATA_PATH", "does-not-exist.json")

# Add the repo root to the Python path
root_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if root_dir not in sys.path:
    sys.path.insert(0, root_dir)

from domain.models import RateQuoteRequest  # noqa: E402
from domain.reference_data import Country, Product, ReferenceData  # noqa: E402
from tests.doubles import FakeOracle, FakeSuspensionDirectory  # noqa: E402


@pytest.fixture
def base_request():
    return RateQuoteRequest(importer_code="USA", exporter_code="CHN", hs6="290110", trade_original=1000.0, net_weight=50.0)


@pytest.fixture
def reference():
    return ReferenceData(
        countries=[
            Country("USA", "United States", "840"),
            Country("CHN", "China", "156"),
            Country("DEU", "Germany", "276"),
            Country("MEX", "Mexico", "484"),
        ],
        products=[Product("290110", "Saturated acyclic hydrocarbons")],
    )


@pytest.fixture
def make_app(reference):
    def _make(oracle=None, suspensions=None, wits=None):
        from app import create_app

        app = create_app({
            "oracle": oracle or FakeOracle({}),
            "suspensions": suspensions or FakeSuspensionDirectory(),
            "reference": reference,
            "wits": wits,
        })
        app.config.update({"TESTING": True})
        return app

    return _make
