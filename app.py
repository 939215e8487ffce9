from typing import Any, Dict, Optional

from dotenv import load_dotenv

# wczytanie .env (dev-friendly) zanim core.config przeczyta zmienne środowiskowe;
# .env.local uzupełnia tylko brakujące wartości
load_dotenv()
load_dotenv(dotenv_path=".env.local", override=False)

from flask import Flask  # noqa: E402

from application.comparison import ComparisonService  # noqa: E402
from application.tariff_history_service import TariffHistoryService  # noqa: E402
from application.year_series import CalculationGenerations, YearSeriesCalculator  # noqa: E402
from core.config import Config  # noqa: E402
from core.logging_config import configure_logging  # noqa: E402
from domain.reference_data import ReferenceData  # noqa: E402
from integration.rate_oracle import RateOracleClient  # noqa: E402
from integration.suspension_directory import SuspensionDirectoryClient  # noqa: E402
from integration.wits_adapter import WITSAdapter  # noqa: E402
from interface.api import api_bp  # noqa: E402


def build_services(config: Dict[str, Any], overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Składa serwisy aplikacji; `overrides` podmienia klientów zewnętrznych (testy)."""
    overrides = overrides or {}
    oracle = overrides.get("oracle") or RateOracleClient(
        base_url=config["RATE_ORACLE_URL"],
        timeout=config["RATE_ORACLE_TIMEOUT"],
        api_key=config["RATE_ORACLE_API_KEY"],
    )
    suspensions = overrides.get("suspensions") or SuspensionDirectoryClient(
        base_url=config["SUSPENSION_DIRECTORY_URL"],
        timeout=config["RATE_ORACLE_TIMEOUT"],
    )
    reference = overrides.get("reference") or ReferenceData.load(config["REFERENCE_DATA_PATH"])
    wits = overrides.get("wits") or WITSAdapter(api_key=config["WITS_API_KEY"])
    generations = CalculationGenerations()

    return {
        "reference": reference,
        "generations": generations,
        "year_series": YearSeriesCalculator(oracle, suspensions, generations),
        "comparison": ComparisonService(oracle, max_workers=config["COMPARISON_MAX_WORKERS"]),
        "tariff_history": TariffHistoryService(reference, wits),
    }


def create_app(overrides: Optional[Dict[str, Any]] = None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(Config)

    configure_logging(app)

    app.extensions["landed_cost"] = build_services(app.config, overrides)

    # rejestracja blueprintów
    app.register_blueprint(api_bp)

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(debug=True)
