import os


class Config:
    # Flask
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    EXTERNAL_LOG_LEVEL = os.environ.get("EXTERNAL_LOG_LEVEL", "WARNING")

    # Rate Oracle – zewnętrzny serwis wyceny (POST /api/calculate)
    RATE_ORACLE_URL = os.environ.get("RATE_ORACLE_URL", "http://localhost:8080")
    RATE_ORACLE_API_KEY = os.environ.get("RATE_ORACLE_API_KEY", "")
    RATE_ORACLE_TIMEOUT = float(os.environ.get("RATE_ORACLE_TIMEOUT", "30"))

    # Katalog zawieszeń stawek (GET /api/suspensions)
    SUSPENSION_DIRECTORY_URL = os.environ.get("SUSPENSION_DIRECTORY_URL", "http://localhost:8080")

    # WITS – opcjonalny klucz (często zbędny)
    WITS_API_KEY = os.environ.get("WITS_API_KEY", "")

    # Porównanie krajów – ile równoległych zapytań do Rate Oracle
    COMPARISON_MAX_WORKERS = int(os.environ.get("COMPARISON_MAX_WORKERS", "4"))

    # Zakres lat dla serii wieloletniej
    DEFAULT_START_YEAR = int(os.environ.get("DEFAULT_START_YEAR", "2018"))
    DEFAULT_END_YEAR = int(os.environ.get("DEFAULT_END_YEAR", "2024"))
    MAX_YEAR_SPAN = int(os.environ.get("MAX_YEAR_SPAN", "25"))

    # Tabela krajów/produktów (JSON budowany przez tools/build_reference_data.py)
    REFERENCE_DATA_PATH = os.environ.get("REFERENCE_DATA_PATH", "data/reference_data.json")
