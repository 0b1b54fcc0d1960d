# config.py
from pathlib import Path

BASE_DIR = Path(__file__).parent.resolve()

class Settings:
    DEBUG = True
    HOST = "127.0.0.1"
    PORT = 5001
    LOG_LEVEL = "INFO"

    # optional snapshot (catalog JSON) loaded at startup
    DATA_DIR = BASE_DIR / "data"
    SNAPSHOT_PATH = DATA_DIR / "catalog.json"

    # routing defaults, validated through fieldroute.context.RoutingOptions
    DEFAULTS = {
        "average_speed_kmh": 60.0,
        "max_intermediate_distance_km": 50.0,
        "detour_ratio": 1.5,
        "max_routes": 5,
        "route_type": "Driving",
    }

SETTINGS = Settings()
