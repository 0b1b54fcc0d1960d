# run.py
import logging

from app import create_app
from config import SETTINGS

logging.basicConfig(
    level=getattr(logging, SETTINGS.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = create_app()

if __name__ == "__main__":
    app.run(host=SETTINGS.HOST, port=SETTINGS.PORT, debug=SETTINGS.DEBUG)
