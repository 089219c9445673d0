import logging
import logging.handlers
import os
from pathlib import Path

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Librerías muy habladoras en DEBUG
QUIET_LOGGERS = ("PIL", "multipart", "python_multipart")

def setup_logging(log_dir: Path, level: str = "INFO") -> logging.Logger:
    """
    Configura el logger raíz: consola, fichero rotativo y fichero de errores.
    Si ya hay un handler para el mismo fichero no se añade nada más.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger()
    logger.setLevel(level.upper())
    log_file = os.path.abspath(log_dir / "coinrecord.log")
    if any(getattr(h, "baseFilename", None) == log_file for h in logger.handlers):
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level.upper())
    console_handler.setFormatter(formatter)

    # detalle completo, 10 MB x 5
    file_handler = logging.handlers.RotatingFileHandler(
        log_dir / "coinrecord.log",
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)

    # altas rechazadas por el almacén, fallos de PDF...
    error_handler = logging.FileHandler(log_dir / "coinrecord_errors.log", encoding="utf-8")
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(formatter)

    for h in (console_handler, file_handler, error_handler):
        logger.addHandler(h)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger
