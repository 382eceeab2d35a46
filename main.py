"""
XiaoAI Bridge Main - Entry point
Carica la configurazione, prepara il logging e avvia l'orchestratore.
"""

import asyncio
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from dotenv import load_dotenv

from config.config_loader import ConfigLoader, get_xiaoai_home, resolve_path
from core.orchestrator import XiaoAIOrchestrator


# ===== LOGGING SETUP =====
def setup_logging(log_config: dict, home: Path) -> None:
    """
    Configura il sistema di logging

    Args:
        log_config: Configurazione logging dal YAML
        home: Path alla home directory del progetto
    """
    log_file = resolve_path(log_config.get('log_file', 'xiaoai_bridge.log'), relative_to=home)
    max_bytes = log_config.get('max_bytes', 10*1024*1024)
    backup_count = log_config.get('backup_count', 3)
    level = logging.getLevelName(str(log_config.get('level', 'INFO')).upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count, encoding='utf-8')
    formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(name)s - %(message)s')
    handler.setFormatter(formatter)

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    # Root logger
    logger = logging.getLogger()
    logger.setLevel(level)
    for old_handler in list(logger.handlers):
        logger.removeHandler(old_handler)
    logger.addHandler(handler)
    logger.addHandler(console_handler)

    # Silence noisy libraries
    logging.getLogger("asyncio").setLevel(logging.WARNING)


# ===== ENTRY POINT =====
def main():
    """Entry point principale"""

    # Carica variabili d'ambiente
    load_dotenv(".env")

    home = get_xiaoai_home()

    # XIAOAI_CONFIG è OBBLIGATORIO - fail fast se mancante
    config_file = os.getenv("XIAOAI_CONFIG")
    if not config_file:
        print("❌ ERROR: XIAOAI_CONFIG environment variable not set")
        print("   Set it in .env file or as environment variable:")
        print("   XIAOAI_CONFIG=config/xiaoai_mock.yaml")
        print("")
        print("   You can also set XIAOAI_HOME (optional):")
        print(f"   Current XIAOAI_HOME: {home}")
        sys.exit(1)

    # Logging minimo finché la configurazione non è caricata
    logging.basicConfig(level=logging.INFO, format='%(levelname)s - %(name)s - %(message)s')
    logger = logging.getLogger(__name__)

    try:
        config = ConfigLoader.load(config_file)
        setup_logging(config['logging'], home)

        logger.info(f"🏠 XIAOAI_HOME: {home}")
        logger.info(f"🚀 Starting with config: {config_file}")

        orchestrator = XiaoAIOrchestrator(config)
        asyncio.run(orchestrator.run())

    except KeyboardInterrupt:
        logger.info("KeyboardInterrupt received")
    except Exception as e:
        logger.error(f"❌ Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
