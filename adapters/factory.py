"""
Adapter Factory - Crea bridge e motore conversazionale da configurazione
Pattern Factory per instanziare componenti dal nome diretto della classe.
Fail-fast: solleva eccezioni se la configurazione non è valida.

Le classi vengono risolte dinamicamente dai moduli adapters.bridge e core.engine
usando getattr(), eliminando la necessità di un registry esplicito.
"""

import importlib
import logging

from .ports import BridgePort

logger = logging.getLogger(__name__)

BRIDGE_MODULE = 'adapters.bridge'
ENGINE_MODULE = 'core.engine'


class AdapterFactory:
    """
    Factory per creare bridge e motori da configurazione.

    Risolve le classi dinamicamente dai moduli importati,
    senza bisogno di registrazione esplicita.
    """

    @classmethod
    def _resolve(cls, module_name: str, class_name: str, kind: str):
        module = importlib.import_module(module_name)

        if class_name not in module.__all__:
            available = ', '.join(module.__all__)
            logger.error(f"❌ Unknown {kind} class: '{class_name}'")
            logger.info(f"Available classes: {available}")
            raise ValueError(
                f"Unknown {kind} class '{class_name}'. "
                f"Available: {available}"
            )
        return getattr(module, class_name)

    @classmethod
    def create_bridge(cls, class_name: str, config: dict) -> BridgePort:
        """
        Crea un bridge dalla configurazione.

        Args:
            class_name: Nome della classe (es: "MockBridge")
            config: Configurazione specifica del bridge

        Returns:
            Istanza di BridgePort

        Raises:
            ValueError: Se la classe non esiste nel modulo
            RuntimeError: Se la creazione fallisce
        """
        bridge_class = cls._resolve(BRIDGE_MODULE, class_name, 'bridge')

        if not issubclass(bridge_class, BridgePort):
            raise ValueError(f"{class_name} must extend BridgePort")

        try:
            bridge = bridge_class(name=class_name, config=config)
        except Exception as e:
            logger.error(f"❌ Failed to create bridge '{class_name}': {e}", exc_info=True)
            raise RuntimeError(f"Bridge creation failed: {class_name}") from e

        logger.info(f"✅ Created bridge: {bridge.name}")
        return bridge

    @classmethod
    def create_engine(cls, class_name: str, config: dict):
        """
        Crea il motore conversazionale dalla configurazione.

        Raises:
            ValueError: Se la classe non esiste o non è un motore concreto
            RuntimeError: Se la creazione fallisce
        """
        from core.engine import ConversationEngine

        engine_class = cls._resolve(ENGINE_MODULE, class_name, 'engine')

        if not isinstance(engine_class, type) or not issubclass(engine_class, ConversationEngine):
            raise ValueError(f"{class_name} must extend ConversationEngine")
        if getattr(engine_class, '__abstractmethods__', None):
            raise ValueError(f"{class_name} is abstract")

        try:
            engine = engine_class(name=class_name, config=config)
        except Exception as e:
            logger.error(f"❌ Failed to create engine '{class_name}': {e}", exc_info=True)
            raise RuntimeError(f"Engine creation failed: {class_name}") from e

        logger.info(f"✅ Created engine: {engine.name}")
        return engine

    @classmethod
    def get_available_classes(cls) -> dict:
        """
        Ritorna tutte le classi disponibili nei moduli.
        Utile per debugging e validazione.
        """
        return {
            'bridge': list(importlib.import_module(BRIDGE_MODULE).__all__),
            'engine': list(importlib.import_module(ENGINE_MODULE).__all__)
        }
