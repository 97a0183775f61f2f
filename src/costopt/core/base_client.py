"""Base client interface for all Azure service clients."""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
import structlog

logger = structlog.get_logger(__name__)


class BaseClient(ABC):
    """Abstract base class for all external service clients."""
    
    def __init__(self, credential, subscription_id: str, config: Dict[str, Any],
                 name: Optional[str] = None):
        self.credential = credential
        self.subscription_id = subscription_id
        self.config = config
        self.name = name or self.__class__.__name__
        self._connected = False
        self.logger = logger.bind(client=self.name)
    
    @abstractmethod
    async def connect(self) -> None:
        """Create the underlying SDK clients."""
        pass
    
    @abstractmethod
    async def disconnect(self) -> None:
        """Close the underlying SDK clients."""
        pass
    
    @property
    def is_connected(self) -> bool:
        """Check if client is connected."""
        return self._connected
    
    def _close_all(self, *clients) -> None:
        for client in clients:
            if client is not None and hasattr(client, 'close'):
                try:
                    client.close()
                except Exception as e:
                    self.logger.warning(f"Error closing client: {e}")
        self._connected = False
