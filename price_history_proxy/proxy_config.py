from dotenv import load_dotenv
from typing import Optional
import os

class ProxyConfig:
    """Configuration class for the price history proxy."""
    
    DEFAULT_ALLOWED_ORIGIN = 'https://store.steampowered.com'
    
    def __init__(self):
        load_dotenv()
        
        """Secret IsThereAnyDeal key, never sent back to the caller"""
        self.api_key: Optional[str] = (os.getenv('ITAD_API_KEY') or '').strip() or None
        
        """Configuration for upstream requests."""
        self.request_timeout: float = float(os.getenv('ITAD_TIMEOUT', 5.0))  # seconds
        
        """Configuration for the HTTP server."""
        self.allowed_origin: str = os.getenv('ALLOWED_ORIGIN', self.DEFAULT_ALLOWED_ORIGIN)
        self.host: str = os.getenv('HOST', '0.0.0.0')
        self.port: int = int(os.getenv('PORT', 5000))
        
    @property
    def has_api_key(self) -> bool:
        return self.api_key is not None
    
    def cors_headers(self) -> dict[str, str]:
        """Headers attached to every response of the proxy."""
        return {
            'Access-Control-Allow-Origin': self.allowed_origin,
            'Access-Control-Allow-Methods': 'GET, OPTIONS',
            'Access-Control-Allow-Headers': 'Content-Type',
        }
