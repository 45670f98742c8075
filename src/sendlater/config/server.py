from pydantic import BaseModel


class ServerConfig(BaseModel):
    """
    Configuration for the API server - how and from where it is served.
    """

    base_url: str = "http://localhost:8000"
    """
    Root URL where the API can be accessed externally.

    Used as the allowed CORS origin.
    """
    host: str = "localhost"
    """Host portion of url"""
    port: int = 8000
    """Port where local service should serve from"""
