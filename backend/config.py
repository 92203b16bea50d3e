import os
from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    # Redis connection URI (redis://[:password@]host:port/db). Required to serve.
    REDIS_URI = os.getenv('REDIS_URI')

    # Single browser origin allowed by CORS (Vite dev server by default)
    FRONTEND_ORIGIN = os.getenv('FRONTEND_ORIGIN', 'http://localhost:5173')

    # Server bind
    HOST = os.getenv('HOST', '0.0.0.0')
    PORT = int(os.getenv('PORT', '8080'))

    # Use HSETNX / HINCRBY instead of separate read + write round trips
    ATOMIC_WRITES = _flag('ATOMIC_WRITES', '1')

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
