import os

from dotenv import load_dotenv

load_dotenv()

# Backend del directorio: "sqlite" (default), "postgres" o "supabase"
DIRECTORY_BACKEND = os.getenv("DIRECTORY_BACKEND", "sqlite")
DIRECTORY_DB_PATH = os.getenv("DIRECTORY_DB_PATH", "data/directory.db")
POSTGRES_DSN = os.getenv("POSTGRES_DSN")

# Supabase (PostgREST hosteado)
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY")
STORE_TIMEOUT = float(os.getenv("STORE_TIMEOUT", "10"))

# Paginación
DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "12"))
MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "100"))

# Si es true, un path con cantidad impar de segmentos se rechaza (400)
# en lugar de descartar el último segmento.
STRICT_PATH_SEGMENTS = os.getenv("STRICT_PATH_SEGMENTS", "false").lower() == "true"

# Redis Configuration
REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))
REDIS_PASSWORD = os.getenv("REDIS_PASSWORD") or None
REDIS_DB = int(os.getenv("REDIS_DB", "0"))
# Segundos entre intentos de reconexión cuando Redis no responde
REDIS_RETRY_INTERVAL = float(os.getenv("REDIS_RETRY_INTERVAL", "30"))

# Cache de facetas
CACHE_ENABLED = os.getenv("CACHE_ENABLED", "true").lower() == "true"
FACET_CACHE_TTL = int(os.getenv("FACET_CACHE_TTL", "300"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
