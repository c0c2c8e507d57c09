import os
import sys
from dotenv import load_dotenv

load_dotenv()


def _leer_bool(nombre: str, por_defecto: bool) -> bool:
    valor = os.getenv(nombre)
    if valor is None or valor.strip() == "":
        return por_defecto
    return valor.strip().lower() in ("1", "true", "si", "sí", "yes", "on")


def _leer_int(nombre: str, por_defecto: int) -> int:
    valor = os.getenv(nombre)
    if valor is None or valor.strip() == "":
        return por_defecto
    try:
        return int(valor)
    except ValueError:
        print(
            f"⚠ [CONFIG] {nombre} debe ser un número entero, se recibió {valor!r}; se usa {por_defecto}",
            file=sys.stderr,
        )
        return por_defecto


# Solo la usa la API HTTP; el CLI siempre exige la URI como argumento
MONGO_URI = os.getenv("MONGO_URI")

# Clave para la API HTTP (header X-API-Key); sin ella la API rechaza todo
API_KEY = os.getenv("API_KEY")

RUTA_SALIDA = os.getenv("RUTA_SALIDA") or "./result.json"

# 0 o negativo = sin límite (todas las operaciones en paralelo)
MAX_CONCURRENCIA = _leer_int("MAX_CONCURRENCIA", 0)

TOLERAR_FALLOS = _leer_bool("TOLERAR_FALLOS", False)
INCLUIR_USUARIOS = _leer_bool("INCLUIR_USUARIOS", True)
MOSTRAR_PROGRESO = _leer_bool("MOSTRAR_PROGRESO", True)

SERVER_SELECTION_TIMEOUT_MS = _leer_int("SERVER_SELECTION_TIMEOUT_MS", 30000)

# Bases de datos del sistema que nunca se inventarían
BASES_EXCLUIDAS = frozenset({"admin", "config", "local"})

SCHEMA_VERSION = 1
