from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError
import certifi

from inventario_mongo.core.config import SERVER_SELECTION_TIMEOUT_MS
from inventario_mongo.core.errores import ErrorConexion


def crear_cliente(mongo_uri: str) -> AsyncIOMotorClient:
    """
    Crea el cliente compartido por todas las tareas del inventario.
    TLS obligatorio pero se acepta cualquier certificado del servidor.
    """
    if not mongo_uri:
        raise ErrorConexion("No se recibió la URI de conexión a MongoDB")
    try:
        return AsyncIOMotorClient(
            mongo_uri,
            tls=True,
            tlsAllowInvalidCertificates=True,
            tlsCAFile=certifi.where(),
            serverSelectionTimeoutMS=SERVER_SELECTION_TIMEOUT_MS,
        )
    except (PyMongoError, ValueError) as e:
        raise ErrorConexion(f"URI de conexión inválida: {e}", causa=e)


async def verificar_conexion(client) -> None:
    """Fuerza el handshake con un ping antes de enumerar nada"""
    try:
        await client.admin.command("ping")
    except PyMongoError as e:
        raise ErrorConexion(f"No se pudo conectar a MongoDB: {e}", causa=e)
