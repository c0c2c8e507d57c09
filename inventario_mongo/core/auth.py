import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader

from inventario_mongo.core import config

# La clave se envía en el header X-API-Key
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def verificar_api_key(api_key: str = Depends(api_key_header)):
    """
    Exige la clave configurada en API_KEY. Sin API_KEY configurada la API
    rechaza todas las solicitudes.
    """
    credenciales_invalidas = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="No se pudo validar las credenciales",
        headers={"WWW-Authenticate": "ApiKey"},
    )
    if not config.API_KEY:
        print("[AUTH] API_KEY no está configurada; solicitud rechazada")
        raise credenciales_invalidas
    if not api_key or not secrets.compare_digest(api_key, config.API_KEY):
        raise credenciales_invalidas
    return api_key
