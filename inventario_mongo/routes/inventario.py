from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from typing import Optional

from inventario_mongo.core import config
from inventario_mongo.core.auth import verificar_api_key
from inventario_mongo.core.errores import ErrorConexion, ErrorListado, ErrorSondeo
from inventario_mongo.db.mongo import crear_cliente, verificar_conexion
from inventario_mongo.services.inventario_service import ejecutar_inventario

router = APIRouter()


class InventarioRequest(BaseModel):
    mongo_uri: Optional[str] = None
    incluir_usuarios: bool = True
    tolerar_fallos: bool = False
    max_concurrencia: Optional[int] = None


def get_fabrica_cliente():
    """Fábrica de clientes; se reemplaza en las pruebas"""
    return crear_cliente


@router.post("/inventario")
async def generar_inventario(
    solicitud: InventarioRequest,
    fabrica=Depends(get_fabrica_cliente),
    api_key: str = Depends(verificar_api_key),
):
    """
    Ejecuta el inventario completo y devuelve el catálogo con la misma forma
    que result.json. No escribe ningún archivo.
    """
    mongo_uri = solicitud.mongo_uri or config.MONGO_URI
    if not mongo_uri:
        raise HTTPException(status_code=400, detail="Falta mongo_uri y no hay MONGO_URI configurada")

    max_concurrencia = solicitud.max_concurrencia
    if max_concurrencia is None:
        max_concurrencia = config.MAX_CONCURRENCIA

    try:
        client = fabrica(mongo_uri)
    except ErrorConexion as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        await verificar_conexion(client)
        catalogo = await ejecutar_inventario(
            client,
            max_concurrencia=max_concurrencia,
            tolerar_fallos=solicitud.tolerar_fallos,
            incluir_usuarios=solicitud.incluir_usuarios,
        )
    except (ErrorConexion, ErrorListado, ErrorSondeo) as e:
        print(f"[INVENTARIO] Error en generar_inventario: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    finally:
        client.close()

    return catalogo.a_dict()
