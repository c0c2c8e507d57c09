"""
Recorrido concurrente del servidor: bases de datos -> colecciones -> (conteo, índices).

El orden (lexicográfico) de bases y colecciones se fija antes de lanzar cualquier
sondeo, y cada registro lo escribe una sola tarea, así que el resultado no depende
del orden en que lleguen las respuestas.
"""
import asyncio
import json
from typing import List, Optional

from bson import json_util
from bson.errors import BSONError
from bson.json_util import RELAXED_JSON_OPTIONS
from pymongo.errors import PyMongoError

from inventario_mongo.core.config import BASES_EXCLUIDAS
from inventario_mongo.core.errores import ErrorListado, ErrorSondeo
from inventario_mongo.schemas.inventario import Catalogo, CollectionInfo, DatabaseInfo
from inventario_mongo.utils.progreso import ProgresoNulo


async def _llamar(limite: Optional[asyncio.Semaphore], llamada):
    # El semáforo protege llamadas de red individuales, nunca tareas completas,
    # para que una base esperando a sus colecciones no bloquee a nadie.
    if limite is None:
        return await llamada()
    async with limite:
        return await llamada()


async def _nombres_indices(coleccion) -> List[str]:
    indices = await coleccion.list_indexes().to_list(length=None)
    return [indice.get("name") for indice in indices]


async def enumerar_bases_de_datos(client, limite: Optional[asyncio.Semaphore] = None) -> List[DatabaseInfo]:
    """Lista las bases del servidor sin las del sistema, ordenadas por nombre"""
    try:
        nombres = await _llamar(limite, client.list_database_names)
    except PyMongoError as e:
        raise ErrorListado(f"No se pudieron listar las bases de datos: {e}", causa=e) from e

    return [
        DatabaseInfo(name=nombre, collections=[])
        for nombre in sorted(n for n in nombres if n not in BASES_EXCLUIDAS)
    ]


async def sondear_coleccion(
    client,
    base: str,
    coleccion: CollectionInfo,
    limite: Optional[asyncio.Semaphore] = None,
) -> CollectionInfo:
    """
    Obtiene en paralelo el conteo estimado y los nombres de índices de una
    colección y los guarda en el propio registro. Sin reintentos.
    """
    coll = client[base][coleccion.name]
    resultados = await asyncio.gather(
        _llamar(limite, coll.estimated_document_count),
        _llamar(limite, lambda: _nombres_indices(coll)),
        return_exceptions=True,
    )

    for operacion, resultado in zip(("estimated_document_count", "list_indexes"), resultados):
        if isinstance(resultado, (PyMongoError, BSONError)):
            raise ErrorSondeo(
                f"Falló el sondeo de '{base}.{coleccion.name}': {resultado}",
                base=base,
                coleccion=coleccion.name,
                operacion=operacion,
                causa=resultado,
            ) from resultado
        if isinstance(resultado, BaseException):
            raise resultado

    doc_count, indices = resultados
    coleccion.doc_count = doc_count
    coleccion.indexes = indices
    return coleccion


async def expandir_base_de_datos(
    client,
    base: DatabaseInfo,
    progreso=None,
    limite: Optional[asyncio.Semaphore] = None,
    tolerar_fallos: bool = False,
) -> List[CollectionInfo]:
    """
    Lista las colecciones de una base, crea un registro por colección y
    sondea todas a la vez. Espera a que terminen todas (aunque alguna falle)
    antes de decidir qué hacer con los errores.
    """
    progreso = progreso or ProgresoNulo()
    db = client[base.name]

    try:
        nombres = await _llamar(limite, db.list_collection_names)
    except PyMongoError as e:
        raise ErrorListado(
            f"No se pudieron listar las colecciones de '{base.name}': {e}",
            base=base.name,
            causa=e,
        ) from e

    base.collections = [CollectionInfo(name=nombre) for nombre in sorted(nombres)]
    progreso.iniciar_base(base.name, len(base.collections))

    async def _sondear(coleccion: CollectionInfo):
        try:
            return await sondear_coleccion(client, base.name, coleccion, limite)
        finally:
            progreso.avanzar_base(base.name)

    resultados = await asyncio.gather(
        *(_sondear(coleccion) for coleccion in base.collections),
        return_exceptions=True,
    )

    progreso.finalizar_base(base.name)
    progreso.avanzar_total()

    for coleccion, resultado in zip(base.collections, resultados):
        if not isinstance(resultado, BaseException):
            continue
        if tolerar_fallos and isinstance(resultado, ErrorSondeo):
            coleccion.error = str(resultado)
            print(f"⚠ [SONDEO] {resultado}")
            continue
        raise resultado

    return base.collections


async def consultar_usuarios(client, limite: Optional[asyncio.Semaphore] = None):
    """
    Usuarios de todas las bases (usersInfo en admin). Si no hay permisos o el
    comando falla devuelve None en lugar de abortar el inventario.
    """
    try:
        respuesta = await _llamar(
            limite, lambda: client.admin.command({"usersInfo": {"forAllDBs": True}})
        )
    except PyMongoError as e:
        print(f"⚠ [INVENTARIO] No se pudieron consultar los usuarios del servidor: {e}")
        return None

    usuarios = respuesta.get("users", [])
    # UUID, fechas, etc. a JSON plano
    return json.loads(json_util.dumps(usuarios, json_options=RELAXED_JSON_OPTIONS))


async def ejecutar_inventario(
    client,
    progreso=None,
    max_concurrencia: Optional[int] = None,
    tolerar_fallos: bool = False,
    incluir_usuarios: bool = True,
) -> Catalogo:
    """
    Recorre todo el servidor y arma el catálogo.

    Todas las bases se expanden en paralelo y, dentro de cada una, todas sus
    colecciones. Con ``max_concurrencia`` > 0 se comparte un semáforo entre
    ambos niveles que limita las llamadas de red simultáneas.
    """
    progreso = progreso or ProgresoNulo()
    limite = asyncio.Semaphore(max_concurrencia) if max_concurrencia and max_concurrencia > 0 else None

    bases = await enumerar_bases_de_datos(client, limite)
    print(f"[INVENTARIO] Bases de datos encontradas: {len(bases)}")
    progreso.iniciar_total(len(bases))

    resultados = await asyncio.gather(
        *(
            expandir_base_de_datos(client, base, progreso, limite, tolerar_fallos)
            for base in bases
        ),
        return_exceptions=True,
    )
    for resultado in resultados:
        if isinstance(resultado, BaseException):
            raise resultado

    catalogo = Catalogo(databases=bases)
    total_colecciones = sum(len(base.collections) for base in bases)
    print(f"[INVENTARIO] Colecciones sondeadas: {total_colecciones}")

    if incluir_usuarios:
        catalogo.principals = await consultar_usuarios(client, limite)

    return catalogo
