import json
import os
import stat
import tempfile

from inventario_mongo.core.errores import ErrorEscritura
from inventario_mongo.schemas.inventario import Catalogo


def _permisos_destino(ruta: str) -> int:
    try:
        return stat.S_IMODE(os.stat(ruta).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def catalogo_a_json(catalogo: Catalogo) -> str:
    return json.dumps(catalogo.a_dict(), indent=2, ensure_ascii=False)


def escribir_resultado(catalogo: Catalogo, ruta: str) -> str:
    """
    Escribe el catálogo como JSON de forma atómica: primero a un temporal en el
    mismo directorio y luego se reemplaza el destino. Si algo falla el archivo
    anterior (si existía) queda intacto.
    """
    contenido = catalogo_a_json(catalogo)
    ruta = os.path.abspath(ruta)
    directorio = os.path.dirname(ruta)
    tmp_path = None

    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            suffix=".tmp",
            prefix=".result-",
            dir=directorio,
            delete=False,
            encoding="utf-8",
        ) as tmp:
            tmp_path = tmp.name
            tmp.write(contenido)
            tmp.write("\n")
            tmp.flush()
            os.fsync(tmp.fileno())
        # el temporal nace con 0600; se deja con los permisos del destino
        os.chmod(tmp_path, _permisos_destino(ruta))
        os.replace(tmp_path, ruta)
    except OSError as e:
        if tmp_path and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise ErrorEscritura(f"No se pudo escribir el resultado: {e}", ruta=ruta, causa=e) from e

    return ruta


def leer_resultado(ruta: str) -> Catalogo:
    with open(ruta, "r", encoding="utf-8") as f:
        return Catalogo.model_validate(json.load(f))
