"""
Errores del inventario.

Cada error lleva un ``contexto`` (base, colección, operación) para poder
diagnosticar el fallo sin depurador.
"""
from typing import Optional


class ErrorInventario(Exception):
    """Error base del inventario"""

    def __init__(self, mensaje: str, contexto: Optional[dict] = None, causa: Optional[BaseException] = None):
        self.mensaje = mensaje
        self.contexto = contexto or {}
        self.causa = causa
        super().__init__(self.mensaje)

    def __str__(self):
        if not self.contexto:
            return self.mensaje
        detalle = ", ".join(f"{clave}={valor}" for clave, valor in self.contexto.items())
        return f"{self.mensaje} ({detalle})"


class ErrorConexion(ErrorInventario):
    """URI inválida o el servidor no responde al handshake inicial"""

    def __init__(self, mensaje: str, causa: Optional[BaseException] = None):
        super().__init__(mensaje, causa=causa)


class ErrorListado(ErrorInventario):
    """Falló el listado de bases de datos o de colecciones"""

    def __init__(self, mensaje: str, base: Optional[str] = None, causa: Optional[BaseException] = None):
        contexto = {"operacion": "list_collection_names" if base else "list_database_names"}
        if base:
            contexto["base"] = base
        super().__init__(mensaje, contexto, causa)
        self.base = base


class ErrorSondeo(ErrorInventario):
    """Falló el conteo o el listado de índices de una colección"""

    def __init__(self, mensaje: str, base: str, coleccion: str, operacion: str, causa: Optional[BaseException] = None):
        super().__init__(
            mensaje,
            {"base": base, "coleccion": coleccion, "operacion": operacion},
            causa,
        )
        self.base = base
        self.coleccion = coleccion
        self.operacion = operacion


class ErrorEscritura(ErrorInventario):
    """No se pudo escribir el archivo de resultado"""

    def __init__(self, mensaje: str, ruta: str, causa: Optional[BaseException] = None):
        super().__init__(mensaje, {"ruta": ruta}, causa)
        self.ruta = ruta
