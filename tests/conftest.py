"""
Cliente MongoDB falso (misma forma que motor) para las pruebas.

Cada llamada de red espera un tiempo aleatorio para que el orden de
finalización cambie entre ejecuciones, y se pueden inyectar fallos por
(base, colección, operación) o por número de llamada de conteo.
"""
import asyncio
import random

import pytest
from pymongo.errors import AutoReconnect, OperationFailure


class ServidorFalso:
    def __init__(self, bases, usuarios=None, semilla=0, retraso_max=0.003):
        # bases: {nombre_base: {nombre_coleccion: (doc_count, [indices])}}
        self.bases = bases
        self.usuarios = usuarios if usuarios is not None else []
        self.random = random.Random(semilla)
        self.retraso_max = retraso_max
        self.fallos = {}
        self.fallar_conteo_numero = None
        self.fallar_ping = False
        self.fallar_usuarios = False
        self.fallar_listado_bases = False
        self.llamadas_conteo = 0
        self.en_curso = 0
        self.max_en_curso = 0
        self.llamadas = []

    async def operacion(self, nombre, base=None, coleccion=None):
        self.llamadas.append((nombre, base, coleccion))
        self.en_curso += 1
        self.max_en_curso = max(self.max_en_curso, self.en_curso)
        try:
            await asyncio.sleep(self.random.uniform(0, self.retraso_max))
        finally:
            self.en_curso -= 1
        error = self.fallos.get((base, coleccion, nombre))
        if error is not None:
            raise error


class CursorFalso:
    def __init__(self, servidor, base, coleccion):
        self._servidor = servidor
        self._base = base
        self._coleccion = coleccion

    async def to_list(self, length=None):
        await self._servidor.operacion("list_indexes", self._base, self._coleccion)
        _, indices = self._servidor.bases[self._base][self._coleccion]
        return [{"v": 2, "key": {}, "name": nombre} for nombre in indices]


class ColeccionFalsa:
    def __init__(self, servidor, base, nombre):
        self._servidor = servidor
        self._base = base
        self.name = nombre

    async def estimated_document_count(self):
        self._servidor.llamadas_conteo += 1
        numero = self._servidor.llamadas_conteo
        await self._servidor.operacion("estimated_document_count", self._base, self.name)
        if self._servidor.fallar_conteo_numero == numero:
            raise AutoReconnect(f"conexión perdida contando {self._base}.{self.name}")
        doc_count, _ = self._servidor.bases[self._base][self.name]
        return doc_count

    def list_indexes(self):
        return CursorFalso(self._servidor, self._base, self.name)


class BaseFalsa:
    def __init__(self, servidor, nombre):
        self._servidor = servidor
        self.name = nombre

    def __getitem__(self, nombre):
        return ColeccionFalsa(self._servidor, self.name, nombre)

    async def list_collection_names(self):
        await self._servidor.operacion("list_collection_names", self.name)
        nombres = list(self._servidor.bases.get(self.name, {}))
        self._servidor.random.shuffle(nombres)
        return nombres

    async def command(self, comando, *args, **kwargs):
        nombre = comando if isinstance(comando, str) else next(iter(comando))
        if nombre == "ping":
            if self._servidor.fallar_ping:
                raise AutoReconnect("no se pudo alcanzar el servidor")
            return {"ok": 1}
        if nombre == "usersInfo":
            await self._servidor.operacion("usersInfo", self.name)
            if self._servidor.fallar_usuarios:
                raise OperationFailure("not authorized on admin to execute command", code=13)
            return {"users": self._servidor.usuarios, "ok": 1}
        raise OperationFailure(f"no such command: '{nombre}'", code=59)


class ClienteFalso:
    def __init__(self, servidor):
        self._servidor = servidor
        self.cerrado = False

    def __getitem__(self, nombre):
        return BaseFalsa(self._servidor, nombre)

    @property
    def admin(self):
        return BaseFalsa(self._servidor, "admin")

    async def list_database_names(self):
        await self._servidor.operacion("list_database_names")
        if self._servidor.fallar_listado_bases:
            raise AutoReconnect("conexión cerrada durante listDatabases")
        nombres = list(self._servidor.bases) + ["admin", "config", "local"]
        self._servidor.random.shuffle(nombres)
        return nombres

    def close(self):
        self.cerrado = True


class ProgresoRegistro:
    """Guarda cada evento de progreso en orden"""

    def __init__(self):
        self.eventos = []

    def iniciar_total(self, total):
        self.eventos.append(("iniciar_total", total))

    def avanzar_total(self):
        self.eventos.append(("avanzar_total",))

    def iniciar_base(self, nombre, total):
        self.eventos.append(("iniciar_base", nombre, total))

    def avanzar_base(self, nombre):
        self.eventos.append(("avanzar_base", nombre))

    def finalizar_base(self, nombre):
        self.eventos.append(("finalizar_base", nombre))

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


BASES_TIENDA = {
    "shop": {
        "users": (2, ["_id_", "email_1"]),
        "orders": (5, ["_id_"]),
    },
}

USUARIOS_TIENDA = [
    {"_id": "admin.root", "user": "root", "db": "admin", "roles": [{"role": "root", "db": "admin"}]},
]


def construir_bases(n_bases, n_colecciones):
    return {
        f"db{b:02d}": {
            f"col{c:02d}": (b * 100 + c, ["_id_"] + [f"campo{i}_1" for i in range(c % 3)])
            for c in range(n_colecciones)
        }
        for b in range(n_bases)
    }


@pytest.fixture
def servidor_tienda():
    return ServidorFalso(BASES_TIENDA, usuarios=USUARIOS_TIENDA)


@pytest.fixture
def cliente_tienda(servidor_tienda):
    return ClienteFalso(servidor_tienda)
