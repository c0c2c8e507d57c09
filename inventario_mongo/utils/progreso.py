"""
Reporte de progreso del inventario.

Una barra general (bases de datos completadas) y una barra por base de datos
(colecciones sondeadas), creada al empezar la expansión y eliminada al terminar.
Todas las llamadas ocurren en el hilo del event loop, así que los contadores
no necesitan bloqueo.
"""
from dataclasses import dataclass
from typing import Dict, Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)


@dataclass(frozen=True)
class EstiloProgreso:
    """Estilo de las barras; se construye al arrancar y se pasa al reporter"""
    descripcion_total: str = "Bases de datos"
    estilo_total: str = "bold cyan"
    estilo_base: str = "magenta"
    ancho_barra: Optional[int] = 40
    transitorio: bool = False


class ProgresoNulo:
    """Reporter que no muestra nada (modo silencioso y pruebas)"""

    def iniciar_total(self, total: int) -> None:
        pass

    def avanzar_total(self) -> None:
        pass

    def iniciar_base(self, nombre: str, total: int) -> None:
        pass

    def avanzar_base(self, nombre: str) -> None:
        pass

    def finalizar_base(self, nombre: str) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


class ProgresoRich(ProgresoNulo):
    def __init__(self, estilo: Optional[EstiloProgreso] = None, console: Optional[Console] = None):
        self.estilo = estilo or EstiloProgreso()
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("{task.description}"),
            BarColumn(bar_width=self.estilo.ancho_barra),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=console,
            transient=self.estilo.transitorio,
            redirect_stdout=True,
        )
        self._tarea_total: Optional[TaskID] = None
        self._tareas_base: Dict[str, TaskID] = {}

    def __enter__(self):
        self._progress.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self._progress.stop()
        return False

    def iniciar_total(self, total: int) -> None:
        self._tarea_total = self._progress.add_task(
            f"[{self.estilo.estilo_total}]{self.estilo.descripcion_total}", total=total
        )

    def avanzar_total(self) -> None:
        if self._tarea_total is not None:
            self._progress.advance(self._tarea_total)

    def iniciar_base(self, nombre: str, total: int) -> None:
        self._tareas_base[nombre] = self._progress.add_task(
            f"[{self.estilo.estilo_base}]{nombre}", total=total
        )

    def avanzar_base(self, nombre: str) -> None:
        tarea = self._tareas_base.get(nombre)
        if tarea is not None:
            self._progress.advance(tarea)

    def finalizar_base(self, nombre: str) -> None:
        tarea = self._tareas_base.pop(nombre, None)
        if tarea is not None:
            self._progress.remove_task(tarea)
