from pydantic import BaseModel, ConfigDict, Field
from typing import Any, List, Optional


class CollectionInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(validation_alias="collection_name")
    doc_count: int = Field(default=0, ge=0)
    indexes: List[str] = []
    # Solo se llena en modo tolerante cuando el sondeo falla
    error: Optional[str] = None


class DatabaseInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(validation_alias="database_name")
    collections: List[CollectionInfo] = []


class Catalogo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    databases: List[DatabaseInfo] = []
    principals: Optional[Any] = Field(default=None, validation_alias="users")

    def a_dict(self) -> dict:
        """Forma exacta del archivo de salida (result.json)"""
        return {
            "databases": [
                {
                    "database_name": base.name,
                    "collections": [coleccion_a_dict(c) for c in base.collections],
                }
                for base in self.databases
            ],
            "users": self.principals,
        }

    def colecciones_fallidas(self) -> List[tuple]:
        return [
            (base.name, coleccion.name)
            for base in self.databases
            for coleccion in base.collections
            if coleccion.error is not None
        ]


def coleccion_a_dict(coleccion: CollectionInfo) -> dict:
    d = {
        "collection_name": coleccion.name,
        "doc_count": coleccion.doc_count,
        "indexes": list(coleccion.indexes),
    }
    if coleccion.error is not None:
        d["error"] = coleccion.error
    return d
