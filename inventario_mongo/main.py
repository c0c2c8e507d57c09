from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from inventario_mongo.routes.inventario import router as inventario_router


app = FastAPI(
    title="Inventario MongoDB API",
    description="Inventario de bases de datos, colecciones e índices de un servidor MongoDB",
    version="1.0.0"
)


# Exception handler global: cualquier error no controlado se devuelve como JSON
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    import traceback
    traceback.print_exc()

    status_code = 500
    if isinstance(exc, StarletteHTTPException):
        status_code = exc.status_code
    elif isinstance(exc, RequestValidationError):
        status_code = 422

    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc)},
    )


@app.get("/")
async def root():
    return {"message": "Inventario MongoDB API", "status": "running"}

@app.get("/health")
async def health():
    return {"status": "healthy"}


app.include_router(inventario_router, tags=["inventario"])
