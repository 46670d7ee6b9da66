import asyncio, logging, os, platform, uvicorn
from contextlib import asynccontextmanager
from functools import partial

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from .logging_config import setup_logging, get_logger
from .config    import get_settings
from .errors    import EnumerationError, SendError, ValidationError
from .models    import (ProgramRq, ReadPositionRq, SerialConfig,
                        SerialConfigUpdate, SerialResult)
from .state     import ConfigStore, ProgramStore
from .transport import SerialTransport

api_log = get_logger("API")

CORS_HEADERS = {
    "Access-Control-Allow-Origin":  "*",
    "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

router = APIRouter(prefix="/api")

# ────────── dependencies
def get_config_store(request: Request) -> ConfigStore:
    return request.app.state.config_store

def get_program_store(request: Request) -> ProgramStore:
    return request.app.state.program_store

def get_transport(request: Request) -> SerialTransport:
    return request.app.state.transport


async def _send(transport: SerialTransport, program: str, cfg: SerialConfig) -> SerialResult:
    """Blocking send runs in the default executor, one worker per request."""
    override = os.getenv("SERIAL_PORT")
    return await asyncio.get_running_loop().run_in_executor(
        None, partial(transport.send, program, cfg, override)
    )

# ────────── REST
@router.get("/health")
async def health():
    return {"status": "ok"}

@router.get("/program")
async def get_program(programs: ProgramStore = Depends(get_program_store)):
    return {"program": programs.get()}

@router.post("/program")
async def save_program(body: ProgramRq, programs: ProgramStore = Depends(get_program_store)):
    programs.save(body.program)
    return {"result": "saved"}

@router.api_route("/program/send", methods=["GET", "POST"],
                  response_model=SerialResult, response_model_exclude_none=True)
async def send_program(request: Request,
                       configs: ConfigStore = Depends(get_config_store),
                       programs: ProgramStore = Depends(get_program_store),
                       transport: SerialTransport = Depends(get_transport)):
    """Send the program from the body, or the last saved one if the body is empty."""
    raw = await request.body()
    if raw:
        try:
            program = ProgramRq.model_validate_json(raw).program
        except PydanticValidationError as e:
            api_log.warning("Invalid send payload: %s", e)
            raise HTTPException(400, "invalid payload")
    else:
        program = programs.get()

    if not program:
        raise HTTPException(400, "no program provided")

    api_log.info("=== SEND REQUEST ===")
    api_log.info("Program length: %d", len(program))
    try:
        return await _send(transport, program, configs.get())
    except SendError as e:
        api_log.error("Failed to send program: %s", e)
        raise HTTPException(500, f"failed to send program: {e}")

@router.get("/config", response_model=SerialConfig)
async def get_config(configs: ConfigStore = Depends(get_config_store)):
    return configs.get()

@router.post("/config")
async def update_config(body: SerialConfigUpdate, configs: ConfigStore = Depends(get_config_store)):
    api_log.info("Config update request: %s", body.model_dump(exclude_none=True))
    try:
        configs.update(body)
    except ValidationError as e:
        api_log.error("Failed to update config: %s", e)
        raise HTTPException(400, f"failed to update config: {e}")
    return {"result": "config updated"}

@router.get("/system/os")
async def get_system_os():
    return {"os": platform.system().lower()}

@router.get("/serial/ports")
async def get_serial_ports(transport: SerialTransport = Depends(get_transport)):
    try:
        ports = await asyncio.get_running_loop().run_in_executor(None, transport.list_ports)
    except EnumerationError as e:
        api_log.error("Port enumeration failed: %s", e)
        raise HTTPException(500, str(e))
    return {"ports": ports}

@router.post("/position/read", response_model=SerialResult, response_model_exclude_none=True)
async def read_position(body: ReadPositionRq,
                        configs: ConfigStore = Depends(get_config_store),
                        transport: SerialTransport = Depends(get_transport)):
    # канал 00, команда rd
    cmd = f"00 rd {body.slot}"
    api_log.info("Reading position slot %d: %r", body.slot, cmd)
    try:
        return await _send(transport, cmd, configs.get())
    except SendError as e:
        api_log.error("Failed to rd slot %d: %s", body.slot, e)
        raise HTTPException(500, f"failed to read slot: {e}")

# ────────── app
async def _invalid_payload(request: Request, exc: RequestValidationError):
    api_log.warning("Invalid payload on %s: %s", request.url.path, exc.errors())
    errors = exc.errors()
    where = ".".join(str(p) for p in errors[0]["loc"][1:]) if errors else ""
    detail = f"invalid payload: {where}" if where else "invalid payload"
    return JSONResponse({"detail": detail}, status_code=400)

async def _cors(request: Request, call_next):
    if request.method == "OPTIONS":
        return Response(status_code=204, headers=CORS_HEADERS)
    response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response

@asynccontextmanager
async def _lifespan(app: FastAPI):
    api_log.info("=== APPLICATION STARTUP ===")
    api_log.info("Initial serial config: %s", app.state.config_store.get().model_dump())
    yield
    api_log.info("=== APPLICATION SHUTDOWN ===")

def create_app(config_store: ConfigStore | None = None,
               program_store: ProgramStore | None = None,
               transport: SerialTransport | None = None) -> FastAPI:
    app = FastAPI(title="Cosirob serial relay", version="1.0.0", lifespan=_lifespan)
    app.state.config_store  = config_store or ConfigStore()
    app.state.program_store = program_store or ProgramStore()
    app.state.transport     = transport or SerialTransport()
    app.include_router(router)
    app.add_exception_handler(RequestValidationError, _invalid_payload)
    app.middleware("http")(_cors)
    return app

app = create_app()

def main():
    settings = get_settings()
    setup_logging(log_level=settings.log_level, log_to_file=settings.log_to_file)
    api_log.info("Backend HTTP API listening on http://%s:%d", settings.http_host, settings.http_port)
    uvicorn.run(app, host=settings.http_host, port=settings.http_port, log_config=None)

if __name__ == "__main__":
    main()
