import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from stark_darkpool.api.routes import router
from stark_darkpool.config import DarkPoolConfig
from stark_darkpool.darkpool.rpc import VerifierClient
from stark_darkpool.errors import PhaseViolationError, VerifierRpcError

logger = logging.getLogger("stark_darkpool.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Load configuration
    config = DarkPoolConfig.from_env()
    app.state.config = config

    if config.has_contract:
        app.state.verifier = VerifierClient.from_config(config)
    else:
        logger.warning("DARKPOOL_CONTRACT_ADDRESS not set. Epoch endpoints are disabled.")
        app.state.verifier = None

    yield

    if app.state.verifier is not None:
        app.state.verifier.close()


app = FastAPI(
    title="Stark Dark Pool API",
    description="REST API wrapping the dark pool commitment and proof SDK",
    version="0.1.0",
    lifespan=lifespan,
)

# Allow CORS for easy frontend integration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routes
app.include_router(router)


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc)},
    )


@app.exception_handler(PhaseViolationError)
async def phase_error_handler(request: Request, exc: PhaseViolationError):
    return JSONResponse(
        status_code=409,
        content={"detail": str(exc), "expected": exc.expected, "actual": exc.actual},
    )


@app.exception_handler(VerifierRpcError)
async def rpc_error_handler(request: Request, exc: VerifierRpcError):
    return JSONResponse(
        status_code=502,
        content={"detail": str(exc)},
    )


@app.get("/health")
async def health_check():
    """Simple health check endpoint."""
    return {"status": "ok"}
