from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fintrack.core.config import settings
from fintrack.core.errors import LedgerError
from fintrack.core.logging import setup_logging
from fintrack.api.routes.transactions import router as tx_router
from fintrack.api.routes.audit import router as audit_router

setup_logging()

app = FastAPI(title="fintrack")

origins = [o.strip() for o in (settings.cors_origins or "").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LedgerError)
async def _ledger_error(request: Request, exc: LedgerError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.code})


@app.get("/health")
@app.get("/api/health")
def health():
    return {"status": "ok"}

app.include_router(tx_router)
app.include_router(audit_router)
