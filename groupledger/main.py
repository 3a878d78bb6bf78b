import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from groupledger.api.v1.routes.expense import router as expense_router
from groupledger.api.v1.routes.group import router as group_router
from groupledger.api.v1.routes.settlement import router as settlement_router
from groupledger.api.v1.routes.system import router as system_router
from groupledger.core.config import settings
from groupledger.core.exceptions import ExpenseNotFoundError, GroupNotFoundError, LedgerError

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME)

@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    status = 404 if isinstance(exc, (GroupNotFoundError, ExpenseNotFoundError)) else 400
    logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status, content={"detail": str(exc), "code": exc.code})

@app.get("/")
async def root():
    return {"message": f"{settings.APP_NAME} is live"}

app.include_router(system_router, prefix=f"{settings.API_PREFIX}/system")
app.include_router(group_router, prefix=f"{settings.API_PREFIX}/groups")
app.include_router(expense_router, prefix=f"{settings.API_PREFIX}/expenses")
app.include_router(settlement_router, prefix=f"{settings.API_PREFIX}/settlements")
