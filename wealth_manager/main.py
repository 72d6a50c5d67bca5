from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from wealth_manager.logging_config import setup_logging, get_logger
from wealth_manager.services.errors import StoreUnavailableError
from .routers.accounts import router as accounts_router
from .routers.funds import router as funds_router
from .routers.cashflow import router as cashflow_router
from .routers.budgets import router as budgets_router
from .routers.goals import router as goals_router
from .routers.investment_plans import router as investment_plans_router
from .routers.reminders import router as reminders_router
from .routers.dashboard import router as dashboard_router

setup_logging()
logger = get_logger(__name__)


app = FastAPI(title="Wealth Manager API")


@app.exception_handler(StoreUnavailableError)
async def store_unavailable_handler(request: Request, exc: StoreUnavailableError):
    logger.error(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": str(exc)})


app.include_router(accounts_router)
app.include_router(funds_router)
app.include_router(cashflow_router)
app.include_router(budgets_router)
app.include_router(goals_router)
app.include_router(investment_plans_router)
app.include_router(reminders_router)
app.include_router(dashboard_router)


@app.get("/")
def read_root():
    return "Server is running."
