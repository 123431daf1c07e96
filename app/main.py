import logging
from fastapi import FastAPI

from app.core.config import LOG_LEVEL
from app.api.endpoints import auth as auth_api
from app.api.endpoints import users as users_api
from app.api.endpoints import commission_configs as commission_configs_api
from app.api.endpoints import commissions as commissions_api

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = FastAPI(title="Commission Engine API", version="0.1.0")

# Include API routers
app.include_router(auth_api.router, prefix="/api/v1/auth", tags=["Authentication"])
app.include_router(users_api.router, prefix="/api/v1/users", tags=["Users"])
app.include_router(commission_configs_api.router, prefix="/api/v1/commission-configs", tags=["Commission Configs"])
app.include_router(commissions_api.router, prefix="/api/v1/commissions", tags=["Commissions"])

@app.get("/ping", tags=["Health Check"])
async def ping():
    return {"message": "pong"}
