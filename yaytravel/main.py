import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from yaytravel.api.routes_auth import router as auth_router
from yaytravel.api.routes_conversation import router as conversation_router
from yaytravel.api.routes_status import router as status_router
from yaytravel.api.routes_plan import router as plan_router

from yaytravel.core.config_loader import settings


app = FastAPI(
    title="YayTravel",
    description="Trip-planning chat backend: users, conversations, agent status updates and trip plans",
    version="1.0.0"
)

# -------------------------------------------------------------
# CORS
# -------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -------------------------------------------------------------
# ROUTES
# -------------------------------------------------------------
app.include_router(auth_router)
app.include_router(conversation_router)
app.include_router(status_router)
app.include_router(plan_router)


# -------------------------------------------------------------
# ROOT ENDPOINT
# -------------------------------------------------------------
@app.get("/")
def root():
    return {
        "status": "ok",
        "message": "YayTravel backend is running",
        "env": settings.environment
    }


def run():
    uvicorn.run(
        "yaytravel.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.environment == "development"
    )


# -------------------------------------------------------------
# RUN LOCAL
# -------------------------------------------------------------
if __name__ == "__main__":
    run()
