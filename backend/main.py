from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from config import CORS_ORIGINS, SEED_DATA
from database import init_db
from routers.admin import router as admin_router
from routers.auth import router as auth_router
from routers.chat import router as chat_router
from routers.colleges import router as colleges_router
from routers.confessions import router as confessions_router
from routers.messages import router as messages_router
from routers.payments import router as payments_router
from routers.session import router as session_router
from routers.vip import router as vip_router
from services.seed import seed_defaults
from services.sessions import SESSION_HEADER


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    if SEED_DATA:
        seed_defaults()
    yield


app = FastAPI(
    title="College Confessions",
    description="Anonymous college confessions, moderated messaging and live chat",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[SESSION_HEADER],
)

app.include_router(session_router)
app.include_router(confessions_router)
app.include_router(messages_router)
app.include_router(chat_router)
app.include_router(admin_router)
app.include_router(auth_router)
app.include_router(colleges_router)
app.include_router(vip_router)
app.include_router(payments_router)


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    print(f"Storage error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Internal storage error"})


@app.get("/")
def read_root():
    return {"status": "online", "message": "College Confessions API"}


@app.get("/health")
def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8081)
