import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api_routers.v1 import api_router
from app.features.auth.services.credential_store import CredentialStore
from app.features.auth.services.mail_sender import create_mail_sender
from app.features.auth.services.two_factor import TwoFactorService
from app.features.auth.utils.encryption import SecretCipher
from app.features.health.routes.health import router as health_router
from app.platform.cache.redis import create_backend
from app.platform.config import settings
from app.platform.exceptions import add_exception_handlers
from app.platform.utils.rate_limit import SlidingWindowRateLimiter

# Configure logging to show INFO level messages
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    backend = create_backend(settings)
    store = CredentialStore(backend, cipher=SecretCipher.from_settings(settings.ENCRYPTION_KEY))
    app.state.two_factor = TwoFactorService(store, create_mail_sender(settings), settings)
    app.state.send_limiter = SlidingWindowRateLimiter(settings.OTP_SEND_LIMIT_PER_MINUTE)
    try:
        yield
    finally:
        await backend.close()


app = FastAPI(
    title="Buds Auth API",
    description="One-time codes, authenticator 2FA and signup CAPTCHA for the Buds app",
    version="1.0.0",
    lifespan=lifespan,
)


@app.get("/", tags=["Info"])
def root():
    return {
        "app_name": "Buds Auth API",
        "description": "Verification core for Buds sign-in and signup.",
        "version": "1.0.0",
        "docs_url": "/docs",
        "api_base": "/api/v1",
    }


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

add_exception_handlers(app)

app.include_router(health_router)
app.include_router(api_router, prefix="/api/v1")
