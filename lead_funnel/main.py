"""FastAPI application entrypoint."""

from dotenv import load_dotenv
from fastapi import FastAPI

from lead_funnel.adapters.inbound.http.error_handlers import register_exception_handlers
from lead_funnel.adapters.inbound.http.routes import router

# Load environment variables from .env file
load_dotenv()

app = FastAPI(
    title="Lead Funnel Agent",
    description="Conversational lead capture with at-most-once owner notification",
    version="0.1.0",
)

register_exception_handlers(app)
app.include_router(router)
