import uvicorn
from dotenv import load_dotenv
from gateway.app_factory import create_app
from gateway.config.settings import Settings
from gateway.core.logging_setup import configure_logging

# Load environment variables from .env file
load_dotenv()
settings = Settings.from_env()
configure_logging(settings.log_level)

app = create_app(settings)

if __name__ == "__main__":
    # lifespan="on": a failed backend init aborts before the socket is bound
    uvicorn.run(app, host=settings.host, port=settings.port, lifespan="on", log_config=None)
