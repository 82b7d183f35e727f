"""Portal server implementation with FastAPI."""

import asyncio
import json
import logging
import logging.handlers
import signal
import sys
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from .api import APIRouter
from .models import ErrorResponse
from .uploads import UploadStorage
from config import Config, ConfigManager
from kiosk import KioskManager, ThemeRegistry
from store import KioskStore


FALLBACK_PAGE = """
<!DOCTYPE html>
<html><head><title>{title}</title>
<meta name="viewport" content="width=device-width,initial-scale=1">
</head><body style="font-family:Arial;text-align:center;padding:50px;">
<h1>{title}</h1>
<p>Kiosk server is running but templates were not found</p>
</body></html>
"""


def _error_body(message: str, issues=None) -> dict:
    return ErrorResponse(message=message, issues=issues).model_dump(exclude_none=True)


class PortalServer:
    """Kiosk admin and display web server."""

    def __init__(self, config_path: Optional[str] = None, config: Optional[Config] = None):
        """Initialize portal server."""
        self.config_manager = ConfigManager(config_path)
        self.config = config
        self.store: Optional[KioskStore] = None
        self.themes: Optional[ThemeRegistry] = None
        self.kiosk_manager: Optional[KioskManager] = None
        self.uploads: Optional[UploadStorage] = None
        self.app: Optional[FastAPI] = None
        self.server: Optional[uvicorn.Server] = None
        self.logger = logging.getLogger(__name__)

        # Template and static file paths
        self.web_dir = Path(__file__).parent / "web"
        self.templates_dir = self.web_dir / "templates"
        self.static_dir = self.web_dir / "assets"

    async def initialize(self) -> None:
        """Initialize the portal server."""
        try:
            self.logger.info("Initializing Portal Server")

            # Load configuration
            if self.config is None:
                self.config = await self.config_manager.load_config()
            config = self.config

            # Media directories must exist before static mounts
            self.uploads = UploadStorage(config.storage.upload_dir, config.storage.watermark_dir)
            self.uploads.ensure_directories()

            self.store = KioskStore(config.storage.data_file)
            self.themes = ThemeRegistry(config.themes.registry_path)
            if config.themes.watch:
                self.themes.start_watching()
            self.kiosk_manager = KioskManager(self.store, self.themes)

            # Create FastAPI app
            self.app = self._create_app(config)

            self.logger.info("Portal server initialized successfully")

        except Exception as e:
            self.logger.error(f"Failed to initialize portal server: {e}")
            raise

    def _create_app(self, config: Config) -> FastAPI:
        """Create FastAPI application."""
        app = FastAPI(
            title=config.server.title,
            description="Digital signage kiosk administration and display",
            version="1.0.0"
        )

        if config.server.cors_enabled:
            app.add_middleware(
                CORSMiddleware,
                allow_origins=["*"],
                allow_credentials=True,
                allow_methods=["*"],
                allow_headers=["*"],
            )

        # Set up API router
        api_router = APIRouter(self.kiosk_manager, self.uploads)
        app.include_router(api_router.get_router())

        # Set up templates
        templates = Jinja2Templates(directory=str(self.templates_dir))

        # Static files
        app.mount("/upload", StaticFiles(directory=config.storage.upload_dir), name="upload")
        app.mount("/watermarks", StaticFiles(directory=config.storage.watermark_dir), name="watermarks")
        if self.static_dir.is_dir():
            app.mount("/assets", StaticFiles(directory=str(self.static_dir)), name="assets")

        # Page routes
        @app.get("/", response_class=HTMLResponse)
        async def display_page(request: Request):
            """Serve the slideshow display page."""
            if not (self.templates_dir / "kiosk.html").exists():
                return HTMLResponse(FALLBACK_PAGE.format(title=config.server.title))
            return templates.TemplateResponse(
                request, "kiosk.html", {"title": config.server.title}
            )

        @app.get("/admin", response_class=HTMLResponse)
        async def admin_page(request: Request):
            """Serve the admin page."""
            if not (self.templates_dir / "admin.html").exists():
                return HTMLResponse(FALLBACK_PAGE.format(title=config.server.title))
            document = await self.kiosk_manager.get_document()
            return templates.TemplateResponse(
                request,
                "admin.html",
                {
                    "title": config.server.title,
                    "slides": document.get("slides", []),
                    "settings": document.get("globalSettings", {}),
                    "themes": self.themes.to_dict(),
                    "settings_json": json.dumps(document.get("globalSettings", {}), indent=2),
                }
            )

        # Error handlers
        @app.exception_handler(StarletteHTTPException)
        async def http_error_handler(request: Request, exc: StarletteHTTPException):
            """Render HTTP errors as JSON."""
            if exc.status_code == 404 and exc.detail == "Not Found":
                body = _error_body("Endpoint not found")
            elif isinstance(exc.detail, dict):
                body = _error_body(exc.detail.get("message", "Request failed"), exc.detail.get("issues"))
            else:
                body = _error_body(str(exc.detail))
            return JSONResponse(status_code=exc.status_code, content=body)

        @app.exception_handler(RequestValidationError)
        async def request_validation_handler(request: Request, exc: RequestValidationError):
            """Reject malformed request bodies with 400."""
            issues = []
            for err in exc.errors():
                location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
                issues.append(f"{location}: {err.get('msg')}" if location else err.get("msg"))
            message = issues[0] if len(issues) == 1 else "Invalid request"
            return JSONResponse(status_code=400, content=_error_body(message, issues))

        @app.exception_handler(500)
        async def internal_error_handler(request: Request, exc):
            """Handle 500 errors."""
            self.logger.error(f"Unhandled error: {exc}")
            return JSONResponse(status_code=500, content=_error_body("Internal server error"))

        return app

    async def start(self) -> None:
        """Start the portal server."""
        try:
            config = self.config
            host = config.server.bind_address
            port = config.server.bind_port
            self.logger.info(f"Starting kiosk server on {host}:{port}")

            server_config = uvicorn.Config(
                app=self.app,
                host=host,
                port=port,
                log_level=config.system.log_level.lower(),
                access_log=True,
                server_header=False
            )

            self.server = uvicorn.Server(server_config)

            self.logger.info(f"Admin panel: http://{host}:{port}/admin")
            self.logger.info(f"Kiosk display: http://{host}:{port}/")
            await self.server.serve()

        except Exception as e:
            self.logger.error(f"Failed to start portal server: {e}")
            raise

    async def stop(self) -> None:
        """Stop the portal server."""
        self.logger.info("Stopping portal server")

        if self.server:
            self.server.should_exit = True

        if self.themes:
            self.themes.stop_watching()

    def _signal_handler(self, signum, frame):
        """Handle shutdown signals."""
        self.logger.info(f"Received signal {signum}, shutting down gracefully")
        if self.server:
            self.server.should_exit = True


class PortalService:
    """Portal service wrapper."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize service."""
        self.portal_server = PortalServer(config_path)

    def _setup_logging(self, config: Config) -> logging.Logger:
        """Set up logging."""
        handlers = [logging.StreamHandler(sys.stdout)]
        if config.system.syslog and Path("/dev/log").exists():
            handlers.append(logging.handlers.SysLogHandler(address='/dev/log'))

        logging.basicConfig(
            level=getattr(logging, config.system.log_level),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=handlers
        )
        return logging.getLogger(__name__)

    async def run(self) -> None:
        """Run the portal service."""
        config = await self.portal_server.config_manager.load_config()
        self.portal_server.config = config
        logger = self._setup_logging(config)

        # Set up signal handlers
        signal.signal(signal.SIGTERM, self.portal_server._signal_handler)
        signal.signal(signal.SIGINT, self.portal_server._signal_handler)

        try:
            await self.portal_server.initialize()
            await self.portal_server.start()
        except KeyboardInterrupt:
            pass
        except Exception as e:
            logger.error(f"Portal service error: {e}")
            sys.exit(1)
        finally:
            await self.portal_server.stop()


async def main(config_path: Optional[str] = None):
    """Main entry point."""
    service = PortalService(config_path)
    await service.run()


def run() -> None:
    """Console script entry point."""
    config_path = sys.argv[1] if len(sys.argv) > 1 else None
    asyncio.run(main(config_path))


if __name__ == "__main__":
    run()
