import os
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI

from aetherlore import storage
from aetherlore.routes import router
from aetherlore.studio import Studio

load_dotenv(Path(__file__).parent.parent / ".env")

DEFAULT_DATA_DIR = Path(__file__).parent.parent / "data"


def create_app(data_dir: Path | None = None, studio: Studio | None = None) -> FastAPI:
    resolved = data_dir or Path(os.getenv("DATA_DIR", str(DEFAULT_DATA_DIR)))
    storage.init_storage(resolved)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        # Save any draft still waiting for its debounce timer.
        await app.state.studio.close()

    app = FastAPI(title="AetherLore", lifespan=lifespan)
    app.state.studio = studio or Studio.from_storage()
    app.include_router(router, prefix="/api")

    return app
