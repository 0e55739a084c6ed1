"""AetherLore — launcher. Starts the lorebook backend with uvicorn."""

import argparse
import logging
import os
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")

HOST = os.getenv("HOST", "127.0.0.1")
PORT = os.getenv("PORT", "13015")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def main():
    parser = argparse.ArgumentParser(description="AetherLore lorebook editor backend")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="Data storage directory (default: ./data)")
    parser.add_argument("--host", default=HOST)
    parser.add_argument("--port", type=int, default=int(PORT))
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    parser.add_argument("--reset", action="store_true",
                        help="Discard the stored lorebook and settings before starting")
    args = parser.parse_args()

    logging.basicConfig(
        level=LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # The app factory reads DATA_DIR, also under --reload
    if args.data_dir:
        os.environ["DATA_DIR"] = str(args.data_dir.resolve())

    if args.reset:
        from aetherlore import storage
        storage.init_storage(Path(os.getenv("DATA_DIR", ROOT / "data")))
        for path in (storage.lorebook_path(), storage.settings_path()):
            path.unlink(missing_ok=True)
        print("Stored lorebook and settings removed; defaults will be used.")

    print(f"Starting backend on http://{args.host}:{args.port} ...")
    uvicorn.run(
        "aetherlore.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
