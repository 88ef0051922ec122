# run_uvicorn.py
# Launcher used for debugging in VS Code (no uvicorn reload subprocess).
import os

# Safe defaults for a local run when no .env is present.
os.environ.setdefault("DATABASE_URL", "sqlite:///./dev_local.db")

from cinebook.main import app  # noqa: E402

if __name__ == "__main__":
    import uvicorn
    # reload=False so uvicorn does not spawn a reloader subprocess
    uvicorn.run(
        app,
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        reload=False,
    )
