import uvicorn

from wcag_audit.main import app

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=3000)
