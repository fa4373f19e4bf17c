import logging
import os
from typing import Optional

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.responses import FileResponse, JSONResponse, Response
from fastapi.staticfiles import StaticFiles

load_dotenv()

from dhtracker.constants import BIOMARKERS_PATH, DASHBOARD_HOST, DASHBOARD_PORT, EMPTY_SERIES, INBOX_DIR, LOG_LEVEL
from dhtracker.tools import biomarkers_tool as BT

logger = logging.getLogger(__name__)

WEB_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "web")


def create_app(series_path: Optional[str] = None) -> FastAPI:
    sp = series_path or BIOMARKERS_PATH
    app = FastAPI(title="dh-tracker dashboard")

    @app.get("/api/biomarkers")
    def biomarkers():
        # Serve the file as-is; the importer already wrote valid JSON.
        if not os.path.exists(sp):
            return JSONResponse(EMPTY_SERIES)
        with open(sp, "r", encoding="utf-8") as f:
            raw = f.read()
        return Response(content=raw, media_type="application/json")

    @app.get("/api/biomarkers/{name}/history")
    def biomarker_history(name: str, limit: Optional[int] = None):
        hist = BT.history(name, limit=limit, series_path=sp)
        if not hist:
            raise HTTPException(status_code=404, detail=f"No points for {name}")
        return hist

    @app.get("/api/biomarkers/{name}/summary")
    def biomarker_summary(name: str):
        summ = BT.summary(name, series_path=sp)
        if summ is None:
            raise HTTPException(status_code=404, detail=f"No points for {name}")
        return summ

    @app.get("/")
    def index():
        return FileResponse(os.path.join(WEB_DIR, "index.html"))

    app.mount("/static", StaticFiles(directory=os.path.join(WEB_DIR, "static")), name="static")
    return app


def main():
    logging.basicConfig(level=LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")
    logger.info(f"dh-tracker dashboard: http://{DASHBOARD_HOST}:{DASHBOARD_PORT}/")
    logger.info(f"Put lab files in: {INBOX_DIR}")
    logger.info("Then run:  python -m dhtracker.ingestion.ingest_labs")
    uvicorn.run(create_app(), host=DASHBOARD_HOST, port=DASHBOARD_PORT)


if __name__ == "__main__":
    main()
