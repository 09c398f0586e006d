import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse, Response

from stockroom.core.db import Database, get_db
from stockroom.services import export_service

log = logging.getLogger("uvicorn")

router = APIRouter()


@router.get("/preview")
async def preview_export(db: Database = Depends(get_db)):
    """The export as it would be written, returned inline as CSV text."""
    rows = await export_service.export_snapshot(db)
    return Response(content=export_service.to_csv(rows), media_type="text/csv")


@router.post("")
async def create_export(request: Request, db: Database = Depends(get_db)):
    """
    Writes the export file to the configured directory and returns it as a
    download. The X-Export-Path header tells clients without a download
    handler where the file was kept.
    """
    path = await export_service.write_export(db, request.app.state.export_dir)
    log.info(f"Export written to {path}")
    return FileResponse(
        path,
        media_type="text/csv",
        filename=path.name,
        headers={"X-Export-Path": str(path.resolve())},
    )
