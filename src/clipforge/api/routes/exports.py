"""Export endpoints."""

from typing import List

from fastapi import APIRouter, Depends
from structlog import get_logger

from ...domain.entities.clip import ExportProgress
from ...infrastructure.export.clip_pipeline import ClipExportPipeline
from ..dependencies import get_export_pipeline
from ..schemas.exports import ExportProgressResponse, ExportRequest, ExportResponse

logger = get_logger()

router = APIRouter()


@router.post("", response_model=ExportResponse)
async def export_clips(
    request: ExportRequest,
    pipeline: ClipExportPipeline = Depends(get_export_pipeline),
):
    """Export clips into one file, returning the progress notifications emitted."""
    progress: List[ExportProgress] = []
    output_path = await pipeline.export(request.to_job(), on_progress=progress.append)

    logger.info("export_completed", output_path=str(output_path), clips=len(request.clips))
    return ExportResponse(
        output_path=str(output_path),
        progress=[ExportProgressResponse(**item.to_dict()) for item in progress],
    )
