"""FastAPI routes for segment maps and assembly attempts."""

from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from shortsync.core.config import Settings
from shortsync.core.exceptions import (
    AlignmentBlockedError,
    ClipContiguityError,
    ScriptValidationError,
    ShortSyncError,
)
from shortsync.core.logging_config import get_logger
from shortsync.pipelines.run_assembly import AssemblyPipeline
from shortsync.storage.repository import SegmentArtifactRepository
from shortsync.utils.io_utils import clip_filename, segment_audio_filename

router = APIRouter(prefix="/projects", tags=["segments"])


def get_settings(request: Request) -> Settings:
    """Settings the application was built with (see shortsync.main.create_app)."""
    return request.app.state.settings


def _dump(model: Any) -> dict:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


def _project_paths(project_id: str, settings: Settings) -> tuple[SegmentArtifactRepository, Path, Path]:
    if "/" in project_id or "\\" in project_id or project_id.startswith("."):
        raise HTTPException(status_code=400, detail="Invalid project id")
    repository = SegmentArtifactRepository(settings, get_logger(__name__, project_id=project_id))
    return repository, repository.workspace_for(project_id), repository.output_dir_for(project_id)


@router.get("/{project_id}/segments")
async def get_segments(project_id: str, settings: Settings = Depends(get_settings)) -> dict:
    """Return the persisted segment map."""
    repository, _, output_dir = _project_paths(project_id, settings)
    segment_map = repository.load_segment_map(output_dir)
    if segment_map is None:
        raise HTTPException(status_code=404, detail="Segment map not found")
    return _dump(segment_map)


@router.get("/{project_id}/segments/detailed")
async def get_segments_detailed(project_id: str, settings: Settings = Depends(get_settings)) -> dict:
    """Return segment rows with their clip and audio files, plus the alignment report."""
    repository, workspace, output_dir = _project_paths(project_id, settings)
    segment_map = repository.load_segment_map(output_dir)
    if segment_map is None:
        raise HTTPException(status_code=404, detail="Segment map not found")
    report = repository.load_alignment_report(output_dir)

    rows = []
    for segment in segment_map.segments:
        row = _dump(segment)
        clip_path = workspace / clip_filename(segment.clip_index)
        audio_path = output_dir / "audio" / segment_audio_filename(segment.clip_index)
        row["clipFile"] = clip_path.name if clip_path.exists() else None
        row["audioSegmentFile"] = audio_path.name if audio_path.exists() else None
        rows.append(row)

    return {
        "mode": segment_map.mode.value,
        "clipCount": segment_map.clip_count,
        "audioDurationSec": segment_map.audio_duration_sec,
        "segments": rows,
        "alignment": _dump(report) if report else None,
    }


@router.get("/{project_id}/alignment")
async def get_alignment(project_id: str, settings: Settings = Depends(get_settings)) -> dict:
    """Return the persisted alignment report."""
    repository, _, output_dir = _project_paths(project_id, settings)
    report = repository.load_alignment_report(output_dir)
    if report is None:
        raise HTTPException(status_code=404, detail="Alignment report not found")
    return _dump(report)


@router.post("/{project_id}/assemble")
def assemble(project_id: str, settings: Settings = Depends(get_settings)) -> Any:
    """
    Run one assembly attempt.

    Returns 409 with the blocked payload when alignment fails, and 422 when
    the workspace breaks the input contract.
    """
    _, workspace, output_dir = _project_paths(project_id, settings)
    if not workspace.is_dir():
        raise HTTPException(status_code=404, detail="Project workspace not found")

    logger = get_logger(__name__, project_id=project_id)
    pipeline = AssemblyPipeline(settings, logger)
    try:
        result = pipeline.run(workspace, output_dir=output_dir, project_id=project_id)
    except AlignmentBlockedError as e:
        return JSONResponse(status_code=409, content={"status": "blocked", **_dump(e.payload)})
    except (ScriptValidationError, ClipContiguityError) as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ShortSyncError as e:
        logger.error(f"Assembly failed: {e}")
        raise HTTPException(status_code=500, detail=f"Assembly failed: {e}")

    return {
        "status": "approved",
        "projectId": result.project_id,
        "clipCount": result.segment_map.clip_count,
        "audioDurationSec": result.segment_map.audio_duration_sec,
        "captionCount": result.caption_count,
        "manifestPath": str(result.manifest_path) if result.manifest_path else None,
    }
