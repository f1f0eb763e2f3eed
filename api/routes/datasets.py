"""
Dataset profiling endpoint
"""
from fastapi import APIRouter, File, HTTPException, UploadFile
import shutil
import tempfile
import logging

from src.stage1_bundler import BundleError, BundleLoader

from ..config import settings
from ..models.project import DatasetProfileResponse
from ..services.input_handlers import save_upload

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/datasets/profile", response_model=DatasetProfileResponse)
async def profile_dataset(file: UploadFile = File(...)):
    """
    Upload a dataset (.csv, .json, .xlsx, .xlsm) and get its processed profile:
    schema, validation report, statistics and the first records.
    """
    upload_dir = tempfile.mkdtemp(prefix="report-pipeline-profile-")
    try:
        try:
            data_path = save_upload(upload_dir, file.file, file.filename or "")
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        try:
            bundle = BundleLoader(schema_cache_dir=settings.schema_cache_dir).load_with_processing(str(data_path))
        except BundleError as e:
            raise HTTPException(status_code=422, detail=str(e))

        metadata = bundle.metadata
        return DatasetProfileResponse(
            filename=data_path.name,
            record_count=bundle.record_count,
            schema_id=metadata.get("schema_id"),
            schema_description=metadata.get("schema_description", {}),
            validation=metadata.get("validation", {}),
            stats=bundle.stats,
            samples=bundle.samples.get("main", [])
        )
    finally:
        shutil.rmtree(upload_dir, ignore_errors=True)
