"""Upload models."""
from .upload_models import UploadState, UploadConfig, UploadProgress, UploadResult

__all__ = [
    'UploadState',
    'UploadConfig',
    'UploadProgress',
    'UploadResult',
]
