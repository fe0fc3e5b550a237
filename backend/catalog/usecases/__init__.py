"""Use case layer for the Catalog context."""

from .modules import (
    CreateModuleUseCase,
    DeleteModuleUseCase,
    GetModuleUseCase,
    ListModulesUseCase,
    UpdateModuleUseCase,
    UploadThumbnailInput,
    UploadThumbnailUseCase,
    parse_week_number,
)

__all__ = [
    "CreateModuleUseCase",
    "DeleteModuleUseCase",
    "GetModuleUseCase",
    "ListModulesUseCase",
    "UpdateModuleUseCase",
    "UploadThumbnailInput",
    "UploadThumbnailUseCase",
    "parse_week_number",
]
