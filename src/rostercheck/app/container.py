from __future__ import annotations

import logging
from dataclasses import dataclass

from ..config import Config
from ..domain.profiles import ProfileSet, load_profiles
from ..services.inference_service import InferenceService
from ..services.io_tables import IOService
from ..services.transform_service import TransformService
from ..services.validate_service import CrossFileService, ValidateService


@dataclass(frozen=True)
class Container:
    io: IOService
    inference: InferenceService
    transform: TransformService
    validate: ValidateService
    cross_file: CrossFileService
    profiles: ProfileSet


def build_container(base_logger_name: str, cfg: Config) -> Container:
    base = logging.getLogger(base_logger_name)
    profiles = load_profiles(cfg.profiles_path)
    return Container(
        io=IOService(base.getChild("io")),
        inference=InferenceService(base.getChild("inference"), cfg, profiles),
        transform=TransformService(base.getChild("transform")),
        validate=ValidateService(base.getChild("validate"), cfg),
        cross_file=CrossFileService(base.getChild("cross_file"), cfg, profiles),
        profiles=profiles,
    )
