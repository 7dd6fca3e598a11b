from .config import PipelineSettings, load_settings
from .pipeline import OPCHILD_MODULE, ParameterUpdatePipeline, resolve_authority_address

__all__ = [
    "OPCHILD_MODULE",
    "ParameterUpdatePipeline",
    "PipelineSettings",
    "load_settings",
    "resolve_authority_address",
]
