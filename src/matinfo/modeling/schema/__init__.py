from .finalize_config import FinalizeConfig

__all__ = ["FinalizeConfig"]
