from fsim_core.io.state import load_state, save_state, data_from_json, data_to_json  # noqa: F401
from fsim_core.io.config import load_sync_config  # noqa: F401

__all__ = ["load_state", "save_state", "data_from_json", "data_to_json", "load_sync_config"]
