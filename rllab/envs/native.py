"""Adapter for environments implemented in a native shared library.

The library exposes one family of C functions per environment id, named
``secret_env_<id>_<operation>``. All ctypes interop lives in this module;
the rest of rllab sees a plain :class:`Environment`.
"""

from __future__ import annotations

import ctypes
import platform
import sys
from pathlib import Path
from typing import List, Optional, Union

from ..errors import NativeLibraryError
from ..logging import get_logger
from .base import Environment

logger = get_logger(__name__)


def default_library_path() -> Path:
    """Platform-specific location of the bundled environment library."""
    if sys.platform.startswith("win"):
        return Path("libs") / "secret_envs.dll"
    if sys.platform == "darwin":
        if platform.machine() == "x86_64":
            return Path("libs") / "libsecret_envs_intel_macos.dylib"
        return Path("libs") / "libsecret_envs.dylib"
    return Path("libs") / "libsecret_envs.so"


# (operation, argument types, return type)
_SIGNATURES = (
    ("new", [], ctypes.c_void_p),
    ("delete", [ctypes.c_void_p], None),
    ("num_states", [], ctypes.c_size_t),
    ("num_actions", [], ctypes.c_size_t),
    ("state_id", [ctypes.c_void_p], ctypes.c_size_t),
    ("reset", [ctypes.c_void_p], None),
    ("is_game_over", [ctypes.c_void_p], ctypes.c_bool),
    ("available_actions", [ctypes.c_void_p], ctypes.POINTER(ctypes.c_size_t)),
    ("available_actions_len", [ctypes.c_void_p], ctypes.c_size_t),
    ("available_actions_delete", [ctypes.POINTER(ctypes.c_size_t), ctypes.c_size_t], None),
    ("score", [ctypes.c_void_p], ctypes.c_float),
    ("step", [ctypes.c_void_p, ctypes.c_size_t], None),
    ("display", [ctypes.c_void_p], None),
)


class NativeEnvironment(Environment):
    """Environment backed by ``secret_env_<env_id>_*`` native functions.

    Args:
        env_id: Identifier of the environment inside the library.
        library_path: Shared library to load. Defaults to
            :func:`default_library_path`.

    Raises:
        NativeLibraryError: If the library or one of the symbols cannot be
            loaded.
    """

    def __init__(self, env_id: int, library_path: Optional[Union[str, Path]] = None):
        if env_id < 0:
            raise ValueError(f"env_id must be >= 0, got {env_id}")

        self.env_id = env_id
        self.name = f"secret_{env_id}"
        path = Path(library_path) if library_path is not None else default_library_path()

        try:
            self._lib = ctypes.CDLL(str(path))
        except OSError as exc:
            raise NativeLibraryError(f"cannot load native library {path}: {exc}") from exc

        self._fns = {}
        for operation, argtypes, restype in _SIGNATURES:
            symbol = f"secret_env_{env_id}_{operation}"
            try:
                fn = getattr(self._lib, symbol)
            except AttributeError as exc:
                raise NativeLibraryError(f"symbol {symbol} not found in {path}") from exc
            fn.argtypes = argtypes
            fn.restype = restype
            self._fns[operation] = fn

        self._ptr = self._fns["new"]()
        if not self._ptr:
            raise NativeLibraryError(f"secret_env_{env_id}_new returned a null handle")
        logger.debug("Loaded native environment %s from %s", self.name, path)

    def close(self) -> None:
        """Release the native environment handle."""
        if getattr(self, "_ptr", None):
            self._fns["delete"](self._ptr)
            self._ptr = None

    def __enter__(self) -> "NativeEnvironment":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __del__(self):
        self.close()

    def reset(self) -> None:
        self._fns["reset"](self._ptr)

    def state_id(self) -> int:
        return int(self._fns["state_id"](self._ptr))

    def num_states(self) -> int:
        return int(self._fns["num_states"]())

    def num_actions(self) -> int:
        return int(self._fns["num_actions"]())

    def is_game_over(self) -> bool:
        return bool(self._fns["is_game_over"](self._ptr))

    def available_actions(self) -> List[int]:
        length = int(self._fns["available_actions_len"](self._ptr))
        actions_ptr = self._fns["available_actions"](self._ptr)
        try:
            actions = [int(actions_ptr[i]) for i in range(length)]
        finally:
            self._fns["available_actions_delete"](actions_ptr, length)
        return sorted(actions)

    def score(self) -> float:
        return float(self._fns["score"](self._ptr))

    def _apply(self, action: int) -> None:
        self._fns["step"](self._ptr, action)

    def render(self) -> str:
        # The library prints directly to stdout
        self._fns["display"](self._ptr)
        return f"{self.name} state={self.state_id()} score={self.score()}"
