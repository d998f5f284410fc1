"""
Path validation for files served from the output directory.
"""
from pathlib import Path

from ...path_utils import resolve_in_root
from ...shared import ErrorCode, Result

WORKFLOW_IMAGE_EXTENSIONS = (".png",)


def _resolve_output_file(output_dir: Path, filename: str | None) -> Result[Path]:
    """Confine `filename` to `output_dir`; only PNGs carry workflow chunks."""
    if not filename or not str(filename).strip():
        return Result.Err(ErrorCode.INVALID_INPUT, "Filename is required")
    if not str(filename).lower().endswith(WORKFLOW_IMAGE_EXTENSIONS):
        return Result.Err(ErrorCode.UNSUPPORTED, "Only PNG files carry ComfyUI workflows")
    path = resolve_in_root(Path(output_dir), filename)
    if path is None:
        return Result.Err(ErrorCode.NOT_FOUND, f"File not found: {Path(str(filename)).name}")
    return Result.Ok(path)
