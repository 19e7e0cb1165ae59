from typing import Optional
from ..models import ImportConfig, ModeOption, StructuredMode

def construct_mode(config: ImportConfig) -> Optional[ModeOption]:
    """Collapses mode, static_mode, audio and video into the upload `mode` field.

    `all` always produces a structured mode with audio and audio_video set,
    with an explicit `video` taking priority. Any other plain mode with no
    structured flag is sent as a bare string.
    """
    is_all = config.mode == "all"

    if not is_all and not (config.static_mode or config.audio or config.video):
        return config.mode or None

    mode = StructuredMode(
        static=config.static_mode or ("" if is_all else config.mode),
        audio=config.audio or is_all,
        video=config.video or ("audio_video" if is_all else ""),
    )
    if mode.is_empty():
        return None
    return mode
