from __future__ import annotations


UNC_PREFIX = "\\\\"

# The NAS exports \\shun920\av, which is mounted locally at /volume1/av.
SHARE_HOST = "shun920"
SHARE_NAME = "av"
LOCAL_ROOT = "/volume1/av"


def is_share_path(path: str | None) -> bool:
    return bool(path) and path.startswith(UNC_PREFIX)


def translate_share_path(share_path: str) -> str:
    """Rewrite a share-style path to the local mount point.

    - \\\\shun920\\av\\Movies\\x.jpg -> /volume1/av/Movies/x.jpg
    - any other host/share, local paths and malformed input are returned as-is
    """
    if not is_share_path(share_path):
        return share_path

    parts = share_path.lstrip("\\").split("\\")
    if len(parts) >= 2 and parts[0] == SHARE_HOST and parts[1] == SHARE_NAME:
        rest = "/".join(parts[2:])
        return f"{LOCAL_ROOT}/{rest}"
    return share_path
