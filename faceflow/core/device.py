# core/device.py
"""
Mobile/non-mobile classification of the runtime
"""
import os
import platform
import re
import sys
from typing import Optional

_ANDROID = re.compile(r"Android", re.IGNORECASE)
_IOS = re.compile(r"iPhone|iPad|iPod", re.IGNORECASE)


def is_mobile(user_agent: Optional[str]) -> bool:
    """True for Android or iOS user agents, False for anything else"""
    if not user_agent:
        return False
    return bool(_ANDROID.search(user_agent) or _IOS.search(user_agent))


def runtime_user_agent() -> str:
    """Describe the running interpreter the way a browser user agent would"""
    if sys.platform == "android" or "ANDROID_ROOT" in os.environ:
        return f"Python/{platform.python_version()} (Linux; Android)"
    if sys.platform == "ios":
        return f"Python/{platform.python_version()} (iPhone; iOS)"
    return f"Python/{platform.python_version()} ({platform.platform()})"


def point_cloud_allowed(mobile: bool) -> bool:
    # Point cloud and fixed video size are desktop-only
    return not mobile
