"""
Cross-platform privilege detection.

Raw ICMP sockets need root (or Administrator on Windows). Without
them, Linux and macOS can still send echo requests over unprivileged
datagram ICMP sockets.
"""

import os
import platform


def get_platform() -> str:
    """Get the current platform name."""
    system = platform.system().lower()
    if system == "darwin":
        return "macos"
    return system  # "windows" or "linux"


def check_elevated_privileges() -> bool:
    """Check if running with elevated privileges."""
    system = get_platform()

    if system == "windows":
        import ctypes
        try:
            return ctypes.windll.shell32.IsUserAnAdmin() != 0
        except OSError:
            return False
    return os.geteuid() == 0


def default_privileged_mode() -> bool:
    """
    Pick the ICMP socket mode for this process.

    Windows only supports raw sockets, so privileged mode is always
    used there.
    """
    if get_platform() == "windows":
        return True
    return check_elevated_privileges()
